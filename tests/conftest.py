"""Shared fixtures for LilLearner tests."""

from typing import Any
from unittest.mock import patch

import pytest
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.lillearner.const import (
    CONF_GAMIFICATION_ENABLED,
    CONF_LLM_API_KEY,
    CONF_LLM_BASE_URL,
    CONF_LLM_MODEL,
    CONF_UPDATE_INTERVAL,
    CONF_VOICE_INPUT_ENABLED,
    COORDINATOR,
    DEFAULT_LLM_BASE_URL,
    DEFAULT_LLM_MODEL,
    DEFAULT_UPDATE_INTERVAL,
    DOMAIN,
)
from custom_components.lillearner.store import LilLearnerStore

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a mock config entry with gamification and voice input enabled."""
    return MockConfigEntry(
        domain=DOMAIN,
        title="LilLearner",
        data={},
        options={
            CONF_GAMIFICATION_ENABLED: True,
            CONF_VOICE_INPUT_ENABLED: True,
            CONF_LLM_API_KEY: "test-key",
            CONF_LLM_BASE_URL: DEFAULT_LLM_BASE_URL,
            CONF_LLM_MODEL: DEFAULT_LLM_MODEL,
            CONF_UPDATE_INTERVAL: DEFAULT_UPDATE_INTERVAL,
        },
        entry_id="test_entry_id",
        unique_id="test_unique_id",
    )


@pytest.fixture
def mock_storage_data() -> dict[str, Any]:
    """Return an empty storage structure."""
    return LilLearnerStore.get_default_structure()


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
    mock_storage_data: dict[str, Any],  # pylint: disable=redefined-outer-name
) -> MockConfigEntry:
    """Set up the LilLearner integration for testing with mocked storage."""
    mock_config_entry.add_to_hass(hass)

    # Mock the Store's async_load to return our test data
    with patch(
        "homeassistant.helpers.storage.Store.async_load",
        return_value=mock_storage_data,
    ):
        assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    return mock_config_entry


@pytest.fixture
def coordinator(hass: HomeAssistant, init_integration: MockConfigEntry) -> Any:
    """Return the coordinator of the set-up entry."""
    return hass.data[DOMAIN][init_integration.entry_id][COORDINATOR]
