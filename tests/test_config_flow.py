"""Tests for LilLearner config and options flows."""

from unittest.mock import patch

from homeassistant import config_entries
from homeassistant.core import HomeAssistant
from homeassistant.data_entry_flow import FlowResultType
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.lillearner.const import (
    CONF_GAMIFICATION_ENABLED,
    CONF_LLM_API_KEY,
    CONF_LLM_BASE_URL,
    CONF_LLM_MODEL,
    CONF_UPDATE_INTERVAL,
    CONF_VOICE_INPUT_ENABLED,
    DEFAULT_LLM_BASE_URL,
    DEFAULT_LLM_MODEL,
    DOMAIN,
)

SETTINGS_INPUT = {
    CONF_GAMIFICATION_ENABLED: True,
    CONF_VOICE_INPUT_ENABLED: False,
    CONF_LLM_BASE_URL: DEFAULT_LLM_BASE_URL,
    CONF_LLM_MODEL: DEFAULT_LLM_MODEL,
    CONF_UPDATE_INTERVAL: 15,
}


async def test_form_user_flow_success(hass: HomeAssistant) -> None:
    """The user step creates the entry with settings stored as options."""
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    assert result.get("type") == FlowResultType.FORM
    assert result.get("step_id") == "user"

    with patch(
        "custom_components.lillearner.async_setup_entry",
        return_value=True,
    ) as mock_setup_entry:
        result = await hass.config_entries.flow.async_configure(
            result.get("flow_id"), user_input=SETTINGS_INPUT
        )
        await hass.async_block_till_done()

    assert result.get("type") == FlowResultType.CREATE_ENTRY
    assert result.get("title") == "LilLearner"
    assert result.get("data") == {}
    entry = result.get("result")
    assert entry.options[CONF_GAMIFICATION_ENABLED] is True
    assert entry.options[CONF_VOICE_INPUT_ENABLED] is False
    assert entry.options[CONF_LLM_API_KEY] == ""
    assert entry.options[CONF_UPDATE_INTERVAL] == 15
    assert len(mock_setup_entry.mock_calls) == 1


async def test_form_voice_requires_api_key(hass: HomeAssistant) -> None:
    """Enabling voice input without an API key shows an error."""
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )

    result = await hass.config_entries.flow.async_configure(
        result.get("flow_id"),
        user_input={**SETTINGS_INPUT, CONF_VOICE_INPUT_ENABLED: True},
    )

    assert result.get("type") == FlowResultType.FORM
    assert result.get("errors") == {CONF_LLM_API_KEY: "api_key_required"}


async def test_single_instance(hass: HomeAssistant) -> None:
    """Only one LilLearner entry can exist."""
    MockConfigEntry(domain=DOMAIN, data={}, options={}).add_to_hass(hass)

    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )

    assert result.get("type") == FlowResultType.ABORT
    assert result.get("reason") == "single_instance_allowed"


async def test_options_flow_updates_settings(hass: HomeAssistant) -> None:
    """The options flow saves new settings."""
    entry = MockConfigEntry(
        domain=DOMAIN,
        title="LilLearner",
        data={},
        options={**SETTINGS_INPUT, CONF_LLM_API_KEY: ""},
    )
    entry.add_to_hass(hass)

    result = await hass.config_entries.options.async_init(entry.entry_id)
    assert result.get("type") == FlowResultType.FORM
    assert result.get("step_id") == "init"

    result = await hass.config_entries.options.async_configure(
        result.get("flow_id"),
        user_input={
            **SETTINGS_INPUT,
            CONF_VOICE_INPUT_ENABLED: True,
            CONF_LLM_API_KEY: "  new-key  ",
            CONF_UPDATE_INTERVAL: 30,
        },
    )

    assert result.get("type") == FlowResultType.CREATE_ENTRY
    assert entry.options[CONF_VOICE_INPUT_ENABLED] is True
    assert entry.options[CONF_LLM_API_KEY] == "new-key"
    assert entry.options[CONF_UPDATE_INTERVAL] == 30
