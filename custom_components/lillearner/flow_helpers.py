# File: flow_helpers.py
"""Schema builders shared by the config flow and the options flow."""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant.helpers import selector

from . import const


def build_settings_schema(default: dict[str, Any] | None = None) -> vol.Schema:
    """Build the schema for feature flags, LLM settings and update interval."""
    default = default or {}
    return vol.Schema(
        {
            vol.Required(
                const.CONF_GAMIFICATION_ENABLED,
                default=default.get(
                    const.CONF_GAMIFICATION_ENABLED,
                    const.DEFAULT_GAMIFICATION_ENABLED,
                ),
            ): selector.BooleanSelector(),
            vol.Required(
                const.CONF_VOICE_INPUT_ENABLED,
                default=default.get(
                    const.CONF_VOICE_INPUT_ENABLED, const.DEFAULT_VOICE_INPUT_ENABLED
                ),
            ): selector.BooleanSelector(),
            vol.Optional(
                const.CONF_LLM_API_KEY,
                description={"suggested_value": default.get(const.CONF_LLM_API_KEY)},
            ): selector.TextSelector(
                selector.TextSelectorConfig(type=selector.TextSelectorType.PASSWORD)
            ),
            vol.Required(
                const.CONF_LLM_BASE_URL,
                default=default.get(const.CONF_LLM_BASE_URL, const.DEFAULT_LLM_BASE_URL),
            ): selector.TextSelector(
                selector.TextSelectorConfig(type=selector.TextSelectorType.URL)
            ),
            vol.Required(
                const.CONF_LLM_MODEL,
                default=default.get(const.CONF_LLM_MODEL, const.DEFAULT_LLM_MODEL),
            ): selector.TextSelector(),
            vol.Required(
                const.CONF_UPDATE_INTERVAL,
                default=default.get(
                    const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
                ),
            ): selector.NumberSelector(
                selector.NumberSelectorConfig(
                    mode=selector.NumberSelectorMode.BOX,
                    min=1,
                    step=1,
                )
            ),
        }
    )


def build_settings_data(user_input: dict[str, Any]) -> dict[str, Any]:
    """Build the options dict from form input, filling defaults."""
    return {
        const.CONF_GAMIFICATION_ENABLED: bool(
            user_input.get(
                const.CONF_GAMIFICATION_ENABLED, const.DEFAULT_GAMIFICATION_ENABLED
            )
        ),
        const.CONF_VOICE_INPUT_ENABLED: bool(
            user_input.get(
                const.CONF_VOICE_INPUT_ENABLED, const.DEFAULT_VOICE_INPUT_ENABLED
            )
        ),
        const.CONF_LLM_API_KEY: (user_input.get(const.CONF_LLM_API_KEY) or "").strip(),
        const.CONF_LLM_BASE_URL: (
            user_input.get(const.CONF_LLM_BASE_URL) or const.DEFAULT_LLM_BASE_URL
        ).strip(),
        const.CONF_LLM_MODEL: (
            user_input.get(const.CONF_LLM_MODEL) or const.DEFAULT_LLM_MODEL
        ).strip(),
        const.CONF_UPDATE_INTERVAL: int(
            user_input.get(const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL)
        ),
    }


def validate_settings_inputs(user_input: dict[str, Any]) -> dict[str, str]:
    """Validate settings form input.

    Returns:
        Errors keyed by field, empty when valid.
    """
    errors: dict[str, str] = {}
    if user_input.get(const.CONF_VOICE_INPUT_ENABLED) and not (
        user_input.get(const.CONF_LLM_API_KEY) or ""
    ).strip():
        errors[const.CONF_LLM_API_KEY] = const.TRANS_KEY_ERROR_API_KEY_REQUIRED
    return errors
