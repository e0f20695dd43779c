# File: options_flow.py
"""Options flow for the LilLearner integration.

Edits feature flags, LLM settings and the update interval. Saving the
options reloads the entry through its update listener.
"""

from __future__ import annotations

from typing import Any

from homeassistant import config_entries

from . import const
from . import flow_helpers as fh


class LilLearnerOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for LilLearner settings."""

    def __init__(self, _config_entry: config_entries.ConfigEntry) -> None:
        """Initialize the options flow."""
        self._entry_options: dict[str, Any] = {}

    async def async_step_init(self, user_input: dict[str, Any] | None = None):
        """Show and save the settings form."""
        current = dict(self.config_entry.options)
        errors: dict[str, str] = {}

        if user_input is not None:
            errors = fh.validate_settings_inputs(user_input)
            if not errors:
                self._entry_options = fh.build_settings_data(user_input)
                const.LOGGER.debug(
                    "DEBUG: Options updated: gamification=%s, voice=%s, "
                    "model=%s, update interval=%s",
                    self._entry_options[const.CONF_GAMIFICATION_ENABLED],
                    self._entry_options[const.CONF_VOICE_INPUT_ENABLED],
                    self._entry_options[const.CONF_LLM_MODEL],
                    self._entry_options[const.CONF_UPDATE_INTERVAL],
                )
                return self.async_create_entry(title="", data=self._entry_options)

        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_INIT,
            data_schema=fh.build_settings_schema(user_input or current),
            errors=errors,
        )
