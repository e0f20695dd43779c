# File: config_flow.py
"""Config flow for the LilLearner integration.

A single instance is allowed. Children, categories and books are managed
through services, so the flow only collects settings.
"""

from __future__ import annotations

from typing import Any

from homeassistant import config_entries
from homeassistant.core import callback

from . import const
from . import flow_helpers as fh
from .options_flow import LilLearnerOptionsFlowHandler


class LilLearnerConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for LilLearner."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        """Collect settings and create the entry."""
        if any(self._async_current_entries()):
            return self.async_abort(reason=const.TRANS_KEY_ERROR_SINGLE_INSTANCE)

        errors: dict[str, str] = {}
        if user_input is not None:
            errors = fh.validate_settings_inputs(user_input)
            if not errors:
                const.LOGGER.debug("DEBUG: Creating LilLearner entry")
                return self.async_create_entry(
                    title=const.LILLEARNER_TITLE,
                    data={},
                    options=fh.build_settings_data(user_input),
                )

        return self.async_show_form(
            step_id=const.CONFIG_FLOW_STEP_USER,
            data_schema=fh.build_settings_schema(user_input),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Return the Options Flow."""
        return LilLearnerOptionsFlowHandler(config_entry)
