"""Voice Manager - Turning free-text voice notes into log entries.

The text is sent to an OpenAI-compatible chat-completions endpoint with a
system prompt listing the known children and categories. Names in the model
response are resolved back to stored ids on a best-effort basis.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import catalogs, const
from ..exceptions import LilLearnerError
from ..helpers import voice_note_parser
from ..helpers.llm_client import LlmClient
from .base_manager import BaseManager

if TYPE_CHECKING:
    from ..type_defs import VoiceParseResult


class VoiceManager(BaseManager):
    """Manager for LLM-backed voice note parsing."""

    async def async_setup(self) -> None:
        """Nothing to subscribe to; the client is built per request."""

    def _build_client(self) -> LlmClient:
        options = self.coordinator.config_entry.options
        if not options.get(
            const.CONF_VOICE_INPUT_ENABLED, const.DEFAULT_VOICE_INPUT_ENABLED
        ):
            raise LilLearnerError(const.ERROR_VOICE_INPUT_DISABLED)
        api_key = options.get(const.CONF_LLM_API_KEY)
        if not api_key:
            raise LilLearnerError(const.ERROR_LLM_NOT_CONFIGURED)
        return LlmClient(
            self.hass,
            api_key,
            base_url=options.get(const.CONF_LLM_BASE_URL) or const.DEFAULT_LLM_BASE_URL,
            model=options.get(const.CONF_LLM_MODEL) or const.DEFAULT_LLM_MODEL,
        )

    async def async_parse_voice_note(self, text: str) -> VoiceParseResult:
        """Parse a voice note into resolved, unsaved entries.

        Raises:
            LilLearnerError: No children, voice input disabled, no API key,
                or the request failed
        """
        children = self.coordinator.children_data
        if not children:
            raise LilLearnerError(const.ERROR_NO_CHILDREN)

        text = text.strip()
        if not text:
            return {"entries": [], "raw_text": text}

        client = self._build_client()
        user_categories = self.coordinator.entry_manager.active_user_categories()
        system_prompt = voice_note_parser.build_system_prompt(
            [child[const.DATA_CHILD_NAME] for child in children.values()],
            user_categories,
            catalogs.CATEGORIES,
        )
        completion = await client.async_complete(system_prompt, text)
        const.LOGGER.debug(
            "DEBUG: Voice note parsed using %s tokens", completion.total_tokens
        )

        raw_entries = voice_note_parser.parse_completion(completion.content)
        if raw_entries is None:
            const.LOGGER.warning(
                "WARNING: LLM returned malformed JSON for voice note: %s",
                completion.content[:200],
            )
            return {"entries": [], "raw_text": text}

        return {
            "entries": voice_note_parser.reconcile_entries(
                raw_entries,
                children,
                self.coordinator.user_categories_data,
                catalogs.CATEGORIES,
                fallback_child_id=next(iter(children)),
            ),
            "raw_text": text,
        }

    async def async_log_voice_note(self, text: str) -> dict[str, Any]:
        """Parse a voice note and log every resolved entry."""
        parsed = await self.async_parse_voice_note(text)
        logged = await self.coordinator.entry_manager.async_log_entries(
            {
                const.DATA_CHILD_ID: item["child_id"],
                const.DATA_ENTRY_CATEGORY_ID: item["category_id"],
                const.DATA_ENTRY_SKILL_ID: item["skill_id"],
                const.DATA_ENTRY_TYPE: item["entry_type"],
                const.DATA_ENTRY_NOTES: item["notes"],
                const.DATA_ENTRY_LESSON_NUMBER: item["lesson_number"],
                const.DATA_ENTRY_USER_CATEGORY_ID: item["user_category_id"],
            }
            for item in parsed["entries"]
        )
        return {**logged, "entries": parsed["entries"]}
