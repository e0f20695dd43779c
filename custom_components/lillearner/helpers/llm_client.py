# File: helpers/llm_client.py
"""OpenAI-compatible chat-completions client for voice note parsing.

Uses Home Assistant's shared aiohttp client session. DeepSeek is the
default endpoint; any server speaking the same chat-completions format
can be configured through the options flow.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import time
from typing import TYPE_CHECKING, Any

import aiohttp
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .. import const
from ..exceptions import LlmRequestError

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


@dataclass(frozen=True)
class ChatCompletionResult:
    """Assistant message content plus token usage."""

    content: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class LlmClient:
    """Minimal JSON-mode chat-completions client."""

    def __init__(
        self,
        hass: HomeAssistant,
        api_key: str,
        base_url: str = const.DEFAULT_LLM_BASE_URL,
        model: str = const.DEFAULT_LLM_MODEL,
        timeout: float = const.LLM_REQUEST_TIMEOUT,
    ) -> None:
        """Initialize the client."""
        self.hass = hass
        self._api_key = api_key
        self._url = base_url.rstrip("/") + const.LLM_CHAT_COMPLETIONS_PATH
        self._model = model
        self._timeout = timeout

    def build_payload(self, system_prompt: str, user_message: str) -> dict[str, Any]:
        """Build the request body for a JSON-object completion."""
        return {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            "response_format": {"type": "json_object"},
            "temperature": const.DEFAULT_LLM_TEMPERATURE,
        }

    async def async_complete(
        self, system_prompt: str, user_message: str
    ) -> ChatCompletionResult:
        """Send one chat completion request and return the first choice.

        Raises:
            LlmRequestError: Transport failure, timeout, non-200 status,
                or a malformed response envelope
        """
        session = async_get_clientsession(self.hass)
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }
        payload = self.build_payload(system_prompt, user_message)

        const.LOGGER.debug(
            "DEBUG: LLM request started (system prompt %s chars, message %s chars)",
            len(system_prompt),
            len(user_message),
        )
        started = time.monotonic()
        try:
            async with asyncio.timeout(self._timeout):
                async with session.post(
                    self._url, json=payload, headers=headers
                ) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        const.LOGGER.error(
                            "ERROR: LLM API returned HTTP %s: %s",
                            response.status,
                            error_text[:500],
                        )
                        raise LlmRequestError(
                            const.ERROR_LLM_REQUEST_FMT.format(
                                f"HTTP {response.status}"
                            )
                        )
                    data = await response.json(content_type=None)
        except TimeoutError as err:
            raise LlmRequestError(
                const.ERROR_LLM_REQUEST_FMT.format("request timed out")
            ) from err
        except aiohttp.ClientError as err:
            raise LlmRequestError(const.ERROR_LLM_REQUEST_FMT.format(err)) from err
        except ValueError as err:
            raise LlmRequestError(
                const.ERROR_LLM_REQUEST_FMT.format("response was not valid JSON")
            ) from err

        const.LOGGER.debug(
            "DEBUG: LLM response received in %.0fms", (time.monotonic() - started) * 1000
        )

        choices = data.get("choices") if isinstance(data, dict) else None
        if not isinstance(choices, list) or not choices:
            raise LlmRequestError(
                const.ERROR_LLM_REQUEST_FMT.format("response contained no choices")
            )
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        if not isinstance(message, dict):
            raise LlmRequestError(
                const.ERROR_LLM_REQUEST_FMT.format("response choice had no message")
            )
        content = message.get("content")

        usage = data.get("usage")
        if not isinstance(usage, dict):
            usage = {}
        return ChatCompletionResult(
            content=content if isinstance(content, str) else "",
            prompt_tokens=usage.get("prompt_tokens", 0),
            completion_tokens=usage.get("completion_tokens", 0),
            total_tokens=usage.get("total_tokens", 0),
        )
