"""Exceptions raised by LilLearner managers.

All derive from HomeAssistantError so a failing service call surfaces the
message to the caller without extra translation at the service layer.
"""

from __future__ import annotations

from homeassistant.exceptions import HomeAssistantError

from . import const


class LilLearnerError(HomeAssistantError):
    """Base error for LilLearner operations."""


class ChildNotFoundError(LilLearnerError):
    """Raised when a child id or name does not resolve."""

    def __init__(self, child: str) -> None:
        """Initialize with the unresolved id or name."""
        self.child = child
        super().__init__(const.ERROR_CHILD_NOT_FOUND_FMT.format(child))


class ReportNotFoundError(LilLearnerError):
    """Raised when a report id does not resolve."""

    def __init__(self, report_id: str) -> None:
        """Initialize with the unresolved report id."""
        self.report_id = report_id
        super().__init__(const.ERROR_REPORT_NOT_FOUND_FMT.format(report_id))


class LlmRequestError(LilLearnerError):
    """Raised when the LLM endpoint is unreachable or returns an error status."""
