"""Base manager class for LilLearner managers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.dispatcher import (
    async_dispatcher_connect,
    async_dispatcher_send,
)

from .. import const
from ..exceptions import ChildNotFoundError
from ..helpers.entity_helpers import get_event_signal

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.core import HomeAssistant

    from ..coordinator import LilLearnerDataCoordinator
    from ..type_defs import ChildData


class BaseManager(ABC):
    """Common plumbing for the managers that own LilLearner state.

    Managers talk to each other and to sensors through dispatcher signals
    scoped to the config entry, so two entries never hear each other.
    Listeners are dropped automatically when the entry unloads.

    Writes that sensors should reflect go through
    coordinator._persist_and_update(); bookkeeping that no entity shows
    only needs coordinator._persist().
    """

    def __init__(
        self, hass: HomeAssistant, coordinator: LilLearnerDataCoordinator
    ) -> None:
        """Initialize manager."""
        self.hass = hass
        self.coordinator = coordinator
        self.entry_id = coordinator.config_entry.entry_id

    def emit(self, suffix: str, **payload: Any) -> None:
        """Emit instance-scoped event to other managers and entities.

        Example:
            self.emit(const.SIGNAL_SUFFIX_LEVEL_UP, child_id=child_id, new_level=4)
        """
        signal = get_event_signal(self.entry_id, suffix)
        const.LOGGER.debug(
            "DEBUG: Signal %s sent for entry %s (%s)",
            suffix,
            self.entry_id,
            list(payload.keys()),
        )
        # Dispatcher only supports *args, so the payload travels as one dict
        async_dispatcher_send(self.hass, signal, payload)

    def listen(self, suffix: str, callback: Callable[..., Any]) -> None:
        """Subscribe to instance-scoped event with automatic cleanup."""
        signal = get_event_signal(self.entry_id, suffix)
        unsub = async_dispatcher_connect(self.hass, signal, callback)
        self.coordinator.config_entry.async_on_unload(unsub)
        const.LOGGER.debug(
            "DEBUG: %s subscribed to %s for entry %s",
            self.__class__.__name__,
            suffix,
            self.entry_id,
        )

    def _get_child(self, child_id: str) -> ChildData:
        """Return a child's data or raise ChildNotFoundError."""
        child = self.coordinator.children_data.get(child_id)
        if child is None:
            raise ChildNotFoundError(child_id)
        return child

    @abstractmethod
    async def async_setup(self) -> None:
        """Subscribe to signals and prepare manager state.

        Runs once, after the store has loaded.
        """
