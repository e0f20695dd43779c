"""Child Manager - Child profiles and active books.

Responsibilities:
- Create and delete children (deletion cascades to every child-owned row)
- Resolve child names to internal ids
- Track books a child is reading and mark them finished
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
import uuid

from .. import const
from ..exceptions import ChildNotFoundError, LilLearnerError
from ..helpers.entity_helpers import get_child_id_by_name, remove_entities_by_item_id
from ..utils import dt_utils
from .base_manager import BaseManager

if TYPE_CHECKING:
    from ..type_defs import ActiveBookData, ChildData


class ChildManager(BaseManager):
    """Manager for child profiles and their books."""

    async def async_setup(self) -> None:
        """Nothing to subscribe to; children are changed through services."""

    # =========================================================================
    # Children
    # =========================================================================

    def resolve_child_id(self, child_name: str) -> str:
        """Return the id of the child with this name.

        Raises:
            ChildNotFoundError: No child has that name
        """
        child_id = get_child_id_by_name(self.coordinator, child_name)
        if child_id is None:
            raise ChildNotFoundError(child_name)
        return child_id

    def add_child(
        self,
        name: str,
        birthdate: str | None = None,
        avatar_url: str | None = None,
    ) -> str:
        """Create a child profile and return its id.

        Raises:
            LilLearnerError: A child with the same name already exists
        """
        name = name.strip()
        if get_child_id_by_name(self.coordinator, name) is not None:
            raise LilLearnerError(const.ERROR_CHILD_EXISTS_FMT.format(name))

        child_id = str(uuid.uuid4())
        child: ChildData = {
            const.DATA_INTERNAL_ID: child_id,
            const.DATA_CHILD_NAME: name,
            const.DATA_CHILD_BIRTHDATE: birthdate,
            const.DATA_CHILD_AVATAR_URL: avatar_url,
            const.DATA_CREATED_AT: dt_utils.dt_now_iso(),
        }  # type: ignore[assignment]
        self.coordinator.children_data[child_id] = child
        self.coordinator._persist_and_update()

        const.LOGGER.info("INFO: Added child '%s' (ID: %s)", name, child_id)
        self.emit(const.SIGNAL_SUFFIX_CHILD_ADDED, child_id=child_id, child_name=name)
        return child_id

    def remove_child(self, child_id: str) -> None:
        """Delete a child and everything that belongs to it.

        Raises:
            ChildNotFoundError: Unknown child id
        """
        child = self._get_child(child_id)
        child_name = child.get(const.DATA_CHILD_NAME, child_id)
        coordinator = self.coordinator

        for bucket in (
            coordinator.entries_data,
            coordinator.milestones_data,
            coordinator.reports_data,
            coordinator.active_books_data,
        ):
            for row_id in [
                row_id
                for row_id, row in bucket.items()
                if row.get(const.DATA_CHILD_ID) == child_id
            ]:
                del bucket[row_id]

        coordinator.xp_events[:] = [
            event
            for event in coordinator.xp_events
            if event.get(const.DATA_CHILD_ID) != child_id
        ]
        coordinator.child_levels_data.pop(child_id, None)
        coordinator.achievements_data.pop(child_id, None)
        del coordinator.children_data[child_id]

        remove_entities_by_item_id(self.hass, self.entry_id, child_id)
        coordinator._persist_and_update()

        const.LOGGER.info("INFO: Deleted child '%s' (ID: %s)", child_name, child_id)
        self.emit(const.SIGNAL_SUFFIX_CHILD_REMOVED, child_id=child_id)

    # =========================================================================
    # Books
    # =========================================================================

    def add_book(self, child_id: str, title: str, category_id: str) -> str:
        """Start tracking a book for a child and return the book id."""
        self._get_child(child_id)
        book_id = str(uuid.uuid4())
        book: ActiveBookData = {
            const.DATA_INTERNAL_ID: book_id,
            const.DATA_CHILD_ID: child_id,
            const.DATA_BOOK_CATEGORY_ID: category_id,
            const.DATA_BOOK_TITLE: title.strip(),
            const.DATA_BOOK_STATUS: const.BOOK_STATUS_READING,
            const.DATA_BOOK_STARTED_AT: dt_utils.dt_now_iso(),
            const.DATA_BOOK_FINISHED_AT: None,
        }  # type: ignore[assignment]
        self.coordinator.active_books_data[book_id] = book
        self.coordinator._persist_and_update()
        const.LOGGER.debug("DEBUG: Child %s started book '%s'", child_id, title)
        return book_id

    def finish_book(self, book_id: str) -> ActiveBookData:
        """Mark a book finished. Finishing twice keeps the first finish time.

        Raises:
            LilLearnerError: Unknown book id
        """
        book = self.coordinator.active_books_data.get(book_id)
        if book is None:
            raise LilLearnerError(const.ERROR_BOOK_NOT_FOUND_FMT.format(book_id))

        if book.get(const.DATA_BOOK_STATUS) != const.BOOK_STATUS_FINISHED:
            book[const.DATA_BOOK_STATUS] = const.BOOK_STATUS_FINISHED
            book[const.DATA_BOOK_FINISHED_AT] = dt_utils.dt_now_iso()
            self.coordinator._persist_and_update()
        return book

    def books_for_child(
        self, child_id: str, status: str | None = None
    ) -> list[dict[str, Any]]:
        """Return a child's books, optionally filtered by status."""
        return [
            book
            for book in self.coordinator.active_books_data.values()
            if book.get(const.DATA_CHILD_ID) == child_id
            and (status is None or book.get(const.DATA_BOOK_STATUS) == status)
        ]
