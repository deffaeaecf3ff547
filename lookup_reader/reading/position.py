"""Mapping persisted reading progress onto freshly computed pages."""

import logging
from typing import Protocol

from lookup_reader.models.book import Book
from lookup_reader.models.chapter import Chapter
from lookup_reader.models.progress import ReadingPosition

logger = logging.getLogger(__name__)


class ProgressStore(Protocol):
    """Persistence boundary for a book's chapter -> page mapping."""

    def get_progress(self, book_id: str) -> dict[int, int]: ...

    def set_progress(self, book_id: str, chapter_index: int, page_index: int | None) -> None: ...


class ReadingPositionTracker:
    """Keeps a reader's place across re-pagination.

    Page indices are only meaningful for the page list they were computed
    against, so every resolution clamps the saved index into the current
    list instead of trusting it.

    Args:
        store: Where the progress mapping is persisted.
    """

    def __init__(self, store: ProgressStore) -> None:
        self._store = store

    def resolve_position(
        self,
        book: Book,
        chapters: list[Chapter],
        current_pages: list[str],
        chapter_index: int = 0,
    ) -> ReadingPosition:
        """Find where to show ``book`` given the pages just computed.

        Args:
            book: The book being read; its progress mapping is consulted.
            chapters: The book's chapters in order (empty for flat books).
            current_pages: Pages of the chapter about to be displayed.
            chapter_index: Zero-based chapter about to be displayed.

        Returns:
            A position that is always valid for ``chapters`` and
            ``current_pages``.
        """
        if not chapters:
            chapter_index = 0
        elif not 0 <= chapter_index < len(chapters):
            clamped = min(max(chapter_index, 0), len(chapters) - 1)
            logger.warning(
                "Chapter %d out of range for book %s (%d chapters); using %d",
                chapter_index,
                book.id,
                len(chapters),
                clamped,
            )
            chapter_index = clamped

        saved = book.last_read_page_by_chapter.get(chapter_index)
        if saved is None or not current_pages:
            return ReadingPosition(chapter_index=chapter_index, page_index=0)

        last_page = len(current_pages) - 1
        page_index = min(max(saved, 0), last_page)
        if page_index != saved:
            logger.info(
                "Saved page %d of chapter %d is stale (%d pages now); clamped to %d",
                saved,
                chapter_index,
                len(current_pages),
                page_index,
            )
        return ReadingPosition(chapter_index=chapter_index, page_index=page_index)

    def record_position(self, book: Book, chapter_index: int, page_index: int) -> None:
        """Remember ``page_index`` as the last read page of a chapter.

        The book's mapping is updated first and then written through, so
        a failed write leaves the in-memory position intact.

        Raises:
            ValueError: If an index is negative.
            PersistenceError: If the store fails to save the entry.
        """
        if chapter_index < 0 or page_index < 0:
            raise ValueError(f"Invalid position ({chapter_index}, {page_index})")
        book.last_read_page_by_chapter[chapter_index] = page_index
        self._store.set_progress(book.id, chapter_index, page_index)

    def clear_position(self, book: Book, chapter_index: int) -> None:
        """Forget the saved page of a chapter."""
        book.last_read_page_by_chapter.pop(chapter_index, None)
        self._store.set_progress(book.id, chapter_index, None)

    def is_bookmarked(self, book: Book, chapter_index: int, page_index: int) -> bool:
        return book.last_read_page_by_chapter.get(chapter_index) == page_index

    def toggle_bookmark(self, book: Book, chapter_index: int, page_index: int) -> bool:
        """Bookmark a page, or remove the bookmark if it's already there.

        Returns:
            True if the page is bookmarked afterwards.
        """
        if self.is_bookmarked(book, chapter_index, page_index):
            self.clear_position(book, chapter_index)
            return False
        self.record_position(book, chapter_index, page_index)
        return True

    def reload(self, book: Book) -> None:
        """Replace the book's in-memory mapping with the stored one."""
        book.last_read_page_by_chapter = dict(self._store.get_progress(book.id))
