"""Reader session: a book's chapters, current pages and reading position."""

import logging

from lookup_reader.models.book import Book
from lookup_reader.models.chapter import Chapter
from lookup_reader.models.progress import ReadingPosition
from lookup_reader.models.rendering import RenderContext
from lookup_reader.reading.paginator import Paginator
from lookup_reader.reading.position import ReadingPositionTracker
from lookup_reader.storage.database import PersistenceError

logger = logging.getLogger(__name__)


class ReaderSession:
    """State behind one open reader view.

    Flat books are paginated from ``book.content``; segmented books one
    chapter at a time. Every layout change re-paginates from scratch and
    re-resolves the saved page of the current chapter.

    Args:
        book: The book being read.
        chapters: Its chapters in order, empty for a flat book.
        paginator: Paginator holding the rendering context.
        tracker: Reads and writes the reading position.
    """

    def __init__(
        self,
        book: Book,
        chapters: list[Chapter],
        paginator: Paginator,
        tracker: ReadingPositionTracker,
    ) -> None:
        if book.is_externally_rendered:
            raise ValueError(f"Book {book.id} is a {book.file_type.value} file, not text")
        self.book = book
        self.chapters = sorted(chapters, key=lambda c: c.index)
        self._paginator = paginator
        self._tracker = tracker
        self._pages: list[str] = []
        self._chapter_index = 0
        self._page_index = 0

    @property
    def is_flat(self) -> bool:
        return not self.chapters

    @property
    def pages(self) -> list[str]:
        return list(self._pages)

    @property
    def position(self) -> ReadingPosition:
        return ReadingPosition(chapter_index=self._chapter_index, page_index=self._page_index)

    @property
    def chapter_title(self) -> str:
        if self.is_flat:
            return self.book.title
        return self.chapters[self._chapter_index].title

    @property
    def current_page_text(self) -> str:
        if not self._pages:
            return ""
        return self._pages[self._page_index]

    @property
    def is_bookmarked(self) -> bool:
        return self._tracker.is_bookmarked(self.book, self._chapter_index, self._page_index)

    @property
    def has_next_chapter(self) -> bool:
        return self._chapter_index < len(self.chapters) - 1

    @property
    def has_prev_chapter(self) -> bool:
        return self._chapter_index > 0

    def open(self, context: RenderContext | None = None, chapter_index: int = 0) -> ReadingPosition:
        """Load the stored progress and show a chapter at its saved page."""
        try:
            self._tracker.reload(self.book)
        except PersistenceError:
            logger.warning(
                "Could not load progress of book %s; using in-memory positions",
                self.book.id,
                exc_info=True,
            )
        if context is not None:
            self._paginator.update_context(context)
        return self._load_chapter(chapter_index)

    def change_context(self, context: RenderContext) -> ReadingPosition:
        """Re-paginate after a font size, font family or container change."""
        if not self._paginator.update_context(context):
            return self.position
        return self._load_chapter(self._chapter_index)

    def next_chapter(self) -> ReadingPosition:
        if not self.has_next_chapter:
            return self.position
        return self._load_chapter(self._chapter_index + 1)

    def prev_chapter(self) -> ReadingPosition:
        if not self.has_prev_chapter:
            return self.position
        return self._load_chapter(self._chapter_index - 1)

    def go_to_page(self, page_index: int) -> ReadingPosition:
        """Move to a page of the current chapter and remember it.

        Out-of-range indices are clamped. The new position is kept even
        when saving it fails; the PersistenceError is re-raised.
        """
        if not self._pages:
            self._page_index = 0
            return self.position
        self._page_index = min(max(page_index, 0), len(self._pages) - 1)
        self._tracker.record_position(self.book, self._chapter_index, self._page_index)
        return self.position

    def toggle_bookmark(self) -> bool:
        """Bookmark the current page, or remove its bookmark."""
        return self._tracker.toggle_bookmark(self.book, self._chapter_index, self._page_index)

    def _chapter_text(self, chapter_index: int) -> str:
        if self.is_flat:
            return self.book.content
        return self.chapters[chapter_index].content

    def _load_chapter(self, chapter_index: int) -> ReadingPosition:
        if not self.is_flat:
            chapter_index = min(max(chapter_index, 0), len(self.chapters) - 1)
        else:
            chapter_index = 0
        pages = self._paginator.pages_for(self._chapter_text(chapter_index))
        position = self._tracker.resolve_position(self.book, self.chapters, pages, chapter_index)
        self._pages = pages
        self._chapter_index = position.chapter_index
        self._page_index = position.page_index
        logger.debug(
            "Book %s: chapter %d, page %d of %d",
            self.book.id,
            self._chapter_index,
            self._page_index,
            len(pages),
        )
        return self.position
