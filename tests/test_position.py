"""Tests for the reading position tracker."""

import pytest

from lookup_reader.models.book import Book
from lookup_reader.models.chapter import Chapter
from lookup_reader.models.progress import ReadingPosition
from lookup_reader.reading.position import ReadingPositionTracker
from lookup_reader.storage.database import PersistenceError


class MemoryProgressStore:
    """In-memory progress store recording every write."""

    def __init__(self) -> None:
        self.progress: dict[str, dict[int, int]] = {}
        self.writes: list[tuple[str, int, int | None]] = []

    def get_progress(self, book_id: str) -> dict[int, int]:
        return dict(self.progress.get(book_id, {}))

    def set_progress(self, book_id: str, chapter_index: int, page_index: int | None) -> None:
        self.writes.append((book_id, chapter_index, page_index))
        mapping = self.progress.setdefault(book_id, {})
        if page_index is None:
            mapping.pop(chapter_index, None)
        else:
            mapping[chapter_index] = page_index


class FailingProgressStore(MemoryProgressStore):
    def set_progress(self, book_id: str, chapter_index: int, page_index: int | None) -> None:
        raise PersistenceError("disk full")


@pytest.fixture
def store() -> MemoryProgressStore:
    return MemoryProgressStore()


@pytest.fixture
def tracker(store: MemoryProgressStore) -> ReadingPositionTracker:
    return ReadingPositionTracker(store)


@pytest.fixture
def book() -> Book:
    return Book(title="Test Book")


def _chapters(book: Book, count: int) -> list[Chapter]:
    return [
        Chapter(book_id=book.id, index=i, title=f"Chapter {i}", content=f"text {i}")
        for i in range(1, count + 1)
    ]


PAGES = ["p0", "p1", "p2", "p3"]


class TestResolvePosition:
    def test_defaults_to_first_page(self, tracker: ReadingPositionTracker, book: Book) -> None:
        position = tracker.resolve_position(book, _chapters(book, 3), PAGES)
        assert position == ReadingPosition(chapter_index=0, page_index=0)

    def test_uses_saved_page(self, tracker: ReadingPositionTracker, book: Book) -> None:
        book.last_read_page_by_chapter = {1: 2}
        position = tracker.resolve_position(book, _chapters(book, 3), PAGES, chapter_index=1)
        assert position == ReadingPosition(chapter_index=1, page_index=2)

    def test_clamps_stale_page(self, tracker: ReadingPositionTracker, book: Book) -> None:
        book.last_read_page_by_chapter = {2: 9}
        position = tracker.resolve_position(book, _chapters(book, 3), PAGES, chapter_index=2)
        assert position == ReadingPosition(chapter_index=2, page_index=3)

    def test_entry_for_other_chapter_is_ignored(
        self, tracker: ReadingPositionTracker, book: Book
    ) -> None:
        book.last_read_page_by_chapter = {0: 3}
        position = tracker.resolve_position(book, _chapters(book, 3), PAGES, chapter_index=1)
        assert position.page_index == 0

    def test_clamps_stale_chapter(self, tracker: ReadingPositionTracker, book: Book) -> None:
        book.last_read_page_by_chapter = {1: 1}
        position = tracker.resolve_position(book, _chapters(book, 2), PAGES, chapter_index=5)
        assert position == ReadingPosition(chapter_index=1, page_index=1)

    def test_flat_book_uses_entry_zero(self, tracker: ReadingPositionTracker, book: Book) -> None:
        book.last_read_page_by_chapter = {0: 2}
        position = tracker.resolve_position(book, [], PAGES, chapter_index=3)
        assert position == ReadingPosition(chapter_index=0, page_index=2)

    def test_no_pages(self, tracker: ReadingPositionTracker, book: Book) -> None:
        book.last_read_page_by_chapter = {0: 5}
        assert tracker.resolve_position(book, [], []) == ReadingPosition()

    def test_negative_saved_page(self, tracker: ReadingPositionTracker, book: Book) -> None:
        book.last_read_page_by_chapter = {0: -4}
        assert tracker.resolve_position(book, [], PAGES).page_index == 0


class TestRecordPosition:
    def test_writes_through_immediately(
        self, tracker: ReadingPositionTracker, store: MemoryProgressStore, book: Book
    ) -> None:
        tracker.record_position(book, 1, 7)
        assert book.last_read_page_by_chapter == {1: 7}
        assert store.writes == [(book.id, 1, 7)]

    def test_overwrites_previous_page(
        self, tracker: ReadingPositionTracker, store: MemoryProgressStore, book: Book
    ) -> None:
        tracker.record_position(book, 0, 1)
        tracker.record_position(book, 0, 4)
        assert store.progress[book.id] == {0: 4}

    def test_rejects_negative_indices(self, tracker: ReadingPositionTracker, book: Book) -> None:
        with pytest.raises(ValueError):
            tracker.record_position(book, -1, 0)

    def test_failed_write_keeps_memory_state(self, book: Book) -> None:
        tracker = ReadingPositionTracker(FailingProgressStore())
        with pytest.raises(PersistenceError):
            tracker.record_position(book, 2, 3)
        assert book.last_read_page_by_chapter == {2: 3}

    def test_clear_position(
        self, tracker: ReadingPositionTracker, store: MemoryProgressStore, book: Book
    ) -> None:
        tracker.record_position(book, 0, 1)
        tracker.clear_position(book, 0)
        assert book.last_read_page_by_chapter == {}
        assert store.progress[book.id] == {}
        assert store.writes[-1] == (book.id, 0, None)


class TestBookmarks:
    def test_toggle_on_and_off(self, tracker: ReadingPositionTracker, book: Book) -> None:
        assert tracker.toggle_bookmark(book, 0, 2) is True
        assert tracker.is_bookmarked(book, 0, 2)
        assert tracker.toggle_bookmark(book, 0, 2) is False
        assert not tracker.is_bookmarked(book, 0, 2)

    def test_toggle_other_page_moves_bookmark(
        self, tracker: ReadingPositionTracker, book: Book
    ) -> None:
        tracker.toggle_bookmark(book, 0, 2)
        assert tracker.toggle_bookmark(book, 0, 5) is True
        assert book.last_read_page_by_chapter == {0: 5}

    def test_reload_reads_store(
        self, tracker: ReadingPositionTracker, store: MemoryProgressStore, book: Book
    ) -> None:
        store.progress[book.id] = {3: 1}
        tracker.reload(book)
        assert book.last_read_page_by_chapter == {3: 1}
