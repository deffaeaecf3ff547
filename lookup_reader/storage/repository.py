"""Book, chapter and reading progress persistence."""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from lookup_reader.models.book import Book, BookFileType
from lookup_reader.models.chapter import Chapter
from lookup_reader.storage.database import PersistenceError, get_connection

logger = logging.getLogger(__name__)


class BookRepository:
    """Stores books with their chapters and per-chapter reading progress.

    Every write runs in a single transaction, so a book's chapters and
    progress mapping are never left half-updated.

    Args:
        db_path: Path to an initialized SQLite database.
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)

    def save_book(self, book: Book, chapters: list[Chapter] | None = None) -> None:
        """Insert or update a book, replacing its chapters.

        Args:
            book: The book to store.
            chapters: The book's chapters. None or empty stores a flat book.

        Raises:
            ValueError: If the chapters break the book's ownership or
                indexing rules, or the book has both chapters and content.
            PersistenceError: If the database write fails.
        """
        chapters = chapters or []
        self._validate_chapters(book, chapters)

        try:
            conn = get_connection(self._db_path)
            try:
                with conn:
                    conn.execute(
                        """
                        INSERT INTO books (id, title, content, is_pinned, file_type, file_url, imported_at)
                        VALUES (?, ?, ?, ?, ?, ?, ?)
                        ON CONFLICT(id) DO UPDATE SET
                            title = excluded.title,
                            content = excluded.content,
                            is_pinned = excluded.is_pinned,
                            file_type = excluded.file_type,
                            file_url = excluded.file_url
                        """,
                        (
                            book.id,
                            book.title,
                            book.content,
                            int(book.is_pinned),
                            book.file_type.value,
                            book.file_url,
                            book.imported_at.isoformat(),
                        ),
                    )
                    conn.execute("DELETE FROM chapters WHERE book_id = ?", (book.id,))
                    conn.executemany(
                        "INSERT INTO chapters (id, book_id, idx, title, content) VALUES (?, ?, ?, ?, ?)",
                        [(c.id, c.book_id, c.index, c.title, c.content) for c in chapters],
                    )
                    conn.execute("DELETE FROM reading_progress WHERE book_id = ?", (book.id,))
                    conn.executemany(
                        "INSERT INTO reading_progress (book_id, chapter_index, page_index) VALUES (?, ?, ?)",
                        [
                            (book.id, chapter_index, page_index)
                            for chapter_index, page_index in book.last_read_page_by_chapter.items()
                        ],
                    )
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to save book {book.id}: {exc}") from exc

        logger.debug("Saved book %s with %d chapters", book.id, len(chapters))

    def get_book(self, book_id: str) -> Book | None:
        """Load a book with its progress mapping, or None if it doesn't exist."""
        try:
            conn = get_connection(self._db_path)
            try:
                row = conn.execute("SELECT * FROM books WHERE id = ?", (book_id,)).fetchone()
                if row is None:
                    return None
                progress = self._read_progress(conn, book_id)
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to load book {book_id}: {exc}") from exc

        return self._row_to_book(row, progress)

    def list_books(self) -> list[Book]:
        """Return all books, pinned first, then most recently imported."""
        try:
            conn = get_connection(self._db_path)
            try:
                rows = conn.execute(
                    "SELECT * FROM books ORDER BY is_pinned DESC, imported_at DESC"
                ).fetchall()
                books = [self._row_to_book(row, self._read_progress(conn, row["id"])) for row in rows]
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to list books: {exc}") from exc

        return books

    def get_chapters(self, book_id: str) -> list[Chapter]:
        """Return a book's chapters ordered by index."""
        try:
            conn = get_connection(self._db_path)
            try:
                rows = conn.execute(
                    "SELECT * FROM chapters WHERE book_id = ? ORDER BY idx", (book_id,)
                ).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to load chapters of {book_id}: {exc}") from exc

        return [
            Chapter(
                id=row["id"],
                book_id=row["book_id"],
                index=row["idx"],
                title=row["title"],
                content=row["content"],
            )
            for row in rows
        ]

    def delete_book(self, book_id: str) -> bool:
        """Delete a book together with its chapters and progress.

        Returns:
            True if a book was deleted.
        """
        try:
            conn = get_connection(self._db_path)
            try:
                with conn:
                    cursor = conn.execute("DELETE FROM books WHERE id = ?", (book_id,))
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to delete book {book_id}: {exc}") from exc

        return cursor.rowcount > 0

    def get_progress(self, book_id: str) -> dict[int, int]:
        """Return the chapter -> last read page mapping of a book."""
        try:
            conn = get_connection(self._db_path)
            try:
                return self._read_progress(conn, book_id)
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to load progress of {book_id}: {exc}") from exc

    def set_progress(self, book_id: str, chapter_index: int, page_index: int | None) -> None:
        """Write one entry of a book's progress mapping.

        Args:
            book_id: The book's id.
            chapter_index: Zero-based chapter position (0 for flat books).
            page_index: Page to remember, or None to clear the entry.

        Raises:
            PersistenceError: If the write fails or the book doesn't exist.
        """
        try:
            conn = get_connection(self._db_path)
            try:
                with conn:
                    if page_index is None:
                        conn.execute(
                            "DELETE FROM reading_progress WHERE book_id = ? AND chapter_index = ?",
                            (book_id, chapter_index),
                        )
                    else:
                        conn.execute(
                            """
                            INSERT INTO reading_progress (book_id, chapter_index, page_index, updated_at)
                            VALUES (?, ?, ?, ?)
                            ON CONFLICT(book_id, chapter_index) DO UPDATE SET
                                page_index = excluded.page_index,
                                updated_at = excluded.updated_at
                            """,
                            (book_id, chapter_index, page_index, datetime.now().isoformat()),
                        )
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise PersistenceError(
                f"Failed to save progress of {book_id} (chapter {chapter_index}): {exc}"
            ) from exc

    def _read_progress(self, conn: sqlite3.Connection, book_id: str) -> dict[int, int]:
        rows = conn.execute(
            "SELECT chapter_index, page_index FROM reading_progress WHERE book_id = ?",
            (book_id,),
        ).fetchall()
        return {row["chapter_index"]: row["page_index"] for row in rows}

    def _row_to_book(self, row: sqlite3.Row, progress: dict[int, int]) -> Book:
        return Book(
            id=row["id"],
            title=row["title"],
            content=row["content"] or "",
            is_pinned=bool(row["is_pinned"]),
            file_type=BookFileType(row["file_type"]),
            file_url=row["file_url"],
            last_read_page_by_chapter=progress,
            imported_at=datetime.fromisoformat(row["imported_at"]),
        )

    def _validate_chapters(self, book: Book, chapters: list[Chapter]) -> None:
        """Check ownership, contiguous indexing and flat/segmented exclusivity.

        Raises:
            ValueError: On the first violated rule.
        """
        if not chapters:
            return
        if book.content:
            raise ValueError(f"Book {book.id} has both flat content and chapters")
        for expected, chapter in enumerate(chapters, start=1):
            if chapter.book_id != book.id:
                raise ValueError(
                    f"Chapter {chapter.id} belongs to book {chapter.book_id}, not {book.id}"
                )
            if chapter.index != expected:
                raise ValueError(
                    f"Chapter indices must run from 1 without gaps; "
                    f"expected {expected}, got {chapter.index}"
                )
