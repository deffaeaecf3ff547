"""Importing books: read, segment and store."""

import logging
from pathlib import Path

from lookup_reader.ingestion.parser import BookParser
from lookup_reader.ingestion.segmenter import ChapterSegmenter
from lookup_reader.models.book import Book, BookFileType
from lookup_reader.models.chapter import Chapter
from lookup_reader.models.parsed import ParsedChapter
from lookup_reader.storage.repository import BookRepository

logger = logging.getLogger(__name__)


class BookImporter:
    """Turns files or downloaded text into stored books.

    Text is segmented into chapters; when no chapter heading is found the
    book is stored flat with its text as content.

    Args:
        repository: Where books and chapters are saved.
        segmenter: Chapter segmenter, default configuration if None.
        parser: File reader, default if None.
    """

    def __init__(
        self,
        repository: BookRepository,
        segmenter: ChapterSegmenter | None = None,
        parser: BookParser | None = None,
    ) -> None:
        self._repository = repository
        self._segmenter = segmenter or ChapterSegmenter()
        self._parser = parser or BookParser()

    def import_file(self, file_path: str | Path) -> tuple[Book, list[Chapter]]:
        """Import a book file.

        Args:
            file_path: Path to a text, HTML, PDF, EPUB or DOCX file.

        Returns:
            The stored book and its chapters (empty for flat books and
            externally rendered files).

        Raises:
            FileNotFoundError: If file_path does not exist.
            PersistenceError: If the book can't be saved.
        """
        parsed = self._parser.parse(file_path)

        if parsed.file_type is not BookFileType.TXT:
            book = Book(title=parsed.title, file_type=parsed.file_type, file_url=parsed.source_path)
            self._repository.save_book(book)
            logger.info("Imported %s as %s file %s", parsed.title, parsed.file_type.value, book.id)
            return book, []

        return self.import_text(parsed.title, parsed.raw_text, markup=parsed.is_markup)

    def import_text(
        self, title: str, text: str, markup: bool | None = None
    ) -> tuple[Book, list[Chapter]]:
        """Import already-materialized text, such as a downloaded book.

        Args:
            title: Book title.
            text: Plain text or HTML.
            markup: Whether the text is HTML; None detects it.

        Returns:
            The stored book and its chapters.

        Raises:
            PersistenceError: If the book can't be saved.
        """
        parsed_chapters = self._segmenter.segment(title, text, markup=markup)

        if not parsed_chapters:
            book = Book(title=title, content=self._segmenter.flat_text(text, markup=markup))
            self._repository.save_book(book)
            logger.info("Imported %r as flat book %s", title, book.id)
            return book, []

        book = Book(title=title)
        chapters = self._to_chapters(book, parsed_chapters)
        self._repository.save_book(book, chapters)
        logger.info("Imported %r as book %s with %d chapters", title, book.id, len(chapters))
        return book, chapters

    def _to_chapters(self, book: Book, parsed: list[ParsedChapter]) -> list[Chapter]:
        return [
            Chapter(book_id=book.id, index=p.index, title=p.title, content=p.text)
            for p in parsed
        ]
