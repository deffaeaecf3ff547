"""Tests for book import."""

from pathlib import Path

import pytest

from lookup_reader.config import SegmentationConfig
from lookup_reader.ingestion.importer import BookImporter
from lookup_reader.ingestion.segmenter import ChapterSegmenter
from lookup_reader.models.book import BookFileType
from lookup_reader.storage.database import PersistenceError, initialize_database
from lookup_reader.storage.repository import BookRepository

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "sample_texts"


@pytest.fixture
def repository(tmp_path: Path) -> BookRepository:
    db_path = tmp_path / "library.db"
    initialize_database(db_path)
    return BookRepository(db_path)


@pytest.fixture
def importer(repository: BookRepository) -> BookImporter:
    return BookImporter(repository)


class TestImportFile:
    def test_plain_text_with_chapters(
        self, importer: BookImporter, repository: BookRepository
    ) -> None:
        book, chapters = importer.import_file(FIXTURES_DIR / "sample_novel.txt")

        assert book.title == "sample_novel"
        assert book.content == ""
        assert [c.index for c in chapters] == [1, 2, 3, 4]
        assert [c.title for c in repository.get_chapters(book.id)] == [
            "Introduction",
            "CHAPTER ONE",
            "Chapter Two",
            "CHAPTER THREE",
        ]

    def test_html_with_chapters(self, importer: BookImporter, repository: BookRepository) -> None:
        book, chapters = importer.import_file(FIXTURES_DIR / "sample_gutenberg.html")

        stored = repository.get_chapters(book.id)
        assert len(stored) == 4
        assert stored[1].title == "CHAPTER I. The Harbour"
        assert all(c.book_id == book.id for c in stored)

    def test_flat_text(self, importer: BookImporter, repository: BookRepository) -> None:
        path = FIXTURES_DIR / "sample_flat.txt"
        book, chapters = importer.import_file(path)

        assert chapters == []
        stored = repository.get_book(book.id)
        assert stored is not None
        assert stored.content == path.read_text(encoding="utf-8")
        assert repository.get_chapters(book.id) == []

    def test_flat_html_stores_extracted_text(
        self, importer: BookImporter, repository: BookRepository, tmp_path: Path
    ) -> None:
        path = tmp_path / "essay.html"
        path.write_text("<html><body><p>First.</p><p>Second.</p></body></html>", encoding="utf-8")

        book, _ = importer.import_file(path)
        assert repository.get_book(book.id).content == "First.\nSecond."  # type: ignore[union-attr]

    def test_txt_file_is_not_parsed_as_html(
        self, importer: BookImporter, tmp_path: Path
    ) -> None:
        path = tmp_path / "code.txt"
        path.write_text("<h3 class='chapter'>One</h3><p>a</p>", encoding="utf-8")

        book, chapters = importer.import_file(path)
        assert chapters == []
        assert book.content == "<h3 class='chapter'>One</h3><p>a</p>"

    def test_external_format(self, importer: BookImporter, repository: BookRepository, tmp_path: Path) -> None:
        path = tmp_path / "manual.pdf"
        path.write_bytes(b"%PDF-1.7")

        book, chapters = importer.import_file(path)
        assert chapters == []
        stored = repository.get_book(book.id)
        assert stored is not None
        assert stored.file_type is BookFileType.PDF
        assert stored.file_url == str(path)
        assert stored.content == ""

    def test_missing_file(self, importer: BookImporter, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            importer.import_file(tmp_path / "missing.txt")


class TestImportText:
    def test_downloaded_text(self, importer: BookImporter, repository: BookRepository) -> None:
        text = "Intro text.\nCHAPTER ONE\nFirst body.\nCHAPTER TWO\nSecond body."
        book, chapters = importer.import_text("Downloaded", text)

        assert [(c.title, c.content) for c in repository.get_chapters(book.id)] == [
            ("Introduction", "Intro text."),
            ("CHAPTER ONE", "First body."),
            ("CHAPTER TWO", "Second body."),
        ]

    def test_custom_segmenter(self, repository: BookRepository) -> None:
        importer = BookImporter(
            repository, segmenter=ChapterSegmenter(SegmentationConfig(chapter_keyword="Part"))
        )
        book, chapters = importer.import_text("Parts", "PART 1\na\nPART 2\nb")
        assert [c.title for c in chapters] == ["PART 1", "PART 2"]

    def test_save_failure_propagates(self, tmp_path: Path) -> None:
        importer = BookImporter(BookRepository(tmp_path / "missing" / "library.db"))
        with pytest.raises(PersistenceError):
            importer.import_text("Lost", "CHAPTER 1\ntext")
