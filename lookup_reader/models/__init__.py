"""Data models for the Lookup reader core."""

from lookup_reader.models.book import Book, BookFileType
from lookup_reader.models.chapter import Chapter
from lookup_reader.models.parsed import ParsedBook, ParsedChapter
from lookup_reader.models.progress import ReadingPosition
from lookup_reader.models.rendering import ContainerSize, FontFamily, RenderContext

__all__ = [
    "Book",
    "BookFileType",
    "Chapter",
    "ContainerSize",
    "FontFamily",
    "ParsedBook",
    "ParsedChapter",
    "ReadingPosition",
    "RenderContext",
]
