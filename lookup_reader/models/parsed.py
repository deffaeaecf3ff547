"""Parsed book data models for the import pipeline."""

from pydantic import BaseModel, Field

from lookup_reader.models.book import BookFileType


class ParsedChapter(BaseModel):
    """A chapter detected by the segmenter, before it is attached to a book."""

    index: int = Field(ge=1)
    title: str
    text: str


class ParsedBook(BaseModel):
    """The result of reading a raw book file.

    ``raw_text`` is left untouched (markup included) so the segmenter can
    use the document structure.
    """

    title: str
    raw_text: str
    source_path: str
    file_type: BookFileType
    is_markup: bool = False
