"""Book data model."""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field


class BookFileType(str, Enum):
    """Source format of an imported book.

    Only ``txt`` books carry text handled by the segmenter and paginator;
    the other formats are rendered by external viewers from ``file_url``.
    """

    TXT = "txt"
    PDF = "pdf"
    EPUB = "epub"
    DOCX = "docx"
    UNKNOWN = "unknown"


class Book(BaseModel):
    """Represents an imported book on the shelf."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    content: str = ""  # Flat fallback text, empty when the book has chapters
    is_pinned: bool = False
    file_type: BookFileType = BookFileType.TXT
    file_url: str | None = None
    # Last read page per chapter position (0 for flat books)
    last_read_page_by_chapter: dict[int, int] = Field(default_factory=dict)
    imported_at: datetime = Field(default_factory=datetime.now)

    @property
    def is_externally_rendered(self) -> bool:
        return self.file_type is not BookFileType.TXT
