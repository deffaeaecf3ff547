"""Reading position data model."""

from pydantic import BaseModel, ConfigDict, Field


class ReadingPosition(BaseModel):
    """Zero-based (chapter, page) pair locating the reader in a book."""

    model_config = ConfigDict(frozen=True)

    chapter_index: int = Field(default=0, ge=0)
    page_index: int = Field(default=0, ge=0)
