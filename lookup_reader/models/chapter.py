"""Chapter data model."""

from uuid import uuid4

from pydantic import BaseModel, Field


class Chapter(BaseModel):
    """A titled segment of a book's text, owned by exactly one book."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    book_id: str
    index: int = Field(ge=1)  # 1-based, in discovery order
    title: str
    content: str
