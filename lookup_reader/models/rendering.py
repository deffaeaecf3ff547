"""Rendering context data models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FontFamily(str, Enum):
    """Font family classes offered by the reader settings."""

    SYSTEM = "system"
    SERIF = "serif"
    MONOSPACED = "monospaced"
    ROUNDED = "rounded"


class ContainerSize(BaseModel):
    """Size of the area a page is laid out in."""

    model_config = ConfigDict(frozen=True)

    width: float = Field(ge=0)
    height: float = Field(ge=0)


class RenderContext(BaseModel):
    """Everything that determines how a text is split into pages.

    Any change to one of these fields invalidates previously computed
    page lists.
    """

    model_config = ConfigDict(frozen=True)

    font_size: float = Field(gt=0)
    container: ContainerSize
    padding: float = Field(default=16.0, ge=0)
    font_family: FontFamily = FontFamily.SYSTEM

    @property
    def usable_width(self) -> float:
        return self.container.width - 2 * self.padding

    @property
    def usable_height(self) -> float:
        return self.container.height - 2 * self.padding
