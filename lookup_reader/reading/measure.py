"""Text measurement used to decide how much text fits on a page."""

import logging
import math
import unicodedata
from typing import Protocol

from PIL import ImageFont

from lookup_reader.config import PaginationConfig
from lookup_reader.models.rendering import FontFamily

logger = logging.getLogger(__name__)

# Average glyph advance as a fraction of the font size
FONT_WIDTH_FACTORS: dict[FontFamily, float] = {
    FontFamily.SYSTEM: 0.5,
    FontFamily.SERIF: 0.48,
    FontFamily.MONOSPACED: 0.6,
    FontFamily.ROUNDED: 0.53,
}


class TextMeasurer(Protocol):
    """Returns the rendered height of ``text`` wrapped at ``max_width``.

    Implementations must be monotonic: appending text never decreases the
    measured height for a fixed font size and width.
    """

    def __call__(self, text: str, font_size: float, max_width: float) -> float: ...


class WrappingMeasurer:
    """Greedy word-wrapping measurer.

    Lines are broken at spaces; a word wider than the line is broken
    across as many lines as it needs. Explicit newlines start a new line.
    Subclasses provide glyph advances and the line height.

    Args:
        line_height: Line height as a multiple of the font's natural height.
    """

    def __init__(self, line_height: float = 1.4) -> None:
        self.line_height = line_height

    def __call__(self, text: str, font_size: float, max_width: float) -> float:
        if not text:
            return 0.0
        lines = self.line_count(text, font_size, max_width)
        return float(math.ceil(lines * self._line_pixels(font_size)))

    def line_count(self, text: str, font_size: float, max_width: float) -> int:
        """Count the lines ``text`` occupies when wrapped at ``max_width``."""
        width = max(max_width, 1.0)
        space = self._text_width(" ", font_size)
        total = 0

        for raw_line in text.split("\n"):
            lines = 1
            x = 0.0
            for word in raw_line.split():
                word_width = self._text_width(word, font_size)
                needed = word_width if x == 0 else x + space + word_width
                if needed <= width:
                    x = needed
                    continue
                if x > 0:
                    lines += 1
                if word_width <= width:
                    x = word_width
                else:
                    extra = math.ceil(word_width / width) - 1
                    lines += extra
                    x = word_width - extra * width
            total += lines

        return total

    def _text_width(self, text: str, font_size: float) -> float:
        raise NotImplementedError

    def _line_pixels(self, font_size: float) -> float:
        raise NotImplementedError


class EstimatedTextMeasurer(WrappingMeasurer):
    """Deterministic measurer based on average glyph widths.

    Needs no font files, which makes it the default for pagination and
    for tests. East Asian wide characters count as a full em.

    Args:
        font_family: Font family class, selects the average advance.
        line_height: Line height as a multiple of the font size.
    """

    def __init__(self, font_family: FontFamily = FontFamily.SYSTEM, line_height: float = 1.4) -> None:
        super().__init__(line_height=line_height)
        self.font_family = font_family
        self._factor = FONT_WIDTH_FACTORS[font_family]

    def _text_width(self, text: str, font_size: float) -> float:
        width = 0.0
        for char in text:
            if unicodedata.east_asian_width(char) in ("W", "F"):
                width += font_size
            else:
                width += font_size * self._factor
        return width

    def _line_pixels(self, font_size: float) -> float:
        return font_size * self.line_height


class PillowTextMeasurer(WrappingMeasurer):
    """Measurer backed by real glyph advances from a font file.

    Args:
        font_path: TrueType/OpenType file. None uses Pillow's bundled font.
        line_height: Line height as a multiple of the font's ascent + descent.
    """

    def __init__(self, font_path: str | None = None, line_height: float = 1.4) -> None:
        super().__init__(line_height=line_height)
        self.font_path = font_path
        self._fonts: dict[int, ImageFont.FreeTypeFont] = {}

    def _font(self, font_size: float) -> ImageFont.FreeTypeFont:
        size = max(int(round(font_size)), 1)
        font = self._fonts.get(size)
        if font is None:
            if self.font_path:
                font = ImageFont.truetype(self.font_path, size)
            else:
                font = ImageFont.load_default(size=size)
            self._fonts[size] = font
        return font

    def _text_width(self, text: str, font_size: float) -> float:
        return self._font(font_size).getlength(text)

    def _line_pixels(self, font_size: float) -> float:
        ascent, descent = self._font(font_size).getmetrics()
        return (ascent + descent) * self.line_height


def build_measurer(config: PaginationConfig, font_family: FontFamily) -> TextMeasurer:
    """Pick the measurer for a font family.

    Families with a configured font file are measured with Pillow; the
    rest fall back to the estimating measurer.

    Args:
        config: Pagination settings.
        font_family: The family the reader currently uses.

    Returns:
        A TextMeasurer for that family.
    """
    font_path = config.font_paths.get(font_family)
    if font_path:
        logger.debug("Measuring %s text with font file %s", font_family.value, font_path)
        return PillowTextMeasurer(font_path, line_height=config.line_height)
    return EstimatedTextMeasurer(font_family, line_height=config.line_height)
