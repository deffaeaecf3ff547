"""Tests for text measurement."""

import pytest

from lookup_reader.config import PaginationConfig
from lookup_reader.models.rendering import FontFamily
from lookup_reader.reading.measure import (
    EstimatedTextMeasurer,
    PillowTextMeasurer,
    build_measurer,
)


@pytest.fixture
def measurer() -> EstimatedTextMeasurer:
    # font 10 -> 5px per character, 14px per line
    return EstimatedTextMeasurer(FontFamily.SYSTEM, line_height=1.4)


class TestEstimatedTextMeasurer:
    def test_empty_text_has_no_height(self, measurer: EstimatedTextMeasurer) -> None:
        assert measurer("", 10, 100) == 0.0

    def test_single_line(self, measurer: EstimatedTextMeasurer) -> None:
        assert measurer("word word", 10, 100) == 14.0

    def test_wraps_at_word_boundaries(self, measurer: EstimatedTextMeasurer) -> None:
        # four 4-char words fill 95px, the fifth wraps
        assert measurer.line_count("aaaa " * 4 + "aaaa", 10, 100) == 2

    def test_long_word_is_broken(self, measurer: EstimatedTextMeasurer) -> None:
        # 50 chars = 250px over 100px lines
        assert measurer.line_count("x" * 50, 10, 100) == 3

    def test_explicit_newlines(self, measurer: EstimatedTextMeasurer) -> None:
        assert measurer.line_count("a\nb\n\nc", 10, 100) == 4

    def test_wide_characters_take_a_full_em(self, measurer: EstimatedTextMeasurer) -> None:
        # ten CJK characters at 10px each fill exactly one 100px line
        assert measurer.line_count("漢" * 10, 10, 100) == 1
        assert measurer.line_count("漢" * 11, 10, 100) == 2

    def test_monospaced_is_wider_than_serif(self) -> None:
        text = "the quick brown fox jumps over the lazy dog " * 5
        mono = EstimatedTextMeasurer(FontFamily.MONOSPACED)
        serif = EstimatedTextMeasurer(FontFamily.SERIF)
        assert mono(text, 16, 200) > serif(text, 16, 200)

    def test_monotonic_when_appending_words(self, measurer: EstimatedTextMeasurer) -> None:
        words = ("lorem ipsum dolor sit amet consectetur adipiscing elit " * 10).split()
        heights = [measurer(" ".join(words[:n]), 14, 150) for n in range(1, len(words) + 1)]
        assert heights == sorted(heights)

    def test_zero_width_does_not_divide_by_zero(self, measurer: EstimatedTextMeasurer) -> None:
        assert measurer("abc", 10, 0) > 0


class TestPillowTextMeasurer:
    def test_empty_text(self) -> None:
        assert PillowTextMeasurer()("", 16, 200) == 0.0

    def test_wrapping_increases_height(self) -> None:
        measurer = PillowTextMeasurer()
        one_line = measurer("Hello", 16, 400)
        many_lines = measurer("Hello world, " * 40, 16, 400)
        assert one_line > 0
        assert many_lines > one_line

    def test_larger_font_is_taller(self) -> None:
        measurer = PillowTextMeasurer()
        text = "A reasonably long sentence that wraps a couple of times. " * 4
        assert measurer(text, 24, 300) > measurer(text, 12, 300)


class TestBuildMeasurer:
    def test_estimates_without_font_file(self) -> None:
        measurer = build_measurer(PaginationConfig(line_height=1.6), FontFamily.ROUNDED)
        assert isinstance(measurer, EstimatedTextMeasurer)
        assert measurer.font_family is FontFamily.ROUNDED
        assert measurer.line_height == 1.6

    def test_uses_pillow_with_font_file(self) -> None:
        config = PaginationConfig(font_paths={FontFamily.SERIF: "/fonts/serif.ttf"})
        measurer = build_measurer(config, FontFamily.SERIF)
        assert isinstance(measurer, PillowTextMeasurer)
        assert measurer.font_path == "/fonts/serif.ttf"

    def test_other_families_keep_estimating(self) -> None:
        config = PaginationConfig(font_paths={FontFamily.SERIF: "/fonts/serif.ttf"})
        assert isinstance(build_measurer(config, FontFamily.SYSTEM), EstimatedTextMeasurer)
