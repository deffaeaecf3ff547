"""Chapter segmentation of imported plain text and HTML."""

import logging
import re

from bs4 import BeautifulSoup, Tag

from lookup_reader.config import SegmentationConfig
from lookup_reader.models.parsed import ParsedChapter

logger = logging.getLogger(__name__)

# Block-level tags that mark a text as an HTML document
MARKUP_PATTERN = re.compile(
    r"</?(?:html|head|body|p|div|section|article|h[1-6]|br)\b[^>]*>",
    re.IGNORECASE,
)

PARAGRAPH_BREAK = "\n\n"

HEADING_TAG = re.compile(r"^h[1-6]$")


def looks_like_html(text: str) -> bool:
    """Return True if the text contains block-level HTML tags."""
    return MARKUP_PATTERN.search(text) is not None


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace into single spaces."""
    return " ".join(text.split())


class _ChapterBuilder:
    """Accumulates chapter bodies between headings.

    Content seen before the first heading goes into a chapter titled with
    ``first_title``. Chapters whose body is blank are dropped.
    """

    def __init__(self, first_title: str, separator: str) -> None:
        self.chapters: list[ParsedChapter] = []
        self._separator = separator
        self._title = first_title
        self._from_heading = False
        self._parts: list[str] = []

    def start(self, title: str) -> None:
        self.close()
        self._title = title or f"Chapter {len(self.chapters) + 1}"
        self._from_heading = True

    def append(self, text: str) -> None:
        self._parts.append(text)

    def close(self) -> None:
        body = self._separator.join(self._parts).strip()
        self._parts = []
        if not body:
            if self._from_heading:
                logger.debug("Dropping chapter %r: no body text", self._title)
            return
        self.chapters.append(
            ParsedChapter(index=len(self.chapters) + 1, title=self._title, text=body)
        )


class ChapterSegmenter:
    """Splits a book's raw text into chapters.

    Strategy (first that applies):
    1. HTML: chapter headings found by explicit markers (``heading_selectors``)
       or by keyword headings (``keyword_heading_tags`` whose text starts with
       ``chapter_keyword``), walked in document order with the paragraphs
       and sub-headings between them.
    2. Plain text: lines starting with ``chapter_keyword``. Also used when
       HTML can't be parsed or has no chapter headings.
    3. Nothing found: no chapters, the caller keeps the text flat.

    Args:
        config: SegmentationConfig with the keyword and selectors.
    """

    def __init__(self, config: SegmentationConfig | None = None) -> None:
        self._config = config or SegmentationConfig()
        self._keyword = self._config.chapter_keyword.strip().casefold()

    def segment(self, title: str, raw_text: str, markup: bool | None = None) -> list[ParsedChapter]:
        """Split raw text into chapters.

        Args:
            title: Title of the book, used for logging.
            raw_text: Plain text or HTML.
            markup: Force (True) or skip (False) the HTML path. None
                decides from the content.

        Returns:
            Chapters with indices from 1, or an empty list when no chapter
            heading was found.
        """
        if not raw_text.strip():
            return []

        is_markup = looks_like_html(raw_text) if markup is None else markup
        if not is_markup:
            return self._log_result(title, "plain text", self._segment_plain(raw_text))

        chapters: list[ParsedChapter] = []
        try:
            soup = self._parse_html(raw_text)
            chapters = self._segment_html(soup)
            text = self._extract_text(soup)
        except Exception:
            logger.warning("Failed to parse HTML of %r; treating it as plain text", title, exc_info=True)
            text = raw_text

        if chapters:
            return self._log_result(title, "HTML", chapters)

        return self._log_result(title, "plain text fallback", self._segment_plain(text))

    def flat_text(self, raw_text: str, markup: bool | None = None) -> str:
        """Return the text to store for a book without chapters.

        Plain text is kept verbatim; markup is reduced to its text, one
        block per line.
        """
        is_markup = looks_like_html(raw_text) if markup is None else markup
        if not is_markup:
            return raw_text
        try:
            return self._extract_text(self._parse_html(raw_text))
        except Exception:
            logger.warning("Failed to extract text from HTML; storing it verbatim", exc_info=True)
            return raw_text

    def _parse_html(self, raw_text: str) -> BeautifulSoup:
        soup = BeautifulSoup(raw_text, self._config.html_parser)
        for tag in soup(["script", "style"]):
            tag.decompose()
        return soup

    def _extract_text(self, soup: BeautifulSoup) -> str:
        lines = (line.strip() for line in soup.get_text(separator="\n").splitlines())
        return "\n".join(line for line in lines if line)

    def _segment_html(self, soup: BeautifulSoup) -> list[ParsedChapter]:
        """Walk headings and content blocks in document order.

        Args:
            soup: Parsed document.

        Returns:
            Detected chapters, empty if the document has no chapter heading.
        """
        headings = self._find_headings(soup)
        if not headings:
            return []

        heading_ids = {id(el) for el in headings}
        content = [
            el
            for selector in self._config.paragraph_selectors + self._config.subheading_selectors
            for el in soup.select(selector)
            if id(el) not in heading_ids
        ]
        content_ids = {id(el) for el in content}

        # Chapter wrappers such as <section data-chapter> hold their own body;
        # their title comes from the first heading inside them
        wrapper_titles: dict[int, Tag | None] = {
            id(el): el.find(HEADING_TAG)
            for el in headings
            if any(id(child) in content_ids for child in el.descendants)
        }
        title_ids = {id(tag) for tag in wrapper_titles.values() if tag is not None}

        # Document order is authoritative, whatever the element type
        order = {id(el): position for position, el in enumerate(soup.find_all(True))}
        elements: list[Tag] = []
        seen: set[int] = set()
        seen_content: set[int] = set()
        for el in sorted(headings + content, key=lambda e: order[id(e)]):
            if id(el) in seen or id(el) in title_ids:
                continue
            is_content = id(el) in content_ids
            # Content may sit inside a chapter wrapper, never inside other content
            enclosing = seen_content if is_content else seen
            if any(id(parent) in enclosing for parent in el.parents):
                continue
            seen.add(id(el))
            if is_content:
                seen_content.add(id(el))
            elements.append(el)

        builder = _ChapterBuilder(self._config.introduction_title, PARAGRAPH_BREAK)
        for el in elements:
            if id(el) in heading_ids:
                builder.start(self._heading_title(el, wrapper_titles))
                continue
            text = normalize_whitespace(el.get_text(" "))
            if text:
                builder.append(text)
        builder.close()

        return builder.chapters

    def _heading_title(self, heading: Tag, wrapper_titles: dict[int, Tag | None]) -> str:
        if id(heading) not in wrapper_titles:
            return normalize_whitespace(heading.get_text(" "))
        title_tag = wrapper_titles[id(heading)]
        if title_tag is not None:
            return normalize_whitespace(title_tag.get_text(" "))
        return normalize_whitespace(" ".join(heading.find_all(string=True, recursive=False)))

    def _find_headings(self, soup: BeautifulSoup) -> list[Tag]:
        headings: list[Tag] = []
        for selector in self._config.heading_selectors:
            headings.extend(soup.select(selector))

        # find_all([]) would match every tag
        if self._config.keyword_heading_tags:
            for el in soup.find_all(self._config.keyword_heading_tags):
                if self._is_keyword_heading(el.get_text(" ")):
                    headings.append(el)

        return headings

    def _segment_plain(self, text: str) -> list[ParsedChapter]:
        """Split text on lines that start with the chapter keyword."""
        builder = _ChapterBuilder(self._config.introduction_title, "\n")
        found_boundary = False

        for line in text.splitlines():
            if self._is_keyword_heading(line):
                found_boundary = True
                builder.start(line.strip())
            else:
                builder.append(line)
        builder.close()

        if not found_boundary:
            return []
        return builder.chapters

    def _is_keyword_heading(self, text: str) -> bool:
        return normalize_whitespace(text).casefold().startswith(self._keyword)

    def _log_result(self, title: str, strategy: str, chapters: list[ParsedChapter]) -> list[ParsedChapter]:
        if chapters:
            logger.info("Segmented %r into %d chapters (%s)", title, len(chapters), strategy)
        else:
            logger.info("No chapter headings in %r; keeping it flat", title)
        return chapters


def segment_into_chapters(
    title: str, raw_text: str, config: SegmentationConfig | None = None
) -> list[ParsedChapter]:
    """Split raw text into chapters with a one-off segmenter."""
    return ChapterSegmenter(config).segment(title, raw_text)
