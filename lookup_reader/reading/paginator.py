"""Greedy, measurement-driven pagination of chapter text."""

import logging
import threading
from collections.abc import Callable
from functools import partial

from pydantic import BaseModel, ConfigDict

from lookup_reader.config import PaginationConfig
from lookup_reader.models.rendering import ContainerSize, FontFamily, RenderContext
from lookup_reader.reading.measure import EstimatedTextMeasurer, TextMeasurer, build_measurer

logger = logging.getLogger(__name__)

DEFAULT_PADDING = 16.0


def paginate(
    body_text: str,
    font_size: float,
    container_size: ContainerSize,
    padding: float = DEFAULT_PADDING,
    measure: TextMeasurer | None = None,
) -> list[str]:
    """Split text into pages that fit the container.

    Line breaks are reflowed: the text is split on whitespace and tokens
    are packed greedily, joined by single spaces. After each token the
    candidate page is measured at the usable width; when it grows taller
    than the usable height, the token that overflowed starts the next page.
    A token that overflows an empty page is emitted as its own page.

    Args:
        body_text: Chapter (or whole book) text.
        font_size: Font size in points.
        container_size: Size of the page area.
        padding: Padding applied on each side of the container.
        measure: Height measurement function. Defaults to the estimating
            measurer for the system font.

    Returns:
        Page strings in reading order. Empty when the text has no tokens.
    """
    measure = measure or EstimatedTextMeasurer()
    tokens = body_text.split()
    if not tokens:
        return []

    usable_width = container_size.width - 2 * padding
    usable_height = container_size.height - 2 * padding
    if usable_width <= 0 or usable_height <= 0:
        logger.warning(
            "Container %.0fx%.0f leaves no room after %.0f padding; one token per page",
            container_size.width,
            container_size.height,
            padding,
        )

    pages: list[str] = []
    current = ""

    for token in tokens:
        candidate = f"{current} {token}" if current else token
        if measure(candidate, font_size, usable_width) <= usable_height:
            current = candidate
            continue
        if current:
            pages.append(current)
        else:
            logger.debug("Token of %d chars exceeds page height on its own", len(token))
        current = token

    if current:
        pages.append(current)

    return pages


class PaginationTicket(BaseModel):
    """Snapshot of the paginator state a pagination run was started with."""

    model_config = ConfigDict(frozen=True)

    generation: int
    context: RenderContext


class Paginator:
    """Paginates texts for the reader's current rendering context.

    Page lists are cached per text and dropped all at once whenever the
    context changes. Each context change bumps a generation counter; a
    run started under an older generation is discarded instead of
    applied, so the last context set always wins.

    Args:
        context: Initial rendering context.
        measurer_factory: Builds the measurer for a font family.
    """

    def __init__(
        self,
        context: RenderContext,
        measurer_factory: Callable[[FontFamily], TextMeasurer] | None = None,
    ) -> None:
        self._measurer_factory = measurer_factory or EstimatedTextMeasurer
        self._lock = threading.Lock()
        self._context = context
        self._generation = 0
        self._cache: dict[str, list[str]] = {}
        # Measurers hold per-size font caches; one per family, across contexts
        self._measurers: dict[FontFamily, TextMeasurer] = {}

    @classmethod
    def from_config(cls, config: PaginationConfig, container: ContainerSize) -> "Paginator":
        """Build a paginator with the configured font settings."""
        context = RenderContext(
            font_size=min(max(config.font_size, config.min_font_size), config.max_font_size),
            container=container,
            padding=config.padding,
            font_family=config.font_family,
        )
        return cls(context, measurer_factory=partial(build_measurer, config))

    @property
    def context(self) -> RenderContext:
        return self._context

    @property
    def generation(self) -> int:
        return self._generation

    def update_context(self, context: RenderContext) -> bool:
        """Switch to a new rendering context.

        Returns:
            True if the context changed and cached pages were dropped.
        """
        with self._lock:
            if context == self._context:
                return False
            logger.debug(
                "Rendering context changed (font %.1f -> %.1f, %s); dropping %d cached page lists",
                self._context.font_size,
                context.font_size,
                context.font_family.value,
                len(self._cache),
            )
            self._context = context
            self._generation += 1
            self._cache.clear()
            return True

    def ticket(self) -> PaginationTicket:
        with self._lock:
            return PaginationTicket(generation=self._generation, context=self._context)

    def is_current(self, ticket: PaginationTicket) -> bool:
        with self._lock:
            return ticket.generation == self._generation

    def pages_for(self, text: str) -> list[str]:
        """Return the pages of ``text`` under the current context."""
        pages = self.paginate_ticket(text, self.ticket())
        # Only a concurrent context change makes the run stale; redo it
        while pages is None:
            pages = self.paginate_ticket(text, self.ticket())
        return pages

    def paginate_ticket(self, text: str, ticket: PaginationTicket) -> list[str] | None:
        """Paginate ``text`` under the ticket's context.

        Returns:
            The pages, or None if the context changed before the run
            finished and the result must not be applied.
        """
        with self._lock:
            if ticket.generation == self._generation and text in self._cache:
                return list(self._cache[text])

        context = ticket.context
        pages = paginate(
            text,
            context.font_size,
            context.container,
            padding=context.padding,
            measure=self._measurer_for(context.font_family),
        )

        with self._lock:
            if ticket.generation != self._generation:
                logger.debug("Discarding pagination run of generation %d", ticket.generation)
                return None
            self._cache[text] = pages
        return list(pages)

    def _measurer_for(self, family: FontFamily) -> TextMeasurer:
        with self._lock:
            if family not in self._measurers:
                self._measurers[family] = self._measurer_factory(family)
            return self._measurers[family]

    def invalidate(self) -> None:
        """Drop every cached page list without changing the context."""
        with self._lock:
            self._cache.clear()
