"""Reading: text measurement, pagination and reading positions."""

from lookup_reader.reading.measure import (
    EstimatedTextMeasurer,
    PillowTextMeasurer,
    TextMeasurer,
    build_measurer,
)
from lookup_reader.reading.paginator import Paginator, PaginationTicket, paginate
from lookup_reader.reading.position import ProgressStore, ReadingPositionTracker
from lookup_reader.reading.session import ReaderSession

__all__ = [
    "EstimatedTextMeasurer",
    "PaginationTicket",
    "Paginator",
    "PillowTextMeasurer",
    "ProgressStore",
    "ReaderSession",
    "ReadingPositionTracker",
    "TextMeasurer",
    "build_measurer",
    "paginate",
]
