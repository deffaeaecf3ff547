"""Book import: reading files and segmenting them into chapters."""

from lookup_reader.ingestion.importer import BookImporter
from lookup_reader.ingestion.parser import BookParser
from lookup_reader.ingestion.segmenter import ChapterSegmenter, segment_into_chapters

__all__ = ["BookImporter", "BookParser", "ChapterSegmenter", "segment_into_chapters"]
