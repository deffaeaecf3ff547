"""Book file reader supporting plain text and HTML, classifying other formats."""

import logging
from pathlib import Path

import chardet

from lookup_reader.models.book import BookFileType
from lookup_reader.models.parsed import ParsedBook

logger = logging.getLogger(__name__)

# Extensions whose text is read and segmented
TEXT_FORMATS: dict[str, bool] = {
    ".txt": False,
    ".md": False,
    ".html": True,
    ".htm": True,
    ".xhtml": True,
}

# Extensions handed to external viewers as files
EXTERNAL_FORMATS: dict[str, BookFileType] = {
    ".pdf": BookFileType.PDF,
    ".epub": BookFileType.EPUB,
    ".docx": BookFileType.DOCX,
}


class BookParser:
    """Reads book files into a ParsedBook.

    Text and HTML files are decoded into ``raw_text`` (markup kept for the
    segmenter). PDF, EPUB, DOCX and unknown files are only classified;
    their content is rendered elsewhere.
    """

    def parse(self, file_path: str | Path) -> ParsedBook:
        """Read a book file.

        Args:
            file_path: Path to the book file.

        Returns:
            A ParsedBook with the decoded text (empty for external formats).

        Raises:
            FileNotFoundError: If file_path does not exist.
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        file_type = self._detect_format(path)
        ext = path.suffix.lower()
        raw_text = self._read_text(path) if file_type is BookFileType.TXT else ""

        return ParsedBook(
            title=path.stem,
            raw_text=raw_text,
            source_path=str(path),
            file_type=file_type,
            is_markup=TEXT_FORMATS.get(ext, False),
        )

    def _detect_format(self, file_path: Path) -> BookFileType:
        """Classify a file by extension.

        Args:
            file_path: Path to the file.

        Returns:
            TXT for readable text formats, the matching external type
            otherwise, UNKNOWN for anything unrecognized.
        """
        ext = file_path.suffix.lower()
        if ext in TEXT_FORMATS:
            return BookFileType.TXT
        if ext in EXTERNAL_FORMATS:
            return EXTERNAL_FORMATS[ext]
        logger.warning("Unrecognized book format %r for %s", ext, file_path)
        return BookFileType.UNKNOWN

    def _read_text(self, file_path: Path) -> str:
        """Read a text or HTML file with encoding detection.

        Tries UTF-8 first, then uses chardet for fallback detection.

        Args:
            file_path: Path to the text file.

        Returns:
            The file content as a string.
        """
        # Try UTF-8 first
        try:
            return file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            pass

        # Fallback to encoding detection
        raw_bytes = file_path.read_bytes()
        detected = chardet.detect(raw_bytes)
        encoding = detected.get("encoding") or "utf-8"
        confidence = detected.get("confidence", 0)

        if confidence < 0.7:
            logger.warning(
                "Low confidence encoding detection for %s: %s (%.0f%%)",
                file_path,
                encoding,
                confidence * 100,
            )

        try:
            return raw_bytes.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            logger.error("Failed to decode %s as %s; replacing invalid bytes", file_path, encoding)
            return raw_bytes.decode("utf-8", errors="replace")
