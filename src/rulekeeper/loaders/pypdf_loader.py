"""PDF text extraction using pypdf - lightweight, pure Python."""

import logging
from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from rulekeeper.exceptions import ExtractionError
from rulekeeper.loaders.base import TextExtractor

logger = logging.getLogger(__name__)


class PyPDFExtractor(TextExtractor):
    """Extract text from PDF files using pypdf.

    Pages are joined with newlines; pages without a text layer contribute
    nothing (scanned rulebooks need OCR upstream).
    """

    SUPPORTED_EXTENSIONS = {".pdf"}

    def supports(self, path: str) -> bool:
        """Check if this extractor supports the given file."""
        return Path(path).suffix.lower() in self.SUPPORTED_EXTENSIONS

    def extract_text(self, path: str) -> str:
        """Extract the text of every page.

        Raises:
            ExtractionError: If the file is missing, unreadable or malformed.
        """
        file_path = Path(path)
        if not file_path.exists():
            raise ExtractionError(f"File not found: {path}")

        try:
            reader = PdfReader(file_path)
            pages = [page.extract_text() or "" for page in reader.pages]
        except (PyPdfError, OSError, ValueError, KeyError) as e:
            raise ExtractionError(f"Failed to extract text from PDF: {e}") from e

        logger.debug("Extracted %d pages from %s", len(pages), file_path.name)
        return "\n".join(page for page in pages if page.strip())
