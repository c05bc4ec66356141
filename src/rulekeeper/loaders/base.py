"""Text extractor abstract base class and upload helpers."""

from abc import ABC, abstractmethod
from datetime import UTC, datetime

from rulekeeper.exceptions import ValidationError

PDF_MAGIC = b"%PDF"


class TextExtractor(ABC):
    """Abstract base class for turning a stored document into raw text."""

    @abstractmethod
    def extract_text(self, path: str) -> str:
        """Extract the document's text.

        Raises:
            ExtractionError: If the file is unreadable or malformed.
        """
        ...

    @abstractmethod
    def supports(self, path: str) -> bool:
        """Check if this extractor supports the given path."""
        ...


def validate_pdf_bytes(data: bytes) -> None:
    """Reject uploads that are empty or do not start with the PDF magic number.

    Raises:
        ValidationError: If the bytes cannot be a PDF document.
    """
    if not data:
        raise ValidationError("Uploaded file is empty")
    if len(data) < len(PDF_MAGIC):
        raise ValidationError("File too small to be a valid PDF")
    if data[: len(PDF_MAGIC)] != PDF_MAGIC:
        raise ValidationError("File does not appear to be a valid PDF")


def generate_pdf_filename(game_id: int, now: datetime | None = None) -> str:
    """Build the on-disk name for an uploaded rules PDF.

    The caller's filename is never used on disk; it is only kept as metadata.
    Microseconds keep two uploads in the same second from colliding.
    """
    timestamp = (now or datetime.now(UTC)).strftime("%Y%m%d_%H%M%S_%f")
    return f"game_{game_id}_{timestamp}.pdf"
