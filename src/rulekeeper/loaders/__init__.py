"""Document text extraction for Rulekeeper."""

from rulekeeper.loaders.base import (
    PDF_MAGIC,
    TextExtractor,
    generate_pdf_filename,
    validate_pdf_bytes,
)
from rulekeeper.loaders.pypdf_loader import PyPDFExtractor

__all__ = [
    "TextExtractor",
    "PyPDFExtractor",
    "PDF_MAGIC",
    "validate_pdf_bytes",
    "generate_pdf_filename",
]
