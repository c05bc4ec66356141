# tests/loaders/test_pypdf_extractor.py
"""Tests for PyPDFExtractor."""

import os
from unittest.mock import MagicMock, patch

import pytest
from pypdf import PdfWriter
from pypdf.errors import PdfReadError

from rulekeeper.exceptions import ExtractionError
from rulekeeper.loaders import PyPDFExtractor, TextExtractor


@pytest.fixture
def blank_pdf(temp_dir):
    """A valid one-page PDF without a text layer."""
    pdf_path = os.path.join(temp_dir, "blank.pdf")
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    with open(pdf_path, "wb") as f:
        writer.write(f)
    return pdf_path


def mock_reader(*page_texts: str | None) -> MagicMock:
    pages = []
    for text in page_texts:
        page = MagicMock()
        page.extract_text.return_value = text
        pages.append(page)
    reader = MagicMock()
    reader.pages = pages
    return reader


class TestPyPDFExtractor:
    def test_is_extractor(self):
        assert isinstance(PyPDFExtractor(), TextExtractor)

    def test_supports_pdf(self):
        extractor = PyPDFExtractor()
        assert extractor.supports("rules.pdf")
        assert extractor.supports("RULES.PDF")
        assert not extractor.supports("rules.txt")

    def test_missing_file(self, temp_dir):
        with pytest.raises(ExtractionError, match="File not found"):
            PyPDFExtractor().extract_text(os.path.join(temp_dir, "missing.pdf"))

    def test_blank_page_yields_no_text(self, blank_pdf):
        assert PyPDFExtractor().extract_text(blank_pdf).strip() == ""

    def test_joins_pages_and_skips_empty(self, blank_pdf):
        reader = mock_reader("Setup rules.", "", None, "Scoring rules.")
        with patch("rulekeeper.loaders.pypdf_loader.PdfReader", return_value=reader):
            text = PyPDFExtractor().extract_text(blank_pdf)

        assert text == "Setup rules.\nScoring rules."

    def test_malformed_pdf(self, blank_pdf):
        with patch(
            "rulekeeper.loaders.pypdf_loader.PdfReader",
            side_effect=PdfReadError("EOF marker not found"),
        ):
            with pytest.raises(ExtractionError, match="EOF marker not found"):
                PyPDFExtractor().extract_text(blank_pdf)

    def test_garbage_file(self, temp_dir):
        path = os.path.join(temp_dir, "garbage.pdf")
        with open(path, "wb") as f:
            f.write(b"%PDF-1.4\nthis is not really a pdf")

        with pytest.raises(ExtractionError):
            PyPDFExtractor().extract_text(path)
