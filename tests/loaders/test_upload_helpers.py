# tests/loaders/test_upload_helpers.py
"""Tests for upload validation and file naming."""

import re
from datetime import UTC, datetime

import pytest

from rulekeeper.exceptions import ValidationError
from rulekeeper.loaders import PDF_MAGIC, generate_pdf_filename, validate_pdf_bytes


class TestValidatePdfBytes:
    def test_accepts_pdf_magic(self):
        validate_pdf_bytes(b"%PDF-1.7\n...")
        validate_pdf_bytes(PDF_MAGIC)

    def test_empty(self):
        with pytest.raises(ValidationError, match="empty"):
            validate_pdf_bytes(b"")

    def test_too_small(self):
        with pytest.raises(ValidationError, match="too small"):
            validate_pdf_bytes(b"%PD")

    def test_wrong_magic(self):
        with pytest.raises(ValidationError, match="valid PDF"):
            validate_pdf_bytes(b"PK\x03\x04 a zip archive")


class TestGeneratePdfFilename:
    def test_format(self):
        now = datetime(2024, 3, 9, 14, 5, 7, 123456, tzinfo=UTC)

        assert generate_pdf_filename(12, now) == "game_12_20240309_140507_123456.pdf"

    def test_default_uses_current_time(self):
        name = generate_pdf_filename(3)

        assert re.fullmatch(r"game_3_\d{8}_\d{6}_\d{6}\.pdf", name)
