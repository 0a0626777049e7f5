"""Tests for the upload decoder."""

from pathlib import Path
from unittest.mock import patch

import pytest

from reader.config import UploadConfig
from reader.errors import FileTooLarge, UnsupportedFormat
from reader.ingestion.decoder import BookDecoder, normalize_newlines

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "sample_texts"


@pytest.fixture
def decoder() -> BookDecoder:
    return BookDecoder(UploadConfig())


class TestDecodeText:
    """Tests for plain text decoding."""

    def test_decode_utf8(self, decoder: BookDecoder) -> None:
        result = decoder.decode("第一章 风起\n春风吹过".encode("utf-8"), "book.txt")
        assert result.raw_text == "第一章 风起\n春风吹过"
        assert result.encoding == "utf-8"

    def test_utf8_bom_is_stripped(self, decoder: BookDecoder) -> None:
        result = decoder.decode("\ufeff正文".encode("utf-8"), "book.txt")
        assert result.raw_text == "正文"

    def test_decode_gbk(self, decoder: BookDecoder) -> None:
        text = "第一章 风起\n" + "春风吹过柳梢，镇上的茶馆里坐满了人。" * 20
        result = decoder.decode(text.encode("gbk"), "book.txt")
        assert result.raw_text == text

    def test_undetectable_encoding_falls_back_to_gb18030(self, decoder: BookDecoder) -> None:
        data = "天色未明".encode("gb18030")
        with patch("reader.ingestion.decoder.chardet.detect", return_value={"encoding": None}):
            result = decoder.decode(data, "book.txt")
        assert result.raw_text == "天色未明"
        assert result.encoding == "gb18030"

    def test_low_confidence_logs_warning(
        self, decoder: BookDecoder, caplog: pytest.LogCaptureFixture
    ) -> None:
        data = "天色未明".encode("gb18030")
        with patch(
            "reader.ingestion.decoder.chardet.detect",
            return_value={"encoding": "gb18030", "confidence": 0.3},
        ):
            decoder.decode(data, "book.txt")
        assert "Low confidence encoding detection" in caplog.text

    def test_crlf_normalized(self, decoder: BookDecoder) -> None:
        result = decoder.decode(b"Chapter 1\r\nText\rMore", "book.txt")
        assert result.raw_text == "Chapter 1\nText\nMore"

    def test_empty_file(self, decoder: BookDecoder) -> None:
        result = decoder.decode(b"", "empty.txt")
        assert result.raw_text == ""
        assert result.title == "empty"

    def test_fixture_chinese_novel(self, decoder: BookDecoder) -> None:
        data = (FIXTURES_DIR / "sample_chinese_novel.txt").read_bytes()
        result = decoder.decode(data, "sample_chinese_novel.txt")
        assert "第一章 风起" in result.raw_text
        assert result.title == "山河故人"


class TestValidation:
    def test_markdown_accepted(self, decoder: BookDecoder) -> None:
        assert decoder.decode(b"text", "notes.md").raw_text == "text"

    def test_extension_case_insensitive(self, decoder: BookDecoder) -> None:
        assert decoder.decode(b"text", "BOOK.TXT").raw_text == "text"

    def test_unsupported_extension_raises(self, decoder: BookDecoder) -> None:
        with pytest.raises(UnsupportedFormat, match="Unsupported file format"):
            decoder.decode(b"%PDF-1.4", "book.pdf")

    def test_missing_extension_raises(self, decoder: BookDecoder) -> None:
        with pytest.raises(UnsupportedFormat):
            decoder.decode(b"text", "book")

    def test_too_large_raises(self) -> None:
        decoder = BookDecoder(UploadConfig(max_bytes=10))
        with pytest.raises(FileTooLarge):
            decoder.decode(b"x" * 11, "book.txt")

    def test_size_limit_is_inclusive(self) -> None:
        decoder = BookDecoder(UploadConfig(max_bytes=10))
        assert decoder.decode(b"x" * 10, "book.txt").raw_text == "x" * 10


class TestExtractTitle:
    """Tests for title extraction."""

    def test_explicit_title_wins(self, decoder: BookDecoder) -> None:
        result = decoder.decode("山河故人\n正文".encode("utf-8"), "book.txt", title="  My Title ")
        assert result.title == "My Title"

    def test_title_from_first_line(self, decoder: BookDecoder) -> None:
        result = decoder.decode("山河故人\n第一章".encode("utf-8"), "book.txt")
        assert result.title == "山河故人"

    def test_title_fallback_to_filename(self, decoder: BookDecoder) -> None:
        result = decoder.decode("……\n——".encode("utf-8"), "my_book.txt")
        assert result.title == "my_book"


def test_normalize_newlines() -> None:
    assert normalize_newlines("a\r\nb\rc\n") == "a\nb\nc\n"
