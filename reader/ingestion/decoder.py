"""Decoder for uploaded plain-text book files."""

import logging
import re
from pathlib import PurePath

import chardet

from reader.config import UploadConfig
from reader.errors import FileTooLarge, UnsupportedFormat
from reader.models.parsed import ParsedBook

logger = logging.getLogger(__name__)

# Characters that count towards a "title-like" first line
_TITLE_CHARS = re.compile(r"[\u4e00-\u9fffA-Za-z0-9]")


class BookDecoder:
    """Validates and decodes uploaded book files into text.

    Accepts plain text in UTF-8 or any encoding chardet can identify
    (GBK/GB18030 and Big5 are the common cases), and normalizes line
    endings so character offsets are stable.

    Args:
        config: UploadConfig with size and extension limits.
    """

    def __init__(self, config: UploadConfig) -> None:
        self._config = config

    def decode(self, data: bytes, filename: str, title: str | None = None) -> ParsedBook:
        """Decode an uploaded file into a ParsedBook.

        Args:
            data: Raw file content.
            filename: Client-supplied file name, used for format checks
                and as the title fallback.
            title: Explicit title; derived from the text when empty.

        Returns:
            A ParsedBook with normalized text.

        Raises:
            UnsupportedFormat: If the file extension is not allowed.
            FileTooLarge: If the file exceeds the configured limit.
        """
        self._check_format(filename)
        if len(data) > self._config.max_bytes:
            raise FileTooLarge(
                f"File is {len(data)} bytes; limit is {self._config.max_bytes}"
            )

        text, encoding = self._decode_bytes(data, filename)
        text = normalize_newlines(text)

        return ParsedBook(
            title=(title or "").strip() or self._extract_title_from_text(text, filename),
            raw_text=text,
            source_name=filename,
            encoding=encoding,
        )

    def _check_format(self, filename: str) -> None:
        ext = PurePath(filename).suffix.lower()
        if ext not in self._config.allowed_extensions:
            raise UnsupportedFormat(
                f"Unsupported file format: '{ext}'. "
                f"Supported: {', '.join(self._config.allowed_extensions)}"
            )

    def _decode_bytes(self, data: bytes, filename: str) -> tuple[str, str]:
        """Decode raw bytes, trying UTF-8 first and chardet as fallback.

        Args:
            data: Raw file content.
            filename: Used in log messages only.

        Returns:
            The decoded text and the encoding that produced it.
        """
        # utf-8-sig strips a leading BOM
        try:
            return data.decode("utf-8-sig"), "utf-8"
        except UnicodeDecodeError:
            pass

        detected = chardet.detect(data)
        encoding = detected.get("encoding") or "gb18030"
        confidence = detected.get("confidence") or 0

        if confidence < 0.7:
            logger.warning(
                "Low confidence encoding detection for %s: %s (%.0f%%)",
                filename,
                encoding,
                confidence * 100,
            )

        try:
            return data.decode(encoding), encoding
        except (UnicodeDecodeError, LookupError):
            # Last resort: GB18030 covers every GBK/GB2312 text
            try:
                return data.decode("gb18030"), "gb18030"
            except UnicodeDecodeError:
                logger.error("Failed to decode file: %s", filename)
                return data.decode("utf-8", errors="replace"), "utf-8"

    def _extract_title_from_text(self, text: str, filename: str) -> str:
        """Use the first short, mostly-letter line as the title.

        Falls back to the file name without its extension.
        """
        for line in text.strip().split("\n")[:5]:
            stripped = line.strip()
            if stripped and len(stripped) <= 100:
                letters = len(_TITLE_CHARS.findall(stripped))
                if letters / len(stripped) > 0.5:
                    return stripped

        return PurePath(filename).stem


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")
