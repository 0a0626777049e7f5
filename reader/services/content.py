"""Position-addressed content windows over stored book text."""

import codecs
import logging
from functools import lru_cache

from reader.config import ReadingConfig
from reader.errors import InvalidRange, StorageError
from reader.models import Book, ContentWindow
from reader.storage.text_store import TextStore

logger = logging.getLogger(__name__)

# Upper bound on UTF-8 bytes per character
_MAX_UTF8_WIDTH = 4


class ContentWindowService:
    """Serves slices of a book's text addressed by character position.

    Reads start from the nearest byte checkpoint at or before the
    requested position, so a window costs I/O proportional to its size
    rather than to the book's. Reads never write anything.

    Args:
        text_store: Store holding the book text and checkpoint indexes.
        config: Default and maximum window lengths.
    """

    def __init__(self, text_store: TextStore, config: ReadingConfig) -> None:
        self._text_store = text_store
        self._config = config
        self._load_index = lru_cache(maxsize=256)(text_store.load_index)

    def read(self, book: Book, position: int, length: int | None = None) -> ContentWindow:
        """Return up to ``length`` characters starting at ``position``.

        Args:
            book: The book to read from.
            position: Character offset, ``0 <= position <= book.char_length``.
            length: Characters requested; defaults to the configured window
                and is capped at the configured maximum.

        Returns:
            The content and ``next_position = position + len(content)``.
            At the end of the book the content is empty and the cursor
            does not move.

        Raises:
            InvalidRange: If position is outside the book or length < 1.
        """
        if position < 0 or position > book.char_length:
            raise InvalidRange(
                f"Position {position} is outside the book (0..{book.char_length})"
            )
        if length is None:
            length = self._config.default_window_length
        if length < 1:
            raise InvalidRange(f"Length must be positive, got {length}")
        length = min(length, self._config.max_window_length)

        if position == book.char_length:
            return ContentWindow(content="", next_position=position)

        index = self._load_index(book.file_path)
        checkpoint = position // index.step
        skip = position - checkpoint * index.step
        byte_start = index.byte_offsets[checkpoint]

        raw = self._text_store.read_bytes(
            book.file_path, byte_start, (skip + length) * _MAX_UTF8_WIDTH
        )
        text = _decode_complete(raw, book.file_path)

        content = text[skip:skip + length]
        return ContentWindow(content=content, next_position=position + len(content))


def _decode_complete(raw: bytes, path: str) -> str:
    """Decode UTF-8 bytes, dropping a trailing incomplete character."""
    decoder = codecs.getincrementaldecoder("utf-8")()
    try:
        # final=False keeps a cut-off multi-byte sequence buffered instead of
        # emitting it, so the result ends on a character boundary.
        return decoder.decode(raw, final=False)
    except UnicodeDecodeError as e:
        logger.error("Stored text is not valid UTF-8: %s", path)
        raise StorageError("Stored book text is corrupt") from e
