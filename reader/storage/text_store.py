"""Durable storage for book text with byte-exact random access."""

import logging
from pathlib import Path
from uuid import uuid4

from reader.errors import StorageError, TextNotFound
from reader.models import StoredText, TextIndex

logger = logging.getLogger(__name__)

INDEX_SUFFIX = ".idx.json"


def build_text_index(text: str, step: int) -> TextIndex:
    """Record the UTF-8 byte offset of every ``step``-th character.

    Args:
        text: The decoded book text.
        step: Number of characters between checkpoints.

    Returns:
        A TextIndex whose first checkpoint is always byte 0.
    """
    if step < 1:
        raise ValueError(f"Checkpoint step must be positive, got {step}")

    offsets: list[int] = []
    byte_pos = 0
    for start in range(0, len(text), step):
        offsets.append(byte_pos)
        byte_pos += len(text[start:start + step].encode("utf-8"))
    if not offsets:
        offsets.append(0)

    return TextIndex(
        step=step,
        char_length=len(text),
        byte_length=byte_pos,
        byte_offsets=offsets,
    )


class TextStore:
    """Stores each book's text as a UTF-8 file plus a checkpoint index.

    Files are immutable once written and are addressed by the path returned
    from :meth:`save`.

    Args:
        books_dir: Directory holding the text files.
        checkpoint_chars: Characters between byte-offset checkpoints.
    """

    def __init__(self, books_dir: str | Path, checkpoint_chars: int = 4096) -> None:
        self._books_dir = Path(books_dir)
        self._checkpoint_chars = checkpoint_chars

    def save(self, text: str) -> StoredText:
        """Write a book's text and its checkpoint index.

        Raises:
            StorageError: If the files cannot be written.
        """
        self._books_dir.mkdir(parents=True, exist_ok=True)
        path = self._books_dir / f"{uuid4()}.txt"
        index = build_text_index(text, self._checkpoint_chars)

        try:
            path.write_bytes(text.encode("utf-8"))
            self._index_path(path).write_text(index.model_dump_json(), encoding="utf-8")
        except OSError as e:
            logger.exception("Failed to store book text: %s", path)
            self.delete(path)
            raise StorageError("Failed to store book text") from e

        logger.info("Stored %d characters at %s", index.char_length, path)
        return StoredText(path=str(path), char_length=index.char_length)

    def load_index(self, path: str | Path) -> TextIndex:
        index_path = self._index_path(Path(path))
        try:
            return TextIndex.model_validate_json(index_path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise TextNotFound(f"Text index missing: {index_path}") from e

    def read_bytes(self, path: str | Path, offset: int, size: int) -> bytes:
        """Read up to ``size`` raw bytes starting at byte ``offset``."""
        try:
            with open(path, "rb") as f:
                f.seek(offset)
                return f.read(size)
        except FileNotFoundError as e:
            raise TextNotFound(f"Book text missing: {path}") from e

    def delete(self, path: str | Path) -> None:
        """Remove a book's text and index. Missing files are ignored."""
        text_path = Path(path)
        for target in (text_path, self._index_path(text_path)):
            target.unlink(missing_ok=True)

    @staticmethod
    def _index_path(path: Path) -> Path:
        return path.with_name(path.stem + INDEX_SUFFIX)
