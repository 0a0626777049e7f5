"""Content window and stored-text models."""

from pydantic import BaseModel, Field


class ContentWindow(BaseModel):
    """A slice of book text and the cursor that continues it."""

    content: str
    next_position: int


class TextIndex(BaseModel):
    """Character-to-byte checkpoints for a stored UTF-8 text.

    ``byte_offsets[k]`` is the byte offset of character ``k * step``.
    """

    step: int
    char_length: int
    byte_length: int
    byte_offsets: list[int] = Field(default_factory=list)


class StoredText(BaseModel):
    """Handle returned by the text store after saving a book's text."""

    path: str
    char_length: int
