"""Chapter data models."""

from pydantic import BaseModel


class ChapterMarker(BaseModel):
    """A heading detected by the chapter indexer, before it is stored."""

    title: str
    position: int  # Character offset of the heading line in the full text
    number: int | None = None  # Parsed chapter number, if the heading has one


class Chapter(BaseModel):
    """A stored chapter of a book."""

    id: int
    book_id: int
    title: str
    position: int
    ordinal: int  # 0-based rank among the book's chapters, ascending by position
    number: int | None = None
