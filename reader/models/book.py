"""Book data models."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from reader.models.chapter import Chapter
from reader.models.progress import ReadingProgress


class Book(BaseModel):
    """An uploaded plain-text book."""

    id: int
    user_id: int
    title: str
    author: str | None = None
    file_path: str
    char_length: int = 0
    is_public: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class BookListItem(BaseModel):
    """A book as shown in a user's shelf, joined with their progress."""

    book_id: int
    title: str
    author: str | None = None
    is_public: bool = False
    created_at: datetime
    last_read_at: datetime | None = None
    position: int = 0
    reading_time: int = 0


class BookDetail(BaseModel):
    """A book with its chapter list and the caller's reading progress."""

    book: Book
    chapters: list[Chapter] = Field(default_factory=list)
    progress: ReadingProgress


class UploadResult(BaseModel):
    """The stored book and the chapters detected during upload."""

    book: Book
    chapters: list[Chapter] = Field(default_factory=list)
