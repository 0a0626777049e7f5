"""Request and response bodies for the HTTP API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from reader.models import Book, Chapter


def success(data: Any = None, message: str = "success") -> dict[str, Any]:
    """Wrap a payload in the ``{code, message, data}`` envelope."""
    body: dict[str, Any] = {"code": 0, "message": message}
    if data is not None:
        body["data"] = data.model_dump(mode="json") if isinstance(data, BaseModel) else data
    return body


class ChapterOut(BaseModel):
    chapter_id: int
    title: str
    position: int
    number: int | None = None

    @classmethod
    def from_chapter(cls, chapter: Chapter) -> "ChapterOut":
        return cls(
            chapter_id=chapter.id,
            title=chapter.title,
            position=chapter.position,
            number=chapter.number,
        )


class UploadOut(BaseModel):
    book_id: int
    title: str
    author: str | None = None
    chapters: list[ChapterOut] = Field(default_factory=list)


class BookOut(BaseModel):
    book_id: int
    title: str
    author: str | None = None
    is_public: bool
    created_at: datetime

    @classmethod
    def from_book(cls, book: Book) -> "BookOut":
        return cls(
            book_id=book.id,
            title=book.title,
            author=book.author,
            is_public=book.is_public,
            created_at=book.created_at,
        )


class BookDetailOut(BookOut):
    length: int
    last_read_at: datetime | None = None
    position: int = 0
    reading_time: int = 0
    chapters: list[ChapterOut] = Field(default_factory=list)


class UpdateBookIn(BaseModel):
    title: str | None = None
    author: str | None = None
    is_public: bool | None = None


class HeartbeatIn(BaseModel):
    book_id: int
    position: int
    device_id: str = Field(min_length=1, max_length=128)
