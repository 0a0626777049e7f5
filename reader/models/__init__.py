"""Data models for the reader service."""

from reader.models.book import Book, BookDetail, BookListItem, UploadResult
from reader.models.chapter import Chapter, ChapterMarker
from reader.models.content import ContentWindow, StoredText, TextIndex
from reader.models.parsed import ParsedBook
from reader.models.progress import HeartbeatResult, ReadingProgress

__all__ = [
    "Book",
    "BookDetail",
    "BookListItem",
    "Chapter",
    "ChapterMarker",
    "ContentWindow",
    "HeartbeatResult",
    "ParsedBook",
    "ReadingProgress",
    "StoredText",
    "TextIndex",
    "UploadResult",
]
