"""Book upload, lookup, metadata edits and deletion."""

import logging
import sqlite3

from reader.errors import BookNotFound, Forbidden, StorageError, ValidationFailed
from reader.ingestion.decoder import BookDecoder
from reader.ingestion.indexer import ChapterIndexer
from reader.models import Book, BookDetail, BookListItem, ReadingProgress, UploadResult
from reader.services.navigator import ChapterNavigator
from reader.services.progress import ProgressSynchronizer
from reader.storage import repository
from reader.storage.database import Database, transaction
from reader.storage.text_store import TextStore

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


def _page_bounds(page: int, limit: int) -> tuple[int, int]:
    if page < 1 or limit < 1:
        raise ValidationFailed("page and limit must be positive")
    limit = min(limit, MAX_PAGE_SIZE)
    return limit, (page - 1) * limit


class BookLibrary:
    """Owns the lifecycle of uploaded books.

    Upload runs decoding, chapter indexing, text storage and the database
    insert in one request; the text files are removed again if the
    insert fails, so a failed upload leaves nothing behind.
    """

    def __init__(
        self,
        db: Database,
        text_store: TextStore,
        decoder: BookDecoder,
        indexer: ChapterIndexer,
        navigator: ChapterNavigator,
        progress: ProgressSynchronizer,
    ) -> None:
        self._db = db
        self._text_store = text_store
        self._decoder = decoder
        self._indexer = indexer
        self._navigator = navigator
        self._progress = progress

    def upload(
        self,
        user_id: int,
        filename: str,
        data: bytes,
        title: str | None = None,
        author: str | None = None,
        is_public: bool = False,
    ) -> UploadResult:
        """Store a new book and index its chapters.

        Args:
            user_id: Owner of the new book.
            filename: Original file name (extension is validated).
            data: Raw file content.
            title: Book title; derived from the text when empty.
            author: Optional author.
            is_public: Whether other users may read the book.

        Returns:
            The stored book and its chapters in position order.

        Raises:
            UnsupportedFormat: If the file is not a text file.
            FileTooLarge: If the file exceeds the upload limit.
            StorageError: If the book cannot be persisted.
        """
        parsed = self._decoder.decode(data, filename, title)
        markers = self._indexer.index(parsed.raw_text)
        stored = self._text_store.save(parsed.raw_text)

        try:
            with self._db.connect() as conn, transaction(conn):
                repository.ensure_user(conn, user_id)
                book = repository.insert_book(
                    conn,
                    user_id=user_id,
                    title=parsed.title,
                    author=(author or "").strip() or None,
                    file_path=stored.path,
                    char_length=stored.char_length,
                    is_public=is_public,
                )
                chapters = repository.insert_chapters(conn, book.id, markers)
                repository.save_progress(conn, ReadingProgress(user_id=user_id, book_id=book.id))
        except sqlite3.Error as e:
            logger.exception("Failed to save uploaded book %s", filename)
            self._text_store.delete(stored.path)
            raise StorageError("Failed to save book") from e

        logger.info(
            "User %d uploaded book %d (%s): %d characters, %d chapters, encoding %s",
            user_id,
            book.id,
            book.title,
            book.char_length,
            len(chapters),
            parsed.encoding,
        )
        return UploadResult(book=book, chapters=chapters)

    def get_book(self, book_id: int) -> Book:
        with self._db.connect() as conn:
            book = repository.get_book(conn, book_id)
        if book is None:
            raise BookNotFound(f"Book {book_id} does not exist")
        return book

    def get_readable_book(self, book_id: int, user_id: int) -> Book:
        """Return the book if the user owns it or it is public.

        Raises:
            BookNotFound: If the book does not exist.
            Forbidden: If the book is private to another user.
        """
        book = self.get_book(book_id)
        if book.user_id != user_id and not book.is_public:
            raise Forbidden(f"User {user_id} may not read book {book_id}")
        return book

    def get_owned_book(self, book_id: int, user_id: int) -> Book:
        book = self.get_book(book_id)
        if book.user_id != user_id:
            raise Forbidden(f"User {user_id} does not own book {book_id}")
        return book

    def get_detail(self, book_id: int, user_id: int) -> BookDetail:
        book = self.get_readable_book(book_id, user_id)
        chapters = self._navigator.index_for(book_id).chapters
        progress = self._progress.get_progress(user_id, book_id)
        return BookDetail(book=book, chapters=chapters, progress=progress)

    def list_books(self, user_id: int, page: int = 1, limit: int = 10) -> tuple[int, list[BookListItem]]:
        """List a user's own books, most recently read first."""
        limit, offset = _page_bounds(page, limit)
        with self._db.connect() as conn:
            return repository.list_user_books(conn, user_id, limit, offset)

    def list_public_books(self, page: int = 1, limit: int = 10) -> tuple[int, list[Book]]:
        limit, offset = _page_bounds(page, limit)
        with self._db.connect() as conn:
            return repository.list_public_books(conn, limit, offset)

    def update_book(
        self,
        book_id: int,
        user_id: int,
        title: str | None = None,
        author: str | None = None,
        is_public: bool | None = None,
    ) -> Book:
        """Edit title, author or visibility. Text and chapters never change."""
        self.get_owned_book(book_id, user_id)
        if title is not None and not title.strip():
            raise ValidationFailed("title must not be empty")

        with self._db.connect() as conn, transaction(conn):
            repository.update_book(
                conn,
                book_id,
                title=title.strip() if title is not None else None,
                author=author,
                is_public=is_public,
            )
        return self.get_book(book_id)

    def delete_book(self, book_id: int, user_id: int) -> None:
        """Delete a book, its chapters, all progress on it, and its text."""
        book = self.get_owned_book(book_id, user_id)

        with self._db.connect() as conn, transaction(conn):
            repository.delete_book(conn, book_id)

        self._navigator.evict(book)
        self._text_store.delete(book.file_path)
        logger.info("User %d deleted book %d", user_id, book_id)
