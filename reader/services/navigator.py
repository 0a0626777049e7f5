"""Chapter jump resolution."""

import logging

from reader.errors import BookNotFound, ChapterNotFound
from reader.models import Book, Chapter
from reader.storage import repository
from reader.storage.database import Database

logger = logging.getLogger(__name__)


class ChapterIndex:
    """Id-to-position lookup over one book's chapters."""

    def __init__(self, book_id: int, chapters: list[Chapter]) -> None:
        self.book_id = book_id
        self.chapters = sorted(chapters, key=lambda c: c.position)
        self._positions = {chapter.id: chapter.position for chapter in self.chapters}

    def locate(self, chapter_id: int) -> int:
        try:
            return self._positions[chapter_id]
        except KeyError:
            raise ChapterNotFound(
                f"Chapter {chapter_id} does not belong to book {self.book_id}"
            ) from None

    def __len__(self) -> int:
        return len(self.chapters)


class ChapterNavigator:
    """Resolves chapter ids to start positions for "jump to chapter".

    Chapters never change after upload, so each book's index is built
    once and cached under the book's text path, a fresh UUID per upload.
    Every lookup re-reads the book row first, so books deleted or
    replaced by other processes are never served from the cache. Jumping
    does not touch reading progress; clients follow up with a heartbeat.

    Args:
        db: Database holding books and chapters.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._indexes: dict[str, ChapterIndex] = {}

    def locate(self, book_id: int, chapter_id: int) -> int:
        """Return the start position of a chapter.

        Raises:
            BookNotFound: If the book does not exist.
            ChapterNotFound: If the chapter is not part of the book.
        """
        return self.index_for(book_id).locate(chapter_id)

    def index_for(self, book_id: int) -> ChapterIndex:
        with self._db.connect() as conn:
            book = repository.get_book(conn, book_id)
            if book is None:
                raise BookNotFound(f"Book {book_id} does not exist")

            cached = self._indexes.get(book.file_path)
            if cached is not None:
                return cached
            index = ChapterIndex(book_id, repository.list_chapters(conn, book_id))

        logger.debug("Built chapter index for book %d (%d chapters)", book_id, len(index))
        self._indexes[book.file_path] = index
        return index

    def evict(self, book: Book) -> None:
        self._indexes.pop(book.file_path, None)
