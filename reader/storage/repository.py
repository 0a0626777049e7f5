"""Row-level access to books, chapters, reading progress and user totals."""

import sqlite3
from datetime import datetime, timezone

from reader.models import Book, BookListItem, Chapter, ChapterMarker, ReadingProgress


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_timestamp(value: datetime) -> str:
    """Serialize a datetime as an ISO-8601 UTC string with milliseconds."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds")


def from_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ── Users ────────────────────────────────────────────────────────────────────


def ensure_user(conn: sqlite3.Connection, user_id: int) -> None:
    conn.execute("INSERT OR IGNORE INTO users (id) VALUES (?)", (user_id,))


def get_total_reading_time(conn: sqlite3.Connection, user_id: int) -> int:
    row = conn.execute(
        "SELECT total_reading_time FROM users WHERE id = ?", (user_id,)
    ).fetchone()
    return int(row["total_reading_time"]) if row else 0


def add_reading_time(conn: sqlite3.Connection, user_id: int, seconds: int) -> None:
    conn.execute(
        "UPDATE users SET total_reading_time = total_reading_time + ? WHERE id = ?",
        (seconds, user_id),
    )


# ── Books ────────────────────────────────────────────────────────────────────


def _row_to_book(row: sqlite3.Row) -> Book:
    return Book(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        author=row["author"],
        file_path=row["file_path"],
        char_length=row["char_length"],
        is_public=bool(row["is_public"]),
        created_at=from_timestamp(row["created_at"]),
    )


def insert_book(
    conn: sqlite3.Connection,
    user_id: int,
    title: str,
    author: str | None,
    file_path: str,
    char_length: int,
    is_public: bool,
) -> Book:
    created_at = utc_now()
    cursor = conn.execute(
        "INSERT INTO books (user_id, title, author, file_path, char_length, is_public, created_at) "
        "VALUES (?, ?, ?, ?, ?, ?, ?)",
        (user_id, title, author, file_path, char_length, is_public, to_timestamp(created_at)),
    )
    return Book(
        id=cursor.lastrowid,
        user_id=user_id,
        title=title,
        author=author,
        file_path=file_path,
        char_length=char_length,
        is_public=is_public,
        created_at=created_at,
    )


def get_book(conn: sqlite3.Connection, book_id: int) -> Book | None:
    row = conn.execute("SELECT * FROM books WHERE id = ?", (book_id,)).fetchone()
    return _row_to_book(row) if row else None


def update_book(
    conn: sqlite3.Connection,
    book_id: int,
    title: str | None = None,
    author: str | None = None,
    is_public: bool | None = None,
) -> bool:
    """Update the editable metadata columns. Returns False when nothing changed."""
    updates: list[str] = []
    params: list[object] = []
    if title is not None:
        updates.append("title = ?")
        params.append(title)
    if author is not None:
        updates.append("author = ?")
        params.append(author)
    if is_public is not None:
        updates.append("is_public = ?")
        params.append(is_public)
    if not updates:
        return False

    params.append(book_id)
    conn.execute(f"UPDATE books SET {', '.join(updates)} WHERE id = ?", params)
    return True


def delete_book(conn: sqlite3.Connection, book_id: int) -> None:
    # chapters and reading_progress go with it via ON DELETE CASCADE
    conn.execute("DELETE FROM books WHERE id = ?", (book_id,))


def list_user_books(
    conn: sqlite3.Connection, user_id: int, limit: int, offset: int
) -> tuple[int, list[BookListItem]]:
    total = conn.execute(
        "SELECT COUNT(*) FROM books WHERE user_id = ?", (user_id,)
    ).fetchone()[0]
    rows = conn.execute(
        """
        SELECT b.id, b.title, b.author, b.is_public, b.created_at,
               rp.position, rp.reading_time, rp.last_read_at
        FROM books b
        LEFT JOIN reading_progress rp ON b.id = rp.book_id AND rp.user_id = ?
        WHERE b.user_id = ?
        ORDER BY rp.last_read_at IS NULL, rp.last_read_at DESC, b.created_at DESC
        LIMIT ? OFFSET ?
        """,
        (user_id, user_id, limit, offset),
    ).fetchall()
    items = [
        BookListItem(
            book_id=row["id"],
            title=row["title"],
            author=row["author"],
            is_public=bool(row["is_public"]),
            created_at=from_timestamp(row["created_at"]),
            last_read_at=from_timestamp(row["last_read_at"]),
            position=row["position"] or 0,
            reading_time=row["reading_time"] or 0,
        )
        for row in rows
    ]
    return total, items


def list_public_books(
    conn: sqlite3.Connection, limit: int, offset: int
) -> tuple[int, list[Book]]:
    total = conn.execute("SELECT COUNT(*) FROM books WHERE is_public = 1").fetchone()[0]
    rows = conn.execute(
        "SELECT * FROM books WHERE is_public = 1 ORDER BY created_at DESC LIMIT ? OFFSET ?",
        (limit, offset),
    ).fetchall()
    return total, [_row_to_book(row) for row in rows]


# ── Chapters ─────────────────────────────────────────────────────────────────


def insert_chapters(
    conn: sqlite3.Connection, book_id: int, markers: list[ChapterMarker]
) -> list[Chapter]:
    chapters: list[Chapter] = []
    for ordinal, marker in enumerate(markers):
        cursor = conn.execute(
            "INSERT INTO chapters (book_id, title, position, ordinal, number) "
            "VALUES (?, ?, ?, ?, ?)",
            (book_id, marker.title, marker.position, ordinal, marker.number),
        )
        chapters.append(
            Chapter(
                id=cursor.lastrowid,
                book_id=book_id,
                title=marker.title,
                position=marker.position,
                ordinal=ordinal,
                number=marker.number,
            )
        )
    return chapters


def list_chapters(conn: sqlite3.Connection, book_id: int) -> list[Chapter]:
    rows = conn.execute(
        "SELECT id, book_id, title, position, ordinal, number FROM chapters "
        "WHERE book_id = ? ORDER BY position",
        (book_id,),
    ).fetchall()
    return [Chapter(**dict(row)) for row in rows]


# ── Reading progress ─────────────────────────────────────────────────────────


def _row_to_progress(row: sqlite3.Row) -> ReadingProgress:
    return ReadingProgress(
        user_id=row["user_id"],
        book_id=row["book_id"],
        position=row["position"],
        reading_time=row["reading_time"],
        last_read_at=from_timestamp(row["last_read_at"]),
        last_device_id=row["last_device_id"],
    )


def get_progress(
    conn: sqlite3.Connection, user_id: int, book_id: int
) -> ReadingProgress | None:
    row = conn.execute(
        "SELECT * FROM reading_progress WHERE user_id = ? AND book_id = ?",
        (user_id, book_id),
    ).fetchone()
    return _row_to_progress(row) if row else None


def save_progress(conn: sqlite3.Connection, progress: ReadingProgress) -> None:
    """Insert or replace the progress row for ``(user_id, book_id)``."""
    conn.execute(
        """
        INSERT INTO reading_progress
            (user_id, book_id, position, reading_time, last_read_at, last_device_id)
        VALUES (?, ?, ?, ?, ?, ?)
        ON CONFLICT (user_id, book_id) DO UPDATE SET
            position = excluded.position,
            reading_time = excluded.reading_time,
            last_read_at = excluded.last_read_at,
            last_device_id = excluded.last_device_id
        """,
        (
            progress.user_id,
            progress.book_id,
            progress.position,
            progress.reading_time,
            to_timestamp(progress.last_read_at) if progress.last_read_at else None,
            progress.last_device_id,
        ),
    )
