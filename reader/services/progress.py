"""Multi-device reading progress synchronization."""

import logging
from collections.abc import Callable
from datetime import datetime

from reader.config import HeartbeatConfig
from reader.errors import BookNotFound, InvalidRange, ValidationFailed
from reader.models import HeartbeatResult, ReadingProgress
from reader.storage import repository
from reader.storage.database import Database, db_retry, transaction

logger = logging.getLogger(__name__)


def elapsed_seconds(last_read_at: datetime | None, now: datetime, max_interval: int) -> int:
    """Whole seconds since the last heartbeat, clamped to ``[0, max_interval]``."""
    if last_read_at is None:
        return 0
    seconds = int((now - last_read_at).total_seconds())
    return max(0, min(seconds, max_interval))


def reconcile_heartbeat(
    current: ReadingProgress | None,
    user_id: int,
    book_id: int,
    device_id: str,
    reported_position: int,
    now: datetime,
    max_interval: int,
) -> tuple[ReadingProgress, HeartbeatResult, int]:
    """Apply one heartbeat to the stored progress record.

    A heartbeat from the device that wrote last continues its session:
    the elapsed time is credited and the reported position is accepted.
    A heartbeat from any other device opens a new session: no time is
    credited, and the reported position is accepted only if it equals the
    stored one; otherwise the device is stale and must re-anchor.

    Args:
        current: The stored record, or None if there is none yet.
        user_id: Reading user.
        book_id: Book being read.
        device_id: Opaque id of the reporting device.
        reported_position: Position the device is showing.
        now: Time the heartbeat is processed.
        max_interval: Ceiling for the time credited by a single heartbeat.

    Returns:
        The updated record, the result for the caller, and the number of
        seconds credited.
    """
    # A record that no device has written yet (created at upload or by a
    # progress lookup) behaves like a missing one.
    if current is None or current.last_device_id is None:
        reading_time = current.reading_time if current else 0
        updated = ReadingProgress(
            user_id=user_id,
            book_id=book_id,
            position=reported_position,
            reading_time=reading_time,
            last_read_at=now,
            last_device_id=device_id,
        )
        return updated, HeartbeatResult(
            synced=True, position=reported_position, reading_time=reading_time
        ), 0

    if device_id == current.last_device_id:
        credited = elapsed_seconds(current.last_read_at, now, max_interval)
        position = reported_position
        synced = True
    else:
        credited = 0
        synced = reported_position == current.position
        position = current.position

    updated = current.model_copy(
        update={
            "position": position,
            "reading_time": current.reading_time + credited,
            "last_read_at": now,
            "last_device_id": device_id,
        }
    )
    result = HeartbeatResult(synced=synced, position=position, reading_time=updated.reading_time)
    return updated, result, credited


class ProgressSynchronizer:
    """Reconciles heartbeats into one authoritative record per (user, book).

    Every heartbeat is a read-modify-write under ``BEGIN IMMEDIATE``, which
    serializes concurrent heartbeats on the same database, across threads
    and processes alike. Either the progress row and the user's total are
    both updated, or neither is.

    Args:
        db: Database holding books and progress.
        config: Heartbeat accounting settings.
        clock: Returns the current UTC time.
    """

    def __init__(
        self,
        db: Database,
        config: HeartbeatConfig,
        clock: Callable[[], datetime] = repository.utc_now,
    ) -> None:
        self._db = db
        self._config = config
        self._clock = clock

    @db_retry()
    def heartbeat(
        self, user_id: int, book_id: int, device_id: str, reported_position: int
    ) -> HeartbeatResult:
        """Record a heartbeat and return the authoritative position.

        Raises:
            BookNotFound: If the book does not exist.
            InvalidRange: If the reported position lies outside the book.
            ValidationFailed: If the device id is empty.
        """
        if not device_id:
            raise ValidationFailed("device_id must not be empty")

        with self._db.connect() as conn, transaction(conn, immediate=True):
            book = repository.get_book(conn, book_id)
            if book is None:
                raise BookNotFound(f"Book {book_id} does not exist")
            if not 0 <= reported_position <= book.char_length:
                raise InvalidRange(
                    f"Position {reported_position} is outside the book (0..{book.char_length})"
                )

            repository.ensure_user(conn, user_id)
            current = repository.get_progress(conn, user_id, book_id)
            updated, result, credited = reconcile_heartbeat(
                current=current,
                user_id=user_id,
                book_id=book_id,
                device_id=device_id,
                reported_position=reported_position,
                now=self._clock(),
                max_interval=self._config.max_interval_seconds,
            )
            repository.save_progress(conn, updated)
            if credited:
                repository.add_reading_time(conn, user_id, credited)

        if not result.synced:
            logger.info(
                "Device %s is stale for user %d book %d: reported %d, kept %d",
                device_id,
                user_id,
                book_id,
                reported_position,
                result.position,
            )
        return result

    @db_retry()
    def get_progress(self, user_id: int, book_id: int) -> ReadingProgress:
        """Return the user's progress on a book, creating an empty record if needed.

        Raises:
            BookNotFound: If the book does not exist.
        """
        with self._db.connect() as conn:
            if repository.get_book(conn, book_id) is None:
                raise BookNotFound(f"Book {book_id} does not exist")
            progress = repository.get_progress(conn, user_id, book_id)
            if progress is not None:
                return progress

            # Re-check under the write lock; a heartbeat may have created it
            with transaction(conn, immediate=True):
                if repository.get_book(conn, book_id) is None:
                    raise BookNotFound(f"Book {book_id} does not exist")
                progress = repository.get_progress(conn, user_id, book_id)
                if progress is None:
                    repository.ensure_user(conn, user_id)
                    progress = ReadingProgress(user_id=user_id, book_id=book_id)
                    repository.save_progress(conn, progress)
                return progress

    def total_reading_time(self, user_id: int) -> int:
        with self._db.connect() as conn:
            return repository.get_total_reading_time(conn, user_id)
