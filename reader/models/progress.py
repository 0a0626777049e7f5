"""Reading progress data models."""

from datetime import datetime

from pydantic import BaseModel


class ReadingProgress(BaseModel):
    """Authoritative reading state for one (user, book) pair."""

    user_id: int
    book_id: int
    position: int = 0
    reading_time: int = 0  # Cumulative seconds, never decreases
    last_read_at: datetime | None = None
    last_device_id: str | None = None


class HeartbeatResult(BaseModel):
    """Outcome of reconciling one heartbeat.

    ``synced`` is False when the reporting device was stale and must
    re-anchor its view to ``position``.
    """

    synced: bool
    position: int
    reading_time: int
