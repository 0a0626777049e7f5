"""Shared fixtures for the reader tests."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from reader.config import AppConfig
from reader.container import Services, build_services
from reader.models import Book

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "sample_texts"


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    config = AppConfig()
    config.storage.sqlite_path = str(tmp_path / "db" / "reader.db")
    config.storage.books_dir = str(tmp_path / "books")
    # Small step so tests cross several checkpoints
    config.storage.checkpoint_chars = 16
    return config


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def services(app_config: AppConfig, clock: FakeClock) -> Services:
    return build_services(app_config, clock=clock)


@pytest.fixture
def upload_text(services: Services):
    """Upload a UTF-8 text for a user and return the stored book."""

    def _upload(text: str, user_id: int = 1, is_public: bool = False, title: str = "Book") -> Book:
        result = services.library.upload(
            user_id=user_id,
            filename="book.txt",
            data=text.encode("utf-8"),
            title=title,
            is_public=is_public,
        )
        return result.book

    return _upload
