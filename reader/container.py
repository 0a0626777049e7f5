"""Builds the reader services from configuration."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from reader.config import AppConfig
from reader.ingestion.decoder import BookDecoder
from reader.ingestion.indexer import ChapterIndexer
from reader.services.content import ContentWindowService
from reader.services.library import BookLibrary
from reader.services.navigator import ChapterNavigator
from reader.services.progress import ProgressSynchronizer
from reader.storage import repository
from reader.storage.database import Database
from reader.storage.text_store import TextStore


@dataclass
class Services:
    config: AppConfig
    db: Database
    text_store: TextStore
    content: ContentWindowService
    progress: ProgressSynchronizer
    navigator: ChapterNavigator
    library: BookLibrary


def build_services(
    config: AppConfig, clock: Callable[[], datetime] = repository.utc_now
) -> Services:
    """Create the database schema if needed and wire every service."""
    db = Database(config.storage.sqlite_path)
    db.initialize()

    text_store = TextStore(config.storage.books_dir, config.storage.checkpoint_chars)
    navigator = ChapterNavigator(db)
    progress = ProgressSynchronizer(db, config.heartbeat, clock=clock)
    library = BookLibrary(
        db=db,
        text_store=text_store,
        decoder=BookDecoder(config.upload),
        indexer=ChapterIndexer(),
        navigator=navigator,
        progress=progress,
    )
    return Services(
        config=config,
        db=db,
        text_store=text_store,
        content=ContentWindowService(text_store, config.reading),
        progress=progress,
        navigator=navigator,
        library=library,
    )
