"""Reader services: content windows, progress sync, navigation, library."""

from reader.services.content import ContentWindowService
from reader.services.library import BookLibrary
from reader.services.navigator import ChapterIndex, ChapterNavigator
from reader.services.progress import ProgressSynchronizer

__all__ = [
    "BookLibrary",
    "ChapterIndex",
    "ChapterNavigator",
    "ContentWindowService",
    "ProgressSynchronizer",
]
