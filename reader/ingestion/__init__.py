"""Book ingestion: decoding uploads and indexing chapters."""

from reader.ingestion.decoder import BookDecoder
from reader.ingestion.indexer import DEFAULT_HEADING_RULES, ChapterIndexer, HeadingRule

__all__ = ["BookDecoder", "ChapterIndexer", "DEFAULT_HEADING_RULES", "HeadingRule"]
