"""Decoded upload model for the ingestion pipeline."""

from pydantic import BaseModel


class ParsedBook(BaseModel):
    """The result of decoding an uploaded text file.

    ``raw_text`` has its line endings normalized to ``\\n``; chapter
    positions and content windows are both computed against it.
    """

    title: str
    raw_text: str
    source_name: str
    encoding: str = "utf-8"
