"""Configuration loader for the reader service."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class AppInfo(BaseModel):
    """Application metadata."""

    name: str = "Reader"
    version: str = "1.0.0"


class ServerConfig(BaseModel):
    """HTTP server binding."""

    host: str = "127.0.0.1"
    port: int = 3000


class StorageConfig(BaseModel):
    """Storage paths configuration."""

    sqlite_path: str = "./db/reader.db"
    books_dir: str = "./data/books"
    checkpoint_chars: int = 4096


class UploadConfig(BaseModel):
    """Limits applied to uploaded book files."""

    max_bytes: int = 10 * 1024 * 1024
    allowed_extensions: list[str] = Field(default_factory=lambda: [".txt", ".md"])


class ReadingConfig(BaseModel):
    """Content window sizing, in characters."""

    default_window_length: int = 4000
    max_window_length: int = 10000


class HeartbeatConfig(BaseModel):
    """Reading-time accounting for progress heartbeats."""

    max_interval_seconds: int = 30


class LoggingConfig(BaseModel):
    """Root logger settings."""

    level: str = "INFO"


class AppConfig(BaseModel):
    """Root application configuration."""

    app: AppInfo = Field(default_factory=AppInfo)
    server: ServerConfig = Field(default_factory=ServerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    upload: UploadConfig = Field(default_factory=UploadConfig)
    reading: ReadingConfig = Field(default_factory=ReadingConfig)
    heartbeat: HeartbeatConfig = Field(default_factory=HeartbeatConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: str | Path = "config.yaml") -> AppConfig:
    """Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Fully populated AppConfig instance.
    """
    load_dotenv()

    yaml_data: dict = {}
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file) as f:
            yaml_data = yaml.safe_load(f) or {}

    config = AppConfig(**yaml_data)

    # Override storage locations from environment
    sqlite_path = os.getenv("READER_SQLITE_PATH")
    if sqlite_path:
        config.storage.sqlite_path = sqlite_path
    books_dir = os.getenv("READER_BOOKS_DIR")
    if books_dir:
        config.storage.books_dir = books_dir

    return config
