"""Reader: book ingestion, content windows and reading-progress sync."""
