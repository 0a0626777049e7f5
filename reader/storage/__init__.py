"""Persistence: SQLite tables and the book text store."""
