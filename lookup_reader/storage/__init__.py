"""Persistence of books, chapters and reading progress."""

from lookup_reader.storage.database import PersistenceError, get_connection, initialize_database
from lookup_reader.storage.repository import BookRepository

__all__ = ["BookRepository", "PersistenceError", "get_connection", "initialize_database"]
