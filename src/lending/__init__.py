"""Lending library data model: authors, books, copies, members and loans."""

__version__ = "0.1.0"
