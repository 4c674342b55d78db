"""Lending library entities, snapshots and the sample dataset."""

from .schemas import Author, Book, Copy, CopyStatus, LendingRecord, Loan, Member
from .snapshot import (
    LibraryData,
    SnapshotIndex,
    assemble_snapshot,
    find_dangling_references,
    find_duplicate_ids,
    reassemble,
)
from .sample import sample_library

__all__ = [
    "Author",
    "Book",
    "Copy",
    "CopyStatus",
    "LendingRecord",
    "Loan",
    "Member",
    "LibraryData",
    "SnapshotIndex",
    "assemble_snapshot",
    "find_dangling_references",
    "find_duplicate_ids",
    "reassemble",
    "sample_library",
]
