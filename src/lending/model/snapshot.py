"""Library snapshots and graph assembly.

A snapshot holds the five entity lists. The ``many`` side (Book, Copy, Loan)
owns the foreign keys; the cached lists on the ``one`` side and the records
embedded in loans are derived from them by ``assemble_snapshot``.
"""

import logging
from collections import defaultdict
from typing import Any, Iterable, Optional, TypeVar

from pydantic import BaseModel, Field

from ..exceptions import EntityNotFoundError, ReferentialIntegrityError
from .schemas import Author, Book, Copy, LendingRecord, Loan, Member

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=LendingRecord)


class LibraryData(BaseModel):
    """A complete, internally consistent set of library records."""

    authors: list[Author] = Field(default_factory=list)
    books: list[Book] = Field(default_factory=list)
    copies: list[Copy] = Field(default_factory=list)
    members: list[Member] = Field(default_factory=list)
    loans: list[Loan] = Field(default_factory=list)

    @classmethod
    def sample(cls) -> "LibraryData":
        """Build the fixed sample library (2 authors, 2 books, 4 copies, 2 members, 4 loans)."""
        from .sample import sample_library

        return sample_library()

    def to_dict(self) -> dict[str, Any]:
        """Serialize using interchange field names."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LibraryData":
        """Deserialize without resolving references. See ``assemble_snapshot``."""
        return cls.model_validate(data)

    def index(self) -> "SnapshotIndex":
        """Build lookup indexes over this snapshot."""
        return SnapshotIndex(self)

    def open_loans(self) -> list[Loan]:
        """Loans that have not been returned."""
        return [loan for loan in self.loans if loan.is_open]

    @property
    def counts(self) -> dict[str, int]:
        """Number of records of each kind."""
        return {
            "authors": len(self.authors),
            "books": len(self.books),
            "copies": len(self.copies),
            "members": len(self.members),
            "loans": len(self.loans),
        }


def _by_id(records: Iterable[R]) -> dict[str, R]:
    return {record.id: record for record in records}


def _group_by(records: Iterable[R], key: str) -> dict[str, list[R]]:
    groups: dict[str, list[R]] = defaultdict(list)
    for record in records:
        groups[getattr(record, key)].append(record)
    return groups


class SnapshotIndex:
    """Id and foreign-key indexes over a snapshot.

    Children are found through ``foreign key -> records`` maps, so nothing
    relies on the cached lists stored on the records themselves.
    """

    def __init__(self, data: LibraryData):
        self.data = data
        self.authors = _by_id(data.authors)
        self.books = _by_id(data.books)
        self.copies = _by_id(data.copies)
        self.members = _by_id(data.members)
        self.loans = _by_id(data.loans)

        self._books_by_author = _group_by(data.books, "author_id")
        self._copies_by_book = _group_by(data.copies, "book_id")
        self._loans_by_member = _group_by(data.loans, "member_id")
        self._loans_by_book = _group_by(data.loans, "book_id")

    @staticmethod
    def _get(table: dict[str, R], kind: str, entity_id: str) -> R:
        try:
            return table[entity_id]
        except KeyError:
            raise EntityNotFoundError(kind, entity_id) from None

    def author(self, author_id: str) -> Author:
        return self._get(self.authors, "Author", author_id)

    def book(self, book_id: str) -> Book:
        return self._get(self.books, "Book", book_id)

    def copy(self, copy_id: str) -> Copy:
        return self._get(self.copies, "Copy", copy_id)

    def member(self, member_id: str) -> Member:
        return self._get(self.members, "Member", member_id)

    def loan(self, loan_id: str) -> Loan:
        return self._get(self.loans, "Loan", loan_id)

    def books_by_author(self, author_id: str) -> list[Book]:
        """Books whose authorID is ``author_id``."""
        return list(self._books_by_author.get(author_id, []))

    def copies_of_book(self, book_id: str) -> list[Copy]:
        """Copies whose bookID is ``book_id``."""
        return list(self._copies_by_book.get(book_id, []))

    def loans_of_member(self, member_id: str) -> list[Loan]:
        """Loans whose memberID is ``member_id``."""
        return list(self._loans_by_member.get(member_id, []))

    def loans_of_book(self, book_id: str) -> list[Loan]:
        """Loans whose bookID is ``book_id``."""
        return list(self._loans_by_book.get(book_id, []))


# ============================================================================
# Assembly
# ============================================================================


def find_duplicate_ids(kind: str, records: Iterable[LendingRecord]) -> list[tuple[str, str]]:
    """Find ids that occur more than once among ``records``.

    Returns:
        ``(entity_id, message)`` pairs, one per repeated id
    """
    seen: set[str] = set()
    reported: set[str] = set()
    problems = []
    for record in records:
        if record.id in seen and record.id not in reported:
            problems.append((record.id, f"duplicate {kind} id {record.id}"))
            reported.add(record.id)
        seen.add(record.id)
    return problems


def find_dangling_references(
    authors: Iterable[Author],
    books: Iterable[Book],
    copies: Iterable[Copy],
    members: Iterable[Member],
    loans: Iterable[Loan],
) -> list[tuple[str, str]]:
    """Find foreign keys that do not resolve.

    Returns:
        ``(entity_id, message)`` pairs naming the record that holds the key
    """
    books = list(books)
    author_ids = {a.id for a in authors}
    book_ids = {b.id for b in books}
    member_ids = {m.id for m in members}

    problems = []
    for book in books:
        if book.author_id not in author_ids:
            problems.append((book.id, f"Book {book.id} references missing Author {book.author_id}"))
    for copy in copies:
        if copy.book_id not in book_ids:
            problems.append((copy.id, f"Copy {copy.id} references missing Book {copy.book_id}"))
    for loan in loans:
        if loan.book_id not in book_ids:
            problems.append((loan.id, f"Loan {loan.id} references missing Book {loan.book_id}"))
        if loan.member_id not in member_ids:
            problems.append((loan.id, f"Loan {loan.id} references missing Member {loan.member_id}"))
    return problems


def _leaf(record: R, **cleared: None) -> R:
    """Copy a record with its derived fields cleared."""
    return record.model_copy(update=cleared, deep=True)


def assemble_snapshot(
    authors: Iterable[Author],
    books: Iterable[Book],
    copies: Iterable[Copy],
    members: Iterable[Member],
    loans: Iterable[Loan],
    embed_references: bool = True,
) -> LibraryData:
    """Assemble records into a cross-referenced snapshot.

    Cached lists and embedded records on the inputs are ignored and rebuilt
    from the foreign keys. The inputs are not modified.

    Args:
        authors: Author records
        books: Book records
        copies: Copy records
        members: Member records
        loans: Loan records
        embed_references: Give each loan a copy of its book and member

    Returns:
        The assembled LibraryData

    Raises:
        ReferentialIntegrityError: If an id is duplicated or a foreign key
            does not resolve. No snapshot is produced in that case.
    """
    authors = [_leaf(a, books=None) for a in authors]
    books = [_leaf(b, copies=None) for b in books]
    copies = [_leaf(c) for c in copies]
    members = [_leaf(m, loans=None) for m in members]
    loans = [_leaf(loan, book=None, member=None) for loan in loans]

    found = []
    found.extend(find_duplicate_ids("Author", authors))
    found.extend(find_duplicate_ids("Book", books))
    found.extend(find_duplicate_ids("Copy", copies))
    found.extend(find_duplicate_ids("Member", members))
    found.extend(find_duplicate_ids("Loan", loans))
    found.extend(find_dangling_references(authors, books, copies, members, loans))
    problems = [message for _, message in found]
    if problems:
        logger.warning("Snapshot assembly rejected: %d problem(s)", len(problems))
        raise ReferentialIntegrityError(problems)

    # Loans embed the book and member as they are before back-references exist
    if embed_references:
        book_by_id = _by_id(books)
        member_by_id = _by_id(members)
        for loan in loans:
            loan.book = book_by_id[loan.book_id].model_copy(deep=True)
            loan.member = member_by_id[loan.member_id].model_copy(deep=True)

    copies_by_book = _group_by(copies, "book_id")
    for book in books:
        book.copies = list(copies_by_book.get(book.id, []))

    books_by_author = _group_by(books, "author_id")
    for author in authors:
        author.books = list(books_by_author.get(author.id, []))

    loans_by_member = _group_by(loans, "member_id")
    for member in members:
        member.loans = list(loans_by_member.get(member.id, []))

    data = LibraryData(
        authors=authors,
        books=books,
        copies=copies,
        members=members,
        loans=loans,
    )
    logger.debug("Assembled snapshot: %s", data.counts)
    return data


def reassemble(data: LibraryData, embed_references: Optional[bool] = None) -> LibraryData:
    """Rebuild the derived fields of an existing snapshot from its foreign keys.

    By default loans keep embedded records only if any loan had them.
    """
    if embed_references is None:
        embed_references = any(
            loan.book is not None or loan.member is not None for loan in data.loans
        )
    return assemble_snapshot(
        data.authors,
        data.books,
        data.copies,
        data.members,
        data.loans,
        embed_references=embed_references,
    )
