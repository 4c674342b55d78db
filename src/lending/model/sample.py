"""Fixed sample library used for demos and tests."""

from ..utils import parse_date
from .schemas import Author, Book, Copy, CopyStatus, Loan, Member
from .snapshot import LibraryData, assemble_snapshot


def sample_library() -> LibraryData:
    """Build the sample library: 2 authors, 2 books, 4 copies, 2 members, 4 loans.

    Every call returns a new, equal snapshot.
    """
    # Authors
    a1 = Author(id="A-01", first_name="Harper", last_name="Lee", birth_year=1926)
    a2 = Author(id="A-02", first_name="George", last_name="Orwell", birth_year=1903)

    # Books
    b1 = Book(
        id="B-01",
        author_id=a1.id,
        isbn="9780061120084",
        title="To Kill a Mockingbird",
        published_year=1960,
    )
    b2 = Book(
        id="B-02",
        author_id=a2.id,
        isbn="9780451524935",
        title="1984",
        published_year=1949,
    )

    # Copies
    copies = [
        Copy(id="C-01", book_id=b1.id, barcode="BC-0001",
             acquired_date=parse_date("2023-01-15"), status=CopyStatus.ACTIVE),
        Copy(id="C-02", book_id=b1.id, barcode="BC-0002",
             acquired_date=parse_date("2023-06-01"), status=CopyStatus.ACTIVE),
        Copy(id="C-03", book_id=b2.id, barcode="BC-0003",
             acquired_date=parse_date("2022-11-20"), status=CopyStatus.ACTIVE),
        Copy(id="C-04", book_id=b2.id, barcode="BC-0004",
             acquired_date=parse_date("2024-02-10"), status=CopyStatus.REPAIR),
    ]

    # Members
    m1 = Member(id="M-01", first_name="Ava", last_name="Nguyen",
                email="ava@example.com", joined_date=parse_date("2022-09-05"))
    m2 = Member(id="M-02", first_name="Liam", last_name="Patel",
                email="liam@example.com", joined_date=parse_date("2023-03-12"))

    # Loans
    loans = [
        Loan(id="L-01", book_id=b1.id, member_id=m1.id,
             loan_date=parse_date("2024-09-01"),
             due_date=parse_date("2024-09-21"),
             return_date=parse_date("2024-09-18")),
        Loan(id="L-02", book_id=b2.id, member_id=m1.id,
             loan_date=parse_date("2024-10-03"),
             due_date=parse_date("2024-10-24")),
        Loan(id="L-03", book_id=b1.id, member_id=m2.id,
             loan_date=parse_date("2024-11-10"),
             due_date=parse_date("2024-12-01")),
        Loan(id="L-04", book_id=b2.id, member_id=m2.id,
             loan_date=parse_date("2024-11-20"),
             due_date=parse_date("2024-12-11")),
    ]

    return assemble_snapshot(
        authors=[a1, a2],
        books=[b1, b2],
        copies=copies,
        members=[m1, m2],
        loans=loans,
    )
