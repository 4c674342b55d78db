"""Pydantic schemas for the lending library entities.

Python attributes are snake_case; the interchange representation uses the
field aliases (``authorID``, ``firstName``, ...). Identity and foreign-key
fields are frozen once a record is created. Foreign keys are not resolved
here; referential integrity belongs to the snapshot (see ``snapshot.py``).
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..exceptions import DateParseError
from ..utils import parse_date


class CopyStatus(str, Enum):
    """Circulation status of a physical copy."""

    ACTIVE = "active"
    LOST = "lost"
    REPAIR = "repair"


def _coerce_date(v: Any) -> Optional[date]:
    """Accept only YYYY-MM-DD strings and plain dates.

    Numbers and datetimes never reach pydantic's lax date coercion.
    """
    if v is None:
        return None
    if isinstance(v, str):
        return parse_date(v)
    if isinstance(v, date) and not isinstance(v, datetime):
        return v
    raise DateParseError(v, f"expected a YYYY-MM-DD string, got {type(v).__name__}")


def _check_year(v: Optional[int]) -> Optional[int]:
    if v is None:
        return None
    if v < 1 or v > date.today().year:
        raise ValueError(f"year {v} is not a plausible calendar year")
    return v


class LendingRecord(BaseModel):
    """Base class for all entities, with interchange helpers."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1, frozen=True)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict using interchange field names."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        """Deserialize from a plain dict. Raises ``ValidationError`` on bad input."""
        return cls.model_validate(data)


# ============================================================================
# Entities
# ============================================================================


class Copy(LendingRecord):
    """A physical copy of a book."""

    book_id: str = Field(..., alias="bookID", min_length=1, frozen=True)
    barcode: str = Field(..., min_length=1)
    acquired_date: date = Field(..., alias="acquiredDate")
    status: CopyStatus = CopyStatus.ACTIVE

    @field_validator("acquired_date", mode="before")
    @classmethod
    def parse_acquired_date(cls, v):
        """Require YYYY-MM-DD strings or plain dates."""
        return _coerce_date(v)


class Book(LendingRecord):
    """A title written by one author."""

    author_id: str = Field(..., alias="authorID", min_length=1, frozen=True)
    isbn: str
    title: str = Field(..., min_length=1)
    published_year: Optional[int] = Field(None, alias="publishedYear")

    # Back-reference: copies whose bookID is this book
    copies: Optional[list[Copy]] = None

    @field_validator("published_year")
    @classmethod
    def plausible_published_year(cls, v: Optional[int]) -> Optional[int]:
        """Validate the publication year is a plausible calendar year."""
        return _check_year(v)


class Author(LendingRecord):
    """An author of one or more books."""

    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    birth_year: Optional[int] = Field(None, alias="birthYear")

    # Back-reference: books whose authorID is this author
    books: Optional[list[Book]] = None

    @field_validator("birth_year")
    @classmethod
    def plausible_birth_year(cls, v: Optional[int]) -> Optional[int]:
        """Validate the birth year is a plausible calendar year."""
        return _check_year(v)

    @property
    def full_name(self) -> str:
        """First and last name."""
        return f"{self.first_name} {self.last_name}"


class Loan(LendingRecord):
    """A book lent to a member."""

    book_id: str = Field(..., alias="bookID", min_length=1, frozen=True)
    member_id: str = Field(..., alias="memberID", min_length=1, frozen=True)
    loan_date: date = Field(..., alias="loanDate")
    due_date: date = Field(..., alias="dueDate")
    return_date: Optional[date] = Field(None, alias="returnDate")

    # Denormalized snapshots of the referenced records, not live references
    book: Optional[Book] = None
    member: Optional["Member"] = None

    @field_validator("loan_date", "due_date", "return_date", mode="before")
    @classmethod
    def parse_dates(cls, v):
        """Require YYYY-MM-DD strings or plain dates."""
        return _coerce_date(v)

    @model_validator(mode="after")
    def dates_in_order(self) -> "Loan":
        """Validate due and return dates are not before the loan date."""
        if self.due_date < self.loan_date:
            raise ValueError("dueDate must not be before loanDate")
        if self.return_date is not None and self.return_date < self.loan_date:
            raise ValueError("returnDate must not be before loanDate")
        return self

    @property
    def is_open(self) -> bool:
        """True while the book has not been returned."""
        return self.return_date is None


class Member(LendingRecord):
    """A library member who borrows books."""

    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    email: str
    joined_date: date = Field(..., alias="joinedDate")

    # Back-reference: loans whose memberID is this member
    loans: Optional[list[Loan]] = None

    @field_validator("joined_date", mode="before")
    @classmethod
    def parse_joined_date(cls, v):
        """Require YYYY-MM-DD strings or plain dates."""
        return _coerce_date(v)

    @property
    def full_name(self) -> str:
        """First and last name."""
        return f"{self.first_name} {self.last_name}"


Loan.model_rebuild()
