"""Data integrity checking.

Validates the consistency of a library snapshot and identifies issues.
"""

import re
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional

from .model.schemas import Loan
from .model.snapshot import (
    LibraryData,
    SnapshotIndex,
    find_dangling_references,
    find_duplicate_ids,
)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class IssueSeverity(str, Enum):
    """Severity level for integrity issues."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class IntegrityIssue:
    """An integrity issue found during checking."""

    severity: IssueSeverity
    category: str
    message: str
    entity_id: Optional[str] = None
    suggestion: Optional[str] = None

    def __str__(self) -> str:
        """String representation."""
        prefix = f"[{self.severity.value.upper()}]"
        entity_info = f" ({self.entity_id})" if self.entity_id else ""
        return f"{prefix} {self.category}: {self.message}{entity_info}"


@dataclass
class IntegrityReport:
    """Report from integrity check."""

    checked_at: str
    counts: dict[str, int] = field(default_factory=dict)
    issues: list[IntegrityIssue] = field(default_factory=list)
    passed: bool = True

    @property
    def critical_count(self) -> int:
        """Count of critical issues."""
        return sum(1 for i in self.issues if i.severity == IssueSeverity.CRITICAL)

    @property
    def error_count(self) -> int:
        """Count of error issues."""
        return sum(1 for i in self.issues if i.severity == IssueSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        """Count of warning issues."""
        return sum(1 for i in self.issues if i.severity == IssueSeverity.WARNING)

    @property
    def info_count(self) -> int:
        """Count of info issues."""
        return sum(1 for i in self.issues if i.severity == IssueSeverity.INFO)

    def get_issues_by_severity(self, severity: IssueSeverity) -> list[IntegrityIssue]:
        """Get issues of a specific severity."""
        return [i for i in self.issues if i.severity == severity]

    def get_issues_by_category(self, category: str) -> list[IntegrityIssue]:
        """Get issues of a specific category."""
        return [i for i in self.issues if i.category == category]


class IntegrityChecker:
    """Checks a snapshot for referential integrity and data consistency."""

    def __init__(self, data: LibraryData):
        """Initialize integrity checker.

        Args:
            data: Snapshot to check
        """
        self.data = data

    def check_all(self) -> IntegrityReport:
        """Run all integrity checks.

        Returns:
            IntegrityReport with all issues found
        """
        report = IntegrityReport(
            checked_at=datetime.now().isoformat(),
            counts=self.data.counts,
        )

        report.issues.extend(self._check_duplicate_ids())
        report.issues.extend(self._check_foreign_keys())
        report.issues.extend(self._check_barcodes())
        report.issues.extend(self._check_isbns())
        report.issues.extend(self._check_loan_dates())
        report.issues.extend(self._check_years())
        report.issues.extend(self._check_emails())

        # Back-references are only meaningful once ids resolve
        if report.critical_count == 0:
            index = self.data.index()
            report.issues.extend(self._check_back_references(index))
            report.issues.extend(self._check_embedded_snapshots(index))

        report.passed = report.critical_count == 0 and report.error_count == 0
        return report

    def _check_duplicate_ids(self) -> list[IntegrityIssue]:
        """Check that ids are unique within each entity kind."""
        found = []
        found.extend(find_duplicate_ids("Author", self.data.authors))
        found.extend(find_duplicate_ids("Book", self.data.books))
        found.extend(find_duplicate_ids("Copy", self.data.copies))
        found.extend(find_duplicate_ids("Member", self.data.members))
        found.extend(find_duplicate_ids("Loan", self.data.loans))

        return [
            IntegrityIssue(
                severity=IssueSeverity.CRITICAL,
                category="duplicate_id",
                message=message,
                entity_id=entity_id,
            )
            for entity_id, message in found
        ]

    def _check_foreign_keys(self) -> list[IntegrityIssue]:
        """Check that every foreign key resolves."""
        found = find_dangling_references(
            self.data.authors,
            self.data.books,
            self.data.copies,
            self.data.members,
            self.data.loans,
        )
        return [
            IntegrityIssue(
                severity=IssueSeverity.CRITICAL,
                category="foreign_key",
                message=message,
                entity_id=entity_id,
                suggestion="Add the referenced record or remove the reference",
            )
            for entity_id, message in found
        ]

    def _check_barcodes(self) -> list[IntegrityIssue]:
        """Check that barcodes are unique among copies."""
        counts = Counter(copy.barcode for copy in self.data.copies)
        return [
            IntegrityIssue(
                severity=IssueSeverity.ERROR,
                category="barcode",
                message=f"Barcode {barcode} is used by {count} copies",
                suggestion="Relabel all but one of the copies",
            )
            for barcode, count in counts.items()
            if count > 1
        ]

    def _check_isbns(self) -> list[IntegrityIssue]:
        """Check that each ISBN identifies a single title."""
        counts = Counter(book.isbn for book in self.data.books)
        return [
            IntegrityIssue(
                severity=IssueSeverity.WARNING,
                category="isbn",
                message=f"ISBN {isbn} is shared by {count} books",
            )
            for isbn, count in counts.items()
            if count > 1
        ]

    def _check_loan_dates(self) -> list[IntegrityIssue]:
        """Check loan date ordering."""
        issues = []
        for loan in self.data.loans:
            issues.extend(self._check_single_loan_dates(loan))
        return issues

    def _check_single_loan_dates(self, loan: Loan) -> list[IntegrityIssue]:
        # Loans built through validation can't get here, but mutable
        # attributes can be reassigned afterwards.
        issues = []
        if loan.due_date < loan.loan_date:
            issues.append(IntegrityIssue(
                severity=IssueSeverity.ERROR,
                category="dates",
                message="Due date is before loan date",
                entity_id=loan.id,
            ))
        if loan.return_date is not None and loan.return_date < loan.loan_date:
            issues.append(IntegrityIssue(
                severity=IssueSeverity.ERROR,
                category="dates",
                message="Return date is before loan date",
                entity_id=loan.id,
            ))
        return issues

    def _check_years(self) -> list[IntegrityIssue]:
        """Check birth and publication years are plausible."""
        issues = []
        this_year = date.today().year

        for author in self.data.authors:
            if author.birth_year is not None and not 1 <= author.birth_year <= this_year:
                issues.append(IntegrityIssue(
                    severity=IssueSeverity.WARNING,
                    category="year",
                    message=f"Implausible birth year: {author.birth_year}",
                    entity_id=author.id,
                ))

        for book in self.data.books:
            if book.published_year is not None and not 1 <= book.published_year <= this_year:
                issues.append(IntegrityIssue(
                    severity=IssueSeverity.WARNING,
                    category="year",
                    message=f"Implausible publication year: {book.published_year}",
                    entity_id=book.id,
                ))

        return issues

    def _check_emails(self) -> list[IntegrityIssue]:
        """Check member email addresses look like addresses."""
        return [
            IntegrityIssue(
                severity=IssueSeverity.WARNING,
                category="email",
                message=f"Invalid email address: {member.email!r}",
                entity_id=member.id,
            )
            for member in self.data.members
            if not EMAIL_PATTERN.match(member.email)
        ]

    def _check_back_references(self, index: SnapshotIndex) -> list[IntegrityIssue]:
        """Check cached lists mirror the foreign keys."""
        issues = []

        for author in self.data.authors:
            issues.extend(self._compare_cached(
                author, "books", author.books, index.books_by_author(author.id)
            ))
        for book in self.data.books:
            issues.extend(self._compare_cached(
                book, "copies", book.copies, index.copies_of_book(book.id)
            ))
        for member in self.data.members:
            issues.extend(self._compare_cached(
                member, "loans", member.loans, index.loans_of_member(member.id)
            ))

        return issues

    def _compare_cached(self, owner, name: str, cached, expected) -> list[IntegrityIssue]:
        """Compare a cached list against the records found by foreign key."""
        if cached is None:
            return []

        cached_ids = sorted(record.id for record in cached)
        expected_ids = sorted(record.id for record in expected)
        if cached_ids != expected_ids:
            return [IntegrityIssue(
                severity=IssueSeverity.WARNING,
                category="back_reference",
                message=(
                    f"Cached {name} {cached_ids} do not match "
                    f"records referencing it {expected_ids}"
                ),
                entity_id=owner.id,
                suggestion="Reassemble the snapshot to rebuild cached lists",
            )]

        by_id = {record.id: record for record in expected}
        stale = [record.id for record in cached if record != by_id[record.id]]
        if stale:
            return [IntegrityIssue(
                severity=IssueSeverity.WARNING,
                category="back_reference",
                message=f"Cached {name} out of date: {', '.join(stale)}",
                entity_id=owner.id,
                suggestion="Reassemble the snapshot to rebuild cached lists",
            )]

        return []

    def _check_embedded_snapshots(self, index: SnapshotIndex) -> list[IntegrityIssue]:
        """Report loans whose embedded book or member has diverged."""
        issues = []

        for loan in self.data.loans:
            if loan.book is not None:
                if loan.book.id != loan.book_id:
                    issues.append(self._embedded_issue(loan, "book", "refers to another book"))
                elif not _same_leaf(loan.book, index.book(loan.book_id)):
                    issues.append(self._embedded_issue(loan, "book", "differs from current book"))

            if loan.member is not None:
                if loan.member.id != loan.member_id:
                    issues.append(self._embedded_issue(loan, "member", "refers to another member"))
                elif not _same_leaf(loan.member, index.member(loan.member_id)):
                    issues.append(self._embedded_issue(loan, "member", "differs from current member"))

        return issues

    @staticmethod
    def _embedded_issue(loan: Loan, name: str, detail: str) -> IntegrityIssue:
        return IntegrityIssue(
            severity=IssueSeverity.INFO,
            category="embedded_snapshot",
            message=f"Embedded {name} {detail}",
            entity_id=loan.id,
        )


def _same_leaf(embedded, current) -> bool:
    """Compare two records ignoring their cached lists."""
    derived = {"books", "copies", "loans"}
    return embedded.model_dump(exclude=derived) == current.model_dump(exclude=derived)


def check_snapshot(data: LibraryData) -> IntegrityReport:
    """Run every integrity check on ``data``."""
    return IntegrityChecker(data).check_all()
