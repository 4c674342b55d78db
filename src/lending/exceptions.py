"""Exceptions raised by the lending model."""

from typing import Iterable


class LendingModelError(Exception):
    """Base class for lending model errors."""


class DateParseError(LendingModelError, ValueError):
    """A calendar date literal is not a valid YYYY-MM-DD date."""

    def __init__(self, value: object, reason: str = "expected YYYY-MM-DD"):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid date {value!r}: {reason}")


class ReferentialIntegrityError(LendingModelError):
    """A snapshot could not be assembled because references do not resolve."""

    def __init__(self, problems: Iterable[str]):
        self.problems = list(problems)
        summary = "; ".join(self.problems)
        super().__init__(
            f"Snapshot assembly failed with {len(self.problems)} problem(s): {summary}"
        )


class EntityNotFoundError(LendingModelError, KeyError):
    """An entity id was looked up but is not part of the snapshot."""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} not found: {entity_id}")

    def __str__(self) -> str:
        return f"{self.kind} not found: {self.entity_id}"


class SnapshotDecodeError(LendingModelError):
    """Interchange data could not be decoded into a snapshot."""
