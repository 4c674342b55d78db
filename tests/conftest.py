"""Pytest configuration and shared fixtures.

This module provides fixtures for testing the lending model, including
the sample library, leaf records for assembly and CLI helpers.
"""

import os
from pathlib import Path
from typing import Generator

import pytest

from lending.config import reset_config
from lending.model import Author, Book, Copy, CopyStatus, LibraryData, Loan, Member
from lending.utils import parse_date


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_config() -> Generator[None, None, None]:
    """Reset global configuration and lending environment variables."""
    saved = {k: v for k, v in os.environ.items() if k.startswith("LENDING_")}
    for key in saved:
        del os.environ[key]
    reset_config()

    yield

    reset_config()
    for key in [k for k in os.environ if k.startswith("LENDING_")]:
        del os.environ[key]
    os.environ.update(saved)


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def library() -> LibraryData:
    """The assembled sample library."""
    return LibraryData.sample()


@pytest.fixture
def leaf_records() -> dict[str, list]:
    """A small set of unassembled records with resolvable references."""
    return {
        "authors": [
            Author(id="A-10", first_name="Ursula", last_name="Le Guin", birth_year=1929),
        ],
        "books": [
            Book(id="B-10", author_id="A-10", isbn="9780441478125",
                 title="The Left Hand of Darkness", published_year=1969),
            Book(id="B-11", author_id="A-10", isbn="9780060512750",
                 title="The Dispossessed", published_year=1974),
        ],
        "copies": [
            Copy(id="C-10", book_id="B-10", barcode="BC-1010",
                 acquired_date=parse_date("2021-05-04")),
            Copy(id="C-11", book_id="B-11", barcode="BC-1011",
                 acquired_date=parse_date("2021-05-04"), status=CopyStatus.LOST),
        ],
        "members": [
            Member(id="M-10", first_name="Noor", last_name="Haddad",
                   email="noor@example.com", joined_date=parse_date("2020-01-02")),
        ],
        "loans": [
            Loan(id="L-10", book_id="B-11", member_id="M-10",
                 loan_date=parse_date("2024-03-01"), due_date=parse_date("2024-03-22")),
        ],
    }


@pytest.fixture
def export_path(tmp_path: Path) -> Path:
    """Path for a JSON export inside a temporary directory."""
    return tmp_path / "library.json"


# ============================================================================
# CLI Testing Fixtures
# ============================================================================


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner."""
    from typer.testing import CliRunner
    return CliRunner()


@pytest.fixture
def cli_app():
    """Get the CLI app for testing."""
    from lending.cli import app
    return app
