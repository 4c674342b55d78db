"""Command-line interface for the lending model.

Built with Typer for commands and Rich for output.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .config import get_config
from .exceptions import LendingModelError
from .export import JSONExporter, snapshot_to_json
from .integrity import IntegrityChecker, IssueSeverity
from .model import LibraryData, Loan
from .utils import format_date

# Create the main app
app = typer.Typer(
    name="lending",
    help="Inspect and export the lending library data model.",
    no_args_is_help=True,
)

# Rich console for pretty output
console = Console()


# ============================================================================
# Helper Functions
# ============================================================================


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def setup_logging(level: str) -> None:
    """Route log records through Rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def load_library(path: Optional[Path], assemble: bool = True) -> LibraryData:
    """Load a snapshot from ``path``, or the sample library when omitted.

    With ``assemble=False`` the file is decoded as written, stale cached
    lists and dangling references included.
    """
    if path is None:
        return LibraryData.sample()
    try:
        return JSONExporter().load(path, assemble=assemble)
    except LendingModelError as e:
        print_error(str(e))
        raise typer.Exit(1)


def format_loan_table(loans: list[Loan], data: LibraryData, title: str = "Loans") -> Table:
    """Create a rich table for displaying loans."""
    index = data.index()
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Book", style="cyan", max_width=40)
    table.add_column("Member", style="green")
    table.add_column("Loaned")
    table.add_column("Due")
    table.add_column("Returned", justify="center")

    for loan in loans:
        table.add_row(
            loan.id,
            index.book(loan.book_id).title,
            index.member(loan.member_id).full_name,
            format_date(loan.loan_date),
            format_date(loan.due_date),
            format_date(loan.return_date) if loan.return_date else "[yellow]open[/yellow]",
        )

    return table


# ============================================================================
# Commands
# ============================================================================


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Validate configuration and set up logging before any command runs."""
    try:
        config = get_config()
    except ValueError as e:
        print_error(f"Invalid configuration: {e}")
        raise typer.Exit(1)

    errors = config.validate()
    if errors:
        for error in errors:
            print_error(f"Invalid configuration: {error}")
        raise typer.Exit(1)

    setup_logging("DEBUG" if verbose else config.log_level)


@app.command()
def sample(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON to this file"),
    save: bool = typer.Option(False, "--save", "-s", help="Write JSON to the configured export path"),
) -> None:
    """Print the sample library as JSON, or write it to a file."""
    data = LibraryData.sample()

    if output is None and save:
        output = get_config().export_path

    if output is None:
        typer.echo(snapshot_to_json(data, indent=get_config().json_indent))
        return

    result = JSONExporter().export(data, output)
    if not result.success:
        print_error(f"Export failed: {result.error}")
        raise typer.Exit(1)

    counts = ", ".join(f"{n} {kind}" for kind, n in result.counts.items())
    print_success(f"Wrote {counts} to {output}")


@app.command()
def show(
    path: Optional[Path] = typer.Argument(None, help="JSON export to show (default: sample)"),
) -> None:
    """Show every record of a library snapshot."""
    data = load_library(path)
    index = data.index()

    authors = Table(title="Authors", header_style="bold magenta")
    authors.add_column("ID", style="dim")
    authors.add_column("Name", style="green")
    authors.add_column("Born", justify="right")
    authors.add_column("Books", justify="right")
    for author in data.authors:
        authors.add_row(
            author.id,
            author.full_name,
            str(author.birth_year) if author.birth_year else "-",
            str(len(index.books_by_author(author.id))),
        )
    console.print(authors)

    books = Table(title="Books", header_style="bold magenta")
    books.add_column("ID", style="dim")
    books.add_column("Title", style="cyan", max_width=40)
    books.add_column("Author", style="green")
    books.add_column("ISBN")
    books.add_column("Published", justify="right")
    for book in data.books:
        books.add_row(
            book.id,
            book.title,
            index.author(book.author_id).full_name,
            book.isbn,
            str(book.published_year) if book.published_year else "-",
        )
    console.print(books)

    copies = Table(title="Copies", header_style="bold magenta")
    copies.add_column("ID", style="dim")
    copies.add_column("Book", style="cyan")
    copies.add_column("Barcode")
    copies.add_column("Acquired")
    copies.add_column("Status", style="yellow")
    for copy in data.copies:
        copies.add_row(
            copy.id,
            index.book(copy.book_id).title,
            copy.barcode,
            format_date(copy.acquired_date),
            copy.status.value,
        )
    console.print(copies)

    members = Table(title="Members", header_style="bold magenta")
    members.add_column("ID", style="dim")
    members.add_column("Name", style="green")
    members.add_column("Email")
    members.add_column("Joined")
    for member in data.members:
        members.add_row(
            member.id,
            member.full_name,
            member.email,
            format_date(member.joined_date),
        )
    console.print(members)

    console.print(format_loan_table(data.loans, data))


@app.command()
def loans(
    path: Optional[Path] = typer.Argument(None, help="JSON export to read (default: sample)"),
    open_only: bool = typer.Option(False, "--open", help="Only loans not yet returned"),
) -> None:
    """List loans."""
    data = load_library(path)
    selected = data.open_loans() if open_only else data.loans

    if not selected:
        console.print("[dim]No loans found.[/dim]")
        return

    title = "Open Loans" if open_only else "Loans"
    console.print(format_loan_table(selected, data, title=title))


@app.command()
def check(
    path: Optional[Path] = typer.Argument(None, help="JSON export to check (default: sample)"),
) -> None:
    """Check a library snapshot for integrity issues."""
    data = load_library(path, assemble=False)
    report = IntegrityChecker(data).check_all()

    colors = {
        IssueSeverity.CRITICAL: "bold red",
        IssueSeverity.ERROR: "red",
        IssueSeverity.WARNING: "yellow",
        IssueSeverity.INFO: "dim",
    }
    for issue in report.issues:
        style = colors[issue.severity]
        console.print(f"[{style}]{escape(str(issue))}[/{style}]")
        if issue.suggestion:
            console.print(f"  [dim]{issue.suggestion}[/dim]")

    if not report.passed:
        print_error(
            f"Integrity check failed: {report.critical_count} critical, "
            f"{report.error_count} error(s)"
        )
        raise typer.Exit(1)

    print_success(f"Integrity check passed ({len(report.issues)} note(s))")


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__

    console.print(f"lending version {__version__}")


# ============================================================================
# Main Entry Point
# ============================================================================


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
