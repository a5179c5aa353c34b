import logging
from typing import Optional

import typer

from config import settings
from library import Library, OperationResult
from ui_helpers import (
    set_output_mode,
    days_left_label,
    print_book_list,
    print_member_list,
    print_loan_list,
    print_suggestions,
    print_detail,
    print_stats_result,
)

APP_NAME = "Library Ledger CLI"


# Single Library instance per process, loaded (or seeded) on first use
class LibraryManager:
    _instance: Optional[Library] = None

    @classmethod
    def get_instance(cls) -> Library:
        """Get or create the Library singleton."""
        if cls._instance is None:
            cls._instance = Library(db_file=settings.data_file)
            cls._instance.initialize()
        return cls._instance

    @classmethod
    def shutdown(cls) -> None:
        """Flush state to disk and drop the singleton."""
        if cls._instance is not None:
            cls._instance.shutdown_save()
            cls._instance = None


def _report(result: OperationResult) -> None:
    if result.ok:
        print(result.message)
    else:
        print(f"Error: {result.message}")


# --- Typer CLI Application ---
app = typer.Typer(help=APP_NAME)

@app.callback()
def _global_options(
    ctx: typer.Context,
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
):
    """Global CLI options (e.g. output mode)."""
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.WARNING))
    if output:
        set_output_mode(output)
    ctx.call_on_close(LibraryManager.shutdown)

@app.command("books")
def cli_books(query: Optional[str] = typer.Argument(None, help="Filter by title, author or ID")):
    """List books, optionally filtered."""
    print_book_list(LibraryManager.get_instance().list_books(query))

@app.command("members")
def cli_members(query: Optional[str] = typer.Argument(None, help="Filter by name or ID")):
    """List members, optionally filtered."""
    print_member_list(LibraryManager.get_instance().list_members(query))

@app.command("loans")
def cli_loans(query: Optional[str] = typer.Argument(None, help="Filter by loan, book or member ID")):
    """List open loans with days elapsed and fines."""
    print_loan_list(LibraryManager.get_instance().list_loans(query), settings.currency_symbol)

@app.command("suggest")
def cli_suggest(collection: str, query: str):
    """Show search suggestions for books, members or loans."""
    try:
        suggestions = LibraryManager.get_instance().suggest(collection, query)
    except ValueError:
        print(f"Unknown collection: {collection}. Use books, members or loans.")
        return
    print_suggestions(suggestions)

@app.command("add-book")
def cli_add_book(
    book_id: str,
    title: str = typer.Option("", "--title", "-t"),
    author: str = typer.Option("", "--author", "-a"),
    year: Optional[str] = typer.Option(None, "--year", "-y", help="Defaults to the current year"),
    total: str = typer.Option("1", "--total", "-n", help="Copies owned (minimum 1)"),
):
    """Add a book to the catalog."""
    _report(LibraryManager.get_instance().add_book(book_id, title, author, year, total))

@app.command("add-member")
def cli_add_member(member_id: str, name: str):
    """Register a member."""
    _report(LibraryManager.get_instance().add_member(member_id, name))

@app.command("borrow")
def cli_borrow(book_id: str, member_id: str):
    """Lend a book to a member."""
    _report(LibraryManager.get_instance().borrow(book_id, member_id))

@app.command("return")
def cli_return(loan_id: str):
    """Return a borrowed book by loan ID."""
    _report(LibraryManager.get_instance().return_loan(loan_id))

@app.command("show-book")
def cli_show_book(book_id: str):
    """Show the details of one book."""
    book = LibraryManager.get_instance().find_book(book_id)
    if not book:
        print(f"Book with ID {book_id} not found.")
        return
    print_detail("Book Details", {
        "Title": book.display_title,
        "Author": book.display_author,
        "Year": book.year,
        "Available": f"{book.available}/{book.total}",
        "ID": book.id,
    })

@app.command("show-member")
def cli_show_member(member_id: str):
    """Show the details of one member."""
    member = LibraryManager.get_instance().find_member(member_id)
    if not member:
        print(f"Member with ID {member_id} not found.")
        return
    print_detail("Member Details", {"Name": member.name, "ID": member.id})

@app.command("show-loan")
def cli_show_loan(loan_id: str):
    """Show one loan with its days left and fine."""
    status = LibraryManager.get_instance().loan_status(loan_id)
    if not status:
        print("Loan not found.")
        return
    print_detail("Loan Details", {
        "Loan ID": status.loan.loan_id,
        "Book": status.loan.book_id,
        "Member": status.loan.member_id,
        "Issued": f"{status.elapsed_days} days ago",
        "Status": days_left_label(status.grace_days_left),
        "Fine": f"{settings.currency_symbol}{status.fine}",
    })

@app.command("stats")
def cli_stats():
    """Show catalog and loan statistics."""
    print_stats_result(LibraryManager.get_instance().get_statistics(), settings.currency_symbol)


if __name__ == "__main__":
    app()
