import os
import json
from typing import List, Any, Dict
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"

_console = Console()

def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode

def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()

def days_left_label(grace_days_left: int) -> str:
    if grace_days_left < 0:
        return f"Overdue by {-grace_days_left} days"
    return f"Days Left: {grace_days_left}"

def _print_json(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False))

def print_book_list(books: List[Any]) -> None:
    """Print books in the current output mode.
    - plain: 'ID - Title by Author (Year) [available/total available]'
    - json: array of book dicts
    - rich: table
    """
    if not books:
        print("No books found.")
        return

    mode = get_output_mode()
    if mode == "json":
        _print_json([b.to_dict() for b in books])
    elif mode == "rich":
        table = Table(title="📖 Books", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("Year", justify="right")
        table.add_column("Available", justify="right")
        for b in books:
            table.add_row(b.id, b.display_title, b.display_author, str(b.year), f"{b.available}/{b.total}")
        _console.print(table)
    else:
        for b in books:
            print(f"{b.id} - {b.display_title} by {b.display_author} ({b.year}) [{b.available}/{b.total} available]")

def print_member_list(members: List[Any]) -> None:
    if not members:
        print("No members found.")
        return

    mode = get_output_mode()
    if mode == "json":
        _print_json([m.to_dict() for m in members])
    elif mode == "rich":
        table = Table(title="👥 Members", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Name", style="white")
        for m in members:
            table.add_row(m.id, m.name)
        _console.print(table)
    else:
        for m in members:
            print(f"{m.id} - {m.name}")

def print_loan_list(statuses: List[Any], currency: str) -> None:
    """Print open loans with their day counts and fines.
    Overdue loans, and loans close to their due date, are highlighted red in rich mode.
    """
    if not statuses:
        print("No loans found.")
        return

    mode = get_output_mode()
    if mode == "json":
        _print_json([s.to_dict() for s in statuses])
    elif mode == "rich":
        table = Table(title="💳 Loans", show_lines=True, header_style="bold cyan")
        table.add_column("Loan", style="magenta", no_wrap=True)
        table.add_column("Book")
        table.add_column("Member")
        table.add_column("Issued", justify="right")
        table.add_column("Status")
        table.add_column("Fine", justify="right")
        for s in statuses:
            status_style = "red" if (s.overdue or s.due_soon) else "green"
            fine_style = "red" if s.fine > 0 else "dim"
            table.add_row(
                s.loan.short_id,
                s.loan.book_id,
                s.loan.member_id,
                f"{s.elapsed_days} days ago",
                f"[{status_style}]{days_left_label(s.grace_days_left)}[/]",
                f"[{fine_style}]{currency}{s.fine}[/]",
            )
        _console.print(table)
    else:
        for s in statuses:
            print(
                f"Loan: {s.loan.short_id} | Book: {s.loan.book_id} | Member: {s.loan.member_id} | "
                f"Issued: {s.elapsed_days} days ago | {days_left_label(s.grace_days_left)} | "
                f"Fine: {currency}{s.fine}"
            )

def print_suggestions(suggestions: List[str]) -> None:
    if get_output_mode() == "json":
        _print_json(suggestions)
        return
    if not suggestions:
        print("No suggestions.")
        return
    for s in suggestions:
        print(s)

def print_detail(title: str, fields: Dict[str, Any]) -> None:
    """Print a single record as 'Label: value' lines, a JSON object or a panel."""
    mode = get_output_mode()
    if mode == "json":
        _print_json(fields)
    elif mode == "rich":
        content = "\n".join(f"[bold]{k}:[/] {v}" for k, v in fields.items())
        _console.print(Panel.fit(content, title=title, border_style="blue"))
    else:
        print(title)
        for k, v in fields.items():
            print(f"{k}: {v}")

def print_stats_result(stats: Dict[str, Any], currency: str) -> None:
    mode = get_output_mode()

    if not stats:
        print("No statistics available.")
        return

    if mode == "json":
        _print_json(stats)
    elif mode == "rich":
        content = (
            f"[bold]Titles:[/] {stats['total_titles']}\n"
            f"[bold]Copies:[/] {stats['available_copies']}/{stats['total_copies']} available\n"
            f"[bold]Members:[/] {stats['members']}\n"
            f"[bold]Open Loans:[/] {stats['open_loans']} ({stats['overdue_loans']} overdue)\n"
            f"[bold]Outstanding Fines:[/] {currency}{stats['outstanding_fines']}"
        )
        _console.print(Panel.fit(content, title="📊 Stats", border_style="blue"))
    else:
        print(f"Total Titles: {stats['total_titles']}")
        print(f"Total Copies: {stats['total_copies']}")
        print(f"Available Copies: {stats['available_copies']}")
        print(f"Members: {stats['members']}")
        print(f"Open Loans: {stats['open_loans']}")
        print(f"Overdue Loans: {stats['overdue_loans']}")
        print(f"Outstanding Fines: {currency}{stats['outstanding_fines']}")
