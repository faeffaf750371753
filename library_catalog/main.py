import logging
from typing import Callable, List, Optional

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from library_catalog.book import Book
from library_catalog.config import settings
from library_catalog.errors import CatalogError, ConflictError, ErrorKind
from library_catalog.library import Catalog
from library_catalog.patron import Patron
from library_catalog.ui_helpers import print_books, print_patrons, print_stats, set_output_mode

logger = logging.getLogger(__name__)

console = Console()

SAMPLE_BOOKS = [
    ("ISBN-001", "Introduction to C++", "Bjarne Stroustrup"),
    ("ISBN-002", "Programming Principles", "Jane Doe"),
    ("ISBN-003", "Algorithms in Depth", "Robert Sedgewick"),
]
SAMPLE_PATRONS = [("U001", "Alice"), ("U002", "Bob")]


def configure_logging(level: Optional[str] = None) -> None:
    level_name = (level or ("DEBUG" if settings.debug else settings.log_level)).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_sample_catalog() -> Catalog:
    """Catalog preloaded with three books and two patrons."""
    catalog = Catalog()
    for isbn, title, author in SAMPLE_BOOKS:
        catalog.add_book(Book(isbn, title, author))
    for patron_id, name in SAMPLE_PATRONS:
        catalog.add_patron(Patron(patron_id, name))
    return catalog


def report_error(e: CatalogError) -> None:
    print(f"Error [{e.kind.value}]: {e}")


# ------------------------- Scripted demo ------------------------- #
class DemoRun:
    """Collects the outcome of each scripted check."""

    def __init__(self) -> None:
        self.failures: List[str] = []

    def check(self, label: str, condition: bool) -> None:
        if condition:
            print(f"  ✓ {label}")
        else:
            print(f"  ✗ {label}")
            self.failures.append(label)

    def expect_error(self, label: str, kind: ErrorKind, func: Callable, *args) -> None:
        try:
            func(*args)
        except CatalogError as e:
            print(f"    -> {e.kind.value}: {e}")
            self.check(label, e.kind is kind)
            return
        self.check(label, False)


def run_checks(run: DemoRun) -> None:
    print("Running checks...")
    lib = build_sample_catalog()

    res = lib.search_by_title("c++")
    run.check('search_by_title("c++") finds only ISBN-001', [b.isbn for b in res] == ["ISBN-001"])

    lib.borrow_book("U001", "ISBN-001")
    run.check("U001 borrows ISBN-001", not lib.get_book("ISBN-001").available)

    run.expect_error("U002 cannot borrow ISBN-001 while it is out", ErrorKind.CONFLICT,
                     lib.borrow_book, "U002", "ISBN-001")

    lib.return_book("U001", "ISBN-001")
    run.check("U001 returns ISBN-001", lib.get_book("ISBN-001").available)

    run.expect_error("U002 cannot return ISBN-002 it never borrowed", ErrorKind.CONFLICT,
                     lib.return_book, "U002", "ISBN-002")
    run.expect_error("removing ISBN-999 reports it missing", ErrorKind.NOT_FOUND,
                     lib.remove_book, "ISBN-999")
    run.expect_error("adding ISBN-001 again is a duplicate", ErrorKind.DUPLICATE,
                     lib.add_book, Book("ISBN-001", "Another", "Someone"))
    run.expect_error("adding a book with an empty ISBN is rejected", ErrorKind.INVALID_KEY,
                     lib.add_book, Book("", "Untitled", "Nobody"))

    lib.borrow_book("U002", "ISBN-002")
    run.expect_error("ISBN-002 cannot be removed while borrowed", ErrorKind.CONFLICT,
                     lib.remove_book, "ISBN-002")
    run.expect_error("U002 cannot be removed while holding a book", ErrorKind.CONFLICT,
                     lib.remove_patron, "U002")

    lib.return_book("U002", "ISBN-002")
    lib.remove_book("ISBN-002")
    run.check("ISBN-002 removed after return", lib.attempt("get_book", "ISBN-002").kind is ErrorKind.NOT_FOUND)

    try:
        lib.check_invariants()
        consistent = True
    except ConflictError as e:
        print(f"    -> {e}")
        consistent = False
    run.check("availability matches loans", consistent)


def run_walkthrough() -> None:
    lib = Catalog()
    lib.add_book(Book("ISBN-A", "Learn C++", "Author A"))
    lib.add_book(Book("ISBN-B", "Data Structures", "Author B"))
    lib.add_book(Book("ISBN-C", "Databases", "Author C"))
    lib.add_patron(Patron("U100", "Charlie"))

    print("\n=== Walk-through ===")
    print_books(lib.list_books(), title="Library Books")
    print_patrons(lib.list_patrons())

    print("\nCharlie (U100) borrows ISBN-A...")
    lib.borrow_book("U100", "ISBN-A")
    print_books(lib.list_books(), title="Library Books")

    print("\nCharlie returns ISBN-A...")
    lib.return_book("U100", "ISBN-A")
    print_books(lib.list_books(), title="Library Books")

    print("\nSearch for 'Data':")
    print_books(lib.search_by_title("Data"), title="Matches")


# ------------------------- Interactive menu ------------------------- #
def _ask(label: str) -> str:
    return Prompt.ask(label).strip()


def list_all_books(lib: Catalog) -> None:
    books = sorted(lib.list_books(), key=lambda b: b.isbn)
    if not books:
        console.print("[yellow]No books in the catalog.[/]")
        return

    table = Table(title="📚 Catalog", show_lines=True, header_style="bold cyan")
    table.add_column("ISBN", style="magenta", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Author", style="white")
    table.add_column("Holder", style="white")
    for book in books:
        table.add_row(
            escape(book.isbn), escape(book.title), escape(book.author), escape(lib.holder_of(book.isbn) or "-")
        )
    console.print(table)
    console.print(f"[dim]📊 {len(books)} book(s)[/]")


def add_book(lib: Catalog) -> None:
    book = lib.add_book(Book(_ask("ISBN"), _ask("Title"), _ask("Author")))
    console.print(Panel.fit(f"[green]Added:[/] [bold]{escape(book.title)}[/] - {escape(book.author)}",
                            title="✅ Success", border_style="green"))


def remove_book(lib: Catalog) -> None:
    isbn = _ask("🔍 ISBN of the book to remove")
    book = lib.get_book(isbn)
    console.print(Panel(escape(book.display()), title="📚 Book to remove", border_style="yellow"))
    if Confirm.ask("🗑️ Remove this book?", default=False):
        lib.remove_book(isbn)
        console.print(f"[green]✅ [bold]{escape(book.title)}[/] removed.[/]")
    else:
        console.print("[blue]🚫 Cancelled.[/]")


def find_book(lib: Catalog) -> None:
    book = lib.get_book(_ask("ISBN"))
    console.print(Panel.fit(
        f"[bold]Title:[/] {escape(book.title)}\n"
        f"[bold]Author:[/] {escape(book.author)}\n"
        f"[bold]ISBN:[/] {escape(book.isbn)}\n"
        f"[bold]Available:[/] {'Yes' if book.available else 'No'}",
        title="🔍 Book Found",
        border_style="green",
    ))


def search_books(lib: Catalog) -> None:
    field = Prompt.ask("Search by", choices=["title", "author"], default="title")
    query = _ask("Search term")
    books = lib.search_by_title(query) if field == "title" else lib.search_by_author(query)
    if not books:
        console.print(f"[yellow]🔍 No books match '{escape(query)}'.[/]")
        return
    print_books(books, title=f"Results for '{query}'")


def add_patron(lib: Catalog) -> None:
    patron = lib.add_patron(Patron(_ask("Patron ID"), _ask("Name")))
    console.print(f"[green]✅ Registered [bold]{escape(patron.name)}[/] ({escape(patron.id)}).[/]")


def remove_patron(lib: Catalog) -> None:
    patron_id = _ask("Patron ID")
    lib.remove_patron(patron_id)
    console.print(f"[green]✅ Patron {escape(patron_id)} removed.[/]")


def show_patrons(lib: Catalog) -> None:
    print_patrons(sorted(lib.list_patrons(), key=lambda p: p.id))


def borrow(lib: Catalog) -> None:
    patron_id, isbn = _ask("Patron ID"), _ask("ISBN")
    lib.borrow_book(patron_id, isbn)
    console.print(f"[green]✅ {escape(isbn)} lent to {escape(patron_id)}.[/]")


def give_back(lib: Catalog) -> None:
    patron_id, isbn = _ask("Patron ID"), _ask("ISBN")
    lib.return_book(patron_id, isbn)
    console.print(f"[green]✅ {escape(isbn)} returned by {escape(patron_id)}.[/]")


def stats(lib: Catalog) -> None:
    print_stats(lib.get_statistics())


MENU_ITEMS = [
    ("1", "List all books", "📚", list_all_books),
    ("2", "Add a book", "➕", add_book),
    ("3", "Remove a book", "🗑️", remove_book),
    ("4", "Find a book by ISBN", "🔎", find_book),
    ("5", "Search books", "💡", search_books),
    ("6", "Register a patron", "👤", add_patron),
    ("7", "Remove a patron", "🚪", remove_patron),
    ("8", "Show patrons", "👥", show_patrons),
    ("9", "Borrow a book", "📤", borrow),
    ("10", "Return a book", "📥", give_back),
    ("11", "Show statistics", "📊", stats),
]


def run_menu(lib: Catalog) -> None:
    """Simple interactive menu over a single in-memory catalog."""
    actions = {key: action for key, _, _, action in MENU_ITEMS}

    def render_menu() -> None:
        table = Table.grid(padding=(0, 2))
        table.add_column(justify="right", style="bold cyan", width=4)
        table.add_column(justify="left", style="white")
        for key, label, icon, _ in MENU_ITEMS:
            table.add_row(f"[reverse]{key}[/]", f"{icon} {label}")
        table.add_row("[reverse]0[/]", "👋 Quit")
        console.print(Panel(table, title=settings.app_name, border_style="cyan", box=box.HEAVY, padding=(1, 2)))

    while True:
        render_menu()
        choice = Prompt.ask("Choose an option", choices=list(actions) + ["0"], default="1").strip()
        if choice == "0":
            console.print("[green]Goodbye![/]")
            break
        try:
            actions[choice](lib)
        except CatalogError as e:
            console.print(f"[bold red]Error {escape('[' + e.kind.value + ']')}:[/] {escape(str(e))}")
        print()


# --- Typer CLI Application ---
app = typer.Typer(help=f"{settings.app_name} CLI")


@app.callback(invoke_without_command=True)
def _global_options(
    ctx: typer.Context,
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level (default: LOG_LEVEL)"),
    version: bool = typer.Option(False, "--version", help="Show the version and exit"),
):
    """Global CLI options (output mode, logging)."""
    if version:
        print(f"{settings.app_name} {settings.app_version}")
        raise typer.Exit()
    configure_logging(log_level)
    if output:
        set_output_mode(output)
    if ctx.invoked_subcommand is None:
        ctx.invoke(cli_menu, empty=not settings.preload_sample_data)


@app.command("demo")
def cli_demo():
    """Run the scripted checks and the walk-through, printing results."""
    run = DemoRun()
    try:
        run_checks(run)
        run_walkthrough()
    except CatalogError as e:
        report_error(e)
        raise typer.Exit(code=1)
    except Exception as e:
        logger.exception("Demo aborted")
        print(f"Unexpected error: {e}")
        raise typer.Exit(code=1)

    if run.failures:
        print(f"\n{len(run.failures)} check(s) failed.")
        raise typer.Exit(code=1)
    print("\nAll checks passed.")


@app.command("menu")
def cli_menu(empty: bool = typer.Option(False, "--empty", help="Start with an empty catalog")):
    """Open the interactive menu."""
    lib = Catalog() if empty else build_sample_catalog()
    try:
        run_menu(lib)
    except (KeyboardInterrupt, EOFError):
        console.print("\n[green]Goodbye![/]")
    except Exception as e:
        logger.exception("Menu aborted")
        console.print(f"[bold red]Unexpected error:[/] {escape(str(e))}")
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
