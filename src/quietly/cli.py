"""Command-line interface for quietly.

Built with Typer for commands and Rich for output.
"""

from contextlib import contextmanager
from datetime import datetime, tzinfo
from typing import Generator, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import LOG_LEVELS, get_config
from .db import get_db
from .db.models import Book
from .db.schemas import GoalType, ReadingSessionResponse, ReadingStatus, StreakStatus
from .errors import NotFoundError, QuietlyError, require_user
from .log import configure_logging
from .notes.schemas import NoteType
from .utils import get_timezone

# Create the main app
app = typer.Typer(
    name="quietly",
    help="Track your reading sessions, goals and streaks.",
    no_args_is_help=True,
)

# Create sub-apps for command groups
books_app = typer.Typer(help="Manage your library.")
app.add_typer(books_app, name="books")

session_app = typer.Typer(help="Time reading sessions.")
app.add_typer(session_app, name="session")

goals_app = typer.Typer(help="Manage reading goals.")
app.add_typer(goals_app, name="goals")

notes_app = typer.Typer(help="Keep notes and quotes from your books.")
app.add_typer(notes_app, name="notes")

# Rich console for pretty output
console = Console()


# ============================================================================
# Helper Functions
# ============================================================================


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


@contextmanager
def handle_errors() -> Generator[None, None, None]:
    """Turn quietly errors into a one-line message and exit code 1."""
    try:
        yield
    except QuietlyError as e:
        print_error(e.message)
        raise typer.Exit(1)


def current_user(ctx: typer.Context) -> str:
    """User id from --user or QUIETLY_USER_ID."""
    user_id = (ctx.obj or {}).get("user_id")
    return require_user(user_id)


def find_book(query: str) -> Book:
    """Resolve a book by ID or by title/author search.

    Raises:
        NotFoundError: If nothing matches or the match is ambiguous
    """
    db = get_db()
    book = db.get_book(query)
    if book:
        return book

    books = db.search_books(query, limit=5)
    if not books:
        raise NotFoundError(f"No book found matching: {query}")
    exact = [b for b in books if b.title.lower() == query.lower()]
    if len(exact) == 1 or len(books) == 1:
        return exact[0] if exact else books[0]

    console.print("[yellow]Multiple books match:[/yellow]")
    for b in books:
        console.print(f"  {b.title} [dim]({b.id})[/dim]")
    raise NotFoundError("Please be more specific or use the book ID")


def progress_bar(percentage: int, width: int = 15) -> str:
    filled = int((percentage / 100) * width)
    return "█" * filled + "░" * (width - filled)


def format_timestamp(value: datetime, tz: tzinfo) -> str:
    """Format a stored UTC instant in the reference timezone."""
    local = value.astimezone(tz)
    return f"{local:%Y-%m-%d %H:%M} {local.tzname()}"


def session_table(session: ReadingSessionResponse, title: str, elapsed: int) -> Table:
    """Create a rich table describing one session."""
    from .reading.timer import format_duration

    table = Table(title=title, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    book = get_db().get_book(str(session.book_id))
    table.add_row("Book", book.title if book else str(session.book_id))
    table.add_row("Started", format_timestamp(session.started_at, get_config().tz))
    if session.ended_at:
        state = "Ended"
    elif session.is_paused:
        state = "[yellow]Paused[/yellow]"
    else:
        state = "Reading"
    table.add_row("State", state)
    table.add_row("Elapsed", format_duration(elapsed))
    if session.start_page is not None:
        table.add_row("Start Page", str(session.start_page))
    if session.end_page is not None:
        table.add_row("End Page", str(session.end_page))
    if session.pages_read is not None:
        table.add_row("Pages Read", str(session.pages_read))
    if session.notes:
        table.add_row("Notes", session.notes)
    return table


@app.callback()
def main_callback(
    ctx: typer.Context,
    user: Optional[str] = typer.Option(
        None, "--user", "-u", help="User ID (default: QUIETLY_USER_ID)"
    ),
) -> None:
    """Track your reading sessions, goals and streaks."""
    config = get_config()
    with handle_errors():
        get_timezone(config.timezone_name)
    for problem in config.validate():
        print_warning(problem)
    configure_logging(config.log_level if config.log_level in LOG_LEVELS else "WARNING")
    ctx.obj = {"user_id": user or config.user_id}


# ============================================================================
# Library Commands
# ============================================================================


@books_app.command("add")
def books_add(
    ctx: typer.Context,
    title: str = typer.Option(..., "--title", "-t", help="Book title"),
    author: Optional[str] = typer.Option(None, "--author", "-a", help="Author"),
    pages: Optional[int] = typer.Option(None, "--pages", "-p", help="Page count"),
    isbn: Optional[str] = typer.Option(None, "--isbn", help="ISBN"),
    status: ReadingStatus = typer.Option(
        ReadingStatus.WANT_TO_READ, "--status", "-s", help="Initial status"
    ),
) -> None:
    """Add a book and put it on your shelf."""
    from .library import LibraryTracker

    with handle_errors():
        user_id = current_user(ctx)
        tracker = LibraryTracker(get_db())
        book = tracker.add_book(title=title, author=author, page_count=pages, isbn=isbn)
        tracker.add_to_library(user_id, str(book.id), status)

    console.print(f"[green]Added:[/green] {book.title}" + (f" by {book.author}" if book.author else ""))
    console.print(f"[dim]ID: {book.id}[/dim]")


@books_app.command("shelve")
def books_shelve(
    ctx: typer.Context,
    book: str = typer.Argument(..., help="Book title or ID"),
    status: ReadingStatus = typer.Option(
        ReadingStatus.WANT_TO_READ, "--status", "-s", help="Initial status"
    ),
) -> None:
    """Put a book that is already in the catalogue on your shelf."""
    from .library import LibraryTracker

    with handle_errors():
        user_id = current_user(ctx)
        found = find_book(book)
        LibraryTracker(get_db()).add_to_library(user_id, found.id, status)

    print_success(f"'{found.title}' added to your library as {status.value}")


@books_app.command("catalog")
def books_catalog() -> None:
    """List every book in the catalogue."""
    from .library import LibraryTracker

    with handle_errors():
        books = LibraryTracker(get_db()).all_books()

    if not books:
        console.print("[dim]The catalogue is empty.[/dim]")
        return

    table = Table(title="Catalogue", show_header=True, header_style="bold magenta")
    table.add_column("Title", style="cyan", no_wrap=False, max_width=40)
    table.add_column("Author", style="green", max_width=25)
    table.add_column("Pages", justify="right")
    table.add_column("ID", style="dim")

    for b in books:
        table.add_row(b.title, b.author or "-", str(b.page_count or "-"), str(b.id))

    console.print(table)


@books_app.command("delete")
def books_delete(
    book: str = typer.Argument(..., help="Book title or ID"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Delete a book with its sessions and notes."""
    from .library import LibraryTracker

    with handle_errors():
        found = find_book(book)

    if not force:
        if not typer.confirm(f"Delete '{found.title}' with all its sessions and notes?"):
            console.print("[dim]Cancelled.[/dim]")
            return

    with handle_errors():
        LibraryTracker(get_db()).delete_book(found.id)

    print_success(f"Deleted '{found.title}'")


@books_app.command("list")
def books_list(
    ctx: typer.Context,
    status: Optional[ReadingStatus] = typer.Option(None, "--status", "-s", help="Filter by status"),
) -> None:
    """List the books on your shelf."""
    from .library import LibraryTracker

    with handle_errors():
        user_id = current_user(ctx)
        entries = LibraryTracker(get_db()).get_library(user_id, status)

    if not entries:
        console.print("[dim]No books found.[/dim]")
        return

    db = get_db()
    table = Table(title="Library", show_header=True, header_style="bold magenta")
    table.add_column("Title", style="cyan", no_wrap=False, max_width=40)
    table.add_column("Author", style="green", max_width=25)
    table.add_column("Status", style="yellow")
    table.add_column("Page", justify="right")
    table.add_column("Rating", justify="center")

    for entry in entries:
        book = db.get_book(str(entry.book_id))
        rating = "★" * entry.rating + "☆" * (5 - entry.rating) if entry.rating else "-"
        table.add_row(
            book.title if book else "?",
            (book.author if book else None) or "-",
            entry.status.value,
            str(entry.current_page),
            rating,
        )

    console.print(table)


@books_app.command("status")
def books_status(
    ctx: typer.Context,
    book: str = typer.Argument(..., help="Book title or ID"),
    status: ReadingStatus = typer.Argument(..., help="New status"),
) -> None:
    """Change a book's reading status."""
    from .library import LibraryTracker

    with handle_errors():
        user_id = current_user(ctx)
        found = find_book(book)
        LibraryTracker(get_db()).update_status(user_id, found.id, status)

    print_success(f"'{found.title}' marked as {status.value}")


@books_app.command("rate")
def books_rate(
    ctx: typer.Context,
    book: str = typer.Argument(..., help="Book title or ID"),
    rating: int = typer.Argument(..., help="Rating 1-5"),
) -> None:
    """Rate a book."""
    from .library import LibraryTracker

    with handle_errors():
        user_id = current_user(ctx)
        found = find_book(book)
        LibraryTracker(get_db()).rate_book(user_id, found.id, rating)

    print_success(f"Rated '{found.title}' {rating}/5")


@books_app.command("stats")
def books_stats(
    ctx: typer.Context,
    book: str = typer.Argument(..., help="Book title or ID"),
) -> None:
    """Show reading totals for one book."""
    from .reading import SessionManager

    with handle_errors():
        user_id = current_user(ctx)
        found = find_book(book)
        stats = SessionManager(get_db()).book_stats(user_id, found.id)

    speed = f"{stats.average_pages_per_minute:.1f} pages/min" if stats.average_pages_per_minute else "-"
    console.print(
        Panel(
            f"Sessions: {stats.total_sessions}\n"
            f"Time: {stats.formatted_total_time}\n"
            f"Pages: {stats.total_pages_read}\n"
            f"Speed: {speed}",
            title=found.title,
        )
    )


# ============================================================================
# Reading Session Commands
# ============================================================================


def _active_session(ctx: typer.Context, book: Optional[str]) -> ReadingSessionResponse:
    from .reading import SessionManager

    user_id = current_user(ctx)
    book_id = find_book(book).id if book else None
    session = SessionManager(get_db()).get_active_session(user_id, book_id)
    if session is None:
        raise NotFoundError("No active reading session")
    return session


@session_app.command("start")
def session_start(
    ctx: typer.Context,
    book: str = typer.Argument(..., help="Book title or ID"),
    page: Optional[int] = typer.Option(None, "--page", "-p", help="Starting page"),
) -> None:
    """Start a reading session."""
    from .reading import SessionManager

    with handle_errors():
        user_id = current_user(ctx)
        found = find_book(book)
        SessionManager(get_db()).start_session(user_id, found.id, page)

    console.print(f"[green]Started reading:[/green] {found.title}")
    if page is not None:
        console.print(f"  Starting at page {page}")


@session_app.command("pause")
def session_pause(
    ctx: typer.Context,
    book: Optional[str] = typer.Option(None, "--book", "-b", help="Book title or ID"),
) -> None:
    """Pause the active session."""
    from .reading import SessionManager

    with handle_errors():
        active = _active_session(ctx, book)
        manager = SessionManager(get_db())
        session = manager.pause_session(current_user(ctx), str(active.id))

    from .reading.timer import format_duration

    console.print(f"[yellow]Paused[/yellow] at {format_duration(manager.elapsed(session))}")


@session_app.command("resume")
def session_resume(
    ctx: typer.Context,
    book: Optional[str] = typer.Option(None, "--book", "-b", help="Book title or ID"),
) -> None:
    """Resume a paused session."""
    from .reading import SessionManager

    with handle_errors():
        active = _active_session(ctx, book)
        SessionManager(get_db()).resume_session(current_user(ctx), str(active.id))

    console.print("[green]Resumed reading.[/green]")


@session_app.command("end")
def session_end(
    ctx: typer.Context,
    book: Optional[str] = typer.Option(None, "--book", "-b", help="Book title or ID"),
    page: Optional[int] = typer.Option(None, "--page", "-p", help="Page reached"),
    notes: Optional[str] = typer.Option(None, "--notes", "-n", help="Session notes"),
) -> None:
    """End the active session and log it."""
    from .reading import SessionManager

    with handle_errors():
        active = _active_session(ctx, book)
        session = SessionManager(get_db()).end_session(
            current_user(ctx), str(active.id), end_page=page, notes=notes
        )

    console.print("[green]Reading session logged![/green]")
    console.print(f"  Duration: {session.formatted_duration}")
    if session.pages_read is not None:
        console.print(f"  Pages read: {session.pages_read}")


@session_app.command("cancel")
def session_cancel(
    ctx: typer.Context,
    book: Optional[str] = typer.Option(None, "--book", "-b", help="Book title or ID"),
) -> None:
    """Discard the active session without logging it."""
    from .reading import SessionManager

    with handle_errors():
        active = _active_session(ctx, book)
        SessionManager(get_db()).cancel_session(current_user(ctx), str(active.id))

    print_success("Reading session cancelled.")


@session_app.command("status")
def session_status(ctx: typer.Context) -> None:
    """Show the active session and its live timer."""
    from .reading import SessionManager

    with handle_errors():
        user_id = current_user(ctx)
        manager = SessionManager(get_db())
        session = manager.get_active_session(user_id)

    if session is None:
        console.print("[dim]No active reading session.[/dim]")
        console.print("[dim]Use 'quietly session start \"Book Title\"' to begin.[/dim]")
        return

    console.print(session_table(session, "Active Reading Session", manager.elapsed(session)))


@session_app.command("history")
def session_history(
    ctx: typer.Context,
    limit: int = typer.Option(10, "--limit", "-l", help="Number of sessions"),
) -> None:
    """Show recently finished sessions."""
    from .reading import SessionManager

    with handle_errors():
        user_id = current_user(ctx)
        sessions = SessionManager(get_db()).get_recent_sessions(user_id, limit)

    if not sessions:
        console.print("[dim]No finished sessions yet.[/dim]")
        return

    db = get_db()
    tz = get_config().tz
    table = Table(title="Recent Sessions", show_header=True, header_style="bold magenta")
    table.add_column("Date", style="cyan")
    table.add_column("Book", style="green", max_width=40)
    table.add_column("Duration", justify="right")
    table.add_column("Pages", justify="right")

    for s in sessions:
        book = db.get_book(str(s.book_id))
        table.add_row(
            s.started_at.astimezone(tz).strftime("%Y-%m-%d"),
            book.title if book else "?",
            s.formatted_duration,
            str(s.pages_read) if s.pages_read is not None else "-",
        )

    console.print(table)


# ============================================================================
# Goal Commands
# ============================================================================


@goals_app.command("set")
def goals_set(
    ctx: typer.Context,
    goal_type: GoalType = typer.Argument(..., help="Goal type"),
    target: int = typer.Argument(..., help="Target minutes or books"),
) -> None:
    """Set (or replace) a reading goal."""
    from .stats import GoalTracker

    with handle_errors():
        user_id = current_user(ctx)
        goal = GoalTracker(get_db()).set_goal(user_id, goal_type, target)

    print_success(f"Goal set: {goal.display_target} {goal.goal_type.period_description}")


@goals_app.command("show")
def goals_show(ctx: typer.Context) -> None:
    """Show reading goals and progress."""
    from .stats import GoalTracker

    with handle_errors():
        user_id = current_user(ctx)
        progress_list = GoalTracker(get_db()).progress_all(user_id)

    if not progress_list:
        console.print("[dim]No reading goals set.[/dim]")
        console.print("[dim]Use 'quietly goals set <type> <target>' to set a goal.[/dim]")
        return

    table = Table(title="Reading Goals", show_header=True, header_style="bold magenta")
    table.add_column("Goal", style="cyan")
    table.add_column("Progress", justify="center")
    table.add_column("Current", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("Status")

    for p in progress_list:
        if p.is_complete:
            status = "[bold green]Complete![/bold green]"
        elif p.percentage >= 50:
            status = "[yellow]Making Progress[/yellow]"
        else:
            status = "[dim]In Progress[/dim]"

        table.add_row(
            p.goal.goal_type.display_name,
            f"[{progress_bar(p.percentage)}] {p.percentage}%",
            str(p.current_value),
            f"{p.target_value} {p.goal.goal_type.unit}",
            status,
        )

    console.print(table)


@goals_app.command("delete")
def goals_delete(
    ctx: typer.Context,
    goal_type: GoalType = typer.Argument(..., help="Goal type to remove"),
) -> None:
    """Delete a reading goal."""
    from .stats import GoalTracker

    with handle_errors():
        user_id = current_user(ctx)
        tracker = GoalTracker(get_db())
        goal = tracker.get_goal_by_type(user_id, goal_type)
        if goal is None:
            raise NotFoundError(f"No {goal_type.value} goal set")
        tracker.delete_goal(user_id, str(goal.id))

    print_success(f"Deleted {goal_type.display_name} goal")


# ============================================================================
# Notes Commands
# ============================================================================


def notes_table(notes: list, title: str) -> Table:
    """Create a rich table listing notes with their books."""
    db = get_db()
    titles: dict[str, str] = {}

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", max_width=8)
    table.add_column("Book", style="cyan", max_width=25)
    table.add_column("Type")
    table.add_column("Page", justify="right")
    table.add_column("Content", no_wrap=False, max_width=50)

    for note in notes:
        book_id = str(note.book_id)
        if book_id not in titles:
            book = db.get_book(book_id)
            titles[book_id] = book.title if book else "?"
        table.add_row(
            str(note.id)[:8],
            titles[book_id],
            note.note_type.display_name,
            note.page_label or "-",
            note.short_content,
        )
    return table


def _resolve_note_id(ctx: typer.Context, prefix: str) -> str:
    """Expand a note ID prefix as shown by ``notes list``."""
    from .notes import NotesManager

    matches = [
        str(n.id)
        for n in NotesManager(get_db()).list_notes(current_user(ctx))
        if str(n.id).startswith(prefix)
    ]
    if len(matches) != 1:
        raise NotFoundError(f"Note not found: {prefix}")
    return matches[0]


@notes_app.command("add")
def notes_add(
    ctx: typer.Context,
    book: str = typer.Argument(..., help="Book title or ID"),
    content: str = typer.Argument(..., help="Note text"),
    note_type: NoteType = typer.Option(NoteType.NOTE, "--type", "-t", help="note or quote"),
    page: Optional[int] = typer.Option(None, "--page", "-p", help="Page number"),
) -> None:
    """Add a note or quote for a book."""
    from .notes import NotesManager

    with handle_errors():
        user_id = current_user(ctx)
        found = find_book(book)
        note = NotesManager(get_db()).add_note(user_id, found.id, content, note_type, page)

    print_success(f"{note.note_type.display_name} added to '{found.title}'")
    console.print(f"[dim]ID: {note.id}[/dim]")


@notes_app.command("list")
def notes_list(
    ctx: typer.Context,
    book: Optional[str] = typer.Option(None, "--book", "-b", help="Filter by book"),
    note_type: Optional[NoteType] = typer.Option(None, "--type", "-t", help="Filter by type"),
) -> None:
    """List your notes, newest first."""
    from .notes import NotesManager

    with handle_errors():
        user_id = current_user(ctx)
        book_id = find_book(book).id if book else None
        notes = NotesManager(get_db()).list_notes(user_id, book_id, note_type)

    if not notes:
        console.print("[dim]No notes found.[/dim]")
        return

    console.print(notes_table(notes, "Notes"))


@notes_app.command("show")
def notes_show(
    ctx: typer.Context,
    note_id: str = typer.Argument(..., help="Note ID (a prefix is enough)"),
) -> None:
    """Show one note in full."""
    from .notes import NotesManager

    with handle_errors():
        user_id = current_user(ctx)
        note = NotesManager(get_db()).get_note(user_id, _resolve_note_id(ctx, note_id))

    book = get_db().get_book(str(note.book_id))
    parts = [f"[bold]{book.title if book else 'Unknown'}[/bold]"]
    if note.page_label:
        parts.append(note.page_label)
    parts.append(f"\n{note.content}")
    parts.append(f"\n[dim]{format_timestamp(note.created_at, get_config().tz)}[/dim]")

    console.print(Panel("\n".join(parts), title=f"[blue]{note.note_type.display_name}[/blue]"))


@notes_app.command("edit")
def notes_edit(
    ctx: typer.Context,
    note_id: str = typer.Argument(..., help="Note ID (a prefix is enough)"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="New text"),
    page: Optional[int] = typer.Option(None, "--page", "-p", help="New page number"),
    note_type: Optional[NoteType] = typer.Option(None, "--type", "-t", help="note or quote"),
    clear_page: bool = typer.Option(False, "--clear-page", help="Remove the page number"),
) -> None:
    """Edit a note."""
    from .notes import NotesManager

    changes: dict = {}
    if content is not None:
        changes["content"] = content
    if note_type is not None:
        changes["note_type"] = note_type
    if clear_page:
        changes["page_number"] = None
    elif page is not None:
        changes["page_number"] = page

    if not changes:
        print_warning("Nothing to change.")
        return

    with handle_errors():
        user_id = current_user(ctx)
        NotesManager(get_db()).update_note(user_id, _resolve_note_id(ctx, note_id), **changes)

    print_success("Note updated")


@notes_app.command("delete")
def notes_delete(
    ctx: typer.Context,
    note_id: str = typer.Argument(..., help="Note ID (a prefix is enough)"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Delete a note."""
    from .notes import NotesManager

    with handle_errors():
        user_id = current_user(ctx)
        full_id = _resolve_note_id(ctx, note_id)

    if not force:
        if not typer.confirm("Delete this note?"):
            console.print("[dim]Cancelled.[/dim]")
            return

    with handle_errors():
        NotesManager(get_db()).delete_note(user_id, full_id)

    print_success("Note deleted")


@notes_app.command("search")
def notes_search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Text to look for in notes, titles or authors"),
) -> None:
    """Search your notes."""
    from .notes import NotesManager

    with handle_errors():
        user_id = current_user(ctx)
        notes = NotesManager(get_db()).search_notes(user_id, query)

    if not notes:
        console.print(f"[dim]No notes found matching '{query}'.[/dim]")
        return

    console.print(notes_table(notes, f"Notes matching '{query}'"))


@notes_app.command("books")
def notes_books(ctx: typer.Context) -> None:
    """Show how many notes you have per book."""
    from .notes import NotesManager

    with handle_errors():
        user_id = current_user(ctx)
        groups = NotesManager(get_db()).group_by_book(user_id)

    if not groups:
        console.print("[dim]No notes found.[/dim]")
        return

    table = Table(title="Notes by Book", show_header=True, header_style="bold magenta")
    table.add_column("Book", style="cyan", max_width=40)
    table.add_column("Notes", justify="right")
    table.add_column("Latest", no_wrap=False, max_width=50)

    for group in groups:
        table.add_row(group.book.title, str(group.note_count), group.notes[0].short_content)

    console.print(table)


# ============================================================================
# Streak & Stats Commands
# ============================================================================


@app.command()
def streak(ctx: typer.Context) -> None:
    """Show your reading streak."""
    from .streaks import StreakManager

    with handle_errors():
        user_id = current_user(ctx)
        summary = StreakManager(get_db()).streak_summary(user_id)

    console.print(f"[bold]Current streak:[/bold] {summary.current_streak} {summary.streak_label}")
    console.print(f"Longest streak: {summary.longest_streak}")
    console.print(f"Reading days: {summary.total_reading_days}")
    if summary.status == StreakStatus.AT_RISK:
        print_warning("You haven't read today yet - read to keep your streak!")


@app.command()
def stats(ctx: typer.Context) -> None:
    """Show overall reading statistics."""
    from .reading import SessionManager
    from .stats import ReadingAnalytics

    with handle_errors():
        user_id = current_user(ctx)
        db = get_db()
        summary = ReadingAnalytics(db).reading_stats(user_id)
        manager = SessionManager(db)
        today = manager.minutes_today(user_id)
        week = manager.minutes_this_week(user_id)

    table = Table(title="Reading Stats", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")

    table.add_row("Streak", f"{summary.reading_streak} {'day' if summary.reading_streak == 1 else 'days'}")
    table.add_row("Books", str(summary.total_books))
    table.add_row("Completed", str(summary.books_completed))
    table.add_row("Reading", str(summary.books_reading))
    table.add_row("Want to Read", str(summary.books_want_to_read))
    table.add_row("Sessions", str(summary.total_sessions))
    table.add_row("Total Time", summary.formatted_total_time)
    table.add_row("Today", f"{today} min")
    table.add_row("This Week", f"{week} min")
    table.add_row("Pages Read", str(summary.total_pages_read))
    if summary.average_pages_per_minute:
        table.add_row("Speed", f"{summary.average_pages_per_minute:.1f} pages/min")

    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__

    console.print(f"quietly version {__version__}")


# ============================================================================
# Main Entry Point
# ============================================================================


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
