# ruff: noqa: I001
"""CLI for the ``split_ledger`` package.

A Typer console interface over the ledger. The root callback loads a local
``.env`` (without overriding the environment) and configures logging; each
command then resolves :class:`~split_ledger.config.Settings` and delegates to
the services (database commands) or to :class:`~split_ledger.remote.LedgerClient`
(listing commands that go through the HTTP boundary).
"""

from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .config import load_settings
from .errors import LedgerError
from .logging_setup import configure_logging
from .transactions import classify, default_range, parse_day

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Personal/shared finance ledger: users, transactions and transaction parties.",
)


def _fail(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    raise typer.Exit(1)


def _database_url(override: str | None) -> str:
    url = override or load_settings().database_url
    if not url:
        _fail("DATABASE_URL is not set; pass --database-url or set it in .env")
    return url  # type: ignore[return-value]


# ---- Database commands -------------------------------------------------------


@app.command("init-db")
def init_db_cmd(
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
) -> None:
    """Create all ledger tables (development helper; use Alembic in production)."""

    from db import metadata
    from db.client import get_engine

    url = _database_url(database_url)
    metadata.create_all(bind=get_engine(database_url=url))
    typer.echo("Database initialized.")


@app.command("register")
def register_cmd(
    email: str = typer.Option(..., help="Email address used to sign in."),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
    first_name: str | None = typer.Option(None, help="First name."),
    last_name: str | None = typer.Option(None, help="Last name."),
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
) -> None:
    """Register a new user."""

    from db.client import session_scope
    from db.models.ledger import User

    from .users import UserService

    url = _database_url(database_url)
    try:
        with session_scope(database_url=url) as session:
            user = UserService(session).create(
                User(email=email, first_name=first_name, last_name=last_name), password
            )
            user_id = user.user_id
    except LedgerError as e:
        _fail(e.message)
    typer.echo(str(user_id))


@app.command("users")
def users_cmd(
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
) -> None:
    """List registered users."""

    from db.client import session_scope

    from .users import UserService

    url = _database_url(database_url)
    table = Table("User ID", "Email", "First name", "Last name")
    with session_scope(database_url=url) as session:
        for user in UserService(session).get_all():
            table.add_row(str(user.user_id), user.email, user.first_name or "", user.last_name or "")
    Console().print(table)


@app.command("delete-user")
def delete_user_cmd(
    user_id: str = typer.Argument(..., help="Identifier of the user to delete."),
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
) -> None:
    """Delete a user and everything they own (no-op for unknown ids)."""

    from db.client import session_scope

    from .users import UserService

    url = _database_url(database_url)
    try:
        with session_scope(database_url=url) as session:
            UserService(session).delete(user_id)
    except LedgerError as e:
        _fail(e.message)
    typer.echo("Deleted.")


@app.command("serve")
def serve_cmd(
    host: str = typer.Option("127.0.0.1", help="Interface to bind."),
    port: int = typer.Option(5000, help="Port to listen on."),
    debug: bool = typer.Option(False, help="Enable the Flask debugger and reloader."),
) -> None:
    """Run the HTTP service with the Flask development server."""

    from .server import create_app

    settings = load_settings()
    if not settings.database_url:
        _fail("DATABASE_URL is not set")
    create_app(settings).run(host=host, port=port, debug=debug)


# ---- HTTP client commands ----------------------------------------------------


def _client(base_url: str | None):
    from .remote import LedgerClient

    return LedgerClient(base_url or load_settings().api_base_url)


@app.command("login")
def login_cmd(
    email: str = typer.Option(..., help="Email address."),
    password: str = typer.Option(..., prompt=True, hide_input=True),
    base_url: str | None = typer.Option(None, help="Override SPLIT_API_BASE_URL."),
) -> None:
    """Authenticate against the service and print a bearer token."""

    with _client(base_url) as client:
        user = client.authenticate(email, password)
    if user is None or not user.token:
        _fail("Email or password is incorrect")
    typer.echo(user.token)


@app.command("transactions")
def transactions_cmd(
    start: str | None = typer.Option(None, help="Start day (YYYY-MM-DD); default one month ago."),
    end: str | None = typer.Option(None, help="End day (YYYY-MM-DD); default today."),
    token: str = typer.Option("", envvar="SPLIT_TOKEN", help="Bearer token (may be empty)."),
    base_url: str | None = typer.Option(None, help="Override SPLIT_API_BASE_URL."),
) -> None:
    """List transactions in a date range, newest first."""

    default_start, default_end = default_range(date.today())
    try:
        start_day = parse_day(start, param="start") if start else default_start
        end_day = parse_day(end, param="end") if end else default_end
    except LedgerError as e:
        _fail(e.message)

    with _client(base_url) as client:
        items = client.list_transactions(start_day, end_day, token)

    table = Table("Date", "Party", "Category", "Shared", "Amount ($)")
    styles = {"expense": "red", "income": "green", "transfer": "blue"}
    for tx in items:
        amount = tx.amount if tx.amount is not None else 0
        table.add_row(
            tx.transaction_date.strftime("%d %B"),
            tx.transaction_party_name or "",
            tx.category_name or "",
            "yes" if tx.is_shared else "no",
            f"[{styles[classify(tx)]}]{amount:.2f}[/]",
        )
    Console().print(table)


@app.command("parties")
def parties_cmd(
    token: str = typer.Option("", envvar="SPLIT_TOKEN", help="Bearer token (may be empty)."),
    base_url: str | None = typer.Option(None, help="Override SPLIT_API_BASE_URL."),
) -> None:
    """List transaction parties by name."""

    with _client(base_url) as client:
        items = client.list_parties(token)

    table = Table("Party Name")
    for party in items:
        table.add_row(party.transaction_party_name)
    Console().print(table)


@app.callback()
def _root() -> None:
    """Load ``.env`` from the current working directory and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover
    app()
