"""SSO CLI — run the server, bootstrap the schema and the first admin.

Usage:
    sso serve                                  # Run the HTTP API (uvicorn)
    sso init-db                                # Create tables without Alembic
    sso create-admin root@example.com -p ...   # Bootstrap an admin account
    sso pending list                           # Live registration requests
    sso pending approve <id>                   # Promote a request to an account
    sso pending reject <id>                    # Drop a request

Admin registration over HTTP needs an admin token, so the very first
admin has to come from here. Commands talk to the stores directly
(SSO_DATABASE_URL, SSO_REDIS_URL) rather than to a running server.
"""

from __future__ import annotations

import asyncio
import sys
from contextlib import asynccontextmanager

import click

from sso import __version__
from sso.config import settings
from sso.domain.models import Profile
from sso.errors import AuthError
from sso.logging_config import configure_logging

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _service():
    """Build an AuthService over the configured SQL + Redis stores."""
    import redis.asyncio as aioredis

    from sso.auth.jwt import TokenIssuer
    from sso.auth.password import PasswordHasher
    from sso.db.engine import async_session_factory, engine
    from sso.services.auth_service import AuthService
    from sso.storage.redis import RedisPendingStore
    from sso.storage.sql import SqlIdentityStore

    client = aioredis.from_url(settings.redis_url, decode_responses=True)
    try:
        async with async_session_factory() as db:
            yield AuthService(
                identities=SqlIdentityStore(db),
                pending=RedisPendingStore(client, ttl=settings.pending_ttl),
                hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
                tokens=TokenIssuer(settings.jwt_secret, settings.jwt_algorithm),
                token_ttl=settings.token_ttl,
            )
    finally:
        await client.aclose()
        await engine.dispose()


def _run(coro):
    """Run a coroutine from a synchronous click handler.

    Domain errors become a red message and exit status 1.
    """
    try:
        return asyncio.run(coro)
    except AuthError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "—"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="sso")
def main():
    """SSO — identity and access service."""
    configure_logging(settings.environment)


@main.command()
@click.option("--host", default=None, help="Bind address (default: SSO_HOST)")
@click.option("--port", type=int, default=None, help="Port (default: SSO_PORT)")
def serve(host: str | None, port: int | None):
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run(
        "sso.main:app",
        host=host or settings.host,
        port=port or settings.port,
    )


@main.command("init-db")
def init_db():
    """Create the identity tables directly (use Alembic in deployments)."""
    from sso.db.engine import create_tables, engine

    async def _init():
        try:
            await create_tables()
        finally:
            await engine.dispose()

    _run(_init())
    click.secho("Tables created", fg="green")


@main.command("create-admin")
@click.argument("email")
@click.option("--password", "-p", prompt=True, hide_input=True,
              confirmation_prompt=True, help="Admin password")
def create_admin(email: str, password: str):
    """Register an admin account."""

    async def _create():
        async with _service() as svc:
            return await svc.register_admin(Profile(email=email, password=password))

    user_id = _run(_create())
    click.secho(f"Admin {email} created (id {user_id})", fg="green")


# ---------------------------------------------------------------------------
# sso pending ...
# ---------------------------------------------------------------------------


@main.group()
def pending():
    """Review pending registration requests."""


@pending.command("list")
def pending_list():
    """List live registration requests."""

    async def _list():
        async with _service() as svc:
            return await svc.list_pending()

    users = _run(_list())
    if not users:
        click.echo("No pending registrations.")
        return

    rows = [
        {
            "id": u.id,
            "email": u.email,
            "role": u.role.value,
            "name": f"{u.surname} {u.name}".strip(),
            "expires": u.expires_at.strftime("%Y-%m-%d %H:%M") if u.expires_at else "—",
        }
        for u in users
    ]
    _print_table(rows, [
        ("ID", "id", 32),
        ("EMAIL", "email", 30),
        ("ROLE", "role", 8),
        ("NAME", "name", 24),
        ("EXPIRES", "expires", 16),
    ])


@pending.command("approve")
@click.argument("pending_id")
def pending_approve(pending_id: str):
    """Approve a request and create the account."""

    async def _approve():
        async with _service() as svc:
            return await svc.approve_pending(pending_id)

    user_id = _run(_approve())
    click.secho(f"Approved {pending_id} → user {user_id}", fg="green")


@pending.command("reject")
@click.argument("pending_id")
def pending_reject(pending_id: str):
    """Reject (delete) a request."""

    async def _reject():
        async with _service() as svc:
            await svc.delete_pending(pending_id)

    _run(_reject())
    click.secho(f"Rejected {pending_id}", fg="yellow")


if __name__ == "__main__":
    main()
