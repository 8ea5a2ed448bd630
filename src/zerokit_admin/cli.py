"""Admin CLI - tenant administration over the signed admin API."""

import asyncio
import functools
import json
import sys
from collections.abc import Awaitable, Callable, Coroutine
from pathlib import Path
from typing import Any, ParamSpec, TypeVar

import click
from rich.console import Console
from rich.table import Table

from zerokit_admin.client import ZeroKitAdminClient, encode_json
from zerokit_admin.common.errors import ZeroKitError
from zerokit_admin.common.logging import setup_logging
from zerokit_admin.common.settings import Settings
from zerokit_admin.models import RegistrationValidation
from zerokit_admin.signer import (
    HMAC_HEADERS,
    Credentials,
    RequestSigner,
    SignableRequest,
    canonical_string,
)

console = Console()

P = ParamSpec("P")
R = TypeVar("R")


def async_command(f: Callable[P, Coroutine[Any, Any, R]]) -> Callable[P, R]:
    """Decorator to run async commands."""

    @functools.wraps(f)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        return asyncio.run(f(*args, **kwargs))

    return wrapper


async def _run(
    ctx: click.Context,
    action: Callable[[ZeroKitAdminClient], Awaitable[R]],
) -> R:
    """Run ``action`` against a client, exiting with status 1 on errors."""
    settings: Settings = ctx.obj["settings"]
    factory = ctx.obj["client_factory"]
    try:
        async with factory(settings) as client:
            return await action(client)
    except ZeroKitError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)


@click.group()
@click.option("--service-url", default=None, help="Tenant service URL")
@click.option("--admin-user-id", default=None, help="Tenant admin user id")
@click.option("--admin-key", default=None, help="Hex-encoded tenant admin key")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level",
)
@click.pass_context
def cli(
    ctx: click.Context,
    service_url: str | None,
    admin_user_id: str | None,
    admin_key: str | None,
    log_level: str | None,
) -> None:
    """Tenant admin CLI for the ZeroKit admin API."""
    overrides = {
        "service_url": service_url,
        "admin_user_id": admin_user_id,
        "admin_key": admin_key,
        "log_level": log_level.upper() if log_level else None,
    }
    settings = Settings(**{key: value for key, value in overrides.items() if value is not None})
    setup_logging(settings.log_level, settings.log_json)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj.setdefault("client_factory", ZeroKitAdminClient.from_settings)


# === Signing ===


@cli.command("sign")
@click.option("--method", "-X", type=click.Choice(["GET", "POST"]), default="GET")
@click.option("--body", "-d", help="Raw JSON body (POST only)")
@click.option("--body-file", type=click.Path(exists=True, dir_okay=False), help="Read the body from a file")
@click.argument("target")
@click.pass_context
def sign_cmd(
    ctx: click.Context,
    method: str,
    body: str | None,
    body_file: str | None,
    target: str,
) -> None:
    """Sign a request offline and print its headers and canonical string.

    TARGET is a path with an optional, already encoded query string.
    """
    settings: Settings = ctx.obj["settings"]

    if method == "GET" and (body is not None or body_file):
        raise click.UsageError("--body and --body-file are only valid with -X POST", ctx=ctx)

    content: bytes | None = None
    if body_file:
        content = Path(body_file).read_bytes()
    elif body is not None:
        content = body.encode("utf-8")
    if method == "POST" and content is None:
        content = encode_json({})

    request = SignableRequest.from_url(method, target, body=content)
    signer = RequestSigner(
        Credentials(admin_user_id=settings.admin_user_id, admin_key=settings.admin_key)
    )
    try:
        signer.sign(request)
    except ZeroKitError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)

    table = Table(title=f"{request.method} {request.target}")
    table.add_column("Header", style="cyan")
    table.add_column("Value", overflow="fold")
    for name, value in request.headers:
        table.add_row(name, value)
    console.print(table)

    signed = (request.get_header(HMAC_HEADERS) or "").split(",")
    console.print("Canonical string:", style="bold")
    console.print(canonical_string(request, signed), markup=False, highlight=False, soft_wrap=True)


# === Tresor Management ===


@cli.command("list-members")
@click.argument("tresor_id")
@click.pass_context
@async_command
async def list_members(ctx: click.Context, tresor_id: str) -> None:
    """List the members of a tresor."""
    members = await _run(ctx, lambda client: client.list_members(tresor_id))

    if not members:
        console.print(f"[yellow]No members in tresor {tresor_id}[/yellow]")
        return

    table = Table(title=f"Members of {tresor_id}")
    table.add_column("User ID", style="cyan")
    for member in members:
        table.add_row(member)
    console.print(table)


@cli.command("approve-tresor")
@click.argument("tresor_id")
@click.pass_context
@async_command
async def approve_tresor(ctx: click.Context, tresor_id: str) -> None:
    """Approve the creation of a tresor."""
    await _run(ctx, lambda client: client.approve_tresor_creation(tresor_id))
    console.print(f"[green]Tresor {tresor_id} approved[/green]")


@cli.command("approve-share")
@click.argument("operation_id")
@click.pass_context
@async_command
async def approve_share(ctx: click.Context, operation_id: str) -> None:
    """Approve a pending share operation."""
    await _run(ctx, lambda client: client.approve_share(operation_id))
    console.print(f"[green]Share {operation_id} approved[/green]")


@cli.command("approve-kick")
@click.argument("operation_id")
@click.pass_context
@async_command
async def approve_kick(ctx: click.Context, operation_id: str) -> None:
    """Approve a pending kick operation."""
    await _run(ctx, lambda client: client.approve_kick(operation_id))
    console.print(f"[green]Kick {operation_id} approved[/green]")


# === User Registration ===


@cli.command("init-registration")
@click.pass_context
@async_command
async def init_registration(ctx: click.Context) -> None:
    """Start a user registration and print the session as JSON."""
    registration = await _run(ctx, lambda client: client.init_user_registration())
    console.print(json.dumps(registration.to_dict(), indent=2), markup=False, highlight=False)


@cli.command("validate-registration")
@click.option("--user-id", required=True, help="User id returned by init-registration")
@click.option("--reg-session-id", required=True, help="Registration session id")
@click.option("--reg-session-verifier", required=True, help="Registration session verifier")
@click.option("--reg-validation-verifier", required=True, help="Validation verifier from the client")
@click.pass_context
@async_command
async def validate_registration(
    ctx: click.Context,
    user_id: str,
    reg_session_id: str,
    reg_session_verifier: str,
    reg_validation_verifier: str,
) -> None:
    """Complete a user registration."""
    validation = RegistrationValidation(
        user_id=user_id,
        reg_session_id=reg_session_id,
        reg_session_verifier=reg_session_verifier,
        reg_validation_verifier=reg_validation_verifier,
    )
    await _run(ctx, lambda client: client.validate_user_registration(validation))
    console.print(f"[green]User {user_id} registration validated[/green]")


def main() -> None:
    """CLI entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
