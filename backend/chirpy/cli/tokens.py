"""Flask CLI commands for administrative refresh token handling."""

from __future__ import annotations

import json
import logging

import click
from flask.cli import with_appcontext

from chirpy.core.container import get_container
from chirpy.schemas import RefreshTokenViewSchema
from chirpy.services._shared.errors import NotFoundError
from chirpy.services._shared.tokens import token_ref

LOGGER = logging.getLogger(__name__)


def _fmt(value) -> str:
    return value.isoformat() if value is not None else "-"


@click.group("tokens")
def tokens_cli() -> None:
    """Inspect and revoke stored refresh tokens."""


@tokens_cli.command("show")
@click.argument("value")
@click.option("--json", "as_json", is_flag=True, help="Print the record as JSON.")
@with_appcontext
def show_command(value: str, as_json: bool) -> None:
    """Print the stored record and computed state of a refresh token."""
    try:
        view = get_container().sessions().describe(value)
    except NotFoundError as exc:
        raise click.ClickException(f"No refresh token {token_ref(value)}") from exc

    if as_json:
        click.echo(json.dumps(RefreshTokenViewSchema().dump(view), indent=2))
        return

    click.echo(f"subject_id  {view.subject_id}")
    click.echo(f"issued_at   {_fmt(view.issued_at)}")
    click.echo(f"expires_at  {_fmt(view.expires_at)}")
    click.echo(f"revoked_at  {_fmt(view.revoked_at)}")
    click.echo(f"state       {view.state.value}")


@tokens_cli.command("revoke")
@click.argument("value")
@with_appcontext
def revoke_command(value: str) -> None:
    """Revoke a refresh token (no-op when unknown or already revoked)."""
    get_container().sessions().revoke(value)
    LOGGER.info("Revoked from CLI", extra={"event": "cli.revoke", "token_ref": token_ref(value)})
    click.echo(f"Revoked {token_ref(value)}")
