"""
Click CLI for the TD Ameritrade login flow.

Commands:
    serve   Run the login web app (/authenticate, /callback, /quote)
    status  Show whether a token is stored and when it expires
    revoke  Delete the stored token file
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Optional

import click

from .oauth.authenticator import Authenticator
from .oauth.config import DEFAULT_TOKEN_FILE, TDAmeritradeOAuthConfig
from .oauth.cookie_store import SignedCookieStore
from .oauth.exceptions import ConfigurationError, TokenStorageError
from .oauth.token_storage import CredentialStore, FileCredentialStore
from .oauth.web import create_app

logger = logging.getLogger(__name__)


def _print_error(message: str) -> None:
    """Print error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def _print_success(message: str) -> None:
    click.secho(message, fg="green")


def format_time_remaining(seconds: float) -> str:
    """
    Format seconds into human-readable time remaining.

    Returns:
        Formatted string (e.g., "2h 15m", "45m", "expired")
    """
    if seconds <= 0:
        return "expired"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)

    if hours > 0:
        return f"{hours}h {minutes}m"
    elif minutes > 0:
        return f"{minutes}m"
    else:
        return f"{int(seconds)}s"


@click.group()
@click.option(
    "--token-file",
    default=DEFAULT_TOKEN_FILE,
    help="Token file path",
    envvar="TDAMERITRADE_TOKEN_FILE",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx: click.Context, token_file: str, verbose: bool) -> None:
    """
    TD Ameritrade login tool.

    Log in through the browser and inspect the stored token.
    """
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["token_file"] = token_file
    ctx.obj["verbose"] = verbose


@cli.command()
@click.option("--host", default="127.0.0.1", help="Interface to bind")
@click.option("--port", default=8080, type=int, help="Port to listen on")
@click.option("--cert", type=click.Path(exists=True, dir_okay=False), help="TLS certificate file")
@click.option("--key", type=click.Path(exists=True, dir_okay=False), help="TLS private key file")
@click.option(
    "--secret-key",
    envvar="TDAMERITRADE_SECRET_KEY",
    help="Keep tokens in signed browser cookies instead of the token file",
)
@click.pass_context
def serve(
    ctx: click.Context,
    host: str,
    port: int,
    cert: Optional[str],
    key: Optional[str],
    secret_key: Optional[str],
) -> None:
    """
    Run the login web app.

    Open /authenticate in a browser to log in. TD Ameritrade only
    redirects to HTTPS callbacks, so pass --cert and --key unless a
    proxy terminates TLS.

    Example: tdameritrade serve --cert cert.pem --key key.pem
    """
    if bool(cert) != bool(key):
        _print_error("--cert and --key must be given together")
        sys.exit(2)

    try:
        config = TDAmeritradeOAuthConfig.from_env()
    except ConfigurationError as e:
        _print_error(str(e))
        sys.exit(2)

    store: CredentialStore
    if secret_key:
        store = SignedCookieStore(secret_key, secure=bool(cert))
        logger.info("Storing credentials in signed cookies")
    else:
        store = FileCredentialStore(ctx.obj["token_file"], secure=bool(cert))
        logger.info(f"Storing credentials in {ctx.obj['token_file']}")

    authenticator = Authenticator.create(store, config)
    app = create_app(authenticator)

    scheme = "https" if cert else "http"
    click.echo(f"Open {scheme}://{host}:{port}/authenticate to log in")
    app.run(host=host, port=port, ssl_context=(cert, key) if cert else None)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """
    Show the stored token.

    Exits 0 if a token is stored, 1 if not, 2 if the file is unreadable.
    """
    verbose = ctx.obj["verbose"]
    store = FileCredentialStore(ctx.obj["token_file"])

    if not store.exists():
        click.secho("NOT AUTHORIZED", fg="red", bold=True)
        click.echo(f"Token file not found: {store.token_file}")
        click.echo("To authorize, run: tdameritrade serve")
        sys.exit(1)

    try:
        token = store.get_token()
    except TokenStorageError as e:
        _print_error(str(e))
        sys.exit(2)

    if token is None:
        click.secho("NOT AUTHORIZED", fg="red", bold=True)
        click.echo(f"Token file is invalid: {store.token_file}")
        sys.exit(1)

    click.secho("AUTHORIZED", fg="green", bold=True)

    if token.is_expired:
        click.secho("Status:      Token expired", fg="yellow")
        click.echo(f"Expired at:  {token.expires_at.isoformat()}")
        click.echo("Tokens are not refreshed automatically; log in again.")
    else:
        remaining = (token.expires_at - datetime.now(timezone.utc)).total_seconds()
        click.echo("Status:      Active")
        click.echo(f"Expires in:  {format_time_remaining(remaining)}")
        if verbose:
            click.echo(f"Expires at:  {token.expires_at.isoformat()}")

    if verbose:
        click.echo(f"Scope:       {token.scope or 'N/A'}")
        click.echo(f"Token file:  {store.token_file}")


@cli.command()
@click.pass_context
def revoke(ctx: click.Context) -> None:
    """Delete the stored token file."""
    store = FileCredentialStore(ctx.obj["token_file"])

    try:
        deleted = store.delete()
    except TokenStorageError as e:
        _print_error(str(e))
        sys.exit(2)

    if deleted:
        _print_success(f"Deleted {store.token_file}")
    else:
        click.echo(f"No token file at {store.token_file}")


def main() -> None:
    """Entry point for the tdameritrade command."""
    cli(obj={})


if __name__ == "__main__":
    main()
