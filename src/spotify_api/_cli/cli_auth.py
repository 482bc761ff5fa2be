import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Awaitable, Callable, Optional, Tuple, TypeVar

import click
from dotenv import load_dotenv

from .._auth import (
    AuthorizationCodeFlowManager,
    FileTokenStore,
    TokenState,
    make_code_challenge,
    make_code_verifier,
    make_state,
)
from .._config import Config
from .._utils import setup_logging
from .._utils.constants import DEFAULT_TOKEN_FILE
from ..models import Scope, SpotifyError

logger = logging.getLogger(__name__)

load_dotenv()

T = TypeVar("T")

verbose_option = click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging",
)


def _load_config(**overrides) -> Config:
    try:
        return Config.from_env(**overrides)
    except ValueError as e:
        raise click.ClickException(
            f"Invalid configuration. Set SPOTIFY_CLIENT_ID (and SPOTIFY_CLIENT_SECRET "
            f"unless using PKCE).\n{e}"
        ) from e


def _token_store(config: Config) -> FileTokenStore:
    return FileTokenStore(config.token_file or Path(DEFAULT_TOKEN_FILE))


def _run(
    config: Config, action: Callable[[AuthorizationCodeFlowManager], Awaitable[T]]
) -> T:
    """Run ``action`` against a manager attached to the token file."""

    async def runner() -> T:
        manager = AuthorizationCodeFlowManager(config)
        _token_store(config).attach(manager)
        try:
            return await action(manager)
        finally:
            await manager.aclose()

    try:
        return asyncio.run(runner())
    except SpotifyError as e:
        logger.debug("Command failed", exc_info=True)
        raise click.ClickException(e.message) from e
    except ValueError as e:
        raise click.ClickException(str(e)) from e


def _describe(state: TokenState) -> str:
    remaining = (state.expires_at - datetime.now(timezone.utc)).total_seconds()
    expiry = f"expires in {int(remaining)}s" if remaining > 0 else "expired"
    scopes = Scope.make_string(state.scopes) or "(none)"
    renewal = "yes" if state.refresh_token else "no"
    return f"Token {expiry} ({state.expires_at.isoformat()})\nScopes: {scopes}\nRefresh token: {renewal}"


@click.command("authorize-url")
@click.option(
    "--scope",
    "-s",
    "scopes",
    multiple=True,
    type=click.Choice([scope.value for scope in Scope]),
    help="Scope to request; repeat for several",
)
@click.option("--redirect-uri", help="Overrides SPOTIFY_REDIRECT_URI")
@click.option("--show-dialog", is_flag=True, help="Ask the user to approve again")
@verbose_option
def authorize_url(
    scopes: Tuple[str, ...],
    redirect_uri: Optional[str],
    show_dialog: bool,
    verbose: bool,
) -> None:
    """Print a PKCE authorization URL to open in a browser."""
    setup_logging(should_debug=verbose)
    config = _load_config(redirect_uri=redirect_uri)
    manager = AuthorizationCodeFlowManager(config)

    code_verifier = make_code_verifier()
    state = make_state()
    try:
        url = manager.make_authorization_url(
            [Scope(scope) for scope in scopes],
            state=state,
            show_dialog=show_dialog,
            code_challenge=make_code_challenge(code_verifier),
        )
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    click.echo(url)
    click.echo(f"State: {state}")
    click.echo(f"Code verifier: {code_verifier}")
    click.echo("Pass the code from the redirect to 'exchange' together with --verifier.")


@click.command()
@click.argument("code")
@click.option("--verifier", help="PKCE code verifier printed by 'authorize-url'")
@click.option("--redirect-uri", help="Overrides SPOTIFY_REDIRECT_URI")
@verbose_option
def exchange(
    code: str, verifier: Optional[str], redirect_uri: Optional[str], verbose: bool
) -> None:
    """Exchange an authorization CODE for tokens and store them."""
    setup_logging(should_debug=verbose)
    config = _load_config(redirect_uri=redirect_uri)
    state = _run(
        config,
        lambda manager: manager.request_access_and_refresh_tokens(
            code, code_verifier=verifier
        ),
    )
    click.echo("Authorization successful")
    click.echo(_describe(state))


@click.command()
@verbose_option
def status(verbose: bool) -> None:
    """Show the stored token."""
    setup_logging(should_debug=verbose)
    config = _load_config()
    state = _token_store(config).load()
    if state is None:
        click.echo("Not authorized")
        return
    click.echo(_describe(state))


@click.command()
@verbose_option
def refresh(verbose: bool) -> None:
    """Refresh the stored token now."""
    setup_logging(should_debug=verbose)
    config = _load_config()
    state = _run(config, lambda manager: manager.refresh())
    click.echo("Token refreshed")
    click.echo(_describe(state))


@click.command()
@verbose_option
def logout(verbose: bool) -> None:
    """Forget the stored token."""
    setup_logging(should_debug=verbose)
    config = _load_config()

    async def deauthorize(manager: AuthorizationCodeFlowManager) -> None:
        manager.deauthorize()

    _run(config, deauthorize)
    click.echo("Logged out")
