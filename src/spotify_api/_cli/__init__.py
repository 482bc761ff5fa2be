import click

from .cli_auth import authorize_url, exchange, logout, refresh, status


@click.group()
@click.version_option(package_name="spotify-api-runtime")
def cli() -> None:
    """Manage Spotify Web API authorization from the command line."""


cli.add_command(authorize_url)
cli.add_command(exchange)
cli.add_command(status)
cli.add_command(refresh)
cli.add_command(logout)
