"""Main CLI entry point for AlertDesk."""

import logging
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from alertdesk.cli.alerts import (
    create_alert,
    delete_alert,
    edit_alert,
    init_config,
    list_alerts,
    symbols,
)

# Console for rich output
console = Console()

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _setup_logging(verbose: bool) -> None:
    """Route log records through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "--base-url",
    default=None,
    help="Alert service URL (overrides config and ALERTDESK_BASE_URL).",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
@click.version_option(package_name="alertdesk")
@click.pass_context
def cli(ctx: click.Context, base_url: Optional[str], verbose: bool) -> None:
    """AlertDesk - manage stock price alerts on the alert service.

    Alerts are stored remotely; the service decides when they hit.

    \b
    Quick Start:
      alertdesk init                       # Write a config file
      alertdesk create NIFTY 22500         # Alert when NIFTY goes above 22500
      alertdesk list                       # Show all alerts
      alertdesk edit ID --price 22600      # Change an alert
      alertdesk delete ID                  # Remove an alert
    """
    # Ensure context object exists for passing data between commands
    ctx.ensure_object(dict)
    _setup_logging(verbose)
    if base_url:
        ctx.obj["base_url"] = base_url


cli.add_command(list_alerts)
cli.add_command(create_alert)
cli.add_command(edit_alert)
cli.add_command(delete_alert)
cli.add_command(symbols)
cli.add_command(init_config)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
