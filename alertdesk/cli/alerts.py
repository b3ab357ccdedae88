"""Alert management commands for AlertDesk CLI.

Handles listing, creating, editing and deleting alerts on the alert
service, plus the instrument catalog and config template.
"""

import asyncio
from typing import Optional

import click
from rich.columns import Columns
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from alertdesk.catalog import SYMBOLS
from alertdesk.config import Settings, create_template_config, load_settings
from alertdesk.controllers import (
    AlertFormController,
    AlertListController,
    NotificationScheduler,
    NotificationState,
)
from alertdesk.errors import ConfigError, ValidationError
from alertdesk.models import AlertRecord, format_price
from alertdesk.remote import RemoteAlertStore

console = Console()

SEVERITY_STYLES = {"success": "green", "error": "red", "info": "cyan"}


def _error(message: str) -> None:
    console.print(Panel(
        f"[red]{escape(message)}[/red]",
        title="[bold red]Error[/bold red]",
        border_style="red",
    ))


def _get_settings(ctx: click.Context) -> Settings:
    """Load settings once per invocation, exiting on a bad config file."""
    obj = ctx.ensure_object(dict)
    if "settings" not in obj:
        try:
            obj["settings"] = load_settings()
        except ConfigError as e:
            _error(str(e))
            raise SystemExit(1)
    return obj["settings"]


def _open_store(ctx: click.Context) -> RemoteAlertStore:
    settings = _get_settings(ctx)
    return RemoteAlertStore(
        base_url=ctx.obj.get("base_url") or settings.remote.base_url,
        timeout=settings.remote.timeout,
        transport=ctx.obj.get("transport"),
    )


def _render_notification(state: NotificationState) -> None:
    if not state.visible:
        return
    style = SEVERITY_STYLES[state.severity]
    console.print(Panel(f"[{style}]{escape(state.message)}[/{style}]", border_style=style, expand=False))


def _notifier(ctx: click.Context) -> NotificationScheduler:
    settings = _get_settings(ctx)
    return NotificationScheduler(
        delay=settings.notifications.delay_seconds,
        on_change=_render_notification,
    )


def _category_label(record: AlertRecord) -> str:
    return "-" if record.category is None else record.category.label


def _describe(record: AlertRecord) -> str:
    price = "-" if record.price is None else format_price(record.price)
    return (
        f"ID:        {escape(record.id)}\n"
        f"Symbol:    {escape(record.instrument)}\n"
        f"Category:  {_category_label(record)}\n"
        f"Side:      {record.side or '-'}\n"
        f"Price:     {price}\n"
        f"Comment:   {escape(record.comment) or 'No comment'}"
    )


@click.command("list")
@click.pass_context
def list_alerts(ctx: click.Context) -> None:
    """Display all alerts.

    \b
    Examples:
      alertdesk list
    """
    # Resolve settings before entering the event loop so config errors exit cleanly
    _get_settings(ctx)

    async def run():
        async with _open_store(ctx) as store:
            notifier = _notifier(ctx)
            controller = AlertListController(store, notifier)
            try:
                return await controller.mount()
            finally:
                controller.dispose()
                notifier.close()

    state = asyncio.run(run())

    if state.status == "error":
        _error(state.error or "Failed to fetch alerts")
        raise SystemExit(1)

    if not state.records:
        console.print(Panel(
            "[dim]No alerts set. Use 'alertdesk create SYMBOL PRICE' to create one.[/dim]",
            title="[bold]Alerts[/bold]",
            border_style="dim",
        ))
        return

    table = Table(
        title="Alerts",
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("ID", style="dim")
    table.add_column("Symbol", style="bold")
    table.add_column("Category")
    table.add_column("Side", justify="center")
    table.add_column("Price", justify="right")
    table.add_column("Comment", style="italic")

    for record in state.records:
        if record.side == "BUY":
            side = "[green]BUY[/green]"
        elif record.side == "SHORT":
            side = "[red]SHORT[/red]"
        else:
            side = "[dim]-[/dim]"

        table.add_row(
            escape(record.id),
            escape(record.instrument),
            _category_label(record),
            side,
            "-" if record.price is None else format_price(record.price),
            escape(record.comment) or "[dim]No comment[/dim]",
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(state.records)} alerts[/dim]")


@click.command("create")
@click.argument("symbol", type=click.Choice(SYMBOLS, case_sensitive=False))
@click.argument("price")
@click.option(
    "--direction", "-d",
    type=click.Choice(["above", "below"], case_sensitive=False),
    default="above",
    show_default=True,
    help="Alert when price goes above or below PRICE.",
)
@click.option(
    "--category", "-c",
    default="swing",
    show_default=True,
    help="intraday, swing, weekly, longterm or stock-option (or 0-4).",
)
@click.option("--comment", default="", help="Note to keep with the alert.")
@click.pass_context
def create_alert(ctx: click.Context, symbol: str, price: str, direction: str, category: str, comment: str) -> None:
    """Create a price alert.

    SYMBOL is one of the listed instruments (see 'alertdesk symbols').
    PRICE is the threshold price.

    \b
    Examples:
      alertdesk create NIFTY 22500
      alertdesk create BANKNIFTY 48000 --direction below --category intraday
      alertdesk create INFY 1500 -c longterm --comment "breakout retest"
    """
    _get_settings(ctx)

    async def run():
        async with _open_store(ctx) as store:
            notifier = _notifier(ctx)
            form = AlertFormController(store, notifier)
            try:
                form.set_field("instrument", symbol)
                form.set_field("price", price)
                form.set_field("direction", direction)
                form.set_field("category", category)
                form.set_field("comment", comment)
                return await form.submit()
            finally:
                form.dispose()
                notifier.close()

    try:
        record = asyncio.run(run())
    except ValidationError as e:
        _error(str(e))
        raise SystemExit(1)

    if record is None:
        raise SystemExit(1)

    console.print(Panel(
        f"[bold green]Alert Created[/bold green]\n\n{_describe(record)}",
        title="[bold]New Alert[/bold]",
        border_style="green",
    ))


@click.command("edit")
@click.argument("alert_id")
@click.option("--category", "-c", default=None, help="New category name or 0-4.")
@click.option(
    "--side", "-s",
    type=click.Choice(["buy", "short"], case_sensitive=False),
    default=None,
    help="New hit side.",
)
@click.option("--price", "-p", default=None, help="New threshold price.")
@click.option("--comment", default=None, help="New comment.")
@click.pass_context
def edit_alert(
    ctx: click.Context,
    alert_id: str,
    category: Optional[str],
    side: Optional[str],
    price: Optional[str],
    comment: Optional[str],
) -> None:
    """Edit an existing alert.

    ALERT_ID is the ID shown by 'alertdesk list'. Only the given options
    are changed.

    \b
    Examples:
      alertdesk edit 65f0c2 --price 22600
      alertdesk edit 65f0c2 --side short --comment "trail stop"
    """
    changes = {"category": category, "side": side, "price": price, "comment": comment}
    changes = {name: value for name, value in changes.items() if value is not None}
    if not changes:
        _error("Nothing to change. Pass at least one of --category, --side, --price, --comment.")
        raise SystemExit(1)

    _get_settings(ctx)

    async def run():
        async with _open_store(ctx) as store:
            notifier = _notifier(ctx)
            controller = AlertListController(store, notifier)
            try:
                state = await controller.mount()
                if state.status == "error":
                    _error(state.error or "Failed to fetch alerts")
                    return None

                record = state.find(alert_id)
                if record is None:
                    _error(f"Alert {alert_id} not found")
                    return None

                controller.begin_edit(record)
                for name, value in changes.items():
                    controller.edit_field(name, value)

                if not await controller.commit_edit():
                    return None
                return controller.state.find(alert_id)
            finally:
                controller.dispose()
                notifier.close()

    try:
        record = asyncio.run(run())
    except ValidationError as e:
        _error(str(e))
        raise SystemExit(1)

    if record is None:
        raise SystemExit(1)

    console.print(Panel(_describe(record), title="[bold]Updated Alert[/bold]", border_style="green"))


@click.command("delete")
@click.argument("alert_id")
@click.option("--yes", "-y", is_flag=True, help="Delete without asking for confirmation.")
@click.pass_context
def delete_alert(ctx: click.Context, alert_id: str, yes: bool) -> None:
    """Delete an alert.

    Asks for confirmation unless --yes is given. Deletion cannot be undone.

    \b
    Examples:
      alertdesk delete 65f0c2
      alertdesk delete 65f0c2 --yes
    """
    _get_settings(ctx)
    declined = False

    async def run():
        async with _open_store(ctx) as store:
            notifier = _notifier(ctx)
            controller = AlertListController(store, notifier)

            def confirm(target_id: str) -> bool:
                nonlocal declined
                if yes:
                    return True
                declined = not click.confirm(f"Are you sure you want to delete alert {target_id}?", default=False)
                return not declined

            try:
                return await controller.remove(alert_id, confirm)
            finally:
                controller.dispose()
                notifier.close()

    if asyncio.run(run()):
        return
    if declined:
        console.print("[yellow]Delete cancelled[/yellow]")
        return
    raise SystemExit(1)


@click.command("symbols")
def symbols() -> None:
    """List the instruments alerts can be placed on."""
    console.print(Panel(
        Columns(list(SYMBOLS), equal=True, expand=False),
        title="[bold]Instruments[/bold]",
        border_style="cyan",
    ))


@click.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
def init_config(force: bool) -> None:
    """Write a template config file to ~/.config/alertdesk/config.toml."""
    from alertdesk.config import CONFIG_PATH

    if CONFIG_PATH.exists() and not force:
        console.print(f"[yellow]Config already exists at {CONFIG_PATH}[/yellow]")
        console.print("[dim]Use --force to overwrite it.[/dim]")
        return

    path = create_template_config()
    console.print(Panel(
        f"[bold green]Config written[/bold green]\n\n{path}\n\n"
        "Set [cyan]remote.base_url[/cyan] to your alert service, or export ALERTDESK_BASE_URL.",
        title="[bold]AlertDesk[/bold]",
        border_style="green",
    ))
