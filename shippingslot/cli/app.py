"""
Main CLI application using Typer.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import pendulum
import typer
from pendulum import DateTime
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ..adapters.json_state import JsonCheckoutState
from ..adapters.memory import DefaultSlotFactory, InMemoryMethodLookup
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import MethodNotFoundError, ShippingSlotError
from ..domain.models import ShippingMethod
from ..logging_setup import configure_logging
from ..services.shipping_slots import ShippingSlotService

app = typer.Typer(
    name="shippingslot",
    help="Book delivery and pickup slots and inspect their availability",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Log debug details.")]


@dataclass
class _Context:
    config: AppConfig
    methods: InMemoryMethodLookup
    state: JsonCheckoutState
    service: ShippingSlotService

    def method(self, code: str) -> ShippingMethod:
        method = self.methods.find_by_code(code)
        if method is None:
            raise MethodNotFoundError(code)
        return method


def _load_context(config_file: Optional[Path], verbose: bool = False) -> _Context:
    config_path = config_file or get_default_config_path()
    config = AppConfig.load_from_yaml(config_path)

    configure_logging("DEBUG" if verbose else config.log_level, console)

    methods = InMemoryMethodLookup(config.build_methods())
    state = JsonCheckoutState.load(config.state_file, methods)
    service = ShippingSlotService(
        methods,
        state.slot_store,
        DefaultSlotFactory(),
        enforce_capacity=config.enforce_capacity,
    )
    return _Context(config=config, methods=methods, state=state, service=service)


def _parse_datetime(value: str, tz: str) -> DateTime:
    """Parse an ISO-8601 string; values without offset are read in ``tz``."""
    try:
        return pendulum.parse(value, tz=tz)
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid date '{value}': {exc}") from exc


def _fail(error: Exception) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {error}")
    raise typer.Exit(1)


@app.command()
def methods(config_file: ConfigOption = None):
    """
    List configured shipping methods and their slot schedules.
    """
    try:
        ctx = _load_context(config_file)
    except (FileNotFoundError, ValidationError, ShippingSlotError, ValueError) as e:
        _fail(e)

    table = Table(title="Shipping methods", show_header=True, header_style="bold cyan")
    table.add_column("Code", style="bold yellow", no_wrap=True)
    table.add_column("Name")
    table.add_column("Schedule", style="dim")
    table.add_column("Spots", justify="right")

    for method in ctx.methods.all():
        slot_config = method.slot_config
        if slot_config is None:
            table.add_row(method.code, method.name, "no slots", "-")
            continue
        table.add_row(
            method.code,
            method.name,
            f"{slot_config.rrule} ({slot_config.duration_range} min, {slot_config.timezone})",
            str(slot_config.available_spots),
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def events(
    method_code: Annotated[str, typer.Argument(help="Shipping method code")],
    config_file: ConfigOption = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Window start (YYYY-MM-DD). Defaults to today")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="Window end (YYYY-MM-DD)")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the calendar feed as JSON.")] = False,
    verbose: VerboseOption = False,
):
    """
    Show the bookable occurrences of a shipping method.

    Examples:

        shippingslot events store_pickup
        shippingslot events store_pickup --start 2024-11-25 --end 2024-12-08 --json
    """
    try:
        ctx = _load_context(config_file, verbose)
        tz = ctx.config.timezone

        window_start = _parse_datetime(start, tz).start_of("day") if start else pendulum.now(tz).start_of("day")
        window_end = (
            _parse_datetime(end, tz).end_of("day") if end
            else window_start.add(days=ctx.config.calendar_days).end_of("day")
        )

        feed = ctx.service.build_calendar_events(ctx.state.cart, ctx.method(method_code), window_start, window_end)
    except (FileNotFoundError, ValidationError, ShippingSlotError, ValueError) as e:
        _fail(e)

    if as_json:
        typer.echo(json.dumps([event.to_dict() for event in feed], indent=2))
        return

    if not feed:
        console.print("[yellow]⚠ No bookable slot in this period.[/yellow]")
        return

    table = Table(title=f"Slots for {method_code}", show_header=True, header_style="bold cyan")
    table.add_column("Start", style="bold")
    table.add_column("End")
    table.add_column("Current", justify="center")

    for event in feed:
        local_start = event.start.in_timezone(tz)
        table.add_row(
            local_start.format("ddd DD.MM.YYYY HH:mm"),
            event.end.in_timezone(tz).format("HH:mm"),
            "✓" if event.is_current else "",
        )

    console.print(table)


@app.command()
def full(
    method_code: Annotated[str, typer.Argument(help="Shipping method code")],
    config_file: ConfigOption = None,
    from_date: Annotated[Optional[str], typer.Option("--from", help="Only count slots from this date (YYYY-MM-DD)")] = None,
    verbose: VerboseOption = False,
):
    """
    List occurrences that have no spot left.
    """
    try:
        ctx = _load_context(config_file, verbose)
        since = _parse_datetime(from_date, ctx.config.timezone) if from_date else None
        keys = ctx.service.get_full_occurrences(ctx.state.cart, ctx.method(method_code), since)
    except (FileNotFoundError, ValidationError, ShippingSlotError, ValueError) as e:
        _fail(e)

    if not keys:
        console.print("No fully booked occurrence.")
        return

    for key in sorted(keys):
        console.print(f"  {key}")


@app.command()
def current(
    method_code: Annotated[str, typer.Argument(help="Shipping method code")],
    config_file: ConfigOption = None,
):
    """
    Show the slot the active cart holds for a shipping method.
    """
    try:
        ctx = _load_context(config_file)
        slot = ctx.service.get_current_slot(ctx.state.cart, ctx.method(method_code))
    except (FileNotFoundError, ValidationError, ShippingSlotError, ValueError) as e:
        _fail(e)

    if slot is None or slot.timestamp is None:
        console.print("No slot selected.")
        return

    console.print(slot.timestamp.to_iso8601_string())


@app.command()
def add_shipment(
    method_code: Annotated[str, typer.Argument(help="Shipping method code")],
    config_file: ConfigOption = None,
):
    """
    Add a shipment using the given method to the active cart.
    """
    try:
        ctx = _load_context(config_file)
        ctx.state.add_shipment(ctx.method(method_code))
        ctx.state.save()
    except (FileNotFoundError, ValidationError, ShippingSlotError, ValueError) as e:
        _fail(e)

    index = len(ctx.state.active_order.shipments) - 1
    console.print(f"[green]✓ Shipment {index} added ({method_code})[/green]")


@app.command()
def assign(
    method_code: Annotated[str, typer.Argument(help="Shipping method code")],
    shipment_index: Annotated[int, typer.Argument(help="Index of the shipment in the active cart")],
    start: Annotated[str, typer.Argument(help="Occurrence start (ISO-8601, local time without offset)")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Book an occurrence for a shipment of the active cart.
    """
    try:
        ctx = _load_context(config_file, verbose)
        start_time = _parse_datetime(start, ctx.config.timezone)
        slot = ctx.service.assign_slot(ctx.state.cart, method_code, shipment_index, start_time)
        ctx.state.save()
    except (FileNotFoundError, ValidationError, ShippingSlotError, ValueError) as e:
        _fail(e)

    console.print(f"[green]✓ Slot booked:[/green] {slot.timestamp.to_iso8601_string()}")


@app.command()
def reset(
    shipment_index: Annotated[int, typer.Argument(help="Index of the shipment in the active cart")],
    config_file: ConfigOption = None,
):
    """
    Release the slot of a shipment of the active cart.
    """
    try:
        ctx = _load_context(config_file)
        ctx.service.reset_slot(ctx.state.cart, shipment_index)
        ctx.state.save()
    except (FileNotFoundError, ValidationError, ShippingSlotError, ValueError) as e:
        _fail(e)

    console.print("[green]✓ Slot released.[/green]")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]shippingslot[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
