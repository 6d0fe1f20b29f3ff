"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, List, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.api_client import VitagoApiClient
from ..adapters.mock_api_client import MockVitagoClient
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import AvailabilityError, BookingConflictError
from ..domain.models import day_name, format_time, parse_date
from ..domain.period_resolver import PeriodStatus
from ..services.booking_availability import BookingAvailabilityService

app = typer.Typer(
    name="vitago-availability",
    help="Check provider availability and booking conflicts on the Vitago marketplace",
    add_completion=False
)

console = Console()

STATUS_STYLES = {
    PeriodStatus.AVAILABLE: ("Available", "green"),
    PeriodStatus.PARTIALLY_AVAILABLE: ("Partially available", "yellow"),
    PeriodStatus.FULLY_BOOKED: ("Fully booked", "red"),
    PeriodStatus.PROVIDER_UNAVAILABLE: ("Provider unavailable", "dim"),
}

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
MockOption = Annotated[bool, typer.Option("--mock", help="Use bundled mock data instead of the API.")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")]
ProviderArgument = Annotated[
    Optional[str],
    typer.Argument(help="Provider alias or id. Omit for a general request."),
]
DateOption = Annotated[str, typer.Option("--date", "-d", help="Booking date (YYYY-MM-DD)")]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path], mock: bool) -> AppConfig:
    """
    Load configuration; mock mode runs on defaults when no file exists.
    """
    config_path = config_file or get_default_config_path()
    if mock and config_file is None and not config_path.exists():
        return AppConfig()
    return AppConfig.load_from_yaml(config_path)


def _build_service(config: AppConfig, mock: bool) -> BookingAvailabilityService:
    if mock:
        console.print("[yellow]⚠  MOCK MODE: using bundled sample data[/yellow]\n")
        source = MockVitagoClient()
    else:
        source = VitagoApiClient(
            base_url=config.api_base_url,
            timeout=config.request_timeout_seconds
        )

    return BookingAvailabilityService(
        booking_source=source,
        catalog=config.build_catalog(),
        enumerator=config.build_enumerator(),
    )


def _parse_booking_date(value: str):
    try:
        return parse_date(value)
    except ValueError as e:
        console.print(f"[red]Could not parse date: {e}[/red]")
        raise typer.Exit(1)


def _print_times(title: str, times: List[str]) -> None:
    if not times:
        console.print(f"[yellow]⚠ No {title.lower()} available.[/yellow]")
        return

    console.print(f"[bold green]✓ {len(times)} {title.lower()}:[/bold green]")
    for offset in range(0, len(times), 12):
        console.print("  " + "  ".join(times[offset:offset + 12]))


@app.command()
def periods(
    provider: ProviderArgument = None,
    date: DateOption = ...,
    service: Annotated[
        Optional[List[str]],
        typer.Option("--service", "-s", help="Selected service type(s); the first one sets the duration."),
    ] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Show the status of the four daily periods for a provider.

    Examples:

        vitago-availability periods anna --date 2026-11-02 --service "Deep Cleaning"

        vitago-availability periods --date 2026-11-02 --mock
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file, mock)
        service_layer = _build_service(config, mock)
        booking_date = _parse_booking_date(date)
        provider_id = config.resolve_provider(provider) if provider else None
        service_types = list(service or [])

        snapshot = service_layer.fetch_snapshot(provider_id, booking_date)
        badges = service_layer.annotate_periods(snapshot, booking_date, service_types)

        table = Table(
            title=f"Periods on {booking_date.isoformat()} ({provider_id or 'general request'})",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Period", style="bold")
        table.add_column("Window")
        table.add_column("Status")
        table.add_column("Free slots", style="dim")

        for badge in badges:
            text, style = STATUS_STYLES[badge.status]
            free_slots = ""
            if badge.status is PeriodStatus.PARTIALLY_AVAILABLE and badge.verdict:
                free_slots = ", ".join(str(slot) for slot in badge.verdict.available_slots)
            table.add_row(
                badge.period.label.value,
                f"{format_time(badge.period.start)} - {format_time(badge.period.end)}",
                f"[{style}]{text}[/{style}]",
                free_slots,
            )

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError, AvailabilityError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def start_times(
    provider: ProviderArgument = None,
    date: DateOption = ...,
    period: Annotated[Optional[str], typer.Option("--period", "-p", help="Morning, Noon, Afternoon or Evening")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    List selectable start times within a period.
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file, mock)
        service_layer = _build_service(config, mock)
        booking_date = _parse_booking_date(date)
        provider_id = config.resolve_provider(provider) if provider else None

        snapshot = service_layer.fetch_snapshot(provider_id, booking_date)

        if not period and not snapshot.general_request:
            console.print("[yellow]No period selected: start times are not restricted.[/yellow]")
            return

        _print_times("Start times", service_layer.start_times(snapshot, booking_date, period))

    except (FileNotFoundError, ValueError, AvailabilityError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def end_times(
    provider: ProviderArgument = None,
    date: DateOption = ...,
    start: Annotated[str, typer.Option("--start", help="Chosen start time (HH:MM)")] = ...,
    period: Annotated[Optional[str], typer.Option("--period", "-p", help="Morning, Noon, Afternoon or Evening")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    List selectable end times for a chosen start time.
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file, mock)
        service_layer = _build_service(config, mock)
        booking_date = _parse_booking_date(date)
        provider_id = config.resolve_provider(provider) if provider else None

        snapshot = service_layer.fetch_snapshot(provider_id, booking_date)

        if not period and not snapshot.general_request:
            console.print("[yellow]No period selected: end times are not restricted.[/yellow]")
            return

        _print_times("End times", service_layer.end_times(snapshot, booking_date, period, start))

    except (FileNotFoundError, ValueError, AvailabilityError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def check(
    provider: ProviderArgument = None,
    date: DateOption = ...,
    start: Annotated[str, typer.Option("--start", help="Start time (HH:MM)")] = ...,
    end: Annotated[Optional[str], typer.Option("--end", help="End time (HH:MM). Defaults to the service duration.")] = None,
    service: Annotated[
        Optional[List[str]],
        typer.Option("--service", "-s", help="Selected service type(s), used when --end is omitted."),
    ] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Validate a booking request before it is submitted.
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file, mock)
        service_layer = _build_service(config, mock)
        booking_date = _parse_booking_date(date)
        provider_id = config.resolve_provider(provider) if provider else None

        end_time = end or service_layer.suggest_end_time(start, list(service or []))
        snapshot = service_layer.fetch_snapshot(provider_id, booking_date)
        requested = service_layer.validate_request(snapshot, booking_date, start, end_time)

        console.print(
            f"[bold green]✓ {requested} on {booking_date.isoformat()} can be booked "
            f"({requested.duration_minutes()} min).[/bold green]"
        )

    except BookingConflictError as e:
        console.print(f"[bold red]Conflict:[/bold red] {e}")
        for booking in e.conflicts:
            console.print(f"  • {booking.id}: {booking.time_range()} ({booking.status})")
        raise typer.Exit(1)

    except (FileNotFoundError, ValueError, AvailabilityError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def dates(
    provider: ProviderArgument = None,
    from_date: Annotated[Optional[str], typer.Option("--from", help="First date to show (YYYY-MM-DD). Defaults to today.")] = None,
    days: Annotated[int, typer.Option("--days", help="Number of days to show")] = 14,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Show which upcoming dates can be booked with a provider.
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file, mock)
        service_layer = _build_service(config, mock)
        today = pendulum.now(config.timezone).date()
        first = _parse_booking_date(from_date) if from_date else today
        provider_id = config.resolve_provider(provider) if provider else None

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Date", style="bold")
        table.add_column("Weekday")
        table.add_column("Bookable")

        for offset in range(days):
            day = first.add(days=offset)
            snapshot = service_layer.fetch_snapshot(provider_id, day)
            bookable = service_layer.is_date_bookable(
                snapshot, day, today, horizon_days=config.booking_horizon_days
            )
            table.add_row(
                day.isoformat(),
                day_name(day),
                "[green]yes[/green]" if bookable else "[red]no[/red]",
            )

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError, AvailabilityError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def list_providers(
    config_file: ConfigOption = None,
):
    """
    List all configured provider aliases.
    """
    try:
        config = AppConfig.load_from_yaml(config_file or get_default_config_path())

        if not config.providers:
            console.print("[yellow]No providers defined in the config file.[/yellow]")
            return

        table = Table(
            title="Configured providers",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Name (alias)", style="bold yellow")
        table.add_column("Provider id", style="dim")

        for provider in config.providers:
            table.add_row(provider.name, provider.provider_id)

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]vitago-availability[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
