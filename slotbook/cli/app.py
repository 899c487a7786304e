"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Annotated

import pendulum
import typer
from rich.console import Console
from rich.table import Table

from ..adapters.json_booking_repository import JsonBookingRepository
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import SchedulingError
from ..domain.models import ResolvedSlot
from ..services.availability_service import AvailabilityService

app = typer.Typer(
    name="slotbook",
    help="Inspect bookable slots and check booking conflicts",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Slot availability and conflict detection for appointment bookings.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _build_service(config: AppConfig) -> AvailabilityService:
    bookings_path = config.get_bookings_path()
    if bookings_path is None:
        raise SchedulingError("No bookings_file configured.")

    return AvailabilityService(
        booking_repository=JsonBookingRepository(bookings_path, timezone=config.timezone),
        config_provider=config,
        blackouts=config.get_blackouts(),
        enforce_buffer=config.enforce_buffer,
    )


def _parse_date(value: Optional[str], tz: str):
    if not value:
        return pendulum.today(tz).date()
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
    except ValueError as e:
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD") from e


def _slot_status(slot: ResolvedSlot) -> str:
    if slot.available:
        return "[green]available[/green]"
    if slot.is_past:
        return "[dim]past[/dim]"
    if slot.conflicting_booking_ids:
        return "[red]booked[/red]"
    return "[yellow]blackout[/yellow]"


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {error}")
    raise typer.Exit(1)


@app.command()
def slots(
    service: Annotated[str, typer.Argument(help="Service id")],
    date: Annotated[Optional[str], typer.Option("--date", help="Date (YYYY-MM-DD), defaults to today")] = None,
    show_all: Annotated[bool, typer.Option("--show-all", "-a", help="Also list unavailable slots.")] = False,
    config_file: ConfigOption = None,
):
    """
    Show the slot grid of a service for one day.

    Examples:

        slotbook slots haircut --date 2024-11-26

        slotbook slots haircut --show-all
    """
    try:
        config = _load_config(config_file)
        tz = config.timezone
        day = _parse_date(date, tz)
        availability = _build_service(config)

        resolved = asyncio.run(
            availability.get_day_slots(service, day, now=pendulum.now(tz))
        )
    except (FileNotFoundError, ValueError, SchedulingError) as e:
        _fail(e)

    shown = resolved if show_all else [slot for slot in resolved if slot.available]

    console.print()
    if not shown:
        console.print(
            f"[yellow]⚠ No available slots for {service} on {day.format('DD.MM.YYYY')}.[/yellow]"
        )
        console.print()
        return

    table = Table(
        title=f"{service} - {day.format('ddd, DD.MM.YYYY')}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Time", style="bold")
    table.add_column("Status")
    table.add_column("Conflicts", style="dim")

    for slot in shown:
        table.add_row(
            f"{slot.interval.start.format('HH:mm')} - {slot.interval.end.format('HH:mm')}",
            _slot_status(slot),
            ", ".join(slot.conflicting_booking_ids),
        )

    console.print(table)
    console.print(f"[bold green]✓ {sum(slot.available for slot in resolved)} of {len(resolved)} slot(s) available[/bold green]")
    console.print()


@app.command()
def check(
    service: Annotated[str, typer.Argument(help="Service id")],
    start: Annotated[str, typer.Argument(help="Proposed start (YYYY-MM-DD HH:mm)")],
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Duration in minutes, defaults to the service duration")] = None,
    config_file: ConfigOption = None,
):
    """
    Check a proposed start time for conflicting bookings.

    Exits with code 2 when the time conflicts with a booking.
    """
    try:
        config = _load_config(config_file)
        tz = config.timezone
        try:
            start_dt = pendulum.from_format(start, "YYYY-MM-DD HH:mm", tz=tz)
        except ValueError as e:
            raise ValueError(f"Invalid start '{start}', expected YYYY-MM-DD HH:mm") from e

        availability = _build_service(config)
        report = asyncio.run(
            availability.check_candidate(service, start_dt, duration_minutes=duration)
        )
    except (FileNotFoundError, ValueError, SchedulingError) as e:
        _fail(e)

    console.print()
    console.print(f"[bold]Candidate:[/bold] {report.candidate.format_display()}")

    if report.available:
        console.print("[bold green]✓ No conflicts[/bold green]\n")
        return

    console.print(f"[bold red]✗ {len(report.conflicts)} conflict(s):[/bold red]")
    for booking in report.conflicts:
        console.print(f"  {booking.id}: {booking.interval.format_display()}")
    console.print()
    raise typer.Exit(2)


@app.command()
def dates(
    service: Annotated[str, typer.Argument(help="Service id")],
    days: Annotated[int, typer.Option("--days", help="Number of days to look ahead")] = 30,
    config_file: ConfigOption = None,
):
    """
    List the upcoming bookable dates of a service.
    """
    try:
        config = _load_config(config_file)
        tz = config.timezone
        now = pendulum.now(tz)
        availability = _build_service(config)
        bookable = availability.bookable_dates(service, now.date(), days=days, now=now)
    except (FileNotFoundError, ValueError, SchedulingError) as e:
        _fail(e)

    console.print()
    if not bookable:
        console.print(f"[yellow]⚠ No bookable dates in the next {days} day(s).[/yellow]\n")
        return

    for day in bookable:
        console.print(f"  {day.format('ddd, DD.MM.YYYY')}")
    console.print()


@app.command("next")
def next_slots(
    service: Annotated[str, typer.Argument(help="Service id")],
    limit: Annotated[int, typer.Option("--limit", "-n", help="Number of slots to list")] = 5,
    days: Annotated[int, typer.Option("--days", help="Number of days to look ahead")] = 30,
    config_file: ConfigOption = None,
):
    """
    List the next available slots of a service.
    """
    try:
        config = _load_config(config_file)
        availability = _build_service(config)
        found = asyncio.run(
            availability.next_available_slots(
                service, now=pendulum.now(config.timezone), limit=limit, days=days
            )
        )
    except (FileNotFoundError, ValueError, SchedulingError) as e:
        _fail(e)

    console.print()
    if not found:
        console.print(f"[yellow]⚠ No available slots in the next {days} day(s).[/yellow]\n")
        return

    for slot in found:
        console.print(f"  {slot.interval.format_display()}")
    console.print()


@app.command()
def list_services(
    config_file: ConfigOption = None,
):
    """
    List all configured services with their effective schedule.
    """
    try:
        config = _load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        _fail(e)

    if not config.services:
        console.print("[yellow]No services defined in the config file.[/yellow]")
        return

    table = Table(
        title="Configured services",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Id", style="bold yellow")
    table.add_column("Name")
    table.add_column("Duration")
    table.add_column("Interval")
    table.add_column("Hours", style="dim")

    for service in config.services:
        schedule = config.get_schedule_config(service.id)
        hours = schedule.business_hours
        table.add_row(
            service.id,
            service.display_name(),
            f"{schedule.duration_minutes} min",
            f"{schedule.slot_interval_minutes} min",
            f"{hours.start_time:%H:%M} - {hours.end_time:%H:%M}",
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotbook[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
