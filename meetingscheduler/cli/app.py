"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, List, Optional

import pendulum
import typer
from pendulum import DateTime
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.booking_store import JsonBookingStore
from ..config import AppConfig, load_config
from ..domain.exceptions import ErrorKind, SchedulerError
from ..domain.models import BookingScheduled
from ..services.participants import ParticipantService
from ..services.pipeline import SchedulingPipeline
from ..services.results import SchedulingFailure
from ..services.scheduler import MeetingSchedulerService

app = typer.Typer(
    name="meetingscheduler",
    help="Schedule meetings at the earliest slot every participant is free",
    add_completion=False
)

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger("meetingscheduler.audit")

EXIT_CODES = {
    ErrorKind.INVALID_PARTICIPANTS: 3,
    ErrorKind.INVALID_DURATION: 4,
    ErrorKind.INVALID_TIME_RANGE: 5,
    ErrorKind.OUTSIDE_BUSINESS_HOURS: 6,
    ErrorKind.NO_AVAILABLE_SLOT: 7,
    ErrorKind.PARTICIPANT_NOT_FOUND: 8,
    ErrorKind.INVALID_PARTICIPANT_NAME: 9,
}

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")
]


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True
    )


def _record_event(event: BookingScheduled) -> None:
    logger.info("Booking event: %s", event.to_dict())


def _load(config_file: Optional[Path]) -> AppConfig:
    try:
        config = load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    _configure_logging(config.log_level)
    return config


def _open_store(config: AppConfig) -> JsonBookingStore:
    try:
        return JsonBookingStore(config.data_file)
    except SchedulerError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _build_pipeline(config: AppConfig) -> SchedulingPipeline:
    store = _open_store(config)
    scheduler = MeetingSchedulerService(store=store, event_sinks=[_record_event])
    return SchedulingPipeline(
        scheduler=scheduler,
        participants=ParticipantService(store),
        max_participants=config.limits.max_participants,
        slow_request_ms=config.limits.slow_request_ms
    )


def _fail(failure: SchedulingFailure) -> None:
    console.print(f"[bold red]Error ({failure.kind.value}):[/bold red] {failure.message}")
    raise typer.Exit(EXIT_CODES.get(failure.kind, 1))


def _parse_moment(value: Optional[str], label: str) -> Optional[DateTime]:
    if value is None:
        return None
    try:
        return pendulum.parse(value, tz="UTC").in_timezone("UTC")
    except (ValueError, TypeError, AttributeError) as e:
        console.print(f"[red]Could not parse {label} '{value}': {e}[/red]")
        raise typer.Exit(EXIT_CODES[ErrorKind.INVALID_TIME_RANGE])


def _determine_window(
    config: AppConfig,
    start_option: Optional[str],
    end_option: Optional[str]
):
    """
    Resolve the scheduling window from explicit datetimes or config defaults.
    Returns (earliest_start, latest_end).
    """
    start = _parse_moment(start_option, "start") or pendulum.now("UTC")
    end = _parse_moment(end_option, "end") or start.add(days=config.defaults.window_days)
    return start, end


@app.command("add-participant")
def add_participant(
    name: Annotated[str, typer.Argument(help="Display name of the participant")],
    config_file: ConfigOption = None,
):
    """
    Register a participant who can be invited to meetings.
    """
    config = _load(config_file)
    pipeline = _build_pipeline(config)

    result = asyncio.run(pipeline.create_participant({"name": name}))
    if not result.is_success:
        _fail(result.error)

    participant = result.value
    console.print(f"[green]✓ Participant {participant.id} created:[/green] {participant.name}")


@app.command("participants")
def list_participants(config_file: ConfigOption = None):
    """
    List all registered participants.
    """
    config = _load(config_file)
    store = _open_store(config)
    participants = asyncio.run(ParticipantService(store).list_participants())

    if not participants:
        console.print("[yellow]No participants registered yet.[/yellow]")
        return

    table = Table(title="Participants", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold yellow")
    table.add_column("Name")

    for participant in participants:
        table.add_row(str(participant.id), participant.name)

    console.print()
    console.print(table)
    console.print()


@app.command()
def find(
    participant_ids: Annotated[List[int], typer.Argument(help="Participant ids, e.g. '1 2 3'")],
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Meeting duration in minutes")] = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Earliest start (ISO 8601, UTC)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="Latest end (ISO 8601, UTC)")] = None,
    config_file: ConfigOption = None,
):
    """
    Show the earliest free slot without booking it.

    Examples:

        meetingscheduler find 1 2 --duration 60

        meetingscheduler find 1 2 --start 2024-06-15T10:00 --end 2024-06-15T16:00
    """
    config = _load(config_file)
    pipeline = _build_pipeline(config)
    earliest_start, latest_end = _determine_window(config, start, end)
    duration_minutes = duration if duration is not None else config.defaults.duration_minutes

    result = asyncio.run(
        pipeline.find(
            {
                "participant_ids": participant_ids,
                "duration_minutes": duration_minutes,
                "earliest_start": earliest_start,
                "latest_end": latest_end,
            }
        )
    )
    if not result.is_success:
        _fail(result.error)

    slot = result.value
    slot_end = slot.add(minutes=duration_minutes)
    console.print(
        f"[bold green]✓ Earliest slot:[/bold green] "
        f"{slot.format('dddd, DD.MM.YYYY')} | {slot.format('HH:mm')} – {slot_end.format('HH:mm')} UTC"
    )


@app.command()
def schedule(
    participant_ids: Annotated[List[int], typer.Argument(help="Participant ids, e.g. '1 2 3'")],
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Meeting duration in minutes")] = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Earliest start (ISO 8601, UTC)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="Latest end (ISO 8601, UTC)")] = None,
    config_file: ConfigOption = None,
):
    """
    Book the earliest slot every participant is free.
    """
    config = _load(config_file)
    pipeline = _build_pipeline(config)
    earliest_start, latest_end = _determine_window(config, start, end)
    duration_minutes = duration if duration is not None else config.defaults.duration_minutes

    result = asyncio.run(
        pipeline.schedule(
            {
                "participant_ids": participant_ids,
                "duration_minutes": duration_minutes,
                "earliest_start": earliest_start,
                "latest_end": latest_end,
            },
            now=pendulum.now("UTC")
        )
    )
    if not result.is_success:
        _fail(result.error)

    view = result.value
    console.print(f"[bold green]✓ Meeting {view.booking.id} scheduled:[/bold green]")
    console.print(f"  {view.format_display()}")


@app.command()
def meetings(
    participant_id: Annotated[int, typer.Argument(help="Participant id")],
    config_file: ConfigOption = None,
):
    """
    List a participant's meetings in chronological order.
    """
    config = _load(config_file)
    pipeline = _build_pipeline(config)

    result = asyncio.run(pipeline.participant_bookings(participant_id))
    if not result.is_success:
        _fail(result.error)

    if not result.value:
        console.print("[yellow]No meetings scheduled.[/yellow]")
        return

    table = Table(title=f"Meetings of participant {participant_id}", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold yellow")
    table.add_column("Start (UTC)")
    table.add_column("End (UTC)")
    table.add_column("Participants", style="dim")

    for view in result.value:
        table.add_row(
            str(view.booking.id),
            view.booking.start_time.format("YYYY-MM-DD HH:mm"),
            view.booking.end_time.format("HH:mm"),
            ", ".join(p.name for p in view.participants)
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
    console.print(f"\n[bold cyan]meetingscheduler[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
