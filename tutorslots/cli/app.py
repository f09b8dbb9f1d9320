"""
Main CLI application using Typer.
"""

import logging
import shlex
from pathlib import Path
from typing import Annotated, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.api_client import ApiClient
from ..adapters.file_store import FileStore
from ..adapters.token_store import TokenStore
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import TutorSlotsError
from ..domain.models import DisplayMode, ViewFilter, WeeklyAvailability
from ..domain.queries import is_available_at, slot_start_times, summarize
from ..domain.range_codec import slots_to_ranges
from ..domain.range_editor import EditResult, RangeEditor
from ..domain.time_grid import SLOT_MINUTES
from ..domain.view_filter import clip_ranges, visible_units
from ..services.availability_service import AvailabilityService

app = typer.Typer(
    name="tutorslots",
    help="Manage a tutor's weekly availability",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
MockOption = Annotated[
    bool,
    typer.Option("--mock", help="Use the local JSON data file instead of the API."),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _build_service(config: AppConfig, mock: bool) -> AvailabilityService:
    if mock:
        store = FileStore(config.data_file)
    else:
        token = TokenStore(config.api.base_url).require_token()
        store = ApiClient(
            access_token=token,
            base_url=config.api.base_url,
            timeout=config.api.timeout_seconds,
        )
    return AvailabilityService(store=store, tutor_id=config.tutor_id, days=config.week)


def _fail(message: object) -> None:
    console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(1)


def _render_week(weekly: WeeklyAvailability, view: Optional[ViewFilter] = None) -> Table:
    view = view or ViewFilter.full_day()
    table = Table(
        title="Weekly Availability",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Day", style="bold yellow")
    table.add_column("Ranges")
    table.add_column("Hours", justify="right", style="dim")

    for day in weekly.days:
        slots = weekly.slots[day]
        ranges = clip_ranges(slots, view) if view.narrows_view else slots_to_ranges(slots)
        units = len(visible_units(slots, view))
        unit_hours = 1.0 if view.is_hourly else 0.5
        table.add_row(
            day.value,
            ", ".join(str(r) for r in ranges) or "[dim]unavailable[/dim]",
            f"{units * unit_hours:.1f}",
        )
    return table


def _report(result: EditResult) -> bool:
    if not result.ok:
        console.print(f"[red]✗ {result.message}[/red]")
    return result.ok


def _apply_and_save(service: AvailabilityService, operation) -> None:
    """Load, apply one editor operation, save, and show the result."""
    editor = service.open_session()
    result = operation(editor)
    if not _report(result):
        raise typer.Exit(1)
    service.save_session(editor)
    console.print("[green]✓ Availability saved[/green]")
    console.print(_render_week(editor.availability))


@app.command()
def show(
    config_file: ConfigOption = None,
    mock: MockOption = False,
    start_hour: Annotated[Optional[int], typer.Option("--from-hour", help="First visible hour")] = None,
    end_hour: Annotated[Optional[int], typer.Option("--to-hour", help="Hour the view ends (exclusive)")] = None,
    hourly: Annotated[bool, typer.Option("--hourly", help="Group half hours into hours")] = False,
):
    """
    Show the stored weekly availability.
    """
    try:
        config = _load_config(config_file)
        view = ViewFilter(
            start_hour=config.view.start_hour if start_hour is None else start_hour,
            end_hour=config.view.end_hour if end_hour is None else end_hour,
            display_mode=DisplayMode.HOURLY if hourly else config.view.display_mode,
        )
        weekly = _build_service(config, mock).load()
    except (TutorSlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)

    console.print()
    console.print(_render_week(weekly, view))
    console.print()


@app.command()
def add(
    day: Annotated[str, typer.Argument(help="Day name, e.g. Monday")],
    start: Annotated[str, typer.Argument(help="Start time HH:MM")],
    end: Annotated[str, typer.Argument(help="End time HH:MM")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Add a range of availability; overlapping ranges merge.

    Example:

        tutorslots add Monday 13:00 16:00
    """
    try:
        service = _build_service(_load_config(config_file), mock)
        _apply_and_save(service, lambda editor: editor.add_range(day, start, end))
    except (TutorSlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def edit(
    day: Annotated[str, typer.Argument(help="Day name, e.g. Monday")],
    old_start: Annotated[str, typer.Argument(help="Current start HH:MM")],
    old_end: Annotated[str, typer.Argument(help="Current end HH:MM")],
    new_start: Annotated[str, typer.Argument(help="New start HH:MM")],
    new_end: Annotated[str, typer.Argument(help="New end HH:MM")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Change the bounds of an existing range.
    """
    try:
        service = _build_service(_load_config(config_file), mock)
        _apply_and_save(
            service,
            lambda editor: editor.edit_range(day, (old_start, old_end), new_start, new_end),
        )
    except (TutorSlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def delete(
    day: Annotated[str, typer.Argument(help="Day name, e.g. Monday")],
    start: Annotated[str, typer.Argument(help="Start time HH:MM")],
    end: Annotated[str, typer.Argument(help="End time HH:MM")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Remove a range of availability.
    """
    try:
        service = _build_service(_load_config(config_file), mock)
        _apply_and_save(service, lambda editor: editor.delete_range(day, (start, end)))
    except (TutorSlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command("toggle-day")
def toggle_day(
    day: Annotated[str, typer.Argument(help="Day name, e.g. Monday")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    start_hour: Annotated[int, typer.Option("--from-hour", help="First hour affected")] = 0,
    end_hour: Annotated[int, typer.Option("--to-hour", help="Hour the toggle ends (exclusive)")] = 24,
):
    """
    Select or clear every half hour of a day inside an hour window.
    """
    try:
        service = _build_service(_load_config(config_file), mock)
        view = ViewFilter(start_hour=start_hour, end_hour=end_hour)
        _apply_and_save(service, lambda editor: editor.toggle_day(day, view))
    except (TutorSlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def summary(
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Show available days and hours per week.
    """
    try:
        weekly = _build_service(_load_config(config_file), mock).load()
    except (TutorSlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)

    result = summarize(weekly)
    per_day = "\n".join(
        f"  {day}: {slots * SLOT_MINUTES / 60:.1f} h"
        for day, slots in result.slots_per_day.items()
    )
    console.print(Panel.fit(
        f"[bold]{result.format_display()}[/bold]\n{per_day}",
        title="Schedule Summary"
    ))


@app.command()
def check(
    day: Annotated[str, typer.Argument(help="Day name, e.g. Monday")],
    at: Annotated[Optional[str], typer.Argument(help="Time HH:MM; omit to list every slot")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Check whether a time is available, or list the day's half-hour slots.

    Example:

        tutorslots check Monday 13:15
    """
    try:
        weekly = _build_service(_load_config(config_file), mock).load()
        if at is None:
            starts = slot_start_times(weekly, day)
        else:
            available = is_available_at(weekly, day, at)
    except (TutorSlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)

    if at is None:
        console.print(", ".join(starts) if starts else f"[yellow]No slots on {day}.[/yellow]")
    elif available:
        console.print(f"[green]✓ {day} {at} is available[/green]")
    else:
        console.print(f"[yellow]✗ {day} {at} is not available[/yellow]")


SESSION_HELP = """[bold]Commands[/bold]
  show                               show the week under the current filter
  add DAY START END                  add a range
  edit DAY OLD_START OLD_END START END
  delete DAY START END               remove a range
  toggle DAY HH:MM                   toggle one slot (or hour in hourly mode)
  day DAY                            select/clear the day inside the filter
  filter FROM_HOUR TO_HOUR [hourly|half_hour]
  cancel                             discard all changes of this session
  save                               save and quit
  quit                               quit without saving"""


def _run_session_command(editor: RangeEditor, args: List[str]) -> Optional[EditResult]:
    """Execute one session command. Returns None for commands that do not edit."""
    command, params = args[0].lower(), args[1:]

    if command == "add" and len(params) == 3:
        return editor.add_range(*params)
    if command == "edit" and len(params) == 5:
        day, old_start, old_end, new_start, new_end = params
        return editor.edit_range(day, (old_start, old_end), new_start, new_end)
    if command == "delete" and len(params) == 3:
        day, start, end = params
        return editor.delete_range(day, (start, end))
    if command == "toggle" and len(params) == 2:
        return editor.toggle_slot(*params)
    if command == "day" and len(params) == 1:
        return editor.toggle_day(params[0])
    if command == "filter" and len(params) in (2, 3):
        mode = params[2] if len(params) == 3 else editor.view.display_mode
        editor.set_filter(ViewFilter(int(params[0]), int(params[1]), DisplayMode(mode)))
        return None
    if command == "show" and not params:
        return None

    console.print(SESSION_HELP)
    return None


@app.command()
def session(
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Interactive editing session; changes are kept until you save.
    """
    try:
        config = _load_config(config_file)
        service = _build_service(config, mock)
        editor = service.open_session(view=config.view.to_filter())
    except (TutorSlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)

    console.print("\n" + "="*60)
    console.print("[bold cyan]🗓️  Availability editing session[/bold cyan]")
    console.print("="*60 + "\n")
    console.print(SESSION_HELP)

    while True:
        console.print()
        console.print(_render_week(editor.availability, editor.view))
        line = typer.prompt("\n→ Command", default="show").strip()

        try:
            args = shlex.split(line)
        except ValueError as e:
            console.print(f"[red]✗ {e}[/red]")
            continue
        if not args:
            continue

        command = args[0].lower()
        if command == "quit":
            if editor.has_changes and not typer.confirm("Discard unsaved changes?", default=False):
                continue
            console.print("[yellow]Session closed without saving.[/yellow]")
            return
        if command == "cancel":
            editor.cancel()
            editor.begin_edit()
            console.print("[yellow]Changes discarded.[/yellow]")
            continue
        if command == "save":
            try:
                service.save_session(editor)
            except TutorSlotsError as e:
                _fail(e)
            console.print("[green]✓ Availability saved[/green]")
            return

        try:
            result = _run_session_command(editor, args)
        except ValueError as e:
            console.print(f"[red]✗ {e}[/red]")
            continue
        if result is not None:
            _report(result)


@app.command("request-change")
def request_change(
    day: Annotated[str, typer.Argument(help="Day name, e.g. Monday")],
    start: Annotated[str, typer.Argument(help="New start HH:MM")],
    end: Annotated[str, typer.Argument(help="New end HH:MM")],
    reason: Annotated[str, typer.Option("--reason", "-r", prompt="Reason for change")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Ask the administrators to change a day's hours.
    """
    try:
        service = _build_service(_load_config(config_file), mock)
        created = service.submit_change_request(day, start, end, reason)
    except (TutorSlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)

    console.print("[green]✓ Change request submitted. Awaiting admin approval.[/green]")
    console.print(f"  {created.format_display()}")


@app.command()
def requests(
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    List schedule change requests.
    """
    try:
        items = _build_service(_load_config(config_file), mock).list_change_requests()
    except (TutorSlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)

    if not items:
        console.print("[yellow]No schedule change requests.[/yellow]")
        return

    table = Table(
        title="Schedule Change Requests",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Day", style="bold yellow")
    table.add_column("Time")
    table.add_column("Status")
    table.add_column("Submitted", style="dim")
    table.add_column("Reason")
    table.add_column("Admin Notes", style="dim")

    colors = {"approved": "green", "rejected": "red", "pending": "yellow"}
    for item in items:
        color = colors[item.status.value]
        table.add_row(
            item.day_of_week,
            f"{item.start_time} - {item.end_time}",
            f"[{color}]{item.status.value.capitalize()}[/{color}]",
            item.created_at.format("DD.MM.YYYY") if item.created_at else "-",
            item.reason,
            item.admin_notes or "",
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def login(
    token: Annotated[str, typer.Option("--token", prompt=True, hide_input=True, help="API bearer token")],
    config_file: ConfigOption = None,
):
    """
    Store the API token used for all requests.
    """
    try:
        config = _load_config(config_file)
        store = TokenStore(config.api.base_url)
        store.save_token(token)
    except (TutorSlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)

    if store.insecure_storage_warning:
        console.print(f"[yellow]⚠  {store.insecure_storage_warning}[/yellow]")
    console.print(f"[green]✓ Token stored ({store.backend}).[/green]")


@app.command()
def logout(
    config_file: ConfigOption = None,
):
    """
    Forget the stored API token.
    """
    try:
        config = _load_config(config_file)
        TokenStore(config.api.base_url).clear_token()
    except (TutorSlotsError, FileNotFoundError, ValueError) as e:
        _fail(e)

    console.print("\n[green]✓ Token removed.[/green]\n")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]tutorslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
