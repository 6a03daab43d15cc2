# -*- coding: utf-8 -*-
"""Command-line client for the ProfeIA agenda and teaching assistant."""
import asyncio
from datetime import date, datetime
from pathlib import Path

import click
from rich.panel import Panel

from agenda.config import DATA_PATH, LOCALE, LOG_LEVEL, REMINDER_INTERVAL
from agenda.editor import EventEditor, confirmation_message
from agenda.grid import upcoming_events
from agenda.models import DEFAULT_TIME, is_valid_date
from agenda.reminders import ReminderScheduler
from agenda.speech import ConsoleSpeaker
from agenda.storage import JsonFileStorage, remember_view, restore_view
from agenda.store import EventStore
from assistant.instructions import FEATURE_TITLES, INITIAL_MESSAGES, build_system_instruction
from assistant.models import FEATURES, EducationalLevel, FeatureOptions, UserConfig, load_user_config, save_user_config
from assistant.session import ChatSession
from cli.utils import console, create_events_table, err_console, create_month_table, setup_logging


class AgendaContext:
    """Objects shared by every command: the storage, the store and an editor."""

    def __init__(self, data_path: Path, assume_yes: bool = False) -> None:
        self.storage = JsonFileStorage(data_path)
        self.store = EventStore.open(self.storage)
        self.editor = EventEditor(self.store, confirm=self._confirm if not assume_yes else (lambda event: True))

    @staticmethod
    def _confirm(event) -> bool:
        return click.confirm(confirmation_message(event), default=False)


pass_agenda = click.make_pass_decorator(AgendaContext)


def _parse_date(ctx, param, value):
    if value is None:
        return None
    if not is_valid_date(value):
        raise click.BadParameter("expected YYYY-MM-DD")
    return date.fromisoformat(value)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--data",
    "data_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DATA_PATH,
    show_default=True,
    help="JSON file holding events, profile and last view.",
)
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Do not ask before deleting.")
@click.option("--log-level", default=LOG_LEVEL, show_default=True, help="Logging level.")
@click.pass_context
def main(ctx: click.Context, data_path: Path, assume_yes: bool, log_level: str) -> None:
    """ProfeIA: agenda with voice reminders and a teaching assistant."""
    setup_logging(log_level)
    ctx.obj = AgendaContext(data_path, assume_yes=assume_yes)


@main.command()
@click.option("--year", type=click.IntRange(1, 9999), help="Year to show (defaults to the current one).")
@click.option("--month", type=click.IntRange(1, 12), help="Month to show (defaults to the current one).")
@pass_agenda
def month(agenda: AgendaContext, year: int, month: int) -> None:
    """Show one month of the calendar."""
    today = date.today()
    remember_view(agenda.storage, "calendar")
    year = today.year if year is None else year
    month = today.month if month is None else month
    console.print(create_month_table(year, month, agenda.store.list()))


@main.command()
@click.argument("day", callback=_parse_date)
@click.argument("activity")
@click.option("--time", "time_", default=DEFAULT_TIME, show_default=True, help="Time as HH:MM (24h).")
@pass_agenda
def add(agenda: AgendaContext, day: date, activity: str, time_: str) -> None:
    """Schedule ACTIVITY on DAY (YYYY-MM-DD)."""
    editor = agenda.editor
    editor.open_for_day(day)
    editor.time = time_
    editor.activity = activity
    event = editor.save()
    if event is None:
        err_console.print("[red]Error:[/red] The activity must not be blank and the time must be HH:MM.")
        raise SystemExit(1)
    console.print(f"[bold green]✅ Agendado:[/bold green] {event.date} {event.time} hs, {event.activity} [dim](id {event.id})[/dim]")


@main.command()
@click.argument("event_id")
@click.option("--date", "day", callback=_parse_date, help="New date as YYYY-MM-DD.")
@click.option("--time", "time_", help="New time as HH:MM (24h).")
@click.option("--activity", help="New activity text.")
@pass_agenda
def edit(agenda: AgendaContext, event_id: str, day: date, time_: str, activity: str) -> None:
    """Change the date, time or activity of EVENT_ID."""
    editor = agenda.editor
    if not editor.request_edit(event_id):
        err_console.print(f"[red]Error:[/red] No event with id {event_id}.")
        raise SystemExit(1)
    if day is not None:
        editor.selected_date = day
    if time_ is not None:
        editor.time = time_
    if activity is not None:
        editor.activity = activity
    event = editor.save()
    if event is None:
        err_console.print("[red]Error:[/red] The activity must not be blank and the time must be HH:MM.")
        raise SystemExit(1)
    console.print(f"[bold green]✅ Actualizado:[/bold green] {event.date} {event.time} hs, {event.activity}")


@main.command()
@click.argument("event_id")
@pass_agenda
def delete(agenda: AgendaContext, event_id: str) -> None:
    """Delete EVENT_ID after confirmation."""
    if event_id not in agenda.store:
        console.print(f"[yellow]No event with id {event_id}; nothing deleted.[/yellow]")
        return
    if agenda.editor.request_delete(event_id):
        console.print("[bold green]🗑  Actividad eliminada.[/bold green]")
    else:
        console.print("[dim]Cancelado.[/dim]")


@main.command()
@pass_agenda
def upcoming(agenda: AgendaContext) -> None:
    """List the activities that have not happened yet."""
    events = upcoming_events(agenda.store.list(), datetime.now())
    if not events:
        console.print("No tienes actividades agendadas.")
        return
    console.print(create_events_table(events, "Próximas Actividades"))


@main.command()
@click.option("--interval", type=float, default=REMINDER_INTERVAL, show_default=True, help="Seconds between checks.")
@click.option("--locale", default=LOCALE, show_default=True, help="Locale for spoken reminders.")
@pass_agenda
def watch(agenda: AgendaContext, interval: float, locale: str) -> None:
    """Stay in the foreground and announce reminders when they are due."""
    scheduler = ReminderScheduler(agenda.store, ConsoleSpeaker(console), interval=interval, locale=locale)
    console.print(
        Panel.fit(
            f"[bold blue]🔔 Recordatorios activos[/bold blue]\n"
            f"{len(agenda.store)} actividad(es), revisando cada {interval:g} s. Ctrl+C para salir.",
            border_style="blue",
        )
    )
    try:
        asyncio.run(_watch(scheduler))
    except KeyboardInterrupt:
        console.print("\n[dim]Recordatorios detenidos.[/dim]")


async def _watch(scheduler: ReminderScheduler) -> None:
    async with scheduler:
        await asyncio.Event().wait()


@main.command()
@click.argument("name")
@click.argument("subject")
@click.argument("level", type=click.Choice([level.value for level in EducationalLevel]))
@click.argument("grade")
@pass_agenda
def profile(agenda: AgendaContext, name: str, subject: str, level: str, grade: str) -> None:
    """Save the teacher profile used by the assistant."""
    try:
        config = UserConfig(name=name, subject=subject, level=EducationalLevel(level), grade=grade)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="grade")
    save_user_config(agenda.storage, config)
    console.print(f"[bold green]✅ Perfil guardado:[/bold green] {config.name}, {config.subject} ({config.grade})")


@main.command()
@click.argument("feature", type=click.Choice(FEATURES))
@click.argument("prompt", required=False)
@click.option("--option", "-o", "options", multiple=True, metavar="KEY=VALUE", help="Feature form value, e.g. -o topics=fracciones.")
@click.option(
    "--file",
    "-f",
    "files",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Image or PDF sent with the first message, e.g. a student's exam.",
)
@pass_agenda
def ask(agenda: AgendaContext, feature: str, prompt: str, options: tuple[str, ...], files: tuple[Path, ...]) -> None:
    """Ask the assistant FEATURE for material. Without PROMPT, chat interactively."""
    user = load_user_config(agenda.storage)
    if user is None:
        err_console.print("[red]Error:[/red] Save a profile first with `profeia profile`.")
        raise SystemExit(1)

    form = FeatureOptions()
    for item in options:
        key, sep, value = item.partition("=")
        if not sep or not hasattr(form, key):
            raise click.BadParameter(f"unknown option {item!r}", param_hint="--option")
        setattr(form, key, value)

    remember_view(agenda.storage, feature)
    try:
        session = ChatSession()
    except RuntimeError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    with session:
        session.start(build_system_instruction(feature, user, form))
        console.print(Panel.fit(f"[bold]{FEATURE_TITLES[feature]}[/bold]\n{INITIAL_MESSAGES[feature]}", border_style="violet"))
        if prompt or files:
            _reply(session, prompt or "", files)
            if prompt:
                return
        while True:
            text = click.prompt("Vos", default="", show_default=False)
            if not text.strip():
                break
            _reply(session, text)


def _reply(session: ChatSession, text: str, files: tuple[Path, ...] = ()) -> None:
    try:
        with console.status("[bold green]Pensando..."):
            reply = session.send(text, files)
    except (RuntimeError, ValueError, OSError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)
    console.print(Panel(reply, title="ProfeIA", border_style="magenta"))


@main.command()
@pass_agenda
def status(agenda: AgendaContext) -> None:
    """Show the saved profile, last view and number of activities."""
    user = load_user_config(agenda.storage)
    console.print(f"Última vista: [bold]{restore_view(agenda.storage)}[/bold]")
    console.print(f"Perfil: {f'{user.name}, {user.subject} ({user.grade})' if user else '[dim]sin configurar[/dim]'}")
    console.print(f"Actividades agendadas: [bold]{len(agenda.store)}[/bold]")


if __name__ == "__main__":
    main()
