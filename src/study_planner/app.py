"""Interactive CLI application."""
from pathlib import Path

from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt, IntPrompt
from rich.table import Table

from study_planner import config
from study_planner.calendar_export import (
    build_authorization_url, connect_calendar, disconnect_calendar, is_calendar_connected, push_plan_to_calendar,
)
from study_planner.db import init_db
from study_planner.errors import ExportError
from study_planner.importer import import_subjects
from study_planner.logging_setup import setup_logger
from study_planner.planner import PlanRequest, create_plan
from study_planner.plans import get_latest_plan, save_plan, set_item_completed
from study_planner.progress import get_plan_progress, get_progress_color, get_progress_label
from study_planner.subjects import add_subject, delete_subject, get_subject_names, list_subjects

console = Console()


def show_welcome():
    console.print(Panel(
        "[bold]Study Planner[/bold]\n[dim]Day-by-day study blocks with built-in breaks[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("subjects", "List your subjects"),
        ("add", "Add a subject"),
        ("remove", "Remove a subject"),
        ("import", "Import subjects from a datesheet or notes file"),
        ("plan", "Create a new study plan"),
        ("show", "View the current plan"),
        ("done", "Mark a plan item done / not done"),
        ("progress", "Completion summary"),
        ("connect", "Connect Google Calendar"),
        ("disconnect", "Forget Google Calendar credentials"),
        ("push", "Export the plan to Google Calendar"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def cmd_subjects(db_path: str, owner: str):
    subjects = list_subjects(db_path, owner)
    if not subjects:
        console.print("[yellow]No subjects yet. Use 'add' or 'import'.[/yellow]")
        return
    table = Table(title="Subjects")
    table.add_column("ID", justify="right")
    table.add_column("Name", style="cyan")
    for s in subjects:
        table.add_row(str(s["id"]), s["name"])
    console.print(table)


def cmd_add(db_path: str, owner: str):
    name = Prompt.ask("Subject name")
    subject = add_subject(db_path, owner, name)
    console.print(f"[green]Added {subject['name']}[/green]")


def cmd_remove(db_path: str, owner: str):
    cmd_subjects(db_path, owner)
    subject_id = IntPrompt.ask("Subject ID to remove")
    delete_subject(db_path, owner, subject_id)
    console.print("[green]Subject removed.[/green]")


def cmd_import(db_path: str, owner: str):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    added = import_subjects(db_path, owner, file_path)
    if added:
        console.print(f"[green]Imported {len(added)} subjects: {', '.join(added)}[/green]")
    else:
        console.print("[yellow]No new subjects found in that file.[/yellow]")


def render_plan(plan) -> Table:
    table = Table(title=f"Study Plan ({plan.created_at[:16].replace('T', ' ')})")
    table.add_column("ID", justify="right")
    table.add_column("Date")
    table.add_column("Time")
    table.add_column("Item")
    table.add_column("Done")
    for item in plan.items:
        title = f"[cyan]{item.title}[/cyan]" if item.is_study else f"[dim]{item.title}[/dim]"
        table.add_row(
            str(item.id),
            item.start.strftime("%a %Y-%m-%d"),
            f"{item.start:%H:%M}-{item.end:%H:%M}",
            title,
            "[green]✓[/green]" if item.completed else "",
        )
    return table


def cmd_plan(db_path: str, owner: str):
    stored = ", ".join(get_subject_names(db_path, owner))
    request = PlanRequest(
        subjects=Prompt.ask("Subjects (comma separated)", default=stored),
        daily_start_time=Prompt.ask("Daily start time", default="09:00"),
        daily_end_time=Prompt.ask("Daily end time", default="17:00"),
        num_days=Prompt.ask("Number of days", default="1"),
        max_hours_per_day=Prompt.ask(
            "Max study hours per day (blank = auto)", default="", show_default=False
        ) or None,
        start_date=Prompt.ask(
            "Start date YYYY-MM-DD (blank = today)", default="", show_default=False
        ) or None,
    )
    result = create_plan(request)
    if not result.ok:
        console.print(f"[red]{result.error.message}[/red]")
        return
    plan = save_plan(db_path, owner, result.items)
    console.print(render_plan(plan))


def cmd_show(db_path: str, owner: str):
    plan = get_latest_plan(db_path, owner)
    if not plan or not plan.items:
        console.print("[yellow]No study plan yet. Use 'plan' to create one.[/yellow]")
        return
    console.print(render_plan(plan))


def cmd_done(db_path: str, owner: str):
    item_id = IntPrompt.ask("Item ID")
    completed = Prompt.ask("Completed?", choices=["y", "n"], default="y") == "y"
    item = set_item_completed(db_path, owner, item_id, completed)
    state = "done" if item.completed else "not done"
    console.print(f"[green]{item.title} ({item.start:%Y-%m-%d %H:%M}) marked {state}.[/green]")


def cmd_progress(db_path: str, owner: str):
    plan = get_latest_plan(db_path, owner)
    stats = get_plan_progress(plan)
    if not stats["sessions_total"]:
        console.print("[yellow]No study sessions to track yet.[/yellow]")
        return
    pct = stats["completed_pct"]
    color = get_progress_color(pct)
    bar_filled = int(pct / 5)
    bar = f"[{color}]{'█' * bar_filled}{'░' * (20 - bar_filled)}[/{color}]"
    console.print(f"\n  Progress: [bold]{pct}%[/bold] {bar} [{color}]{get_progress_label(pct)}[/{color}]\n")

    table = Table(title="By Subject")
    table.add_column("Subject", style="cyan")
    table.add_column("Sessions", justify="right")
    table.add_column("Done", justify="right")
    table.add_column("Hours", justify="right")
    for name, entry in stats["subjects"].items():
        table.add_row(name, str(entry["sessions"]), str(entry["completed"]), f"{entry['minutes'] / 60:g}")
    console.print(table)
    console.print(f"\n  Studied [bold]{stats['minutes_completed'] / 60:g}h[/bold] "
                  f"of [bold]{stats['minutes_planned'] / 60:g}h[/bold] planned")


def cmd_push(db_path: str, owner: str):
    if not is_calendar_connected(db_path, owner):
        console.print("[yellow]Google Calendar is not connected.[/yellow]")
        return
    try:
        result = push_plan_to_calendar(db_path, owner)
    except ExportError as e:
        console.print(f"[red]{e}[/red]")
        return
    if not result.ok:
        console.print("[red]Failed to create events[/red]")
    else:
        console.print(f"[green]Created {result.created}/{result.total} calendar events.[/green]")
    for err in result.errors:
        console.print(f"  [dim]{err}[/dim]")


def cmd_connect(db_path: str, owner: str):
    if is_calendar_connected(db_path, owner):
        console.print("[dim]Google Calendar is already connected; new credentials replace the old ones.[/dim]")
    method = Prompt.ask("Connect with", choices=["code", "token"], default="code")
    try:
        if method == "token":
            connect_calendar(db_path, owner, refresh_token=Prompt.ask("Refresh token"))
        else:
            if not config.GOOGLE_CLIENT_ID:
                console.print("[red]Set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET first.[/red]")
                return
            url = build_authorization_url(config.GOOGLE_CLIENT_ID, config.GOOGLE_REDIRECT_URI)
            console.print(f"Open this URL, approve access, then paste the code:\n{url}", markup=False)
            connect_calendar(db_path, owner, code=Prompt.ask("Authorization code"))
    except ExportError as e:
        console.print(f"[red]{e}[/red]")
        return
    console.print("[green]Google Calendar connected.[/green]")


def cmd_disconnect(db_path: str, owner: str):
    if not is_calendar_connected(db_path, owner):
        console.print("[yellow]Google Calendar is not connected.[/yellow]")
        return
    disconnect_calendar(db_path, owner)
    console.print("[green]Google Calendar disconnected.[/green]")


COMMANDS = {
    "subjects": cmd_subjects,
    "add": cmd_add,
    "remove": cmd_remove,
    "import": cmd_import,
    "plan": cmd_plan,
    "show": cmd_show,
    "done": cmd_done,
    "progress": cmd_progress,
    "push": cmd_push,
    "connect": cmd_connect,
    "disconnect": cmd_disconnect,
}


def main():
    setup_logger(level=config.LOG_LEVEL, log_file=config.LOG_FILE)
    db_path = config.DEFAULT_DB_PATH
    owner = config.DEFAULT_OWNER
    init_db(db_path)

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="show").strip().lower()
        try:
            if choice in ("quit", "exit", "q"):
                console.print("[dim]Happy studying![/dim]")
                break
            command = COMMANDS.get(choice)
            if command is None:
                console.print("[red]Unknown command. Try again.[/red]")
                continue
            command(db_path, owner)
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.debug(f"Command {choice!r} failed: {e!r}")
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
