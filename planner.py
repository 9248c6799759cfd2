#!/usr/bin/env python3
"""
Mindful Planner - Command Line Interface
Set up the database, run the API server, and look at your day from the terminal
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent))

import typer
from rich.console import Console
from rich.table import Table
from datetime import datetime, timezone
from typing import Optional

from dateutil import parser as date_parser

from src.core import Config, Storage, Task, get_database
from src.core.logging_setup import configure_logging
from src.core.seed import DEMO_USER_ID, init_database, seed_database
from src.dashboard import (
    DashboardAggregator,
    DashboardFormatter,
    calculate_task_priority,
    score_breakdown,
    streak_message,
)

# Initialize CLI app and console
app = typer.Typer(help="Mindful Planner - tasks, focus and mindfulness in one place")

console = Console()
config = Config()

# Opened on first use so init-db works before the database exists
_db = None


def get_db():
    global _db
    if _db is None:
        _db = get_database(config)
    return _db


def format_task(task: Task) -> str:
    """One-line task summary: id, status, title, tier and due date"""
    status = "[green]✓[/green]" if task.completed else "○"
    tier = task.priority.upper()
    if task.ai_priority is not None:
        tier = f"AI {task.ai_priority}"
    line = f"#{task.id} {status} {task.title} [dim]({tier})[/dim]"
    if task.due_date:
        line += f" [dim]due {task.due_date.strftime('%b %d %H:%M')}[/dim]"
    if task.category:
        line += f" [{task.category.color}]{task.category.name}[/]"
    return line


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    configure_logging("DEBUG" if verbose else "WARNING")


@app.command("init-db")
def init_db(
    reset: bool = typer.Option(False, "--reset", help="Delete an existing SQLite database first"),
    seed: bool = typer.Option(True, "--seed/--no-seed", help="Load demo data"),
):
    """
    Create the database and its tables

    Examples:
      planner init-db
      planner init-db --reset --no-seed
    """
    try:
        db = init_database(config, reset=reset)
        console.print(f"[green]✓[/green] Database ready at {db.db_path}")
        if seed:
            created = seed_database(config)
            console.print(f"[green]✓[/green] Demo data: {created}")
    except Exception as e:
        console.print(f"[red]Error initializing database: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def seed(user: int = typer.Option(DEMO_USER_ID, "--user", "-u", help="User ID to seed for")):
    """Load demo categories, tasks, activities, tips and productivity data"""
    try:
        created = seed_database(config, user_id=user)
        for kind, count in created.items():
            console.print(f"  {kind}: {count}")
    except Exception as e:
        console.print(f"[red]Error seeding database: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
):
    """Run the API server"""
    import uvicorn
    uvicorn.run("backend.main:app", host=host, port=port, reload=reload)


@app.command()
def dashboard(user: int = typer.Option(DEMO_USER_ID, "--user", "-u", help="User ID")):
    """
    Show today's dashboard

    Displays your day at a glance:
    - Open tasks in priority order
    - Progress per category
    - Mindfulness streak and an insight
    - Today's stats
    """
    try:
        aggregator = DashboardAggregator(get_db(), config)
        summary = aggregator.summary(user)

        formatter = DashboardFormatter(console)
        formatter.render_dashboard(summary, streak_message(summary["streak"]))

    except Exception as e:
        console.print(f"[red]Error loading dashboard: {e}[/red]")
        raise typer.Exit(1)


@app.command("list")
def list_tasks(
    user: int = typer.Option(DEMO_USER_ID, "--user", "-u", help="User ID"),
    task_filter: str = typer.Option("all", "--filter", "-f", help="all, today, important, completed"),
    limit: int = typer.Option(50, "--limit", "-n", help="Maximum tasks to show"),
):
    """
    List tasks, scored 'ai' tasks first

    Examples:
      planner list
      planner list --filter today
    """
    try:
        aggregator = DashboardAggregator(get_db(), config)
        tasks = aggregator.storage.list_tasks(
            user, task_filter, today_start=aggregator.today_start(), limit=limit
        )

        if not tasks:
            console.print("[yellow]No tasks found[/yellow]")
            return

        console.print(f"\n[bold]Tasks ({len(tasks)}):[/bold]\n")
        for task in tasks:
            console.print(f"  {format_task(task)}")
        console.print()

    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


@app.command()
def add(
    title: str = typer.Argument(..., help="Task title"),
    user: int = typer.Option(DEMO_USER_ID, "--user", "-u", help="User ID"),
    priority: str = typer.Option("ai", "--priority", "-p", help="high, medium, low or ai"),
    due: Optional[str] = typer.Option(None, "--due", "-d", help="Due date, e.g. '2026-10-21 17:00'"),
    description: Optional[str] = typer.Option(None, "--desc", help="Task description"),
    mindful: bool = typer.Option(False, "--mindful", "-m", help="Mark as a mindful task"),
):
    """
    Add a new task

    Examples:
      planner add "Write report" --due "friday 17:00"
      planner add "Stretch break" -p low --mindful
    """
    if priority not in ("high", "medium", "low", "ai"):
        console.print(f"[red]Unknown priority: {priority}[/red]")
        raise typer.Exit(1)

    due_date = None
    if due:
        try:
            due_date = date_parser.parse(due)
        except (ValueError, OverflowError):
            console.print(f"[red]Could not parse date: {due}[/red]")
            raise typer.Exit(1)
        if due_date.tzinfo is None:
            due_date = due_date.replace(tzinfo=timezone.utc)

    fields = {
        "title": title,
        "description": description,
        "priority": priority,
        "is_mindful": mindful,
        "due_date": due_date,
        "user_id": user,
    }
    now = datetime.now(timezone.utc)
    if priority == "ai":
        fields["ai_priority"] = calculate_task_priority(Task(**fields), now)

    task = Storage(get_db()).create_task(fields, now)
    console.print(f"[green]✓[/green] Added {format_task(task)}")


@app.command()
def score(task_id: int = typer.Argument(..., help="Task ID")):
    """Show how a task's priority score is made up"""
    task = Storage(get_db()).get_task(task_id)
    if task is None:
        console.print(f"[red]Task #{task_id} not found[/red]")
        raise typer.Exit(1)

    breakdown = score_breakdown(task)
    table = Table(title=f"#{task.id} {task.title}", show_header=True)
    table.add_column("Rule")
    table.add_column("Points", justify="right")
    for rule in ("base", "due_date", "description", "mindfulness", "tier"):
        table.add_row(rule, str(breakdown[rule]))
    table.add_row("[bold]score[/bold]", f"[bold]{breakdown['score']}[/bold]")
    console.print(table)


@app.command()
def streak(user: int = typer.Option(DEMO_USER_ID, "--user", "-u", help="User ID")):
    """Show the mindfulness streak"""
    days = DashboardAggregator(get_db(), config).get_streak(user)
    console.print(f"[bold magenta]{days}[/bold magenta] day streak - {streak_message(days)}")


@app.command()
def insight(user: int = typer.Option(DEMO_USER_ID, "--user", "-u", help="User ID")):
    """Show an insight about recent habits"""
    result = DashboardAggregator(get_db(), config).generate_insight(user)
    console.print(f"[cyan]{result.type}[/cyan]: {result.message}")


if __name__ == "__main__":
    app()
