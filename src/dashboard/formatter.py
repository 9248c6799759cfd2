"""
Rich formatter module for the Mindful Planner dashboard.

Renders the dashboard summary (stats, focus list, category progress,
streak and insight) for the terminal.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from src.core.models import Task
from src.dashboard.aggregator import CategoryProgress, DailyStats
from src.dashboard.insights import Insight
from src.dashboard.prioritizer import days_until_due


# Tier badge colors
TIER_COLORS = {
    "high": "red bold",
    "medium": "yellow",
    "low": "dim",
    "ai": "magenta",
}

INSIGHT_ICONS = {
    "productivity": "⚡",
    "mindfulness": "❀",
    "recommendation": "➜",
}


def greeting_for(now: datetime) -> str:
    """Greeting appropriate to the hour of day."""
    hour = now.hour

    if hour < 12:
        return "Good Morning!"
    elif hour < 17:
        return "Good Afternoon!"
    elif hour < 21:
        return "Good Evening!"
    else:
        return "Good Night!"


class DashboardFormatter:
    """Rich-based formatter for the dashboard."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def _format_tier(self, task: Task) -> str:
        """Tier badge; 'ai' tasks show their computed score."""
        color = TIER_COLORS.get(task.priority, "white")
        label = task.priority.upper()
        if task.priority == "ai" and task.ai_priority is not None:
            label = f"AI {task.ai_priority}"
        return f"[{color}]{label}[/{color}]"

    def _format_due_date(self, task: Task, now: datetime) -> str:
        """Due date colored by urgency."""
        if task.due_date is None:
            return "[dim]---[/dim]"

        days = days_until_due(task.due_date, now)
        if days < 0:
            return f"[red bold]{abs(days)}d overdue[/red bold]"
        elif days == 0:
            return "[yellow bold]Due today[/yellow bold]"
        elif days == 1:
            return "[yellow]Due tmrw[/yellow]"
        return f"[dim]{task.due_date.strftime('%b %d')}[/dim]"

    def format_header(self, now: datetime) -> Panel:
        content = Text()
        content.append(f"{greeting_for(now)}\n", style="bold")
        content.append(now.strftime("%A, %B %d, %Y"), style="dim")

        return Panel(
            content,
            title="[bold]Today[/bold]",
            title_align="center",
            border_style="blue",
            padding=(0, 2),
        )

    def format_top_priorities(self, tasks: List[Task], now: datetime) -> Panel:
        """Panel listing the open tasks in their ranked order."""
        if not tasks:
            return Panel(
                Text("No active tasks", style="dim", justify="center"),
                title="[bold]Focus Today[/bold]",
                border_style="green",
                padding=(0, 1),
            )

        table = Table(show_header=False, box=None, padding=(0, 1), expand=True)
        table.add_column("#", width=3)
        table.add_column("Title", ratio=1)
        table.add_column("Due", width=12, justify="right")
        table.add_column("Tier", width=8, justify="right")

        for i, task in enumerate(tasks, 1):
            title = task.title[:40] + "..." if len(task.title) > 40 else task.title
            if task.is_mindful:
                title = f"{title} [magenta]❀[/magenta]"
            table.add_row(
                f"[bold]{i}.[/bold]",
                title,
                self._format_due_date(task, now),
                self._format_tier(task),
            )

        return Panel(
            table,
            title="[bold]Focus Today[/bold]",
            border_style="green",
            padding=(0, 1),
        )

    def format_category_progress(self, progress: List[CategoryProgress]) -> Panel:
        table = Table(show_header=True, box=None, padding=(0, 1), expand=True)
        table.add_column("Category", ratio=1)
        table.add_column("Done", justify="right", width=8)
        table.add_column("%", justify="right", width=5)

        for item in progress:
            table.add_row(
                f"[{item.category.color}]■[/] {item.category.name}",
                f"{item.completed_tasks}/{item.total_tasks}",
                f"{item.percentage}%",
            )

        return Panel(table, title="[bold]Categories[/bold]", border_style="white", padding=(0, 1))

    def format_streak(self, days: int, message: str) -> Panel:
        content = Text()
        content.append(f"{days} day{'s' if days != 1 else ''}\n", style="bold magenta")
        content.append(message, style="dim")
        return Panel(content, title="[bold]Mindfulness Streak[/bold]", border_style="magenta")

    def format_insight(self, insight: Insight) -> Panel:
        icon = INSIGHT_ICONS.get(insight.type, "•")
        return Panel(
            Text(f"{icon} {insight.message}"),
            title=f"[bold]Insight · {insight.type}[/bold]",
            border_style="cyan",
        )

    def format_stats_bar(self, stats: DailyStats) -> str:
        parts = [
            f"[white]○ {stats.active_tasks} active[/white]",
            f"[green]✓ {stats.completed_today} done today[/green]",
            f"[cyan]focus {stats.focus_score}[/cyan]",
            f"[magenta]{stats.mindfulness_minutes} mindful min[/magenta]",
        ]
        return " │ ".join(parts)

    def render_dashboard(self, summary: Dict[str, Any], message: str,
                         now: Optional[datetime] = None) -> None:
        """
        Render the complete dashboard to console.

        Args:
            summary: Output of DashboardAggregator.summary()
            message: Streak message to show under the streak count
            now: Current datetime
        """
        now = now or datetime.now(timezone.utc)

        self.console.print(self.format_header(now))
        self.console.print(self.format_top_priorities(summary["priorities"], now))
        if summary["categories"]:
            self.console.print(self.format_category_progress(summary["categories"]))
        self.console.print(self.format_streak(summary["streak"], message))
        self.console.print(self.format_insight(summary["insight"]))

        self.console.print("─" * 60)
        self.console.print(self.format_stats_bar(summary["stats"]), justify="center")
        self.console.print("─" * 60)
