"""UI rendering, display, and terminal utilities."""

import logging
from collections.abc import Mapping

from rich.console import Console
from rich.table import Table

from thingscloud.models import TaskSnapshot, TaskStatus, task_status, task_title

_STATUS_STYLES: dict[TaskStatus, str] = {
    TaskStatus.PENDING: "",
    TaskStatus.COMPLETED: "green",
    TaskStatus.CANCELLED: "dim",
}


def configure_logging(verbose: bool) -> None:
    """Routes library logging to stderr through rich; DEBUG when verbose."""
    from rich.logging import RichHandler

    handler = RichHandler(console=Console(stderr=True), show_path=False)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )


def format_status(status: TaskStatus | None) -> str:
    if status is None:
        return "unknown"
    return status.name.lower()


def render_task_table(tasks_by_id: Mapping[str, TaskSnapshot], title: str = "Tasks") -> Table:
    """Builds a table of tasks sorted by title."""
    table = Table(title=title, show_header=True, header_style="bold", box=None, padding=(0, 1))
    table.add_column("Title", overflow="ellipsis", min_width=20)
    table.add_column("Status")
    table.add_column("ID", style="dim")

    for record_id, task in sorted(tasks_by_id.items(), key=lambda kv: (task_title(kv[1]).casefold(), kv[0])):
        status = task_status(task)
        style = _STATUS_STYLES.get(status, "") if status is not None else ""
        table.add_row(task_title(task) or "(untitled)", format_status(status), record_id, style=style)

    return table
