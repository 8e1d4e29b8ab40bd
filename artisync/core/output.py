"""Console progress output for artisync using Rich."""

from __future__ import annotations

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TaskProgressColumn, TextColumn

# =============================================================================
# Console Instances
# =============================================================================

console = Console()


# =============================================================================
# Progress
# =============================================================================


def create_progress(target: Console | None = None) -> Progress:
    """Create a Rich progress bar.

    Returns:
        Progress instance.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=target or console,
    )


class RichProgressSink:
    """Adapts one Rich progress task to the engines' progress sink calls.

    The sink owns the task; the caller owns the ``Progress`` lifecycle
    (``with create_progress() as progress: ...``).
    """

    def __init__(self, progress: Progress, description: str = "Uploading") -> None:
        self.progress = progress
        self.description = description
        self.task_id: TaskID | None = None

    def start(self, total: int) -> None:
        if self.task_id is None:
            self.task_id = self.progress.add_task(self.description, total=total)
        else:
            self.progress.reset(self.task_id, total=total)

    def advance(self, step: int = 1) -> None:
        if self.task_id is not None:
            self.progress.advance(self.task_id, step)

    def set_progress(self, value: int) -> None:
        if self.task_id is not None:
            self.progress.update(self.task_id, completed=value)

    def finish(self) -> None:
        if self.task_id is not None:
            task = next(t for t in self.progress.tasks if t.id == self.task_id)
            if task.total is not None and task.completed < task.total:
                self.progress.update(self.task_id, completed=task.total)
            self.progress.stop_task(self.task_id)
