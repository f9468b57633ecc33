"""Download progress reporting for installer payloads."""

from collections.abc import Callable

from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

ProgressCallback = Callable[[str, int, int | None], None]
# Signature: (payload_name, current, total_or_none)


class RichProgressHandler:
    """Rich-based download bar, one task per payload."""

    def __init__(self) -> None:
        self._progress: Progress | None = None
        self._tasks: dict[str, TaskID] = {}
        self._finished: set[str] = set()

    def _ensure_progress(self) -> Progress:
        if self._progress is None:
            self._progress = Progress(
                "[progress.description]{task.description}",
                BarColumn(),
                DownloadColumn(),
                TransferSpeedColumn(),
                TimeRemainingColumn(),
            )
            self._progress.start()
        return self._progress

    def on_download(self, name: str, downloaded: int, total: int | None) -> None:
        """Report download progress for a payload. Updates after it finished are ignored."""
        if name in self._finished:
            return
        progress = self._ensure_progress()
        if name not in self._tasks:
            self._tasks[name] = progress.add_task(name, total=total or 0)
        task_id = self._tasks[name]
        if total and progress.tasks[task_id].total != total:
            progress.update(task_id, total=total)
        progress.update(task_id, completed=downloaded)
        if total and downloaded >= total:
            self.finish(name)

    def finish(self, name: str) -> None:
        """Drop the task for *name* and stop the display once nothing is in flight."""
        self._tasks.pop(name, None)
        self._finished.add(name)
        if not self._tasks and self._progress is not None:
            self._progress.stop()
            self._progress = None


default_progress = RichProgressHandler()
