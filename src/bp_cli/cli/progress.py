"""Rich-based progress bar for ``message generate``.

The :class:`RichProgressTicker` is passed to
:meth:`~bp_cli.core.message_service.MessageService.generate` as its
``progress_callback``; each call advances the bar by one message.
Rendering goes to stderr so stdout stays clean for scripts.
"""

from __future__ import annotations

from typing import Any

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeRemainingColumn,
)

from bp_cli.cli.console import get_stderr_console


class RichProgressTicker:
    """Callable progress adapter for Rich.

    Usage::

        with RichProgressTicker("Generating messages", total=20) as tick:
            service.generate(20, progress_callback=tick)
    """

    def __init__(self, description: str, total: int) -> None:
        self._progress: Any = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeRemainingColumn(),
            console=get_stderr_console(),
            transient=False,
        )
        self._description: str = description
        self._total: int = total
        self._task_id: Any = None
        self._started: bool = False

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> RichProgressTicker:
        self.start()
        return self

    def __exit__(self, *_args: object) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if not self._started:
            self._progress.start()
            self._task_id = self._progress.add_task(self._description, total=self._total)
            self._started = True

    def stop(self) -> None:
        """Stop the display (idempotent)."""
        if self._started:
            self._progress.stop()
            self._started = False

    @property
    def completed(self) -> int:
        if self._task_id is None:
            return 0
        return int(self._progress.tasks[0].completed)

    # ------------------------------------------------------------------
    # Callback
    # ------------------------------------------------------------------

    def __call__(self) -> None:
        """Advance the bar by one; ignored once stopped."""
        if not self._started:
            return
        self._progress.advance(self._task_id)
