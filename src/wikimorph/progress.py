"""
Live progress panel for batch decomposition.

Usage:
    with BatchProgress("Decomposing words.txt", total=len(words)) as progress:
        for word in words:
            ...
            progress.advance(pieces=len(result), diagnostics=len(result.diagnostics))
"""

import time
from typing import Optional

from rich import box
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text


def format_elapsed(seconds: float) -> str:
    """Format seconds as MM:SS, or HH:MM:SS past an hour."""
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


class BatchProgress:
    """Context manager showing word/piece/failure counts without scrolling."""

    def __init__(
        self,
        title: str,
        total: Optional[int] = None,
        refresh_interval: int = 25,
        console: Optional[Console] = None,
    ):
        """
        Args:
            title: Panel title
            total: Number of words expected, if known
            refresh_interval: Redraw the panel every N words
            console: Console to draw on (stderr by default)
        """
        self.title = title
        self.total = total
        self.refresh_interval = max(1, refresh_interval)
        self.console = console or Console(stderr=True)

        self.words = 0
        self.pieces = 0
        self.diagnostics = 0
        self.failures = 0
        self.start_time = 0.0
        self.live: Optional[Live] = None

    def __enter__(self):
        self.start_time = time.time()
        self.live = Live(self._make_panel(), console=self.console, refresh_per_second=4)
        self.live.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.live:
            self.live.update(self._make_panel())
            self.live.__exit__(exc_type, exc_val, exc_tb)
        return False

    def advance(self, pieces: int = 0, diagnostics: int = 0, failed: bool = False) -> None:
        self.words += 1
        self.pieces += pieces
        self.diagnostics += diagnostics
        if failed:
            self.failures += 1
        if self.live and self.words % self.refresh_interval == 0:
            self.live.update(self._make_panel())

    def _make_panel(self) -> Panel:
        elapsed = time.time() - self.start_time if self.start_time else 0.0
        words = f"{self.words:,}" if self.total is None else f"{self.words:,} / {self.total:,}"
        rows = [
            ("Words", words),
            ("Pieces", f"{self.pieces:,}"),
            ("Diagnostics", f"{self.diagnostics:,}"),
            ("Failures", f"{self.failures:,}"),
            ("Elapsed", format_elapsed(elapsed)),
        ]
        if elapsed > 0:
            rows.append(("Rate", f"{self.words / elapsed:,.1f}/s"))

        grid = Table.grid(padding=(0, 2))
        grid.add_column(justify="left", no_wrap=True)
        grid.add_column(justify="right", no_wrap=True)
        for label, value in rows:
            grid.add_row(Text(f"{label}:", style="bold grey50"), Text(value, style="bright_cyan"))

        return Panel(grid, title=self.title, box=box.SIMPLE, border_style="bright_black")
