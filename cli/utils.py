"""Utility functions for CLI operations."""

import sys
from datetime import datetime

from cli.constants import GREEN, RESET


class BlockProgress:
    """Callable that renders per-block upload progress to stdout."""

    def __init__(self, filename: str):
        """
        Initialize the progress display.

        Args:
            filename: Display name for the file
        """
        self.filename = filename
        self._started = False
        self._finished = False

    def __call__(self, done: int, total: int) -> None:
        self._started = True
        progress = (done / total) * 100 if total else 100.0
        sys.stdout.write(
            f"\rUploading {self.filename}: block {done}/{total} ({GREEN}{progress:.1f}%{RESET})"
        )
        sys.stdout.flush()
        if done >= total:
            self.finish()

    def finish(self) -> None:
        """Finalize progress display with newline."""
        if self._finished or not self._started:
            return
        self._finished = True
        sys.stdout.write('\n')
        sys.stdout.flush()


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"


def format_timestamp(millis: int | None) -> str:
    """Render a millisecond epoch timestamp, or '-' when absent."""
    if not millis:
        return "-"
    return datetime.fromtimestamp(millis / 1000).strftime('%Y-%m-%d %H:%M:%S')
