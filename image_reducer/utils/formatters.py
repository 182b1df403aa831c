"""Formatting utilities for image reducer reports."""

from ..core.models import RunStats


def format_file_size(size_bytes: float) -> str:
    """Format file size in human readable format.

    Args:
        size_bytes: Size in bytes. Negative sizes keep their sign.

    Returns:
        Human readable size string using 1024-based units.
    """
    sign = '-' if size_bytes < 0 else ''
    size = float(abs(size_bytes))

    if size < 1024:
        return f"{sign}{int(size)} B"

    for unit in ['KB', 'MB', 'GB']:
        size /= 1024
        if size < 1024:
            return f"{sign}{size:.2f} {unit}"

    return f"{sign}{size / 1024:.2f} TB"


def format_duration(seconds: float) -> str:
    """Format a duration as a short human readable phrase."""
    if seconds < 45:
        return "a few seconds"
    if seconds < 90:
        return "a minute"

    minutes = seconds / 60
    if minutes < 45:
        return f"{round(minutes)} minutes"
    if minutes < 90:
        return "an hour"

    return f"{round(minutes / 60)} hours"


def format_throughput(size_bytes: int, seconds: float) -> str:
    """Format processed bytes per second in MB/s."""
    if seconds <= 0:
        return "n/a"
    return f"{size_bytes / seconds / 1024 / 1024:.2f} MB/s"


def format_run_summary(stats: RunStats, elapsed_seconds: float) -> str:
    """Render the end-of-run summary.

    Args:
        stats: Completed run statistics.
        elapsed_seconds: Wall clock time of the run.

    Returns:
        Multi-line summary text.
    """
    lines = [
        "",
        "############### SCAN COMPLETE ###############",
        "",
        "FILES",
        f"    * Scanned:    {stats.files.total}",
        f"    * Optimized:  {stats.files.optimized}",
        f"    * Copied:     {stats.files.copied}",
        f"    * Ignored:    {stats.files.ignored}",
        "",
        "DATA",
        f"    * Original:   {format_file_size(stats.data.original)}",
        f"    * Optimized:  {format_file_size(stats.data.optimized)}",
        "",
        "SAVING",
        f"    * Bytes:      {format_file_size(stats.saved_bytes)}",
        f"    * Size:       {stats.size_percentage:.2f}% of original",
        f"    * Ratio:      {stats.ratio:.2f}:1",
        "",
        "TIME",
        f"    * Time taken: {format_duration(elapsed_seconds)}",
        f"    * Processing: {format_throughput(stats.data.original, elapsed_seconds)}",
        "",
    ]
    return "\n".join(lines)
