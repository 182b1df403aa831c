"""Utility modules for the image reducer."""

from .formatters import format_file_size, format_duration, format_run_summary

__all__ = ["format_file_size", "format_duration", "format_run_summary"]
