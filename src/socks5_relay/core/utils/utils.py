"""Common utility functions."""

from typing import Final

BYTES_PER_KB: Final = 1024

# Size units, smallest first
SIZE_UNITS: Final = ("B", "KB", "MB", "GB", "TB")


def format_bytes(bytes_: float) -> str:
    """Format bytes into human readable format.

    Args:
        bytes_: Number of bytes to format

    Returns:
        str: Formatted string with appropriate unit, e.g. ``"3.0 MB"``
    """
    value = float(bytes_)
    for unit in SIZE_UNITS[:-1]:
        if value < BYTES_PER_KB:
            return f"{value:.1f} {unit}"
        value /= BYTES_PER_KB
    return f"{value:.1f} {SIZE_UNITS[-1]}"


def format_duration(seconds: float) -> str:
    """Format a duration as ``H:MM:SS``."""
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"
