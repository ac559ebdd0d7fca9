"""
Human-readable formatting helpers for log lines and the final report.
"""

from __future__ import annotations


def format_duration(seconds: float) -> str:
    """
    Format a number of seconds as ``H:MM:SS``.

    Whole days get a ``Nd`` prefix and negative values a leading ``-``.
    Fractions of a second are dropped.

    >>> format_duration(3725)
    '1:02:05'
    >>> format_duration(-90061)
    '-1d 1:01:01'
    """
    total = int(abs(seconds))
    days, remainder = divmod(total, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, secs = divmod(remainder, 60)

    text = f"{hours}:{minutes:02d}:{secs:02d}"
    if days:
        text = f"{days}d {text}"
    if seconds < 0 and total:
        text = f"-{text}"
    return text
