"""Display helpers registered as Jinja filters."""

from __future__ import annotations

import math
from datetime import date
from typing import Any, Dict, Optional, Sequence

ALL_PAGE_SIZE = 10000


def format_time(ms: Optional[int]) -> str:
    """Format milliseconds as ``M:SS.ss`` (or ``SS.ss`` under a minute)."""
    if ms is None:
        return "-"
    total_seconds = ms / 1000
    minutes = int(total_seconds // 60)
    seconds = f"{total_seconds - minutes * 60:.2f}"
    if minutes > 0:
        return f"{minutes}:{seconds.zfill(5)}"
    return seconds


def format_time_behind(ms: Optional[int]) -> str:
    if not ms:
        return "-"
    return f"+{ms / 1000:.2f}"


def format_date(value: Optional[str]) -> str:
    """Format an ISO date as ``Jan 5, 2025``; other values are returned as-is."""
    if not value:
        return ""
    try:
        d = date.fromisoformat(value)
    except ValueError:
        return value
    return f"{d.strftime('%b')} {d.day}, {d.year}"


def gender_label(gender: Optional[str]) -> str:
    return "Boys" if gender == "M" else "Girls"


def paginate(items: Sequence[Any], page: int = 1, page_size: int = 100) -> Dict[str, Any]:
    """Slice ``items`` for one page; out of range pages are clamped."""
    page_size = max(1, int(page_size))
    total = len(items)
    total_pages = max(1, math.ceil(total / page_size))
    page = min(max(1, int(page)), total_pages)
    start = (page - 1) * page_size
    end = min(start + page_size, total)
    return {
        "items": list(items[start:end]),
        "page": page,
        "page_size": page_size,
        "total": total,
        "total_pages": total_pages,
        "start": start + 1 if total else 0,
        "end": end,
    }


__all__ = ["format_date", "format_time", "format_time_behind", "gender_label", "paginate"]
