"""Conversion of raw timing tokens into comparable run times."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .models import TimeEntry

DNF_MARKERS = {"DNF", "DNS"}
DSQ_MARKERS = {"DSQ", "DQ"}

# Split Second status codes: 1 = OK, 2 = DNF, 3 = DSQ
_STATUS_CODES = {"2": "DNF", "3": "DSQ"}

DUAL_COURSE = 1


@dataclass(frozen=True)
class RunTimes:
    run1: Optional[int]
    run2: Optional[int]
    total_time: Optional[int]
    status: str
    dnf: bool
    dsq: bool


def parse_time(token: Optional[str]) -> Optional[int]:
    """Return milliseconds for ``SS.ss``, ``MM:SS.ss`` or ``HH:MM:SS.ss``.

    Marker tokens, empty values and anything that does not fit the grammar
    yield ``None``.
    """
    if not token:
        return None
    token = token.strip()
    if not token or token.upper() in DNF_MARKERS | DSQ_MARKERS:
        return None

    parts = token.split(":")
    try:
        if len(parts) == 1:
            seconds = float(parts[0])
        elif len(parts) == 2:
            seconds = int(parts[0]) * 60 + float(parts[1])
        elif len(parts) == 3:
            seconds = int(parts[0]) * 3600 + int(parts[1]) * 60 + float(parts[2])
        else:
            return None
    except ValueError:
        return None
    if seconds != seconds or seconds in (float("inf"), float("-inf")):
        return None
    return int(round(seconds * 1000))


def check_status(token: Optional[str], status_code: Optional[str]) -> str:
    """Classify one time entry as ``OK``, ``DNF`` or ``DSQ``."""
    marker = (token or "").strip().upper()
    if marker in DNF_MARKERS:
        return "DNF"
    if marker in DSQ_MARKERS:
        return "DSQ"
    return _STATUS_CODES.get((status_code or "").strip(), "OK")


def _course_number(course: str) -> Optional[int]:
    try:
        return int(course.strip())
    except (AttributeError, ValueError):
        return None


def process_racer_times(times: Iterable[TimeEntry], race_type: int) -> RunTimes:
    """Resolve a racer's time entries into run1, run2 and total time.

    Dual-course races identify the run by course number (0 and 1); single
    course races by the order of the entries.
    """
    run1: Optional[int] = None
    run2: Optional[int] = None
    dnf = False
    dsq = False
    status = "OK"

    for entry in times:
        value = parse_time(entry.result)
        entry_status = check_status(entry.result, entry.status)
        if entry_status == "DNF":
            dnf = True
            status = "DNF"
        elif entry_status == "DSQ":
            dsq = True
            status = "DSQ"

        slot = _course_number(entry.course) if race_type == DUAL_COURSE else entry.run_index
        if slot == 0:
            run1 = value
        elif slot == 1:
            run2 = value

    total_time: Optional[int] = None
    if not dnf and not dsq and run1 is not None:
        total_time = run1 + run2 if run2 is not None else run1

    return RunTimes(run1=run1, run2=run2, total_time=total_time, status=status, dnf=dnf, dsq=dsq)


__all__ = ["RunTimes", "check_status", "parse_time", "process_racer_times"]
