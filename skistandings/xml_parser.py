"""Parser for Split Second ClubRace XML race files.

Handles both single-course races (two runs on one course) and dual-course
races (one run on each of two courses).
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from datetime import date, timedelta
from typing import List, Optional, Union

from .models import Race, RaceHeader, Racer, TimeEntry
from .timing import process_racer_times

# Serial day 25569 is 1970-01-01 in the 1899-12-30 based spreadsheet calendar.
_SERIAL_UNIX_EPOCH = 25569
_UNIX_EPOCH = date(1970, 1, 1)

_CLASS_GENDER = {"VM": "M", "JVM": "M", "VF": "F", "JVF": "F"}


class RaceFileError(ValueError):
    """Raised when a race file cannot be parsed."""


def _find(parent: Optional[ET.Element], tag: str) -> Optional[ET.Element]:
    if parent is None:
        return None
    if parent.tag == tag:
        return parent
    return parent.find(f".//{tag}")


def _text(parent: Optional[ET.Element], tag: str) -> str:
    """Return the stripped text of the first ``tag`` below ``parent``."""
    if parent is None:
        return ""
    el = parent.find(f".//{tag}")
    if el is None:
        return ""
    return "".join(el.itertext()).strip()


def serial_to_iso(serial: str) -> str:
    """Convert a spreadsheet serial day number to ``YYYY-MM-DD`` (UTC)."""
    try:
        days = int(float(serial))
    except (TypeError, ValueError, OverflowError):
        return ""
    try:
        return (_UNIX_EPOCH + timedelta(days=days - _SERIAL_UNIX_EPOCH)).isoformat()
    except OverflowError:
        return ""


def _int_or_zero(value: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def parse_header(root: ET.Element) -> RaceHeader:
    header = _find(root, "Header")

    name = _text(header, "Header1") or _text(header, "Name") or "Unnamed Race"

    date_i = _text(header, "DateI")
    race_date = serial_to_iso(date_i) if date_i else _text(header, "Date")

    return RaceHeader(
        name=name,
        date=race_date,
        location=_text(header, "RTResort") or _text(header, "Location"),
        discipline=_text(header, "USCSARaceType") or _text(header, "Discipline"),
        race_type=_int_or_zero(_text(header, "RaceType")),
        courses=(
            _text(header, "Course1Name") or "Run 1",
            _text(header, "Course2Name") or "Run 2",
        ),
    )


def gender_from_race_name(name: str) -> Optional[str]:
    lowered = (name or "").lower()
    if "boys" in lowered:
        return "M"
    if "girls" in lowered:
        return "F"
    return None


def resolve_gender(raw_gender: str, racer_class: str, race_gender: Optional[str]) -> Optional[str]:
    """Pick the racer's gender from the field, the class code, then the race name."""
    if raw_gender:
        return raw_gender.upper()
    if racer_class:
        derived = _CLASS_GENDER.get(racer_class.upper().strip())
        if derived:
            return derived
    return race_gender


def parse_competitors(root: ET.Element, race_type: int) -> List[Racer]:
    header = _find(root, "Header")
    race_gender = gender_from_race_name(_text(header, "Header1"))

    racers: List[Racer] = []
    for comp in root.iter("Comp"):
        racer_class = _text(comp, "Class")
        times = [
            TimeEntry(
                course=_text(time_el, "Course"),
                result=_text(time_el, "Result"),
                status=_text(time_el, "Status"),
                run_index=idx,
            )
            for idx, time_el in enumerate(comp.iter("Time"))
        ]
        runs = process_racer_times(times, race_type)
        racers.append(
            Racer(
                bib=_text(comp, "Bib"),
                first_name=_text(comp, "FirstName"),
                last_name=_text(comp, "LastName"),
                team=_text(comp, "Team"),
                gender=resolve_gender(_text(comp, "Gender"), racer_class, race_gender),
                racer_class=racer_class,
                run1=runs.run1,
                run2=runs.run2,
                total_time=runs.total_time,
                dnf=runs.dnf,
                dsq=runs.dsq,
                status=runs.status,
            )
        )
    return racers


def parse_race(xml_text: Union[str, bytes], filename: Optional[str] = None) -> Race:
    """Parse a race file and return its header and racers."""
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        where = f" in {filename}" if filename else ""
        raise RaceFileError(f"Failed to parse XML{where}: {exc}") from exc

    header = parse_header(root)
    racers = parse_competitors(root, header.race_type)
    return Race(header=header, racers=racers, filename=filename)


__all__ = ["RaceFileError", "parse_header", "parse_competitors", "parse_race", "serial_to_iso"]
