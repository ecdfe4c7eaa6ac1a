"""Race file loading from a data directory.

The data directory holds a ``races.json`` manifest listing race files that
live under ``races/``::

    {"races": ["2025-01-07 Boys SL.xml", "2025-01-07 Girls SL.xml"]}

Files that cannot be read or parsed are logged and skipped so one bad upload
does not hide the rest of the season.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import Event, Race
from .season import group_races_into_events
from .xml_parser import RaceFileError, parse_race

logger = logging.getLogger(__name__)

MANIFEST_NAME = "races.json"
RACES_DIRNAME = "races"


class ManifestError(RuntimeError):
    """Raised when the race manifest is missing or malformed."""


def load_manifest(data_dir: Path) -> List[str]:
    """Return the race filenames listed in the manifest."""
    path = Path(data_dir) / MANIFEST_NAME
    try:
        with path.open() as f:
            manifest = json.load(f)
    except FileNotFoundError as exc:
        raise ManifestError(f"Could not load {MANIFEST_NAME} manifest from {data_dir}") from exc
    except json.JSONDecodeError as exc:
        raise ManifestError(f"Invalid {MANIFEST_NAME} manifest: {exc}") from exc

    races = manifest.get("races") if isinstance(manifest, dict) else None
    if not isinstance(races, list):
        raise ManifestError(f"{MANIFEST_NAME} must contain a 'races' list")
    return [str(name) for name in races if name]


def load_race_file(path: Path) -> Optional[Race]:
    """Parse one race file, returning ``None`` if it is unreadable."""
    try:
        content = path.read_bytes()
    except OSError:
        logger.warning("Could not load race file: %s", path.name)
        return None
    try:
        return parse_race(content, filename=path.name)
    except RaceFileError as exc:
        logger.warning("Error parsing race file %s: %s", path.name, exc)
        return None


def _date_key(race: Race) -> str:
    return race.header.date or ""


def load_races(data_dir: Path) -> List[Race]:
    """Load every race in the manifest, newest first."""
    races_dir = Path(data_dir) / RACES_DIRNAME
    races: List[Race] = []
    for name in load_manifest(data_dir):
        race = load_race_file(races_dir / name)
        if race is not None:
            races.append(race)
    races.sort(key=_date_key, reverse=True)
    return races


def load_season(data_dir: Path) -> Dict[str, Any]:
    """Load races and group them into events.

    Returns a dict with ``races`` and ``events`` lists.
    """
    races = load_races(data_dir)
    events: List[Event] = group_races_into_events(races)
    racer_count = sum(len(r.racers) for r in races)
    logger.info(
        "load_season races=%d events=%d racers=%d dir=%s",
        len(races),
        len(events),
        racer_count,
        data_dir,
    )
    return {"races": races, "events": events}


__all__ = ["ManifestError", "load_manifest", "load_race_file", "load_races", "load_season"]
