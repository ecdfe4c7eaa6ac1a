"""Event grouping and cumulative season standings."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from . import scoring
from .models import Event, EventResult, Race, Racer, SeasonEntry, SeasonStandings

_GENDER_PREFIX = re.compile(r"^(Boys|Girls)\s+", re.IGNORECASE)

UNKNOWN_DATE = "unknown"


def strip_gender_from_name(name: Optional[str]) -> Optional[str]:
    """Remove a leading "Boys " or "Girls " from a race name."""
    if not name:
        return name
    return _GENDER_PREFIX.sub("", name).strip()


def _newest_first(events: List[Event]) -> List[Event]:
    dated = sorted((e for e in events if e.date != UNKNOWN_DATE), key=lambda e: e.date, reverse=True)
    return dated + [e for e in events if e.date == UNKNOWN_DATE]


def group_races_into_events(races: Iterable[Race]) -> List[Event]:
    """Combine races run on the same date into one event, newest first."""
    by_date: Dict[str, Event] = {}
    for race in races:
        header = race.header
        race_date = header.date or UNKNOWN_DATE
        stripped = strip_gender_from_name(header.name) or ""
        event = by_date.get(race_date)
        if event is None:
            event = Event(
                date=race_date,
                name=stripped,
                location=header.location,
                discipline=header.discipline,
            )
            by_date[race_date] = event
        event.races.append(race)

        # Use the more descriptive name once the gender prefix is gone
        if len(stripped) > len(event.name or ""):
            event.name = stripped
        if header.location and not event.location:
            event.location = header.location
    return _newest_first(list(by_date.values()))


def event_racers(event: Event) -> List[Racer]:
    """Return the racers of every race in ``event`` without duplicates."""
    seen = set()
    racers: List[Racer] = []
    for race in event.races:
        for racer in race.racers:
            if racer.key in seen:
                continue
            seen.add(racer.key)
            racers.append(racer)
    return racers


def _all_racers(event: Event) -> List[Racer]:
    return [racer for race in event.races for racer in race.racers]


def apply_drop(entry: SeasonEntry, total_events: int) -> SeasonEntry:
    """Total an entry's results, dropping its worst event when eligible.

    The lowest scoring result is dropped only when the entry has a result for
    every event of a season with more than one event. Among equal lowest
    scores the last one after a stable descending sort is dropped.
    """
    ordered = sorted(entry.event_results, key=lambda r: r.points, reverse=True)
    should_drop = len(ordered) >= total_events and total_events > 1
    counted = ordered[:-1] if should_drop else ordered
    entry.counted_results = counted
    entry.dropped_result = ordered[-1] if should_drop else None
    for result in entry.event_results:
        result.dropped = result is entry.dropped_result
    entry.total_points = sum(r.points for r in counted)
    entry.event_count = len(ordered)
    entry.total_events_in_season = total_events
    return entry


def _rank(entries: Iterable[SeasonEntry]) -> List[SeasonEntry]:
    ranked = sorted(entries, key=lambda e: e.total_points, reverse=True)
    for place, entry in enumerate(ranked, start=1):
        entry.place = place
    return ranked


def _athlete_key(racer: Racer) -> Tuple[str, str, str]:
    return (racer.first_name.strip(), racer.last_name.strip(), (racer.team or "").strip())


def compute_season_standings(
    events: Sequence[Event],
    gender: str,
    class_filter: Optional[str] = None,
    team_class: Optional[str] = None,
) -> SeasonStandings:
    """Aggregate per-event individual and team points into season standings.

    Team standings need a concrete class: ``class_filter`` when given,
    otherwise ``team_class`` (the configured season team class by default).
    """
    effective_class = class_filter or team_class or scoring.SEASON_TEAM_CLASS
    team_totals: Dict[str, SeasonEntry] = {}
    individual_totals: Dict[Tuple[str, str, str], SeasonEntry] = {}

    for event in events:
        racers = _all_racers(event)

        for res in scoring.compute_individual_results(racers, gender, class_filter):
            if res.points == 0:
                continue
            racer = res.racer
            key = _athlete_key(racer)
            entry = individual_totals.get(key)
            if entry is None:
                first, last, team = key
                entry = SeasonEntry(
                    name=f"{first} {last}".strip(),
                    team=team,
                    first_name=first,
                    last_name=last,
                    gender=racer.gender,
                    racer_class=racer.racer_class,
                )
                individual_totals[key] = entry
            entry.event_results.append(
                EventResult(
                    event_name=event.name,
                    event_date=event.date,
                    points=res.points,
                    place=res.place,
                    field_size=res.field_size,
                    total_time=racer.total_time,
                )
            )

        for team in scoring.compute_team_standings(racers, gender, effective_class):
            entry = team_totals.setdefault(team.name, SeasonEntry(name=team.name, team=team.name))
            entry.event_results.append(
                EventResult(
                    event_name=event.name,
                    event_date=event.date,
                    points=team.total_points,
                    place=team.place,
                )
            )

    total_events = len(events)
    for entry in list(team_totals.values()) + list(individual_totals.values()):
        apply_drop(entry, total_events)

    return SeasonStandings(
        teams=_rank(team_totals.values()),
        individuals=_rank(individual_totals.values()),
        event_count=total_events,
        counted_events=total_events - 1 if total_events > 1 else total_events,
    )


def search_athletes(events: Sequence[Event], query: Optional[str], limit: int = 10) -> List[SeasonEntry]:
    """Find athletes by name with their season results and rank.

    Season rank is computed within each gender across every athlete, not
    only the matches, so it agrees with the full standings.
    """
    normalized = (query or "").lower().strip()
    if len(normalized) < 2:
        return []

    athletes: Dict[Tuple[str, str, str, Optional[str]], SeasonEntry] = {}
    for event in events:
        racers = _all_racers(event)
        for gender in ("M", "F"):
            for res in scoring.compute_individual_results(racers, gender):
                racer = res.racer
                key = (racer.first_name, racer.last_name, racer.team, racer.gender)
                entry = athletes.get(key)
                if entry is None:
                    entry = SeasonEntry(
                        name=racer.full_name,
                        team=racer.team,
                        first_name=racer.first_name,
                        last_name=racer.last_name,
                        gender=racer.gender,
                        racer_class=racer.racer_class,
                    )
                    athletes[key] = entry
                if any(r.event_date == event.date for r in entry.event_results):
                    continue
                entry.event_results.append(
                    EventResult(
                        event_name=event.name,
                        event_date=event.date,
                        points=res.points or 0,
                        place=res.place,
                        field_size=res.field_size,
                        total_time=racer.total_time,
                    )
                )

    total_events = len(events)
    by_gender: Dict[Optional[str], List[SeasonEntry]] = {}
    for entry in athletes.values():
        apply_drop(entry, total_events)
        by_gender.setdefault(entry.gender, []).append(entry)
    for group in by_gender.values():
        _rank(group)

    matches = [
        entry for entry in athletes.values()
        if normalized in f"{entry.first_name} {entry.last_name}".lower()
    ]
    for entry in matches:
        entry.event_results.sort(key=lambda r: r.event_date, reverse=True)
    matches.sort(key=lambda e: e.total_points, reverse=True)
    return matches[:limit]


__all__ = [
    "apply_drop",
    "compute_season_standings",
    "event_racers",
    "group_races_into_events",
    "search_athletes",
    "strip_gender_from_name",
]
