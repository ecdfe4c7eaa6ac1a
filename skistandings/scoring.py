"""Scoring utilities implementing high school alpine points rules.

Individual points are scored against every starter of the same gender from
the scoring teams (class does not matter). Team points are scored against
the starters of the same gender and class.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .models import Division, Racer, RacerResult, TeamRacerResult, TeamStanding
from .ranking import assign_ranks, points_for_place

# Data directory lives at the project root under ``data``.
DATA_DIR = Path(__file__).resolve().parent.parent / "data"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "scoring_teams": [
        "St Cloud Breakaways",
        "Lakes Area",
        "Brainerd",
        "Annandale",
        "Detroit Lakes",
    ],
    "team_top_n": 4,
    "season_team_class": "Varsity",
    "page_sizes": [25, 50, 100, 200],
}

VARSITY_CODES = {"V", "VM", "VF", "VARSITY"}
JV_CODES = {"JV", "JVM", "JVF"}


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    """Return scoring settings from ``settings.json`` merged over the defaults."""
    path = path or DATA_DIR / "settings.json"
    settings = dict(DEFAULT_SETTINGS)
    if path.exists():
        with path.open() as f:
            settings.update(json.load(f))
    return settings


def apply_settings(settings: Dict[str, Any]) -> None:
    """Install ``settings`` as the module-level scoring configuration."""
    global _SETTINGS, SCORING_TEAMS, TEAM_TOP_N, SEASON_TEAM_CLASS
    _SETTINGS = settings
    SCORING_TEAMS = list(settings.get("scoring_teams") or [])
    TEAM_TOP_N = int(settings.get("team_top_n", 4))
    SEASON_TEAM_CLASS = str(settings.get("season_team_class") or "Varsity")


_SETTINGS: Dict[str, Any] = {}
SCORING_TEAMS: List[str] = []
TEAM_TOP_N = 4
SEASON_TEAM_CLASS = "Varsity"

# Load configuration from settings.json.
apply_settings(load_settings())


def get_settings() -> Dict[str, Any]:
    return dict(_SETTINGS)


def is_scoring_team(team: Optional[str], scoring_teams: Optional[Sequence[str]] = None) -> bool:
    """Return True if ``team`` counts for individual scoring.

    Matching is a case-insensitive substring test in either direction so
    variants such as "St Cloud Breakaways Ski Team" still count. Short
    allow-list names can therefore match unrelated teams.
    """
    if not team or not team.strip():
        return False
    normalized = team.lower().strip()
    allowed = SCORING_TEAMS if scoring_teams is None else scoring_teams
    for name in allowed:
        candidate = name.lower().strip()
        if candidate and (candidate in normalized or normalized in candidate):
            return True
    return False


def matches_class(racer_class: Optional[str], class_filter: str) -> bool:
    """Check a raw class code (V, VM, VF, Varsity, JV, JVM, JVF) against a filter."""
    if not racer_class:
        return False
    normalized = racer_class.upper().strip()
    wanted = class_filter.upper().strip()
    if wanted == "VARSITY":
        return normalized in VARSITY_CODES
    if wanted == "JV":
        return normalized in JV_CODES
    return normalized == wanted


def get_class_category(racer_class: Optional[str]) -> Optional[str]:
    """Return ``"Varsity"``, ``"JV"`` or ``None`` for a raw class code."""
    if not racer_class:
        return None
    normalized = racer_class.upper().strip()
    if normalized in VARSITY_CODES:
        return "Varsity"
    if normalized in JV_CODES:
        return "JV"
    return None


def calculate_run_rankings(racers: Iterable[Racer], gender: str) -> Tuple[Dict[int, int], Dict[int, int]]:
    """Rank run 1 and run 2 times among all racers of ``gender``.

    Returns two mappings of ``id(racer)`` to rank; their lengths are the run
    counts.
    """
    gender_racers = [r for r in racers if r.gender == gender]
    run1 = {id(r): rank for r, rank in assign_ranks(gender_racers, lambda r: r.run1)}
    run2 = {id(r): rank for r, rank in assign_ranks(gender_racers, lambda r: r.run2)}
    return run1, run2


def compute_individual_results(
    racers: Iterable[Racer],
    gender: str,
    class_filter: Optional[str] = None,
    scoring_teams: Optional[Sequence[str]] = None,
) -> List[RacerResult]:
    """Calculate individual places and points for one gender.

    Only racers from scoring teams make up the field size and receive places
    and points; everyone else of the gender is returned for display after the
    scoring racers. ``class_filter`` narrows the returned list only.
    """
    racers = list(racers)
    gender_racers = [r for r in racers if r.gender == gender]
    pool = [r for r in gender_racers if is_scoring_team(r.team, scoring_teams)]
    field_size = len(pool)

    run1_ranks, run2_ranks = calculate_run_rankings(gender_racers, gender)

    def _result(racer: Racer) -> RacerResult:
        return RacerResult(
            racer=racer,
            field_size=field_size,
            run1_rank=run1_ranks.get(id(racer)),
            run2_rank=run2_ranks.get(id(racer)),
            run1_count=len(run1_ranks),
            run2_count=len(run2_ranks),
        )

    finishers: List[RacerResult] = []
    for racer, place in assign_ranks([r for r in pool if r.is_finisher], lambda r: r.total_time):
        result = _result(racer)
        result.place = place
        result.points = points_for_place(place, field_size)
        finishers.append(result)

    non_finishers = [_result(r) for r in pool if not r.is_finisher]
    non_scoring = [_result(r) for r in gender_racers if not is_scoring_team(r.team, scoring_teams)]

    results = finishers + non_finishers + non_scoring
    if class_filter:
        results = [res for res in results if matches_class(res.racer.racer_class, class_filter)]
    return results


def compute_team_standings(
    racers: Iterable[Racer],
    gender: str,
    class_filter: str,
    top_n: Optional[int] = None,
) -> List[TeamStanding]:
    """Calculate team standings for one gender and class.

    Team points use the gender and class pool as the field size. Each team
    scores the sum of its best ``top_n`` racers with positive points. Teams
    on equal points keep the order in which they were first encountered.
    """
    top_n = TEAM_TOP_N if top_n is None else top_n
    pool = [r for r in racers if r.gender == gender and matches_class(r.racer_class, class_filter)]
    class_field_size = len(pool)

    members: List[TeamRacerResult] = []
    for racer, place in assign_ranks([r for r in pool if r.is_finisher], lambda r: r.total_time):
        members.append(
            TeamRacerResult(
                racer=racer,
                team_place=place,
                team_points=points_for_place(place, class_field_size),
                team_field_size=class_field_size,
            )
        )
    members.extend(
        TeamRacerResult(racer=r, team_field_size=class_field_size) for r in pool if not r.is_finisher
    )

    teams: Dict[str, TeamStanding] = {}
    for member in members:
        name = member.racer.team
        if not name:
            continue
        team = teams.setdefault(name, TeamStanding(name=name))
        team.racers.append(member)

    for team in teams.values():
        team.racers.sort(key=lambda m: m.team_points, reverse=True)
        team.scoring_racers = [m for m in team.racers if m.team_points > 0][:top_n]
        for member in team.scoring_racers:
            member.is_scoring = True
        team.total_points = sum(m.team_points for m in team.scoring_racers)

    standings = sorted(teams.values(), key=lambda t: t.total_points, reverse=True)
    for place, team in enumerate(standings, start=1):
        team.place = place
    return standings


def get_divisions() -> List[Division]:
    """Return the four gender and class combinations that are scored."""
    return [
        Division("M", "Varsity", "Boys Varsity"),
        Division("F", "Varsity", "Girls Varsity"),
        Division("M", "JV", "Boys JV"),
        Division("F", "JV", "Girls JV"),
    ]


__all__ = [
    "calculate_run_rankings",
    "compute_individual_results",
    "compute_team_standings",
    "get_class_category",
    "get_divisions",
    "get_settings",
    "is_scoring_team",
    "load_settings",
    "matches_class",
]
