"""Value types shared by the parser, the scoring engine and the views."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class TimeEntry:
    """One raw ``Time`` element as read from a race file."""

    course: str
    result: str
    status: str
    run_index: int


@dataclass(frozen=True)
class Racer:
    """A competitor as parsed from a race file.

    Times are integer milliseconds. Racers are never modified by scoring;
    each scoring call wraps them in fresh result objects instead.
    """

    bib: str
    first_name: str
    last_name: str
    team: str
    gender: Optional[str]
    racer_class: str
    run1: Optional[int] = None
    run2: Optional[int] = None
    total_time: Optional[int] = None
    dnf: bool = False
    dsq: bool = False
    status: str = "OK"

    @property
    def key(self) -> Tuple[str, str, str, str]:
        return (self.bib, self.first_name, self.last_name, self.team)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_finisher(self) -> bool:
        return self.total_time is not None and not self.dnf and not self.dsq


@dataclass
class RacerResult:
    """Individual scoring of one racer within a gender."""

    racer: Racer
    place: Optional[int] = None
    points: int = 0
    field_size: int = 0
    run1_rank: Optional[int] = None
    run2_rank: Optional[int] = None
    run1_count: int = 0
    run2_count: int = 0


@dataclass
class TeamRacerResult:
    """Team scoring of one racer within a gender and class pool."""

    racer: Racer
    team_place: Optional[int] = None
    team_points: int = 0
    team_field_size: int = 0
    is_scoring: bool = False


@dataclass
class TeamStanding:
    name: str
    racers: List[TeamRacerResult] = field(default_factory=list)
    scoring_racers: List[TeamRacerResult] = field(default_factory=list)
    total_points: int = 0
    place: int = 0


@dataclass(frozen=True)
class RaceHeader:
    name: str
    date: str
    location: str = ""
    discipline: str = ""
    race_type: int = 0
    courses: Tuple[str, str] = ("Run 1", "Run 2")


@dataclass
class Race:
    header: RaceHeader
    racers: List[Racer] = field(default_factory=list)
    filename: Optional[str] = None


@dataclass
class Event:
    """All races run on one date, e.g. the boys' and girls' files of a meet."""

    date: str
    name: str
    location: str = ""
    discipline: str = ""
    races: List[Race] = field(default_factory=list)

    @property
    def racer_count(self) -> int:
        return sum(len(race.racers) for race in self.races)

    @property
    def disciplines(self) -> List[str]:
        seen: List[str] = []
        for race in self.races:
            d = race.header.discipline
            if d and d not in seen:
                seen.append(d)
        return seen


@dataclass
class EventResult:
    event_name: str
    event_date: str
    points: int
    place: Optional[int] = None
    field_size: Optional[int] = None
    total_time: Optional[int] = None
    dropped: bool = False


@dataclass
class SeasonEntry:
    """Accumulated season results for one team or one athlete."""

    name: str
    team: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    gender: Optional[str] = None
    racer_class: Optional[str] = None
    event_results: List[EventResult] = field(default_factory=list)
    counted_results: List[EventResult] = field(default_factory=list)
    dropped_result: Optional[EventResult] = None
    total_points: int = 0
    event_count: int = 0
    total_events_in_season: int = 0
    place: int = 0


@dataclass
class SeasonStandings:
    teams: List[SeasonEntry]
    individuals: List[SeasonEntry]
    event_count: int
    counted_events: int


@dataclass(frozen=True)
class Division:
    gender: str
    racer_class: str
    label: str


__all__ = [
    "Division",
    "Event",
    "EventResult",
    "Race",
    "RaceHeader",
    "Racer",
    "RacerResult",
    "SeasonEntry",
    "SeasonStandings",
    "TeamRacerResult",
    "TeamStanding",
    "TimeEntry",
]
