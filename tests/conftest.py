import json
from xml.sax.saxutils import escape

import pytest

from skistandings import scoring
from skistandings.models import Event, Race, RaceHeader, Racer


@pytest.fixture(autouse=True)
def _default_settings():
    # create_app() installs settings module-wide; start every test from the defaults
    scoring.apply_settings(dict(scoring.DEFAULT_SETTINGS))
    yield
    scoring.apply_settings(dict(scoring.DEFAULT_SETTINGS))


def _make_racer(first, last="Skier", team="Brainerd", gender="M", racer_class="V",
                total=None, run1=None, run2=None, dnf=False, dsq=False, bib=None):
    if run1 is None and total is not None:
        run1 = total
    status = "DNF" if dnf else "DSQ" if dsq else "OK"
    return Racer(
        bib=bib or f"{first}-{last}",
        first_name=first,
        last_name=last,
        team=team,
        gender=gender,
        racer_class=racer_class,
        run1=run1,
        run2=run2,
        total_time=total,
        dnf=dnf,
        dsq=dsq,
        status=status,
    )


@pytest.fixture()
def make_racer():
    return _make_racer


@pytest.fixture()
def make_event():
    def _make_event(date, racers, name=None):
        header = RaceHeader(name=name or f"Race {date}", date=date)
        return Event(date=date, name=header.name, races=[Race(header=header, racers=list(racers))])
    return _make_event


def _build_race_xml(name, racers, date=None, date_i=None, race_type=0, location="Mount Kato"):
    """Return ClubRace XML; racers are dicts with Comp fields and a ``times`` list.

    Each time is ``(course, result, status)``.
    """
    header = [f"<Header1>{escape(name)}</Header1>"]
    if date_i is not None:
        header.append(f"<DateI>{date_i}</DateI>")
    if date is not None:
        header.append(f"<Date>{date}</Date>")
    header.append(f"<RTResort>{escape(location)}</RTResort>")
    header.append(f"<RaceType>{race_type}</RaceType>")
    header.append("<USCSARaceType>SL</USCSARaceType>")

    comps = []
    for r in racers:
        fields = "".join(
            f"<{tag}>{escape(str(r[key]))}</{tag}>"
            for key, tag in (
                ("bib", "Bib"),
                ("first", "FirstName"),
                ("last", "LastName"),
                ("class", "Class"),
                ("gender", "Gender"),
                ("team", "Team"),
            )
            if r.get(key) is not None
        )
        times = "".join(
            f"<Time><Course>{course}</Course><Result>{result}</Result><Status>{status}</Status></Time>"
            for course, result, status in r.get("times", [])
        )
        comps.append(f"<Comp>{fields}{times}</Comp>")

    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f"<ClubRace><Header>{''.join(header)}</Header>"
        f"<Competitors>{''.join(comps)}</Competitors></ClubRace>"
    )


@pytest.fixture()
def race_xml():
    return _build_race_xml


@pytest.fixture()
def data_dir(tmp_path):
    """A data directory with a two-event season (boys and girls files on day one)."""
    races_dir = tmp_path / "races"
    races_dir.mkdir()
    files = {
        "boys-jan7.xml": _build_race_xml(
            "Boys Mount Kato Slalom",
            [
                {"bib": 1, "first": "Evan", "last": "Lund", "class": "VM", "team": "Brainerd",
                 "times": [(0, "31.42", 1), (0, "32.10", 1)]},
                {"bib": 2, "first": "Owen", "last": "Berg", "class": "VM", "team": "Lakes Area Storm",
                 "times": [(0, "30.95", 1), (0, "33.01", 1)]},
                {"bib": 4, "first": "Noah", "last": "Stein", "class": "VM", "team": "Rochester",
                 "times": [(0, "29.88", 1), (0, "31.75", 1)]},
            ],
            date_i=45664,
        ),
        "girls-jan7.xml": _build_race_xml(
            "Girls Mount Kato Slalom",
            [
                {"bib": 21, "first": "Ava", "last": "Nelson", "class": "VF", "team": "Detroit Lakes",
                 "times": [(0, "33.20", 1), (0, "34.05", 1)]},
                {"bib": 22, "first": "Maya", "last": "Olson", "class": "VF", "team": "Brainerd",
                 "times": [(0, "32.88", 1), (0, "DSQ", 3)]},
            ],
            date_i=45664,
        ),
        "gs-jan21.xml": _build_race_xml(
            "Buck Hill Giant Slalom",
            [
                {"bib": 1, "first": "Evan", "last": "Lund", "class": "V", "gender": "M", "team": "Brainerd",
                 "times": [(0, "45.31", 1), (1, "46.02", 1)]},
                {"bib": 2, "first": "Owen", "last": "Berg", "class": "V", "gender": "M", "team": "Lakes Area Storm",
                 "times": [(1, "45.90", 1), (0, "44.87", 1)]},
                {"bib": 21, "first": "Ava", "last": "Nelson", "class": "V", "gender": "F", "team": "Detroit Lakes",
                 "times": [(0, "48.12", 1), (1, "1:01.40", 1)]},
            ],
            date="2025-01-21",
            race_type=1,
            location="Buck Hill",
        ),
    }
    for name, xml in files.items():
        (races_dir / name).write_text(xml)
    (tmp_path / "races.json").write_text(json.dumps({"races": list(files)}))
    (tmp_path / "settings.json").write_text(json.dumps(scoring.DEFAULT_SETTINGS))
    return tmp_path


@pytest.fixture()
def client(data_dir):
    from skistandings import create_app

    app = create_app(data_dir=data_dir)
    app.config.update({"TESTING": True})
    with app.test_client() as c:
        yield c
