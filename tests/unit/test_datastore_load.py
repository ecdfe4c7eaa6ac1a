import json

import pytest

from skistandings.datastore import ManifestError, load_manifest, load_races, load_season


def test_manifest_lists_race_files(data_dir):
    assert load_manifest(data_dir) == ["boys-jan7.xml", "girls-jan7.xml", "gs-jan21.xml"]


def test_missing_manifest(tmp_path):
    with pytest.raises(ManifestError, match="Could not load races.json"):
        load_manifest(tmp_path)


@pytest.mark.parametrize("content", ["{not json", json.dumps(["a.xml"]), json.dumps({"races": "a.xml"})])
def test_malformed_manifest(tmp_path, content):
    (tmp_path / "races.json").write_text(content)
    with pytest.raises(ManifestError):
        load_manifest(tmp_path)


def test_races_sorted_newest_first(data_dir):
    races = load_races(data_dir)
    assert [r.header.date for r in races] == ["2025-01-21", "2025-01-07", "2025-01-07"]
    assert races[0].filename == "gs-jan21.xml"


def test_unreadable_files_are_skipped(data_dir, caplog):
    (data_dir / "races" / "broken.xml").write_text("<ClubRace><Header>")
    manifest = {"races": ["missing.xml", "broken.xml", "gs-jan21.xml"]}
    (data_dir / "races.json").write_text(json.dumps(manifest))

    caplog.set_level("WARNING")
    races = load_races(data_dir)

    assert [r.filename for r in races] == ["gs-jan21.xml"]
    messages = [r.getMessage() for r in caplog.records]
    assert "Could not load race file: missing.xml" in messages
    assert any(m.startswith("Error parsing race file broken.xml:") for m in messages)


def test_load_season_groups_events(data_dir):
    season = load_season(data_dir)
    assert len(season["races"]) == 3
    assert [e.name for e in season["events"]] == ["Buck Hill Giant Slalom", "Mount Kato Slalom"]


def test_out_of_range_serial_date_does_not_abort_load(data_dir, race_xml):
    (data_dir / "races" / "bad-date.xml").write_text(race_xml("Boys SL", [], date_i="1e400"))
    (data_dir / "races.json").write_text(json.dumps({"races": ["bad-date.xml", "gs-jan21.xml"]}))

    races = load_races(data_dir)

    assert [r.filename for r in races] == ["gs-jan21.xml", "bad-date.xml"]
    assert races[1].header.date == ""
