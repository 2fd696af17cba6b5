import io

import pytest

from watch_insights.data_prep import (
    ExportReadError, counter_ids, load_viewing, parse_duration_minutes, parse_search_rows,
    parse_timestamp, parse_viewing_rows, pick, pick_present, read_export,
)
from watch_insights.metrics import build_trend


@pytest.mark.parametrize("raw, minutes", [
    ("1:30:00", 90),
    ("0:45", 45),
    ("2:05:30", 126),
    ("0:10:29", 10),
    ("45", 45),
    ("12.6", 13),
    ("abc", 0),
    ("", 0),
    (None, 0),
    ("1:2:3:4", 0),
    ("x:30", 30),
])
def test_parse_duration_minutes(raw, minutes):
    assert parse_duration_minutes(raw) == minutes


def test_round_trip_single_row():
    rows = [{"StartTime": "2024-01-05T20:00:00Z", "Duration": "1:30:00", "Title": "Test Show S1"}]
    entries = parse_viewing_rows(rows, id_factory=counter_ids())
    assert len(entries) == 1
    e = entries[0]
    assert e.duration_minutes == 90
    assert e.genre == "General Entertainment"
    assert e.day_name == "Friday"
    assert e.hour == 20
    assert e.id == "row-1"
    trend = build_trend(entries)
    assert [(p.label, p.minutes) for p in trend] == [("Jan 2024", 90)]


def test_viewing_defaults_and_normalized_title():
    rows = [{"Start Time": "2024-03-02 10:00:00", "Duration": "0:20"}]
    (e,) = parse_viewing_rows(rows)
    assert e.title == "Untitled"
    assert e.normalized_title == "untitled"
    assert e.device == "Unknown Device"
    assert e.country == "Unknown"
    assert e.supplemental_video_type == "Title"
    assert e.profile_name == "Profile"
    assert e.attributes == ""


def test_attributes_fall_back_to_supplemental_type():
    rows = [{"Start Time": "2024-03-02 10:00:00", "Duration": "5", "Title": "Trailer",
             "Supplemental Video Type": "TRAILER"}]
    (e,) = parse_viewing_rows(rows)
    assert e.attributes == "TRAILER"
    assert e.supplemental_video_type == "TRAILER"


def test_invalid_viewing_rows_are_dropped():
    rows = [
        {"Duration": "1:00:00", "Title": "No start"},
        {"Start Time": "yesterday-ish", "Duration": "1:00:00", "Title": "Bad start"},
        {"Start Time": "2024-01-05 20:00", "Duration": "0:00:20", "Title": "Too short"},
        {"Start Time": "2024-01-05 20:00", "Duration": "n/a", "Title": "Bad duration"},
        {"Start Time": "2024-01-05 20:00", "Duration": "-5", "Title": "Negative"},
        {"Start Time": "2024-01-05 20:00", "Duration": "0:30", "Title": "Good"},
    ]
    entries = parse_viewing_rows(rows)
    assert [e.title for e in entries] == ["Good"]


def test_nan_and_none_cells_count_as_missing():
    rows = [{"Start Time": "2024-01-05 20:00", "Duration": "30", "Title": float("nan"), "Device Type": None}]
    (e,) = parse_viewing_rows(rows)
    assert e.title == "Untitled"
    assert e.device == "Unknown Device"


def test_pick_matches_header_variants_in_priority_order():
    row = {"start_time": "", "DATE": "2024-01-01", "Device": "Phone"}
    assert pick(row, ("Start Time", "Date")) == "2024-01-01"
    assert pick(row, ("Device Type", "Device")) == "Phone"
    assert pick(row, ("Country",)) is None


def test_timezone_applies_to_day_and_hour():
    naive = parse_viewing_rows([{"Start Time": "2024-01-06 01:30:00", "Duration": "30"}],
                               tz="America/New_York")
    assert (naive[0].day_name, naive[0].hour) == ("Saturday", 1)

    aware = parse_viewing_rows([{"Start Time": "2024-01-06T01:30:00Z", "Duration": "30"}],
                               tz="America/New_York")
    assert (aware[0].day_name, aware[0].hour) == ("Friday", 20)


def test_parse_timestamp_strips_invisible_characters():
    ts = parse_timestamp("\ufeff2024-02-10 16:20:00\u200b")
    assert ts is not None
    assert (ts.year, ts.month, ts.day, ts.hour) == (2024, 2, 10, 16)
    assert parse_timestamp("   ") is None


def test_counter_ids_are_monotonic():
    new_id = counter_ids("v")
    assert [new_id(), new_id(), new_id()] == ["v-1", "v-2", "v-3"]


def test_search_rows_priority_and_filtering():
    rows = [
        {"Timestamp": "2024-01-05 10:00", "Date": "2023-01-01", "Search": " Dark ", "Profile Name": "Alex"},
        {"Date": "2024-02-01", "Query": "squid game"},
        {"Timestamp": "2024-02-02 09:00", "Search": "", "Profile Name": "Sam"},
        {"Timestamp": "2024-02-03 09:00", "Search": "   "},
        {"Search": "no time"},
        {"Timestamp": "garbage", "Search": "bad time"},
    ]
    entries = parse_search_rows(rows, id_factory=counter_ids("s"))
    assert [e.query for e in entries] == ["Dark", "squid game", "Sam"]
    assert entries[0].timestamp.year == 2024
    assert entries[0].profile_name == "Alex"
    assert entries[1].profile_name == "Profile"
    assert [e.id for e in entries] == ["s-1", "s-2", "s-3"]


def test_whitespace_query_claims_the_field():
    rows = [
        {"Timestamp": "2024-02-03 09:00", "Search": "   ", "Profile Name": "Sam"},
        {"Timestamp": "2024-02-03 10:00", "Search": float("nan"), "Query": " ozark ", "Profile Name": "Sam"},
    ]
    entries = parse_search_rows(rows)
    assert [e.query for e in entries] == ["ozark"]
    assert pick_present({"Search": "  "}, ("Search", "Query")) == ""
    assert pick_present({"Search": "", "Query": "x"}, ("Search", "Query")) == "x"
    assert pick_present({}, ("Search",)) is None


def test_empty_inputs():
    assert parse_viewing_rows([]) == []
    assert parse_search_rows([]) == []


def test_read_export_keeps_strings():
    rows = read_export(io.StringIO("Title,Duration,Start Time\n007,0:45,2024-01-01 10:00\nX,,\n"))
    assert rows[0] == {"Title": "007", "Duration": "0:45", "Start Time": "2024-01-01 10:00"}
    assert rows[1]["Duration"] == ""


def test_read_export_structural_failure():
    with pytest.raises(ExportReadError):
        read_export(io.StringIO("a,b\n1,2\n3,4,5,6\n"))
    with pytest.raises(ExportReadError):
        read_export(io.StringIO(""))


def test_load_viewing_from_file(tmp_path):
    path = tmp_path / "ViewingActivity.csv"
    path.write_text(
        "Profile Name,Start Time,Duration,Title,Device Type\n"
        "Alex,2024-01-06 20:00:00,00:45:00,Dark: Season 1: Secrets,TV\n"
        "Alex,bad,00:45:00,Dark: Season 1: Lies,TV\n",
        encoding="utf-8",
    )
    entries = load_viewing(str(path))
    assert len(entries) == 1
    assert entries[0].genre == "Series"
    assert entries[0].device == "TV"


def test_load_viewing_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_viewing(str(tmp_path / "nope.csv"))
