import json

from watch_insights.dashboard import DashboardSession, build_dashboard, sample_paths
from watch_insights.data_prep import counter_ids


def test_sample_files_ship_with_package():
    viewing, search = sample_paths()
    assert viewing.exists() and search.exists()


def test_empty_dashboard():
    dash = build_dashboard([], [])
    assert dash.summary.peak_day == "N/A"
    assert dash.trend == [] and dash.heatmap == [] and dash.day_distribution == []
    assert dash.search.total_queries == 0
    assert dash.insights == []
    json.dumps(dash.to_dict())


def test_initial_status():
    session = DashboardSession()
    assert (session.status.viewing, session.status.search, session.status.error) == ("Waiting", "Optional", None)


def test_load_sample():
    session = DashboardSession(id_factory=counter_ids())
    assert session.load_sample()
    assert session.status.viewing == "Sample loaded"
    assert len(session.viewing) == 19
    assert len(session.search) == 15

    dash = session.dashboard()
    assert dash.summary.total_sessions == 19
    assert len(dash.day_distribution) == 31
    assert len(dash.hour_distribution) == 24
    assert len(dash.top_titles) == 6
    assert dash.top_titles[0].title == "Glass Onion: A Knives Out Mystery"
    assert dash.top_titles[0].minutes == 126
    assert dash.search.word_cloud[0].value == "stranger"
    payload = json.loads(json.dumps(dash.to_dict()))
    assert payload["summary"]["total_sessions"] == 19
    assert payload["insights"][0]["label"] in ("Weekend Binges", "Weekday Viewer")


def test_upload_replaces_entries(tmp_path):
    path = tmp_path / "viewing.csv"
    path.write_text(
        "Start Time,Duration,Title\n2024-01-06 20:00,0:30,A\n2024-01-07 20:00,0:45,B\n",
        encoding="utf-8",
    )
    session = DashboardSession()
    session.load_sample()
    assert session.upload_viewing(str(path))
    assert session.status.viewing == "2 rows processed"
    assert [e.title for e in session.viewing] == ["A", "B"]
    assert len(session.search) == 15


def test_failed_upload_keeps_previous_entries(tmp_path):
    broken = tmp_path / "broken.csv"
    broken.write_text("a,b\n1,2\n3,4,5,6\n", encoding="utf-8")
    session = DashboardSession()
    session.load_sample()
    before = list(session.viewing)

    assert not session.upload_viewing(str(broken))
    assert session.status.viewing == "Failed"
    assert session.status.error
    assert session.viewing == before

    assert not session.upload_search(str(tmp_path / "missing.csv"))
    assert session.status.search == "Failed"
    assert len(session.search) == 15


def test_search_upload(tmp_path):
    path = tmp_path / "search.csv"
    path.write_text("Profile Name,Query Typed,Utc Timestamp\nAlex,dark,2024-01-05 10:00:00\n", encoding="utf-8")
    session = DashboardSession()
    assert session.upload_search(str(path))
    assert session.status.search == "1 searches"
    assert session.search[0].query == "dark"
    assert session.dashboard().search.top_searches[0].value == "dark"
