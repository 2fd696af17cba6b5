import matplotlib

matplotlib.use("Agg")

import pytest

from watch_insights.data_prep import counter_ids, parse_search_rows, parse_viewing_rows


def view_row(start, duration, title="Some Title", device="TV", attributes=""):
    return {
        "Profile Name": "Alex",
        "Start Time": start,
        "Duration": duration,
        "Title": title,
        "Device Type": device,
        "Attributes": attributes,
        "Country": "US",
    }


def search_row(timestamp, query):
    return {"Profile Name": "Alex", "Search": query, "Timestamp": timestamp}


@pytest.fixture
def make_viewing():
    def _make(*rows):
        return parse_viewing_rows(rows, id_factory=counter_ids("v"))
    return _make


@pytest.fixture
def make_search():
    def _make(*rows):
        return parse_search_rows(rows, id_factory=counter_ids("s"))
    return _make
