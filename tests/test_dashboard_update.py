"""
Tests for the dashboard trigger, display sinks and HTML page.

The dashboard gets its bytes from an in-memory fake source, so these tests
exercise the full fetch -> extract -> display path without a network.
"""

import io

import pytest

from covid_snapshot.config.settings import DatasetConfig, default_datasets
from covid_snapshot.dashboard.display import (
    ConsoleDisplay,
    FanOutDisplay,
    MemoryDisplay,
)
from covid_snapshot.dashboard.page import render_html_page, write_html_page
from covid_snapshot.dashboard.update import ERROR_PREFIX, Dashboard
from covid_snapshot.data.extractor import IndexOutOfRangeError, MalformedInputError


def time_series(last_value: str) -> bytes:
    """JHU-style CSV whose US row ends with last_value."""
    return (
        b"Province/State,Country/Region,Lat,Long,3/8/23,3/9/23\n"
        b",Afghanistan,33.9,67.7,209406,209451\n"
        b",US,40.0,-100.0,103000000," + last_value.encode("ascii") + b"\n"
    )


CONTENTS = {
    "confirmed": time_series("103802702"),
    "deaths": time_series("1123836"),
    "recovered": time_series("0"),
}


class FakeSource:
    """DatasetSource returning canned bytes, recording requested paths."""

    def __init__(self, by_suffix):
        self.by_suffix = by_suffix
        self.requested = []

    def fetch_dataset(self, path):
        self.requested.append(path)
        for suffix, content in self.by_suffix.items():
            if path.endswith(suffix):
                return content
        raise KeyError(path)


@pytest.fixture
def datasets():
    return default_datasets(country_label="US")


def test_update_writes_every_element(datasets):
    display = MemoryDisplay()
    dashboard = Dashboard(datasets, CONTENTS, display)

    assert dashboard.update() is True
    assert display.texts == {
        "confdata": "US on 3/9/23\n103802702\n",
        "deathdata": "US on 3/9/23\n1123836\n",
        "recdata": "US on 3/9/23\n0\n",
    }
    assert dashboard.errors == {}


def test_update_is_repeatable(datasets):
    display = MemoryDisplay()
    dashboard = Dashboard(datasets, CONTENTS, display)

    dashboard.update()
    first = dict(display.texts)
    dashboard.update()

    assert display.texts == first


def test_update_with_fixed_row_index():
    datasets = default_datasets(country_label="US", row_index=2)
    display = MemoryDisplay()

    assert Dashboard(datasets, CONTENTS, display).update() is True
    assert display.get_text("deathdata") == "US on 3/9/23\n1123836\n"


def test_update_fixed_row_index_out_of_range_shows_error():
    """The legacy row 226 does not exist in a small file: error, not a wrong row."""
    datasets = default_datasets(country_label="US", row_index=226)
    display = MemoryDisplay()
    dashboard = Dashboard(datasets, CONTENTS, display)

    assert dashboard.update() is False
    for dataset in datasets:
        assert display.get_text(dataset.element_id).startswith(ERROR_PREFIX)
        assert isinstance(dashboard.errors[dataset.name], IndexOutOfRangeError)


def test_update_reports_malformed_dataset_and_renders_the_rest(datasets):
    contents = dict(CONTENTS)
    contents["deaths"] = b"Province/State,Country/Region,3/9/23\n\",US,1\n"
    display = MemoryDisplay()
    dashboard = Dashboard(datasets, contents, display)

    assert dashboard.update() is False
    assert display.get_text("confdata") == "US on 3/9/23\n103802702\n"
    assert display.get_text("recdata") == "US on 3/9/23\n0\n"
    assert display.get_text("deathdata").startswith("Error: deaths data unavailable")
    assert list(dashboard.errors) == ["deaths"]
    assert isinstance(dashboard.errors["deaths"], MalformedInputError)


def test_update_unknown_country_shows_error():
    datasets = default_datasets(country_label="Narnia")
    display = MemoryDisplay()

    assert Dashboard(datasets, CONTENTS, display).update() is False
    assert "Narnia" in display.get_text("confdata")


def test_update_clears_errors_from_previous_run(datasets):
    contents = dict(CONTENTS)
    contents["recovered"] = b""
    dashboard = Dashboard(datasets, contents, MemoryDisplay())

    assert dashboard.update() is False
    dashboard.contents["recovered"] = CONTENTS["recovered"]
    assert dashboard.update() is True
    assert dashboard.errors == {}


def test_dashboard_requires_content_for_every_dataset(datasets):
    with pytest.raises(ValueError, match="recovered"):
        Dashboard(datasets, {"confirmed": b"", "deaths": b""}, MemoryDisplay())


def test_from_source_fetches_each_dataset_once(datasets):
    source = FakeSource({
        "confirmed_global.csv": CONTENTS["confirmed"],
        "deaths_global.csv": CONTENTS["deaths"],
        "recovered_global.csv": CONTENTS["recovered"],
    })
    display = MemoryDisplay()

    dashboard = Dashboard.from_source(source, datasets, display)

    assert source.requested == [d.path for d in datasets]
    assert dashboard.update() is True
    assert display.get_text("recdata") == "US on 3/9/23\n0\n"


def test_from_source_propagates_fetch_errors(datasets):
    source = FakeSource({})

    with pytest.raises(KeyError):
        Dashboard.from_source(source, datasets, MemoryDisplay())


def test_console_display_prints_text_verbatim():
    stream = io.StringIO()
    display = ConsoleDisplay(stream)

    display.set_text("confdata", "US on 3/9/23\n1\n")
    display.set_text("deathdata", "US on 3/9/23\n2\n")

    assert stream.getvalue() == "US on 3/9/23\n1\nUS on 3/9/23\n2\n"


def test_fan_out_display_forwards_to_all_sinks():
    first, second = MemoryDisplay(), MemoryDisplay()
    display = FanOutDisplay(first, second)

    display.set_text("recdata", "x\n")

    assert first.texts == second.texts == {"recdata": "x\n"}


def test_render_html_page_contains_named_elements(datasets):
    texts = {"confdata": "US on 3/9/23\n103802702\n", "deathdata": "<b>Error</b>\n"}

    page = render_html_page(datasets, texts)

    assert '<p id="confdata">US on 3/9/23\n103802702\n</p>' in page
    assert '<p id="deathdata">&lt;b&gt;Error&lt;/b&gt;\n</p>' in page
    # Missing texts render as empty elements
    assert '<p id="recdata"></p>' in page
    assert "<h2>Recovered</h2>" in page


def test_write_html_page(tmp_path, datasets):
    output = write_html_page(datasets, {"confdata": "US on 3/9/23\n1\n"}, tmp_path / "site")

    assert output == tmp_path / "site" / "index.html"
    assert 'id="confdata"' in output.read_text(encoding="utf-8")


def test_custom_dataset_config():
    dataset = DatasetConfig(
        name="deaths",
        path="deaths.csv",
        element_id="deaths-box",
        country_label="Afghanistan",
    )
    display = MemoryDisplay()

    assert Dashboard([dataset], {"deaths": CONTENTS["deaths"]}, display).update() is True
    assert display.texts == {"deaths-box": "Afghanistan on 3/9/23\n209451\n"}
