"""
Tests for the update_dashboard and export_country_series actions.

**Purpose**: Verify the wiring (settings -> client -> dashboard -> output) and
the exit codes, with the GitHub client replaced by an in-memory fake.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pandas as pd
import pytest

# Add project root to path so we can import actions modules
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from actions.export_country_series import default_output_path
from actions.export_country_series import main as export_main
from actions.update_dashboard import main, parse_args, run_update
from covid_snapshot.config.settings import Settings, default_datasets
from covid_snapshot.venues.github_client import GitHubNotFoundError, GitHubRateLimitError


CSV_BYTES = (
    b"Province/State,Country/Region,Lat,Long,3/8/23,3/9/23\n"
    b",Italy,41.9,12.6,188094,188322\n"
    b",US,40.0,-100.0,1122516,1123836\n"
)


class FakeSource:
    """Returns the same CSV for every path."""

    def __init__(self, content=CSV_BYTES, error=None):
        self.content = content
        self.error = error

    def fetch_dataset(self, path):
        if self.error is not None:
            raise self.error
        return self.content

    fetch_file_bytes = fetch_dataset


def patched_client(source):
    """Mock GitHubContentsClient class whose context manager yields `source`."""
    client_cls = MagicMock()
    client_cls.return_value.__enter__.return_value = source
    client_cls.return_value.__exit__.return_value = False
    return client_cls


def test_parse_args_defaults():
    args = parse_args([])

    assert args.country is None
    assert args.province is None
    assert args.row_index is None
    assert args.html_dir is None


def test_parse_args_options():
    args = parse_args(["--country", "Canada", "--province", "Ontario", "--row-index", "226", "--html-dir", "site"])

    assert args.country == "Canada"
    assert args.province == "Ontario"
    assert args.row_index == 226
    assert args.html_dir == "site"


def test_run_update_prints_summaries_and_writes_page(tmp_path, capsys):
    datasets = default_datasets(country_label="Italy")

    ok = run_update(FakeSource(), datasets, html_dir=tmp_path)

    assert ok is True
    out = capsys.readouterr().out
    assert out.count("Italy on 3/9/23\n188322\n") == 3
    page = (tmp_path / "index.html").read_text(encoding="utf-8")
    assert '<p id="recdata">Italy on 3/9/23\n188322\n</p>' in page


def test_run_update_reports_extraction_errors(capsys):
    datasets = default_datasets(country_label="Narnia")

    ok = run_update(FakeSource(), datasets)

    assert ok is False
    captured = capsys.readouterr()
    assert "Error: confirmed data unavailable" in captured.out
    assert "✗ confirmed" in captured.err


@patch("actions.update_dashboard.get_settings")
def test_main_success_exit_code(mock_settings, capsys):
    mock_settings.return_value = Settings()

    with patch("actions.update_dashboard.GitHubContentsClient", patched_client(FakeSource())):
        with pytest.raises(SystemExit) as exc:
            main([])

    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert "US on 3/9/23\n1123836\n" in out
    assert "3/3 datasets updated" in out


@patch("actions.update_dashboard.get_settings")
def test_main_row_index_flag_overrides_lookup(mock_settings, capsys):
    mock_settings.return_value = Settings()

    with patch("actions.update_dashboard.GitHubContentsClient", patched_client(FakeSource())):
        with pytest.raises(SystemExit) as exc:
            main(["--row-index", "1", "--country", "Somewhere"])

    assert exc.value.code == 0
    assert "Somewhere on 3/9/23\n188322\n" in capsys.readouterr().out


@patch("actions.update_dashboard.get_settings")
def test_main_extraction_failure_exit_code(mock_settings):
    mock_settings.return_value = Settings()

    with patch("actions.update_dashboard.GitHubContentsClient", patched_client(FakeSource(content=b""))):
        with pytest.raises(SystemExit) as exc:
            main([])

    assert exc.value.code == 1


@pytest.mark.parametrize("error", [GitHubNotFoundError("gone"), GitHubRateLimitError("slow down")])
@patch("actions.update_dashboard.get_settings")
def test_main_fetch_failure_exit_code(mock_settings, error, capsys):
    mock_settings.return_value = Settings()

    with patch("actions.update_dashboard.GitHubContentsClient", patched_client(FakeSource(error=error))):
        with pytest.raises(SystemExit) as exc:
            main([])

    assert exc.value.code == 2
    assert "Error:" in capsys.readouterr().err


@patch("actions.update_dashboard.get_settings")
def test_main_invalid_settings_exit_code(mock_settings):
    mock_settings.side_effect = ValueError("COVID_ROW_INDEX must be an integer, got: us")

    with pytest.raises(SystemExit) as exc:
        main([])

    assert exc.value.code == 1


def test_default_output_path():
    assert default_output_path("deaths", "Italy") == Path("data/processed/deaths_Italy.csv")
    assert default_output_path("confirmed", "Korea, South") == Path("data/processed/confirmed_Korea,_South.csv")
    assert default_output_path("confirmed", "Canada", "Ontario") == Path("data/processed/confirmed_Canada_Ontario.csv")


@patch("actions.export_country_series.get_settings")
def test_export_main_writes_series(mock_settings, tmp_path, capsys):
    mock_settings.return_value = Settings()
    output = tmp_path / "italy.csv"

    with patch("actions.export_country_series.GitHubContentsClient", patched_client(FakeSource())):
        with pytest.raises(SystemExit) as exc:
            export_main(["deaths", "--country", "Italy", "--output", str(output)])

    assert exc.value.code == 0
    written = pd.read_csv(output)
    assert list(written["timestamp"]) == ["2023-03-09", "2023-03-08"]
    assert list(written["value"]) == [188322.0, 188094.0]


@patch("actions.export_country_series.get_settings")
def test_export_main_lists_countries(mock_settings, capsys):
    mock_settings.return_value = Settings()

    with patch("actions.export_country_series.GitHubContentsClient", patched_client(FakeSource())):
        with pytest.raises(SystemExit) as exc:
            export_main(["confirmed", "--list-countries"])

    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert "Italy\n" in out
    assert "US\n" in out


@patch("actions.export_country_series.get_settings")
def test_export_main_unknown_country(mock_settings):
    mock_settings.return_value = Settings()

    with patch("actions.export_country_series.GitHubContentsClient", patched_client(FakeSource())):
        with pytest.raises(SystemExit) as exc:
            export_main(["deaths", "--country", "Narnia"])

    assert exc.value.code == 1


@patch("actions.export_country_series.get_settings")
def test_export_list_countries_without_country_column(mock_settings, capsys):
    mock_settings.return_value = Settings()
    no_country = FakeSource(content=b"Province/State,Nation,3/9/23\n,Italy,1\n")

    with patch("actions.export_country_series.GitHubContentsClient", patched_client(no_country)):
        with pytest.raises(SystemExit) as exc:
            export_main(["confirmed", "--list-countries"])

    assert exc.value.code == 1
    assert "Country/Region" in capsys.readouterr().err


@patch("actions.update_dashboard.get_settings")
def test_main_country_flag_ignores_env_row_index(mock_settings, capsys):
    mock_settings.return_value = Settings(datasets=default_datasets(row_index=2))

    with patch("actions.update_dashboard.GitHubContentsClient", patched_client(FakeSource())):
        with pytest.raises(SystemExit) as exc:
            main(["--country", "Italy"])

    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert "Italy on 3/9/23\n188322\n" in out
    assert "Italy on 3/9/23\n1123836\n" not in out
