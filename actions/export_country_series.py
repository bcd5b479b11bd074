#!/usr/bin/env python3
"""
Export one country's full time series from a dataset to CSV.

**Purpose**: The dashboard only shows the latest value. This script fetches a
dataset once and writes the whole row for a country as `timestamp,value`
(newest first) under data/processed/, ready for pandas/plotting.

**Usage**:
    python actions/export_country_series.py confirmed
    python actions/export_country_series.py deaths --country Italy
    python actions/export_country_series.py confirmed --country Canada --province Ontario
    python actions/export_country_series.py recovered --list-countries

**Example output**:
    $ python actions/export_country_series.py deaths --country Italy
    Fetching deaths dataset...
      ✓ Parsed 290 rows x 1147 columns
      ✓ Italy: 1143 days, 2020-01-22 to 2023-03-09, latest 188322
      ✓ Saved to data/processed/deaths_Italy.csv
"""

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

import requests

# Add project root to Python path so we can import covid_snapshot without installing
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from covid_snapshot.config.settings import get_settings
from covid_snapshot.data.extractor import COUNTRY_COLUMN, PROVINCE_COLUMN, CsvTable, ExtractionError
from covid_snapshot.data.series import country_time_series, table_to_frame, write_series_csv
from covid_snapshot.venues.github_client import GitHubClientError, GitHubContentsClient


def parse_args(argv: Optional[Sequence[str]] = None):
    """
    Parse command line arguments.

    Returns:
        Namespace with attributes: dataset, country, province, output, list_countries.
    """
    parser = argparse.ArgumentParser(
        description="Export one country's COVID-19 time series to CSV",
    )
    parser.add_argument(
        "dataset",
        choices=["confirmed", "deaths", "recovered"],
        help="Which dataset to export",
    )
    parser.add_argument(
        "--country",
        type=str,
        default=None,
        help="Country/Region to export (default: COVID_COUNTRY or US)",
    )
    parser.add_argument(
        "--province",
        type=str,
        default=None,
        help="Province/State to export (default: the country-level row)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output CSV path (default: data/processed/<dataset>_<country>.csv)",
    )
    parser.add_argument(
        "--list-countries",
        action="store_true",
        help="List the country/province rows available in the dataset and exit",
    )
    return parser.parse_args(argv)


def default_output_path(dataset: str, country: str, province: Optional[str] = None) -> Path:
    """data/processed/<dataset>_<country>[_<province>].csv with spaces replaced."""
    parts = [dataset, country] + ([province] if province else [])
    stem = "_".join(part.replace(" ", "_").replace("/", "-") for part in parts)
    return Path("data") / "processed" / f"{stem}.csv"


def list_countries(table: CsvTable) -> None:
    """
    Print 'Country' or 'Country / Province' for every data row.

    Raises:
        MalformedInputError: If the header has no Country/Region column.
    """
    table.column_index(COUNTRY_COLUMN)
    frame = table_to_frame(table)
    for _, row in frame.iterrows():
        province = row.get(PROVINCE_COLUMN, "")
        label = row[COUNTRY_COLUMN] if not province else f"{row[COUNTRY_COLUMN]} / {province}"
        print(label)


def main(argv: Optional[Sequence[str]] = None):
    """
    Main entry point for the script.

    **Exit codes**:
      - 0: Exported (or listed)
      - 1: Configuration error, or the country row could not be exported
      - 2: Fetch failure
    """
    try:
        args = parse_args(argv)

        try:
            settings = get_settings().with_datasets(
                country_label=args.country,
                province=args.province,
            )
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

        dataset = next(d for d in settings.datasets if d.name == args.dataset)

        print(f"Fetching {dataset.name} dataset...")
        try:
            with GitHubContentsClient(settings.github) as client:
                content = client.fetch_dataset(dataset.path)
        except (GitHubClientError, requests.Timeout) as e:
            print(f"Error: Failed to fetch {dataset.name}: {e}", file=sys.stderr)
            sys.exit(2)

        try:
            table = CsvTable.parse(content)
            print(f"  ✓ Parsed {table.row_count} rows x {table.column_count} columns")

            if args.list_countries:
                list_countries(table)
                sys.exit(0)

            series = country_time_series(table, dataset.country_label, dataset.province)
        except ExtractionError as e:
            print(f"  ✗ {e}", file=sys.stderr)
            sys.exit(1)

        print(
            f"  ✓ {series.name}: {len(series)} days, "
            f"{series.index[0].date()} to {series.index[-1].date()}, "
            f"latest {series.iloc[-1]:.0f}"
        )

        output = (
            Path(args.output)
            if args.output
            else default_output_path(dataset.name, dataset.country_label, dataset.province)
        )
        write_series_csv(series, output)
        print(f"  ✓ Saved to {output}")
        sys.exit(0)

    except KeyboardInterrupt:
        print("\nInterrupted by user. Exiting...")
        sys.exit(130)


if __name__ == "__main__":
    main()
