#!/usr/bin/env python3
"""
Fetch the COVID-19 time series and print (or publish) the latest figures.

**Purpose**: End-to-end run of the dashboard: fetch the confirmed, deaths and
recovered CSVs from GitHub, extract the latest value for one country from each,
print the three summaries and optionally write them into a static index.html.

**Usage**:
    python actions/update_dashboard.py
    python actions/update_dashboard.py --country Germany
    python actions/update_dashboard.py --country Canada --province Ontario
    python actions/update_dashboard.py --row-index 226          # legacy fixed row
    python actions/update_dashboard.py --html-dir site/          # then serve_static.py --dir site

**What this script does**:
  1. Parse command line arguments
  2. Load settings from environment (.env file)
  3. Fetch the three datasets once (GitHub contents API)
  4. Run Dashboard.update(): one summary (or error indicator) per dataset
  5. Write index.html if --html-dir was given

**Exit codes**:
  - 0: All three datasets rendered
  - 1: Configuration error, or at least one dataset could not be extracted
  - 2: Fetch failure (network, auth, rate limit, decode)
  - 130: Interrupted

**Example output**:
    $ python actions/update_dashboard.py
    Fetching 3 dataset(s) from CSSEGISandData/COVID-19...
    US on 3/9/23
    103802702
    US on 3/9/23
    1123836
    US on 3/9/23
    0
    ✓ 3/3 datasets updated
"""

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence, TextIO

import requests

# Add project root to Python path so we can import covid_snapshot without installing
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from covid_snapshot.config.settings import DatasetConfig, get_settings
from covid_snapshot.dashboard.display import ConsoleDisplay, FanOutDisplay, MemoryDisplay
from covid_snapshot.dashboard.page import write_html_page
from covid_snapshot.dashboard.update import Dashboard
from covid_snapshot.venues.base import DatasetSource
from covid_snapshot.venues.github_client import (
    GitHubClientError,
    GitHubContentsClient,
    GitHubRateLimitError,
)


def parse_args(argv: Optional[Sequence[str]] = None):
    """
    Parse command line arguments.

    Returns:
        Namespace with attributes: country, province, row_index, html_dir.
    """
    parser = argparse.ArgumentParser(
        description="Print the latest COVID-19 figures for one country",
        epilog="""
Examples:
  # Latest US figures (country taken from COVID_COUNTRY, default US)
  python actions/update_dashboard.py

  # Another country, or one province of it
  python actions/update_dashboard.py --country Canada --province Ontario

  # Publish as a static page
  python actions/update_dashboard.py --html-dir site/
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--country",
        type=str,
        default=None,
        help="Country/Region to report (default: COVID_COUNTRY or US)",
    )

    parser.add_argument(
        "--province",
        type=str,
        default=None,
        help="Province/State to report (default: the country-level row)",
    )

    parser.add_argument(
        "--row-index",
        type=int,
        default=None,
        help="Report a fixed data row instead of looking the country up (1 = first data row)",
    )

    parser.add_argument(
        "--html-dir",
        type=str,
        default=None,
        help="Also write index.html with the figures into this directory",
    )

    return parser.parse_args(argv)


def run_update(
    source: DatasetSource,
    datasets: Sequence[DatasetConfig],
    html_dir: Optional[Path] = None,
    stream: Optional[TextIO] = None,
) -> bool:
    """
    Fetch, extract and display every dataset.

    Args:
        source: Where to fetch raw CSV bytes from.
        datasets: Datasets to render.
        html_dir: If set, index.html is written there after the update.
        stream: Where summaries are printed (default stdout).

    Returns:
        Result of Dashboard.update() (True if every dataset rendered).

    Raises:
        Whatever source.fetch_dataset() raises.
    """
    memory = MemoryDisplay()
    display = FanOutDisplay(ConsoleDisplay(stream), memory)

    dashboard = Dashboard.from_source(source, datasets, display)
    ok = dashboard.update()

    for name, error in dashboard.errors.items():
        print(f"  ✗ {name}: {error}", file=sys.stderr)

    if html_dir is not None:
        output = write_html_page(datasets, memory.texts, html_dir)
        print(f"  ✓ Wrote {output}", file=stream if stream is not None else sys.stdout)

    return ok


def main(argv: Optional[Sequence[str]] = None):
    """
    Main entry point for the script.

    **Error handling strategy**:
      - Invalid settings: exit 1 before any request is made
      - Fetch failures: exit 2 (nothing is displayed)
      - Extraction failures: the element shows an error indicator, exit 1
    """
    try:
        args = parse_args(argv)

        try:
            settings = get_settings().with_datasets(
                country_label=args.country,
                province=args.province,
                row_index=args.row_index,
            )
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

        datasets = settings.datasets
        html_dir = Path(args.html_dir) if args.html_dir else None

        print(f"Fetching {len(datasets)} dataset(s) from {settings.github.repo}...")

        try:
            with GitHubContentsClient(settings.github) as client:
                ok = run_update(client, datasets, html_dir=html_dir)

        except GitHubRateLimitError as e:
            print(f"Error: Rate limit exceeded: {e}", file=sys.stderr)
            print("Set GITHUB_TOKEN in your .env file or wait before retrying.", file=sys.stderr)
            sys.exit(2)

        except (GitHubClientError, requests.Timeout) as e:
            print(f"Error: Failed to fetch datasets: {e}", file=sys.stderr)
            sys.exit(2)

        if ok:
            print(f"✓ {len(datasets)}/{len(datasets)} datasets updated")
        else:
            print("✗ Some datasets could not be extracted (see errors above)", file=sys.stderr)

        sys.exit(0 if ok else 1)

    except KeyboardInterrupt:
        print("\nInterrupted by user. Exiting...")
        sys.exit(130)


if __name__ == "__main__":
    main()
