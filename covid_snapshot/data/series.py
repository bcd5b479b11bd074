"""
pandas views of a parsed time-series table.

**Conceptual**: The extractor only ever needs one cell. For analysis and
export we want a whole country row as a proper time series: a pd.Series of
numbers indexed by timestamps. This module converts a CsvTable into that shape
and writes it to disk using the project's CSV conventions.

**CSV conventions** (same as every CSV this project writes):
  - Column `timestamp` as "YYYY-MM-DD" strings.
  - Rows sorted strictly descending by timestamp (newest first).
"""

import pandas as pd
from pathlib import Path
from typing import Optional

from covid_snapshot.data.extractor import (
    CsvTable,
    MalformedInputError,
    find_country_row,
)


# Header dates look like "1/22/20" (month/day/two-digit year)
HEADER_DATE_FORMAT = "%m/%d/%y"


def table_to_frame(table: CsvTable) -> pd.DataFrame:
    """
    Convert a CsvTable into a DataFrame of strings (header row as columns).

    Returns:
        DataFrame with one row per data row. Empty table -> empty DataFrame.
    """
    if table.row_count == 0:
        return pd.DataFrame()
    return pd.DataFrame(list(table.rows[1:]), columns=list(table.header), dtype=str)


def country_time_series(
    table: CsvTable,
    country: str,
    province: Optional[str] = None,
) -> pd.Series:
    """
    Time series of one country row.

    Args:
        table: Parsed table (JHU time-series layout).
        country: Country/Region value to match.
        province: Optional Province/State value (None = country-level row).

    Returns:
        pd.Series of floats indexed by timestamp (oldest first, header order),
        named after the country.

    Raises:
        CountryNotFoundError: If no row matches.
        MalformedInputError: If a date cell is not numeric or no date columns exist.
    """
    row_index = find_country_row(table, country, province)
    row = table.rows[row_index]

    positions = []
    dates = []
    for position, label in enumerate(table.header):
        ts = pd.to_datetime(label, format=HEADER_DATE_FORMAT, errors="coerce")
        if pd.isna(ts):
            continue
        positions.append(position)
        dates.append(ts)

    if not positions:
        raise MalformedInputError(
            f"Header has no date columns in {HEADER_DATE_FORMAT} format"
        )

    raw = pd.Series([row[p] for p in positions], index=pd.DatetimeIndex(dates))
    values = pd.to_numeric(raw, errors="coerce")
    bad = raw[values.isna()]
    if len(bad) > 0:
        raise MalformedInputError(
            f"Non-numeric values for '{country}': "
            f"{bad.iloc[0]!r} on {bad.index[0].date()}"
        )

    values = values.astype(float)
    values.index.name = "timestamp"
    values.name = country if not province else f"{province}, {country}"
    return values


def write_series_csv(series: pd.Series, path: Path) -> None:
    """
    Write a time series as `timestamp,value` CSV, newest first.

    Creates parent directories as needed.

    Args:
        series: Series indexed by timestamp.
        path: Output CSV path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame({
        "timestamp": series.index,
        "value": series.values,
    })
    df = df.sort_values("timestamp", ascending=False).reset_index(drop=True)
    df["timestamp"] = pd.to_datetime(df["timestamp"]).dt.strftime("%Y-%m-%d")
    df.to_csv(path, index=False)
