"""
Row extraction from raw CSV time-series bytes.

**Conceptual**: This module is the pure core of the project. Given the raw
bytes of a time-series CSV (header row of metadata + date labels, one data row
per region), it reports the most recent value of one row as a short summary:

    US on 3/9/23
    103802702

The most recent date is the last header column; the value is the cell of the
target row in that column.

**Functionally**:
  - CsvTable.parse() turns bytes into an immutable table, rejecting anything
    a strict CSV reader would reject (MalformedInputError).
  - extract() picks a row by position; extract_country() finds the row by
    its Country/Region (+ Province/State) columns first.
  - Out-of-range rows raise IndexOutOfRangeError; nothing here ever falls back
    to a default row or date.

No network, no encoding layers and no state: the same inputs always produce the
same string.
"""

import csv
import io
from dataclasses import dataclass
from typing import Optional, Tuple


COUNTRY_COLUMN = "Country/Region"
PROVINCE_COLUMN = "Province/State"


class ExtractionError(ValueError):
    """
    Base exception for extraction failures.

    Callers that only want to know "could a value be reported?" catch this;
    the subclasses say why not.
    """
    pass


class MalformedInputError(ExtractionError):
    """
    Raised when the content cannot be parsed as a rectangular CSV table.

    Covers undecodable UTF-8, unterminated or misplaced quotes, and rows whose
    cell count differs from the header's.
    """
    pass


class IndexOutOfRangeError(ExtractionError):
    """
    Raised when the requested row or column does not exist.

    Includes row 0 (the header is never reported as data), rows past the end
    of the table, and tables with no columns at all.
    """
    pass


class CountryNotFoundError(IndexOutOfRangeError):
    """Raised when no row matches the requested country/province."""
    pass


def _find_bare_quote(text: str) -> Optional[int]:
    """
    Line number (1-based) of the first quote inside an unquoted field, or None.

    csv.reader accepts x"y as a literal cell even in strict mode; a quote may
    only open a field or appear doubled inside a quoted one.
    """
    in_quotes = False
    for line_no, line in enumerate(text.split("\n"), start=1):
        if not in_quotes and '"' not in line:
            continue
        field_start = not in_quotes
        i = 0
        while i < len(line):
            ch = line[i]
            if in_quotes:
                if ch == '"':
                    if i + 1 < len(line) and line[i + 1] == '"':
                        i += 1
                    else:
                        in_quotes = False
            elif ch == '"':
                if not field_start:
                    return line_no
                in_quotes = True
            field_start = not in_quotes and ch in ",\r"
            i += 1
    return None


@dataclass(frozen=True)
class CsvTable:
    """
    Parsed CSV content: rows of string cells, row 0 is the header.

    Invariant: every row has the same number of cells as the header.

    Attributes:
        rows: All rows including the header, as tuples of strings.
    """
    rows: Tuple[Tuple[str, ...], ...]

    @classmethod
    def parse(cls, content: bytes) -> "CsvTable":
        """
        Parse raw CSV bytes (UTF-8) into a CsvTable.

        Quoted fields may contain commas, quotes ("") and newlines. A quote
        anywhere else (x"y) is malformed. Blank lines are skipped. A UTF-8
        byte order mark is ignored.

        Args:
            content: Raw CSV bytes.

        Returns:
            CsvTable with all rows (possibly empty if content is empty).

        Raises:
            MalformedInputError: If the bytes are not UTF-8, the CSV syntax is
                                 invalid, or rows have differing cell counts.
        """
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise MalformedInputError(f"Content is not valid UTF-8: {e}") from e

        reader = csv.reader(io.StringIO(text, newline=""), strict=True)
        rows = []
        try:
            for record in reader:
                if not record:
                    continue
                rows.append(tuple(record))
        except csv.Error as e:
            raise MalformedInputError(
                f"Invalid CSV near line {reader.line_num}: {e}"
            ) from e

        bare_quote_line = _find_bare_quote(text)
        if bare_quote_line is not None:
            raise MalformedInputError(
                f'Invalid CSV near line {bare_quote_line}: bare " in unquoted field'
            )

        if rows:
            expected = len(rows[0])
            for line_no, row in enumerate(rows[1:], start=1):
                if len(row) != expected:
                    raise MalformedInputError(
                        f"Row {line_no} has {len(row)} fields, header has {expected}"
                    )

        return cls(rows=tuple(rows))

    @property
    def header(self) -> Tuple[str, ...]:
        """Row 0. Raises IndexOutOfRangeError on an empty table."""
        if not self.rows:
            raise IndexOutOfRangeError("Table is empty: no header row")
        return self.rows[0]

    @property
    def row_count(self) -> int:
        """Number of rows including the header."""
        return len(self.rows)

    @property
    def column_count(self) -> int:
        """Number of header cells (0 for an empty table)."""
        return len(self.rows[0]) if self.rows else 0

    def column_index(self, name: str) -> int:
        """
        Position of a header cell by name.

        Raises:
            MalformedInputError: If the header has no such column.
        """
        try:
            return self.header.index(name)
        except ValueError:
            raise MalformedInputError(
                f"Header has no '{name}' column. Found: {list(self.header)}"
            )


@dataclass(frozen=True)
class ExtractionRequest:
    """
    Which data row to report and under what label.

    Attributes:
        target_row_index: Row position in the table (1 = first data row).
        country_label: Display label, independent of the row contents.
    """
    target_row_index: int
    country_label: str


@dataclass(frozen=True)
class ExtractionResult:
    """Latest date and value of one row, ready to be formatted once."""
    country_label: str
    date: str
    value: str

    def format(self) -> str:
        """Render as '{label} on {date}\\n{value}\\n'."""
        return f"{self.country_label} on {self.date}\n{self.value}\n"


def extract_result(table: CsvTable, request: ExtractionRequest) -> ExtractionResult:
    """
    Read the last-column date and value for the requested row.

    Args:
        table: Parsed CSV table.
        request: Row index and label.

    Returns:
        ExtractionResult for the row.

    Raises:
        IndexOutOfRangeError: If the table has no columns, or the row index is
                              the header (0), negative, or past the last row.
    """
    if table.column_count == 0:
        raise IndexOutOfRangeError("Table has no columns")

    index = request.target_row_index
    if index < 1 or index >= table.row_count:
        raise IndexOutOfRangeError(
            f"Row index {index} out of range: table has {table.row_count - 1} "
            f"data row(s) (valid indices 1..{table.row_count - 1})"
        )

    date_index = table.column_count - 1
    return ExtractionResult(
        country_label=request.country_label,
        date=table.header[date_index],
        value=table.rows[index][date_index],
    )


def find_country_row(
    table: CsvTable,
    country: str,
    province: Optional[str] = None,
) -> int:
    """
    Find the data row of a country (and optionally a province).

    When province is None, only the country-level row (empty Province/State)
    matches; countries reported only per province (e.g. Canada) need an
    explicit province.

    Args:
        table: Parsed CSV table with Country/Region and Province/State columns.
        country: Exact Country/Region value.
        province: Exact Province/State value, or None for the country-level row.

    Returns:
        Row index (>= 1) of the first match.

    Raises:
        MalformedInputError: If the header lacks the lookup columns.
        CountryNotFoundError: If no row matches.
    """
    country_col = table.column_index(COUNTRY_COLUMN)
    province_col = table.column_index(PROVINCE_COLUMN)
    wanted_province = province or ""

    for index in range(1, table.row_count):
        row = table.rows[index]
        if row[country_col] == country and row[province_col] == wanted_province:
            return index

    where = f"{province}, {country}" if province else country
    raise CountryNotFoundError(f"No row found for '{where}'")


def extract(content: bytes, target_row_index: int, country_label: str) -> str:
    """
    Summarize the latest value of a fixed data row.

    Example:
        >>> content = (
        ...     b"Province,Country,Lat,Long,1/22/20,1/23/20\\n"
        ...     b",US,0,0,1,2\\n"
        ... )
        >>> extract(content, 1, "US")
        'US on 1/23/20\\n2\\n'

    Raises:
        MalformedInputError: If content is not a valid rectangular CSV.
        IndexOutOfRangeError: If the row does not exist.
    """
    table = CsvTable.parse(content)
    request = ExtractionRequest(target_row_index=target_row_index, country_label=country_label)
    return extract_result(table, request).format()


def extract_country(
    content: bytes,
    country_label: str,
    province: Optional[str] = None,
) -> str:
    """
    Summarize the latest value of the row matching country_label.

    Same output as extract(), but the row is looked up by its
    Country/Region and Province/State cells instead of a fixed position.

    Raises:
        MalformedInputError: If content is invalid or lacks the lookup columns.
        CountryNotFoundError: If no row matches.
        IndexOutOfRangeError: If the table has no columns.
    """
    table = CsvTable.parse(content)
    if table.column_count == 0:
        raise IndexOutOfRangeError("Table has no columns")
    index = find_country_row(table, country_label, province)
    request = ExtractionRequest(target_row_index=index, country_label=country_label)
    return extract_result(table, request).format()

