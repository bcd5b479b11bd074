"""
Configuration settings for the COVID-19 snapshot dashboard.

**Conceptual**: This module provides strongly-typed configuration objects that
load from environment variables (via .env files). All settings are validated
at construction, so a bad value fails at startup instead of mid-fetch.

**What is configured here**:
  - GitHubSettings: where the CSV datasets live (API URL, repo, ref, token).
  - DatasetConfig: one tracked dataset (upstream path, display element,
    country label, optional fixed row index).
  - ServerSettings: listen address and directory for the static file server.
  - Settings: aggregate of the above, exposed through get_settings().

**Teaching note**: Settings objects are plain frozen dataclasses. Tests build
them directly (GitHubSettings(base_url=..., repo=...)) instead of touching the
environment; only the from_env() factories read os.environ.

This module uses python-dotenv to load .env files and dataclasses for type safety.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

# Load .env from project root (dev/local environments); missing file is a no-op
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


# Upstream location of the Johns Hopkins CSSE global time series
DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_DATA_REPO = "CSSEGISandData/COVID-19"
TIME_SERIES_DIR = "csse_covid_19_data/csse_covid_19_time_series"

DEFAULT_COUNTRY = "US"
DEFAULT_LISTEN = ":8080"
DEFAULT_STATIC_DIR = "."


def _read_int(name: str, default: Optional[str]) -> Optional[int]:
    """Read an optional integer environment variable, naming it on failure."""
    raw = os.getenv(name, default)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {raw}")


def _read_optional(name: str) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return raw


@dataclass(frozen=True)
class GitHubSettings:
    """
    Configuration for the GitHub contents API data source.

    **Conceptual**: The datasets are CSV files in a public GitHub repository.
    They are retrieved through the contents API, which wraps the file in a JSON
    envelope with base64 content. No token is required for public repos, but
    an optional token raises the anonymous rate limit (60 requests/hour).

    **Security note**: GITHUB_TOKEN is a secret. Load it from the environment
    or .env, never hardcode it.

    Attributes:
        base_url: Base URL of the GitHub REST API (default https://api.github.com).
        repo: "owner/name" of the repository holding the CSV files.
        ref: Optional branch, tag or commit to read from (default branch if None).
        token: Optional personal access token sent as a Bearer token.
        timeout_seconds: HTTP request timeout in seconds (default 30).
    """
    base_url: str = DEFAULT_GITHUB_API_URL
    repo: str = DEFAULT_DATA_REPO
    ref: Optional[str] = None
    token: Optional[str] = None
    timeout_seconds: int = 30

    def __post_init__(self):
        """Validate settings after initialization."""
        if not self.base_url:
            raise ValueError(
                "GITHUB_API_URL is required but empty. "
                "Unset it to use https://api.github.com."
            )
        if not self.repo or self.repo.count("/") != 1:
            raise ValueError(
                f"COVID_DATA_REPO must look like 'owner/name', got: {self.repo!r}"
            )
        if self.timeout_seconds <= 0:
            raise ValueError(
                f"timeout_seconds must be positive, got: {self.timeout_seconds}"
            )

    @classmethod
    def from_env(cls) -> "GitHubSettings":
        """
        Load GitHub settings from environment variables.

        **Environment variables** (all optional):
          - GITHUB_API_URL: API base URL (default "https://api.github.com").
          - COVID_DATA_REPO: Repository (default "CSSEGISandData/COVID-19").
          - COVID_DATA_REF: Branch/tag/commit to read.
          - GITHUB_TOKEN: Personal access token.
          - GITHUB_TIMEOUT_SECONDS: HTTP timeout in seconds (default 30).

        Returns:
            GitHubSettings object with values loaded from environment.

        Raises:
            ValueError: If a value is present but invalid.
        """
        timeout_seconds = _read_int("GITHUB_TIMEOUT_SECONDS", "30")

        return cls(
            base_url=os.getenv("GITHUB_API_URL", DEFAULT_GITHUB_API_URL),
            repo=os.getenv("COVID_DATA_REPO", DEFAULT_DATA_REPO),
            ref=_read_optional("COVID_DATA_REF"),
            token=_read_optional("GITHUB_TOKEN"),
            timeout_seconds=timeout_seconds if timeout_seconds is not None else 30,
        )


@dataclass(frozen=True)
class DatasetConfig:
    """
    One tracked dataset and where its summary is displayed.

    **Conceptual**: The dashboard reports three datasets (confirmed, deaths,
    recovered). Each has its own upstream CSV and display element, but they
    share the same extraction logic.

    **Row selection**: If row_index is None (the default) the row is found by
    matching the Country/Region and Province/State columns against
    country_label/province. Setting row_index pins a fixed data row instead;
    this reproduces the legacy behaviour of reading a hardcoded row, and breaks
    silently if upstream reorders rows.

    Attributes:
        name: Short dataset name ("confirmed", "deaths", "recovered").
        path: Path of the CSV file inside the repository.
        element_id: Id of the display element that receives the summary.
        country_label: Country to report (also the label in the summary).
        province: Optional Province/State to match (None means the
                  country-level row with an empty province).
        row_index: Optional fixed data row index (1 = first data row).
    """
    name: str
    path: str
    element_id: str
    country_label: str = DEFAULT_COUNTRY
    province: Optional[str] = None
    row_index: Optional[int] = None

    def __post_init__(self):
        """Validate settings after initialization."""
        if not self.name:
            raise ValueError("Dataset name cannot be empty")
        if not self.path:
            raise ValueError(f"Dataset '{self.name}' has an empty path")
        if not self.element_id:
            raise ValueError(f"Dataset '{self.name}' has an empty element_id")
        if not self.country_label:
            raise ValueError(f"Dataset '{self.name}' has an empty country_label")
        if self.row_index is not None and self.row_index < 1:
            raise ValueError(
                f"row_index must be >= 1 (row 0 is the header), got: {self.row_index}"
            )


def default_datasets(
    country_label: str = DEFAULT_COUNTRY,
    province: Optional[str] = None,
    row_index: Optional[int] = None,
) -> Tuple[DatasetConfig, ...]:
    """
    Build the three standard datasets (confirmed, deaths, recovered).

    Args:
        country_label: Country to report in every dataset.
        province: Optional province/state to match.
        row_index: Optional fixed row index shared by all three datasets.

    Returns:
        Tuple of DatasetConfig in display order.
    """
    layout = [
        ("confirmed", "time_series_covid19_confirmed_global.csv", "confdata"),
        ("deaths", "time_series_covid19_deaths_global.csv", "deathdata"),
        ("recovered", "time_series_covid19_recovered_global.csv", "recdata"),
    ]
    return tuple(
        DatasetConfig(
            name=name,
            path=f"{TIME_SERIES_DIR}/{filename}",
            element_id=element_id,
            country_label=country_label,
            province=province,
            row_index=row_index,
        )
        for name, filename, element_id in layout
    )


@dataclass(frozen=True)
class ServerSettings:
    """
    Configuration for the static file server.

    Attributes:
        listen: Listen address in "host:port" form; an empty host (":8080")
                binds all interfaces.
        directory: Directory whose files are served.
    """
    listen: str = DEFAULT_LISTEN
    directory: str = DEFAULT_STATIC_DIR

    def __post_init__(self):
        """Validate settings after initialization."""
        if ":" not in self.listen:
            raise ValueError(
                f"listen address must look like 'host:port' or ':port', got: {self.listen!r}"
            )
        if not self.directory:
            raise ValueError("directory to serve cannot be empty")

    @classmethod
    def from_env(cls) -> "ServerSettings":
        """
        Load server settings from STATIC_LISTEN and STATIC_DIR.

        Defaults: listen ":8080", directory ".".
        """
        return cls(
            listen=os.getenv("STATIC_LISTEN", DEFAULT_LISTEN),
            directory=os.getenv("STATIC_DIR", DEFAULT_STATIC_DIR),
        )


@dataclass(frozen=True)
class Settings:
    """
    Global settings for the dashboard.

    **Usage pattern**:
      ```python
      from covid_snapshot.config.settings import get_settings

      settings = get_settings()
      client = GitHubContentsClient(settings.github)
      for dataset in settings.datasets:
          ...
      ```

    Attributes:
        github: Data source settings.
        datasets: Tracked datasets in display order.
        server: Static file server settings.
    """
    github: GitHubSettings = field(default_factory=GitHubSettings)
    datasets: Tuple[DatasetConfig, ...] = field(default_factory=default_datasets)
    server: ServerSettings = field(default_factory=ServerSettings)

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Load global settings from environment variables.

        **Environment variables** (besides those of GitHubSettings and
        ServerSettings):
          - COVID_COUNTRY: Country to report (default "US").
          - COVID_PROVINCE: Province/State to match (default: country-level row).
          - COVID_ROW_INDEX: Fixed data row index; disables country lookup.

        Raises:
            ValueError: If any value is present but invalid.
        """
        datasets = default_datasets(
            country_label=os.getenv("COVID_COUNTRY", DEFAULT_COUNTRY),
            province=_read_optional("COVID_PROVINCE"),
            row_index=_read_int("COVID_ROW_INDEX", None),
        )
        return cls(
            github=GitHubSettings.from_env(),
            datasets=datasets,
            server=ServerSettings.from_env(),
        )

    def with_datasets(
        self,
        country_label: Optional[str] = None,
        province: Optional[str] = None,
        row_index: Optional[int] = None,
    ) -> "Settings":
        """
        Return a copy with dataset selection overridden (CLI flags win over env).

        Arguments left as None keep the current value. Choosing a country or
        province clears a fixed row_index unless row_index is given as well.
        """
        selects_country = country_label is not None or province is not None
        datasets = tuple(
            replace(
                dataset,
                country_label=country_label if country_label is not None else dataset.country_label,
                province=province if province is not None else dataset.province,
                row_index=(
                    row_index if row_index is not None
                    else None if selects_country
                    else dataset.row_index
                ),
            )
            for dataset in self.datasets
        )
        return replace(self, datasets=datasets)


# Lazily loaded singleton; tests can build Settings(...) directly instead
_default_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings singleton.

    Settings are loaded from environment on first call, then cached for reuse.
    Call reset_settings() to force a reload (tests that change the environment).

    Returns:
        Global Settings singleton.

    Raises:
        ValueError: If the environment holds invalid values.
    """
    global _default_settings

    if _default_settings is None:
        _default_settings = Settings.from_env()

    return _default_settings


def reset_settings():
    """Reset the global settings singleton (for testing)."""
    global _default_settings
    _default_settings = None
