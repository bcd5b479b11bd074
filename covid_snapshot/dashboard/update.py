"""
The dashboard update trigger.

**Conceptual**: A Dashboard holds the raw bytes of each tracked dataset and a
display sink. update() runs one extraction per dataset and writes each summary
to the dataset's element. It is the Python counterpart of the page's
"update" callback: call it, get back True if every element shows data.

**Lifecycle**:
  1. Initialization: fetch bytes once (Dashboard.from_source) or pass them in
     directly (tests, cached files).
  2. update(): pure extractions + display writes. Can be called any number of
     times; identical bytes produce identical texts.

**Failure policy**:
  - Fetch failures happen in from_source() and propagate to the caller.
  - Extraction failures are per dataset: the element shows an explicit error
    indicator instead of stale or blank content, the other datasets are still
    rendered, and update() returns False.
"""

from typing import Dict, Mapping, Sequence

from covid_snapshot.config.settings import DatasetConfig
from covid_snapshot.dashboard.display import DisplaySink
from covid_snapshot.data.extractor import ExtractionError, extract, extract_country
from covid_snapshot.venues.base import DatasetSource


ERROR_PREFIX = "Error: "


def error_text(dataset: DatasetConfig, error: Exception) -> str:
    """Error indicator shown in place of a dataset's summary."""
    return f"{ERROR_PREFIX}{dataset.name} data unavailable ({error})\n"


class Dashboard:
    """
    Renders dataset summaries into a display sink.

    Attributes:
        datasets: Tracked datasets in display order.
        contents: Raw CSV bytes per dataset name.
        display: Sink receiving one text per dataset element.
        errors: Extraction errors of the last update(), keyed by dataset name.
    """

    def __init__(
        self,
        datasets: Sequence[DatasetConfig],
        contents: Mapping[str, bytes],
        display: DisplaySink,
    ):
        missing = [d.name for d in datasets if d.name not in contents]
        if missing:
            raise ValueError(f"No content provided for dataset(s): {missing}")

        self.datasets = tuple(datasets)
        self.contents = dict(contents)
        self.display = display
        self.errors: Dict[str, ExtractionError] = {}

    @classmethod
    def from_source(
        cls,
        source: DatasetSource,
        datasets: Sequence[DatasetConfig],
        display: DisplaySink,
    ) -> "Dashboard":
        """
        Fetch every dataset once and build a Dashboard over the bytes.

        Raises:
            Whatever the source raises (e.g. GitHubClientError); no partial
            dashboard is built.
        """
        contents = {dataset.name: source.fetch_dataset(dataset.path) for dataset in datasets}
        return cls(datasets, contents, display)

    def render(self, dataset: DatasetConfig) -> str:
        """
        Summary text of one dataset.

        Uses the fixed row_index when configured, otherwise looks the row up
        by country (and province).

        Raises:
            ExtractionError: MalformedInputError or IndexOutOfRangeError.
        """
        content = self.contents[dataset.name]
        if dataset.row_index is not None:
            return extract(content, dataset.row_index, dataset.country_label)
        return extract_country(content, dataset.country_label, dataset.province)

    def update(self) -> bool:
        """
        Render every dataset into its element.

        Returns:
            True if all datasets rendered, False if any element shows an error.
        """
        self.errors = {}
        for dataset in self.datasets:
            try:
                text = self.render(dataset)
            except ExtractionError as e:
                self.errors[dataset.name] = e
                text = error_text(dataset, e)
            self.display.set_text(dataset.element_id, text)
        return not self.errors
