"""
Static HTML page for the dashboard.

Renders the element texts collected by a MemoryDisplay into a self-contained
index.html (one <p> per element id, newlines preserved with white-space:
pre-line) that the static file server can publish as-is.
"""

import html
from pathlib import Path
from typing import Mapping, Sequence

from covid_snapshot.config.settings import DatasetConfig


PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
  body {{ font-family: sans-serif; margin: 2rem; }}
  section {{ margin-bottom: 1.5rem; }}
  p {{ white-space: pre-line; font-size: 1.2rem; }}
</style>
</head>
<body>
<h1>{title}</h1>
{sections}
</body>
</html>
"""

SECTION_TEMPLATE = """<section>
<h2>{heading}</h2>
<p id="{element_id}">{text}</p>
</section>"""


def render_html_page(
    datasets: Sequence[DatasetConfig],
    texts: Mapping[str, str],
    title: str = "COVID-19 latest figures",
) -> str:
    """
    Build the page markup.

    Args:
        datasets: Datasets in display order (heading + element id per section).
        texts: Element id -> text (missing ids render as empty paragraphs).
        title: Page title and heading.

    Returns:
        HTML document as a string; all texts are escaped.
    """
    sections = "\n".join(
        SECTION_TEMPLATE.format(
            heading=html.escape(dataset.name.capitalize()),
            element_id=html.escape(dataset.element_id, quote=True),
            text=html.escape(texts.get(dataset.element_id, "")),
        )
        for dataset in datasets
    )
    return PAGE_TEMPLATE.format(title=html.escape(title), sections=sections)


def write_html_page(
    datasets: Sequence[DatasetConfig],
    texts: Mapping[str, str],
    directory: Path,
    filename: str = "index.html",
) -> Path:
    """
    Write the page into `directory` (created if needed).

    Returns:
        Path of the written file.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    output = directory / filename
    output.write_text(render_html_page(datasets, texts), encoding="utf-8")
    return output
