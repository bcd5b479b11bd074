"""
Base abstraction for dataset sources.

**Conceptual**: This module defines the DatasetSource protocol, the interface
the dashboard uses to obtain raw CSV bytes. By depending on the protocol
rather than on GitHubContentsClient, the dashboard and its tests never need a
network: any object with a fetch_dataset(path) -> bytes method will do.

**Teaching note**: Python's Protocol (PEP 544) is structural typing. A test
double like

    class FakeSource:
        def fetch_dataset(self, path):
            return b"Province/State,Country/Region,Lat,Long,1/22/20\\n,US,0,0,1\\n"

satisfies DatasetSource without inheriting from it.
"""

from typing import Protocol


class DatasetSource(Protocol):
    """
    Anything that can turn a dataset path into raw CSV bytes.

    **Contract**:
      - Return the file content exactly as stored (no decoding to str, no
        CSV parsing).
      - Raise an exception on failure; never return empty bytes to signal an
        error, and never terminate the process.
    """

    def fetch_dataset(self, path: str) -> bytes:
        """
        Fetch the raw bytes of the dataset stored at `path`.

        Args:
            path: Dataset path inside the source (e.g. a repository file path).

        Returns:
            Raw file content.
        """
        ...
