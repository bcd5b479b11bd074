"""
Display sinks: where summary strings end up.

A sink binds a text to a named element. The dashboard page has three
paragraphs (confdata, deathdata, recdata), and the same ids are used by
every sink so the dashboard does not care whether it is writing to a
terminal, a dict or an HTML page.
"""

import sys
from typing import Dict, Optional, Protocol, TextIO


class DisplaySink(Protocol):
    """Receives the text content of named display elements."""

    def set_text(self, element_id: str, text: str) -> None:
        """Replace the text of element `element_id`."""
        ...


class MemoryDisplay:
    """
    Keeps the latest text per element id in a dict.

    Used by tests and by the HTML page writer (render once, write once).
    """

    def __init__(self):
        self.texts: Dict[str, str] = {}

    def set_text(self, element_id: str, text: str) -> None:
        self.texts[element_id] = text

    def get_text(self, element_id: str) -> Optional[str]:
        return self.texts.get(element_id)


class ConsoleDisplay:
    """Prints every text as it is set (stdout by default)."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdout

    def set_text(self, element_id: str, text: str) -> None:
        print(text, end="", file=self.stream)


class FanOutDisplay:
    """Forwards every text to several sinks, in order."""

    def __init__(self, *sinks: DisplaySink):
        self.sinks = sinks

    def set_text(self, element_id: str, text: str) -> None:
        for sink in self.sinks:
            sink.set_text(element_id, text)
