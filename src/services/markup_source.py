# src/services/markup_source.py

"""Live listing page: a parsed document plus mutation observers."""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from bs4 import BeautifulSoup

logger = logging.getLogger("package_tracker.markup")

MutationObserver = Callable[["MarkupSource"], None]


class MarkupSource:
    """Holds the current page document and notifies on mutations.

    Observers are called synchronously after every mutation, in
    subscription order.  Changes made directly on ``document`` (the
    annotator does this) are not reported.
    """

    def __init__(self, html: str, parser: str = "lxml") -> None:
        self.parser = parser
        self._html = html
        self.document = BeautifulSoup(html, parser)
        self._observers: list[MutationObserver] = []

    def subscribe(self, observer: MutationObserver) -> None:
        """Register *observer* for mutation notifications."""
        self._observers.append(observer)

    def _notify(self) -> None:
        for observer in list(self._observers):
            observer(self)

    def mutate(self, change: Callable[[BeautifulSoup], None]) -> None:
        """Apply *change* to the document, then notify observers."""
        change(self.document)
        self._notify()

    def replace_html(self, html: str) -> None:
        """Swap in a new page body (e.g. listings finished loading)."""
        self._html = html
        self.document = BeautifulSoup(html, self.parser)
        logger.debug("Markup replaced (%d chars)", len(html))
        self._notify()

    def reload(self) -> None:
        """Re-parse the page from its last known markup, dropping annotations."""
        self.document = BeautifulSoup(self._html, self.parser)
        logger.info("Page reloaded")
        self._notify()

    def render(self) -> str:
        """Serialise the (possibly annotated) document."""
        return str(self.document)


class FileMarkupSource(MarkupSource):
    """A page read from an HTML file that may still be changing on disk."""

    def __init__(self, path: Path, parser: str = "lxml") -> None:
        self.path = path
        self._stamp = self._file_stamp()
        super().__init__(self._read(), parser)

    def _read(self) -> str:
        return self.path.read_text(encoding="utf-8")

    def _file_stamp(self) -> tuple[int, int]:
        stat = self.path.stat()
        return (stat.st_mtime_ns, stat.st_size)

    def refresh(self) -> bool:
        """Re-read the file if it changed; returns True on a change."""
        stamp = self._file_stamp()
        if stamp == self._stamp:
            return False
        html = self._read()
        self._stamp = stamp
        logger.debug("Detected change in %s", self.path)
        self.replace_html(html)
        return True

    def reload(self) -> None:
        """Reload from disk so the fresh page reflects the current file."""
        self._stamp = self._file_stamp()
        self._html = self._read()
        super().reload()

    async def watch(self, interval: float) -> None:
        """Poll the file for changes until cancelled."""
        while True:
            await asyncio.sleep(interval)
            try:
                self.refresh()
            except OSError as exc:
                logger.warning("Cannot read %s: %s", self.path, exc)
