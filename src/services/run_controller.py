# src/services/run_controller.py

"""Runs the extract → compare → annotate → save cycle once per page view."""

import asyncio
import logging
from collections import Counter
from collections.abc import Callable
from enum import Enum

from src.core.diff_engine import SnapshotDiffer
from src.models.classification import Classification, ClassifiedResult
from src.parsing.extractor import PackageExtractor
from src.render.annotator import PageAnnotator
from src.services.markup_source import MarkupSource
from src.storage.snapshot_store import SnapshotStore

logger = logging.getLogger("package_tracker.controller")


class RunState(str, Enum):
    """Lifecycle of one page view's comparison cycle."""

    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"


class RunController:
    """Owns the reentrancy guard and the per-class counters.

    ``trigger()`` may be called from any number of sources; only a call
    that finds the controller ``IDLE`` does any work.  The state flips
    to ``RUNNING`` before the first ``await`` so a second trigger that
    arrives while the store is loading is rejected.

    Store failures are not caught here: the exception propagates to
    whoever awaited ``trigger()`` and the controller stays ``RUNNING``
    until ``reset()``.
    """

    def __init__(
        self,
        source: MarkupSource,
        store: SnapshotStore,
        extractor: PackageExtractor | None = None,
    ) -> None:
        self.source = source
        self.store = store
        self.extractor = extractor or PackageExtractor()
        self.state: RunState = RunState.IDLE
        self.counts: Counter[Classification] = Counter()
        self.results: list[ClassifiedResult] = []
        self._done_callbacks: list[Callable[["RunController"], None]] = []
        self._done_event = asyncio.Event()

    @property
    def done(self) -> bool:
        return self.state is RunState.DONE

    def add_done_callback(
        self, callback: Callable[["RunController"], None],
    ) -> None:
        """Call *callback* once the cycle has been saved."""
        self._done_callbacks.append(callback)

    async def wait_done(self) -> None:
        """Suspend until the current page view reaches ``DONE``."""
        await self._done_event.wait()

    async def trigger(self) -> bool:
        """Attempt one cycle; returns True if this call completed it."""
        if self.state is not RunState.IDLE:
            logger.debug("Cycle %s, trigger skipped", self.state.value)
            return False
        self.state = RunState.RUNNING

        document = self.source.document
        packages = self.extractor.extract_page(document)
        if not packages:
            logger.debug("No packages found, waiting...")
            self.state = RunState.IDLE
            return False

        previous = await self.store.load()
        snapshots = [p.snapshot for p in packages]
        results = SnapshotDiffer.classify(snapshots, previous)

        self.results = results
        self.counts.update(r.classification for r in results)
        annotator = PageAnnotator(
            document,
            heading_selector=self.extractor.package_sel.get(
                "heading", ".package-heading"
            ),
            container_selector=self.extractor.page_sel.get(
                "container", ".packages"
            ),
        )
        annotator.annotate_page(packages, results, self.counts)

        await self.store.save(snapshots)
        self.state = RunState.DONE
        self._done_event.set()
        logger.info(
            "State initialised: %d packages (%s)",
            len(results),
            ", ".join(
                f"{c.value}={self.counts.get(c, 0)}" for c in Classification
            ),
        )
        for callback in list(self._done_callbacks):
            callback(self)
        return True

    def reset(self) -> None:
        """Return to ``IDLE`` with zeroed counters for a fresh page view."""
        logger.info("Controller reset (was %s)", self.state.value)
        self.state = RunState.IDLE
        self.counts.clear()
        self.results = []
        self._done_event = asyncio.Event()
