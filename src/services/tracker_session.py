# src/services/tracker_session.py

"""One page view: a controller wired to its polling and mutation triggers."""

import asyncio
import logging

from src.config.settings import Settings
from src.parsing.extractor import PackageExtractor
from src.services.markup_source import FileMarkupSource, MarkupSource
from src.services.run_controller import RunController
from src.services.triggers import MutationTrigger, PollingTrigger
from src.storage.snapshot_store import SnapshotStore

logger = logging.getLogger("package_tracker.session")


class TrackerSession:
    """Wires a page, a snapshot store and both trigger sources together.

    The first trigger to find the controller idle runs the cycle; every
    other one is rejected by the controller's guard.  A failure from
    either trigger is re-raised from :meth:`run_until_done`.
    """

    def __init__(
        self,
        source: MarkupSource,
        store: SnapshotStore,
        poll_interval: float | None = None,
        extractor: PackageExtractor | None = None,
    ) -> None:
        self.source = source
        self.store = store
        self.poll_interval = (
            poll_interval
            if poll_interval is not None
            else Settings.POLL_INTERVAL
        )
        self.controller = RunController(source, store, extractor)
        self._failure: asyncio.Future[None] | None = None
        self._watch_task: asyncio.Task[None] | None = None

        self.polling = PollingTrigger(
            self.controller, self.poll_interval, self._report_failure,
        )
        self.mutations = MutationTrigger(
            self.controller, self._report_failure,
        )
        source.subscribe(self.mutations)

    def _report_failure(self, exc: BaseException) -> None:
        logger.error("Tracking cycle failed: %s", exc, exc_info=exc)
        if self._failure is not None and not self._failure.done():
            self._failure.set_exception(exc)

    def _watch_finished(self, task: "asyncio.Task[None]") -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._report_failure(exc)

    def start(self) -> "asyncio.Future[None]":
        """Start polling (and file watching for file-backed pages).

        Returns the future that receives the first trigger failure.
        """
        loop = asyncio.get_running_loop()
        failure = self._failure
        if failure is None or failure.done():
            failure = self._failure = loop.create_future()
        self.polling.start()
        if (
            isinstance(self.source, FileMarkupSource)
            and self._watch_task is None
        ):
            self._watch_task = loop.create_task(
                self.source.watch(self.poll_interval)
            )
            self._watch_task.add_done_callback(self._watch_finished)
        return failure

    def stop(self) -> None:
        """Cancel every background task this session started."""
        self.polling.stop()
        self.mutations.cancel_pending()
        if self._watch_task is not None:
            self._watch_task.cancel()
            self._watch_task = None

    async def run_until_done(self, timeout: float | None = None) -> bool:
        """Run triggers until the cycle completes, fails or times out.

        Returns True when the cycle completed, False on timeout.
        """
        failure = self.start()
        waiter = asyncio.ensure_future(self.controller.wait_done())
        try:
            await asyncio.wait(
                {waiter, failure},
                timeout=timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
            if failure.done():
                failure.result()
        finally:
            waiter.cancel()
            self.stop()
        if not self.controller.done:
            logger.warning(
                "No completed cycle after %ss (state=%s)",
                timeout,
                self.controller.state.value,
            )
        return self.controller.done

    async def reset(self) -> None:
        """Clear stored snapshots and reload the page for a fresh cycle."""
        await self.store.clear()
        self.controller.reset()
        self.source.reload()
        logger.info("Package tracker reset")
