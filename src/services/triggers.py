# src/services/triggers.py

"""Trigger sources that funnel into ``RunController.trigger()``."""

import asyncio
import logging
from collections.abc import Callable

from src.services.markup_source import MarkupSource
from src.services.run_controller import RunController

logger = logging.getLogger("package_tracker.triggers")

ErrorHandler = Callable[[BaseException], None]


def _log_error(exc: BaseException) -> None:
    logger.error("Tracking cycle failed: %s", exc, exc_info=exc)


class PollingTrigger:
    """Retries the cycle on a fixed interval until it completes.

    The polling task is cancelled as soon as the controller reaches
    ``DONE``.  A failed cycle stops the polling (the controller would
    reject every further attempt anyway).
    """

    def __init__(
        self,
        controller: RunController,
        interval: float,
        on_error: ErrorHandler | None = None,
    ) -> None:
        self.controller = controller
        self.interval = interval
        self.on_error = on_error or _log_error
        self._task: asyncio.Task[None] | None = None
        controller.add_done_callback(self._on_done)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Begin polling (no-op if already polling or finished)."""
        if self.running or self.controller.done:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _on_done(self, _controller: RunController) -> None:
        # The loop exits by itself when the cycle finished inside it
        if self._task is not None and self._task is not asyncio.current_task():
            self.stop()

    async def _run(self) -> None:
        while not self.controller.done:
            try:
                await self.controller.trigger()
            except Exception as exc:
                self.on_error(exc)
                return
            if self.controller.done:
                break
            await asyncio.sleep(self.interval)
        logger.debug("Polling stopped")


class MutationTrigger:
    """Markup observer that schedules a cycle on every mutation.

    Never unsubscribes; once the controller is ``DONE`` each call is a
    no-op.
    """

    def __init__(
        self,
        controller: RunController,
        on_error: ErrorHandler | None = None,
    ) -> None:
        self.controller = controller
        self.on_error = on_error or _log_error
        self._pending: set[asyncio.Task[bool]] = set()

    def __call__(self, _source: MarkupSource) -> None:
        if self.controller.done:
            return
        task = asyncio.get_running_loop().create_task(
            self.controller.trigger()
        )
        self._pending.add(task)
        task.add_done_callback(self._finished)

    def _finished(self, task: "asyncio.Task[bool]") -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.on_error(exc)

    def cancel_pending(self) -> None:
        for task in list(self._pending):
            task.cancel()
        self._pending.clear()
