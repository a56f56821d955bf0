"""RefreshCoordinator — serializes fetch → build → render cycles.

States
------
``IDLE``        waiting for a trigger
``REFRESHING``  one pipeline is running; further triggers are dropped
``STOPPED``     quit was requested; terminal, nothing is processed

Triggers come from two threads: the timer thread (periodic ticks plus the
startup refresh) and the event thread (resize and manual refresh from the
presenter).  The ``IDLE -> REFRESHING`` transition is taken by a
non-blocking acquire of a single-slot lock, so whichever trigger gets there
first runs the pipeline and any trigger arriving meanwhile is discarded
rather than queued.  All presenter writes happen while that lock is held.

Quit stops the timer and ends the run loop, but never interrupts a
pipeline that is already in flight; ``run`` joins the timer thread before
returning so such a pipeline can complete.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from datetime import timedelta
from enum import Enum

from monocle.core.build_fetcher import BuildFetcher, FetchError
from monocle.models.project import ProjectRef
from monocle.monitor.presenter import Presenter, PresenterEvent
from monocle.monitor.projection import DisplayModelBuilder

logger = logging.getLogger(__name__)


class RefreshState(str, Enum):
    """Lifecycle state of the coordinator."""

    IDLE = "idle"
    REFRESHING = "refreshing"
    STOPPED = "stopped"


class Trigger(str, Enum):
    """Why a refresh was requested."""

    STARTUP = "startup"
    TIMER = "timer"
    RESIZE = "resize"
    MANUAL = "manual"


class RefreshCoordinator:
    """Owns the timer, resize and quit lifecycle of the dashboard.

    Parameters
    ----------
    ref:
        The project being watched, resolved once at startup.
    fetcher:
        Queries CircleCI for the project's recent builds.
    builder:
        Projects raw builds into a display model.
    presenter:
        Draws display models; its writes are serialized by this class.
    interval:
        Time between periodic refreshes.
    """

    def __init__(
        self,
        ref: ProjectRef,
        fetcher: BuildFetcher,
        builder: DisplayModelBuilder,
        presenter: Presenter,
        interval: timedelta,
    ) -> None:
        if interval <= timedelta(0):
            raise ValueError("refresh interval must be positive")
        if interval.total_seconds() > threading.TIMEOUT_MAX:
            raise ValueError("refresh interval exceeds threading.TIMEOUT_MAX")
        self._ref = ref
        self._fetcher = fetcher
        self._builder = builder
        self._presenter = presenter
        self._interval = interval.total_seconds()

        self._refresh_slot = threading.Lock()  # held for the whole pipeline
        self._state_lock = threading.Lock()  # guards _state and counters
        self._state = RefreshState.IDLE
        self._stopped = threading.Event()
        self._timer: threading.Thread | None = None

        self.refresh_count = 0
        self.dropped_count = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> RefreshState:
        with self._state_lock:
            return self._state

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def request_refresh(self, trigger: Trigger = Trigger.MANUAL) -> bool:
        """Run one refresh cycle if the coordinator is idle.

        Returns ``True`` if the pipeline ran, ``False`` if the trigger was
        dropped because a cycle was already in flight or the coordinator
        has stopped.
        """
        if not self._refresh_slot.acquire(blocking=False):
            with self._state_lock:
                self.dropped_count += 1
            logger.debug("Refresh (%s) dropped: cycle already in flight", trigger.value)
            return False

        try:
            with self._state_lock:
                if self._state is RefreshState.STOPPED:
                    return False
                self._state = RefreshState.REFRESHING

            try:
                self._run_pipeline(clear=trigger is Trigger.RESIZE)
            finally:
                with self._state_lock:
                    # A quit during the cycle keeps the coordinator STOPPED.
                    if self._state is RefreshState.REFRESHING:
                        self._state = RefreshState.IDLE
                    self.refresh_count += 1
            return True
        finally:
            self._refresh_slot.release()

    def quit(self) -> None:
        """Stop the timer and end the run loop; idempotent."""
        with self._state_lock:
            if self._state is RefreshState.STOPPED:
                return
            self._state = RefreshState.STOPPED
        self._stopped.set()
        logger.info("Quit requested, stopping refresh loop")

    def handle_event(self, event: PresenterEvent) -> None:
        """Dispatch a single presenter event."""
        if event is PresenterEvent.QUIT:
            self.quit()
        elif event is PresenterEvent.RESIZE:
            self.request_refresh(Trigger.RESIZE)
        elif event is PresenterEvent.REFRESH:
            self.request_refresh(Trigger.MANUAL)

    # ------------------------------------------------------------------
    # Run loop
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the timer thread, which performs the startup refresh first."""
        if self._timer is not None:
            return
        self._timer = threading.Thread(
            target=self._tick_loop, name="monocle-refresh-timer", daemon=True
        )
        self._timer.start()

    def run(self, events: Iterable[PresenterEvent]) -> None:
        """Consume *events* until quit, then wait for the timer thread.

        ``KeyboardInterrupt`` (Ctrl-C delivered as a signal) is treated as
        a quit request.
        """
        self.start()
        try:
            for event in events:
                self.handle_event(event)
                if self.stopped:
                    break
        except KeyboardInterrupt:
            logger.info("Interrupted")
        finally:
            self.quit()
            self.join()

    def join(self, timeout: float | None = None) -> None:
        """Wait for the timer thread (and any pipeline it is running)."""
        if self._timer is not None:
            self._timer.join(timeout)

    def _tick_loop(self) -> None:
        self._tick(Trigger.STARTUP)
        while not self._stopped.wait(self._interval):
            self._tick(Trigger.TIMER)

    def _tick(self, trigger: Trigger) -> None:
        # Nothing on this thread can report to the user; log and keep ticking.
        try:
            self.request_refresh(trigger)
        except Exception:  # noqa: BLE001
            logger.exception("Refresh (%s) failed", trigger.value)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _run_pipeline(self, *, clear: bool) -> None:
        """fetch -> build -> render; called only while holding the slot."""
        try:
            raws = self._fetcher.fetch(self._ref)
        except FetchError as exc:
            logger.error("%s; keeping previous render", exc)
            return

        model = self._builder.build(self._ref, raws)
        if clear:
            self._presenter.clear()
        self._presenter.render(model)
        logger.debug("Rendered %d builds for %s", len(model.rows), self._ref.slug)
