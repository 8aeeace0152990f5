"""Target-lock coordinator.

Owns the single lock slot. Snapshot updates, health readings, grace-timer
expiries and user lock/unlock requests are all pushed onto one queue and
processed sequentially by a single owner task, so state transitions never
interleave and no locking is needed.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import AsyncIterator, Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from radarlock._constants import EVENT_QUEUE_MAXSIZE
from radarlock.actuator import ActuatorBridge
from radarlock.config import LockConfig
from radarlock.exceptions import CoordinatorClosedError
from radarlock.models.command import FollowCommand
from radarlock.models.health import HealthReading
from radarlock.models.track import TrackedObject
from radarlock.state.battery import BatteryMonitor
from radarlock.state.events import LockEvent, LockEventKind
from radarlock.state.lock import CoordinatorSnapshot, LockState, VisibleTrack
from radarlock.state.policy import TrackView, classify_tracks, is_stale

_logger = logging.getLogger(__name__)

REASON_USER = "user request"
REASON_STALE_TIMEOUT = "stale timeout"
REASON_CRITICAL_BATTERY = "critical battery"
REASON_TARGET_LOST = "target lost"
REASON_SHUTDOWN = "shutdown"


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


# ------------------------------------------------------------------
# Queue messages
# ------------------------------------------------------------------


@dataclass
class _Request:
    done: asyncio.Future[Any] | None = field(default=None, kw_only=True)


@dataclass
class _LockRequest(_Request):
    track_id: str


@dataclass
class _UnlockRequest(_Request):
    reason: str


@dataclass
class _SnapshotUpdate(_Request):
    tracks: tuple[TrackedObject, ...]
    connected: bool


@dataclass
class _SourceError(_Request):
    message: str


@dataclass
class _HealthUpdate(_Request):
    reading: HealthReading


@dataclass
class _HealthError(_Request):
    message: str


@dataclass
class _GraceExpired(_Request):
    track_id: str
    generation: int


@dataclass
class _Shutdown(_Request):
    pass


class LockCoordinator:
    """Decide whether the actuator should keep following a locked track.

    Usage::

        async with LockCoordinator(config, actuator, on_event=print) as coordinator:
            await coordinator.update_snapshot(tracks)
            if await coordinator.lock("42"):
                ...

    All public operations are coroutines that return once the owner task
    has processed them.
    """

    def __init__(
        self,
        config: LockConfig,
        actuator: ActuatorBridge,
        *,
        on_event: Callable[[LockEvent], None] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._actuator = actuator
        self._on_event = on_event
        self._clock = clock

        self._lock = LockState()
        self._battery = BatteryMonitor(
            low_threshold=config.low_battery_threshold,
            critical_threshold=config.critical_battery_threshold,
        )
        self._tracks: dict[str, TrackView] = {}
        self._source_connected = False

        self._queue: asyncio.Queue[_Request] = asyncio.Queue()
        self._runner: asyncio.Task[None] | None = None
        self._closing = False
        self._grace_task: asyncio.Task[None] | None = None
        self._grace_generation = 0
        self._subscribers: list[asyncio.Queue[LockEvent]] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> LockCoordinator:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    @property
    def is_running(self) -> bool:
        return self._runner is not None and not self._runner.done()

    def start(self) -> None:
        """Start the owner task on the running event loop."""
        if self.is_running:
            return
        self._closing = False
        self._runner = asyncio.get_running_loop().create_task(self._run(), name="radarlock-coordinator")

    async def close(self) -> None:
        """Cancel timers, unlock with reason ``"shutdown"`` and stop the owner task."""
        runner = self._runner
        if runner is None or runner.done():
            self._runner = None
            return
        if not self._closing:
            self._closing = True
            await self._submit_unchecked(_Shutdown())
        await runner
        self._runner = None

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def lock(self, track_id: str) -> bool:
        """Lock ``track_id``. Returns ``False`` if it is absent or stale."""
        accepted: bool = await self._submit(_LockRequest(track_id=track_id))
        return accepted

    async def unlock(self, reason: str = REASON_USER) -> None:
        """Release the current lock. A no-op when nothing is locked."""
        await self._submit(_UnlockRequest(reason=reason))

    async def update_snapshot(self, tracks: Iterable[TrackedObject], *, connected: bool = True) -> None:
        """Apply a fresh radar snapshot."""
        await self._submit(_SnapshotUpdate(tracks=tuple(tracks), connected=connected))

    async def report_source_error(self, message: str) -> None:
        """Record a failed poll. Last-known tracks and the lock are kept."""
        await self._submit(_SourceError(message=message))

    async def update_health(self, reading: HealthReading) -> None:
        """Apply an actuator health reading."""
        await self._submit(_HealthUpdate(reading=reading))

    async def report_health_error(self, message: str) -> None:
        """Record that the health feed failed. Health is marked disconnected."""
        await self._submit(_HealthError(message=message))

    def snapshot(self) -> CoordinatorSnapshot:
        lock = self._lock
        return CoordinatorSnapshot(
            phase=lock.phase,
            locked_track_id=lock.locked_track_id,
            is_stale=lock.stale_grace_active,
            is_tracking=lock.is_tracking,
            locked_at=lock.locked_at,
            stale_since=lock.stale_since,
            source_connected=self._source_connected,
            health=self._battery.snapshot,
            tracks=tuple(
                VisibleTrack(track=view.track, is_stale=view.is_stale, is_locked=view.id == lock.locked_track_id)
                for view in self._tracks.values()
            ),
        )

    @property
    def locked_track_id(self) -> str | None:
        return self._lock.locked_track_id

    @property
    def is_stale(self) -> bool:
        return self._lock.stale_grace_active

    @property
    def is_tracking(self) -> bool:
        return self._lock.is_tracking

    # ------------------------------------------------------------------
    # Event stream
    # ------------------------------------------------------------------

    def subscribe(self, maxsize: int = EVENT_QUEUE_MAXSIZE) -> asyncio.Queue[LockEvent]:
        """Return a queue that receives every event emitted from now on.

        The queue holds at most ``maxsize`` events; when a subscriber falls
        behind, the oldest event is dropped. Call :meth:`unsubscribe` when
        done.
        """
        queue: asyncio.Queue[LockEvent] = asyncio.Queue(maxsize=maxsize)
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[LockEvent]) -> None:
        self._subscribers = [cand for cand in self._subscribers if cand is not queue]

    async def events(self) -> AsyncIterator[LockEvent]:
        """Iterate over events until the consumer stops."""
        queue = self.subscribe()
        try:
            while True:
                yield await queue.get()
        finally:
            self.unsubscribe(queue)

    def _emit(self, kind: LockEventKind, **fields: Any) -> LockEvent:
        event = LockEvent(kind=kind, **fields)
        if kind in (LockEventKind.ERROR, LockEventKind.TARGET_LOST, LockEventKind.STALE_AUTO_UNLOCK):
            _logger.warning("Lock event: %s", event)
        else:
            _logger.info("Lock event: %s", event)
        if self._on_event is not None:
            try:
                self._on_event(event)
            except Exception:
                _logger.error("Lock event callback failed for %s", kind, exc_info=True)
        for queue in self._subscribers:
            if queue.full():
                dropped = queue.get_nowait()
                _logger.debug("Event subscriber is behind, dropping %s", dropped.kind)
            queue.put_nowait(event)
        return event

    # ------------------------------------------------------------------
    # Owner loop
    # ------------------------------------------------------------------

    async def _submit(self, request: _Request) -> Any:
        if self._closing or not self.is_running:
            raise CoordinatorClosedError("Coordinator is not running. Use 'async with LockCoordinator(...)'")
        return await self._submit_unchecked(request)

    async def _submit_unchecked(self, request: _Request) -> Any:
        request.done = asyncio.get_running_loop().create_future()
        self._queue.put_nowait(request)
        return await request.done

    async def _run(self) -> None:
        while True:
            request = await self._queue.get()
            result: Any = None
            try:
                result = await self._dispatch(request)
            except Exception as exc:
                _logger.exception("Unhandled error while processing %s", type(request).__name__)
                self._emit(LockEventKind.ERROR, message=f"Internal error: {exc}")
                if isinstance(request, _LockRequest):
                    result = False
            finally:
                if request.done is not None and not request.done.done():
                    request.done.set_result(result)
            if isinstance(request, _Shutdown):
                self._fail_pending()
                return

    def _fail_pending(self) -> None:
        while not self._queue.empty():
            pending = self._queue.get_nowait()
            if pending.done is not None and not pending.done.done():
                pending.done.set_exception(CoordinatorClosedError("Coordinator shut down"))

    async def _dispatch(self, request: _Request) -> Any:
        if isinstance(request, _SnapshotUpdate):
            await self._handle_snapshot(request.tracks, request.connected)
        elif isinstance(request, _HealthUpdate):
            await self._handle_health(request.reading)
        elif isinstance(request, _HealthError):
            self._handle_health_error(request.message)
        elif isinstance(request, _GraceExpired):
            await self._handle_grace_expired(request.track_id, request.generation)
        elif isinstance(request, _LockRequest):
            return await self._handle_lock(request.track_id)
        elif isinstance(request, _UnlockRequest):
            await self._release(request.reason)
        elif isinstance(request, _SourceError):
            self._handle_source_error(request.message)
        elif isinstance(request, _Shutdown):
            self._cancel_grace_timer()
            await self._release(REASON_SHUTDOWN)
        return None

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def _handle_lock(self, track_id: str) -> bool:
        view = self._tracks.get(track_id)
        if view is None:
            self._emit(LockEventKind.ERROR, track_id=track_id, message=f"Cannot lock track {track_id}: not visible")
            return False
        now = self._clock()
        if is_stale(now, view.track.last_update, self._config.stale_timeout):
            self._emit(LockEventKind.ERROR, track_id=track_id, message="Cannot lock stale track")
            return False
        if self._battery.critical:
            self._emit(LockEventKind.ERROR, track_id=track_id, message="Cannot lock track: battery critical")
            return False

        self._cancel_grace_timer()
        previous = self._lock.locked_track_id
        if previous is not None and previous != track_id:
            _logger.info("Switching lock from track %s to %s", previous, track_id)
        self._lock.acquire(track_id, now)
        await self._send_follow(view.track)
        self._emit(LockEventKind.TRACK_LOCKED, track_id=track_id)
        return True

    async def _handle_snapshot(self, tracks: tuple[TrackedObject, ...], connected: bool) -> None:
        now = self._clock()
        self._tracks = classify_tracks(
            tracks,
            now=now,
            stale_timeout=self._config.stale_timeout,
            removal_timeout=self._config.stale_removal_timeout,
        )
        if connected != self._source_connected:
            _logger.info("Track source %s", "connected" if connected else "disconnected")
        self._source_connected = connected

        lock = self._lock
        track_id = lock.locked_track_id
        if track_id is None:
            return

        # Absent dominates stale, stale dominates active.
        view = self._tracks.get(track_id)
        if view is None:
            await self._release(REASON_TARGET_LOST, lost=True)
            return
        if view.is_stale:
            if not lock.stale_grace_active:
                lock.mark_stale(now)
                grace = self._config.stale_grace_duration
                self._start_grace_timer(track_id, grace)
                self._emit(LockEventKind.TRACK_STALE, track_id=track_id, grace_seconds_remaining=grace)
            return
        if lock.stale_grace_active:
            self._cancel_grace_timer()
            lock.mark_recovered()
            self._emit(LockEventKind.TRACK_RECOVERED, track_id=track_id)
        await self._send_follow(view.track)

    def _handle_source_error(self, message: str) -> None:
        if self._source_connected:
            _logger.info("Track source disconnected")
        self._source_connected = False
        self._emit(LockEventKind.ERROR, message=message)

    async def _handle_health(self, reading: HealthReading) -> None:
        alerts = self._battery.observe(reading)
        percent = reading.battery_percent
        if alerts.low:
            self._emit(LockEventKind.LOW_BATTERY, battery_percent=percent)
        if alerts.critical:
            self._emit(LockEventKind.CRITICAL_BATTERY, battery_percent=percent)
            await self._release(REASON_CRITICAL_BATTERY)

    def _handle_health_error(self, message: str) -> None:
        self._battery.mark_disconnected()
        self._emit(LockEventKind.ERROR, message=message)

    async def _handle_grace_expired(self, track_id: str, generation: int) -> None:
        lock = self._lock
        if (
            generation != self._grace_generation
            or lock.locked_track_id != track_id
            or not lock.stale_grace_active
        ):
            _logger.debug("Ignoring outdated grace expiry for track %s", track_id)
            return
        self._grace_task = None
        self._emit(LockEventKind.STALE_AUTO_UNLOCK, track_id=track_id)
        await self._release(REASON_STALE_TIMEOUT)

    async def _release(self, reason: str, *, lost: bool = False) -> None:
        """Single exit path to ``UNLOCKED``."""
        track_id = self._lock.locked_track_id
        if track_id is None:
            return
        _logger.debug("Releasing lock on track %s (reason: %s)", track_id, reason)
        self._cancel_grace_timer()
        self._lock.clear()
        await self._stop_and_hold()
        if lost:
            self._emit(LockEventKind.TARGET_LOST, track_id=track_id)
        else:
            self._emit(LockEventKind.TRACK_UNLOCKED, track_id=track_id, reason=reason)

    # ------------------------------------------------------------------
    # Grace timer
    # ------------------------------------------------------------------

    def _start_grace_timer(self, track_id: str, duration: float) -> None:
        self._cancel_grace_timer()
        generation = self._grace_generation
        self._grace_task = asyncio.get_running_loop().create_task(
            self._grace_timer(track_id, generation, duration),
            name=f"radarlock-grace-{track_id}",
        )

    def _cancel_grace_timer(self) -> None:
        # Bumping the generation also invalidates an expiry already queued.
        self._grace_generation += 1
        task = self._grace_task
        self._grace_task = None
        if task is not None and not task.done():
            task.cancel()

    async def _grace_timer(self, track_id: str, generation: int, duration: float) -> None:
        with contextlib.suppress(asyncio.CancelledError):
            await asyncio.sleep(duration)
            self._queue.put_nowait(_GraceExpired(track_id=track_id, generation=generation))

    # ------------------------------------------------------------------
    # Actuator commands
    # ------------------------------------------------------------------

    async def _send_follow(self, track: TrackedObject) -> None:
        command = FollowCommand.from_track(track, issued_at=self._clock())
        try:
            await asyncio.wait_for(self._actuator.send_target(command), self._config.actuator_timeout)
        except Exception as exc:
            self._lock.is_tracking = False
            _logger.warning("Failed to send follow command for track %s: %s", track.id, _describe(exc))
            self._emit(LockEventKind.ERROR, track_id=track.id, message=f"Failed to send target: {_describe(exc)}")
            return
        self._lock.is_tracking = True

    async def _stop_and_hold(self) -> None:
        try:
            await asyncio.wait_for(self._actuator.stop_and_hold(), self._config.actuator_timeout)
        except Exception as exc:
            _logger.warning("Failed to stop actuator: %s", _describe(exc))
            self._emit(LockEventKind.ERROR, message=f"Failed to stop actuator: {_describe(exc)}")
