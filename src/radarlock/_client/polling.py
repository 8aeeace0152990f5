"""Internal radar polling loop for RadarLockClient."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Protocol

from radarlock._transport import TrackSource
from radarlock.exceptions import CoordinatorClosedError, RadarLockTransportError
from radarlock.models.track import TrackedObject

_logger = logging.getLogger(__name__)


class SnapshotSink(Protocol):
    async def update_snapshot(self, tracks: list[TrackedObject], *, connected: bool = True) -> None: ...

    async def report_source_error(self, message: str) -> None: ...


class SnapshotPoller:
    """Poll a track source at a fixed interval and feed the coordinator.

    A failed poll is reported as a source error; the coordinator keeps the
    last-known tracks until the next successful poll.
    """

    def __init__(
        self,
        *,
        source: TrackSource,
        sink: SnapshotSink,
        poll_interval: float,
    ) -> None:
        self._source = source
        self._sink = sink
        self._poll_interval = poll_interval
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def poll_once(self) -> bool:
        """Run one poll. Returns ``True`` when the source answered."""
        try:
            tracks = await self._source.fetch_tracks()
        except RadarLockTransportError as exc:
            _logger.debug("Radar poll failed: %s", exc)
            await self._sink.report_source_error(f"Radar poll failed: {exc}")
            return False
        except Exception as exc:
            _logger.exception("Unexpected error while fetching radar tracks")
            await self._sink.report_source_error(f"Radar poll failed: {type(exc).__name__}: {exc}")
            return False
        await self._sink.update_snapshot(tracks, connected=True)
        return True

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop(), name="radarlock-poller")

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _loop(self) -> None:
        _logger.debug("Radar polling started (interval %.1fs)", self._poll_interval)
        while True:
            try:
                await self.poll_once()
            except CoordinatorClosedError:
                _logger.debug("Coordinator closed, polling stopped")
                return
            except Exception as exc:
                _logger.exception("Unexpected error while polling radar")
                try:
                    await self._sink.report_source_error(f"Radar poll failed: {type(exc).__name__}: {exc}")
                except CoordinatorClosedError:
                    return
            await asyncio.sleep(self._poll_interval)
