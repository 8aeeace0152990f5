#!/usr/bin/env python3
"""Live probe for the radar lock coordinator.

Polls the configured radar, prints every coordinator event and, when a
track id is given, locks it against a dry-run actuator that only logs the
follow commands it would have sent.

Configuration comes from ``RADARLOCK_*`` environment variables; see
``radarlock.config.LockConfig.from_env``.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from radarlock import (  # noqa: E402
    FollowCommand,
    HealthReading,
    LockConfig,
    LockEvent,
    RadarLockClient,
    RadarLockError,
)


@dataclass
class DryRunActuator:
    """Actuator that records commands instead of moving anything."""

    sent: list[FollowCommand] = field(default_factory=list)
    holds: int = 0

    async def send_target(self, command: FollowCommand) -> None:
        self.sent.append(command)
        print(
            f"[probe] follow track={command.track_id} "
            f"lat={command.latitude:.6f} lon={command.longitude:.6f} alt={command.altitude:.1f}"
        )

    async def stop_and_hold(self) -> None:
        self.holds += 1
        print("[probe] stop and hold")

    async def health_readings(self) -> AsyncIterator[HealthReading]:
        # Dry run has no telemetry; park until cancelled.
        await asyncio.Event().wait()
        yield HealthReading()


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Poll a radar and print lock coordinator events.",
    )
    parser.add_argument(
        "--track",
        default=None,
        help="Track id to lock once it becomes visible.",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=0,
        help="Maximum runtime in seconds (0 = run until Ctrl+C).",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Radar base URL (overrides RADARLOCK_RADAR_BASE_URL).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args()


def _print_event(event: LockEvent) -> None:
    print(f"[probe] {event.observed_at:%H:%M:%S} {event}")


async def _run(args: argparse.Namespace) -> int:
    overrides = {"radar_base_url": args.base_url} if args.base_url else {}
    try:
        config = LockConfig.from_env(**overrides)
    except RadarLockError as exc:
        print(f"[probe] Invalid configuration: {exc}", file=sys.stderr)
        return 2

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:  # pragma: no cover - Windows
            pass

    actuator = DryRunActuator()
    async with RadarLockClient(config, actuator, on_event=_print_event) as client:
        try:
            count = await client.test_connection()
        except RadarLockError as exc:
            print(f"[probe] Radar unreachable at {config.radar_base_url}: {exc}", file=sys.stderr)
            return 2
        print(f"[probe] Radar at {config.radar_base_url} reports {count} tracks")

        locked = args.track is None
        deadline = loop.time() + args.duration if args.duration > 0 else None
        while not stop.is_set():
            if deadline is not None and loop.time() >= deadline:
                break
            visible = {view.track.id for view in client.snapshot().tracks}
            if not locked and args.track in visible:
                locked = await client.lock(args.track)
            try:
                await asyncio.wait_for(stop.wait(), timeout=config.poll_interval)
            except TimeoutError:
                pass

        snap = client.snapshot()
        print(f"[probe] Final phase={snap.phase} locked={snap.locked_track_id} tracks={len(snap.tracks)}")

    print(f"[probe] Commands sent: {len(actuator.sent)}, holds: {actuator.holds}")
    return 0


def main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
