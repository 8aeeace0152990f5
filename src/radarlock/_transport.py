"""HTTP transport for the radar track API."""

from __future__ import annotations

import json
import logging
from typing import Protocol

import aiohttp
from pydantic import ValidationError

from radarlock._constants import TRACKS_ENDPOINT, USER_AGENT
from radarlock.config import LockConfig
from radarlock.exceptions import RadarLockTransportError
from radarlock.ingestion.tracks import parse_tracks_response
from radarlock.models.track import TrackedObject

_logger = logging.getLogger(__name__)


class TrackSource(Protocol):
    """Structural interface for anything that yields radar snapshots.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`RadarTransport`) concrete.
    """

    async def fetch_tracks(self) -> list[TrackedObject]:
        ...


class RadarTransport:
    """Fetch track snapshots from the radar's HTTP API."""

    def __init__(self, config: LockConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def _url(self, endpoint: str) -> str:
        return f"{self._config.radar_base_url.rstrip('/')}{endpoint}"

    async def _get(self, endpoint: str) -> tuple[int, bytes]:
        url = self._url(endpoint)
        headers = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        _logger.debug("GET %s", url)
        try:
            async with self._http.get(url, headers=headers, timeout=self._timeout) as resp:
                return resp.status, await resp.read()
        except aiohttp.ClientError as exc:
            raise RadarLockTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc
        except TimeoutError as exc:
            raise RadarLockTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc

    async def fetch_tracks(self) -> list[TrackedObject]:
        """Fetch and parse the current track list.

        Raises
        ------
        RadarLockTransportError
            On network failure, timeout, non-200 status, a body that is not
            UTF-8 JSON, or a response without a ``result`` list.
        """
        endpoint = TRACKS_ENDPOINT
        status, raw = await self._get(endpoint)
        if status != 200:
            raise RadarLockTransportError(
                f"HTTP {status} from {endpoint}: {raw[:200].decode('utf-8', errors='replace')}",
                status_code=status,
                endpoint=endpoint,
            )

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise RadarLockTransportError(
                f"Invalid payload from {endpoint}: not UTF-8 ({exc.reason})",
                status_code=status,
                endpoint=endpoint,
            ) from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise RadarLockTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                status_code=status,
                endpoint=endpoint,
            ) from exc

        try:
            tracks = parse_tracks_response(body)
        except ValidationError as exc:
            raise RadarLockTransportError(
                f"Unexpected response shape from {endpoint}: {exc.errors()[:1]}",
                status_code=status,
                endpoint=endpoint,
            ) from exc

        _logger.debug("Fetched %d tracks from %s", len(tracks), endpoint)
        return tracks
