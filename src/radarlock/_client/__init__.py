"""Internal helpers used by :class:`radarlock.client.RadarLockClient`."""
