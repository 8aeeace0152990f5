"""Ingestion layer.

Adapters that turn raw radar HTTP payloads and actuator telemetry messages
into validated domain objects.
"""

__all__: list[str] = []
