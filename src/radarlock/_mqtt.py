"""Internal MQTT runtime for actuator health telemetry."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable
from typing import Any, cast

import paho.mqtt.client as mqtt

from radarlock.config import LockConfig
from radarlock.ingestion.health import parse_health_payload
from radarlock.models.health import HealthReading


class HealthMqttRuntime:
    """Threaded paho-mqtt runtime that emits health readings onto an asyncio loop."""

    def __init__(
        self,
        *,
        config: LockConfig,
        loop: asyncio.AbstractEventLoop,
        on_reading: Callable[[HealthReading], None],
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._loop = loop
        self._on_reading = on_reading
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        """Whether the MQTT runtime is actively running."""
        return self._running

    def _handle_payload(self, topic: str, payload: bytes) -> None:
        reading = parse_health_payload(payload)
        if reading is None:
            self._logger.debug("Ignoring unparseable health message on %s", topic)
            return
        self._logger.debug("Health reading topic=%s reading=%s", topic, reading)
        self._loop.call_soon_threadsafe(self._on_reading, reading)

    def start(self) -> None:
        """Connect to the configured broker and subscribe to the health topic."""
        config = self._config
        if not config.mqtt_host:
            raise ValueError("mqtt_host is not configured")
        self.stop()
        self._logger.debug(
            "MQTT runtime start requested host=%s port=%s topic=%s",
            config.mqtt_host,
            config.mqtt_port,
            config.mqtt_topic,
        )

        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=f"radarlock-{uuid.uuid4().hex[:12]}",
        )
        client.enable_logger(self._logger)
        if config.mqtt_username:
            client.username_pw_set(config.mqtt_username, config.mqtt_password)
        if config.mqtt_tls:
            client.tls_set()

        topic = config.mqtt_topic

        def on_connect(
            c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.is_failure:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                return
            self._logger.debug("MQTT connected, subscribing topic=%s", topic)
            c.subscribe(topic, qos=0)

        def on_message(_c: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
            try:
                self._handle_payload(msg.topic, msg.payload)
            except Exception:
                self._logger.debug("MQTT payload handling failure", exc_info=True)

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if self._running:
                self._logger.debug("MQTT disconnected: %s", reason_code)

        client.on_connect = on_connect
        client.on_message = on_message
        client.on_disconnect = on_disconnect

        client.connect(config.mqtt_host, config.mqtt_port, keepalive=config.mqtt_keepalive)
        client.loop_start()

        self._client = client
        self._running = True
        self._logger.debug("MQTT network loop started")

    def stop(self) -> None:
        """Stop and disconnect the current MQTT client if running."""
        client = self._client
        self._client = None
        was_running = self._running
        self._running = False

        if client is None:
            return
        try:
            if was_running:
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")
