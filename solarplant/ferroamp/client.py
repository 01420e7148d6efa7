"""MQTT client for the external API of a Ferroamp energy hub."""

from __future__ import annotations

import json
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from paho.mqtt import client as mqtt

from solarplant.ferroamp.messages import (
    ESO_FAULT_CODES,
    ControlEventMessage,
    ControlResponseMessage,
    EhubMessage,
    EsmMessage,
    EsoMessage,
    SsoMessage,
)

log = logging.getLogger(__name__)

CLIENT_ID = "solarplant"
TRANS_ID_PREFIX = "solarplant-"

TOPIC_EHUB = "extapi/data/ehub"
TOPIC_SSO = "extapi/data/sso"
TOPIC_ESO = "extapi/data/eso"
TOPIC_ESM = "extapi/data/esm"
TOPIC_CONTROL_RESPONSE = "extapi/control/response"
TOPIC_CONTROL_EVENT = "extapi/control/event"
TOPIC_CONTROL_REQUEST = "extapi/control/request"

SUBSCRIBED_TOPICS = (
    TOPIC_EHUB,
    TOPIC_SSO,
    TOPIC_ESO,
    TOPIC_ESM,
    TOPIC_CONTROL_RESPONSE,
    TOPIC_CONTROL_EVENT,
)


@dataclass
class _PendingRequest:
    trans_id: str
    payload: str
    sent_at: float
    done: threading.Event = field(default_factory=threading.Event)
    responded: bool = False


class Ferroamp:
    """Receives live data from a Ferroamp system and sends battery control requests."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        *,
        client: Any = None,
        publish_timeout: float = 5.0,
        response_timeout: float = 30.0,
        purge_interval: float = 60.0,
        purge_max_age: float = 60.0,
    ) -> None:
        self.host = host
        self.port = port
        self.publish_timeout = publish_timeout
        self.response_timeout = response_timeout
        self.purge_interval = purge_interval
        self.purge_max_age = purge_max_age

        self.on_ehub_message: Callable[[EhubMessage], None] | None = None
        self.on_sso_message: Callable[[SsoMessage], None] | None = None
        self.on_eso_message: Callable[[EsoMessage], None] | None = None
        self.on_esm_message: Callable[[EsmMessage], None] | None = None
        self.on_control_response: Callable[[ControlResponseMessage], None] | None = None
        self.on_control_event: Callable[[ControlEventMessage], None] | None = None

        self._pending: dict[str, _PendingRequest] = {}
        self._pending_lock = threading.Lock()
        self._last_eso_fault_code = 0
        self._last_sso_fault_code = 0
        self._stop_purge: threading.Event | None = None
        self._purge_thread: threading.Thread | None = None
        self._stopping = False

        if client is None:
            client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=CLIENT_ID)
        self._client = client
        self._client.username_pw_set(username, password)
        self._client.on_connect = self._on_connect
        self._client.on_disconnect = self._on_disconnect
        self._client.on_message = self._on_message

    # Connection handling

    def connect(self) -> None:
        """Connect to the broker, subscribe to the API topics and start background work."""
        log.debug("connecting ferroamp MQTT client")
        self._stopping = False
        self._client.connect(self.host, self.port)
        self._client.loop_start()
        self._start_purge_routine()

    def disconnect(self) -> None:
        """Stop background work and disconnect from the broker."""
        log.info("disconnecting Ferroamp MQTT client")
        self._stopping = True
        if self._stop_purge is not None:
            self._stop_purge.set()
        self._client.disconnect()
        self._client.loop_stop()
        if self._purge_thread is not None and self._purge_thread is not threading.current_thread():
            self._purge_thread.join(timeout=1.0)
        self._purge_thread = None
        self._stop_purge = None

    def _on_connect(self, client, userdata, flags, reason_code, properties=None) -> None:
        if getattr(reason_code, "is_failure", False):
            log.warning("ferroamp MQTT connection refused: %s", reason_code)
            return
        log.info("ferroamp MQTT connected")
        client.subscribe([(topic, 0) for topic in SUBSCRIBED_TOPICS])

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None) -> None:
        if not self._stopping:
            log.warning("ferroamp MQTT connection lost: %s", reason_code)

    def _on_message(self, client, userdata, msg) -> None:
        self.handle_message(msg.topic, msg.payload)

    # Incoming messages

    @staticmethod
    def _decode(cls, payload, error_message: str):
        try:
            return cls.from_json(payload)
        except (ValueError, TypeError) as err:
            log.error("%s: %s", error_message, err)
            return None

    def handle_message(self, topic: str, payload: str | bytes) -> None:
        """Decode a message received on ``topic`` and pass it on."""
        if topic == TOPIC_EHUB:
            ehub = self._decode(EhubMessage, payload, "error when reading EHUB message")
            if ehub is not None and self.on_ehub_message is not None:
                self.on_ehub_message(ehub)

        elif topic == TOPIC_SSO:
            sso = self._decode(SsoMessage, payload, "error when reading SSO message")
            if sso is not None and self.on_sso_message is not None:
                self.on_sso_message(sso)
            fault_code = (sso.fault_code if sso is not None else 0) & 0xFFFF
            if fault_code > 0 and fault_code != self._last_sso_fault_code:
                log.warning(
                    "fault code from SSO, please contact ferroamp support "
                    "(faultCode=%d, lastFaultCode=%d)",
                    fault_code,
                    self._last_sso_fault_code,
                )
            self._last_sso_fault_code = fault_code

        elif topic == TOPIC_ESO:
            eso = self._decode(EsoMessage, payload, "error when reading ESO message")
            if eso is not None and self.on_eso_message is not None:
                self.on_eso_message(eso)
            self.handle_eso_fault_code(eso.fault_code if eso is not None else 0)

        elif topic == TOPIC_ESM:
            esm = self._decode(EsmMessage, payload, "error when reading ESM message")
            if esm is not None and self.on_esm_message is not None:
                self.on_esm_message(esm)

        elif topic == TOPIC_CONTROL_RESPONSE:
            response = self._decode(
                ControlResponseMessage, payload, "error when reading control response"
            )
            if response is not None:
                self._handle_control_response(response)

        elif topic == TOPIC_CONTROL_EVENT:
            event = self._decode(ControlEventMessage, payload, "error when reading event")
            if event is not None:
                log.info("received control event: %s", event)
                if self.on_control_event is not None:
                    self.on_control_event(event)

        else:
            log.warning("unknown topic: %s", topic)

    def _handle_control_response(self, response: ControlResponseMessage) -> None:
        with self._pending_lock:
            pending = self._pending.get(response.trans_id)
            if pending is not None:
                pending.responded = True
                pending.done.set()
        if pending is not None:
            log.debug(
                "received response for known transaction %s after %.3fs",
                response.trans_id,
                time.monotonic() - pending.sent_at,
            )
        elif response.trans_id.startswith(TRANS_ID_PREFIX):
            log.warning("received response for unknown transaction %s", response.trans_id)
        else:
            log.info(
                "received response for another client %s: %s",
                response.trans_id,
                response.message,
            )
        if self.on_control_response is not None:
            self.on_control_response(response)

    def handle_eso_fault_code(self, fault_code: int) -> list[int]:
        """Log raised and cleared ESO fault bits; return the newly raised bits."""
        fault_code &= 0xFFFF
        last = self._last_eso_fault_code
        if fault_code == last:
            return []
        raised = []
        for bit, description in sorted(ESO_FAULT_CODES.items()):
            hex_code = f"0x{bit:04x}"
            if not last & bit and fault_code & bit:
                raised.append(bit)
                log.warning("new fault code (%s) from ESO: %s", hex_code, description)
            if last & bit and not fault_code & bit:
                log.debug("cleared fault code (%s) from ESO", hex_code)
        self._last_eso_fault_code = fault_code
        return raised

    # Control requests

    @staticmethod
    def _new_trans_id() -> str:
        return f"{TRANS_ID_PREFIX}{int(time.time())}"

    def format_payload(self, power: float) -> tuple[str, str]:
        """Transaction id and request payload for a battery load in kW.

        Zero or negative power charges, positive power discharges.
        """
        watts = int(abs(power * 1e3))
        trans_id = self._new_trans_id()
        name = "charge" if power <= 0 else "discharge"
        payload = json.dumps(
            {"transId": trans_id, "cmd": {"name": name, "arg": str(watts)}},
            separators=(",", ":"),
        )
        return trans_id, payload

    def set_battery_auto(self) -> bool:
        """Let the system control the battery; True when a response arrived."""
        trans_id = self._new_trans_id()
        payload = json.dumps(
            {"transId": trans_id, "cmd": {"name": "auto"}}, separators=(",", ":")
        )
        log.info("setting ferroamp battery in auto mode: %s", payload)
        return self._send_control_request(trans_id, payload)

    def set_battery_load(self, power: float) -> bool:
        """Set the battery load in kW (positive discharges); True when a response arrived."""
        trans_id, payload = self.format_payload(power)
        log.info("sending new battery load to ferroamp (power=%s): %s", power, payload)
        return self._send_control_request(trans_id, payload)

    def _send_control_request(self, trans_id: str, payload: str) -> bool:
        pending = _PendingRequest(trans_id, payload, time.monotonic())
        with self._pending_lock:
            self._pending[trans_id] = pending
        try:
            info = self._client.publish(TOPIC_CONTROL_REQUEST, payload, qos=0, retain=False)
            if info.rc != mqtt.MQTT_ERR_SUCCESS:
                raise ConnectionError(
                    "error when sending battery control request to ferroamp: "
                    f"{mqtt.error_string(info.rc)}"
                )
            try:
                info.wait_for_publish(timeout=self.publish_timeout)
            except (RuntimeError, ValueError) as err:
                raise ConnectionError(
                    f"error when sending battery control request to ferroamp: {err}"
                ) from err
            if not info.is_published():
                raise TimeoutError("timeout when sending battery control request to ferroamp")
        except BaseException:
            with self._pending_lock:
                self._pending.pop(trans_id, None)
            raise

        log.debug("successfully sent battery control request to ferroamp, waiting for ack/nak...")
        if not pending.done.wait(self.response_timeout):
            log.warning("pending request timed out: %s", trans_id)
        return pending.responded

    def purge_pending(self, max_age: float) -> int:
        """Forget requests older than ``max_age`` seconds; return how many were dropped."""
        now = time.monotonic()
        with self._pending_lock:
            expired = [p for p in self._pending.values() if now - p.sent_at > max_age]
            for pending in expired:
                del self._pending[pending.trans_id]
        for pending in expired:
            log.debug(
                "purging previous request %s after %.1fs",
                pending.trans_id,
                now - pending.sent_at,
            )
            pending.done.set()
        return len(expired)

    def _start_purge_routine(self) -> None:
        if self._purge_thread is not None:
            return
        stop = threading.Event()
        self._stop_purge = stop
        self._purge_thread = threading.Thread(
            target=self._purge_loop, args=(stop,), name="ferroamp-purge", daemon=True
        )
        self._purge_thread.start()

    def _purge_loop(self, stop: threading.Event) -> None:
        while not stop.wait(self.purge_interval):
            self.purge_pending(self.purge_max_age)
        log.debug("stopping purge routine")