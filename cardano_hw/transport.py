"""Request/acknowledge channel to the signing device.

Every device exchange is a single typed call: send one message, block until the
reply arrives, and insist that the reply carries the expected message type.
Nothing is pipelined; a caller never has more than one message in flight.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import requests
from requests import RequestException

from .config import BridgeConfig, load_bridge_config
from .messages import FAILURE

logger = logging.getLogger(__name__)


class TypedCall(Protocol):
    def __call__(
        self, message_type: str, expected_type: str, payload: Any
    ) -> dict[str, Any]:
        ...


class TransportError(RuntimeError):
    """Raised when a message could not be delivered or acknowledged."""


class UnexpectedMessageError(TransportError):
    """Raised when the device answers with a different message type."""

    def __init__(self, expected: str, received: str) -> None:
        super().__init__(f"Expected {expected} response, got {received}")
        self.expected = expected
        self.received = received


class DeviceFailureError(TransportError):
    """Raised when the device rejects a message with a ``Failure`` reply."""

    def __init__(self, code: Any, message: str) -> None:
        super().__init__(f"Device failure {code}: {message}")
        self.code = code
        self.message = message


class BridgeTransport:
    """Synchronous client for a local bridge relaying messages to the device.

    Each call posts ``{"type": ..., "message": ...}`` to
    ``<base_url>/call/<session>`` and returns the ``message`` of the reply once
    its ``type`` matches the expected acknowledgement. Session acquisition and
    release happen outside this client.
    """

    def __init__(self, config: BridgeConfig) -> None:
        self.config = config
        self._session = requests.Session()

    @classmethod
    def from_env(cls) -> "BridgeTransport":
        """Instantiate a transport using environment variables or config file."""

        return cls(load_bridge_config())

    @property
    def _url(self) -> str:
        return f"{self.config.base_url}/call/{self.config.session}"

    def typed_call(
        self, message_type: str, expected_type: str, payload: Any
    ) -> dict[str, Any]:
        """Send one message and return the payload of its expected reply."""

        logger.debug("Sending %s expecting %s", message_type, expected_type)
        try:
            response = self._session.post(
                self._url,
                json={"type": message_type, "message": payload},
                timeout=self.config.timeout,
            )
            response.raise_for_status()
        except RequestException as exc:
            logger.error(
                "Bridge call %s failed: %s",
                message_type,
                exc,
                exc_info=logger.isEnabledFor(logging.DEBUG),
            )
            raise TransportError(
                f"Bridge call {message_type} failed. Ensure the bridge is running at "
                f"{self.config.base_url} and session {self.config.session} is still acquired."
            ) from exc

        try:
            reply = response.json()
        except ValueError as exc:
            logger.debug("Bridge JSON parse error: %s", response.text, exc_info=True)
            raise TransportError("Bridge returned malformed JSON") from exc
        if not isinstance(reply, dict):
            raise TransportError("Bridge reply must be a JSON object")

        reply_type = reply.get("type")
        message = reply.get("message")
        if message is None:
            message = {}
        if not isinstance(message, dict):
            raise TransportError("Bridge reply message must be a JSON object")
        if reply_type == FAILURE:
            raise DeviceFailureError(message.get("code"), message.get("message", "unknown"))
        if reply_type != expected_type:
            raise UnexpectedMessageError(expected_type, str(reply_type))
        return message

    __call__ = typed_call


class RecordingTransport:
    """In-memory transport that acknowledges every message and records it.

    ``fail_on`` makes the call with that zero-based index raise
    :class:`TransportError` instead of acknowledging, which is handy for
    exercising partial transmissions.
    """

    def __init__(self, fail_on: int | None = None) -> None:
        self.calls: list[tuple[str, str, Any]] = []
        self.fail_on = fail_on

    def typed_call(
        self, message_type: str, expected_type: str, payload: Any
    ) -> dict[str, Any]:
        if self.fail_on is not None and len(self.calls) == self.fail_on:
            raise TransportError(f"{message_type} was not acknowledged")
        self.calls.append((message_type, expected_type, payload))
        return {}

    __call__ = typed_call

    @property
    def message_types(self) -> list[str]:
        return [message_type for message_type, _, _ in self.calls]
