"""UDP transmitter for myoudp.

Every payload goes out on a short-lived socket bound to a fixed local port
and addressed to a fixed remote endpoint. Nothing is ever read back.
"""

from __future__ import annotations

import socket
import threading
from typing import Tuple

from . import protocol
from .errors import TransportError
from .events import emit_event


class UdpTransmitter:
    """Fire-and-forget sender for protocol payloads."""

    def __init__(self, to_ip: str, to_port: int, from_port: int = 0):
        """Initialize the transmitter.

        Args:
            to_ip: Destination IP address.
            to_port: Destination UDP port.
            from_port: Local port to bind each socket to (0 lets the OS pick).
        """
        self._remote: Tuple[str, int] = (to_ip, int(to_port))
        self._from_port = int(from_port)
        self._lock = threading.Lock()
        self.sent_count = 0
        self.error_count = 0

    @property
    def remote(self) -> Tuple[str, int]:
        """Destination (ip, port)."""
        return self._remote

    @property
    def from_port(self) -> int:
        return self._from_port

    def send(self, payload: bytes) -> None:
        """Send one payload.

        Raises:
            TransportError: If the socket could not be opened, bound or written.
        """
        try:
            # Sends share the fixed local port, so they must not overlap
            with self._lock:
                with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
                    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
                    sock.bind(("0.0.0.0", self._from_port))
                    sock.sendto(payload, self._remote)
                    self.sent_count += 1
        except OSError as e:
            self.error_count += 1
            raise TransportError(
                f"UDP send to {self._remote[0]}:{self._remote[1]} failed: {e}"
            ) from e

        emit_event({
            "type": "packet_sent",
            "kind": protocol.packet_kind(payload),
            "bytes": list(payload),
        })

    def send_quietly(self, payload: bytes) -> bool:
        """Send one payload, logging and dropping it on failure.

        Returns:
            True if the packet left the host, False if it was dropped.
        """
        try:
            self.send(payload)
            return True
        except TransportError as e:
            emit_event({
                "type": "error",
                "message": str(e),
                "kind": protocol.packet_kind(payload),
            })
            return False
