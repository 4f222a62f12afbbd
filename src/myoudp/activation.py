"""Gesture-triggered activation for myoudp.

One ActivationStateMachine per armband decides, for every pose change and
orientation sample, what goes out on the wire:

    IDLE --trigger pose--> ACTIVE      start packet [1], short pulse, subscribe
    ACTIVE --other pose--> IDLE        stop packet [0], medium pulse if a
                                       baseline was captured, unsubscribe
    ACTIVE --device error--> IDLE      no packet, best-effort unsubscribe

A failed subscribe during IDLE -> ACTIVE sends the stop packet right after
the start packet and stays IDLE.

While ACTIVE, the first orientation sample becomes the baseline and every
sample produces one 3-byte data packet.
"""

from __future__ import annotations

import math
import threading
from enum import Enum
from typing import Any, Dict, Optional

from . import protocol
from .device import Device, Pose, VibrationType
from .errors import DeviceError
from .events import emit_event
from .orientation import OrientationSample


class StreamingState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"


class ActivationStateMachine:
    """Streaming state and baseline for a single armband.

    Events for one device may arrive on any thread; a lock serializes them so
    the state/baseline pair is always updated together.

    Example:
        >>> machine = ActivationStateMachine(UdpTransmitter("10.0.0.2", 57701))
        >>> machine.on_pose(device, Pose.FIST)      # sends [1], subscribes
        >>> # device now calls machine.on_orientation(device, sample)
        >>> machine.on_pose(device, Pose.REST)      # sends [0], unsubscribes
    """

    def __init__(
        self,
        transmitter: Any,
        trigger: Pose = Pose.FIST,
        stream_mode: str = "absolute",
    ):
        """Initialize the state machine.

        Args:
            transmitter: Object with ``send_quietly(payload) -> bool``
                (normally a UdpTransmitter).
            trigger: Pose that starts streaming.
            stream_mode: "absolute" encodes the current sample, "delta" encodes
                baseline - sample wrapped to [-pi, pi).
        """
        if stream_mode not in ("absolute", "delta"):
            raise ValueError(f"Unknown stream_mode: {stream_mode!r}")
        self.transmitter = transmitter
        self.trigger = trigger
        self.stream_mode = stream_mode

        self._lock = threading.Lock()
        self._state = StreamingState.IDLE
        self._baseline: Optional[OrientationSample] = None
        self._last_delta: Optional[OrientationSample] = None

    @property
    def state(self) -> StreamingState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is StreamingState.ACTIVE

    @property
    def baseline(self) -> Optional[OrientationSample]:
        """Orientation captured from the first sample of this activation."""
        return self._baseline

    @property
    def last_delta(self) -> Optional[OrientationSample]:
        """baseline - sample for the most recent sample while ACTIVE."""
        return self._last_delta

    # -------------------------------------------------------------------------
    # Event handlers
    # -------------------------------------------------------------------------

    def on_pose(self, device: Device, pose: Pose) -> None:
        """Handle a pose change reported by the device."""
        with self._lock:
            if pose == self.trigger:
                if self._state is StreamingState.ACTIVE:
                    # Already streaming: keep the baseline, no second start packet
                    return
                self._activate(device)
            elif self._state is StreamingState.ACTIVE:
                self._deactivate(device, pose)

    def on_orientation(self, device: Device, sample: OrientationSample) -> None:
        """Handle one orientation sample; sends a data packet while ACTIVE."""
        with self._lock:
            if self._state is not StreamingState.ACTIVE:
                return

            if not all(math.isfinite(a) for a in sample.angles):
                emit_event({
                    "type": "warn",
                    "device": device.handle,
                    "message": f"dropping non-finite sample {sample.to_dict()}",
                })
                return

            if self._baseline is None:
                self._baseline = sample
                emit_event({
                    "type": "baseline_captured",
                    "device": device.handle,
                    "baseline": sample.to_dict(),
                })

            delta = sample.delta_from(self._baseline)
            self._last_delta = delta

            if self.stream_mode == "delta":
                payload = protocol.encode_orientation(
                    *(protocol.wrap_angle(a) for a in delta.angles)
                )
            else:
                payload = protocol.encode_orientation(*sample.angles)

            emit_event({
                "type": "orientation",
                "device": device.handle,
                "sample": sample.to_dict(),
                "delta": delta.to_dict(),
            })
            self.transmitter.send_quietly(payload)

    def on_device_error(self, device: Device, error: Exception) -> None:
        """Fall back to IDLE after the device failed mid-stream.

        No stop packet is sent; the device may no longer be reachable.
        """
        with self._lock:
            if self._state is not StreamingState.ACTIVE:
                return
            self._state = StreamingState.IDLE
            self._baseline = None
            self._last_delta = None
            self._unsubscribe(device)
            emit_event({
                "type": "streaming_aborted",
                "device": device.handle,
                "reason": str(error),
            })

    # -------------------------------------------------------------------------
    # Transitions (called with the lock held)
    # -------------------------------------------------------------------------

    def _activate(self, device: Device) -> None:
        self._state = StreamingState.ACTIVE
        self._baseline = None
        self._last_delta = None

        self.transmitter.send_quietly(protocol.encode_control(True))
        self._vibrate(device, VibrationType.SHORT)

        try:
            device.subscribe_orientation(self.on_orientation)
        except DeviceError as e:
            # The start packet is already out; close the pair for the consumer
            self._state = StreamingState.IDLE
            self.transmitter.send_quietly(protocol.encode_control(False))
            emit_event({
                "type": "streaming_aborted",
                "device": device.handle,
                "reason": str(e),
            })
            return

        emit_event({"type": "streaming_started", "device": device.handle})

    def _deactivate(self, device: Device, pose: Pose) -> None:
        had_baseline = self._baseline is not None
        if had_baseline:
            self._vibrate(device, VibrationType.MEDIUM)

        self._state = StreamingState.IDLE
        self._baseline = None
        self._last_delta = None

        self.transmitter.send_quietly(protocol.encode_control(False))
        self._unsubscribe(device)

        emit_event({
            "type": "streaming_stopped",
            "device": device.handle,
            "pose": pose.value,
            "had_baseline": had_baseline,
        })

    def _vibrate(self, device: Device, kind: VibrationType) -> None:
        try:
            device.vibrate(kind)
        except DeviceError as e:
            emit_event({
                "type": "warn",
                "device": device.handle,
                "message": f"vibrate({kind.value}) failed: {e}",
            })

    def _unsubscribe(self, device: Device) -> None:
        try:
            device.unsubscribe_orientation(self.on_orientation)
        except DeviceError as e:
            emit_event({
                "type": "warn",
                "device": device.handle,
                "message": f"unsubscribe failed: {e}",
            })

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot of the current state (for status logging)."""
        with self._lock:
            return {
                "state": self._state.value,
                "baseline": self._baseline.to_dict() if self._baseline else None,
                "stream_mode": self.stream_mode,
                "trigger": self.trigger.value,
            }
