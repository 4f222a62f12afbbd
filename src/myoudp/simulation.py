"""Simulated armband for running myoudp without hardware.

SimulatedDevice implements the Device interface in memory and records every
request made to it, so it doubles as the fake device in tests.
"""

from __future__ import annotations

import math
import threading
import time
from typing import Iterator, List, Optional

from . import math as mum
from .device import (
    Device,
    DeviceListener,
    OrientationHandler,
    Pose,
    UnlockType,
    VibrationType,
)
from .errors import DeviceError
from .orientation import OrientationSample


class SimulatedDevice(Device):
    """In-memory armband.

    Attributes:
        vibrations: Every VibrationType requested, in order.
        unlocks: Every UnlockType requested, in order.
        subscribe_calls / unsubscribe_calls: Number of (un)subscribe requests.
        fail_vibrate / fail_subscribe: Raise DeviceError from those requests.
    """

    def __init__(self, handle: int = 1):
        self._handle = handle
        self._handlers: List[OrientationHandler] = []
        self._lock = threading.Lock()
        self.vibrations: List[VibrationType] = []
        self.unlocks: List[UnlockType] = []
        self.subscribe_calls = 0
        self.unsubscribe_calls = 0
        self.fail_vibrate = False
        self.fail_subscribe = False

    @property
    def handle(self) -> int:
        return self._handle

    @property
    def subscribed(self) -> bool:
        with self._lock:
            return bool(self._handlers)

    def vibrate(self, kind: VibrationType) -> None:
        if self.fail_vibrate:
            raise DeviceError("simulated vibrate failure")
        self.vibrations.append(kind)

    def unlock(self, kind: UnlockType) -> None:
        self.unlocks.append(kind)

    def subscribe_orientation(self, handler: OrientationHandler) -> None:
        if self.fail_subscribe:
            raise DeviceError("simulated subscribe failure")
        with self._lock:
            self.subscribe_calls += 1
            if handler not in self._handlers:
                self._handlers.append(handler)

    def unsubscribe_orientation(self, handler: OrientationHandler) -> None:
        with self._lock:
            self.unsubscribe_calls += 1
            if handler in self._handlers:
                self._handlers.remove(handler)

    def push_orientation(self, sample: OrientationSample) -> None:
        """Deliver a sample to every subscribed handler."""
        with self._lock:
            handlers = list(self._handlers)
        for handler in handlers:
            handler(self, sample)


# =============================================================================
# Simulation utilities (for testing without an armband)
# =============================================================================


def simulate_orientation_stream(count: int, amplitude: float = 0.6) -> Iterator[OrientationSample]:
    """Generate a smooth wrist-rotation sweep.

    Samples go through the quaternion conversion the real SDK adapter uses.

    Args:
        count: Number of samples to yield.
        amplitude: Peak angle in radians for each axis.
    """
    for i in range(count):
        phase = 2.0 * math.pi * i / max(1, count)
        q = mum.euler_to_quat(
            amplitude * 0.5 * math.sin(phase),
            amplitude * math.sin(phase),
            amplitude * 0.8 * math.sin(phase / 2.0),
        )
        yield OrientationSample.from_quaternion(*q)


def run_simulation(
    listener: DeviceListener,
    stop_event: Optional[threading.Event] = None,
    rate_hz: float = 50.0,
    samples_per_gesture: int = 100,
    cycles: Optional[int] = None,
    link_loss_after: Optional[int] = None,
) -> SimulatedDevice:
    """Run a scripted armband session against a listener.

    Connects one device, then repeats: rest, fist, a sweep of orientation
    samples, rest. Stops after ``cycles`` repetitions or when ``stop_event`` is
    set, and disconnects the device.

    With ``link_loss_after`` set, every sweep is cut short after that many
    samples and reported to the listener through ``on_device_error``.

    Args:
        listener: Receives connection, pose and lock callbacks.
        stop_event: Optional event that ends the simulation.
        rate_hz: Orientation sample rate.
        samples_per_gesture: Samples streamed while the fist is held.
        cycles: Number of fist/rest cycles (None runs until stopped).
        link_loss_after: Sample index at which each sweep reports a device error.

    Returns:
        The simulated device (useful for inspection in tests).
    """
    stop = stop_event or threading.Event()
    period = 1.0 / rate_hz if rate_hz > 0 else 0.0
    device = SimulatedDevice(handle=1)

    listener.on_connected(device)
    listener.on_unlocked(device)
    try:
        done = 0
        while not stop.is_set() and (cycles is None or done < cycles):
            listener.on_pose(device, Pose.REST)
            listener.on_pose(device, Pose.FIST)
            for i, sample in enumerate(simulate_orientation_stream(samples_per_gesture)):
                if stop.is_set():
                    break
                if i == link_loss_after:
                    listener.on_device_error(device, DeviceError("simulated link loss"))
                    break
                device.push_orientation(sample)
                if period:
                    time.sleep(period)
            listener.on_pose(device, Pose.REST)
            done += 1
    finally:
        listener.on_locked(device)
        listener.on_disconnected(device)
    return device
