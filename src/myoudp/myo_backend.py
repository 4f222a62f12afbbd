"""Armband backend using the vendor SDK through myo-python.

The SDK streams orientation continuously; MyoDevice only forwards samples
to handlers that subscribed, so the activation logic sees the same
subscribe/unsubscribe behaviour as with any other backend.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional

import myo  # type: ignore

from .device import (
    Device,
    DeviceListener,
    OrientationHandler,
    Pose,
    UnlockType,
    VibrationType,
)
from .errors import DeviceError
from .events import emit_event
from .orientation import OrientationSample

# Hub polling slice; stop requests are noticed within this time
RUN_SLICE_MS = 250


class MyoDevice(Device):
    """Device wrapper around a myo-python device object."""

    def __init__(self, handle: int, sdk_device: Any):
        self._handle = handle
        self.sdk_device = sdk_device
        self._handlers: List[OrientationHandler] = []
        self._lock = threading.Lock()

    @property
    def handle(self) -> int:
        return self._handle

    def vibrate(self, kind: VibrationType) -> None:
        try:
            self.sdk_device.vibrate(getattr(myo.VibrationType, kind.value))
        except Exception as e:
            raise DeviceError(f"vibrate({kind.value}) failed: {e}") from e

    def unlock(self, kind: UnlockType) -> None:
        try:
            self.sdk_device.unlock(getattr(myo.UnlockType, kind.value))
        except Exception as e:
            raise DeviceError(f"unlock({kind.value}) failed: {e}") from e

    def subscribe_orientation(self, handler: OrientationHandler) -> None:
        with self._lock:
            if handler not in self._handlers:
                self._handlers.append(handler)

    def unsubscribe_orientation(self, handler: OrientationHandler) -> None:
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)

    def dispatch_orientation(self, sample: OrientationSample) -> None:
        with self._lock:
            handlers = list(self._handlers)
        for handler in handlers:
            handler(self, sample)


def _to_pose(sdk_pose: Any) -> Pose:
    name = getattr(sdk_pose, "name", str(sdk_pose))
    try:
        return Pose.parse(name)
    except ValueError:
        return Pose.UNKNOWN


class _SdkListener(myo.DeviceListener):
    """Translates myo-python events into DeviceListener callbacks."""

    def __init__(self, listener: DeviceListener, stop_event: threading.Event):
        super().__init__()
        self.listener = listener
        self.stop_event = stop_event
        self._devices: Dict[str, MyoDevice] = {}
        self._next_handle = 1

    def _device(self, event: Any) -> MyoDevice:
        key = str(event.mac_address)
        dev = self._devices.get(key)
        if dev is None:
            dev = MyoDevice(self._next_handle, event.device)
            self._next_handle += 1
            self._devices[key] = dev
        else:
            dev.sdk_device = event.device
        return dev

    def on_event(self, event: Any) -> Optional[bool]:
        if self.stop_event.is_set():
            return False
        try:
            return super().on_event(event)
        except Exception as e:
            dev = self._devices.get(str(getattr(event, "mac_address", "")))
            if dev is None:
                raise
            if not isinstance(e, DeviceError):
                kind = getattr(getattr(event, "type", None), "name", "event")
                e = DeviceError(f"{kind} handling failed: {e}")
            self.listener.on_device_error(dev, e)
            return True

    def on_connected(self, event: Any) -> None:
        self.listener.on_connected(self._device(event))

    def on_disconnected(self, event: Any) -> None:
        dev = self._devices.pop(str(event.mac_address), None)
        if dev is not None:
            self.listener.on_disconnected(dev)

    def on_pose(self, event: Any) -> None:
        self.listener.on_pose(self._device(event), _to_pose(event.pose))

    def on_orientation(self, event: Any) -> None:
        q = event.orientation
        sample = OrientationSample.from_quaternion(q.x, q.y, q.z, q.w)
        self._device(event).dispatch_orientation(sample)

    def on_locked(self, event: Any) -> None:
        self.listener.on_locked(self._device(event))

    def on_unlocked(self, event: Any) -> None:
        self.listener.on_unlocked(self._device(event))

    def on_warmup_completed(self, event: Any) -> None:
        emit_event({"type": "warmup_completed", "device": self._device(event).handle})


def run_hub(
    listener: DeviceListener,
    stop_event: Optional[threading.Event] = None,
    sdk_path: Optional[str] = None,
) -> None:
    """Connect to the armband hub and deliver events until stopped.

    Args:
        listener: Receives device callbacks.
        stop_event: Ends the run when set.
        sdk_path: Directory of the vendor SDK (None uses the library search path).

    Raises:
        RuntimeError: If the SDK cannot be initialized.
    """
    stop = stop_event or threading.Event()
    try:
        myo.init(sdk_path=sdk_path)
        hub = myo.Hub()
    except Exception as e:
        raise RuntimeError(f"Could not initialize the armband SDK: {e}") from e

    emit_event({"type": "hub_ready", "message": "Make sure the armband is worn, warmed up and synced"})
    sdk_listener = _SdkListener(listener, stop)
    try:
        while not stop.is_set():
            if not hub.run(sdk_listener.on_event, RUN_SLICE_MS):
                break
    finally:
        hub.stop()
