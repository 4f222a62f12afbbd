"""Armband device interface consumed by myoudp.

The vendor SDK (or the simulator) owns pairing and event delivery. myoudp
only needs the small surface defined here: a device handle that can vibrate,
unlock and (un)subscribe orientation samples, and a listener the event
source calls back into.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Union

from .orientation import OrientationSample

OrientationHandler = Callable[["Device", OrientationSample], None]


class Pose(str, Enum):
    """Gesture classes reported by the armband."""
    REST = "rest"
    FIST = "fist"
    WAVE_IN = "wave_in"
    WAVE_OUT = "wave_out"
    FINGERS_SPREAD = "fingers_spread"
    DOUBLE_TAP = "double_tap"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Union[str, "Pose"]) -> "Pose":
        """Parse a pose name such as "fist" or "FINGERS_SPREAD".

        Raises:
            ValueError: If the name is not a known pose.
        """
        if isinstance(value, Pose):
            return value
        key = str(value).strip().lower().replace("-", "_")
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown pose: {value!r}") from None


class VibrationType(str, Enum):
    """Haptic pulse length classes."""
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class UnlockType(str, Enum):
    """Unlock modes. HOLD keeps the armband unlocked between poses."""
    TIMED = "timed"
    HOLD = "hold"


class Device(ABC):
    """One tracked armband."""

    @property
    @abstractmethod
    def handle(self) -> int:
        """Stable identifier of this device for the lifetime of the connection."""

    @abstractmethod
    def vibrate(self, kind: VibrationType) -> None:
        """Request a haptic pulse. Raises DeviceError on failure."""

    @abstractmethod
    def unlock(self, kind: UnlockType) -> None:
        """Request an unlock mode. Raises DeviceError on failure."""

    @abstractmethod
    def subscribe_orientation(self, handler: OrientationHandler) -> None:
        """Start delivering orientation samples to handler."""

    @abstractmethod
    def unsubscribe_orientation(self, handler: OrientationHandler) -> None:
        """Stop delivering orientation samples to handler."""


class DeviceListener:
    """Callbacks an event source invokes. Default implementations do nothing."""

    def on_connected(self, device: Device) -> None:
        pass

    def on_disconnected(self, device: Device) -> None:
        pass

    def on_pose(self, device: Device, pose: Pose) -> None:
        pass

    def on_locked(self, device: Device) -> None:
        pass

    def on_unlocked(self, device: Device) -> None:
        pass

    def on_device_error(self, device: Device, error: Exception) -> None:
        pass
