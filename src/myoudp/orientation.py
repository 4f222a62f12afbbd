"""Orientation data structure for myoudp."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from . import math as mum


@dataclass(frozen=True)
class OrientationSample:
    """Armband attitude at one point in time.

    Attributes:
        pitch, roll, yaw: Angles in radians, each in (-pi, pi).
    """

    pitch: float
    roll: float
    yaw: float

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OrientationSample":
        """Create a sample from a dictionary. Missing angles default to 0.0."""
        return cls(
            pitch=float(d.get("pitch", 0.0)),
            roll=float(d.get("roll", 0.0)),
            yaw=float(d.get("yaw", 0.0)),
        )

    @classmethod
    def from_quaternion(cls, x: float, y: float, z: float, w: float) -> "OrientationSample":
        """Create a sample from the SDK's orientation quaternion (scalar-last)."""
        pitch, roll, yaw = mum.quat_to_euler((x, y, z, w))
        return cls(pitch=pitch, roll=roll, yaw=yaw)

    def delta_from(self, baseline: "OrientationSample") -> "OrientationSample":
        """Return baseline - self per axis (signed, magnitude up to 2*pi)."""
        return OrientationSample(
            pitch=baseline.pitch - self.pitch,
            roll=baseline.roll - self.roll,
            yaw=baseline.yaw - self.yaw,
        )

    @property
    def angles(self) -> Tuple[float, float, float]:
        """Angles as (pitch, roll, yaw) tuple."""
        return (self.pitch, self.roll, self.yaw)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"pitch": self.pitch, "roll": self.roll, "yaw": self.yaw}
