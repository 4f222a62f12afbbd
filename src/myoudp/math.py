"""Quaternion and Euler angle utilities for myoudp.

All quaternions use (x, y, z, w) convention (scalar-last).
Euler angles are (pitch, roll, yaw) in radians, following the armband SDK.
"""

from __future__ import annotations
import math
from typing import Tuple

Quat = Tuple[float, float, float, float]
Euler = Tuple[float, float, float]


def quat_normalize(q: Quat) -> Quat:
    """Normalize a quaternion to unit length."""
    x, y, z, w = q
    n = math.sqrt(x * x + y * y + z * z + w * w)
    if n <= 0.0:
        return (0.0, 0.0, 0.0, 1.0)
    return (x / n, y / n, z / n, w / n)


def quat_to_euler(q: Quat) -> Euler:
    """Convert a quaternion to (pitch, roll, yaw) in radians.

    Roll and yaw lie in [-pi, pi], pitch in [-pi/2, pi/2].
    """
    x, y, z, w = quat_normalize(q)
    roll = math.atan2(2.0 * (w * x + y * z), 1.0 - 2.0 * (x * x + y * y))
    # Clamp to avoid numerical issues with asin
    sin_pitch = max(-1.0, min(1.0, 2.0 * (w * y - z * x)))
    pitch = math.asin(sin_pitch)
    yaw = math.atan2(2.0 * (w * z + x * y), 1.0 - 2.0 * (y * y + z * z))
    return (pitch, roll, yaw)


def euler_to_quat(pitch: float, roll: float, yaw: float) -> Quat:
    """Convert (pitch, roll, yaw) in radians to a unit quaternion."""
    cr, sr = math.cos(roll / 2.0), math.sin(roll / 2.0)
    cp, sp = math.cos(pitch / 2.0), math.sin(pitch / 2.0)
    cy, sy = math.cos(yaw / 2.0), math.sin(yaw / 2.0)
    return (
        sr * cp * cy - cr * sp * sy,
        cr * sp * cy + sr * cp * sy,
        cr * cp * sy - sr * sp * cy,
        cr * cp * cy + sr * sp * sy,
    )
