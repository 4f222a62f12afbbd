"""myoudp wire protocol.

Payloads are sent as raw UDP datagrams without any header, length prefix or
checksum. The receiver tells packet kinds apart by length alone:

    1 byte   control packet: 1 = streaming started, 0 = streaming stopped
    3 bytes  data packet: pitch, roll, yaw, each quantized to one byte

Only encoding lives here; the remote consumer does the decoding.
"""

from __future__ import annotations

import math
import struct

# Control values
CONTROL_STOP = 0
CONTROL_START = 1

# Struct formats
CONTROL_FORMAT = "B"  # value(1) = 1 byte
ORIENTATION_FORMAT = "BBB"  # pitch(1) + roll(1) + yaw(1) = 3 bytes

# Sizes
CONTROL_SIZE = 1
ORIENTATION_SIZE = 3

# Quantization: (-pi, pi) is spread over 256 steps, clamped to a byte
QUANT_STEPS = 256.0
BYTE_MIN = 0
BYTE_MAX = 255


# =============================================================================
# Quantization
# =============================================================================


def quantize_angle(angle: float) -> int:
    """Map an angle in radians from (-pi, pi) onto a byte (0-255).

    The mapping is ``floor((angle + pi) / (2 * pi) * 256)``, so 0 rad lands on
    128. Inputs at or beyond +pi would produce 256 and are clamped to 255;
    inputs below -pi clamp to 0.

    Raises:
        ValueError: If the angle is NaN or infinite.
    """
    if not math.isfinite(angle):
        raise ValueError(f"Cannot quantize non-finite angle: {angle!r}")
    value = math.floor((angle + math.pi) / (2.0 * math.pi) * QUANT_STEPS)
    return max(BYTE_MIN, min(BYTE_MAX, value))


def wrap_angle(angle: float) -> float:
    """Wrap an angle in radians into [-pi, pi)."""
    return (angle + math.pi) % (2.0 * math.pi) - math.pi


# =============================================================================
# Packing functions
# =============================================================================


def encode_control(is_start: bool) -> bytes:
    """Pack a 1-byte control packet (1 for start, 0 for stop)."""
    return struct.pack(CONTROL_FORMAT, CONTROL_START if is_start else CONTROL_STOP)


def encode_orientation(pitch: float, roll: float, yaw: float) -> bytes:
    """Pack a 3-byte data packet from three angles in radians.

    Args:
        pitch, roll, yaw: Angles in (-pi, pi).

    Returns:
        3-byte payload ``[pitch_byte, roll_byte, yaw_byte]``.
    """
    return struct.pack(
        ORIENTATION_FORMAT,
        quantize_angle(pitch),
        quantize_angle(roll),
        quantize_angle(yaw),
    )


# =============================================================================
# Classification (length only, used for logging)
# =============================================================================


def is_control_packet(payload: bytes) -> bool:
    """Check if a payload is a start/stop control packet."""
    return len(payload) == CONTROL_SIZE and payload[0] in (CONTROL_STOP, CONTROL_START)


def is_data_packet(payload: bytes) -> bool:
    """Check if a payload is an orientation data packet."""
    return len(payload) == ORIENTATION_SIZE


def packet_kind(payload: bytes) -> str:
    """Return "start", "stop", "orientation" or "unknown" for a payload."""
    if is_control_packet(payload):
        return "start" if payload[0] == CONTROL_START else "stop"
    if is_data_packet(payload):
        return "orientation"
    return "unknown"
