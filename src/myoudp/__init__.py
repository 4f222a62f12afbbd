"""myoudp - Stream armband orientation to a remote consumer over UDP.

Making a fist starts streaming; any other pose stops it.

Main exports:
- start_bridge: Run the bridge with a device backend
- Bridge: Device listener that owns one ActivationStateMachine per armband
- ActivationStateMachine: Start/stop logic and baseline handling
- UdpTransmitter: Fire-and-forget UDP sender
- OrientationSample: Pitch/roll/yaw data structure
- load_config: Load configuration from JSON file
- protocol: Wire packet encoding
"""

from .orientation import OrientationSample
from .config import BridgeConfig, load_config
from .device import Device, DeviceListener, Pose, UnlockType, VibrationType
from .errors import DeviceError, MyoUdpError, TransportError
from .activation import ActivationStateMachine, StreamingState
from .transmitter import UdpTransmitter
from .bridge import Bridge, start_bridge
from . import math
from . import protocol

__all__ = [
    # Main API
    "start_bridge",
    "Bridge",
    "ActivationStateMachine",
    "StreamingState",
    "UdpTransmitter",
    "OrientationSample",
    "BridgeConfig",
    "load_config",
    # Device interface
    "Device",
    "DeviceListener",
    "Pose",
    "UnlockType",
    "VibrationType",
    # Errors
    "MyoUdpError",
    "TransportError",
    "DeviceError",
    # Math utilities
    "math",
    # Protocol (binary)
    "protocol",
]
