"""Configuration loading and data structures for myoudp."""

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional
from pathlib import Path
import json

from .device import Pose

STREAM_MODES = ("absolute", "delta")

DEFAULT_TO_IP = "192.168.1.107"
DEFAULT_TO_PORT = 57701
DEFAULT_FROM_PORT = 11696


@dataclass
class BridgeConfig:
    """Settings for the armband-to-UDP bridge.

    Attributes:
        to_ip: Destination IP address of the consumer.
        to_port: Destination UDP port.
        from_port: Local port every outbound socket is bound to.
        trigger_pose: Pose name that starts streaming (default "fist").
        stream_mode: "absolute" sends the current angles (the established wire
            behaviour); "delta" sends baseline - current, wrapped to [-pi, pi).
        unlock_hold: Ask the armband to stay unlocked between poses on connect.
        greet_vibration: Long haptic pulse when an armband connects.
        quiet: Suppress high-frequency logging (orientation, packet_sent).
    """
    to_ip: str = DEFAULT_TO_IP
    to_port: int = DEFAULT_TO_PORT
    from_port: int = DEFAULT_FROM_PORT
    trigger_pose: str = Pose.FIST.value
    stream_mode: str = "absolute"
    unlock_hold: bool = True
    greet_vibration: bool = True
    quiet: bool = False

    @property
    def trigger(self) -> Pose:
        """The trigger pose as a Pose enum member."""
        return Pose.parse(self.trigger_pose)

    def validate(self) -> "BridgeConfig":
        """Check value ranges and names.

        Returns:
            self, to allow chaining.

        Raises:
            ValueError: If a port, pose or stream mode is invalid.
        """
        if not self.to_ip:
            raise ValueError("to_ip must not be empty")
        for name in ("to_port", "from_port"):
            port = getattr(self, name)
            if not 0 <= port <= 65535:
                raise ValueError(f"{name} out of range: {port}")
        if self.to_port == 0:
            raise ValueError("to_port must not be 0")
        if self.stream_mode not in STREAM_MODES:
            raise ValueError(
                f"Unknown stream_mode: {self.stream_mode!r} (expected one of {', '.join(STREAM_MODES)})"
            )
        if self.trigger is Pose.UNKNOWN:
            raise ValueError("trigger_pose must be a recognized pose, not 'unknown'")
        self.trigger_pose = self.trigger.value
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (for the startup config event)."""
        return asdict(self)


def _resolve_path(path: str) -> Path:
    """Resolve a relative config path.

    Tries (in order): current working directory, next to the calling script
    (__main__.__file__), next to this module file.
    """
    p = Path(path)
    if not p.is_absolute() and not p.exists():
        import __main__  # type: ignore
        main_file = getattr(__main__, "__file__", None)
        if isinstance(main_file, str):
            alt = Path(main_file).parent.joinpath(path)
            if alt.exists():
                p = alt
    if not p.is_absolute() and not p.exists():
        alt2 = Path(__file__).parent.joinpath(path)
        if alt2.exists():
            p = alt2
    return p


def config_from_dict(data: Dict[str, Any]) -> BridgeConfig:
    """Build a BridgeConfig from parsed JSON.

    Network settings may be given flat (``to_ip``) or nested camelCase
    (``{"udp": {"toIp": ..., "toPort": ..., "fromPort": ...}}``).
    """
    udp = data.get("udp")
    udp = udp if isinstance(udp, dict) else {}
    defaults = BridgeConfig()

    def pick(flat: str, nested: str, default: Any) -> Any:
        if flat in data:
            return data[flat]
        return udp.get(nested, default)

    return BridgeConfig(
        to_ip=str(pick("to_ip", "toIp", defaults.to_ip)),
        to_port=int(pick("to_port", "toPort", defaults.to_port)),
        from_port=int(pick("from_port", "fromPort", defaults.from_port)),
        trigger_pose=str(data.get("trigger_pose", data.get("triggerPose", defaults.trigger_pose))),
        stream_mode=str(data.get("stream_mode", data.get("streamMode", defaults.stream_mode))),
        unlock_hold=bool(data.get("unlock_hold", data.get("unlockHold", defaults.unlock_hold))),
        greet_vibration=bool(data.get("greet_vibration", data.get("greetVibration", defaults.greet_vibration))),
        quiet=bool(data.get("quiet", defaults.quiet)),
    )


def load_config(path: Optional[str] = None) -> BridgeConfig:
    """Load a BridgeConfig from a JSON file.

    If path is None or empty, returns the default config.

    Args:
        path: Path to a JSON config file, or None for defaults.

    Returns:
        Validated BridgeConfig.

    Raises:
        ValueError: If the file contains invalid settings.
        OSError: If the file cannot be read.
    """
    if not path:
        return BridgeConfig().validate()

    data: Dict[str, Any] = json.loads(_resolve_path(path).read_text())
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a JSON object: {path}")
    return config_from_dict(data).validate()
