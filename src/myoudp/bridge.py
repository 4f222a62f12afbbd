"""Bridge between armband events and the UDP stream.

This module provides the main entry point for running myoudp with a device
backend ("myo" for the vendor SDK, "simulate" for a scripted armband).
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Literal, Optional

from .activation import ActivationStateMachine
from .config import BridgeConfig
from .device import Device, DeviceListener, Pose, UnlockType, VibrationType
from .errors import DeviceError
from .events import emit_event, set_quiet
from .transmitter import UdpTransmitter

BackendType = Literal["myo", "simulate"]


class Bridge(DeviceListener):
    """Routes device callbacks to one ActivationStateMachine per armband."""

    def __init__(self, config: BridgeConfig, transmitter: Optional[Any] = None):
        self.config = config
        self.transmitter = transmitter or UdpTransmitter(
            config.to_ip, config.to_port, config.from_port
        )
        self._machines: Dict[int, ActivationStateMachine] = {}
        self._lock = threading.Lock()

    def machine_for(self, device: Device) -> ActivationStateMachine:
        """Return the state machine of a device, creating it on first use."""
        with self._lock:
            machine = self._machines.get(device.handle)
            if machine is None:
                machine = ActivationStateMachine(
                    self.transmitter,
                    trigger=self.config.trigger,
                    stream_mode=self.config.stream_mode,
                )
                self._machines[device.handle] = machine
            return machine

    @property
    def devices(self) -> Dict[int, ActivationStateMachine]:
        with self._lock:
            return dict(self._machines)

    def on_connected(self, device: Device) -> None:
        emit_event({"type": "device_connected", "device": device.handle})
        self.machine_for(device)
        # Keep the armband unlocked between poses, then say hello
        if self.config.unlock_hold:
            try:
                device.unlock(UnlockType.HOLD)
            except DeviceError as e:
                emit_event({"type": "warn", "device": device.handle, "message": f"unlock failed: {e}"})
        if self.config.greet_vibration:
            try:
                device.vibrate(VibrationType.LONG)
            except DeviceError as e:
                emit_event({"type": "warn", "device": device.handle, "message": f"vibrate failed: {e}"})

    def on_disconnected(self, device: Device) -> None:
        with self._lock:
            machine = self._machines.pop(device.handle, None)
        event: Dict[str, Any] = {"type": "device_disconnected", "device": device.handle}
        if machine is not None:
            event["last_state"] = machine.to_dict()
            machine.on_device_error(device, DeviceError("device disconnected"))
        emit_event(event)

    def on_pose(self, device: Device, pose: Pose) -> None:
        emit_event({"type": "pose", "device": device.handle, "pose": pose.value})
        self.machine_for(device).on_pose(device, pose)

    def on_locked(self, device: Device) -> None:
        emit_event({"type": "locked", "device": device.handle})

    def on_unlocked(self, device: Device) -> None:
        emit_event({"type": "unlocked", "device": device.handle})

    def on_device_error(self, device: Device, error: Exception) -> None:
        emit_event({"type": "error", "device": device.handle, "message": str(error)})
        with self._lock:
            machine = self._machines.get(device.handle)
        if machine is not None:
            machine.on_device_error(device, error)


def start_bridge(
    config: Optional[BridgeConfig] = None,
    backend: BackendType = "myo",
    stop_event: Optional[threading.Event] = None,
    sdk_path: Optional[str] = None,
) -> Bridge:
    """Run the bridge until stop_event is set (or the backend returns).

    Args:
        config: Bridge settings (defaults when None).
        backend: "myo" (vendor SDK via myo-python) or "simulate".
        stop_event: Event that ends the run; created when None.
        sdk_path: Path to the vendor SDK for the "myo" backend.

    Returns:
        The Bridge that handled the session.

    Raises:
        RuntimeError: If the backend is unknown or cannot be started.
    """
    config = (config or BridgeConfig()).validate()
    stop = stop_event or threading.Event()
    set_quiet(config.quiet)

    bridge = Bridge(config)
    to_ip, to_port = bridge.transmitter.remote
    emit_event({
        "type": "bridge_starting",
        "backend": backend,
        "to": f"{to_ip}:{to_port}",
        "from_port": bridge.transmitter.from_port,
        "trigger": config.trigger.value,
        "stream_mode": config.stream_mode,
    })

    try:
        if backend == "simulate":
            from . import simulation

            simulation.run_simulation(bridge, stop_event=stop)
        elif backend == "myo":
            from . import myo_backend

            myo_backend.run_hub(bridge, stop_event=stop, sdk_path=sdk_path)
        else:
            raise RuntimeError(f"Unknown backend: {backend}")
    except Exception as e:
        emit_event({"type": "error", "message": f"Backend failed: {e}"})
        raise
    finally:
        emit_event({
            "type": "bridge_stopped",
            "sent": getattr(bridge.transmitter, "sent_count", None),
            "errors": getattr(bridge.transmitter, "error_count", None),
        })
    return bridge
