"""myoudp CLI entry point.

Usage:
    python -m myoudp [--config CONFIG] [--to-ip IP] [--to-port PORT] [--from-port PORT]
    python -m myoudp --backend simulate --to-ip 127.0.0.1
    python -m myoudp --stream-mode delta --trigger fingers_spread
"""

import argparse
import os
import select
import signal
import sys
import threading
from typing import Any

from myoudp import load_config, start_bridge
from myoudp.config import STREAM_MODES
from myoudp.device import Pose
from myoudp.events import emit_event

ESC = b"\x1b"


def _watch_escape(stop: threading.Event) -> None:
    """Set stop when ESC is pressed (only when stdin is a terminal)."""
    if not sys.stdin or not sys.stdin.isatty():
        return
    import termios
    import tty

    fd = sys.stdin.fileno()
    try:
        old = termios.tcgetattr(fd)
    except termios.error:
        return
    try:
        tty.setcbreak(fd)
        while not stop.is_set():
            ready, _, _ = select.select([fd], [], [], 0.2)
            if not ready:
                continue
            ch = os.read(fd, 1)
            if not ch:
                break
            if ch == ESC:
                emit_event({"type": "shutdown", "reason": "escape"})
                stop.set()
                break
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)


def main() -> int:
    parser = argparse.ArgumentParser(description="myoudp - stream armband orientation over UDP")
    parser.add_argument(
        "--config",
        type=str,
        default="",
        help="Path to config JSON file (network, trigger pose, stream mode)",
    )
    parser.add_argument("--to-ip", type=str, default=None, help="Destination IP address")
    parser.add_argument("--to-port", type=int, default=None, help="Destination UDP port")
    parser.add_argument("--from-port", type=int, default=None, help="Local UDP port to send from")
    parser.add_argument(
        "--trigger",
        type=str,
        choices=[p.value for p in Pose if p is not Pose.UNKNOWN],
        default=None,
        help="Pose that starts streaming (default: fist)",
    )
    parser.add_argument(
        "--stream-mode",
        type=str,
        choices=list(STREAM_MODES),
        default=None,
        help="'absolute' sends current angles (default), 'delta' sends change since the fist",
    )
    parser.add_argument(
        "--backend",
        type=str,
        choices=["myo", "simulate"],
        default="myo",
        help="Device backend: 'myo' (armband SDK, default) or 'simulate'",
    )
    parser.add_argument(
        "--sdk-path",
        type=str,
        default=None,
        help="Path to the armband SDK (myo backend only)",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress high-frequency logging (orientation, packets)",
    )
    args = parser.parse_args()

    try:
        config = load_config(args.config if args.config else None)
        if args.to_ip is not None:
            config.to_ip = args.to_ip
        if args.to_port is not None:
            config.to_port = args.to_port
        if args.from_port is not None:
            config.from_port = args.from_port
        if args.trigger is not None:
            config.trigger_pose = args.trigger
        if args.stream_mode is not None:
            config.stream_mode = args.stream_mode
        if args.quiet:
            config.quiet = True
        config.validate()
    except (OSError, ValueError) as e:
        emit_event({"type": "error", "message": f"Invalid configuration: {e}"})
        return 2

    emit_event({"type": "config", "config": config.to_dict()})

    stop = threading.Event()

    def handle_signal(signum: int, frame: Any) -> None:
        emit_event({"type": "shutdown", "reason": signal.Signals(signum).name.lower()})
        stop.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    emit_event({"type": "info", "message": "Press ESC to quit."})
    watcher = threading.Thread(target=_watch_escape, args=(stop,), daemon=True)
    watcher.start()

    try:
        start_bridge(config, backend=args.backend, stop_event=stop, sdk_path=args.sdk_path)
    finally:
        # Let the watcher restore the terminal mode
        stop.set()
        watcher.join(timeout=1.0)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
