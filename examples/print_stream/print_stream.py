"""Print start/stop and orientation events from a simulated armband."""

from myoudp import load_config, start_bridge
from myoudp.events import set_event_callback

config = load_config("bridge_config.json")

def on_event(evt):
    if evt["type"] in ("streaming_started", "streaming_stopped"):
        print(f">>> {evt['type']} (device {evt['device']})")
    elif evt["type"] == "orientation":
        s, d = evt["sample"], evt["delta"]
        print(f"pitch={s['pitch']:+.3f} roll={s['roll']:+.3f} yaw={s['yaw']:+.3f} | "
              f"dpitch={d['pitch']:+.3f} droll={d['roll']:+.3f} dyaw={d['yaw']:+.3f}")

config.quiet = True
set_event_callback(on_event)
start_bridge(config, backend="simulate")
