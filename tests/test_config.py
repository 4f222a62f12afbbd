import json

import pytest

from myoudp.config import BridgeConfig, load_config
from myoudp.device import Pose


def test_defaults():
    cfg = load_config()
    assert cfg.to_ip == "192.168.1.107"
    assert cfg.to_port == 57701
    assert cfg.from_port == 11696
    assert cfg.trigger is Pose.FIST
    assert cfg.stream_mode == "absolute"


def test_flat_json(tmp_path):
    path = tmp_path / "bridge.json"
    path.write_text(json.dumps({
        "to_ip": "10.0.0.5",
        "to_port": 9000,
        "from_port": 9001,
        "trigger_pose": "FINGERS-SPREAD",
        "stream_mode": "delta",
        "quiet": True,
    }))

    cfg = load_config(str(path))
    assert cfg.to_ip == "10.0.0.5"
    assert cfg.to_port == 9000
    assert cfg.from_port == 9001
    assert cfg.trigger_pose == "fingers_spread"
    assert cfg.stream_mode == "delta"
    assert cfg.quiet is True


def test_nested_udp_section(tmp_path):
    path = tmp_path / "bridge.json"
    path.write_text(json.dumps({
        "udp": {"toIp": "127.0.0.1", "toPort": 5005, "fromPort": 5006},
        "triggerPose": "double_tap",
        "unlockHold": False,
    }))

    cfg = load_config(str(path))
    assert (cfg.to_ip, cfg.to_port, cfg.from_port) == ("127.0.0.1", 5005, 5006)
    assert cfg.trigger is Pose.DOUBLE_TAP
    assert cfg.unlock_hold is False
    assert cfg.greet_vibration is True


@pytest.mark.parametrize("changes", [
    {"to_port": 70000},
    {"to_port": 0},
    {"from_port": -1},
    {"stream_mode": "relative"},
    {"trigger_pose": "thumbs_up"},
    {"trigger_pose": "unknown"},
    {"to_ip": ""},
])
def test_invalid_values_are_rejected(changes):
    cfg = BridgeConfig(**changes)
    with pytest.raises(ValueError):
        cfg.validate()


def test_non_object_file_is_rejected(tmp_path):
    path = tmp_path / "bridge.json"
    path.write_text("[1, 2, 3]")
    with pytest.raises(ValueError):
        load_config(str(path))
