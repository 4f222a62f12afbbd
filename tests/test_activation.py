import math
import threading

from myoudp.activation import ActivationStateMachine, StreamingState
from myoudp.device import Pose, VibrationType
from myoudp.orientation import OrientationSample
from myoudp.simulation import SimulatedDevice


def make_machine(transmitter, **kwargs):
    device = SimulatedDevice(handle=7)
    return ActivationStateMachine(transmitter, **kwargs), device


def test_end_to_end_fist_sample_release(transmitter, captured_events):
    machine, device = make_machine(transmitter)

    machine.on_pose(device, Pose.FIST)
    device.push_orientation(OrientationSample(0.0, 0.0, 0.0))
    machine.on_pose(device, Pose.REST)

    assert transmitter.payloads == [b"\x01", bytes([128, 128, 128]), b"\x00"]
    assert machine.state is StreamingState.IDLE
    assert device.vibrations == [VibrationType.SHORT, VibrationType.MEDIUM]
    assert not device.subscribed
    kinds = [e["type"] for e in captured_events]
    assert "streaming_started" in kinds and "streaming_stopped" in kinds


def test_trigger_subscribes_and_release_unsubscribes(transmitter, captured_events):
    machine, device = make_machine(transmitter)

    machine.on_pose(device, Pose.FIST)
    assert machine.is_active
    assert device.subscribed
    assert machine.baseline is None

    machine.on_pose(device, Pose.WAVE_IN)
    assert not machine.is_active
    assert not device.subscribed
    assert device.unsubscribe_calls == 1


def test_repeated_trigger_does_not_restart(transmitter, captured_events):
    machine, device = make_machine(transmitter)

    machine.on_pose(device, Pose.FIST)
    device.push_orientation(OrientationSample(0.2, 0.1, -0.3))
    machine.on_pose(device, Pose.FIST)

    assert transmitter.payloads.count(b"\x01") == 1
    assert device.subscribe_calls == 1
    assert device.vibrations == [VibrationType.SHORT]
    assert machine.baseline == OrientationSample(0.2, 0.1, -0.3)


def test_baseline_is_captured_from_first_sample_only(transmitter, captured_events):
    machine, device = make_machine(transmitter)
    a = OrientationSample(0.1, 0.2, 0.3)
    b = OrientationSample(0.4, 0.5, 0.6)
    c = OrientationSample(-0.4, -0.5, -0.6)

    machine.on_pose(device, Pose.FIST)
    for sample in (a, b, c):
        device.push_orientation(sample)

    assert machine.baseline == a
    assert machine.last_delta.pitch == a.pitch - c.pitch
    assert machine.last_delta.yaw == a.yaw - c.yaw
    assert sum(1 for e in captured_events if e["type"] == "baseline_captured") == 1


def test_absolute_mode_sends_raw_sample_not_delta(transmitter, captured_events):
    machine, device = make_machine(transmitter)

    machine.on_pose(device, Pose.FIST)
    device.push_orientation(OrientationSample(1.0, 1.0, 1.0))
    device.push_orientation(OrientationSample(1.0, 1.0, 1.0))

    # Delta is zero, but the absolute angle goes on the wire
    assert machine.last_delta == OrientationSample(0.0, 0.0, 0.0)
    assert transmitter.payloads[-1] == bytes([168, 168, 168])


def test_delta_mode_sends_wrapped_delta(transmitter, captured_events):
    machine, device = make_machine(transmitter, stream_mode="delta")

    machine.on_pose(device, Pose.FIST)
    device.push_orientation(OrientationSample(1.0, -1.0, 0.5))
    device.push_orientation(OrientationSample(2.0, -1.0, 0.5))

    assert transmitter.payloads[1] == bytes([128, 128, 128])
    # baseline - sample = -1.0 on pitch
    assert transmitter.payloads[2] == bytes([87, 128, 128])


def test_delta_mode_wraps_large_deltas(transmitter, captured_events):
    machine, device = make_machine(transmitter, stream_mode="delta")

    machine.on_pose(device, Pose.FIST)
    device.push_orientation(OrientationSample(3.0, 0.0, 0.0))
    device.push_orientation(OrientationSample(-3.0, 0.0, 0.0))

    # 6.0 rad wraps to 6.0 - 2*pi
    assert machine.last_delta.pitch == 6.0
    wrapped = 6.0 - 2.0 * math.pi
    expected = math.floor((wrapped + math.pi) / (2.0 * math.pi) * 256)
    assert transmitter.payloads[-1][0] == expected


def test_no_packets_while_idle(transmitter, captured_events):
    machine, device = make_machine(transmitter)

    machine.on_orientation(device, OrientationSample(0.5, 0.5, 0.5))
    machine.on_pose(device, Pose.REST)
    machine.on_pose(device, Pose.WAVE_OUT)

    assert transmitter.payloads == []
    assert device.vibrations == []
    assert machine.baseline is None


def test_release_without_samples_skips_medium_pulse(transmitter, captured_events):
    machine, device = make_machine(transmitter)

    machine.on_pose(device, Pose.FIST)
    machine.on_pose(device, Pose.FINGERS_SPREAD)

    assert transmitter.payloads == [b"\x01", b"\x00"]
    assert device.vibrations == [VibrationType.SHORT]
    stopped = [e for e in captured_events if e["type"] == "streaming_stopped"]
    assert stopped[0]["had_baseline"] is False


def test_device_error_returns_to_idle_without_stop_packet(transmitter, captured_events):
    machine, device = make_machine(transmitter)

    machine.on_pose(device, Pose.FIST)
    device.push_orientation(OrientationSample(0.0, 0.0, 0.0))
    machine.on_device_error(device, RuntimeError("link lost"))

    assert machine.state is StreamingState.IDLE
    assert machine.baseline is None
    assert not device.subscribed
    assert transmitter.payloads == [b"\x01", bytes([128, 128, 128])]
    assert any(e["type"] == "streaming_aborted" for e in captured_events)


def test_vibrate_failure_does_not_block_streaming(transmitter, captured_events):
    machine, device = make_machine(transmitter)
    device.fail_vibrate = True

    machine.on_pose(device, Pose.FIST)
    device.push_orientation(OrientationSample(0.0, 0.0, 0.0))

    assert machine.is_active
    assert transmitter.payloads == [b"\x01", bytes([128, 128, 128])]
    assert any(e["type"] == "warn" for e in captured_events)


def test_subscribe_failure_falls_back_to_idle(transmitter, captured_events):
    machine, device = make_machine(transmitter)
    device.fail_subscribe = True

    machine.on_pose(device, Pose.FIST)

    assert machine.state is StreamingState.IDLE
    assert transmitter.payloads == [b"\x01", b"\x00"]
    assert any(e["type"] == "streaming_aborted" for e in captured_events)


def test_trigger_after_subscribe_failure_keeps_packets_paired(transmitter, captured_events):
    machine, device = make_machine(transmitter)
    device.fail_subscribe = True
    machine.on_pose(device, Pose.FIST)
    machine.on_pose(device, Pose.REST)

    device.fail_subscribe = False
    machine.on_pose(device, Pose.FIST)

    assert transmitter.payloads == [b"\x01", b"\x00", b"\x01"]
    assert machine.is_active
    assert device.subscribed


def test_custom_trigger_pose(transmitter, captured_events):
    machine, device = make_machine(transmitter, trigger=Pose.DOUBLE_TAP)

    machine.on_pose(device, Pose.FIST)
    assert not machine.is_active
    machine.on_pose(device, Pose.DOUBLE_TAP)
    assert machine.is_active
    machine.on_pose(device, Pose.FIST)
    assert not machine.is_active


def test_nan_sample_is_dropped(transmitter, captured_events):
    machine, device = make_machine(transmitter)

    machine.on_pose(device, Pose.FIST)
    device.push_orientation(OrientationSample(float("nan"), 0.0, 0.0))

    assert transmitter.payloads == [b"\x01"]
    assert machine.is_active
    assert machine.baseline is None


def test_transport_failure_keeps_state(failing_transmitter, captured_events):
    machine, device = make_machine(failing_transmitter)

    machine.on_pose(device, Pose.FIST)
    device.push_orientation(OrientationSample(0.0, 0.0, 0.0))

    assert machine.is_active
    assert machine.baseline == OrientationSample(0.0, 0.0, 0.0)


def test_samples_from_another_thread_never_follow_stop(transmitter, captured_events):
    machine, device = make_machine(transmitter)
    done = threading.Event()

    def stream():
        while not done.is_set():
            device.push_orientation(OrientationSample(0.1, 0.2, 0.3))

    worker = threading.Thread(target=stream)
    worker.start()
    try:
        for _ in range(200):
            machine.on_pose(device, Pose.FIST)
            machine.on_pose(device, Pose.REST)
    finally:
        done.set()
        worker.join(timeout=5.0)

    active = False
    for payload in transmitter.payloads:
        if payload == b"\x01":
            assert not active
            active = True
        elif payload == b"\x00":
            assert active
            active = False
        else:
            # data packets only between a start and its stop
            assert active
    assert not active
    assert transmitter.payloads.count(b"\x01") == 200
