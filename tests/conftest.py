import pytest

from myoudp import events


class RecordingTransmitter:
    """Stands in for UdpTransmitter; keeps every payload instead of sending."""

    def __init__(self, fail=False):
        self.payloads = []
        self.fail = fail

    def send_quietly(self, payload):
        if self.fail:
            return False
        self.payloads.append(bytes(payload))
        return True


@pytest.fixture
def transmitter():
    return RecordingTransmitter()


@pytest.fixture
def captured_events():
    seen = []
    events.set_event_callback(seen.append)
    events.set_quiet(True)
    yield seen
    events.set_event_callback(None)
    events.set_quiet(False)


@pytest.fixture
def failing_transmitter():
    return RecordingTransmitter(fail=True)
