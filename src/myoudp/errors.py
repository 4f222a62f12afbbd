"""Exception types for myoudp."""


class MyoUdpError(Exception):
    """Base class for errors raised by myoudp."""


class TransportError(MyoUdpError):
    """Raised when a UDP packet could not be sent."""


class DeviceError(MyoUdpError):
    """Raised when the armband (or its SDK) fails to carry out a request."""
