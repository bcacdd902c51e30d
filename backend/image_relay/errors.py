"""
Image Relay Errors

Exception types raised by the relay. Routes turn these into plain-text
responses; the process entry point turns startup errors into exit codes.
"""


class RelayError(Exception):
    """Base class for all relay errors."""
    pass


class ConfigLoadError(RelayError):
    """config.json could not be opened or decoded."""
    pass


class StartupError(RelayError):
    """The listener could not be created (invalid port, bind failure)."""
    pass


class UpstreamError(RelayError):
    """Transport-level failure talking to the upload API."""
    pass
