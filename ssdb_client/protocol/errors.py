"""
Client Error Types

Every recoverable failure raised by the client derives from SSDBError.
AlreadyConnectedError is a usage fault and deliberately sits outside it.
"""

import builtins


class SSDBError(Exception):
    """Base class for all recoverable client errors."""


class FramingError(SSDBError):
    """
    Malformed or truncated block framing.

    The stream position is unknown once this is raised, so the connection
    must not be reused.
    """


class ConnectionError(SSDBError, builtins.ConnectionError):
    """Transport failure: refused, reset, closed, or not connected."""


class RequestError(SSDBError):
    """
    The server answered with a non-success status, or with fewer blocks
    than the command's result shape needs.

    Attributes:
        status: Status text received from the server ("" if none)
    """

    def __init__(self, message: str, status: str = ""):
        super().__init__(message)
        self.status = status


class AlreadyConnectedError(RuntimeError):
    """connect() was called on a client that already holds a connection."""
