"""
SSDB Client: Blocking and asyncio client for the SSDB key-value server

Speaks the length-prefixed block protocol over raw TCP sockets.
"""

from .aio import AsyncSSDBClient
from .client import SSDBClient
from .protocol.commands import ResultType, SSDBResult
from .protocol.errors import (
    AlreadyConnectedError,
    ConnectionError,
    FramingError,
    RequestError,
    SSDBError,
)

__version__ = "1.0.0"

__all__ = [
    "SSDBClient",
    "AsyncSSDBClient",
    "ResultType",
    "SSDBResult",
    "SSDBError",
    "FramingError",
    "ConnectionError",
    "RequestError",
    "AlreadyConnectedError",
]
