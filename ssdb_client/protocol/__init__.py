"""Protocol module for the SSDB client."""

from .codec import FRAME_END, encode_block, encode_frame, read_block, read_frame
from .commands import COMMAND_TABLE, ResultType, SSDBResult, check_status, parse_result
from .errors import FramingError, RequestError, SSDBError

__all__ = [
    "FRAME_END",
    "encode_block",
    "encode_frame",
    "read_block",
    "read_frame",
    "COMMAND_TABLE",
    "ResultType",
    "SSDBResult",
    "check_status",
    "parse_result",
    "FramingError",
    "RequestError",
    "SSDBError",
]
