"""
Command Table and Typed Results

The wire protocol is untyped: every response block is text. The shape of a
result is decided here, by the name of the command that was sent.

Response convention:
    resp[0]  status ("ok", "not_found", "error", "fail", ...)
    resp[1]  value, for commands that return one
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, List, Optional, Sequence, Union

from .codec import decode_text
from .errors import FramingError, RequestError

STATUS_OK = "ok"


class ResultType(Enum):
    """Result shapes a command can produce."""
    EMPTY = auto()
    INT = auto()
    DATA = auto()


_INT_COMMANDS = (
    "getbit", "setbit", "countbit", "strlen",
    "set", "setx", "setnx", "zset", "hset",
    "qpush", "qpush_front", "qpush_back",
    "del", "zdel", "hdel", "hsize", "zsize", "qsize",
    "hclear", "zclear", "qclear",
    "multi_set", "multi_del", "multi_hset", "multi_hdel",
    "multi_zset", "multi_zdel",
    "incr", "decr", "zincr", "zdecr", "hincr", "hdecr",
    "zget", "zrank", "zrrank", "zcount", "zsum",
    "zremrangebyrank", "zremrangebyscore",
)

_DATA_COMMANDS = ("get", "hget")

# command name -> result shape
COMMAND_TABLE: Dict[str, ResultType] = {
    **{name: ResultType.INT for name in _INT_COMMANDS},
    **{name: ResultType.DATA for name in _DATA_COMMANDS},
}


def result_type_for(command: str) -> ResultType:
    """Look up a command's result shape. Unknown commands are EMPTY."""
    return COMMAND_TABLE.get(command, ResultType.EMPTY)


@dataclass
class SSDBResult:
    """
    A typed response.

    Attributes:
        type: EMPTY, INT or DATA
        status: Status text from the first response block ("" for EMPTY
            results built without a response). A bare INT reply with no
            status block, such as ["1"], is recorded as "ok"
        value: int for INT, bytes for DATA, None for EMPTY
    """
    type: ResultType
    status: str = ""
    value: Optional[Union[int, bytes]] = None

    @classmethod
    def empty(cls, status: str = "") -> "SSDBResult":
        """Create a result carrying no data."""
        return cls(type=ResultType.EMPTY, status=status)

    @classmethod
    def integer(cls, status: str, value: int) -> "SSDBResult":
        """Create a count/size/delta result."""
        return cls(type=ResultType.INT, status=status, value=value)

    @classmethod
    def payload(cls, status: str, data: bytes) -> "SSDBResult":
        """Create an opaque byte data result."""
        return cls(type=ResultType.DATA, status=status, value=data)

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    @property
    def text(self) -> Optional[str]:
        """DATA payload decoded as UTF-8, or None for other shapes."""
        if self.type != ResultType.DATA:
            return None
        return decode_text(self.value)


def _as_text(block: Union[bytes, str]) -> str:
    return decode_text(block) if isinstance(block, bytes) else block


def _as_bytes(block: Union[bytes, str]) -> bytes:
    return block.encode("utf-8") if isinstance(block, str) else block


def check_status(resp: Sequence[Union[bytes, str]]) -> None:
    """
    Require a success status on a response frame.

    Raises:
        RequestError: If the frame is empty or its first block is not "ok"
    """
    if not resp:
        raise RequestError("empty response")
    status = _as_text(resp[0])
    if status != STATUS_OK:
        raise RequestError(f"request failed: {status}", status=status)


def parse_result(command: str, resp: Sequence[Union[bytes, str]]) -> SSDBResult:
    """
    Map a raw response frame to a typed result.

    Args:
        command: Name of the command that produced the response
        resp: Response blocks, as bytes or already decoded strings

    Returns:
        SSDBResult shaped by COMMAND_TABLE.

    Raises:
        RequestError: If the frame is empty, or an INT frame carries a
            failure status instead of a value
        FramingError: If an "ok" INT value is not an ASCII decimal integer

    Examples:
        >>> parse_result("set", ["ok", "1"]).value
        1
        >>> parse_result("set", ["1"]).value
        1
        >>> parse_result("get", ["ok", "v"]).value
        b'v'
        >>> parse_result("get", ["not_found"]).type
        <ResultType.EMPTY: 1>
    """
    shape = result_type_for(command)
    if shape == ResultType.EMPTY:
        return SSDBResult.empty(_as_text(resp[0]) if resp else "")

    if not resp:
        raise RequestError(f"{command}: empty response")
    status = _as_text(resp[0])

    if shape == ResultType.INT:
        if len(resp) < 2:
            # A lone integer block is a bare value; the reply carried no
            # separate status, so it counts as a success
            if not _is_integer(status):
                raise RequestError(f"{command}: {status}", status=status)
            return SSDBResult.integer(STATUS_OK, int(status))
        raw = _as_text(resp[1])
        if not _is_integer(raw):
            if status != STATUS_OK:
                raise RequestError(f"{command}: {status}: {raw}", status=status)
            raise FramingError(f"{command}: invalid integer value {raw!r}")
        return SSDBResult.integer(status, int(raw))

    # DATA: a status-only frame (not_found, error, ...) carries no payload
    if len(resp) < 2:
        return SSDBResult.empty(status)
    return SSDBResult.payload(status, _as_bytes(resp[1]))


def _is_integer(text: str) -> bool:
    """ASCII decimal digits with an optional leading minus sign."""
    digits = text[1:] if text.startswith("-") else text
    return digits.isascii() and digits.isdigit()


def build_request(command: str, params: Sequence) -> List:
    """Command name followed by its parameters, in wire order."""
    return [command, *params]
