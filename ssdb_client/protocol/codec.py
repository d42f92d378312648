"""
Block Codec Module

Encodes request frames and decodes response frames for the SSDB protocol.

Wire Format:
    block  ::= <decimal length>\\n <bytes> \\n
    frame  ::= block* \\n

    Request:  block(command) block(param)* \\n
    Response: block(value)* \\n

Lengths are exact byte counts, so payloads may contain any bytes,
newlines included. A frame ends with an empty length line.

Example (set k v):
    b"3\\nset\\n1\\nk\\n1\\nv\\n\\n"
"""

from asyncio import IncompleteReadError, LimitOverrunError, StreamReader
from typing import BinaryIO, Iterable, List, Optional, Union

from .errors import FramingError

BlockData = Union[bytes, str, int]

LINE_TERM = b"\n"


class _FrameEnd:
    """Sentinel type for the terminating empty block of a frame."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "FRAME_END"

    def __bool__(self) -> bool:
        return False


FRAME_END = _FrameEnd()


def to_bytes(data: BlockData) -> bytes:
    """Convert a command name or parameter to its wire bytes."""
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, int) and not isinstance(data, bool):
        return str(data).encode("ascii")
    raise TypeError(f"cannot encode {type(data).__name__} as a block")


def encode_block(data: BlockData) -> bytes:
    """
    Encode a single block.

    Examples:
        >>> encode_block("get")
        b'3\\nget\\n'
        >>> encode_block(b"a\\nb")
        b'3\\na\\nb\\n'
    """
    payload = to_bytes(data)
    return str(len(payload)).encode("ascii") + LINE_TERM + payload + LINE_TERM


def encode_frame(blocks: Iterable[BlockData]) -> bytes:
    """Encode a whole frame, including the terminating empty line."""
    return b"".join(encode_block(block) for block in blocks) + LINE_TERM


def write_block(stream: BinaryIO, data: BlockData) -> None:
    stream.write(encode_block(data))


def write_frame_end(stream: BinaryIO) -> None:
    stream.write(LINE_TERM)


def parse_length(line: bytes) -> Optional[int]:
    """
    Parse a block length line.

    Args:
        line: Raw line including its terminator

    Returns:
        The declared payload length, or None for the frame-end marker.

    Raises:
        FramingError: If the line is not a non-negative decimal integer
    """
    text = line.rstrip(b"\r\n")
    if not text:
        return None
    if not text.isdigit():
        raise FramingError(f"invalid block length {text!r}")
    return int(text)


def _check_terminator(term: bytes) -> None:
    if term != LINE_TERM:
        raise FramingError(f"missing block terminator, got {term!r}")


def read_exact(stream: BinaryIO, n: int) -> bytes:
    """Read exactly n bytes. Fewer bytes, EOF included, is a FramingError."""
    data = stream.read(n)
    if data is None or len(data) < n:
        got = 0 if data is None else len(data)
        raise FramingError(f"short read: expected {n} bytes, got {got}")
    return data


def read_block(stream: BinaryIO):
    """
    Read one block from a buffered binary stream.

    Returns:
        The payload bytes, or FRAME_END for the empty terminating block.

    Raises:
        FramingError: On EOF, a bad length field, a short payload, or a
            missing terminator byte
    """
    line = stream.readline()
    if not line:
        raise FramingError("connection closed while reading block length")
    if not line.endswith(LINE_TERM):
        raise FramingError(f"unterminated length line {line!r}")

    length = parse_length(line)
    if length is None:
        return FRAME_END

    payload = read_exact(stream, length)
    _check_terminator(read_exact(stream, 1))
    return payload


def read_frame(stream: BinaryIO) -> List[bytes]:
    """Read blocks until FRAME_END and return them in order."""
    blocks = []
    while True:
        block = read_block(stream)
        if block is FRAME_END:
            return blocks
        blocks.append(block)


async def read_block_async(reader: StreamReader):
    """asyncio counterpart of read_block()."""
    try:
        line = await reader.readuntil(LINE_TERM)
    except IncompleteReadError as e:
        raise FramingError(
            f"connection closed while reading block length (got {e.partial!r})"
        ) from e
    except LimitOverrunError as e:
        raise FramingError("block length line exceeds reader limit") from e

    length = parse_length(line)
    if length is None:
        return FRAME_END

    try:
        data = await reader.readexactly(length + 1)
    except IncompleteReadError as e:
        raise FramingError(
            f"short read: expected {length + 1} bytes, got {len(e.partial)}"
        ) from e

    _check_terminator(data[-1:])
    return data[:-1]


async def read_frame_async(reader: StreamReader) -> List[bytes]:
    """asyncio counterpart of read_frame()."""
    blocks = []
    while True:
        block = await read_block_async(reader)
        if block is FRAME_END:
            return blocks
        blocks.append(block)


def decode_text(block: bytes) -> str:
    """
    Decode a block payload as UTF-8.

    Invalid UTF-8 is a FramingError rather than a silent empty string,
    since a lenient decode would hide real server responses.
    """
    try:
        return block.decode("utf-8")
    except UnicodeDecodeError as e:
        raise FramingError(f"block is not valid UTF-8: {e}") from e
