"""
Blocking SSDB Client

SSDBClient owns at most one Connection and drives one request/response
cycle at a time:

    1. Write the command and each parameter as a block
    2. Close the frame with an empty length line
    3. Flush
    4. Read blocks until the response frame ends

Connection state:
    Unconnected --connect()--> Connected --close()--> Unconnected

connect() on a connected client is a usage fault (AlreadyConnectedError).
Requests on an unconnected client raise ConnectionError; there is no
implicit connect.
"""

import logging
from typing import List, Optional, Sequence

from .config.settings import settings
from .network.connection import Connection
from .protocol.codec import BlockData, decode_text, encode_frame, read_frame
from .protocol.commands import SSDBResult, build_request, check_status, parse_result
from .protocol.errors import AlreadyConnectedError, ConnectionError, FramingError

logger = logging.getLogger(__name__)


class SSDBClient:
    """
    Client for a single SSDB server.

    Not safe for concurrent use from several threads; give each thread its
    own instance.

    Usage:
        with SSDBClient("127.0.0.1", 8888) as client:
            client.set("key", "value")
            client.get("key").value   # b"value"

    Attributes:
        host: Server host (default from settings)
        port: Server port (default from settings)
        timeout: Socket timeout in seconds, None to block indefinitely
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            timeout: Optional[float] = None,
    ):
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.timeout = timeout if timeout is not None else settings.TIMEOUT
        self._conn: Optional[Connection] = None

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    def connect(self, host: str = None, port: int = None) -> "SSDBClient":
        """
        Open the connection.

        Args:
            host: Overrides the host given to the constructor
            port: Overrides the port given to the constructor

        Raises:
            AlreadyConnectedError: If a connection is already open
            ConnectionError: If the server cannot be reached
        """
        if self._conn is not None:
            raise AlreadyConnectedError("connect() called twice on the same client")

        if host is not None:
            self.host = host
        if port is not None:
            self.port = port
        self._conn = Connection.open(self.host, self.port, timeout=self.timeout)
        logger.info(f"Connected to {self._conn.peer}")
        return self

    def close(self) -> None:
        """
        Flush pending writes and release the connection.

        Does nothing if the client is not connected.
        """
        conn, self._conn = self._conn, None
        if conn is None:
            return
        try:
            conn.close()
        except OSError as e:
            logger.warning(f"Error flushing connection to {conn.peer} on close: {e}")
        logger.info(f"Closed connection to {conn.peer}")

    def send_request_raw(self, command: str, params: Sequence[BlockData] = ()) -> List[bytes]:
        """
        Run one request/response cycle and return the undecoded blocks.

        Raises:
            ConnectionError: If not connected or the transport fails
            FramingError: If the response framing is malformed
            TypeError: If a parameter cannot be encoded as a block
        """
        conn = self._conn
        if conn is None:
            raise ConnectionError(f"not connected: cannot send {command!r}")

        # Encode before touching the writer so a bad parameter leaves no
        # partial frame in the buffer
        data = encode_frame(build_request(command, params))

        logger.debug(f"Sending {command} with {len(params)} param(s) to {conn.peer}")
        try:
            conn.writer.write(data)
            conn.flush()
            resp = read_frame(conn.reader)
        except FramingError as e:
            logger.error(f"Framing error on {command} from {conn.peer}: {e}")
            raise
        except OSError as e:
            logger.error(f"Connection error on {command} to {conn.peer}: {e}")
            raise ConnectionError(f"{command}: {e}") from e

        logger.debug(f"Received {len(resp)} block(s) for {command}")
        return resp

    def send_request(self, command: str, params: Sequence[BlockData] = ()) -> List[str]:
        """
        Run one request/response cycle.

        Args:
            command: Command name, e.g. "get"
            params: Parameters, each sent as one block

        Returns:
            Response blocks decoded as UTF-8, in order.
        """
        return [decode_text(block) for block in self.send_request_raw(command, params)]

    def request(self, command: str, *params: BlockData) -> SSDBResult:
        """Send a command and map its response through the command table."""
        return parse_result(command, self.send_request_raw(command, params))

    def read_status(self, command: str, *params: BlockData) -> None:
        """
        Send a command that only reports success or failure.

        Raises:
            RequestError: If the status is anything other than "ok"
        """
        check_status(self.send_request_raw(command, params))

    # Command wrappers

    def get(self, key: str) -> SSDBResult:
        return self.request("get", key)

    def set(self, key: str, value: BlockData) -> SSDBResult:
        return self.request("set", key, value)

    def setx(self, key: str, value: BlockData, ttl: int) -> SSDBResult:
        """Set a key that expires after ttl seconds."""
        return self.request("setx", key, value, ttl)

    def setnx(self, key: str, value: BlockData) -> SSDBResult:
        """Set a key only if it does not exist. Value is 1 if it was set."""
        return self.request("setnx", key, value)

    def delete(self, key: str) -> SSDBResult:
        return self.request("del", key)

    def incr(self, key: str, by: int = 1) -> SSDBResult:
        return self.request("incr", key, by)

    def decr(self, key: str, by: int = 1) -> SSDBResult:
        return self.request("decr", key, by)

    def strlen(self, key: str) -> SSDBResult:
        return self.request("strlen", key)

    def hset(self, name: str, key: str, value: BlockData) -> SSDBResult:
        return self.request("hset", name, key, value)

    def hget(self, name: str, key: str) -> SSDBResult:
        return self.request("hget", name, key)

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __del__(self):
        conn = getattr(self, "_conn", None)
        if conn is not None:
            self._conn = None
            conn.release()
