"""
Asyncio SSDB Client

Same request/response cycle as SSDBClient, over asyncio streams. The whole
request frame is written and drained before the response is read, and a
lock keeps calls on one instance from interleaving.
"""

import asyncio
import logging
from asyncio import StreamReader, StreamWriter
from typing import List, Optional, Sequence

from .config.settings import settings
from .protocol.codec import BlockData, decode_text, encode_frame, read_frame_async
from .protocol.commands import SSDBResult, build_request, check_status, parse_result
from .protocol.errors import AlreadyConnectedError, ConnectionError, FramingError

logger = logging.getLogger(__name__)


class AsyncSSDBClient:
    """
    Asyncio client for a single SSDB server.

    Usage:
        async with AsyncSSDBClient("127.0.0.1", 8888) as client:
            await client.set("key", "value")
            result = await client.get("key")
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
        self.reader: Optional[StreamReader] = None
        self.writer: Optional[StreamWriter] = None
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self.writer is not None

    @property
    def peer(self) -> str:
        return f"{self.host}:{self.port}"

    async def connect(self, host: str = None, port: int = None) -> "AsyncSSDBClient":
        """
        Open the connection.

        Raises:
            AlreadyConnectedError: If a connection is already open
            ConnectionError: If the server cannot be reached
        """
        if self.writer is not None:
            raise AlreadyConnectedError("connect() called twice on the same client")

        if host is not None:
            self.host = host
        if port is not None:
            self.port = port

        try:
            self.reader, self.writer = await asyncio.wait_for(
                asyncio.open_connection(
                    self.host, self.port, limit=settings.READ_BUFFER_SIZE
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Timeout connecting to {self.peer}")
            raise ConnectionError(f"timeout connecting to {self.peer}") from e
        except OSError as e:
            logger.error(f"Failed to connect to {self.peer}: {e}")
            raise ConnectionError(f"cannot connect to {self.peer}: {e}") from e

        logger.info(f"Connected to {self.peer}")
        return self

    async def close(self) -> None:
        """Drain and close the connection. Does nothing if not connected."""
        writer, self.writer, self.reader = self.writer, None, None
        if writer is None:
            return
        try:
            await writer.drain()
        except OSError as e:
            logger.warning(f"Error flushing connection to {self.peer} on close: {e}")
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError as e:
                logger.warning(f"Error closing connection to {self.peer}: {e}")
        logger.info(f"Closed connection to {self.peer}")

    async def send_request_raw(self, command: str, params: Sequence[BlockData] = ()) -> List[bytes]:
        """
        Run one request/response cycle and return the undecoded blocks.

        Raises:
            ConnectionError: If not connected or the transport fails
            FramingError: If the response framing is malformed
        """
        async with self._lock:
            if self.writer is None:
                raise ConnectionError(f"not connected: cannot send {command!r}")

            logger.debug(f"Sending {command} with {len(params)} param(s) to {self.peer}")
            try:
                self.writer.write(encode_frame(build_request(command, params)))
                await self.writer.drain()
                resp = await asyncio.wait_for(read_frame_async(self.reader), timeout=self.timeout)
            except FramingError as e:
                logger.error(f"Framing error on {command} from {self.peer}: {e}")
                raise
            except asyncio.TimeoutError as e:
                logger.error(f"Timeout waiting for {command} response from {self.peer}")
                raise ConnectionError(f"{command}: response timed out") from e
            except OSError as e:
                logger.error(f"Connection error on {command} to {self.peer}: {e}")
                raise ConnectionError(f"{command}: {e}") from e

        logger.debug(f"Received {len(resp)} block(s) for {command}")
        return resp

    async def send_request(self, command: str, params: Sequence[BlockData] = ()) -> List[str]:
        """Run one request/response cycle; blocks are decoded as UTF-8."""
        return [decode_text(block) for block in await self.send_request_raw(command, params)]

    async def request(self, command: str, *params: BlockData) -> SSDBResult:
        return parse_result(command, await self.send_request_raw(command, params))

    async def read_status(self, command: str, *params: BlockData) -> None:
        check_status(await self.send_request_raw(command, params))

    async def get(self, key: str) -> SSDBResult:
        return await self.request("get", key)

    async def set(self, key: str, value: BlockData) -> SSDBResult:
        return await self.request("set", key, value)

    async def delete(self, key: str) -> SSDBResult:
        return await self.request("del", key)

    async def incr(self, key: str, by: int = 1) -> SSDBResult:
        return await self.request("incr", key, by)

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
