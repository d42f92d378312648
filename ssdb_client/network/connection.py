"""
TCP Connection Module

Owns one socket and the buffered reader/writer pair wrapped around it.
A Connection is created by SSDBClient.connect() and never shared.
"""

import logging
import socket
from typing import Optional

from ..config.settings import settings
from ..protocol.errors import ConnectionError

logger = logging.getLogger(__name__)


class Connection:
    """
    An open, bidirectional byte stream with read and write buffering.

    Attributes:
        host: Peer host
        port: Peer port
        reader: Buffered binary reader over the socket
        writer: Buffered binary writer over the socket
    """

    def __init__(self, sock: socket.socket, host: str, port: int):
        self.host = host
        self.port = port
        self._sock = sock
        self.reader = sock.makefile("rb", buffering=settings.READ_BUFFER_SIZE)
        self.writer = sock.makefile("wb", buffering=settings.WRITE_BUFFER_SIZE)

    @classmethod
    def open(cls, host: str, port: int, timeout: Optional[float] = None) -> "Connection":
        """
        Establish a TCP connection.

        Raises:
            ConnectionError: If the transport cannot be established
        """
        sock = None
        try:
            sock = socket.create_connection((host, port), timeout=timeout)
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        except OSError as e:
            if sock is not None:
                sock.close()
            logger.error(f"Failed to connect to {host}:{port}: {e}")
            raise ConnectionError(f"cannot connect to {host}:{port}: {e}") from e
        return cls(sock, host, port)

    @property
    def peer(self) -> str:
        return f"{self.host}:{self.port}"

    def flush(self) -> None:
        self.writer.flush()

    def release(self) -> None:
        """
        Close the buffers and the socket.

        Closing the writer still tries to flush whatever is left in its
        buffer. A failure there is logged and the socket is closed anyway.
        """
        for f in (self.reader, self.writer):
            try:
                f.close()
            except OSError as e:
                logger.debug(f"Error closing buffer for {self.peer}: {e}")
        self._sock.close()

    def close(self) -> None:
        """Flush pending writes, then release the socket."""
        try:
            self.flush()
        finally:
            self.release()
