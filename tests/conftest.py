"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import threading
from asyncio import StreamReader, StreamWriter
from typing import Dict, Generator, List

import pytest

from ssdb_client.client import SSDBClient
from ssdb_client.protocol.codec import encode_frame, read_frame_async
from ssdb_client.protocol.errors import FramingError


# ============================================================================
# Fake Server
# ============================================================================

class FakeSSDBServer:
    """
    Minimal in-process SSDB server speaking the block protocol.

    Runs an asyncio server on its own event loop in a background thread so
    blocking clients can be tested against it from the test thread.

    Attributes:
        data: Plain key-value space
        hashes: name -> {key: value}
        raw_replies: command name -> raw bytes sent instead of a normal
            response; the connection is closed right after
        commands: Every request frame received, in order
    """

    def __init__(self):
        self.data: Dict[bytes, bytes] = {}
        self.hashes: Dict[bytes, Dict[bytes, bytes]] = {}
        self.raw_replies: Dict[str, bytes] = {}
        self.commands: List[List[bytes]] = []
        self.host = '127.0.0.1'
        self.port = None
        self._loop = None
        self._thread = None
        self._server = None
        self._tasks = set()
        self._lock = threading.Lock()

    def start(self) -> None:
        self._loop = asyncio.new_event_loop()
        ready = threading.Event()

        def run() -> None:
            asyncio.set_event_loop(self._loop)
            self._server = self._loop.run_until_complete(
                asyncio.start_server(self.handle_client, self.host, 0)
            )
            self.port = self._server.sockets[0].getsockname()[1]
            ready.set()
            self._loop.run_forever()

        self._thread = threading.Thread(target=run, daemon=True)
        self._thread.start()
        if not ready.wait(timeout=5):
            raise RuntimeError("fake server did not start")

    def stop(self) -> None:
        async def shutdown() -> None:
            self._server.close()
            for task in list(self._tasks):
                task.cancel()
            await asyncio.gather(*self._tasks, return_exceptions=True)

        asyncio.run_coroutine_threadsafe(shutdown(), self._loop).result(timeout=5)
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5)
        self._loop.close()

    async def handle_client(self, reader: StreamReader, writer: StreamWriter) -> None:
        task = asyncio.current_task()
        self._tasks.add(task)
        try:
            while True:
                try:
                    frame = await read_frame_async(reader)
                except FramingError:
                    break
                if not frame:
                    continue
                with self._lock:
                    self.commands.append(frame)

                name = frame[0].decode()
                if name in self.raw_replies:
                    writer.write(self.raw_replies[name])
                    await writer.drain()
                    break

                writer.write(encode_frame(self.execute(name, frame[1:])))
                await writer.drain()
        except (OSError, asyncio.CancelledError):
            pass
        finally:
            self._tasks.discard(task)
            writer.close()

    def execute(self, name: str, args: List[bytes]) -> List[bytes]:
        with self._lock:
            if name == "ping":
                return [b"ok"]
            if name == "get":
                if args[0] in self.data:
                    return [b"ok", self.data[args[0]]]
                return [b"not_found"]
            if name in ("set", "setx"):
                if len(args) < 2:
                    return [b"client_error", b"wrong number of arguments"]
                self.data[args[0]] = args[1]
                return [b"ok", b"1"]
            if name == "setnx":
                if args[0] in self.data:
                    return [b"ok", b"0"]
                self.data[args[0]] = args[1]
                return [b"ok", b"1"]
            if name == "del":
                self.data.pop(args[0], None)
                return [b"ok", b"1"]
            if name in ("incr", "decr"):
                by = int(args[1]) if len(args) > 1 else 1
                current = int(self.data.get(args[0], b"0"))
                current = current + by if name == "incr" else current - by
                self.data[args[0]] = str(current).encode()
                return [b"ok", str(current).encode()]
            if name == "strlen":
                return [b"ok", str(len(self.data.get(args[0], b""))).encode()]
            if name == "hset":
                bucket = self.hashes.setdefault(args[0], {})
                is_new = args[1] not in bucket
                bucket[args[1]] = args[2]
                return [b"ok", b"1" if is_new else b"0"]
            if name == "hget":
                bucket = self.hashes.get(args[0], {})
                if args[1] in bucket:
                    return [b"ok", bucket[args[1]]]
                return [b"not_found"]
            return [b"client_error", f"Unknown Command: {name}".encode()]


@pytest.fixture
def server() -> Generator[FakeSSDBServer, None, None]:
    """
    Start a fake SSDB server on a free port for one test.

    This fixture:
    1. Starts the server loop in a background thread
    2. Yields the server for testing
    3. Cancels open connections and stops the loop
    """
    srv = FakeSSDBServer()
    srv.start()

    yield srv

    srv.stop()


# ============================================================================
# Client Fixtures
# ============================================================================

@pytest.fixture
def client(server: FakeSSDBServer) -> Generator[SSDBClient, None, None]:
    """A connected blocking client; closed after the test."""
    c = SSDBClient(server.host, server.port, timeout=5.0)
    c.connect()

    yield c

    c.close()


@pytest.fixture
def client_factory(server: FakeSSDBServer):
    """
    Factory fixture to create unconnected blocking clients.

    Usage:
        def test_something(client_factory):
            with client_factory() as client:
                client.get("key")
    """
    def factory() -> SSDBClient:
        return SSDBClient(server.host, server.port, timeout=5.0)
    return factory


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
