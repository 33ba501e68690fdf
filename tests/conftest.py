import asyncio
import contextlib
import os
import socket
import sys

import pytest

# 添加项目根目录到路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


@contextlib.asynccontextmanager
async def _java_server(*chunks: bytes, close_after: bool = False, delay: float = 0.01):
    """Loopback TCP server writing `chunks` one by one after the client's first write."""
    received = bytearray()

    async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        try:
            received.extend(await reader.read(1024))
            for chunk in chunks:
                writer.write(chunk)
                await writer.drain()
                await asyncio.sleep(delay)
            if not close_after:
                # wait for the client to hang up
                await reader.read()
        except ConnectionError:
            pass
        finally:
            writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    try:
        yield port, received
    finally:
        server.close()
        await server.wait_closed()


class _PongServer(asyncio.DatagramProtocol):
    def __init__(self, reply):
        self.reply = reply
        self.received: list[bytes] = []
        self.transport = None

    def connection_made(self, transport):
        self.transport = transport

    def datagram_received(self, data, addr):
        self.received.append(data)
        if self.reply is not None:
            self.transport.sendto(self.reply, addr)


@contextlib.asynccontextmanager
async def _bedrock_server(reply: bytes | None):
    """Loopback UDP server answering every datagram with `reply` (or never, if None)."""
    loop = asyncio.get_running_loop()
    transport, protocol = await loop.create_datagram_endpoint(
        lambda: _PongServer(reply), local_addr=("127.0.0.1", 0)
    )
    port = transport.get_extra_info("sockname")[1]
    try:
        yield port, protocol
    finally:
        transport.close()


@pytest.fixture
def java_server():
    """创建Java版状态服务器的fixture"""
    return _java_server


@pytest.fixture
def bedrock_server():
    """创建基岩版UDP服务器的fixture"""
    return _bedrock_server


@pytest.fixture
def closed_port():
    """A loopback TCP port nobody listens on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
