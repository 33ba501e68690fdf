# mcping - A Minecraft Java/Bedrock server status pinger
# Copyright (C) 2016-2023 Lloyd Dilley, Felix Ern (MindSolve)
# http://www.dilley.me/
#
# Secondary optimization and customization are carried out by @molanp.
#
# Copyright (C) 2026 The mcping contributors
# Address resolution and the asyncio Java/Bedrock ping clients were rewritten
# for mcping by its contributors.
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along
# with this program; if not, write to the Free Software Foundation, Inc.,
# 51 Franklin Street, Fifth Floor, Boston, MA 02110-1301 USA.
"""
Java edition Server List Ping (status) client.

See https://minecraft.wiki/w/Java_Edition_protocol/Server_List_Ping
"""

import asyncio
import contextlib
import json
import socket
import struct
from time import perf_counter

from loguru import logger

from .constants import DEFAULT_JAVA_PORT, DEFAULT_TIMEOUT
from .errors import InvalidArgument, McPingError, PingTimeout, ProtocolViolation, SocketError
from .models import PingOutcome

PROTOCOL_VERSION = 0
"""protocol version announced in the handshake"""
MAX_VARINT_SIZE = 5
"""VarInts are never longer than 5 bytes"""


class IncompleteVarint(ProtocolViolation):
    """The buffer ended in the middle of a varint."""


def pack_varint(data: int) -> bytes:
    """Small helper method for packing a varint from an int. Negative values use 32-bit two's complement."""
    data &= 0xFFFFFFFF
    ordinal = b""

    while True:
        byte = data & 0x7F
        data >>= 7
        ordinal += struct.pack("B", byte | (0x80 if data > 0 else 0))

        if data == 0:
            break

    return ordinal


def unpack_varint(buffer: bytes | bytearray, offset: int = 0) -> tuple[int, int]:
    """
    Small helper method for unpacking an int from a varint inside a buffer.

    :param buffer: The received bytes
    :param offset: Position of the varint inside `buffer`
    :return: Tuple of the decoded value and the number of bytes it occupied
    :raises IncompleteVarint: `buffer` ends before the varint does
    :raises ProtocolViolation: the varint is longer than 5 bytes
    """
    data = 0
    for i in range(MAX_VARINT_SIZE):
        if offset + i >= len(buffer):
            raise IncompleteVarint("truncated varint")

        byte = buffer[offset + i]
        data |= (byte & 0x7F) << 7 * i

        if not byte & 0x80:
            if data & 0x80000000:
                data -= 1 << 32
            return data, i + 1

    raise ProtocolViolation("varint is too big")


def pack_string(value: str) -> bytes:
    raw = value.encode("utf8")
    return pack_varint(len(raw)) + raw


def pack_packet(*fields: bytes) -> bytes:
    """Join the fields of a packet and prepend the full packet length."""
    body = b"".join(fields)
    return pack_varint(len(body)) + body


def build_handshake(server_addr: str, port: int, protocol_version: int = PROTOCOL_VERSION) -> bytes:
    return pack_packet(
        # Packet ID
        pack_varint(0x00),
        pack_varint(protocol_version),
        # Server address, the hostname the client used to connect
        pack_string(server_addr),
        # Server port
        struct.pack(">H", port),
        # Next state (1 for status, 2 for login)
        pack_varint(1),
    )


def build_status_request() -> bytes:
    return pack_packet(pack_varint(0x00))


def parse_status_response(buffer: bytes | bytearray) -> dict | None:
    """
    Parse a Status Response packet.

    :param buffer: Everything received so far
    :return: The decoded JSON document, or None while the packet is still incomplete
    :raises ProtocolViolation: unexpected packet id, bad framing or invalid JSON
    """
    if len(buffer) < MAX_VARINT_SIZE:
        return None

    try:
        packet_len, offset = unpack_varint(buffer)
    except IncompleteVarint:
        return None

    if packet_len <= 0:
        raise ProtocolViolation(f"invalid packet length {packet_len}")

    # A single read is not guaranteed to contain the full packet
    if len(buffer) - offset < packet_len:
        return None

    packet = bytes(buffer[offset : offset + packet_len])

    packet_id, pos = unpack_varint(packet)
    if packet_id != 0x00:
        raise ProtocolViolation(f"Received unexpected packet 0x{packet_id:02x}")

    content_len, size = unpack_varint(packet, pos)
    pos += size
    if content_len < 0 or pos + content_len > len(packet):
        raise ProtocolViolation("truncated status response")

    try:
        return json.loads(packet[pos : pos + content_len].decode("utf8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ProtocolViolation(f"invalid status JSON: {e}") from e


class JavaStatusProtocol(asyncio.Protocol):
    """
    Speaks Handshake + Status Request and waits for the Status Response.

    The outcome is delivered through `result` exactly once, later events are dropped.
    """

    def __init__(self, result: asyncio.Future, handshake: bytes) -> None:
        self.result = result
        self.handshake = handshake
        self.transport: asyncio.Transport | None = None
        self.buffer = bytearray()
        self.start_time = 0.0
        self.ping_delay: int | None = None

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.transport = transport  # type: ignore
        sock = transport.get_extra_info("socket")
        if sock is not None:
            with contextlib.suppress(OSError):
                sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        self.transport.write(self.handshake)
        self.start_time = perf_counter()
        self.transport.write(build_status_request())

    def data_received(self, data: bytes) -> None:
        if self.result.done():
            return
        if self.ping_delay is None:
            self.ping_delay = round((perf_counter() - self.start_time) * 1000)

        self.buffer += data
        try:
            response = parse_status_response(self.buffer)
        except ProtocolViolation as e:
            self.fail(e)
            return

        if response is not None:
            self.succeed(PingOutcome(self.ping_delay, response))

    def connection_lost(self, exc: Exception | None) -> None:
        if exc is not None:
            err = SocketError(f"connection lost: {exc}")
            err.__cause__ = exc
            self.fail(err)
        else:
            self.fail(ProtocolViolation("connection closed before a complete response"))

    def on_connect_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            err = SocketError(f"connection failed: {exc}")
            err.__cause__ = exc
            self.fail(err)

    def succeed(self, outcome: PingOutcome) -> None:
        if not self.result.done():
            self.result.set_result(outcome)
        self.close()

    def fail(self, exc: McPingError) -> None:
        if not self.result.done():
            self.result.set_exception(exc)
        self.close()

    def close(self) -> None:
        if self.transport is not None and not self.transport.is_closing():
            self.transport.close()


async def ping(
    ip: str,
    port: int = DEFAULT_JAVA_PORT,
    timeout: float = DEFAULT_TIMEOUT,
    server_addr: str | None = None,
    protocol_version: int = PROTOCOL_VERSION,
) -> PingOutcome:
    """
    Ping a Minecraft Java server.

    :param ip: Address to connect to
    :param port: Port to connect to
    :param timeout: Timeout in seconds for the whole exchange, connecting included
    :param server_addr: Hostname written into the handshake. Defaults to `ip`
    :param protocol_version: Protocol version announced in the handshake
    :return: `PingOutcome` with the server's status JSON as `response`
    :raises InvalidArgument: the handshake cannot encode `server_addr` or `port`
    :raises SocketError: the connection could not be established or broke
    :raises PingTimeout: no complete response within `timeout`
    :raises ProtocolViolation: the server replied with something unexpected
    """
    loop = asyncio.get_running_loop()
    result = loop.create_future()
    try:
        handshake = build_handshake(server_addr or ip, port, protocol_version)
    except (UnicodeEncodeError, struct.error) as e:
        raise InvalidArgument(f"Cannot build handshake for {ip}:{port}: {e}") from e
    protocol = JavaStatusProtocol(result, handshake)

    # Ensures the ping will never hang regardless of the socket's state
    timer = loop.call_later(
        timeout, protocol.fail, PingTimeout(f"Socket timeout after {timeout}s ({ip}:{port})")
    )
    connecting = loop.create_task(loop.create_connection(lambda: protocol, ip, port))
    connecting.add_done_callback(protocol.on_connect_done)

    try:
        outcome = await result
    except McPingError as e:
        logger.debug(f"Java ping to {ip}:{port} failed: {e!r}")
        raise
    finally:
        timer.cancel()
        connecting.cancel()
        protocol.close()

    logger.debug(f"Java ping to {ip}:{port} succeeded in {outcome.ping_delay}ms")
    return outcome
