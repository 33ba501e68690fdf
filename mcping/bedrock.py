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
Bedrock edition status client, based on the RakNet `Unconnected Ping` / `Unconnected Pong` exchange.

See https://minecraft.wiki/w/RakNet#Unconnected_Ping
"""

import asyncio
from dataclasses import dataclass, field
import socket
import struct
from time import monotonic, perf_counter

from loguru import logger

from .address import is_ipv4, is_ipv6
from .constants import DEFAULT_BEDROCK_PORT, DEFAULT_TIMEOUT, RAKNET_MAGIC
from .errors import McPingError, PingTimeout, ProtocolViolation, SocketError
from .models import PingOutcome

UNCONNECTED_PING = 0x01
UNCONNECTED_PONG = 0x1C
PING_PACKET_SIZE = 35

START_TIME = monotonic()


@dataclass
class BedrockAdvertisement:
    """
    The fields of the semicolon delimited advertise string.

    Fields missing from a short advertise string are None.
    """

    game_id: str | None = None
    """edition, MCPE or MCEE"""
    description: str | None = None
    """first MOTD line"""
    protocol_version: int | None = None
    game_version: str | None = None
    current_players: int | None = None
    max_players: int | None = None
    server_id: str | None = None
    name: str | None = None
    """second MOTD line, usually the level name"""
    mode: str | None = None
    """game mode, e.g. Survival"""
    mode_code: int | None = None
    ipv4_port: int | None = None
    ipv6_port: int | None = None
    fields: list[str] = field(default_factory=list)
    """all fields as sent by the server"""

    def to_status(self) -> dict:
        """Arrange the advertisement like a Java edition status document."""
        return {
            "version": {
                "name": self.game_version,
                "protocol": self.protocol_version,
            },
            "players": {
                "max": self.max_players,
                "online": self.current_players,
            },
            "description": self.description,
            "gamemode": self.mode,
            "detail_info": self,
        }


@dataclass
class UnconnectedPong:
    ping_id: int
    server_guid: int
    advertise: str
    advertisement: BedrockAdvertisement


def _field(parts: list[str], index: int) -> str | None:
    return parts[index] if index < len(parts) else None


def _int_field(parts: list[str], index: int) -> int | None:
    try:
        return int(parts[index])
    except (IndexError, ValueError):
        return None


def parse_advertise_string(advertise: str) -> BedrockAdvertisement:
    parts = advertise.split(";")
    return BedrockAdvertisement(
        game_id=_field(parts, 0),
        description=_field(parts, 1),
        protocol_version=_int_field(parts, 2),
        game_version=_field(parts, 3),
        current_players=_int_field(parts, 4),
        max_players=_int_field(parts, 5),
        server_id=_field(parts, 6),
        name=_field(parts, 7),
        mode=_field(parts, 8),
        mode_code=_int_field(parts, 9),
        ipv4_port=_int_field(parts, 10),
        ipv6_port=_int_field(parts, 11),
        fields=parts,
    )


def build_unconnected_ping(ping_id: int) -> bytes:
    """
    Construct the `Unconnected_Ping` packet.

    :param ping_id: Client time, as signed long (64-bit) BE-encoded
    """
    # Packet ID - 0x01
    req_data = bytearray([UNCONNECTED_PING])
    req_data += struct.pack(">q", ping_id)
    # RakNet MAGIC (0x00ffff00fefefefefdfdfdfd12345678)
    req_data += RAKNET_MAGIC
    # Client GUID
    req_data += struct.pack(">q", 0)
    # Zero padding up to the fixed packet size
    req_data += bytes(PING_PACKET_SIZE - len(req_data))
    return bytes(req_data)


def _read_framed_string(data: bytes, offset: int) -> str | None:
    if len(data) < offset + 2:
        return None
    (length,) = struct.unpack_from(">H", data, offset)
    raw = data[offset + 2 : offset + 2 + length]
    if len(raw) != length:
        return None
    return raw.decode("utf8", errors="replace")


def parse_unconnected_pong(data: bytes) -> UnconnectedPong:
    """
    Parse an `Unconnected_Pong` packet.

    response packet:
    byte - 0x1C - Unconnected Pong
    long - ping id (echoed, not validated)
    long - server GUID
    16 byte - magic (omitted by some servers)
    short - advertise string length (omitted by some servers)
    string - advertise string

    :raises ProtocolViolation: wrong packet id or a packet too short to hold the header
    """
    if not data or data[0] != UNCONNECTED_PONG:
        packet_id = f"0x{data[0]:02x}" if data else "empty datagram"
        raise ProtocolViolation(f"Received unexpected packet ({packet_id})")
    if len(data) < 17:
        raise ProtocolViolation("truncated unconnected pong")

    ping_id, server_guid = struct.unpack_from(">qq", data, 1)

    offset = 17
    if data[offset : offset + len(RAKNET_MAGIC)] == RAKNET_MAGIC:
        offset += len(RAKNET_MAGIC)

    # Servers disagree about the framing: try the length prefixed string first,
    # otherwise the rest of the datagram is the advertise string.
    advertise = _read_framed_string(data, offset)
    if advertise is None:
        advertise = data[offset:].decode("utf8", errors="replace")

    return UnconnectedPong(ping_id, server_guid, advertise, parse_advertise_string(advertise))


def socket_families(host: str) -> list[socket.AddressFamily]:
    """Socket families to try in order. Hostnames try IPv6 first and fall back to IPv4."""
    if is_ipv6(host):
        return [socket.AF_INET6]
    if is_ipv4(host):
        return [socket.AF_INET]
    return [socket.AF_INET6, socket.AF_INET]


class BedrockPingProtocol(asyncio.DatagramProtocol):
    """Sends one Unconnected Ping and settles `result` exactly once."""

    def __init__(self, result: asyncio.Future, packet: bytes) -> None:
        self.result = result
        self.packet = packet
        self.transport: asyncio.DatagramTransport | None = None
        self.start_time = 0.0
        self.ping_delay: int | None = None

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.transport = transport  # type: ignore
        self.start_time = perf_counter()
        self.transport.sendto(self.packet)

    def datagram_received(self, data: bytes, addr) -> None:
        if self.result.done():
            return
        if self.ping_delay is None:
            self.ping_delay = round((perf_counter() - self.start_time) * 1000)

        try:
            pong = parse_unconnected_pong(data)
        except ProtocolViolation as e:
            self.fail(e)
            return

        self.succeed(PingOutcome(self.ping_delay, pong.advertisement.to_status()))

    def error_received(self, exc: Exception) -> None:
        err = SocketError(f"socket error: {exc}")
        err.__cause__ = exc
        self.fail(err)

    def connection_lost(self, exc: Exception | None) -> None:
        if exc is not None:
            self.error_received(exc)

    def on_open_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            err = SocketError(f"cannot open socket: {exc}")
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


async def _open_endpoint(protocol: BedrockPingProtocol, host: str, port: int) -> None:
    loop = asyncio.get_running_loop()
    families = socket_families(host)

    while True:
        family = families.pop(0)
        try:
            await loop.create_datagram_endpoint(
                lambda: protocol, remote_addr=(host, port), family=family
            )
            return
        except socket.gaierror as e:
            if not families:
                raise
            logger.debug(
                f"cannot open {family.name} socket to {host}: {e}, trying {families[0].name}"
            )


async def ping(
    host: str,
    port: int = DEFAULT_BEDROCK_PORT,
    timeout: float = DEFAULT_TIMEOUT,
) -> PingOutcome:
    """
    Ping a Minecraft Bedrock server (Minecraft PE, Windows 10 or Education Edition).

    :param host: IP address of the server. A hostname is accepted as well,
        it is tried over IPv6 first and over IPv4 if it has no IPv6 address
    :param port: UDP port of the server
    :param timeout: Timeout in seconds
    :return: `PingOutcome` whose `response` is `BedrockAdvertisement.to_status()`
    :raises SocketError: the socket could not be opened or reported an error
    :raises PingTimeout: no pong within `timeout`
    :raises ProtocolViolation: the server replied with another packet
    """
    loop = asyncio.get_running_loop()
    result = loop.create_future()
    ping_id = int((monotonic() - START_TIME) * 1000)
    protocol = BedrockPingProtocol(result, build_unconnected_ping(ping_id))

    # Ensures the ping will never hang regardless of the socket's state
    timer = loop.call_later(
        timeout, protocol.fail, PingTimeout(f"Socket timeout after {timeout}s ({host}:{port})")
    )
    opening = loop.create_task(_open_endpoint(protocol, host, port))
    opening.add_done_callback(protocol.on_open_done)

    try:
        outcome = await result
    except McPingError as e:
        logger.debug(f"Bedrock ping to {host}:{port} failed: {e!r}")
        raise
    finally:
        timer.cancel()
        opening.cancel()
        protocol.close()

    logger.debug(f"Bedrock ping to {host}:{port} succeeded in {outcome.ping_delay}ms")
    return outcome
