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
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Union

from .errors import ConnStatus


class ServerType(str, Enum):
    """
    Contains the Minecraft editions that can be pinged.

    - `JAVA`: Java edition, TCP status ping (default port 25565)
    - `BEDROCK`: Bedrock/Education/PE edition, RakNet unconnected ping over UDP (default port 19132)
    - `UNKNOWN`: Try both editions.
    """

    def __str__(self) -> str:
        return str(self.value)

    JAVA = "java"
    BEDROCK = "bedrock"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ConnectPoint:
    """One concrete socket destination."""

    ip: str
    port: int

    def __str__(self) -> str:
        if ":" in self.ip:
            return f"[{self.ip}]:{self.port}"
        return f"{self.ip}:{self.port}"


SrvRecord = ConnectPoint
"""Target host and port of a `_minecraft._tcp` SRV record."""


@dataclass
class ValidAddressInfo:
    """
    A resolved server address.

    `connect_points` is ordered by preference, its first element is always `(ip, port)`.
    """

    server_addr: str
    ip: str
    port: int
    connect_points: list[ConnectPoint]
    srv_record: SrvRecord | None = None
    valid: Literal[True] = field(default=True, init=False)

    def __post_init__(self) -> None:
        if not self.connect_points or self.connect_points[0] != ConnectPoint(
            self.ip, self.port
        ):
            raise ValueError("connect_points must start with (ip, port)")


@dataclass
class InvalidAddressInfo:
    server_addr: str
    invalid_reason: Exception | None = None
    valid: Literal[False] = field(default=False, init=False)


AddressInfo = Union[ValidAddressInfo, InvalidAddressInfo]


@dataclass
class PingOutcome:
    """
    A successful status ping.

    :param ping_delay: Milliseconds between the first byte sent and the first byte received
    :param response: The decoded status payload (Java: the server's JSON document,
        Bedrock: the normalised advertisement, see `bedrock.BedrockAdvertisement.to_status()`)
    :param srv_record: The SRV record that redirected a Java ping, if any
    """

    ping_delay: int
    response: Any
    srv_record: SrvRecord | None = None


@dataclass
class PingResult:
    """Aggregated result of `ping_server()`."""

    status: bool
    java: PingOutcome | None = None
    bedrock: PingOutcome | None = None
    address_java: AddressInfo | None = None
    address_bedrock: AddressInfo | None = None
    java_address_accepted: bool = False
    bedrock_address_accepted: bool = False
    java_error: Exception | None = None
    bedrock_error: Exception | None = None
    reason: Exception | None = None
    """the aggregated failure, only set when `status` is False"""

    @property
    def errors(self) -> list[Exception]:
        return [e for e in (self.java_error, self.bedrock_error) if e is not None]

    @property
    def connection_status(self) -> ConnStatus:
        """`SUCCESS` when any edition answered, otherwise the status of `reason`."""
        if self.status:
            return ConnStatus.SUCCESS
        return getattr(self.reason, "status", ConnStatus.UNKNOWN)
