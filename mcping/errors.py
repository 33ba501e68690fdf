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
from enum import Enum


class ConnStatus(Enum):
    """
    Contains possible connection states.

    - `SUCCESS`: The ping succeeded (request & response parsing OK)
    - `CONNFAIL`: The socket to the server could not be established. Server offline, wrong hostname or port?
    - `TIMEOUT`: The connection timed out. (Server under too much load? Firewall rules OK?)
    - `UNKNOWN`: The connection was established, but the server spoke an unknown/unsupported protocol.
    - `INVALID`: No connection was attempted, the address could not be resolved or was rejected.
    """

    def __str__(self) -> str:
        return str(self.name)

    SUCCESS = 0
    """The ping succeeded (Request & response parsing OK)"""

    CONNFAIL = -1
    """The socket to the server could not be established. (Server offline, wrong hostname or port?)"""

    TIMEOUT = -2
    """The connection timed out. (Server under too much load? Firewall rules OK?)"""

    UNKNOWN = -3
    """The connection was established, but the server spoke an unknown/unsupported protocol."""

    INVALID = -4
    """No connection was attempted, the address could not be resolved or was rejected."""


class McPingError(Exception):
    """Base class of every error raised or reported by mcping."""

    status = ConnStatus.UNKNOWN


class InvalidArgument(McPingError, ValueError):
    """Neither server type nor port given, or the port is malformed."""

    status = ConnStatus.INVALID


class AddressFamilyMismatch(McPingError):
    """A literal IP does not belong to the requested address family."""

    status = ConnStatus.INVALID


class ResolutionFailure(McPingError):
    """Neither SRV nor A/AAAA lookups produced a usable address."""

    status = ConnStatus.INVALID


class SocketError(McPingError):
    """Connection refused, network unreachable or another OS-level failure."""

    status = ConnStatus.CONNFAIL


class PingTimeout(McPingError, TimeoutError):
    status = ConnStatus.TIMEOUT


class ProtocolViolation(McPingError):
    """Unexpected packet id, malformed framing or an unparseable payload."""

    status = ConnStatus.UNKNOWN


class FilterRejected(McPingError):
    """The caller's address filter returned a falsy value or raised."""

    status = ConnStatus.INVALID


class PingErrors(McPingError):
    """
    Several failures collected while pinging more than one edition.

    :param errors: The individual failures, in the order they were recorded
    """

    def __init__(self, errors: list[Exception], message: str = "all pings failed") -> None:
        super().__init__(message, errors)
        self.errors = list(errors)
        # One shared cause keeps its status, mixed causes stay UNKNOWN
        statuses = {getattr(e, "status", ConnStatus.UNKNOWN) for e in self.errors}
        if len(statuses) == 1:
            self.status = statuses.pop()

    def __str__(self) -> str:
        return "; ".join(f"{type(e).__name__}: {e}" for e in self.errors)
