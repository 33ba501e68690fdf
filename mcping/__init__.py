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
mcping - The Minecraft server pinger. Resolves a server address (SRV, A/AAAA)
and pings Minecraft Java edition and Bedrock/Education/PE servers.
"""

from . import bedrock, java
from .address import (
    ResolveOptions,
    get_server_address_info,
    is_ip,
    is_ipv4,
    is_ipv6,
)
from .chat import decode_chat_component, strip_color_codes
from .errors import (
    AddressFamilyMismatch,
    ConnStatus,
    FilterRejected,
    InvalidArgument,
    McPingError,
    PingErrors,
    PingTimeout,
    ProtocolViolation,
    ResolutionFailure,
    SocketError,
)
from .models import (
    AddressInfo,
    ConnectPoint,
    InvalidAddressInfo,
    PingOutcome,
    PingResult,
    ServerType,
    SrvRecord,
    ValidAddressInfo,
)
from .options import check_ping_options
from .ping import PingOptions, ping_server
from .resolver import resolve_a, resolve_aaaa, resolve_srv, to_ascii_hostname

__version__ = "1.0.0"

__all__ = [
    "AddressFamilyMismatch",
    "AddressInfo",
    "ConnStatus",
    "ConnectPoint",
    "FilterRejected",
    "InvalidAddressInfo",
    "InvalidArgument",
    "McPingError",
    "PingErrors",
    "PingOptions",
    "PingOutcome",
    "PingResult",
    "PingTimeout",
    "ProtocolViolation",
    "ResolutionFailure",
    "ResolveOptions",
    "ServerType",
    "SocketError",
    "SrvRecord",
    "ValidAddressInfo",
    "bedrock",
    "check_ping_options",
    "decode_chat_component",
    "get_server_address_info",
    "is_ip",
    "is_ipv4",
    "is_ipv6",
    "java",
    "ping_server",
    "resolve_a",
    "resolve_aaaa",
    "resolve_srv",
    "strip_color_codes",
    "to_ascii_hostname",
]
