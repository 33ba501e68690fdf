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
"""Literal IP detection and server address resolution."""

import asyncio
from dataclasses import dataclass
import re
from typing import Literal, Union

from loguru import logger

from . import resolver
from .constants import DEFAULT_BEDROCK_PORT, DEFAULT_DNS_TIMEOUT, DEFAULT_JAVA_PORT
from .errors import AddressFamilyMismatch, InvalidArgument, ResolutionFailure
from .models import (
    AddressInfo,
    ConnectPoint,
    InvalidAddressInfo,
    ServerType,
    SrvRecord,
    ValidAddressInfo,
)

_OCTET = r"(?:25[0-5]|2[0-4]\d|1\d\d|[1-9]\d|\d)"
_IPV4 = rf"{_OCTET}(?:\.{_OCTET}){{3}}"
_H16 = r"[a-fA-F\d]{1,4}"

IPV4_PATTERN = re.compile(_IPV4, re.ASCII)
IPV6_PATTERN = re.compile(
    r"(?:"
    rf"(?:{_H16}:){{7}}(?:{_H16}|:)|"
    rf"(?:{_H16}:){{6}}(?:{_IPV4}|:{_H16}|:)|"
    rf"(?:{_H16}:){{5}}(?::{_IPV4}|(?::{_H16}){{1,2}}|:)|"
    rf"(?:{_H16}:){{4}}(?:(?::{_H16}){{0,1}}:{_IPV4}|(?::{_H16}){{1,3}}|:)|"
    rf"(?:{_H16}:){{3}}(?:(?::{_H16}){{0,2}}:{_IPV4}|(?::{_H16}){{1,4}}|:)|"
    rf"(?:{_H16}:){{2}}(?:(?::{_H16}){{0,3}}:{_IPV4}|(?::{_H16}){{1,5}}|:)|"
    rf"(?:{_H16}:){{1}}(?:(?::{_H16}){{0,4}}:{_IPV4}|(?::{_H16}){{1,6}}|:)|"
    rf"(?::(?:(?::{_H16}){{0,5}}:{_IPV4}|(?::{_H16}){{1,7}}|:))"
    r")(?:%[0-9a-zA-Z]+)?",
    re.ASCII,
)


def is_ipv4(address: str) -> bool:
    """Whether `address` is exactly a dotted-quad IPv4 literal."""
    return IPV4_PATTERN.fullmatch(address) is not None


def is_ipv6(address: str) -> bool:
    """Whether `address` is exactly an IPv6 literal (optionally with a zone id)."""
    return IPV6_PATTERN.fullmatch(address) is not None


def is_ip(address: str) -> bool:
    return is_ipv4(address) or is_ipv6(address)


@dataclass
class ResolveOptions:
    """
    Options of `get_server_address_info()`.

    At least one of `server_type` or `server_port` has to be given, otherwise
    the default port cannot be determined and the address is invalid.

    :param server_type: Edition of the server, selects the default port
    :param server_port: Explicit port. Disables the automatic SRV lookup
    :param resolve_srv_record: Look up the SRV record (Java only, when no port is given).
        "force" always looks it up and treats a missing record as invalid
    :param family: Only accept addresses of this family (4 or 6)
    :param prefer_ipv6: Pick the AAAA record over the A record when both exist
    :param throws_on_invalid: Raise the reason instead of returning `InvalidAddressInfo`
    :param dns_timeout: Timeout in seconds for every single DNS query
    """

    server_type: ServerType | None = None
    server_port: int | None = None
    resolve_srv_record: Union[bool, Literal["force"]] = True
    family: Literal[4, 6] | None = None
    prefer_ipv6: bool = False
    throws_on_invalid: bool = False
    dns_timeout: float = DEFAULT_DNS_TIMEOUT

    @classmethod
    def coerce(cls, value: "ResolveOptions | ServerType | str | int | None") -> "ResolveOptions":
        """Normalise the shorthand forms (bare edition, bare port) into options."""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise TypeError(f"invalid options: {value!r}")
        if isinstance(value, int):
            return cls(server_port=value)
        if isinstance(value, str):
            return cls(server_type=ServerType(value))
        raise TypeError(f"invalid options: {value!r}")


async def get_server_address_info(
    server_addr: str,
    options: "ResolveOptions | ServerType | str | int | None" = None,
) -> AddressInfo:
    """
    Turn a user supplied server address into concrete connect points.

    Steps, the first failing one marks the address invalid and records its reason:

    1. determine the port (explicit port, else the edition's default port)
    2. a literal IP is used as is
    3. SRV lookup (Java edition, no explicit port, no literal IP) may redirect host and port
    4. the address family filter is checked against a literal IP
    5. the port range is checked
    6. A/AAAA lookup of the remaining hostname, the other family is kept as fallback

    :param server_addr: Hostname or IP address of the Minecraft server
    :param options: `ResolveOptions`, or a bare edition / port
    :return: `ValidAddressInfo` or `InvalidAddressInfo`
    """
    opts = ResolveOptions.coerce(options)
    server_type = ServerType(opts.server_type) if opts.server_type is not None else None
    server_port = opts.server_port
    resolve_srv_record = opts.resolve_srv_record
    family = opts.family

    valid = True
    invalid_reason: Exception | None = None

    def set_invalid(reason: Exception) -> None:
        nonlocal valid, invalid_reason
        if valid:
            valid = False
            invalid_reason = reason
            logger.debug(f"address {server_addr!r} is invalid: {reason}")

    ip: str | None = None
    srv_record: SrvRecord | None = None
    connect_points: list[ConnectPoint] = []

    address = server_addr
    port = server_port

    if server_port is None:
        if server_type is ServerType.JAVA:
            port = DEFAULT_JAVA_PORT
        elif server_type is ServerType.BEDROCK:
            port = DEFAULT_BEDROCK_PORT
        else:
            set_invalid(InvalidArgument("cannot determine server port, neither server type nor port given"))
    elif isinstance(server_port, bool) or not isinstance(server_port, int):
        set_invalid(InvalidArgument(f"invalid port: {server_port!r}"))

    if valid and is_ip(server_addr):
        ip = server_addr

    if valid and (
        (
            resolve_srv_record
            and ip is None
            and server_port is None
            and server_type is ServerType.JAVA
        )
        or resolve_srv_record == "force"
    ):
        srv_record = await resolver.resolve_srv(server_addr, opts.dns_timeout)
        if srv_record is not None:
            address = srv_record.ip
            port = srv_record.port
        elif resolve_srv_record == "force":
            set_invalid(ResolutionFailure(f"no srv record found for {server_addr!r}"))

    # The SRV target may be an IP literal rather than another hostname
    if valid and ip is None and is_ip(address):
        ip = address

    if valid and ip is not None and family is not None:
        if (family == 4 and not is_ipv4(ip)) or (family == 6 and not is_ipv6(ip)):
            set_invalid(AddressFamilyMismatch(f"address family mismatch: {ip} is not IPv{family}"))

    if valid and (
        isinstance(port, bool) or not isinstance(port, int) or not 0 <= port <= 65535
    ):
        set_invalid(InvalidArgument(f"invalid port: {port!r}"))

    if valid and ip is None:
        dns_ip4: list[str] = []
        dns_ip6: list[str] = []
        lookups = []
        if family in (None, 4):
            lookups.append(resolver.resolve_a(address, opts.dns_timeout))
        if family in (None, 6):
            lookups.append(resolver.resolve_aaaa(address, opts.dns_timeout))

        for found in await asyncio.gather(*lookups):
            for dns_ip in found or []:
                if is_ipv4(dns_ip):
                    dns_ip4.append(dns_ip)
                elif is_ipv6(dns_ip):
                    dns_ip6.append(dns_ip)

        if opts.prefer_ipv6 and dns_ip6:
            ip = dns_ip6[0]
        elif dns_ip4:
            ip = dns_ip4[0]
        elif dns_ip6:
            ip = dns_ip6[0]
        else:
            set_invalid(ResolutionFailure(f"no dns data for {address!r}"))

        if dns_ip4 and dns_ip6:
            fallback = dns_ip4[0] if ip == dns_ip6[0] else dns_ip6[0]
            connect_points.append(ConnectPoint(fallback, port))

    if valid and ip is not None:
        connect_points.insert(0, ConnectPoint(ip, port))

    if valid and not connect_points:
        set_invalid(ResolutionFailure("no connection point found"))

    if not valid:
        if invalid_reason is None:
            invalid_reason = ResolutionFailure("unknown error while resolving dns data")
        if opts.throws_on_invalid:
            raise invalid_reason
        return InvalidAddressInfo(server_addr, invalid_reason)

    logger.debug(f"resolved {server_addr!r} to {', '.join(map(str, connect_points))}")
    return ValidAddressInfo(
        server_addr=server_addr,
        ip=ip,
        port=port,
        connect_points=connect_points,
        srv_record=srv_record,
    )
