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
"""Resolve a server address and ping it as Java and/or Bedrock edition."""

import asyncio
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Literal, Union

from loguru import logger

from . import bedrock, java
from .address import ResolveOptions, get_server_address_info
from .constants import DEFAULT_DNS_TIMEOUT, DEFAULT_TIMEOUT
from .errors import FilterRejected, InvalidArgument, McPingError, PingErrors
from .models import AddressInfo, PingOutcome, PingResult, ServerType


@dataclass
class PingOptions:
    """
    Options of `ping_server()`.

    :param server_addr: Hostname sent to a Java server in the handshake. Defaults to the pinged host
    :param server_type: Edition to ping, `UNKNOWN` pings both
    :param server_port: Explicit port, disables the SRV lookup
    :param force_host_name: Hostname sent in the Java handshake, overrides everything else
    :param protocol_version: Protocol version announced in the Java handshake
    :param resolve_srv_record: See `ResolveOptions.resolve_srv_record`
    :param address_family: Only use addresses of this family (4 or 6)
    :param prefer_ipv6: Prefer AAAA over A records
    :param throws_on_fail: Raise the aggregated reason instead of returning a failed result
    :param server_address_filter: Called with `(ip, port)` before pinging, a falsy return skips the ping
    :param timeout: Timeout in seconds of each ping
    :param dns_timeout: Timeout in seconds of each DNS query
    """

    server_addr: str | None = None
    server_type: ServerType = ServerType.UNKNOWN
    server_port: int | None = None
    force_host_name: str | None = None
    protocol_version: int = java.PROTOCOL_VERSION
    resolve_srv_record: Union[bool, Literal["force"]] = True
    address_family: Literal[4, 6] | None = None
    prefer_ipv6: bool = False
    throws_on_fail: bool = False
    server_address_filter: Callable[[str, int], bool] | None = None
    timeout: float = DEFAULT_TIMEOUT
    dns_timeout: float = DEFAULT_DNS_TIMEOUT

    @classmethod
    def coerce(cls, value: "PingOptions | Mapping | ServerType | str | int | None") -> "PingOptions":
        """Normalise a mapping or a shorthand (bare port, bare edition) into options."""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls(**value)
        if isinstance(value, bool):
            raise TypeError(f"invalid options: {value!r}")
        if isinstance(value, int):
            return cls(server_port=value)
        if isinstance(value, str):
            return cls(server_type=ServerType(value))
        raise TypeError(f"invalid options: {value!r}")


@dataclass
class _EditionResult:
    address: AddressInfo
    accepted: bool = False
    outcome: PingOutcome | None = None
    error: Exception | None = None


def _check_address(opts: PingOptions, ip: str, port: int) -> Exception | None:
    if opts.server_address_filter is None:
        return None

    try:
        accepted = opts.server_address_filter(ip, port)
    except Exception as e:
        err = FilterRejected(f"server_address_filter raised for {ip}:{port}: {e!r}")
        err.__cause__ = e
        return err

    if not accepted:
        return FilterRejected(f"address check fail from server_address_filter ({ip}:{port})")
    return None


async def _ping_edition(host: str, edition: ServerType, opts: PingOptions) -> _EditionResult:
    address = await get_server_address_info(
        host,
        ResolveOptions(
            server_type=edition,
            server_port=opts.server_port,
            resolve_srv_record=opts.resolve_srv_record,
            family=opts.address_family,
            prefer_ipv6=opts.prefer_ipv6,
            throws_on_invalid=False,
            dns_timeout=opts.dns_timeout,
        ),
    )
    if not address.valid:
        return _EditionResult(address, error=address.invalid_reason)

    rejected = _check_address(opts, address.ip, address.port)
    if rejected is not None:
        logger.debug(f"{edition} address {address.ip}:{address.port} rejected: {rejected}")
        return _EditionResult(address, error=rejected)

    try:
        if edition is ServerType.JAVA:
            if opts.force_host_name is not None:
                host_name = opts.force_host_name
            elif address.srv_record is not None:
                host_name = address.srv_record.ip
            else:
                host_name = opts.server_addr or host

            outcome = await java.ping(
                address.ip, address.port, opts.timeout, host_name, opts.protocol_version
            )
            outcome.srv_record = address.srv_record
        else:
            outcome = await bedrock.ping(address.ip, address.port, opts.timeout)
    except McPingError as e:
        return _EditionResult(address, accepted=True, error=e)

    return _EditionResult(address, accepted=True, outcome=outcome)


async def ping_server(
    host: str | None = None,
    options: "PingOptions | Mapping | ServerType | str | int | None" = None,
) -> PingResult:
    """
    Ping a Minecraft server.

    Java and Bedrock edition are pinged independently, the result is successful
    as soon as one of them answered.

    :param host: Hostname or IP address of the server. Defaults to `options.server_addr`
    :param options: `PingOptions`, a mapping of its fields, or a bare port / edition
    :return: `PingResult`
    :raises McPingError: only with `throws_on_fail`, when no edition answered
    """
    opts = PingOptions.coerce(options)
    if host is None:
        host = opts.server_addr
    if not host:
        raise InvalidArgument("Host argument is not provided")

    server_type = ServerType(opts.server_type)
    if server_type is ServerType.UNKNOWN:
        editions = [ServerType.JAVA, ServerType.BEDROCK]
    else:
        editions = [server_type]

    edition_results = await asyncio.gather(
        *(_ping_edition(host, edition, opts) for edition in editions)
    )

    result = PingResult(status=False)
    for edition, edition_result in zip(editions, edition_results):
        if edition_result.error is not None:
            logger.debug(f"{edition} ping of {host} failed: {edition_result.error!r}")

        if edition is ServerType.JAVA:
            result.address_java = edition_result.address
            result.java_address_accepted = edition_result.accepted
            result.java = edition_result.outcome
            result.java_error = edition_result.error
        else:
            result.address_bedrock = edition_result.address
            result.bedrock_address_accepted = edition_result.accepted
            result.bedrock = edition_result.outcome
            result.bedrock_error = edition_result.error

    result.status = result.java is not None or result.bedrock is not None
    if result.status:
        return result

    errors = result.errors
    if len(errors) > 1:
        result.reason = PingErrors(errors)
    elif errors:
        result.reason = errors[0]
    else:
        result.reason = McPingError("unknown error")

    if opts.throws_on_fail:
        raise result.reason
    return result
