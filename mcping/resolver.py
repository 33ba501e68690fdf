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
"""SRV and A/AAAA lookups, each raced against its own timeout."""

import asyncio

import dns.asyncresolver
import dns.exception
import dns.resolver
import idna
from loguru import logger

from .constants import DEFAULT_DNS_TIMEOUT, SRV_SERVICE
from .models import SrvRecord


def to_ascii_hostname(name: str) -> str | None:
    """
    Convert a (possibly internationalised) hostname into its ASCII form for DNS.

    :param name: The hostname, e.g. "例子.测试" or "mc.example.com"
    :return: The punycode hostname, or None if `name` is not a valid IDNA hostname
    """
    name = name.rstrip(".")
    if name.isascii():
        return name
    try:
        return idna.encode(name, uts46=True).decode("ascii")
    except idna.IDNAError:
        return None


async def _query(qname: str, rdtype: str, timeout: float) -> dns.resolver.Answer | None:
    try:
        resolver = dns.asyncresolver.Resolver()
        resolver.lifetime = timeout
        # The outer timer always wins, a late answer is dropped.
        return await asyncio.wait_for(resolver.resolve(qname, rdtype), timeout)
    except asyncio.TimeoutError:
        logger.debug(f"{rdtype} lookup of {qname} timed out after {timeout}s")
    except dns.exception.DNSException as e:
        logger.debug(f"{rdtype} lookup of {qname} failed: {e!r}")
    return None


async def resolve_srv(hostname: str, timeout: float = DEFAULT_DNS_TIMEOUT) -> SrvRecord | None:
    """
    Look up the `_minecraft._tcp` SRV record of a Java edition server.

    Only the first record of the answer is used, priority and weight are not considered.

    :param hostname: Hostname of the Minecraft server
    :param timeout: Timeout in seconds
    :return: The SRV target as `SrvRecord`, or None on error, empty answer or timeout
    """
    ascii_name = to_ascii_hostname(hostname)
    if not ascii_name:
        return None

    answer = await _query(SRV_SERVICE + ascii_name, "SRV", timeout)
    if answer is None:
        return None

    for rdata in answer:
        record = SrvRecord(str(rdata.target).rstrip("."), int(rdata.port))
        logger.debug(f"SRV record of {hostname}: {record}")
        return record
    return None


async def _resolve_addresses(hostname: str, rdtype: str, timeout: float) -> list[str] | None:
    ascii_name = to_ascii_hostname(hostname)
    if not ascii_name:
        return None

    answer = await _query(ascii_name, rdtype, timeout)
    if answer is None:
        return None

    addresses = [str(rdata.address) for rdata in answer]
    return addresses or None


async def resolve_a(hostname: str, timeout: float = DEFAULT_DNS_TIMEOUT) -> list[str] | None:
    """Resolve the A records of `hostname`. None on error, empty answer or timeout."""
    return await _resolve_addresses(hostname, "A", timeout)


async def resolve_aaaa(hostname: str, timeout: float = DEFAULT_DNS_TIMEOUT) -> list[str] | None:
    """Resolve the AAAA records of `hostname`. None on error, empty answer or timeout."""
    return await _resolve_addresses(hostname, "AAAA", timeout)
