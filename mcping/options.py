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
"""Pre-flight validation of `ping_server()` options."""

from collections.abc import Mapping
from dataclasses import fields

from .models import ServerType
from .ping import PingOptions

ALLOWED_KEYS = frozenset(f.name for f in fields(PingOptions))
ALLOWED_SERVER_TYPES = frozenset(t.value for t in ServerType)


class UnknownOptionError(KeyError):
    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "unknown option"


def _is_bool(value) -> bool:
    return isinstance(value, bool)


def _find_problem(options: Mapping) -> Exception | None:
    for key in options:
        if key not in ALLOWED_KEYS:
            return UnknownOptionError(f"Unknown key '{key}'")

    server_addr = options.get("server_addr")
    server_type = options.get("server_type")
    server_port = options.get("server_port")

    if not isinstance(server_addr, str):
        return TypeError("Undefined 'server_addr' in option")

    if server_type is not None and str(server_type) not in ALLOWED_SERVER_TYPES:
        return ValueError(f"Invalid 'server_type': {server_type}")

    port_given = isinstance(server_port, int) and not _is_bool(server_port)
    if server_type is None and not port_given:
        return TypeError("Undefined 'server_port'")
    if server_port is not None and not port_given:
        return TypeError(f"Invalid 'server_port': {server_port!r}")
    if port_given and not 1 <= server_port <= 65535:
        return ValueError(f"Property 'server_port' out of range [1,65535], is {server_port}")

    force_host_name = options.get("force_host_name")
    if force_host_name is not None and not isinstance(force_host_name, str):
        return TypeError("Invalid 'force_host_name', must be a string.")

    protocol_version = options.get("protocol_version")
    if protocol_version is not None and (
        _is_bool(protocol_version) or not isinstance(protocol_version, int)
    ):
        return TypeError(f"Invalid 'protocol_version': {protocol_version!r}")

    resolve_srv_record = options.get("resolve_srv_record")
    if resolve_srv_record is not None and not (
        _is_bool(resolve_srv_record) or resolve_srv_record == "force"
    ):
        return ValueError(f"Invalid 'resolve_srv_record': {resolve_srv_record!r}")

    address_family = options.get("address_family")
    if address_family is not None and (_is_bool(address_family) or address_family not in (4, 6)):
        return ValueError(f"Invalid 'address_family': {address_family}, only `4` and `6` are allowed")

    for key in ("prefer_ipv6", "throws_on_fail"):
        if options.get(key) is not None and not _is_bool(options[key]):
            return TypeError(f"Invalid '{key}'")

    server_address_filter = options.get("server_address_filter")
    if server_address_filter is not None and not callable(server_address_filter):
        return TypeError("Invalid 'server_address_filter', must be a function")

    for key in ("timeout", "dns_timeout"):
        value = options.get(key)
        if value is None:
            continue
        if _is_bool(value) or not isinstance(value, (int, float)) or value <= 0:
            return ValueError(f"Invalid '{key}': {value!r}, must be a positive number")

    return None


def check_ping_options(options: PingOptions | Mapping | None, throws_on_invalid: bool = True) -> bool:
    """
    Check whether `options` is a sane set of `ping_server()` options.

    This is a sanity check for user supplied input, `ping_server()` itself does not call it.

    :param options: `PingOptions` or a mapping of its field names
    :param throws_on_invalid: Raise the problem instead of returning False
    :return: True if the options are valid
    """
    if options is None:
        problem: Exception | None = TypeError("Bad null object")
    elif isinstance(options, PingOptions):
        problem = _find_problem({key: getattr(options, key) for key in ALLOWED_KEYS})
    elif isinstance(options, Mapping):
        problem = _find_problem(options)
    else:
        problem = TypeError(f"Invalid mcping option: {options!r}")

    if problem is None:
        return True
    if throws_on_invalid:
        raise problem
    return False
