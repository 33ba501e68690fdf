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
"""Protocol constants and library-wide defaults."""

DEFAULT_JAVA_PORT = 25565
"""default TCP port for Java edition status pings"""
DEFAULT_BEDROCK_PORT = 19132
"""default UDP port for Bedrock/MCPE servers"""
DEFAULT_TIMEOUT = 5.0
"""default ping timeout in seconds"""
DEFAULT_DNS_TIMEOUT = 5.0
"""default timeout in seconds for each SRV/A/AAAA query"""

SRV_SERVICE = "_minecraft._tcp."
"""service prefix of the Java edition SRV record"""

RAKNET_MAGIC = bytes(
    [
        0x00,
        0xFF,
        0xFF,
        0x00,
        0xFE,
        0xFE,
        0xFE,
        0xFE,
        0xFD,
        0xFD,
        0xFD,
        0xFD,
        0x12,
        0x34,
        0x56,
        0x78,
    ]
)
"""RakNet OFFLINE_MESSAGE_DATA_ID"""
