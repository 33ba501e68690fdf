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
"""Render JSON chat components (e.g. a Java status `description`) as legacy formatted text."""

import re

MAX_DEPTH = 100

COLOR_CODES = {
    "black": "0",
    "dark_blue": "1",
    "dark_green": "2",
    "dark_aqua": "3",
    "dark_red": "4",
    "dark_purple": "5",
    "gold": "6",
    "gray": "7",
    "dark_gray": "8",
    "blue": "9",
    "green": "a",
    "aqua": "b",
    "red": "c",
    "light_purple": "d",
    "yellow": "e",
    "white": "f",
    "reset": "r",
}

STYLE_CODES = (
    ("bold", "l"),
    ("italic", "o"),
    ("underlined", "n"),
    ("strikethrough", "m"),
    ("obfuscated", "k"),
)

FORMATTING_CODE_PATTERN = re.compile(r"§[0-9a-fk-or]", re.IGNORECASE)
TRANSLATE_ARG_PATTERN = re.compile(r"%(?:(\d+)\$)?s")


def strip_color_codes(text: str) -> str:
    """Remove all `§` formatting codes from `text`."""
    return FORMATTING_CODE_PATTERN.sub("", text)


def decode_chat_component(component: str | dict | list, clean_color_code: bool = False) -> str:
    """
    Function for turning a chat component into a string. Supports plain strings,
    component dicts (from "json.loads()") and lists of components.

    :param component: The chat component, e.g. the `description` of a Java status response
    :param clean_color_code: Remove the formatting codes from the result
    """
    text = _decode(component, 1)
    if clean_color_code:
        text = strip_color_codes(text)
    return text


def _decode(component, depth: int) -> str:
    if depth > MAX_DEPTH:
        return ""

    if isinstance(component, str):
        return component

    if isinstance(component, list):
        return "".join(_decode(sub, depth + 1) for sub in component)

    if not isinstance(component, dict):
        return "" if component is None else str(component)

    text = ""

    if component.get("color") is not None:
        text += "§" + COLOR_CODES.get(component["color"], "r")

    for style, code in STYLE_CODES:
        if component.get(style):
            text += "§" + code

    component_type = component.get("type")
    if component_type is None:
        if component.get("text") is not None:
            component_type = "text"
        elif component.get("translate") is not None:
            component_type = "translatable"

    if component_type == "text":
        text += str(component.get("text", ""))
    elif component_type == "translatable":
        text += _translate(component, depth)

    if isinstance(component.get("extra"), list):
        text += _decode(component["extra"], depth + 1)

    return text


def _translate(component: dict, depth: int) -> str:
    if component.get("fallback") is not None:
        return str(component["fallback"])

    args = []
    if isinstance(component.get("with"), list):
        args = [_decode(arg, depth + 1) for arg in component["with"]]

    next_index = 0

    def substitute(match: re.Match) -> str:
        nonlocal next_index
        if match.group(1) is not None:
            index = int(match.group(1)) - 1
        else:
            index = next_index
            next_index += 1
        if 0 <= index < len(args):
            return args[index]
        return match.group(0)

    return TRANSLATE_ARG_PATTERN.sub(substitute, str(component.get("translate", "")))
