import asyncio
import json

import pytest

from mcping import InvalidArgument, PingTimeout, ProtocolViolation, SocketError, java
from mcping.java import (
    IncompleteVarint,
    JavaStatusProtocol,
    build_handshake,
    build_status_request,
    pack_packet,
    pack_string,
    pack_varint,
    parse_status_response,
    unpack_varint,
)
from mcping.models import PingOutcome

STATUS = {
    "version": {"name": "1.20.4", "protocol": 765},
    "players": {"max": 20, "online": 3, "sample": [{"name": "Steve", "id": "0"}]},
    "description": {"text": "A Minecraft Server", "color": "gold"},
    "favicon": "data:image/png;base64," + "A" * 600,
}


def status_response(document=STATUS) -> bytes:
    return pack_packet(pack_varint(0x00), pack_string(json.dumps(document)))


class TestVarint:
    @pytest.mark.parametrize(
        "value,encoded",
        [
            (0, b"\x00"),
            (1, b"\x01"),
            (127, b"\x7f"),
            (128, b"\x80\x01"),
            (255, b"\xff\x01"),
            (25565, b"\xdd\xc7\x01"),
            (2147483647, b"\xff\xff\xff\xff\x07"),
            (-1, b"\xff\xff\xff\xff\x0f"),
        ],
    )
    def test_known_encodings(self, value, encoded):
        assert pack_varint(value) == encoded
        assert unpack_varint(encoded) == (value, len(encoded))

    def test_unpack_at_offset(self):
        assert unpack_varint(b"\x05\xdd\xc7\x01", 1) == (25565, 3)

    def test_incomplete(self):
        with pytest.raises(IncompleteVarint):
            unpack_varint(b"\x80\x80")

    def test_too_long(self):
        with pytest.raises(ProtocolViolation):
            unpack_varint(b"\x80\x80\x80\x80\x80\x01")


def test_handshake_layout():
    packet = build_handshake("mc.example.com", 25565)
    body = b"\x00\x00" + b"\x0e" + b"mc.example.com" + b"\x63\xdd" + b"\x01"

    assert packet == bytes([len(body)]) + body
    assert build_status_request() == b"\x01\x00"


class TestParseStatusResponse:
    def test_complete_packet(self):
        assert parse_status_response(status_response()) == STATUS

    def test_waits_for_more_data(self):
        data = status_response()
        assert parse_status_response(data[:1]) is None
        assert parse_status_response(data[:4]) is None
        assert parse_status_response(data[:-1]) is None

    def test_unexpected_packet(self):
        data = pack_packet(pack_varint(0x01), pack_string("{}"), b"\x00\x00\x00")
        with pytest.raises(ProtocolViolation, match="unexpected packet"):
            parse_status_response(data)

    def test_invalid_json(self):
        data = pack_packet(pack_varint(0x00), pack_string("{not json"))
        with pytest.raises(ProtocolViolation):
            parse_status_response(data)

    def test_string_longer_than_packet(self):
        data = pack_packet(pack_varint(0x00), pack_varint(50), b"{}   ")
        with pytest.raises(ProtocolViolation):
            parse_status_response(data)


class TestJavaStatusProtocol:
    @pytest.mark.asyncio
    async def test_first_settlement_wins(self):
        result = asyncio.get_running_loop().create_future()
        protocol = JavaStatusProtocol(result, b"")

        protocol.fail(PingTimeout("first"))
        protocol.fail(SocketError("second"))
        protocol.succeed(PingOutcome(1, {}))

        with pytest.raises(PingTimeout, match="first"):
            await result


class TestPing:
    @pytest.mark.asyncio
    async def test_single_write(self, java_server):
        async with java_server(status_response()) as (port, received):
            outcome = await java.ping("127.0.0.1", port, timeout=2, server_addr="mc.example.com")

        assert outcome.response == STATUS
        assert outcome.ping_delay >= 0
        assert bytes(received).startswith(build_handshake("mc.example.com", port))

    @pytest.mark.asyncio
    async def test_fragmented_response(self, java_server):
        data = status_response()
        async with java_server(data[:1], data[1:]) as (port, _):
            outcome = await java.ping("127.0.0.1", port, timeout=2)

        assert outcome.response == STATUS

    @pytest.mark.asyncio
    async def test_response_split_inside_length_prefix(self, java_server):
        data = status_response()
        async with java_server(data[:1], data[1:3], data[3:100], data[100:]) as (port, _):
            outcome = await java.ping("127.0.0.1", port, timeout=2)

        assert outcome.response == STATUS

    @pytest.mark.asyncio
    async def test_unexpected_packet(self, java_server):
        data = pack_packet(pack_varint(0x1A), pack_string('{"text": "kicked"}'))
        async with java_server(data) as (port, _):
            with pytest.raises(ProtocolViolation):
                await java.ping("127.0.0.1", port, timeout=2)

    @pytest.mark.asyncio
    async def test_invalid_json(self, java_server):
        data = pack_packet(pack_varint(0x00), pack_string("not json at all"))
        async with java_server(data) as (port, _):
            with pytest.raises(ProtocolViolation):
                await java.ping("127.0.0.1", port, timeout=2)

    @pytest.mark.asyncio
    async def test_connection_closed_early(self, java_server):
        data = status_response()
        async with java_server(data[:20], close_after=True) as (port, _):
            with pytest.raises(ProtocolViolation):
                await java.ping("127.0.0.1", port, timeout=2)

    @pytest.mark.asyncio
    async def test_timeout_settles_once(self, java_server):
        loop = asyncio.get_running_loop()
        async with java_server() as (port, _):
            start = loop.time()
            with pytest.raises(PingTimeout):
                await java.ping("127.0.0.1", port, timeout=0.2)

        assert loop.time() - start < 1.5

    @pytest.mark.asyncio
    async def test_unencodable_handshake_host(self, closed_port):
        with pytest.raises(InvalidArgument) as exc_info:
            await java.ping("127.0.0.1", closed_port, timeout=2, server_addr="\ud800")

        assert isinstance(exc_info.value.__cause__, UnicodeEncodeError)

    @pytest.mark.asyncio
    async def test_connection_refused(self, closed_port):
        with pytest.raises(SocketError) as exc_info:
            await java.ping("127.0.0.1", closed_port, timeout=2)

        assert isinstance(exc_info.value.__cause__, OSError)
