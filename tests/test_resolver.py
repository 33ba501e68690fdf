import asyncio
from unittest.mock import AsyncMock, Mock, patch

import dns.resolver
import pytest

from mcping import SrvRecord, resolve_a, resolve_aaaa, resolve_srv, to_ascii_hostname


def _resolver_returning(**resolve_kwargs):
    """Patch dnspython's async resolver with one whose `resolve` is an AsyncMock."""
    instance = Mock()
    instance.resolve = AsyncMock(**resolve_kwargs)
    return patch("dns.asyncresolver.Resolver", return_value=instance), instance


def test_to_ascii_hostname():
    assert to_ascii_hostname("mc.example.com") == "mc.example.com"
    assert to_ascii_hostname("mc.example.com.") == "mc.example.com"
    assert to_ascii_hostname("例子.测试") == "xn--fsqu00a.xn--0zwm56d"
    assert to_ascii_hostname("☃.example") is None


class TestResolveSrv:
    @pytest.mark.asyncio
    async def test_first_record_wins(self):
        records = [
            Mock(target="node1.example.com.", port=25570),
            Mock(target="node2.example.com.", port=25571),
        ]
        patcher, resolver = _resolver_returning(return_value=records)
        with patcher:
            record = await resolve_srv("mc.example.com")

        assert record == SrvRecord("node1.example.com", 25570)
        resolver.resolve.assert_awaited_once_with("_minecraft._tcp.mc.example.com", "SRV")

    @pytest.mark.asyncio
    async def test_empty_answer(self):
        patcher, _ = _resolver_returning(return_value=[])
        with patcher:
            assert await resolve_srv("mc.example.com") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error", [dns.resolver.NXDOMAIN(), dns.resolver.NoAnswer(), dns.resolver.NoNameservers()]
    )
    async def test_dns_errors_mean_no_record(self, error):
        patcher, _ = _resolver_returning(side_effect=error)
        with patcher:
            assert await resolve_srv("mc.example.com") is None

    @pytest.mark.asyncio
    async def test_timeout_discards_late_answer(self):
        async def slow_answer(*args, **kwargs):
            await asyncio.sleep(1)
            return [Mock(target="late.example.com.", port=25565)]

        patcher, _ = _resolver_returning(side_effect=slow_answer)
        loop = asyncio.get_running_loop()
        start = loop.time()
        with patcher:
            record = await resolve_srv("mc.example.com", timeout=0.05)

        assert record is None
        assert loop.time() - start < 0.9

    @pytest.mark.asyncio
    async def test_invalid_hostname_is_not_queried(self):
        patcher, resolver = _resolver_returning(return_value=[])
        with patcher:
            assert await resolve_srv("☃.example") is None
        resolver.resolve.assert_not_called()


class TestResolveAddresses:
    @pytest.mark.asyncio
    async def test_a_records_in_order(self):
        patcher, resolver = _resolver_returning(
            return_value=[Mock(address="10.0.0.2"), Mock(address="10.0.0.1")]
        )
        with patcher:
            assert await resolve_a("mc.example.com") == ["10.0.0.2", "10.0.0.1"]
        resolver.resolve.assert_awaited_once_with("mc.example.com", "A")

    @pytest.mark.asyncio
    async def test_aaaa_records(self):
        patcher, resolver = _resolver_returning(return_value=[Mock(address="2001:db8::1")])
        with patcher:
            assert await resolve_aaaa("mc.example.com") == ["2001:db8::1"]
        resolver.resolve.assert_awaited_once_with("mc.example.com", "AAAA")

    @pytest.mark.asyncio
    async def test_failure_and_empty_answer_are_none(self):
        patcher, _ = _resolver_returning(side_effect=dns.resolver.NXDOMAIN())
        with patcher:
            assert await resolve_a("mc.example.com") is None

        patcher, _ = _resolver_returning(return_value=[])
        with patcher:
            assert await resolve_aaaa("mc.example.com") is None
