"""
Unit tests for custom DNS resolution.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import dns.exception
import dns.resolver
import pytest

from streamwaves.streaming.dns_resolver import DNSResolver, is_ip_literal, parse_nameserver

RESOLVER_CLASS = "dns.asyncresolver.Resolver"


def a_records(*addresses):
    return [SimpleNamespace(address=address) for address in addresses]


@pytest.mark.unit
class TestParseNameserver:
    """Tests for nameserver override parsing."""

    def test_plain_ipv4(self):
        assert parse_nameserver("8.8.8.8") == ("8.8.8.8", 53)

    def test_ipv4_with_port(self):
        assert parse_nameserver("1.1.1.1:5353") == ("1.1.1.1", 5353)

    def test_plain_ipv6(self):
        assert parse_nameserver("2606:4700::1111") == ("2606:4700::1111", 53)

    def test_bracketed_ipv6_with_port(self):
        assert parse_nameserver("[2606:4700::1111]:5300") == ("2606:4700::1111", 5300)

    def test_surrounding_whitespace(self):
        assert parse_nameserver(" 9.9.9.9 ") == ("9.9.9.9", 53)

    @pytest.mark.parametrize("value", ["dns.google", "1.1.1.1:abc", "1.1.1.1:0", "[::1", "999.1.1.1"])
    def test_malformed(self, value):
        with pytest.raises(ValueError):
            parse_nameserver(value)


@pytest.mark.unit
def test_is_ip_literal():
    assert is_ip_literal("203.0.113.5") is True
    assert is_ip_literal("[::1]") is True
    assert is_ip_literal("iptv.example.com") is False


@pytest.mark.unit
class TestDNSResolver:
    """Tests for DNSResolver.resolve."""

    @pytest.mark.asyncio
    async def test_no_override_returns_hostname(self):
        resolver = DNSResolver()

        with patch(RESOLVER_CLASS) as resolver_cls:
            assert await resolver.resolve("iptv.example.com", "") == "iptv.example.com"
            assert await resolver.resolve("iptv.example.com", None) == "iptv.example.com"

        resolver_cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_returns_first_address_in_answer_order(self):
        resolver = DNSResolver(timeout=2.0)

        with patch(RESOLVER_CLASS) as resolver_cls:
            instance = resolver_cls.return_value
            instance.resolve = AsyncMock(return_value=a_records("203.0.113.9", "203.0.113.1"))

            result = await resolver.resolve("iptv.example.com", "1.1.1.1")

        assert result == "203.0.113.9"
        resolver_cls.assert_called_once_with(configure=False)
        instance.resolve.assert_awaited_once_with("iptv.example.com", "A")
        assert instance.nameservers == ["1.1.1.1"]
        assert instance.port == 53
        assert instance.lifetime == 2.0

    @pytest.mark.asyncio
    async def test_override_port_is_used(self):
        resolver = DNSResolver()

        with patch(RESOLVER_CLASS) as resolver_cls:
            instance = resolver_cls.return_value
            instance.resolve = AsyncMock(return_value=a_records("203.0.113.9"))

            await resolver.resolve("iptv.example.com", "1.1.1.1:5353")

        assert instance.port == 5353

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            dns.resolver.NXDOMAIN(),
            dns.resolver.NoAnswer(),
            dns.resolver.NoNameservers(),
            dns.exception.Timeout(),
            OSError("network unreachable"),
        ],
    )
    async def test_lookup_failure_falls_back_to_hostname(self, error):
        resolver = DNSResolver()

        with patch(RESOLVER_CLASS) as resolver_cls:
            resolver_cls.return_value.resolve = AsyncMock(side_effect=error)

            result = await resolver.resolve("iptv.example.com", "1.1.1.1")

        assert result == "iptv.example.com"

    @pytest.mark.asyncio
    async def test_empty_answer_falls_back_to_hostname(self):
        resolver = DNSResolver()

        with patch(RESOLVER_CLASS) as resolver_cls:
            resolver_cls.return_value.resolve = AsyncMock(return_value=[])

            result = await resolver.resolve("iptv.example.com", "1.1.1.1")

        assert result == "iptv.example.com"

    @pytest.mark.asyncio
    async def test_malformed_override_falls_back_without_lookup(self):
        resolver = DNSResolver()

        with patch(RESOLVER_CLASS) as resolver_cls:
            result = await resolver.resolve("iptv.example.com", "not-a-nameserver")

        assert result == "iptv.example.com"
        resolver_cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_ip_literal_host_skips_lookup(self):
        resolver = DNSResolver()

        with patch(RESOLVER_CLASS) as resolver_cls:
            result = await resolver.resolve("198.51.100.7", "1.1.1.1")

        assert result == "198.51.100.7"
        resolver_cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_every_call_resolves_again(self):
        resolver = DNSResolver()

        with patch(RESOLVER_CLASS) as resolver_cls:
            instance = resolver_cls.return_value
            instance.resolve = AsyncMock(return_value=a_records("203.0.113.9"))

            await resolver.resolve("iptv.example.com", "1.1.1.1")
            await resolver.resolve("iptv.example.com", "1.1.1.1")

        assert instance.resolve.await_count == 2
