"""
Custom DNS resolution for outbound IPTV requests.

Users whose provider hostname is blocked or poisoned by their ISP can
supply their own nameserver. Lookups go straight to that nameserver and
never touch the system resolver configuration.
"""

import ipaddress
import logging
from typing import Optional

import dns.asyncresolver
import dns.exception

logger = logging.getLogger(__name__)

DEFAULT_DNS_PORT = 53


def parse_nameserver(override: str) -> tuple[str, int]:
    """
    Split a nameserver override into address and port.

    Accepts "1.1.1.1", "1.1.1.1:5353", "2606:4700::1111" and
    "[2606:4700::1111]:53".

    Raises:
        ValueError: If the address is not an IP literal or the port is invalid.
    """
    value = override.strip()
    port = DEFAULT_DNS_PORT

    if value.startswith("["):
        host, sep, rest = value[1:].partition("]")
        if not sep:
            raise ValueError(f"Malformed nameserver: {override!r}")
        if rest:
            if not rest.startswith(":"):
                raise ValueError(f"Malformed nameserver: {override!r}")
            port = int(rest[1:])
        value = host
    elif value.count(":") == 1:
        value, port_str = value.split(":")
        port = int(port_str)

    if not 0 < port < 65536:
        raise ValueError(f"Invalid nameserver port: {port}")

    return str(ipaddress.ip_address(value)), port


def is_ip_literal(hostname: str) -> bool:
    try:
        ipaddress.ip_address(hostname.strip("[]"))
    except ValueError:
        return False
    return True


class DNSResolver:
    """
    Resolves hostnames against an optional override nameserver.

    Resolution failures are never fatal: the original hostname is
    returned so the request can still go through the system resolver.
    Results are not cached, every call performs a fresh lookup.
    """

    def __init__(self, timeout: float = 3.0):
        self.timeout = timeout

    async def resolve(self, hostname: str, override: Optional[str] = None) -> str:
        """
        Resolve a hostname to an IPv4 address.

        Args:
            hostname: Host to resolve.
            override: Nameserver to query. Empty means use the system resolver.

        Returns:
            The first A record returned, or hostname unchanged when no
            override is given or the lookup fails.
        """
        if not override:
            return hostname

        if is_ip_literal(hostname):
            return hostname

        try:
            nameserver, port = parse_nameserver(override)

            resolver = dns.asyncresolver.Resolver(configure=False)
            resolver.nameservers = [nameserver]
            resolver.port = port
            resolver.timeout = self.timeout
            resolver.lifetime = self.timeout

            answer = await resolver.resolve(hostname, "A")
            addresses = [rdata.address for rdata in answer]
            if addresses:
                logger.debug(f"Resolved {hostname} via {override}: {addresses[0]}")
                return addresses[0]
            logger.warning(f"DNS lookup for {hostname} via {override} returned no addresses")
        except (dns.exception.DNSException, ValueError, OSError) as e:
            logger.warning(f"DNS resolution error for {hostname} via {override}: {e}")

        return hostname
