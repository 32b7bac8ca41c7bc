"""Rate limiting for the Tradeline backend.

Clients are keyed by IP. X-Forwarded-For is honoured only when the direct
peer is a trusted proxy, so clients cannot spoof their key. Trusted
networks come from ``TRUSTED_PROXY_CIDRS`` (comma-separated) or the
private-range defaults below.
"""

import ipaddress
import os

from slowapi import Limiter
from slowapi.util import get_remote_address

from .logging_config import get_logger

logger = get_logger("tradeline.rate_limit")

# Per-route limits
READ_LIMIT = "120/minute"
WRITE_LIMIT = "30/minute"
CLASSIFY_LIMIT = "10/minute"

DEFAULT_TRUSTED_CIDRS = (
    "10.0.0.0/8",
    "172.16.0.0/12",
    "192.168.0.0/16",
    "127.0.0.0/8",
    "::1/128",
)


class TrustedProxies:
    """Set of proxy networks allowed to report the original client IP."""

    def __init__(self, cidrs):
        self.networks = []
        for cidr in cidrs:
            try:
                self.networks.append(ipaddress.ip_network(cidr, strict=False))
            except ValueError:
                logger.warning(f"Ignoring invalid trusted proxy CIDR: {cidr!r}")

    @classmethod
    def from_env(cls) -> "TrustedProxies":
        raw = os.environ.get("TRUSTED_PROXY_CIDRS", "")
        cidrs = [s.strip() for s in raw.split(",") if s.strip()]
        return cls(cidrs or DEFAULT_TRUSTED_CIDRS)

    def __contains__(self, ip_str: str) -> bool:
        try:
            addr = ipaddress.ip_address(ip_str)
        except ValueError:
            return False
        return any(addr in network for network in self.networks)

    def client_ip(self, request) -> str:
        """Leftmost X-Forwarded-For entry behind a trusted proxy, else the peer IP."""
        direct_ip = get_remote_address(request)
        if direct_ip in self:
            forwarded_for = request.headers.get("x-forwarded-for", "")
            client_ip = forwarded_for.split(",")[0].strip()
            if client_ip:
                return client_ip
        return direct_ip


trusted_proxies = TrustedProxies.from_env()
limiter = Limiter(key_func=trusted_proxies.client_ip)
