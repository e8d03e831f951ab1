import asyncio
import socket

from meshlocator.config import Settings
from meshlocator.logger import logger

ROUTER_PTR_PREFIX = "lan."


class ReverseDnsResolver:
    """PTR lookups for client and router addresses."""

    def __init__(self, settings: Settings) -> None:
        self._enabled = settings.enable_rdns

    async def ptr(self, ip: str) -> str | None:
        """Return the PTR hostname for `ip`, or None if there is no usable answer."""
        if not self._enabled:
            return None

        try:
            hostname, _aliases, _addresses = await asyncio.to_thread(socket.gethostbyaddr, ip)
        except (OSError, UnicodeError) as exc:
            logger.debug(f"rDNS lookup failed ip={ip} error={exc!r}")
            return None

        if not hostname or hostname == ip:
            return None
        return hostname

    async def router_ptr(self, ip: str) -> str | None:
        """PTR lookup for a mesh router.

        Nodes publish their LAN-side name as `lan.<node>...`; the prefix is
        stripped so the hostname matches the node's own name.
        """
        hostname = await self.ptr(ip)
        if hostname is not None and hostname.startswith(ROUTER_PTR_PREFIX):
            hostname = hostname[len(ROUTER_PTR_PREFIX) :]
        return hostname or None
