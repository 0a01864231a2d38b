"""
services/ip_service.py

Responsibility: Determines the host machine's current public IP address by
asking an ordered list of address-echo endpoints.
Does NOT: talk to the DNS registry, read config files, or retry a provider.
"""

from __future__ import annotations

import asyncio
import ipaddress
import logging
import re
from collections.abc import Sequence
from typing import Optional, Union

import httpx

from exceptions import AddressResolutionError, PassCancelled

logger = logging.getLogger(__name__)

NetworkAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

# NOTE: each endpoint returns the caller's public address as plain text.
# Order is priority: the first usable answer wins.
DEFAULT_IP_PROVIDERS: tuple[str, ...] = (
    "https://ipecho.net/plain",
    "https://icanhazip.com/",
    "https://whatismyip.akamai.com",
    "https://tnx.nl/ip",
)

# Whitespace and ASCII control characters never belong in an address literal
_UNWANTED_CHARACTERS = re.compile(r"[\s\x00-\x1f\x7f]")


def parse_address(raw: str, version: Optional[int] = None) -> Optional[NetworkAddress]:
    """
    Sanitizes a provider response body and parses it as an IP address.

    Args:
        raw: The response body as text, e.g. "203.0.113.5\\n".
        version: If 4 or 6, addresses of the other family are rejected.

    Returns:
        The parsed address, or None if the body is not a usable address.
    """
    cleaned = _UNWANTED_CHARACTERS.sub("", raw)
    try:
        address = ipaddress.ip_address(cleaned)
    except ValueError:
        return None

    if version is not None and address.version != version:
        return None
    return address


class IpService:
    """
    Resolves the host machine's current public IP address.

    Providers are queried strictly in order, one GET each. A non-success
    status, a transport failure, or a body that does not parse are all
    treated the same way: move on to the next provider. The provider list
    itself is the retry strategy.

    Collaborators:
        - httpx.AsyncClient: injected; must be kept alive externally
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        providers: Sequence[str] = DEFAULT_IP_PROVIDERS,
        version: Optional[int] = None,
    ) -> None:
        """
        Initialises the service with a shared HTTP client.

        Args:
            http_client: A long-lived httpx.AsyncClient instance created
                         during application startup.
            providers: Ordered address-echo endpoint URLs.
            version: Restrict results to IPv4 (4) or IPv6 (6); None accepts both.
        """
        self._client = http_client
        self._providers = tuple(providers)
        self._version = version

    @property
    def providers(self) -> tuple[str, ...]:
        return self._providers

    async def get_public_ip(self, cancel: Optional[asyncio.Event] = None) -> NetworkAddress:
        """
        Returns the current public IP address of the host machine.

        Args:
            cancel: Shared cancellation event, checked before each request.

        Returns:
            The first address successfully parsed from a provider response.

        Raises:
            AddressResolutionError: If every provider failed or returned garbage.
            PassCancelled: If the cancellation event is set before a request.
        """
        for url in self._providers:
            if cancel is not None and cancel.is_set():
                raise PassCancelled("Cancelled while resolving the public IP.")

            address = await self._query(url)
            if address is not None:
                logger.debug("Current public IP: %s (via %s)", address, url)
                return address

        raise AddressResolutionError(
            f"None of the {len(self._providers)} IP provider(s) returned a usable address."
        )

    async def _query(self, url: str) -> Optional[NetworkAddress]:
        """
        Asks a single provider for the public IP.

        Returns:
            The parsed address, or None if this provider should be skipped.
        """
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning("IP provider %s returned status %d.", url, exc.response.status_code)
            return None
        except httpx.RequestError as exc:
            logger.warning("Could not reach IP provider %s: %s", url, exc)
            return None

        address = parse_address(response.text, self._version)
        if address is None:
            logger.warning("IP provider %s returned an unusable body: %r", url, response.text[:64])
        return address
