"""
dependencies.py

Responsibility: Builds the application's collaborators from AppConfig and
the shared HTTP client.
Does NOT: contain business logic, scheduling, or signal handling.
"""

from __future__ import annotations

import httpx

from cloudflare.cloudflare_client import CloudflareClient
from cloudflare.dns_provider import RegistryClient
from config import AppConfig
from services.ip_service import IpService
from services.reconcile_service import ReconcileService

# Only A records are managed, so the public IP must be IPv4
_MANAGED_IP_VERSION = 4

_USER_AGENT = "cloudflare-ddns-updater"


def create_http_client(config: AppConfig) -> httpx.AsyncClient:
    """
    Creates the single shared httpx.AsyncClient.

    Used for both the IP providers and the Cloudflare API so all outbound
    calls share one connection pool. The caller owns it and must close it.

    Args:
        config: The application configuration (for the request timeout).

    Returns:
        A new httpx.AsyncClient.
    """
    return httpx.AsyncClient(
        timeout=config.http_timeout,
        headers={"User-Agent": _USER_AGENT},
        # Some address-echo endpoints answer with a redirect to their canonical URL
        follow_redirects=True,
    )


def get_ip_service(config: AppConfig, http_client: httpx.AsyncClient) -> IpService:
    """
    Provides an IpService querying the configured providers in order.

    Args:
        config: The application configuration.
        http_client: The application-level httpx.AsyncClient.

    Returns:
        An IpService instance restricted to IPv4 results.
    """
    return IpService(http_client, providers=config.ip_providers, version=_MANAGED_IP_VERSION)


def get_registry_client(config: AppConfig, http_client: httpx.AsyncClient) -> RegistryClient:
    """
    Provides a CloudflareClient initialised with the configured credentials.

    Args:
        config: The application configuration.
        http_client: The application-level httpx.AsyncClient.

    Returns:
        A CloudflareClient instance satisfying the RegistryClient protocol.
    """
    return CloudflareClient(http_client=http_client, credentials=config.credentials)


def get_reconcile_service(config: AppConfig, http_client: httpx.AsyncClient) -> ReconcileService:
    """
    Provides a fully wired ReconcileService.

    Args:
        config: The application configuration.
        http_client: The application-level httpx.AsyncClient.

    Returns:
        A ReconcileService instance ready to use.
    """
    return ReconcileService(
        registry=get_registry_client(config, http_client),
        ip_service=get_ip_service(config, http_client),
        limit_to_domain=config.limit_to_domain,
    )
