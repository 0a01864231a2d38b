"""
cloudflare/cloudflare_client.py

Responsibility: Implements the RegistryClient protocol using the Cloudflare REST API.
All Cloudflare HTTP calls are concentrated here — no other file may call the
Cloudflare API directly.
Does NOT: read configuration, resolve the public IP, or decide which records
to update.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from cloudflare.dns_provider import (
    MANAGED_RECORD_TYPE,
    DnsRecord,
    ProviderErrorDetail,
    RecordUpdate,
    UpdateResult,
    Zone,
)
from exceptions import RegistryAuthError, RegistryError, RegistryTransportError

logger = logging.getLogger(__name__)

_CLOUDFLARE_BASE = "https://api.cloudflare.com/client/v4"

# Cloudflare caps /zones at 50 per page; dns_records accepts more but 100 is the default
_ZONES_PER_PAGE = 50
_RECORDS_PER_PAGE = 100


@dataclass(frozen=True)
class CloudflareCredentials:
    """
    Cloudflare authentication material.

    Either an API token, or the legacy email + global API key pair. When both
    are present the token is used.
    """

    api_token: str = ""
    email: str = ""
    api_key: str = ""

    @property
    def uses_token(self) -> bool:
        return bool(self.api_token)

    def is_complete(self) -> bool:
        """Returns True if a token, or both email and key, are set."""
        return self.uses_token or bool(self.email and self.api_key)

    def headers(self) -> dict[str, str]:
        """
        Returns the authentication headers for this credential.

        Returns:
            A dict of HTTP headers to send with every Cloudflare request.
        """
        if self.uses_token:
            return {"Authorization": f"Bearer {self.api_token}"}
        return {"X-Auth-Email": self.email, "X-Auth-Key": self.api_key}


class CloudflareClient:
    """
    Implements RegistryClient for the Cloudflare DNS REST API (v4).

    All outbound Cloudflare requests go through the injected httpx.AsyncClient,
    making this class fully testable without real network calls (use respx.mock).

    Collaborators:
        - httpx.AsyncClient: injected HTTP client; must be kept alive externally
        - RegistryClient: this class satisfies the protocol contract
    """

    def __init__(self, http_client: httpx.AsyncClient, credentials: CloudflareCredentials) -> None:
        """
        Initialises the client with an HTTP client and Cloudflare credentials.

        Args:
            http_client: A long-lived httpx.AsyncClient instance.
            credentials: Token or email/key credentials with DNS edit permission.
        """
        self._client = http_client
        self._headers = {
            **credentials.headers(),
            "Content-Type": "application/json",
        }

    # ---------------------------------------------------------------------------
    # RegistryClient implementation
    # ---------------------------------------------------------------------------

    async def list_zones(self) -> list[Zone]:
        """
        Returns every zone the credentials can see, across all result pages.

        Returns:
            A list of Zone instances in the order Cloudflare returns them.

        Raises:
            RegistryError: If any page request fails.
        """
        url = f"{_CLOUDFLARE_BASE}/zones"
        raw_zones = await self._get_all_pages(url, params={}, per_page=_ZONES_PER_PAGE)
        return [Zone(id=raw["id"], name=raw["name"]) for raw in raw_zones]

    async def list_records(self, zone_id: str, record_type: str = MANAGED_RECORD_TYPE) -> list[DnsRecord]:
        """
        Returns all records of the given type in a Cloudflare zone.

        Args:
            zone_id: The Cloudflare zone ID.
            record_type: Record type filter sent to the API, "A" by default.

        Returns:
            A list of DnsRecord instances, possibly empty.

        Raises:
            RegistryError: If any page request fails.
        """
        url = f"{_CLOUDFLARE_BASE}/zones/{zone_id}/dns_records"
        raw_records = await self._get_all_pages(
            url, params={"type": record_type}, per_page=_RECORDS_PER_PAGE
        )
        return [self._parse_record(raw, zone_id) for raw in raw_records]

    async def update_record(self, zone_id: str, record_id: str, update: RecordUpdate) -> UpdateResult:
        """
        Replaces an existing record with the given values.

        Cloudflare reports validation failures and rate limiting with a JSON
        envelope and success=false; those come back as an UpdateResult rather
        than an exception.

        Args:
            zone_id: The Cloudflare zone ID.
            record_id: The Cloudflare record ID.
            update: The new record values.

        Returns:
            An UpdateResult describing the registry's verdict.

        Raises:
            RegistryTransportError: On network failure.
            RegistryAuthError: On HTTP 401/403.
            RegistryError: If the response carries no Cloudflare envelope.
        """
        url = f"{_CLOUDFLARE_BASE}/zones/{zone_id}/dns_records/{record_id}"
        payload: dict[str, Any] = {
            "type": update.type,
            "name": update.name,
            "content": update.content,
            "ttl": update.ttl,
            "proxied": update.proxied,
        }

        logger.debug("PUT %s payload=%s", url, payload)
        response = await self._send("PUT", url, json=payload)
        body = self._envelope(response, "PUT", url)

        if not body.get("success", False):
            return UpdateResult(success=False, errors=self._parse_errors(body))

        result = body.get("result")
        record = self._parse_record(result, zone_id) if isinstance(result, dict) else None
        return UpdateResult(success=True, record=record)

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    async def _get_all_pages(
        self,
        url: str,
        *,
        params: dict[str, Any],
        per_page: int,
    ) -> list[dict[str, Any]]:
        """
        Fetches every page of a paginated Cloudflare list endpoint.

        Args:
            url: Full URL of the list endpoint.
            params: Query-string filters (pagination params are added here).
            per_page: Page size to request.

        Returns:
            The concatenated "result" arrays of all pages.

        Raises:
            RegistryError: If any page fails.
        """
        items: list[dict[str, Any]] = []
        page = 1
        while True:
            page_params = {**params, "page": page, "per_page": per_page}
            logger.debug("GET %s params=%s", url, page_params)
            body = await self._request("GET", url, params=page_params)

            items.extend(body.get("result") or [])

            total_pages = (body.get("result_info") or {}).get("total_pages") or 1
            if page >= total_pages:
                return items
            page += 1

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Sends an authenticated request and requires a successful envelope.

        Args:
            method: HTTP verb.
            url: Full URL of the Cloudflare API endpoint.
            params: Optional query-string parameters.
            json: Optional JSON request body.

        Returns:
            The parsed JSON response body as a dict.

        Raises:
            RegistryError: If the HTTP call fails or the API returns
                           success=false in the response body.
        """
        response = await self._send(method, url, params=params, json=json)

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RegistryError(
                f"Cloudflare API error {exc.response.status_code} for {method} {url}: "
                f"{exc.response.text}"
            ) from exc

        body = self._envelope(response, method, url)

        # NOTE: Cloudflare wraps all responses in {"success": bool, "result": ...}
        if not body.get("success", False):
            errors = "; ".join(str(e) for e in self._parse_errors(body))
            raise RegistryError(
                f"Cloudflare API returned success=false for {method} {url}. "
                f"Errors: {errors or 'none reported'}"
            )

        return body

    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """
        Sends an authenticated HTTP request, mapping transport and auth failures.

        Raises:
            RegistryTransportError: If the request never got a response.
            RegistryAuthError: If Cloudflare answered 401 or 403.
        """
        try:
            response = await self._client.request(
                method, url, headers=self._headers, params=params, json=json
            )
        except httpx.RequestError as exc:
            raise RegistryTransportError(
                f"Network error calling Cloudflare API ({method} {url}): {exc}"
            ) from exc

        if response.status_code in (401, 403):
            raise RegistryAuthError(
                f"Cloudflare rejected the credentials ({response.status_code}) "
                f"for {method} {url}: {response.text}"
            )
        return response

    @staticmethod
    def _envelope(response: httpx.Response, method: str, url: str) -> dict[str, Any]:
        """
        Parses a Cloudflare response body and checks it is an API envelope.

        Raises:
            RegistryError: If the body is not JSON or has no "success" key.
        """
        try:
            body = response.json()
        except ValueError as exc:
            raise RegistryError(
                f"Cloudflare returned a non-JSON body ({response.status_code}) "
                f"for {method} {url}."
            ) from exc

        if not isinstance(body, dict) or "success" not in body:
            raise RegistryError(
                f"Cloudflare returned an unexpected body ({response.status_code}) "
                f"for {method} {url}."
            )
        return body

    @staticmethod
    def _parse_errors(body: dict[str, Any]) -> list[ProviderErrorDetail]:
        """Converts the envelope's "errors" array into ProviderErrorDetail values."""
        details: list[ProviderErrorDetail] = []
        for raw in body.get("errors") or []:
            if isinstance(raw, dict):
                details.append(
                    ProviderErrorDetail(message=str(raw.get("message", "")), code=raw.get("code"))
                )
            else:
                details.append(ProviderErrorDetail(message=str(raw)))
        return details

    @staticmethod
    def _parse_record(raw: dict[str, Any], zone_id: str = "") -> DnsRecord:
        """
        Converts a raw Cloudflare API record dict into a typed DnsRecord.

        Args:
            raw: A single record object from the Cloudflare API response.
            zone_id: Zone the record was listed from, used when the API omits it.

        Returns:
            A DnsRecord populated from the raw dict.
        """
        return DnsRecord(
            id=raw["id"],
            name=raw["name"],
            type=raw.get("type", MANAGED_RECORD_TYPE),
            content=raw["content"],
            ttl=raw.get("ttl", 1),
            proxied=raw.get("proxied", False),
            zone_id=raw.get("zone_id") or zone_id,
        )
