"""
cloudflare/dns_provider.py

Responsibility: Defines the RegistryClient Protocol and the value objects
exchanged with it (Zone, DnsRecord, RecordUpdate, UpdateResult).
Does NOT: make HTTP calls, read configuration, or decide which records to update.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol, runtime_checkable

# The only record type this application manages
MANAGED_RECORD_TYPE = "A"


# ---------------------------------------------------------------------------
# Value objects — stable shapes returned by all RegistryClient implementations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Zone:
    """A DNS zone as enumerated from the registry. Read-only."""

    # Provider-assigned opaque identifier
    id: str

    # Human-readable zone name, e.g. "example.com"
    name: str


@dataclass(frozen=True)
class DnsRecord:
    """
    Represents a single DNS resource record as returned by a RegistryClient.

    Records are re-fetched on every pass and never cached, so the provider
    stays the sole source of truth.
    """

    # Provider-assigned unique identifier for the record
    id: str

    # Fully-qualified DNS name, e.g. "home.example.com"
    name: str

    # Record type; only "A" records are managed
    type: str

    # Current content (the address string for A records)
    content: str

    # TTL in seconds; 1 means "automatic" on Cloudflare
    ttl: int = 1

    # Whether the record is proxied through the provider's CDN
    proxied: bool = False

    # The zone ID to which this record belongs
    zone_id: str = ""


@dataclass(frozen=True)
class RecordUpdate:
    """The write request sent to the registry for a single record."""

    type: str
    name: str
    content: str
    ttl: int = 1
    proxied: bool = False

    @classmethod
    def for_record(cls, record: DnsRecord, content: str) -> "RecordUpdate":
        """
        Builds an update that keeps the record's name, TTL and proxy flag and
        only changes its content.

        Args:
            record: The record as currently stored at the registry.
            content: The new content (address string).

        Returns:
            A RecordUpdate for the managed record type.
        """
        return cls(
            type=MANAGED_RECORD_TYPE,
            name=record.name,
            content=content,
            ttl=record.ttl,
            proxied=record.proxied,
        )


@dataclass(frozen=True)
class ProviderErrorDetail:
    """One structured error entry reported by the registry."""

    message: str
    code: Optional[int] = None

    def __str__(self) -> str:
        if self.code is None:
            return self.message
        return f"[{self.code}] {self.message}"


@dataclass(frozen=True)
class UpdateResult:
    """
    Outcome of an update call as reported by the registry.

    success=False is a business rejection (validation, rate limit, ...),
    distinct from a RegistryError raised for transport failures.
    """

    success: bool
    errors: list[ProviderErrorDetail] = field(default_factory=list)
    record: Optional[DnsRecord] = None


# ---------------------------------------------------------------------------
# Abstract interface — all registries must implement this contract
# ---------------------------------------------------------------------------


@runtime_checkable
class RegistryClient(Protocol):
    """
    Abstract protocol for the remote DNS registry.

    ReconcileService depends on this abstraction, never on a concrete
    implementation, so tests can substitute an AsyncMock.
    """

    async def list_zones(self) -> list[Zone]:
        """
        Returns every zone visible to the configured credentials.

        Raises:
            RegistryTransportError: If the registry cannot be reached.
            RegistryAuthError: If the credentials are rejected.
            RegistryError: For any other failure.
        """
        ...

    async def list_records(self, zone_id: str, record_type: str = MANAGED_RECORD_TYPE) -> list[DnsRecord]:
        """
        Returns all records of the given type in a zone, in registry order.

        Args:
            zone_id: The provider-assigned zone identifier.
            record_type: Record type filter, "A" by default.

        Raises:
            RegistryTransportError: If the registry cannot be reached.
            RegistryAuthError: If the credentials are rejected.
            RegistryError: For any other failure.
        """
        ...

    async def update_record(self, zone_id: str, record_id: str, update: RecordUpdate) -> UpdateResult:
        """
        Replaces a record's type, name and content.

        Args:
            zone_id: The provider-assigned zone identifier.
            record_id: The provider-assigned record identifier.
            update: The new record values.

        Returns:
            An UpdateResult; success=False carries the provider's errors.

        Raises:
            RegistryTransportError: If the registry cannot be reached.
            RegistryAuthError: If the credentials are rejected.
            RegistryError: If the response is not a registry envelope.
        """
        ...
