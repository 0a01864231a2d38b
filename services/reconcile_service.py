"""
services/reconcile_service.py

Responsibility: Runs one reconciliation pass — resolves the public IP, walks
every zone's managed A records, and updates the ones that drifted.
Does NOT: schedule itself, make HTTP calls directly, or persist any state
between passes.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Optional

from cloudflare.dns_provider import (
    MANAGED_RECORD_TYPE,
    DnsRecord,
    ProviderErrorDetail,
    RecordUpdate,
    RegistryClient,
    Zone,
)
from exceptions import AddressResolutionError, PassCancelled, RegistryError
from services.ip_service import IpService, NetworkAddress
from services.record_filter import filter_records

logger = logging.getLogger(__name__)

SKIP_ALREADY_CURRENT = "already-current"


# ---------------------------------------------------------------------------
# Outcome value objects — ephemeral, rebuilt every pass
# ---------------------------------------------------------------------------


class OutcomeStatus(str, enum.Enum):
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class RecordOutcome:
    """What happened to a single managed record during a pass."""

    zone: Zone
    record: DnsRecord
    status: OutcomeStatus
    reason: str = ""
    new_content: str = ""
    errors: list[ProviderErrorDetail] = field(default_factory=list)


@dataclass
class PassReport:
    """
    Aggregated result of one reconcile pass.

    aborted is set when the pass ended on an error (no address, registry
    failure, unexpected exception); cancelled when the shutdown event stopped
    it early. Outcomes collected before either are kept.
    """

    address: Optional[NetworkAddress] = None
    zones_seen: int = 0
    outcomes: list[RecordOutcome] = field(default_factory=list)
    aborted: bool = False
    cancelled: bool = False

    def _with_status(self, status: OutcomeStatus) -> list[RecordOutcome]:
        return [o for o in self.outcomes if o.status is status]

    @property
    def updated(self) -> list[RecordOutcome]:
        return self._with_status(OutcomeStatus.UPDATED)

    @property
    def skipped(self) -> list[RecordOutcome]:
        return self._with_status(OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> list[RecordOutcome]:
        return self._with_status(OutcomeStatus.FAILED)

    def summary(self) -> str:
        """Returns a compact one-line summary of the pass."""
        parts = [
            f"{len(self.outcomes)} managed record(s) in {self.zones_seen} zone(s)",
            f"{len(self.skipped)} already current",
        ]
        if self.updated:
            parts.append(f"{len(self.updated)} updated")
        if self.failed:
            parts.append(f"{len(self.failed)} failed")
        return ", ".join(parts)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ReconcileService:
    """
    Keeps every managed A record pointing at the host's public IP.

    Each pass re-reads the full zone and record state from the registry; the
    registry is the only source of truth. A pass with no address change
    performs zero write calls.

    Collaborators:
        - RegistryClient: abstract interface satisfied by CloudflareClient
        - IpService: provides the current public IP
    """

    def __init__(
        self,
        registry: RegistryClient,
        ip_service: IpService,
        limit_to_domain: str = "",
    ) -> None:
        """
        Initialises the service with all required collaborators.

        Args:
            registry: Any RegistryClient implementation (e.g. CloudflareClient).
            ip_service: Resolves the current public IP of the host machine.
            limit_to_domain: Optional domain-suffix restriction; empty manages
                             all A records in all zones.
        """
        self._registry = registry
        self._ip_service = ip_service
        self._limit_to_domain = limit_to_domain

    # ---------------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------------

    async def reconcile(self, cancel: Optional[asyncio.Event] = None) -> PassReport:
        """
        Runs a single reconciliation pass.

        Never raises on failure: errors are logged and end this pass only,
        the next scheduled pass runs as usual.

        Args:
            cancel: Shared cancellation event, checked before every outbound call.

        Returns:
            A PassReport with per-record outcomes.
        """
        report = PassReport()
        try:
            await self._run_pass(report, cancel)
        except PassCancelled:
            logger.info("Shutdown requested — reconcile pass stopped early.")
            report.cancelled = True
        except AddressResolutionError as exc:
            logger.error("All external IP providers failed to resolve the IP: %s", exc)
            report.aborted = True
        except RegistryError as exc:
            logger.error("Registry call failed; aborting reconcile pass: %s", exc)
            report.aborted = True
        except Exception:
            logger.exception("Unexpected error during reconcile pass.")
            report.aborted = True
        else:
            level = logging.WARNING if report.failed else logging.INFO
            logger.log(level, "Reconcile pass complete: %s.", report.summary())
        return report

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    async def _run_pass(self, report: PassReport, cancel: Optional[asyncio.Event]) -> None:
        report.address = await self._ip_service.get_public_ip(cancel)
        logger.debug("Got IP from external provider: %s", report.address)

        self._check_cancelled(cancel)
        zones = await self._registry.list_zones()
        report.zones_seen = len(zones)
        logger.debug("Found zones: %s", [zone.name for zone in zones])

        for zone in zones:
            self._check_cancelled(cancel)
            records = await self._registry.list_records(zone.id, MANAGED_RECORD_TYPE)
            managed = filter_records(records, self._limit_to_domain)

            if len(managed) < len(records):
                logger.debug(
                    "Zone '%s': %d of %d A record(s) outside '%s' skipped.",
                    zone.name, len(records) - len(managed), len(records), self._limit_to_domain,
                )

            for record in managed:
                outcome = await self._reconcile_record(zone, record, report.address, cancel)
                report.outcomes.append(outcome)

    async def _reconcile_record(
        self,
        zone: Zone,
        record: DnsRecord,
        address: NetworkAddress,
        cancel: Optional[asyncio.Event],
    ) -> RecordOutcome:
        """
        Checks a single record and updates it if its content has drifted.

        Returns:
            The RecordOutcome; business rejections become FAILED outcomes
            instead of exceptions so sibling records still get processed.
        """
        target = str(address)
        if record.content == target:
            logger.debug(
                "The IP for record '%s' in zone '%s' is already '%s'.", record.name, zone.name, target
            )
            return RecordOutcome(zone, record, OutcomeStatus.SKIPPED, reason=SKIP_ALREADY_CURRENT)

        self._check_cancelled(cancel)
        result = await self._registry.update_record(
            zone.id, record.id, RecordUpdate.for_record(record, target)
        )

        if result.success:
            logger.info(
                "Updated record '%s' in zone '%s': %s → %s",
                record.name, zone.name, record.content, target,
            )
            return RecordOutcome(zone, record, OutcomeStatus.UPDATED, new_content=target)

        reason = "; ".join(str(e) for e in result.errors) or "registry reported failure"
        logger.error(
            "Failed to update record '%s' in zone '%s': %s", record.name, zone.name, reason
        )
        return RecordOutcome(
            zone, record, OutcomeStatus.FAILED, reason=reason, errors=list(result.errors)
        )

    @staticmethod
    def _check_cancelled(cancel: Optional[asyncio.Event]) -> None:
        if cancel is not None and cancel.is_set():
            raise PassCancelled("Cancellation requested.")
