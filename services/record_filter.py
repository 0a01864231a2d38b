"""
services/record_filter.py

Responsibility: Decides which registry records are in scope for management.
Does NOT: compare record content, make HTTP calls, or log.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

from cloudflare.dns_provider import MANAGED_RECORD_TYPE, DnsRecord


def is_managed(record: DnsRecord, suffix: Optional[str] = None) -> bool:
    """
    Returns True if the record is an A record and, when a suffix restriction
    is set, its name ends with that suffix.

    The suffix match is exact on the full name; no case folding or trailing
    dot normalization is applied.
    """
    if record.type != MANAGED_RECORD_TYPE:
        return False

    if suffix and not record.name.endswith(suffix):
        return False
    return True


def filter_records(records: Iterable[DnsRecord], suffix: Optional[str] = None) -> list[DnsRecord]:
    """
    Returns the managed subset of records, preserving input order.

    Args:
        records: Records as listed from a zone.
        suffix: Optional domain-suffix restriction; empty or None manages all
                A records.

    Returns:
        The records that passed is_managed(), in their original order.
    """
    return [record for record in records if is_managed(record, suffix)]
