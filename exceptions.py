"""
exceptions.py

Responsibility: Defines all custom exception classes used across the application.
Does NOT: contain business logic, logging, or HTTP handling.
"""

from __future__ import annotations


class AddressResolutionError(Exception):
    """
    Raised by IpService when no address provider yields a usable public IP.

    Every configured provider was tried exactly once and each one either
    failed at the HTTP level or returned a body that did not parse as an
    address. Aborts the current reconcile pass only.
    """


class RegistryError(Exception):
    """
    Raised by a RegistryClient implementation when a DNS API call fails.

    Covers malformed responses and read calls the registry rejected. A
    business-level rejection of an update is NOT an exception; it is
    reported through UpdateResult(success=False).
    """


class RegistryTransportError(RegistryError):
    """
    Raised when the registry could not be reached (DNS failure, refused
    connection, timeout).
    """


class RegistryAuthError(RegistryError):
    """
    Raised when the registry rejects the configured credentials (HTTP 401/403).
    """


class PassCancelled(Exception):
    """
    Raised inside a reconcile pass when the shared cancellation event is set
    before an outbound call. Ends the pass early without error logging.
    """


class ConfigLoadError(Exception):
    """
    Raised by load_config when the configuration file cannot be parsed or the
    resulting settings are invalid (e.g. no credentials).
    """
