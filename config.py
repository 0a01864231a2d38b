"""
config.py

Responsibility: Builds the immutable, process-wide AppConfig from the JSON
config file, environment variables, and command-line overrides.
Does NOT: make HTTP calls, configure logging handlers, or reload at runtime.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from cloudflare.cloudflare_client import CloudflareCredentials
from exceptions import ConfigLoadError
from services.ip_service import DEFAULT_IP_PROVIDERS

logger = logging.getLogger(__name__)

CONFIG_FILE = "config/config.json"
DEFAULT_INTERVAL = 30
DEFAULT_HTTP_TIMEOUT = 10.0
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

# Environment variable -> config key
_ENV_KEYS = {
    "CLOUDFLARE_API_TOKEN": "api_token",
    "CLOUDFLARE_EMAIL": "email",
    "CLOUDFLARE_API_KEY": "api_key",
    "UPDATE_INTERVAL_SECONDS": "interval",
    "LIMIT_TO_ZONE_BY_DOMAIN": "limit_to_domain",
    "IP_PROVIDERS": "ip_providers",
    "HTTP_TIMEOUT_SECONDS": "http_timeout",
    "LOG_LEVEL": "log_level",
    "LOG_FILE": "log_file",
}


@dataclass(frozen=True)
class AppConfig:
    """
    Process-wide settings, set once at startup and passed explicitly to the
    collaborators that need them.
    """

    credentials: CloudflareCredentials

    # Seconds between reconcile passes
    interval: int = DEFAULT_INTERVAL

    # Only manage records whose name ends with this; empty manages all A records
    limit_to_domain: str = ""

    # Ordered address-echo endpoints
    ip_providers: tuple[str, ...] = DEFAULT_IP_PROVIDERS

    # Per-request timeout for every outbound call, in seconds
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    log_level: str = "INFO"

    # Optional log file; empty logs to stdout only
    log_file: str = ""


def ensure_config_defaults(config: dict[str, Any]) -> dict[str, Any]:
    config.setdefault("api_token", "")
    config.setdefault("email", "")
    config.setdefault("api_key", "")
    config.setdefault("interval", DEFAULT_INTERVAL)
    config.setdefault("limit_to_domain", "")
    config.setdefault("ip_providers", list(DEFAULT_IP_PROVIDERS))
    config.setdefault("http_timeout", DEFAULT_HTTP_TIMEOUT)
    config.setdefault("log_level", "INFO")
    config.setdefault("log_file", "")
    return config


def read_config_file(path: str) -> dict[str, Any]:
    """
    Reads the JSON config file.

    A missing file is not an error (everything can come from the
    environment); a corrupt one is.

    Args:
        path: Path to the JSON config file.

    Returns:
        The parsed settings dict, empty if the file does not exist.

    Raises:
        ConfigLoadError: If the file exists but is not a JSON object.
    """
    if not os.path.exists(path):
        logger.debug("Config file %s does not exist — using environment only.", path)
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigLoadError(f"Failed to parse {path} (corrupt?): {e}") from e
    except OSError as e:
        raise ConfigLoadError(f"Could not read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigLoadError(f"{path} must contain a JSON object.")
    return data


def _from_environ(environ: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for env_name, key in _ENV_KEYS.items():
        raw = environ.get(env_name)
        if raw is None or raw == "":
            continue
        if key == "ip_providers":
            values[key] = [p.strip() for p in raw.split(",") if p.strip()]
        else:
            values[key] = raw
    return values


def _positive_number(value: Any, name: str, cast: type) -> Any:
    # Environment values arrive as strings; "30.0" is a valid whole interval
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigLoadError(f"{name} must be a number, got {value!r}.") from e
    if cast is int:
        if not number.is_integer():
            raise ConfigLoadError(f"{name} must be a whole number, got {value!r}.")
        number = int(number)
    if not number > 0:
        raise ConfigLoadError(f"{name} must be greater than zero, got {value!r}.")
    return number


def build_config(settings: dict[str, Any]) -> AppConfig:
    """
    Validates a merged settings dict and freezes it into an AppConfig.

    Raises:
        ConfigLoadError: If credentials are missing or a value is invalid.
    """
    settings = ensure_config_defaults(dict(settings))

    credentials = CloudflareCredentials(
        api_token=str(settings["api_token"]).strip(),
        email=str(settings["email"]).strip(),
        api_key=str(settings["api_key"]).strip(),
    )
    if not credentials.is_complete():
        raise ConfigLoadError(
            "No Cloudflare credentials configured: set an API token, or both an email and an API key."
        )
    if credentials.uses_token and (credentials.email or credentials.api_key):
        logger.info("Both an API token and an email/key pair are configured — using the token.")

    providers = settings["ip_providers"]
    if isinstance(providers, str):
        providers = [p.strip() for p in providers.split(",") if p.strip()]
    if not providers:
        raise ConfigLoadError("ip_providers must list at least one endpoint.")

    log_level = str(settings["log_level"]).strip().upper()
    if log_level not in LOG_LEVELS:
        raise ConfigLoadError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {settings['log_level']!r}.")

    return AppConfig(
        credentials=credentials,
        interval=_positive_number(settings["interval"], "interval", int),
        limit_to_domain=str(settings["limit_to_domain"] or "").strip(),
        ip_providers=tuple(providers),
        http_timeout=_positive_number(settings["http_timeout"], "http_timeout", float),
        log_level=log_level,
        log_file=str(settings["log_file"] or ""),
    )


def load_config(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> AppConfig:
    """
    Loads the application configuration.

    Later sources win: defaults, then the JSON file, then environment
    variables, then explicit overrides (command-line flags).

    Args:
        path: Config file path; defaults to $DDNS_CONFIG or config/config.json.
        environ: Environment mapping; defaults to os.environ.
        overrides: Values that take precedence over everything else. None
                   values are ignored.

    Returns:
        The frozen AppConfig.

    Raises:
        ConfigLoadError: If the file is corrupt or the result is invalid.
    """
    environ = os.environ if environ is None else environ
    path = path or environ.get("DDNS_CONFIG") or CONFIG_FILE

    settings = read_config_file(path)
    settings.update(_from_environ(environ))
    settings.update({k: v for k, v in (overrides or {}).items() if v is not None})
    return build_config(settings)
