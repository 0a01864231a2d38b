"""
tests/unit/test_config.py

Unit tests for config.py.
Every test passes an explicit environ mapping and a tmp_path config file so
the real process environment and config/config.json are never read.
"""

from __future__ import annotations

import json

import pytest

from config import DEFAULT_INTERVAL, load_config
from exceptions import ConfigLoadError
from services.ip_service import DEFAULT_IP_PROVIDERS


def _write(tmp_path, data):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data) if not isinstance(data, str) else data, encoding="utf-8")
    return str(path)


def test_env_only_config_uses_defaults(tmp_path):
    config = load_config(
        path=str(tmp_path / "missing.json"),
        environ={"CLOUDFLARE_API_TOKEN": "tok"},
    )

    assert config.credentials.api_token == "tok"
    assert config.interval == DEFAULT_INTERVAL == 30
    assert config.limit_to_domain == ""
    assert config.ip_providers == DEFAULT_IP_PROVIDERS
    assert config.log_level == "INFO"


def test_file_values_are_loaded(tmp_path):
    path = _write(
        tmp_path,
        {
            "email": "me@example.com",
            "api_key": "k3y",
            "interval": 120,
            "limit_to_domain": "home.example.com",
            "ip_providers": ["https://ip.test/"],
        },
    )

    config = load_config(path=path, environ={})

    assert config.credentials.email == "me@example.com"
    assert not config.credentials.uses_token
    assert config.interval == 120
    assert config.limit_to_domain == "home.example.com"
    assert config.ip_providers == ("https://ip.test/",)


def test_environment_overrides_file(tmp_path):
    path = _write(tmp_path, {"api_token": "file-token", "interval": 120})

    config = load_config(
        path=path,
        environ={
            "CLOUDFLARE_API_TOKEN": "env-token",
            "UPDATE_INTERVAL_SECONDS": "15",
            "IP_PROVIDERS": "https://a.test/, https://b.test/",
        },
    )

    assert config.credentials.api_token == "env-token"
    assert config.interval == 15
    assert config.ip_providers == ("https://a.test/", "https://b.test/")


def test_overrides_win_and_none_is_ignored(tmp_path):
    path = _write(tmp_path, {"api_token": "tok", "interval": 120})

    config = load_config(
        path=path,
        environ={"LIMIT_TO_ZONE_BY_DOMAIN": "example.com"},
        overrides={"interval": 60, "limit_to_domain": None},
    )

    assert config.interval == 60
    assert config.limit_to_domain == "example.com"


def test_config_path_from_environment(tmp_path):
    path = _write(tmp_path, {"api_token": "tok", "interval": 99})

    config = load_config(environ={"DDNS_CONFIG": path})

    assert config.interval == 99


def test_token_preferred_over_email_key(tmp_path):
    config = load_config(
        path=str(tmp_path / "missing.json"),
        environ={"CLOUDFLARE_API_TOKEN": "tok", "CLOUDFLARE_EMAIL": "a@b.c", "CLOUDFLARE_API_KEY": "k"},
    )
    assert config.credentials.headers() == {"Authorization": "Bearer tok"}


def test_missing_credentials_raise(tmp_path):
    with pytest.raises(ConfigLoadError, match="credentials"):
        load_config(path=str(tmp_path / "missing.json"), environ={"CLOUDFLARE_EMAIL": "a@b.c"})


@pytest.mark.parametrize("interval", ["0", "-5", "soon"])
def test_invalid_interval_raises(tmp_path, interval):
    with pytest.raises(ConfigLoadError):
        load_config(
            path=str(tmp_path / "missing.json"),
            environ={"CLOUDFLARE_API_TOKEN": "tok", "UPDATE_INTERVAL_SECONDS": interval},
        )


def test_corrupt_file_raises(tmp_path):
    path = _write(tmp_path, "{not json")
    with pytest.raises(ConfigLoadError, match="corrupt"):
        load_config(path=path, environ={"CLOUDFLARE_API_TOKEN": "tok"})


def test_non_object_file_raises(tmp_path):
    path = _write(tmp_path, [1, 2, 3])
    with pytest.raises(ConfigLoadError):
        load_config(path=path, environ={"CLOUDFLARE_API_TOKEN": "tok"})


def test_empty_provider_list_raises(tmp_path):
    path = _write(tmp_path, {"api_token": "tok", "ip_providers": []})
    with pytest.raises(ConfigLoadError):
        load_config(path=path, environ={})


def test_config_is_immutable(tmp_path):
    config = load_config(path=str(tmp_path / "missing.json"), environ={"CLOUDFLARE_API_TOKEN": "tok"})
    with pytest.raises(AttributeError):
        config.interval = 5  # type: ignore[misc]


def test_limit_to_domain_is_trimmed(tmp_path):
    config = load_config(
        path=str(tmp_path / "missing.json"),
        environ={"CLOUDFLARE_API_TOKEN": "tok", "LIMIT_TO_ZONE_BY_DOMAIN": "  example.com \n"},
    )
    assert config.limit_to_domain == "example.com"


def test_whole_number_interval_written_as_float_is_accepted(tmp_path):
    config = load_config(
        path=str(tmp_path / "missing.json"),
        environ={"CLOUDFLARE_API_TOKEN": "tok", "UPDATE_INTERVAL_SECONDS": "30.0"},
    )
    assert config.interval == 30
    assert isinstance(config.interval, int)


def test_fractional_interval_raises(tmp_path):
    with pytest.raises(ConfigLoadError, match="whole number"):
        load_config(
            path=str(tmp_path / "missing.json"),
            environ={"CLOUDFLARE_API_TOKEN": "tok", "UPDATE_INTERVAL_SECONDS": "30.5"},
        )


def test_log_level_is_normalised(tmp_path):
    config = load_config(
        path=str(tmp_path / "missing.json"),
        environ={"CLOUDFLARE_API_TOKEN": "tok"},
        overrides={"log_level": "debug"},
    )
    assert config.log_level == "DEBUG"


def test_unknown_log_level_raises(tmp_path):
    with pytest.raises(ConfigLoadError, match="log_level"):
        load_config(
            path=str(tmp_path / "missing.json"),
            environ={"CLOUDFLARE_API_TOKEN": "tok", "LOG_LEVEL": "verbose"},
        )
