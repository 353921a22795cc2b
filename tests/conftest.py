"""
Shared test fixtures for omni-cli tests.
Patches config module to avoid reading the real .env or environment.
"""

import pytest

from omni_cli import config

_ENV_KEYS = (
    *config.REQUIRED_KEYS,
    "BW_SESSION",
    "EPICOR_COMPANY",
    "EPICOR_LIBRARY",
    "OMNI_BW_BINARY",
    "OMNI_LOG",
)


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch, tmp_path):
    """Ensure every test starts with a clean config state.
    Prevents tests from reading or writing the real .env."""
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(config, "env", {})
    monkeypatch.setattr(config, "ENV_PATH", str(tmp_path / ".env"))
    monkeypatch.setattr(config, "EPICOR_COMPANY", "100")
    monkeypatch.setattr(config, "EPICOR_LIBRARY", "Omni")
    monkeypatch.setattr(config, "BW_BINARY", "bw")
    monkeypatch.setattr(config, "HTTP_TIMEOUT_SECONDS", 30)
    monkeypatch.setattr(config, "HTTP_MAX_RESPONSE_BYTES", 5_000_000)
    monkeypatch.setattr(config, "VAULT_TIMEOUT_SECONDS", 60.0)
    monkeypatch.setattr(config, "LOG_ENABLED", False)
    monkeypatch.setattr(config, "RUNTIME_QUIET", False)
    monkeypatch.setattr(config, "RUNTIME_VERBOSE", False)


@pytest.fixture
def epicor_env(monkeypatch):
    """Populate Epicor credentials the way a saved .env would."""
    monkeypatch.setattr(
        config,
        "env",
        {
            **config.env,
            "EPICOR_API_KEY": "key-123",
            "EPICOR_BASIC_AUTH": "Basic dXNlcjpwYXNz",
            "EPICOR_BASE_URL": "https://erp.example.com/",
        },
    )


@pytest.fixture
def bw_env(monkeypatch):
    """Populate Bitwarden credentials the way a saved .env would."""
    monkeypatch.setattr(
        config,
        "env",
        {
            **config.env,
            "BW_CLIENTID": "user.client-id",
            "BW_CLIENTSECRET": "client-secret",
            "MASTER_PASSWORD": "s3cret-pw",
        },
    )
