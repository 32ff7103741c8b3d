"""Settings tests."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from sso.config import DEFAULT_JWT_SECRET, Settings


def test_defaults():
    s = Settings()

    assert s.environment == "local"
    assert s.port == 44044
    assert s.token_ttl == timedelta(hours=24)
    assert s.pending_ttl == timedelta(days=7)


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("SSO_TOKEN_TTL_HOURS", "2")
    monkeypatch.setenv("SSO_PENDING_TTL_DAYS", "1")
    monkeypatch.setenv("SSO_STORAGE", "memory")

    s = Settings()

    assert s.token_ttl == timedelta(hours=2)
    assert s.pending_ttl == timedelta(days=1)
    assert s.storage == "memory"


@pytest.mark.parametrize("environment", ["dev", "prod"])
def test_default_secret_refused_outside_local(environment):
    with pytest.raises(ValidationError, match="SSO_JWT_SECRET"):
        Settings(environment=environment, jwt_secret=DEFAULT_JWT_SECRET)


def test_custom_secret_accepted_in_prod():
    s = Settings(environment="prod", jwt_secret="a-real-secret-0123456789")

    assert s.environment == "prod"


@pytest.mark.parametrize("rounds", [3, 32])
def test_bcrypt_rounds_bounds(rounds):
    with pytest.raises(ValidationError, match="SSO_BCRYPT_ROUNDS"):
        Settings(bcrypt_rounds=rounds)
