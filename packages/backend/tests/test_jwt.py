"""Session token tests."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from sso.auth.jwt import TokenError, TokenIssuer
from sso.domain.models import Admin, Student
from sso.errors import TokenIssuanceFailure
from conftest import TEST_SECRET


def test_issue_and_verify(tokens):
    student = Student(id=7, email="ivan@example.com")

    claims = tokens.verify(tokens.issue(student, timedelta(hours=1)))

    assert claims.uid == 7
    assert claims.email == "ivan@example.com"
    assert claims.role == "student"
    assert claims.expires_at > datetime.now(timezone.utc)


def test_payload_fields(tokens):
    """Other services decode the token with the shared secret."""
    token = tokens.issue(Admin(id=1, email="root@example.com"), timedelta(hours=1))

    payload = jwt.decode(token, TEST_SECRET, algorithms=["HS256"])

    assert payload["uid"] == 1
    assert payload["email"] == "root@example.com"
    assert payload["role"] == "admin"
    assert payload["exp"] - payload["iat"] == 3600


def test_expired_token(tokens):
    token = tokens.issue(Student(id=1, email="a@example.com"), timedelta(seconds=-1))

    with pytest.raises(TokenError, match="expired"):
        tokens.verify(token)


def test_wrong_secret(tokens):
    token = tokens.issue(Student(id=1, email="a@example.com"), timedelta(hours=1))

    with pytest.raises(TokenError, match="Invalid token"):
        TokenIssuer("another-secret-0123456789-abcdefgh").verify(token)


def test_garbage_token(tokens):
    with pytest.raises(TokenError):
        tokens.verify("not.a.token")


def test_missing_claims_rejected(tokens):
    token = jwt.encode(
        {"email": "a@example.com", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
        TEST_SECRET,
        algorithm="HS256",
    )

    with pytest.raises(TokenError):
        tokens.verify(token)


def test_signing_failure_names_operation():
    issuer = TokenIssuer(TEST_SECRET, algorithm="NOPE")

    with pytest.raises(TokenIssuanceFailure) as exc:
        issuer.issue(Student(id=1, email="a@example.com"), timedelta(hours=1), op="auth.login")

    assert str(exc.value).startswith("auth.login:")
