"""JWT session token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. A token
issued at login carries the identity's numeric id, email and role plus
an expiry; anything downstream holding the secret can trust those
claims without asking storage again.

Verification only checks two things: the signature and the expiry.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from sso.domain.models import User
from sso.errors import TokenIssuanceFailure


class TokenError(Exception):
    """Raised when a token fails verification."""


@dataclass(frozen=True)
class TokenClaims:
    uid: int
    email: str
    role: str
    expires_at: datetime


class TokenIssuer:
    """Signs and verifies session tokens with a process-wide secret."""

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self.secret = secret
        self.algorithm = algorithm

    def issue(self, user: User, ttl: timedelta, op: str = "token.issue") -> str:
        """Create a signed token for `user` that expires after `ttl`."""
        now = datetime.now(timezone.utc)
        payload = {
            "uid": user.id,
            "email": user.email,
            "role": user.role.value,
            "iat": now,
            "exp": now + ttl,
        }
        try:
            return jwt.encode(payload, self.secret, algorithm=self.algorithm)
        except (jwt.PyJWTError, NotImplementedError, TypeError, ValueError) as e:
            raise TokenIssuanceFailure(op, f"failed to sign token: {e}") from e

    def verify(self, token: str) -> TokenClaims:
        """Verify and decode a token.

        Returns the claims on success.
        Raises TokenError on a bad signature or an expired token.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "uid", "role"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise TokenError(f"Invalid token: {e}")

        return TokenClaims(
            uid=int(payload["uid"]),
            email=payload.get("email", ""),
            role=payload["role"],
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
