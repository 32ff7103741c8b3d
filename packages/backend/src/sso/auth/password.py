"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks. The work
factor is fixed per process (SSO_BCRYPT_ROUNDS, default 12, ~100ms per
hash on modern hardware) and never chosen by a request.

Hashes are kept as raw bytes end to end; they are never logged and
never leave the service through the API.
"""

import bcrypt

from sso.errors import HashingFailure

DEFAULT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:MAX_PASSWORD_BYTES]


class PasswordHasher:
    """bcrypt hash/verify with a fixed cost factor."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds

    def hash(self, password: str, op: str = "password.hash") -> bytes:
        """Hash a password with a fresh salt.

        Raises HashingFailure only when bcrypt itself fails.
        """
        try:
            return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=self.rounds))
        except (ValueError, MemoryError) as e:
            raise HashingFailure(op, f"failed to hash password: {e}") from e

    def verify(self, pass_hash: bytes, password: str) -> bool:
        """Check a password against a stored hash.

        A malformed or empty hash is a mismatch, not an error.
        """
        if not pass_hash:
            return False
        try:
            return bcrypt.checkpw(_encode(password), pass_hash)
        except (ValueError, TypeError):
            return False
