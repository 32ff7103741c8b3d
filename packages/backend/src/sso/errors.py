"""Domain error taxonomy surfaced by the Auth service.

Learn: Every failure that leaves the service is one of these kinds.
The transport layer maps kinds to status codes; it never sees raw
driver or Redis exceptions. Each error carries the name of the
operation that raised it, so "auth.login: invalid credentials" reads
the same in logs and in tracebacks.

Credential and lookup failures are coarse: "no such user" and
"wrong password" are both InvalidCredentials.
"""


class AuthError(Exception):
    """Base class for all domain errors."""

    message = "auth error"

    def __init__(self, op: str, message: str | None = None):
        self.op = op
        if message is not None:
            self.message = message
        super().__init__(f"{op}: {self.message}")


class InvalidCredentials(AuthError):
    message = "invalid credentials"


class InvalidUserID(AuthError):
    message = "invalid user id"


class UserExists(AuthError):
    message = "user already exists"


class RoleNotExists(AuthError):
    message = "role does not exist"


class UserNotMatchingRole(AuthError):
    message = "user not matching role"


class PendingUserNotFound(AuthError):
    message = "pending user not found"


class StorageFailure(AuthError):
    message = "storage failure"


class HashingFailure(AuthError):
    message = "failed to hash password"


class TokenIssuanceFailure(AuthError):
    message = "failed to issue token"
