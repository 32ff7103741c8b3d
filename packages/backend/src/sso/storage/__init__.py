"""Storage contracts and their errors.

Learn: The Auth service talks to two stores through narrow interfaces
(see base.py). Implementations translate driver exceptions into the
errors below so the service can tell "not found" apart from "found
under another role" apart from a plain failure.
"""


class StorageError(Exception):
    """Base class for storage-layer failures."""


class UserExistsError(StorageError):
    """An identity with this email already exists under the role."""


class UserNotFoundError(StorageError):
    """No identity matches the lookup."""


class UserHasAnotherRoleError(StorageError):
    """The email is registered, but only under a different role."""


class UserDontHaveRoleError(StorageError):
    """The id exists, but belongs to a different role."""


class InvalidUserDataError(StorageError):
    """A stored record could not be encoded or decoded."""


class NoValueForKeyError(StorageError):
    """The pending record is missing or has expired."""
