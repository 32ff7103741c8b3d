"""SSO — identity and access service.

Authenticates students, teachers and admins, issues signed session tokens,
and runs the pending-registration workflow (submit → approve/reject) that
turns account requests into permanent, role-scoped identities.
"""

__version__ = "0.1.0"
