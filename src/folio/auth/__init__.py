"""Admin login and permission state."""

from folio.auth.authenticator import (
    CredentialAuthenticator,
    PermissionState,
    SessionFile,
    hash_password,
)

__all__ = [
    "CredentialAuthenticator",
    "PermissionState",
    "SessionFile",
    "hash_password",
]
