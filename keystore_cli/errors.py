"""Exceptions raised by the keytool layer."""


class KeystoreError(Exception):
    """Base class for all keystore-cli errors."""


class InvocationFailure(KeystoreError):
    """keytool exited with a non-zero status (or could not be run at all)."""

    def __init__(self, message: str, exit_code: int | None = None, stdout: str = "", stderr: str = "") -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr


class AuthenticationFailure(InvocationFailure):
    """The store password was rejected."""


class MalformedAliasReference(KeystoreError):
    """No alias could be extracted from a line of keytool output."""


class PasswordMismatch(KeystoreError):
    """Two entries of the same password differ."""
