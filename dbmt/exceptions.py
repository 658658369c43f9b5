"""Exception types shared by the service, the wizard and the client."""


class DBMTError(Exception):
    """Base class for every error raised by the migration tool."""


class Unauthorized(DBMTError):
    """Raised when the caller identity cannot be resolved."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class StoreError(DBMTError):
    """Raised by the storage layer (missing rows, unknown columns, broken references)."""


class WizardError(DBMTError):
    """Raised on invalid wizard navigation or state updates."""
