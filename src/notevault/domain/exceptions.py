"""Domain exceptions."""


class NoteVaultError(Exception):
    """Base exception for NoteVault."""

    pass


class NotFound(NoteVaultError):
    """Requested resource was not found."""

    pass


class Forbidden(NoteVaultError):
    """User is not allowed to perform the requested action."""

    pass


class InvalidState(NoteVaultError):
    """Operation is not valid for the entity's current status."""

    pass


class AlreadyPromoted(NoteVaultError):
    """Version is already the live version of its document."""

    pass


class DuplicateDocument(NoteVaultError):
    """Document with the same identifier already exists."""

    pass


class ValidationError(NoteVaultError):
    """Validation failed for input data."""

    pass


class MalformedDocument(NoteVaultError):
    """Source bytes are not a usable PDF."""

    pass


class StorageUnavailable(NoteVaultError):
    """Transient object storage failure (timeout, connection, 5xx)."""

    pass
