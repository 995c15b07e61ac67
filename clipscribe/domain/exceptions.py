"""Domain exceptions for the application."""


class ClipscribeError(Exception):
    """Base exception for application errors."""

    pass


class AuthenticationRequiredError(ClipscribeError):
    """Raised when a request carries no caller identity."""

    def __init__(self):
        super().__init__("Authentication required")


class RecordNotFoundError(ClipscribeError):
    """Raised when a record does not exist or is not owned by the caller.

    Both cases share one error so that callers cannot discover the
    existence of records they do not own.

    Attributes:
        kind: Record kind, e.g. "Project" or "Video"
        record_id: The identifier that was looked up
    """

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found or access denied")


class ValidationFailedError(ClipscribeError):
    """Raised when input fails validation before any store mutation.

    Attributes:
        field: Name of the invalid field
        message: Description of the validation error
    """

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"Invalid field '{field}': {message}")


class TranscriptionProviderError(ClipscribeError):
    """Raised when the transcription provider request fails."""

    pass


class StorageError(ClipscribeError):
    """Raised when the object store cannot write a file."""

    pass
