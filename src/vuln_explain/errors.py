"""Error types shared by the audit service and the HTTP layer."""


class AuditError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AuditError):
    """Empty or malformed client input."""

    status_code = 400


class InvalidUrlError(ValidationError):
    """The repository URL has no recognizable owner/repo segments."""


class ConfigurationError(AuditError):
    """A required credential or setting is missing."""


class UpstreamError(AuditError):
    """The LLM provider or the hosting API failed."""


class MalformedResponseError(AuditError):
    """The model response held no extractable JSON object."""
