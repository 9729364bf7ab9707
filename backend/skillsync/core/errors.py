"""Error taxonomy shared by the stores, gateways and HTTP routes."""


class SkillSyncError(Exception):
    """
    Base class for errors that carry a user-facing message.

    Attributes:
        message: Text that is safe to return to the caller
        status_code: HTTP status the error maps to at the route boundary
    """

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(SkillSyncError):
    """Malformed or insufficient input. Always correctable by the caller."""

    status_code = 400


class GatewayResponseError(SkillSyncError):
    """The AI provider answered, but the answer could not be used."""


class ProviderError(SkillSyncError):
    """The AI provider could not be reached or rejected the request."""


class ConfigurationError(SkillSyncError):
    """A required provider credential or setting is missing."""


class RemoteStoreError(SkillSyncError):
    """
    A Remote Data Gateway call failed.

    Attributes:
        operation: Gateway operation that failed (load, add, update, delete)
        not_found: True when the target row does not exist
    """

    status_code = 502

    def __init__(self, message: str, operation: str | None = None, not_found: bool = False):
        self.operation = operation
        self.not_found = not_found
        super().__init__(message)


class RateLimitedError(SkillSyncError):
    """Too many AI requests for one user inside the limiter window."""

    status_code = 429

    def __init__(self, message: str, retry_after_seconds: int):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(message)
