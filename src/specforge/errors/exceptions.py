"""Custom exception classes for the SpecForge API."""


class SpecForgeError(Exception):
    """Base exception for SpecForge."""

    def __init__(self, code: str, message: str, details=None, status_code: int = 500):
        self.code = code
        self.message = message
        self.details = details
        self.status_code = status_code
        super().__init__(message)


class ValidationError(SpecForgeError):
    """Schema or request validation failure."""

    def __init__(self, message: str, details=None):
        super().__init__("VALIDATION_ERROR", message, details, status_code=400)


class NotFoundError(SpecForgeError):
    """Resource not found."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            "NOT_FOUND",
            f"{resource} '{resource_id}' not found",
            status_code=404,
        )


class AuthenticationError(SpecForgeError):
    """Authentication required or token invalid."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__("AUTHENTICATION_ERROR", message, status_code=401)


class AuthorizationError(SpecForgeError):
    """Caller does not own the referenced resource."""

    def __init__(self, message: str = "Not the owner of this project"):
        super().__init__("AUTHORIZATION_ERROR", message, status_code=403)


class ConflictError(SpecForgeError):
    """Resource state conflict."""

    def __init__(self, message: str, details=None):
        super().__init__("CONFLICT", message, details, status_code=409)


class ParseError(SpecForgeError):
    """Specification text is not JSON/YAML or does not decode to an object."""

    def __init__(self, message: str, details=None):
        super().__init__("PARSE_ERROR", message, details, status_code=400)


class UpstreamError(SpecForgeError):
    """An external service answered with an error or an unusable payload."""

    def __init__(self, service: str, message: str, details=None):
        self.service = service
        super().__init__("UPSTREAM_ERROR", message, details, status_code=502)


class ConfigMissingError(SpecForgeError):
    """npm configuration or a server-side credential is absent."""

    def __init__(self, message: str, details=None):
        super().__init__("CONFIG_MISSING", message, details, status_code=400)


class PublishExecutionError(SpecForgeError):
    """The package manager publish command failed."""

    def __init__(self, message: str, details=None):
        super().__init__("PUBLISH_FAILED", message, details, status_code=500)


def error_message(exc: BaseException) -> str:
    """Best-effort human message for an arbitrary exception."""
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    text = str(exc)
    return text or type(exc).__name__
