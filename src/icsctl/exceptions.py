"""Custom exceptions for Internet Connection Sharing management."""


class IcsError(Exception):
    """Base exception for sharing-related errors."""

    def __init__(self, message: str, name: str | None = None):
        super().__init__(message)
        self.name = name


class PrivilegeRequiredError(IcsError):
    """Raised when the process is not running elevated"""
    pass


class ConnectionNotFoundError(IcsError):
    """Raised when a name or pattern matches no connection"""
    pass


class AmbiguousConnectionNameError(IcsError):
    """Raised when a wildcard pattern matches more than one connection"""

    def __init__(self, message: str, name: str | None = None, candidates: list[str] | None = None):
        super().__init__(message, name)
        self.candidates = candidates or []


class ConnectionNotEnabledError(IcsError):
    """Raised when the private connection is not operationally up"""
    pass


class SharingValidationError(IcsError):
    """Raised when the requested public/private pair is not valid"""
    pass


class UnderlyingServiceError(IcsError):
    """Raised when a call into the OS sharing component fails"""
    pass


class ConfigurationError(IcsError):
    """Raised when there's an issue with the icsctl configuration"""
    pass
