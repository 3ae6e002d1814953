"""
Custom exceptions for bins operations.

Every error raised by the dispatcher or a backend derives from BinsError,
which carries its own message plus an ordered list of underlying cause
messages (innermost last).
"""
from typing import Any, Dict, List, Optional


class BinsError(Exception):
    """Base exception for all bins errors."""

    def __init__(self, message: str, causes: Optional[List[str]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            causes: Messages of the underlying errors, outermost first
        """
        self.message = message
        self.causes: List[str] = list(causes or [])
        super().__init__(message)

    @classmethod
    def wrap(cls, error: BaseException, message: str, **kwargs: Any) -> 'BinsError':
        """
        Build an error of this kind on top of another error.

        The wrapped error's message becomes the first cause, followed by
        whatever causes it already carried.

        Args:
            error: Underlying exception
            message: Message for the new, outer error

        Returns:
            New exception instance (not raised)
        """
        causes = [str(error) or type(error).__name__]
        if isinstance(error, BinsError):
            causes.extend(error.causes)
        return cls(message, causes=causes, **kwargs)

    def chain(self) -> List[str]:
        """Returns the message followed by every cause."""
        return [self.message] + self.causes

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON error shape."""
        return {'message': self.message, 'causes': list(self.causes)}


class ConfigError(BinsError):
    """Malformed config file or size limit, or no writable config location."""
    pass


class UsageError(BinsError):
    """Conflicting or missing command-line input."""
    pass


class ParseError(UsageError):
    """Exception raised when a range expression cannot be parsed."""
    pass


class UnknownBackend(BinsError):
    """Exception raised when no bin is registered under the requested name."""

    def __init__(self, message: str, causes: Optional[List[str]] = None, name: Optional[str] = None) -> None:
        self.name = name
        super().__init__(message, causes)


class UnsupportedFeature(BinsError):
    """Exception raised when a bin lacks a requested feature and the cancel policy is on."""

    def __init__(
        self,
        message: str,
        causes: Optional[List[str]] = None,
        bin_name: Optional[str] = None,
        feature: Any = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            causes: Underlying cause messages
            bin_name: Name of the bin that lacks the feature
            feature: The unsupported Feature
        """
        self.bin_name = bin_name
        self.feature = feature
        super().__init__(message, causes)


class UnknownHost(BinsError):
    """Exception raised when a download URL's host matches no bin."""

    def __init__(self, message: str, causes: Optional[List[str]] = None, host: Optional[str] = None) -> None:
        self.host = host
        super().__init__(message, causes)


class IdExtractionError(BinsError):
    """Exception raised when a URL matched a bin but no paste ID could be parsed."""
    pass


class SizeLimitExceeded(BinsError):
    """Exception raised when an upload file is over the configured size limit."""

    def __init__(
        self,
        message: str,
        causes: Optional[List[str]] = None,
        size: Optional[int] = None,
        limit: Optional[int] = None
    ) -> None:
        self.size = size
        self.limit = limit
        super().__init__(message, causes)


class DisallowedFile(BinsError):
    """Exception raised when an upload file name matches a disallowed pattern."""
    pass


class BackendError(BinsError):
    """Opaque failure inside a bin: network, authentication or bad response."""

    def __init__(
        self,
        message: str,
        causes: Optional[List[str]] = None,
        status: Optional[int] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            causes: Underlying cause messages
            status: HTTP status code (if available)
        """
        self.status = status
        super().__init__(message, causes)


class IoError(BinsError):
    """Exception raised for local file read/write failures."""
    pass


class SerializationError(BinsError):
    """Exception raised when output cannot be encoded as JSON."""
    pass
