"""
Custom exceptions for logoforge.

This module defines all custom exceptions used throughout the application.
Service failures are classified by the kind the backend reported (HTTP status
or SDK error code), so callers can branch on the exception type alone.
"""


class LogoforgeError(Exception):
    """Base exception for all logoforge errors."""

    pass


class ValidationError(LogoforgeError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str = "") -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Name of the field that failed validation (optional)
        """
        self.field = field
        super().__init__(message)


class ConfigurationError(LogoforgeError):
    """Raised when there is a configuration problem."""

    pass


class ImageProcessingError(LogoforgeError):
    """Raised when image processing fails."""

    def __init__(self, message: str, image_path: str = "") -> None:
        """
        Initialize image processing error.

        Args:
            message: Error message
            image_path: Path to the image that caused the error
        """
        self.image_path = image_path
        super().__init__(message)


class ServiceError(LogoforgeError):
    """Raised when a call to the image generation service fails."""

    retryable: bool = False
    requires_reauthentication: bool = False

    def __init__(self, message: str, status_code: int = 0, response: str = "") -> None:
        """
        Initialize service error.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
            response: Raw service response (if available)
        """
        self.status_code = status_code
        self.response = response
        super().__init__(message)


class AuthenticationError(ServiceError):
    """Raised when the API credential is missing or rejected."""

    requires_reauthentication = True


class NoImageProduced(ServiceError):
    """Raised when the service responded without an image part."""

    retryable = True


class TransientServiceError(ServiceError):
    """Raised on rate limiting or temporary model unavailability."""

    retryable = True


class NetworkError(TransientServiceError):
    """Raised when a network operation fails."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        """
        Initialize network error.

        Args:
            message: Error message
            original_error: The underlying exception that caused this error
        """
        self.original_error = original_error
        super().__init__(message)


class RequestTimeoutError(TransientServiceError):
    """Raised when a request exceeds its timeout."""

    pass
