"""
Custom exceptions for the menu lens backend.
Every exception carries the HTTP status and error code used to build the JSON error envelope.
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes for the application."""

    # Client input errors
    MISSING_PARAMETERS = "MISSING_PARAMETERS"
    INVALID_IMAGE_FORMAT = "INVALID_IMAGE_FORMAT"
    IMAGE_TOO_LARGE = "IMAGE_TOO_LARGE"
    UNSUPPORTED_LANGUAGE = "UNSUPPORTED_LANGUAGE"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Authentication errors
    MISSING_AUTHORIZATION = "MISSING_AUTHORIZATION"
    INVALID_TOKEN = "INVALID_TOKEN"

    # Upstream errors
    UPSTREAM_CONFIG_ERROR = "UPSTREAM_CONFIG_ERROR"
    UPSTREAM_SERVICE_ERROR = "UPSTREAM_SERVICE_ERROR"
    UPSTREAM_RATE_LIMITED = "UPSTREAM_RATE_LIMITED"
    UPSTREAM_UNAUTHORIZED = "UPSTREAM_UNAUTHORIZED"
    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"
    NO_IMAGE_GENERATED = "NO_IMAGE_GENERATED"

    # Generic errors
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class MenuLensException(Exception):
    """Base exception for the menu lens backend.

    ``extra`` holds envelope fields beyond ``error``/``details`` (for example the
    model's ``textResponse`` when no image was generated).
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        details: Optional[Any] = None,
        status_code: int = 500,
        extra: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.extra = extra or {}


class ClientInputError(MenuLensException):
    """Raised when required form fields are missing or malformed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 error_code: ErrorCode = ErrorCode.MISSING_PARAMETERS):
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            status_code=400
        )


class InvalidImageTypeError(ClientInputError):
    """Raised when the uploaded file is not an image."""

    def __init__(self, content_type: Optional[str]):
        super().__init__(
            message="Invalid image type",
            details={"content_type": content_type},
            error_code=ErrorCode.INVALID_IMAGE_FORMAT
        )


class UnsupportedLanguageError(ClientInputError):
    """Raised when requested language is not supported."""

    def __init__(self, language: str, supported_languages: Optional[list] = None):
        details = {"requested_language": language}
        if supported_languages:
            details["supported_languages"] = supported_languages
        super().__init__(
            message=f"Language '{language}' is not supported",
            details=details,
            error_code=ErrorCode.UNSUPPORTED_LANGUAGE
        )


class ImageTooLargeError(MenuLensException):
    """Raised when uploaded image exceeds size limits."""

    def __init__(self, size_mb: float, max_size_mb: int):
        super().__init__(
            message=f"Image size {size_mb:.1f}MB exceeds maximum allowed size of {max_size_mb}MB",
            error_code=ErrorCode.IMAGE_TOO_LARGE,
            details={"size_mb": round(size_mb, 2), "max_size_mb": max_size_mb},
            status_code=413
        )


class AuthError(MenuLensException):
    """Raised when the bearer token is missing, malformed or fails verification."""

    def __init__(self, message: str = "Missing or invalid authorization header",
                 error_code: ErrorCode = ErrorCode.MISSING_AUTHORIZATION):
        super().__init__(message=message, error_code=error_code, status_code=401)


class UpstreamConfigError(MenuLensException):
    """Raised when a server-held upstream credential or URL is not configured."""

    def __init__(self, setting_name: str):
        super().__init__(
            message="Server configuration error: Missing API key",
            error_code=ErrorCode.UPSTREAM_CONFIG_ERROR,
            details={"setting": setting_name},
            status_code=500
        )


class UpstreamServiceError(MenuLensException):
    """Raised when an upstream API fails or answers with an unusable response."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Any] = None,
        extra: Optional[Dict[str, Any]] = None,
        error_code: ErrorCode = ErrorCode.UPSTREAM_SERVICE_ERROR,
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            status_code=status_code,
            extra=extra
        )


class NoImageGeneratedError(UpstreamServiceError):
    """Raised when the vision model answered without an inline image part."""

    def __init__(self, text_response: Optional[str]):
        super().__init__(
            message="Failed to generate image. Model response: " + (text_response or "No text response"),
            error_code=ErrorCode.NO_IMAGE_GENERATED,
            extra={"textResponse": text_response}
        )


class UpstreamRateLimitError(UpstreamServiceError):
    """Raised when an upstream API rejects the call with HTTP 429."""

    def __init__(self, details: Optional[Any] = None):
        super().__init__(
            message="API request rate limit exceeded, please try again later",
            status_code=429,
            details=details,
            error_code=ErrorCode.UPSTREAM_RATE_LIMITED
        )


class UpstreamAuthError(UpstreamServiceError):
    """Raised when an upstream API rejects the server's credentials."""

    def __init__(self, details: Optional[Any] = None):
        super().__init__(
            message="API authentication failed, please check configuration",
            status_code=401,
            details=details,
            error_code=ErrorCode.UPSTREAM_UNAUTHORIZED
        )


class UpstreamTimeoutError(UpstreamServiceError):
    """Raised when an upstream call exceeds its configured timeout."""

    def __init__(self, service_name: str, timeout_seconds: float):
        super().__init__(
            message=f"{service_name} did not respond within {timeout_seconds:g} seconds",
            status_code=504,
            details={"service_name": service_name, "timeout_seconds": timeout_seconds},
            error_code=ErrorCode.UPSTREAM_TIMEOUT
        )
