"""Custom exception hierarchy for GitDocify."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Session errors
    UNAUTHORIZED = "UNAUTHORIZED"
    MISSING_CREDENTIAL = "MISSING_CREDENTIAL"
    FORBIDDEN = "FORBIDDEN"

    # Repository fetch errors
    REPOSITORY_NOT_FOUND = "REPOSITORY_NOT_FOUND"
    ACCESS_DENIED = "ACCESS_DENIED"
    FETCH_TIMEOUT = "FETCH_TIMEOUT"
    GITHUB_ERROR = "GITHUB_ERROR"

    # Generation errors
    MODEL_UNCONFIGURED = "MODEL_UNCONFIGURED"
    EMPTY_RESPONSE = "EMPTY_RESPONSE"
    SAFETY_BLOCKED = "SAFETY_BLOCKED"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    GENERATION_FAILED = "GENERATION_FAILED"

    # Document errors
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"

    # OAuth errors
    OAUTH_FAILED = "OAUTH_FAILED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Rate limiting
    RATE_LIMITED = "RATE_LIMITED"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class GitDocifyException(Exception):
    """
    Base exception for all GitDocify errors.

    Provides structured error responses with:
    - Human-readable message (returned as ``error``)
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            status_code: HTTP status code to return
            details: Optional additional context/details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary with error, code, and details fields
        """
        return {
            "error": self.message,
            "code": self.error_code.value,
            "details": self.details
        }


# ---------------------------------------------------------------------------
# Session gate
# ---------------------------------------------------------------------------

class AuthenticationError(GitDocifyException):
    """Request has no valid session."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            message,
            ErrorCode.UNAUTHORIZED,
            status_code=401,
        )


class MissingCredentialError(GitDocifyException):
    """Session was not established through GitHub or has no access token."""

    def __init__(self, message: str = "A GitHub connection is required to analyze repositories."):
        super().__init__(
            message,
            ErrorCode.MISSING_CREDENTIAL,
            status_code=403,
        )


class ForbiddenError(GitDocifyException):
    """Authenticated user lacks permission for the requested resource."""

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(
            message,
            ErrorCode.FORBIDDEN,
            status_code=403,
        )


# ---------------------------------------------------------------------------
# Repository context fetching
# ---------------------------------------------------------------------------

class RepositoryNotFoundError(GitDocifyException):
    """Repository (or ref) does not exist or is invisible to the credential."""

    def __init__(self, repository: str):
        super().__init__(
            f"Repository '{repository}' not found or you don't have access to it.",
            ErrorCode.REPOSITORY_NOT_FOUND,
            status_code=404,
            details={"repository": repository}
        )


class AccessDeniedError(GitDocifyException):
    """GitHub refused the request (403/401, including rate limiting)."""

    def __init__(self, message: str = "Access denied. Check repository permissions and access token."):
        super().__init__(
            message,
            ErrorCode.ACCESS_DENIED,
            status_code=403,
        )


class FetchTimeoutError(GitDocifyException):
    """A repository fetch did not finish within its time budget."""

    def __init__(self, operation: str, timeout: float):
        super().__init__(
            "Repository analysis timed out. The repository might be too large "
            "or the GitHub API is slow.",
            ErrorCode.FETCH_TIMEOUT,
            status_code=504,
            details={"operation": operation, "timeout_seconds": timeout}
        )


class GitHubAPIError(GitDocifyException):
    """Any other unexpected GitHub API failure."""

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        details = {"upstream_status": upstream_status} if upstream_status else {}
        super().__init__(
            message,
            ErrorCode.GITHUB_ERROR,
            status_code=502,
            details=details
        )


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

class GenerationError(GitDocifyException):
    """Base class for text-generation failures."""


class ModelUnconfiguredError(GenerationError):
    """No generative-AI API key is configured."""

    def __init__(self):
        super().__init__(
            "Document generation is not configured. Set GEMINI_API_KEY.",
            ErrorCode.MODEL_UNCONFIGURED,
            status_code=500,
        )


class EmptyResponseError(GenerationError):
    """The model answered but produced no text."""

    def __init__(self):
        super().__init__(
            "The model returned an empty response.",
            ErrorCode.EMPTY_RESPONSE,
            status_code=502,
        )


class SafetyBlockedError(GenerationError):
    """The model's content-safety layer rejected the prompt."""

    def __init__(self, upstream_message: str = ""):
        super().__init__(
            "The request was blocked by the model's safety filters.",
            ErrorCode.SAFETY_BLOCKED,
            status_code=400,
            details={"upstream_message": upstream_message} if upstream_message else None
        )


class QuotaExceededError(GenerationError):
    """The model provider reported quota exhaustion."""

    def __init__(self, upstream_message: str = ""):
        super().__init__(
            "The AI service quota has been exceeded. Please try again later.",
            ErrorCode.QUOTA_EXCEEDED,
            status_code=429,
            details={"upstream_message": upstream_message} if upstream_message else None
        )


class GenerationFailedError(GenerationError):
    """Any other model failure."""

    def __init__(self, upstream_message: str = ""):
        super().__init__(
            "Failed to generate document",
            ErrorCode.GENERATION_FAILED,
            status_code=500,
            details={"upstream_message": upstream_message} if upstream_message else None
        )


# ---------------------------------------------------------------------------
# Persistence, OAuth, validation
# ---------------------------------------------------------------------------

class DocumentNotFoundError(GitDocifyException):
    """Document not found in database."""

    def __init__(self, doc_id: str):
        super().__init__(
            f"Document not found: {doc_id}",
            ErrorCode.DOCUMENT_NOT_FOUND,
            status_code=404,
            details={"doc_id": doc_id}
        )


class OAuthError(GitDocifyException):
    """OAuth sign-in could not be completed."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(
            message,
            ErrorCode.OAUTH_FAILED,
            status_code=400,
            details={"provider": provider} if provider else None
        )


class ValidationError(GitDocifyException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class RateLimitedError(GitDocifyException):
    """Client exceeded the per-minute request limit."""

    def __init__(self, retry_after: float):
        super().__init__(
            "Too many requests",
            ErrorCode.RATE_LIMITED,
            status_code=429,
            details={"retry_after": round(retry_after, 1)}
        )
