"""
Custom Exceptions for GenAI Hub

Hierarchical exception classes for proper error handling across layers.
"""

from typing import Optional, Dict, Any


class GenAIHubError(Exception):
    """Base exception for all GenAI Hub errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class ValidationError(GenAIHubError):
    """Raised when input validation fails."""
    pass


class DatabaseError(GenAIHubError):
    """Raised when database operations fail."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        table: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if table:
            details["table"] = table
        super().__init__(message, details, original_error)


class NotFoundError(DatabaseError):
    """Raised when a requested resource is not found."""
    pass


class ConflictError(DatabaseError):
    """Raised when an operation conflicts with existing records."""
    pass


class UnauthorizedError(GenAIHubError):
    """Raised when the requester does not own or may not use a resource."""
    pass


# =============================================================================
# Entitlement & Quota
# =============================================================================

class AccessDeniedError(GenAIHubError):
    """Base class for subscription-driven access denials."""
    pass


class NoActiveSubscriptionError(AccessDeniedError):
    """Raised when the user has no approved, unexpired payment."""

    def __init__(self, user_id: Optional[str] = None):
        details = {"user_id": user_id} if user_id else {}
        super().__init__("An active subscription is required", details)


class ProviderNotAllowedError(AccessDeniedError):
    """Raised when the active plan does not include the requested provider."""

    def __init__(self, provider: str):
        super().__init__(
            f"Your current plan does not include the '{provider}' provider",
            {"provider": provider},
        )


class QuotaExceededError(AccessDeniedError):
    """Raised when the plan's usage limit has been reached."""

    def __init__(
        self,
        message: str = "Plan usage limit reached",
        limit: Optional[int] = None,
        used: Optional[int] = None,
    ):
        details = {}
        if limit is not None:
            details["limit"] = limit
        if used is not None:
            details["used"] = used
        super().__init__(message, details)


# =============================================================================
# AI Providers
# =============================================================================

class ProviderError(GenAIHubError):
    """Raised when an AI provider call cannot produce a normalized result."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if provider:
            details["provider"] = provider
        if model:
            details["model"] = model
        super().__init__(message, details, original_error)


class UnsupportedProviderError(ProviderError):
    """Raised when no adapter is registered for a provider key."""

    def __init__(self, provider: str):
        super().__init__(f"Unsupported AI provider: {provider}", provider=provider)


class MissingCredentialError(ProviderError):
    """Raised when no API key is configured for a provider."""

    def __init__(self, provider: str):
        super().__init__(f"API key for {provider} is not configured", provider=provider)


class InvalidProviderResponseError(ProviderError):
    """Raised when a provider response lacks the expected content."""
    pass


class ProviderCallFailedError(ProviderError):
    """Raised on timeouts, transport errors, non-2xx statuses or bad JSON."""
    pass


# =============================================================================
# Payments
# =============================================================================

class PaymentGatewayError(GenAIHubError):
    """Raised when the payment gateway rejects or fails a request."""
    pass


class ConfigurationError(GenAIHubError):
    """Raised when configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if missing_keys:
            details["missing_keys"] = missing_keys
        super().__init__(message, details, original_error)
