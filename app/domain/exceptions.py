from __future__ import annotations

from enum import Enum


class DomainError(Exception):
    """Base for domain errors."""


class ValidationError(DomainError):
    """Malformed input rejected before reaching the core."""


class VerificationErrorKind(str, Enum):
    INVALID_TOKEN = "invalid_token"
    EXPIRED_TOKEN = "expired_token"
    AUDIENCE_MISMATCH = "audience_mismatch"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    MISSING_CLAIMS = "missing_claims"


class VerificationError(DomainError):
    """Identity token rejected by the provider variant."""

    def __init__(self, kind: VerificationErrorKind, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind


class ResolutionErrorKind(str, Enum):
    EMAIL_CONFLICT = "email_conflict"
    USER_NOT_FOUND = "user_not_found"


class ResolutionError(DomainError):
    """Verified profile could not be mapped to a local user."""

    def __init__(self, kind: ResolutionErrorKind, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind


class AuthErrorKind(str, Enum):
    MISSING_CREDENTIAL = "missing_credential"
    SESSION_NOT_FOUND = "session_not_found"
    SESSION_EXPIRED = "session_expired"
    UNAUTHORIZED = "unauthorized"


class AuthError(DomainError):
    """Missing, unknown or expired session credential."""

    def __init__(self, kind: AuthErrorKind, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind


class StorageError(DomainError):
    """Underlying persistence failure."""
