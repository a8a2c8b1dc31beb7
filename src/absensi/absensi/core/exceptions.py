from __future__ import annotations

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    `code` is the stable machine-readable identifier exposed by the HTTP layer;
    `details` carries structured context (distances, day counts, ...).
    """

    code = "domain_error"
    default_message = "Domain rule violated"

    def __init__(self, message: Optional[str] = None, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message or self.default_message)
        self.details: Dict[str, Any] = dict(details or {})

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.default_message


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "invalid_payload"
    default_message = "Invalid payload"


class AuthenticationError(DomainError):
    """Raised when credentials or tokens are invalid."""

    code = "unauthorized"
    default_message = "Invalid credentials"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "forbidden"
    default_message = "Forbidden"


# -------- Attendance --------
class OutsideGeofence(DomainError):
    code = "outside_radius"
    default_message = "Position is outside the office radius"

    def __init__(self, distance_m: float, radius_m: float):
        super().__init__(
            details={"distance_m": round(distance_m, 1), "radius_m": radius_m},
        )
        self.distance_m = distance_m
        self.radius_m = radius_m


class AlreadyCheckedIn(DomainError):
    code = "already_checked_in"
    default_message = "Already checked in today"


class NotCheckedInOrAlreadyCheckedOut(DomainError):
    code = "not_checked_in_yet_or_already_checked_out"
    default_message = "Not checked in yet or already checked out today"


class ResetDisabled(DomainError):
    code = "forbidden_in_production"
    default_message = "Attendance reset is disabled in production"


class InvalidImage(ValidationError):
    code = "invalid_image"
    default_message = "Invalid image payload"


# -------- Leave --------
class InvalidDateRange(ValidationError):
    code = "invalid_date_range"
    default_message = "Invalid date range"


class ProofRequired(ValidationError):
    code = "proof_required"
    default_message = "Doctor's note is required for sick leave"


class QuotaExceeded(DomainError):
    code = "quota_exceeded"
    default_message = "Requested days exceed the remaining leave quota"

    def __init__(self, requested_days: int, remaining_days: int):
        super().__init__(
            details={"requested_days": requested_days, "remaining_days": remaining_days},
        )
        self.requested_days = requested_days
        self.remaining_days = remaining_days


class NotFound(DomainError):
    code = "not_found"
    default_message = "Not found"


class Forbidden(AuthorizationError):
    code = "forbidden"
    default_message = "Forbidden"


class InvalidKind(DomainError):
    code = "invalid_kind"
    default_message = "Request kind does not match this endpoint"


class Conflict(DomainError):
    code = "conflict"
    default_message = "Conflict"


# -------- Infrastructure --------
class StoreUnavailable(DomainError):
    """Transient persistence failure. Safe to retry: every write is conditional."""

    code = "store_unavailable"
    default_message = "Storage temporarily unavailable"
