"""Error taxonomy for the grading and access core."""

from enum import StrEnum


class DenialReason(StrEnum):
    """Why an access check refused the current actor."""

    NOT_LOGGED_IN = "not_logged_in"
    WRONG_ROLE = "wrong_role"
    NOT_OWNER = "not_owner"
    NOT_FOUND = "not_found"
    PROFILE_NOT_FOUND = "profile_not_found"


class AuthFailureReason(StrEnum):
    """Why a login attempt was rejected."""

    INVALID_CREDENTIALS = "invalid_credentials"
    ACCOUNT_LOCKED = "account_locked"
    ACCOUNT_INACTIVE = "account_inactive"
    MAINTENANCE_MODE = "maintenance_mode"


class GradingCoreError(Exception):
    """Base class for domain errors raised by the core."""


class AccessDenied(GradingCoreError):
    """The current actor may not perform the requested operation."""

    def __init__(self, reason: DenialReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message


class NotLoggedIn(AccessDenied):
    """No actor is logged in, or the login has expired."""

    def __init__(
        self, message: str = "You must be logged in to perform this action"
    ) -> None:
        super().__init__(DenialReason.NOT_LOGGED_IN, message)


class InvalidInput(GradingCoreError):
    """Arguments to a grading operation are malformed."""


class DuplicateComponent(GradingCoreError):
    """A component with the same name already exists for the enrollment."""

    def __init__(self, enrollment_id: int, name: str) -> None:
        super().__init__(
            f"Component '{name}' already exists for enrollment {enrollment_id}"
        )
        self.enrollment_id = enrollment_id
        self.name = name


class WeightBudgetExceeded(GradingCoreError):
    """Adding the component would push the enrollment's weights over 100."""

    def __init__(self, enrollment_id: int, existing: float, requested: float) -> None:
        super().__init__(
            f"Total weight exceeds 100% for enrollment {enrollment_id}: "
            f"{existing:g} already allocated, {requested:g} requested"
        )
        self.enrollment_id = enrollment_id
        self.existing = existing
        self.requested = requested


class NotFound(GradingCoreError):
    """A referenced record does not exist."""


class AuthenticationFailed(GradingCoreError):
    """A login attempt was rejected."""

    def __init__(self, reason: AuthFailureReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message
