"""Domain models for authenticated users."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class Role(StrEnum):
    """Roles a user account can hold."""

    ADMIN = "ADMIN"
    INSTRUCTOR = "INSTRUCTOR"
    STUDENT = "STUDENT"


class AccountStatus(StrEnum):
    """Lifecycle status of a user account."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    LOCKED = "LOCKED"


@dataclass(frozen=True)
class Actor:
    """The authenticated identity held by a session."""

    user_id: int
    username: str
    role: Role
    instructor_id: int | None = None
    student_id: int | None = None


@dataclass(frozen=True)
class UserAccount:
    """Represents a user row from the authentication store."""

    user_id: int
    username: str
    role: Role
    password_hash: str
    status: AccountStatus
    failed_login_attempts: int
    last_login: datetime | None = None
