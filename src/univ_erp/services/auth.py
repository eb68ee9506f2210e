"""Login, lockout and password changes."""

import logging
from dataclasses import dataclass
from typing import NoReturn, Protocol

from univ_erp.domain.errors import (
    AuthenticationFailed,
    AuthFailureReason,
    NotLoggedIn,
)
from univ_erp.domain.models import AccountStatus, Actor, Role, UserAccount
from univ_erp.services.sessions import Session

_logger = logging.getLogger(__name__)

DEFAULT_MAX_LOGIN_ATTEMPTS = 5


class AuthRepository(Protocol):
    """Persistence interface for user credentials and role profiles."""

    def get_by_username(self, username: str) -> UserAccount | None:
        """Return the account for a username, if present."""

    def update_failed_login_attempts(self, user_id: int, attempts: int) -> None:
        """Store the consecutive failed login count."""

    def update_status(self, user_id: int, status: AccountStatus) -> None:
        """Change the account status."""

    def update_last_login(self, user_id: int) -> None:
        """Stamp the last successful login time."""

    def update_password_hash(self, user_id: int, password_hash: str) -> None:
        """Replace the stored password hash."""

    def get_instructor_id(self, user_id: int) -> int | None:
        """Return the instructor profile id linked to a user, if any."""

    def get_student_id(self, user_id: int) -> int | None:
        """Return the student profile id linked to a user, if any."""


class PasswordHasher(Protocol):
    """Opaque password hashing collaborator."""

    def hash_password(self, plain_password: str) -> str:
        """Hash a plaintext password."""

    def verify_password(self, plain_password: str, password_hash: str) -> bool:
        """Return whether the plaintext matches the hash."""


@dataclass
class AuthService:
    """Authenticates users and manages the session's login state."""

    repository: AuthRepository
    hasher: PasswordHasher
    session: Session
    max_login_attempts: int = DEFAULT_MAX_LOGIN_ATTEMPTS
    maintenance_mode: bool = False

    def authenticate(self, username: str, password: str) -> Actor:
        """Check credentials, log the resulting actor in and return it."""
        account = self.repository.get_by_username(username)
        if account is None:
            _logger.warning("Login attempt for unknown user: %s", username)
            raise _invalid_credentials()
        if account.status is AccountStatus.LOCKED:
            _logger.warning("Login attempt for locked account: %s", username)
            raise AuthenticationFailed(
                AuthFailureReason.ACCOUNT_LOCKED,
                "Account is locked. Contact administrator.",
            )
        if account.status is AccountStatus.INACTIVE:
            _logger.warning("Login attempt for inactive account: %s", username)
            raise AuthenticationFailed(
                AuthFailureReason.ACCOUNT_INACTIVE,
                "Account is inactive. Contact administrator.",
            )

        if not self.hasher.verify_password(password, account.password_hash):
            self._record_failure(account)

        self.repository.update_failed_login_attempts(account.user_id, 0)
        if self.maintenance_mode and account.role is not Role.ADMIN:
            _logger.warning(
                "Maintenance mode blocked login for user: %s (role: %s)",
                username,
                account.role,
            )
            raise AuthenticationFailed(
                AuthFailureReason.MAINTENANCE_MODE,
                "The system is currently undergoing maintenance. "
                "Please try again later.",
            )
        self.repository.update_last_login(account.user_id)
        actor = self._resolve_actor(account)
        self.session.login(actor)
        _logger.info("Successful login: user=%s role=%s", username, account.role)
        return actor

    def logout(self) -> None:
        """End the current login."""
        self.session.logout()

    def change_password(self, current_password: str, new_password: str) -> None:
        """Replace the logged-in user's password after verifying the old one."""
        actor = self.session.current_actor()
        if actor is None:
            raise NotLoggedIn()
        account = self.repository.get_by_username(actor.username)
        if account is None or not self.hasher.verify_password(
            current_password, account.password_hash
        ):
            _logger.warning(
                "Failed password change for user=%s: current password rejected",
                actor.username,
            )
            raise _invalid_credentials()
        self.repository.update_password_hash(
            account.user_id, self.hasher.hash_password(new_password)
        )
        self.session.touch()
        _logger.info("Password changed: user_id=%s", account.user_id)

    def _record_failure(self, account: UserAccount) -> NoReturn:
        attempts = account.failed_login_attempts + 1
        self.repository.update_failed_login_attempts(account.user_id, attempts)
        if attempts >= self.max_login_attempts:
            self.repository.update_status(account.user_id, AccountStatus.LOCKED)
            _logger.warning(
                "Account locked after %s failed attempts: %s",
                attempts,
                account.username,
            )
            raise AuthenticationFailed(
                AuthFailureReason.ACCOUNT_LOCKED,
                "Account locked due to too many failed login attempts.",
            )
        _logger.warning(
            "Failed login for user: %s (attempt %s/%s)",
            account.username,
            attempts,
            self.max_login_attempts,
        )
        raise _invalid_credentials()

    def _resolve_actor(self, account: UserAccount) -> Actor:
        instructor_id = None
        student_id = None
        if account.role is Role.INSTRUCTOR:
            instructor_id = self.repository.get_instructor_id(account.user_id)
        elif account.role is Role.STUDENT:
            student_id = self.repository.get_student_id(account.user_id)
        return Actor(
            user_id=account.user_id,
            username=account.username,
            role=account.role,
            instructor_id=instructor_id,
            student_id=student_id,
        )


def _invalid_credentials() -> AuthenticationFailed:
    return AuthenticationFailed(
        AuthFailureReason.INVALID_CREDENTIALS, "Incorrect username or password"
    )
