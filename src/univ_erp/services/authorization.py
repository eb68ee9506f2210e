"""Role and ownership access checks for the logged-in actor."""

import logging
from dataclasses import dataclass
from typing import Protocol

from univ_erp.domain.errors import AccessDenied, DenialReason, NotLoggedIn
from univ_erp.domain.grades import EnrollmentRecord, SectionRecord
from univ_erp.domain.models import Actor, Role
from univ_erp.services.sessions import Session

_logger = logging.getLogger(__name__)


class OwnershipRepository(Protocol):
    """Read access to section and enrollment ownership facts."""

    def get_section(self, section_id: int) -> SectionRecord | None:
        """Return a section by id, if present."""

    def get_enrollment(self, enrollment_id: int) -> EnrollmentRecord | None:
        """Return an enrollment by id, if present."""


@dataclass
class Authorizer:
    """Decides whether the session's actor may touch a resource.

    Every check returns the current actor when access is granted and raises
    ``AccessDenied`` otherwise. Ownership is looked up on every call so a
    reassigned section takes effect immediately. Checks never touch the
    session; callers do that after the operation succeeds.
    """

    session: Session
    repository: OwnershipRepository

    def require_login(self) -> Actor:
        """Return the current actor or raise ``NotLoggedIn``."""
        actor = self.session.current_actor()
        if actor is None:
            _logger.warning("Permission check failed: no user logged in")
            raise NotLoggedIn()
        return actor

    def require_admin(self) -> Actor:
        """Allow administrators only."""
        actor = self.require_login()
        if actor.role is not Role.ADMIN:
            raise _deny(
                actor,
                DenialReason.WRONG_ROLE,
                "This operation requires administrator privileges",
            )
        return actor

    def require_instructor(self) -> Actor:
        """Allow instructors and administrators."""
        actor = self.require_login()
        if actor.role not in {Role.INSTRUCTOR, Role.ADMIN}:
            raise _deny(
                actor,
                DenialReason.WRONG_ROLE,
                "This operation requires instructor privileges",
            )
        return actor

    def require_student(self) -> Actor:
        """Allow students only."""
        actor = self.require_login()
        if actor.role is not Role.STUDENT:
            raise _deny(
                actor,
                DenialReason.WRONG_ROLE,
                "This operation requires student privileges",
            )
        return actor

    def require_section_ownership(self, section_id: int) -> Actor:
        """Allow admins, or the instructor who teaches the section."""
        actor = self.require_login()
        if actor.role is Role.ADMIN:
            return actor
        if actor.role is not Role.INSTRUCTOR:
            raise _deny(
                actor,
                DenialReason.WRONG_ROLE,
                "You do not have permission to access this section",
                section_id=section_id,
            )
        instructor_id = _require_instructor_id(actor)
        section = self.repository.get_section(section_id)
        if section is None:
            raise _deny(
                actor,
                DenialReason.NOT_FOUND,
                "Section not found",
                section_id=section_id,
            )
        if section.instructor_id != instructor_id:
            raise _deny(
                actor,
                DenialReason.NOT_OWNER,
                "You can only access sections you are teaching",
                section_id=section_id,
                owner=section.instructor_id,
            )
        return actor

    def require_enrollment_ownership(self, enrollment_id: int) -> Actor:
        """Allow admins, the section's instructor, or the enrolled student."""
        actor = self.require_login()
        if actor.role is Role.ADMIN:
            return actor
        if actor.role is Role.INSTRUCTOR:
            instructor_id = _require_instructor_id(actor)
            enrollment = self._enrollment_or_deny(actor, enrollment_id)
            section = self.repository.get_section(enrollment.section_id)
            if section is None:
                raise _deny(
                    actor,
                    DenialReason.NOT_FOUND,
                    "Section not found",
                    enrollment_id=enrollment_id,
                    section_id=enrollment.section_id,
                )
            if section.instructor_id != instructor_id:
                raise _deny(
                    actor,
                    DenialReason.NOT_OWNER,
                    "You can only access enrollments in sections you are teaching",
                    enrollment_id=enrollment_id,
                    section_id=enrollment.section_id,
                )
            return actor
        if actor.role is Role.STUDENT:
            student_id = _require_student_id(actor)
            enrollment = self._enrollment_or_deny(actor, enrollment_id)
            if enrollment.student_id != student_id:
                raise _deny(
                    actor,
                    DenialReason.NOT_OWNER,
                    "You can only access your own enrollment records",
                    enrollment_id=enrollment_id,
                    owner=enrollment.student_id,
                )
            return actor
        raise _deny(
            actor,
            DenialReason.WRONG_ROLE,
            "You do not have permission to access this enrollment",
            enrollment_id=enrollment_id,
        )

    def require_student_data_access(self, student_id: int) -> Actor:
        """Allow staff, or a student reading their own records."""
        actor = self.require_login()
        if actor.role in {Role.ADMIN, Role.INSTRUCTOR}:
            return actor
        if actor.role is Role.STUDENT:
            if _require_student_id(actor) != student_id:
                raise _deny(
                    actor,
                    DenialReason.NOT_OWNER,
                    "You can only access your own student data",
                    student_id=student_id,
                )
            return actor
        raise _deny(
            actor,
            DenialReason.WRONG_ROLE,
            "You do not have permission to access student data",
            student_id=student_id,
        )

    def deny_missing(self, message: str, **resource: object) -> AccessDenied:
        """Build the ``NOT_FOUND`` denial for a resource that doesn't exist."""
        return _deny(self.require_login(), DenialReason.NOT_FOUND, message, **resource)

    def _enrollment_or_deny(
        self, actor: Actor, enrollment_id: int
    ) -> EnrollmentRecord:
        enrollment = self.repository.get_enrollment(enrollment_id)
        if enrollment is None:
            raise _deny(
                actor,
                DenialReason.NOT_FOUND,
                "Enrollment not found",
                enrollment_id=enrollment_id,
            )
        return enrollment


def _require_instructor_id(actor: Actor) -> int:
    if actor.instructor_id is None:
        raise _deny(
            actor, DenialReason.PROFILE_NOT_FOUND, "Instructor profile not found"
        )
    return actor.instructor_id


def _require_student_id(actor: Actor) -> int:
    if actor.student_id is None:
        raise _deny(actor, DenialReason.PROFILE_NOT_FOUND, "Student profile not found")
    return actor.student_id


def _deny(
    actor: Actor, reason: DenialReason, message: str, **resource: object
) -> AccessDenied:
    """Log a refused check and build the exception to raise."""
    _logger.warning(
        "Permission denied: user=%s role=%s reason=%s resource=%s",
        actor.username,
        actor.role,
        reason,
        resource,
    )
    return AccessDenied(reason, message)
