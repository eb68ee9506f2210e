"""Authorized entry points for grade operations."""

import logging
from dataclasses import dataclass

from univ_erp.domain.errors import GradingCoreError, NotFound
from univ_erp.domain.grades import (
    CompositeGrade,
    EnrollmentStatus,
    FinalizationReport,
    GradeComponent,
    SectionComponentResult,
)
from univ_erp.services.authorization import Authorizer
from univ_erp.services.grades import EnrollmentRepository, GradeEngine
from univ_erp.services.sessions import Session

_logger = logging.getLogger(__name__)


@dataclass
class GradebookService:
    """Runs the matching access check before each grade operation.

    A successful operation refreshes the session's inactivity window.
    """

    session: Session
    authorizer: Authorizer
    engine: GradeEngine
    enrollments: EnrollmentRepository

    def list_components(self, enrollment_id: int) -> list[GradeComponent]:
        """Return an enrollment's components for its owner."""
        self.authorizer.require_enrollment_ownership(enrollment_id)
        components = self.engine.list_components(enrollment_id)
        self.session.touch()
        return components

    def composite_for_enrollment(self, enrollment_id: int) -> CompositeGrade | None:
        """Return the running composite grade for an enrollment's owner."""
        self.authorizer.require_enrollment_ownership(enrollment_id)
        composite = self.engine.composite_for_enrollment(enrollment_id)
        self.session.touch()
        return composite

    def component_names_for_section(self, section_id: int) -> list[str]:
        """Return the section's grading template for its instructor."""
        self.authorizer.require_section_ownership(section_id)
        names = self.engine.component_names_for_section(section_id)
        self.session.touch()
        return names

    def add_component(  # noqa: PLR0913
        self,
        enrollment_id: int,
        name: str,
        score: float | None,
        max_score: float,
        weight: float,
    ) -> GradeComponent:
        """Add a component to one enrollment the instructor teaches."""
        self.authorizer.require_instructor()
        self.authorizer.require_enrollment_ownership(enrollment_id)
        component = self.engine.add_component(
            enrollment_id, name, score, max_score, weight
        )
        self.session.touch()
        return component

    def add_component_to_section(
        self, section_id: int, name: str, max_score: float, weight: float
    ) -> SectionComponentResult:
        """Add an ungraded component to every active enrollment of a section.

        Each enrollment is validated on its own; failures are collected
        rather than aborting the remaining enrollments.
        """
        self.authorizer.require_instructor()
        self.authorizer.require_section_ownership(section_id)
        result = SectionComponentResult(section_id=section_id)
        for enrollment in self.enrollments.list_enrollments_by_section(section_id):
            if enrollment.status is EnrollmentStatus.DROPPED:
                continue
            try:
                component = self.engine.add_component(
                    enrollment.id, name, None, max_score, weight
                )
            except GradingCoreError as exc:
                _logger.warning(
                    "Component not added: enrollment=%s name=%s error=%s",
                    enrollment.id,
                    name,
                    exc,
                )
                result.failed[enrollment.id] = exc
                continue
            result.added.append(component)
        self.session.touch()
        return result

    def update_score(self, component_id: int, score: float | None) -> GradeComponent:
        """Set or clear a score on a component the instructor owns."""
        self.authorizer.require_instructor()
        try:
            component = self.engine.get_component(component_id)
        except NotFound:
            raise self.authorizer.deny_missing(
                "Grade component not found", component_id=component_id
            ) from None
        self.authorizer.require_enrollment_ownership(component.enrollment_id)
        updated = self.engine.update_score(component_id, score)
        self.session.touch()
        return updated

    def recompute_finals_for_section(self, section_id: int) -> FinalizationReport:
        """Finalize letter grades for a section the instructor teaches."""
        self.authorizer.require_instructor()
        self.authorizer.require_section_ownership(section_id)
        report = self.engine.recompute_finals_for_section(section_id)
        self.session.touch()
        return report
