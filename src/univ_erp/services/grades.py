"""Grade component bookkeeping and composite/final grade computation."""

import logging
import math
import threading
from dataclasses import dataclass, field
from typing import Protocol

from univ_erp.domain.errors import (
    DuplicateComponent,
    InvalidInput,
    NotFound,
    WeightBudgetExceeded,
)
from univ_erp.domain.grades import (
    CompositeGrade,
    EnrollmentRecord,
    EnrollmentStatus,
    FinalizationReport,
    GradeComponent,
)

_logger = logging.getLogger(__name__)

DEFAULT_COMPONENT_NAMES = ("Assignment", "Quiz", "Midterm", "Final")
MAX_TOTAL_WEIGHT = 100.0
LOCK_STRIPES = 64

_LETTER_BANDS = (
    (90.0, "A"),
    (80.0, "B"),
    (70.0, "C"),
    (60.0, "D"),
)


class GradeComponentRepository(Protocol):
    """Persistence interface for grade components."""

    def list_by_enrollment(self, enrollment_id: int) -> list[GradeComponent]:
        """Return an enrollment's components in creation order."""

    def find_by_name(self, enrollment_id: int, name: str) -> GradeComponent | None:
        """Return the enrollment's component with this exact name, if present."""

    def get_component(self, component_id: int) -> GradeComponent | None:
        """Return a component by id, if present."""

    def insert_component(
        self,
        enrollment_id: int,
        name: str,
        score: float | None,
        max_score: float,
        weight: float,
    ) -> GradeComponent:
        """Create a component row and return it."""

    def update_score(self, component_id: int, score: float | None) -> bool:
        """Set or clear a component's score; return False if it doesn't exist."""

    def list_distinct_component_names(self, section_id: int) -> list[str]:
        """Return component names used by any enrollment of the section."""


class EnrollmentRepository(Protocol):
    """Persistence interface for enrollment grading state."""

    def list_enrollments_by_section(self, section_id: int) -> list[EnrollmentRecord]:
        """Return every enrollment of a section."""

    def set_final_grade(self, enrollment_id: int, letter: str) -> bool:
        """Store the final letter and complete the enrollment.

        Returns False when nothing was updated: the enrollment is missing or
        was dropped.
        """


def letter_grade(percentage: float) -> str:
    """Map a 0-100 percentage to a letter; bands include their lower bound."""
    for threshold, letter in _LETTER_BANDS:
        if percentage >= threshold:
            return letter
    return "F"


@dataclass
class GradeEngine:
    """Manages weighted grade components and derives composite grades.

    The engine trusts that callers have already passed the relevant access
    check. It enforces only grade-domain rules: unique component names per
    enrollment and a total weight of at most 100 per enrollment. The
    weight check and the insert run under a lock chosen by enrollment id
    from a fixed pool, so concurrent adds to one enrollment serialize.
    """

    components: GradeComponentRepository
    enrollments: EnrollmentRepository
    default_component_names: tuple[str, ...] = DEFAULT_COMPONENT_NAMES
    _locks: tuple[threading.Lock, ...] = field(
        default_factory=lambda: tuple(threading.Lock() for _ in range(LOCK_STRIPES)),
        init=False,
        repr=False,
    )

    def list_components(self, enrollment_id: int) -> list[GradeComponent]:
        """Return all components of an enrollment."""
        return self.components.list_by_enrollment(enrollment_id)

    def get_component(self, component_id: int) -> GradeComponent:
        """Return a component or raise ``NotFound``."""
        component = self.components.get_component(component_id)
        if component is None:
            raise NotFound(f"Grade component {component_id} not found")
        return component

    def component_names_for_section(self, section_id: int) -> list[str]:
        """Return the distinct component names in use across a section.

        A section with no components yet gets the default grading template.
        """
        names = _dedupe(self.components.list_distinct_component_names(section_id))
        if not names:
            return list(self.default_component_names)
        return names

    def add_component(  # noqa: PLR0913
        self,
        enrollment_id: int,
        name: str,
        score: float | None,
        max_score: float,
        weight: float,
    ) -> GradeComponent:
        """Validate and persist a new component for one enrollment."""
        if not name or not name.strip():
            raise InvalidInput("Component name must not be empty")
        if not max_score > 0:
            raise InvalidInput("Max score must be greater than 0")
        if not 0 < weight <= MAX_TOTAL_WEIGHT:
            raise InvalidInput("Weight must be greater than 0 and at most 100")

        with self._lock_for(enrollment_id):
            if self.components.find_by_name(enrollment_id, name) is not None:
                raise DuplicateComponent(enrollment_id, name)
            existing = math.fsum(
                component.weight
                for component in self.components.list_by_enrollment(enrollment_id)
            )
            if existing + weight > MAX_TOTAL_WEIGHT:
                raise WeightBudgetExceeded(enrollment_id, existing, weight)
            return self.components.insert_component(
                enrollment_id=enrollment_id,
                name=name,
                score=score,
                max_score=max_score,
                weight=weight,
            )

    def update_score(self, component_id: int, score: float | None) -> GradeComponent:
        """Set or clear the score of an existing component."""
        if not self.components.update_score(component_id, score):
            raise NotFound(f"Grade component {component_id} not found")
        return self.get_component(component_id)

    def composite_for_enrollment(self, enrollment_id: int) -> CompositeGrade | None:
        """Weighted average over the graded components, or None if none are."""
        graded = [
            component
            for component in self.components.list_by_enrollment(enrollment_id)
            if component.score is not None and _has_valid_max(component)
        ]
        return _weighted_composite(graded)

    def recompute_finals_for_section(self, section_id: int) -> FinalizationReport:
        """Write final letters for every fully graded enrollment of a section."""
        report = FinalizationReport(section_id=section_id)
        for enrollment in self.enrollments.list_enrollments_by_section(section_id):
            if enrollment.status is EnrollmentStatus.DROPPED:
                continue
            components = self.components.list_by_enrollment(enrollment.id)
            composite = _final_composite(components)
            if composite is None:
                report.skipped.append(enrollment.id)
                continue
            if self.enrollments.set_final_grade(enrollment.id, composite.letter):
                report.finalized[enrollment.id] = composite.letter
            else:
                report.skipped.append(enrollment.id)
        _logger.info(
            "Recomputed finals: section=%s finalized=%s skipped=%s",
            section_id,
            report.finalized_count,
            report.skipped_count,
        )
        return report

    def _lock_for(self, enrollment_id: int) -> threading.Lock:
        return self._locks[enrollment_id % LOCK_STRIPES]


def _has_valid_max(component: GradeComponent) -> bool:
    if component.max_score > 0:
        return True
    _logger.warning(
        "Ignoring grade component with non-positive max score: "
        "component_id=%s enrollment_id=%s max_score=%s",
        component.id,
        component.enrollment_id,
        component.max_score,
    )
    return False


def _final_composite(components: list[GradeComponent]) -> CompositeGrade | None:
    """Composite over all components, only when every one is gradable."""
    if not components:
        return None
    if any(component.score is None for component in components):
        return None
    if not all(_has_valid_max(component) for component in components):
        return None
    return _weighted_composite(components)


def _weighted_composite(components: list[GradeComponent]) -> CompositeGrade | None:
    weighted = []
    weights = []
    for component in components:
        # Callers filter out ungraded components.
        score = float(component.score)  # type: ignore[arg-type]
        percentage = score * 100.0 / component.max_score
        weighted.append(percentage * component.weight)
        weights.append(component.weight)
    total_weight = math.fsum(weights)
    if total_weight <= 0:
        return None
    percentage = math.fsum(weighted) / total_weight
    return CompositeGrade(
        percentage=percentage,
        letter=letter_grade(percentage),
        graded_weight=total_weight,
    )


def _dedupe(names: list[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for name in names:
        if name and name not in seen:
            seen.add(name)
            result.append(name)
    return result
