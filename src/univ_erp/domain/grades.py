"""Domain models for grade components and enrollments."""

from dataclasses import dataclass, field
from enum import StrEnum


class EnrollmentStatus(StrEnum):
    """Status of a student's enrollment in a section."""

    ENROLLED = "ENROLLED"
    DROPPED = "DROPPED"
    COMPLETED = "COMPLETED"


@dataclass(frozen=True)
class GradeComponent:
    """A named, weighted piece of an enrollment's grade."""

    id: int
    enrollment_id: int
    name: str
    score: float | None
    max_score: float
    weight: float

    @property
    def is_graded(self) -> bool:
        return self.score is not None


@dataclass(frozen=True)
class SectionRecord:
    """Ownership view of a section."""

    id: int
    instructor_id: int | None


@dataclass(frozen=True)
class EnrollmentRecord:
    """Ownership and grading view of an enrollment."""

    id: int
    student_id: int
    section_id: int
    status: EnrollmentStatus
    final_grade: str | None = None


@dataclass(frozen=True)
class CompositeGrade:
    """Weighted composite of the graded components of an enrollment."""

    percentage: float
    letter: str
    graded_weight: float


@dataclass(frozen=True)
class FinalizationReport:
    """Outcome of recomputing final grades for a section."""

    section_id: int
    finalized: dict[int, str] = field(default_factory=dict)
    skipped: list[int] = field(default_factory=list)

    @property
    def finalized_count(self) -> int:
        return len(self.finalized)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


@dataclass(frozen=True)
class SectionComponentResult:
    """Outcome of adding one component to every enrollment of a section."""

    section_id: int
    added: list[GradeComponent] = field(default_factory=list)
    failed: dict[int, Exception] = field(default_factory=dict)
