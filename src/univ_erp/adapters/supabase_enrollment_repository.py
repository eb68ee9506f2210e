"""Supabase-backed section and enrollment repository."""

from dataclasses import dataclass

from supabase import Client

from univ_erp.domain.grades import EnrollmentRecord, EnrollmentStatus, SectionRecord
from univ_erp.services.authorization import OwnershipRepository
from univ_erp.services.grades import EnrollmentRepository

_ENROLLMENT_COLUMNS = "enrollment_id, student_id, section_id, status, final_grade"
_GRADABLE_STATUSES = [
    EnrollmentStatus.ENROLLED.value,
    EnrollmentStatus.COMPLETED.value,
]


@dataclass
class SupabaseEnrollmentRepository(OwnershipRepository, EnrollmentRepository):
    """Supabase implementation for section ownership and enrollment grades."""

    client: Client

    def get_section(self, section_id: int) -> SectionRecord | None:
        """Return a section's ownership row, if present."""
        response = (
            self.client.table("sections")
            .select("section_id, instructor_id")
            .eq("section_id", section_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        instructor_id = row.get("instructor_id")
        return SectionRecord(
            id=int(row["section_id"]),
            instructor_id=int(instructor_id) if instructor_id is not None else None,
        )

    def get_enrollment(self, enrollment_id: int) -> EnrollmentRecord | None:
        """Return an enrollment by id, if present."""
        response = (
            self.client.table("enrollments")
            .select(_ENROLLMENT_COLUMNS)
            .eq("enrollment_id", enrollment_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_enrollment(response.data[0])

    def list_enrollments_by_section(self, section_id: int) -> list[EnrollmentRecord]:
        """Return a section's enrollments in enrollment order."""
        response = (
            self.client.table("enrollments")
            .select(_ENROLLMENT_COLUMNS)
            .eq("section_id", section_id)
            .order("enrollment_id")
            .execute()
        )
        return [_to_enrollment(row) for row in response.data or []]

    def set_final_grade(self, enrollment_id: int, letter: str) -> bool:
        """Store the final grade and complete an active enrollment in one update."""
        response = (
            self.client.table("enrollments")
            .update(
                {
                    "final_grade": letter,
                    "status": EnrollmentStatus.COMPLETED.value,
                }
            )
            .eq("enrollment_id", enrollment_id)
            .in_("status", _GRADABLE_STATUSES)
            .execute()
        )
        return bool(response.data)


def _to_enrollment(row: dict[str, object]) -> EnrollmentRecord:
    return EnrollmentRecord(
        id=int(row["enrollment_id"]),
        student_id=int(row["student_id"]),
        section_id=int(row["section_id"]),
        status=EnrollmentStatus(row.get("status") or EnrollmentStatus.ENROLLED),
        final_grade=row.get("final_grade"),
    )
