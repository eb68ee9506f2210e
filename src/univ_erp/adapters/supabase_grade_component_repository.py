"""Supabase-backed grade component repository."""

from dataclasses import dataclass

from supabase import Client

from univ_erp.domain.grades import EnrollmentStatus, GradeComponent
from univ_erp.services.grades import GradeComponentRepository

_COLUMNS = "grade_id, enrollment_id, component, score, max_score, weight"


@dataclass
class SupabaseGradeComponentRepository(GradeComponentRepository):
    """Supabase implementation for the grades table."""

    client: Client

    def list_by_enrollment(self, enrollment_id: int) -> list[GradeComponent]:
        """Return an enrollment's components ordered by id."""
        response = (
            self.client.table("grades")
            .select(_COLUMNS)
            .eq("enrollment_id", enrollment_id)
            .order("grade_id")
            .execute()
        )
        return [_to_component(row) for row in response.data or []]

    def find_by_name(self, enrollment_id: int, name: str) -> GradeComponent | None:
        """Return the enrollment's component with this name, if present."""
        response = (
            self.client.table("grades")
            .select(_COLUMNS)
            .eq("enrollment_id", enrollment_id)
            .eq("component", name)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_component(response.data[0])

    def get_component(self, component_id: int) -> GradeComponent | None:
        """Return a component by id, if present."""
        response = (
            self.client.table("grades")
            .select(_COLUMNS)
            .eq("grade_id", component_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_component(response.data[0])

    def insert_component(
        self,
        enrollment_id: int,
        name: str,
        score: float | None,
        max_score: float,
        weight: float,
    ) -> GradeComponent:
        """Create a grade row and return it."""
        response = (
            self.client.table("grades")
            .insert(
                {
                    "enrollment_id": enrollment_id,
                    "component": name,
                    "score": score,
                    "max_score": max_score,
                    "weight": weight,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create grade component")
        return _to_component(response.data[0])

    def update_score(self, component_id: int, score: float | None) -> bool:
        """Set or clear a score; report whether a row was updated."""
        response = (
            self.client.table("grades")
            .update({"score": score})
            .eq("grade_id", component_id)
            .execute()
        )
        return bool(response.data)

    def list_distinct_component_names(self, section_id: int) -> list[str]:
        """Return component names used by a section's non-dropped enrollments."""
        enrollments = (
            self.client.table("enrollments")
            .select("enrollment_id")
            .eq("section_id", section_id)
            .neq("status", EnrollmentStatus.DROPPED.value)
            .execute()
        )
        enrollment_ids = [row["enrollment_id"] for row in enrollments.data or []]
        if not enrollment_ids:
            return []
        response = (
            self.client.table("grades")
            .select("component")
            .in_("enrollment_id", enrollment_ids)
            .order("grade_id")
            .execute()
        )
        names: list[str] = []
        for row in response.data or []:
            name = row.get("component")
            if isinstance(name, str) and name not in names:
                names.append(name)
        return names


def _to_component(row: dict[str, object]) -> GradeComponent:
    score = row.get("score")
    return GradeComponent(
        id=int(row["grade_id"]),
        enrollment_id=int(row["enrollment_id"]),
        name=str(row["component"]),
        score=float(score) if score is not None else None,
        max_score=float(row.get("max_score") or 0.0),
        weight=float(row.get("weight") or 0.0),
    )
