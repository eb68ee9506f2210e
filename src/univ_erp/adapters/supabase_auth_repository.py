"""Supabase-backed authentication repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from univ_erp.domain.models import AccountStatus, Role, UserAccount
from univ_erp.services.auth import AuthRepository


@dataclass
class SupabaseAuthRepository(AuthRepository):
    """Supabase implementation for credentials and role profiles."""

    client: Client

    def get_by_username(self, username: str) -> UserAccount | None:
        """Return the account for a username, if present."""
        response = (
            self.client.table("users_auth")
            .select(
                "user_id, username, role, password_hash, status, "
                "failed_login_attempts, last_login"
            )
            .eq("username", username)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        last_login = row.get("last_login")
        return UserAccount(
            user_id=int(row["user_id"]),
            username=row["username"],
            role=Role(row["role"]),
            password_hash=row["password_hash"],
            status=AccountStatus(row.get("status") or AccountStatus.ACTIVE),
            failed_login_attempts=int(row.get("failed_login_attempts") or 0),
            last_login=datetime.fromisoformat(last_login)
            if isinstance(last_login, str) and last_login
            else None,
        )

    def update_failed_login_attempts(self, user_id: int, attempts: int) -> None:
        """Store the consecutive failed login count."""
        self.client.table("users_auth").update(
            {"failed_login_attempts": attempts}
        ).eq("user_id", user_id).execute()

    def update_status(self, user_id: int, status: AccountStatus) -> None:
        """Change the account status."""
        self.client.table("users_auth").update({"status": status.value}).eq(
            "user_id", user_id
        ).execute()

    def update_last_login(self, user_id: int) -> None:
        """Stamp last_login with the current time."""
        self.client.table("users_auth").update(
            {"last_login": datetime.now(tz=UTC).isoformat()}
        ).eq("user_id", user_id).execute()

    def update_password_hash(self, user_id: int, password_hash: str) -> None:
        """Replace the stored password hash."""
        self.client.table("users_auth").update({"password_hash": password_hash}).eq(
            "user_id", user_id
        ).execute()

    def get_instructor_id(self, user_id: int) -> int | None:
        """Return the instructor id linked to a user, if any."""
        return self._profile_id("instructors", "instructor_id", user_id)

    def get_student_id(self, user_id: int) -> int | None:
        """Return the student id linked to a user, if any."""
        return self._profile_id("students", "student_id", user_id)

    def _profile_id(self, table: str, column: str, user_id: int) -> int | None:
        response = (
            self.client.table(table)
            .select(column)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return int(response.data[0][column])
