"""Dependency container wiring for the grading and access core."""

from dataclasses import dataclass

from supabase import create_client

from univ_erp.adapters.bcrypt_password_hasher import BcryptPasswordHasher
from univ_erp.adapters.supabase_auth_repository import SupabaseAuthRepository
from univ_erp.adapters.supabase_enrollment_repository import (
    SupabaseEnrollmentRepository,
)
from univ_erp.adapters.supabase_grade_component_repository import (
    SupabaseGradeComponentRepository,
)
from univ_erp.app_logging import configure_logging
from univ_erp.config import Settings, parse_component_names
from univ_erp.services.auth import AuthService
from univ_erp.services.authorization import Authorizer
from univ_erp.services.gradebook import GradebookService
from univ_erp.services.grades import GradeEngine
from univ_erp.services.sessions import Session


@dataclass
class AppContainer:
    """Holds one session and the services bound to it."""

    settings: Settings
    session: Session
    authorizer: Authorizer
    grade_engine: GradeEngine
    gradebook_service: GradebookService
    auth_service: AuthService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    configure_logging(resolved_settings.log_level)
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    enrollment_repository = SupabaseEnrollmentRepository(supabase_client)
    component_repository = SupabaseGradeComponentRepository(supabase_client)
    auth_repository = SupabaseAuthRepository(supabase_client)

    session = Session(timeout=resolved_settings.session_timeout)
    authorizer = Authorizer(session=session, repository=enrollment_repository)
    grade_engine = GradeEngine(
        components=component_repository,
        enrollments=enrollment_repository,
        default_component_names=parse_component_names(
            resolved_settings.default_grade_components
        ),
    )
    gradebook_service = GradebookService(
        session=session,
        authorizer=authorizer,
        engine=grade_engine,
        enrollments=enrollment_repository,
    )
    auth_service = AuthService(
        repository=auth_repository,
        hasher=BcryptPasswordHasher(),
        session=session,
        max_login_attempts=resolved_settings.max_login_attempts,
        maintenance_mode=resolved_settings.maintenance_mode,
    )
    return AppContainer(
        settings=resolved_settings,
        session=session,
        authorizer=authorizer,
        grade_engine=grade_engine,
        gradebook_service=gradebook_service,
        auth_service=auth_service,
    )
