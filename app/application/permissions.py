import logging

logger = logging.getLogger(__name__)

ADMIN = "admin"
INSTRUCTOR = "instructor"
PARTICIPANT = "participant"

ROLES = (ADMIN, INSTRUCTOR, PARTICIPANT)

# Capabilities
MANAGE_SUBJECTS = "manage_subjects"
MANAGE_QUESTIONS = "manage_questions"
MANAGE_COURSES = "manage_courses"
MANAGE_EXAMS = "manage_exams"
VIEW_RESULTS = "view_results"
VIEW_CATALOG = "view_catalog"
TAKE_EXAMS = "take_exams"
MANAGE_USERS = "manage_users"

_CAPABILITIES = {
    ADMIN: {
        MANAGE_SUBJECTS,
        MANAGE_QUESTIONS,
        MANAGE_COURSES,
        MANAGE_EXAMS,
        VIEW_RESULTS,
        VIEW_CATALOG,
        TAKE_EXAMS,
        MANAGE_USERS,
    },
    INSTRUCTOR: {
        MANAGE_SUBJECTS,
        MANAGE_QUESTIONS,
        MANAGE_COURSES,
        MANAGE_EXAMS,
        VIEW_RESULTS,
        VIEW_CATALOG,
    },
    PARTICIPANT: {
        VIEW_CATALOG,
        TAKE_EXAMS,
    },
}


def can(role: str, capability: str) -> bool:
    """Return True when the given role is entitled to the capability."""
    return capability in _CAPABILITIES.get((role or "").lower(), set())


def capabilities_for(role: str) -> list[str]:
    return sorted(_CAPABILITIES.get((role or "").lower(), set()))
