from app.application.permissions import (
    ADMIN,
    INSTRUCTOR,
    PARTICIPANT,
    MANAGE_EXAMS,
    MANAGE_USERS,
    TAKE_EXAMS,
    VIEW_RESULTS,
    can,
    capabilities_for,
)


def test_admin_can_do_everything():
    assert all(can(ADMIN, c) for c in capabilities_for(INSTRUCTOR) + capabilities_for(PARTICIPANT))
    assert can(ADMIN, MANAGE_USERS)


def test_instructor_manages_but_does_not_take_exams():
    assert can(INSTRUCTOR, MANAGE_EXAMS)
    assert can(INSTRUCTOR, VIEW_RESULTS)
    assert not can(INSTRUCTOR, TAKE_EXAMS)


def test_participant_only_takes_exams():
    assert can(PARTICIPANT, TAKE_EXAMS)
    assert not can(PARTICIPANT, MANAGE_EXAMS)
    assert not can(PARTICIPANT, VIEW_RESULTS)


def test_unknown_role_has_nothing():
    assert not can("guest", TAKE_EXAMS)
    assert not can(None, TAKE_EXAMS)
    assert capabilities_for("guest") == []
