from __future__ import annotations

from datetime import date

import pytest

from src.credit_bank.credit_bank.core.enums import Role
from src.credit_bank.credit_bank.core.exceptions import (
    AuthorizationError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)
from src.credit_bank.credit_bank.users.model import Identity


def _identity(user) -> Identity:
    return Identity(user_id=user.user_id, role=user.role, email=user.email)


def _student_data(**overrides) -> dict:
    data = {
        "abc_id": "ABC-0001",
        "roll_number": "CS21-001",
        "enrollment_number": "EN2021001",
        "course": "B.Tech",
        "branch": "Computer Science",
        "semester": 5,
        "year": 3,
        "first_name": "Asha",
        "last_name": "Rao",
        "phone": "+91 98765 43210",
    }
    data.update(overrides)
    return data


def _faculty_data(**overrides) -> dict:
    data = {
        "employee_id": "EMP-17",
        "department": "Computer Science",
        "designation": "Assistant Professor",
        "first_name": "Ravi",
        "last_name": "Menon",
        "phone": "0484-2345678",
    }
    data.update(overrides)
    return data


@pytest.fixture
def people(users_repo):
    return {
        "admin": users_repo.add(email="admin@uni.edu", password="admin123", role=Role.ADMIN),
        "fac": users_repo.add(email="fac@uni.edu", password="faculty123", role=Role.FACULTY),
        "fac2": users_repo.add(email="fac2@uni.edu", password="faculty123", role=Role.FACULTY),
        "stu": users_repo.add(email="stu@uni.edu", password="student123", role=Role.STUDENT),
        "stu2": users_repo.add(email="stu2@uni.edu", password="student123", role=Role.STUDENT),
    }


def test_student_creates_own_profile(profile_service, people):
    stu = people["stu"]

    profile = profile_service.save_student(
        user_id=stu.user_id, requester=_identity(stu), data=_student_data(date_of_birth="2003-04-05")
    )

    assert profile.roll_number == "CS21-001"
    assert profile.full_name == "Asha Rao"
    assert profile.date_of_birth == date(2003, 4, 5)
    assert profile.cgpa == 0.0
    assert profile_service.profile_for(_identity(stu)) == profile


def test_first_save_requires_all_identifiers(profile_service, people):
    stu = people["stu"]
    data = _student_data()
    del data["roll_number"]

    with pytest.raises(ValidationError, match="roll_number"):
        profile_service.save_student(user_id=stu.user_id, requester=_identity(stu), data=data)


@pytest.mark.parametrize(
    "field, value",
    [("semester", 13), ("semester", "five"), ("year", True), ("phone", "call me"), ("date_of_birth", "05/04/2003")],
)
def test_student_fields_are_validated(profile_service, people, field, value):
    stu = people["stu"]

    with pytest.raises(ValidationError):
        profile_service.save_student(user_id=stu.user_id, requester=_identity(stu), data=_student_data(**{field: value}))


def test_student_updates_only_personal_fields(profile_service, people):
    stu = people["stu"]
    me = _identity(stu)
    profile_service.save_student(user_id=stu.user_id, requester=me, data=_student_data())

    updated = profile_service.save_student(
        user_id=stu.user_id, requester=me, data={"bio": "  Robotics club lead ", "user_id": stu.user_id}
    )
    assert updated.bio == "Robotics club lead"
    assert updated.roll_number == "CS21-001"

    with pytest.raises(AuthorizationError, match="cgpa"):
        profile_service.save_student(user_id=stu.user_id, requester=me, data={"cgpa": 9.9})
    with pytest.raises(AuthorizationError, match="roll_number"):
        profile_service.save_student(user_id=stu.user_id, requester=me, data={"roll_number": "X"})
    with pytest.raises(ValidationError, match="nickname"):
        profile_service.save_student(user_id=stu.user_id, requester=me, data={"nickname": "A"})


def test_admin_edits_academic_standing(profile_service, people):
    stu, admin = people["stu"], people["admin"]
    profile_service.save_student(user_id=stu.user_id, requester=_identity(stu), data=_student_data())

    updated = profile_service.save_student(
        user_id=stu.user_id,
        requester=_identity(admin),
        data={"cgpa": "8.456", "completed_credits": 96, "total_credits": 160, "semester": 6},
    )

    assert updated.cgpa == 8.46
    assert (updated.completed_credits, updated.total_credits, updated.semester) == (96, 160, 6)

    with pytest.raises(ValidationError):
        profile_service.save_student(user_id=stu.user_id, requester=_identity(admin), data={"cgpa": 11})


def test_student_cannot_touch_another_student(profile_service, people):
    stu, stu2 = people["stu"], people["stu2"]
    profile_service.save_student(user_id=stu.user_id, requester=_identity(stu), data=_student_data())

    with pytest.raises(AuthorizationError):
        profile_service.get_student(user_id=stu.user_id, requester=_identity(stu2))
    with pytest.raises(AuthorizationError):
        profile_service.save_student(user_id=stu.user_id, requester=_identity(stu2), data={"bio": "x"})


def test_faculty_views_students_but_cannot_edit(profile_service, people):
    stu, fac = people["stu"], people["fac"]
    profile_service.save_student(user_id=stu.user_id, requester=_identity(stu), data=_student_data())

    assert profile_service.get_student(user_id=stu.user_id, requester=_identity(fac)).abc_id == "ABC-0001"
    assert len(profile_service.list_students(requester=_identity(fac))) == 1
    with pytest.raises(AuthorizationError):
        profile_service.save_student(user_id=stu.user_id, requester=_identity(fac), data={"bio": "x"})


def test_student_listing_is_staff_only(profile_service, people):
    with pytest.raises(AuthorizationError):
        profile_service.list_students(requester=_identity(people["stu"]))


def test_missing_profiles_and_wrong_roles(profile_service, people):
    admin = _identity(people["admin"])

    with pytest.raises(NotFoundError):
        profile_service.get_student(user_id=people["stu"].user_id, requester=admin)
    with pytest.raises(NotFoundError):
        profile_service.save_student(user_id=people["fac"].user_id, requester=admin, data=_student_data())
    with pytest.raises(NotFoundError):
        profile_service.save_faculty(user_id=999, requester=admin, data=_faculty_data())


def test_unique_identifiers(profile_service, people):
    stu, stu2 = people["stu"], people["stu2"]
    profile_service.save_student(user_id=stu.user_id, requester=_identity(stu), data=_student_data())

    with pytest.raises(DuplicateError):
        profile_service.save_student(
            user_id=stu2.user_id,
            requester=_identity(stu2),
            data=_student_data(abc_id="ABC-0002", enrollment_number="EN2021002"),
        )


def test_faculty_profile_rules(profile_service, people):
    fac, fac2, admin, stu = people["fac"], people["fac2"], people["admin"], people["stu"]

    created = profile_service.save_faculty(user_id=fac.user_id, requester=_identity(fac), data=_faculty_data())
    assert created.department == "Computer Science"
    assert created.experience_years == 0

    updated = profile_service.save_faculty(
        user_id=fac.user_id, requester=_identity(fac), data={"experience_years": 7}
    )
    assert updated.experience_years == 7
    with pytest.raises(AuthorizationError, match="department"):
        profile_service.save_faculty(user_id=fac.user_id, requester=_identity(fac), data={"department": "Physics"})
    moved = profile_service.save_faculty(user_id=fac.user_id, requester=_identity(admin), data={"department": "Physics"})
    assert moved.department == "Physics"

    with pytest.raises(AuthorizationError):
        profile_service.get_faculty(user_id=fac.user_id, requester=_identity(fac2))
    with pytest.raises(AuthorizationError):
        profile_service.save_faculty(user_id=fac.user_id, requester=_identity(fac2), data={"phone": "0484-1111111"})
    assert profile_service.get_faculty(user_id=fac.user_id, requester=_identity(stu)).employee_id == "EMP-17"

    assert [p.user_id for p in profile_service.list_faculty(requester=_identity(admin))] == [fac.user_id]
    with pytest.raises(AuthorizationError):
        profile_service.list_faculty(requester=_identity(fac))


def test_check_new_profile(profile_service):
    profile_service.check_new_profile(Role.STUDENT, _student_data())

    with pytest.raises(AuthorizationError):
        profile_service.check_new_profile(Role.STUDENT, _student_data(cgpa=9))
    with pytest.raises(ValidationError):
        profile_service.check_new_profile(Role.FACULTY, {"employee_id": "E1"})
    with pytest.raises(ValidationError):
        profile_service.check_new_profile(Role.ADMIN, {})
