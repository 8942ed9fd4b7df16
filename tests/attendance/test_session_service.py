from __future__ import annotations

from datetime import timedelta

import pytest

from src.credit_bank.credit_bank.attendance.service import SessionService, new_session_token
from src.credit_bank.credit_bank.core.exceptions import (
    AuthorizationError,
    ClassMismatchError,
    ExpiredError,
    NotFoundError,
    ValidationError,
)


def test_create_sets_expiry_from_duration(session_service, fixed_now):
    session = session_service.create(owner_id=7, class_id="CS101", duration_minutes=30, now=fixed_now)

    assert session.owner_id == 7
    assert session.class_id == "CS101"
    assert session.created_at == fixed_now
    assert session.expires_at == fixed_now + timedelta(minutes=30)
    assert session.is_active is True
    assert session.scan_count == 0
    assert session.token


@pytest.mark.parametrize("duration", [0, -5, 1.5, "abc", None, True])
def test_create_rejects_bad_duration(session_service, fixed_now, duration):
    with pytest.raises(ValidationError):
        session_service.create(owner_id=7, class_id="CS101", duration_minutes=duration, now=fixed_now)


def test_create_rejects_blank_class(session_service, fixed_now):
    with pytest.raises(ValidationError):
        session_service.create(owner_id=7, class_id="  ", duration_minutes=10, now=fixed_now)


def test_create_caps_class_id_at_column_width(session_service, fixed_now):
    session = session_service.create(owner_id=7, class_id="C" * 64, duration_minutes=10, now=fixed_now)
    assert len(session.class_id) == 64

    with pytest.raises(ValidationError):
        session_service.create(owner_id=7, class_id="C" * 65, duration_minutes=10, now=fixed_now)


@pytest.mark.parametrize("claimed", [101, None, ["CS101"]])
def test_validate_rejects_non_text_class_id(session_service, fixed_now, claimed):
    session = session_service.create(owner_id=7, class_id="101", duration_minutes=30, now=fixed_now)

    with pytest.raises(ValidationError):
        session_service.validate(token=session.token, claimed_class_id=claimed, now=fixed_now)


def test_tokens_are_unique_and_urlsafe():
    tokens = {new_session_token() for _ in range(50)}
    assert len(tokens) == 50
    assert all(len(t) >= 40 and " " not in t for t in tokens)


def test_validate_and_consume_counts_scans(session_service, fixed_now):
    session = session_service.create(owner_id=7, class_id="CS101", duration_minutes=30, now=fixed_now)

    after = session_service.validate_and_consume(
        token=session.token, claimed_class_id="CS101", now=fixed_now + timedelta(minutes=5)
    )
    again = session_service.validate_and_consume(
        token=session.token, claimed_class_id="CS101", now=fixed_now + timedelta(minutes=6)
    )

    assert after.scan_count == 1
    assert again.scan_count == 2
    assert again.is_active is True


def test_validate_unknown_token(session_service, fixed_now):
    with pytest.raises(NotFoundError):
        session_service.validate_and_consume(token="nope", claimed_class_id="CS101", now=fixed_now)


def test_expired_at_exact_boundary_even_when_active(session_service, sessions_repo, fixed_now):
    session = session_service.create(owner_id=7, class_id="CS101", duration_minutes=30, now=fixed_now)

    with pytest.raises(ExpiredError):
        session_service.validate_and_consume(
            token=session.token, claimed_class_id="CS101", now=fixed_now + timedelta(minutes=30)
        )

    stored = sessions_repo.get_by_id(session.session_id)
    assert stored.is_active is True
    assert stored.scan_count == 0


def test_deactivated_session_rejects_scans(session_service, fixed_now):
    session = session_service.create(owner_id=7, class_id="CS101", duration_minutes=30, now=fixed_now)
    session_service.deactivate(session_id=session.session_id, requester_id=7)

    with pytest.raises(ExpiredError):
        session_service.validate_and_consume(
            token=session.token, claimed_class_id="CS101", now=fixed_now + timedelta(minutes=1)
        )


def test_class_mismatch(session_service, fixed_now):
    session = session_service.create(owner_id=7, class_id="CS101", duration_minutes=30, now=fixed_now)

    with pytest.raises(ClassMismatchError):
        session_service.validate_and_consume(
            token=session.token, claimed_class_id="MA201", now=fixed_now + timedelta(minutes=1)
        )


def test_deactivate_by_owner(session_service, fixed_now):
    session = session_service.create(owner_id=7, class_id="CS101", duration_minutes=30, now=fixed_now)

    result = session_service.deactivate(session_id=session.session_id, requester_id=7)
    again = session_service.deactivate(session_id=session.session_id, requester_id=7)

    assert result.is_active is False
    assert again.is_active is False


def test_deactivate_by_other_instructor_is_denied(session_service, sessions_repo, fixed_now):
    session = session_service.create(owner_id=7, class_id="CS101", duration_minutes=30, now=fixed_now)

    with pytest.raises(AuthorizationError):
        session_service.deactivate(session_id=session.session_id, requester_id=8)

    assert sessions_repo.get_by_id(session.session_id).is_active is True


def test_deactivate_unknown_session(session_service):
    with pytest.raises(NotFoundError):
        session_service.deactivate(session_id=999, requester_id=7)


def test_list_recent_for_owner_newest_first(sessions_repo, fixed_now):
    counter = iter(range(100))
    svc = SessionService(sessions_repo, token_factory=lambda: f"tok-{next(counter)}")

    for i in range(3):
        svc.create(owner_id=7, class_id=f"C{i}", duration_minutes=10, now=fixed_now + timedelta(hours=i))
    svc.create(owner_id=8, class_id="OTHER", duration_minutes=10, now=fixed_now)

    recent = svc.list_recent_for_owner(7, limit=2)

    assert [s.class_id for s in recent] == ["C2", "C1"]
    assert sessions_repo.get_by_token("tok-0").class_id == "C0"
