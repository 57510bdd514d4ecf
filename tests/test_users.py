import pytest

from vx_academy.core.exceptions import ConflictError, NotFoundError, ValidationError
from vx_academy.core.security import verify_password
from vx_academy.crud import engagement_crud, user_crud
from vx_academy.models.enums import UserType
from vx_academy.schemas import engagement_schema, user_schema

from conftest import make_user


def test_frontliner_gets_normal_user_detail(db_session):
    user = make_user(db_session, UserType.USER)
    assert user.normal_user_detail is not None
    assert user.sub_admin_detail is None
    assert verify_password("correct-horse-battery", user.password_hash)


def test_sub_admin_without_detail_is_rejected(db_session):
    with pytest.raises(ValidationError) as exc_info:
        make_user(db_session, UserType.SUB_ADMIN, sub_admin_detail=None)
    assert "sub_admin_detail" in exc_info.value.errors


def test_admin_cannot_carry_details(db_session):
    detail = user_schema.NormalUserDetailBase(
        role_category="Front Office", role="Guide", seniority="Senior", eid="784-1", phone_number="+971"
    )
    with pytest.raises(ValidationError) as exc_info:
        make_user(db_session, UserType.ADMIN, normal_user_detail=detail)
    assert "normal_user_detail" in exc_info.value.errors


def test_duplicate_email_conflicts_case_insensitively(db_session):
    make_user(db_session, UserType.ADMIN, email="ops@example.com")
    with pytest.raises(ConflictError):
        make_user(db_session, UserType.ADMIN, email="OPS@example.com")


def test_changing_type_swaps_the_detail_record(db_session):
    user = make_user(db_session, UserType.USER)
    updated = user_crud.update_user(db_session, user.id, user_schema.UserUpdate(
        user_type=UserType.SUB_ADMIN,
        sub_admin_detail=user_schema.SubAdminDetailBase(
            job_title="Supervisor", eid="784-9999999", phone_number="+971500000009"
        ),
    ))
    assert updated.user_type == UserType.SUB_ADMIN
    assert updated.normal_user_detail is None
    assert updated.sub_admin_detail.job_title == "Supervisor"


def test_filters_and_search(db_session):
    make_user(db_session, UserType.USER, first_name="Mariam", organization="Airport")
    make_user(db_session, UserType.USER, first_name="Omar", organization="Airport")
    make_user(db_session, UserType.ADMIN, first_name="Mariam", organization="Head Office")

    assert user_crud.count_users(db_session, filters={"organization": "Airport"}) == 2
    found = user_crud.get_users(db_session, filters={"search": "mariam", "user_type": UserType.USER})
    assert [u.first_name for u in found] == ["Mariam"]


def test_badge_award_is_idempotent_and_adds_xp(db_session):
    user = make_user(db_session, UserType.USER)
    badge = engagement_crud.create_badge(db_session, engagement_schema.BadgeCreate(name="First Steps", description="Completed a first unit", xp_points=15))

    engagement_crud.award_badge(db_session, user.id, badge.id)
    engagement_crud.award_badge(db_session, user.id, badge.id)

    assert user_crud.get_user_or_raise(db_session, user.id).xp == 15
    assert len(engagement_crud.get_user_badges(db_session, user.id)) == 1
    unread = engagement_crud.get_notifications(db_session, user.id, unread_only=True)
    assert len(unread) == 1
    assert engagement_crud.mark_all_notifications_read(db_session, user.id) == 1
    assert engagement_crud.get_notifications(db_session, user.id, unread_only=True) == []


def test_deleting_a_user_removes_their_details(db_session):
    user = make_user(db_session, UserType.USER)
    user_crud.delete_user(db_session, user.id)
    with pytest.raises(NotFoundError):
        user_crud.get_user_or_raise(db_session, user.id)
