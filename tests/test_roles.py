import pytest

from vx_academy.core.exceptions import ConflictError, NotFoundError, ValidationError
from vx_academy.crud import organization_crud, role_crud, training_crud
from vx_academy.schemas import organization_schema, role_schema, training_schema


@pytest.fixture
def profile(db_session):
    category = role_crud.create_role_category(db_session, role_schema.RoleCategoryCreate(name="Front Office"))
    level = role_crud.create_seniority_level(db_session, role_schema.SeniorityLevelCreate(name="Junior"))
    asset = organization_crud.create_asset(db_session, organization_schema.AssetCreate(name="Museums"))
    return category, level, asset


def _units(db, *names):
    return [training_crud.create_unit(db, training_schema.UnitCreate(name=n, order=i + 1)) for i, n in enumerate(names)]


def _assign(db, profile, name, unit_ids):
    category, level, asset = profile
    return role_crud.create_unit_role_assignment(db, role_schema.UnitRoleAssignmentCreate(
        name=name, role_category_id=category.id, seniority_level_id=level.id, asset_id=asset.id, unit_ids=unit_ids,
    ))


def test_duplicate_assignment_for_same_profile_conflicts(db_session, profile):
    units = _units(db_session, "Greeting guests")
    _assign(db_session, profile, "Onboarding", [units[0].id])
    with pytest.raises(ConflictError):
        _assign(db_session, profile, "Onboarding", [])


def test_repeated_unit_ids_are_stored_once(db_session, profile):
    units = _units(db_session, "Greeting guests", "Handling complaints")
    assignment = _assign(db_session, profile, "Onboarding", [units[1].id, units[0].id, units[1].id])
    assert assignment.unit_ids == [units[1].id, units[0].id]


def test_missing_unit_is_rejected(db_session, profile):
    with pytest.raises(NotFoundError):
        _assign(db_session, profile, "Onboarding", [4040])


def test_profile_units_merge_assignments_without_duplicates(db_session, profile):
    first, second, third = _units(db_session, "Greeting guests", "Handling complaints", "Fire drill")
    _assign(db_session, profile, "Onboarding", [first.id, second.id])
    _assign(db_session, profile, "Safety", [second.id, third.id])
    category, level, asset = profile

    units = role_crud.get_units_for_profile(db_session, category.id, level.id, asset.id)

    assert [u.id for u in units] == [first.id, second.id, third.id]


def test_updating_the_unit_list_replaces_it(db_session, profile):
    first, second = _units(db_session, "Greeting guests", "Fire drill")
    assignment = _assign(db_session, profile, "Onboarding", [first.id])

    updated = role_crud.update_unit_role_assignment(
        db_session, assignment.id, role_schema.UnitRoleAssignmentUpdate(unit_ids=[second.id])
    )

    assert updated.unit_ids == [second.id]


def test_role_names_are_unique_within_a_category(db_session, profile):
    category, _, _ = profile
    role_crud.create_role(db_session, role_schema.RoleCreate(category_id=category.id, name="Guide"))
    with pytest.raises(ConflictError):
        role_crud.create_role(db_session, role_schema.RoleCreate(category_id=category.id, name="Guide"))


def test_sub_asset_requires_a_parent(db_session):
    with pytest.raises(ValidationError) as exc_info:
        organization_crud.create_sub_asset(db_session, organization_schema.SubAssetCreate(name="Gallery"))
    assert "asset_id" in exc_info.value.errors
