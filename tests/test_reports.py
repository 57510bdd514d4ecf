from datetime import datetime, timedelta, timezone

from vx_academy.crud import organization_crud, report_crud, user_crud
from vx_academy.models.enums import UserType
from vx_academy.schemas import organization_schema

from conftest import auth, make_user

DCT = "Department of Culture and Tourism"


def _organization(db, name=DCT):
    organization = organization_crud.create_organization(db, organization_schema.OrganizationCreate(name=name))
    asset = organization_crud.create_asset(db, organization_schema.AssetCreate(name=f"{name} museums"))
    organization_crud.create_sub_organization(db, organization_schema.SubOrganizationCreate(
        organization_id=organization.id, asset_id=asset.id, name="Visitor Services",
    ))
    return organization


def test_organizations_report_counts_people_by_organization(db_session):
    _organization(db_session)
    make_user(db_session, UserType.SUB_ADMIN)
    recent = make_user(db_session, UserType.USER)
    lapsed = make_user(db_session, UserType.USER)
    make_user(db_session, UserType.USER, organization="Another Authority")

    user_crud.record_login(db_session, recent.id)
    lapsed.last_login = datetime.now(timezone.utc) - timedelta(days=20)
    db_session.commit()

    [row] = report_crud.get_organizations_report(db_session)

    assert row.organization_name == DCT
    assert row.sub_admins == 1
    assert row.declared_frontliners == 12
    assert row.registered_frontliners == 2
    assert row.active_frontliners == 1
    assert row.status == "active"
    assert [(s.name, s.asset) for s in row.sub_organizations] == [("Visitor Services", f"{DCT} museums")]


def test_organization_without_recent_logins_is_inactive(db_session):
    _organization(db_session, name="Quiet Authority")
    make_user(db_session, UserType.USER, organization="Quiet Authority")

    [row] = report_crud.get_organizations_report(db_session)

    assert row.registered_frontliners == 1
    assert row.active_frontliners == 0
    assert row.status == "inactive"
    assert row.sub_admins == 0


def test_organizations_report_endpoint_is_admin_only(client, db_session, admin, learner):
    _organization(db_session)

    assert client.get("/api/v1/reports/organizations", headers=auth(learner)).status_code == 403

    response = client.get("/api/v1/reports/organizations", headers=auth(admin))
    assert response.status_code == 200
    assert [row["organization_name"] for row in response.json()["data"]] == [DCT]
