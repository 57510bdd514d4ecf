from vx_academy.models.enums import AssessmentOwnerType, UserType

from conftest import auth, make_assessment, make_tree, make_user

API = "/api/v1"


def test_root_is_public(client):
    response = client.get("/")
    assert response.status_code == 200


def test_missing_identity_header_is_unauthorized(client):
    response = client.get(f"{API}/training-areas/")
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_unknown_user_is_forbidden(client):
    response = client.get(f"{API}/training-areas/", headers={"X-User-Id": "424242"})
    assert response.status_code == 403


def test_learner_cannot_create_content(client, learner):
    response = client.post(f"{API}/training-areas/", json={"name": "Hospitality"}, headers=auth(learner))
    assert response.status_code == 403


def test_create_returns_the_envelope(client, admin):
    response = client.post(f"{API}/training-areas/", json={"name": "Hospitality"}, headers=auth(admin))
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["name"] == "Hospitality"


def test_validation_errors_name_the_field(client, admin):
    response = client.post(f"{API}/modules/", json={"name": ""}, headers=auth(admin))
    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert "training_area_id" in body["errors"]


def test_missing_parent_is_not_found(client, admin):
    response = client.post(f"{API}/modules/", json={"name": "Service", "training_area_id": 999}, headers=auth(admin))
    assert response.status_code == 404
    assert "999" in response.json()["message"]


def test_delete_with_descendants_needs_confirmation(client, db_session, admin):
    area, _, _, _ = make_tree(db_session, units_per_course=1)

    refused = client.delete(f"{API}/training-areas/{area.id}", headers=auth(admin))
    assert refused.status_code == 422
    assert "confirm" in refused.json()["errors"]

    confirmed = client.delete(f"{API}/training-areas/{area.id}?confirm=true", headers=auth(admin))
    assert confirmed.status_code == 200
    assert confirmed.json()["data"] == {"id": area.id, "deleted": True}


def test_course_list_filters_by_hierarchy_and_sorts(client, db_session, admin):
    area, module, _, _ = make_tree(db_session, units_per_course=0, name="Zeta")
    make_tree(db_session, units_per_course=0, name="Alpha")

    response = client.get(f"{API}/courses/?training_area_id={area.id}", headers=auth(admin))
    assert [row["name"] for row in response.json()["data"]] == ["Zeta course"]

    response = client.get(f"{API}/courses/?sort_by=name&sort_dir=desc", headers=auth(admin))
    assert [row["name"] for row in response.json()["data"]] == ["Zeta course", "Alpha course"]


def test_learner_takes_an_assessment(client, db_session, learner):
    _, _, course, _ = make_tree(db_session, units_per_course=1)
    assessment = make_assessment(db_session, AssessmentOwnerType.COURSE, course.id, questions=2)

    detail = client.get(f"{API}/assessments/{assessment.id}", headers=auth(learner)).json()["data"]
    assert all("correct_answer" not in q for q in detail["questions"])

    answers = {str(q["id"]): "A" for q in detail["questions"]}
    response = client.post(f"{API}/assessments/{assessment.id}/attempts", json={"answers": answers}, headers=auth(learner))
    assert response.status_code in (200, 201)
    result = response.json()["data"]
    assert result["attempt"]["score"] == 100
    assert result["certificate"]["certificate_number"]

    number = result["certificate"]["certificate_number"]
    verification = client.get(f"{API}/certificates/verify/{number}")
    assert verification.status_code == 200
    assert verification.json()["data"]["valid"] is True


def test_learners_only_see_their_own_progress(client, db_session, learner):
    other = make_user(db_session, UserType.USER)
    response = client.get(f"{API}/progress/users/{other.id}", headers=auth(learner))
    assert response.status_code == 403


def test_sub_admin_cannot_create_admins(client, db_session):
    sub_admin = make_user(db_session, UserType.SUB_ADMIN)
    payload = {
        "first_name": "New", "last_name": "Admin", "email": "new.admin@example.com",
        "organization": "HQ", "asset": "Museums", "sub_asset": "Louvre Abu Dhabi",
        "user_type": "admin", "password": "long-enough-password",
    }
    response = client.post(f"{API}/users/", json=payload, headers=auth(sub_admin))
    assert response.status_code == 403
