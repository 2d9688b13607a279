from pathwise.db.models.challenge import Challenge

from conftest import auth_header, error_payload, make_challenge, make_user, success_data


def _seed_users(api):
    api.add(
        make_user(user_id="learner"),
        make_user(user_id="reviewer", role="reviewer"),
        make_user(user_id="admin", role="admin"),
    )


def test_list_challenges_excludes_requests_and_filters(api):
    _seed_users(api)
    api.add(
        make_challenge(challenge_id="c1", difficulty="beginner"),
        make_challenge(challenge_id="c2", difficulty="advanced"),
        make_challenge(challenge_id="c3", status="pending"),
        make_challenge(challenge_id="r1", challenge_type="user_requested", status="pending"),
    )

    all_ids = {c["id"] for c in success_data(api.client.get("/challenges"))}
    assert all_ids == {"c1", "c2", "c3"}

    approved = {c["id"] for c in success_data(api.client.get("/challenges?status=approved"))}
    assert approved == {"c1", "c2"}

    advanced = success_data(api.client.get("/challenges?difficulty=Advanced"))
    assert [c["id"] for c in advanced] == ["c2"]


def test_list_challenges_paged(api):
    api.add(*[make_challenge(challenge_id=f"c{i}") for i in range(5)])
    response = api.client.get("/challenges?page=2&page_size=2")
    payload = response.json()
    assert len(payload["data"]) == 2
    assert payload["meta"] == {"total": 5, "page": 2, "page_size": 2}


def test_get_challenge_and_404(api):
    api.add(make_challenge(challenge_id="c1", title="Deploy it", requirements=["Ship"]))
    data = success_data(api.client.get("/challenges/c1"))
    assert data["title"] == "Deploy it"
    assert data["requirements"] == ["Ship"]

    missing = api.client.get("/challenges/nope")
    assert missing.status_code == 404
    assert error_payload(missing)["error"]["code"] == "http_404"


def test_admin_creates_updates_and_deletes_challenge(api):
    _seed_users(api)
    headers = auth_header("admin")

    created = api.client.post(
        "/challenges",
        json={"title": "Build a CLI", "difficulty": "intermediate", "xp_reward": 150, "requirements": ["Tests"]},
        headers=headers,
    )
    assert created.status_code == 201
    challenge = success_data(created)
    assert challenge["status"] == "approved"
    assert challenge["created_by"] == "admin"

    updated = api.client.patch(f"/challenges/{challenge['id']}", json={"xp_reward": 200}, headers=headers)
    assert updated.status_code == 200
    assert success_data(updated)["xp_reward"] == 200
    assert success_data(updated)["title"] == "Build a CLI"

    deleted = api.client.delete(f"/challenges/{challenge['id']}", headers=headers)
    assert deleted.status_code == 200
    with api.SessionLocal() as db:
        assert db.get(Challenge, challenge["id"]) is None


def test_challenge_management_requires_permission(api):
    _seed_users(api)
    api.add(make_challenge(challenge_id="c1"))

    for user_id in ("learner", "reviewer"):
        headers = auth_header(user_id)
        assert api.client.post("/challenges", json={"title": "x"}, headers=headers).status_code == 403
        assert api.client.patch("/challenges/c1", json={"title": "y"}, headers=headers).status_code == 403
        assert api.client.delete("/challenges/c1", headers=headers).status_code == 403
        assert api.client.get("/challenges/requests", headers=headers).status_code == 403

    assert api.client.post("/challenges", json={"title": "x"}).status_code == 401


def test_invalid_challenge_payload(api):
    _seed_users(api)
    response = api.client.post("/challenges", json={"title": "", "xp_reward": -5}, headers=auth_header("admin"))
    assert response.status_code == 422
    assert error_payload(response)["error"]["code"] == "validation_error"


def test_request_flow(api):
    _seed_users(api)

    requested = api.client.post(
        "/challenges/requests",
        json={"title": "Teach me Rust", "description": "Please"},
        headers=auth_header("learner"),
    )
    assert requested.status_code == 201
    request_id = success_data(requested)["id"]
    assert success_data(requested)["challenge_type"] == "user_requested"
    assert success_data(requested)["status"] == "pending"

    pending = success_data(api.client.get("/challenges/requests", headers=auth_header("admin")))
    assert [c["id"] for c in pending] == [request_id]

    approved = api.client.post(f"/challenges/{request_id}/approve", headers=auth_header("admin"))
    assert success_data(approved)["status"] == "approved"
    assert success_data(api.client.get("/challenges/requests", headers=auth_header("admin"))) == []

    rejected = api.client.post(f"/challenges/{request_id}/reject", headers=auth_header("admin"))
    assert success_data(rejected)["status"] == "rejected"

    assert api.client.post("/challenges/nope/approve", headers=auth_header("admin")).status_code == 404


def test_update_rejects_null_for_required_fields(api):
    _seed_users(api)
    api.add(make_challenge(challenge_id="c1", title="Keep me"))
    headers = auth_header("admin")

    for field in ("title", "description", "difficulty", "challenge_type", "requirements", "status"):
        response = api.client.patch("/challenges/c1", json={field: None}, headers=headers)
        assert response.status_code == 422, field
        assert error_payload(response)["error"]["code"] == "validation_error"

    cleared = api.client.patch("/challenges/c1", json={"xp_reward": None}, headers=headers)
    assert cleared.status_code == 200
    assert success_data(cleared)["xp_reward"] is None
    assert success_data(api.client.get("/challenges/c1"))["title"] == "Keep me"


def test_approve_and_reject_only_apply_to_requests(api):
    _seed_users(api)
    api.add(
        make_challenge(challenge_id="staff", status="pending"),
        make_challenge(challenge_id="onb", challenge_type="onboarding"),
    )
    headers = auth_header("admin")

    for challenge_id in ("staff", "onb"):
        for action in ("approve", "reject"):
            response = api.client.post(f"/challenges/{challenge_id}/{action}", headers=headers)
            assert response.status_code == 409
            assert error_payload(response)["error"]["code"] == "http_409"

    assert success_data(api.client.get("/challenges/staff"))["status"] == "pending"
    assert success_data(api.client.get("/challenges/onb"))["status"] == "approved"
