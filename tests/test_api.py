import pytest

from conftest import PASSWORD, auth_headers, days_from_now
from equiptrack.models.enums import UserRole


async def create_item(client, actor, department_id, total=2, requires_approval=None):
    res = await client.post(
        "/api/items",
        json={
            "name": "Camera",
            "category_id": "cat_camera",
            "department_id": department_id,
            "total_quantity": total,
            "requires_approval": requires_approval,
        },
        headers=auth_headers(actor),
    )
    assert res.status_code == 201, res.text
    return res.json()


@pytest.mark.asyncio
async def test_health(client):
    res = await client.get("/")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_protected_routes_need_a_token(client):
    res = await client.get("/api/items")
    assert res.status_code in (401, 403)

    res = await client.get("/api/items", headers={"Authorization": "Bearer not-a-token"})
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_login_flow(client, people):
    res = await client.post(
        "/api/login", json={"contact": people["alice"].contact, "password": PASSWORD}
    )
    assert res.status_code == 200
    body = res.json()
    assert body["user"]["name"] == "Alice"
    assert "password_hash" not in body["user"]

    res = await client.get(
        "/api/items", headers={"Authorization": f"Bearer {body['access_token']}"}
    )
    assert res.status_code == 200

    res = await client.post(
        "/api/login", json={"contact": people["alice"].contact, "password": "wrong"}
    )
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_banned_user_token_is_refused(client, people):
    res = await client.put(
        f"/api/users/{people['alice'].id}",
        json={"status": "banned"},
        headers=auth_headers(people["tech_admin"]),
    )
    assert res.status_code == 200

    res = await client.get("/api/items", headers=auth_headers(people["alice"]))
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_departments_are_public_but_admin_managed(client, people, departments):
    res = await client.get("/api/departments")
    assert res.status_code == 200
    assert {d["name"] for d in res.json()} == {"Technology", "Media"}

    res = await client.post(
        "/api/departments", json={"name": "Sports"}, headers=auth_headers(people["tech_lead"])
    )
    assert res.status_code == 403

    res = await client.post(
        "/api/departments", json={"name": "Sports"}, headers=auth_headers(people["tech_admin"])
    )
    assert res.status_code == 201

    res = await client.post(
        "/api/departments", json={"name": "Sports"}, headers=auth_headers(people["tech_admin"])
    )
    assert res.status_code == 409


@pytest.mark.asyncio
async def test_department_structure_route(client, people, departments):
    res = await client.put(
        "/api/departments/structure",
        json=[{"id": departments["media"].id, "parent_id": departments["tech"].id, "order": 3}],
        headers=auth_headers(people["root"]),
    )
    assert res.status_code == 200
    media = next(d for d in res.json() if d["id"] == departments["media"].id)
    assert media["parent_id"] == departments["tech"].id


@pytest.mark.asyncio
async def test_request_approve_return_over_http(client, people, departments):
    item = await create_item(client, people["tech_admin"], departments["tech"].id)
    alice_headers = auth_headers(people["alice"])

    res = await client.post(
        "/api/borrow-requests",
        json={
            "item_id": item["id"],
            "expected_return_date": days_from_now(2).isoformat(),
            "quantity": 2,
        },
        headers=alice_headers,
    )
    assert res.status_code == 201
    request_id = res.json()["id"]
    assert res.json()["status"] == "Pending"

    res = await client.get(f"/api/items/{item['id']}", headers=alice_headers)
    assert res.json()["available_quantity"] == 0
    assert res.json()["pending_approval_quantity"] == 2

    res = await client.post(
        "/api/borrow-requests",
        json={"item_id": item["id"], "expected_return_date": days_from_now(2).isoformat()},
        headers=auth_headers(people["tech_lead"]),
    )
    assert res.status_code == 400

    res = await client.get("/api/borrow-requests/review", headers=auth_headers(people["media_admin"]))
    assert res.json() == []

    res = await client.post(
        f"/api/borrow-requests/{request_id}/approve",
        json={"remark": "go"},
        headers=auth_headers(people["media_admin"]),
    )
    assert res.status_code == 403

    res = await client.post(
        f"/api/borrow-requests/{request_id}/approve",
        json={"remark": "go"},
        headers=auth_headers(people["tech_admin"]),
    )
    assert res.status_code == 200
    assert res.json()["status"] == "Approved"

    res = await client.post(
        f"/api/borrow-requests/{request_id}/approve", headers=auth_headers(people["tech_admin"])
    )
    assert res.status_code == 400

    res = await client.get("/api/history", headers=alice_headers)
    rows = res.json()
    assert len(rows) == 2
    history_id = rows[0]["id"]

    res = await client.post(
        f"/api/items/{item['id']}/return/{history_id}", json={}, headers=alice_headers
    )
    assert res.status_code == 200
    assert res.json()["available_quantity"] == 1

    res = await client.get("/api/borrow-requests/my", headers=alice_headers)
    assert [r["id"] for r in res.json()] == [request_id]


@pytest.mark.asyncio
async def test_regular_user_borrows_for_themself(client, people, departments):
    item = await create_item(client, people["tech_admin"], departments["tech"].id)

    res = await client.post(
        f"/api/items/{item['id']}/borrow",
        json={
            "borrower": {"id": people["bob"].id, "name": "Bob", "phone": people["bob"].contact},
            "expected_return_date": days_from_now(1).isoformat(),
        },
        headers=auth_headers(people["alice"]),
    )
    assert res.status_code == 200
    [entry] = res.json()["borrow_history"]
    assert entry["borrower"]["id"] == people["alice"].id
    assert entry["operator"]["id"] == people["alice"].id


@pytest.mark.asyncio
async def test_forced_return_requires_privilege(client, people, departments):
    item = await create_item(client, people["tech_admin"], departments["tech"].id)
    res = await client.post(
        f"/api/items/{item['id']}/borrow",
        json={"expected_return_date": days_from_now(1).isoformat()},
        headers=auth_headers(people["alice"]),
    )
    history_id = res.json()["borrow_history"][0]["id"]

    res = await client.post(
        f"/api/items/{item['id']}/return/{history_id}",
        json={"is_forced": True},
        headers=auth_headers(people["alice"]),
    )
    assert res.status_code == 403

    res = await client.post(
        f"/api/items/{item['id']}/return/{history_id}",
        json={"is_forced": True},
        headers=auth_headers(people["tech_lead"]),
    )
    assert res.status_code == 200
    assert res.json()["borrow_history"][0]["forced_return_by"] == "TechLead"


@pytest.mark.asyncio
async def test_borrow_more_than_stock(client, people, departments):
    item = await create_item(client, people["tech_admin"], departments["tech"].id, total=1)
    res = await client.post(
        f"/api/items/{item['id']}/borrow",
        json={"expected_return_date": days_from_now(1).isoformat(), "quantity": 2},
        headers=auth_headers(people["tech_admin"]),
    )
    assert res.status_code == 400
    assert "Insufficient stock" in res.json()["detail"]


@pytest.mark.asyncio
async def test_quantity_must_be_positive(client, people, departments):
    item = await create_item(client, people["tech_admin"], departments["tech"].id)
    res = await client.post(
        f"/api/items/{item['id']}/borrow",
        json={"expected_return_date": days_from_now(1).isoformat(), "quantity": 0},
        headers=auth_headers(people["tech_admin"]),
    )
    assert res.status_code == 422


@pytest.mark.asyncio
async def test_unknown_item_is_404(client, people):
    res = await client.get("/api/items/item_missing", headers=auth_headers(people["alice"]))
    assert res.status_code == 404
    assert res.json() == {"detail": "Item not found"}


@pytest.mark.asyncio
async def test_user_management_over_http(client, people):
    lead = auth_headers(people["tech_lead"])

    res = await client.delete(f"/api/users/{people['tech_admin'].id}", headers=lead)
    assert res.status_code == 403

    res = await client.post(
        "/api/users",
        json={"name": "Dan", "contact": "dan", "password": "pw1234", "role": UserRole.RegularUser.value},
        headers=lead,
    )
    assert res.status_code == 201
    dan = res.json()
    assert dan["role"] == "RegularUser"

    res = await client.delete(f"/api/users/{dan['id']}", headers=lead)
    assert res.status_code == 200

    res = await client.get(f"/api/users/{dan['id']}", headers=lead)
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_signup_and_approval_over_http(client, people):
    res = await client.post(
        "/api/signup",
        json={
            "name": "Carol",
            "contact": "carol-phone",
            "department_name": "Technology",
            "password": "carol-pass",
            "invitation_code": "LEAD-CODE",
        },
    )
    assert res.status_code == 201

    lead = auth_headers(people["tech_lead"])
    res = await client.get("/api/approvals", headers=lead)
    [pending] = res.json()
    assert "password_hash" not in pending

    res = await client.get("/api/approvals", headers=auth_headers(people["alice"]))
    assert res.status_code == 403

    res = await client.post(f"/api/approvals/{pending['id']}", headers=lead)
    assert res.status_code == 200
    assert res.json()["department_name"] == "Technology"

    res = await client.post("/api/login", json={"contact": "carol-phone", "password": "carol-pass"})
    assert res.status_code == 200


@pytest.mark.asyncio
async def test_device_token_registration(client, people):
    res = await client.post(
        "/api/notifications/device-token",
        json={"token": "tok-1", "platform": "ios"},
        headers=auth_headers(people["alice"]),
    )
    assert res.status_code == 200
    assert res.json() == {"success": True}


@pytest.mark.asyncio
async def test_categories_over_http(client, people):
    res = await client.post(
        "/api/categories", json={"name": "Audio", "color": "#00ff00"}, headers=auth_headers(people["alice"])
    )
    assert res.status_code == 403

    res = await client.post(
        "/api/categories", json={"name": "Audio", "color": "#00ff00"}, headers=auth_headers(people["root"])
    )
    assert res.status_code == 201

    res = await client.get("/api/categories", headers=auth_headers(people["alice"]))
    assert [c["name"] for c in res.json()] == ["Audio"]


@pytest.mark.asyncio
async def test_null_item_name_does_not_break_inventory(client, people, departments):
    item = await create_item(client, people["tech_admin"], departments["tech"].id)
    headers = auth_headers(people["tech_admin"])

    res = await client.put(f"/api/items/{item['id']}", json={"name": None}, headers=headers)
    assert res.status_code == 200
    assert res.json()["name"] == "Camera"

    res = await client.get("/api/items", headers=headers)
    assert res.status_code == 200
    assert [i["name"] for i in res.json()] == ["Camera"]


@pytest.mark.asyncio
async def test_department_can_move_back_to_root(client, people, departments):
    tech, media = departments["tech"], departments["media"]
    headers = auth_headers(people["root"])

    res = await client.put(f"/api/departments/{media.id}", json={"parent_id": tech.id}, headers=headers)
    assert res.json()["parent_id"] == tech.id

    res = await client.put(f"/api/departments/{media.id}", json={"name": "Press"}, headers=headers)
    assert res.json()["parent_id"] == tech.id

    res = await client.put(f"/api/departments/{media.id}", json={"parent_id": None}, headers=headers)
    assert res.status_code == 200
    assert res.json()["parent_id"] is None
