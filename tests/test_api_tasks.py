from datetime import timedelta


def test_create_and_get_task_with_assignees(client, make_user, make_task):
    john = make_user(name="John Smith")
    amy = make_user(name="Amy Lee")
    task = make_task(assigned_user_ids=[john["id"], amy["id"], john["id"]], priority="high")
    assert task["status"] == "scheduled"
    assert task["priority"] == "high"
    assert task["progress"] == 0

    resp = client.get(f"/api/tasks/{task['id']}")
    assert resp.status_code == 200
    detail = resp.json()
    assert [u["name"] for u in detail["assigned_users"]] == ["John Smith", "Amy Lee"]
    assert "password" not in detail["assigned_users"][0]
    assert detail["service_sheet"] is None
    assert detail["notes"] == [] and detail["photos"] == [] and detail["product_usage"] == []
    assert detail["client"] is None


def test_get_missing_task_is_404(client):
    resp = client.get("/api/tasks/404")
    assert resp.status_code == 404
    body = resp.json()
    assert body["kind"] == "not_found"
    assert body["message"] == "Task not found"


def test_task_validation_errors(client, make_task):
    resp = client.post("/api/tasks", json={
        "title": "  ",
        "location_name": "Site",
        "location_address": "1 Main St",
        "scheduled_date": "2026-10-14T09:00:00",
    })
    assert resp.status_code == 422
    resp = client.post("/api/tasks", json={
        "title": "Visit",
        "location_name": "Site",
        "location_address": "1 Main St",
        "scheduled_date": "2026-10-14T09:00:00",
        "status": "unknown",
    })
    assert resp.status_code == 422
    task = make_task()
    assert client.patch(f"/api/tasks/{task['id']}", json={"progress": 101}).status_code == 422


def test_filters_combine(client, make_user, make_task):
    john = make_user()
    a = make_task(status="completed", priority="high", assigned_user_ids=[john["id"]])
    make_task(status="completed", priority="low", assigned_user_ids=[john["id"]])
    make_task(status="completed", priority="high")
    make_task(scheduled_date="2026-10-15T09:00:00", status="completed", priority="high",
              assigned_user_ids=[john["id"]])

    resp = client.get("/api/tasks", params={
        "status": "completed",
        "priority": "high",
        "date": "2026-10-14",
        "user_id": john["id"],
    })
    assert resp.status_code == 200
    assert [t["id"] for t in resp.json()] == [a["id"]]

    resp = client.get("/api/tasks", params={"date": "2026-10-15"})
    assert len(resp.json()) == 1
    assert len(client.get("/api/tasks").json()) == 4


def test_patch_task_partial_update(client, make_task, clock):
    task = make_task(description="Customer reported uneven cooling")
    clock.now = clock.now + timedelta(minutes=5)
    resp = client.patch(f"/api/tasks/{task['id']}", json={"status": "in_progress", "progress": 65, "title": None})
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "in_progress"
    assert body["progress"] == 65
    assert body["title"] == task["title"]
    assert body["description"] == "Customer reported uneven cooling"
    assert body["created_at"] == task["created_at"]
    assert body["updated_at"] != task["updated_at"]

    resp = client.patch(f"/api/tasks/{task['id']}", json={"description": None})
    assert resp.json()["description"] is None


def test_reassignment_keeps_surviving_assignment(client, store, clock, make_user, make_task):
    u1, u2, u3 = make_user(), make_user(), make_user()
    task = make_task(assigned_user_ids=[u1["id"], u2["id"]])
    kept_before = next(a for a in store.get_task_assignments(task["id"]) if a.user_id == u2["id"])

    clock.now = clock.now + timedelta(hours=1)
    resp = client.patch(f"/api/tasks/{task['id']}", json={"assigned_user_ids": [u2["id"], u3["id"]]})
    assert resp.status_code == 200

    rows = store.get_task_assignments(task["id"])
    assert sorted(a.user_id for a in rows) == [u2["id"], u3["id"]]
    kept_after = next(a for a in rows if a.user_id == u2["id"])
    assert kept_after.id == kept_before.id
    assert kept_after.assigned_at == kept_before.assigned_at
    added = next(a for a in rows if a.user_id == u3["id"])
    assert added.assigned_at == clock.now


def test_delete_task_does_not_cascade(client, store, make_user, make_task):
    user = make_user()
    task = make_task(assigned_user_ids=[user["id"]])
    resp = client.post("/api/notes", json={"task_id": task["id"], "user_id": user["id"], "content": "On site"})
    assert resp.status_code == 201

    assert client.delete(f"/api/tasks/{task['id']}").status_code == 204
    assert client.get(f"/api/tasks/{task['id']}").status_code == 404
    assert client.delete(f"/api/tasks/{task['id']}").status_code == 404
    assert len(store.get_task_notes(task["id"])) == 1
    assert len(store.get_task_assignments(task["id"])) == 1


def test_task_links_client(client, make_task):
    resp = client.post("/api/clients", json={"name": "ABC Corporation", "email": "jane@abccorp.com", "phone": ""})
    assert resp.status_code == 201
    acme = resp.json()
    assert acme["phone"] is None
    task = make_task(client_id=acme["id"])
    detail = client.get(f"/api/tasks/{task['id']}").json()
    assert detail["client"]["name"] == "ABC Corporation"


def test_users_api(client, make_user):
    user = make_user(username="john.smith")
    assert "password" not in user
    resp = client.post("/api/users", json={"username": "john.smith", "password": "x", "name": "Other"})
    assert resp.status_code == 409
    assert resp.json()["kind"] == "conflict"
    assert client.get(f"/api/users/{user['id']}").json()["username"] == "john.smith"
    assert client.get("/api/users/99").status_code == 404


def test_request_id_header_echoed(client):
    resp = client.get("/api/health", headers={"X-Request-ID": "abc-123"})
    assert resp.status_code == 200
    assert resp.headers["X-Request-ID"] == "abc-123"
    assert resp.json()["status"] == "ok"


def test_completing_task_counts_toward_week(client, make_task):
    task = make_task(scheduled_date="2026-10-13T10:00:00")
    before = client.get("/api/dashboard/stats").json()
    assert before["completed_this_week"] == 0
    assert before["todays_task_count"] == 0

    client.patch(f"/api/tasks/{task['id']}", json={"status": "completed", "progress": 100})
    after = client.get("/api/dashboard/stats").json()
    assert after["completed_this_week"] == 1
    assert after["task_completion_rate"] == 100
