from datetime import datetime


def create_task_payload(title="Test Task", description="Do something", completed=False, items=None):
    return {
        "title": title,
        "description": description,
        "completed": completed,
        "items": list(items or []),
    }


def assert_task_shape(task: dict):
    for key in [
        "id",
        "title",
        "description",
        "completed",
        "created_at",
        "updated_at",
        "assigned_user_id",
        "items",
        "comments",
    ]:
        assert key in task
    assert isinstance(task["id"], int)
    assert isinstance(task["completed"], bool)
    assert isinstance(task["items"], list)
    datetime.fromisoformat(task["created_at"])
    datetime.fromisoformat(task["updated_at"])


class TestHealth:
    def test_health_check(self, client):
        res = client.get("/healthcheck")
        assert res.status_code == 200
        data = res.json()
        assert data == {"status": "available", "environment": "development", "version": "1.0.0"}


class TestTasksCRUD:
    def test_create_task_with_items(self, client):
        res = client.post("/tasks", json=create_task_payload(title="T", items=["a", "b"]))
        assert res.status_code == 201
        task = res.json()
        assert_task_shape(task)
        assert task["id"] == 1
        assert task["title"] == "T"
        assert task["items"] == ["a", "b"]
        assert task["assigned_user_id"] == 0
        assert task["created_at"] == task["updated_at"]

        res_get = client.get("/tasks/1")
        assert res_get.status_code == 200
        assert res_get.json()["items"] == ["a", "b"]

    def test_create_task_minimal_body(self, client):
        res = client.post("/tasks", json={"title": "Only title"})
        assert res.status_code == 201
        task = res.json()
        assert task["description"] == ""
        assert task["completed"] is False
        assert task["items"] == []

    def test_get_task_not_found(self, client):
        res = client.get("/tasks/999999")
        assert res.status_code == 404
        assert res.json()["detail"] == "Task not found"

    def test_get_task_includes_comment_texts(self, client):
        tid = client.post("/tasks", json=create_task_payload()).json()["id"]
        client.post("/comments", json={"task_id": tid, "comment": "first"})
        client.post("/comments", json={"task_id": tid, "comment": "second"})

        task = client.get(f"/tasks/{tid}").json()
        assert sorted(task["comments"]) == ["first", "second"]

    def test_list_tasks(self, client):
        first = client.post("/tasks", json=create_task_payload(title="A", items=["a1"])).json()["id"]
        second = client.post("/tasks", json=create_task_payload(title="B")).json()["id"]

        res = client.get("/tasks")
        assert res.status_code == 200
        tasks = {t["id"]: t for t in res.json()}
        assert set(tasks) == {first, second}
        assert tasks[first]["items"] == ["a1"]
        assert tasks[second]["items"] == []

    def test_list_tasks_empty(self, client):
        res = client.get("/tasks")
        assert res.status_code == 200
        assert res.json() == []

    def test_put_replaces_items(self, client):
        tid = client.post("/tasks", json=create_task_payload(title="T", items=["a", "b"])).json()["id"]

        res_put = client.put(
            f"/tasks/{tid}", json=create_task_payload(title="Replaced", description="new", completed=True, items=["x"])
        )
        assert res_put.status_code == 200
        updated = res_put.json()
        assert updated["id"] == tid
        assert updated["title"] == "Replaced"
        assert updated["description"] == "new"
        assert updated["completed"] is True
        assert updated["items"] == ["x"]

        assert client.get(f"/tasks/{tid}").json()["items"] == ["x"]

    def test_put_not_found(self, client):
        res = client.put("/tasks/424242", json=create_task_payload())
        assert res.status_code == 404
        assert res.json()["detail"] == "Task not found"

    def test_delete_task(self, client):
        tid = client.post("/tasks", json=create_task_payload(title="ToDelete", items=["a"])).json()["id"]

        res_del = client.delete(f"/tasks/{tid}")
        assert res_del.status_code == 204
        assert res_del.text == ""

        assert client.get(f"/tasks/{tid}").status_code == 404
        res_del_again = client.delete(f"/tasks/{tid}")
        assert res_del_again.status_code == 404
        assert res_del_again.json()["detail"] == "Task not found"


class TestAssignment:
    def test_assign_and_list_by_user(self, client):
        first = client.post("/tasks", json=create_task_payload(title="A", items=["a1", "a2"])).json()["id"]
        second = client.post("/tasks", json=create_task_payload(title="B", items=["b1"])).json()["id"]
        client.post("/tasks", json=create_task_payload(title="Unassigned"))

        res = client.patch(f"/tasks/{first}/assign/42")
        assert res.status_code == 200
        assert res.json()["assigned_user_id"] == 42
        assert client.patch(f"/tasks/{second}/assign/42").status_code == 200

        res_list = client.get("/users/42/tasks/assigned")
        assert res_list.status_code == 200
        tasks = {t["id"]: t for t in res_list.json()}
        assert set(tasks) == {first, second}
        assert tasks[first]["items"] == ["a1", "a2"]
        assert tasks[second]["items"] == ["b1"]

    def test_assign_refreshes_updated_at(self, client):
        created = client.post("/tasks", json=create_task_payload()).json()
        assigned = client.patch(f"/tasks/{created['id']}/assign/5").json()
        assert datetime.fromisoformat(assigned["updated_at"]) >= datetime.fromisoformat(created["updated_at"])
        assert assigned["created_at"] == created["created_at"]

    def test_assign_unknown_task(self, client):
        res = client.patch("/tasks/999/assign/42")
        assert res.status_code == 404

    def test_assign_user_zero_unassigns(self, client):
        tid = client.post("/tasks", json=create_task_payload()).json()["id"]
        assert client.patch(f"/tasks/{tid}/assign/5").json()["assigned_user_id"] == 5

        res = client.patch(f"/tasks/{tid}/assign/0")
        assert res.status_code == 200
        assert res.json()["assigned_user_id"] == 0
        assert client.get(f"/tasks/{tid}").json()["assigned_user_id"] == 0
        assert client.get("/users/5/tasks/assigned").json() == []

    def test_assign_negative_user_rejected(self, client):
        tid = client.post("/tasks", json=create_task_payload()).json()["id"]
        res = client.patch(f"/tasks/{tid}/assign/-1")
        assert res.status_code == 422
        assert res.json()["error"] == "ValidationError"

    def test_list_assigned_user_zero_rejected(self, client):
        res = client.get("/users/0/tasks/assigned")
        assert res.status_code == 400
        assert res.json()["detail"] == "Invalid user ID"


class TestValidationErrors:
    def test_create_with_wrong_item_type(self, client):
        res = client.post("/tasks", json={"title": "Bad", "items": "not-a-list"})
        assert res.status_code == 422
        body = res.json()
        assert body.get("error") == "ValidationError"
        assert body.get("message") == "Request validation failed"
        assert isinstance(body.get("detail"), list)

    def test_non_integer_task_id(self, client):
        res = client.get("/tasks/abc")
        assert res.status_code == 422
        assert res.json().get("error") == "ValidationError"

    def test_ids_beyond_sqlite_integer_range(self, client):
        too_big = 2**63
        tid = client.post("/tasks", json=create_task_payload()).json()["id"]
        responses = [
            client.get("/tasks/99999999999999999999"),
            client.put(f"/tasks/{too_big}", json=create_task_payload()),
            client.delete(f"/tasks/{too_big}"),
            client.patch(f"/tasks/{too_big}/assign/1"),
            client.patch(f"/tasks/{tid}/assign/{too_big}"),
            client.get(f"/users/{too_big}/tasks/assigned"),
        ]
        for res in responses:
            assert res.status_code == 422
            assert res.json()["error"] == "ValidationError"

    def test_largest_sqlite_integer_id_is_not_found(self, client):
        res = client.get(f"/tasks/{2**63 - 1}")
        assert res.status_code == 404
        assert res.json()["detail"] == "Task not found"


class TestStoreFailures:
    def test_malformed_row_returns_500(self, client, settings):
        import sqlite3

        conn = sqlite3.connect(settings.db_path)
        conn.execute(
            "INSERT INTO task (title, description, completed, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
            ("Broken", "", 0, "garbage", "garbage"),
        )
        conn.commit()
        conn.close()

        res = client.get("/tasks")
        assert res.status_code == 500
        assert res.json()["error"] == "StoreError"
