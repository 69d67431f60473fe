import json

from tms_api.generate_openapi import generate_openapi


def test_generate_openapi_writes_schema(tmp_path):
    out = tmp_path / "interfaces" / "openapi.json"
    written = generate_openapi(str(out))
    assert written == str(out)

    schema = json.loads(out.read_text(encoding="utf-8"))
    assert schema["info"]["title"] == "Task Management System API"
    for path in [
        "/healthcheck",
        "/tasks",
        "/tasks/{task_id}",
        "/tasks/{task_id}/assign/{user_id}",
        "/users/{user_id}/tasks/assigned",
        "/comments",
        "/comments/{task_id}",
    ]:
        assert path in schema["paths"]
    assert {t["name"] for t in schema["tags"]} >= {"health", "tasks", "comments"}
