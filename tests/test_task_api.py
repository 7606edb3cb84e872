"""Tests for the task and employee HTTP endpoints."""

from __future__ import annotations

from urllib.parse import quote, unquote

import pytest
from httpx import ASGITransport, AsyncClient

from nodebucket.config import Settings
from nodebucket.server.api import create_app

from .fakes import EMP_ID, CountingDocumentStore, UnavailableDocumentStore

TASKS = f"/api/employees/{EMP_ID}/tasks"


@pytest.fixture
def app(settings: Settings, documents: CountingDocumentStore):
    return create_app(settings, documents=documents)


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.mark.anyio
class TestTaskEndpoints:
    async def test_get_empty_board(self, client: AsyncClient) -> None:
        resp = await client.get(TASKS)
        assert resp.status_code == 200
        assert resp.json() == {"empId": EMP_ID, "todo": [], "done": []}

    async def test_create_and_get(self, client: AsyncClient) -> None:
        resp = await client.post(TASKS, json={"text": "Submit timesheet"})
        assert resp.status_code == 201
        task_id = resp.json()["id"]

        resp = await client.get(TASKS)
        todo = resp.json()["todo"]
        assert todo == [{"id": task_id, "text": "Submit timesheet"}]
        assert resp.json()["done"] == []

    async def test_create_appends_to_tail(self, client: AsyncClient) -> None:
        ids = []
        for text in ("a", "b", "c"):
            ids.append((await client.post(TASKS, json={"text": text})).json()["id"])
        resp = await client.get(TASKS)
        assert [t["id"] for t in resp.json()["todo"]] == ids

    async def test_replace_returns_no_content(self, client: AsyncClient) -> None:
        resp = await client.put(TASKS, json={"todo": [{"id": "a", "text": "x"}], "done": []})
        assert resp.status_code == 204
        assert resp.content == b""

    async def test_drop_into_done_scenario(self, client: AsyncClient) -> None:
        await client.put(TASKS, json={"todo": [{"id": "a", "text": "x"}], "done": []})
        resp = await client.put(TASKS, json={"todo": [], "done": [{"id": "a", "text": "x"}]})
        assert resp.status_code == 204

        resp = await client.get(TASKS)
        assert resp.json() == {"empId": EMP_ID, "todo": [], "done": [{"id": "a", "text": "x"}]}

    async def test_replace_twice_is_idempotent(self, client: AsyncClient) -> None:
        body = {"todo": [{"id": "b", "text": "y"}], "done": [{"id": "a", "text": "x"}]}
        await client.put(TASKS, json=body)
        first = (await client.get(TASKS)).json()
        await client.put(TASKS, json=body)
        assert (await client.get(TASKS)).json() == first

    async def test_delete(self, client: AsyncClient) -> None:
        task_id = (await client.post(TASKS, json={"text": "x"})).json()["id"]
        resp = await client.delete(f"{TASKS}/{task_id}")
        assert resp.status_code == 204
        assert resp.headers["X-Task-Id"] == task_id
        assert (await client.get(TASKS)).json()["todo"] == []

    async def test_delete_absent_task_is_no_content(self, client: AsyncClient) -> None:
        resp = await client.delete(f"{TASKS}/does-not-exist")
        assert resp.status_code == 204
        assert resp.headers["X-Task-Id"] == "does-not-exist"

    async def test_delete_non_ascii_id(self, client: AsyncClient) -> None:
        task_id = "✓1"
        await client.put(TASKS, json={"todo": [{"id": task_id, "text": "x"}], "done": []})
        resp = await client.delete(f"{TASKS}/{quote(task_id, safe='')}")
        assert resp.status_code == 204
        assert unquote(resp.headers["X-Task-Id"]) == task_id
        assert (await client.get(TASKS)).json()["todo"] == []


@pytest.mark.anyio
class TestErrors:
    @pytest.mark.parametrize(
        "method, path, body",
        [
            ("GET", "/api/employees/foo/tasks", None),
            ("POST", "/api/employees/foo/tasks", {"text": "x"}),
            ("PUT", "/api/employees/foo/tasks", {"todo": [], "done": []}),
            ("DELETE", "/api/employees/foo/tasks/abc", None),
            ("GET", "/api/employees/12ab", None),
        ],
    )
    async def test_non_numeric_emp_id_skips_store(
        self, client: AsyncClient, documents: CountingDocumentStore, method, path, body
    ) -> None:
        resp = await client.request(method, path, json=body)
        assert resp.status_code == 400
        assert resp.json()["type"] == "error"
        assert documents.connects == 0

    @pytest.mark.parametrize("body", [{"text": ""}, {"text": 5}, {"extra": 1, "text": "x"}])
    async def test_invalid_create_payload(
        self, client: AsyncClient, documents: CountingDocumentStore, body
    ) -> None:
        resp = await client.post(TASKS, json=body)
        assert resp.status_code == 400
        assert resp.json()["violations"]
        assert documents.connects == 0

    async def test_invalid_replace_payload_lists_violations(self, client: AsyncClient) -> None:
        resp = await client.put(TASKS, json={"todo": [{"id": "a"}], "done": [{"id": "b", "text": "y", "x": 1}]})
        assert resp.status_code == 400
        fields = {v["field"] for v in resp.json()["violations"]}
        assert fields == {"todo[0].text", "done[0].x"}

    async def test_malformed_json_is_bad_request(self, client: AsyncClient) -> None:
        resp = await client.post(
            TASKS, content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert resp.status_code == 400

    @pytest.mark.parametrize(
        "method, path, body",
        [
            ("GET", "/api/employees/9999/tasks", None),
            ("POST", "/api/employees/9999/tasks", {"text": "x"}),
            ("PUT", "/api/employees/9999/tasks", {"todo": [], "done": []}),
            ("DELETE", "/api/employees/9999/tasks/abc", None),
            ("GET", "/api/employees/9999", None),
        ],
    )
    async def test_unknown_employee(self, client: AsyncClient, method, path, body) -> None:
        resp = await client.request(method, path, json=body)
        assert resp.status_code == 404
        assert resp.json()["message"] == "Employee 9999 not found"

    async def test_employee_id_too_long_for_a_record(self, client: AsyncClient) -> None:
        resp = await client.get(f"/api/employees/{'9' * 300}/tasks")
        assert resp.status_code == 404

    async def test_employee_id_beyond_int_limit(
        self, client: AsyncClient, documents: CountingDocumentStore
    ) -> None:
        resp = await client.get(f"/api/employees/{'9' * 5000}/tasks")
        assert resp.status_code == 400
        assert resp.json()["message"] == "Employee ID is too long"
        assert documents.connects == 0

    async def test_unknown_route(self, client: AsyncClient) -> None:
        resp = await client.get("/api/nowhere")
        assert resp.status_code == 404
        assert resp.json()["type"] == "error"


@pytest.mark.anyio
class TestStoreUnavailable:
    async def _get(self, settings: Settings):
        app = create_app(settings, documents=UnavailableDocumentStore())
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            return await c.get(TASKS)

    async def test_development_includes_detail(self, settings: Settings) -> None:
        resp = await self._get(settings)
        assert resp.status_code == 500
        body = resp.json()
        assert body["message"] == "Error connecting to the database"
        assert body["detail"] == "connection refused"
        assert "StoreUnavailable" in body["stack"]

    async def test_production_hides_detail(self, settings: Settings) -> None:
        settings.environment = "production"
        resp = await self._get(settings)
        assert resp.status_code == 500
        body = resp.json()
        assert "detail" not in body
        assert "stack" not in body


@pytest.mark.anyio
class TestEmployeeAndHealth:
    async def test_find_employee(self, client: AsyncClient) -> None:
        resp = await client.get(f"/api/employees/{EMP_ID}")
        assert resp.status_code == 200
        body = resp.json()
        assert body["empId"] == EMP_ID
        assert body["firstName"] == "Ravi"

    async def test_health(self, client: AsyncClient) -> None:
        resp = await client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
        assert resp.json()["environment"] == "development"
