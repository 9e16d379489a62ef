"""可观测性测试

测试内容：
1. HTTP 响应含 X-Request-ID 响应头
2. TraceMiddleware 的 task_id 提取规则
"""

from httpx import AsyncClient
from taskboard.gateway.middleware.trace_mw import extract_task_id


class TestRequestId:
    async def test_request_id_in_response_header(self, client: AsyncClient):
        resp = await client.post("/api/tasks/", json={"title": "Obs test"})
        assert resp.status_code == 201
        assert "x-request-id" in resp.headers
        # ULID 格式：26 字符
        assert len(resp.headers["x-request-id"]) == 26

    async def test_request_ids_are_unique(self, client: AsyncClient):
        ids = set()
        for _ in range(3):
            resp = await client.get("/api/tasks/")
            ids.add(resp.headers["x-request-id"])
        assert len(ids) == 3

    async def test_error_responses_carry_request_id(self, client: AsyncClient):
        resp = await client.get("/api/tasks/missing")
        assert resp.status_code == 404
        assert "x-request-id" in resp.headers


class TestExtractTaskId:
    def test_task_path(self):
        assert extract_task_id("/api/tasks/01JABC") == "01JABC"

    def test_list_path(self):
        assert extract_task_id("/api/tasks/") is None

    def test_other_path(self):
        assert extract_task_id("/health") is None

    def test_nested_path(self):
        assert extract_task_id("/api/tasks/01JABC/extra") is None
