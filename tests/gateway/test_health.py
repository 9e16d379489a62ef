"""健康检查测试

测试内容：
1. GET /health 返回 200 + ok
2. GET /ready 正常时返回 200 + checks 结构
3. 可选依赖状态只做报告，不影响就绪
4. 数据库不可用时返回 503
5. /healthz、/readyz 路径与返回体
"""

from httpx import AsyncClient


class TestHealthCheck:
    async def test_health_returns_200(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    async def test_ready_without_optional_collaborators(self, client: AsyncClient):
        resp = await client.get("/ready")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ready"
        assert data["checks"] == {
            "database": "ok",
            "cache": "disabled",
            "events": "disabled",
        }

    async def test_ready_with_collaborators(self, full_client: AsyncClient):
        resp = await full_client.get("/ready")
        assert resp.status_code == 200
        checks = resp.json()["checks"]
        assert checks["cache"] == "ok"
        assert checks["events"] == "enabled"

    async def test_unreachable_cache_does_not_fail_readiness(
        self, full_client: AsyncClient, cache
    ):
        cache.fail = True
        resp = await full_client.get("/ready")
        assert resp.status_code == 200
        assert resp.json()["checks"]["cache"] == "unreachable"

    async def test_ready_database_failure(self, test_app, client: AsyncClient):
        await test_app.state.store.close()

        resp = await client.get("/ready")
        assert resp.status_code == 503
        data = resp.json()
        assert data["status"] == "not_ready"
        assert data["checks"]["database"] == "unavailable"


class TestHealthzReadyz:
    async def test_healthz_returns_200(self, client: AsyncClient):
        resp = await client.get("/healthz")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    async def test_readyz_returns_ready(self, client: AsyncClient):
        resp = await client.get("/readyz")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ready"}

    async def test_readyz_database_failure(self, test_app, client: AsyncClient):
        await test_app.state.store.close()

        resp = await client.get("/readyz")
        assert resp.status_code == 503
        assert resp.json() == {"status": "not ready"}
