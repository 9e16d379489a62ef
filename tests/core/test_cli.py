"""CLI 命令测试（init-db / ping）"""

from pathlib import Path

import pytest
from taskboard.core.__main__ import init_database, ping_database


@pytest.fixture
def db_env(tmp_path: Path, monkeypatch) -> Path:
    db_path = tmp_path / "cli" / "taskboard.db"
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("TASKBOARD_DB_PATH", str(db_path))
    return db_path


class TestPing:
    async def test_missing_database_fails(self, db_env: Path):
        assert await ping_database() == 1
        assert not db_env.exists()

    async def test_initialized_database_ok(self, db_env: Path):
        await init_database()
        assert db_env.is_file()
        assert await ping_database() == 0
