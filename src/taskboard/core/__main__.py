"""CLI 入口模块 -- python -m taskboard.core <command>

支持的命令：
  init-db  创建 tasks 表及索引（幂等）
  ping     检查数据库连通性
"""

import asyncio
import sys
from pathlib import Path

from .config import load_config

_USAGE = """用法: python -m taskboard.core <command>
命令:
  init-db  创建 tasks 表及索引（幂等）
  ping     检查数据库连通性"""


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(_USAGE)
        sys.exit(1)

    command = sys.argv[1]

    if command == "init-db":
        asyncio.run(init_database())
    elif command == "ping":
        sys.exit(asyncio.run(ping_database()))
    else:
        print(f"未知命令: {command}")
        print("可用命令: init-db, ping")
        sys.exit(1)


async def init_database() -> None:
    """执行建表步骤"""
    from .store import create_task_store

    config = load_config()
    print(f"数据库路径: {config.db_path}")

    store = await create_task_store(config.db_path, pool_size=1)
    await store.close()
    print("初始化完成")


async def ping_database() -> int:
    """检查数据库连通性，返回进程退出码"""
    from .store import SqlitePool, SqliteTaskStore

    config = load_config()
    # 不存在的路径会被 SQLite 新建为空库，需先检查
    if not Path(config.db_path).is_file():
        print(f"数据库不存在: {config.db_path}（请先执行 init-db）")
        return 1

    store = SqliteTaskStore(SqlitePool(config.db_path, max_size=1))
    try:
        await store.ping()
    except Exception as e:
        print(f"数据库不可用: {e}")
        return 1
    finally:
        await store.close()
    print("ok")
    return 0


if __name__ == "__main__":
    main()
