"""
데이터베이스 어댑터

SQLite 연결 관리 (파일 DB는 WAL 모드, ":memory:" 지원).
"""

from adapters.db.sqlite_adapter import (
    MEMORY_DB,
    SQLiteAdapter,
    create_connection,
    get_db_path,
)

__all__ = [
    "MEMORY_DB",
    "SQLiteAdapter",
    "create_connection",
    "get_db_path",
]
