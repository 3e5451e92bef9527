"""
스토리지 모듈

엔티티 저장소(SQLite)와 스키마 초기화 제공
"""

from core.storage.entity_store import SQLiteEntityStore
from core.storage.schema import init_schema

__all__ = [
    "SQLiteEntityStore",
    "init_schema",
]
