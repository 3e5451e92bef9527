"""
SQLiteEntityStore - 엔티티 저장소

IEntityStore Protocol의 SQLite 구현.
엔티티 dataclass 필드를 같은 이름의 컬럼에 1:1로 저장 ("when"만 "ts" 컬럼).
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import fields
from decimal import Decimal
from enum import Enum
from datetime import datetime
from typing import Any, AsyncIterator, Callable

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.errors import StorageError
from core.domain.models import ENTITY_TYPES, Entity
from core.storage.schema import init_schema
from core.types import AccountType, ClearedState, EntityKind
from core.utils.timezone import parse_iso

logger = logging.getLogger(__name__)


TABLES: dict[EntityKind, str] = {
    EntityKind.ACCOUNT: "account",
    EntityKind.CATEGORY: "category",
    EntityKind.ASSET: "asset",
    EntityKind.TRANSACTION: "transactions",
    EntityKind.SPLIT: "split_entry",
}

# 필드명 → 컬럼명 (SQL 예약어 회피)
_COLUMN_NAMES = {"when": "ts"}

_DECODERS: dict[str, Callable[[Any], Any]] = {
    "when": parse_iso,
    "amount": Decimal,
    "debit_amount": Decimal,
    "credit_amount": Decimal,
    "is_closed": bool,
    "type": AccountType,
    "debit_cleared": ClearedState,
    "credit_cleared": ClearedState,
}


def _field_names(kind: EntityKind) -> list[str]:
    return [f.name for f in fields(ENTITY_TYPES[kind])]


def _column(field_name: str) -> str:
    return _COLUMN_NAMES.get(field_name, field_name)


def _encode(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return int(value)
    return value


def _decode(field_name: str, value: Any) -> Any:
    if value is None:
        return None
    decoder = _DECODERS.get(field_name)
    return decoder(value) if decoder else value


class SQLiteEntityStore:
    """SQLite 엔티티 저장소

    insert/update/delete는 transaction() 블록 안에서는 커밋하지 않고,
    블록 밖에서 호출되면 즉시 커밋.

    Args:
        db: SQLiteAdapter 인스턴스

    사용 예시:
    ```python
    async with SQLiteAdapter(db_path) as db:
        store = SQLiteEntityStore(db)
        await store.initialize()

        account = Account(name="Checking", id=store.reserve_id())
        async with store.transaction():
            await store.insert(account)

        accounts = await store.query(EntityKind.ACCOUNT)
    ```
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db
        self._next_id = 1
        self._in_transaction = False

    async def initialize(self) -> None:
        """스키마 생성 + id 시퀀스 복원"""
        await init_schema(self.db)

        max_id = 0
        for table in TABLES.values():
            row = await self.db.fetchone(f"SELECT MAX(id) FROM {table}")
            if row and row[0] is not None:
                max_id = max(max_id, row[0])
        self._next_id = max_id + 1

        logger.info("엔티티 저장소 초기화", extra={"next_id": self._next_id})

    def reserve_id(self) -> int:
        entity_id = self._next_id
        self._next_id += 1
        return entity_id

    async def insert(self, entity: Entity) -> int:
        if entity.id is None:
            raise StorageError(f"Cannot insert {type(entity).__name__} without id")

        names = _field_names(entity.kind)
        columns = ", ".join(_column(name) for name in names)
        placeholders = ", ".join("?" for _ in names)
        values = tuple(_encode(getattr(entity, name)) for name in names)

        await self._write(
            f"INSERT INTO {TABLES[entity.kind]} ({columns}) VALUES ({placeholders})",
            values,
            entity,
        )
        self._next_id = max(self._next_id, entity.id + 1)
        return entity.id

    async def update(self, entity: Entity) -> None:
        names = [name for name in _field_names(entity.kind) if name != "id"]
        assignments = ", ".join(f"{_column(name)} = ?" for name in names)
        values = tuple(_encode(getattr(entity, name)) for name in names) + (entity.id,)

        cursor = await self._write(
            f"UPDATE {TABLES[entity.kind]} SET {assignments} WHERE id = ?",
            values,
            entity,
        )
        if cursor.rowcount == 0:
            raise StorageError(f"{entity.kind.value} {entity.id} does not exist")

    async def delete(self, entity: Entity) -> bool:
        cursor = await self._write(
            f"DELETE FROM {TABLES[entity.kind]} WHERE id = ?",
            (entity.id,),
            entity,
        )
        return cursor.rowcount > 0

    async def query(
        self,
        kind: EntityKind,
        predicate: Callable[[Entity], bool] | None = None,
    ) -> list[Entity]:
        names = _field_names(kind)
        columns = ", ".join(_column(name) for name in names)
        rows = await self.db.fetchall(f"SELECT {columns} FROM {TABLES[kind]} ORDER BY id")

        entity_type = ENTITY_TYPES[kind]
        entities = [
            entity_type(**{name: _decode(name, value) for name, value in zip(names, row)})
            for row in rows
        ]
        if predicate is not None:
            entities = [entity for entity in entities if predicate(entity)]
        return entities

    async def count(self, kind: EntityKind) -> int:
        row = await self.db.fetchone(f"SELECT COUNT(*) FROM {TABLES[kind]}")
        return row[0] if row else 0

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """원자적 저장 구간 (중첩 시 바깥 트랜잭션에 참여)"""
        if self._in_transaction:
            yield
            return

        self._in_transaction = True
        try:
            async with self.db.transaction():
                yield
        finally:
            self._in_transaction = False

    async def close(self) -> None:
        await self.db.close()

    async def _write(self, sql: str, values: tuple[Any, ...], entity: Entity):
        try:
            cursor = await self.db.execute(sql, values)
            if not self._in_transaction:
                await self.db.commit()
            return cursor
        except Exception as e:
            logger.error(
                "엔티티 저장 실패",
                extra={"entity_kind": entity.kind.value, "entity_id": entity.id, "error": str(e)},
            )
            raise
