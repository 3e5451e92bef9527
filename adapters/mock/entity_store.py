"""
Mock 엔티티 저장소

테스트용 메모리 저장소.
IEntityStore Protocol 준수.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass, replace
from typing import AsyncIterator, Callable

from core.domain.errors import FatalConsistencyError, StorageError
from core.domain.models import Entity
from core.types import EntityKind


@dataclass
class StoreOperation:
    """저장 작업 기록"""

    action: str
    kind: EntityKind
    entity_id: int


class MockEntityStore:
    """Mock 엔티티 저장소

    IEntityStore Protocol 구현.
    모든 쓰기 작업을 기록하여 테스트에서 순서/횟수 검증 가능.
    transaction() 블록에서 예외가 나면 블록 시작 시점 상태로 복원.

    사용 예시:
    ```python
    store = MockEntityStore()
    document = await Document.open(store)

    # 세 번째 쓰기에서 실패
    store.fail_after = 2

    with pytest.raises(StorageError):
        async with document.undoable("Edit"):
            ...
    ```
    """

    def __init__(self, should_fail: bool = False):
        """
        Args:
            should_fail: True면 모든 쓰기 실패 (에러 시나리오 테스트용)
        """
        self.should_fail = should_fail
        # 성공한 쓰기 수가 이 값에 도달하면 다음 쓰기 실패
        self.fail_after: int | None = None
        # True면 트랜잭션 롤백 자체가 실패
        self.rollback_fails = False

        self.operations: list[StoreOperation] = []
        self.commit_count = 0
        self.rollback_count = 0
        self.closed = False

        self._entities: dict[tuple[EntityKind, int], Entity] = {}
        self._next_id = 1
        self._writes = 0
        self._in_transaction = False

    def seed(self, *entities: Entity) -> None:
        """기록 없이 엔티티를 미리 저장 (id 없으면 할당)"""
        for entity in entities:
            if entity.id is None:
                entity = replace(entity, id=self.reserve_id())
            self._entities[(entity.kind, entity.id)] = entity
            self._next_id = max(self._next_id, entity.id + 1)

    def get(self, kind: EntityKind, entity_id: int) -> Entity | None:
        return self._entities.get((kind, entity_id))

    def reserve_id(self) -> int:
        entity_id = self._next_id
        self._next_id += 1
        return entity_id

    async def insert(self, entity: Entity) -> int:
        self._before_write("insert", entity)
        key = (entity.kind, entity.id)
        if key in self._entities:
            raise StorageError(f"{entity.kind.value} {entity.id} already exists")
        self._entities[key] = entity
        return entity.id

    async def update(self, entity: Entity) -> None:
        self._before_write("update", entity)
        key = (entity.kind, entity.id)
        if key not in self._entities:
            raise StorageError(f"{entity.kind.value} {entity.id} does not exist")
        self._entities[key] = entity

    async def delete(self, entity: Entity) -> bool:
        self._before_write("delete", entity)
        return self._entities.pop((entity.kind, entity.id), None) is not None

    async def query(
        self,
        kind: EntityKind,
        predicate: Callable[[Entity], bool] | None = None,
    ) -> list[Entity]:
        entities = sorted(
            (entity for (k, _), entity in self._entities.items() if k == kind),
            key=lambda entity: entity.id,
        )
        if predicate is not None:
            entities = [entity for entity in entities if predicate(entity)]
        return entities

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        if self._in_transaction:
            yield
            return

        snapshot = dict(self._entities)
        self._in_transaction = True
        try:
            yield
        except BaseException as e:
            self.rollback_count += 1
            if self.rollback_fails:
                raise FatalConsistencyError(f"Mock rollback failed after '{e}'") from e
            self._entities = snapshot
            raise
        else:
            self.commit_count += 1
        finally:
            self._in_transaction = False

    async def close(self) -> None:
        self.closed = True

    def _before_write(self, action: str, entity: Entity) -> None:
        if self.should_fail:
            raise StorageError(f"Mock {action} failed")
        if self.fail_after is not None and self._writes >= self.fail_after:
            raise StorageError(f"Mock {action} failed after {self._writes} writes")
        self._writes += 1
        self.operations.append(StoreOperation(action, entity.kind, entity.id))
