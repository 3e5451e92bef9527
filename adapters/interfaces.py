"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
모든 구현체는 이 Protocol을 준수해야 함.
"""

from contextlib import AbstractAsyncContextManager
from typing import Callable, Protocol, runtime_checkable

from core.domain.models import Entity
from core.types import EntityKind


@runtime_checkable
class IEntityStore(Protocol):
    """엔티티 영속 저장소 인터페이스

    비즈니스 로직 없이 id 단위 insert/update/delete/query만 제공.
    UndoManager는 한 번의 커밋/undo/redo를 transaction() 하나로 감쌈.

    id는 모든 엔티티 종류가 공유하는 하나의 시퀀스에서 할당.
    """

    def reserve_id(self) -> int:
        """새 엔티티 id 예약 (동기, 저장 전에 호출)

        Returns:
            문서 내 유일한 양수 id
        """
        ...

    async def insert(self, entity: Entity) -> int:
        """엔티티 저장

        Args:
            entity: id가 할당된 엔티티

        Returns:
            저장된 id
        """
        ...

    async def update(self, entity: Entity) -> None:
        """엔티티 전체 필드 갱신"""
        ...

    async def delete(self, entity: Entity) -> bool:
        """엔티티 삭제

        Returns:
            실제로 삭제되었으면 True
        """
        ...

    async def query(
        self,
        kind: EntityKind,
        predicate: Callable[[Entity], bool] | None = None,
    ) -> list[Entity]:
        """종류별 엔티티 조회 (id 순)

        Args:
            kind: 엔티티 종류
            predicate: 필터 (None이면 전체)
        """
        ...

    def transaction(self) -> AbstractAsyncContextManager[None]:
        """원자적 저장 구간

        블록 안의 모든 변경은 전부 반영되거나 전부 취소됨.
        롤백 자체가 실패하면 FatalConsistencyError.
        """
        ...

    async def close(self) -> None:
        """저장소 연결 종료"""
        ...
