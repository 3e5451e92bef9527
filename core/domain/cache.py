"""
엔티티 캐시

Document가 소유하는 메모리 상의 엔티티 집합.
UndoManager만 apply/restore로 변경하며, 나머지는 조회만 수행.
"""

from collections import defaultdict
from typing import Iterator

from core.domain.models import Entity, SplitEntry, Transaction
from core.types import EntityKind


class EntityCache:
    """(종류, id) → 엔티티 매핑과 보조 인덱스

    보조 인덱스:
    - 계좌 id → 그 계좌를 참조하는 거래 id
    - 부모 거래 id → split id
    """

    def __init__(self) -> None:
        self._entities: dict[tuple[EntityKind, int], Entity] = {}
        self._transactions_by_account: dict[int, set[int]] = defaultdict(set)
        self._splits_by_parent: dict[int, set[int]] = defaultdict(set)

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, key: object) -> bool:
        return key in self._entities

    def get(self, kind: EntityKind, entity_id: int | None) -> Entity | None:
        if entity_id is None:
            return None
        return self._entities.get((kind, entity_id))

    def of_kind(self, kind: EntityKind) -> list[Entity]:
        """종류별 엔티티 목록 (id 순)"""
        entities = [entity for (k, _), entity in self._entities.items() if k == kind]
        return sorted(entities, key=lambda entity: entity.id)

    def transactions_for(self, account_id: int) -> list[Transaction]:
        """계좌를 참조하는 거래 (id 순)"""
        return [
            self._entities[(EntityKind.TRANSACTION, tx_id)]
            for tx_id in sorted(self._transactions_by_account.get(account_id, ()))
        ]

    def splits_of(self, parent_id: int) -> list[SplitEntry]:
        """부모 거래의 split 목록 (id 순 = 생성 순)"""
        return [
            self._entities[(EntityKind.SPLIT, split_id)]
            for split_id in sorted(self._splits_by_parent.get(parent_id, ()))
        ]

    def split_transfers_into(self, account_id: int) -> Iterator[SplitEntry]:
        """account_id로 이체하는 split"""
        for (kind, _), entity in list(self._entities.items()):
            if kind == EntityKind.SPLIT and entity.transfer_account_id == account_id:
                yield entity

    def put(self, entity: Entity) -> None:
        """엔티티 추가 또는 교체 (인덱스 갱신 포함)"""
        key = (entity.kind, entity.id)
        previous = self._entities.get(key)
        if previous is not None:
            self._unindex(previous)
        self._entities[key] = entity
        self._index(entity)

    def discard(self, kind: EntityKind, entity_id: int) -> Entity | None:
        entity = self._entities.pop((kind, entity_id), None)
        if entity is not None:
            self._unindex(entity)
        return entity

    def apply(self, before: Entity | None, after: Entity | None) -> None:
        """before → after 변경을 캐시에 반영"""
        if after is not None:
            self.put(after)
        elif before is not None:
            self.discard(before.kind, before.id)

    def restore(self, before: Entity | None, after: Entity | None) -> None:
        """after → before 로 되돌림"""
        self.apply(after, before)

    def _index(self, entity: Entity) -> None:
        if isinstance(entity, Transaction):
            for account_id in entity.account_ids:
                self._transactions_by_account[account_id].add(entity.id)
        elif isinstance(entity, SplitEntry):
            self._splits_by_parent[entity.parent_transaction_id].add(entity.id)

    def _unindex(self, entity: Entity) -> None:
        if isinstance(entity, Transaction):
            for account_id in entity.account_ids:
                ids = self._transactions_by_account.get(account_id)
                if ids is not None:
                    ids.discard(entity.id)
                    if not ids:
                        del self._transactions_by_account[account_id]
        elif isinstance(entity, SplitEntry):
            ids = self._splits_by_parent.get(entity.parent_transaction_id)
            if ids is not None:
                ids.discard(entity.id)
                if not ids:
                    del self._splits_by_parent[entity.parent_transaction_id]
