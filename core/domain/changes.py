"""
엔티티 변경 기록

EntityChange: 엔티티 하나의 (before, after) 스냅샷 쌍
ChangeSet: ChangeBus로 한 번에 발행되는 변경 묶음 (inserted/deleted/changed)
"""

from dataclasses import dataclass
from typing import Any, Iterable, Iterator

from core.domain.errors import InvariantViolation
from core.domain.models import Account, Entity, SplitEntry, Transaction
from core.types import EntityKind


@dataclass(frozen=True)
class EntityChange:
    """엔티티 변경 (before → after)

    - before None: 삽입
    - after None: 삭제
    - 둘 다 존재: 수정 (같은 종류, 같은 id여야 함)

    구조가 잘못된 쌍은 생성 시점에 InvariantViolation.
    """

    before: Entity | None
    after: Entity | None

    def __post_init__(self) -> None:
        if self.before is None and self.after is None:
            raise InvariantViolation("EntityChange must have a before or an after snapshot")
        for snapshot in (self.before, self.after):
            if snapshot is not None and snapshot.id is None:
                raise InvariantViolation(f"Snapshot without id: {snapshot!r}")
        if self.before is not None and self.after is not None:
            if self.before.kind != self.after.kind or self.before.id != self.after.id:
                raise InvariantViolation(
                    f"EntityChange pairs different entities: "
                    f"{self.before.kind.value}#{self.before.id} / {self.after.kind.value}#{self.after.id}"
                )

    @property
    def key(self) -> tuple[EntityKind, int]:
        snapshot = self.after if self.after is not None else self.before
        return snapshot.kind, snapshot.id

    @property
    def is_insert(self) -> bool:
        return self.before is None

    @property
    def is_delete(self) -> bool:
        return self.after is None

    @property
    def is_noop(self) -> bool:
        return self.before == self.after

    def inverted(self) -> "EntityChange":
        """undo용 역방향 변경"""
        return EntityChange(before=self.after, after=self.before)


@dataclass(frozen=True)
class ChangeSet:
    """ChangeBus 발행 단위

    커밋/undo/redo 한 번당 정확히 하나 발행됨.
    changed는 (before, after) 쌍의 목록.
    selection은 undo/redo 시 복원할 선택 힌트.
    """

    inserted: tuple[Entity, ...] = ()
    deleted: tuple[Entity, ...] = ()
    changed: tuple[tuple[Entity, Entity], ...] = ()
    selection: Any = None

    @staticmethod
    def from_changes(changes: Iterable[EntityChange], selection: Any = None) -> "ChangeSet":
        inserted: list[Entity] = []
        deleted: list[Entity] = []
        changed: list[tuple[Entity, Entity]] = []
        for change in changes:
            if change.is_insert:
                inserted.append(change.after)
            elif change.is_delete:
                deleted.append(change.before)
            else:
                changed.append((change.before, change.after))
        return ChangeSet(
            inserted=tuple(inserted),
            deleted=tuple(deleted),
            changed=tuple(changed),
            selection=selection,
        )

    def __bool__(self) -> bool:
        return bool(self.inserted or self.deleted or self.changed)

    def entities(self) -> Iterator[Entity]:
        """변경에 등장하는 모든 스냅샷 (before/after 포함)"""
        yield from self.inserted
        yield from self.deleted
        for before, after in self.changed:
            yield before
            yield after

    def impacted_account_ids(self) -> set[int]:
        """이 변경이 참조하는 계좌 id 집합

        구독자는 이 집합에 포함된 계좌만 다시 계산해야 함.
        """
        account_ids: set[int] = set()
        for entity in self.entities():
            if isinstance(entity, Transaction):
                account_ids.update(entity.account_ids)
            elif isinstance(entity, SplitEntry):
                if entity.transfer_account_id is not None:
                    account_ids.add(entity.transfer_account_id)
            elif isinstance(entity, Account):
                account_ids.add(entity.id)
        return account_ids
