"""
UndoManager

Document 하나의 undo/redo 스택과 scope 상태를 관리.

역할:
- scope가 열려 있는 동안 모든 엔티티 변경을 가로채 기록 (엔티티별 최초 before, 최종 after)
- 최외곽 scope 종료 시 검증 → 단일 저장소 트랜잭션으로 저장 → UndoUnit push → ChangeSet 발행
- undo/redo 시 저장 성공 후에만 캐시 갱신
- 실패 시 메모리 상태를 마지막으로 저장된 상태로 롤백
"""

import logging
from collections import deque
from typing import Any

from adapters.interfaces import IEntityStore
from core.constants import Defaults
from core.domain.cache import EntityCache
from core.domain.change_bus import ChangeBus
from core.domain.changes import ChangeSet, EntityChange
from core.domain.errors import (
    LedgerError,
    ScopeError,
    StorageError,
    UndoStackEmptyError,
)
from core.domain.models import Entity, entity_key
from core.domain.validation import validate_changes
from core.types import EntityKind, ScopeState
from core.undo.scope import UndoableScope
from core.undo.unit import UndoUnit

logger = logging.getLogger(__name__)


class UndoManager:
    """undo/redo 스택 + scope 상태 머신

    Args:
        store: 영속 저장소
        cache: Document 엔티티 캐시
        bus: 변경 통지 버스
        capacity: undo 스택 최대 크기 (초과 시 가장 오래된 unit 제거)

    사용 예시:
    ```python
    async with manager.scope("Edit payee"):
        manager.apply(old_tx, new_tx)

    if manager.can_undo:
        await manager.undo()
    ```
    """

    def __init__(
        self,
        store: IEntityStore,
        cache: EntityCache,
        bus: ChangeBus,
        capacity: int = Defaults.UNDO_CAPACITY,
    ):
        if capacity < 1:
            raise ValueError(f"undo capacity must be positive: {capacity}")

        self._store = store
        self._cache = cache
        self._bus = bus
        self.capacity = capacity

        self._undo_stack: deque[UndoUnit] = deque(maxlen=capacity)
        self._redo_stack: deque[UndoUnit] = deque(maxlen=capacity)

        self._state = ScopeState.CLOSED
        self._depth = 0
        self._caption = ""
        self._scope_selection: Any = None
        self._doomed = False
        self._pending: dict[tuple[EntityKind, int], tuple[Entity | None, Entity | None]] = {}

        self.selection: Any = None

    # -------------------------------------------------------------------------
    # 상태 조회
    # -------------------------------------------------------------------------

    @property
    def state(self) -> ScopeState:
        return self._state

    @property
    def depth(self) -> int:
        """현재 중첩된 scope 깊이 (0 = 닫힘)"""
        return self._depth

    @property
    def can_undo(self) -> bool:
        return self._state == ScopeState.CLOSED and bool(self._undo_stack)

    @property
    def can_redo(self) -> bool:
        return self._state == ScopeState.CLOSED and bool(self._redo_stack)

    @property
    def undo_caption(self) -> str | None:
        return self._undo_stack[-1].caption if self._undo_stack else None

    @property
    def redo_caption(self) -> str | None:
        return self._redo_stack[-1].caption if self._redo_stack else None

    @property
    def undo_units(self) -> list[UndoUnit]:
        """undo 스택 (오래된 순)"""
        return list(self._undo_stack)

    @property
    def redo_units(self) -> list[UndoUnit]:
        return list(self._redo_stack)

    # -------------------------------------------------------------------------
    # scope
    # -------------------------------------------------------------------------

    def scope(self, caption: str, selection: Any = None) -> UndoableScope:
        """scope 생성 (async with 또는 begin/commit/abort 로 사용)"""
        return UndoableScope(self, caption, selection)

    def begin(self, caption: str, selection: Any = None) -> None:
        """scope 시작. 이미 열려 있으면 중첩 참여 (caption/selection 무시)

        Raises:
            ScopeError: 커밋/undo/redo 진행 중
        """
        if self._state == ScopeState.OPEN:
            self._depth += 1
            return
        if self._state != ScopeState.CLOSED:
            raise ScopeError(f"Cannot begin '{caption}' while {self._state.value}")

        self._state = ScopeState.OPEN
        self._depth = 1
        self._caption = caption
        self._scope_selection = selection
        self._doomed = False
        self._pending = {}

    def apply(self, before: Entity | None, after: Entity | None) -> None:
        """엔티티 변경 기록 + 캐시 반영

        Raises:
            ScopeError: 열린 scope가 없음
        """
        if self._state != ScopeState.OPEN:
            raise ScopeError("Entity mutation requires an open undoable scope")

        key = entity_key(after if after is not None else before)
        if key in self._pending:
            first_before, _ = self._pending[key]
            self._pending[key] = (first_before, after)
        else:
            self._pending[key] = (before, after)

        self._cache.apply(before, after)

    def pending_changes(self) -> list[EntityChange]:
        """현재 scope의 병합된 변경 (no-op 제외, 최초 변경 순서)"""
        return [
            EntityChange(before, after)
            for before, after in self._pending.values()
            if before != after
        ]

    async def commit(self) -> UndoUnit | None:
        """scope 종료. 최외곽일 때만 실제 커밋

        Returns:
            push된 UndoUnit (중첩 종료 또는 변경 없음이면 None)

        Raises:
            ValidationError: 검증 실패 (메모리 롤백, 스택 불변)
            InvariantViolation: split 합계 불일치 등
            StorageError: 저장 실패 (메모리 롤백)
            FatalConsistencyError: 저장소 롤백 실패
        """
        self._require_open("commit")
        self._depth -= 1
        if self._depth > 0:
            return None

        if self._doomed:
            self._rollback_pending()
            self._close()
            raise ScopeError(f"Scope '{self._caption}' was aborted by a nested scope")

        self._state = ScopeState.COMMITTING
        changes = self.pending_changes()
        caption = self._caption
        selection = self._scope_selection

        try:
            if not changes:
                return None

            validate_changes(changes, self._cache)
            await self._persist(changes, caption)
        except BaseException:
            self._rollback_pending()
            raise
        finally:
            self._close()

        unit = UndoUnit(caption=caption, changes=tuple(changes), selection=selection)
        if len(self._undo_stack) == self._undo_stack.maxlen:
            logger.debug("undo 스택 가득 참, 가장 오래된 unit 제거", extra={"caption": self._undo_stack[0].caption})
        self._undo_stack.append(unit)
        self._redo_stack.clear()

        logger.info(
            f"커밋 완료: {caption}",
            extra={"caption": caption, "changes": len(changes), "undo_depth": len(self._undo_stack)},
        )
        self._bus.publish(ChangeSet.from_changes(changes, selection))
        return unit

    def abort(self) -> None:
        """scope 중단

        최외곽이면 기록된 변경을 캐시에서 되돌림.
        중첩 scope의 중단은 최외곽 커밋을 ScopeError로 실패시킴.
        """
        self._require_open("abort")
        self._depth -= 1
        if self._depth > 0:
            self._doomed = True
            return

        self._rollback_pending()
        logger.info(f"scope 중단: {self._caption}", extra={"caption": self._caption})
        self._close()

    # -------------------------------------------------------------------------
    # undo / redo
    # -------------------------------------------------------------------------

    async def undo(self) -> UndoUnit:
        """가장 최근 unit 되돌리기

        Raises:
            ScopeError: scope 진행 중
            UndoStackEmptyError: undo 스택 비어 있음
            StorageError: 저장 실패 (unit은 undo 스택에 그대로 남음)
        """
        if self._state != ScopeState.CLOSED:
            raise ScopeError(f"Cannot undo while {self._state.value}")
        if not self._undo_stack:
            raise UndoStackEmptyError("Nothing to undo")

        unit = self._undo_stack[-1]
        changes = unit.undo_changes()
        await self._replay(ScopeState.UNDOING, changes, f"Undo {unit.caption}")

        self._undo_stack.pop()
        self._redo_stack.append(unit)
        self.selection = unit.selection

        logger.info(f"undo 완료: {unit.caption}", extra={"caption": unit.caption})
        self._bus.publish(ChangeSet.from_changes(changes, unit.selection))
        return unit

    async def redo(self) -> UndoUnit:
        """가장 최근에 되돌린 unit 다시 적용"""
        if self._state != ScopeState.CLOSED:
            raise ScopeError(f"Cannot redo while {self._state.value}")
        if not self._redo_stack:
            raise UndoStackEmptyError("Nothing to redo")

        unit = self._redo_stack[-1]
        changes = unit.redo_changes()
        await self._replay(ScopeState.REDOING, changes, f"Redo {unit.caption}")

        self._redo_stack.pop()
        self._undo_stack.append(unit)
        self.selection = unit.selection

        logger.info(f"redo 완료: {unit.caption}", extra={"caption": unit.caption})
        self._bus.publish(ChangeSet.from_changes(changes, unit.selection))
        return unit

    def clear(self) -> None:
        """undo/redo 기록 전체 삭제"""
        self._undo_stack.clear()
        self._redo_stack.clear()

    # -------------------------------------------------------------------------
    # 내부
    # -------------------------------------------------------------------------

    async def _replay(self, state: ScopeState, changes: list[EntityChange], label: str) -> None:
        """저장 성공 후 캐시 반영"""
        self._state = state
        try:
            await self._persist(changes, label)
            for change in changes:
                self._cache.apply(change.before, change.after)
        finally:
            self._state = ScopeState.CLOSED

    async def _persist(self, changes: list[EntityChange], label: str) -> None:
        """변경 전체를 저장소 트랜잭션 하나로 저장

        저장소 예외는 StorageError로 변환 (FatalConsistencyError 포함
        LedgerError 계열은 그대로 전파).
        """
        try:
            async with self._store.transaction():
                for change in changes:
                    if change.before is None:
                        await self._store.insert(change.after)
                    elif change.after is None:
                        await self._store.delete(change.before)
                    else:
                        await self._store.update(change.after)
        except LedgerError as e:
            logger.error(f"저장 실패: {label}", extra={"error": str(e), "changes": len(changes)})
            raise
        except Exception as e:
            logger.error(f"저장 실패: {label}", extra={"error": str(e), "changes": len(changes)})
            raise StorageError(f"Failed to persist '{label}': {e}") from e

    def _rollback_pending(self) -> None:
        """기록된 변경을 캐시에서 되돌림 (역순)

        되돌린 변경은 restore 채널로 통지 (scope 도중 생성된 Ledger 재조정).
        """
        restored: list[EntityChange] = []
        for before, after in reversed(list(self._pending.values())):
            if before == after:
                continue
            self._cache.restore(before, after)
            restored.append(EntityChange(after, before))

        self._bus.restore(ChangeSet.from_changes(restored))

    def _close(self) -> None:
        self._state = ScopeState.CLOSED
        self._depth = 0
        self._pending = {}
        self._doomed = False

    def _require_open(self, action: str) -> None:
        if self._state != ScopeState.OPEN or self._depth < 1:
            raise ScopeError(f"Cannot {action}: no open scope")
