"""
Document - 문서 세션 컨텍스트

하나의 열린 문서(저장소)에 대한 모든 상태를 소유:
- 저장소 핸들 (IEntityStore)
- 엔티티 캐시
- ChangeBus
- undo/redo 스택 (UndoManager)
- 계좌별 Ledger (LedgerBook), 순자산 (NetWorthTracker)

전역 상태 없음. 모든 변경 경로는 Document를 명시적으로 전달받음.

사용 예시:
```python
document = await Document.open(store)

async with document.undoable("Add account"):
    checking = document.insert(Account(name="Checking"))

async with document.undoable("Deposit", selection=checking.id):
    document.insert(Transaction.deposit(checking.id, "100.00"))

print(document.balance(checking.id))   # Decimal("100.00")
await document.undo()
```
"""

import logging
from dataclasses import replace
from typing import Any

from adapters.interfaces import IEntityStore
from core.constants import Defaults
from core.domain.cache import EntityCache
from core.domain.change_bus import ChangeBus
from core.domain.errors import EntityNotFoundError, InvariantViolation, ScopeError
from core.domain.models import Account, Asset, Category, Entity, SplitEntry, Transaction
from core.ledger.book import LedgerBook
from core.ledger.ledger import Ledger
from core.ledger.net_worth import NetWorthTracker
from core.ledger.splits import SplitCoordinator
from core.ledger.transfers import TransferSynchronizer
from core.types import EntityKind, ScopeState
from core.undo.manager import UndoManager
from core.undo.scope import UndoableScope
from core.undo.unit import UndoUnit

logger = logging.getLogger(__name__)

# 로드 순서 (참조 대상 먼저)
LOAD_ORDER = (
    EntityKind.ASSET,
    EntityKind.ACCOUNT,
    EntityKind.CATEGORY,
    EntityKind.TRANSACTION,
    EntityKind.SPLIT,
)


class Document:
    """문서 세션

    Args:
        store: 영속 저장소
        undo_capacity: undo 스택 최대 크기
        full_recompute: Ledger short-circuit 비활성화 여부
    """

    def __init__(
        self,
        store: IEntityStore,
        undo_capacity: int = Defaults.UNDO_CAPACITY,
        full_recompute: bool = Defaults.FULL_RECOMPUTE,
    ):
        self.store = store
        self.cache = EntityCache()
        self.bus = ChangeBus()
        self.undo_manager = UndoManager(store, self.cache, self.bus, capacity=undo_capacity)

        self.ledgers = LedgerBook(self, full_recompute=full_recompute)
        self.splits = SplitCoordinator(self)
        self.transfers = TransferSynchronizer(self)
        self.net_worth: NetWorthTracker | None = None

        self._closed = False

    @classmethod
    async def open(
        cls,
        store: IEntityStore,
        undo_capacity: int = Defaults.UNDO_CAPACITY,
        full_recompute: bool = Defaults.FULL_RECOMPUTE,
    ) -> "Document":
        """저장소의 모든 엔티티를 읽어 문서 생성"""
        document = cls(store, undo_capacity=undo_capacity, full_recompute=full_recompute)
        await document._load()
        return document

    async def _load(self) -> None:
        counts = {}
        for kind in LOAD_ORDER:
            entities = await self.store.query(kind)
            for entity in entities:
                self.cache.put(entity)
            counts[kind.value] = len(entities)

        self.net_worth = NetWorthTracker(self)
        self.bus.subscribe(self.ledgers.on_changes)
        self.bus.subscribe(self.net_worth.on_changes)
        self.bus.subscribe_restore(self.ledgers.on_changes)

        logger.info("문서 열기 완료", extra={"entities": counts})

    async def close(self) -> None:
        """저장소 연결 종료 (열린 scope가 있으면 ScopeError)"""
        if self._closed:
            return
        if self.undo_manager.state != ScopeState.CLOSED:
            raise ScopeError(f"Cannot close document while {self.undo_manager.state.value}")

        self.bus.unsubscribe(self.ledgers.on_changes)
        self.bus.unsubscribe_restore(self.ledgers.on_changes)
        if self.net_worth is not None:
            self.bus.unsubscribe(self.net_worth.on_changes)
        await self.store.close()
        self._closed = True
        logger.info("문서 닫기 완료")

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    def get(self, kind: EntityKind, entity_id: int) -> Entity | None:
        return self.cache.get(kind, entity_id)

    def get_account(self, account_id: int) -> Account:
        return self._require(EntityKind.ACCOUNT, account_id)

    def get_category(self, category_id: int) -> Category:
        return self._require(EntityKind.CATEGORY, category_id)

    def get_transaction(self, transaction_id: int) -> Transaction:
        return self._require(EntityKind.TRANSACTION, transaction_id)

    def get_split(self, split_id: int) -> SplitEntry:
        return self._require(EntityKind.SPLIT, split_id)

    def accounts(self, include_closed: bool = True) -> list[Account]:
        accounts = self.cache.of_kind(EntityKind.ACCOUNT)
        if include_closed:
            return accounts
        return [account for account in accounts if not account.is_closed]

    def categories(self) -> list[Category]:
        return self.cache.of_kind(EntityKind.CATEGORY)

    def assets(self) -> list[Asset]:
        return self.cache.of_kind(EntityKind.ASSET)

    def transactions_for(self, account_id: int) -> list[Transaction]:
        return self.cache.transactions_for(account_id)

    def splits_of(self, parent_id: int) -> list[SplitEntry]:
        return self.cache.splits_of(parent_id)

    def ledger(self, account_id: int) -> Ledger:
        return self.ledgers.ledger(account_id)

    def balance(self, account_id: int):
        """계좌 최종 잔액 (Ledger 기준)"""
        return self.ledger(account_id).balance

    # -------------------------------------------------------------------------
    # 변경 (열린 scope 필요)
    # -------------------------------------------------------------------------

    def insert(self, entity: Entity) -> Entity:
        """엔티티 추가 (id 미할당이면 저장소에서 예약)

        Returns:
            id가 할당된 엔티티
        """
        self._require_scope()
        if entity.id is None:
            entity = replace(entity, id=self.store.reserve_id())
        elif (entity.kind, entity.id) in self.cache:
            raise InvariantViolation(f"{entity.kind.value} {entity.id} already exists")

        self.undo_manager.apply(None, entity)
        return entity

    def update(self, entity: Entity) -> Entity:
        self._require_scope()
        before = self._require(entity.kind, entity.id)
        self.undo_manager.apply(before, entity)
        return entity

    def delete(self, entity: Entity) -> bool:
        """엔티티 삭제

        Returns:
            캐시에 있어 삭제되었으면 True
        """
        self._require_scope()
        before = self.cache.get(entity.kind, entity.id)
        if before is None:
            return False
        self.undo_manager.apply(before, None)
        return True

    def delete_account(self, account: Account) -> None:
        """계좌 삭제

        - 이 계좌로의 이체 split: 이체 대상 해제
        - 이체 거래: 이 계좌 측만 제거 (상대 계좌의 단순 거래로 남음)
        - 그 외 거래: split 포함 삭제
        """
        current = self.get_account(account.id)

        for split in list(self.cache.split_transfers_into(current.id)):
            self.update(replace(split, transfer_account_id=None))

        for transaction in self.transactions_for(current.id):
            if transaction.is_transfer:
                other_account_id = transaction.other_account_id(current.id)
                self.update(transaction.with_transfer_account(other_account_id, None))
            else:
                for split in self.splits_of(transaction.id):
                    self.delete(split)
                self.delete(transaction)

        self.delete(current)

    def delete_category(self, category: Category) -> None:
        """카테고리 삭제 (참조하는 거래/split/하위 카테고리의 참조 해제)"""
        current = self.get_category(category.id)

        for transaction in self.cache.of_kind(EntityKind.TRANSACTION):
            if transaction.category_id == current.id:
                self.update(replace(transaction, category_id=None))
        for split in self.cache.of_kind(EntityKind.SPLIT):
            if split.category_id == current.id:
                self.update(replace(split, category_id=None))
        for child in self.categories():
            if child.parent_category_id == current.id:
                self.update(replace(child, parent_category_id=None))

        self.delete(current)

    # -------------------------------------------------------------------------
    # undo
    # -------------------------------------------------------------------------

    def undoable(self, caption: str, selection: Any = None) -> UndoableScope:
        return self.undo_manager.scope(caption, selection)

    async def undo(self) -> UndoUnit:
        return await self.undo_manager.undo()

    async def redo(self) -> UndoUnit:
        return await self.undo_manager.redo()

    @property
    def can_undo(self) -> bool:
        return self.undo_manager.can_undo

    @property
    def can_redo(self) -> bool:
        return self.undo_manager.can_redo

    @property
    def undo_caption(self) -> str | None:
        return self.undo_manager.undo_caption

    @property
    def redo_caption(self) -> str | None:
        return self.undo_manager.redo_caption

    @property
    def selection(self) -> Any:
        """마지막 undo/redo가 복원한 선택 힌트"""
        return self.undo_manager.selection

    # -------------------------------------------------------------------------
    # 내부
    # -------------------------------------------------------------------------

    def _require(self, kind: EntityKind, entity_id: int | None):
        entity = self.cache.get(kind, entity_id)
        if entity is None:
            raise EntityNotFoundError(kind.value, entity_id)
        return entity

    def _require_scope(self) -> None:
        if self.undo_manager.state != ScopeState.OPEN:
            raise ScopeError("Entity mutation requires an open undoable scope")
