"""
LedgerBook

Document의 계좌별 Ledger 집합. ChangeBus 구독자.

Ledger는 처음 요청될 때 생성(지연 생성)되며, 이후에는 ChangeSet이
참조하는 계좌/엔티티만 증분 갱신. 생성되지 않은 Ledger는 건드리지 않음.
"""

import logging
from collections import defaultdict
from typing import TYPE_CHECKING

from core.domain.changes import ChangeSet
from core.domain.errors import EntityNotFoundError
from core.domain.models import Account, SplitEntry, Transaction
from core.ledger.ledger import Ledger
from core.ledger.transfers import project_split, project_transaction
from core.ledger.types import LedgerEntry
from core.types import EntityKind

if TYPE_CHECKING:
    from core.document import Document

logger = logging.getLogger(__name__)


class LedgerBook:
    """계좌별 Ledger 관리

    Args:
        document: 소유 Document
        full_recompute: 생성되는 Ledger의 full_recompute 설정
    """

    def __init__(self, document: "Document", full_recompute: bool = False):
        self._document = document
        self.full_recompute = full_recompute
        self._ledgers: dict[int, Ledger] = {}

    def __contains__(self, account_id: object) -> bool:
        return account_id in self._ledgers

    @property
    def materialized_account_ids(self) -> list[int]:
        return sorted(self._ledgers)

    def ledger(self, account_id: int) -> Ledger:
        """계좌 Ledger (없으면 생성 후 로드)

        Raises:
            EntityNotFoundError: 존재하지 않는 계좌
        """
        ledger = self._ledgers.get(account_id)
        if ledger is not None:
            return ledger

        if self._document.cache.get(EntityKind.ACCOUNT, account_id) is None:
            raise EntityNotFoundError(EntityKind.ACCOUNT.value, account_id)

        ledger = Ledger(account_id, full_recompute=self.full_recompute)
        entries = sorted(self._desired_entries(account_id), key=lambda entry: entry.sort_key)
        for entry in entries:
            ledger.insert(entry)

        self._ledgers[account_id] = ledger
        logger.debug("Ledger 생성", extra={"account_id": account_id, "entries": len(ledger)})
        return ledger

    def drop(self, account_id: int) -> None:
        self._ledgers.pop(account_id, None)

    def on_changes(self, changes: ChangeSet) -> None:
        """ChangeSet 반영: 영향받는 (계좌, 엔티티) 쌍만 재조정"""
        impacted: dict[int, set[int]] = defaultdict(set)

        for entity in changes.entities():
            if isinstance(entity, Transaction):
                for account_id in entity.account_ids:
                    impacted[account_id].add(entity.id)
                # 부모의 날짜/payee는 이체 split 투영에도 반영됨
                for split in self._document.cache.splits_of(entity.id):
                    if split.transfer_account_id is not None:
                        impacted[split.transfer_account_id].add(split.id)
            elif isinstance(entity, SplitEntry):
                if entity.transfer_account_id is not None:
                    impacted[entity.transfer_account_id].add(entity.id)

        for account in changes.deleted:
            if isinstance(account, Account):
                self.drop(account.id)

        for account_id, entity_ids in impacted.items():
            ledger = self._ledgers.get(account_id)
            if ledger is None:
                continue
            for entity_id in sorted(entity_ids):
                self._reconcile(ledger, entity_id)

    def verify(self) -> None:
        """생성된 모든 Ledger의 잔액 불변식 확인"""
        for ledger in self._ledgers.values():
            ledger.verify()

    # -------------------------------------------------------------------------
    # 내부
    # -------------------------------------------------------------------------

    def _reconcile(self, ledger: Ledger, entity_id: int) -> None:
        present = ledger.get(entity_id)
        desired = self._desired_entry(ledger.account_id, entity_id)

        if desired is None:
            if present is not None:
                ledger.remove(entity_id)
        elif present is None:
            ledger.insert(desired)
        elif not present.same_content(desired):
            ledger.reposition(desired)

    def _desired_entry(self, account_id: int, entity_id: int) -> LedgerEntry | None:
        cache = self._document.cache

        transaction = cache.get(EntityKind.TRANSACTION, entity_id)
        if transaction is not None:
            return project_transaction(transaction).get(account_id)

        split = cache.get(EntityKind.SPLIT, entity_id)
        if split is not None and split.transfer_account_id == account_id:
            parent = cache.get(EntityKind.TRANSACTION, split.parent_transaction_id)
            if parent is not None:
                return project_split(split, parent)

        return None

    def _desired_entries(self, account_id: int) -> list[LedgerEntry]:
        cache = self._document.cache
        entries = [
            project_transaction(transaction)[account_id]
            for transaction in cache.transactions_for(account_id)
        ]
        for split in cache.split_transfers_into(account_id):
            parent = cache.get(EntityKind.TRANSACTION, split.parent_transaction_id)
            if parent is not None:
                entries.append(project_split(split, parent))
        return entries
