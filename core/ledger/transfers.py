"""
TransferSynchronizer

이체 거래(차변/대변 계좌가 모두 있는 거래)는 하나의 Transaction이
두 계좌의 Ledger에 각각 LedgerEntry로 투영됨.

- 공유 필드 (when, payee, memo, check_number, 금액 크기): 어느 쪽에서 수정해도
  같은 Transaction을 수정 → 두 Ledger 모두 재배치
- 계좌별 필드 (차변/대변 방향, 정산 상태): 계좌마다 독립
- 삭제: 어느 쪽에서 삭제해도 Transaction 하나가 삭제되어 두 Ledger에서 제거
"""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import TYPE_CHECKING

from core.domain.errors import ValidationError
from core.domain.models import SplitEntry, Transaction, to_decimal
from core.ledger.types import LedgerEntry
from core.types import ClearedState

if TYPE_CHECKING:
    from core.document import Document

logger = logging.getLogger(__name__)

SHARED_FIELDS = frozenset({"when", "payee", "memo", "check_number"})


def project_transaction(transaction: Transaction) -> dict[int, LedgerEntry]:
    """거래를 참조하는 각 계좌의 LedgerEntry

    Returns:
        {account_id: LedgerEntry} (이체면 2개, 아니면 1개)
    """
    entries: dict[int, LedgerEntry] = {}
    for account_id in transaction.account_ids:
        entries[account_id] = LedgerEntry(
            id=transaction.id,
            account_id=account_id,
            when=transaction.when,
            amount=transaction.amount_for(account_id),
            payee=transaction.payee,
            memo=transaction.memo,
            check_number=transaction.check_number,
            cleared=transaction.cleared_for(account_id),
            category_id=transaction.category_id,
            transfer_account_id=transaction.other_account_id(account_id),
        )
    return entries


def project_split(split: SplitEntry, parent: Transaction) -> LedgerEntry | None:
    """이체 split을 상대 계좌 관점으로 투영 (읽기 전용)

    split.amount는 부모 home 계좌 관점이므로 상대 계좌에서는 부호 반전.
    날짜/payee는 부모를 따름.

    Returns:
        LedgerEntry 또는 None (이체 split이 아님)
    """
    if split.transfer_account_id is None:
        return None

    return LedgerEntry(
        id=split.id,
        account_id=split.transfer_account_id,
        when=parent.when,
        amount=-split.amount,
        payee=parent.payee,
        memo=split.memo,
        cleared=ClearedState.NONE,
        transfer_account_id=parent.home_account_id,
        parent_transaction_id=parent.id,
        is_read_only=True,
    )


class TransferSynchronizer:
    """계좌 관점의 거래 편집

    모든 변경은 Document를 통해 열린 scope 안에서 수행되며,
    두 Ledger의 갱신은 커밋 후 ChangeSet을 받은 LedgerBook이 처리.

    Args:
        document: 소유 Document
    """

    def __init__(self, document: "Document"):
        self._document = document

    def update_shared(self, transaction: Transaction, **fields) -> Transaction:
        """공유 필드 수정 (when, payee, memo, check_number)

        Raises:
            ValueError: 공유 필드가 아닌 필드
        """
        unknown = set(fields) - SHARED_FIELDS
        if unknown:
            raise ValueError(f"Not a shared transaction field: {', '.join(sorted(unknown))}")

        current = self._document.get_transaction(transaction.id)
        return self._document.update(replace(current, **fields))

    def set_amount(
        self,
        transaction: Transaction,
        account_id: int,
        amount: Decimal | int | str,
    ) -> Transaction:
        """account_id 관점의 부호 있는 금액 설정

        부호가 바뀌면 차변/대변이 뒤바뀌고 상대 계좌에는 반대 부호로 반영.

        Raises:
            ValidationError: 분할 거래 (금액은 split 합계로만 결정) 또는 참조하지 않는 계좌
        """
        current = self._document.get_transaction(transaction.id)
        if current.is_split:
            raise ValidationError(f"Transaction {current.id} is split; edit its splits instead")
        self._require_reference(current, account_id)

        return self._document.update(current.with_amount(account_id, to_decimal(amount)))

    def set_cleared(self, transaction: Transaction, account_id: int, state: ClearedState) -> Transaction:
        """account_id 측의 정산 상태만 변경"""
        current = self._document.get_transaction(transaction.id)
        self._require_reference(current, account_id)
        return self._document.update(current.with_cleared(account_id, state))

    def set_transfer_account(
        self,
        transaction: Transaction,
        account_id: int,
        other_account_id: int | None,
    ) -> Transaction:
        """이체 상대 계좌 지정/해제

        지정하면 카테고리가 제거되고, 해제하면 account_id만 남는 단순 거래가 됨.

        Raises:
            ValidationError: 분할 거래를 이체로 만들거나 자기 자신으로 이체
        """
        current = self._document.get_transaction(transaction.id)
        self._require_reference(current, account_id)
        if other_account_id is not None:
            if current.is_split:
                raise ValidationError(f"Transaction {current.id} is split and cannot become a transfer")
            if other_account_id == account_id:
                raise ValidationError("A transfer needs two different accounts")

        return self._document.update(current.with_transfer_account(account_id, other_account_id))

    def delete(self, transaction: Transaction) -> None:
        """거래 삭제 (split 포함, 모든 Ledger에서 제거)"""
        current = self._document.get_transaction(transaction.id)
        for split in self._document.splits_of(current.id):
            self._document.delete(split)
        self._document.delete(current)

        logger.debug("거래 삭제", extra={"transaction_id": current.id, "accounts": current.account_ids})

    @staticmethod
    def _require_reference(transaction: Transaction, account_id: int) -> None:
        if not transaction.references(account_id):
            raise ValidationError(f"Transaction {transaction.id} does not reference account {account_id}")
