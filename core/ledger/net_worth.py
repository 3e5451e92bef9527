"""
NetWorthTracker

계좌별 잔액을 ChangeSet 델타로 유지하고 순자산(닫히지 않은 계좌 잔액 합)을 제공.
"""

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from core.domain.changes import ChangeSet
from core.domain.models import Account, Entity, SplitEntry, Transaction
from core.types import EntityKind

if TYPE_CHECKING:
    from core.document import Document

logger = logging.getLogger(__name__)


def balance_contributions(entity: Entity) -> dict[int, Decimal]:
    """엔티티 하나가 각 계좌 잔액에 기여하는 금액

    - Transaction: 참조하는 계좌마다 amount_for
    - 이체 SplitEntry: 상대 계좌에 -amount
    """
    if isinstance(entity, Transaction):
        return {account_id: entity.amount_for(account_id) for account_id in entity.account_ids}
    if isinstance(entity, SplitEntry) and entity.transfer_account_id is not None:
        return {entity.transfer_account_id: -entity.amount}
    return {}


class NetWorthTracker:
    """순자산 집계

    Args:
        document: 소유 Document (생성 시 캐시에서 전체 잔액 계산)
    """

    def __init__(self, document: "Document"):
        self._document = document
        self._balances: dict[int, Decimal] = {}
        self.rebuild()

    def rebuild(self) -> None:
        """캐시 전체로부터 잔액 재계산"""
        cache = self._document.cache
        self._balances = {account.id: Decimal("0") for account in cache.of_kind(EntityKind.ACCOUNT)}
        for kind in (EntityKind.TRANSACTION, EntityKind.SPLIT):
            for entity in cache.of_kind(kind):
                self._add(entity, 1)

    def balance(self, account_id: int) -> Decimal:
        return self._balances.get(account_id, Decimal("0"))

    @property
    def net_worth(self) -> Decimal:
        """닫히지 않은 계좌 잔액 합"""
        cache = self._document.cache
        total = Decimal("0")
        for account_id, balance in self._balances.items():
            account = cache.get(EntityKind.ACCOUNT, account_id)
            if account is not None and not account.is_closed:
                total += balance
        return total

    def on_changes(self, changes: ChangeSet) -> None:
        """before 기여분을 빼고 after 기여분을 더함 (영향받는 계좌만)"""
        impacted = changes.impacted_account_ids()
        for account_id in impacted:
            self._balances.setdefault(account_id, Decimal("0"))

        for entity in changes.inserted:
            self._add(entity, 1)
        for entity in changes.deleted:
            self._add(entity, -1)
        for before, after in changes.changed:
            self._add(before, -1)
            self._add(after, 1)

        for entity in changes.deleted:
            if isinstance(entity, Account):
                self._balances.pop(entity.id, None)

        logger.debug(
            "순자산 갱신",
            extra={"accounts": sorted(impacted), "net_worth": str(self.net_worth)},
        )

    def _add(self, entity: Entity, sign: int) -> None:
        for account_id, amount in balance_contributions(entity).items():
            self._balances[account_id] = self._balances.get(account_id, Decimal("0")) + sign * amount
