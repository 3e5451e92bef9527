"""
SplitCoordinator

분할 거래(부모 Transaction + SplitEntry 목록) 규칙 관리.

불변식: split이 하나 이상인 부모는
- category_id == SPLIT_CATEGORY_ID (sentinel)
- sum(split.amount) == 부모의 home 계좌 관점 금액

병합 규칙 (delete_split):
- 남은 split이 정확히 1개 → 그 split의 금액/카테고리(또는 이체 계좌)/메모를
  부모로 흡수하고 split 삭제 (부모는 다시 단순 거래)
- 남은 split이 0개 → 부모는 금액 0, 카테고리 없음
"""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import TYPE_CHECKING, Callable

from core.constants import SPLIT_CATEGORY_ID
from core.domain.errors import ValidationError
from core.domain.models import SplitEntry, Transaction, to_decimal
from core.domain.validation import check_split_sum

if TYPE_CHECKING:
    from core.document import Document

logger = logging.getLogger(__name__)

SPLIT_FIELDS = frozenset({"amount", "category_id", "transfer_account_id", "memo"})


class SplitCoordinator:
    """분할 거래 편집

    Args:
        document: 소유 Document

    사용 예시:
    ```python
    async with document.undoable("Split transaction"):
        first = document.splits.new_split(tx)
        document.splits.update_split(first, amount="-30", category_id=food.id)
        second = document.splits.new_split(tx)
        document.splits.update_split(second, amount="-20", category_id=fuel.id)
    ```
    """

    def __init__(self, document: "Document"):
        self._document = document

    def new_split(self, parent: Transaction) -> SplitEntry:
        """split 추가

        첫 split은 부모의 현재 금액/카테고리를 넘겨받고 부모 카테고리는
        sentinel로 바뀜. 이후 split은 금액 0, 카테고리 없음.

        Raises:
            ValidationError: 이체 거래는 분할 불가
        """
        current = self._document.get_transaction(parent.id)
        if current.is_transfer:
            raise ValidationError(f"Transfer {current.id} cannot be split")

        if self._document.splits_of(current.id):
            split = SplitEntry(parent_transaction_id=current.id)
        else:
            category_id = current.category_id if current.category_id != SPLIT_CATEGORY_ID else None
            split = SplitEntry(
                parent_transaction_id=current.id,
                amount=current.amount_for(current.home_account_id),
                category_id=category_id,
            )
            self._document.update(replace(current, category_id=SPLIT_CATEGORY_ID))

        return self._document.insert(split)

    def update_split(self, split: SplitEntry, **changes) -> SplitEntry:
        """split 필드 수정 후 부모 금액을 split 합계로 재계산

        카테고리를 지정하면 이체 계좌가, 이체 계좌를 지정하면 카테고리가 해제됨.

        Raises:
            ValueError: 수정할 수 없는 필드
        """
        unknown = set(changes) - SPLIT_FIELDS
        if unknown:
            raise ValueError(f"Not an editable split field: {', '.join(sorted(unknown))}")

        if "amount" in changes:
            changes["amount"] = to_decimal(changes["amount"])
        if changes.get("category_id") is not None and "transfer_account_id" not in changes:
            changes["transfer_account_id"] = None
        if changes.get("transfer_account_id") is not None and "category_id" not in changes:
            changes["category_id"] = None

        current = self._document.get_split(split.id)
        updated = self._document.update(replace(current, **changes))
        self._sync_parent_amount(updated.parent_transaction_id)
        return updated

    def delete_split(self, parent: Transaction, split: SplitEntry) -> None:
        """split 삭제 + 병합 규칙 적용"""
        current_split = self._document.get_split(split.id)
        if current_split.parent_transaction_id != parent.id:
            raise ValidationError(f"Split {split.id} does not belong to transaction {parent.id}")

        self._document.delete(current_split)
        remaining = self._document.splits_of(parent.id)

        if len(remaining) == 1:
            self._absorb(parent.id, remaining[0])
        elif not remaining:
            current = self._document.get_transaction(parent.id)
            reverted = current.with_amount(current.home_account_id, Decimal("0"))
            self._document.update(replace(reverted, category_id=None))
        else:
            self._sync_parent_amount(parent.id)

    def collapse_requires_confirmation(self, parent: Transaction) -> bool:
        """남은 split 두 개가 모두 의미 있는 서로 다른 데이터를 가지는지

        이 상태에서 하나를 지우면 나머지가 부모로 병합되므로 호출자가
        사용자 확인을 받아야 함.
        """
        splits = self._document.splits_of(parent.id)
        if len(splits) != 2:
            return False

        first, second = splits
        if not (_has_data(first) and _has_data(second)):
            return False
        return (first.amount, first.category_id, first.transfer_account_id, first.memo) != (
            second.amount,
            second.category_id,
            second.transfer_account_id,
            second.memo,
        )

    def unsplit(self, parent: Transaction, confirm: Callable[[], bool] | None = None) -> bool:
        """모든 split 제거

        split이 하나면 확인 없이 병합. 둘 이상이면 confirm()이 True일 때만
        진행하며, 부모는 합계 금액을 유지하고 카테고리는 없음.

        Returns:
            실제로 분할을 해제했으면 True
        """
        splits = self._document.splits_of(parent.id)
        if not splits:
            return False

        if len(splits) == 1:
            self._absorb(parent.id, splits[0])
            return True

        if confirm is None or not confirm():
            logger.debug("분할 해제 취소", extra={"transaction_id": parent.id})
            return False

        for split in splits:
            self._document.delete(split)
        current = self._document.get_transaction(parent.id)
        self._document.update(replace(current, category_id=None))
        return True

    def verify(self, parent: Transaction) -> None:
        """sentinel/합계 불변식 확인 (InvariantViolation, ValidationError)"""
        check_split_sum(self._document.get_transaction(parent.id), self._document.cache)

    # -------------------------------------------------------------------------
    # 내부
    # -------------------------------------------------------------------------

    def _sync_parent_amount(self, parent_id: int) -> None:
        parent = self._document.get_transaction(parent_id)
        total = sum((s.amount for s in self._document.splits_of(parent_id)), Decimal("0"))
        if parent.amount_for(parent.home_account_id) != total:
            self._document.update(parent.with_amount(parent.home_account_id, total))

    def _absorb(self, parent_id: int, split: SplitEntry) -> None:
        """마지막 split을 부모로 병합하고 삭제"""
        self._document.delete(split)

        parent = self._document.get_transaction(parent_id)
        home_account_id = parent.home_account_id
        merged = parent.with_amount(home_account_id, split.amount)
        if split.transfer_account_id is not None:
            merged = merged.with_transfer_account(home_account_id, split.transfer_account_id)
        else:
            merged = replace(merged, category_id=split.category_id)
        merged = replace(merged, memo=split.memo)

        self._document.update(merged)
        logger.debug("split 병합", extra={"transaction_id": parent_id, "split_id": split.id})


def _has_data(split: SplitEntry) -> bool:
    return bool(split.amount) or any(
        value is not None for value in (split.category_id, split.transfer_account_id, split.memo)
    )
