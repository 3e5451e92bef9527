"""
커밋 전 도메인 검증

scope 커밋 직전에 병합된 변경 목록과 (변경이 이미 반영된) 캐시를 대상으로 실행.

- 필수 필드/참조 오류 → ValidationError (커밋 차단, undo 스택 변경 없음)
- split 합계 불일치 → InvariantViolation (프로그래밍 결함)
"""

from decimal import Decimal
from typing import Iterable

from core.constants import SPLIT_CATEGORY_ID
from core.domain.cache import EntityCache
from core.domain.changes import EntityChange
from core.domain.errors import InvariantViolation, ValidationError
from core.domain.models import Account, Category, SplitEntry, Transaction
from core.types import EntityKind


def validate_changes(changes: Iterable[EntityChange], cache: EntityCache) -> None:
    """변경 목록 검증

    Args:
        changes: 병합된 변경 (no-op 제외)
        cache: 변경이 반영된 엔티티 캐시

    Raises:
        ValidationError: 도메인 검증 실패
        InvariantViolation: split 합계 불일치
    """
    parents_to_check: set[int] = set()

    for change in changes:
        after = change.after
        if after is None:
            _validate_deletion(change.before, cache)
            if isinstance(change.before, SplitEntry):
                parents_to_check.add(change.before.parent_transaction_id)
            continue

        if isinstance(after, Account):
            _require_name(after.name, "Account")
        elif isinstance(after, Category):
            _require_name(after.name, "Category")
            if after.parent_category_id is not None and after.parent_category_id == after.id:
                raise ValidationError(f"Category {after.id} cannot be its own parent")
        elif isinstance(after, Transaction):
            validate_transaction(after, cache)
            parents_to_check.add(after.id)
        elif isinstance(after, SplitEntry):
            validate_split(after, cache)
            parents_to_check.add(after.parent_transaction_id)
            if isinstance(change.before, SplitEntry):
                parents_to_check.add(change.before.parent_transaction_id)

    for parent_id in sorted(parents_to_check):
        parent = cache.get(EntityKind.TRANSACTION, parent_id)
        if parent is not None:
            check_split_sum(parent, cache)


def validate_transaction(transaction: Transaction, cache: EntityCache) -> None:
    if not transaction.account_ids:
        raise ValidationError(f"Transaction {transaction.id} must reference at least one account")

    if transaction.debit_account_id is not None and transaction.debit_account_id == transaction.credit_account_id:
        raise ValidationError(f"Transaction {transaction.id} cannot transfer to its own account")

    for account_id, amount in (
        (transaction.debit_account_id, transaction.debit_amount),
        (transaction.credit_account_id, transaction.credit_amount),
    ):
        if account_id is None:
            continue
        if amount is None:
            raise ValidationError(f"Transaction {transaction.id} has no amount for account {account_id}")
        if amount < 0:
            raise ValidationError(f"Transaction {transaction.id} amount must not be negative")
        if cache.get(EntityKind.ACCOUNT, account_id) is None:
            raise ValidationError(f"Transaction {transaction.id} references unknown account {account_id}")

    if transaction.is_transfer and transaction.category_id is not None:
        raise ValidationError(f"Transfer {transaction.id} cannot have a category")


def validate_split(split: SplitEntry, cache: EntityCache) -> None:
    parent = cache.get(EntityKind.TRANSACTION, split.parent_transaction_id)
    if parent is None:
        raise ValidationError(f"Split {split.id} references unknown parent {split.parent_transaction_id}")
    if parent.is_transfer:
        raise ValidationError(f"Split {split.id}: transfer {parent.id} cannot be split")

    if split.category_id is not None and split.transfer_account_id is not None:
        raise ValidationError(f"Split {split.id} cannot have both a category and a transfer account")

    if split.transfer_account_id is not None:
        if split.transfer_account_id == parent.home_account_id:
            raise ValidationError(f"Split {split.id} cannot transfer to its parent's own account")
        if cache.get(EntityKind.ACCOUNT, split.transfer_account_id) is None:
            raise ValidationError(f"Split {split.id} references unknown account {split.transfer_account_id}")


def check_split_sum(parent: Transaction, cache: EntityCache) -> None:
    """분할 부모의 sentinel/합계 불변식 확인"""
    splits = cache.splits_of(parent.id)
    if not splits:
        if parent.category_id == SPLIT_CATEGORY_ID:
            raise ValidationError(f"Transaction {parent.id} is marked split but has no splits")
        return

    if parent.category_id != SPLIT_CATEGORY_ID:
        raise ValidationError(f"Transaction {parent.id} has splits but is not marked split")

    total = sum((split.amount for split in splits), Decimal("0"))
    amount = parent.amount_for(parent.home_account_id)
    if total != amount:
        raise InvariantViolation(
            f"Split sum mismatch for transaction {parent.id}: splits={total} parent={amount}"
        )


def _validate_deletion(before, cache: EntityCache) -> None:
    if isinstance(before, Account):
        if cache.transactions_for(before.id):
            raise ValidationError(f"Account {before.id} is still referenced by transactions")
        if any(True for _ in cache.split_transfers_into(before.id)):
            raise ValidationError(f"Account {before.id} is still referenced by splits")
    elif isinstance(before, Transaction):
        if cache.splits_of(before.id):
            raise ValidationError(f"Transaction {before.id} still has splits")


def _require_name(name: str | None, label: str) -> None:
    if name is None or not name.strip():
        raise ValidationError(f"{label} name is required")
