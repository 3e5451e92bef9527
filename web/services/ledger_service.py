"""
Ledger 서비스

Web 요청을 Document 작업으로 변환.
모든 변경은 하나의 undoable scope로 커밋됨 (요청 1건 = UndoUnit 1개).
"""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Any

from core.document import Document
from core.domain.errors import ValidationError
from core.domain.models import Account, Category, SplitEntry, Transaction
from core.ledger.ledger import Ledger
from core.undo.unit import UndoUnit
from core.utils.timezone import now_utc
from web.models.requests import (
    AccountCreateRequest,
    AccountUpdateRequest,
    CategoryCreateRequest,
    SplitCreateRequest,
    SplitUpdateRequest,
    TransactionCreateRequest,
    TransactionUpdateRequest,
)

logger = logging.getLogger(__name__)


class LedgerService:
    """Ledger 서비스

    Args:
        document: 열린 Document
    """

    def __init__(self, document: Document):
        self.document = document

    # -------------------------------------------------------------------------
    # 계좌
    # -------------------------------------------------------------------------

    def list_accounts(self, include_closed: bool = True) -> list[tuple[Account, Decimal]]:
        """계좌 목록과 잔액"""
        return [
            (account, self.document.balance(account.id))
            for account in self.document.accounts(include_closed=include_closed)
        ]

    async def create_account(self, request: AccountCreateRequest) -> Account:
        async with self.document.undoable(f"Add account {request.name}"):
            account = self.document.insert(
                Account(
                    name=request.name,
                    type=request.type,
                    currency_asset_id=request.currency_asset_id,
                )
            )
        return account

    async def update_account(self, account_id: int, request: AccountUpdateRequest) -> Account:
        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        current = self.document.get_account(account_id)
        async with self.document.undoable(f"Edit account {current.name}", selection=account_id):
            account = self.document.update(replace(current, **changes))
        return account

    async def delete_account(self, account_id: int) -> None:
        account = self.document.get_account(account_id)
        async with self.document.undoable(f"Delete account {account.name}"):
            self.document.delete_account(account)

    def get_ledger(self, account_id: int) -> Ledger:
        return self.document.ledger(account_id)

    def net_worth(self) -> Decimal:
        return self.document.net_worth.net_worth

    # -------------------------------------------------------------------------
    # 카테고리
    # -------------------------------------------------------------------------

    def list_categories(self) -> list[Category]:
        return self.document.categories()

    async def create_category(self, request: CategoryCreateRequest) -> Category:
        async with self.document.undoable(f"Add category {request.name}"):
            category = self.document.insert(
                Category(name=request.name, parent_category_id=request.parent_category_id)
            )
        return category

    async def delete_category(self, category_id: int) -> None:
        category = self.document.get_category(category_id)
        async with self.document.undoable(f"Delete category {category.name}"):
            self.document.delete_category(category)

    # -------------------------------------------------------------------------
    # 거래
    # -------------------------------------------------------------------------

    def get_transaction(self, transaction_id: int) -> tuple[Transaction, list[SplitEntry]]:
        transaction = self.document.get_transaction(transaction_id)
        return transaction, self.document.splits_of(transaction_id)

    async def create_transaction(self, request: TransactionCreateRequest) -> Transaction:
        self.document.get_account(request.account_id)

        draft = Transaction(
            when=request.when or now_utc(),
            payee=request.payee,
            memo=request.memo,
            check_number=request.check_number,
            category_id=request.category_id,
        ).with_amount(request.account_id, request.amount)
        if request.transfer_account_id is not None:
            draft = draft.with_transfer_account(request.account_id, request.transfer_account_id)

        async with self.document.undoable("Add transaction"):
            transaction = self.document.insert(draft)
        return transaction

    async def update_transaction(
        self,
        transaction_id: int,
        request: TransactionUpdateRequest,
    ) -> Transaction:
        """거래 수정

        공유 필드는 TransferSynchronizer로, 카테고리는 직접 수정.
        """
        fields: dict[str, Any] = request.model_dump(exclude_unset=True)
        account_id = fields.pop("account_id")
        transfers = self.document.transfers

        async with self.document.undoable("Edit transaction", selection=transaction_id):
            transaction = self.document.get_transaction(transaction_id)

            shared = {key: fields[key] for key in ("when", "payee", "memo", "check_number") if key in fields}
            if "when" in shared and shared["when"] is None:
                del shared["when"]
            if shared:
                transaction = transfers.update_shared(transaction, **shared)
            if "transfer_account_id" in fields:
                transaction = transfers.set_transfer_account(
                    transaction, account_id, fields["transfer_account_id"]
                )
            if fields.get("amount") is not None:
                transaction = transfers.set_amount(transaction, account_id, fields["amount"])
            if fields.get("cleared") is not None:
                transaction = transfers.set_cleared(transaction, account_id, fields["cleared"])
            if "category_id" in fields:
                if transaction.is_split or transaction.is_transfer:
                    raise ValidationError(f"Transaction {transaction_id} category is not editable")
                transaction = self.document.update(replace(transaction, category_id=fields["category_id"]))

        return self.document.get_transaction(transaction_id)

    async def delete_transaction(self, transaction_id: int) -> None:
        transaction = self.document.get_transaction(transaction_id)
        async with self.document.undoable("Delete transaction"):
            self.document.transfers.delete(transaction)

    # -------------------------------------------------------------------------
    # split
    # -------------------------------------------------------------------------

    async def add_split(self, transaction_id: int, request: SplitCreateRequest) -> SplitEntry:
        async with self.document.undoable("Add split", selection=transaction_id):
            parent = self.document.get_transaction(transaction_id)
            split = self.document.splits.new_split(parent)
            changes = _split_changes(request)
            if changes:
                split = self.document.splits.update_split(split, **changes)
        return split

    async def update_split(
        self,
        transaction_id: int,
        split_id: int,
        request: SplitUpdateRequest,
    ) -> SplitEntry:
        split = self._require_split(transaction_id, split_id)
        async with self.document.undoable("Edit split", selection=transaction_id):
            split = self.document.splits.update_split(split, **_split_changes(request))
        return split

    async def delete_split(self, transaction_id: int, split_id: int) -> None:
        split = self._require_split(transaction_id, split_id)
        async with self.document.undoable("Delete split", selection=transaction_id):
            parent = self.document.get_transaction(transaction_id)
            self.document.splits.delete_split(parent, split)

    def _require_split(self, transaction_id: int, split_id: int) -> SplitEntry:
        split = self.document.get_split(split_id)
        if split.parent_transaction_id != transaction_id:
            raise ValidationError(f"Split {split_id} does not belong to transaction {transaction_id}")
        return split

    # -------------------------------------------------------------------------
    # undo
    # -------------------------------------------------------------------------

    def undo_state(self) -> dict[str, Any]:
        return {
            "can_undo": self.document.can_undo,
            "can_redo": self.document.can_redo,
            "undo_caption": self.document.undo_caption,
            "redo_caption": self.document.redo_caption,
            "selection": self.document.selection,
        }

    async def undo(self) -> UndoUnit:
        unit = await self.document.undo()
        logger.info("Web undo", extra={"caption": unit.caption})
        return unit

    async def redo(self) -> UndoUnit:
        unit = await self.document.redo()
        logger.info("Web redo", extra={"caption": unit.caption})
        return unit


def _split_changes(request: SplitCreateRequest) -> dict[str, Any]:
    """지정된 split 필드 (amount는 null 불가)"""
    changes = request.model_dump(exclude_unset=True)
    if "amount" in changes and changes["amount"] is None:
        del changes["amount"]
    return changes
