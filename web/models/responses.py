"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화 (금액은 문자열)
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from core.domain.models import Account, Category, SplitEntry, Transaction
from core.ledger.types import LedgerEntry


def _amount(value: Decimal | None) -> str | None:
    return str(value) if value is not None else None


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    version: str = Field(..., description="API 버전")
    document_open: bool = Field(..., description="문서 열림 여부")
    timestamp: datetime = Field(..., description="응답 시간 (UTC)")


class AccountResponse(BaseModel):
    """계좌 응답"""

    id: int = Field(..., description="계좌 ID")
    name: str = Field(..., description="계좌 이름")
    type: str = Field(..., description="계좌 유형")
    is_closed: bool = Field(..., description="닫힘 여부")
    currency_asset_id: int | None = Field(default=None, description="통화 자산 ID")
    balance: str = Field(..., description="잔액")

    @classmethod
    def from_account(cls, account: Account, balance: Decimal) -> "AccountResponse":
        return cls(
            id=account.id,
            name=account.name,
            type=account.type.value,
            is_closed=account.is_closed,
            currency_asset_id=account.currency_asset_id,
            balance=str(balance),
        )


class CategoryResponse(BaseModel):
    """카테고리 응답"""

    id: int = Field(..., description="카테고리 ID")
    name: str = Field(..., description="카테고리 이름")
    parent_category_id: int | None = Field(default=None, description="상위 카테고리 ID")

    @classmethod
    def from_category(cls, category: Category) -> "CategoryResponse":
        return cls(id=category.id, name=category.name, parent_category_id=category.parent_category_id)


class LedgerEntryResponse(BaseModel):
    """원장 행 응답"""

    id: int = Field(..., description="거래 ID (이체 split이면 split ID)")
    when: datetime = Field(..., description="거래 시간 (UTC)")
    payee: str | None = Field(default=None, description="거래처")
    memo: str | None = Field(default=None, description="메모")
    check_number: int | None = Field(default=None, description="수표 번호")
    amount: str = Field(..., description="계좌 관점 금액")
    balance: str = Field(..., description="누적 잔액")
    cleared: str = Field(..., description="정산 상태")
    category_id: int | None = Field(default=None, description="카테고리 ID (-1: 분할)")
    transfer_account_id: int | None = Field(default=None, description="이체 상대 계좌 ID")
    parent_transaction_id: int | None = Field(default=None, description="split 투영의 부모 거래 ID")
    read_only: bool = Field(default=False, description="읽기 전용 (split 투영)")

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> "LedgerEntryResponse":
        return cls(
            id=entry.id,
            when=entry.when,
            payee=entry.payee,
            memo=entry.memo,
            check_number=entry.check_number,
            amount=str(entry.amount),
            balance=str(entry.balance),
            cleared=entry.cleared.value,
            category_id=entry.category_id,
            transfer_account_id=entry.transfer_account_id,
            parent_transaction_id=entry.parent_transaction_id,
            read_only=entry.is_read_only,
        )


class LedgerResponse(BaseModel):
    """계좌 원장 응답"""

    account_id: int = Field(..., description="계좌 ID")
    balance: str = Field(..., description="최종 잔액")
    entries: list[LedgerEntryResponse] = Field(default_factory=list, description="정렬된 원장 행")


class SplitResponse(BaseModel):
    """split 응답"""

    id: int = Field(..., description="split ID")
    parent_transaction_id: int = Field(..., description="부모 거래 ID")
    amount: str = Field(..., description="부모 home 계좌 관점 금액")
    category_id: int | None = Field(default=None, description="카테고리 ID")
    transfer_account_id: int | None = Field(default=None, description="이체 상대 계좌 ID")
    memo: str | None = Field(default=None, description="메모")

    @classmethod
    def from_split(cls, split: SplitEntry) -> "SplitResponse":
        return cls(
            id=split.id,
            parent_transaction_id=split.parent_transaction_id,
            amount=str(split.amount),
            category_id=split.category_id,
            transfer_account_id=split.transfer_account_id,
            memo=split.memo,
        )


class TransactionResponse(BaseModel):
    """거래 응답"""

    id: int = Field(..., description="거래 ID")
    kind: str = Field(..., description="SIMPLE / SPLIT / TRANSFER")
    when: datetime = Field(..., description="거래 시간 (UTC)")
    payee: str | None = Field(default=None, description="거래처")
    memo: str | None = Field(default=None, description="메모")
    check_number: int | None = Field(default=None, description="수표 번호")
    category_id: int | None = Field(default=None, description="카테고리 ID")
    debit_account_id: int | None = Field(default=None, description="출금 계좌 ID")
    debit_amount: str | None = Field(default=None, description="출금 금액")
    debit_cleared: str = Field(..., description="출금 측 정산 상태")
    credit_account_id: int | None = Field(default=None, description="입금 계좌 ID")
    credit_amount: str | None = Field(default=None, description="입금 금액")
    credit_cleared: str = Field(..., description="입금 측 정산 상태")
    splits: list[SplitResponse] = Field(default_factory=list, description="split 목록")

    @classmethod
    def from_transaction(
        cls,
        transaction: Transaction,
        splits: list[SplitEntry] | None = None,
    ) -> "TransactionResponse":
        return cls(
            id=transaction.id,
            kind=transaction.transaction_kind.value,
            when=transaction.when,
            payee=transaction.payee,
            memo=transaction.memo,
            check_number=transaction.check_number,
            category_id=transaction.category_id,
            debit_account_id=transaction.debit_account_id,
            debit_amount=_amount(transaction.debit_amount),
            debit_cleared=transaction.debit_cleared.value,
            credit_account_id=transaction.credit_account_id,
            credit_amount=_amount(transaction.credit_amount),
            credit_cleared=transaction.credit_cleared.value,
            splits=[SplitResponse.from_split(split) for split in splits or []],
        )


class UndoStateResponse(BaseModel):
    """undo/redo 상태 응답"""

    can_undo: bool = Field(..., description="undo 가능 여부")
    can_redo: bool = Field(..., description="redo 가능 여부")
    undo_caption: str | None = Field(default=None, description="다음 undo 작업 설명")
    redo_caption: str | None = Field(default=None, description="다음 redo 작업 설명")
    selection: Any = Field(default=None, description="마지막 undo/redo가 복원한 선택 힌트")


class NetWorthResponse(BaseModel):
    """순자산 응답"""

    net_worth: str = Field(..., description="닫히지 않은 계좌 잔액 합")
    accounts: list[AccountResponse] = Field(default_factory=list, description="계좌별 잔액")
