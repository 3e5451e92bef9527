"""
엔티티 도메인 모델

Account, Category, Asset, Transaction, SplitEntry.

모든 엔티티는 불변(frozen) dataclass. 수정은 dataclasses.replace로
새 값을 만들어 Document에 update 하는 방식이며, 덕분에 UndoUnit의
before/after 스냅샷은 단순 참조로 충분함.

id가 None이면 아직 저장소에서 id를 할당받지 않은 엔티티.
id는 모든 엔티티 종류가 하나의 시퀀스를 공유하므로 문서 내에서 유일.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Union

from core.constants import SPLIT_CATEGORY_ID
from core.types import AccountType, ClearedState, EntityKind, TransactionKind
from core.utils.timezone import ensure_utc, now_utc


def to_decimal(value: Decimal | int | str | None) -> Decimal | None:
    """금액을 Decimal로 변환 (float는 받지 않음)"""
    if value is None or isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        raise TypeError("금액에 float는 사용할 수 없습니다 (Decimal 또는 str 사용)")
    return Decimal(str(value))


@dataclass(frozen=True)
class Account:
    """계좌"""

    name: str
    id: int | None = None
    is_closed: bool = False
    type: AccountType = AccountType.BANKING
    currency_asset_id: int | None = None

    kind: ClassVar[EntityKind] = EntityKind.ACCOUNT


@dataclass(frozen=True)
class Category:
    """카테고리 (지출/수입 분류)"""

    name: str
    id: int | None = None
    parent_category_id: int | None = None

    kind: ClassVar[EntityKind] = EntityKind.CATEGORY


@dataclass(frozen=True)
class Asset:
    """자산 (통화 또는 증권)"""

    name: str
    id: int | None = None
    ticker_symbol: str | None = None

    kind: ClassVar[EntityKind] = EntityKind.ASSET


@dataclass(frozen=True)
class Transaction:
    """거래

    차변(debit) 측과 대변(credit) 측 중 하나 또는 둘 다 채워짐.
    - 입금: credit 측만 (credit_account_id 계좌의 잔액 증가)
    - 출금: debit 측만 (debit_account_id 계좌의 잔액 감소)
    - 이체: 양측 모두 (debit 계좌 → credit 계좌)

    금액은 각 측에서 항상 0 이상. 부호는 계좌 관점에서 amount_for()가 결정.
    정산 상태(cleared)는 측별로 독립.
    """

    when: datetime
    id: int | None = None
    payee: str | None = None
    memo: str | None = None
    check_number: int | None = None
    category_id: int | None = None

    debit_account_id: int | None = None
    debit_amount: Decimal | None = None
    debit_asset_id: int | None = None
    debit_cleared: ClearedState = ClearedState.NONE

    credit_account_id: int | None = None
    credit_amount: Decimal | None = None
    credit_asset_id: int | None = None
    credit_cleared: ClearedState = ClearedState.NONE

    kind: ClassVar[EntityKind] = EntityKind.TRANSACTION

    def __post_init__(self) -> None:
        object.__setattr__(self, "when", ensure_utc(self.when))
        object.__setattr__(self, "debit_amount", to_decimal(self.debit_amount))
        object.__setattr__(self, "credit_amount", to_decimal(self.credit_amount))

    # -------------------------------------------------------------------------
    # 생성 헬퍼
    # -------------------------------------------------------------------------

    @staticmethod
    def deposit(
        account_id: int,
        amount: Decimal | int | str,
        when: datetime | None = None,
        asset_id: int | None = None,
        **fields,
    ) -> "Transaction":
        """입금 거래 생성 (아직 Document에 추가되지 않음)"""
        return Transaction(
            when=when or now_utc(),
            credit_account_id=account_id,
            credit_amount=amount,
            credit_asset_id=asset_id,
            **fields,
        )

    @staticmethod
    def withdrawal(
        account_id: int,
        amount: Decimal | int | str,
        when: datetime | None = None,
        asset_id: int | None = None,
        **fields,
    ) -> "Transaction":
        """출금 거래 생성"""
        return Transaction(
            when=when or now_utc(),
            debit_account_id=account_id,
            debit_amount=amount,
            debit_asset_id=asset_id,
            **fields,
        )

    @staticmethod
    def transfer(
        from_account_id: int,
        to_account_id: int,
        amount: Decimal | int | str,
        when: datetime | None = None,
        asset_id: int | None = None,
        **fields,
    ) -> "Transaction":
        """이체 거래 생성 (from → to)"""
        return Transaction(
            when=when or now_utc(),
            debit_account_id=from_account_id,
            debit_amount=amount,
            debit_asset_id=asset_id,
            credit_account_id=to_account_id,
            credit_amount=amount,
            credit_asset_id=asset_id,
            **fields,
        )

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    @property
    def transaction_kind(self) -> TransactionKind:
        if self.debit_account_id is not None and self.credit_account_id is not None:
            return TransactionKind.TRANSFER
        if self.category_id == SPLIT_CATEGORY_ID:
            return TransactionKind.SPLIT
        return TransactionKind.SIMPLE

    @property
    def is_transfer(self) -> bool:
        return self.transaction_kind == TransactionKind.TRANSFER

    @property
    def is_split(self) -> bool:
        return self.category_id == SPLIT_CATEGORY_ID

    @property
    def account_ids(self) -> tuple[int, ...]:
        """이 거래가 참조하는 계좌 id (debit, credit 순)"""
        return tuple(
            account_id
            for account_id in (self.debit_account_id, self.credit_account_id)
            if account_id is not None
        )

    @property
    def home_account_id(self) -> int | None:
        """이체가 아닌 거래의 유일한 계좌 id"""
        if self.is_transfer:
            return None
        return self.credit_account_id if self.credit_account_id is not None else self.debit_account_id

    def references(self, account_id: int) -> bool:
        return account_id in self.account_ids

    def other_account_id(self, account_id: int) -> int | None:
        """이체 상대 계좌 id (이체가 아니면 None)"""
        if self.debit_account_id == account_id:
            return self.credit_account_id
        if self.credit_account_id == account_id:
            return self.debit_account_id
        return None

    def amount_for(self, account_id: int) -> Decimal:
        """계좌 관점의 부호 있는 금액 (입금 +, 출금 -)"""
        amount = Decimal("0")
        if self.credit_account_id == account_id:
            amount += self.credit_amount or Decimal("0")
        if self.debit_account_id == account_id:
            amount -= self.debit_amount or Decimal("0")
        return amount

    def cleared_for(self, account_id: int | None) -> ClearedState:
        if account_id is None:
            return ClearedState.NONE
        if self.credit_account_id == account_id:
            return self.credit_cleared
        if self.debit_account_id == account_id:
            return self.debit_cleared
        return ClearedState.NONE

    # -------------------------------------------------------------------------
    # 수정 (새 값 반환)
    # -------------------------------------------------------------------------

    def with_amount(self, account_id: int, amount: Decimal | int | str) -> "Transaction":
        """계좌 관점의 부호 있는 금액으로 변경

        부호가 바뀌면 debit/credit 측이 뒤바뀌며, 각 계좌의 정산 상태는
        계좌를 따라 이동.
        """
        other_account_id = self.other_account_id(account_id)
        return self._oriented(
            account_id,
            to_decimal(amount),
            other_account_id,
            self.cleared_for(account_id),
            self.cleared_for(other_account_id),
        )

    def with_transfer_account(self, account_id: int, other_account_id: int | None) -> "Transaction":
        """이체 상대 계좌 지정/해제 (금액은 account_id 관점 유지)"""
        transaction = self._oriented(
            account_id,
            self.amount_for(account_id),
            other_account_id,
            self.cleared_for(account_id),
            ClearedState.NONE,
        )
        if other_account_id is not None:
            # 이체에는 카테고리가 없음
            transaction = replace(transaction, category_id=None)
        return transaction

    def with_cleared(self, account_id: int, state: ClearedState) -> "Transaction":
        if self.credit_account_id == account_id:
            return replace(self, credit_cleared=state)
        if self.debit_account_id == account_id:
            return replace(self, debit_cleared=state)
        raise ValueError(f"Transaction {self.id} does not reference account {account_id}")

    def _oriented(
        self,
        account_id: int,
        amount: Decimal,
        other_account_id: int | None,
        cleared: ClearedState,
        other_cleared: ClearedState,
    ) -> "Transaction":
        asset_id = self.credit_asset_id if self.credit_asset_id is not None else self.debit_asset_id
        magnitude = abs(amount)
        mine = (account_id, magnitude, asset_id, cleared)
        if other_account_id is not None:
            theirs = (other_account_id, magnitude, asset_id, other_cleared)
        else:
            theirs = (None, None, None, ClearedState.NONE)

        debit, credit = (mine, theirs) if amount < 0 else (theirs, mine)
        return replace(
            self,
            debit_account_id=debit[0],
            debit_amount=debit[1],
            debit_asset_id=debit[2],
            debit_cleared=debit[3],
            credit_account_id=credit[0],
            credit_amount=credit[1],
            credit_asset_id=credit[2],
            credit_cleared=credit[3],
        )


@dataclass(frozen=True)
class SplitEntry:
    """분할 거래의 한 줄

    amount는 부모 거래의 home 계좌 관점 부호 있는 금액.
    category_id와 transfer_account_id는 둘 중 하나만 지정.
    """

    parent_transaction_id: int
    amount: Decimal = Decimal("0")
    id: int | None = None
    category_id: int | None = None
    transfer_account_id: int | None = None
    memo: str | None = None

    kind: ClassVar[EntityKind] = EntityKind.SPLIT

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))


Entity = Union[Account, Category, Asset, Transaction, SplitEntry]

ENTITY_TYPES: dict[EntityKind, type] = {
    EntityKind.ACCOUNT: Account,
    EntityKind.CATEGORY: Category,
    EntityKind.ASSET: Asset,
    EntityKind.TRANSACTION: Transaction,
    EntityKind.SPLIT: SplitEntry,
}


def entity_key(entity: Entity) -> tuple[EntityKind, int]:
    """(종류, id) 키. id 미할당 엔티티는 키를 가질 수 없음"""
    if entity.id is None:
        raise ValueError(f"{type(entity).__name__} has no id yet")
    return entity.kind, entity.id
