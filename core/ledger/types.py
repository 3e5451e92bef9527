"""
Ledger 타입 정의

LedgerEntry: 거래(또는 이체 split)를 한 계좌 관점으로 투영한 행
LedgerDiff: Ledger 구조 변경 통지 (삽입/삭제/재배치 인덱스)
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from core.types import ClearedState, DiffKind


@dataclass(eq=False)
class LedgerEntry:
    """계좌 원장 행 (저장되지 않는 파생 데이터)

    balance는 Ledger가 관리하는 누적 잔액 캐시.
    None이면 아직 계산되지 않은 상태 (삽입/재배치 직후).

    정렬 키: (when 오름차순, amount 내림차순, id 오름차순, payee 오름차순)
    id는 문서 내에서 유일하므로 전순서(total order).
    """

    id: int
    account_id: int
    when: datetime
    amount: Decimal
    payee: str | None = None
    memo: str | None = None
    check_number: int | None = None
    cleared: ClearedState = ClearedState.NONE
    category_id: int | None = None
    transfer_account_id: int | None = None

    # split 투영 전용 (이체 split이 상대 계좌에 표시될 때)
    parent_transaction_id: int | None = None
    is_read_only: bool = False

    balance: Decimal | None = None

    @property
    def sort_key(self) -> tuple[datetime, Decimal, int, str]:
        return (self.when, -self.amount, self.id, self.payee or "")

    def same_content(self, other: "LedgerEntry") -> bool:
        """잔액을 제외한 모든 필드가 같은지"""
        return (
            self.sort_key == other.sort_key
            and self.account_id == other.account_id
            and self.memo == other.memo
            and self.check_number == other.check_number
            and self.cleared == other.cleared
            and self.category_id == other.category_id
            and self.transfer_account_id == other.transfer_account_id
            and self.parent_transaction_id == other.parent_transaction_id
            and self.is_read_only == other.is_read_only
        )


@dataclass(frozen=True)
class LedgerDiff:
    """Ledger 구조 변경

    - INSERTED: new_index에 삽입
    - REMOVED: old_index에서 삭제
    - REPOSITIONED: old_index → new_index (같을 수 있음: 표시 필드만 변경)
    """

    kind: DiffKind
    entry: LedgerEntry
    old_index: int | None = None
    new_index: int | None = None
