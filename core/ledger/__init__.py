"""
계좌 원장 (Ledger) 시스템

계좌별로 정렬된 거래 행과 누적 잔액을 증분 유지.
분할 거래와 이체 거래의 투영/편집 규칙 포함.

사용 예시:
```python
from core.ledger import Ledger, LedgerEntry

ledger = document.ledger(account.id)
for entry in ledger.get_entries():
    print(entry.when, entry.payee, entry.amount, entry.balance)

# 순자산
print(document.net_worth.net_worth)
```
"""

from core.ledger.book import LedgerBook
from core.ledger.ledger import Ledger, LedgerListener
from core.ledger.net_worth import NetWorthTracker, balance_contributions
from core.ledger.splits import SplitCoordinator
from core.ledger.transfers import TransferSynchronizer, project_split, project_transaction
from core.ledger.types import LedgerDiff, LedgerEntry

__all__ = [
    # 핵심 클래스
    "Ledger",
    "LedgerBook",
    "NetWorthTracker",
    "SplitCoordinator",
    "TransferSynchronizer",
    # 타입
    "LedgerEntry",
    "LedgerDiff",
    "LedgerListener",
    # 투영
    "project_transaction",
    "project_split",
    "balance_contributions",
]
