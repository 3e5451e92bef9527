"""
계좌별 Ledger

정렬된 LedgerEntry 목록과 누적 잔액을 증분 방식으로 유지.

잔액 불변식 (정렬된 e[0..n)):
    balance(e[0]) = amount(e[0])
    balance(e[i]) = balance(e[i-1]) + amount(e[i])
"""

import bisect
import logging
from decimal import Decimal
from typing import Callable, Iterator

from core.domain.errors import InvariantViolation
from core.ledger.types import LedgerDiff, LedgerEntry
from core.types import DiffKind

logger = logging.getLogger(__name__)

LedgerListener = Callable[[LedgerDiff], None]


class Ledger:
    """계좌 하나의 원장

    Args:
        account_id: 계좌 id
        full_recompute: True면 short-circuit 없이 항상 끝까지 재계산

    사용 예시:
    ```python
    ledger = Ledger(account_id=1)
    ledger.insert(entry)
    ledger.reposition(updated_entry)   # 정렬 키 변경
    ledger.remove(entry.id)

    for entry in ledger.get_entries():
        print(entry.when, entry.amount, entry.balance)
    ```
    """

    def __init__(self, account_id: int, full_recompute: bool = False):
        self.account_id = account_id
        self.full_recompute = full_recompute

        # _entries와 _keys는 항상 같은 순서, 같은 길이
        self._entries: list[LedgerEntry] = []
        self._keys: list[tuple] = []
        self._by_id: dict[int, LedgerEntry] = {}

        self._listeners: list[LedgerListener] = []

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LedgerEntry]:
        return iter(list(self._entries))

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._by_id

    def get_entries(self) -> list[LedgerEntry]:
        """정렬된 원장 행 목록 (복사본)"""
        return list(self._entries)

    def get(self, entry_id: int) -> LedgerEntry | None:
        return self._by_id.get(entry_id)

    def index_of(self, entry_id: int) -> int:
        entry = self._by_id.get(entry_id)
        if entry is None:
            raise InvariantViolation(f"Ledger {self.account_id} has no entry {entry_id}")
        index = bisect.bisect_left(self._keys, entry.sort_key)
        return index

    @property
    def balance(self) -> Decimal:
        """계좌 최종 잔액 (마지막 행의 누적 잔액)"""
        if not self._entries:
            return Decimal("0")
        return self._entries[-1].balance

    # -------------------------------------------------------------------------
    # 변경
    # -------------------------------------------------------------------------

    def insert(self, entry: LedgerEntry) -> int:
        """행 삽입 후 삽입 위치부터 잔액 재계산

        Returns:
            삽입된 인덱스

        Raises:
            InvariantViolation: 중복 id 또는 다른 계좌의 행
        """
        if entry.id in self._by_id:
            raise InvariantViolation(f"Duplicate ledger entry {entry.id} in account {self.account_id}")
        if entry.account_id != self.account_id:
            raise InvariantViolation(
                f"Entry {entry.id} belongs to account {entry.account_id}, not {self.account_id}"
            )

        entry.balance = None
        index = self._insert_sorted(entry)
        self._recompute(index, index)
        self._emit(LedgerDiff(DiffKind.INSERTED, entry, new_index=index))
        return index

    def remove(self, entry_id: int) -> LedgerEntry:
        """행 삭제 후 비워진 위치부터 잔액 재계산

        Returns:
            삭제된 행
        """
        index = self.index_of(entry_id)
        entry = self._entries.pop(index)
        del self._keys[index]
        del self._by_id[entry_id]

        self._recompute(index, index)
        self._emit(LedgerDiff(DiffKind.REMOVED, entry, old_index=index))
        return entry

    def reposition(self, entry: LedgerEntry) -> int:
        """같은 id의 행을 새 값으로 교체

        정렬 키(금액 포함)가 바뀌면 삭제 후 재삽입하고, 이전/새 위치를
        모두 포함하는 구간(min..max)을 재계산.
        정렬 키가 같으면 표시 필드만 교체하며 잔액은 그대로 유지.

        Returns:
            새 인덱스
        """
        old_index = self.index_of(entry.id)
        old_entry = self._entries[old_index]

        if old_entry.sort_key == entry.sort_key:
            entry.balance = old_entry.balance
            self._entries[old_index] = entry
            self._by_id[entry.id] = entry
            self._emit(LedgerDiff(DiffKind.REPOSITIONED, entry, old_index, old_index))
            return old_index

        del self._entries[old_index]
        del self._keys[old_index]
        del self._by_id[entry.id]

        entry.balance = None
        new_index = self._insert_sorted(entry)
        self._recompute(min(old_index, new_index), max(old_index, new_index))
        self._emit(LedgerDiff(DiffKind.REPOSITIONED, entry, old_index, new_index))
        return new_index

    def recompute_all(self) -> None:
        """처음부터 끝까지 무조건 재계산"""
        balance = Decimal("0")
        for entry in self._entries:
            balance += entry.amount
            entry.balance = balance

    def verify(self) -> None:
        """캐시된 잔액이 전체 재계산 결과와 같은지 검증

        Raises:
            InvariantViolation: 잔액 불일치
        """
        balance = Decimal("0")
        for index, entry in enumerate(self._entries):
            balance += entry.amount
            if entry.balance != balance:
                raise InvariantViolation(
                    f"Ledger {self.account_id} balance drift at index {index}: "
                    f"cached={entry.balance} expected={balance}"
                )

    def add_listener(self, listener: LedgerListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: LedgerListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # -------------------------------------------------------------------------
    # 내부
    # -------------------------------------------------------------------------

    def _insert_sorted(self, entry: LedgerEntry) -> int:
        key = entry.sort_key
        index = bisect.bisect_left(self._keys, key)
        self._entries.insert(index, entry)
        self._keys.insert(index, key)
        self._by_id[entry.id] = entry
        return index

    def _recompute(self, start: int, end: int) -> None:
        """start부터 누적 잔액 재계산

        end를 지난 행에서 새로 계산한 잔액이 기존 캐시와 같으면 이후 행은
        모두 그대로이므로 중단 (short-circuit). end 위치의 행은 앞쪽으로
        이동한 행에 밀려 온 행일 수 있어 비교 대상이 아님.
        full_recompute 모드에서는 끝까지 진행.
        """
        if self.full_recompute:
            end = len(self._entries)

        balance = self._entries[start - 1].balance if start > 0 else Decimal("0")
        for index in range(start, len(self._entries)):
            entry = self._entries[index]
            balance += entry.amount
            if index > end and entry.balance == balance:
                return
            entry.balance = balance

    def _emit(self, diff: LedgerDiff) -> None:
        for listener in list(self._listeners):
            listener(diff)
