"""
core/ledger/ledger.py 테스트

정렬, 누적 잔액 불변식, short-circuit 재계산, LedgerDiff 통지
"""

import random
from decimal import Decimal

import pytest

from core.domain.errors import InvariantViolation
from core.ledger.ledger import Ledger
from core.ledger.types import LedgerDiff, LedgerEntry
from core.types import DiffKind
from tests.utils.helpers import day


def make_entry(entry_id: int, amount: str, offset: int, payee: str | None = None, account_id: int = 1) -> LedgerEntry:
    return LedgerEntry(
        id=entry_id,
        account_id=account_id,
        when=day(offset),
        amount=Decimal(amount),
        payee=payee,
    )


def running(ledger: Ledger) -> list[tuple[int, Decimal]]:
    return [(entry.id, entry.balance) for entry in ledger.get_entries()]


class TestLedgerInsert:
    """삽입 + 잔액"""

    def test_balances_follow_insertion_scenario(self) -> None:
        """5 → 8 → 앞에 4 삽입"""
        ledger = Ledger(account_id=1)

        ledger.insert(make_entry(1, "5", offset=1))
        ledger.insert(make_entry(2, "8", offset=2))
        assert running(ledger) == [(1, Decimal("5")), (2, Decimal("13"))]

        ledger.insert(make_entry(3, "4", offset=0))
        assert running(ledger) == [(3, Decimal("4")), (1, Decimal("9")), (2, Decimal("17"))]
        assert ledger.balance == Decimal("17")

    def test_empty_ledger_balance_is_zero(self) -> None:
        assert Ledger(account_id=1).balance == Decimal("0")

    def test_same_day_sorted_by_amount_descending(self) -> None:
        """같은 날짜는 금액 내림차순 (입금이 출금보다 먼저)"""
        ledger = Ledger(account_id=1)
        ledger.insert(make_entry(1, "-20", offset=0))
        ledger.insert(make_entry(2, "50", offset=0))
        ledger.insert(make_entry(3, "10", offset=0))

        assert [entry.id for entry in ledger.get_entries()] == [2, 3, 1]

    def test_ties_broken_by_id(self) -> None:
        ledger = Ledger(account_id=1)
        ledger.insert(make_entry(9, "1", offset=0))
        ledger.insert(make_entry(4, "1", offset=0))

        assert [entry.id for entry in ledger.get_entries()] == [4, 9]

    def test_duplicate_id_rejected(self) -> None:
        """같은 id 중복 삽입은 불변식 위반"""
        ledger = Ledger(account_id=1)
        ledger.insert(make_entry(1, "5", offset=0))

        with pytest.raises(InvariantViolation):
            ledger.insert(make_entry(1, "7", offset=1))

    def test_other_account_rejected(self) -> None:
        ledger = Ledger(account_id=1)

        with pytest.raises(InvariantViolation):
            ledger.insert(make_entry(1, "5", offset=0, account_id=2))

    def test_stale_balance_on_new_entry_is_ignored(self) -> None:
        """삽입되는 행의 기존 balance 값은 무시하고 다시 계산"""
        ledger = Ledger(account_id=1)
        ledger.insert(make_entry(1, "5", offset=0))
        entry = make_entry(2, "5", offset=1)
        entry.balance = Decimal("10")  # 우연히 맞는 값이어도 재계산 대상

        ledger.insert(entry)

        assert running(ledger) == [(1, Decimal("5")), (2, Decimal("10"))]
        ledger.verify()


class TestLedgerRemove:
    """삭제"""

    def test_remove_recomputes_following(self) -> None:
        ledger = Ledger(account_id=1)
        for entry_id, amount, offset in [(1, "5", 0), (2, "8", 1), (3, "4", 2)]:
            ledger.insert(make_entry(entry_id, amount, offset))

        removed = ledger.remove(2)

        assert removed.id == 2
        assert running(ledger) == [(1, Decimal("5")), (3, Decimal("9"))]
        assert 2 not in ledger

    def test_remove_last(self) -> None:
        ledger = Ledger(account_id=1)
        ledger.insert(make_entry(1, "5", offset=0))
        ledger.insert(make_entry(2, "8", offset=1))

        ledger.remove(2)

        assert ledger.balance == Decimal("5")

    def test_remove_missing_raises(self) -> None:
        with pytest.raises(InvariantViolation):
            Ledger(account_id=1).remove(42)


class TestLedgerReposition:
    """재배치"""

    def test_move_later(self) -> None:
        ledger = Ledger(account_id=1)
        for entry_id, amount, offset in [(1, "5", 0), (2, "8", 1), (3, "4", 2)]:
            ledger.insert(make_entry(entry_id, amount, offset))

        new_index = ledger.reposition(make_entry(1, "5", offset=5))

        assert new_index == 2
        assert running(ledger) == [(2, Decimal("8")), (3, Decimal("12")), (1, Decimal("17"))]
        ledger.verify()

    def test_move_earlier_with_new_amount(self) -> None:
        ledger = Ledger(account_id=1)
        for entry_id, amount, offset in [(1, "5", 0), (2, "8", 1), (3, "4", 2)]:
            ledger.insert(make_entry(entry_id, amount, offset))

        ledger.reposition(make_entry(3, "-10", offset=-1))

        assert running(ledger) == [(3, Decimal("-10")), (1, Decimal("-5")), (2, Decimal("3"))]
        ledger.verify()

    def test_amount_change_in_place_updates_following(self) -> None:
        ledger = Ledger(account_id=1)
        for entry_id, amount, offset in [(1, "5", 0), (2, "8", 1), (3, "4", 2)]:
            ledger.insert(make_entry(entry_id, amount, offset))

        ledger.reposition(make_entry(2, "1", offset=1))

        assert running(ledger) == [(1, Decimal("5")), (2, Decimal("6")), (3, Decimal("10"))]

    def test_zero_amount_moving_earlier_updates_rows_after_old_position(self) -> None:
        """같은 날 -5 출금을 0으로 수정 → 앞으로 이동, 이후 행은 +5"""
        ledger = Ledger(account_id=1)
        for entry_id, amount, offset in [(1, "2", 1), (2, "-1", 1), (3, "-5", 1), (4, "10", 2)]:
            ledger.insert(make_entry(entry_id, amount, offset))
        assert running(ledger) == [(1, Decimal("2")), (2, Decimal("1")), (3, Decimal("-4")), (4, Decimal("6"))]

        new_index = ledger.reposition(make_entry(3, "0", offset=1))

        assert new_index == 1
        assert running(ledger) == [(1, Decimal("2")), (3, Decimal("2")), (2, Decimal("1")), (4, Decimal("11"))]
        ledger.verify()

    def test_zero_amount_entry_removed(self) -> None:
        ledger = Ledger(account_id=1)
        for entry_id, amount, offset in [(1, "3", 0), (2, "0", 1), (3, "4", 2)]:
            ledger.insert(make_entry(entry_id, amount, offset))

        ledger.remove(2)

        assert running(ledger) == [(1, Decimal("3")), (3, Decimal("7"))]
        ledger.verify()

    def test_display_only_change_keeps_balance(self) -> None:
        """정렬 키가 같으면 같은 위치에서 교체"""
        ledger = Ledger(account_id=1)
        ledger.insert(make_entry(1, "5", offset=0, payee="Cafe"))
        ledger.insert(make_entry(2, "8", offset=1))

        updated = make_entry(1, "5", offset=0, payee="Cafe")
        updated.memo = "latte"
        index = ledger.reposition(updated)

        assert index == 0
        assert ledger.get(1).memo == "latte"
        assert ledger.get(1).balance == Decimal("5")

    def test_reposition_missing_raises(self) -> None:
        with pytest.raises(InvariantViolation):
            Ledger(account_id=1).reposition(make_entry(1, "5", offset=0))


class TestLedgerDiffs:
    """LedgerDiff 통지"""

    def test_listener_receives_structural_diffs(self) -> None:
        ledger = Ledger(account_id=1)
        diffs: list[LedgerDiff] = []
        ledger.add_listener(diffs.append)

        ledger.insert(make_entry(1, "5", offset=1))
        ledger.insert(make_entry(2, "8", offset=0))
        ledger.reposition(make_entry(2, "8", offset=3))
        ledger.remove(1)

        assert [(d.kind, d.entry.id, d.old_index, d.new_index) for d in diffs] == [
            (DiffKind.INSERTED, 1, None, 0),
            (DiffKind.INSERTED, 2, None, 0),
            (DiffKind.REPOSITIONED, 2, 0, 1),
            (DiffKind.REMOVED, 1, 0, None),
        ]

    def test_removed_listener_not_called(self) -> None:
        ledger = Ledger(account_id=1)
        diffs: list[LedgerDiff] = []
        ledger.add_listener(diffs.append)
        ledger.remove_listener(diffs.append)

        ledger.insert(make_entry(1, "5", offset=0))

        assert diffs == []


class TestLedgerVerify:
    """verify / recompute_all"""

    def test_verify_detects_drift(self) -> None:
        ledger = Ledger(account_id=1)
        ledger.insert(make_entry(1, "5", offset=0))
        ledger.insert(make_entry(2, "8", offset=1))

        ledger.get(2).balance = Decimal("99")

        with pytest.raises(InvariantViolation):
            ledger.verify()

        ledger.recompute_all()
        ledger.verify()


class TestIncrementalMatchesFullRecompute:
    """임의 편집 시퀀스에서 증분 재계산 == 전체 재계산"""

    @pytest.mark.parametrize("seed", [1, 7, 42, 2026])
    def test_random_edits(self, seed: int) -> None:
        rng = random.Random(seed)
        incremental = Ledger(account_id=1)
        full = Ledger(account_id=1, full_recompute=True)
        next_id = 1

        def random_entry(entry_id: int) -> tuple[LedgerEntry, LedgerEntry]:
            # 0 금액과 같은 날짜 동률이 자주 나오도록 좁은 범위에서 추출
            amount = rng.choice(["0", "0", "0", str(rng.randint(-9, 9)), str(rng.randint(-500, 500))])
            offset = rng.randint(0, 3)
            payee = rng.choice([None, "A", "B"])
            return (
                make_entry(entry_id, amount, offset, payee),
                make_entry(entry_id, amount, offset, payee),
            )

        for _ in range(300):
            existing = [entry.id for entry in incremental.get_entries()]
            action = rng.random()

            if action < 0.45 or not existing:
                first, second = random_entry(next_id)
                next_id += 1
                incremental.insert(first)
                full.insert(second)
            elif action < 0.7:
                entry_id = rng.choice(existing)
                incremental.remove(entry_id)
                full.remove(entry_id)
            else:
                entry_id = rng.choice(existing)
                first, second = random_entry(entry_id)
                incremental.reposition(first)
                full.reposition(second)

            assert running(incremental) == running(full)

        incremental.verify()
        full.verify()
