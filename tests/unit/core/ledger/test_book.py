"""
core/ledger/book.py 테스트

지연 생성, ChangeSet 기반 증분 갱신, 계좌 삭제 시 Ledger 제거
"""

import random
from dataclasses import replace
from decimal import Decimal

import pytest

from core.document import Document
from core.domain.errors import EntityNotFoundError
from core.domain.models import Account, Transaction
from core.ledger.book import LedgerBook
from core.types import EntityKind
from tests.utils.helpers import Fixtures, balances, day, ids


class TestLedgerBookMaterialization:
    """지연 생성"""

    @pytest.mark.asyncio
    async def test_ledger_created_on_first_request(self, document: Document, basics: Fixtures) -> None:
        async with document.undoable("Deposits"):
            document.insert(Transaction.deposit(basics.checking.id, "5", when=day(1)))
            document.insert(Transaction.deposit(basics.checking.id, "8", when=day(2)))

        assert basics.checking.id not in document.ledgers

        ledger = document.ledger(basics.checking.id)

        assert basics.checking.id in document.ledgers
        assert [entry.balance for entry in ledger.get_entries()] == [Decimal("5"), Decimal("13")]

    @pytest.mark.asyncio
    async def test_unknown_account_raises(self, document: Document) -> None:
        with pytest.raises(EntityNotFoundError):
            document.ledger(999)

    @pytest.mark.asyncio
    async def test_unmaterialized_ledgers_are_untouched(self, document: Document, basics: Fixtures) -> None:
        document.ledger(basics.checking.id)

        async with document.undoable("Deposit"):
            document.insert(Transaction.deposit(basics.savings.id, "10", when=day(0)))

        assert document.ledgers.materialized_account_ids == [basics.checking.id]


class TestLedgerBookUpdates:
    """커밋/undo/redo 반영"""

    @pytest.mark.asyncio
    async def test_insert_earlier_transaction(self, document: Document, basics: Fixtures) -> None:
        """5, 8 다음 더 이른 날짜의 4 삽입"""
        account_id = basics.checking.id
        async with document.undoable("tx1"):
            tx1 = document.insert(Transaction.deposit(account_id, "5", when=day(1)))
        async with document.undoable("tx2"):
            tx2 = document.insert(Transaction.deposit(account_id, "8", when=day(2)))

        assert balances(document, account_id) == [(tx1.id, Decimal("5")), (tx2.id, Decimal("13"))]

        async with document.undoable("tx0"):
            tx0 = document.insert(Transaction.deposit(account_id, "4", when=day(0)))

        assert balances(document, account_id) == [
            (tx0.id, Decimal("4")),
            (tx1.id, Decimal("9")),
            (tx2.id, Decimal("17")),
        ]

    @pytest.mark.asyncio
    async def test_undo_redo_restore_ledger(self, document: Document, basics: Fixtures) -> None:
        account_id = basics.checking.id
        async with document.undoable("tx1"):
            document.insert(Transaction.deposit(account_id, "5", when=day(1)))
        before = balances(document, account_id)

        async with document.undoable("tx2"):
            document.insert(Transaction.withdrawal(account_id, "3", when=day(0)))
        after = balances(document, account_id)

        await document.undo()
        assert balances(document, account_id) == before

        await document.redo()
        assert balances(document, account_id) == after

    @pytest.mark.asyncio
    async def test_date_edit_repositions(self, document: Document, basics: Fixtures) -> None:
        account_id = basics.checking.id
        async with document.undoable("Setup"):
            first = document.insert(Transaction.deposit(account_id, "5", when=day(1)))
            second = document.insert(Transaction.deposit(account_id, "8", when=day(2)))
        document.ledger(account_id)

        async with document.undoable("Move"):
            document.update(replace(first, when=day(3)))

        assert ids(document, account_id) == [second.id, first.id]
        document.ledgers.verify()

    @pytest.mark.asyncio
    async def test_account_deletion_drops_ledger(self, document: Document) -> None:
        async with document.undoable("Add"):
            account = document.insert(Account(name="Temp"))
        document.ledger(account.id)

        async with document.undoable("Delete"):
            document.delete_account(account)

        assert account.id not in document.ledgers
        with pytest.raises(EntityNotFoundError):
            document.ledger(account.id)

    @pytest.mark.asyncio
    async def test_full_recompute_mode(self, store, basics: Fixtures) -> None:
        """full_recompute Document도 같은 잔액"""
        document = await Document.open(store, full_recompute=True)

        async with document.undoable("Setup"):
            document.insert(Transaction.deposit(basics.checking.id, "5", when=day(1)))
            document.insert(Transaction.deposit(basics.checking.id, "8", when=day(0)))

        ledger = document.ledger(basics.checking.id)

        assert ledger.full_recompute is True
        assert ledger.balance == Decimal("13")


def assert_matches_rebuild(document: Document) -> None:
    """증분 유지된 Ledger == 캐시에서 새로 만든 전체 재계산 Ledger"""
    document.ledgers.verify()
    rebuilt = LedgerBook(document, full_recompute=True)
    for account_id in document.ledgers.materialized_account_ids:
        actual = [(e.id, e.when, e.amount, e.balance) for e in document.ledger(account_id).get_entries()]
        expected = [(e.id, e.when, e.amount, e.balance) for e in rebuilt.ledger(account_id).get_entries()]
        assert actual == expected
        assert document.net_worth.balance(account_id) == document.balance(account_id)


class TestLedgerBookRandomScopes:
    """scope마다 여러 거래/split을 임의로 수정해도 Ledger는 전체 재계산과 일치"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("seed", [3, 11, 29, 404, 2026])
    async def test_random_scopes(self, document: Document, basics: Fixtures, seed: int) -> None:
        rng = random.Random(seed)
        accounts = [basics.checking.id, basics.savings.id, basics.card.id]
        for account_id in accounts:
            document.ledger(account_id)

        def amount() -> str:
            # 0과 작은 금액 위주 (같은 날짜 동률, 0 금액 재배치)
            return rng.choice(["0", "0", str(rng.randint(-5, 5)), str(rng.randint(-300, 300))])

        def when():
            return day(rng.randint(0, 3))

        def other_than(account_id: int) -> int:
            return rng.choice([a for a in accounts if a != account_id])

        def edit() -> None:
            transactions = document.cache.of_kind(EntityKind.TRANSACTION)
            action = rng.random()

            if action < 0.3 or not transactions:
                account_id = rng.choice(accounts)
                draft = Transaction(when=when()).with_amount(account_id, amount())
                if rng.random() < 0.3:
                    draft = draft.with_transfer_account(account_id, other_than(account_id))
                document.insert(draft)
                return

            tx = rng.choice(transactions)
            if action < 0.45:
                if not tx.is_split:
                    document.transfers.set_amount(tx, rng.choice(tx.account_ids), amount())
            elif action < 0.6:
                document.transfers.update_shared(tx, when=when(), payee=rng.choice([None, "A", "B"]))
            elif action < 0.68:
                document.transfers.delete(tx)
            elif not tx.is_transfer:
                splits = document.splits_of(tx.id)
                if splits and rng.random() < 0.5:
                    split = rng.choice(splits)
                    if rng.random() < 0.5:
                        document.splits.update_split(split, amount=amount())
                    else:
                        document.splits.delete_split(tx, split)
                else:
                    split = document.splits.new_split(tx)
                    changes = {"amount": amount()}
                    if rng.random() < 0.4:
                        changes["transfer_account_id"] = other_than(tx.home_account_id)
                    document.splits.update_split(split, **changes)

        for step in range(60):
            if rng.random() < 0.15:
                # 롤백되는 scope: 도중에 Ledger를 새로 만들어 미커밋 상태를 읽게 함
                dropped = rng.choice(accounts)
                document.ledgers.drop(dropped)
                with pytest.raises(RuntimeError):
                    async with document.undoable(f"Aborted {step}"):
                        for _ in range(rng.randint(1, 4)):
                            edit()
                        document.ledger(dropped)
                        raise RuntimeError("abort")
            else:
                async with document.undoable(f"Step {step}"):
                    for _ in range(rng.randint(1, 4)):
                        edit()

                if document.can_undo and rng.random() < 0.2:
                    await document.undo()
                    assert_matches_rebuild(document)
                    if rng.random() < 0.5:
                        await document.redo()

            assert_matches_rebuild(document)
