"""
Mock 엔티티 저장소 테스트
"""

import pytest

from adapters.mock.entity_store import MockEntityStore, StoreOperation
from core.domain.errors import FatalConsistencyError, StorageError
from core.domain.models import Account
from core.types import EntityKind


class TestMockEntityStore:
    """MockEntityStore 기본 동작"""

    @pytest.mark.asyncio
    async def test_crud_records_operations(self) -> None:
        store = MockEntityStore()
        account = Account(name="A", id=store.reserve_id())

        await store.insert(account)
        await store.update(Account(name="B", id=account.id))
        assert (await store.query(EntityKind.ACCOUNT))[0].name == "B"
        assert await store.delete(account) is True

        assert store.operations == [
            StoreOperation("insert", EntityKind.ACCOUNT, account.id),
            StoreOperation("update", EntityKind.ACCOUNT, account.id),
            StoreOperation("delete", EntityKind.ACCOUNT, account.id),
        ]

    @pytest.mark.asyncio
    async def test_seed_assigns_ids(self) -> None:
        store = MockEntityStore()
        store.seed(Account(name="A"), Account(name="B", id=10))

        accounts = await store.query(EntityKind.ACCOUNT)

        assert [account.id for account in accounts] == [1, 10]
        assert store.reserve_id() == 11
        assert store.operations == []

    @pytest.mark.asyncio
    async def test_query_predicate(self) -> None:
        store = MockEntityStore()
        store.seed(Account(name="A", id=1), Account(name="B", id=2, is_closed=True))

        open_accounts = await store.query(EntityKind.ACCOUNT, lambda account: not account.is_closed)

        assert [account.name for account in open_accounts] == ["A"]

    @pytest.mark.asyncio
    async def test_duplicate_insert_and_missing_update(self) -> None:
        store = MockEntityStore()
        store.seed(Account(name="A", id=1))

        with pytest.raises(StorageError):
            await store.insert(Account(name="A", id=1))
        with pytest.raises(StorageError):
            await store.update(Account(name="X", id=2))

    @pytest.mark.asyncio
    async def test_transaction_rollback(self) -> None:
        store = MockEntityStore()
        store.fail_after = 1

        with pytest.raises(StorageError):
            async with store.transaction():
                await store.insert(Account(name="A", id=1))
                await store.insert(Account(name="B", id=2))

        assert await store.query(EntityKind.ACCOUNT) == []
        assert store.rollback_count == 1
        assert store.commit_count == 0

    @pytest.mark.asyncio
    async def test_rollback_failure(self) -> None:
        store = MockEntityStore(should_fail=True)
        store.rollback_fails = True

        with pytest.raises(FatalConsistencyError):
            async with store.transaction():
                await store.insert(Account(name="A", id=1))

    @pytest.mark.asyncio
    async def test_close(self) -> None:
        store = MockEntityStore()

        await store.close()

        assert store.closed
