"""
core/domain/changes.py, change_bus.py 테스트
"""

import pytest

from core.domain.change_bus import ChangeBus
from core.domain.changes import ChangeSet, EntityChange
from core.domain.models import Account, SplitEntry, Transaction


class TestEntityChange:
    """EntityChange"""

    def test_kinds(self) -> None:
        account = Account(name="A", id=1)

        assert EntityChange(None, account).is_insert
        assert EntityChange(account, None).is_delete
        assert EntityChange(account, account).is_noop

    def test_inverted(self) -> None:
        change = EntityChange(Account(name="A", id=1), Account(name="B", id=1))

        inverted = change.inverted()

        assert inverted.before.name == "B"
        assert inverted.after.name == "A"


class TestChangeSet:
    """ChangeSet"""

    def test_from_changes(self) -> None:
        inserted = Account(name="New", id=1)
        deleted = Account(name="Old", id=2)
        before, after = Account(name="X", id=3), Account(name="Y", id=3)

        changes = ChangeSet.from_changes(
            [EntityChange(None, inserted), EntityChange(deleted, None), EntityChange(before, after)],
            selection=3,
        )

        assert changes.inserted == (inserted,)
        assert changes.deleted == (deleted,)
        assert changes.changed == ((before, after),)
        assert changes.selection == 3
        assert bool(changes)
        assert not ChangeSet()

    def test_impacted_account_ids(self) -> None:
        old = Transaction.deposit(1, "5", id=10)
        new = Transaction.transfer(2, 3, "5", id=10)
        split = SplitEntry(parent_transaction_id=11, amount="-1", id=12, transfer_account_id=4)

        changes = ChangeSet.from_changes([EntityChange(old, new), EntityChange(None, split)])

        assert changes.impacted_account_ids() == {1, 2, 3, 4}


class TestChangeBus:
    """ChangeBus"""

    def test_publish_to_subscribers(self) -> None:
        bus = ChangeBus()
        received: list[ChangeSet] = []
        bus.subscribe(received.append)
        bus.subscribe(received.append)  # 중복 구독 무시

        changes = ChangeSet(inserted=(Account(name="A", id=1),))
        bus.publish(changes)

        assert received == [changes]
        assert bus.published_count == 1

    def test_empty_changeset_not_published(self) -> None:
        bus = ChangeBus()
        received: list[ChangeSet] = []
        bus.subscribe(received.append)

        bus.publish(ChangeSet())

        assert received == []
        assert bus.published_count == 0

    def test_unsubscribe(self) -> None:
        bus = ChangeBus()
        received: list[ChangeSet] = []
        bus.subscribe(received.append)
        bus.unsubscribe(received.append)

        bus.publish(ChangeSet(inserted=(Account(name="A", id=1),)))

        assert received == []

    def test_subscriber_error_propagates(self) -> None:
        bus = ChangeBus()

        def broken(changes: ChangeSet) -> None:
            raise RuntimeError("subscriber failed")

        bus.subscribe(broken)

        with pytest.raises(RuntimeError):
            bus.publish(ChangeSet(inserted=(Account(name="A", id=1),)))

    def test_restore_channel_is_separate(self) -> None:
        """restore는 restore 구독자에게만 전달, 발행 횟수 제외"""
        bus = ChangeBus()
        published: list[ChangeSet] = []
        restored: list[ChangeSet] = []
        bus.subscribe(published.append)
        bus.subscribe_restore(restored.append)

        changes = ChangeSet(deleted=(Account(name="A", id=1),))
        bus.restore(changes)
        bus.restore(ChangeSet())

        assert restored == [changes]
        assert published == []
        assert bus.published_count == 0

        bus.unsubscribe_restore(restored.append)
        bus.restore(changes)
        assert restored == [changes]
