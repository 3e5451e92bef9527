"""
Protocol 인터페이스 테스트

Protocol 타입 검증 및 구현 확인.
"""

from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.interfaces import IEntityStore
from adapters.mock.entity_store import MockEntityStore
from core.storage.entity_store import SQLiteEntityStore


class TestIEntityStore:
    """IEntityStore Protocol 테스트"""

    def test_mock_store_implements_protocol(self) -> None:
        assert isinstance(MockEntityStore(), IEntityStore)

    def test_sqlite_store_implements_protocol(self) -> None:
        store = SQLiteEntityStore(SQLiteAdapter(":memory:"))

        assert isinstance(store, IEntityStore)

    def test_protocol_has_required_methods(self) -> None:
        """Protocol에 필수 메서드가 정의되어 있는지 확인"""
        required_methods = ["reserve_id", "insert", "update", "delete", "query", "transaction", "close"]

        for store in (MockEntityStore(), SQLiteEntityStore(SQLiteAdapter(":memory:"))):
            for method_name in required_methods:
                assert callable(getattr(store, method_name)), f"Missing method: {method_name}"
