"""
UndoableScope

하나의 논리적 작업을 감싸는 async context manager.

사용 예시:
```python
async with document.undoable("Add transaction", selection=tx_id):
    tx = document.insert(Transaction.deposit(account.id, "10.00"))
    document.update(replace(tx, payee="Cafe"))
# 최외곽 scope 종료 시 한 번만 커밋
```

명시적 사용:
```python
scope = document.undoable("Bulk edit")
scope.begin()
try:
    ...
except Exception:
    scope.abort()
    raise
else:
    await scope.commit()
```
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from core.undo.manager import UndoManager
    from core.undo.unit import UndoUnit


class UndoableScope:
    """UndoManager 위의 scope 핸들

    중첩 사용 시 내부 scope는 외부 scope에 참여하며,
    caption/selection은 최외곽 scope의 값만 사용됨.
    """

    def __init__(self, manager: "UndoManager", caption: str, selection: Any = None):
        self._manager = manager
        self.caption = caption
        self.selection = selection
        self.unit: "UndoUnit | None" = None

    def begin(self) -> "UndoableScope":
        self._manager.begin(self.caption, self.selection)
        return self

    async def commit(self) -> "UndoUnit | None":
        self.unit = await self._manager.commit()
        return self.unit

    def abort(self) -> None:
        self._manager.abort()

    async def __aenter__(self) -> "UndoableScope":
        return self.begin()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            self.abort()
            return False
        await self.commit()
        return False
