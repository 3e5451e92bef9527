"""
UndoUnit

한 번의 논리적 작업으로 커밋된 변경 묶음.
"""

from dataclasses import dataclass
from typing import Any

from core.domain.changes import EntityChange
from core.domain.errors import InvariantViolation


@dataclass(frozen=True)
class UndoUnit:
    """원자적으로 되돌릴 수 있는 변경 묶음

    Attributes:
        caption: 사용자에게 보여줄 작업 설명 ("Undo {caption}")
        changes: 엔티티별로 병합된 (before, after) 쌍, 최초 변경 순서
        selection: undo/redo 후 다시 선택할 대상 힌트
    """

    caption: str
    changes: tuple[EntityChange, ...]
    selection: Any = None

    def __post_init__(self) -> None:
        if not self.changes:
            raise InvariantViolation(f"UndoUnit '{self.caption}' has no changes")

        seen = set()
        for change in self.changes:
            if not isinstance(change, EntityChange):
                raise InvariantViolation(f"UndoUnit '{self.caption}' holds a non-change: {change!r}")
            if change.key in seen:
                raise InvariantViolation(
                    f"UndoUnit '{self.caption}' records {change.key[0].value} {change.key[1]} twice"
                )
            seen.add(change.key)

    def undo_changes(self) -> list[EntityChange]:
        """undo 적용 순서: 역순, 역방향"""
        return [change.inverted() for change in reversed(self.changes)]

    def redo_changes(self) -> list[EntityChange]:
        """redo 적용 순서: 원래 순서"""
        return list(self.changes)
