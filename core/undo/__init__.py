"""
Undo 패키지

UndoableScope로 묶인 변경을 하나의 UndoUnit으로 커밋하고
undo/redo 스택을 관리.
"""

from core.undo.manager import UndoManager
from core.undo.scope import UndoableScope
from core.undo.unit import UndoUnit

__all__ = [
    "UndoManager",
    "UndoableScope",
    "UndoUnit",
]
