"""
ChangeBus

커밋된 변경을 구독자(Ledger, 집계)에게 한 번에 알리는 통지 채널.
커밋/undo/redo 한 번당 ChangeSet 하나만 발행하며, 개별 변경 단위로는
절대 발행하지 않음.

scope 롤백은 별도 채널(restore)로 알림. 커밋되지 않은 캐시 상태를 읽었을 수
있는 구독자(지연 생성된 Ledger)만 구독하며, 발행 횟수에 포함되지 않음.
"""

import logging
from typing import Callable

from core.domain.changes import ChangeSet

logger = logging.getLogger(__name__)

ChangeHandler = Callable[[ChangeSet], None]


class ChangeBus:
    """변경 통지 버스

    Document마다 하나씩 소유. 전역 인스턴스 없음.

    사용 예시:
    ```python
    bus = ChangeBus()
    bus.subscribe(ledger_book.on_changes)
    bus.subscribe_restore(ledger_book.on_changes)
    bus.publish(changeset)
    ```
    """

    def __init__(self) -> None:
        self._handlers: list[ChangeHandler] = []
        self._restore_handlers: list[ChangeHandler] = []
        self._published_count = 0

    @property
    def published_count(self) -> int:
        """지금까지 발행한 ChangeSet 수 (restore 제외)"""
        return self._published_count

    def subscribe(self, handler: ChangeHandler) -> None:
        if handler not in self._handlers:
            self._handlers.append(handler)

    def unsubscribe(self, handler: ChangeHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def subscribe_restore(self, handler: ChangeHandler) -> None:
        if handler not in self._restore_handlers:
            self._restore_handlers.append(handler)

    def unsubscribe_restore(self, handler: ChangeHandler) -> None:
        if handler in self._restore_handlers:
            self._restore_handlers.remove(handler)

    def publish(self, changes: ChangeSet) -> None:
        """ChangeSet 발행

        빈 ChangeSet은 발행하지 않음. 구독자 예외는 기록 후 그대로 전파.
        """
        if not changes:
            return

        self._published_count += 1
        logger.debug(
            "ChangeSet 발행",
            extra={
                "inserted": len(changes.inserted),
                "deleted": len(changes.deleted),
                "changed": len(changes.changed),
            },
        )
        self._dispatch(self._handlers, changes)

    def restore(self, changes: ChangeSet) -> None:
        """롤백된 변경 통지 (캐시는 이미 되돌려진 상태)"""
        if not changes:
            return

        logger.debug(
            "롤백 통지",
            extra={
                "inserted": len(changes.inserted),
                "deleted": len(changes.deleted),
                "changed": len(changes.changed),
            },
        )
        self._dispatch(self._restore_handlers, changes)

    @staticmethod
    def _dispatch(handlers: list[ChangeHandler], changes: ChangeSet) -> None:
        for handler in list(handlers):
            try:
                handler(changes)
            except Exception:
                logger.exception("ChangeBus 구독자 처리 실패", extra={"handler": repr(handler)})
                raise
