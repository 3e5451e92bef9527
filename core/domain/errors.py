"""
도메인 예외 정의

오류 분류:
- ValidationError: 커밋 전 도메인 검증 실패 (undo 스택 변경 없음)
- StorageError: 커밋/undo/redo 중 저장소 실패 (메모리 상태 롤백)
- FatalConsistencyError: 저장소 롤백마저 실패한 경우 (복구 불가)
- InvariantViolation: 프로그래밍 결함 (split 합계 불일치, 잘못된 UndoUnit 등)

어떤 오류도 자동 재시도하지 않음.
"""


class LedgerError(Exception):
    """ledgerbook 예외 최상위 클래스"""
    pass


class ValidationError(LedgerError):
    """엔티티 검증 실패"""
    pass


class StorageError(LedgerError):
    """저장소 작업 실패"""
    pass


class FatalConsistencyError(StorageError):
    """부분 저장 후 롤백 실패 (저장소와 메모리 상태 불일치 가능)"""
    pass


class InvariantViolation(LedgerError):
    """불변식 위반 (프로그래밍 결함)"""
    pass


class ScopeError(LedgerError):
    """UndoableScope 사용 오류 (scope 밖 변경, 커밋 중 변경 등)"""
    pass


class UndoStackEmptyError(LedgerError):
    """undo/redo 스택이 비어 있음"""
    pass


class EntityNotFoundError(LedgerError):
    """존재하지 않는 엔티티 참조"""

    def __init__(self, kind: str, entity_id: int):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} {entity_id} not found")
