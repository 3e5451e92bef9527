"""
타입 정의 모듈

Enum 등 핵심 타입 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from enum import Enum


class EntityKind(str, Enum):
    """저장소 엔티티 종류 (테이블 단위)"""

    ACCOUNT = "ACCOUNT"
    CATEGORY = "CATEGORY"
    ASSET = "ASSET"
    TRANSACTION = "TRANSACTION"
    SPLIT = "SPLIT"


class AccountType(str, Enum):
    """계좌 유형

    - BANKING: 단일 통화 입출금/이체 계좌
    - INVESTING: 여러 자산을 보유하는 계좌 (증권, 지갑 등)
    """

    BANKING = "BANKING"
    INVESTING = "INVESTING"


class ClearedState(str, Enum):
    """거래 정산 상태 (계좌별로 독립)"""

    NONE = "NONE"
    CLEARED = "CLEARED"
    RECONCILED = "RECONCILED"


class TransactionKind(str, Enum):
    """거래 형태 (tagged variant)

    - SIMPLE: 한 계좌의 입금/출금
    - SPLIT: 여러 SplitEntry로 분할된 거래
    - TRANSFER: 차변/대변 양쪽 계좌가 모두 있는 이체
    """

    SIMPLE = "SIMPLE"
    SPLIT = "SPLIT"
    TRANSFER = "TRANSFER"


class ScopeState(str, Enum):
    """UndoableScope 상태

    전이 규칙:
    - CLOSED → OPEN: begin
    - OPEN → COMMITTING: 최외곽 scope 종료
    - COMMITTING → CLOSED: 커밋 성공/실패
    - CLOSED → UNDOING/REDOING → CLOSED: undo/redo
    """

    CLOSED = "CLOSED"
    OPEN = "OPEN"
    COMMITTING = "COMMITTING"
    UNDOING = "UNDOING"
    REDOING = "REDOING"


class DiffKind(str, Enum):
    """Ledger 구조 변경 종류"""

    INSERTED = "INSERTED"
    REMOVED = "REMOVED"
    REPOSITIONED = "REPOSITIONED"
