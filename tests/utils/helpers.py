"""
테스트 헬퍼

기준 시각, 계좌 원장 조회 단축 함수.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from core.document import Document
from core.domain.models import Account, Category

# 테스트 기준 시각 (UTC)
BASE_TIME = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def day(offset: int) -> datetime:
    """BASE_TIME 기준 offset일 뒤"""
    return BASE_TIME + timedelta(days=offset)


@dataclass
class Fixtures:
    """기본 계좌/카테고리 묶음"""

    checking: Account
    savings: Account
    card: Account
    food: Category
    fuel: Category


def balances(document: Document, account_id: int) -> list[tuple[int, Decimal]]:
    """계좌 원장의 (id, 누적 잔액) 목록"""
    return [(entry.id, entry.balance) for entry in document.ledger(account_id).get_entries()]


def ids(document: Document, account_id: int) -> list[int]:
    """계좌 원장의 정렬된 행 id"""
    return [entry.id for entry in document.ledger(account_id).get_entries()]
