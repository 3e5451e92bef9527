"""
엔티티 저장소 스키마 초기화

Document 열기 시 자동으로 테이블 생성.
CREATE IF NOT EXISTS 패턴으로 안전하게 동작.

엔티티 간 참조(계좌, 부모 거래 등)는 외래 키 제약 없이 정수 id로 저장.
참조 무결성은 커밋 전 도메인 검증이 담당.
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


async def init_schema(db: "SQLiteAdapter") -> None:
    """엔티티 테이블 + 인덱스 생성

    Args:
        db: 연결된 SQLiteAdapter
    """
    await db.execute("""
        CREATE TABLE IF NOT EXISTS account (
            id                INTEGER PRIMARY KEY,
            name              TEXT NOT NULL,
            is_closed         INTEGER NOT NULL DEFAULT 0,
            type              TEXT NOT NULL DEFAULT 'BANKING',
            currency_asset_id INTEGER
        )
    """)

    await db.execute("""
        CREATE TABLE IF NOT EXISTS category (
            id                 INTEGER PRIMARY KEY,
            name               TEXT NOT NULL,
            parent_category_id INTEGER
        )
    """)

    await db.execute("""
        CREATE TABLE IF NOT EXISTS asset (
            id            INTEGER PRIMARY KEY,
            name          TEXT NOT NULL,
            ticker_symbol TEXT
        )
    """)

    # 금액은 Decimal 문자열, 시간은 ISO 8601 (UTC)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS transactions (
            id                INTEGER PRIMARY KEY,
            ts                TEXT NOT NULL,
            payee             TEXT,
            memo              TEXT,
            check_number      INTEGER,
            category_id       INTEGER,

            debit_account_id  INTEGER,
            debit_amount      TEXT,
            debit_asset_id    INTEGER,
            debit_cleared     TEXT NOT NULL DEFAULT 'NONE',

            credit_account_id INTEGER,
            credit_amount     TEXT,
            credit_asset_id   INTEGER,
            credit_cleared    TEXT NOT NULL DEFAULT 'NONE'
        )
    """)

    await db.execute("""
        CREATE TABLE IF NOT EXISTS split_entry (
            id                    INTEGER PRIMARY KEY,
            parent_transaction_id INTEGER NOT NULL,
            amount                TEXT NOT NULL DEFAULT '0',
            category_id           INTEGER,
            transfer_account_id   INTEGER,
            memo                  TEXT
        )
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_transactions_debit
        ON transactions(debit_account_id)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_transactions_credit
        ON transactions(credit_account_id)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_split_entry_parent
        ON split_entry(parent_transaction_id)
    """)

    await db.commit()

    logger.info("엔티티 스키마 초기화 완료")
