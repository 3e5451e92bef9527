"""
타임존 유틸리티

내부 저장은 UTC 원칙. naive datetime은 UTC로 간주.
"""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """현재 UTC 시간"""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """datetime을 UTC aware로 정규화

    naive와 aware datetime이 섞이면 정렬 비교가 실패하므로
    거래 시간은 항상 이 함수를 거쳐 저장.

    Args:
        dt: datetime 객체 (naive면 UTC로 간주)

    Returns:
        UTC 타임존의 datetime

    Example:
        >>> ensure_utc(datetime(2026, 2, 20, 16, 0, 0)).tzinfo
        datetime.timezone.utc
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_iso(value: str) -> datetime:
    """ISO 8601 문자열을 UTC datetime으로 변환"""
    return ensure_utc(datetime.fromisoformat(value))
