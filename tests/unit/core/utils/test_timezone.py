"""
core/utils/timezone.py 테스트
"""

from datetime import datetime, timedelta, timezone

from core.utils.timezone import ensure_utc, now_utc, parse_iso


class TestTimezone:
    """UTC 정규화"""

    def test_now_utc_is_aware(self) -> None:
        assert now_utc().tzinfo == timezone.utc

    def test_ensure_utc_naive(self) -> None:
        assert ensure_utc(datetime(2026, 2, 20, 16, 0)) == datetime(2026, 2, 20, 16, 0, tzinfo=timezone.utc)

    def test_ensure_utc_converts_offset(self) -> None:
        kst = timezone(timedelta(hours=9))
        converted = ensure_utc(datetime(2026, 2, 21, 1, 0, tzinfo=kst))

        assert converted == datetime(2026, 2, 20, 16, 0, tzinfo=timezone.utc)
        assert converted.tzinfo == timezone.utc

    def test_parse_iso(self) -> None:
        assert parse_iso("2026-02-20T16:00:00+00:00") == datetime(2026, 2, 20, 16, 0, tzinfo=timezone.utc)
        assert parse_iso("2026-02-20T16:00:00").tzinfo == timezone.utc
