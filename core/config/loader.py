"""
설정 로더

settings.yaml 로드 및 애플리케이션 설정 생성

settings.yaml 예시:
```yaml
database:
  path: data/ledgerbook.db
undo:
  capacity: 100
ledger:
  full_recompute: false
logging:
  level: INFO
web:
  host: 127.0.0.1
  port: 8000
```
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from core.constants import PROJECT_ROOT, Defaults, Paths

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class AppSettings:
    """애플리케이션 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    db_path: Path | str
    undo_capacity: int = Defaults.UNDO_CAPACITY
    full_recompute: bool = Defaults.FULL_RECOMPUTE
    log_level: str = Defaults.LOG_LEVEL
    web_host: str = Defaults.WEB_HOST
    web_port: int = Defaults.WEB_PORT


class SettingsLoadError(Exception):
    """Settings 로드 실패 예외"""

    pass


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise SettingsLoadError(f"settings.yaml의 '{name}' 섹션은 매핑이어야 합니다")
    return section


def _resolve_db_path(value: Any) -> Path | str:
    if value is None:
        return Paths.DEFAULT_DB
    if str(value) == ":memory:":
        return ":memory:"
    path = Path(value)
    # 상대 경로는 프로젝트 루트 기준
    return path if path.is_absolute() else PROJECT_ROOT / path


def load_settings(path: Path | None = None) -> AppSettings:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppSettings 인스턴스 (파일이 없으면 기본값)

    Raises:
        SettingsLoadError: 형식이 잘못되었거나 값이 유효하지 않은 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        return AppSettings(db_path=Paths.DEFAULT_DB)

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        return AppSettings(db_path=Paths.DEFAULT_DB)
    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    database = _section(data, "database")
    undo = _section(data, "undo")
    ledger = _section(data, "ledger")
    log_config = _section(data, "logging")
    web = _section(data, "web")

    undo_capacity = undo.get("capacity", Defaults.UNDO_CAPACITY)
    if isinstance(undo_capacity, bool) or not isinstance(undo_capacity, int) or undo_capacity < 1:
        raise SettingsLoadError(f"undo.capacity는 1 이상의 정수여야 합니다: {undo_capacity!r}")

    full_recompute = ledger.get("full_recompute", Defaults.FULL_RECOMPUTE)
    if not isinstance(full_recompute, bool):
        raise SettingsLoadError(f"ledger.full_recompute는 true/false여야 합니다: {full_recompute!r}")

    log_level = str(log_config.get("level", Defaults.LOG_LEVEL)).upper()
    if log_level not in _LOG_LEVELS:
        raise SettingsLoadError(
            f"유효하지 않은 logging.level입니다: '{log_level}'. "
            f"유효한 값: {sorted(_LOG_LEVELS)}"
        )

    web_port = web.get("port", Defaults.WEB_PORT)
    if isinstance(web_port, bool) or not isinstance(web_port, int) or not 0 < web_port < 65536:
        raise SettingsLoadError(f"web.port가 유효하지 않습니다: {web_port!r}")

    return AppSettings(
        db_path=_resolve_db_path(database.get("path")),
        undo_capacity=undo_capacity,
        full_recompute=full_recompute,
        log_level=log_level,
        web_host=str(web.get("host", Defaults.WEB_HOST)),
        web_port=web_port,
    )


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _settings: AppSettings | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._settings is None:
            self._settings = load_settings(settings_path)

    @property
    def db_path(self) -> Path | str:
        """DB 경로"""
        assert self._settings is not None
        return self._settings.db_path

    @property
    def undo_capacity(self) -> int:
        """undo 스택 최대 크기"""
        assert self._settings is not None
        return self._settings.undo_capacity

    @property
    def full_recompute(self) -> bool:
        """Ledger 전체 재계산 모드"""
        assert self._settings is not None
        return self._settings.full_recompute

    @property
    def log_level(self) -> int:
        """logging 레벨 (정수)"""
        assert self._settings is not None
        return logging.getLevelName(self._settings.log_level)

    @property
    def web_host(self) -> str:
        assert self._settings is not None
        return self._settings.web_host

    @property
    def web_port(self) -> int:
        assert self._settings is not None
        return self._settings.web_port

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._settings = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
