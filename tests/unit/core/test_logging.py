"""
core/logging.py 테스트
"""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

import pytest

from core.constants import Paths
from core.logging import NOISY_LOGGERS, get_log_file_path, setup_logging


@pytest.fixture
def restore_root_logger():
    """테스트 후 루트 로거 핸들러 복원"""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class TestGetLogFilePath:
    """로그 파일 경로"""

    def test_web_default(self) -> None:
        assert get_log_file_path("web") == Paths.WEB_LOGS_DIR / "web.log"

    def test_custom_dir(self, temp_dir: Path) -> None:
        assert get_log_file_path("cli", temp_dir) == temp_dir / "cli.log"


class TestSetupLogging:
    """setup_logging"""

    def test_handlers_installed_once(self, temp_dir: Path, restore_root_logger) -> None:
        setup_logging("web", logging.DEBUG, log_dir=temp_dir)
        root = setup_logging("web", logging.WARNING, log_dir=temp_dir)

        file_handlers = [h for h in root.handlers if isinstance(h, TimedRotatingFileHandler)]
        assert len(root.handlers) == 2
        assert len(file_handlers) == 1
        assert file_handlers[0].level == logging.WARNING
        assert (temp_dir / "web.log").exists()

    def test_noisy_loggers_quieted(self, temp_dir: Path, restore_root_logger) -> None:
        setup_logging("web", log_dir=temp_dir)

        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING
