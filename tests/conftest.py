"""
pytest 공통 fixture 정의

- 임시 디렉토리 / settings.yaml
- MockEntityStore 위에 연 Document
- 기본 계좌/카테고리
"""

import tempfile
from pathlib import Path

import pytest
import pytest_asyncio

from adapters.mock.entity_store import MockEntityStore
from core.config.loader import Settings
from core.document import Document
from core.domain.models import Account, Category
from tests.utils.helpers import Fixtures


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성"""
    settings_content = """# 테스트용 settings.yaml
database:
  path: ":memory:"

undo:
  capacity: 5

ledger:
  full_recompute: true

logging:
  level: debug

web:
  host: 0.0.0.0
  port: 8080
"""
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture(autouse=True)
def reset_settings():
    """Settings 싱글턴 초기화"""
    Settings.reset()
    yield
    Settings.reset()


@pytest.fixture
def store() -> MockEntityStore:
    return MockEntityStore()


@pytest_asyncio.fixture
async def document(store: MockEntityStore) -> Document:
    """빈 Mock 저장소 위의 Document"""
    doc = await Document.open(store)
    yield doc
    if doc.undo_manager.depth == 0:
        await doc.close()


@pytest_asyncio.fixture
async def basics(document: Document) -> Fixtures:
    """계좌 3개 + 카테고리 2개 (undo 기록은 비움)"""
    async with document.undoable("Setup"):
        checking = document.insert(Account(name="Checking"))
        savings = document.insert(Account(name="Savings"))
        card = document.insert(Account(name="Card"))
        food = document.insert(Category(name="Food"))
        fuel = document.insert(Category(name="Fuel"))
    document.undo_manager.clear()
    return Fixtures(checking=checking, savings=savings, card=card, food=food, fuel=fuel)
