"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
"""

from fastapi import Depends, HTTPException, Request

from core.config.loader import Settings, get_settings
from core.document import Document
from web.services.ledger_service import LedgerService


def get_app_settings() -> Settings:
    """애플리케이션 설정 반환"""
    return get_settings()


def get_document(request: Request) -> Document:
    """lifespan에서 연 Document 반환

    Raises:
        HTTPException: 문서가 열리지 않은 경우 503
    """
    document = getattr(request.app.state, "document", None)
    if document is None:
        raise HTTPException(status_code=503, detail="Document is not open")
    return document


def get_ledger_service(document: Document = Depends(get_document)) -> LedgerService:
    """요청별 LedgerService"""
    return LedgerService(document)
