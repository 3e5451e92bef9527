"""
FastAPI 애플리케이션

라우터 등록, 도메인 예외 → HTTP 상태 매핑, 문서 생명주기.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import get_settings
from core.document import Document
from core.domain.errors import (
    EntityNotFoundError,
    InvariantViolation,
    LedgerError,
    ScopeError,
    StorageError,
    UndoStackEmptyError,
    ValidationError,
)
from core.logging import setup_logging
from core.storage.entity_store import SQLiteEntityStore
from web.routes import accounts, health, transactions, undo

logger = logging.getLogger(__name__)

# 예외 → HTTP 상태 (위에서부터 isinstance 검사)
ERROR_STATUS: list[tuple[type[LedgerError], int]] = [
    (ValidationError, 400),
    (EntityNotFoundError, 404),
    (UndoStackEmptyError, 409),
    (ScopeError, 409),
    (InvariantViolation, 500),
    (StorageError, 500),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리

    시작 시 SQLite 문서를 열고, 종료 시 닫음.
    테스트에서 app.state.document를 미리 지정하면 그대로 사용.
    """
    if getattr(app.state, "document", None) is not None:
        yield
        return

    settings = get_settings()
    setup_logging("web", settings.log_level)

    db = SQLiteAdapter(settings.db_path)
    await db.connect()
    store = SQLiteEntityStore(db)
    await store.initialize()

    app.state.document = await Document.open(
        store,
        undo_capacity=settings.undo_capacity,
        full_recompute=settings.full_recompute,
    )
    logger.info("Web: 문서 열기 완료", extra={"db_path": str(settings.db_path)})

    try:
        yield
    finally:
        await app.state.document.close()
        app.state.document = None
        logger.info("Web: 문서 닫기 완료")


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """도메인 예외를 JSON 오류 응답으로 변환"""
    status_code = 500
    for error_type, code in ERROR_STATUS:
        if isinstance(exc, error_type):
            status_code = code
            break

    if status_code >= 500:
        logger.error(
            "요청 처리 실패",
            extra={"path": request.url.path, "error": str(exc)},
            exc_info=exc,
        )
    else:
        logger.info(
            "요청 거부",
            extra={"path": request.url.path, "status": status_code, "error": str(exc)},
        )

    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


def create_app() -> FastAPI:
    """FastAPI 앱 생성"""
    application = FastAPI(
        title="Ledgerbook API",
        description="개인 가계부 원장 엔진 API",
        version=health.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS 설정 (개발용)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(LedgerError, ledger_error_handler)

    application.include_router(health.router)
    application.include_router(accounts.router)
    application.include_router(transactions.router)
    application.include_router(undo.router)

    return application


app = create_app()
