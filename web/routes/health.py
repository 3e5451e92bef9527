"""
헬스 체크 엔드포인트

GET /health - 서버 상태 확인
"""

from fastapi import APIRouter, Request

from core.utils.timezone import now_utc
from web.models.responses import HealthResponse

router = APIRouter(tags=["health"])

API_VERSION = "1.0.0"


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """서버 상태 확인

    Returns:
        HealthResponse: status, version, 문서 열림 여부
    """
    return HealthResponse(
        status="ok",
        version=API_VERSION,
        document_open=getattr(request.app.state, "document", None) is not None,
        timestamp=now_utc(),
    )
