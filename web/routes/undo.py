"""
Undo API 라우트

GET /api/undo - undo/redo 상태
POST /api/undo - 마지막 작업 되돌리기
POST /api/redo - 되돌린 작업 다시 적용
"""

from fastapi import APIRouter, Depends

from web.dependencies import get_ledger_service
from web.models.responses import UndoStateResponse
from web.services.ledger_service import LedgerService

router = APIRouter(prefix="/api", tags=["Undo"])


@router.get("/undo", response_model=UndoStateResponse)
async def get_undo_state(
    service: LedgerService = Depends(get_ledger_service),
) -> UndoStateResponse:
    """undo/redo 가능 여부와 caption"""
    return UndoStateResponse(**service.undo_state())


@router.post("/undo", response_model=UndoStateResponse)
async def undo(
    service: LedgerService = Depends(get_ledger_service),
) -> UndoStateResponse:
    """undo (스택이 비어 있으면 409)"""
    await service.undo()
    return UndoStateResponse(**service.undo_state())


@router.post("/redo", response_model=UndoStateResponse)
async def redo(
    service: LedgerService = Depends(get_ledger_service),
) -> UndoStateResponse:
    """redo (스택이 비어 있으면 409)"""
    await service.redo()
    return UndoStateResponse(**service.undo_state())
