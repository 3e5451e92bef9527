"""
거래 API 라우트

거래 생성/조회/수정/삭제 및 split 편집
"""

from fastapi import APIRouter, Depends, Path

from web.dependencies import get_ledger_service
from web.models.requests import (
    SplitCreateRequest,
    SplitUpdateRequest,
    TransactionCreateRequest,
    TransactionUpdateRequest,
)
from web.models.responses import SplitResponse, TransactionResponse
from web.services.ledger_service import LedgerService

router = APIRouter(prefix="/api/transactions", tags=["Transactions"])


def _transaction_response(service: LedgerService, transaction_id: int) -> TransactionResponse:
    transaction, splits = service.get_transaction(transaction_id)
    return TransactionResponse.from_transaction(transaction, splits)


@router.post("", response_model=TransactionResponse, status_code=201)
async def create_transaction(
    request: TransactionCreateRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> TransactionResponse:
    """거래 생성 (입금/출금/이체)"""
    transaction = await service.create_transaction(request)
    return _transaction_response(service, transaction.id)


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: int = Path(..., description="거래 ID"),
    service: LedgerService = Depends(get_ledger_service),
) -> TransactionResponse:
    """거래 조회 (split 포함)"""
    return _transaction_response(service, transaction_id)


@router.patch("/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    request: TransactionUpdateRequest,
    transaction_id: int = Path(..., description="거래 ID"),
    service: LedgerService = Depends(get_ledger_service),
) -> TransactionResponse:
    """거래 수정 (account_id 관점)"""
    await service.update_transaction(transaction_id, request)
    return _transaction_response(service, transaction_id)


@router.delete("/{transaction_id}", status_code=204)
async def delete_transaction(
    transaction_id: int = Path(..., description="거래 ID"),
    service: LedgerService = Depends(get_ledger_service),
) -> None:
    """거래 삭제 (두 계좌 원장 모두에서 제거)"""
    await service.delete_transaction(transaction_id)


@router.post("/{transaction_id}/splits", response_model=SplitResponse, status_code=201)
async def add_split(
    request: SplitCreateRequest,
    transaction_id: int = Path(..., description="부모 거래 ID"),
    service: LedgerService = Depends(get_ledger_service),
) -> SplitResponse:
    """split 추가"""
    split = await service.add_split(transaction_id, request)
    return SplitResponse.from_split(service.document.get_split(split.id))


@router.patch("/{transaction_id}/splits/{split_id}", response_model=SplitResponse)
async def update_split(
    request: SplitUpdateRequest,
    transaction_id: int = Path(..., description="부모 거래 ID"),
    split_id: int = Path(..., description="split ID"),
    service: LedgerService = Depends(get_ledger_service),
) -> SplitResponse:
    """split 수정 (부모 금액은 합계로 재계산)"""
    split = await service.update_split(transaction_id, split_id, request)
    return SplitResponse.from_split(split)


@router.delete("/{transaction_id}/splits/{split_id}", status_code=204)
async def delete_split(
    transaction_id: int = Path(..., description="부모 거래 ID"),
    split_id: int = Path(..., description="split ID"),
    service: LedgerService = Depends(get_ledger_service),
) -> None:
    """split 삭제 (하나 남으면 부모로 병합)"""
    await service.delete_split(transaction_id, split_id)
