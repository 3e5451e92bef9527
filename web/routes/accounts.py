"""
계좌 API 라우트

계좌 목록/생성/수정/삭제, 계좌 원장, 순자산, 카테고리
"""

from fastapi import APIRouter, Depends, Path, Query

from web.dependencies import get_ledger_service
from web.models.requests import AccountCreateRequest, AccountUpdateRequest, CategoryCreateRequest
from web.models.responses import (
    AccountResponse,
    CategoryResponse,
    LedgerEntryResponse,
    LedgerResponse,
    NetWorthResponse,
)
from web.services.ledger_service import LedgerService

router = APIRouter(prefix="/api", tags=["Accounts"])


@router.get("/accounts", response_model=list[AccountResponse])
async def list_accounts(
    include_closed: bool = Query(default=True, description="닫힌 계좌 포함 여부"),
    service: LedgerService = Depends(get_ledger_service),
) -> list[AccountResponse]:
    """계좌 목록 (잔액 포함)"""
    return [
        AccountResponse.from_account(account, balance)
        for account, balance in service.list_accounts(include_closed)
    ]


@router.post("/accounts", response_model=AccountResponse, status_code=201)
async def create_account(
    request: AccountCreateRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> AccountResponse:
    """계좌 생성"""
    account = await service.create_account(request)
    return AccountResponse.from_account(account, service.document.balance(account.id))


@router.patch("/accounts/{account_id}", response_model=AccountResponse)
async def update_account(
    request: AccountUpdateRequest,
    account_id: int = Path(..., description="계좌 ID"),
    service: LedgerService = Depends(get_ledger_service),
) -> AccountResponse:
    """계좌 이름 변경 / 닫기"""
    account = await service.update_account(account_id, request)
    return AccountResponse.from_account(account, service.document.balance(account.id))


@router.delete("/accounts/{account_id}", status_code=204)
async def delete_account(
    account_id: int = Path(..., description="계좌 ID"),
    service: LedgerService = Depends(get_ledger_service),
) -> None:
    """계좌 삭제 (이체는 상대 계좌 측만 남음)"""
    await service.delete_account(account_id)


@router.get("/accounts/{account_id}/ledger", response_model=LedgerResponse)
async def get_ledger(
    account_id: int = Path(..., description="계좌 ID"),
    service: LedgerService = Depends(get_ledger_service),
) -> LedgerResponse:
    """계좌 원장 (정렬된 행 + 누적 잔액)"""
    ledger = service.get_ledger(account_id)
    return LedgerResponse(
        account_id=account_id,
        balance=str(ledger.balance),
        entries=[LedgerEntryResponse.from_entry(entry) for entry in ledger.get_entries()],
    )


@router.get("/net-worth", response_model=NetWorthResponse)
async def get_net_worth(
    service: LedgerService = Depends(get_ledger_service),
) -> NetWorthResponse:
    """순자산 (닫히지 않은 계좌 잔액 합)"""
    return NetWorthResponse(
        net_worth=str(service.net_worth()),
        accounts=[
            AccountResponse.from_account(account, balance)
            for account, balance in service.list_accounts(include_closed=False)
        ],
    )


@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories(
    service: LedgerService = Depends(get_ledger_service),
) -> list[CategoryResponse]:
    """카테고리 목록"""
    return [CategoryResponse.from_category(category) for category in service.list_categories()]


@router.post("/categories", response_model=CategoryResponse, status_code=201)
async def create_category(
    request: CategoryCreateRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> CategoryResponse:
    """카테고리 생성"""
    return CategoryResponse.from_category(await service.create_category(request))


@router.delete("/categories/{category_id}", status_code=204)
async def delete_category(
    category_id: int = Path(..., description="카테고리 ID"),
    service: LedgerService = Depends(get_ledger_service),
) -> None:
    """카테고리 삭제 (참조 해제)"""
    await service.delete_category(category_id)
