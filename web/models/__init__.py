"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import (
    AccountCreateRequest,
    AccountUpdateRequest,
    CategoryCreateRequest,
    SplitCreateRequest,
    SplitUpdateRequest,
    TransactionCreateRequest,
    TransactionUpdateRequest,
)
from web.models.responses import (
    AccountResponse,
    CategoryResponse,
    HealthResponse,
    LedgerEntryResponse,
    LedgerResponse,
    NetWorthResponse,
    SplitResponse,
    TransactionResponse,
    UndoStateResponse,
)

__all__ = [
    # Requests
    "AccountCreateRequest",
    "AccountUpdateRequest",
    "CategoryCreateRequest",
    "SplitCreateRequest",
    "SplitUpdateRequest",
    "TransactionCreateRequest",
    "TransactionUpdateRequest",
    # Responses
    "AccountResponse",
    "CategoryResponse",
    "HealthResponse",
    "LedgerEntryResponse",
    "LedgerResponse",
    "NetWorthResponse",
    "SplitResponse",
    "TransactionResponse",
    "UndoStateResponse",
]
