"""
요청 스키마 (Pydantic)

Web API 요청 데이터 검증

금액은 Decimal (JSON에서는 문자열 권장: "12.34").
거래 금액은 account_id 관점의 부호 있는 값 (입금 +, 출금 -).
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from core.types import AccountType, ClearedState


class AccountCreateRequest(BaseModel):
    """계좌 생성 요청"""

    name: str = Field(..., min_length=1, description="계좌 이름")
    type: AccountType = Field(default=AccountType.BANKING, description="계좌 유형")
    currency_asset_id: int | None = Field(default=None, description="통화 자산 ID")


class AccountUpdateRequest(BaseModel):
    """계좌 수정 요청 (지정한 필드만 변경)"""

    name: str | None = Field(default=None, min_length=1, description="계좌 이름")
    is_closed: bool | None = Field(default=None, description="닫힘 여부")


class CategoryCreateRequest(BaseModel):
    """카테고리 생성 요청"""

    name: str = Field(..., min_length=1, description="카테고리 이름")
    parent_category_id: int | None = Field(default=None, description="상위 카테고리 ID")


class TransactionCreateRequest(BaseModel):
    """거래 생성 요청

    transfer_account_id를 지정하면 이체 거래 (amount > 0: 상대 계좌에서 입금).
    """

    account_id: int = Field(..., description="기준 계좌 ID")
    amount: Decimal = Field(default=Decimal("0"), description="기준 계좌 관점 금액")
    when: datetime | None = Field(default=None, description="거래 시간 (없으면 현재)")
    payee: str | None = Field(default=None, description="거래처")
    memo: str | None = Field(default=None, description="메모")
    check_number: int | None = Field(default=None, description="수표 번호")
    category_id: int | None = Field(default=None, description="카테고리 ID")
    transfer_account_id: int | None = Field(default=None, description="이체 상대 계좌 ID")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"account_id": 1, "amount": "-12.50", "payee": "Cafe", "category_id": 3},
                {"account_id": 1, "amount": "-100", "transfer_account_id": 2, "payee": "Savings"},
            ]
        }
    }


class TransactionUpdateRequest(BaseModel):
    """거래 수정 요청 (지정한 필드만 변경)

    account_id는 amount/cleared/transfer_account_id를 해석할 관점 계좌.
    """

    account_id: int = Field(..., description="관점 계좌 ID")
    amount: Decimal | None = Field(default=None, description="관점 계좌 기준 금액")
    when: datetime | None = Field(default=None, description="거래 시간")
    payee: str | None = Field(default=None, description="거래처")
    memo: str | None = Field(default=None, description="메모")
    check_number: int | None = Field(default=None, description="수표 번호")
    category_id: int | None = Field(default=None, description="카테고리 ID")
    cleared: ClearedState | None = Field(default=None, description="관점 계좌 측 정산 상태")
    transfer_account_id: int | None = Field(default=None, description="이체 상대 계좌 ID (null이면 해제)")


class SplitCreateRequest(BaseModel):
    """split 추가 요청 (생성 후 지정한 필드 적용)"""

    amount: Decimal | None = Field(default=None, description="부모 home 계좌 관점 금액")
    category_id: int | None = Field(default=None, description="카테고리 ID")
    transfer_account_id: int | None = Field(default=None, description="이체 상대 계좌 ID")
    memo: str | None = Field(default=None, description="메모")


class SplitUpdateRequest(SplitCreateRequest):
    """split 수정 요청 (지정한 필드만 변경)"""
