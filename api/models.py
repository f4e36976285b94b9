"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
Currency amounts are integers in the smallest currency unit.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


# ============================================================================
# Sale Models
# ============================================================================

class InitializeRequest(BaseModel):
    """One-time sale initialization. Omitted fields take the sale defaults."""
    owner_id: str = Field(..., min_length=1, description="Account allowed to change configuration")
    treasury_id: Optional[str] = Field(None, min_length=1)
    token_contract_id: Optional[str] = Field(None, min_length=1)
    unit_price: Optional[int] = Field(None, ge=0)
    start_time: Optional[int] = Field(None, ge=0)
    end_time: Optional[int] = Field(None, ge=0)
    total_sale_cap: Optional[int] = Field(None, ge=0)

    class Config:
        json_schema_extra = {
            "example": {
                "owner_id": "owner.near",
                "unit_price": 3000000000000000000,
                "start_time": 1647007905,
                "end_time": 1647607905,
            }
        }


class SaleConfigResponse(BaseModel):
    owner_id: str
    treasury_id: str
    token_contract_id: str
    unit_price: int
    start_time: int
    end_time: int
    total_sale_cap: int


class StatusResponse(BaseModel):
    """Aggregate sale progress."""
    current_sale: int
    total_sale_cap: int

    class Config:
        json_schema_extra = {
            "example": {"current_sale": 1250, "total_sale_cap": 1000000}
        }


class WindowResponse(BaseModel):
    start_time: int
    end_time: int


class PriceResponse(BaseModel):
    unit_price: int


class PurchasedResponse(BaseModel):
    account_id: str
    units: int


class BuyRequest(BaseModel):
    """Buy sale units for an account. Payment goes in the X-Attached-Deposit header."""
    account_id: str = Field(..., min_length=1, description="Account credited with the units")
    token_amount: int = Field(..., ge=1, description="Number of sale units to buy")

    class Config:
        json_schema_extra = {
            "example": {"account_id": "alice.near", "token_amount": 5}
        }


class RefundResponse(BaseModel):
    receiver_id: str
    amount: int
    request_id: str


class BuyResponse(BaseModel):
    """Response after a successful purchase."""
    account_id: str
    units_purchased: int
    total_units: int
    current_sale: int
    required_payment: int
    storage_cost: int
    refund: Optional[RefundResponse] = None

    class Config:
        json_schema_extra = {
            "example": {
                "account_id": "alice.near",
                "units_purchased": 5,
                "total_units": 5,
                "current_sale": 5,
                "required_payment": 500,
                "storage_cost": 61,
                "refund": {
                    "receiver_id": "treasury.near",
                    "amount": 939,
                    "request_id": "123e4567-e89b-12d3-a456-426614174000",
                },
            }
        }


class ClaimResponse(BaseModel):
    """Response after a claim was queued. The transfer resolves asynchronously."""
    request_id: str
    account_id: str
    units: int
    token_amount: int
    token_contract_id: str


# ============================================================================
# Admin Models
# ============================================================================

class AccountUpdate(BaseModel):
    account_id: str = Field(..., min_length=1)


class TimestampUpdate(BaseModel):
    timestamp: int = Field(..., ge=0, description="Epoch seconds")


class PriceUpdate(BaseModel):
    unit_price: int = Field(..., ge=0)


# ============================================================================
# Transfer Models
# ============================================================================

class TransferResponse(BaseModel):
    request_id: str
    kind: str  # "native" or "token"
    receiver_id: str
    amount: int
    contract_id: Optional[str] = None
    attached_deposit: int
    gas: int
    status: str
    created_at: int


class PendingTransfersResponse(BaseModel):
    items: List[TransferResponse]
    total_count: int


class ResolveTransferRequest(BaseModel):
    succeeded: bool = Field(..., description="Outcome reported by the transfer executor")


class ResolveTransferResponse(BaseModel):
    request_id: str
    succeeded: bool
    account_id: str
    amount: int
    restored_units: int


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error body (under `detail`)."""
    error: str
    detail: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "error": "InsufficientPayment",
                "detail": "Not enough attached deposit to buy. Required: 500, Attached: 100",
            }
        }
