from __future__ import annotations

from typing import Literal, Optional

from pydantic import AliasChoices, Field

from .base import ApiModel, Id, Money, UtcDatetime

TransferStatus = Literal["pending", "approved", "rejected"]


class TransferOrderSummary(ApiModel):
    """Order fields the backend embeds in a transfer record."""
    order_number: Optional[Id] = Field(default=None, description="Human-facing order number")
    customer_name: Optional[str] = Field(default=None, description="Customer name")
    customer_phone: Optional[str] = Field(default=None, description="Customer phone")
    total: Money = Field(
        default=0.0,
        validation_alias=AliasChoices("total", "total_amount", "totalAmount"),
        description="Order total",
    )


class Transfer(ApiModel):
    """A bank transfer awaiting manual verification."""
    id: Id = Field(description="Transfer identifier")
    order_id: Optional[Id] = Field(default=None, description="Order the transfer pays")
    amount: Money = Field(default=0.0, description="Transferred amount")
    status: TransferStatus = Field(default="pending", description="Verification status")
    proof_image_url: Optional[str] = Field(default=None, description="Uploaded receipt image")
    transfer_reference: Optional[str] = Field(default=None, description="Bank reference / alias")
    created_at: Optional[UtcDatetime] = Field(default=None, description="Upload timestamp")
    verified_at: Optional[UtcDatetime] = Field(default=None, description="Verification timestamp")
    order: Optional[TransferOrderSummary] = Field(
        default=None,
        validation_alias=AliasChoices("order", "orders"),
        description="Embedded order summary",
    )
