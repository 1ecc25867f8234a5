"""Pydantic schemas for purchases module."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import AliasChoices, ConfigDict, Field

from app.catalog.schemas import ItemKind
from app.common.schemas import CamelModel


# ============ Request Schemas ============

class VerifyPaymentRequest(CamelModel):
    """Claimed PortOne payment for a catalog item."""

    payment_id: str = Field(..., min_length=1)
    # courseId/ebookId are accepted from older checkout clients
    item_id: UUID = Field(
        ..., validation_alias=AliasChoices("itemId", "item_id", "courseId", "ebookId")
    )


class FreeEnrollRequest(CamelModel):
    item_id: UUID = Field(
        ..., validation_alias=AliasChoices("itemId", "item_id", "courseId", "ebookId")
    )


class WebhookRequest(CamelModel):
    payment_id: str = Field(..., min_length=1)


# ============ Response Schemas ============

class PurchaseSummary(CamelModel):
    user_id: UUID
    item_id: UUID
    payment_id: str
    amount: int


class VerifyPaymentResponse(CamelModel):
    success: bool = True
    message: str = "Payment processed successfully"
    purchase: PurchaseSummary


class EnrollmentSummary(CamelModel):
    user_id: UUID
    item_id: UUID


class FreeEnrollResponse(CamelModel):
    success: bool = True
    message: str
    enrollment: EnrollmentSummary


class WebhookResponse(CamelModel):
    success: bool = True
    message: str = "Payment processed successfully"
    user_id: UUID
    payment_id: str


class PurchaseResponse(CamelModel):
    """Stored entitlement."""

    id: UUID
    kind: ItemKind
    item_id: UUID
    payment_id: str
    amount: int
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PurchaseListResponse(CamelModel):
    purchases: list[PurchaseResponse]
    count: int


class AccessResponse(CamelModel):
    """User's access level to a catalog item."""

    item_id: UUID
    kind: ItemKind
    has_access: bool
    access_reason: Literal["purchased", "free", "none"]
