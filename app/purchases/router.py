"""API endpoints for the current user's entitlements."""

from uuid import UUID

from fastapi import APIRouter, Query

from app.auth.dependencies import CurrentUserId
from app.catalog.schemas import ItemKind
from app.purchases.dependencies import PurchaseServiceDep
from app.purchases.schemas import AccessResponse, PurchaseListResponse, PurchaseResponse

router = APIRouter()


@router.get("/me", response_model=PurchaseListResponse)
def get_my_purchases(
    purchase_service: PurchaseServiceDep,
    user_id: CurrentUserId,
    kind: ItemKind | None = Query(None, description="Only courses or only e-books"),
):
    """Get all purchases for current user, newest first."""
    purchases = purchase_service.get_user_purchases(user_id, kind)
    return PurchaseListResponse(
        purchases=[PurchaseResponse.model_validate(p) for p in purchases],
        count=len(purchases),
    )


@router.get("/{kind}/{item_id}/access", response_model=AccessResponse)
def check_access(
    kind: ItemKind,
    item_id: UUID,
    purchase_service: PurchaseServiceDep,
    user_id: CurrentUserId,
):
    """
    Check user's access to a course or e-book.

    Returns access_reason:
    - purchased: user holds an entitlement
    - free: item costs nothing
    - none: item must be bought first
    """
    return purchase_service.check_access(kind, user_id, item_id)
