"""Payment endpoints: verification, free enrollment and the PortOne webhook."""

import logging

from fastapi import APIRouter

from app.auth.dependencies import CurrentUserId, OptionalUserId, ProfileServiceDep
from app.auth.service import resolve_user_id
from app.catalog.schemas import ItemKind
from app.common.exceptions import InvalidPaymentIdException, PaymentNotCapturedException
from app.payments.dependencies import PaymentClientDep
from app.payments.ids import parse_payment_id
from app.purchases.dependencies import PurchaseServiceDep
from app.purchases.schemas import (
    EnrollmentSummary,
    FreeEnrollRequest,
    FreeEnrollResponse,
    PurchaseSummary,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
    WebhookRequest,
    WebhookResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/webhook", response_model=WebhookResponse)
def payment_webhook(
    data: WebhookRequest,
    payment_client: PaymentClientDep,
    profile_service: ProfileServiceDep,
):
    """
    Mark the payer's profile as paid once PortOne reports the payment PAID.

    The user is taken from the payment id, which must have the
    ``payment-{itemId}-{userId}-{timestamp}`` shape.
    """
    payment = payment_client.get_payment(data.payment_id)
    if not payment.is_paid:
        raise PaymentNotCapturedException(payment.status)

    parsed = parse_payment_id(data.payment_id, strict=True)
    if parsed is None:
        logger.error(f"Could not extract user id from payment {data.payment_id}")
        raise InvalidPaymentIdException("Could not extract user id from payment id")

    profile_service.mark_paid(parsed.user_id)
    logger.info(f"Webhook marked user {parsed.user_id} as paid (payment={data.payment_id})")

    return WebhookResponse(user_id=parsed.user_id, payment_id=data.payment_id)


@router.post("/{kind}/verify", response_model=VerifyPaymentResponse)
def verify_payment(
    kind: ItemKind,
    data: VerifyPaymentRequest,
    token_user_id: OptionalUserId,
    payment_client: PaymentClientDep,
    purchase_service: PurchaseServiceDep,
):
    """
    Verify a PortOne payment and grant the purchased course or e-book.

    - Identifies the user from the bearer token, or from the payment id
    - Reads the payment from PortOne (502 if unreachable)
    - Requires status PAID and an amount equal to the catalog price
    - Rejects a second grant for the same user and item
    - Removes the item from the user's cart
    """
    user_id = resolve_user_id(token_user_id, data.payment_id)
    payment = payment_client.get_payment(data.payment_id)

    purchase = purchase_service.verify_purchase(kind, user_id, data.item_id, payment)

    return VerifyPaymentResponse(
        purchase=PurchaseSummary(
            user_id=purchase.user_id,
            item_id=purchase.item_id,
            payment_id=purchase.payment_id,
            amount=purchase.amount,
        )
    )


@router.post("/{kind}/free-enroll", response_model=FreeEnrollResponse)
def free_enroll(
    kind: ItemKind,
    data: FreeEnrollRequest,
    user_id: CurrentUserId,
    purchase_service: PurchaseServiceDep,
):
    """Enroll the current user in a free course or e-book."""
    purchase = purchase_service.enroll_free(kind, user_id, data.item_id)
    return FreeEnrollResponse(
        message=f"Enrolled in free {kind.value}",
        enrollment=EnrollmentSummary(user_id=purchase.user_id, item_id=purchase.item_id),
    )
