"""Business logic for purchases: payment verification and entitlement writes."""

import logging
import time
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.catalog.schemas import CatalogItem, ItemKind
from app.catalog.service import CatalogService
from app.common.exceptions import (
    AlreadyGrantedException,
    AmountMismatchException,
    NotFreeItemException,
    NotPurchasedException,
    PaymentNotCapturedException,
    WriteFailedException,
)
from app.payments.ids import build_free_payment_id
from app.payments.portone import PaymentInfo
from app.purchases.models import (
    CART_MODELS,
    PURCHASE_MODELS,
    STATUS_COMPLETED,
    CoursePurchase,
    EbookPurchase,
    PaymentLedgerEntry,
)
from app.purchases.schemas import AccessResponse

logger = logging.getLogger(__name__)

Purchase = CoursePurchase | EbookPurchase


class PurchaseService:
    def __init__(self, db: Session, catalog: CatalogService | None = None):
        self.db = db
        self.catalog = catalog or CatalogService(db)

    # ========== Lookups ==========

    def get_user_purchase(self, kind: ItemKind, user_id: UUID, item_id: UUID) -> Purchase | None:
        model = PURCHASE_MODELS[kind]
        stmt = select(model).where(model.user_id == user_id, model.item_id == item_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_user_purchases(self, user_id: UUID, kind: ItemKind | None = None) -> list[Purchase]:
        """Get a user's entitlements, newest first."""
        kinds = [kind] if kind else list(ItemKind)
        purchases: list[Purchase] = []
        for k in kinds:
            model = PURCHASE_MODELS[k]
            result = self.db.execute(select(model).where(model.user_id == user_id))
            purchases.extend(result.scalars().all())
        return sorted(purchases, key=lambda p: p.created_at, reverse=True)

    def check_access(self, kind: ItemKind, user_id: UUID, item_id: UUID) -> AccessResponse:
        """Check user's access to a catalog item.

        Access rules:
        1. A completed entitlement grants access
        2. Free items are open to everyone (enrollment still records them)
        3. Otherwise no access
        """
        if self.get_user_purchase(kind, user_id, item_id):
            return AccessResponse(
                item_id=item_id, kind=kind, has_access=True, access_reason="purchased"
            )

        item = self.catalog.get_item(kind, item_id)
        if item.price == 0:
            return AccessResponse(
                item_id=item_id, kind=kind, has_access=True, access_reason="free"
            )

        return AccessResponse(item_id=item_id, kind=kind, has_access=False, access_reason="none")

    # ========== Granting ==========

    def verify_purchase(
        self, kind: ItemKind, user_id: UUID, item_id: UUID, payment: PaymentInfo
    ) -> Purchase:
        """
        Grant an entitlement for a payment already read from the provider.

        Checks run in order: captured status, catalog price, exact amount,
        existing entitlement. Nothing is written unless all pass.
        """
        if not payment.is_paid:
            logger.info(f"Payment {payment.payment_id} not captured: status={payment.status}")
            raise PaymentNotCapturedException(payment.status)

        item = self.catalog.get_item(kind, item_id)

        if payment.amount != item.price:
            logger.warning(
                f"Amount mismatch for payment {payment.payment_id}: "
                f"paid={payment.amount} expected={item.price}"
            )
            raise AmountMismatchException()

        return self._grant(user_id, item, payment.payment_id, item.price)

    def enroll_free(
        self, kind: ItemKind, user_id: UUID, item_id: UUID, now_ms: int | None = None
    ) -> Purchase:
        """Record a zero-amount entitlement for a free item."""
        item = self.catalog.get_item(kind, item_id)
        if item.price != 0:
            raise NotFreeItemException(kind.value)

        if now_ms is None:
            now_ms = int(time.time() * 1000)
        payment_id = build_free_payment_id(kind, item.id, user_id, now_ms)
        return self._grant(user_id, item, payment_id, 0)

    def is_payment_used(self, payment_id: str) -> bool:
        """True if any kind of entitlement was already granted for this payment."""
        stmt = select(PaymentLedgerEntry.payment_id).where(PaymentLedgerEntry.payment_id == payment_id)
        if self.db.execute(stmt).first() is not None:
            return True
        for model in PURCHASE_MODELS.values():
            stmt = select(model.id).where(model.payment_id == payment_id)
            if self.db.execute(stmt).first() is not None:
                return True
        return False

    def _grant(self, user_id: UUID, item: CatalogItem, payment_id: str, amount: int) -> Purchase:
        kind = item.kind
        if self.get_user_purchase(kind, user_id, item.id):
            logger.info(f"User {user_id} already owns {kind.value} {item.id}")
            raise AlreadyGrantedException(kind.value)

        if self.is_payment_used(payment_id):
            logger.warning(f"Payment {payment_id} already used for another entitlement")
            raise AlreadyGrantedException(kind.value)

        model = PURCHASE_MODELS[kind]
        purchase = model(
            user_id=user_id,
            item_id=item.id,
            payment_id=payment_id,
            amount=amount,
            status=STATUS_COMPLETED,
        )
        self.db.add(purchase)
        self.db.add(PaymentLedgerEntry(payment_id=payment_id, kind=kind.value))

        # The unique constraints settle concurrent submissions that both
        # passed the checks above
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info(f"Concurrent grant rejected for user {user_id}, {kind.value} {item.id}")
            raise AlreadyGrantedException(kind.value)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to record purchase {payment_id}: {e}")
            raise WriteFailedException(f"Failed to record purchase: {e}")

        self.db.refresh(purchase)
        logger.info(
            f"Granted {kind.value} {item.id} to user {user_id} "
            f"(payment={payment_id}, amount={amount})"
        )

        self.remove_from_cart(kind, user_id, item.id)
        return purchase

    def remove_from_cart(self, kind: ItemKind, user_id: UUID, item_id: UUID) -> None:
        """Best-effort cart cleanup; failures are logged, never raised."""
        model = CART_MODELS[kind]
        try:
            self.db.execute(delete(model).where(model.user_id == user_id, model.item_id == item_id))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(f"Failed to remove {kind.value} {item_id} from cart of {user_id}: {e}")

    # ========== Downloads ==========

    def record_download(self, user_id: UUID, ebook_id: UUID) -> EbookPurchase:
        purchase = self.get_user_purchase(ItemKind.EBOOK, user_id, ebook_id)
        if purchase is None:
            raise NotPurchasedException("No purchase record. Buy the e-book first.")

        purchase.download_count = (purchase.download_count or 0) + 1
        purchase.last_downloaded_at = datetime.now(timezone.utc)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to record download of ebook {ebook_id} by {user_id}: {e}")
            raise WriteFailedException("Failed to record download")
        self.db.refresh(purchase)
        return purchase
