"""SQLAlchemy models for entitlements and carts.

Courses and e-books keep separate tables. Each model exposes ``item_id`` as a
synonym of its catalog foreign key so the purchase flow can treat both kinds
alike.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, synonym

from app.catalog.schemas import ItemKind
from app.database import Base

STATUS_COMPLETED = "completed"


class CoursePurchase(Base):
    """Entitlement granting a user access to a course."""

    __tablename__ = "purchases"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    course_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    payment_id: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=STATUS_COMPLETED)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    item_id = synonym("course_id")
    kind = ItemKind.COURSE

    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_purchases_user_course"),
        Index("idx_purchases_user", "user_id"),
    )


class EbookPurchase(Base):
    """Entitlement granting a user the full e-book PDF."""

    __tablename__ = "ebook_purchases"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    ebook_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("ebooks.id", ondelete="CASCADE"), nullable=False
    )
    payment_id: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=STATUS_COMPLETED)
    download_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    last_downloaded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    item_id = synonym("ebook_id")
    kind = ItemKind.EBOOK

    __table_args__ = (
        UniqueConstraint("user_id", "ebook_id", name="uq_ebook_purchases_user_ebook"),
        Index("idx_ebook_purchases_user", "user_id"),
    )


class CourseCartItem(Base):
    __tablename__ = "course_cart"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    course_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    item_id = synonym("course_id")

    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_course_cart_user_course"),
    )


class EbookCartItem(Base):
    __tablename__ = "ebook_cart"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    ebook_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("ebooks.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    item_id = synonym("ebook_id")

    __table_args__ = (
        UniqueConstraint("user_id", "ebook_id", name="uq_ebook_cart_user_ebook"),
    )


class PaymentLedgerEntry(Base):
    """One row per payment id ever granted, shared by every item kind."""

    __tablename__ = "payment_ledger"

    payment_id: Mapped[str] = mapped_column(Text, primary_key=True)
    kind: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


PURCHASE_MODELS: dict[ItemKind, type[CoursePurchase] | type[EbookPurchase]] = {
    ItemKind.COURSE: CoursePurchase,
    ItemKind.EBOOK: EbookPurchase,
}

CART_MODELS: dict[ItemKind, type[CourseCartItem] | type[EbookCartItem]] = {
    ItemKind.COURSE: CourseCartItem,
    ItemKind.EBOOK: EbookCartItem,
}
