from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.catalog.models import Course, Ebook
from app.catalog.schemas import CatalogItem, ItemKind
from app.common.exceptions import ItemNotFoundException

CATALOG_MODELS: dict[ItemKind, type[Course] | type[Ebook]] = {
    ItemKind.COURSE: Course,
    ItemKind.EBOOK: Ebook,
}


class CatalogService:
    def __init__(self, db: Session):
        self.db = db

    def find(self, kind: ItemKind, item_id: UUID) -> Course | Ebook | None:
        model = CATALOG_MODELS[kind]
        stmt = select(model).where(model.id == item_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_item(self, kind: ItemKind, item_id: UUID) -> CatalogItem:
        """Look up the current price and title, raising 404 when absent."""
        row = self.find(kind, item_id)
        if row is None:
            raise ItemNotFoundException(kind.value)
        return CatalogItem(id=row.id, kind=kind, title=row.title, price=row.price)
