import enum
from uuid import UUID

from pydantic import BaseModel


class ItemKind(str, enum.Enum):
    COURSE = "course"
    EBOOK = "ebook"


class CatalogItem(BaseModel):
    """Authoritative price and title of a purchasable item."""

    id: UUID
    kind: ItemKind
    title: str
    price: int

    model_config = {"from_attributes": True}
