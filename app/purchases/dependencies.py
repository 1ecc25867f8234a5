"""FastAPI dependencies for purchases module."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from app.catalog.service import CatalogService
from app.database import get_db
from app.purchases.service import PurchaseService


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    return CatalogService(db)


def get_purchase_service(
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog_service),
) -> PurchaseService:
    return PurchaseService(db, catalog)


CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
PurchaseServiceDep = Annotated[PurchaseService, Depends(get_purchase_service)]
