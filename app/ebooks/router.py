"""E-book download endpoint."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from app.auth.dependencies import CurrentUserId
from app.catalog.models import Ebook
from app.catalog.schemas import ItemKind
from app.common.exceptions import ItemNotFoundException, NotPurchasedException
from app.config import get_settings
from app.ebooks.schemas import DownloadData, DownloadResponse
from app.ebooks.storage import StorageClient, get_storage_client
from app.purchases.dependencies import CatalogServiceDep, PurchaseServiceDep

logger = logging.getLogger(__name__)

router = APIRouter()

StorageClientDep = Annotated[StorageClient, Depends(get_storage_client)]


@router.get("/{ebook_id}/download", response_model=DownloadResponse)
def download_ebook(
    ebook_id: UUID,
    user_id: CurrentUserId,
    purchase_service: PurchaseServiceDep,
    catalog_service: CatalogServiceDep,
    storage: StorageClientDep,
):
    """
    Issue a short-lived download URL for a purchased e-book.

    - 403 if the user has no purchase record
    - 404 if the e-book or its PDF is missing
    - Increments the purchase's download count
    """
    if purchase_service.get_user_purchase(ItemKind.EBOOK, user_id, ebook_id) is None:
        raise NotPurchasedException("No purchase record. Buy the e-book first.")

    ebook = catalog_service.find(ItemKind.EBOOK, ebook_id)
    if not isinstance(ebook, Ebook) or not ebook.full_pdf_path:
        raise ItemNotFoundException(ItemKind.EBOOK.value)

    signed = storage.create_signed_url(
        ebook.full_pdf_path, get_settings().download_url_ttl_seconds
    )

    purchase = purchase_service.record_download(user_id, ebook_id)
    logger.info(
        f"Download of ebook {ebook_id} by user {user_id} (count={purchase.download_count})"
    )

    return DownloadResponse(
        data=DownloadData(
            download_url=signed.url,
            expires_at=signed.expires_at,
            filename=f"{ebook.title}.pdf",
        )
    )
