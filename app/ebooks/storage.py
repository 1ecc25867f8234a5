"""Signed download URLs from Supabase Storage."""

import logging
from datetime import datetime, timedelta, timezone
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from app.common.exceptions import UpstreamException
from app.config import get_settings

logger = logging.getLogger(__name__)


class SignedUrl(BaseModel):
    url: str
    expires_at: datetime


class StorageClient:
    def __init__(
        self,
        supabase_url: str,
        service_role_key: str,
        bucket: str,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = f"{supabase_url.rstrip('/')}/storage/v1"
        self.service_role_key = service_role_key
        self.bucket = bucket
        self.transport = transport

    def create_signed_url(self, path: str, expires_in: int) -> SignedUrl:
        """
        Sign a private object path for ``expires_in`` seconds.

        Raises UpstreamException if Storage rejects the request.
        """
        url = f"{self.base_url}/object/sign/{self.bucket}/{quote(path)}"
        headers = {
            "Authorization": f"Bearer {self.service_role_key}",
            "apikey": self.service_role_key,
        }

        with httpx.Client(timeout=10.0, transport=self.transport) as client:
            try:
                response = client.post(url, headers=headers, json={"expiresIn": expires_in})
            except httpx.RequestError as e:
                logger.warning(f"Storage request error for {path}: {e}")
                raise UpstreamException(f"Failed to create download URL: {e}")

        if response.is_error:
            logger.warning(f"Storage returned {response.status_code} for {path}: {response.text}")
            raise UpstreamException(
                f"Failed to create download URL: {response.text}",
                upstream_status=response.status_code,
            )

        signed_path = response.json().get("signedURL")
        if not signed_path:
            raise UpstreamException("Failed to create download URL: no signedURL in response")

        # An empty download param makes Storage serve the file as an attachment
        separator = "&" if "?" in signed_path else "?"
        return SignedUrl(
            url=f"{self.base_url}{signed_path}{separator}download=",
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        )


def get_storage_client() -> StorageClient:
    settings = get_settings()
    return StorageClient(
        supabase_url=settings.supabase_url,
        service_role_key=settings.supabase_service_role_key,
        bucket=settings.ebook_bucket,
    )
