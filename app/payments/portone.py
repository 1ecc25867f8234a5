"""Read-only client for the PortOne V2 payments API."""

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from app.common.exceptions import UpstreamException
from app.config import get_settings

logger = logging.getLogger(__name__)

PAID = "PAID"


class PaymentInfo(BaseModel):
    payment_id: str
    status: str | None
    amount: int | None

    @property
    def is_paid(self) -> bool:
        return self.status == PAID

    @classmethod
    def from_api(cls, payment_id: str, data: dict[str, Any]) -> "PaymentInfo":
        amount = data.get("amount")
        total = amount.get("total") if isinstance(amount, dict) else None
        # Older responses carry only the flat totalAmount field
        paid = total or data.get("totalAmount")
        # Only a JSON integer counts as an amount; strings, floats and bools
        # are left unset so they never match a catalog price
        if not isinstance(paid, int) or isinstance(paid, bool):
            paid = None
        return cls(payment_id=payment_id, status=data.get("status"), amount=paid)


class PortOneClient:
    """
    Fetches authoritative payment state from PortOne.

    One GET per call, no retries. Every failure to obtain a usable answer
    (missing secret, network error, non-2xx, malformed body) is raised as
    UpstreamException so callers can map it to 502.
    """

    def __init__(
        self,
        api_url: str,
        api_secret: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.api_secret = api_secret
        self.timeout = timeout
        self.transport = transport

    def get_payment(self, payment_id: str) -> PaymentInfo:
        if not self.api_secret:
            raise UpstreamException("PortOne API secret is not configured")

        url = f"{self.api_url}/payments/{quote(payment_id, safe='')}"
        headers = {
            "Authorization": f"PortOne {self.api_secret}",
            "Content-Type": "application/json",
        }
        logger.info(f"Fetching PortOne payment {payment_id}")

        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = client.get(url, headers=headers)
            except httpx.TimeoutException:
                logger.warning(f"PortOne timeout for payment {payment_id}")
                raise UpstreamException("PortOne request timed out")
            except httpx.RequestError as e:
                logger.warning(f"PortOne request error for payment {payment_id}: {e}")
                raise UpstreamException(f"PortOne request failed: {e}")

        if response.is_error:
            logger.warning(
                f"PortOne returned {response.status_code} for payment {payment_id}: {response.text}"
            )
            raise UpstreamException(
                f"PortOne API error: {response.status_code} - {response.text}",
                upstream_status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            raise UpstreamException("PortOne returned a non-JSON response")
        if not isinstance(data, dict):
            raise UpstreamException("PortOne returned an unexpected payload")

        try:
            return PaymentInfo.from_api(payment_id, data)
        except (TypeError, ValueError):
            raise UpstreamException("PortOne returned an unexpected payload")


def get_payment_client() -> PortOneClient:
    settings = get_settings()
    return PortOneClient(
        api_url=settings.portone_api_url,
        api_secret=settings.portone_api_secret,
        timeout=settings.portone_timeout,
    )
