from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base for errors rendered as ``{"error": ..., "code": ...}``."""

    code: str = "error"

    def __init__(self, status_code: int, detail: str, **extra: Any):
        super().__init__(status_code=status_code, detail=detail)
        self.extra = extra


class UnauthenticatedException(AppException):
    code = "unauthenticated"

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(status.HTTP_401_UNAUTHORIZED, detail)


class NotPurchasedException(AppException):
    code = "not_purchased"

    def __init__(self, detail: str = "No purchase record for this item"):
        super().__init__(status.HTTP_403_FORBIDDEN, detail)


class ItemNotFoundException(AppException):
    code = "not_found"

    def __init__(self, kind: str):
        super().__init__(status.HTTP_404_NOT_FOUND, f"{kind.capitalize()} not found")


class UpstreamException(AppException):
    code = "upstream_error"

    def __init__(self, detail: str, upstream_status: int | None = None):
        super().__init__(status.HTTP_502_BAD_GATEWAY, detail)
        self.upstream_status = upstream_status


class PaymentNotCapturedException(AppException):
    code = "payment_not_captured"

    def __init__(self, payment_status: str | None):
        super().__init__(
            status.HTTP_400_BAD_REQUEST,
            "Payment has not been completed",
            status=payment_status,
        )


class AmountMismatchException(AppException):
    code = "amount_mismatch"

    def __init__(self):
        super().__init__(status.HTTP_400_BAD_REQUEST, "Paid amount does not match the item price")


class AlreadyGrantedException(AppException):
    code = "already_granted"

    def __init__(self, kind: str):
        super().__init__(status.HTTP_400_BAD_REQUEST, f"{kind.capitalize()} already purchased")


class NotFreeItemException(AppException):
    code = "not_free"

    def __init__(self, kind: str):
        super().__init__(status.HTTP_400_BAD_REQUEST, f"{kind.capitalize()} is not free")


class InvalidPaymentIdException(AppException):
    code = "invalid_payment_id"

    def __init__(self, detail: str = "Malformed payment id"):
        super().__init__(status.HTTP_400_BAD_REQUEST, detail)


class WriteFailedException(AppException):
    code = "write_failed"

    def __init__(self, detail: str = "Failed to record purchase"):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail)
