from app.common.exceptions import (
    AlreadyGrantedException,
    AmountMismatchException,
    AppException,
    InvalidPaymentIdException,
    ItemNotFoundException,
    NotFreeItemException,
    NotPurchasedException,
    PaymentNotCapturedException,
    UnauthenticatedException,
    UpstreamException,
    WriteFailedException,
)

__all__ = [
    "AppException",
    "UnauthenticatedException",
    "NotPurchasedException",
    "ItemNotFoundException",
    "UpstreamException",
    "PaymentNotCapturedException",
    "AmountMismatchException",
    "AlreadyGrantedException",
    "NotFreeItemException",
    "InvalidPaymentIdException",
    "WriteFailedException",
]
