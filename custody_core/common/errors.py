# custody_core/common/errors.py
from __future__ import annotations

from typing import Any

from rest_framework import status
from rest_framework.exceptions import APIException


class CustodyError(APIException):
    """
    Base class for every rejected ledger operation.

    Raised by services before any mutation; the API exception handler turns it
    into the standard error envelope, keeping `details` (the offending values)
    in their native JSON types.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request failed."
    default_code = "custody_error"

    def __init__(self, message: str | None = None, **details: Any):
        self.message = message or str(self.default_detail)
        self.details = details
        super().__init__(detail=self.message, code=self.default_code)

    @property
    def code(self) -> str:
        return self.default_code

    def __str__(self) -> str:
        if not self.details:
            return self.message
        parts = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        return f"{self.message} ({parts})"


class Unauthorized(CustodyError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Caller lacks the required role or is inactive."
    default_code = "unauthorized"


class NotFound(CustodyError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class AlreadyExists(CustodyError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Already exists."
    default_code = "already_exists"


class AlreadyApproved(CustodyError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Medicine is already approved."
    default_code = "already_approved"


class NotApproved(CustodyError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Medicine is not approved."
    default_code = "not_approved"


class InvalidInput(CustodyError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "invalid_input"


class InvalidQuantity(InvalidInput):
    default_detail = "Quantity must be greater than zero."
    default_code = "invalid_quantity"


class BatchInactive(CustodyError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Batch is not active."
    default_code = "batch_inactive"


class IneligibleReceiver(CustodyError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Receiver cannot accept stock."
    default_code = "ineligible_receiver"


class InsufficientInventory(CustodyError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Insufficient inventory."
    default_code = "insufficient_inventory"


class InsufficientBatchQuantity(CustodyError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Insufficient remaining batch quantity."
    default_code = "insufficient_batch_quantity"
