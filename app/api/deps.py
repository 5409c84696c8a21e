from fastapi import HTTPException, Request, status

from app.schemas.response import RejectionCode, ServiceResult
from app.services.order_ledger import OrderLedger
from app.services.table_registry import TableRegistry

# HTTP status for each expected rejection
REJECTION_STATUS = {
    RejectionCode.ORDER_PAID: status.HTTP_409_CONFLICT,
    RejectionCode.INVALID_TRANSITION: status.HTTP_400_BAD_REQUEST,
    RejectionCode.TABLE_NUMBER_TAKEN: status.HTTP_409_CONFLICT,
    RejectionCode.TABLE_IN_USE: status.HTTP_409_CONFLICT,
    RejectionCode.TABLE_NOT_AVAILABLE: status.HTTP_409_CONFLICT,
    RejectionCode.TABLE_HAS_ACTIVE_ORDER: status.HTTP_409_CONFLICT,
    RejectionCode.MENU_ITEM_UNAVAILABLE: status.HTTP_409_CONFLICT,
}


class RejectedRequest(HTTPException):
    """HTTPException that keeps the service's rejection code for the error body."""

    def __init__(self, result: ServiceResult):
        super().__init__(status_code=REJECTION_STATUS.get(result.code, 400), detail=result.message)
        self.code = result.code.value if result.code else "http_error"


def unwrap(result: ServiceResult):
    """Returns the result payload or raises the matching HTTP error."""
    if not result.success:
        raise RejectedRequest(result)
    return result.data


def get_ledger(request: Request) -> OrderLedger:
    return request.app.state.ledger


def get_tables(request: Request) -> TableRegistry:
    return request.app.state.tables
