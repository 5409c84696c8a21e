from enum import Enum
from pydantic import BaseModel, Field
from typing import Any, Optional
import uuid

def _rid():
    return uuid.uuid4().hex

class SuccessResponse(BaseModel):
    """Simple success response wrapper with just data, success, and request_id"""
    success: Optional[bool] = Field(default=True)
    request_id: str = Field(default_factory=_rid)
    data: Optional[Any] = None


class RejectionCode(str, Enum):
    """Expected business/validation rejections reported by the services."""
    ORDER_PAID = "order_paid"
    INVALID_TRANSITION = "invalid_transition"
    TABLE_NUMBER_TAKEN = "table_number_taken"
    TABLE_IN_USE = "table_in_use"
    TABLE_NOT_AVAILABLE = "table_not_available"
    TABLE_HAS_ACTIVE_ORDER = "table_has_active_order"
    MENU_ITEM_UNAVAILABLE = "menu_item_unavailable"


class ServiceResult(BaseModel):
    """
    Outcome of a ledger/registry mutation. A rejected mutation has no effect
    on stored state; `code` and `message` tell the operator why.
    """
    success: bool = True
    code: Optional[RejectionCode] = None
    message: Optional[str] = None
    data: Optional[Any] = None

    @classmethod
    def ok(cls, data: Any = None) -> "ServiceResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, code: RejectionCode, message: str) -> "ServiceResult":
        return cls(success=False, code=code, message=message)

    def __bool__(self) -> bool:
        return self.success
