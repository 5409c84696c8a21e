from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
import uuid

from app.models.table import TableStatus


class TableCreateRequest(BaseModel):
    number: int = Field(..., gt=0, description="Display number, unique across the floor.")
    seats: int = Field(..., gt=0, description="Number of seats at the table.")

class TableUpdateRequest(TableCreateRequest):
    pass

class ReservationRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Name the reservation is under.")
    time: str = Field(..., min_length=1, description="Reserved time, as entered by staff (e.g. 20:30).")

class TableResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    number: int
    seats: int
    status: TableStatus
    order_id: Optional[uuid.UUID] = None
    reservation_name: Optional[str] = None
    reservation_time: Optional[str] = None
    updated_at: datetime
