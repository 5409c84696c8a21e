import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_tables, unwrap
from app.models.table import TableStatus
from app.schemas.response import SuccessResponse
from app.schemas.table import ReservationRequest, TableCreateRequest, TableResponse, TableUpdateRequest
from app.services.table_registry import TableRegistry

router = APIRouter()
log = logging.getLogger("uvicorn")


def _out(table) -> dict:
    return TableResponse.model_validate(table).model_dump()


@router.get("/", response_model=SuccessResponse)
async def list_tables_endpoint(
    table_status: Optional[TableStatus] = Query(None, alias="status"),
    tables: TableRegistry = Depends(get_tables),
):
    return SuccessResponse(data=[_out(t) for t in await tables.list_tables(table_status)])


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_table_endpoint(payload: TableCreateRequest, tables: TableRegistry = Depends(get_tables)):
    table = unwrap(await tables.create_table(payload.number, payload.seats))
    return SuccessResponse(data=_out(table))


@router.get("/{table_id}", response_model=SuccessResponse)
async def get_table_endpoint(table_id: UUID, tables: TableRegistry = Depends(get_tables)):
    return SuccessResponse(data=_out(await tables.get_table(table_id)))


@router.put("/{table_id}", response_model=SuccessResponse)
async def update_table_endpoint(table_id: UUID, payload: TableUpdateRequest, tables: TableRegistry = Depends(get_tables)):
    """Renumber or reseat a table."""
    table = unwrap(await tables.update_table(table_id, payload.number, payload.seats))
    return SuccessResponse(data=_out(table))


@router.delete("/{table_id}", response_model=SuccessResponse)
async def delete_table_endpoint(table_id: UUID, tables: TableRegistry = Depends(get_tables)):
    """Deletes a table unless it is occupied or reserved."""
    table = unwrap(await tables.delete_table(table_id))
    log.info(f"Table {table.number} removed from the floor.")
    return SuccessResponse(data={"id": str(table.id), "number": table.number})


@router.post("/{table_id}/reservation", response_model=SuccessResponse)
async def reserve_table_endpoint(table_id: UUID, payload: ReservationRequest, tables: TableRegistry = Depends(get_tables)):
    table = unwrap(await tables.reserve_table(table_id, payload.name, payload.time))
    return SuccessResponse(data=_out(table))


@router.delete("/{table_id}/reservation", response_model=SuccessResponse)
async def cancel_reservation_endpoint(table_id: UUID, tables: TableRegistry = Depends(get_tables)):
    table = unwrap(await tables.cancel_reservation(table_id))
    return SuccessResponse(data=_out(table))
