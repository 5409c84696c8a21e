import pytest
from uuid import uuid4

from app.core.exceptions import TableNotFoundError
from app.models.table import DiningTable, TableStatus
from app.schemas.response import RejectionCode


@pytest.mark.asyncio
async def test_create_table_starts_available(registry):
    result = await registry.create_table(5, 4)

    assert result.success
    table = result.data
    assert table.number == 5
    assert table.seats == 4
    assert table.status == TableStatus.AVAILABLE
    assert table.order_id is None


@pytest.mark.asyncio
async def test_duplicate_table_number_is_rejected_without_effect(registry, table5):
    """Scenario E: a second table #5 is refused and nothing is stored."""
    result = await registry.create_table(5, 2)

    assert not result.success
    assert result.code == RejectionCode.TABLE_NUMBER_TAKEN
    assert await DiningTable.filter(number=5).count() == 1
    assert (await registry.get_table(table5.id)).seats == 4


@pytest.mark.asyncio
async def test_non_positive_dimensions_raise(registry):
    with pytest.raises(ValueError):
        await registry.create_table(0, 4)
    with pytest.raises(ValueError):
        await registry.create_table(3, -1)


@pytest.mark.asyncio
async def test_renumber_to_free_number(registry, table5):
    result = await registry.update_table(table5.id, 7, 6)

    assert result.success
    stored = await registry.get_table(table5.id)
    assert (stored.number, stored.seats) == (7, 6)
    assert await registry.get_table_by_number(5) is None


@pytest.mark.asyncio
async def test_renumber_keeping_own_number_is_allowed(registry, table5):
    result = await registry.update_table(table5.id, 5, 8)
    assert result.success
    assert (await registry.get_table(table5.id)).seats == 8


@pytest.mark.asyncio
async def test_renumber_collision_is_rejected(registry, table5):
    other = (await registry.create_table(6, 2)).data

    result = await registry.update_table(other.id, 5, 2)

    assert not result.success
    assert result.code == RejectionCode.TABLE_NUMBER_TAKEN
    assert (await registry.get_table(other.id)).number == 6


@pytest.mark.asyncio
async def test_reserve_and_cancel_reservation(registry, table5):
    reserved = await registry.reserve_table(table5.id, "Rossi", "20:30")

    assert reserved.success
    table = await registry.get_table(table5.id)
    assert table.status == TableStatus.RESERVED
    assert (table.reservation_name, table.reservation_time) == ("Rossi", "20:30")

    cancelled = await registry.cancel_reservation(table5.id)

    assert cancelled.success
    table = await registry.get_table(table5.id)
    assert table.status == TableStatus.AVAILABLE
    assert table.reservation_name is None
    assert table.reservation_time is None


@pytest.mark.asyncio
async def test_cannot_reserve_a_table_that_is_not_available(registry, table5):
    await registry.reserve_table(table5.id, "Rossi", "20:30")

    result = await registry.reserve_table(table5.id, "Bianchi", "21:00")

    assert result.code == RejectionCode.TABLE_NOT_AVAILABLE
    assert (await registry.get_table(table5.id)).reservation_name == "Rossi"


@pytest.mark.asyncio
async def test_cancel_without_reservation_is_rejected(registry, table5):
    result = await registry.cancel_reservation(table5.id)
    assert result.code == RejectionCode.INVALID_TRANSITION


@pytest.mark.asyncio
async def test_delete_blocked_while_reserved_or_occupied(registry, table5):
    await registry.reserve_table(table5.id, "Rossi", "20:30")
    assert (await registry.delete_table(table5.id)).code == RejectionCode.TABLE_IN_USE

    await registry.transition_table(table5.id, TableStatus.OCCUPIED, order_id=uuid4())
    assert (await registry.delete_table(table5.id)).code == RejectionCode.TABLE_IN_USE
    assert await DiningTable.filter(id=table5.id).exists()


@pytest.mark.asyncio
async def test_delete_available_table(registry, table5):
    result = await registry.delete_table(table5.id)

    assert result.success
    with pytest.raises(TableNotFoundError):
        await registry.get_table(table5.id)


@pytest.mark.asyncio
async def test_order_reference_follows_status(registry, table5):
    order_id = uuid4()

    table = await registry.transition_table(table5.id, TableStatus.OCCUPIED, order_id=order_id)
    assert table.order_id == order_id

    # readyToPay keeps the reference when none is passed
    table = await registry.transition_table(table5.id, TableStatus.READY_TO_PAY)
    assert table.order_id == order_id

    table = await registry.transition_table(table5.id, TableStatus.AVAILABLE)
    assert table.order_id is None


@pytest.mark.asyncio
async def test_occupied_without_order_is_a_programming_error(registry, table5):
    with pytest.raises(ValueError):
        await registry.transition_table(table5.id, TableStatus.OCCUPIED)


@pytest.mark.asyncio
async def test_transition_of_deleted_table_returns_none(registry):
    assert await registry.transition_table(uuid4(), TableStatus.AVAILABLE) is None


@pytest.mark.asyncio
async def test_list_tables_filters_by_status(registry, table5):
    await registry.create_table(1, 2)
    await registry.reserve_table(table5.id, "Rossi", "20:30")

    assert [t.number for t in await registry.list_tables()] == [1, 5]
    assert [t.number for t in await registry.list_tables(TableStatus.RESERVED)] == [5]


@pytest.mark.asyncio
async def test_unknown_table_raises(registry):
    with pytest.raises(TableNotFoundError):
        await registry.update_table(uuid4(), 9, 2)
