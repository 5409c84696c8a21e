import asyncio
from decimal import Decimal
from types import SimpleNamespace

import pytest
import pytest_asyncio
from tortoise import Tortoise

from app.core.db import MODELS_MODULES
from app.models.menu import Category, MenuItem
from app.models.order import ItemType
from app.schemas.order import OrderLineRequest
from app.services.order_ledger import OrderLedger
from app.testing.testing_mocks import RecordingPrintSink, RecordingTableRegistry


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory database per test."""
    await Tortoise.init(db_url="sqlite://:memory:", modules={"models": MODELS_MODULES})
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def writer_lock():
    return asyncio.Lock()


@pytest_asyncio.fixture
async def registry(db, writer_lock):
    return RecordingTableRegistry(lock=writer_lock)


@pytest_asyncio.fixture
async def ledger(registry, writer_lock):
    return OrderLedger(registry, lock=writer_lock, reopen_reverts_table=True)


@pytest_asyncio.fixture
async def menu(db):
    """A small catalog: two dishes, two drinks and a dish that is off the menu."""
    kitchen = await Category.create(name="Primi", type=ItemType.FOOD, sort_order=1)
    bar = await Category.create(name="Bevande", type=ItemType.DRINK, sort_order=2)

    async def item(name, price, item_type, category, available=True):
        return await MenuItem.create(
            name=name, price=Decimal(price), type=item_type, category=category, available=available
        )

    return SimpleNamespace(
        pasta=await item("Carbonara", "6.00", ItemType.FOOD, kitchen),
        tiramisu=await item("Tiramisu", "4.50", ItemType.FOOD, kitchen),
        wine=await item("Chianti", "5.50", ItemType.DRINK, bar),
        water=await item("Acqua", "2.00", ItemType.DRINK, bar),
        soup=await item("Minestrone", "7.00", ItemType.FOOD, kitchen, available=False),
    )


@pytest_asyncio.fixture
async def table5(registry):
    result = await registry.create_table(5, 4)
    return result.data


@pytest.fixture
def line():
    def _line(menu_item, quantity=1, notes=None):
        return OrderLineRequest(menu_item_id=menu_item.id, quantity=quantity, notes=notes)
    return _line


@pytest.fixture
def print_sink():
    return RecordingPrintSink()
