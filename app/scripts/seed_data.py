# scripts/seed_data.py
import asyncio
from decimal import Decimal
from tortoise import Tortoise
from app.core.db import DB_URL, MODELS_MODULES
from app.models.menu import Category, MenuItem
from app.models.order import ItemType
from app.models.table import DiningTable

CATALOG = {
    ("Antipasti", ItemType.FOOD): [("Bruschetta", "6.00"), ("Caprese", "8.50")],
    ("Primi Piatti", ItemType.FOOD): [("Carbonara", "12.00"), ("Risotto ai funghi", "13.50")],
    ("Bevande Analcoliche", ItemType.DRINK): [("Acqua naturale", "2.00"), ("Coca-Cola", "3.00")],
    ("Vini", ItemType.DRINK): [("Chianti (calice)", "5.50")],
}

TABLES = [(1, 2), (2, 2), (3, 4), (4, 4), (5, 4), (6, 6)]

async def init():
    await Tortoise.init(db_url=DB_URL, modules={"models": MODELS_MODULES})
    await Tortoise.generate_schemas()

async def seed():
    for sort_order, ((name, item_type), dishes) in enumerate(CATALOG.items(), start=1):
        category, _ = await Category.get_or_create(name=name, defaults={"type": item_type, "sort_order": sort_order})
        for dish, price in dishes:
            item, _ = await MenuItem.get_or_create(
                name=dish,
                defaults={"category": category, "price": Decimal(price), "type": item_type, "available": True},
            )
            print(f"Menu item: {item.name} ({item.type.value}) {item.id}")

    for number, seats in TABLES:
        table, _ = await DiningTable.get_or_create(number=number, defaults={"seats": seats})
        print(f"Table {table.number}: {table.id}")

    print("Catalog and tables seeded.")

async def main():
    await init()
    await seed()
    await Tortoise.close_connections()

if __name__ == "__main__":
    asyncio.run(main())
