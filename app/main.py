import asyncio
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, status
from app.core.db import init_db, close_db
from app.api.v1.orders import router as orders_router
from app.api.v1.tables import router as tables_router
from app.core.config import LOG_LEVEL, PROJECT_NAME, VERSION
from app.core.exception_handlers import setup_exception_handlers
from app.services.order_ledger import OrderLedger
from app.services.table_registry import TableRegistry

logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger(__name__)


def build_services(app: FastAPI) -> None:
    """One registry and one ledger per process, sharing the writer lock."""
    writer_lock = asyncio.Lock()
    app.state.tables = TableRegistry(lock=writer_lock)
    app.state.ledger = OrderLedger(app.state.tables, lock=writer_lock)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    build_services(app)
    log.info(f"{PROJECT_NAME} v{VERSION} ready, tables and order ledger online.")
    yield
    await close_db()


app = FastAPI(title=PROJECT_NAME, version=VERSION, lifespan=lifespan)
app.include_router(tables_router, prefix="/api/v1/tables", tags=["Table Registry"])
app.include_router(orders_router, prefix="/api/v1/orders", tags=["Order Ledger"])
setup_exception_handlers(app)


@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    return {"status": "ok", "service": PROJECT_NAME}
