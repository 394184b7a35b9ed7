import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, status
from app.core.db import init_db, close_db
from app.api.v1.admin import router as admin_router
from app.api.v1.auth import router as auth_router, account_router
from app.api.v1.browse import router as browse_router
from app.api.v1.cart import router as cart_router
from app.api.v1.habits import router as habits_router
from app.api.v1.inventory import router as inventory_router
from app.api.v1.menu_items import router as menu_items_router
from app.api.v1.notifications import router as notifications_router
from app.api.v1.orders import router as orders_router
from app.api.v1.payments import router as payments_router
from app.api.v1.pickups import router as pickups_router
from app.api.v1.trucks import router as trucks_router
from app.core.config import LOG_LEVEL, PROJECT_NAME, VERSION
from app.core.exception_handlers import setup_exception_handlers

logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handles startup and shutdown events."""
    log.info(f"Starting {PROJECT_NAME} v{VERSION}...")
    await init_db() # Connect to DB and generate schemas
    yield
    await close_db()
    log.info(f"{PROJECT_NAME} stopped.")

app = FastAPI(
    title=PROJECT_NAME,
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Include routers for modular API structure
app.include_router(auth_router, prefix="/api/v1/auth", tags=["Authentication"])
app.include_router(account_router, prefix="/api/v1/account", tags=["Account"])
app.include_router(trucks_router, prefix="/api/v1/trucks", tags=["Trucks"])
app.include_router(menu_items_router, prefix="/api/v1/menu-items", tags=["Menu"])
app.include_router(cart_router, prefix="/api/v1/cart", tags=["Cart"])
app.include_router(orders_router, prefix="/api/v1/orders", tags=["Order Management"])
app.include_router(inventory_router, prefix="/api/v1/inventory", tags=["Inventory Management"])
app.include_router(pickups_router, prefix="/api/v1/pickups", tags=["Pickups"])
app.include_router(payments_router, prefix="/api/v1/payments", tags=["Payments"])
app.include_router(notifications_router, prefix="/api/v1/notifications", tags=["Notifications"])
app.include_router(admin_router, prefix="/api/v1/admin", tags=["Administration"])
app.include_router(browse_router, prefix="/api/v1", tags=["Browse"])
app.include_router(habits_router, prefix="/api/v1/habits", tags=["Habits"])


setup_exception_handlers(app)

@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """Simple health check endpoint."""
    return {"status": "ok", "app_name": PROJECT_NAME}
