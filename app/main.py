import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app import models  # noqa: F401  registers every table on the metadata
from app.config import settings
from app.database import create_db_and_tables
from app.exceptions import register_exception_handlers
from app.routes import (
    admin_analytics,
    admin_notifications,
    admin_orders,
    admin_users,
    auth,
    cart,
    categories_admin,
    categories_public,
    checkout,
    health,
    orders,
    payments,
    products_admin,
    products_public,
    shipping,
    users,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.ENV == "local":
        create_db_and_tables()
    yield

app = FastAPI(title="Gitarin Store API", lifespan=lifespan)
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(users.router, prefix="/users", tags=["Users"])
app.include_router(products_public.router, prefix="/products", tags=["Public Products"])
app.include_router(categories_public.router, prefix="/categories", tags=["Public Categories"])
app.include_router(cart.router, prefix="/cart", tags=["Cart"])
app.include_router(checkout.router, prefix="/checkout", tags=["Checkout"])
app.include_router(orders.router, prefix="/orders", tags=["Orders"])
app.include_router(payments.router, prefix="/payments", tags=["Payments"])
app.include_router(shipping.router, prefix="/shipping", tags=["Shipping"])
app.include_router(products_admin.router, prefix="/admin/products", tags=["Admin Products"])
app.include_router(categories_admin.router, prefix="/admin/categories", tags=["Admin Categories"])
app.include_router(admin_users.router, prefix="/admin/users", tags=["Admin Users"])
app.include_router(admin_orders.router, prefix="/admin/orders", tags=["Admin Orders"])
app.include_router(admin_analytics.router, prefix="/admin/reports", tags=["Admin Reports"])
app.include_router(admin_notifications.router, prefix="/admin/notifications", tags=["Admin Notifications"])
app.include_router(health.router, prefix="/health", tags=["Health"])

os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


@app.get("/")
def root():
    return {"name": "Gitarin Store API", "docs": "/docs"}
