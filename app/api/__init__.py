# app/api/__init__.py
from fastapi import FastAPI
from app.api.routers import orders
from app.api.routers.health import router as health_router


def create_app() -> FastAPI:
    app = FastAPI(
        title="Campus Marketplace Orders",
        version="1.0.0",
    )
    app.include_router(health_router)
    app.include_router(orders.router)
    return app
