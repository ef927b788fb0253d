"""FastAPI application setup for the routing service."""

from fastapi import FastAPI

from .api import health_router, router as routing_router

app = FastAPI(title="GeoRoute")

app.include_router(routing_router, prefix="/api")
app.include_router(health_router, prefix="/api")
