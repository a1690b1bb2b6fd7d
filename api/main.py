"""
FastAPI application for inspecting import progress and quarantined items
"""

from fastapi import FastAPI
from api.middleware import RequestContextMiddleware
from api.routes import health, quarantine
from core.logging import setup_logging
import logging

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Product Importer API",
    description="Import checkpoints and quarantined products",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)

app.include_router(health.router)
app.include_router(quarantine.router)
