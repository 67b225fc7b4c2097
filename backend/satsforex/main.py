"""HTTP entry point: ``uvicorn satsforex.main:app``."""
from __future__ import annotations

from fastapi import FastAPI

from satsforex.api.routes import router
from satsforex.config.logging import setup_logging

setup_logging()

app = FastAPI(
    title="SatsForex",
    description="Bitcoin-denominated ranking of currencies, metals and Bitcoin itself.",
    version="0.1.0",
)
app.include_router(router)
