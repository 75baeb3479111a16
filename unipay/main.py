from __future__ import annotations

from fastapi import FastAPI

from unipay.logging import setup_logging
from unipay.routes import health, payments

setup_logging()

app = FastAPI(title="Unipay")
app.include_router(health.router)
app.include_router(payments.router)
