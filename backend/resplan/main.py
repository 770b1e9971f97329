"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from resplan import __version__
from resplan.config import get_settings
from resplan.routers import calculations, calendar, capacity

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Resource Capacity & Effort-Cost Engine",
    description="Business-day scheduling, tier-adjusted effort and cost, and capacity validation",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(calendar.router)
app.include_router(calculations.router)
app.include_router(capacity.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
