# app/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.routes import router as api_router
from app.logger import configure_logging
from services.credentials import has_credential
from services.geolocation import resolve_startup_coordinates

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """起動時に 1 回だけ現在地を取りに行く（取れなくても起動は止めない）。"""
    app.state.coordinates = resolve_startup_coordinates()
    logger.info(
        "[main] startup coordinates=%s has_credential=%s",
        "YES" if app.state.coordinates else "NO",
        has_credential(),
    )
    yield


app = FastAPI(title="GrowthStack Forensics", lifespan=lifespan)

app.include_router(api_router, prefix="/api")
