"""FastAPI app, CORS, and route registration."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tapreel.config import LOG_LEVEL, configure_logging

# Also applies when the app is served directly (uvicorn tapreel.api.app:app)
configure_logging(LOG_LEVEL)

from tapreel.api.state import AppState, get_state

# Import routes after state to avoid circular imports
from tapreel.api.routes import mappings, scanner

__all__ = ["app", "AppState", "get_state"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    state = get_state()
    state.startup()
    service = state.rfid_service
    logging.getLogger(__name__).info(
        "Tapreel ready: %d mappings, RFID %s",
        service.mapping_count(),
        "enabled" if service.is_enabled() else "unavailable",
    )

    yield

    state.shutdown()


app = FastAPI(
    title="Tapreel API",
    description="Local REST API for RFID tag to video mappings",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(mappings.router, prefix="/api/mappings", tags=["mappings"])
app.include_router(scanner.router, prefix="/api/scanner", tags=["scanner"])
