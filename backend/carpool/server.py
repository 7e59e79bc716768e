import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from carpool.core.config import Settings, load_settings
from carpool.core.errors import RideError
from carpool.db.mongo import build_store
from carpool.db.store import RideStore
from carpool.realtime.manager import RideRooms
from carpool.routers import rides, ws
from carpool.services.rides import RideService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    store: RideStore = app.state.store
    try:
        await store.ensure_indexes()
        await store.ping()
        logger.info("Ride store connection verified")
    except RideError as exc:
        logger.error("Ride store connection failed: %s", exc.message)
    try:
        yield
    finally:
        store.close()


def create_app(settings: Optional[Settings] = None, store: Optional[RideStore] = None) -> FastAPI:
    settings = settings or load_settings()
    store = store or build_store(settings)
    rooms = RideRooms()

    app = FastAPI(title="Carpool API", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.rooms = rooms
    app.state.ride_service = RideService(store, hub=settings.hub, rooms=rooms)

    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RideError)
    async def ride_error_handler(request: Request, exc: RideError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def body_error_handler(request: Request, exc: RequestValidationError):
        # malformed bodies are client errors like any other missing field
        return JSONResponse(status_code=400, content={"detail": "invalid request body", "kind": "validation"})

    @app.get("/")
    async def root():
        return {"message": "Carpool API is running. Go to /docs"}

    @app.get("/health")
    async def health():
        return {"ok": True}

    app.include_router(rides.router)
    app.include_router(ws.router)
    return app
