import logging
import threading
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel

from srs.application.config import AppConfig, resolve_config
from srs.application.deck_service import DeckService
from srs.application.schemas import (
    DeckStatsResponse,
    DueCardsResponse,
    ListDecksResponse,
    RateCardRequest,
    RateCardResponse,
)
from srs.consts import VERSION
from srs.domain.errors import DeckPathError, FileIOError, SrsError, ValidationError

logger = logging.getLogger("srs.server")


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


def _http_error(e: SrsError) -> HTTPException:
    if isinstance(e, (ValidationError, DeckPathError)):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, FileIOError) and e.missing:
        return HTTPException(status_code=404, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


def create_app(config: AppConfig | None = None, service: DeckService | None = None) -> FastAPI:
    """
    Build the daemon. The deck service lives on `app.state`, so several apps
    with different configurations can coexist (tests, multiple base decks).
    """
    if service is None:
        from srs.application.factory import get_deck_service

        service = get_deck_service(config or resolve_config())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info(f"srs daemon v{VERSION} starting up (base deck: {service.config.base_deck_path})")
        yield
        # Shutdown
        logger.info("srs daemon shutting down...")

    app = FastAPI(
        title="srs daemon",
        description="Review and schedule markdown flashcards over HTTP.",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.service = service
    # The core is single-threaded; sync endpoints run in a thread pool.
    app.state.lock = threading.Lock()
    app.state.start_time = time.time()

    def _call(request: Request, operation: str, *args):
        service: DeckService = request.app.state.service
        try:
            with request.app.state.lock:
                return getattr(service, operation)(*args)
        except SrsError as e:
            logger.error(f"{operation} failed: {e}")
            raise _http_error(e) from e

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """
        Simple health check to verify the daemon is reachable.
        """
        return HealthResponse(
            status="ok",
            version=VERSION,
            uptime_seconds=time.time() - request.app.state.start_time,
        )

    @app.get("/version")
    async def get_version():
        return {"version": VERSION}

    @app.get("/cards/due", response_model=DueCardsResponse)
    def get_due_cards(request: Request, deck_path: str = "."):
        """Cards whose due date has passed, with their content."""
        return _call(request, "get_due_cards", deck_path)

    @app.post("/cards/rate", response_model=RateCardResponse)
    def rate_card(request: Request, req: RateCardRequest):
        """Rate one card (1=Again, 2=Hard, 3=Good, 4=Easy) and persist the result."""
        return _call(request, "rate_card", req.file_path, req.rating)

    @app.get("/decks/stats", response_model=DeckStatsResponse)
    def get_deck_stats(request: Request, deck_path: str = "."):
        return _call(request, "get_deck_stats", deck_path)

    @app.get("/decks", response_model=ListDecksResponse)
    def list_decks(request: Request):
        """Per-directory stats for every deck under the base deck."""
        return _call(request, "list_decks")

    return app
