"""
Startup Tracker - Main FastAPI Application
"""

import asyncio
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import uvicorn
from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker

from ..config import Config, get_config
from ..database.connection import (
    check_database_connection,
    create_database_engine,
    create_session_factory,
    get_db,
    init_db,
)
from ..database.repositories import StartupRepository
from ..scrapers.scraper_service import ScraperService, build_fetch_limiter
from ..services.ingestion import IngestionService
from ..utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def create_app(config: Optional[Config] = None, session_factory: Optional[sessionmaker] = None) -> FastAPI:
    """Build the application around one configuration and one session factory."""
    config = config or get_config()
    if session_factory is None:
        session_factory = create_session_factory(create_database_engine(config.database))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(config=config.logging)
        init_db(session_factory.kw["bind"])
        logger.info("Startup Tracker ready", environment=config.app.environment)
        yield

    app = FastAPI(
        title=config.app.name,
        description="Tracks venture portfolio and accelerator startups",
        version=config.app.version,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.session_factory = session_factory
    app.state.fetch_limiter = build_fetch_limiter(config)

    app.add_api_route("/api/scrape", scrape, methods=["GET"])
    app.add_api_route("/api/startups", list_startups, methods=["GET"])
    app.add_api_route("/api/stats", get_stats, methods=["GET"])
    app.add_api_route("/health", health_check, methods=["GET"])
    return app


def get_ingestion_service(request: Request) -> IngestionService:
    """
    A fresh scraper service per refresh.

    Seen-name sets and the HTTP session are per request; the fetch proxy's
    limiter is the application's single instance.
    """
    state = request.app.state
    scraper_service = ScraperService(state.config, rate_limiter=state.fetch_limiter)
    return IngestionService(scraper_service, state.session_factory)


async def scrape(request: Request, ingestion: IngestionService = Depends(get_ingestion_service)):
    """Run one refresh cycle within the configured time limit."""
    max_duration = request.app.state.config.web.max_duration
    try:
        summary = await asyncio.wait_for(ingestion.refresh(), timeout=max_duration)
    except asyncio.TimeoutError:
        logger.error("Refresh timed out", max_duration=max_duration)
        return JSONResponse(
            status_code=500,
            content={"error": "Operation failed", "details": f"Refresh exceeded {max_duration:g}s limit"},
        )
    except Exception as e:
        logger.exception("Refresh failed")
        return JSONResponse(
            status_code=500,
            content={"error": "Operation failed", "details": str(e) or type(e).__name__},
        )

    return summary.to_dict()


def list_startups(
    request: Request,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=500),
):
    """Stored startups, newest first, one page at a time."""
    with get_db(request.app.state.session_factory) as session:
        result = StartupRepository(session).paginate(page=page, page_size=page_size)
        items = [startup.to_dict() for startup in result.pop("items")]

    return {"success": True, "data": items, "count": result.pop("total_count"), **result}


def get_stats(request: Request):
    """Live record count."""
    with get_db(request.app.state.session_factory) as session:
        total = StartupRepository(session).count()
    return {"success": True, "data": {"total": total}}


def health_check(request: Request):
    """Health check endpoint"""
    database_ok = check_database_connection(request.app.state.session_factory)
    return {
        "status": "healthy" if database_ok else "degraded",
        "service": "Startup Tracker",
        "database": "connected" if database_ok else "unavailable",
    }


def server_settings(config: Optional[Config] = None) -> Dict[str, Any]:
    """uvicorn bind and log settings; HOST, PORT and LOG_LEVEL override the config."""
    config = config or get_config()
    return {
        "host": os.getenv("HOST") or config.web.host,
        "port": int(os.getenv("PORT") or config.web.port),
        "log_level": (os.getenv("LOG_LEVEL") or config.logging.level).lower(),
        "reload": config.app.debug,
    }


if __name__ == "__main__":
    settings = server_settings()
    settings.pop("reload")
    uvicorn.run(create_app(), **settings)
