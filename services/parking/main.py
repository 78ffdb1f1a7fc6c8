"""
Parking occupancy FastAPI service -- nearby lots, live lot occupancy and
sensor batch ingestion.

Entrypoint: uvicorn services.parking.main:app --host 0.0.0.0 --port 8000
"""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from sqlalchemy.ext.asyncio import async_sessionmaker
from starlette.responses import JSONResponse

from services.parking.config import settings
from services.parking.db.engine import create_engine, create_tables
from services.parking.middleware.cors import setup_cors
from services.parking.middleware.sentry import setup_sentry
from services.parking.occupancy.errors import InvalidRequest, OccupancyError
from services.parking.routers import health, parking_lots

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    setup_sentry()
    app.state.settings = settings

    sa_engine = None
    app.state.db_session_factory = None
    if settings.database_url:
        try:
            sa_engine = create_engine()
            if settings.db_create_tables:
                await create_tables(sa_engine)
            # expire_on_commit=False: NullPool returns connection after commit,
            # lazy load on closed connection would fail without this.
            app.state.db_session_factory = async_sessionmaker(
                sa_engine, expire_on_commit=False
            )
        except Exception as e:
            # Requests fail with PERSISTENCE_FAILURE until the DB is reachable
            logger.warning(f"SA engine failed to init: {e}")

    yield

    if sa_engine:
        await sa_engine.dispose()


app = FastAPI(
    title="Parking Occupancy API",
    version=settings.app_version,
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url=None,
    lifespan=lifespan,
)
app.state.settings = settings

app.include_router(health.router)
app.include_router(parking_lots.router)


# Request ID injection
@app.middleware("http")
async def request_envelope_middleware(request: Request, call_next) -> Response:
    request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# Registered last: CORS is the outermost user middleware
setup_cors(app)


# -- Exception Handlers --

def _error_response(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    # The 500 handler runs outside the middleware stack, so the header is set here too
    request_id = getattr(request.state, "request_id", None) or request.headers.get(
        "x-request-id", str(uuid.uuid4())
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {"code": code, "message": message},
            "requestId": request_id,
        },
        headers={"X-Request-ID": request_id},
    )


@app.exception_handler(OccupancyError)
async def occupancy_error_handler(request: Request, exc: OccupancyError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed path=%s code=%s", request.url.path, exc.code)
    return _error_response(request, exc.status_code, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted(
        {".".join(str(p) for p in err.get("loc", ())[1:]) for err in exc.errors()} - {""}
    )
    message = "Invalid request."
    if fields:
        message = f"Invalid request. Malformed fields: {', '.join(fields)}."
    return _error_response(request, InvalidRequest.status_code, InvalidRequest.code, message)


@app.exception_handler(404)
async def not_found_handler(request: Request, exc) -> JSONResponse:
    return _error_response(request, 404, "NOT_FOUND", "Resource not found.")


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc) -> JSONResponse:
    return _error_response(request, 500, "INTERNAL_ERROR", "An unexpected error occurred.")
