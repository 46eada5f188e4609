from contextlib import asynccontextmanager
import logging
import uuid

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from wayguard.api.routes import router as api_router
from wayguard.core.config import settings
from wayguard.core.errors import DependencyError, WayGuardError
from wayguard.logging import configure_logging
from wayguard.middleware.logging import LoggingMiddleware
from wayguard.models.dto import ErrorResponse
from wayguard.services.contacts import ContactDirectory
from wayguard.services.emergency_dispatcher import EmergencyDispatcher
from wayguard.services.incident_reporter import IncidentReporter
from wayguard.services.location_service import LocationService
from wayguard.services.place_index import PlaceIndex
from wayguard.services.record_store import RecordStore, create_record_store
from wayguard.services.safety_aggregator import SafetyAggregator

configure_logging()
logger = logging.getLogger(__name__)


def init_services(app: FastAPI, store: RecordStore) -> None:
    """Wire every service onto app.state around a single record store."""
    place_index = PlaceIndex(store)
    aggregator = SafetyAggregator(store)
    location_service = LocationService(store, place_index, aggregator)
    contacts = ContactDirectory(store)

    app.state.store = store
    app.state.place_index = place_index
    app.state.aggregator = aggregator
    app.state.location_service = location_service
    app.state.contacts = contacts
    app.state.dispatcher = EmergencyDispatcher(place_index, location_service, contacts)
    app.state.incident_reporter = IncidentReporter(store)


# --- Application Lifecycle Management ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Application startup: v{settings.VERSION}")
    store = create_record_store()
    init_services(app, store)
    try:
        loaded = await app.state.place_index.load_seed(settings.SEED_PLACES_PATH)
        logger.info(f"Seeded {loaded} places.")
    except DependencyError as e:
        # The service can still take emergency calls without seed data
        logger.error(f"Failed to seed places: {e.detail}")

    yield

    logger.info("Application shutdown: Cleaning up resources.")
    await app.state.store.close()


# --- FastAPI Application Initialization ---
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.BRIEF_DESCRIPTION,
    lifespan=lifespan,
)

app.add_middleware(LoggingMiddleware)

# --- API Routes ---
app.include_router(api_router, prefix="/api")


# --- Health Check Endpoint ---
@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check(request: Request):
    store = getattr(request.app.state, "store", None)
    return {
        "status": "ok",
        "store": store.backend if store is not None else "unavailable",
    }


# --- Exception Handlers ---
@app.exception_handler(WayGuardError)
async def wayguard_exception_handler(request: Request, exc: WayGuardError):
    error_id = None
    detail = exc.detail
    if isinstance(exc, DependencyError):
        error_id = str(uuid.uuid4())
        logger.error(f"Dependency failure (ID: {error_id}) on {request.url.path}: {exc.detail}")
        detail = "A backing service is temporarily unavailable. Please try again."
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=exc.error_code,
            detail=detail,
            field=exc.field,
            error_id=error_id,
        ).model_dump(exclude_none=True),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query")]
    logger.info(f"Request validation failed on {request.url.path}: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(
            error="VALIDATION_ERROR",
            detail=first.get("msg", "Invalid request."),
            field=".".join(loc) or None,
        ).model_dump(exclude_none=True),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    error_id = str(uuid.uuid4())
    logger.error(f"Unhandled exception (ID: {error_id}): {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="INTERNAL_SERVER_ERROR",
            detail="An unexpected error occurred. Please report this error ID.",
            error_id=error_id,
        ).model_dump(exclude_none=True),
    )
