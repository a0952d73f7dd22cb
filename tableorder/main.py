"""
FastAPI Application Entry Point

Table self-ordering backend: menu, orders, staff notifications, AI upsell
recommendations and the admin surface.
Supports both Mock services (development) and Real APIs (production).

Endpoints:
    - GET /api/menu: Menu grouped by category
    - GET /api/settings: Public store settings and announcements
    - POST /api/orders: Submit an order from a table
    - POST /api/recommendation: AI upsell suggestion for the cart
    - /api/admin/*: Admin surface (see tableorder.admin)
    - GET /health: System health check

Version: 1.0.0
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from fastapi import BackgroundTasks, Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from tableorder.admin import router as admin_router
from tableorder.core.config import get_settings, setup_logging
from tableorder.core.exceptions import OrderingError, ServiceUnavailableError
from tableorder.database import dispose_engine, get_db, init_db
from tableorder.models import Category, MenuItem
from tableorder.orders import submit_order
from tableorder.schemas import (
    CategoryResponse,
    HealthResponse,
    MenuItemResponse,
    MenuResponse,
    MessageResponse,
    OrderCreateResponse,
    RecommendationRequest,
    RecommendationResponse,
)
from tableorder.services.generation import BaseGenerationService, get_generation_service
from tableorder.services.images import get_image_host
from tableorder.services.ledger import BaseLedgerService, get_ledger_service
from tableorder.services.notifications import (
    BaseNotificationService,
    dispatch_order_notification,
    get_notification_service,
)
from tableorder.services.recommendations import RecommendationService
from tableorder.store_settings import (
    flatten_settings,
    load_active_announcements,
    load_store_settings,
)

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

UNCATEGORIZED_KEY = "other"


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    await init_db()
    logger.info("✅ Database initialized")

    logger.info(f"✅ Notification Service: {get_notification_service().provider_name}")
    logger.info(f"✅ Ledger Service: {get_ledger_service().provider_name}")
    logger.info(f"✅ Generation Service: {get_generation_service().provider_name}")
    logger.info(f"✅ Image Host: {get_image_host().provider_name}")

    missing = settings.validate_production_config()
    if missing:
        logger.warning(f"⚠️ Missing config: {missing}")

    logger.info("✅ Application ready!")

    yield  # Application runs

    logger.info("Shutting down...")
    await get_notification_service().aclose()
    await get_generation_service().aclose()
    await get_image_host().aclose()
    await dispose_engine()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Table self-ordering backend with staff notifications and an order ledger.",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# The ordering pages are served from a different origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(admin_router)


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_recommendation_service(
    generator: BaseGenerationService = Depends(get_generation_service),
) -> RecommendationService:
    return RecommendationService(
        generator,
        max_attempts=settings.ai_max_attempts,
        base_delay=settings.ai_base_delay_seconds,
    )


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"{settings.app_name} is running",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    db: AsyncSession = Depends(get_db),
    notifier: BaseNotificationService = Depends(get_notification_service),
    ledger: BaseLedgerService = Depends(get_ledger_service),
    generator: BaseGenerationService = Depends(get_generation_service),
) -> HealthResponse:
    """Verify all system components are operational."""

    db_status = "healthy"
    try:
        await db.execute(select(func.now()))
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"
        logger.error(f"Database health check failed: {e}")

    notification_status = "healthy" if await notifier.health_check() else "unhealthy"
    ledger_status = "healthy" if await ledger.health_check() else "unhealthy"
    generation_status = "healthy" if await generator.health_check() else "unhealthy"

    overall = "operational" if all(
        s == "healthy" for s in [db_status, notification_status, ledger_status, generation_status]
    ) else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        notification_service=notification_status,
        ledger_service=ledger_status,
        generation_service=generation_status,
        timestamp=datetime.now(),
    )


# =============================================================================
# MENU & SETTINGS
# =============================================================================

@app.get(
    "/api/menu",
    response_model=MenuResponse,
    tags=["Menu"],
)
async def get_menu(db: AsyncSession = Depends(get_db)) -> MenuResponse:
    """Available menu items grouped by category key."""
    categories = (
        await db.execute(select(Category).order_by(Category.sort_order, Category.id))
    ).scalars().all()
    items = (
        await db.execute(
            select(MenuItem)
            .where(MenuItem.is_available.is_(True))
            .order_by(MenuItem.sort_order, MenuItem.id)
        )
    ).scalars().all()

    keys_by_id = {c.id: c.key for c in categories}
    menu: dict[str, list[MenuItemResponse]] = {c.key: [] for c in categories}
    for item in items:
        key = keys_by_id.get(item.category_id, UNCATEGORIZED_KEY)
        menu.setdefault(key, []).append(MenuItemResponse.model_validate(item))

    return MenuResponse(
        menu=menu,
        categories=[CategoryResponse.model_validate(c) for c in categories],
    )


@app.get("/api/settings", tags=["Settings"])
async def get_public_settings(db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    """Store settings plus active announcements."""
    store = await load_store_settings(db)
    announcements = await load_active_announcements(db)
    return flatten_settings(store, announcements)


# =============================================================================
# ORDER API ENDPOINTS
# =============================================================================

@app.post(
    "/api/orders",
    status_code=201,
    response_model=OrderCreateResponse,
    responses={400: {"model": MessageResponse}, 500: {"model": MessageResponse}},
    tags=["Orders"],
    summary="Submit Order",
)
async def create_order(
    background_tasks: BackgroundTasks,
    payload: Any = Body(None),
    db: AsyncSession = Depends(get_db),
    ledger: BaseLedgerService = Depends(get_ledger_service),
    notifier: BaseNotificationService = Depends(get_notification_service),
) -> OrderCreateResponse:
    """
    Accept an order from a table.

    Staff are notified after the response is sent; a failed notification
    never affects the result.
    """
    receipt = await submit_order(payload, db, ledger)

    background_tasks.add_task(
        dispatch_order_notification,
        notifier,
        receipt,
        settings.currency_symbol,
    )

    logger.info(f"Order {receipt.order_id} accepted for table {receipt.table_number}")
    return OrderCreateResponse(message="Order received!", orderId=receipt.order_id)


# =============================================================================
# RECOMMENDATIONS
# =============================================================================

@app.post(
    "/api/recommendation",
    response_model=RecommendationResponse,
    responses={503: {"model": MessageResponse}, 500: {"model": MessageResponse}},
    tags=["Recommendations"],
)
async def recommend(
    request_data: RecommendationRequest,
    db: AsyncSession = Depends(get_db),
    service: RecommendationService = Depends(get_recommendation_service),
) -> RecommendationResponse:
    """One short upsell suggestion for the current cart."""
    if not service.generator.is_configured:
        raise ServiceUnavailableError("AI recommendations are not configured")

    store = await load_store_settings(db)
    if not store.ai_recommendations_enabled:
        raise ServiceUnavailableError("AI recommendations are turned off")

    text = await service.recommend(
        language=request_data.language,
        cart_items=request_data.cart_items,
        available_items=request_data.available_items,
    )
    return RecommendationResponse(recommendation=text)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(OrderingError)
async def ordering_error_handler(request: Request, exc: OrderingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    detail = errors[0].get("msg", "invalid value") if errors else "invalid value"
    return JSONResponse(status_code=400, content={"message": f"Invalid request: {detail}"})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"message": "An unexpected error occurred"},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("tableorder.main:app", host=settings.api_host, port=settings.port)
