"""
Admin Surface

Menu, category, announcement and settings management for staff, protected by
a single shared password sent in the ``X-Admin-Password`` header.
"""

import logging
import secrets
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, File, Header, HTTPException, Query, UploadFile
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tableorder.core.config import get_settings
from tableorder.core.exceptions import ServiceUnavailableError, ValidationError
from tableorder.database import get_db
from tableorder.models import Announcement, Category, MenuItem, Order
from tableorder.schemas import (
    AnnouncementBase,
    AnnouncementResponse,
    AnnouncementUpdate,
    CategoryBase,
    CategoryResponse,
    CategoryUpdate,
    ImageUploadResponse,
    LoginRequest,
    MenuItemBase,
    MenuItemResponse,
    MenuItemUpdate,
    MessageResponse,
    OrderListResponse,
    OrderResponse,
    SortOrderUpdate,
)
from tableorder.services.images import BaseImageHost, get_image_host
from tableorder.store_settings import (
    flatten_settings,
    load_active_announcements,
    load_store_settings,
    upsert_store_settings,
)

logger = logging.getLogger(__name__)


def _password_matches(candidate: Optional[str]) -> bool:
    expected = get_settings().admin_password
    if not expected:
        raise ServiceUnavailableError("Admin login is not configured")
    return candidate is not None and secrets.compare_digest(candidate, expected)


def require_admin(
    x_admin_password: Optional[str] = Header(None, alias="x-admin-password"),
) -> None:
    if not _password_matches(x_admin_password):
        raise HTTPException(status_code=401, detail="Invalid admin password")


router = APIRouter(prefix="/api/admin", tags=["Admin"])
protected = APIRouter(dependencies=[Depends(require_admin)])


@router.post("/login", response_model=MessageResponse)
async def login(credentials: LoginRequest) -> MessageResponse:
    if not _password_matches(credentials.password):
        logger.warning("Failed admin login attempt")
        raise HTTPException(status_code=401, detail="Invalid admin password")
    return MessageResponse(message="Login successful")


async def _get_or_404(db: AsyncSession, model, object_id: int, label: str):
    obj = await db.get(model, object_id)
    if obj is None:
        raise HTTPException(status_code=404, detail=f"{label} #{object_id} not found")
    return obj


def _apply_changes(obj, changes: dict[str, Any]) -> None:
    for field, value in changes.items():
        setattr(obj, field, value)


async def _reorder(db: AsyncSession, model, ordered_ids: list[int]) -> None:
    for position, object_id in enumerate(ordered_ids):
        await db.execute(update(model).where(model.id == object_id).values(sort_order=position))
    await db.commit()


# =============================================================================
# SETTINGS
# =============================================================================

@protected.get("/settings")
async def get_admin_settings(db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    store = await load_store_settings(db)
    return flatten_settings(store, await load_active_announcements(db))


@protected.put("/settings")
async def update_settings(
    values: dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Insert or update the given keys; other keys are left alone."""
    values.pop("announcements", None)
    try:
        store = await upsert_store_settings(db, values)
    except SchemaValidationError as e:
        first = e.errors()[0]
        raise ValidationError(f"Invalid setting {first['loc'][0]}: {first['msg']}") from e
    return flatten_settings(store, await load_active_announcements(db))


# =============================================================================
# CATEGORIES
# =============================================================================

@protected.get("/categories", response_model=list[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db)) -> list[Category]:
    result = await db.execute(select(Category).order_by(Category.sort_order, Category.id))
    return list(result.scalars().all())


@protected.post("/categories", status_code=201, response_model=CategoryResponse)
async def create_category(data: CategoryBase, db: AsyncSession = Depends(get_db)) -> Category:
    category = Category(**data.model_dump())
    db.add(category)
    await db.commit()
    await db.refresh(category)
    logger.info(f"Category {category.key!r} created")
    return category


@protected.put("/categories/order", response_model=MessageResponse)
async def reorder_categories(data: SortOrderUpdate, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    await _reorder(db, Category, data.ordered_ids)
    return MessageResponse(message="Category order updated")


@protected.put("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    data: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
) -> Category:
    category = await _get_or_404(db, Category, category_id, "Category")
    _apply_changes(category, data.model_dump(exclude_unset=True))
    await db.commit()
    await db.refresh(category)
    return category


@protected.delete("/categories/{category_id}", response_model=MessageResponse)
async def delete_category(category_id: int, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    category = await _get_or_404(db, Category, category_id, "Category")
    await db.execute(
        update(MenuItem).where(MenuItem.category_id == category_id).values(category_id=None)
    )
    await db.delete(category)
    await db.commit()
    logger.info(f"Category #{category_id} deleted")
    return MessageResponse(message=f"Category #{category_id} deleted")


# =============================================================================
# MENU ITEMS
# =============================================================================

@protected.get("/menu-items", response_model=list[MenuItemResponse])
async def list_menu_items(db: AsyncSession = Depends(get_db)) -> list[MenuItem]:
    result = await db.execute(select(MenuItem).order_by(MenuItem.sort_order, MenuItem.id))
    return list(result.scalars().all())


@protected.post("/menu-items", status_code=201, response_model=MenuItemResponse)
async def create_menu_item(data: MenuItemBase, db: AsyncSession = Depends(get_db)) -> MenuItem:
    item = MenuItem(**data.model_dump())
    db.add(item)
    await db.commit()
    await db.refresh(item)
    logger.info(f"Menu item #{item.id} created")
    return item


@protected.put("/menu-items/{item_id}", response_model=MenuItemResponse)
async def update_menu_item(
    item_id: int,
    data: MenuItemUpdate,
    db: AsyncSession = Depends(get_db),
) -> MenuItem:
    item = await _get_or_404(db, MenuItem, item_id, "Menu item")
    _apply_changes(item, data.model_dump(exclude_unset=True))
    await db.commit()
    await db.refresh(item)
    return item


@protected.delete("/menu-items/{item_id}", response_model=MessageResponse)
async def delete_menu_item(item_id: int, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    item = await _get_or_404(db, MenuItem, item_id, "Menu item")
    await db.delete(item)
    await db.commit()
    logger.info(f"Menu item #{item_id} deleted")
    return MessageResponse(message=f"Menu item #{item_id} deleted")


# =============================================================================
# ANNOUNCEMENTS
# =============================================================================

@protected.get("/announcements", response_model=list[AnnouncementResponse])
async def list_announcements(db: AsyncSession = Depends(get_db)) -> list[Announcement]:
    result = await db.execute(select(Announcement).order_by(Announcement.sort_order, Announcement.id))
    return list(result.scalars().all())


@protected.post("/announcements", status_code=201, response_model=AnnouncementResponse)
async def create_announcement(data: AnnouncementBase, db: AsyncSession = Depends(get_db)) -> Announcement:
    announcement = Announcement(**data.model_dump())
    db.add(announcement)
    await db.commit()
    await db.refresh(announcement)
    return announcement


@protected.put("/announcements/order", response_model=MessageResponse)
async def reorder_announcements(data: SortOrderUpdate, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    await _reorder(db, Announcement, data.ordered_ids)
    return MessageResponse(message="Announcement order updated")


@protected.put("/announcements/{announcement_id}", response_model=AnnouncementResponse)
async def update_announcement(
    announcement_id: int,
    data: AnnouncementUpdate,
    db: AsyncSession = Depends(get_db),
) -> Announcement:
    announcement = await _get_or_404(db, Announcement, announcement_id, "Announcement")
    _apply_changes(announcement, data.model_dump(exclude_unset=True))
    await db.commit()
    await db.refresh(announcement)
    return announcement


@protected.delete("/announcements/{announcement_id}", response_model=MessageResponse)
async def delete_announcement(announcement_id: int, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    announcement = await _get_or_404(db, Announcement, announcement_id, "Announcement")
    await db.delete(announcement)
    await db.commit()
    return MessageResponse(message=f"Announcement #{announcement_id} deleted")


# =============================================================================
# IMAGES
# =============================================================================

@protected.post("/upload-image", response_model=ImageUploadResponse)
async def upload_image(
    image: UploadFile = File(...),
    host: BaseImageHost = Depends(get_image_host),
) -> ImageUploadResponse:
    if not host.is_configured:
        raise ServiceUnavailableError("Image uploads are not configured")

    content = await image.read()
    if not content:
        raise ValidationError("Empty image file")

    result = await host.upload(content, image.filename or "upload")
    if not result.success:
        raise HTTPException(status_code=502, detail="Image upload failed")
    return ImageUploadResponse(image_url=result.url)


# =============================================================================
# ORDERS
# =============================================================================

@protected.get("/orders", response_model=OrderListResponse)
async def list_orders(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> OrderListResponse:
    """Retrieve paginated list of orders, newest first."""
    total = (await db.execute(select(func.count(Order.id)))).scalar() or 0

    result = await db.execute(
        select(Order).order_by(Order.created_at.desc(), Order.id.desc()).offset(skip).limit(limit)
    )
    orders = result.scalars().all()

    return OrderListResponse(
        total=total,
        orders=[OrderResponse.model_validate(order) for order in orders],
    )


@protected.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(order_id: int, db: AsyncSession = Depends(get_db)) -> OrderResponse:
    order = await _get_or_404(db, Order, order_id, "Order")
    return OrderResponse.model_validate(order)


router.include_router(protected)
