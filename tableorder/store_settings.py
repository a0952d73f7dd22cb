"""
Store Settings

Switches the staff flip from the admin page, persisted as text in the
``settings`` table. ``StoreSettings`` declares the known keys and their types;
anything else is carried along untouched so the front end can keep its own
keys here.
"""

import json
import logging
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tableorder.models import Announcement, Setting

logger = logging.getLogger(__name__)


class StoreSettings(BaseModel):
    """Typed view over the ``settings`` table."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    save_orders_to_database: bool = Field(default=True, alias="saveOrdersToDatabase")
    save_orders_to_sheet: bool = Field(default=False, alias="saveOrdersToSheet")
    ai_recommendations_enabled: bool = Field(default=True, alias="aiRecommendationsEnabled")
    service_fee_percent: float = Field(default=0.0, ge=0, alias="serviceFeePercent")
    restaurant_name: Optional[str] = Field(default=None, alias="restaurantName")

    def to_public_dict(self) -> dict[str, Any]:
        """Flat camelCase dict: typed keys plus whatever else is stored."""
        return self.model_dump(by_alias=True)


def _declared_keys() -> set[str]:
    return {field.alias or name for name, field in StoreSettings.model_fields.items()}


def canonical_setting_key(key: str) -> str:
    """Stored name of a setting: the camelCase alias for declared fields."""
    field = StoreSettings.model_fields.get(key)
    if field is not None and field.alias:
        return field.alias
    return key


def serialize_setting_value(value: Any) -> Optional[str]:
    """Render a value the way it is stored in the ``settings`` table."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def parse_settings_rows(rows: Iterable[tuple[str, Optional[str]]]) -> StoreSettings:
    """
    Build ``StoreSettings`` from stored ``(key, text)`` pairs.

    Declared keys are coerced by pydantic ("true" -> True, "3.5" -> 3.5).
    Undeclared keys stay raw text. A declared key holding garbage is logged
    and falls back to its default rather than blocking every order.
    """
    declared = _declared_keys()
    values: dict[str, Any] = {}
    for key, raw in rows:
        if raw is None:
            continue
        values[canonical_setting_key(key)] = raw

    typed = {k: v for k, v in values.items() if k in declared}
    extra = {k: v for k, v in values.items() if k not in declared}

    for key in list(typed):
        try:
            StoreSettings.model_validate({key: typed[key]})
        except ValueError:
            logger.warning(f"Ignoring invalid value for setting {key!r}: {typed[key]!r}")
            del typed[key]

    return StoreSettings.model_validate({**typed, **extra})


async def load_store_settings(session: AsyncSession) -> StoreSettings:
    """Read every stored setting."""
    result = await session.execute(select(Setting.key, Setting.value))
    return parse_settings_rows(result.all())


async def upsert_store_settings(session: AsyncSession, values: dict[str, Any]) -> StoreSettings:
    """
    Insert or update each key in ``values`` and return the resulting settings.

    Keys are stored under their camelCase name. Declared keys are validated
    before anything is written so a bad value is rejected as a whole.
    """
    values = {canonical_setting_key(key): value for key, value in values.items()}
    declared = _declared_keys()
    StoreSettings.model_validate({k: v for k, v in values.items() if k in declared})

    for key, value in values.items():
        await session.merge(Setting(key=key, value=serialize_setting_value(value)))
    await session.commit()

    logger.info(f"Settings updated: {sorted(values)}")
    return await load_store_settings(session)


async def load_active_announcements(session: AsyncSession) -> list[Announcement]:
    result = await session.execute(
        select(Announcement)
        .where(Announcement.is_active.is_(True))
        .order_by(Announcement.sort_order, Announcement.id)
    )
    return list(result.scalars().all())


def flatten_settings(settings: StoreSettings, announcements: list[Announcement]) -> dict[str, Any]:
    """Public settings object with the derived ``announcements`` list."""
    flat = settings.to_public_dict()
    flat["announcements"] = [
        {"id": a.id, "content": a.content, "sortOrder": a.sort_order}
        for a in announcements
    ]
    return flat
