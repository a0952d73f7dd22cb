"""
Pydantic Schemas for Request/Response Validation

The table-side web app speaks camelCase JSON, so models declare camelCase
aliases and accept either spelling on input.

Version: 1.0.0
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exposing camelCase aliases."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Menu item names are either a plain string or {"zh": ..., "en": ...}
LocalizedText = Union[str, Dict[str, str]]


# =============================================================================
# ORDER SUBMISSION
# =============================================================================

class OrderItemSubmission(CamelModel):
    """Single line of a submitted order."""
    id: Optional[Union[int, str]] = Field(None, examples=[7])
    quantity: int = Field(..., gt=0, examples=[2])
    notes: Optional[str] = Field(None, examples=["less ice"])
    selected_options: Dict[str, str] = Field(default_factory=dict, examples=[{"ice": "less"}])
    name: Optional[LocalizedText] = Field(None, examples=[{"zh": "紅茶", "en": "Black Tea"}])

    @field_validator("selected_options", mode="before")
    @classmethod
    def none_means_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def menu_item_id(self) -> Optional[int]:
        """Catalog id, when the client sent something that looks like one."""
        if isinstance(self.id, int):
            return self.id
        if isinstance(self.id, str) and self.id.isdigit():
            return int(self.id)
        return None


class OrderSubmission(CamelModel):
    """Request body of ``POST /api/orders``."""
    table_number: str = Field(..., examples=["5"])
    headcount: int = Field(..., examples=[2])
    total_amount: float = Field(..., description="Subtotal before fee", examples=[300])
    fee: float = Field(default=0.0, examples=[9])
    final_amount: Optional[float] = Field(None, examples=[309])
    items: List[OrderItemSubmission]

    @field_validator("table_number", mode="before")
    @classmethod
    def table_number_as_text(cls, v: Any) -> Any:
        if isinstance(v, (int, float)):
            return str(v)
        return v

    @field_validator("fee", mode="before")
    @classmethod
    def missing_fee_is_zero(cls, v: Any) -> Any:
        return 0.0 if v is None else v

    @property
    def subtotal(self) -> float:
        return self.total_amount


class OrderCreateResponse(BaseModel):
    """Response after successfully accepting an order."""
    message: str
    orderId: Union[int, str]


# =============================================================================
# RECOMMENDATIONS
# =============================================================================

class RecommendationRequest(CamelModel):
    language: str = Field(default="zh", examples=["zh", "en"])
    cart_items: List[Dict[str, Any]] = Field(default_factory=list)
    available_items: List[Dict[str, Any]] = Field(default_factory=list)


class RecommendationResponse(BaseModel):
    recommendation: str


# =============================================================================
# CATALOG
# =============================================================================

class CategoryBase(CamelModel):
    key: str = Field(..., min_length=1, max_length=50, examples=["drinks"])
    name: LocalizedText
    sort_order: int = 0


class CategoryUpdate(CamelModel):
    key: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[LocalizedText] = None
    sort_order: Optional[int] = None


class CategoryResponse(CategoryBase):
    id: int
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MenuItemBase(CamelModel):
    category_id: Optional[int] = None
    name: LocalizedText
    description: Optional[LocalizedText] = None
    price: float = Field(..., ge=0)
    image_url: Optional[str] = None
    is_available: bool = True
    options: List[str] = Field(default_factory=list, examples=[["spice", "size"]])
    sort_order: int = 0


class MenuItemUpdate(CamelModel):
    category_id: Optional[int] = None
    name: Optional[LocalizedText] = None
    description: Optional[LocalizedText] = None
    price: Optional[float] = Field(None, ge=0)
    image_url: Optional[str] = None
    is_available: Optional[bool] = None
    options: Optional[List[str]] = None
    sort_order: Optional[int] = None


class MenuItemResponse(MenuItemBase):
    id: int
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    @field_validator("options", mode="before")
    @classmethod
    def none_means_no_options(cls, v: Any) -> Any:
        return [] if v is None else v


class MenuResponse(BaseModel):
    menu: Dict[str, List[MenuItemResponse]]
    categories: List[CategoryResponse]


class AnnouncementBase(CamelModel):
    content: LocalizedText
    is_active: bool = True
    sort_order: int = 0


class AnnouncementUpdate(CamelModel):
    content: Optional[LocalizedText] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None


class AnnouncementResponse(AnnouncementBase):
    id: int
    created_at: Optional[datetime] = None
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class SortOrderUpdate(CamelModel):
    """New display order, first id first."""
    ordered_ids: List[int] = Field(..., min_length=1)


# =============================================================================
# ADMIN
# =============================================================================

class LoginRequest(BaseModel):
    password: str


class ImageUploadResponse(CamelModel):
    image_url: str


class OrderLineResponse(CamelModel):
    id: int
    menu_item_id: Optional[int]
    quantity: int
    notes: Optional[str]
    selected_options: Optional[Dict[str, Any]]
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class OrderResponse(CamelModel):
    id: int
    table_number: str
    headcount: int
    subtotal: float
    fee: float
    total_amount: float
    status: str
    created_at: Optional[datetime]
    lines: List[OrderLineResponse]
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class OrderListResponse(BaseModel):
    total: int
    orders: List[OrderResponse]


# =============================================================================
# GENERIC
# =============================================================================

class MessageResponse(BaseModel):
    """Standard message / error body."""
    message: str


class HealthResponse(BaseModel):
    status: str
    database: str
    notification_service: str
    ledger_service: str
    generation_service: str
    timestamp: datetime
