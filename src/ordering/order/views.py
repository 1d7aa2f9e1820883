"""Pydantic shapes for orders as seen outside the ordering context.

These are external contracts, separate from the Order aggregate and its
commands. Notifiers receive an OrderView; the list query takes an
OrderListRequest and answers with an OrderPage.
"""

from datetime import datetime

from pydantic import BaseModel, Field

SORTABLE_FIELDS = ("number", "status", "total", "createdAt")


class OrderItemView(BaseModel):
    id: str
    product_id: str
    product_code: str
    product_name: str
    quantity: int
    unit_price: float
    discount_percent: float = 0.0
    unit_price_with_discount: float
    line_total: float
    original_quantity: int | None = None
    image_url: str | None = None


class OrderView(BaseModel):
    id: str
    number: str
    status: str
    buyer_id: str
    currency: str
    subtotal: float
    discount_total: float
    total: float
    original_total: float | None = None
    user_notes: str | None = None
    admin_notes: str | None = None
    rejection_reason: str | None = None
    cancellation_reason: str | None = None
    modification_reason: str | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    rejected_by: str | None = None
    rejected_at: datetime | None = None
    confirmed_by: str | None = None
    confirmed_at: datetime | None = None
    ready_by: str | None = None
    ready_at: datetime | None = None
    completed_by: str | None = None
    completed_at: datetime | None = None
    cancelled_by: str | None = None
    cancelled_at: datetime | None = None
    modified_by: str | None = None
    modified_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    items: list[OrderItemView] = Field(default_factory=list)


class OrderSummaryView(BaseModel):
    id: str
    number: str
    status: str
    buyer_id: str
    total: float
    currency: str
    item_count: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderPage(BaseModel):
    items: list[OrderSummaryView] = Field(default_factory=list)
    page: int
    page_size: int
    total_count: int

    @property
    def total_pages(self) -> int:
        return -(-self.total_count // self.page_size) if self.total_count else 0


class OrderListRequest(BaseModel):
    page: int = Field(ge=1, default=1)
    page_size: int = Field(ge=1, le=100, default=20)
    buyer_id: str | None = None
    status: str | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None
    query: str | None = Field(default=None, max_length=100)
    sort_by: str = "createdAt"
    sort_dir: str = "DESC"

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "page": 1,
                    "page_size": 20,
                    "status": "PendingApproval",
                    "query": "SO-2024",
                    "sort_by": "total",
                    "sort_dir": "ASC",
                }
            ]
        }
    }
