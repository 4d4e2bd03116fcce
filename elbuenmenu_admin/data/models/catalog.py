from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, AliasPath, Field

from .base import ApiModel, CamelApiModel, Count, Id, Money, UtcDatetime


class StoreCategory(CamelApiModel):
    """Category used to group stores in the marketplace."""
    id: Optional[Id] = Field(default=None, description="Category identifier")
    name: str = Field(default="", description="Display name")
    slug: str = Field(default="", description="URL slug")
    description: Optional[str] = Field(default=None, description="Description")
    icon: Optional[str] = Field(default=None, description="Icon name or emoji")
    color: str = Field(default="#FFD523", description="Badge color")
    display_order: Count = Field(default=0, description="Sort position")
    is_active: bool = Field(default=True, description="Shown to customers")
    store_count: Count = Field(
        default=0,
        validation_alias=AliasChoices("store_count", AliasPath("_count", "stores")),
        exclude=True,
        description="Stores in the category",
    )


class Review(ApiModel):
    """Customer review of an order."""
    id: Id = Field(description="Review identifier")
    customer_name: Optional[str] = Field(default=None, description="Reviewer name")
    rating: int = Field(ge=1, le=5, description="Stars, 1 to 5")
    comment: Optional[str] = Field(default=None, description="Review text")
    order_id: Optional[Id] = Field(default=None, description="Reviewed order")
    created_at: Optional[UtcDatetime] = Field(default=None, description="Review timestamp")
    response: Optional[str] = Field(default=None, description="Store response")
    responded_at: Optional[UtcDatetime] = Field(default=None, description="Response timestamp")

    @property
    def responded(self) -> bool:
        return bool(self.response)


class InventoryItem(ApiModel):
    """Stock level of an ingredient or supply."""
    id: Optional[Id] = Field(default=None, description="Inventory item identifier")
    name: str = Field(default="", description="Item name")
    category: Optional[str] = Field(default=None, description="Item category")
    current_stock: Money = Field(default=0.0, description="Units on hand")
    min_stock: Money = Field(default=0.0, description="Reorder threshold")
    max_stock: Money = Field(default=0.0, description="Storage capacity")
    unit: str = Field(default="unidades", description="Unit of measure")
    cost_per_unit: Money = Field(default=0.0, description="Cost per unit")
    last_restocked: Optional[UtcDatetime] = Field(default=None, description="Last restock")
    supplier: Optional[str] = Field(default=None, description="Supplier name")
    store_id: Optional[Id] = Field(default=None, description="Owning store")
