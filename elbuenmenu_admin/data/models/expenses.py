from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field

from .base import ApiModel, DateOnly, Id, Money

ExpenseCategory = Literal["proveedores", "combustible", "mantenimiento", "herramientas", "imprevistos", "otros"]
EXPENSE_CATEGORIES: tuple[str, ...] = (
    "proveedores",
    "combustible",
    "mantenimiento",
    "herramientas",
    "imprevistos",
    "otros",
)


class Expense(ApiModel):
    """A business expense."""
    id: Optional[Id] = Field(default=None, description="Expense identifier")
    date: DateOnly = Field(description="Expense date")
    category: ExpenseCategory = Field(default="otros", description="Expense category")
    description: str = Field(default="", description="What was paid for")
    amount: Money = Field(default=0.0, description="Amount paid")
    supplier_id: Optional[Id] = Field(default=None, description="Supplier, when applicable")
    notes: Optional[str] = Field(default=None, description="Notes")
