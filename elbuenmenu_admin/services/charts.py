"""DataFrames shaped for st.line_chart / st.bar_chart / st.dataframe."""
from __future__ import annotations

from typing import Iterable, Literal

import pandas as pd

from elbuenmenu_admin.data.models import (
    EXPENSE_CATEGORIES,
    TIER_LABELS,
    Order,
    SalesStats,
)
from elbuenmenu_admin.data.models.stats import ExpenseSummary, ReviewStats


def truncate_label(name: str, length: int = 20) -> str:
    return name if len(name) <= length else f"{name[:length]}..."


def revenue_frame(stats: SalesStats, window: Literal["24h", "30d"] = "30d") -> pd.DataFrame:
    """Revenue and orders per day (30d) or per hour (24h), indexed by the period label."""
    if window == "24h":
        rows = [{"period": p.hour, "revenue": p.revenue, "orders": p.orders} for p in stats.last_24_hours]
    else:
        rows = [{"period": p.date, "revenue": p.revenue, "orders": p.orders} for p in stats.last_30_days]
    frame = pd.DataFrame(rows, columns=["period", "revenue", "orders"])
    return frame.set_index("period")


def payment_methods_frame(stats: SalesStats) -> pd.DataFrame:
    frame = pd.DataFrame(
        [{"method": m.method, "count": m.count, "total": m.total, "percentage": m.percentage} for m in stats.payment_methods],
        columns=["method", "count", "total", "percentage"],
    )
    return frame.sort_values("total", ascending=False).reset_index(drop=True)


def top_products_frame(stats: SalesStats, limit: int = 5, name_length: int = 20) -> pd.DataFrame:
    frame = pd.DataFrame(
        [{"product": truncate_label(p.name, name_length), "quantity": p.quantity, "revenue": p.revenue} for p in stats.top_products],
        columns=["product", "quantity", "revenue"],
    )
    return frame.head(limit).set_index("product")


def delivery_split_frame(stats: SalesStats) -> pd.DataFrame:
    split = stats.delivery
    return pd.DataFrame(
        {
            "orders": [split.delivery_orders, split.pickup_orders],
            "revenue": [split.delivery_revenue, split.pickup_revenue],
        },
        index=pd.Index(["Delivery", "Retiro"], name="type"),
    )


def expenses_frame(summary: ExpenseSummary) -> pd.DataFrame:
    frame = pd.DataFrame(
        {"amount": [summary.by_category.get(category, 0.0) for category in EXPENSE_CATEGORIES]},
        index=pd.Index(list(EXPENSE_CATEGORIES), name="category"),
    )
    return frame[frame["amount"] > 0]


def tiers_frame(counts: dict[str, int]) -> pd.DataFrame:
    return pd.DataFrame(
        {"customers": list(counts.values())},
        index=pd.Index([TIER_LABELS.get(tier, tier) for tier in counts], name="tier"),
    )


def rating_frame(stats: ReviewStats) -> pd.DataFrame:
    return pd.DataFrame(
        {"reviews": [stats.histogram.get(stars, 0) for stars in (5, 4, 3, 2, 1)]},
        index=pd.Index(["5★", "4★", "3★", "2★", "1★"], name="rating"),
    )


def orders_table(orders: Iterable[Order]) -> pd.DataFrame:
    """Flat order rows for st.dataframe."""
    columns = ["order_number", "created_at", "customer_name", "customer_phone", "type", "payment_method", "status", "total"]
    rows = [
        {
            "order_number": order.order_number,
            "created_at": order.created_at,
            "customer_name": order.customer_name,
            "customer_phone": order.customer_phone,
            "type": "Delivery" if order.is_delivery else "Retiro",
            "payment_method": order.payment_method,
            "status": order.status_label,
            "total": order.total,
        }
        for order in orders
    ]
    return pd.DataFrame(rows, columns=columns)
