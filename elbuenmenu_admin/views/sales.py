"""Sales dashboard and the real-time kitchen panel."""
from __future__ import annotations

from datetime import timedelta

import streamlit as st

from elbuenmenu_admin.config import get_config
from elbuenmenu_admin.data.models import SalesStats
from elbuenmenu_admin.services.charts import (
    delivery_split_frame,
    payment_methods_frame,
    revenue_frame,
    top_products_frame,
)
from elbuenmenu_admin.services.formatting import format_money
from elbuenmenu_admin.services.metrics import realtime_metrics
from elbuenmenu_admin.services.orders import store_tz

from .common import get_data, get_query, get_schedule, session_guard, show_query_error


def _every(screen: str):
    interval = get_schedule().interval(screen)
    return timedelta(seconds=interval) if interval else None


def render_sales() -> None:
    st.title("Ventas")
    config = get_config()
    data = get_data()

    @st.fragment(run_every=_every("sales"))
    @session_guard
    def dashboard() -> None:
        query = get_query("sales_stats", data.get_sales_stats, default=SalesStats(), screen="sales")
        stats: SalesStats = query.refresh()
        show_query_error(query)

        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Ventas totales", format_money(stats.total.revenue), f"{stats.total.orders} pedidos")
        c2.metric("Este mes", format_money(stats.current_month.revenue), f"{stats.current_month.orders} pedidos")
        c3.metric("Esta semana", format_money(stats.current_week.revenue), f"{stats.current_week.orders} pedidos")
        c4.metric("Ticket promedio", format_money(stats.total.average_order_value))

        st.markdown("### Últimos 30 días")
        st.line_chart(revenue_frame(stats, "30d"), y=["revenue"], use_container_width=True)

        st.markdown("### Últimas 24 horas")
        st.bar_chart(revenue_frame(stats, "24h"), y=["orders"], use_container_width=True)

        left, right = st.columns(2)
        with left:
            st.markdown("### Métodos de pago")
            methods = payment_methods_frame(stats)
            if methods.empty:
                st.info("Sin ventas registradas.")
            else:
                st.bar_chart(methods, x="method", y="total", use_container_width=True)
        with right:
            st.markdown("### Delivery vs. retiro")
            st.bar_chart(delivery_split_frame(stats)["orders"], use_container_width=True)

        st.markdown("### Productos más vendidos")
        top_n = st.slider("Top N", min_value=1, max_value=20, value=config.default_top_n, key="sales_top_n")
        top = top_products_frame(stats, limit=top_n, name_length=config.top_product_name_length)
        if top.empty:
            st.info("Todavía no hay productos vendidos.")
        else:
            st.bar_chart(top["revenue"], use_container_width=True)
            st.dataframe(top, use_container_width=True)

    dashboard()


def render_realtime() -> None:
    st.title("Tiempo real")
    data = get_data()

    @st.fragment(run_every=_every("realtime"))
    @session_guard
    def panel() -> None:
        orders_query = get_query("orders", data.get_orders, default=[], screen="orders")
        analytics_query = get_query("realtime", data.get_realtime_analytics, screen="realtime")
        orders = orders_query.refresh() or []
        analytics = analytics_query.refresh()
        show_query_error(orders_query)
        show_query_error(analytics_query)

        metrics = realtime_metrics(orders, analytics, tz=store_tz())
        c1, c2, c3 = st.columns(3)
        c1.metric("Pendientes", metrics.pending)
        c2.metric("En preparación", metrics.preparing)
        c3.metric("Listos", metrics.ready)
        c4, c5, c6 = st.columns(3)
        c4.metric("Ventas de hoy", format_money(metrics.today_sales))
        c5.metric("Pedidos de hoy", metrics.today_orders)
        c6.metric("Ticket promedio", format_money(metrics.average_ticket))

    panel()
