"""Customer loyalty tiers and the points program."""
from __future__ import annotations

import streamlit as st

from elbuenmenu_admin.data.models import (
    CUSTOMER_TIERS,
    TIER_LABELS,
    CustomerLoyalty,
    CustomerLoyaltyFilters,
    CustomerLoyaltyUpdate,
    LoyaltyProgram,
)
from elbuenmenu_admin.services.charts import tiers_frame
from elbuenmenu_admin.services.formatting import format_datetime, format_money
from elbuenmenu_admin.services.loyalty import (
    discount_for_points,
    filter_customers,
    loyalty_stats,
    points_for_order,
    tier_stats,
    top_members,
)

from .common import get_data, get_query, invalidate, run_action, show_query_error

SORT_LABELS = {"total_spent": "Gasto total", "total_orders": "Pedidos", "points": "Puntos"}


def _customer_editor(customer: CustomerLoyalty) -> None:
    key = f"loyalty_{customer.customer_id}"
    with st.form(key):
        tiers = list(CUSTOMER_TIERS)
        tier = st.selectbox("Nivel", tiers, index=tiers.index(customer.tier), format_func=TIER_LABELS.get,
                            key=f"{key}_tier")
        discount = st.number_input("Descuento %", min_value=0.0, max_value=100.0,
                                   value=float(customer.discount_percentage), key=f"{key}_discount")
        priority = st.checkbox("Prioridad en cocina", value=customer.priority, key=f"{key}_priority")
        if st.form_submit_button("Guardar"):
            update = CustomerLoyaltyUpdate(tier=tier, discount_percentage=discount, priority=priority)
            if run_action(lambda: get_data().update_loyalty_customer(customer.customer_id, update),
                          "Cliente actualizado", refresh=("loyalty_customers",)):
                st.rerun()


def _render_customers() -> None:
    data = get_data()
    query = get_query("loyalty_customers", data.list_loyalty_customers, default=[])
    customers = query.refresh() or []
    show_query_error(query)

    counts = tier_stats(customers)
    cols = st.columns(len(counts))
    for col, (tier, count) in zip(cols, counts.items()):
        col.metric(TIER_LABELS.get(tier, tier), count)
    st.bar_chart(tiers_frame(counts), use_container_width=True)

    if st.button("Recalcular niveles"):
        if run_action(data.recalculate_loyalty, "Niveles recalculados", refresh=("loyalty_customers",)):
            st.rerun()

    col1, col2 = st.columns(2)
    tier = col1.selectbox("Nivel", ["", *CUSTOMER_TIERS], format_func=lambda t: TIER_LABELS.get(t, "Todos"))
    sort_by = col2.selectbox("Ordenar por", list(SORT_LABELS), format_func=SORT_LABELS.get)
    selected = filter_customers(customers, CustomerLoyaltyFilters(tier=tier or None, sort_by=sort_by))

    if not selected:
        st.info("No hay clientes con este filtro.")
        return
    st.dataframe(
        [
            {
                "cliente": c.customer_name,
                "teléfono": c.customer_phone,
                "nivel": TIER_LABELS.get(c.tier, c.tier),
                "pedidos": c.total_orders,
                "gastado": format_money(c.total_spent),
                "descuento %": c.discount_percentage,
                "puntos": c.points,
                "último pedido": format_datetime(c.last_order_date),
            }
            for c in selected
        ],
        use_container_width=True,
    )
    for customer in selected:
        with st.expander(f"{customer.customer_name or customer.customer_id} · {TIER_LABELS.get(customer.tier)}"):
            if customer.favorite_products:
                st.caption(f"Favoritos: {', '.join(customer.favorite_products)}")
            _customer_editor(customer)


def _render_program() -> None:
    data = get_data()
    program_query = get_query("loyalty_program", data.get_loyalty_program, default=LoyaltyProgram())
    users_query = get_query("loyalty_users", data.list_loyalty_users, default=[])
    program: LoyaltyProgram = program_query.refresh()
    users = users_query.refresh() or []
    show_query_error(program_query)
    show_query_error(users_query)

    stats = loyalty_stats(users)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Miembros", stats.members)
    c2.metric("Activos", stats.active_members)
    c3.metric("Puntos emitidos", stats.total_points)
    c4.metric("Puntos canjeados", stats.redeemed_points)

    with st.form("loyalty_program"):
        per_order = st.number_input("Puntos por pedido", min_value=0, value=program.points_per_order)
        per_currency = st.number_input("Puntos por peso", min_value=0.0, value=float(program.points_per_currency))
        per_discount = st.number_input("Puntos por $1 de descuento", min_value=0.0,
                                       value=float(program.discount_per_points))
        is_active = st.checkbox("Programa activo", value=program.is_active)
        if st.form_submit_button("Guardar programa", type="primary"):
            updated = program.model_copy(update={
                "points_per_order": per_order,
                "points_per_currency": per_currency,
                "discount_per_points": per_discount,
                "is_active": is_active,
            })
            if run_action(lambda: data.save_loyalty_program(updated), "Programa guardado"):
                invalidate("loyalty_program")
                st.rerun()

    example = 10000.0
    st.caption(
        f"Un pedido de {format_money(example)} suma {points_for_order(program, example)} puntos; "
        f"1000 puntos equivalen a {format_money(discount_for_points(program, 1000))} de descuento."
    )

    st.markdown("### Top miembros")
    st.dataframe(
        [{"nombre": u.name, "nivel": u.level, "puntos": u.total_points, "disponibles": u.available_points}
         for u in top_members(users)],
        use_container_width=True,
    )


def render() -> None:
    st.title("Fidelización")
    tab_customers, tab_program = st.tabs(["Clientes", "Programa de puntos"])
    with tab_customers:
        _render_customers()
    with tab_program:
        _render_program()
