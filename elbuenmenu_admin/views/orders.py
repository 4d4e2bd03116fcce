"""Orders board: review queue, status changes, tickets and transfer verification."""
from __future__ import annotations

from datetime import timedelta
from typing import Optional

import streamlit as st

from elbuenmenu_admin.data.models import STATUS_LABELS, Order, Transfer
from elbuenmenu_admin.data.models.data_filters import OrderFilters
from elbuenmenu_admin.services.charts import orders_table
from elbuenmenu_admin.services.formatting import format_datetime, format_money
from elbuenmenu_admin.services.orders import (
    TRANSITIONS,
    OrderService,
    can_approve,
    can_notify_pickup,
    can_reject,
    detect_new_orders,
    filter_orders,
    order_stats,
    split_transfers,
    store_tz,
)
from elbuenmenu_admin.services.ticket import render_ticket_html

from .common import (
    get_bot,
    get_data,
    get_query,
    get_schedule,
    run_action,
    session_guard,
    show_query_error,
)

SEEN_KEY = "seen_order_ids"
BUCKETS = {"pending": "Por revisar", "cancelled": "Cancelados", "completed": "Entregados", "all": "Todos"}
SORTS = {"newest": "Más nuevos", "oldest": "Más viejos", "amount_high": "Mayor monto", "amount_low": "Menor monto"}
DATE_RANGES = {"all": "Todo", "today": "Hoy", "week": "Últimos 7 días", "month": "Últimos 30 días"}


def _orders_query():
    data = get_data()
    return get_query("orders", data.get_orders, default=[], screen="orders")


def _transfers_query():
    data = get_data()
    return get_query("transfers", data.get_pending_transfers, default=[], screen="transfers")


def _announce_new_orders(orders: list[Order]) -> None:
    previous: Optional[set[str]] = st.session_state.get(SEEN_KEY)
    found = detect_new_orders(previous, orders)
    st.session_state[SEEN_KEY] = {order.id for order in orders}
    if found.total:
        parts = []
        if found.delivery:
            parts.append(f"{len(found.delivery)} delivery")
        if found.pickup:
            parts.append(f"{len(found.pickup)} para retirar")
        st.toast(f"🔔 {found.total} pedido(s) nuevo(s): {', '.join(parts)}")


def _sidebar_filters() -> OrderFilters:
    st.sidebar.header("Filtros")
    fulfillment = st.sidebar.radio("Tipo", ["Todos", "Delivery", "Retiro"], horizontal=True)
    payment = st.sidebar.selectbox("Pago", ["Todos", "mercadopago", "transferencia", "efectivo"])
    date_range = st.sidebar.selectbox("Fecha", list(DATE_RANGES), format_func=DATE_RANGES.get)
    sort = st.sidebar.selectbox("Orden", list(SORTS), format_func=SORTS.get)
    search = st.sidebar.text_input("Buscar (número, cliente o teléfono)")
    return OrderFilters(
        fulfillment={"Delivery": "delivery", "Retiro": "pickup"}.get(fulfillment),
        payment_method=None if payment == "Todos" else payment,
        date_range=date_range,
        sort=sort,
        search=search or None,
    )


def _order_actions(order: Order, service: OrderService) -> None:
    key = f"order_{order.id}"
    cols = st.columns(4)
    if can_approve(order) and cols[0].button("Aprobar", key=f"{key}_approve", type="primary"):
        run_action(lambda: service.approve(order), f"Pedido {order.order_number} aprobado", refresh=("orders",), rerun=True)
    if can_notify_pickup(order) and cols[1].button("Avisar que está listo", key=f"{key}_notify"):
        run_action(lambda: service.notify_pickup(order), "Cliente notificado", refresh=("orders",), rerun=True)

    targets = sorted(TRANSITIONS.get(order.status, ()))
    if targets:
        target = cols[2].selectbox(
            "Cambiar estado", targets, format_func=lambda s: STATUS_LABELS.get(s, s), key=f"{key}_target",
            label_visibility="collapsed",
        )
        if cols[2].button("Aplicar estado", key=f"{key}_apply"):
            run_action(lambda: service.change_status(order, target), "Estado actualizado", refresh=("orders",), rerun=True)

    cols[3].download_button(
        "Ticket",
        data=render_ticket_html(order, tz=store_tz()),
        file_name=f"ticket-{order.order_number}.html",
        mime="text/html",
        key=f"{key}_ticket",
    )

    if can_reject(order):
        with st.popover("Rechazar"):
            reason = st.text_area("Motivo del rechazo", key=f"{key}_reason")
            if st.button("Confirmar rechazo", key=f"{key}_reject"):
                if run_action(lambda: service.reject(order, reason), "Pedido rechazado", refresh=("orders",)):
                    st.rerun()


def _render_order(order: Order, service: OrderService) -> None:
    kind = "🚚 Delivery" if order.is_delivery else "🏪 Retiro"
    title = f"{order.order_number} · {order.customer_name or 'Sin nombre'} · {format_money(order.total)} · {order.status_label}"
    with st.expander(f"{kind} · {title}"):
        left, right = st.columns(2)
        left.write(f"**Teléfono:** {order.customer_phone or '-'}")
        left.write(f"**Dirección:** {order.customer_address or '-'}")
        left.write(f"**Creado:** {format_datetime(order.created_at, store_tz())}")
        right.write(f"**Pago:** {order.payment_method or 'Pendiente'} ({order.payment_status or '-'})")
        if order.delivery_code:
            right.write(f"**Código:** {order.delivery_code}")
        for item in order.items:
            extras = f" ({', '.join(item.options_text)})" if item.options_text else ""
            st.write(f"- {item.quantity}x {item.product_name}{extras}: {format_money(item.subtotal)}")
        _order_actions(order, service)


def _render_transfers(transfers: list[Transfer], service: OrderService) -> None:
    pending, processed = split_transfers(transfers)
    st.markdown(f"### Transferencias pendientes ({len(pending)})")
    if not pending:
        st.info("No hay transferencias para verificar.")
    for transfer in pending:
        summary = transfer.order
        label = summary.order_number if summary else transfer.order_id
        with st.container(border=True):
            st.write(f"**Pedido {label}** · {format_money(transfer.amount)} · Ref. {transfer.transfer_reference or '-'}")
            if summary:
                st.caption(f"{summary.customer_name or ''} {summary.customer_phone or ''}")
            if transfer.proof_image_url:
                st.image(transfer.proof_image_url, width=240)
            col1, col2 = st.columns(2)
            if col1.button("Aprobar", key=f"transfer_{transfer.id}_ok", type="primary"):
                run_action(lambda: service.approve_transfer(transfer), "Transferencia aprobada",
                           refresh=("transfers", "orders"), rerun=True)
            if col2.button("Rechazar", key=f"transfer_{transfer.id}_ko"):
                run_action(lambda: service.reject_transfer(transfer), "Transferencia rechazada", refresh=("transfers",), rerun=True)
    if processed:
        with st.expander(f"Procesadas ({len(processed)})"):
            st.dataframe(
                [{"pedido": t.order_id, "monto": t.amount, "estado": t.status,
                  "verificada": format_datetime(t.verified_at, store_tz())} for t in processed],
                use_container_width=True,
            )


def render() -> None:
    st.title("Pedidos")
    filters = _sidebar_filters()
    service = OrderService(get_data(), bot=get_bot())
    interval = get_schedule().interval("orders")

    @st.fragment(run_every=timedelta(seconds=interval) if interval else None)
    @session_guard
    def board() -> None:
        orders_query = _orders_query()
        transfers_query = _transfers_query()
        orders = orders_query.refresh() or []
        transfers = transfers_query.refresh() or []
        show_query_error(orders_query)
        show_query_error(transfers_query)
        _announce_new_orders(orders)

        stats = order_stats(orders, transfers)
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Por revisar", stats.pending)
        c2.metric("Delivery pendientes", stats.pending_delivery)
        c3.metric("Retiros pendientes", stats.pending_pickup)
        c4.metric("Transferencias", stats.pending_transfers)

        tabs = st.tabs([*BUCKETS.values(), "Transferencias"])
        for tab, bucket in zip(tabs, BUCKETS):
            with tab:
                selected = filter_orders(orders, transfers, filters.model_copy(update={"bucket": bucket}))
                if not selected:
                    st.info("No hay pedidos con estos filtros.")
                    continue
                if bucket == "all":
                    st.dataframe(orders_table(selected), use_container_width=True)
                else:
                    for order in selected:
                        _render_order(order, service)
        with tabs[-1]:
            _render_transfers(transfers, service)

    board()
