"""Store configuration, advanced settings, payment methods and system status."""
from __future__ import annotations

from datetime import timedelta

import streamlit as st

from elbuenmenu_admin.config import get_config
from elbuenmenu_admin.data.models import WEEK_DAYS, AdvancedSettings, DayHours, PaymentConfig, StoreSettings
from elbuenmenu_admin.services.formatting import format_memory, format_uptime, service_status_color
from elbuenmenu_admin.services.settings import PaymentConfigStore

from .common import confirm_button, get_context, get_data, get_query, get_schedule, invalidate, run_action, session_guard, show_query_error

DAY_LABELS = dict(zip(WEEK_DAYS, ["Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado", "Domingo"]))
SERVICES = {"backend": "Backend", "whatsapp-bot": "Bot de WhatsApp"}


def _week_editor(week: dict[str, DayHours], key: str) -> dict[str, DayHours]:
    edited = {}
    for day in WEEK_DAYS:
        hours = week.get(day, DayHours())
        col1, col2, col3 = st.columns([1, 1, 1])
        enabled = col1.checkbox(DAY_LABELS[day], value=hours.enabled, key=f"{key}_{day}_on")
        opens = col2.text_input("Abre", value=hours.open, key=f"{key}_{day}_open", label_visibility="collapsed")
        closes = col3.text_input("Cierra", value=hours.close, key=f"{key}_{day}_close", label_visibility="collapsed")
        edited[day] = DayHours(open=opens, close=closes, enabled=enabled)
    return edited


def render_store() -> None:
    st.title("Configuración del local")
    store_id = get_context().store_id
    if not store_id:
        st.warning("Configurá el ID del local en la barra lateral para editar su configuración.")
        return

    data = get_data()
    query = get_query(f"store_settings_{store_id}", lambda: data.get_store_settings(store_id), default=StoreSettings())
    settings: StoreSettings = query.refresh()
    show_query_error(query)

    with st.form("store_settings"):
        tab_basic, tab_hours, tab_delivery, tab_payments, tab_whatsapp, tab_orders = st.tabs(
            ["Datos", "Horarios", "Envíos", "Pagos", "WhatsApp", "Pedidos"]
        )
        with tab_basic:
            commercial_name = st.text_input("Nombre comercial", value=settings.commercial_name)
            logo_url = st.text_input("Logo (URL)", value=settings.logo_url)
            short_description = st.text_input("Descripción corta", value=settings.short_description)
            long_description = st.text_area("Descripción larga", value=settings.long_description)
            address = st.text_input("Dirección", value=settings.address)
            phone = st.text_input("Teléfono", value=settings.phone)
            whatsapp_number = st.text_input("WhatsApp", value=settings.whatsapp_number)
        with tab_hours:
            is_open = st.checkbox("Local abierto", value=settings.is_open)
            closed_message = st.text_input("Mensaje de cerrado", value=settings.closed_message)
            st.markdown("**Atención**")
            hours = _week_editor(settings.hours, "hours")
            st.markdown("**Delivery**")
            delivery_hours = _week_editor(settings.delivery_hours, "delivery_hours")
        with tab_delivery:
            delivery_enabled = st.checkbox("Delivery habilitado", value=settings.delivery_enabled)
            pickup_enabled = st.checkbox("Retiro habilitado", value=settings.pickup_enabled)
            delivery_temp_disabled = st.checkbox("Pausar delivery temporalmente", value=settings.delivery_temp_disabled)
            delivery_price = st.number_input("Costo de envío", min_value=0.0, value=float(settings.delivery_price))
            col1, col2 = st.columns(2)
            time_min = col1.number_input("Demora mínima (min)", min_value=0, value=settings.delivery_time_min)
            time_max = col2.number_input("Demora máxima (min)", min_value=0, value=settings.delivery_time_max)
            zone_info = st.text_area("Zona de entrega", value=settings.delivery_zone_info)
        with tab_payments:
            cash_enabled = st.checkbox("Efectivo", value=settings.cash_enabled)
            transfer_enabled = st.checkbox("Transferencia", value=settings.transfer_enabled)
            transfer_alias = st.text_input("Alias", value=settings.transfer_alias)
            transfer_cvu = st.text_input("CVU", value=settings.transfer_cvu)
            transfer_titular = st.text_input("Titular", value=settings.transfer_titular)
            transfer_notes = st.text_input("Notas de transferencia", value=settings.transfer_notes)
            mercado_pago_enabled = st.checkbox("Mercado Pago", value=settings.mercado_pago_enabled)
            mercado_pago_link = st.text_input("Link de Mercado Pago", value=settings.mercado_pago_link)
            payment_notes = st.text_area("Notas de pago", value=settings.payment_notes)
        with tab_whatsapp:
            bot_enabled = st.checkbox("Bot habilitado", value=settings.whatsapp_bot_enabled)
            bot_number = st.text_input("Número del bot", value=settings.whatsapp_bot_number)
            st.caption("Variables: {{storeName}}, {{storeUrl}}, {{orderNumber}}, {{deliveryCode}}, {{trackingUrl}}")
            welcome = st.text_area("Bienvenida", value=settings.welcome_message)
            confirm = st.text_area("Pedido confirmado", value=settings.order_confirm_message)
            on_way = st.text_area("Pedido en camino", value=settings.order_on_way_message)
        with tab_orders:
            scheduled = st.checkbox("Aceptar pedidos programados", value=settings.accept_scheduled_orders)
            promotions = st.checkbox("Promociones habilitadas", value=settings.promotions_enabled)
            min_order = st.number_input("Pedido mínimo", min_value=0.0, value=float(settings.min_order_amount))
            max_per_hour = st.number_input("Máximo de pedidos por hora (0 = sin límite)", min_value=0,
                                           value=settings.max_orders_per_hour)

        if st.form_submit_button("Guardar configuración", type="primary"):
            updated = settings.model_copy(update={
                "commercial_name": commercial_name,
                "logo_url": logo_url,
                "short_description": short_description,
                "long_description": long_description,
                "address": address,
                "phone": phone,
                "whatsapp_number": whatsapp_number,
                "is_open": is_open,
                "closed_message": closed_message,
                "hours": hours,
                "delivery_hours": delivery_hours,
                "delivery_enabled": delivery_enabled,
                "pickup_enabled": pickup_enabled,
                "delivery_temp_disabled": delivery_temp_disabled,
                "delivery_price": delivery_price,
                "delivery_time_min": time_min,
                "delivery_time_max": time_max,
                "delivery_zone_info": zone_info,
                "cash_enabled": cash_enabled,
                "transfer_enabled": transfer_enabled,
                "transfer_alias": transfer_alias,
                "transfer_cvu": transfer_cvu,
                "transfer_titular": transfer_titular,
                "transfer_notes": transfer_notes,
                "mercado_pago_enabled": mercado_pago_enabled,
                "mercado_pago_link": mercado_pago_link,
                "payment_notes": payment_notes,
                "whatsapp_bot_enabled": bot_enabled,
                "whatsapp_bot_number": bot_number,
                "welcome_message": welcome,
                "order_confirm_message": confirm,
                "order_on_way_message": on_way,
                "accept_scheduled_orders": scheduled,
                "promotions_enabled": promotions,
                "min_order_amount": min_order,
                "max_orders_per_hour": max_per_hour,
            })
            if run_action(lambda: data.save_store_settings(store_id, updated), "Configuración guardada"):
                invalidate(f"store_settings_{store_id}")


def render_advanced() -> None:
    st.title("Configuración avanzada")
    data = get_data()
    query = get_query("advanced_settings", data.get_advanced_settings, default=AdvancedSettings())
    settings: AdvancedSettings = query.refresh()
    show_query_error(query)

    with st.form("advanced_settings"):
        st.markdown("#### Notificaciones")
        notifications = {
            field: st.checkbox(label, value=getattr(settings.notifications, field), key=f"notif_{field}")
            for field, label in [("email", "Email"), ("push", "Push"), ("sms", "SMS"),
                                 ("order_alerts", "Alertas de pedidos"), ("stock_alerts", "Alertas de stock")]
        }
        st.markdown("#### Negocio")
        business = {
            field: st.checkbox(label, value=getattr(settings.business, field), key=f"business_{field}")
            for field, label in [("auto_approve_orders", "Aprobar pedidos automáticamente"),
                                 ("require_payment_confirmation", "Exigir confirmación de pago"),
                                 ("delivery_enabled", "Delivery"), ("pickup_enabled", "Retiro")]
        }
        st.markdown("#### Integraciones")
        integrations = {
            field: st.checkbox(label, value=getattr(settings.integrations, field), key=f"integration_{field}")
            for field, label in [("whatsapp_enabled", "WhatsApp"), ("mercado_pago_enabled", "Mercado Pago")]
        }
        st.markdown("#### Apariencia")
        theme = st.radio("Tema", ["light", "dark"], index=0 if settings.appearance.theme == "light" else 1,
                         horizontal=True, format_func={"light": "Claro", "dark": "Oscuro"}.get)
        color = st.color_picker("Color principal", value=settings.appearance.primary_color)

        if st.form_submit_button("Guardar", type="primary"):
            updated = AdvancedSettings.model_validate({
                "notifications": notifications,
                "business": business,
                "integrations": integrations,
                "appearance": {"theme": theme, "primary_color": color},
            })
            if run_action(lambda: data.save_advanced_settings(updated), "Configuración guardada",
                          refresh=("advanced_settings",)):
                st.rerun()


def render_payments() -> None:
    st.title("Métodos de pago")
    store = PaymentConfigStore(get_data())
    config: PaymentConfig = store.load()

    with st.form("payment_config"):
        st.markdown("#### Mercado Pago")
        mp_enabled = st.checkbox("Habilitado", value=config.mercado_pago.enabled, key="mp_enabled")
        public_key = st.text_input("Public key", value=config.mercado_pago.public_key)
        access_token = st.text_input("Access token", value=config.mercado_pago.access_token, type="password")
        st.markdown("#### Transferencia")
        transfer_enabled = st.checkbox("Habilitada", value=config.transferencia.enabled, key="transfer_enabled")
        alias = st.text_input("Alias", value=config.transferencia.alias)
        cvu = st.text_input("CVU", value=config.transferencia.cvu)
        titular = st.text_input("Titular", value=config.transferencia.titular)
        st.markdown("#### Efectivo")
        cash_enabled = st.checkbox("Habilitado", value=config.efectivo.enabled, key="cash_enabled")
        cash_message = st.text_input("Mensaje", value=config.efectivo.message)
        submitted = st.form_submit_button("Guardar", type="primary")

    if submitted:
        updated = PaymentConfig.model_validate({
            "mercado_pago": {"enabled": mp_enabled, "public_key": public_key, "access_token": access_token},
            "transferencia": {"enabled": transfer_enabled, "alias": alias, "cvu": cvu, "titular": titular},
            "efectivo": {"enabled": cash_enabled, "message": cash_message},
        })
        report = store.save(updated)
        if report.fully_saved:
            st.success("Configuración guardada")
        elif report.saved_anywhere:
            st.warning(f"Guardado parcial: {'; '.join(report.errors)}")
        else:
            st.error(f"No se pudo guardar: {'; '.join(report.errors)}")

    if st.button("Probar conexión con Mercado Pago"):
        result = None

        def check():
            nonlocal result
            result = get_data().test_mercadopago_connection()

        if run_action(check) and result is not None:
            if result.ok:
                st.success(f"{result.message} (preferencia {result.preference_id})")
            else:
                st.error(result.message)


def _render_service(name: str, label: str, status) -> None:
    data = get_data()
    service = status.services.get(name)
    with st.container(border=True):
        if service is None:
            st.write(f"**{label}**: sin datos")
            return
        st.markdown(f"**{label}** :{service_status_color(service.status)}[{service.status.upper()}]")
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Uptime", format_uptime(service.uptime))
        c2.metric("Reinicios", service.restarts)
        c3.metric("Memoria", format_memory(service.memory))
        c4.metric("CPU", f"{service.cpu:.1f}%")
        if confirm_button("Reiniciar", key=f"restart_{name}"):
            run_action(lambda: data.restart_service(name), f"{label}: reinicio solicitado", refresh=("system_status",))
        with st.expander("Logs"):
            logs = get_query(f"logs_{name}", lambda: data.get_system_logs(name, get_config().system_log_lines))
            if st.button("Actualizar logs", key=f"logs_{name}_refresh"):
                logs.invalidate()
            result = logs.refresh()
            show_query_error(logs)
            st.code("\n".join(result.lines) if result and result.lines else "Sin logs", language="text")


def render_system() -> None:
    st.title("Sistema")
    data = get_data()
    query = get_query("system_status", data.get_system_status)
    if st.button("Actualizar estado"):
        query.invalidate()
    status = query.refresh()
    show_query_error(query)
    if status is None:
        st.info("Estado del sistema no disponible.")
        return
    for name, label in SERVICES.items():
        _render_service(name, label, status)

    st.markdown("### WhatsApp")
    interval = get_schedule().interval("system_qr")

    @st.fragment(run_every=timedelta(seconds=interval) if interval else None)
    @session_guard
    def qr_panel() -> None:
        qr = get_query("whatsapp_qr", data.get_whatsapp_qr, screen="system_qr")
        image = qr.refresh()
        show_query_error(qr)
        if image:
            st.image(image, caption="Escaneá el código con WhatsApp", width=260)
        else:
            st.caption("No hay código QR pendiente: el bot está vinculado o todavía no generó uno.")

    qr_panel()
    if confirm_button("Desvincular WhatsApp", key="disconnect_whatsapp"):
        run_action(data.disconnect_whatsapp, "WhatsApp desvinculado", refresh=("whatsapp_qr", "system_status"))
