"""Coupons, loyalty promo codes, promotions and marketplace store categories."""
from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Optional

import streamlit as st

from elbuenmenu_admin.data.models import (
    COUPON_STATUS_LABELS,
    CUSTOMER_TIERS,
    TIER_LABELS,
    Coupon,
    PromoCode,
    Promotion,
    StoreCategory,
    ValidHours,
)
from elbuenmenu_admin.data.resources import COUPONS, PROMO_CODES, PROMOTIONS, STORE_CATEGORIES
from elbuenmenu_admin.services.crud import slugify
from elbuenmenu_admin.services.formatting import format_datetime, format_money
from elbuenmenu_admin.services.metrics import (
    coupon_stats,
    coupon_status,
    describe_discount,
    generate_code,
    promotion_stats,
)

from .common import get_data, run_action
from .crud import get_controller, render_crud

PROMO_TYPE_LABELS = {
    "discount_percent": "Descuento %",
    "discount_fixed": "Descuento fijo",
    "free_product": "Producto gratis",
    "bonus_points": "Puntos extra",
    "level_upgrade": "Subir de nivel",
    "special_gift": "Regalo especial",
}
PROMOTION_TYPE_LABELS = {"discount": "Descuento", "2x1": "2x1", "combo": "Combo", "free_delivery": "Envío gratis"}


def _day_start(value: Optional[date]) -> Optional[datetime]:
    return datetime.combine(value, time.min, tzinfo=timezone.utc) if value else None


def _day_end(value: Optional[date]) -> Optional[datetime]:
    return datetime.combine(value, time(23, 59, 59), tzinfo=timezone.utc) if value else None


def _as_date(value: Optional[datetime]) -> Optional[date]:
    return value.date() if value else None


# ---------- coupons ----------

def _coupon_row(coupon: Coupon) -> dict:
    limit = coupon.usage_limit or "∞"
    return {
        "código": coupon.code,
        "descuento": describe_discount(coupon),
        "compra mínima": format_money(coupon.min_purchase),
        "usos": f"{coupon.usage_count}/{limit}",
        "vence": format_datetime(coupon.valid_until),
        "estado": COUPON_STATUS_LABELS[coupon_status(coupon)],
    }


def _coupon_form(draft: Coupon, key: str) -> Coupon:
    code = st.text_input("Código", value=draft.code, key=f"{key}_code")
    description = st.text_input("Descripción", value=draft.description or "", key=f"{key}_description")
    discount_type = st.radio(
        "Tipo", ["percentage", "fixed"], index=0 if draft.discount_type == "percentage" else 1,
        format_func={"percentage": "Porcentaje", "fixed": "Monto fijo"}.get, horizontal=True, key=f"{key}_type",
    )
    value = st.number_input("Valor", min_value=0.0, value=float(draft.discount_value), key=f"{key}_value")
    min_purchase = st.number_input("Compra mínima", min_value=0.0, value=float(draft.min_purchase), key=f"{key}_min")
    usage_limit = st.number_input("Límite de usos (0 = ilimitado)", min_value=0, value=draft.usage_limit or 0,
                                  key=f"{key}_limit")
    valid_from = st.date_input("Desde", value=_as_date(draft.valid_from), key=f"{key}_from")
    valid_until = st.date_input("Hasta", value=_as_date(draft.valid_until), key=f"{key}_until")
    is_active = st.checkbox("Activo", value=draft.is_active, key=f"{key}_active")
    return draft.model_copy(update={
        "code": code.strip().upper(),
        "description": description or None,
        "discount_type": discount_type,
        "discount_value": value,
        "min_purchase": min_purchase,
        "usage_limit": usage_limit or None,
        "valid_from": _day_start(valid_from),
        "valid_until": _day_end(valid_until),
        "is_active": is_active,
    })


def render_coupons() -> None:
    st.title("Cupones")
    controller = get_controller(COUPONS)
    stats = coupon_stats(controller.records)
    c1, c2, c3 = st.columns(3)
    c1.metric("Activos", stats.active)
    c2.metric("Vencidos", stats.expired)
    c3.metric("Usos totales", stats.total_uses)
    render_crud(controller, _coupon_row, _coupon_form, create_defaults=lambda: {"code": generate_code()})


# ---------- promo codes ----------

def _promo_row(promo: PromoCode) -> dict:
    return {
        "código": promo.code,
        "tipo": PROMO_TYPE_LABELS.get(promo.type, promo.type),
        "valor": promo.value,
        "niveles": ", ".join(TIER_LABELS.get(t, t) for t in promo.level_restriction or []) or "Todos",
        "usos": promo.total_uses,
        "activo": promo.is_active,
    }


def _promo_form(draft: PromoCode, key: str) -> PromoCode:
    code = st.text_input("Código", value=draft.code, key=f"{key}_code")
    types = list(PROMO_TYPE_LABELS)
    promo_type = st.selectbox("Tipo", types, index=types.index(draft.type), format_func=PROMO_TYPE_LABELS.get,
                              key=f"{key}_type")
    value = st.number_input("Valor", min_value=0.0, value=float(draft.value), key=f"{key}_value")
    description = st.text_input("Descripción", value=draft.description or "", key=f"{key}_description")
    levels = st.multiselect("Niveles habilitados", list(CUSTOMER_TIERS), default=draft.level_restriction or [],
                            format_func=TIER_LABELS.get, key=f"{key}_levels")
    max_total = st.number_input("Usos totales máximos (0 = ilimitado)", min_value=0, value=draft.max_total_uses or 0,
                                key=f"{key}_max_total")
    per_customer = st.number_input("Usos por cliente", min_value=1, value=draft.max_uses_per_customer or 1,
                                   key=f"{key}_per_customer")
    use_hours = st.checkbox("Restringir horario", value=draft.valid_hours is not None, key=f"{key}_use_hours")
    hours = draft.valid_hours or ValidHours()
    col1, col2 = st.columns(2)
    hour_from = col1.text_input("Desde (HH:MM)", value=hours.from_, key=f"{key}_hfrom")
    hour_to = col2.text_input("Hasta (HH:MM)", value=hours.to, key=f"{key}_hto")
    is_active = st.checkbox("Activo", value=draft.is_active, key=f"{key}_active")
    return draft.model_copy(update={
        "code": code.strip().upper(),
        "type": promo_type,
        "value": value,
        "description": description or None,
        "level_restriction": levels or None,
        "max_total_uses": max_total or None,
        "max_uses_per_customer": per_customer,
        "valid_hours": ValidHours(**{"from": hour_from, "to": hour_to}) if use_hours else None,
        "is_active": is_active,
    })


def _promo_actions(promo: PromoCode) -> None:
    label = "Desactivar" if promo.is_active else "Activar"
    if st.button(label, key=f"promo_{promo.id}_toggle"):
        controller = get_controller(PROMO_CODES)
        if run_action(lambda: get_data().set_promo_code_active(promo.id, not promo.is_active), "Código actualizado"):
            controller.load()
            st.rerun()


def render_promo_codes() -> None:
    st.title("Códigos promocionales")
    controller = get_controller(PROMO_CODES)
    render_crud(controller, _promo_row, _promo_form, create_defaults=lambda: {"code": generate_code()},
                actions=_promo_actions)


# ---------- promotions ----------

def _promotion_row(promotion: Promotion) -> dict:
    if promotion.discount_percentage:
        benefit = f"{promotion.discount_percentage:g}%"
    elif promotion.discount_amount:
        benefit = format_money(promotion.discount_amount)
    else:
        benefit = "-"
    return {
        "título": promotion.title,
        "tipo": PROMOTION_TYPE_LABELS.get(promotion.type, promotion.type),
        "beneficio": benefit,
        "compra mínima": format_money(promotion.min_purchase),
        "hasta": format_datetime(promotion.valid_until),
        "activa": promotion.is_active,
    }


def _promotion_form(draft: Promotion, key: str) -> Promotion:
    title = st.text_input("Título", value=draft.title, key=f"{key}_title")
    description = st.text_area("Descripción", value=draft.description or "", key=f"{key}_description")
    types = list(PROMOTION_TYPE_LABELS)
    promotion_type = st.selectbox("Tipo", types, index=types.index(draft.type),
                                  format_func=PROMOTION_TYPE_LABELS.get, key=f"{key}_type")
    percentage = st.number_input("Descuento %", min_value=0.0, max_value=100.0,
                                 value=float(draft.discount_percentage or 0), key=f"{key}_pct")
    amount = st.number_input("Descuento fijo", min_value=0.0, value=float(draft.discount_amount or 0),
                             key=f"{key}_amount")
    min_purchase = st.number_input("Compra mínima", min_value=0.0, value=float(draft.min_purchase), key=f"{key}_min")
    valid_from = st.date_input("Desde", value=_as_date(draft.valid_from), key=f"{key}_from")
    valid_until = st.date_input("Hasta", value=_as_date(draft.valid_until), key=f"{key}_until")
    image_url = st.text_input("Imagen (URL)", value=draft.image_url or "", key=f"{key}_image")
    is_active = st.checkbox("Activa", value=draft.is_active, key=f"{key}_active")
    return draft.model_copy(update={
        "title": title.strip(),
        "description": description or None,
        "type": promotion_type,
        "discount_percentage": percentage or None,
        "discount_amount": amount or None,
        "min_purchase": min_purchase,
        "valid_from": _day_start(valid_from),
        "valid_until": _day_end(valid_until),
        "image_url": image_url or None,
        "is_active": is_active,
    })


def render_promotions() -> None:
    st.title("Promociones")
    controller = get_controller(PROMOTIONS)
    stats = promotion_stats(controller.records)
    c1, c2, c3 = st.columns(3)
    c1.metric("Activas", stats.active)
    c2.metric("Descuentos", stats.discount)
    c3.metric("Combos", stats.combo)
    render_crud(controller, _promotion_row, _promotion_form)


# ---------- store categories ----------

def _category_row(category: StoreCategory) -> dict:
    return {
        "nombre": f"{category.icon or ''} {category.name}".strip(),
        "slug": category.slug,
        "orden": category.display_order,
        "tiendas": category.store_count,
        "activa": category.is_active,
    }


def _category_form(draft: StoreCategory, key: str) -> StoreCategory:
    name = st.text_input("Nombre", value=draft.name, key=f"{key}_name")
    slug = st.text_input("Slug (vacío = automático)", value=draft.slug, key=f"{key}_slug")
    description = st.text_input("Descripción", value=draft.description or "", key=f"{key}_description")
    icon = st.text_input("Ícono", value=draft.icon or "", key=f"{key}_icon")
    color = st.color_picker("Color", value=draft.color, key=f"{key}_color")
    order = st.number_input("Orden", min_value=0, value=draft.display_order, key=f"{key}_order")
    is_active = st.checkbox("Activa", value=draft.is_active, key=f"{key}_active")
    return draft.model_copy(update={
        "name": name.strip(),
        "slug": slug.strip() or slugify(name),
        "description": description or None,
        "icon": icon or None,
        "color": color,
        "display_order": order,
        "is_active": is_active,
    })


def render_store_categories() -> None:
    st.title("Categorías de tiendas")
    controller = get_controller(STORE_CATEGORIES)
    ordered = sorted(controller.records, key=lambda c: c.display_order)
    render_crud(controller, _category_row, _category_form, records=ordered)
