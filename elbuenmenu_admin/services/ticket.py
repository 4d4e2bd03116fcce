"""80mm thermal ticket for an order, rendered as a standalone HTML page."""
from __future__ import annotations

import json
from datetime import tzinfo
from html import escape
from typing import Optional

from elbuenmenu_admin.config import get_config
from elbuenmenu_admin.data.models import Order, OrderItem

from .formatting import format_datetime, format_money
from .orders import APPROVED_PAYMENT_STATUSES

_STYLE = """
@media print { @page { margin: 0; size: 80mm auto; } body { margin: 0; } }
* { box-sizing: border-box; }
body { font-family: 'Courier New', monospace; width: 80mm; margin: 0 auto; padding: 10mm;
       background: white; font-size: 12px; line-height: 1.4; }
.header { text-align: center; border-bottom: 2px solid #000; padding-bottom: 10px; margin-bottom: 15px; }
.header h1 { margin: 0; font-size: 18px; font-weight: bold; }
.header p { margin: 5px 0 0 0; font-size: 10px; }
.section { margin: 15px 0; padding-bottom: 10px; border-bottom: 1px dashed #ccc; }
.section-title { font-weight: bold; font-size: 14px; margin-bottom: 8px; text-transform: uppercase; }
.item { display: flex; justify-content: space-between; margin: 5px 0; font-size: 11px; }
.item-name { flex: 1; }
.item-price { font-weight: bold; margin-left: 10px; }
.extras { margin-left: 15px; font-size: 10px; color: #666; }
.total { font-size: 16px; font-weight: bold; text-align: right; margin-top: 10px; padding-top: 10px;
         border-top: 2px solid #000; }
.code { border: 3px solid #000; padding: 15px; text-align: center; background: #f9f9f9; }
.code-value { font-size: 32px; font-weight: bold; letter-spacing: 5px; margin: 10px 0; }
.footer { text-align: center; margin-top: 20px; font-size: 10px; color: #666; }
.divider { border-top: 1px dashed #000; margin: 10px 0; }
"""


def visible_notes(notes: Optional[str]) -> str:
    """Notes fit for the customer's ticket.

    JSON notes carrying a Mercado Pago preference are internal and hidden entirely;
    other JSON objects render as "key: value" pairs without preference keys.
    """
    if not notes:
        return ""
    try:
        parsed = json.loads(notes)
    except ValueError:
        return notes.strip()

    if isinstance(parsed, dict):
        if parsed.get("preference_id") or parsed.get("mpPreferenceId"):
            return ""
        pairs = [
            f"{key}: {value}"
            for key, value in parsed.items()
            if "preference" not in key.lower()
        ]
        return ", ".join(pairs)
    return str(parsed).strip()


def _item_html(item: OrderItem) -> str:
    extras = "<br/>".join(
        escape(f"+ {opt.name}" + (f" (+{format_money(opt.price)})" if opt.price > 0 else ""))
        for opt in item.options
    )
    extras_html = f'<div class="extras">{extras}</div>' if extras else ""
    return (
        '<div class="item">'
        f'<div class="item-name">{item.quantity}x {escape(item.product_name)}{extras_html}</div>'
        f'<div class="item-price">{format_money(item.subtotal)}</div>'
        "</div>"
    )


def render_ticket_html(order: Order, tz: Optional[tzinfo] = None) -> str:
    config = get_config()
    paid = (order.payment_status or "").lower() in APPROVED_PAYMENT_STATUSES

    customer = [
        f"<div><strong>{escape(order.customer_name or '')}</strong></div>",
        f"<div>📱 {escape(order.customer_phone or 'N/A')}</div>",
    ]
    if order.customer_address:
        customer.append(f"<div>📍 {escape(order.customer_address)}</div>")

    totals = [
        f'<div class="item"><span>Subtotal:</span><span>{format_money(order.subtotal)}</span></div>',
    ]
    if order.delivery_fee > 0:
        totals.append(f'<div class="item"><span>Envío:</span><span>{format_money(order.delivery_fee)}</span></div>')
    totals.append(f'<div class="total">Total: {format_money(order.total)}</div>')

    sections = [
        '<div class="header"><h1>EL BUEN MENÚ</h1>'
        f"<p>Pedido {escape(order.order_number)}</p>"
        f"<p>{format_datetime(order.created_at, tz)}</p></div>",
        '<div class="section"><div class="section-title">Cliente</div>' + "".join(customer) + "</div>",
        '<div class="section"><div class="section-title">Items</div>'
        + "".join(_item_html(item) for item in order.items)
        + "</div>",
        '<div class="section"><div class="divider"></div>' + "".join(totals) + "</div>",
        '<div class="section"><div class="section-title">Pago</div>'
        f"<div>💳 {escape(order.payment_method or 'Pendiente de selección (Web)')}</div>"
        f"<div>Estado: {'✅ Pagado' if paid else '⏳ Pendiente'}</div></div>",
    ]

    notes = visible_notes(order.notes)
    if notes:
        sections.append(f'<div class="section"><div class="section-title">Notas</div><div>{escape(notes)}</div></div>')

    if order.is_pickup and order.delivery_code and order.delivery_code.strip():
        sections.append(
            '<div class="section code"><div class="section-title">🔐 CÓDIGO DE RETIRO</div>'
            f'<div class="code-value">{escape(order.delivery_code)}</div>'
            "<div>Presentá este código al retirar</div></div>"
        )

    sections.append(
        '<div class="footer"><div class="divider"></div>'
        f"<div>¡Gracias por tu compra!</div><div>{escape(config.public_site)}</div></div>"
    )

    return (
        "<!DOCTYPE html><html><head><meta charset=\"UTF-8\">"
        f"<title>Ticket Pedido {escape(order.order_number)}</title>"
        f"<style>{_STYLE}</style></head><body>"
        + "".join(sections)
        + "</body></html>"
    )
