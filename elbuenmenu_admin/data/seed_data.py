#!/usr/bin/env python3
"""
seed_data.py

Generates realistic fake data for the El Buen Menú dashboard as JSON files under a
local folder (default: sample_data), read by LocalDataAccess.

Entities:
- orders, transfers, coupons, promo_codes, promotions, store_categories, reviews,
  inventory, expenses, employees, time_clocks, employee_payments,
  loyalty_customers, loyalty_program, loyalty_users, system_status

Run:
  python -m elbuenmenu_admin.data.seed_data --scale small --days 14
"""

from __future__ import annotations

import argparse
import json
import random
import string
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from math import pi, sin
from pathlib import Path
from typing import Optional

from elbuenmenu_admin.config import get_config
from elbuenmenu_admin.services.loyalty import history_points, tier_for

# -----------------------------
# Config & helper structures
# -----------------------------

FIRST_NAMES = ["Juan", "María", "Lucía", "Martín", "Sofía", "Diego", "Valentina", "Lucas", "Camila", "Mateo"]
LAST_NAMES = ["González", "Rodríguez", "Fernández", "López", "Martínez", "Pérez", "Gómez", "Díaz", "Sosa", "Romero"]
STREETS = ["Av. Rivadavia", "Calle Mitre", "Belgrano", "San Martín", "Sarmiento", "Moreno", "Alsina"]

MENU = [
    ("Hamburguesa Clásica", 6500.0),
    ("Hamburguesa Doble Cheddar", 8900.0),
    ("Pizza Muzzarella", 9500.0),
    ("Pizza Napolitana", 10500.0),
    ("Empanadas x6", 7200.0),
    ("Milanesa Napolitana con Papas", 11800.0),
    ("Lomito Completo", 12500.0),
    ("Papas Fritas", 3500.0),
    ("Coca-Cola 1.5L", 3200.0),
    ("Flan con Dulce de Leche", 2800.0),
]
EXTRAS = [("Cheddar extra", 900.0), ("Panceta", 1200.0), ("Huevo", 700.0), ("Sin cebolla", 0.0)]

PAYMENT_METHODS = ["mercadopago", "transferencia", "efectivo"]
DELIVERY_FEES = [0.0, 1500.0, 2000.0, 2500.0]

EXPENSE_ITEMS = {
    "proveedores": ["Carne", "Verduras", "Pan", "Bebidas", "Queso"],
    "combustible": ["Nafta moto reparto"],
    "mantenimiento": ["Service heladera", "Arreglo freidora"],
    "herramientas": ["Cuchillos", "Termómetro"],
    "imprevistos": ["Rotura vidrio"],
    "otros": ["Bolsas", "Servilletas"],
}

INVENTORY_ITEMS = [
    ("Pan de hamburguesa", "panificados", "unidades", 120.0),
    ("Carne picada", "carnes", "kg", 7800.0),
    ("Queso cheddar", "lácteos", "kg", 9200.0),
    ("Papas", "verduras", "kg", 900.0),
    ("Aceite", "almacén", "litros", 2500.0),
    ("Harina", "almacén", "kg", 800.0),
    ("Tomate", "verduras", "kg", 1500.0),
    ("Coca-Cola 1.5L", "bebidas", "unidades", 1900.0),
]

STORE_CATEGORIES = [
    ("Hamburguesas", "🍔", "#FFD523"),
    ("Pizzas", "🍕", "#F97316"),
    ("Empanadas", "🥟", "#A16207"),
    ("Bebidas", "🥤", "#0EA5E9"),
    ("Postres", "🍰", "#EC4899"),
]

EMPLOYEE_ROLES = ["cocina", "cocina", "caja", "limpieza", "administracion", "otro"]


@dataclass
class Scale:
    customers: int
    employees: int
    orders_estimate: int  # over the full window (rough target)


SCALES: dict[str, Scale] = {
    "small": Scale(40, 5, 300),
    "medium": Scale(250, 12, 2_500),
    "large": Scale(1_500, 30, 20_000),
}


# -----------------------------
# Utility functions
# -----------------------------

def iso(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).isoformat()


def rand_code(rnd: random.Random, k: int = 8) -> str:
    return "".join(rnd.choices(string.ascii_uppercase + string.digits, k=k))


def diurnal_multiplier(ts: datetime) -> float:
    """
    Lunch and dinner peaks: two sinusoids around 13:00 and 21:00.
    Returns ~0.2 to ~1.8 multiplier.
    """
    hour = ts.hour + ts.minute / 60.0
    lunch = 0.5 * (1 + sin((hour - 7) / 24 * 2 * pi))
    dinner = 0.5 * (1 + sin((hour - 15) / 24 * 2 * pi))
    return 0.2 + 1.6 * (0.4 * lunch + 0.6 * dinner)


def weekend_multiplier(ts: datetime) -> float:
    return 1.3 if ts.weekday() >= 4 else 1.0  # Fri-Sun uplift


# -----------------------------
# Core generators
# -----------------------------

def gen_customers(n: int, rnd: random.Random) -> list[dict]:
    customers = []
    for i in range(1, n + 1):
        customers.append({
            "id": f"C{i:05d}",
            "name": f"{rnd.choice(FIRST_NAMES)} {rnd.choice(LAST_NAMES)}",
            "phone": f"11{rnd.randint(40000000, 69999999)}",
            "address": f"{rnd.choice(STREETS)} {rnd.randint(100, 4999)}",
        })
    return customers


def gen_items(rnd: random.Random) -> list[dict]:
    items = []
    for line in range(rnd.choices([1, 2, 3, 4], weights=[0.35, 0.35, 0.2, 0.1])[0]):
        name, price = rnd.choice(MENU)
        qty = rnd.choices([1, 2, 3], weights=[0.7, 0.22, 0.08])[0]
        extras = [{"name": e, "price": p} for e, p in rnd.sample(EXTRAS, rnd.choice([0, 0, 1, 2]))]
        unit = price + sum(e["price"] for e in extras)
        # Mix the historical selected_options shapes
        shape = rnd.random()
        if not extras:
            selected = None
        elif shape < 0.5:
            selected = json.dumps({"options": extras, "optionsText": [e["name"] for e in extras]})
        elif shape < 0.8:
            selected = extras
        else:
            selected = {"extras": extras}
        items.append({
            "id": f"I{rnd.randint(0, 10**9):09d}",
            "product_name": name,
            "quantity": qty,
            "unit_price": unit,
            "subtotal": unit * qty,
            "selected_options": selected,
        })
    return items


def gen_orders_and_transfers(
    customers: list[dict],
    start_dt: datetime,
    end_dt: datetime,
    orders_estimate: int,
    seed: int,
) -> tuple[list[dict], list[dict]]:
    rnd = random.Random(seed + 777)
    total_minutes = int((end_dt - start_dt).total_seconds() // 60)
    # base rate per minute to reach target; modulated by diurnal/weekend
    base_per_minute = max(1e-6, orders_estimate / max(1, total_minutes))
    now = end_dt

    orders: list[dict] = []
    transfers: list[dict] = []
    counter = 0
    current = start_dt
    while current <= end_dt:
        expected = base_per_minute * diurnal_multiplier(current) * weekend_multiplier(current)
        p = expected / (1.0 + expected)
        while rnd.random() < p:
            counter += 1
            customer = rnd.choice(customers)
            items = gen_items(rnd)
            fee = rnd.choice(DELIVERY_FEES)
            method = rnd.choices(PAYMENT_METHODS, weights=[0.5, 0.25, 0.25])[0]
            created = current + timedelta(seconds=rnd.randint(0, 59))
            age = now - created

            # Recent orders are still in the kitchen; older ones are mostly delivered
            if age < timedelta(minutes=30):
                status = rnd.choice(["pending", "pending", "confirmed", "preparing"])
            elif age < timedelta(hours=2):
                status = rnd.choice(["preparing", "ready", "assigned", "in_transit", "delivered"])
            else:
                status = rnd.choices(["delivered", "cancelled"], weights=[0.93, 0.07])[0]

            payment_status = "pending"
            if method == "mercadopago" and status != "cancelled":
                payment_status = "approved"
            elif status in ("delivered", "ready", "assigned", "in_transit"):
                payment_status = "completed"

            order_id = f"O{seed}{counter:07d}"
            order = {
                "id": order_id,
                "order_number": f"EBM-{counter:05d}",
                "customer_name": customer["name"],
                "customer_phone": customer["phone"],
                "customer_address": customer["address"] if fee > 0 else None,
                "payment_method": method,
                "payment_status": payment_status,
                "total": sum(i["subtotal"] for i in items) + fee,
                "delivery_fee": fee,
                "status": status,
                "items": items,
                "notes": rnd.choice([None, None, "Tocar timbre", json.dumps({"preference_id": rand_code(rnd, 12)})]),
                "created_at": iso(created),
                "delivery_code": None,
            }
            orders.append(order)

            if method == "transferencia" or (method == "efectivo" and fee == 0 and rnd.random() < 0.3):
                transfers.append({
                    "id": f"T{counter:07d}",
                    "order_id": order_id,
                    "amount": order["total"],
                    "status": "pending" if status in ("pending", "confirmed") else "approved",
                    "transfer_reference": rand_code(rnd, 10),
                    "created_at": iso(created + timedelta(minutes=2)),
                    "order": {
                        "order_number": order["order_number"],
                        "customer_name": order["customer_name"],
                        "customer_phone": order["customer_phone"],
                        "total": order["total"],
                    },
                })
        current += timedelta(minutes=1)
    return orders, transfers


def gen_loyalty(customers: list[dict], orders: list[dict]) -> list[dict]:
    stats: dict[str, list[float]] = {}
    last_order: dict[str, str] = {}
    for order in orders:
        if order["status"] == "cancelled":
            continue
        entry = stats.setdefault(order["customer_phone"], [0, 0.0])
        entry[0] += 1
        entry[1] += order["total"]
        last_order[order["customer_phone"]] = max(last_order.get(order["customer_phone"], ""), order["created_at"])

    rows = []
    for customer in customers:
        total_orders, total_spent = stats.get(customer["phone"], (0, 0.0))
        tier, discount = tier_for(int(total_orders), total_spent)
        rows.append({
            "customerId": customer["id"],
            "customerName": customer["name"],
            "customerPhone": customer["phone"],
            "tier": tier,
            "totalOrders": int(total_orders),
            "totalSpent": total_spent,
            "lastOrderDate": last_order.get(customer["phone"]),
            "favoriteProducts": [],
            "discountPercentage": discount,
            "points": history_points(int(total_orders), total_spent),
            "priority": tier in ("vip", "gold"),
        })
    return rows


def gen_employees(n: int, rnd: random.Random, start_d: date, end_d: date) -> tuple[list[dict], list[dict], list[dict]]:
    employees, clocks, payments = [], [], []
    for i in range(1, n + 1):
        role = EMPLOYEE_ROLES[(i - 1) % len(EMPLOYEE_ROLES)]
        employee_id = f"E{i:03d}"
        employees.append({
            "id": employee_id,
            "name": f"{rnd.choice(FIRST_NAMES)} {rnd.choice(LAST_NAMES)}",
            "email": f"empleado{i}@elbuenmenu.site",
            "phone": f"11{rnd.randint(40000000, 69999999)}",
            "role": role,
            "hourly_rate": float(rnd.choice([2500, 3000, 3500])),
            "daily_rate": 0.0,
            "delivery_rate": 0.0,
            "base_salary": 0.0 if role != "administracion" else 450000.0,
            "is_active": True,
        })
        day = start_d
        while day <= end_d:
            if day.weekday() != 0 and rnd.random() < 0.8:  # closed on Mondays
                clock_in = datetime.combine(day, time(rnd.choice([11, 18]), rnd.randint(0, 20)), tzinfo=timezone.utc)
                open_shift = day == end_d and rnd.random() < 0.5
                clocks.append({
                    "id": f"K{employee_id}{day:%Y%m%d}",
                    "employee_id": employee_id,
                    "clock_in": iso(clock_in),
                    "clock_out": None if open_shift else iso(clock_in + timedelta(hours=rnd.uniform(4, 7))),
                    "date": day.isoformat(),
                })
            day += timedelta(days=1)
        payments.append({
            "id": f"P{employee_id}",
            "employee_id": employee_id,
            "amount": float(rnd.randint(80, 160) * 1000),
            "payment_date": end_d.isoformat(),
            "payment_method": rnd.choice(["efectivo", "transferencia"]),
            "period_start": start_d.isoformat(),
            "period_end": end_d.isoformat(),
        })
    return employees, clocks, payments


def gen_catalog(rnd: random.Random, start_d: date, end_d: date, orders: list[dict]) -> dict[str, list[dict]]:
    until = datetime.combine(end_d + timedelta(days=30), time(23, 59), tzinfo=timezone.utc)
    coupons = [
        {
            "id": f"CP{i}",
            "code": rand_code(rnd),
            "description": description,
            "discount_type": kind,
            "discount_value": value,
            "min_purchase": 5000.0,
            "valid_until": iso(until if i != 2 else until - timedelta(days=90)),
            "usage_limit": limit,
            "usage_count": used,
            "is_active": True,
        }
        for i, (description, kind, value, limit, used) in enumerate([
            ("Bienvenida 10%", "percentage", 10.0, None, 12),
            ("Descuento fijo", "fixed", 1500.0, 100, 100),
            ("Promo vencida", "percentage", 20.0, 50, 8),
            ("Finde 15%", "percentage", 15.0, 200, 31),
        ])
    ]
    promo_codes = [
        {"id": "PC1", "code": "PUNTOS2X", "type": "bonus_points", "value": 100, "isActive": True, "totalUses": 7},
        {"id": "PC2", "code": "VIPGIFT", "type": "special_gift", "value": 1, "levelRestriction": ["gold", "vip"],
         "isActive": True, "validHours": {"from": "18:00", "to": "23:00"}},
    ]
    promotions = [
        {"id": "PR1", "title": "2x1 en empanadas", "type": "2x1", "is_active": True},
        {"id": "PR2", "title": "Combo hamburguesa + papas", "type": "combo", "discount_amount": 1500.0, "is_active": True},
        {"id": "PR3", "title": "20% martes", "type": "discount", "discount_percentage": 20.0, "is_active": False},
        {"id": "PR4", "title": "Envío gratis +$20.000", "type": "free_delivery", "min_purchase": 20000.0, "is_active": True},
    ]
    categories = [
        {"id": f"SC{i}", "name": name, "slug": name.lower(), "icon": icon, "color": color,
         "displayOrder": i, "isActive": True, "_count": {"stores": rnd.randint(1, 12)}}
        for i, (name, icon, color) in enumerate(STORE_CATEGORIES)
    ]
    delivered = [o for o in orders if o["status"] == "delivered"]
    reviews = []
    for i, order in enumerate(rnd.sample(delivered, min(len(delivered), 25))):
        rating = rnd.choices([5, 4, 3, 2, 1], weights=[0.5, 0.25, 0.12, 0.08, 0.05])[0]
        responded = rnd.random() < 0.5
        reviews.append({
            "id": f"R{i:04d}",
            "customer_name": order["customer_name"],
            "rating": rating,
            "comment": rnd.choice(["Excelente", "Muy rico", "Llegó frío", "Tardó un poco", "Volveré a pedir"]),
            "order_id": order["id"],
            "created_at": order["created_at"],
            "response": "¡Gracias por tu comentario!" if responded else None,
            "responded_at": order["created_at"] if responded else None,
        })
    inventory = []
    for i, (name, category, unit, cost) in enumerate(INVENTORY_ITEMS):
        min_stock = float(rnd.randint(5, 20))
        inventory.append({
            "id": f"INV{i}",
            "name": name,
            "category": category,
            "current_stock": rnd.choice([0.0, min_stock - 1, min_stock * 3]),
            "min_stock": min_stock,
            "max_stock": min_stock * 6,
            "unit": unit,
            "cost_per_unit": cost,
            "supplier": rnd.choice(["Distribuidora Sur", "Mayorista Norte", None]),
        })
    expenses = []
    day = start_d
    while day <= end_d:
        for category, names in EXPENSE_ITEMS.items():
            if rnd.random() < (0.6 if category == "proveedores" else 0.08):
                expenses.append({
                    "id": f"X{len(expenses):05d}",
                    "date": day.isoformat(),
                    "category": category,
                    "description": rnd.choice(names),
                    "amount": float(rnd.randint(5, 120) * 1000),
                })
        day += timedelta(days=1)
    return {
        "coupons": coupons,
        "promo_codes": promo_codes,
        "promotions": promotions,
        "store_categories": categories,
        "reviews": reviews,
        "inventory": inventory,
        "expenses": expenses,
    }


def write_json(path: Path, payload) -> None:
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


# -----------------------------
# Main
# -----------------------------

def main(argv: Optional[list[str]] = None) -> int:
    config = get_config()

    parser = argparse.ArgumentParser(description="Generate fake El Buen Menú data as JSON files.")
    parser.add_argument("--scale", choices=SCALES.keys(), default=config.default_seed_scale)
    parser.add_argument("--days", type=int, default=config.default_seed_days, help="Number of days of order history.")
    parser.add_argument("--end-date", type=str, default=None, help="YYYY-MM-DD (defaults to today)")
    parser.add_argument("--output-dir", type=str, default=config.data_dir)
    parser.add_argument("--seed", type=int, default=config.default_seed_value)
    parser.add_argument("--no-overwrite", action="store_true", help="Fail if JSON files already exist.")
    args = parser.parse_args(argv)

    rnd = random.Random(args.seed)
    scale = SCALES[args.scale]
    outdir = Path(args.output_dir)
    outdir.mkdir(parents=True, exist_ok=True)
    if args.no_overwrite and (outdir / "orders.json").exists():
        parser.error(f"{outdir} already contains data (drop --no-overwrite to replace it)")

    if args.end_date:
        end_dt = datetime.combine(date.fromisoformat(args.end_date), time(23, 59), tzinfo=timezone.utc)
    else:
        end_dt = datetime.now(timezone.utc).replace(second=0, microsecond=0)
    start_dt = (end_dt - timedelta(days=args.days - 1)).replace(hour=0, minute=0)
    start_d, end_d = start_dt.date(), end_dt.date()

    customers = gen_customers(scale.customers, rnd)
    orders, transfers = gen_orders_and_transfers(customers, start_dt, end_dt, scale.orders_estimate, args.seed)
    employees, clocks, payments = gen_employees(scale.employees, rnd, start_d, end_d)
    catalog = gen_catalog(rnd, start_d, end_d, orders)
    loyalty = gen_loyalty(customers, orders)
    loyalty_users = [
        {
            "id": row["customerId"],
            "name": row["customerName"],
            "phone": row["customerPhone"],
            "total_points": row["points"],
            "redeemed_points": row["points"] // 4,
            "available_points": row["points"] - row["points"] // 4,
            "level": row["tier"],
            "total_orders": row["totalOrders"],
        }
        for row in loyalty
    ]

    tables = {
        "orders": orders,
        "transfers": transfers,
        "employees": employees,
        "time_clocks": clocks,
        "employee_payments": payments,
        "loyalty_customers": loyalty,
        "loyalty_users": loyalty_users,
        "loyalty_program": {"points_per_order": 10, "points_per_currency": 1, "discount_per_points": 100, "is_active": True},
        "system_status": {
            "services": {
                "backend": {"status": "online", "uptime": 3 * 86_400_000, "restarts": 2, "memory": 152_000_000, "cpu": 3.5},
                "whatsapp-bot": {"status": "stopped", "uptime": None, "restarts": 0, "memory": 0, "cpu": 0},
            }
        },
        **catalog,
    }
    for name, payload in tables.items():
        write_json(outdir / f"{name}.json", payload)

    # simple summary
    print(f"Generated data in {outdir}")
    print(f" orders: {len(orders)} | transfers: {len(transfers)} | customers: {len(customers)}")
    print(f" employees: {len(employees)} | time_clocks: {len(clocks)} | expenses: {len(catalog['expenses'])}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
