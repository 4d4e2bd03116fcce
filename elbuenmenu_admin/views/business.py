"""Expenses, employees and payroll, reviews and inventory."""
from __future__ import annotations

from datetime import date

import streamlit as st

from elbuenmenu_admin.data.models import (
    EXPENSE_CATEGORIES,
    ROLE_LABELS,
    Employee,
    EmployeePayment,
    Expense,
    InventoryItem,
    Review,
)
from elbuenmenu_admin.data.resources import EMPLOYEE_PAYMENTS, EMPLOYEES, EXPENSES, INVENTORY, REVIEWS, TIME_CLOCKS
from elbuenmenu_admin.services.charts import expenses_frame, rating_frame
from elbuenmenu_admin.services.crud import validate_review_response
from elbuenmenu_admin.services.formatting import format_datetime, format_money
from elbuenmenu_admin.services.metrics import (
    filter_reviews,
    inventory_stats,
    is_low_stock,
    is_out_of_stock,
    month_key,
    review_stats,
    stock_fill_ratio,
    summarize_expenses,
)
from elbuenmenu_admin.services.orders import store_tz
from elbuenmenu_admin.services.payroll import (
    calculate_salary,
    employee_performance,
    month_bounds,
    on_shift_count,
    open_shift,
)

from .common import get_data, run_action
from .crud import get_controller, render_crud

CATEGORY_LABELS = {
    "proveedores": "Proveedores",
    "combustible": "Combustible",
    "mantenimiento": "Mantenimiento",
    "herramientas": "Herramientas",
    "imprevistos": "Imprevistos",
    "otros": "Otros",
}


# ---------- expenses ----------

def _expense_row(expense: Expense) -> dict:
    return {
        "fecha": expense.date.strftime("%d/%m/%Y"),
        "categoría": CATEGORY_LABELS.get(expense.category, expense.category),
        "descripción": expense.description,
        "monto": format_money(expense.amount),
    }


def _expense_form(draft: Expense, key: str) -> Expense:
    day = st.date_input("Fecha", value=draft.date, key=f"{key}_date")
    categories = list(EXPENSE_CATEGORIES)
    category = st.selectbox("Categoría", categories, index=categories.index(draft.category),
                            format_func=CATEGORY_LABELS.get, key=f"{key}_category")
    description = st.text_input("Descripción", value=draft.description, key=f"{key}_description")
    amount = st.number_input("Monto", min_value=0.0, value=float(draft.amount), key=f"{key}_amount")
    notes = st.text_area("Notas", value=draft.notes or "", key=f"{key}_notes")
    return draft.model_copy(update={
        "date": day,
        "category": category,
        "description": description.strip(),
        "amount": amount,
        "notes": notes or None,
    })


def render_expenses() -> None:
    st.title("Gastos")
    month = st.text_input("Mes (AAAA-MM)", value=month_key(date.today()))
    controller = get_controller(EXPENSES, params={"month": month} if month else None)
    summary = summarize_expenses(controller.records)

    c1, c2 = st.columns(2)
    c1.metric("Total del mes", format_money(summary.total))
    c2.metric("Gastos cargados", summary.count)
    chart = expenses_frame(summary)
    if not chart.empty:
        st.bar_chart(chart.rename(index=CATEGORY_LABELS), use_container_width=True)

    render_crud(controller, _expense_row, _expense_form, create_defaults=lambda: {"date": date.today()})


# ---------- employees ----------

def _employee_row(employee: Employee) -> dict:
    return {
        "nombre": employee.name,
        "rol": ROLE_LABELS.get(employee.role, employee.role),
        "teléfono": employee.phone or "-",
        "por hora": format_money(employee.hourly_rate),
        "activo": employee.is_active,
        "último ingreso": format_datetime(employee.last_login, store_tz()),
    }


def _employee_form(draft: Employee, key: str) -> Employee:
    name = st.text_input("Nombre", value=draft.name, key=f"{key}_name")
    email = st.text_input("Email", value=draft.email or "", key=f"{key}_email")
    phone = st.text_input("Teléfono", value=draft.phone or "", key=f"{key}_phone")
    roles = list(ROLE_LABELS)
    role = st.selectbox("Rol", roles, index=roles.index(draft.role), format_func=ROLE_LABELS.get, key=f"{key}_role")
    col1, col2 = st.columns(2)
    hourly = col1.number_input("Pago por hora", min_value=0.0, value=float(draft.hourly_rate), key=f"{key}_hourly")
    daily = col2.number_input("Pago por día", min_value=0.0, value=float(draft.daily_rate), key=f"{key}_daily")
    delivery = col1.number_input("Pago por entrega", min_value=0.0, value=float(draft.delivery_rate),
                                 key=f"{key}_delivery")
    base = col2.number_input("Sueldo base", min_value=0.0, value=float(draft.base_salary), key=f"{key}_base")
    is_active = st.checkbox("Activo", value=draft.is_active, key=f"{key}_active")
    return draft.model_copy(update={
        "name": name.strip(),
        "email": email.strip() or None,
        "phone": phone.strip() or None,
        "role": role,
        "hourly_rate": hourly,
        "daily_rate": daily,
        "delivery_rate": delivery,
        "base_salary": base,
        "is_active": is_active,
    })


def _payment_row(payment: EmployeePayment) -> dict:
    return {
        "empleado": payment.employee_id,
        "fecha": payment.payment_date.strftime("%d/%m/%Y"),
        "monto": format_money(payment.amount),
        "medio": payment.payment_method,
        "referencia": payment.reference or "-",
    }


def _payment_form(draft: EmployeePayment, key: str) -> EmployeePayment:
    employees = get_controller(EMPLOYEES).records
    names = {e.id: e.name for e in employees}
    ids = list(names) or [draft.employee_id]
    employee_id = st.selectbox("Empleado", ids, index=ids.index(draft.employee_id) if draft.employee_id in ids else 0,
                               format_func=lambda i: names.get(i, i), key=f"{key}_employee")
    amount = st.number_input("Monto", min_value=0.0, value=float(draft.amount), key=f"{key}_amount")
    paid_on = st.date_input("Fecha de pago", value=draft.payment_date, key=f"{key}_date")
    method = st.selectbox("Medio", ["efectivo", "transferencia"], key=f"{key}_method")
    reference = st.text_input("Referencia", value=draft.reference or "", key=f"{key}_reference")
    period_start = st.date_input("Período desde", value=draft.period_start, key=f"{key}_pstart")
    period_end = st.date_input("Período hasta", value=draft.period_end, key=f"{key}_pend")
    return draft.model_copy(update={
        "employee_id": employee_id,
        "amount": amount,
        "payment_date": paid_on,
        "payment_method": method,
        "reference": reference or None,
        "period_start": period_start,
        "period_end": period_end,
    })


def _clock_actions(employee: Employee, clocks: list) -> None:
    data = get_data()
    shift = open_shift(clocks, employee.id)
    if shift is None:
        if st.button("Fichar entrada", key=f"employee_{employee.id}_in"):
            if run_action(lambda: data.clock_in(employee.id), f"{employee.name}: entrada registrada"):
                get_controller(TIME_CLOCKS).load()
                st.rerun()
    else:
        st.caption(f"En turno desde {format_datetime(shift.clock_in, store_tz())}")
        if st.button("Fichar salida", key=f"employee_{employee.id}_out"):
            if run_action(lambda: data.clock_out(employee.id), f"{employee.name}: salida registrada"):
                get_controller(TIME_CLOCKS).load()
                st.rerun()


def render_employees() -> None:
    st.title("Empleados")
    employees = get_controller(EMPLOYEES)
    clocks = get_controller(TIME_CLOCKS)
    payments = get_controller(EMPLOYEE_PAYMENTS)
    start, end = month_bounds(date.today())

    c1, c2, c3 = st.columns(3)
    c1.metric("Empleados activos", sum(1 for e in employees.records if e.is_active))
    c2.metric("En turno", on_shift_count(clocks.records))
    c3.metric("Pagado este mes", format_money(sum(p.amount for p in payments.records if start <= p.payment_date <= end)))

    tab_staff, tab_salary, tab_payments, tab_performance = st.tabs(["Personal", "Sueldos", "Pagos", "Rendimiento"])
    with tab_staff:
        render_crud(employees, _employee_row, _employee_form,
                    actions=lambda employee: _clock_actions(employee, clocks.records))

    with tab_salary:
        if not employees.records:
            st.info("No hay empleados cargados.")
        else:
            names = {e.id: e for e in employees.records}
            employee = names[st.selectbox("Empleado", list(names), format_func=lambda i: names[i].name)]
            col1, col2 = st.columns(2)
            period_start = col1.date_input("Desde", value=start, key="salary_start")
            period_end = col2.date_input("Hasta", value=end, key="salary_end")
            deliveries = col1.number_input("Entregas", min_value=0, value=0)
            bonuses = col2.number_input("Bonos", min_value=0.0, value=0.0)
            deductions = col1.number_input("Descuentos", min_value=0.0, value=0.0)
            salary = calculate_salary(employee, clocks.records, period_start, period_end,
                                      deliveries=deliveries, bonuses=bonuses, deductions=deductions)
            m1, m2, m3 = st.columns(3)
            m1.metric("Horas", salary.hours_worked)
            m2.metric("Días", salary.days_worked)
            m3.metric("Total a pagar", format_money(salary.total))
            with st.expander("Detalle"):
                st.write({
                    "Por horas": format_money(salary.hourly_amount),
                    "Por días": format_money(salary.daily_amount),
                    "Por entregas": format_money(salary.delivery_amount),
                    "Sueldo base": format_money(salary.base_salary),
                    "Bonos": format_money(salary.bonuses),
                    "Descuentos": format_money(salary.deductions),
                })

    with tab_payments:
        render_crud(payments, _payment_row, _payment_form,
                    create_defaults=lambda: {
                        "employee_id": employees.records[0].id if employees.records else "",
                        "payment_date": date.today(),
                        "period_start": start,
                        "period_end": end,
                    })

    with tab_performance:
        rows = employee_performance(employees.records, clocks.records, payments.records, start, end)
        st.dataframe(
            [{"empleado": r.name, "horas": r.hours_worked, "pagado": r.total_paid, "por hora": r.paid_per_hour}
             for r in rows],
            use_container_width=True,
        )


# ---------- reviews ----------

def render_reviews() -> None:
    st.title("Reseñas")
    controller = get_controller(REVIEWS)
    stats = review_stats(controller.records)
    c1, c2, c3 = st.columns(3)
    c1.metric("Reseñas", stats.total)
    c2.metric("Promedio", f"{stats.average} ★")
    c3.metric("Sin responder", stats.pending)
    st.bar_chart(rating_frame(stats), use_container_width=True)

    status = st.radio("Mostrar", ["all", "pending", "responded"], horizontal=True,
                      format_func={"all": "Todas", "pending": "Sin responder", "responded": "Respondidas"}.get)
    reviews: list[Review] = filter_reviews(controller.records, status)
    if not reviews:
        st.info("No hay reseñas.")
    for review in reviews:
        with st.container(border=True):
            st.write(f"**{review.customer_name or 'Cliente'}** · {'★' * review.rating}{'☆' * (5 - review.rating)}"
                     f" · {format_datetime(review.created_at, store_tz())}")
            st.write(review.comment or "")
            if review.responded:
                st.caption(f"Respuesta: {review.response}")
                continue
            text = st.text_area("Respuesta", key=f"review_{review.id}_response")
            if st.button("Responder", key=f"review_{review.id}_send"):
                def respond(review_id=review.id, body=text):
                    get_data().respond_review(review_id, validate_review_response(body))
                if run_action(respond, "Respuesta enviada"):
                    controller.load()
                    st.rerun()


# ---------- inventory ----------

def _inventory_row(item: InventoryItem) -> dict:
    if is_out_of_stock(item):
        state = "Sin stock"
    elif is_low_stock(item):
        state = "Stock bajo"
    else:
        state = "OK"
    return {
        "producto": item.name,
        "categoría": item.category or "-",
        "stock": f"{item.current_stock:g} {item.unit}",
        "mínimo": item.min_stock,
        "nivel": round(stock_fill_ratio(item) * 100),
        "estado": state,
        "costo unitario": format_money(item.cost_per_unit),
    }


def _inventory_form(draft: InventoryItem, key: str) -> InventoryItem:
    name = st.text_input("Nombre", value=draft.name, key=f"{key}_name")
    category = st.text_input("Categoría", value=draft.category or "", key=f"{key}_category")
    col1, col2 = st.columns(2)
    current = col1.number_input("Stock actual", min_value=0.0, value=float(draft.current_stock), key=f"{key}_current")
    unit = col2.text_input("Unidad", value=draft.unit, key=f"{key}_unit")
    minimum = col1.number_input("Stock mínimo", min_value=0.0, value=float(draft.min_stock), key=f"{key}_min")
    maximum = col2.number_input("Stock máximo", min_value=0.0, value=float(draft.max_stock), key=f"{key}_max")
    cost = col1.number_input("Costo por unidad", min_value=0.0, value=float(draft.cost_per_unit), key=f"{key}_cost")
    supplier = col2.text_input("Proveedor", value=draft.supplier or "", key=f"{key}_supplier")
    return draft.model_copy(update={
        "name": name.strip(),
        "category": category or None,
        "current_stock": current,
        "unit": unit or "unidades",
        "min_stock": minimum,
        "max_stock": maximum,
        "cost_per_unit": cost,
        "supplier": supplier or None,
    })


def render_inventory() -> None:
    st.title("Inventario")
    controller = get_controller(INVENTORY)
    stats = inventory_stats(controller.records)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Productos", stats.total_items)
    c2.metric("Stock bajo", stats.low_stock)
    c3.metric("Sin stock", stats.out_of_stock)
    c4.metric("Valor del stock", format_money(stats.total_value))
    alerts = [item.name for item in controller.records if is_low_stock(item) or is_out_of_stock(item)]
    if alerts:
        st.warning(f"Reponer: {', '.join(alerts)}")
    render_crud(controller, _inventory_row, _inventory_form)
