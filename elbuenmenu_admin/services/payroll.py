from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from elbuenmenu_admin.data.models import (
    Employee,
    EmployeePayment,
    EmployeePerformance,
    SalaryCalculation,
    TimeClock,
)


def _in_period(day: Optional[date], start: date, end: date) -> bool:
    return day is not None and start <= day <= end


def calculate_salary(
    employee: Employee,
    clocks: Iterable[TimeClock],
    period_start: date,
    period_end: date,
    deliveries: int = 0,
    bonuses: float = 0.0,
    deductions: float = 0.0,
) -> SalaryCalculation:
    """Pay for closed shifts in [period_start, period_end].

    Open shifts (no clock-out yet) are not paid until they are closed.
    """
    closed = [
        clock
        for clock in clocks
        if clock.employee_id == employee.id and clock.clock_out is not None
        and _in_period(clock.date, period_start, period_end)
    ]
    hours = round(sum(clock.hours_worked or 0.0 for clock in closed), 2)
    days = len({clock.date for clock in closed})

    hourly_amount = hours * employee.hourly_rate
    daily_amount = days * employee.daily_rate
    delivery_amount = deliveries * employee.delivery_rate
    total = hourly_amount + daily_amount + delivery_amount + employee.base_salary + bonuses - deductions

    return SalaryCalculation(
        employee_id=employee.id or "",
        period_start=period_start,
        period_end=period_end,
        hours_worked=hours,
        days_worked=days,
        deliveries=deliveries,
        hourly_amount=round(hourly_amount, 2),
        daily_amount=round(daily_amount, 2),
        delivery_amount=round(delivery_amount, 2),
        base_salary=employee.base_salary,
        bonuses=bonuses,
        deductions=deductions,
        total=round(total, 2),
    )


def on_shift_count(clocks: Iterable[TimeClock]) -> int:
    return len({clock.employee_id for clock in clocks if clock.on_shift})


def open_shift(clocks: Iterable[TimeClock], employee_id: str) -> Optional[TimeClock]:
    for clock in clocks:
        if clock.employee_id == employee_id and clock.on_shift:
            return clock
    return None


def month_bounds(today: date) -> tuple[date, date]:
    start = today.replace(day=1)
    if start.month == 12:
        next_month = start.replace(year=start.year + 1, month=1)
    else:
        next_month = start.replace(month=start.month + 1)
    return start, date.fromordinal(next_month.toordinal() - 1)


def payments_in_period(payments: Iterable[EmployeePayment], start: date, end: date) -> float:
    return round(sum(p.amount for p in payments if _in_period(p.payment_date, start, end)), 2)


def hours_in_period(clocks: Iterable[TimeClock], start: date, end: date) -> float:
    return round(sum(c.hours_worked or 0.0 for c in clocks if _in_period(c.date, start, end)), 2)


def employee_performance(
    employees: Iterable[Employee],
    clocks: Iterable[TimeClock],
    payments: Iterable[EmployeePayment],
    start: date,
    end: date,
) -> list[EmployeePerformance]:
    """Hours, pay and pay per hour for each employee in the window, busiest first."""
    clocks = list(clocks)
    payments = list(payments)
    rows = []
    for employee in employees:
        hours = hours_in_period((c for c in clocks if c.employee_id == employee.id), start, end)
        paid = payments_in_period((p for p in payments if p.employee_id == employee.id), start, end)
        rows.append(
            EmployeePerformance(
                employee_id=employee.id or "",
                name=employee.name,
                hours_worked=hours,
                total_paid=paid,
                paid_per_hour=round(paid / hours, 2) if hours else 0.0,
            )
        )
    return sorted(rows, key=lambda row: row.hours_worked, reverse=True)
