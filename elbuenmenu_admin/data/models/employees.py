from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import Field, model_validator

from .base import ApiModel, DateOnly, Id, Money, UtcDatetime, store_date

EmployeeRole = Literal[
    "admin",
    "manager",
    "staff",
    "cocina",
    "caja",
    "limpieza",
    "administracion",
    "otro",
]

ROLE_LABELS: dict[str, str] = {
    "admin": "Administrador",
    "manager": "Gerente",
    "staff": "Personal",
    "cocina": "Cocina",
    "caja": "Caja",
    "limpieza": "Limpieza",
    "administracion": "Administración",
    "otro": "Otro",
}


class Employee(ApiModel):
    """Store employee: dashboard access and payroll data in one record."""
    id: Optional[Id] = Field(default=None, description="Employee identifier")
    name: str = Field(default="", description="Full name")
    email: Optional[str] = Field(default=None, description="Login e-mail")
    phone: Optional[str] = Field(default=None, description="Contact phone")
    role: EmployeeRole = Field(default="staff", description="Dashboard or kitchen role")
    hourly_rate: Money = Field(default=0.0, description="Pay per hour worked")
    daily_rate: Money = Field(default=0.0, description="Pay per day worked")
    delivery_rate: Money = Field(default=0.0, description="Pay per delivery")
    base_salary: Money = Field(default=0.0, description="Fixed salary per period")
    is_active: bool = Field(default=True, description="Whether the employee is active")
    created_at: Optional[UtcDatetime] = Field(default=None, description="Creation timestamp")
    last_login: Optional[UtcDatetime] = Field(default=None, description="Last dashboard login")


class TimeClock(ApiModel):
    """One shift: clock-in and, once finished, clock-out."""
    id: Optional[Id] = Field(default=None, description="Time clock identifier")
    employee_id: Id = Field(description="Employee identifier")
    clock_in: UtcDatetime = Field(description="Shift start")
    clock_out: Optional[UtcDatetime] = Field(default=None, description="Shift end; empty while on shift")
    hours_worked: Optional[float] = Field(default=None, description="Hours worked in the shift")
    date: Optional[DateOnly] = Field(default=None, description="Shift date")

    @model_validator(mode="after")
    def _fill_derived(self) -> "TimeClock":
        if self.hours_worked is None and self.clock_out is not None:
            self.hours_worked = round((self.clock_out - self.clock_in).total_seconds() / 3600, 2)
        if self.date is None:
            self.date = store_date(self.clock_in)
        return self

    @property
    def on_shift(self) -> bool:
        return self.clock_out is None


class EmployeePayment(ApiModel):
    """A payroll payment made to an employee."""
    id: Optional[Id] = Field(default=None, description="Payment identifier")
    employee_id: Id = Field(description="Employee identifier")
    amount: Money = Field(default=0.0, description="Amount paid")
    payment_date: DateOnly = Field(description="Date of payment")
    payment_method: str = Field(default="efectivo", description="How the payment was made")
    reference: Optional[str] = Field(default=None, description="Receipt or transfer reference")
    period_start: Optional[DateOnly] = Field(default=None, description="Paid period start")
    period_end: Optional[DateOnly] = Field(default=None, description="Paid period end")
    hours_worked: Optional[float] = Field(default=None, description="Hours covered by the payment")
    notes: Optional[str] = Field(default=None, description="Notes")


class SalaryCalculation(ApiModel):
    """Breakdown of what an employee earned in a period."""
    employee_id: Id = Field(description="Employee identifier")
    period_start: date = Field(description="Period start (inclusive)")
    period_end: date = Field(description="Period end (inclusive)")
    hours_worked: float = Field(default=0.0, description="Sum of closed shifts in the period")
    days_worked: int = Field(default=0, description="Distinct days with a closed shift")
    deliveries: int = Field(default=0, description="Deliveries made in the period")
    hourly_amount: float = Field(default=0.0, description="hours_worked * hourly_rate")
    daily_amount: float = Field(default=0.0, description="days_worked * daily_rate")
    delivery_amount: float = Field(default=0.0, description="deliveries * delivery_rate")
    base_salary: float = Field(default=0.0, description="Fixed salary")
    bonuses: float = Field(default=0.0, description="Extra pay")
    deductions: float = Field(default=0.0, description="Discounts applied")
    total: float = Field(default=0.0, description="Amount to pay")


class EmployeePerformance(ApiModel):
    """Per-employee hours and pay over a window."""
    employee_id: Id
    name: str
    hours_worked: float = 0.0
    total_paid: float = 0.0
    paid_per_hour: float = 0.0
