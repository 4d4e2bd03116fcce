from .base import ApiModel, CamelApiModel, as_utc, store_date, store_tz, utc_now
from .data_filters import CustomerLoyaltyFilters, OrderFilters, ReviewFilters

from .orders import (
    STATUS_LABELS,
    ItemOption,
    Order,
    OrderItem,
    normalize_selected_options,
)
from .transfers import Transfer, TransferOrderSummary
from .employees import (
    ROLE_LABELS,
    Employee,
    EmployeePayment,
    EmployeePerformance,
    SalaryCalculation,
    TimeClock,
)
from .discounts import COUPON_STATUS_LABELS, Coupon, PromoCode, Promotion, ValidHours
from .loyalty import (
    CUSTOMER_TIERS,
    TIER_LABELS,
    CustomerLoyalty,
    CustomerLoyaltyUpdate,
    LoyaltyProgram,
    LoyaltyUser,
)
from .expenses import EXPENSE_CATEGORIES, Expense
from .catalog import InventoryItem, Review, StoreCategory
from .settings import (
    WEEK_DAYS,
    AdvancedSettings,
    ConnectionTestResult,
    DayHours,
    PaymentConfig,
    SaveReport,
    StoreSettings,
)
from .stats import (
    CouponStats,
    ExpenseSummary,
    InventoryStats,
    LoyaltyStats,
    OrderStats,
    PromotionStats,
    RealtimeAnalytics,
    RealtimeMetrics,
    ReviewStats,
    SalesStats,
)
from .system import ServiceStatus, SystemLogs, SystemStatus

__all__ = [
    # Base
    "ApiModel",
    "CamelApiModel",
    "as_utc",
    "store_date",
    "store_tz",
    "utc_now",
    # Filter classes
    "OrderFilters",
    "CustomerLoyaltyFilters",
    "ReviewFilters",
    # Orders
    "STATUS_LABELS",
    "ItemOption",
    "Order",
    "OrderItem",
    "normalize_selected_options",
    "Transfer",
    "TransferOrderSummary",
    # Employees
    "ROLE_LABELS",
    "Employee",
    "EmployeePayment",
    "EmployeePerformance",
    "SalaryCalculation",
    "TimeClock",
    # Discounts
    "COUPON_STATUS_LABELS",
    "Coupon",
    "PromoCode",
    "Promotion",
    "ValidHours",
    # Loyalty
    "CUSTOMER_TIERS",
    "TIER_LABELS",
    "CustomerLoyalty",
    "CustomerLoyaltyUpdate",
    "LoyaltyProgram",
    "LoyaltyUser",
    # Catalog and expenses
    "EXPENSE_CATEGORIES",
    "Expense",
    "InventoryItem",
    "Review",
    "StoreCategory",
    # Settings
    "WEEK_DAYS",
    "AdvancedSettings",
    "ConnectionTestResult",
    "DayHours",
    "PaymentConfig",
    "SaveReport",
    "StoreSettings",
    # Stats
    "CouponStats",
    "ExpenseSummary",
    "InventoryStats",
    "LoyaltyStats",
    "OrderStats",
    "PromotionStats",
    "RealtimeAnalytics",
    "RealtimeMetrics",
    "ReviewStats",
    "SalesStats",
    # System
    "ServiceStatus",
    "SystemLogs",
    "SystemStatus",
]
