"""Data models for the livestock KPI engine."""

from .cycle import Cycle, GroupDetail
from .consumption import ConsumptionEvent, PriceTier, normalize_membership
from .transactions import CostTransaction, IncomeTransaction
from .settings import KPISettings, PriceAttributionMode, DEFAULT_SETTINGS

__all__ = [
    # Cycles
    "Cycle",
    "GroupDetail",
    # Feed
    "ConsumptionEvent",
    "PriceTier",
    "normalize_membership",
    # Transactions
    "CostTransaction",
    "IncomeTransaction",
    # Settings
    "KPISettings",
    "PriceAttributionMode",
    "DEFAULT_SETTINGS",
]
