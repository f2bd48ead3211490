"""Cost and income transaction data models."""

from datetime import date as Date
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class CostTransaction(BaseModel):
    """
    Dated cost entry, optionally tagged to a cycle and a cost category.

    Attributes:
        id: Transaction identifier
        amount: Cost amount
        transaction_date: Booking date
        cycle_id: Cycle the cost belongs to
        cost_type_name: Cost type name (e.g. "Milchaustauscher")
        category: Cost category (e.g. "Futterkosten")
    """
    id: str = Field(..., description="Transaction identifier")
    amount: float = Field(..., description="Cost amount")
    transaction_date: Date = Field(..., description="Booking date")
    cycle_id: Optional[str] = Field(None, alias="livestock_count_id", description="Cycle reference")
    cost_type_name: Optional[str] = Field(None, description="Cost type name")
    category: Optional[str] = Field(None, description="Cost category")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def flatten_cost_type(cls, data: Any) -> Any:
        """Accept a nested ``cost_types`` row."""
        if isinstance(data, dict) and "cost_types" in data:
            data = dict(data)
            cost_type = data.pop("cost_types")
            if isinstance(cost_type, dict):
                if data.get("cost_type_name") is None:
                    data["cost_type_name"] = cost_type.get("name")
                if data.get("category") is None:
                    data["category"] = cost_type.get("category")
        return data

    def is_category(self, category: str) -> bool:
        """Case-insensitive category comparison."""
        return self.category is not None and self.category.lower() == category.lower()


class IncomeTransaction(BaseModel):
    """
    Dated income entry (premiums, bonuses, subsidies).

    Attributes:
        id: Transaction identifier
        amount: Income amount
        transaction_date: Booking date
        income_type: Income type label
        cycle_id: Cycle the income belongs to
    """
    id: str = Field(..., description="Transaction identifier")
    amount: float = Field(..., description="Income amount")
    transaction_date: Date = Field(..., description="Booking date")
    income_type: Optional[str] = Field(None, description="Income type")
    cycle_id: Optional[str] = Field(None, alias="livestock_count_id", description="Cycle reference")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")
