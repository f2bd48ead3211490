"""Feed consumption and feed price data models."""

from datetime import date as Date
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


def normalize_membership(raw: Any) -> Optional[str]:
    """
    Resolve an area→group membership to zero-or-one area group id.

    The membership may arrive as a single object, a collection (only the
    first entry counts) or nothing at all.

    Args:
        raw: Membership object, list of membership objects, or None

    Returns:
        Area group id, or None if the area belongs to no group
    """
    if isinstance(raw, (list, tuple)):
        raw = raw[0] if raw else None
    if isinstance(raw, dict):
        group_id = raw.get("area_group_id")
        if group_id is None and isinstance(raw.get("area_groups"), dict):
            group_id = raw["area_groups"].get("id")
        return group_id
    return None


def _membership_group_name(raw: Any) -> Optional[str]:
    if isinstance(raw, (list, tuple)):
        raw = raw[0] if raw else None
    if isinstance(raw, dict) and isinstance(raw.get("area_groups"), dict):
        return raw["area_groups"].get("name")
    return None


class ConsumptionEvent(BaseModel):
    """
    One feed delivery/usage record.

    Events are read-only inputs; pricing helpers return modified copies.

    Attributes:
        date: Consumption date
        quantity: Consumed quantity (feed unit)
        total_cost: Cost of the consumed quantity
        feed_type_id: Feed type reference
        feed_type_name: Feed type display name
        feed_unit: Unit of the feed type
        area_id: Area reference (optional)
        area_name: Area display name
        area_group_id: Group the area belongs to (normalized membership)
        area_group_name: Display name of that group
        supplier_id: Supplier reference
        supplier_name: Supplier display name
    """
    date: Date = Field(..., description="Consumption date")
    quantity: float = Field(..., description="Consumed quantity")
    total_cost: float = Field(default=0.0, description="Cost of the consumed quantity")
    feed_type_id: str = Field(..., description="Feed type reference")
    feed_type_name: Optional[str] = Field(None, description="Feed type name")
    feed_unit: Optional[str] = Field(None, description="Feed unit")
    area_id: Optional[str] = Field(None, description="Area reference")
    area_name: Optional[str] = Field(None, description="Area name")
    area_group_id: Optional[str] = Field(None, description="Group of the area")
    area_group_name: Optional[str] = Field(None, description="Group name")
    supplier_id: Optional[str] = Field(None, description="Supplier reference")
    supplier_name: Optional[str] = Field(None, description="Supplier name")

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def flatten_rows(cls, data: Any) -> Any:
        """Accept nested ``feed_types``, ``areas`` and ``suppliers`` rows."""
        if not isinstance(data, dict):
            return data
        data = dict(data)

        if data.get("total_cost") is None:
            data["total_cost"] = 0.0

        feed_type = data.pop("feed_types", None)
        if isinstance(feed_type, dict):
            if data.get("feed_type_id") is None:
                data["feed_type_id"] = feed_type.get("id")
            if data.get("feed_type_name") is None:
                data["feed_type_name"] = feed_type.get("name")
            if data.get("feed_unit") is None:
                data["feed_unit"] = feed_type.get("unit")

        area = data.pop("areas", None)
        if isinstance(area, dict):
            if data.get("area_id") is None:
                data["area_id"] = area.get("id")
            if data.get("area_name") is None:
                data["area_name"] = area.get("name")
            memberships = area.get("area_group_memberships")
            if data.get("area_group_id") is None:
                data["area_group_id"] = normalize_membership(memberships)
            if data.get("area_group_name") is None:
                data["area_group_name"] = _membership_group_name(memberships)

        supplier = data.pop("suppliers", None)
        if isinstance(supplier, dict):
            if data.get("supplier_id") is None:
                data["supplier_id"] = supplier.get("id")
            if data.get("supplier_name") is None:
                data["supplier_name"] = supplier.get("name")

        return data

    def __str__(self) -> str:
        """String representation."""
        where = self.area_name or self.area_id or "no area"
        return f"{self.date}: {self.quantity:.1f} of {self.feed_type_name or self.feed_type_id} @ {where} ({self.total_cost:.2f})"


class PriceTier(BaseModel):
    """
    Feed price valid for a date range.

    Attributes:
        feed_type_id: Feed type the price applies to
        price_per_unit: Price per feed unit
        valid_from: First day the price applies
        valid_to: Last day the price applies (None = open-ended)
        supplier_id: Supplier of this price
        supplier_name: Supplier display name
    """
    feed_type_id: str = Field(..., description="Feed type reference")
    price_per_unit: float = Field(..., description="Price per unit", ge=0)
    valid_from: Date = Field(..., description="Valid from (inclusive)")
    valid_to: Optional[Date] = Field(None, description="Valid to (inclusive, None = open)")
    supplier_id: Optional[str] = Field(None, description="Supplier reference")
    supplier_name: Optional[str] = Field(None, description="Supplier name")

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def flatten_supplier(cls, data: Any) -> Any:
        """Accept a nested ``suppliers`` row."""
        if isinstance(data, dict) and isinstance(data.get("suppliers"), dict):
            data = dict(data)
            supplier = data.pop("suppliers")
            if data.get("supplier_id") is None:
                data["supplier_id"] = supplier.get("id")
            if data.get("supplier_name") is None:
                data["supplier_name"] = supplier.get("name")
        return data

    def is_valid_on(self, on_date: Date) -> bool:
        """Check if the tier applies on the given date."""
        return self.valid_from <= on_date and (self.valid_to is None or on_date <= self.valid_to)
