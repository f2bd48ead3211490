"""Cycle ("Durchgang") and group detail data models.

A cycle is one production run. Its animals are recorded as group details:
one (count, timeframe, location) record per area or area group the animals
occupied. Field names follow the persisted columns of ``livestock_counts``
and ``livestock_count_details`` so database rows can be validated directly.
"""

from datetime import date as Date
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


def _lift_named_ref(data: Any, key: str, id_field: str, name_field: str) -> Any:
    """Flatten a nested ``{id, name}`` reference into flat id/name fields."""
    if not isinstance(data, dict):
        return data
    ref = data.get(key)
    if isinstance(ref, list):
        ref = ref[0] if ref else None
    if isinstance(ref, dict):
        data = {k: v for k, v in data.items() if k != key}
        if data.get(id_field) is None and ref.get("id") is not None:
            data[id_field] = ref["id"]
        if data.get(name_field) is None:
            data[name_field] = ref.get("name")
    elif key in data:
        data = {k: v for k, v in data.items() if k != key}
    return data


class GroupDetail(BaseModel):
    """
    One group of animals in one location for one timeframe.

    The start weight is stored as ``expected_weight_per_animal`` and the end
    weight as ``actual_weight_per_animal`` (persisted column names).

    Attributes:
        id: Detail identifier (needed for start-weight chaining)
        count: Number of animals (0 = inert record)
        start_date: First day animals are present
        end_date: Last day animals are present (None = open)
        area_id: Area the animals occupy
        area_group_id: Area group the animals occupy
        area_name: Display name of the area
        area_group_name: Display name of the area group
        animal_type: Optional animal type label
        expected_weight_per_animal: Start weight (kg/animal)
        actual_weight_per_animal: End weight (kg/animal)
        buy_price_per_animal: Purchase price per animal
        sell_price_per_animal: Sale price per animal
        is_start_group: Detail represents the cycle's initial acquisition
        is_end_group: Detail represents the cycle's final disposition
        start_weight_source_detail_id: Detail whose end weight is this detail's start weight
    """
    id: Optional[str] = Field(None, description="Detail identifier")
    count: int = Field(..., description="Number of animals", ge=0)
    start_date: Optional[Date] = Field(None, description="Start of the group's timeframe")
    end_date: Optional[Date] = Field(None, description="End of the group's timeframe (None = open)")
    area_id: Optional[str] = Field(None, description="Area reference")
    area_group_id: Optional[str] = Field(None, description="Area group reference")
    area_name: Optional[str] = Field(None, description="Area display name")
    area_group_name: Optional[str] = Field(None, description="Area group display name")
    animal_type: Optional[str] = Field(None, description="Animal type label")
    expected_weight_per_animal: Optional[float] = Field(None, description="Start weight (kg)", ge=0)
    actual_weight_per_animal: Optional[float] = Field(None, description="End weight (kg)", ge=0)
    buy_price_per_animal: Optional[float] = Field(None, description="Purchase price per animal")
    sell_price_per_animal: Optional[float] = Field(None, description="Sale price per animal")
    is_start_group: bool = Field(False, description="Initial acquisition group")
    is_end_group: bool = Field(False, description="Final disposition group")
    start_weight_source_detail_id: Optional[str] = Field(
        None,
        description="Detail whose end weight is inherited as start weight"
    )

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def flatten_references(cls, data: Any) -> Any:
        """Accept nested ``areas``/``area_groups`` rows and null flags."""
        data = _lift_named_ref(data, "areas", "area_id", "area_name")
        data = _lift_named_ref(data, "area_groups", "area_group_id", "area_group_name")
        if isinstance(data, dict):
            for flag in ("is_start_group", "is_end_group"):
                if flag in data and data[flag] is None:
                    data = {**data, flag: False}
        return data

    @property
    def is_active(self) -> bool:
        """True if the detail holds animals."""
        return self.count > 0

    @property
    def location_key(self) -> Optional[str]:
        """Area id, else area group id."""
        return self.area_id or self.area_group_id

    @property
    def location_name(self) -> Optional[str]:
        """Area name, else area group name."""
        return self.area_name or self.area_group_name

    def __str__(self) -> str:
        """String representation."""
        end = self.end_date or "open"
        return f"{self.count} animals @ {self.location_name or self.location_key} ({self.start_date} to {end})"


class Cycle(BaseModel):
    """
    One production run ("Durchgang") with its group details.

    Cycle-level weights and prices are fallbacks for details that carry no
    value of their own.

    Attributes:
        id: Cycle identifier
        farm_id: Owning farm
        start_date: First day of the cycle
        end_date: Last day of the cycle (None = ongoing)
        name: Optional display name
        expected_weight_per_animal: Default start weight (kg)
        actual_weight_per_animal: Default end weight (kg)
        buy_price_per_animal: Default purchase price per animal
        sell_price_per_animal: Default sale price per animal
        mortality_rate: Mortality rate in percent
        slaughter_weight_kg: Slaughter weight for net daily gain
        total_lifetime_days: Lifetime in days for net daily gain
        details: Group details of the cycle
    """
    id: str = Field(..., description="Cycle identifier")
    farm_id: Optional[str] = Field(None, description="Farm identifier")
    start_date: Date = Field(..., description="Cycle start date")
    end_date: Optional[Date] = Field(None, description="Cycle end date (None = ongoing)")
    name: Optional[str] = Field(None, alias="durchgang_name", description="Cycle name")
    expected_weight_per_animal: Optional[float] = Field(None, description="Default start weight (kg)", ge=0)
    actual_weight_per_animal: Optional[float] = Field(None, description="Default end weight (kg)", ge=0)
    buy_price_per_animal: Optional[float] = Field(None, description="Default purchase price")
    sell_price_per_animal: Optional[float] = Field(None, description="Default sale price")
    mortality_rate: Optional[float] = Field(None, description="Mortality rate (%)", ge=0)
    slaughter_weight_kg: Optional[float] = Field(None, description="Slaughter weight (kg)", ge=0)
    total_lifetime_days: Optional[int] = Field(None, description="Total lifetime (days)")
    details: List[GroupDetail] = Field(
        default_factory=list,
        alias="livestock_count_details",
        description="Group details"
    )

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @property
    def active_details(self) -> List[GroupDetail]:
        """Details with count > 0."""
        return [d for d in self.details if d.is_active]

    def get_detail(self, detail_id: Optional[str]) -> Optional[GroupDetail]:
        """
        Look up a detail of this cycle by id.

        Args:
            detail_id: Detail identifier

        Returns:
            The detail, or None if the id is empty or unknown
        """
        if not detail_id:
            return None
        for detail in self.details:
            if detail.id == detail_id:
                return detail
        return None

    def __str__(self) -> str:
        """String representation."""
        label = self.name or self.id
        end = self.end_date or "ongoing"
        return f"Cycle '{label}' ({self.start_date} to {end}, {len(self.details)} details)"
