"""Calculation settings for the KPI engine."""

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


class PriceAttributionMode(str, Enum):
    """How animal purchase and sale prices are attributed to group details."""

    AUTO = "auto"  # Flagged if any detail carries the flag, legacy otherwise
    FLAGGED = "flagged"  # Only start groups buy, only end groups sell
    LEGACY = "legacy"  # Every detail with a price counts


class KPISettings(BaseModel):
    """
    Settings shared by all calculators.

    Attributes:
        feed_cost_category: Cost category reclassified as feed cost
        price_attribution: Purchase/sale attribution mode
        default_feed_unit: Unit used when a feed type has none
        unknown_area_name: Label for areas without a name
        unknown_group_name: Label for area groups without a name
        unspecified_animal_type: Label for details without animal type
    """
    feed_cost_category: str = Field(
        default="Futterkosten",
        description="Cost category counted as feed cost (case-insensitive)"
    )
    price_attribution: PriceAttributionMode = Field(
        default=PriceAttributionMode.AUTO,
        description="Purchase/sale attribution mode"
    )
    default_feed_unit: str = Field(default="kg", description="Fallback feed unit")
    unknown_area_name: str = Field(default="Unbekannt", description="Fallback area name")
    unknown_group_name: str = Field(default="Unbekannte Gruppe", description="Fallback group name")
    unspecified_animal_type: str = Field(
        default="Nicht spezifiziert",
        description="Fallback animal type label"
    )

    model_config = ConfigDict(frozen=True)


DEFAULT_SETTINGS = KPISettings()
