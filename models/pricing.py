from dataclasses import dataclass, field
from typing import Dict, List, Optional

from models.unit import Unit
from config.defaults import DEFAULT_MAX_FLOOR, METRIC_SELL_AREA


@dataclass
class BedroomTypePricing:
    bedroom_type: str
    base_psf: float
    target_avg_psf: float = 0.0
    original_base_psf: Optional[float] = None  # Set by the optimizer, used by revert


@dataclass
class ViewPricing:
    view: str
    psf_adjustment: float
    original_psf_adjustment: Optional[float] = None


@dataclass
class FloorRiseRule:
    start_floor: int
    end_floor: Optional[int]       # None = open-ended
    psf_increment: float
    jump_every_floor: Optional[int] = None
    jump_increment: Optional[float] = None

    def resolved_end(self, max_floor: int = DEFAULT_MAX_FLOOR) -> int:
        return self.end_floor if self.end_floor is not None else max_floor

    @property
    def has_jumps(self) -> bool:
        return bool(self.jump_every_floor) and bool(self.jump_increment)


@dataclass
class AdditionalCategoryPricing:
    column: str
    category: str
    psf_adjustment: float


@dataclass
class BalconyPricing:
    full_area_pct: float = 0.0     # % of balcony priced at the full PSF, 0-100
    remainder_rate: float = 0.0    # % of the full PSF charged on the rest, 0-100

    def priced_area(self, balcony_area: float) -> float:
        """Blend a balcony area into PSF-equivalent area."""
        if balcony_area <= 0:
            return 0.0
        full = self.full_area_pct / 100
        remainder = self.remainder_rate / 100
        return balcony_area * full + balcony_area * (1 - full) * remainder


@dataclass
class FlatPriceAdder:
    """Fixed amount added to specific units.

    An adder with neither a unit list nor a column filter applies to nothing.
    """
    amount: float
    units: List[str] = field(default_factory=list)
    columns: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def active_columns(self) -> Dict[str, List[str]]:
        return {col: values for col, values in self.columns.items() if values}

    def has_filters(self) -> bool:
        return bool(self.units) or bool(self.active_columns)

    def matches(self, unit: Unit) -> bool:
        if not self.has_filters():
            return False
        if self.units and unit.name not in [str(u) for u in self.units]:
            return False
        for column, values in self.active_columns.items():
            if unit.attribute(column) not in [str(v) for v in values]:
                return False
        return True


@dataclass
class PricingConfiguration:
    base_psf: float
    bedroom_type_pricing: List[BedroomTypePricing] = field(default_factory=list)
    view_pricing: List[ViewPricing] = field(default_factory=list)
    floor_rise_rules: List[FloorRiseRule] = field(default_factory=list)
    additional_category_pricing: List[AdditionalCategoryPricing] = field(default_factory=list)
    balcony_pricing: Optional[BalconyPricing] = None
    flat_price_adders: List[FlatPriceAdder] = field(default_factory=list)
    max_floor: int = DEFAULT_MAX_FLOOR
    target_overall_psf: Optional[float] = None
    target_metric: str = METRIC_SELL_AREA
    is_optimized: bool = False
    optimized_types: List[str] = field(default_factory=list)
    optimization_mode: Optional[str] = None
    original_floor_rise_rules: Optional[List[FloorRiseRule]] = None
    target_margins: Dict[str, float] = field(default_factory=dict)   # Bedroom type -> margin %
    margin_original_base_psfs: Optional[Dict[str, float]] = None   # Set by the margin optimizer

    def bedroom_pricing_for(self, bedroom_type: Optional[str]) -> Optional[BedroomTypePricing]:
        if bedroom_type is None:
            return None
        return next(
            (b for b in self.bedroom_type_pricing if b.bedroom_type == bedroom_type), None
        )

    def view_pricing_for(self, view: Optional[str]) -> Optional[ViewPricing]:
        if view is None:
            return None
        return next((v for v in self.view_pricing if v.view == view), None)

    def sorted_floor_rules(self) -> List[FloorRiseRule]:
        return sorted(self.floor_rise_rules, key=lambda r: r.start_floor)

    @property
    def bedroom_types(self) -> List[str]:
        return [b.bedroom_type for b in self.bedroom_type_pricing]
