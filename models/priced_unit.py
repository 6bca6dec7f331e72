from dataclasses import dataclass, field
from typing import Dict

from models.unit import Unit


@dataclass
class PricedUnit:
    """A unit with every pricing component. Derived, never cached."""
    unit: Unit
    base_psf: float
    view_psf_adjustment: float
    floor_adjustment: float
    additional_adjustment: float
    psf_after_all_adjustments: float
    balcony_area: float
    balcony_percentage: float
    priced_balcony_area: float
    effective_area: float          # AC area (+ priced balcony in apartment mode)
    ac_price: float                # psf_after_all_adjustments x AC area
    balcony_price: float           # psf_after_all_adjustments x priced balcony area
    total_price_raw: float
    flat_add_total: float
    final_total_price: float       # Rounded up to the price increment
    final_psf: float
    final_ac_psf: float
    is_optimized: bool = False
    additional_components: Dict[str, float] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.unit.name

    @property
    def bedroom_type(self):
        return self.unit.bedroom_type

    @property
    def sell_area(self) -> float:
        return self.unit.sell_area

    @property
    def ac_area(self) -> float:
        return self.unit.ac_area
