"""Rule-based unit pricing: base, view, floor and category premiums, balcony
blending, flat adders and conservative rounding."""

import math
from typing import Dict, List, Optional

from models.unit import Unit
from models.pricing import PricingConfiguration
from models.filters import UnitFilters
from models.priced_unit import PricedUnit
from engine.floor_premium import floor_premium, floor_premium_table
from config.defaults import DEFAULT_PRICING_MODE, PRICING_MODES, PRICE_ROUNDING_INCREMENT


def check_mode(mode: str):
    if mode not in PRICING_MODES:
        raise ValueError(f"Unknown pricing mode '{mode}'. Expected one of {PRICING_MODES}.")


def round_up_price(amount: float, increment: int = PRICE_ROUNDING_INCREMENT) -> float:
    """Round a price up to the next multiple of `increment`."""
    return float(math.ceil(amount / increment) * increment)


def flat_add_total(
    unit: Unit,
    config: PricingConfiguration,
    active_filters: Optional[UnitFilters] = None,
) -> float:
    """Sum the flat adders that apply to a unit.

    An adder applies only if its own filters match AND the unit passes the
    active table filters.
    """
    if active_filters is not None and not active_filters.matches(unit):
        return 0.0
    return sum(a.amount for a in config.flat_price_adders if a.matches(unit))


def price_unit(
    unit: Unit,
    config: PricingConfiguration,
    mode: str = DEFAULT_PRICING_MODE,
    active_filters: Optional[UnitFilters] = None,
    floor_premiums: Optional[Dict[int, float]] = None,
) -> PricedUnit:
    """Price a single unit."""
    floorless = mode == "villa"

    # Step 1: Base PSF by bedroom type, config default when untagged/unknown
    bedroom = config.bedroom_pricing_for(unit.bedroom_type)
    base_psf = bedroom.base_psf if bedroom is not None else config.base_psf

    # Step 2: View adjustment
    view = config.view_pricing_for(unit.view)
    view_adj = view.psf_adjustment if view is not None else 0.0

    # Step 3: Floor premium
    if floorless:
        floor_adj = 0.0
    elif floor_premiums is not None and unit.floor in floor_premiums:
        floor_adj = floor_premiums[unit.floor]
    else:
        floor_adj = floor_premium(unit.floor, config.floor_rise_rules, config.max_floor)

    # Step 4: Additional categories, several columns may match
    additional_adj = 0.0
    components: Dict[str, float] = {}
    for cat in config.additional_category_pricing:
        if unit.categories.get(cat.column) == cat.category:
            additional_adj += cat.psf_adjustment
            components[f"{cat.column}: {cat.category}"] = cat.psf_adjustment

    psf = base_psf + view_adj + floor_adj + additional_adj

    # Step 5: Balcony blending
    balcony_area = unit.resolved_balcony_area
    if floorless or config.balcony_pricing is None:
        priced_balcony = 0.0
    else:
        priced_balcony = config.balcony_pricing.priced_area(balcony_area)

    # Step 6: Effective area and raw price
    ac_area = max(unit.ac_area, 0.0)
    effective_area = ac_area + priced_balcony
    ac_price = psf * ac_area
    balcony_price = psf * priced_balcony
    total_raw = ac_price + balcony_price

    # Step 7: Flat adders, then round up
    flat_total = flat_add_total(unit, config, active_filters)
    final_price = round_up_price(total_raw + flat_total)

    # Step 8: Final ratios, zero when the area is missing
    psf_area = unit.ac_area if floorless else unit.sell_area
    final_psf = final_price / psf_area if psf_area > 0 else 0.0
    final_ac_psf = final_price / unit.ac_area if unit.ac_area > 0 else 0.0

    is_optimized = config.is_optimized and (
        not config.optimized_types or unit.bedroom_type in config.optimized_types
    )

    return PricedUnit(
        unit=unit,
        base_psf=base_psf,
        view_psf_adjustment=view_adj,
        floor_adjustment=floor_adj,
        additional_adjustment=additional_adj,
        psf_after_all_adjustments=psf,
        balcony_area=balcony_area,
        balcony_percentage=unit.balcony_percentage,
        priced_balcony_area=priced_balcony,
        effective_area=effective_area,
        ac_price=ac_price,
        balcony_price=balcony_price,
        total_price_raw=total_raw,
        flat_add_total=flat_total,
        final_total_price=final_price,
        final_psf=final_psf,
        final_ac_psf=final_ac_psf,
        is_optimized=is_optimized,
        additional_components=components,
    )


def evaluate(
    units: List[Unit],
    config: PricingConfiguration,
    mode: str = DEFAULT_PRICING_MODE,
    active_filters: Optional[UnitFilters] = None,
) -> List[PricedUnit]:
    """Price every unit, preserving input order."""
    check_mode(mode)
    premiums = None
    if mode != "villa":
        premiums = floor_premium_table(
            (u.floor for u in units), config.floor_rise_rules, config.max_floor,
        )
    return [price_unit(u, config, mode, active_filters, premiums) for u in units]


def filter_units(priced: List[PricedUnit], filters: Optional[UnitFilters]) -> List[PricedUnit]:
    """Apply the table filter predicate to already-priced units."""
    if filters is None or filters.is_empty:
        return list(priced)
    return [p for p in priced if filters.matches(p.unit)]
