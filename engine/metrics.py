"""Value-weighted PSF aggregates over priced units."""

from typing import List, Optional

from models.unit import Unit
from models.pricing import PricingConfiguration
from models.priced_unit import PricedUnit
from engine.pricing_engine import evaluate
from config.defaults import DEFAULT_PRICING_MODE, METRIC_AC_AREA, METRIC_SELL_AREA, METRICS


def check_metric(metric: str):
    if metric not in METRICS:
        raise ValueError(f"Unknown metric '{metric}'. Expected one of {METRICS}.")


def _area(priced: PricedUnit, metric: str) -> float:
    return priced.ac_area if metric == METRIC_AC_AREA else priced.sell_area


def weighted_average_psf(priced: List[PricedUnit], metric: str = METRIC_SELL_AREA) -> float:
    """Total final price / total area over units with positive area and price.

    Returns 0 when no unit qualifies.
    """
    check_metric(metric)
    valid = [p for p in priced if _area(p, metric) > 0 and p.final_total_price > 0]
    total_area = sum(_area(p, metric) for p in valid)
    if total_area <= 0:
        return 0.0
    return sum(p.final_total_price for p in valid) / total_area


def unit_average_psf(priced: List[PricedUnit], metric: str = METRIC_SELL_AREA) -> float:
    """Unweighted mean of per-unit PSF ratios, for comparison only."""
    check_metric(metric)
    ratios = [
        p.final_total_price / _area(p, metric)
        for p in priced
        if _area(p, metric) > 0 and p.final_total_price > 0
    ]
    if not ratios:
        return 0.0
    return sum(ratios) / len(ratios)


def overall_average_psf(
    units: List[Unit],
    config: PricingConfiguration,
    mode: str = DEFAULT_PRICING_MODE,
) -> float:
    return weighted_average_psf(evaluate(units, config, mode), METRIC_SELL_AREA)


def overall_average_ac_psf(
    units: List[Unit],
    config: PricingConfiguration,
    mode: str = DEFAULT_PRICING_MODE,
) -> float:
    return weighted_average_psf(evaluate(units, config, mode), METRIC_AC_AREA)


def type_average_psf(
    units: List[Unit],
    config: PricingConfiguration,
    bedroom_type: str,
    metric: str = METRIC_SELL_AREA,
    mode: str = DEFAULT_PRICING_MODE,
) -> float:
    """Weighted average PSF for the units of one bedroom type."""
    subset = [u for u in units if u.bedroom_type == bedroom_type]
    return weighted_average_psf(evaluate(subset, config, mode), metric)


def selection_average_psf(
    units: List[Unit],
    config: PricingConfiguration,
    selected_types: Optional[List[str]] = None,
    metric: str = METRIC_SELL_AREA,
    mode: str = DEFAULT_PRICING_MODE,
) -> float:
    """Weighted average PSF over the units of the selected bedroom types."""
    if selected_types:
        units = [u for u in units if u.bedroom_type in selected_types]
    return weighted_average_psf(evaluate(units, config, mode), metric)


def priceable_area(units: List[Unit], metric: str = METRIC_SELL_AREA) -> float:
    """Total area a weighted average would divide by, before pricing."""
    check_metric(metric)
    if metric == METRIC_AC_AREA:
        return sum(u.ac_area for u in units if u.ac_area > 0)
    return sum(u.sell_area for u in units if u.sell_area > 0)
