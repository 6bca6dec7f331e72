"""Margin-driven base PSF solver.

Given a construction cost per AC square foot, each bedroom type's base PSF is
solved in closed form so that the type's average revenue per unit covers its
average cost plus a target margin:

    (base_psf + avg_premium_psf) * avg_ac_area + avg_flat_adder
        = cost_ac_psf * avg_ac_area * (1 + margin / 100)

Rounding and balcony value are ignored by the solve, so the achieved margin
is reported separately from actual priced revenue.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from models.unit import Unit
from models.pricing import PricingConfiguration
from models.priced_unit import PricedUnit
from engine.pricing_engine import evaluate
from config.defaults import (
    DEFAULT_PRICING_MODE, DEFAULT_TOP_MARGIN, MARGIN_STEP_PER_TYPE, MARGIN_TOLERANCE,
)

logger = logging.getLogger(__name__)

MARGIN_STATUS_ORIGINAL = "original"
MARGIN_STATUS_OPTIMIZED = "optimized"
MARGIN_STATUS_UNACHIEVED = "unachieved"


@dataclass
class MarginTarget:
    bedroom_type: str
    target_margin: float          # %
    current_base_psf: float
    optimized_base_psf: float
    achieved_margin: float        # % of cost, from priced revenue
    delta_psf: float
    status: str = MARGIN_STATUS_ORIGINAL


@dataclass
class MarginOptimizationResult:
    success: bool
    config: PricingConfiguration
    targets: List[MarginTarget] = field(default_factory=list)
    message: str = ""


def default_target_margins(config: PricingConfiguration) -> Dict[str, float]:
    """Stepped-down defaults: the first type gets the top margin, later types less."""
    return {
        t: max(0.0, DEFAULT_TOP_MARGIN - idx * MARGIN_STEP_PER_TYPE)
        for idx, t in enumerate(config.bedroom_types)
    }


def unit_cost(priced: PricedUnit, cost_ac_psf: float) -> float:
    return max(priced.ac_area, 0.0) * cost_ac_psf


def unit_margin(priced: PricedUnit, cost_ac_psf: float) -> float:
    return priced.final_total_price - unit_cost(priced, cost_ac_psf)


def unit_margin_percent(priced: PricedUnit, cost_ac_psf: float) -> float:
    cost = unit_cost(priced, cost_ac_psf)
    return unit_margin(priced, cost_ac_psf) / cost * 100 if cost > 0 else 0.0


def portfolio_margin(priced: List[PricedUnit], project_cost: float) -> Dict[str, float]:
    """Total revenue, profit and margin % against the whole project cost."""
    revenue = sum(p.final_total_price for p in priced)
    profit = revenue - project_cost
    return {
        "revenue": revenue,
        "profit": profit,
        "margin_percent": profit / project_cost * 100 if project_cost > 0 else 0.0,
    }


def _solve_type(
    bedroom_type: str,
    current_base_psf: float,
    target_margin: float,
    type_priced: List[PricedUnit],
    cost_ac_psf: float,
) -> MarginTarget:
    count = len(type_priced)
    avg_ac_area = sum(max(p.ac_area, 0.0) for p in type_priced) / count if count else 0.0

    if avg_ac_area <= 0:
        # Nothing to average over: margin on cost alone
        optimized = cost_ac_psf * (1 + target_margin / 100)
        return MarginTarget(
            bedroom_type, target_margin, current_base_psf, optimized, 0.0,
            optimized - current_base_psf,
        )

    avg_premium = sum(
        p.view_psf_adjustment + p.floor_adjustment + p.additional_adjustment for p in type_priced
    ) / count
    avg_flat = sum(p.flat_add_total for p in type_priced) / count
    target_revenue = cost_ac_psf * avg_ac_area * (1 + target_margin / 100)
    optimized = max(0.0, (target_revenue - avg_flat) / avg_ac_area - avg_premium)

    avg_revenue = sum(p.final_total_price for p in type_priced) / count
    avg_cost = cost_ac_psf * avg_ac_area
    achieved = (avg_revenue - avg_cost) / avg_cost * 100

    return MarginTarget(
        bedroom_type, target_margin, current_base_psf, optimized, achieved,
        optimized - current_base_psf,
    )


def margin_targets(
    units: List[Unit],
    config: PricingConfiguration,
    cost_ac_psf: float,
    target_margins: Optional[Dict[str, float]] = None,
    mode: str = DEFAULT_PRICING_MODE,
) -> List[MarginTarget]:
    """Solve every configured type against its target margin without applying it.

    Targets fall back to those stored on the configuration, then to the
    stepped defaults. Once margins have been applied, each row is marked
    optimized or unachieved by comparing achieved and target margin.
    """
    if cost_ac_psf <= 0 or not config.bedroom_type_pricing:
        return []

    margins = target_margins or config.target_margins or default_target_margins(config)
    priced = evaluate(units, config, mode)
    applied = config.margin_original_base_psfs is not None

    rows = []
    for b in config.bedroom_type_pricing:
        target = float(margins.get(b.bedroom_type, 0.0) or 0.0)
        type_priced = [p for p in priced if p.bedroom_type == b.bedroom_type]
        row = _solve_type(b.bedroom_type, b.base_psf, target, type_priced, cost_ac_psf)
        if applied and type_priced:
            on_target = abs(row.achieved_margin - row.target_margin) < MARGIN_TOLERANCE
            row.status = MARGIN_STATUS_OPTIMIZED if on_target else MARGIN_STATUS_UNACHIEVED
        rows.append(row)
    return rows


def optimize_margins(
    units: List[Unit],
    config: PricingConfiguration,
    cost_ac_psf: float,
    target_margins: Optional[Dict[str, float]] = None,
    mode: str = DEFAULT_PRICING_MODE,
) -> MarginOptimizationResult:
    """Write the margin-solved base PSFs into a copy of `config`.

    Pre-margin base PSFs are kept on the copy unless already stored, so
    repeated runs revert to the first baseline.
    """
    if cost_ac_psf is None or cost_ac_psf <= 0:
        logger.warning("Margin optimization rejected: cost AC PSF %s", cost_ac_psf)
        return MarginOptimizationResult(
            success=False,
            config=config,
            message=f"Cost AC PSF must be positive, got {cost_ac_psf}.",
        )

    margins = target_margins or config.target_margins or default_target_margins(config)
    solved = {
        row.bedroom_type: row.optimized_base_psf
        for row in margin_targets(units, config, cost_ac_psf, margins, mode)
    }

    new_config = copy.deepcopy(config)
    if new_config.margin_original_base_psfs is None:
        new_config.margin_original_base_psfs = {
            b.bedroom_type: b.base_psf for b in new_config.bedroom_type_pricing
        }
    for b in new_config.bedroom_type_pricing:
        if b.bedroom_type in solved:
            b.base_psf = round(solved[b.bedroom_type], 2)
    new_config.target_margins = dict(margins)

    targets = margin_targets(units, new_config, cost_ac_psf, margins, mode)
    missed = [t.bedroom_type for t in targets if t.status == MARGIN_STATUS_UNACHIEVED]
    logger.info(
        "Applied target margins to %d bedroom types at cost %.2f AC PSF, %d off target",
        len(solved), cost_ac_psf, len(missed),
    )
    message = "Base PSF values optimized for target margins."
    if missed:
        message += f" Off target after rounding: {', '.join(missed)}."
    return MarginOptimizationResult(
        success=True, config=new_config, targets=targets, message=message,
    )


def revert_margins(config: PricingConfiguration) -> PricingConfiguration:
    """Restore the base PSFs stored before margins were applied."""
    reverted = copy.deepcopy(config)
    originals = reverted.margin_original_base_psfs
    if originals is None:
        return reverted
    for b in reverted.bedroom_type_pricing:
        if b.bedroom_type in originals:
            b.base_psf = originals[b.bedroom_type]
    reverted.margin_original_base_psfs = None
    reverted.target_margins = {}
    return reverted
