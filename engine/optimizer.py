"""Constrained gradient descent over pricing parameters.

Three variants share one descent loop:
- single:          one bedroom type's base PSF against that type's weighted PSF
- base_only:       selected types' base PSF and every view adjustment
- all_parameters:  base_only plus floor-rise increments and jump increments
"""

import copy
import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from models.unit import Unit
from models.pricing import PricingConfiguration
from engine.pricing_engine import check_mode
from engine.metrics import check_metric, priceable_area, selection_average_psf, type_average_psf
from engine.cost_functions import (
    ParameterSpec, apply_parameters, build_parameter_specs,
    full_parameter_cost, multi_parameter_cost, single_type_cost,
    KIND_BEDROOM, KIND_VIEW,
)
from config.defaults import (
    SINGLE_OPTIMIZER, MULTI_OPTIMIZER, FULL_OPTIMIZER, MIN_BASE_PSF, DEFAULT_PRICING_MODE,
    PRICE_ROUNDING_INCREMENT,
    METRIC_SELL_AREA, OPTIMIZATION_MODES, OPTIMIZATION_MODE_ALL_PARAMETERS,
    OPTIMIZATION_MODE_BASE_ONLY,
)

logger = logging.getLogger(__name__)

STATUS_CONVERGED = "Converged"
STATUS_ITERATION_LIMIT = "Iteration Limit"
STATUS_CANCELLED = "Cancelled"
STATUS_REJECTED = "Rejected"


@dataclass
class OptimizationResult:
    status: str  # "Converged", "Iteration Limit", "Cancelled", "Rejected"
    config: PricingConfiguration
    initial_metric: float
    final_metric: float
    iterations: int
    parameters: Dict[str, float] = field(default_factory=dict)  # name -> final value
    message: str = ""

    @property
    def success(self) -> bool:
        return self.status != STATUS_REJECTED

    @property
    def converged(self) -> bool:
        return self.status == STATUS_CONVERGED


@dataclass
class DescentOutcome:
    values: np.ndarray
    iterations: int
    final_cost: float
    converged: bool
    cancelled: bool = False


def _settings(defaults: dict, overrides: Optional[dict]) -> dict:
    cfg = overrides or {}
    return {key: cfg.get(key, value) for key, value in defaults.items()}


def _valid_target(target_psf) -> bool:
    return target_psf is not None and math.isfinite(target_psf) and target_psf > 0


def gradient_descent(
    cost_fn: Callable[[np.ndarray], float],
    initial: Sequence[float],
    lower: Sequence[float],
    upper: Sequence[float],
    learning_rate: float,
    max_iterations: int,
    convergence_threshold: float,
    epsilon: float,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> DescentOutcome:
    """Plain gradient descent with central finite differences and box clamping.

    Exits when the cost changes by less than `convergence_threshold` between
    iterations, when `max_iterations` is spent, or when `should_cancel`
    returns True at the start of an iteration.
    """
    lower = np.asarray(lower, dtype=float)
    upper = np.asarray(upper, dtype=float)
    values = np.clip(np.asarray(initial, dtype=float), lower, upper)
    previous_cost = math.inf
    cost = math.inf

    for iteration in range(1, max_iterations + 1):
        if should_cancel is not None and should_cancel():
            return DescentOutcome(values, iteration - 1, cost, converged=False, cancelled=True)

        cost = cost_fn(values)
        logger.debug("iteration %d cost %.6f", iteration, cost)
        if abs(cost - previous_cost) < convergence_threshold:
            return DescentOutcome(values, iteration, cost, converged=True)

        gradient = np.zeros_like(values)
        for i in range(len(values)):
            # Central difference, with the probes kept inside the bounds
            forward = values.copy()
            backward = values.copy()
            forward[i] = min(values[i] + epsilon, upper[i])
            backward[i] = max(values[i] - epsilon, lower[i])
            span = forward[i] - backward[i]
            if span > 0:
                gradient[i] = (cost_fn(forward) - cost_fn(backward)) / span

        values = np.clip(values - learning_rate * gradient, lower, upper)
        previous_cost = cost

    return DescentOutcome(values, max_iterations, cost_fn(values), converged=False)


def _status(outcome: DescentOutcome) -> str:
    if outcome.cancelled:
        return STATUS_CANCELLED
    return STATUS_CONVERGED if outcome.converged else STATUS_ITERATION_LIMIT


def _rejected(config: PricingConfiguration, message: str, initial_metric: float = 0.0) -> OptimizationResult:
    logger.warning("Optimization rejected: %s", message)
    return OptimizationResult(
        status=STATUS_REJECTED,
        config=config,
        initial_metric=initial_metric,
        final_metric=initial_metric,
        iterations=0,
        message=message,
    )


def _cancelled(config: PricingConfiguration, initial_metric: float) -> OptimizationResult:
    logger.info("Optimization cancelled before the first iteration")
    return OptimizationResult(
        status=STATUS_CANCELLED,
        config=config,
        initial_metric=initial_metric,
        final_metric=initial_metric,
        iterations=0,
        message="Optimization cancelled before the first iteration; configuration unchanged.",
    )


def _probe_step(units: List[Unit], epsilon: float) -> float:
    """Finite-difference step wide enough to move the smallest unit's price
    across at least one rounding increment in each direction."""
    areas = [u.ac_area for u in units if u.ac_area > 0]
    if not areas:
        return epsilon
    return max(epsilon, PRICE_ROUNDING_INCREMENT / min(areas))


def optimize_single(
    units: List[Unit],
    config: PricingConfiguration,
    bedroom_type: str,
    target_psf: float,
    metric: str = METRIC_SELL_AREA,
    mode: str = DEFAULT_PRICING_MODE,
    optimizer_config: Optional[dict] = None,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> OptimizationResult:
    """Tune one bedroom type's base PSF so its weighted PSF approaches target.

    Other types, views and floor rules are left untouched.
    """
    check_metric(metric)
    check_mode(mode)
    settings = _settings(SINGLE_OPTIMIZER, optimizer_config)

    bedroom = config.bedroom_pricing_for(bedroom_type)
    if bedroom is None:
        return _rejected(config, f"Bedroom type '{bedroom_type}' is not configured.")

    type_units = [u for u in units if u.bedroom_type == bedroom_type]
    if priceable_area(type_units, metric) <= 0:
        return _rejected(config, f"Bedroom type '{bedroom_type}' has no units with positive area.")

    initial_metric = type_average_psf(type_units, config, bedroom_type, metric, mode)
    if not _valid_target(target_psf):
        return _rejected(config, f"Target PSF must be a positive number, got {target_psf}.", initial_metric)

    original = bedroom.original_base_psf if bedroom.original_base_psf is not None else bedroom.base_psf
    logger.info(
        "Optimizing %s base PSF %.2f: current %s %.2f, target %.2f",
        bedroom_type, bedroom.base_psf, metric, initial_metric, target_psf,
    )

    def cost_fn(values: np.ndarray) -> float:
        return single_type_cost(
            type_units, config, bedroom_type, float(values[0]), target_psf, original,
            settings["constraint_factor"], metric, mode,
        )

    outcome = gradient_descent(
        cost_fn,
        initial=[bedroom.base_psf],
        lower=[MIN_BASE_PSF],
        upper=[math.inf],
        learning_rate=settings["learning_rate"],
        max_iterations=settings["max_iterations"],
        convergence_threshold=settings["convergence_threshold"],
        epsilon=_probe_step(type_units, settings["epsilon"]),
        should_cancel=should_cancel,
    )
    if outcome.iterations == 0:
        return _cancelled(config, initial_metric)
    new_psf = float(outcome.values[0])

    new_config = copy.deepcopy(config)
    target = new_config.bedroom_pricing_for(bedroom_type)
    if target.original_base_psf is None:
        target.original_base_psf = target.base_psf
    target.base_psf = new_psf
    new_config.is_optimized = True
    if bedroom_type not in new_config.optimized_types:
        new_config.optimized_types.append(bedroom_type)
    new_config.target_metric = metric

    final_metric = type_average_psf(type_units, new_config, bedroom_type, metric, mode)
    status = _status(outcome)
    logger.info(
        "%s optimization %s after %d iterations: %.2f -> %.2f",
        bedroom_type, status, outcome.iterations, initial_metric, final_metric,
    )

    return OptimizationResult(
        status=status,
        config=new_config,
        initial_metric=initial_metric,
        final_metric=final_metric,
        iterations=outcome.iterations,
        parameters={f"type:{bedroom_type}": new_psf},
        message=(
            f"Optimized {bedroom_type} from {initial_metric:,.2f} to {final_metric:,.2f} PSF "
            f"in {outcome.iterations} iterations."
        ),
    )


def _record_originals(
    original: PricingConfiguration,
    optimized: PricingConfiguration,
    specs: List[ParameterSpec],
    include_floor_rules: bool,
):
    """Store pre-optimization values on `optimized` unless already stored."""
    bedroom_keys = {s.key for s in specs if s.kind == KIND_BEDROOM}
    view_keys = {s.key for s in specs if s.kind == KIND_VIEW}

    for b in optimized.bedroom_type_pricing:
        if b.bedroom_type in bedroom_keys and b.original_base_psf is None:
            b.original_base_psf = original.bedroom_pricing_for(b.bedroom_type).base_psf
    for v in optimized.view_pricing:
        if v.view in view_keys and v.original_psf_adjustment is None:
            v.original_psf_adjustment = original.view_pricing_for(v.view).psf_adjustment
    if include_floor_rules and optimized.original_floor_rise_rules is None:
        optimized.original_floor_rise_rules = copy.deepcopy(original.floor_rise_rules)


def optimize_all(
    units: List[Unit],
    config: PricingConfiguration,
    target_psf: float,
    selected_types: Optional[List[str]] = None,
    optimization_mode: str = OPTIMIZATION_MODE_BASE_ONLY,
    metric: str = METRIC_SELL_AREA,
    mode: str = DEFAULT_PRICING_MODE,
    optimizer_config: Optional[dict] = None,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> OptimizationResult:
    """Tune type base PSFs and view adjustments (and optionally floor rules)
    so the weighted PSF of the selected types approaches target.

    With no selection every configured type is tuned and the metric covers
    every unit.
    """
    if optimization_mode not in OPTIMIZATION_MODES:
        raise ValueError(
            f"Unknown optimization mode '{optimization_mode}'. Expected one of {OPTIMIZATION_MODES}."
        )
    check_metric(metric)
    check_mode(mode)
    full = optimization_mode == OPTIMIZATION_MODE_ALL_PARAMETERS
    settings = _settings(FULL_OPTIMIZER if full else MULTI_OPTIMIZER, optimizer_config)

    if selected_types:
        selection = [t for t in selected_types if config.bedroom_pricing_for(t) is not None]
        if not selection:
            return _rejected(config, f"None of the selected types {selected_types} are configured.")
        scoped_units = [u for u in units if u.bedroom_type in selection]
    else:
        selection = []
        scoped_units = list(units)

    if priceable_area(scoped_units, metric) <= 0:
        return _rejected(config, "No units with positive area in the selection.")

    initial_metric = selection_average_psf(scoped_units, config, None, metric, mode)
    if not _valid_target(target_psf):
        return _rejected(config, f"Target PSF must be a positive number, got {target_psf}.", initial_metric)

    specs = build_parameter_specs(config, selection or None, include_views=True, include_floor_rules=full)
    if not specs:
        return _rejected(config, "Configuration has no tunable parameters.", initial_metric)

    logger.info(
        "Running %s optimization over %d parameters: current %s %.2f, target %.2f",
        optimization_mode, len(specs), metric, initial_metric, target_psf,
    )
    cost = full_parameter_cost if full else multi_parameter_cost

    def cost_fn(values: np.ndarray) -> float:
        return cost(
            scoped_units, config, specs, values, target_psf,
            settings["constraint_factor"], None, metric, mode,
        )

    outcome = gradient_descent(
        cost_fn,
        initial=[s.initial for s in specs],
        lower=[s.lower for s in specs],
        upper=[s.upper for s in specs],
        learning_rate=settings["learning_rate"],
        max_iterations=settings["max_iterations"],
        convergence_threshold=settings["convergence_threshold"],
        epsilon=_probe_step(scoped_units, settings["epsilon"]),
        should_cancel=should_cancel,
    )
    if outcome.iterations == 0:
        return _cancelled(config, initial_metric)

    new_config = copy.deepcopy(apply_parameters(config, specs, outcome.values))
    _record_originals(config, new_config, specs, full)
    new_config.is_optimized = True
    for t in selection or config.bedroom_types:
        if t not in new_config.optimized_types:
            new_config.optimized_types.append(t)
    new_config.optimization_mode = optimization_mode
    new_config.target_overall_psf = target_psf
    new_config.target_metric = metric

    final_metric = selection_average_psf(scoped_units, new_config, None, metric, mode)
    status = _status(outcome)
    logger.info(
        "%s optimization %s after %d iterations: %.2f -> %.2f",
        optimization_mode, status, outcome.iterations, initial_metric, final_metric,
    )

    label = "Full Parameter" if full else "Base PSF"
    return OptimizationResult(
        status=status,
        config=new_config,
        initial_metric=initial_metric,
        final_metric=final_metric,
        iterations=outcome.iterations,
        parameters={s.name: float(v) for s, v in zip(specs, outcome.values)},
        message=(
            f"{label} optimization from {initial_metric:,.2f} to {final_metric:,.2f} PSF "
            f"in {outcome.iterations} iterations."
        ),
    )
