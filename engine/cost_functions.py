"""Scalar objectives for the PSF optimizer.

Each cost is the squared deviation of a weighted-average PSF from its target
plus a quadratic penalty on drift away from baseline parameter values. The
full-parameter cost also treats floor-rise increments as parameters and adds
a hard penalty for any negative increment.
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Union

from models.unit import Unit
from models.pricing import PricingConfiguration
from engine.metrics import selection_average_psf, type_average_psf
from config.defaults import (
    CONSTRAINT_FACTOR, FLOOR_CONSTRAINT_MULTIPLIER, NEGATIVE_FLOOR_PENALTY,
    MIN_BASE_PSF, FLOOR_INCREMENT_MIN, FLOOR_INCREMENT_MAX_FACTOR,
    JUMP_INCREMENT_MIN, JUMP_INCREMENT_MAX_FACTOR, JUMP_INCREMENT_MAX_FLOOR,
    METRIC_SELL_AREA, DEFAULT_PRICING_MODE,
)

KIND_BEDROOM = "bedroom"
KIND_VIEW = "view"
KIND_FLOOR_INCREMENT = "floor_increment"
KIND_JUMP_INCREMENT = "jump_increment"
FLOOR_KINDS = (KIND_FLOOR_INCREMENT, KIND_JUMP_INCREMENT)


@dataclass
class ParameterSpec:
    name: str
    kind: str
    key: Union[str, int]     # bedroom type, view, or index into sorted floor rules
    initial: float           # Value in the configuration being optimized
    original: float          # Baseline the drift penalty pulls towards
    lower: float = float("-inf")
    upper: float = float("inf")

    @property
    def is_floor(self) -> bool:
        return self.kind in FLOOR_KINDS


def build_parameter_specs(
    config: PricingConfiguration,
    selected_types: Optional[List[str]] = None,
    include_views: bool = True,
    include_floor_rules: bool = False,
) -> List[ParameterSpec]:
    """Lay out the parameter vector: bedroom types, then views, then floor rules."""
    specs = []
    for b in config.bedroom_type_pricing:
        if selected_types and b.bedroom_type not in selected_types:
            continue
        original = b.original_base_psf if b.original_base_psf is not None else b.base_psf
        specs.append(ParameterSpec(
            name=f"type:{b.bedroom_type}",
            kind=KIND_BEDROOM,
            key=b.bedroom_type,
            initial=b.base_psf,
            original=original,
            lower=MIN_BASE_PSF,
        ))

    if include_views:
        for v in config.view_pricing:
            original = (v.original_psf_adjustment
                        if v.original_psf_adjustment is not None else v.psf_adjustment)
            specs.append(ParameterSpec(
                name=f"view:{v.view}",
                kind=KIND_VIEW,
                key=v.view,
                initial=v.psf_adjustment,
                original=original,
            ))

    if include_floor_rules:
        rules = config.sorted_floor_rules()
        baseline = rules
        if config.original_floor_rise_rules is not None \
                and len(config.original_floor_rise_rules) == len(rules):
            baseline = sorted(config.original_floor_rise_rules, key=lambda r: r.start_floor)

        for idx, (rule, base_rule) in enumerate(zip(rules, baseline)):
            specs.append(ParameterSpec(
                name=f"floor:{rule.start_floor}:psf_increment",
                kind=KIND_FLOOR_INCREMENT,
                key=idx,
                initial=rule.psf_increment,
                original=base_rule.psf_increment,
                lower=FLOOR_INCREMENT_MIN,
                upper=max(FLOOR_INCREMENT_MAX_FACTOR * base_rule.psf_increment, FLOOR_INCREMENT_MIN),
            ))
            if rule.jump_every_floor:
                base_jump = base_rule.jump_increment or 0.0
                specs.append(ParameterSpec(
                    name=f"floor:{rule.start_floor}:jump_increment",
                    kind=KIND_JUMP_INCREMENT,
                    key=idx,
                    initial=rule.jump_increment or 0.0,
                    original=base_jump,
                    lower=JUMP_INCREMENT_MIN,
                    upper=max(JUMP_INCREMENT_MAX_FACTOR * base_jump, JUMP_INCREMENT_MAX_FLOOR),
                ))
    return specs


def apply_parameters(
    config: PricingConfiguration,
    specs: List[ParameterSpec],
    values: Sequence[float],
) -> PricingConfiguration:
    """Return a new configuration with the parameter vector written in.

    Untouched entries are shared with `config`; nothing is mutated.
    """
    bedroom, views, increments, jumps = {}, {}, {}, {}
    for spec, value in zip(specs, values):
        value = float(value)
        if spec.kind == KIND_BEDROOM:
            bedroom[spec.key] = value
        elif spec.kind == KIND_VIEW:
            views[spec.key] = value
        elif spec.kind == KIND_FLOOR_INCREMENT:
            increments[spec.key] = value
        elif spec.kind == KIND_JUMP_INCREMENT:
            jumps[spec.key] = value

    types = [
        replace(b, base_psf=bedroom[b.bedroom_type]) if b.bedroom_type in bedroom else b
        for b in config.bedroom_type_pricing
    ]
    view_pricing = [
        replace(v, psf_adjustment=views[v.view]) if v.view in views else v
        for v in config.view_pricing
    ]
    rules = config.floor_rise_rules
    if increments or jumps:
        rules = []
        for idx, rule in enumerate(config.sorted_floor_rules()):
            changes = {}
            if idx in increments:
                changes["psf_increment"] = increments[idx]
            if idx in jumps:
                changes["jump_increment"] = jumps[idx]
            rules.append(replace(rule, **changes) if changes else rule)

    return replace(
        config,
        bedroom_type_pricing=types,
        view_pricing=view_pricing,
        floor_rise_rules=rules,
    )


def drift_penalty(
    specs: List[ParameterSpec],
    values: Sequence[float],
    constraint_factor: float = CONSTRAINT_FACTOR,
    floor_multiplier: float = 1.0,
) -> float:
    total = 0.0
    for spec, value in zip(specs, values):
        weight = constraint_factor * (floor_multiplier if spec.is_floor else 1.0)
        total += weight * (value - spec.original) ** 2
    return total


def negative_floor_penalty(specs: List[ParameterSpec], values: Sequence[float]) -> float:
    """Hard penalty proportional to how far floor parameters go below zero."""
    return sum(
        NEGATIVE_FLOOR_PENALTY * abs(value)
        for spec, value in zip(specs, values)
        if spec.is_floor and value < 0
    )


def single_type_cost(
    units: List[Unit],
    config: PricingConfiguration,
    bedroom_type: str,
    trial_base_psf: float,
    target_psf: float,
    original_base_psf: float,
    constraint_factor: float = CONSTRAINT_FACTOR,
    metric: str = METRIC_SELL_AREA,
    mode: str = DEFAULT_PRICING_MODE,
) -> float:
    """Deviation of one type's weighted PSF from target under a trial base PSF."""
    trial = replace(config, bedroom_type_pricing=[
        replace(b, base_psf=trial_base_psf) if b.bedroom_type == bedroom_type else b
        for b in config.bedroom_type_pricing
    ])
    avg = type_average_psf(units, trial, bedroom_type, metric, mode)
    return (avg - target_psf) ** 2 + constraint_factor * (trial_base_psf - original_base_psf) ** 2


def multi_parameter_cost(
    units: List[Unit],
    config: PricingConfiguration,
    specs: List[ParameterSpec],
    values: Sequence[float],
    target_psf: float,
    constraint_factor: float = CONSTRAINT_FACTOR,
    selected_types: Optional[List[str]] = None,
    metric: str = METRIC_SELL_AREA,
    mode: str = DEFAULT_PRICING_MODE,
) -> float:
    """Deviation of the weighted PSF under a trial type/view vector."""
    trial = apply_parameters(config, specs, values)
    avg = selection_average_psf(units, trial, selected_types, metric, mode)
    return (avg - target_psf) ** 2 + drift_penalty(specs, values, constraint_factor)


def full_parameter_cost(
    units: List[Unit],
    config: PricingConfiguration,
    specs: List[ParameterSpec],
    values: Sequence[float],
    target_psf: float,
    constraint_factor: float = CONSTRAINT_FACTOR,
    selected_types: Optional[List[str]] = None,
    metric: str = METRIC_SELL_AREA,
    mode: str = DEFAULT_PRICING_MODE,
) -> float:
    """Multi-parameter cost with floor rules free and kept non-negative."""
    trial = apply_parameters(config, specs, values)
    avg = selection_average_psf(units, trial, selected_types, metric, mode)
    return (
        (avg - target_psf) ** 2
        + drift_penalty(specs, values, constraint_factor, FLOOR_CONSTRAINT_MULTIPLIER)
        + negative_floor_penalty(specs, values)
    )
