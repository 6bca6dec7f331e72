"""Tests for the gradient descent optimizer."""

import sys
import os
import copy
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import math

import numpy as np
import pytest

from models.unit import Unit
from models.pricing import BedroomTypePricing, FloorRiseRule, PricingConfiguration, ViewPricing
from engine.optimizer import (
    STATUS_CANCELLED, STATUS_CONVERGED, STATUS_ITERATION_LIMIT, STATUS_REJECTED,
    gradient_descent, optimize_all, optimize_single,
)


def make_units(floors=5, area=1000.0):
    units = []
    for bedroom_type in ("1 Bed", "2 Bed"):
        for floor in range(1, floors + 1):
            units.append(Unit(f"{bedroom_type}-{floor}", bedroom_type, "Sea", floor, area, area))
    return units


def make_config(floor_rules=None):
    return PricingConfiguration(
        base_psf=1000.0,
        bedroom_type_pricing=[
            BedroomTypePricing("1 Bed", 1000.0),
            BedroomTypePricing("2 Bed", 1200.0),
        ],
        view_pricing=[ViewPricing("Sea", 0.0)],
        floor_rise_rules=floor_rules or [],
    )


class TestGradientDescent:
    def test_minimizes_quadratic(self):
        outcome = gradient_descent(
            lambda v: float((v[0] - 3.0) ** 2), [0.0], [-10.0], [10.0],
            learning_rate=0.25, max_iterations=200, convergence_threshold=1e-8, epsilon=0.01,
        )
        assert outcome.converged
        assert outcome.values[0] == pytest.approx(3.0, abs=1e-2)

    def test_respects_bounds(self):
        outcome = gradient_descent(
            lambda v: float(np.sum((v - 5.0) ** 2)), [0.0, 0.0], [-1.0, -1.0], [1.0, 2.0],
            learning_rate=0.25, max_iterations=100, convergence_threshold=1e-8, epsilon=0.01,
        )
        assert outcome.values[0] == pytest.approx(1.0)
        assert outcome.values[1] == pytest.approx(2.0)

    def test_cancel_before_first_iteration(self):
        outcome = gradient_descent(
            lambda v: float(v[0] ** 2), [4.0], [-10.0], [10.0],
            learning_rate=0.25, max_iterations=100, convergence_threshold=1e-8, epsilon=0.01,
            should_cancel=lambda: True,
        )
        assert outcome.cancelled
        assert outcome.iterations == 0
        assert outcome.values[0] == 4.0


class TestOptimizeSingle:
    def test_only_target_type_moves(self):
        config = make_config()
        result = optimize_single(make_units(), config, "1 Bed", 1200.0)

        assert result.success
        assert result.status in (STATUS_CONVERGED, STATUS_ITERATION_LIMIT)
        assert result.initial_metric == pytest.approx(1000.0)
        assert abs(result.final_metric - 1200.0) < abs(result.initial_metric - 1200.0)
        assert result.config.bedroom_pricing_for("1 Bed").base_psf > 1000.0
        assert result.config.bedroom_pricing_for("2 Bed").base_psf == 1200.0
        assert result.config.view_pricing_for("Sea").psf_adjustment == 0.0
        assert result.config.bedroom_pricing_for("1 Bed").original_base_psf == 1000.0
        assert result.config.is_optimized
        assert result.config.optimized_types == ["1 Bed"]

    def test_input_config_untouched(self):
        config = make_config()
        snapshot = copy.deepcopy(config)
        optimize_single(make_units(), config, "1 Bed", 1200.0)
        assert config == snapshot

    def test_original_kept_across_runs(self):
        first = optimize_single(make_units(), make_config(), "1 Bed", 1200.0)
        second = optimize_single(make_units(), first.config, "1 Bed", 1300.0)
        assert second.config.bedroom_pricing_for("1 Bed").original_base_psf == 1000.0
        assert second.config.optimized_types == ["1 Bed"]

    @pytest.mark.parametrize("target", [0.0, -50.0, None, math.nan, math.inf])
    def test_invalid_target_rejected(self, target):
        config = make_config()
        result = optimize_single(make_units(), config, "1 Bed", target)
        assert result.status == STATUS_REJECTED
        assert not result.success
        assert result.config is config

    def test_unknown_type_rejected(self):
        result = optimize_single(make_units(), make_config(), "Penthouse", 1200.0)
        assert result.status == STATUS_REJECTED
        assert "Penthouse" in result.message

    def test_no_area_rejected(self):
        units = [Unit("A", "1 Bed", "Sea", 1, 0.0, 0.0)]
        result = optimize_single(units, make_config(), "1 Bed", 1200.0)
        assert result.status == STATUS_REJECTED

    def test_iteration_limit(self):
        result = optimize_single(make_units(), make_config(), "1 Bed", 1200.0,
                                 optimizer_config={"max_iterations": 1})
        assert result.status == STATUS_ITERATION_LIMIT
        assert result.iterations == 1

    def test_cancelled(self):
        config = make_config()
        result = optimize_single(make_units(), config, "1 Bed", 1200.0,
                                 should_cancel=lambda: True)
        assert result.status == STATUS_CANCELLED
        assert result.success
        assert result.iterations == 0
        assert result.config is config
        assert not result.config.is_optimized
        assert result.config.optimized_types == []
        assert result.config.bedroom_pricing_for("1 Bed").original_base_psf is None

    def test_cancelled_mid_run_keeps_progress(self):
        calls = []

        def cancel_on_third_check():
            calls.append(1)
            return len(calls) >= 3

        result = optimize_single(make_units(), make_config(), "1 Bed", 1200.0,
                                 should_cancel=cancel_on_third_check)
        assert result.status == STATUS_CANCELLED
        assert result.iterations == 2
        assert result.config.bedroom_pricing_for("1 Bed").base_psf > 1000.0
        assert result.config.is_optimized

    def test_small_unit_still_moves_towards_target(self):
        # 300 sq ft: a 1 PSF step never crosses a 1,000 rounding increment
        units = [Unit("S1", "Studio", None, 1, 300.0, 300.0)]
        config = PricingConfiguration(
            base_psf=1000.0, bedroom_type_pricing=[BedroomTypePricing("Studio", 1002.0)],
        )
        result = optimize_single(units, config, "Studio", 1500.0)
        assert result.config.bedroom_pricing_for("Studio").base_psf > 1002.0
        assert result.final_metric > result.initial_metric
        assert abs(result.final_metric - 1500.0) < 50.0

    def test_bad_metric_raises(self):
        with pytest.raises(ValueError):
            optimize_single(make_units(), make_config(), "1 Bed", 1200.0, metric="gross")


class TestOptimizeAll:
    def test_base_only_moves_towards_target(self):
        result = optimize_all(make_units(), make_config(), 1300.0)

        assert result.success
        assert result.initial_metric == pytest.approx(1100.0)
        assert abs(result.final_metric - 1300.0) < abs(result.initial_metric - 1300.0)
        assert set(result.parameters) == {"type:1 Bed", "type:2 Bed", "view:Sea"}
        assert result.config.optimization_mode == "base_only"
        assert result.config.target_overall_psf == 1300.0
        assert sorted(result.config.optimized_types) == ["1 Bed", "2 Bed"]
        assert result.config.bedroom_pricing_for("2 Bed").original_base_psf == 1200.0
        assert result.config.view_pricing_for("Sea").original_psf_adjustment == 0.0
        assert result.message.startswith("Base PSF optimization")

    def test_selection_leaves_other_types(self):
        result = optimize_all(make_units(), make_config(), 1100.0, selected_types=["1 Bed"])

        assert result.initial_metric == pytest.approx(1000.0)
        assert result.config.bedroom_pricing_for("2 Bed").base_psf == 1200.0
        assert result.config.bedroom_pricing_for("2 Bed").original_base_psf is None
        assert result.config.optimized_types == ["1 Bed"]

    def test_full_keeps_floor_increments_positive(self):
        config = make_config(floor_rules=[
            FloorRiseRule(1, None, 20.0, jump_every_floor=2, jump_increment=10.0),
        ])
        result = optimize_all(make_units(), config, 600.0, optimization_mode="all_parameters")

        assert result.success
        assert result.final_metric < result.initial_metric
        rule = result.config.floor_rise_rules[0]
        assert 0.01 <= rule.psf_increment <= 40.0
        assert 0.0 <= rule.jump_increment <= 20.0
        assert result.config.original_floor_rise_rules[0].psf_increment == 20.0
        assert result.config.optimization_mode == "all_parameters"
        assert "floor:1:psf_increment" in result.parameters
        assert result.message.startswith("Full Parameter optimization")

    def test_unknown_selection_rejected(self):
        result = optimize_all(make_units(), make_config(), 1100.0, selected_types=["Villa"])
        assert result.status == STATUS_REJECTED

    def test_invalid_target_rejected(self):
        assert optimize_all(make_units(), make_config(), -1.0).status == STATUS_REJECTED

    def test_unknown_mode_raises(self):
        with pytest.raises(ValueError):
            optimize_all(make_units(), make_config(), 1100.0, optimization_mode="everything")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
