"""Tests for optimizer cost functions and the parameter vector."""

import sys
import os
import copy
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from models.unit import Unit
from models.pricing import BedroomTypePricing, FloorRiseRule, PricingConfiguration, ViewPricing
from engine.cost_functions import (
    KIND_BEDROOM, KIND_FLOOR_INCREMENT, KIND_JUMP_INCREMENT, KIND_VIEW,
    apply_parameters, build_parameter_specs, drift_penalty, full_parameter_cost,
    multi_parameter_cost, negative_floor_penalty, single_type_cost,
)


def make_config():
    return PricingConfiguration(
        base_psf=1000.0,
        bedroom_type_pricing=[
            BedroomTypePricing("1 Bed", 1000.0),
            BedroomTypePricing("2 Bed", 1200.0),
        ],
        view_pricing=[ViewPricing("Sea", 100.0)],
        floor_rise_rules=[
            FloorRiseRule(6, None, 15.0, jump_every_floor=5, jump_increment=50.0),
            FloorRiseRule(1, 5, 10.0),
        ],
    )


def make_units():
    return [Unit("A", "1 Bed", "City", 1, 1000.0, 1000.0)]


class TestParameterSpecs:
    def test_layout_and_names(self):
        specs = build_parameter_specs(make_config(), include_floor_rules=True)
        assert [s.name for s in specs] == [
            "type:1 Bed", "type:2 Bed", "view:Sea",
            "floor:1:psf_increment", "floor:6:psf_increment", "floor:6:jump_increment",
        ]
        assert [s.kind for s in specs] == [
            KIND_BEDROOM, KIND_BEDROOM, KIND_VIEW,
            KIND_FLOOR_INCREMENT, KIND_FLOOR_INCREMENT, KIND_JUMP_INCREMENT,
        ]

    def test_selected_types_only(self):
        specs = build_parameter_specs(make_config(), ["2 Bed"], include_views=False)
        assert [s.name for s in specs] == ["type:2 Bed"]

    def test_floor_bounds(self):
        specs = build_parameter_specs(make_config(), include_floor_rules=True)
        by_name = {s.name: s for s in specs}
        assert by_name["floor:1:psf_increment"].lower == 0.01
        assert by_name["floor:1:psf_increment"].upper == 20.0
        assert by_name["floor:6:jump_increment"].lower == 0.0
        assert by_name["floor:6:jump_increment"].upper == 100.0

    def test_originals_used_as_baseline(self):
        config = make_config()
        config.bedroom_type_pricing[0].base_psf = 1100.0
        config.bedroom_type_pricing[0].original_base_psf = 1000.0
        config.original_floor_rise_rules = [FloorRiseRule(1, 5, 8.0), FloorRiseRule(6, None, 12.0, 5, 40.0)]
        by_name = {s.name: s for s in build_parameter_specs(config, include_floor_rules=True)}
        assert by_name["type:1 Bed"].initial == 1100.0
        assert by_name["type:1 Bed"].original == 1000.0
        assert by_name["floor:1:psf_increment"].original == 8.0
        assert by_name["floor:6:jump_increment"].original == 40.0


class TestApplyParameters:
    def test_writes_values_without_mutating(self):
        config = make_config()
        snapshot = copy.deepcopy(config)
        specs = build_parameter_specs(config, include_floor_rules=True)
        updated = apply_parameters(config, specs, [1100.0, 1300.0, 50.0, 5.0, 20.0, 60.0])

        assert config == snapshot
        assert updated.bedroom_pricing_for("1 Bed").base_psf == 1100.0
        assert updated.view_pricing_for("Sea").psf_adjustment == 50.0
        assert [r.start_floor for r in updated.floor_rise_rules] == [1, 6]
        assert updated.floor_rise_rules[0].psf_increment == 5.0
        assert updated.floor_rise_rules[1].jump_increment == 60.0


class TestPenalties:
    def test_drift_penalty(self):
        specs = build_parameter_specs(make_config(), include_floor_rules=True)
        values = [1010.0, 1200.0, 100.0, 12.0, 15.0, 50.0]
        assert drift_penalty(specs, values, 0.001) == pytest.approx(0.001 * 100 + 0.001 * 4)
        assert drift_penalty(specs, values, 0.001, 2.0) == pytest.approx(0.001 * 100 + 0.002 * 4)

    def test_negative_floor_penalty(self):
        specs = build_parameter_specs(make_config(), include_floor_rules=True)
        assert negative_floor_penalty(specs, [-5.0, 1200.0, -100.0, 10.0, 15.0, 50.0]) == 0.0
        assert negative_floor_penalty(specs, [1000.0, 1200.0, 100.0, -2.0, 15.0, 50.0]) == 2_000_000


class TestCosts:
    def test_single_type_cost(self):
        config = make_config()
        config.view_pricing = []
        config.floor_rise_rules = []
        units = make_units()
        assert single_type_cost(units, config, "1 Bed", 1000.0, 1000.0, 1000.0) == pytest.approx(0.0)
        # (1100 - 1000)^2 + 0.001 x 100^2
        assert single_type_cost(units, config, "1 Bed", 1100.0, 1000.0, 1000.0) == pytest.approx(10010.0)

    def test_multi_cost_zero_at_target(self):
        config = make_config()
        config.floor_rise_rules = []
        specs = build_parameter_specs(config)
        values = [s.initial for s in specs]
        assert multi_parameter_cost(make_units(), config, specs, values, 1000.0) == pytest.approx(0.0)

    def test_full_cost_penalizes_negative_increments(self):
        config = make_config()
        specs = build_parameter_specs(config, include_floor_rules=True)
        values = [s.initial for s in specs]
        # Floor 1 premium of 10 puts the unit at 1010 PSF
        assert full_parameter_cost(make_units(), config, specs, values, 1000.0) == pytest.approx(100.0)
        values[3] = -1.0
        assert full_parameter_cost(make_units(), config, specs, values, 1000.0) > 1_000_000


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
