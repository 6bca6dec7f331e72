"""Tests for the floor premium evaluator."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from models.pricing import FloorRiseRule
from engine.floor_premium import floor_premium, floor_premium_table, is_jump_floor


def make_rules():
    return [
        FloorRiseRule(1, 5, 10.0),
        FloorRiseRule(6, 10, 15.0, jump_every_floor=5, jump_increment=50.0),
    ]


class TestFloorPremium:
    def test_two_rules_with_jump(self):
        # 5 x 10 + 5 x 15 + one jump of 50
        assert floor_premium(10, make_rules()) == 175.0

    def test_inside_first_rule(self):
        assert floor_premium(3, make_rules()) == 30.0

    def test_jump_not_reached_yet(self):
        assert floor_premium(9, make_rules()) == 50.0 + 4 * 15.0

    def test_ground_and_negative_floors(self):
        assert floor_premium(0, make_rules()) == 0.0
        assert floor_premium(-2, make_rules()) == 0.0

    def test_no_rules(self):
        assert floor_premium(12, []) == 0.0

    def test_floor_above_last_rule_keeps_total(self):
        assert floor_premium(15, make_rules()) == 175.0

    def test_open_ended_rule_stops_at_max_floor(self):
        rules = [FloorRiseRule(1, None, 10.0)]
        assert floor_premium(20, rules, max_floor=99) == 200.0
        assert floor_premium(150, rules, max_floor=99) == 990.0

    def test_gap_between_rules_adds_nothing(self):
        rules = [FloorRiseRule(1, 3, 10.0), FloorRiseRule(6, None, 20.0)]
        assert floor_premium(5, rules) == 30.0
        assert floor_premium(7, rules) == 30.0 + 2 * 20.0

    def test_rule_order_does_not_matter(self):
        assert floor_premium(10, list(reversed(make_rules()))) == 175.0

    def test_repeating_jumps(self):
        rules = [FloorRiseRule(1, None, 0.0, jump_every_floor=3, jump_increment=100.0)]
        assert floor_premium(9, rules) == 300.0
        assert floor_premium(8, rules) == 200.0

    def test_monotonic_with_non_negative_increments(self):
        rules = make_rules() + [FloorRiseRule(11, None, 5.0, jump_every_floor=2, jump_increment=7.5)]
        premiums = [floor_premium(f, rules) for f in range(0, 40)]
        assert all(a <= b for a, b in zip(premiums, premiums[1:]))


class TestFloorPremiumTable:
    def test_matches_single_evaluation(self):
        table = floor_premium_table([1, 10, 10, 3], make_rules())
        assert set(table) == {1, 3, 10}
        assert table[10] == 175.0
        assert table[3] == 30.0


class TestJumpFloor:
    def test_jump_floor_detection(self):
        rules = make_rules()
        assert is_jump_floor(10, rules)
        assert not is_jump_floor(9, rules)
        assert not is_jump_floor(5, rules)  # first rule has no jumps

    def test_uncovered_floor(self):
        assert not is_jump_floor(40, make_rules())


if __name__ == "__main__":
    import pytest
    pytest.main([__file__, "-v"])
