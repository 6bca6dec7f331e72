"""Cumulative floor-rise premium per unit of area."""

from typing import Dict, Iterable, List
from models.pricing import FloorRiseRule
from config.defaults import DEFAULT_MAX_FLOOR


def floor_premium(
    floor: int,
    rules: List[FloorRiseRule],
    max_floor: int = DEFAULT_MAX_FLOOR,
) -> float:
    """Sum the PSF increments of every floor from 1 up to `floor`.

    Rules are applied in ascending start-floor order. Each covered floor adds
    the rule's psf_increment, plus jump_increment when the floor's 1-based
    offset inside the rule is a multiple of jump_every_floor. Floors not
    covered by any rule add nothing. Rules are assumed not to overlap.
    """
    if floor <= 0 or not rules:
        return 0.0

    premium = 0.0
    for rule in sorted(rules, key=lambda r: r.start_floor):
        if floor < rule.start_floor:
            break
        stop = min(rule.resolved_end(max_floor), floor)
        for f in range(max(rule.start_floor, 1), stop + 1):
            premium += rule.psf_increment
            if rule.has_jumps and (f - rule.start_floor + 1) % rule.jump_every_floor == 0:
                premium += rule.jump_increment
        if stop >= floor:
            break

    return premium


def floor_premium_table(
    floors: Iterable[int],
    rules: List[FloorRiseRule],
    max_floor: int = DEFAULT_MAX_FLOOR,
) -> Dict[int, float]:
    """Premium for each distinct floor, so a batch walks each floor once."""
    return {f: floor_premium(f, rules, max_floor) for f in set(floors)}


def is_jump_floor(floor: int, rules: List[FloorRiseRule], max_floor: int = DEFAULT_MAX_FLOOR) -> bool:
    """True when `floor` itself receives a jump increment."""
    for rule in sorted(rules, key=lambda r: r.start_floor):
        if rule.start_floor <= floor <= rule.resolved_end(max_floor):
            return rule.has_jumps and (floor - rule.start_floor + 1) % rule.jump_every_floor == 0
    return False
