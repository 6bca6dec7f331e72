"""Restore optimized parameters from their stored original values."""

import copy
from typing import Optional

from models.pricing import PricingConfiguration


def revert(config: PricingConfiguration, bedroom_type: Optional[str] = None) -> PricingConfiguration:
    """Return a copy of `config` with optimized values restored.

    With `bedroom_type`, only that type's base PSF is restored and the
    configuration stays optimized if other types still are. Without it, every
    type, view and the floor rules are restored and the bookkeeping cleared.
    """
    reverted = copy.deepcopy(config)

    if bedroom_type is not None:
        bedroom = reverted.bedroom_pricing_for(bedroom_type)
        if bedroom is not None and bedroom.original_base_psf is not None:
            bedroom.base_psf = bedroom.original_base_psf
            bedroom.original_base_psf = None
        reverted.optimized_types = [t for t in reverted.optimized_types if t != bedroom_type]
        reverted.is_optimized = bool(reverted.optimized_types)
        if not reverted.is_optimized:
            reverted.optimization_mode = None
        return reverted

    for b in reverted.bedroom_type_pricing:
        if b.original_base_psf is not None:
            b.base_psf = b.original_base_psf
            b.original_base_psf = None
    for v in reverted.view_pricing:
        if v.original_psf_adjustment is not None:
            v.psf_adjustment = v.original_psf_adjustment
            v.original_psf_adjustment = None
    if reverted.original_floor_rise_rules is not None:
        reverted.floor_rise_rules = reverted.original_floor_rise_rules
        reverted.original_floor_rise_rules = None

    reverted.is_optimized = False
    reverted.optimized_types = []
    reverted.optimization_mode = None
    return reverted
