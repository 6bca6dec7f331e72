"""Generates human-readable explanations for priced units."""

from typing import List

from models.priced_unit import PricedUnit


def explain_unit_price(priced: PricedUnit) -> List[str]:
    """Produce a step-by-step explanation of a unit's final price."""
    steps = []

    steps.append(
        f"Step 1 - Base PSF: {priced.bedroom_type or 'untagged'} => {priced.base_psf:,.2f}"
    )

    steps.append(
        f"Step 2 - Premiums: view {priced.view_psf_adjustment:+,.2f}, "
        f"floor {priced.unit.floor} {priced.floor_adjustment:+,.2f}, "
        f"categories {priced.additional_adjustment:+,.2f} "
        f"=> {priced.psf_after_all_adjustments:,.2f} PSF"
    )
    for label, amount in priced.additional_components.items():
        steps.append(f"  - {label}: {amount:+,.2f}")

    if priced.priced_balcony_area > 0:
        steps.append(
            f"Step 3 - Area: AC {priced.ac_area:,.2f} + balcony {priced.balcony_area:,.2f} "
            f"priced as {priced.priced_balcony_area:,.2f} => {priced.effective_area:,.2f}"
        )
    else:
        steps.append(f"Step 3 - Area: AC {priced.ac_area:,.2f} => {priced.effective_area:,.2f}")

    steps.append(
        f"Step 4 - Raw price: {priced.psf_after_all_adjustments:,.2f} x {priced.effective_area:,.2f} "
        f"= {priced.total_price_raw:,.2f}"
    )

    if priced.flat_add_total:
        steps.append(f"Step 5 - Flat adders: {priced.flat_add_total:+,.2f}")

    steps.append(
        f"Final: rounded up to {priced.final_total_price:,.0f} "
        f"({priced.final_psf:,.2f} PSF, {priced.final_ac_psf:,.2f} AC PSF)"
    )

    return steps
