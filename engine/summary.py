"""Tabular summaries of priced units for reporting and export."""

from typing import List, Optional

import pandas as pd

from models.pricing import FloorRiseRule, PricingConfiguration
from models.priced_unit import PricedUnit
from engine.floor_premium import floor_premium, is_jump_floor
from engine.margin import unit_cost, unit_margin, unit_margin_percent
from config.defaults import DEFAULT_MAX_FLOOR

SUMMARY_COLUMNS = [
    "Type", "Units", "Avg Size", "Total Value",
    "Min SA PSF", "Avg SA PSF", "Max SA PSF",
    "Min AC PSF", "Avg AC PSF", "Max AC PSF",
]


def priced_units_frame(priced: List[PricedUnit], cost_ac_psf: float = 0.0) -> pd.DataFrame:
    """One row per priced unit, category values included as extra columns.

    With a positive `cost_ac_psf` the unit cost and margin columns are added.
    """
    rows = []
    for p in priced:
        row = {
            "Unit": p.name,
            "Type": p.bedroom_type,
            "Floor": p.unit.floor,
            "View": p.unit.view,
            "Sell Area": p.sell_area,
            "AC Area": p.ac_area,
            "Balcony Area": p.balcony_area,
            "Balcony %": p.balcony_percentage,
            "Base PSF": p.base_psf,
            "View PSF Adjustment": p.view_psf_adjustment,
            "Floor PSF Adjustment": p.floor_adjustment,
            "Add-Cat Premium": p.additional_adjustment,
            "PSF After All Adjustments": p.psf_after_all_adjustments,
            "AC Component": p.ac_price,
            "Balcony Component": p.balcony_price,
            "Flat Adders": p.flat_add_total,
            "Total Price (unc.)": p.total_price_raw,
            "Final Total Price": p.final_total_price,
            "Final PSF": p.final_psf,
            "Final AC PSF": p.final_ac_psf,
            "Optimized": p.is_optimized,
        }
        if cost_ac_psf > 0:
            row["Unit Cost"] = unit_cost(p, cost_ac_psf)
            row["Margin"] = unit_margin(p, cost_ac_psf)
            row["Margin %"] = unit_margin_percent(p, cost_ac_psf)
        for column, value in p.unit.categories.items():
            row[column] = value
        rows.append(row)
    return pd.DataFrame(rows)


def _summary_row(label: str, group: pd.DataFrame) -> dict:
    if group.empty:
        return {col: 0 for col in SUMMARY_COLUMNS} | {"Type": label}

    total_value = group["Final Total Price"].sum()
    sa_psf = group["Final Total Price"] / group["Sell Area"]
    with_ac = group[group["AC Area"] > 0]
    ac_psf = with_ac["Final Total Price"] / with_ac["AC Area"]

    return {
        "Type": label,
        "Units": len(group),
        "Avg Size": group["Sell Area"].mean(),
        "Total Value": total_value,
        "Min SA PSF": sa_psf.min(),
        "Avg SA PSF": total_value / group["Sell Area"].sum(),
        "Max SA PSF": sa_psf.max(),
        "Min AC PSF": ac_psf.min() if not with_ac.empty else 0,
        "Avg AC PSF": with_ac["Final Total Price"].sum() / with_ac["AC Area"].sum() if not with_ac.empty else 0,
        "Max AC PSF": ac_psf.max() if not with_ac.empty else 0,
    }


def summarize_by_type(priced: List[PricedUnit]) -> pd.DataFrame:
    """Per bedroom type metrics plus a TOTAL row.

    Only units with positive sell area and price count. Average PSFs are
    value-weighted (total value / total area).
    """
    df = priced_units_frame(priced)
    if df.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    df["Type"] = df["Type"].fillna("Unknown")
    valid = df[(df["Sell Area"] > 0) & (df["Final Total Price"] > 0)]

    rows = [_summary_row(t, valid[valid["Type"] == t]) for t in df["Type"].unique()]
    if not valid.empty:
        rows.append(_summary_row("TOTAL", valid))
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def floor_psf_curve(
    rules: List[FloorRiseRule],
    max_floor: int = DEFAULT_MAX_FLOOR,
    top_floor: Optional[int] = None,
) -> pd.DataFrame:
    """Cumulative floor premium for floors 1..top_floor, for charting.

    `max_floor` is the ceiling for open-ended rules, as in pricing; pass the
    configuration's `max_floor`. `top_floor` defaults to it.
    """
    top_floor = top_floor or max_floor
    return pd.DataFrame([
        {
            "floor": floor,
            "psf": floor_premium(floor, rules, max_floor),
            "is_jump": is_jump_floor(floor, rules, max_floor),
        }
        for floor in range(1, top_floor + 1)
    ])


def optimization_impact(config: PricingConfiguration) -> pd.DataFrame:
    """Original vs current value of every bedroom type and view parameter."""
    rows = []
    for b in config.bedroom_type_pricing:
        original = b.original_base_psf if b.original_base_psf is not None else b.base_psf
        rows.append({
            "Parameter": "Base PSF",
            "Name": b.bedroom_type,
            "Original": original,
            "Current": b.base_psf,
            "Change": b.base_psf - original,
            "Change %": (b.base_psf - original) / original if original else 0.0,
        })
    for v in config.view_pricing:
        original = (v.original_psf_adjustment
                    if v.original_psf_adjustment is not None else v.psf_adjustment)
        rows.append({
            "Parameter": "View Adjustment",
            "Name": v.view,
            "Original": original,
            "Current": v.psf_adjustment,
            "Change": v.psf_adjustment - original,
            "Change %": (v.psf_adjustment - original) / original if original else 0.0,
        })
    return pd.DataFrame(rows, columns=["Parameter", "Name", "Original", "Current", "Change", "Change %"])
