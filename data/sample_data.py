"""Generate a synthetic tower dataset and matching pricing configuration."""

import os
import random

import pandas as pd

from models.pricing import (
    BalconyPricing, BedroomTypePricing, FloorRiseRule, PricingConfiguration, ViewPricing,
)

# (type, sell area range, AC share of sell area)
UNIT_MIX = [
    ("Studio", (420, 480), 0.92),
    ("1 Bed", (700, 820), 0.88),
    ("2 Bed", (1100, 1300), 0.86),
    ("3 Bed", (1550, 1800), 0.85),
]

VIEWS = ["Sea", "City", "Pool"]


def generate_units_df(floors: int = 20, seed: int = 42) -> pd.DataFrame:
    """Generate one unit of each type per floor, with a random view."""
    rng = random.Random(seed)
    rows = []
    for floor in range(1, floors + 1):
        for idx, (bedroom_type, (low, high), ac_share) in enumerate(UNIT_MIX, start=1):
            sell_area = round(rng.uniform(low, high), 1)
            rows.append({
                "Unit Name": f"{floor:02d}{idx:02d}",
                "Type": bedroom_type,
                "View": rng.choice(VIEWS),
                "Floor": floor,
                "Sell Area": sell_area,
                "AC Area": round(sell_area * ac_share, 1),
                "Furnishing": rng.choice(["Furnished", "Unfurnished"]),
            })
    return pd.DataFrame(rows)


def sample_pricing_config() -> PricingConfiguration:
    """A pricing configuration matching `generate_units_df`."""
    return PricingConfiguration(
        base_psf=1500.0,
        bedroom_type_pricing=[
            BedroomTypePricing("Studio", 1800.0, 1900.0),
            BedroomTypePricing("1 Bed", 1650.0, 1750.0),
            BedroomTypePricing("2 Bed", 1550.0, 1650.0),
            BedroomTypePricing("3 Bed", 1500.0, 1600.0),
        ],
        view_pricing=[
            ViewPricing("Sea", 150.0),
            ViewPricing("City", 50.0),
            ViewPricing("Pool", 0.0),
        ],
        floor_rise_rules=[
            FloorRiseRule(1, 10, 10.0),
            FloorRiseRule(11, None, 15.0, jump_every_floor=5, jump_increment=50.0),
        ],
        balcony_pricing=BalconyPricing(full_area_pct=50.0, remainder_rate=20.0),
    )


def generate_sample_csv(output_dir: str):
    """Write the sample units table to the given directory."""
    os.makedirs(output_dir, exist_ok=True)
    generate_units_df().to_csv(os.path.join(output_dir, "units.csv"), index=False)


if __name__ == "__main__":
    out = os.path.join(os.path.dirname(__file__), "..", "sample_files")
    generate_sample_csv(out)
    print("Sample units CSV generated in sample_files/")
