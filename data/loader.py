"""Mapped unit tables (CSV/XLSX) into typed Unit lists."""

import pandas as pd
from typing import List, Optional
from models.unit import Unit
from config.defaults import (
    UNIT_NAME_COLUMN, UNIT_TYPE_COLUMN, UNIT_VIEW_COLUMN, UNIT_FLOOR_COLUMN,
    UNIT_SELL_AREA_COLUMN, UNIT_AC_AREA_COLUMN, UNIT_BALCONY_COLUMN,
)

CORE_COLUMNS = [
    UNIT_NAME_COLUMN, UNIT_TYPE_COLUMN, UNIT_VIEW_COLUMN, UNIT_FLOOR_COLUMN,
    UNIT_SELL_AREA_COLUMN, UNIT_AC_AREA_COLUMN, UNIT_BALCONY_COLUMN,
]


def _text(value) -> Optional[str]:
    if pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _number(value, default: float = 0.0) -> float:
    """Parse a numeric cell, falling back to `default` for blanks and junk."""
    if value is None:
        return default
    parsed = pd.to_numeric(value, errors="coerce")
    if pd.isna(parsed):
        return default
    return float(parsed)


def parse_units(df: pd.DataFrame) -> List[Unit]:
    """Convert a mapped units DataFrame into Unit objects.

    Columns beyond the core set become category values. Missing or malformed
    numbers become 0 rather than failing the whole table.
    """
    category_columns = [c for c in df.columns if c not in CORE_COLUMNS]
    units = []
    for _, row in df.iterrows():
        balcony = None
        if UNIT_BALCONY_COLUMN in df.columns and pd.notna(row.get(UNIT_BALCONY_COLUMN)):
            balcony = _number(row[UNIT_BALCONY_COLUMN])
        categories = {}
        for col in category_columns:
            value = _text(row[col])
            if value is not None:
                categories[col] = value
        units.append(Unit(
            name=str(row[UNIT_NAME_COLUMN]).strip(),
            bedroom_type=_text(row.get(UNIT_TYPE_COLUMN)),
            view=_text(row.get(UNIT_VIEW_COLUMN)),
            floor=max(0, int(_number(row.get(UNIT_FLOOR_COLUMN)))),
            sell_area=_number(row.get(UNIT_SELL_AREA_COLUMN)),
            ac_area=_number(row.get(UNIT_AC_AREA_COLUMN)),
            balcony_area=balcony,
            categories=categories,
        ))
    return units


def load_file(path_or_buffer, name: Optional[str] = None) -> pd.DataFrame:
    """Load a CSV or XLSX file into a DataFrame."""
    name = (name or getattr(path_or_buffer, "name", None) or str(path_or_buffer)).lower()
    if name.endswith(".csv"):
        return pd.read_csv(path_or_buffer)
    elif name.endswith(".xlsx") or name.endswith(".xls"):
        return pd.read_excel(path_or_buffer, engine="openpyxl")
    else:
        raise ValueError(f"Unsupported file format: {name}. Use CSV or XLSX.")
