"""Schema validation for mapped unit tables."""

from dataclasses import dataclass, field
from typing import List
import pandas as pd

from config.defaults import (
    UNIT_NAME_COLUMN, UNIT_TYPE_COLUMN, UNIT_FLOOR_COLUMN,
    UNIT_SELL_AREA_COLUMN, UNIT_AC_AREA_COLUMN,
)


@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


UNIT_REQUIRED_COLUMNS = [
    UNIT_NAME_COLUMN,
    UNIT_TYPE_COLUMN,
    UNIT_FLOOR_COLUMN,
    UNIT_SELL_AREA_COLUMN,
    UNIT_AC_AREA_COLUMN,
]


def _check_required_columns(df: pd.DataFrame, required: List[str], file_label: str) -> ValidationResult:
    result = ValidationResult()
    missing = [col for col in required if col not in df.columns]
    if missing:
        result.is_valid = False
        result.errors.append(f"{file_label}: Missing required columns: {', '.join(missing)}")
    if df.empty:
        result.is_valid = False
        result.errors.append(f"{file_label}: File contains no data rows.")
    return result


def validate_units(df: pd.DataFrame) -> ValidationResult:
    """Check a mapped units table.

    Blank or non-numeric areas only warn: the pricing engine prices those
    units at 0 instead of failing the batch.
    """
    result = _check_required_columns(df, UNIT_REQUIRED_COLUMNS, "Units")
    if not result.is_valid:
        return result

    for col in (UNIT_SELL_AREA_COLUMN, UNIT_AC_AREA_COLUMN):
        values = pd.to_numeric(df[col], errors="coerce")
        if (values < 0).any():
            result.is_valid = False
            result.errors.append(f"Units: {col} cannot be negative.")
        missing = int(values.isna().sum())
        if missing:
            result.warnings.append(
                f"Units: {missing} row(s) have a blank or non-numeric {col}. "
                "They will be priced at 0."
            )

    floors = pd.to_numeric(df[UNIT_FLOOR_COLUMN], errors="coerce")
    if (floors < 0).any():
        result.is_valid = False
        result.errors.append("Units: Floor cannot be negative.")

    dupes = df.duplicated(subset=[UNIT_NAME_COLUMN], keep=False)
    if dupes.any():
        result.is_valid = False
        result.errors.append(
            f"Units: Duplicate unit names: {df[dupes][UNIT_NAME_COLUMN].unique().tolist()}"
        )

    untyped = int(df[UNIT_TYPE_COLUMN].isna().sum())
    if untyped:
        result.warnings.append(
            f"Units: {untyped} row(s) have no bedroom type. The default base PSF will be used."
        )

    return result
