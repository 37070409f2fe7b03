"""
Bar Data Validators
===================
Validation of OHLCV bar history before it is handed to the classifier.

Checks:
1. Required columns exist (open, high, low, close; volume optional)
2. Numeric, finite prices (small gaps forward-filled, the rest dropped)
3. Strictly positive prices (the label rule divides by price)
4. OHLC relationship: low <= open/close <= high
5. Chronological order and duplicate timestamps when a timestamp is present

Usage:
    from lorentzian_bot.data.validators import validate_ohlc

    df_clean, result = validate_ohlc(df)
    print(result.summary())
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd


logger = logging.getLogger("lorentzian_bot.data.validators")

PRICE_COLUMNS = ["open", "high", "low", "close"]

# Forward-fill price gaps only while they stay below this share of rows
MAX_FILLABLE_NULL_PCT = 5.0


class ValidationError(Exception):
    """Base exception for validation errors."""
    pass


class OHLCValidationError(ValidationError):
    """Raised when bar data cannot be used."""
    pass


class Severity(Enum):
    """Issue severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class ValidationIssue:
    """Represents a single validation issue found in data."""
    severity: Severity
    field: str
    message: str
    auto_fixed: bool = False

    def __str__(self) -> str:
        fixed = " (auto-fixed)" if self.auto_fixed else ""
        return f"{self.severity.value.upper()} {self.field}: {self.message}{fixed}"


@dataclass
class ValidationResult:
    """Result of validation operation."""
    is_valid: bool
    issues: List[ValidationIssue] = field(default_factory=list)
    rows_removed: int = 0
    rows_fixed: int = 0

    @property
    def has_errors(self) -> bool:
        return any(i.severity == Severity.ERROR for i in self.issues)

    def summary(self) -> str:
        """Generate human-readable summary."""
        error_count = sum(1 for i in self.issues if i.severity == Severity.ERROR)
        warning_count = sum(1 for i in self.issues if i.severity == Severity.WARNING)
        return (
            f"Valid: {self.is_valid} | "
            f"Errors: {error_count} | Warnings: {warning_count} | "
            f"Rows fixed: {self.rows_fixed} | Rows removed: {self.rows_removed}"
        )


def validate_ohlc(
    df: pd.DataFrame,
    auto_fix: bool = True,
    timestamp_column: Optional[str] = "timestamp",
) -> Tuple[pd.DataFrame, ValidationResult]:
    """
    Validate and optionally fix an OHLC(V) DataFrame.

    Args:
        df: DataFrame with OHLC data
        auto_fix: If True, attempt to fix minor issues
        timestamp_column: Column used for ordering, if present

    Returns:
        Tuple of (cleaned DataFrame with a fresh RangeIndex, ValidationResult)

    Raises:
        OHLCValidationError: Required columns missing or no usable rows left
    """
    issues: List[ValidationIssue] = []
    rows_removed = 0
    rows_fixed = 0

    df = df.copy()
    df.columns = [str(c).strip().lower() for c in df.columns]

    missing_columns = set(PRICE_COLUMNS) - set(df.columns)
    if missing_columns:
        raise OHLCValidationError(
            f"Missing required columns: {sorted(missing_columns)}. "
            f"Available columns: {list(df.columns)}"
        )

    if df.empty:
        raise OHLCValidationError("Empty DataFrame provided")

    # Numeric conversion
    numeric_columns = PRICE_COLUMNS + (["volume"] if "volume" in df.columns else [])
    for col in numeric_columns:
        if not pd.api.types.is_numeric_dtype(df[col]):
            df[col] = pd.to_numeric(df[col], errors="coerce")
            issues.append(ValidationIssue(
                severity=Severity.INFO,
                field=col,
                message=f"Converted {col} to numeric",
                auto_fixed=True,
            ))
        df[col] = df[col].replace([np.inf, -np.inf], np.nan)

    # Chronological order
    if timestamp_column and timestamp_column in df.columns:
        df[timestamp_column] = pd.to_datetime(df[timestamp_column])
        duplicates = df.duplicated(subset=[timestamp_column], keep="first")
        if duplicates.any():
            count = int(duplicates.sum())
            df = df[~duplicates]
            rows_removed += count
            issues.append(ValidationIssue(
                severity=Severity.WARNING,
                field=timestamp_column,
                message=f"Removed {count} duplicate timestamps",
                auto_fixed=True,
            ))
        if not df[timestamp_column].is_monotonic_increasing:
            df = df.sort_values(timestamp_column)
            issues.append(ValidationIssue(
                severity=Severity.WARNING,
                field=timestamp_column,
                message="Sorted timestamps to ensure chronological order",
                auto_fixed=True,
            ))

    # Missing prices
    for col in PRICE_COLUMNS:
        count = int(df[col].isna().sum())
        if count == 0:
            continue
        null_pct = count / len(df) * 100
        if auto_fix and null_pct < MAX_FILLABLE_NULL_PCT:
            df[col] = df[col].ffill().bfill()
            rows_fixed += count
            issues.append(ValidationIssue(
                severity=Severity.WARNING,
                field=col,
                message=f"Forward-filled {count} null {col} values",
                auto_fixed=True,
            ))
        else:
            before_len = len(df)
            df = df.dropna(subset=[col])
            rows_removed += before_len - len(df)
            issues.append(ValidationIssue(
                severity=Severity.ERROR,
                field=col,
                message=f"Removed {before_len - len(df)} rows with null {col} ({null_pct:.1f}% nulls)",
            ))

    # Non-positive prices
    non_positive = (df[PRICE_COLUMNS] <= 0).any(axis=1)
    if non_positive.any():
        count = int(non_positive.sum())
        df = df[~non_positive]
        rows_removed += count
        issues.append(ValidationIssue(
            severity=Severity.ERROR,
            field="price",
            message=f"Removed {count} rows with non-positive prices",
        ))

    # OHLC relationships
    invalid_high = df["high"] < df[["open", "low", "close"]].max(axis=1)
    invalid_low = df["low"] > df[["open", "high", "close"]].min(axis=1)
    for name, mask, fix in (
        ("high", invalid_high, lambda frame: frame[PRICE_COLUMNS].max(axis=1)),
        ("low", invalid_low, lambda frame: frame[PRICE_COLUMNS].min(axis=1)),
    ):
        if not mask.any():
            continue
        count = int(mask.sum())
        if auto_fix:
            df.loc[mask, name] = fix(df.loc[mask])
            rows_fixed += count
            issues.append(ValidationIssue(
                severity=Severity.WARNING,
                field=name,
                message=f"Fixed {count} rows with inconsistent {name}",
                auto_fixed=True,
            ))
        else:
            issues.append(ValidationIssue(
                severity=Severity.ERROR,
                field=name,
                message=f"{count} rows with inconsistent {name}",
            ))

    if "volume" in df.columns:
        df["volume"] = df["volume"].fillna(0).abs()

    if df.empty:
        raise OHLCValidationError("No usable rows left after validation")

    df = df.reset_index(drop=True)

    result = ValidationResult(
        is_valid=not any(i.severity == Severity.ERROR for i in issues),
        issues=issues,
        rows_removed=rows_removed,
        rows_fixed=rows_fixed,
    )
    logger.info("OHLC validation: %s", result.summary())

    return df, result
