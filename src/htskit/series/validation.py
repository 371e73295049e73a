"""Bottom-level panel validation.

Checks raw rows against the hierarchy spec and the panel schema, normalizes
category values to strings and parses the period column. All checks run
eagerly so that a build either sees a fully valid panel or raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd

from htskit.core.config import AggregationConfig, DuplicatePolicy
from htskit.core.errors import InconsistentPanelError, SchemaError, SpecError
from htskit.hierarchy.spec import HierarchySpec
from htskit.time import TimeIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidatedPanel:
    """Bottom-level rows that passed validation.

    Attributes:
        frame: Copy of the input with category columns cast to str
        paths: Hierarchy values per row
        group_values: Group values per row
        values: Numeric value per row
        time_index: Parsed periods and each row's period position
    """

    frame: pd.DataFrame = field(repr=False)
    paths: list[tuple[str, ...]] = field(repr=False)
    group_values: list[tuple[str, ...]] = field(repr=False)
    values: np.ndarray = field(repr=False)
    time_index: TimeIndex

    @property
    def n_rows(self) -> int:
        return len(self.frame)


def validate_panel(
    data: Any,
    spec: HierarchySpec,
    time_col: str,
    value_col: str,
    config: AggregationConfig | None = None,
) -> ValidatedPanel:
    """Validate bottom-level rows for an engine run.

    Args:
        data: DataFrame, or list of dicts / dict of lists / object with to_pandas()
        spec: Hierarchy and group columns
        time_col: Column holding period strings
        value_col: Column holding numeric values
        config: Labelling options (separator and aggregated marker are reserved)

    Returns:
        ValidatedPanel

    Raises:
        SpecError: Bad time/value column names or spec columns missing from data
        SchemaError: Missing time/value column, nulls, non-numeric or NaN values
        TimeParseError: Malformed or mixed-frequency periods
    """
    config = config or AggregationConfig()

    df = _convert_to_dataframe(data)
    if df is None:
        raise SchemaError(
            "Data must be a DataFrame or convertible to DataFrame",
            context={"type": type(data).__name__},
        )

    _validate_column_roles(spec, time_col, value_col)
    spec.validate_against(df.columns)

    missing = [c for c in (time_col, value_col) if c not in df.columns]
    if missing:
        raise SchemaError(
            f"Missing required columns: {missing}",
            context={"missing": missing, "available": sorted(map(str, df.columns))},
        )

    if len(df) == 0:
        raise SchemaError("Bottom-level data is empty")

    _validate_no_nulls(df, list(spec.columns) + [time_col])
    for col in spec.columns:
        _validate_label_mapping(df, col)
        df[col] = df[col].astype(str)
        _validate_category_values(df, col, config)

    values = _validate_values(df, value_col)
    time_index = TimeIndex.from_values(df[time_col].tolist())

    return ValidatedPanel(
        frame=df,
        paths=_row_tuples(df, spec.hierarchy),
        group_values=_row_tuples(df, spec.groups),
        values=values,
        time_index=time_index,
    )


def validate_unique_periods(
    row_series: np.ndarray,
    time_index: TimeIndex,
    series_labels: list[str],
    policy: DuplicatePolicy = "reject",
) -> int:
    """Check that no bottom series reports a period more than once.

    Returns:
        Number of duplicated rows (summed when policy is 'sum')

    Raises:
        InconsistentPanelError: If duplicates exist and policy is 'reject'
    """
    keys = pd.DataFrame({"series": row_series, "period": time_index.positions})
    duplicates = keys.duplicated(keep=False)
    if not duplicates.any():
        return 0

    n_duplicates = int(duplicates.sum())
    dup_keys = keys[duplicates].drop_duplicates()
    if policy == "reject":
        period_labels = time_index.labels
        raise InconsistentPanelError(
            f"Found {len(dup_keys)} (series, period) pairs reported more than once",
            context={
                "num_duplicates": n_duplicates,
                "duplicate_keys": [
                    {"series": series_labels[s], "period": period_labels[p]}
                    for s, p in dup_keys.head(10).itertuples(index=False)
                ],
            },
        )

    logger.warning(
        "Summing %d duplicate rows over %d (series, period) pairs",
        n_duplicates,
        len(dup_keys),
    )
    return n_duplicates


def _convert_to_dataframe(data: Any) -> pd.DataFrame | None:
    if isinstance(data, pd.DataFrame):
        return data.copy()

    try:
        if hasattr(data, "to_pandas"):
            return data.to_pandas()
        if isinstance(data, (dict, list)):
            return pd.DataFrame(data)
    except (TypeError, ValueError):
        logger.debug("Could not convert %s to DataFrame", type(data).__name__)

    return None


def _validate_column_roles(spec: HierarchySpec, time_col: str, value_col: str) -> None:
    for role, name in (("time", time_col), ("value", value_col)):
        if not isinstance(name, str) or not name.strip():
            raise SpecError(f"The {role} column name must be a non-empty string")
        if name in spec.columns:
            raise SpecError(
                f"The {role} column '{name}' is also a hierarchy or group column",
                context={"column": name},
            )
    if time_col == value_col:
        raise SpecError("Time and value columns must differ", context={"column": time_col})


def _validate_no_nulls(df: pd.DataFrame, columns: list[str]) -> None:
    null_counts = {col: int(df[col].isna().sum()) for col in columns}
    null_counts = {col: n for col, n in null_counts.items() if n > 0}
    if null_counts:
        raise SchemaError(
            f"Null values in required columns: {sorted(null_counts)}",
            context={"null_counts": null_counts},
            fix_hint="Remove or fill null values in category and time columns",
        )


def _validate_label_mapping(df: pd.DataFrame, col: str) -> None:
    # Distinct raw values must stay distinct as strings, and vice versa (1 vs "1", 1 vs 1.0)
    values = df[col]
    if not pd.api.types.is_object_dtype(values):
        return

    pairs = pd.DataFrame({"raw": values, "label": values.astype(str)}).drop_duplicates()
    label_counts = pairs["label"].value_counts()
    raw_counts = pairs.groupby("raw", sort=False)["label"].nunique()
    merged = label_counts[label_counts > 1].index.tolist()
    split = [str(v) for v in raw_counts[raw_counts > 1].index]
    if merged or split:
        raise SchemaError(
            f"Column '{col}' mixes value types that render to the same label",
            context={"column": col, "labels": (merged or split)[:5]},
            fix_hint=f"Cast '{col}' to a single type before building",
        )


def _validate_category_values(df: pd.DataFrame, col: str, config: AggregationConfig) -> None:
    values = df[col]
    empty = values.str.strip() == ""
    if empty.any():
        raise SchemaError(
            f"Column '{col}' has {int(empty.sum())} empty category values",
            context={"column": col},
        )

    with_separator = values.str.contains(config.separator, regex=False)
    if with_separator.any():
        raise SchemaError(
            f"Column '{col}' has values containing the label separator '{config.separator}'",
            context={
                "column": col,
                "examples": values[with_separator].unique()[:5].tolist(),
            },
            fix_hint="Replace the character in the data or pass AggregationConfig(separator=...)",
        )

    if (values == config.aggregated_marker).any():
        raise SchemaError(
            f"Column '{col}' uses the reserved aggregated marker '{config.aggregated_marker}'",
            context={"column": col},
            fix_hint="Pass AggregationConfig(aggregated_marker=...) with an unused placeholder",
        )


def _validate_values(df: pd.DataFrame, value_col: str) -> np.ndarray:
    column = df[value_col]
    if pd.api.types.is_bool_dtype(column) or not pd.api.types.is_numeric_dtype(column):
        raise SchemaError(
            f"Column '{value_col}' must be numeric",
            context={"column": value_col, "actual_type": str(column.dtype)},
        )

    values = column.to_numpy(dtype=float, na_value=np.nan)
    missing = np.isnan(values)
    if missing.any():
        raise SchemaError(
            f"Column '{value_col}' has {int(missing.sum())} missing values",
            context={"column": value_col, "rows": np.flatnonzero(missing)[:10].tolist()},
            fix_hint="Drop or fill missing values before building; absent rows are zero-filled",
        )
    return values


def _row_tuples(df: pd.DataFrame, columns: tuple[str, ...]) -> list[tuple[str, ...]]:
    if not columns:
        return [()] * len(df)
    return list(zip(*(df[col].tolist() for col in columns)))


__all__ = ["ValidatedPanel", "validate_panel", "validate_unique_periods"]
