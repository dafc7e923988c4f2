"""
Metric Processor - Turns tabular/time-series frames into named numeric series.

Frames are pandas DataFrames. Two optional frame attributes are read:
``frame.attrs["ref_id"]`` (the originating query id) and
``frame.attrs["name"]``.

Two layouts are recognised:
- Pivoted: a column literally named ``metric``/``Metric`` holds the series
  key for each row; every numeric column is split into one series per key.
- Wide: every numeric column is its own series, named after the column.
"""

import logging
import math
from typing import Callable, Iterable

import numpy as np
import pandas as pd

from flowrules.core.domain.metric import ProcessedMetric
from flowrules.core.services.patterns import PatternCache, match_pattern

logger = logging.getLogger(__name__)

DISCRIMINATOR_COLUMNS = ("metric", "Metric")
TIME_COLUMN_NAMES = ("time", "timestamp")


def process_frames(
    frames: Iterable[pd.DataFrame],
    default_aggregation: str = "current",
) -> list[ProcessedMetric]:
    """
    Process all frames into ProcessedMetric objects.

    Unparseable cells are dropped and series without a single valid value
    are omitted; neither is an error.

    Args:
        frames: Input frames, in query order
        default_aggregation: Aggregation used for ``aggregated_value``

    Returns:
        Flat list of metrics, in frame then column order
    """
    metrics: list[ProcessedMetric] = []

    for frame in frames:
        ref_id = str(frame.attrs.get("ref_id") or frame.attrs.get("refId") or "")
        frame_name = str(frame.attrs.get("name") or "")

        time_columns = [c for c in frame.columns if pd.api.types.is_datetime64_any_dtype(frame[c])]
        timestamps = _epoch_ms(frame[time_columns[0]]) if time_columns else []

        discriminator = next((c for c in DISCRIMINATOR_COLUMNS if c in frame.columns), None)

        for column in frame.columns:
            if column in time_columns or column == discriminator:
                continue

            clean_name = _clean_column_name(column)
            if clean_name.lower() in TIME_COLUMN_NAMES:
                continue

            numeric = _numeric_cells(frame[column])
            if numeric is None:
                continue

            if discriminator is not None:
                metrics.extend(_pivoted_metrics(
                    numeric, frame[discriminator], timestamps,
                    ref_id=ref_id, field_name=str(column), aggregation=default_aggregation,
                ))
                continue

            values, series_ts = _valid_points(list(enumerate(numeric)), timestamps)
            if not values:
                continue

            name = clean_name or frame_name or ref_id
            metrics.append(_build_metric(
                name=name, ref_id=ref_id, values=values, timestamps=series_ts,
                aggregation=default_aggregation, field_name=str(column), column_name=name,
            ))

    logger.debug(f"Processed {len(metrics)} metrics")
    return metrics


def _pivoted_metrics(
    numeric: list[float],
    keys: pd.Series,
    timestamps: list[int | None],
    ref_id: str,
    field_name: str,
    aggregation: str,
) -> list[ProcessedMetric]:
    """Split one column into a metric per discriminator value, first-seen order."""
    grouped: dict[str, list[tuple[int, float]]] = {}
    for row, (key, value) in enumerate(zip(keys, numeric)):
        if key is None or (not isinstance(key, str) and pd.isna(key)):
            continue
        key = str(key)
        if not key:
            continue
        grouped.setdefault(key, []).append((row, value))

    result = []
    for key, points in grouped.items():
        values, series_ts = _valid_points(points, timestamps)
        if not values:
            continue
        result.append(_build_metric(
            name=key, ref_id=ref_id, values=values, timestamps=series_ts,
            aggregation=aggregation, field_name=field_name, column_name=key,
        ))
    return result


def _build_metric(
    name: str,
    ref_id: str,
    values: list[float],
    timestamps: list[int],
    aggregation: str,
    field_name: str,
    column_name: str,
) -> ProcessedMetric:
    return ProcessedMetric(
        name=name,
        source_id=ref_id,
        values=values,
        timestamps=timestamps,
        last_value=values[-1],
        aggregated_value=aggregate(values, aggregation),
        aggregation=aggregation,
        field_name=field_name,
        column_name=column_name,
    )


def _valid_points(
    points: list[tuple[int, float]],
    timestamps: list[int | None],
) -> tuple[list[float], list[int]]:
    """
    Keep finite values and their row timestamps.

    If any kept row has no timestamp the series carries no timestamps at all,
    so values and timestamps never drift out of alignment.
    """
    kept = [(row, value) for row, value in points if math.isfinite(value)]
    values = [value for _, value in kept]
    if not timestamps:
        return values, []
    series_ts = [timestamps[row] if row < len(timestamps) else None for row, _ in kept]
    if any(ts is None for ts in series_ts):
        return values, []
    return values, series_ts


def _numeric_cells(column: pd.Series) -> list[float] | None:
    """
    Column cells as floats, NaN where a cell is missing or unparseable.

    Returns None for columns that never carry numbers (booleans, datetimes).
    """
    if pd.api.types.is_bool_dtype(column) or pd.api.types.is_datetime64_any_dtype(column):
        return None
    if pd.api.types.is_numeric_dtype(column):
        numeric = column.astype(float)
    else:
        # CSV-style sources deliver numbers as strings
        numeric = pd.to_numeric(column.map(_strip_cell), errors="coerce").astype(float)
    return numeric.tolist()


def _strip_cell(cell):
    if isinstance(cell, str):
        return cell.strip() or None
    if isinstance(cell, bool):
        return None
    return cell


def _epoch_ms(column: pd.Series) -> list[int | None]:
    return [None if pd.isna(t) else int(pd.Timestamp(t).timestamp() * 1000) for t in column]


def _clean_column_name(name) -> str:
    return str(name).replace('"', "").replace("\ufeff", "").strip()


def aggregate(values: list[float], kind: str) -> float:
    """
    Reduce a list of values to a single number.

    Unknown kinds fall back to the last value; an empty list gives 0.
    """
    if not values:
        return 0

    if kind in ("current", "last"):
        return values[-1]
    if kind == "first":
        return values[0]
    if kind == "min":
        return min(values)
    if kind == "max":
        return max(values)
    if kind == "avg":
        return float(np.mean(values))
    if kind == "sum":
        return float(np.sum(values))
    if kind == "count":
        return len(values)
    if kind in ("delta", "diff"):
        return values[-1] - values[0]
    if kind == "range":
        return max(values) - min(values)
    return values[-1]


def find_matching_metrics(
    metrics: list[ProcessedMetric],
    alias: str,
    resolve_host_variable: Callable[[str], str],
    column: str | None = None,
    cache: PatternCache | None = None,
) -> list[ProcessedMetric]:
    """
    Select the metrics a rule applies to.

    A column filter (exact match on ``column_name`` or ``name``) wins when it
    finds anything. Otherwise the alias pattern is matched against the metric
    name, falling back to its source id.
    """
    if column:
        resolved_column = resolve_host_variable(column)
        by_column = [m for m in metrics if m.column_name == resolved_column or m.name == resolved_column]
        if by_column:
            return by_column
        logger.debug(f"Column filter '{resolved_column}' matched no metric, falling back to alias")

    if not alias:
        return list(metrics)

    resolved = resolve_host_variable(alias)
    return [
        m for m in metrics
        if match_pattern(m.name, resolved, cache) or match_pattern(m.source_id, resolved, cache)
    ]
