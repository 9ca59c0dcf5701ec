"""
Delimited-table ingestion for dimensional clustering.

Reads a header-led, delimiter-separated export, selects the configured
identifier / width / height columns (1-based), and groups the rows into
units per composite identifier.

Rules:
- Identifier = identifier column values joined with ","
- Width and height accept "." or "," as decimal separator
- Groups keep first-seen identifier order; units keep record order
- Blank lines are skipped; reported rows are file line numbers
- The first malformed record aborts ingestion with IngestionError
"""

from __future__ import annotations

import logging
import warnings
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ..errors import IngestionError
from ..spatial.tolerance import Unit

logger = logging.getLogger(__name__)

# Data records start on line 2; line 1 is the header.
_FIRST_DATA_ROW = 2


def parse_column_list(columns_arg: Union[str, Sequence[int]]) -> List[int]:
    """
    Parse a comma-separated list of 1-based column indices.

    >>> parse_column_list("1, 5")
    [1, 5]
    """
    if isinstance(columns_arg, str):
        parts = [p.strip() for p in columns_arg.split(",") if p.strip()]
    else:
        parts = list(columns_arg)

    if not parts:
        raise ValueError("At least one column index is required")

    columns: List[int] = []
    for part in parts:
        try:
            index = int(part)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid column index: {part!r}") from None
        if index < 1:
            raise ValueError(f"Column indices are 1-based, got {index}")
        columns.append(index)
    return columns


def _read_table(path: Union[str, Path], delimiter: str) -> pd.DataFrame:
    """
    Read the raw table with one row per file line after the header.

    Blank lines are kept as all-missing rows and dropped by the caller, so the
    index stays aligned with file lines.
    """
    try:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", pd.errors.ParserWarning)
            frame = pd.read_csv(
                path,
                sep=delimiter,
                header=0,
                dtype=str,
                keep_default_na=False,
                index_col=False,
                skip_blank_lines=False,
            )
    except pd.errors.EmptyDataError:
        logger.warning("Input %s is empty", path)
        return pd.DataFrame()
    except pd.errors.ParserError as e:
        raise IngestionError(f"Cannot parse {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise IngestionError(f"Cannot read {path}: {e}") from e

    # index_col=False truncates over-long records with only a warning
    if any(issubclass(w.category, pd.errors.ParserWarning) for w in caught):
        raise IngestionError(f"Cannot parse {path}: a record has more fields than the header")
    return frame


def _blank_lines(frame: pd.DataFrame) -> pd.Series:
    """Rows read from empty or whitespace-only lines."""
    first = frame.iloc[:, 0].fillna("").astype(str).str.strip().eq("")
    if frame.shape[1] == 1:
        return first
    return first & frame.iloc[:, 1:].isna().all(axis=1)


def _column(frame: pd.DataFrame, index: int) -> pd.Series:
    """1-based column, or an all-missing series when the table is too narrow."""
    if index > frame.shape[1]:
        return pd.Series([np.nan] * len(frame), index=frame.index, dtype=object)
    return frame.iloc[:, index - 1]


def _parse_dimension(raw: pd.Series) -> pd.Series:
    cleaned = raw.astype(object).map(lambda v: v.strip().replace(",", ".") if isinstance(v, str) else v)
    return pd.to_numeric(cleaned, errors="coerce").astype(float)


def _first_bad(mask: pd.Series) -> Optional[int]:
    positions = np.flatnonzero(mask.to_numpy(dtype=bool))
    return int(positions[0]) if len(positions) else None


def _describe_dimension(raw: object, value: float) -> str:
    if pd.isna(raw):
        return "Missing column"
    if np.isnan(value):
        return "Unparsable numeric field"
    if not np.isfinite(value):
        return "Non-finite numeric field"
    return "Negative dimension"


def read_groups(
    path: Union[str, Path],
    *,
    identifier_columns: Sequence[int],
    width_column: int,
    height_column: int,
    delimiter: str = ";",
) -> Dict[str, List[Unit]]:
    """
    Read ``path`` and group its records by composite identifier.

    Args:
        path: Input table (first line is a header)
        identifier_columns: 1-based columns forming the identifier
        width_column: 1-based column holding the width
        height_column: 1-based column holding the height (length)
        delimiter: Field separator

    Returns:
        Mapping identifier -> units in record order

    Raises:
        IngestionError: On the first malformed record (row, column and raw
            value are attached) or when the file cannot be read
    """
    identifier_columns = parse_column_list(identifier_columns)
    width_column, height_column = parse_column_list([width_column, height_column])

    frame = _read_table(path, delimiter)
    if not frame.empty:
        # index keeps the file line offset of every surviving record
        frame = frame.loc[~_blank_lines(frame)]
    if frame.empty:
        return {}

    # (position, check order, column, raw value, message)
    problems: List[Tuple[int, int, int, object, str]] = []

    id_values = []
    for order, col in enumerate(identifier_columns):
        raw = _column(frame, col)
        pos = _first_bad(raw.isna())
        if pos is not None:
            problems.append((pos, order, col, None, "Missing column"))
        id_values.append(raw.fillna("").astype(str))

    dimensions = {}
    for order, col in enumerate((width_column, height_column), start=len(identifier_columns)):
        raw = _column(frame, col)
        values = _parse_dimension(raw)
        bad = raw.isna() | ~np.isfinite(values) | (values < 0)
        pos = _first_bad(bad)
        if pos is not None:
            raw_value = raw.iloc[pos]
            problems.append((
                pos, order, col,
                None if pd.isna(raw_value) else str(raw_value),
                _describe_dimension(raw_value, float(values.iloc[pos])),
            ))
        dimensions[col] = values

    if problems:
        pos, _, col, value, message = min(problems, key=lambda p: (p[0], p[1]))
        row = int(frame.index[pos]) + _FIRST_DATA_ROW
        raise IngestionError(message, row=row, column=col, value=value)

    records = pd.DataFrame({
        "identifier": pd.concat(id_values, axis=1).apply(",".join, axis=1),
        "width": dimensions[width_column],
        "height": dimensions[height_column],
    })

    groups: Dict[str, List[Unit]] = {}
    for identifier, sub in records.groupby("identifier", sort=False):
        groups[identifier] = [
            Unit(width=float(w), height=float(h))
            for w, h in zip(sub["width"], sub["height"])
        ]

    logger.info("Read %d records into %d groups from %s", len(records), len(groups), path)
    return groups
