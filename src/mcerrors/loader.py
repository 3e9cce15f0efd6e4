"""
loader.py – column data loader
──────────────────────────────
Reads a whitespace / tab separated table of measurements (one line per
configuration, one observable per column) and returns the selected
columns as independent, read-only float64 sequences.

    a_1 b_1 c_1
    a_2 b_2 c_2
    ...

Two passes are made over the source: the first only counts lines so the
arrays can be sized, the second (after rewinding) parses them.
"""

from __future__ import annotations

import logging
import operator
import os
from itertools import islice

import numpy as np

from .exceptions import (
    InsufficientDataError,
    MalformedRowError,
    SourceUnavailableError,
    UsageError,
)

logger = logging.getLogger(__name__)


def check_selectors(selectors) -> list[int]:
    """Return selectors as a list of 1-based ints, or raise UsageError."""
    cols = []
    for c in selectors:
        try:
            c = operator.index(c)
        except TypeError:
            raise UsageError(f"Not valid column {c!r}") from None
        if c <= 0:
            raise UsageError(f"Not valid column {c}")
        cols.append(c)
    if not cols:
        raise UsageError("At least one column must be selected")
    return cols


def _check_window(skip, limit):
    for name, v in (("skip", skip), ("limit", limit)):
        try:
            v = operator.index(v)
        except TypeError:
            raise UsageError(f"{name} must be an integer, got {v!r}") from None
        if v < 0:
            raise UsageError(f"{name} must be non-negative, got {v}")
    return operator.index(skip), operator.index(limit)


def count_rows(f, skip: int = 0, limit: int = 0) -> int:
    """Number of rows available after `skip`, capped at `limit` (0 = all)."""
    seen = 0
    for _ in f:
        seen += 1
        if limit and seen >= skip + limit:
            break
    return seen - skip


def _parse(f, cols, skip, n):
    maxcol = max(cols)
    data = [np.empty(n, dtype=float) for _ in cols]

    i = -1
    for i, line in enumerate(islice(f, skip, skip + n)):
        fields = line.split()[:maxcol]
        if len(fields) < maxcol:
            raise MalformedRowError(skip + i + 1, maxcol)
        # digit separators are Python syntax, not numeric data
        if any("_" in x for x in fields):
            raise MalformedRowError(skip + i + 1, maxcol)
        try:
            row = [float(x) for x in fields]
        except ValueError:
            raise MalformedRowError(skip + i + 1, maxcol) from None
        for seq, c in zip(data, cols):
            seq[i] = row[c - 1]

    if i + 1 != n:
        raise InsufficientDataError(
            f"Source shrank while reading: expected {n} measurements, got {i + 1}")

    for seq in data:
        seq.flags.writeable = False
    return data


def _read_columns(f, cols, skip, limit):
    n = count_rows(f, skip, limit)
    if n <= 0:
        raise InsufficientDataError("No data to be read")

    logger.info("Reading in %d columns, %d measurements", len(cols), n)

    f.seek(0)
    return _parse(f, cols, skip, n)


def load(source, selectors, skip: int = 0, limit: int = 0) -> list[np.ndarray]:
    """
    Load selected columns of a measurement table.

    Parameters:
        source:    path of the data file, or an open seekable text stream
                   (streams are rewound but left open)
        selectors: 1-based column indices, in output order
        skip:      lines discarded from the beginning
        limit:     use at most this many lines after skipping (0 = all)
    Returns:
        one read-only float64 array per selector, all of equal length
    """
    cols = check_selectors(selectors)
    skip, limit = _check_window(skip, limit)

    if isinstance(source, (str, os.PathLike)):
        try:
            f = open(source, "r", encoding="utf-8", errors="surrogateescape")
        except OSError as e:
            raise SourceUnavailableError(
                f"Could not open file {os.fspath(source)}: {e.strerror}") from e
        with f:
            return _read_columns(f, cols, skip, limit)

    return _read_columns(source, cols, skip, limit)
