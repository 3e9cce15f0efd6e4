"""
estimators.py – mean / error / autocorrelation of one measurement series
────────────────────────────────────────────────────────────────────────
* estimate()                  naive or tau_int-corrected standard error
* block_estimate()            error from averages of consecutive blocks
* block_scan()                block_estimate() over a ladder of block sizes
* autocorrelation_function()  normalised C(t) for t = 0 .. max_lag

All functions are pure: the input series is never modified.

Integrated autocorrelation time

    tau_int = 0.5 + sum_{t=1}^{W} C(t) (N-t)/N

where the window W is cut self-consistently: the sum stops at the first
t with t >= 6 tau_int (running value) or t >= N/2, and

    C(t) = [ <x_i x_{i+t}> - <x_i> <x_{i+t}> ] / <(x - <x>)^2>

with the averages in the numerator taken over the N-t overlapping pairs.
"""

from __future__ import annotations

import logging
import math
import operator
import warnings
from dataclasses import dataclass
from typing import Iterator, Optional

import numpy as np

from . import min_blocks, tint_stop_factor
from .exceptions import InsufficientDataError, UnresolvedAutocorrelationWarning, UsageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ErrorEstimate:
    mean: float
    error: float
    tint: Optional[float] = None     # None for the naive estimate
    converged: bool = True           # False: window hit N/2 before 6*tau_int


@dataclass(frozen=True)
class BlockEstimate:
    mean: float
    error: float
    block_size: int
    n_blocks: int


# ── helpers ─────────────────────────────────────────────────────────
def _as_series(seq) -> np.ndarray:
    x = np.asarray(seq, dtype=float)
    if x.ndim != 1:
        raise UsageError(f"expected a 1-D series, got shape {x.shape}")
    return x


def _moments(x):
    """Mean and biased (1/N) variance."""
    # constant series: exact zero, not rounding noise of the mean
    if np.all(x == x[0]):
        return float(x[0]), 0.0
    mean = x.mean()
    var = np.mean((x - mean)**2)
    return float(mean), float(var)


def autocorrelation(seq, lag: int, variance: Optional[float] = None) -> float:
    """
    Normalised autocorrelation of `seq` at `lag`.

    The numerator uses the means of the two overlapping windows
    x[0:N-lag] and x[lag:N]; `variance` is the biased variance of the
    full series (computed when not given). A constant series has
    variance 0 and its autocorrelation is defined as 0.
    """
    x = _as_series(seq)
    n = len(x)
    lag = operator.index(lag)
    if not 0 <= lag < n:
        raise UsageError(f"lag must be in [0, {n}), got {lag}")
    if variance is None:
        variance = _moments(x)[1]
    if variance == 0.0:
        return 0.0

    nc = n - lag
    a, b = x[:nc], x[lag:]
    c = np.dot(a, b) / nc - a.mean() * b.mean()
    return float(c / variance)


# ── naive / autocorrelation-corrected error ─────────────────────────
def estimate(seq, use_autocorrelation: bool = True) -> ErrorEstimate:
    """
    Average, standard error and (optionally) tau_int of one series.

    With use_autocorrelation=False the naive error sqrt(var/(N-1)) is
    returned and tint is None. Otherwise the error is
    sqrt(2 |tau_int| var/(N-1)). When the summation window reaches N/2
    an UnresolvedAutocorrelationWarning is issued and the result is
    returned with converged=False.
    """
    x = _as_series(seq)
    n = len(x)
    if n < 2:
        raise InsufficientDataError(f"need at least 2 measurements, got {n}")

    mean, var = _moments(x)

    if not use_autocorrelation:
        return ErrorEstimate(mean, math.sqrt(var / (n - 1)))

    if n < 3:
        raise InsufficientDataError(
            f"need at least 3 measurements for autocorrelations, got {n}")

    tint = 0.5
    lag = 1
    while lag < tint_stop_factor * tint and lag < n // 2:
        tint += autocorrelation(x, lag, var) * (n - lag) / n
        lag += 1

    converged = lag < n // 2
    if not converged:
        warnings.warn(
            f"correlation > N/2*{tint_stop_factor}: tau_int = {tint:.4g} "
            f"not resolved within {n // 2} lags",
            UnresolvedAutocorrelationWarning, stacklevel=2)
    logger.debug("tau_int = %.6g, window %d lags", tint, lag - 1)

    # abs(): tau_int can go negative on anti-correlated data
    error = math.sqrt(2 * abs(tint) * var / (n - 1))
    return ErrorEstimate(mean, error, tint, converged)


# ── blocking ────────────────────────────────────────────────────────
def block_estimate(seq, block_size: int) -> BlockEstimate:
    """
    Average and error from the means of consecutive blocks.

    The series is cut into N // block_size blocks; a remainder at the end
    is not used. Block means are treated as independent measurements,
    so block_size has to exceed the correlation length.
    """
    x = _as_series(seq)
    block_size = operator.index(block_size)
    if block_size <= 0:
        raise UsageError(f"block size must be positive, got {block_size}")

    m = len(x) // block_size
    if m < min_blocks:
        raise InsufficientDataError(
            f"{len(x)} measurements give {m} block(s) of length {block_size}, "
            f"need at least {min_blocks}")

    blocks = x[:m * block_size].reshape(m, block_size).mean(axis=1)
    mean = blocks.mean()
    error = math.sqrt(np.sum((blocks - mean)**2) / (m * (m - 1)))
    return BlockEstimate(float(mean), error, block_size, m)


def block_scan(seq, sizes=None) -> list[BlockEstimate]:
    """block_estimate() for each size (default 1, 2, 4, ...); sizes leaving
    fewer than two blocks are skipped."""
    x = _as_series(seq)
    if sizes is None:
        sizes = []
        b = 1
        while len(x) // b >= min_blocks:
            sizes.append(b)
            b *= 2

    out = []
    for b in sizes:
        b = operator.index(b)
        if b > 0 and len(x) // b < min_blocks:
            continue
        out.append(block_estimate(x, b))
    return out


# ── autocorrelation function ────────────────────────────────────────
def _acf(x, bound, var):
    for lag in range(bound + 1):
        yield lag, autocorrelation(x, lag, var)


def autocorrelation_function(seq, max_lag: int) -> Iterator[tuple[int, float]]:
    """
    Lazily yield (lag, C(lag)) for lag = 0 .. min(max_lag, N//2 - 1).

    C(0) is 1 up to rounding for any non-constant series.
    """
    x = _as_series(seq)
    max_lag = operator.index(max_lag)
    if max_lag < 0:
        raise UsageError(f"max lag must be non-negative, got {max_lag}")
    n = len(x)
    if n < 2:
        raise InsufficientDataError(f"need at least 2 measurements, got {n}")

    _, var = _moments(x)
    return _acf(x, min(max_lag, n // 2 - 1), var)
