"""Quick PNG of the autocorrelation function, one curve per column."""

from pathlib import Path

import matplotlib
matplotlib.use("Agg")  # headless
import matplotlib.pyplot as plt

from .exceptions import SourceUnavailableError


def plot_autocorrelation(curves, path):
    """
    curves: {column: [(lag, C(lag)), ...]}
    Saves the figure to `path` and returns it as a Path.
    """
    p = Path(path)
    fig = plt.figure()
    ax = fig.add_subplot(111)
    for col, points in curves.items():
        lags = [t for t, _ in points]
        rho = [c for _, c in points]
        ax.plot(lags, rho, marker="o", markersize=3, label=f"col {col}")
    ax.axhline(0.0, color="grey", linewidth=0.8)
    ax.set_xlabel("lag t")
    ax.set_ylabel("C(t)")
    ax.set_title("normalised autocorrelation function")
    ax.legend()
    try:
        fig.savefig(p, bbox_inches="tight", dpi=150)
    except OSError as e:
        raise SourceUnavailableError(f"Could not write plot {p}: {e.strerror}") from e
    finally:
        plt.close(fig)
    return p
