"""
cli.py – `mcerrors` command line
────────────────────────────────
Reads a measurement file and prints average, error and autocorrelation
time of the selected columns.

Examples
--------
    mcerrors -c 3 meas
        average, error and tau_int of column 3
    mcerrors -c 3,4 -s 2000 meas
        columns 3 and 4, skipping the first 2000 measurements
    mcerrors -c 3,4 -b 500 -s 2000 -n 20000 meas
        blocks of 500 measurements, 20000 measurements after the skip
    mcerrors -c 3 -T 100 --plot acf.png meas
        autocorrelation function up to lag 100
"""

import argparse
import logging
import sys
import warnings
from textwrap import dedent

from . import __version__, tint_stop_factor
from .config import load_config, parse_columns
from .estimators import autocorrelation_function, block_estimate, block_scan, estimate
from .exceptions import McErrorsError, UnresolvedAutocorrelationWarning, UsageError
from .loader import load
from .report import HEADERS, write_csv, write_text

logger = logging.getLogger(__name__)

MODES = ("block", "naive", "acf", "scan")


# ── argument types ──────────────────────────────────────────────────
def _columns(text):
    try:
        return parse_columns(text)
    except UsageError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def _count(text):
    try:
        v = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}") from None
    if v < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative: {v}")
    return v


def _positive(text):
    v = _count(text)
    if v == 0:
        raise argparse.ArgumentTypeError("must be positive")
    return v


def build_parser():
    ap = argparse.ArgumentParser(
        prog="mcerrors",
        formatter_class=argparse.RawTextHelpFormatter,
        description=dedent("""\
            Average, error and autocorrelation time of Monte Carlo measurements.
            Each line of FILE is one measurement, columns are separated by
            spaces or tabs; the first column is 1.
        """))
    ap.add_argument("file", help="measurement file")
    ap.add_argument("-c", "--columns", type=_columns, action="extend", default=None,
                    help="comma-separated list of columns, first is 1\n"
                         "(at least one column is required)")
    ap.add_argument("-n", "--limit", type=_count, default=None,
                    help="use only n measurements (0 = all)")
    ap.add_argument("-s", "--skip", type=_count, default=None,
                    help="skip n measurements from beginning")

    mode = ap.add_mutually_exclusive_group()
    mode.add_argument("-b", "--block", type=_positive, default=None,
                      help="block measurements to block length n, no autocorrelations")
    mode.add_argument("-t", "--naive", action="store_true", default=None,
                      help="no autocorrelations, naive errors only")
    mode.add_argument("-T", "--acf", type=_count, default=None, metavar="LENGTH",
                      help="print autocorrelation function up to distance LENGTH")
    mode.add_argument("--scan", action="store_true", default=None,
                      help="blocking errors for block lengths 1, 2, 4, ...")

    ap.add_argument("--csv", action="store_true", default=None,
                    help="print CSV instead of text")
    ap.add_argument("--plot", default=None, metavar="PNG",
                    help="with -T: save the autocorrelation function as PNG")
    ap.add_argument("--config", default=None, metavar="YAML",
                    help="run parameters from a YAML file (command line wins)")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    ap.add_argument("-q", "--quiet", action="store_true", help="warnings only")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return ap


# ── option resolution ───────────────────────────────────────────────
def resolve_options(args) -> dict:
    """Merge --config file and command line; validate the combination."""
    opts = load_config(args.config) if args.config else {}

    # a mode picked on the command line replaces the file's mode
    if any(getattr(args, m) is not None for m in MODES):
        for m in MODES:
            opts.pop(m, None)

    for key in ("columns", "skip", "limit", "block", "naive", "acf", "scan", "csv", "plot"):
        v = getattr(args, key)
        if v is not None:
            opts[key] = v

    if not opts.get("columns"):
        raise UsageError("at least one column (-c) is required")
    if opts.get("block") == 0:
        raise UsageError("block length must be positive")

    chosen = [m for m in MODES if opts.get(m) is not None and opts.get(m) is not False]
    if len(chosen) > 1:
        raise UsageError(f"options {', '.join(chosen)} are mutually exclusive")
    if opts.get("plot") and "acf" not in chosen:
        raise UsageError("--plot needs the autocorrelation function mode (-T)")

    opts["mode"] = chosen[0] if chosen else "tint"
    opts.setdefault("skip", 0)
    opts.setdefault("limit", 0)
    opts["file"] = args.file
    return opts


# ── analysis ────────────────────────────────────────────────────────
def analyse(opts):
    """
    Load the file and analyse every column.
    Returns (header, rows, curves); curves is only filled in acf mode.
    Nothing is returned unless every column succeeded.
    """
    cols = opts["columns"]
    seqs = load(opts["file"], cols, skip=opts["skip"], limit=opts["limit"])
    mode = opts["mode"]

    rows, curves = [], {}
    for c, seq in zip(cols, seqs):
        if mode == "acf":
            points = list(autocorrelation_function(seq, opts["acf"]))
            curves[c] = points
            rows += [(c, lag, rho) for lag, rho in points]
        elif mode == "block":
            r = block_estimate(seq, opts["block"])
            rows.append((c, r.mean, r.error))
        elif mode == "scan":
            rows += [(c, r.block_size, r.n_blocks, r.mean, r.error) for r in block_scan(seq)]
        elif mode == "naive":
            r = estimate(seq, use_autocorrelation=False)
            rows.append((c, r.mean, r.error))
        else:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", UnresolvedAutocorrelationWarning)
                r = estimate(seq)
            if not r.converged:
                logger.warning("col %d: correlation > N/2*%d, tau_int = %.4g is unreliable",
                               c, tint_stop_factor, r.tint)
            rows.append((c, r.mean, r.error, r.tint))

    return HEADERS[mode], rows, curves


def _setup_logging(args):
    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    logging.captureWarnings(True)


def main(argv=None):
    ap = build_parser()
    args = ap.parse_args(argv)
    _setup_logging(args)

    try:
        opts = resolve_options(args)
    except UsageError as e:
        ap.error(str(e))
    except McErrorsError as e:
        sys.exit(f"[mcerrors] {e}")

    try:
        header, rows, curves = analyse(opts)
    except UsageError as e:
        ap.error(str(e))
    except McErrorsError as e:
        sys.exit(f"[mcerrors] {e}")

    if opts.get("plot"):
        from .plot import plot_autocorrelation
        try:
            p = plot_autocorrelation(curves, opts["plot"])
        except McErrorsError as e:
            sys.exit(f"[mcerrors] {e}")
        logger.info("autocorrelation plot written to %s", p)

    if opts.get("csv"):
        write_csv(rows, header, sys.stdout)
    else:
        write_text(rows, header, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
