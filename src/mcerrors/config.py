"""
config.py – YAML run parameters
───────────────────────────────
A run can be described by a small YAML file instead of (or in addition
to) command-line options, e.g.

    columns: [3, 4]
    skip: 2000
    limit: 20000
    block: 500

Keys are the long option names of the CLI; options given on the command
line win over the file.
"""

from __future__ import annotations

from pathlib import Path

import yaml

from .exceptions import SourceUnavailableError, UsageError

# key -> expected type (columns is handled separately)
OPTIONS = {
    "skip":  int,
    "limit": int,
    "block": int,
    "acf":   int,
    "naive": bool,
    "scan":  bool,
    "csv":   bool,
    "plot":  str,
}


def parse_columns(text) -> list[int]:
    """'3,4' -> [3, 4]; a list of ints is checked and passed through."""
    if isinstance(text, str):
        parts = [p.strip() for p in text.split(",")]
        try:
            cols = [int(p) for p in parts]
        except ValueError:
            raise UsageError(f"columns must be comma-separated integers, got {text!r}") from None
    elif isinstance(text, list):
        cols = text
    else:
        raise UsageError(f"columns must be a list or a comma string, got {text!r}")

    for c in cols:
        if isinstance(c, bool) or not isinstance(c, int) or c <= 0:
            raise UsageError(f"Not valid column {c!r}")
    if not cols:
        raise UsageError("At least one column must be selected")
    return cols


def _check_type(key, value, kind):
    # bool is an int subclass; keep the two apart
    if kind is int:
        ok = isinstance(value, int) and not isinstance(value, bool)
    else:
        ok = isinstance(value, kind)
    if not ok:
        raise UsageError(f"config key '{key}' must be {kind.__name__}, got {value!r}")
    if kind is int and value < 0:
        raise UsageError(f"config key '{key}' must be non-negative, got {value}")


def load_config(path) -> dict:
    """Read and validate a run-parameter YAML file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SourceUnavailableError(f"Could not open config {path}: {e.strerror}") from e

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise UsageError(f"config {path} is not valid YAML: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise UsageError(f"config {path} must be a mapping of option: value")

    cfg = {}
    for key, value in raw.items():
        if key == "columns":
            cfg["columns"] = parse_columns(value)
        elif key in OPTIONS:
            _check_type(key, value, OPTIONS[key])
            cfg[key] = value
        else:
            raise UsageError(f"unknown config key '{key}'")
    return cfg
