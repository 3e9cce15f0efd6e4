"""Formatting of analysis results as text or CSV."""

import csv

# header fields for each analysis mode
HEADERS = {
    "tint":  ("col", "average", "sigma", "tau_int"),
    "naive": ("col", "average", "sigma"),
    "block": ("col", "average", "sigma"),
    "scan":  ("col", "block", "nblocks", "average", "sigma"),
    "acf":   ("col", "lag", "autocorrelation"),
}


def fmt(v):
    """ints as is, floats in shortest round-trip form (no digits lost)."""
    if isinstance(v, int):
        return str(v)
    return repr(float(v))


def write_text(rows, header, stream):
    stream.write(" " + " - ".join(header) + "\n")
    for r in rows:
        stream.write(" " + "  ".join(fmt(v) for v in r) + "\n")


def write_csv(rows, header, stream):
    w = csv.writer(stream, lineterminator="\n")
    w.writerow(header)
    for r in rows:
        w.writerow([fmt(v) for v in r])
