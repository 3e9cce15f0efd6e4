"""
mcerrors package initialiser
----------------------------
Exposes the fixed constants defined in constants.yaml so that the
library, the CLI and the tests all pull *exactly* the same numbers,
and re-exports the public analysis API.
"""

import importlib.resources as rsc
import yaml

# ------------------------------------------------------------
# 1. Load YAML file that ships with the package
_c = yaml.safe_load(rsc.files("mcerrors").joinpath("constants.yaml").read_text())

# ------------------------------------------------------------
# 2. Cast every numeric to int
tint_stop_factor = int(_c["tint_stop_factor"])
min_blocks       = int(_c["min_blocks"])

# ------------------------------------------------------------
# 3. Public API
from .exceptions import (                                    # noqa: E402
    McErrorsError,
    UsageError,
    SourceUnavailableError,
    InsufficientDataError,
    MalformedRowError,
    UnresolvedAutocorrelationWarning,
)
from .loader import load                                     # noqa: E402
from .estimators import (                                    # noqa: E402
    ErrorEstimate,
    BlockEstimate,
    estimate,
    block_estimate,
    block_scan,
    autocorrelation,
    autocorrelation_function,
)

__version__ = "1.0.0"
