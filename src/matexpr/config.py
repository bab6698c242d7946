"""Environment-driven settings shared by the numeric modules.

Importing this module (and so importing ``matexpr``) turns on
``jax_enable_x64`` for the whole process. Code in the same process that
relies on JAX's default float32 arrays sees float64 afterwards.
"""

from __future__ import annotations

import os
from typing import Final

import jax

# Matrix and statistics kernels work on IEEE-754 doubles.
jax.config.update("jax_enable_x64", True)

PIVOT_EPSILON: Final[float] = float(os.environ.get("MATEXPR_PIVOT_EPSILON", "1e-10"))
DISPLAY_DIGITS: Final[int] = max(1, int(os.environ.get("MATEXPR_DISPLAY_DIGITS", "15")))
LOG_LEVEL: Final[str] = os.environ.get("MATEXPR_LOG_LEVEL", "WARNING").upper()

SNAP_EPSILON: Final[float] = 1e-14
SNAP_DIGITS: Final[int] = 12
DISPLAY_EPSILON: Final[float] = 1e-12
MAX_FACTORIAL: Final[int] = 170
