"""
CLI Commands Package.

Each command is implemented in its own module.
"""

from . import cycles
from . import impact
from . import path
from . import score
from . import stats
from . import validate

__all__ = [
    "cycles",
    "impact",
    "path",
    "score",
    "stats",
    "validate",
]
