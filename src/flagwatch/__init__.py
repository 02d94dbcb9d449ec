"""
flagwatch - cached resolution and search of remotely published feature flags.
"""

__version__ = "0.1.0"

from flagwatch.flags.models import FlagRecord, Resolution, ResolutionStatus, ValueType  # noqa: E402
from flagwatch.service import FlagService  # noqa: E402

__all__ = [
    "FlagRecord",
    "FlagService",
    "Resolution",
    "ResolutionStatus",
    "ValueType",
    "__version__",
]
