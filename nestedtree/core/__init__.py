"""
nestedtree Core Module
Provides configuration, errors and data models
"""

from .config import get_config, reset_config, TreeConfig, StoreConfig
from .errors import (
    TreeError,
    InvalidOperationError,
    DetachedReferenceError,
    IllegalRelocationError,
    MalformedShiftRequestError,
    TreeIntegrityError,
)
from .models import ShiftStep, RelocationPlan, TreeStatistics

__all__ = [
    'get_config',
    'reset_config',
    'TreeConfig',
    'StoreConfig',
    'TreeError',
    'InvalidOperationError',
    'DetachedReferenceError',
    'IllegalRelocationError',
    'MalformedShiftRequestError',
    'TreeIntegrityError',
    'ShiftStep',
    'RelocationPlan',
    'TreeStatistics',
]
