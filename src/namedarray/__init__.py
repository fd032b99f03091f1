from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _load_version

from .core.allocator import Allocator, BudgetAllocator, NumpyAllocator, TrackingAllocator
from .core.array import NamedArray, NamedArrayView
from .core.axes import axis_enum, axis_names, key_type
from .core.config import DEFAULT_CONFIG, ArrayConfig
from .core.exceptions import (
    AllocationError,
    AxisLabelError,
    BroadcastError,
    BufferSpanError,
    ContractViolation,
    NamedArrayError,
    OverlapError,
    ReleasedArrayError,
    ShapeMismatchError,
    SliceRangeError,
)
from .core.index import AxisIndex
from .core.ops import add, copy_into
from .core.stats import layout_stats

try:
    __version__ = _load_version("namedarray")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "AxisIndex",
    "NamedArray",
    "NamedArrayView",
    "add",
    "copy_into",
    "layout_stats",
    "axis_enum",
    "axis_names",
    "key_type",
    "Allocator",
    "NumpyAllocator",
    "TrackingAllocator",
    "BudgetAllocator",
    "ArrayConfig",
    "DEFAULT_CONFIG",
    "NamedArrayError",
    "AllocationError",
    "AxisLabelError",
    "ReleasedArrayError",
    "ContractViolation",
    "ShapeMismatchError",
    "SliceRangeError",
    "BroadcastError",
    "OverlapError",
    "BufferSpanError",
    "__version__",
]
