"""Axis-indexed shape/stride/offset descriptors.

``AxisIndex`` maps a named coordinate to a linear buffer position::

    address = offset + sum(strides[axis] * key[axis] for axis in axes)

Descriptors never own or touch memory. Every transformation (slicing,
broadcasting, re-striding, adding an axis) returns a new descriptor, so any
number of them may describe the same buffer at once.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

import numpy as np

from .axes import (
    AxisSet,
    KeyLike,
    Label,
    axis_enum,
    axis_names,
    key_type,
    normalize_key,
    normalize_shape,
    resolve_axis,
)
from .exceptions import BroadcastError, ContractViolation, SliceRangeError

logger = logging.getLogger(__name__)

# Above this many elements has_overlap() logs that it fell back to enumeration
_ENUMERATION_LOG_THRESHOLD = 1 << 16


def _row_major_strides(shape: Tuple[int, ...]) -> Tuple[int, ...]:
    strides = [0] * len(shape)
    step = 1
    for axis in range(len(shape) - 1, -1, -1):
        strides[axis] = step
        step *= shape[axis]
    return tuple(strides)


def _prod(values) -> int:
    result = 1
    for value in values:
        result *= int(value)
    return result


@dataclass(frozen=True)
class AxisIndex:
    axes: AxisSet
    shape: Tuple[int, ...]
    strides: Tuple[int, ...]
    offset: int = 0

    def __post_init__(self) -> None:
        rank = len(axis_names(self.axes))
        if len(self.shape) != rank or len(self.strides) != rank:
            raise ValueError(
                f"{self.axes.__name__} has {rank} axes but shape has {len(self.shape)} "
                f"and strides have {len(self.strides)} entries"
            )

    # Construction -------------------------------------------------------

    @classmethod
    def contiguous(
        cls,
        axes: AxisSet,
        shape: Optional[Mapping[Any, int]] = None,
        **extents: int,
    ) -> "AxisIndex":
        """Canonical row-major descriptor: the last-declared axis has stride 1."""
        normalized = normalize_shape(axes, shape, **extents)
        return cls(axes, normalized, _row_major_strides(normalized), 0)

    @classmethod
    def from_maps(
        cls,
        axes: AxisSet,
        shape: Mapping[Any, int],
        strides: Mapping[Any, int],
        offset: int = 0,
    ) -> "AxisIndex":
        """Descriptor with explicit per-axis strides, e.g. a column-major layout."""
        extents = normalize_shape(axes, shape)
        steps = tuple(int(v) for v in normalize_key(axes, strides))
        return cls(axes, extents, steps, int(offset))

    # Queries ------------------------------------------------------------

    @property
    def names(self) -> Tuple[str, ...]:
        return axis_names(self.axes)

    def shape_map(self) -> Dict[str, int]:
        return dict(zip(self.names, self.shape))

    def stride_map(self) -> Dict[str, int]:
        return dict(zip(self.names, self.strides))

    def count(self) -> int:
        return _prod(self.shape)

    def same_shape(self, other: "AxisIndex") -> bool:
        return self.names == other.names and self.shape == other.shape

    def linear(self, key: Optional[KeyLike] = None, **coords: int) -> int:
        """Address of ``key`` without bounds checks; garbage in, garbage out."""
        values = normalize_key(self.axes, key, **coords)
        address = self.offset
        for stride, coord in zip(self.strides, values):
            address += stride * coord
        return address

    def linear_checked(self, key: Optional[KeyLike] = None, **coords: int) -> Optional[int]:
        values = normalize_key(self.axes, key, **coords)
        for extent, coord in zip(self.shape, values):
            if coord < 0 or coord >= extent:
                return None
        return self.linear(values)

    def iter_keys(self) -> Iterator[Tuple[int, ...]]:
        """Every key in row-major order; each call starts a fresh traversal."""
        make = key_type(self.axes)._make
        return map(make, itertools.product(*(range(extent) for extent in self.shape)))

    def is_contiguous(self) -> bool:
        if self.count() == 0:
            return True
        expected = 1
        for extent, stride in zip(reversed(self.shape), reversed(self.strides)):
            if extent > 1 and stride != expected:
                return False
            expected *= extent
        return True

    def address_range(self) -> Optional[Tuple[int, int]]:
        """Smallest and largest reachable address, or None for an empty index."""
        if self.count() == 0:
            return None
        lo = hi = self.offset
        for extent, stride in zip(self.shape, self.strides):
            reach = stride * (extent - 1)
            if reach < 0:
                lo += reach
            else:
                hi += reach
        return lo, hi

    def has_overlap(self) -> bool:
        """True if two distinct keys address the same buffer position."""
        if self.count() == 0:
            return False
        spans = [
            (abs(stride), extent)
            for extent, stride in zip(self.shape, self.strides)
            if extent > 1
        ]
        if any(step == 0 for step, _ in spans):
            return True
        spans.sort()
        reach = 0
        for step, extent in spans:
            if step <= reach:
                break
            reach += step * (extent - 1)
        else:
            return False
        # interleaved strides: only enumeration can tell
        total = self.count()
        if total > _ENUMERATION_LOG_THRESHOLD:
            logger.debug("Checking %d addresses of %r for overlap by enumeration", total, self)
        addresses = self.addresses()
        return int(np.unique(addresses).size) != int(addresses.size)

    def addresses(self) -> np.ndarray:
        """Linear address of every key, in ``iter_keys()`` order."""
        rank = len(self.shape)
        result = np.full(self.shape, self.offset, dtype=np.int64)
        for axis, (extent, stride) in enumerate(zip(self.shape, self.strides)):
            if extent <= 1 or stride == 0:
                continue
            view = [1] * rank
            view[axis] = extent
            result += (np.arange(extent, dtype=np.int64) * stride).reshape(view)
        return result.reshape(-1)

    # Transformations ----------------------------------------------------

    def add_empty_axis(self, label: str, axes: Optional[AxisSet] = None) -> "AxisIndex":
        """Insert an extent-1 axis, typically so it can be broadcast afterwards."""
        name = label.name if hasattr(label, "name") else str(label)
        if name in self.names:
            raise ContractViolation("Axis already present", axis=name)
        if axes is None:
            axes = axis_enum(*self.names, name)
        target = axis_names(axes)
        if sorted(target) != sorted(self.names + (name,)):
            raise ContractViolation(
                f"{axes.__name__} must declare exactly {{{', '.join(self.names + (name,))}}}",
                axis=name,
            )
        old_shape = self.shape_map()
        old_strides = self.stride_map()
        shape = tuple(old_shape.get(n, 1) for n in target)
        strides = tuple(old_strides.get(n, 0) for n in target)
        return AxisIndex(axes, shape, strides, self.offset)

    def broadcast_axis(self, label: Label, extent: int) -> "AxisIndex":
        """Repeat an extent-1 axis ``extent`` times by giving it stride 0."""
        ordinal = resolve_axis(self.axes, label)
        name = self.names[ordinal]
        if self.shape[ordinal] != 1:
            raise BroadcastError(
                f"Only extent-1 axes can be broadcast, this one has extent {self.shape[ordinal]}",
                axis=name,
            )
        if extent < 0:
            raise BroadcastError(f"Broadcast extent must be non-negative, got {extent}", axis=name)
        return replace(
            self,
            shape=_replace_at(self.shape, ordinal, int(extent)),
            strides=_replace_at(self.strides, ordinal, 0),
        )

    def slice_axis(self, label: Label, start: int, end: int) -> "AxisIndex":
        """Restrict an axis to ``[start, end)``."""
        ordinal = resolve_axis(self.axes, label)
        extent = self.shape[ordinal]
        if not 0 <= start <= end <= extent:
            raise SliceRangeError(
                f"Slice [{start}, {end}) is outside [0, {extent}]",
                axis=self.names[ordinal],
            )
        return replace(
            self,
            shape=_replace_at(self.shape, ordinal, end - start),
            offset=self.offset + start * self.strides[ordinal],
        )

    def step_axis(self, label: Label, step: int) -> "AxisIndex":
        """Keep every ``step``-th coordinate of an axis, starting at 0."""
        ordinal = resolve_axis(self.axes, label)
        if step < 1:
            raise SliceRangeError(f"Step must be at least 1, got {step}", axis=self.names[ordinal])
        extent = self.shape[ordinal]
        return replace(
            self,
            shape=_replace_at(self.shape, ordinal, -(-extent // step)),
            strides=_replace_at(self.strides, ordinal, self.strides[ordinal] * step),
        )

    def stride(self, overrides: Optional[Mapping[Any, int]] = None, **strides: int) -> "AxisIndex":
        """Replace the strides of some axes; shape and offset stay as they are.

        Nothing is validated, so this can describe foreign or overlapping layouts.
        """
        updated = list(self.strides)
        items = dict(overrides or {})
        items.update(strides)
        for label, value in items.items():
            updated[resolve_axis(self.axes, label)] = int(value)
        return replace(self, strides=tuple(updated))

    def __repr__(self) -> str:
        dims = ", ".join(
            f"{name}={extent}:{stride}"
            for name, extent, stride in zip(self.names, self.shape, self.strides)
        )
        return f"AxisIndex({dims}; offset={self.offset})"


def _replace_at(values: Tuple[int, ...], position: int, value: int) -> Tuple[int, ...]:
    return values[:position] + (value,) + values[position + 1 :]
