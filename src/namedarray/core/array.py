"""Owning arrays and borrowing views over scalar buffers.

``NamedArray`` exclusively owns its buffer and hands it back to the allocator
in ``release``. ``NamedArrayView`` borrows a buffer owned elsewhere and only
reads it; it is a plain value, copying one copies the descriptor and never
the data. Nothing tracks lifetimes: a view over a released array is invalid
even though Python keeps the memory alive.

Checked accessors return ``None`` for keys outside the shape. Their unchecked
twins trust the caller; an out-of-range key may read or write an unrelated
element or raise whatever numpy raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import numpy as np

from .allocator import Allocator
from .axes import AxisSet, KeyLike
from .config import ArrayConfig, resolve_config
from .exceptions import BufferSpanError, ReleasedArrayError
from .index import AxisIndex

logger = logging.getLogger(__name__)


def _as_buffer(buffer: Any) -> np.ndarray:
    array = np.asarray(buffer)
    if array.ndim != 1:
        raise ValueError(f"Buffers must be one-dimensional, got shape {array.shape}")
    return array


def _check_span(index: AxisIndex, buffer: np.ndarray) -> None:
    bounds = index.address_range()
    if bounds is None:
        return
    lo, hi = bounds
    if lo < 0 or hi >= buffer.size:
        raise BufferSpanError(
            f"{index!r} reaches addresses [{lo}, {hi}] but the buffer holds {buffer.size} scalars"
        )


class _ReadableArray:
    """Read contract shared by owning arrays and views."""

    index: AxisIndex

    def _storage(self) -> np.ndarray:
        raise NotImplementedError

    @property
    def axes(self) -> AxisSet:
        return self.index.axes

    @property
    def dtype(self) -> np.dtype:
        return self._storage().dtype

    def shape_map(self):
        return self.index.shape_map()

    def flat_region(self) -> Optional[np.ndarray]:
        """The dense ``[offset, offset + count)`` slice of the buffer, or None.

        No copy is made; see ``materialize`` for a dense copy of any layout.
        """
        if not self.index.is_contiguous():
            return None
        start = self.index.offset
        return self._storage()[start : start + self.index.count()]

    def gather(self) -> np.ndarray:
        """Every element in canonical key order, as a new 1-D array."""
        return self._storage()[self.index.addresses()]

    def materialize(self, allocator: Allocator) -> "NamedArray":
        """Dense row-major copy of this array with the same shape.

        Allocates ``count()`` scalars from ``allocator``; the caller releases them.
        """
        from .ops import copy_into

        storage = self._storage()
        result = NamedArray.alloc(allocator, self.axes, self.index.shape, dtype=storage.dtype)
        logger.debug("Materializing %r into a dense buffer", self.index)
        copy_into(self, result)
        return result

    def to_numpy(self) -> np.ndarray:
        """Dense ndarray copy with the axes in declaration order."""
        return self.gather().reshape(self.index.shape)

    def get_checked(self, key: Optional[KeyLike] = None, **coords: int) -> Optional[Any]:
        address = self.index.linear_checked(key, **coords)
        if address is None:
            return None
        return self._storage()[address]

    def get(self, key: Optional[KeyLike] = None, **coords: int) -> Any:
        return self._storage()[self.index.linear(key, **coords)]

    def get_ref_checked(self, key: Optional[KeyLike] = None, **coords: int) -> Optional[np.ndarray]:
        address = self.index.linear_checked(key, **coords)
        if address is None:
            return None
        return self._ref(address)

    def get_ref(self, key: Optional[KeyLike] = None, **coords: int) -> np.ndarray:
        """Zero-dimensional view of the element; write through it with ``ref[()] = v``."""
        return self._ref(self.index.linear(key, **coords))

    def _ref(self, address: int) -> np.ndarray:
        return self._storage()[address : address + 1].reshape(())


@dataclass(frozen=True, eq=False)
class NamedArrayView(_ReadableArray):
    index: AxisIndex
    buffer: np.ndarray

    def __post_init__(self) -> None:
        if self.buffer.flags.writeable:
            readonly = self.buffer.view()
            readonly.flags.writeable = False
            object.__setattr__(self, "buffer", readonly)

    @classmethod
    def wrap(
        cls,
        index: AxisIndex,
        buffer: Any,
        *,
        config: Optional[ArrayConfig] = None,
    ) -> "NamedArrayView":
        cfg = resolve_config(config)
        array = _as_buffer(buffer)
        if cfg.validate_buffer_span:
            _check_span(index, array)
        return cls(index, array)

    def _storage(self) -> np.ndarray:
        return self.buffer

    def with_index(self, index: AxisIndex) -> "NamedArrayView":
        return NamedArrayView(index, self.buffer)


@dataclass(eq=False)
class NamedArray(_ReadableArray):
    index: AxisIndex
    buffer: np.ndarray
    released: bool = field(default=False, init=False, repr=False)

    @classmethod
    def alloc(
        cls,
        allocator: Allocator,
        axes: AxisSet,
        shape: Optional[Mapping[Any, int]] = None,
        *,
        dtype: Any = None,
        config: Optional[ArrayConfig] = None,
        **extents: int,
    ) -> "NamedArray":
        """Canonical array of uninitialized scalars; ``AllocationError`` if that fails."""
        cfg = resolve_config(config)
        index = AxisIndex.contiguous(axes, shape, **extents)
        buffer = allocator.allocate(index.count(), dtype if dtype is not None else cfg.dtype)
        return cls(index, buffer)

    @classmethod
    def wrap(
        cls,
        index: AxisIndex,
        buffer: Any,
        *,
        config: Optional[ArrayConfig] = None,
    ) -> "NamedArray":
        """Bind a caller-provided buffer; a list is copied into a new ndarray first."""
        cfg = resolve_config(config)
        array = _as_buffer(buffer)
        if not array.flags.writeable:
            raise ValueError("NamedArray needs a writeable buffer; use NamedArrayView.wrap")
        if cfg.validate_buffer_span:
            _check_span(index, array)
        return cls(index, array)

    def _storage(self) -> np.ndarray:
        if self.released:
            raise ReleasedArrayError(f"Array over {self.index!r} was already released")
        return self.buffer

    def release(self, allocator: Allocator) -> None:
        buffer = self._storage()
        allocator.release(buffer)
        self.released = True

    def as_view(self) -> NamedArrayView:
        return NamedArrayView(self.index, self._storage())

    def with_index(self, index: AxisIndex) -> "NamedArray":
        """Another owner handle on the same buffer; release only one of them."""
        return NamedArray(index, self._storage())

    def scatter(self, values: Any) -> "NamedArray":
        """Write ``values`` (scalar or one per key, in canonical order)."""
        self._storage()[self.index.addresses()] = values
        return self

    def fill(self, value: Any) -> "NamedArray":
        return self.scatter(value)

    def fill_arange(self) -> "NamedArray":
        """Write 0, 1, 2, ... in canonical key order, counting in the buffer's scalar type."""
        dtype = self._storage().dtype
        if dtype.kind == "b":
            raise TypeError("fill_arange needs a scalar type that supports increment")
        return self.scatter(np.arange(self.index.count(), dtype=dtype))

    def set(self, key: KeyLike, value: Any) -> None:
        self._storage()[self.index.linear(key)] = value
