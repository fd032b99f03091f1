"""Allocator capability consumed by the owning containers.

There is no process-wide default: whoever allocates passes an allocator and
must hand the buffer back to the same one.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import numpy as np

from .exceptions import AllocationError

logger = logging.getLogger(__name__)


class Allocator:
    """Produces one-dimensional scalar buffers and takes them back."""

    def allocate(self, n: int, dtype: Any) -> np.ndarray:
        raise NotImplementedError

    def release(self, buffer: np.ndarray) -> None:
        raise NotImplementedError


class NumpyAllocator(Allocator):
    """Uninitialized buffers from ``numpy.empty``; release leaves it to the GC."""

    def allocate(self, n: int, dtype: Any) -> np.ndarray:
        n = int(n)
        if n < 0:
            raise AllocationError("Cannot allocate a negative number of scalars", requested=n)
        try:
            buffer = np.empty(n, dtype=dtype)
        except (MemoryError, ValueError) as exc:
            raise AllocationError(f"numpy could not allocate: {exc}", requested=n) from exc
        logger.debug("Allocated %d x %s", n, buffer.dtype)
        return buffer

    def release(self, buffer: np.ndarray) -> None:
        logger.debug("Released %d x %s", buffer.size, buffer.dtype)


class TrackingAllocator(Allocator):
    """Keeps a ledger of live buffers so leaks and double frees surface in tests."""

    def __init__(self, inner: Optional[Allocator] = None):
        self.inner = inner if inner is not None else NumpyAllocator()
        self._live: Dict[int, np.ndarray] = {}
        self.allocations = 0
        self.releases = 0

    @property
    def live_buffers(self) -> int:
        return len(self._live)

    @property
    def live_bytes(self) -> int:
        return sum(buffer.nbytes for buffer in self._live.values())

    def allocate(self, n: int, dtype: Any) -> np.ndarray:
        buffer = self.inner.allocate(n, dtype)
        self._live[id(buffer)] = buffer
        self.allocations += 1
        return buffer

    def release(self, buffer: np.ndarray) -> None:
        if self._live.pop(id(buffer), None) is None:
            raise AllocationError("Buffer was not allocated here or was already released")
        self.releases += 1
        self.inner.release(buffer)

    def assert_no_leaks(self) -> None:
        if self._live:
            sizes = ", ".join(str(buffer.size) for buffer in self._live.values())
            raise AllocationError(f"{len(self._live)} buffer(s) never released (sizes: {sizes})")


class BudgetAllocator(Allocator):
    """Fails once a scalar budget or an allocation count is exhausted."""

    def __init__(
        self,
        limit: Optional[int] = None,
        *,
        fail_after: Optional[int] = None,
        inner: Optional[Allocator] = None,
    ):
        if limit is not None and limit < 0:
            raise ValueError("limit must be non-negative")
        if fail_after is not None and fail_after < 0:
            raise ValueError("fail_after must be non-negative")
        self.limit = limit
        self.fail_after = fail_after
        self.inner = inner if inner is not None else NumpyAllocator()
        self.in_use = 0
        self.granted = 0

    def allocate(self, n: int, dtype: Any) -> np.ndarray:
        n = int(n)
        if self.fail_after is not None and self.granted >= self.fail_after:
            raise AllocationError(
                f"Allocation budget of {self.fail_after} request(s) exhausted", requested=n
            )
        if self.limit is not None and self.in_use + n > self.limit:
            raise AllocationError(
                f"Scalar budget exceeded ({self.in_use} of {self.limit} in use)", requested=n
            )
        buffer = self.inner.allocate(n, dtype)
        self.in_use += buffer.size
        self.granted += 1
        return buffer

    def release(self, buffer: np.ndarray) -> None:
        self.in_use -= buffer.size
        self.inner.release(buffer)
