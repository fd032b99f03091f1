from __future__ import annotations

from typing import Iterable, Optional


class NamedArrayError(Exception):
    """Base class for recoverable namedarray errors."""


class AllocationError(NamedArrayError, MemoryError):
    def __init__(self, message: str, *, requested: Optional[int] = None):
        detail = f" (requested {requested} scalars)" if requested is not None else ""
        super().__init__(f"{message}{detail}")
        self.requested = requested


class AxisLabelError(NamedArrayError, KeyError):
    def __init__(self, message: str, *, label: object = None, axes: Iterable[str] = ()):
        known = _format_labels(axes)
        super().__init__(f"{message}; known axes {{{known}}}")
        self.label = label
        self.axes = tuple(axes)

    def __str__(self) -> str:
        # KeyError would repr() the message otherwise
        return str(self.args[0])


class ReleasedArrayError(NamedArrayError, RuntimeError):
    pass


class ContractViolation(AssertionError):
    """A caller bug detectable before the call.

    Deliberately outside the ``NamedArrayError`` tree: these are raised
    unconditionally and are not meant to be handled.
    """

    def __init__(self, message: str, *, axis: Optional[str] = None):
        location = f" (axis '{axis}')" if axis is not None else ""
        super().__init__(f"{message}{location}")
        self.axis = axis


class ShapeMismatchError(ContractViolation):
    pass


class SliceRangeError(ContractViolation):
    pass


class BroadcastError(ContractViolation):
    pass


class OverlapError(ContractViolation):
    pass


class BufferSpanError(ContractViolation):
    pass


def _format_labels(labels: Iterable[str]) -> str:
    items = list(labels)
    if not items:
        return "∅"
    return ", ".join(items)
