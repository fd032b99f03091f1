"""Axis label sets and coordinate keys.

An axis label set is a closed ``enum.Enum``; its declaration order is the
axis order used for strides, iteration and key tuples. Everything downstream
works on ordinals, so labels are resolved here once.
"""

from __future__ import annotations

import enum
import functools
import keyword
from collections import namedtuple
from typing import Any, Dict, Mapping, Optional, Tuple, Type, Union

from .exceptions import AxisLabelError

AxisSet = Type[enum.Enum]
Label = Union[enum.Enum, str]
KeyLike = Union[Tuple[int, ...], Mapping[Any, int]]

# attribute names Enum refuses as member names
_RESERVED_NAMES = frozenset({"mro"})


@functools.lru_cache(maxsize=None)
def axis_enum(*names: str) -> AxisSet:
    """Return the enum for ``names``; repeated calls give the same class."""
    if len(set(names)) != len(names):
        raise ValueError(f"Axis names must be distinct, got {names}")
    for name in names:
        if not isinstance(name, str) or not name.isidentifier() or keyword.iskeyword(name):
            raise ValueError(f"Axis name {name!r} is not a valid identifier")
        if name.startswith("_"):
            raise ValueError(f"Axis name {name!r} must not start with an underscore")
        if name in _RESERVED_NAMES:
            raise ValueError(f"Axis name {name!r} is reserved by enum")
    class_name = "Axes_" + "_".join(names) if names else "Axes0"
    return enum.Enum(class_name, [(name, ordinal) for ordinal, name in enumerate(names)])


@functools.lru_cache(maxsize=None)
def axis_names(axes: AxisSet) -> Tuple[str, ...]:
    return tuple(member.name for member in axes)


@functools.lru_cache(maxsize=None)
def _ordinals(axes: AxisSet) -> Dict[Any, int]:
    table: Dict[Any, int] = {}
    for ordinal, member in enumerate(axes):
        table[member] = ordinal
        table[member.name] = ordinal
    return table


@functools.lru_cache(maxsize=None)
def key_type(axes: AxisSet):
    """Namedtuple class for coordinates over ``axes``."""
    return namedtuple(f"{axes.__name__}Key", axis_names(axes))


def resolve_axis(axes: AxisSet, label: Label) -> int:
    if isinstance(label, enum.Enum):
        if type(label) is not axes:
            # a member of another label set is accepted by name
            label = label.name
    try:
        return _ordinals(axes)[label]
    except (KeyError, TypeError):
        raise AxisLabelError(
            f"Unknown axis label {label!r}", label=label, axes=axis_names(axes)
        ) from None


def _coerce_mapping(
    axes: AxisSet,
    values: Mapping[Any, Any],
    what: str,
) -> Tuple[Any, ...]:
    names = axis_names(axes)
    slots: list = [None] * len(names)
    for label, value in values.items():
        ordinal = resolve_axis(axes, label)
        if slots[ordinal] is not None:
            raise AxisLabelError(
                f"{what} assigns axis '{names[ordinal]}' twice", label=label, axes=names
            )
        slots[ordinal] = value
    missing = [names[idx] for idx, value in enumerate(slots) if value is None]
    if missing:
        raise AxisLabelError(
            f"{what} is missing axes {{{', '.join(missing)}}}", label=missing[0], axes=names
        )
    return tuple(slots)


def _coerce(
    axes: AxisSet,
    value: Optional[Any],
    kwargs: Mapping[str, Any],
    what: str,
) -> Tuple[Any, ...]:
    if value is not None and kwargs:
        raise TypeError(f"Pass the {what} either as a mapping/tuple or as keywords, not both")
    if value is None:
        return _coerce_mapping(axes, kwargs, what)
    if isinstance(value, Mapping):
        return _coerce_mapping(axes, value, what)
    if isinstance(value, tuple) and hasattr(value, "_fields"):
        # keys of another label set are read by name, not by position
        return _coerce_mapping(axes, value._asdict(), what)
    items = tuple(value)
    names = axis_names(axes)
    if len(items) != len(names):
        raise AxisLabelError(
            f"{what} has {len(items)} entries but there are {len(names)} axes",
            axes=names,
        )
    return items


def normalize_key(axes: AxisSet, key: Optional[KeyLike] = None, **kwargs: int) -> Tuple[int, ...]:
    """Coerce a key (namedtuple, positional tuple, mapping or keywords) to ordinal order."""
    if isinstance(key, tuple) and not kwargs:
        # fast path: iter_keys() output and plain tuples
        fields = getattr(key, "_fields", None)
        if len(key) == len(axis_names(axes)) and fields in (None, axis_names(axes)):
            return key
    return tuple(int(v) for v in _coerce(axes, key, kwargs, "Key"))


def normalize_shape(
    axes: AxisSet,
    shape: Optional[Union[Mapping[Any, int], Tuple[int, ...]]] = None,
    **kwargs: int,
) -> Tuple[int, ...]:
    extents = tuple(int(v) for v in _coerce(axes, shape, kwargs, "Shape"))
    for name, extent in zip(axis_names(axes), extents):
        if extent < 0:
            raise ValueError(f"Extent of axis '{name}' must be non-negative, got {extent}")
    return extents


def make_key(axes: AxisSet, values: Tuple[int, ...]):
    return key_type(axes)._make(values)
