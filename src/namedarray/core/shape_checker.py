from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Tuple

from .exceptions import ShapeMismatchError
from .index import AxisIndex


@dataclass
class ShapeDiff:
    missing: List[str] = field(default_factory=list)
    extra: List[str] = field(default_factory=list)
    conflicts: List[Tuple[str, int, int]] = field(default_factory=list)
    reordered: bool = False

    def __bool__(self) -> bool:
        return bool(self.missing or self.extra or self.conflicts or self.reordered)


def diff_shapes(expected: AxisIndex, actual: AxisIndex) -> ShapeDiff:
    diff = ShapeDiff()
    want = expected.shape_map()
    have = actual.shape_map()
    diff.missing = [name for name in want if name not in have]
    diff.extra = [name for name in have if name not in want]
    for name, extent in want.items():
        if name in have and have[name] != extent:
            diff.conflicts.append((name, extent, have[name]))
    if not diff and expected.names != actual.names:
        diff.reordered = True
    return diff


def validate_same_shape(op: str, indices: Mapping[str, AxisIndex]) -> None:
    """Raise ``ShapeMismatchError`` unless every index has the first one's shape."""
    items = list(indices.items())
    if len(items) < 2:
        return
    ref_role, ref = items[0]
    details: List[str] = []
    for role, index in items[1:]:
        if index.same_shape(ref):
            continue
        diff = diff_shapes(ref, index)
        parts = [f"{ref_role} expects {{{_format_shape(ref.shape_map())}}}, "
                 f"but {role} has {{{_format_shape(index.shape_map())}}}"]
        if diff.missing:
            parts.append("missing axes " + _format_axes(diff.missing))
        if diff.extra:
            parts.append("unexpected axes " + _format_axes(diff.extra))
        for name, want, got in diff.conflicts:
            parts.append(f"extent of {name} is {got}, not {want}")
        if diff.reordered:
            parts.append(
                f"axis order {_format_axes(index.names)} differs from {_format_axes(ref.names)}"
            )
        details.append("; ".join(parts))
    if details:
        raise ShapeMismatchError(f"{op}: " + ". ".join(details) + ".")


def _format_shape(shape: Dict[str, int]) -> str:
    if not shape:
        return "∅"
    return ", ".join(f"{name}={extent}" for name, extent in shape.items())


def _format_axes(axes: Iterable[str]) -> str:
    axes_list = list(dict.fromkeys(axes))
    if not axes_list:
        return "∅"
    return ", ".join(axes_list)
