from __future__ import annotations

import logging
from typing import Optional, Union

from .array import NamedArray, NamedArrayView
from .config import ArrayConfig, resolve_config
from .exceptions import OverlapError
from .shape_checker import validate_same_shape

logger = logging.getLogger(__name__)

Readable = Union[NamedArray, NamedArrayView]


def _readable(array: Readable) -> NamedArrayView:
    if isinstance(array, NamedArray):
        return array.as_view()
    return array


def copy_into(src: Readable, dst: NamedArray) -> NamedArray:
    """Copy every element of ``src`` to the same key of ``dst``.

    Layouts may differ freely; only the shapes have to agree.
    """
    validate_same_shape("copy", {"dst": dst.index, "src": src.index})
    return dst.scatter(src.gather())


def add(
    a: Readable,
    b: Readable,
    out: NamedArray,
    *,
    config: Optional[ArrayConfig] = None,
) -> NamedArray:
    """Elementwise ``out[key] = a[key] + b[key]`` over out's keys.

    The three shapes must be identical; strides are irrelevant, so dense,
    sliced, transposed and broadcast operands mix freely. Both inputs are read
    in full before ``out`` is written, so ``out`` may share a buffer with
    either of them.

    With ``check_output_overlap`` switched off, an ``out`` whose descriptor maps
    two keys to one position gives an undefined result.
    """
    cfg = resolve_config(config)
    left = _readable(a)
    right = _readable(b)
    validate_same_shape("add", {"out": out.index, "a": left.index, "b": right.index})
    if cfg.check_output_overlap and out.index.has_overlap():
        raise OverlapError(f"add: output descriptor {out.index!r} maps several keys to one address")
    logger.debug("add over %d elements", out.index.count())
    return out.scatter(left.gather() + right.gather())
