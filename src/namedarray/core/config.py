from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

import numpy as np


@dataclass(frozen=True)
class ArrayConfig:
    """
    Switches shared by allocation, wrapping and elementwise operations.

    Key behaviors:
    * ``dtype`` is the scalar type used by ``NamedArray.alloc`` when the caller
      does not pass one explicitly.
    * ``check_output_overlap`` makes ``add`` reject output descriptors that map
      two coordinates to one buffer position. Disabling it skips the check and
      leaves the result of such an ``add`` undefined.
    * ``validate_buffer_span`` makes ``wrap`` verify that every reachable linear
      address lies inside the supplied buffer.
    """

    dtype: Any = "int64"
    check_output_overlap: bool = True
    validate_buffer_span: bool = True

    def normalized(self) -> "ArrayConfig":
        dtype = _normalize_dtype(self.dtype)
        return replace(
            self,
            dtype=dtype,
            check_output_overlap=bool(self.check_output_overlap),
            validate_buffer_span=bool(self.validate_buffer_span),
        )


def resolve_config(config: Optional[ArrayConfig]) -> ArrayConfig:
    if config is None:
        return DEFAULT_CONFIG
    return config.normalized()


def _normalize_dtype(value: Any) -> str:
    try:
        dtype = np.dtype(value)
    except TypeError as exc:
        raise ValueError(f"Unsupported scalar type: {value!r}") from exc
    # scalars must support copy, equality and addition
    if dtype.kind not in "biufc":
        raise ValueError(f"Unsupported scalar type: {value!r} (numpy kind '{dtype.kind}')")
    return dtype.name


DEFAULT_CONFIG = ArrayConfig().normalized()
