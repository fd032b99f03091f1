from __future__ import annotations

from typing import Any, Dict

import numpy as np

from .index import AxisIndex


def layout_stats(index: AxisIndex, itemsize: int = 1) -> Dict[str, Any]:
    """Summarize how a descriptor uses its buffer.

    ``elements`` counts logical keys; ``distinct_addresses`` counts the buffer
    positions they actually touch, which is smaller for broadcast or
    otherwise aliased layouts.
    """
    elements = index.count()
    bounds = index.address_range()
    span = 0 if bounds is None else bounds[1] - bounds[0] + 1
    if elements == 0:
        distinct = 0
    elif not index.has_overlap():
        distinct = elements
    else:
        distinct = int(np.unique(index.addresses()).size)

    broadcast_axes = [
        name
        for name, extent, stride in zip(index.names, index.shape, index.strides)
        if extent > 1 and stride == 0
    ]

    return {
        "elements": int(elements),
        "distinct_addresses": distinct,
        "span": int(span),
        "bytes_logical": int(elements) * int(itemsize),
        "bytes_span": int(span) * int(itemsize),
        "broadcast_axes": broadcast_axes,
        "contiguous": index.is_contiguous(),
    }
