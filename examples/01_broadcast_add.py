"""Broadcast a bias vector over a matrix and add it, without copying the bias."""

import enum

import numpy as np

from namedarray import AxisIndex, NamedArray, NamedArrayView, TrackingAllocator, add


class Axes(enum.Enum):
    row = 0
    col = 1


allocator = TrackingAllocator()

matrix = NamedArray.alloc(allocator, Axes, row=3, col=4).fill_arange()

# A per-row bias stored as three scalars, seen as a 3x4 array via a stride-0 column axis.
bias_index = (
    AxisIndex.contiguous(Axes, row=3, col=1)
    .broadcast_axis(Axes.col, 4)
)
bias = NamedArrayView.wrap(bias_index, np.array([100, 200, 300]))

result = NamedArray.alloc(allocator, Axes, row=3, col=4)
add(matrix, bias, result)

print("# matrix")
print(matrix.to_numpy())
print("# matrix + bias[row]")
print(result.to_numpy())

result.release(allocator)
matrix.release(allocator)
allocator.assert_no_leaks()
