"""Slice, step and transpose a buffer through descriptors, then densify it."""

import numpy as np

from namedarray import AxisIndex, NamedArrayView, TrackingAllocator, axis_enum, layout_stats

IJ = axis_enum("i", "j")

allocator = TrackingAllocator()
buffer = np.arange(45)
grid = NamedArrayView.wrap(AxisIndex.contiguous(IJ, i=5, j=9), buffer)

# first four rows, every third column
picked = grid.with_index(grid.index.slice_axis("i", 0, 4).step_axis("j", 3))
print("# picked is contiguous:", picked.index.is_contiguous())
print("# picked flat region:", picked.flat_region())

dense = picked.materialize(allocator)
print("# materialized flat region:", dense.flat_region().tolist())

# the same 3x3 block read column-major by swapping strides
block = grid.index.slice_axis("i", 0, 3).slice_axis("j", 0, 3)
transposed = grid.with_index(block.stride(i=1, j=9))
print("# transposed block")
print(transposed.to_numpy())

for name, view in (("picked", picked), ("transposed", transposed)):
    print(f"# {name} layout:", layout_stats(view.index, itemsize=buffer.itemsize))

dense.release(allocator)
allocator.assert_no_leaks()
