import itertools

import pytest

from namedarray import AxisIndex, axis_enum

IJ = axis_enum("i", "j")
IJK = axis_enum("i", "j", "k")


def _dense_run(idx: AxisIndex) -> bool:
    """Brute force: keys in canonical order hit offset, offset+1, ... exactly once."""
    addresses = [idx.linear(key) for key in idx.iter_keys()]
    return addresses == list(range(idx.offset, idx.offset + idx.count()))


@pytest.mark.parametrize(
    "extents",
    list(itertools.product(range(4), repeat=2)),
)
@pytest.mark.parametrize(
    "strides",
    list(itertools.product(range(-1, 5), repeat=2)),
)
def test_contiguity_matches_brute_force_rank2(extents, strides):
    idx = AxisIndex(IJ, extents, strides, offset=7)
    assert idx.is_contiguous() == _dense_run(idx)


@pytest.mark.parametrize("extents", list(itertools.product(range(3), repeat=3)))
def test_contiguity_matches_brute_force_rank3(extents):
    for strides in itertools.product((0, 1, 2, 3, 6), repeat=3):
        idx = AxisIndex(IJK, extents, strides, offset=0)
        assert idx.is_contiguous() == _dense_run(idx), (extents, strides)


def test_unit_axes_never_matter():
    idx = AxisIndex.contiguous(IJK, i=1, j=4, k=1)
    for si, sk in itertools.product((-5, 0, 1, 99), repeat=2):
        assert idx.stride(i=si, k=sk).is_contiguous()


def test_broadcast_axis_is_not_contiguous():
    idx = AxisIndex.contiguous(IJ, i=3, j=1).broadcast_axis("j", 4)
    assert not idx.is_contiguous()
    assert AxisIndex.contiguous(IJ, i=3, j=1).broadcast_axis("j", 1).is_contiguous()


def test_empty_index_is_contiguous():
    idx = AxisIndex.contiguous(IJ, i=0, j=5).stride(i=-3, j=0)
    assert idx.is_contiguous()


def test_offset_does_not_affect_contiguity():
    idx = AxisIndex.contiguous(IJ, i=5, j=9)
    assert idx.slice_axis("i", 2, 4).is_contiguous()
    assert not idx.slice_axis("j", 0, 4).is_contiguous()
    # a single row is a dense run again
    assert idx.slice_axis("i", 3, 4).slice_axis("j", 2, 6).is_contiguous()


def test_transposed_and_restrided_are_not_contiguous():
    idx = AxisIndex.contiguous(IJ, i=2, j=3)
    assert not idx.stride(i=1, j=2).is_contiguous()
    assert not idx.slice_axis("i", 0, 2).stride(j=3).is_contiguous()
