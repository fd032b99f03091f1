import enum

import numpy as np
import pytest

from namedarray import (
    AxisIndex,
    BroadcastError,
    ContractViolation,
    SliceRangeError,
    axis_enum,
    key_type,
)


class IJ(enum.Enum):
    i = 0
    j = 1


IJK = axis_enum("i", "j", "k")


def test_contiguous_strides_follow_declaration_order():
    idx = AxisIndex.contiguous(IJK, i=2, j=3, k=4)
    assert idx.stride_map() == {"i": 12, "j": 4, "k": 1}
    assert idx.offset == 0
    assert idx.count() == 24
    assert idx.is_contiguous()


def test_contiguous_accepts_mapping_with_members():
    idx = AxisIndex.contiguous(IJ, {IJ.j: 3, IJ.i: 2})
    assert idx.shape == (2, 3)
    assert idx.strides == (3, 1)


def test_linear_and_linear_checked():
    idx = AxisIndex.contiguous(IJ, i=2, j=3)
    assert idx.linear(i=1, j=2) == 5
    assert idx.linear({"i": 1, "j": 0}) == 3
    assert idx.linear_checked(i=1, j=2) == 5
    assert idx.linear_checked(i=2, j=0) is None
    assert idx.linear_checked(i=0, j=3) is None
    assert idx.linear_checked(i=-1, j=0) is None


def test_linear_is_unchecked():
    idx = AxisIndex.contiguous(IJ, i=2, j=3)
    # out of range keys still produce an address
    assert idx.linear(i=2, j=0) == 6


def test_iter_keys_row_major_and_restartable():
    idx = AxisIndex.contiguous(IJ, i=2, j=3)
    keys = list(idx.iter_keys())
    assert keys == [(0, 0), (0, 1), (0, 2), (1, 0), (1, 1), (1, 2)]
    assert keys[4].i == 1 and keys[4].j == 1
    assert isinstance(keys[0], key_type(IJ))
    assert list(idx.iter_keys()) == keys
    assert [idx.linear(key) for key in idx.iter_keys()] == list(range(6))


def test_iter_keys_edge_shapes():
    assert list(AxisIndex.contiguous(IJ, i=0, j=3).iter_keys()) == []
    scalar = AxisIndex.contiguous(axis_enum())
    assert scalar.count() == 1
    assert list(scalar.iter_keys()) == [()]
    assert scalar.linear(()) == 0


def test_addresses_match_linear():
    idx = (
        AxisIndex.contiguous(IJK, i=3, j=4, k=5)
        .slice_axis("j", 1, 3)
        .stride(k=-1)
    )
    expected = [idx.linear(key) for key in idx.iter_keys()]
    assert idx.addresses().tolist() == expected
    assert idx.addresses().dtype == np.int64


def test_slice_axis_moves_offset_keeps_stride():
    idx = AxisIndex.contiguous(IJ, i=5, j=9).slice_axis(IJ.i, 1, 4)
    assert idx.shape_map() == {"i": 3, "j": 9}
    assert idx.offset == 9
    assert idx.strides == (9, 1)
    sliced = idx.slice_axis("j", 2, 2)
    assert sliced.shape_map() == {"i": 3, "j": 0}
    assert sliced.count() == 0


@pytest.mark.parametrize(
    "start, end",
    [(-1, 2), (3, 2), (0, 6), (6, 6)],
    ids=["negative_start", "reversed", "past_end", "start_past_end"],
)
def test_slice_axis_out_of_range_is_contract_violation(start, end):
    idx = AxisIndex.contiguous(IJ, i=5, j=2)
    with pytest.raises(SliceRangeError, match="axis 'i'"):
        idx.slice_axis("i", start, end)


def test_transformations_are_pure():
    idx = AxisIndex.contiguous(IJ, i=5, j=9)
    idx.slice_axis("i", 0, 4)
    idx.stride(j=3)
    assert idx == AxisIndex.contiguous(IJ, i=5, j=9)


def test_stride_overrides_only_strides():
    idx = AxisIndex.contiguous(IJ, i=2, j=3).slice_axis("j", 1, 3)
    col_major = idx.stride({IJ.i: 1}, j=2)
    assert col_major.strides == (1, 2)
    assert col_major.shape == idx.shape
    assert col_major.offset == idx.offset


def test_add_empty_axis_then_broadcast():
    I = axis_enum("i")
    idx = AxisIndex.contiguous(I, i=3).add_empty_axis("j")
    assert idx.axes is axis_enum("i", "j")
    assert idx.shape_map() == {"i": 3, "j": 1}
    broad = idx.broadcast_axis("j", 4)
    assert broad.shape_map() == {"i": 3, "j": 4}
    assert broad.stride_map() == {"i": 1, "j": 0}
    assert [broad.linear(key) for key in broad.iter_keys()] == [0] * 4 + [1] * 4 + [2] * 4
    assert broad.same_shape(AxisIndex.contiguous(axis_enum("i", "j"), i=3, j=4))


def test_add_empty_axis_at_declared_position():
    J = axis_enum("j")
    idx = AxisIndex.contiguous(J, j=3).add_empty_axis("i", axes=IJ)
    assert idx.axes is IJ
    assert idx.shape == (1, 3)
    assert idx.strides == (0, 1)
    assert idx.is_contiguous()


def test_add_empty_axis_rejects_existing_or_mismatched_labels():
    idx = AxisIndex.contiguous(IJ, i=2, j=2)
    with pytest.raises(ContractViolation, match="already present"):
        idx.add_empty_axis("j")
    with pytest.raises(ContractViolation, match="must declare exactly"):
        AxisIndex.contiguous(axis_enum("i"), i=2).add_empty_axis("j", axes=IJK)


def test_broadcast_requires_unit_extent():
    idx = AxisIndex.contiguous(IJ, i=3, j=2)
    with pytest.raises(BroadcastError, match="extent 2") as err:
        idx.broadcast_axis("j", 4)
    assert err.value.axis == "j"
    assert isinstance(err.value, AssertionError)


def test_address_range_with_negative_strides():
    idx = AxisIndex.from_maps(IJ, {"i": 3, "j": 4}, {"i": -4, "j": 1}, offset=8)
    assert idx.address_range() == (0, 11)
    assert AxisIndex.contiguous(IJ, i=0, j=4).address_range() is None


@pytest.mark.parametrize(
    "strides, expected",
    [
        ({"i": 3, "j": 1}, False),
        ({"i": 1, "j": 2}, False),
        ({"i": 0, "j": 1}, True),
        ({"i": 1, "j": 1}, True),
        ({"i": 2, "j": 1}, True),
        ({"i": -3, "j": 1}, False),
        ({"i": 3, "j": 2}, False),
        ({"i": 4, "j": 2}, True),
    ],
    ids=["row_major", "col_major", "broadcast", "diagonal", "overlapping",
         "reversed", "interleaved", "interleaved_clash"],
)
def test_has_overlap(strides, expected):
    idx = AxisIndex.from_maps(IJ, {"i": 2, "j": 3}, strides, offset=10)
    addresses = [idx.linear(key) for key in idx.iter_keys()]
    assert (len(set(addresses)) != len(addresses)) == expected
    assert idx.has_overlap() is expected


def test_has_overlap_ignores_unit_and_empty_axes():
    assert not AxisIndex.from_maps(IJ, {"i": 1, "j": 3}, {"i": 0, "j": 1}).has_overlap()
    assert not AxisIndex.from_maps(IJ, {"i": 0, "j": 3}, {"i": 0, "j": 0}).has_overlap()


def test_post_init_checks_rank():
    with pytest.raises(ValueError, match="has 2 axes"):
        AxisIndex(IJ, (2,), (1,), 0)


def test_repr_lists_axes():
    assert repr(AxisIndex.contiguous(IJ, i=2, j=3)) == "AxisIndex(i=2:3, j=3:1; offset=0)"


@pytest.mark.parametrize(
    "extent, step, kept",
    [(9, 3, 3), (10, 3, 4), (1, 5, 1), (0, 2, 0), (4, 1, 4)],
)
def test_step_axis_keeps_every_nth_coordinate(extent, step, kept):
    idx = AxisIndex.contiguous(IJ, i=2, j=extent).step_axis("j", step)
    assert idx.shape_map() == {"i": 2, "j": kept}
    assert idx.strides == (extent, step)
    row = [idx.linear(i=0, j=j) for j in range(kept)]
    assert row == list(range(0, extent, step))


def test_step_axis_rejects_non_positive_step():
    with pytest.raises(SliceRangeError, match="at least 1"):
        AxisIndex.contiguous(IJ, i=2, j=3).step_axis("j", 0)


def test_keys_of_another_label_set_are_read_by_name():
    idx = AxisIndex.contiguous(IJ, i=2, j=3)
    swapped = key_type(axis_enum("j", "i"))(j=2, i=1)
    assert idx.linear(swapped) == 5
    assert idx.linear_checked(swapped) == 5
    assert idx.linear(key_type(axis_enum("i", "j"))(i=1, j=2)) == 5


def test_foreign_key_with_unknown_axis_is_rejected():
    idx = AxisIndex.contiguous(IJ, i=2, j=3)
    with pytest.raises(KeyError, match="Unknown axis label 'k'"):
        idx.linear(key_type(axis_enum("i", "k"))(i=0, k=0))
