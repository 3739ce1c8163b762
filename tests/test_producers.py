
from collections import Counter
import math
import operator

import numpy as np
import pytest

from ndsplit.producers import (
    AliasingError,
    AxisProducer,
    ElementProducer,
    InvalidAxisError,
    LeafSplitError,
    ShapeMismatchError,
    ZipProducer,
)
from ndsplit.view import ArrayView, Mode
from ndsplit.vm import Driver

SHAPES = [(7,), (4, 16), (3, 5, 2), (1, 9), (0, 4), ()]

def leaves(producer, min_len=1):
    """ Splits producer all the way down with the reference driver. """
    return Driver.serial(min_len).partition(producer)

def covered(views):
    return Counter(index for view in views for index in view.indices())

class TestElementProducer:
    @pytest.mark.parametrize("shape", SHAPES)
    def test_leaves_partition_the_view(self, shape):
        view = ArrayView(np.zeros(shape))
        parts = leaves(ElementProducer(view))
        counts = covered([leaf.view for leaf in parts])
        assert set(counts) == set(view.indices())
        assert all(count == 1 for count in counts.values())
        assert sum(len(leaf) for leaf in parts) == view.size

    @pytest.mark.parametrize("shape", SHAPES)
    def test_same_elements_as_serial(self, shape):
        a = np.asarray(np.random.default_rng(0).integers(0, 10, size=shape))
        items = [x for leaf in leaves(ElementProducer(ArrayView(a))) for x in leaf]
        assert Counter(items) == Counter(a.ravel().tolist())

    def test_split_of_split(self):
        view = ArrayView(np.zeros((4, 16)))
        (left, right) = ElementProducer(view).split()
        (l1, l2) = left.split()
        counts = covered([l1.view, l2.view, right.view])
        assert set(counts) == set(view.indices())
        assert all(count == 1 for count in counts.values())

    def test_split_halves_largest_dimension(self):
        (left, right) = ElementProducer(ArrayView(np.zeros((4, 16)))).split()
        assert left.view.shape == (4, 8)
        assert right.view.shape == (4, 8)
        assert len(left) == 32

    def test_leaf_cannot_split(self):
        for shape in [(1, 1), (0, 3), ()]:
            producer = ElementProducer(ArrayView(np.zeros(shape)))
            assert not producer.splittable()
            with pytest.raises(LeafSplitError):
                producer.split()

    def test_exclusive_items_are_writable(self):
        a = np.arange(6.0).reshape((2, 3))
        for leaf in leaves(ElementProducer(ArrayView(a, mode=Mode.EXCLUSIVE))):
            leaf.for_each(lambda x: x.__imul__(2))
        assert np.array_equal(a, np.arange(0.0, 12.0, 2.0).reshape((2, 3)))

    def test_fold(self):
        a = np.arange(10)
        producer = ElementProducer(ArrayView(a))
        assert producer.fold(0, operator.add) == 45
        assert producer.position is None
        assert not producer.ordered

class TestAxisProducer:
    def test_invalid_axis(self):
        view = ArrayView(np.zeros((4, 16)))
        for axis in [2, -3, "0", 1.0]:
            with pytest.raises(InvalidAxisError):
                AxisProducer(view, axis)
        with pytest.raises(ValueError):
            AxisProducer(view, 5)
        with pytest.raises(IndexError):
            AxisProducer(ArrayView(np.array(1.0)), 0)

    def test_negative_axis(self):
        producer = AxisProducer(ArrayView(np.zeros((4, 16))), -1)
        assert producer.axis == 1
        assert len(producer) == 16

    def test_length_is_axis_extent(self):
        view = ArrayView(np.zeros((4, 16)))
        assert len(AxisProducer(view, 0)) == 4
        assert len(AxisProducer(view, 1)) == 16

    def test_split_bisects_axis(self):
        (left, right) = AxisProducer(ArrayView(np.zeros((4, 16))), 1).split()
        assert (len(left), len(right)) == (8, 8)
        assert (left.position, right.position) == (0, 8)
        assert left.view.shape == (4, 8)

        (left, right) = AxisProducer(ArrayView(np.zeros((5, 2))), 0).split()
        assert (len(left), len(right)) == (2, 3)
        assert (left.position, right.position) == (0, 2)

    @pytest.mark.parametrize("axis", [0, 1, 2])
    def test_slices_match_serial(self, axis):
        a = np.arange(60).reshape((3, 4, 5))
        parts = leaves(AxisProducer(ArrayView(a), axis))
        assert [leaf.position for leaf in parts] == list(range(a.shape[axis]))
        slices = [s for leaf in parts for s in leaf]
        assert len(slices) == a.shape[axis]
        for (i, s) in enumerate(slices):
            assert np.array_equal(s, np.take(a, i, axis=axis))

    def test_order_within_leaves(self):
        a = np.arange(40).reshape((20, 2))
        parts = leaves(AxisProducer(ArrayView(a), 0), min_len=3)
        assert all(len(leaf) >= 3 for leaf in parts)
        rows = [row for leaf in parts for row in leaf]
        assert np.array_equal(np.stack(rows), a)

    def test_position_of_sub_view(self):
        a = np.arange(24).reshape((8, 3))
        view = ArrayView(a).view(0, 2, 6)
        producer = AxisProducer(view, 0)
        assert producer.position == 0
        (left, right) = producer.split()
        assert (left.position, right.position) == (0, 2)
        assert np.array_equal(next(iter(right)), a[4])

    def test_shared_slices_are_read_only(self):
        producer = AxisProducer(ArrayView(np.zeros((2, 2))), 0)
        for row in producer:
            assert not row.flags.writeable

    def test_leaf_cannot_split(self):
        for shape in [(1, 5), (0, 5)]:
            producer = AxisProducer(ArrayView(np.zeros(shape)), 0)
            assert not producer.splittable()
            with pytest.raises(LeafSplitError):
                producer.split()

class TestZipProducer:
    def test_shape_mismatch(self):
        with pytest.raises(ShapeMismatchError):
            ZipProducer([ArrayView(np.zeros((4, 16))), ArrayView(np.zeros((8, 8)))])

    def test_needs_a_view(self):
        with pytest.raises(ValueError):
            ZipProducer([])

    def test_aliasing(self):
        a = np.zeros((4, 4))
        with pytest.raises(AliasingError):
            ZipProducer([ArrayView(a, mode=Mode.EXCLUSIVE), ArrayView(a)])
        with pytest.raises(AliasingError):
            ZipProducer([ArrayView(a[1:], mode=Mode.EXCLUSIVE), ArrayView(a[:-1], mode=Mode.SHARED)])
        # Reading the same array twice is fine.
        ZipProducer([ArrayView(a), ArrayView(a)])

    def test_splits_in_lock_step(self):
        a = np.arange(60).reshape((3, 4, 5))
        b = np.arange(60, 120).reshape((3, 4, 5))
        root = ZipProducer([ArrayView(a), ArrayView(b)])
        parts = leaves(root)
        assert sum(len(leaf) for leaf in parts) == len(root) == 60
        for leaf in parts:
            assert leaf.views[0].ranges == leaf.views[1].ranges
        counts = covered([leaf.views[0] for leaf in parts])
        assert set(counts) == set(ArrayView(a).indices())
        assert all(count == 1 for count in counts.values())

    def test_items_are_aligned(self):
        a = np.arange(12).reshape((3, 4))
        b = a * 10
        items = [item for leaf in leaves(ZipProducer([ArrayView(a), ArrayView(b)])) for item in leaf]
        assert len(items) == 12
        assert all(y == 10 * x for (x, y) in items)

    def test_exclusive_items_are_writable(self):
        a = np.full((4, 4), 3.0)
        c = np.zeros((4, 4))
        for leaf in leaves(ZipProducer([ArrayView(c, mode=Mode.EXCLUSIVE), ArrayView(a)])):
            for (x, y) in leaf:
                x[...] = y + 1
        assert (c == 4.0).all()

    def test_axis(self):
        a = np.arange(12).reshape((3, 4))
        root = ZipProducer([ArrayView(a), ArrayView(a * 2)], axis=0)
        assert root.ordered
        assert len(root) == 3
        parts = leaves(root)
        assert [leaf.position for leaf in parts] == [0, 1, 2]
        for (i, (x, y)) in enumerate(item for leaf in parts for item in leaf):
            assert np.array_equal(x, a[i])
            assert np.array_equal(y, 2 * a[i])

    def test_block(self):
        a = np.arange(12).reshape((3, 4))
        (left, _) = ZipProducer([ArrayView(a), ArrayView(a)]).split()
        (x, y) = left.block()
        assert x.shape == y.shape == (3, 2)

class TestSerialDriverReference:
    def test_split_depth_does_not_change_results(self):
        a = np.random.default_rng(1).integers(0, 100, size=(9, 7))
        b = np.random.default_rng(2).integers(0, 100, size=(9, 7))
        expected = int((a * b).sum())
        for min_len in [1, 2, 5, 63, 100]:
            parts = leaves(ZipProducer([ArrayView(a), ArrayView(b)]), min_len)
            total = sum(leaf.fold(0, lambda acc, t: acc + int(t[0] * t[1])) for leaf in parts)
            assert total == expected

    def test_unbounded_budget(self):
        driver = Driver.serial()
        assert driver.workers == 1
        assert driver.splits == math.inf
