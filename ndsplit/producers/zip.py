""" Lock-step traversal over several equally shaped views. """

import numpy as np

from ..policy import bisect, size_of, split_point
from .axis import normalize_axis
from .producer import Producer, ShapeMismatchError, AliasingError

def check_views(views):
    """ Validates views that will be traversed in lock step.

    Raises
    ------
    ShapeMismatchError
        If the views do not all have the same shape.
    AliasingError
        If an exclusive view may share memory with any other view.

    """
    if len(views) == 0:
        raise ValueError("lock-step traversal needs at least one array")

    shape = views[0].shape
    for (i, view) in enumerate(views[1:], start=1):
        if view.shape != shape:
            raise ShapeMismatchError("array {} has shape {}, expected {}".format(i, view.shape, shape))

    for (i, view) in enumerate(views):
        if not view.writeable:
            continue
        for (j, other) in enumerate(views):
            if i != j and np.may_share_memory(view.array, other.array):
                raise AliasingError("array {} is written but may overlap array {}".format(i, j))

class ZipProducer(Producer):
    """ Yields aligned tuples from N views of identical shape.

    Every split applies the same split point to all N views, so the halves
    stay aligned position by position. Shapes are checked once when the root
    producer is created; halves skip the check.

    Without an axis, items are tuples of elements (scalars for shared views,
    writable 0-d arrays for exclusive ones) and leaves are unordered. With an
    axis, items are tuples of slices along that axis, yielded in index order
    with an exact length, as for ``AxisProducer``.

    """

    __slots__ = [ "views", "axis", "origin" ]

    def __init__(self, views, axis=None, origin=None, validate=True):
        views = tuple(views)
        if validate:
            check_views(views)
        if axis is not None:
            axis = normalize_axis(axis, views[0].ndim)
            if origin is None:
                origin = views[0].ranges[axis][0]
        self.views = views
        self.axis = axis
        self.origin = origin

    @property
    def ordered(self):
        return self.axis is not None

    @property
    def shape(self):
        return self.views[0].shape

    def __len__(self):
        if self.axis is not None:
            return self.shape[self.axis]
        return size_of(self.shape)

    def splittable(self):
        if self.axis is not None:
            return len(self) > 1
        return split_point(self.shape) is not None

    def _split(self):
        if self.axis is not None:
            (dim, index) = (self.axis, bisect(len(self)))
        else:
            (dim, index) = split_point(self.shape)

        halves = [view.split_at(dim, index) for view in self.views]
        left = ZipProducer([l for (l, _) in halves], self.axis, self.origin, validate=False)
        right = ZipProducer([r for (_, r) in halves], self.axis, self.origin, validate=False)
        return (left, right)

    @property
    def position(self):
        if self.axis is None:
            return None
        return self.views[0].ranges[self.axis][0] - self.origin

    def __iter__(self):
        if self.axis is not None:
            for i in range(len(self)):
                yield tuple(view.index_axis(self.axis, i) for view in self.views)
        else:
            regions = [view.array for view in self.views]
            getters = []
            for (view, region) in zip(self.views, regions):
                if view.writeable:
                    getters.append(lambda index, region=region: region[index + (Ellipsis,)])
                else:
                    getters.append(region.__getitem__)
            for index in np.ndindex(*self.shape):
                yield tuple(get(index) for get in getters)

    def all_views(self):
        return list(self.views)

    def block(self):
        return tuple(view.array for view in self.views)

    def __repr__(self):
        return "ZipProducer({!r}, axis={})".format(list(self.views), self.axis)
