""" Ordered, exact-length traversal over the slices along one axis. """

import operator

from ..policy import bisect
from .producer import Producer, InvalidAxisError

def normalize_axis(axis, ndim):
    """ Returns ``axis`` as a non-negative index, raising ``InvalidAxisError``
    if it does not name a dimension of an ``ndim``-dimensional array.

    """
    try:
        axis = operator.index(axis)
    except TypeError:
        raise InvalidAxisError("axis must be an integer, got {!r}".format(axis))
    if not -ndim <= axis < ndim:
        raise InvalidAxisError("axis {} is out of bounds for array of dimension {}".format(axis, ndim))
    return axis % ndim

class AxisProducer(Producer):
    """ Yields the slices of a view along a fixed axis, in index order.

    The length is the extent of the axis, so consumers can size their output
    before any work starts. Splitting always bisects the axis itself, keeping
    lower indices in the left half; ``position`` is the index of the first
    slice of a producer relative to the producer it was split from.

    """

    __slots__ = [ "view", "axis", "origin" ]

    ordered = True

    def __init__(self, view, axis, origin=None):
        """ Creates a producer over the slices of ``view`` along ``axis``.

        Parameters
        ----------

        view : ArrayView
            The view to traverse.
        axis : int
            The axis to iterate over. Negative values count from the end.
        origin : int or None
            Start of the root producer's range along the axis in base
            coordinates. Only set by ``split``.

        Raises
        ------
        InvalidAxisError
            If ``axis`` is not a dimension of ``view``.

        """
        self.view = view
        self.axis = normalize_axis(axis, view.ndim)
        if origin is None:
            origin = view.ranges[self.axis][0]
        self.origin = origin

    def __len__(self):
        return self.view.shape[self.axis]

    def splittable(self):
        return len(self) > 1

    def _split(self):
        mid = bisect(len(self))
        (left, right) = self.view.split_at(self.axis, mid)
        return (AxisProducer(left, self.axis, self.origin),
                AxisProducer(right, self.axis, self.origin))

    @property
    def position(self):
        return self.view.ranges[self.axis][0] - self.origin

    def __iter__(self):
        for i in range(len(self)):
            yield self.view.index_axis(self.axis, i)

    def all_views(self):
        return [self.view]

    def block(self):
        return self.view.array

    def __repr__(self):
        return "AxisProducer({!r}, axis={}, position={})".format(
            self.view, self.axis, self.position)
