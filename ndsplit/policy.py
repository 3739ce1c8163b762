""" Choosing where to bisect a multi-dimensional unit of work. """

from collections import namedtuple
from functools import reduce
import operator

# A work unit divides into [0, index) and [index, extent) along dim.
SplitPoint = namedtuple("SplitPoint", ["dim", "index"])

def size_of(shape):
    """ Returns the number of elements in an array of the given shape. """
    return reduce(operator.mul, shape, 1)

def bisect(extent):
    return extent // 2

def split_point(shape, exclude=None):
    """ Returns the point at which a work unit of the given shape is split.

    The largest dimension is halved, with ties going to the lowest dimension
    index. Halves differ in size by at most one along the split dimension, so
    recursion depth is bounded by log2 of the largest extent.

    Parameters
    ----------

    shape : tuple of int
        Extents of the work unit.
    exclude : int or None
        A dimension that may not be split.

    Returns
    -------
    SplitPoint or None
        ``None`` if the unit is unsplittable, i.e., it holds at most one
        element or no eligible dimension has an extent larger than one.

    """
    if size_of(shape) <= 1:
        return None

    eligible = [dim for dim in range(len(shape)) if dim != exclude]
    if len(eligible) == 0:
        return None

    # max() keeps the first maximum, which is the lowest dimension index.
    dim = max(eligible, key=lambda d: shape[d])
    if shape[dim] <= 1:
        return None
    return SplitPoint(dim, bisect(shape[dim]))
