""" Views into externally owned array storage.

An ``ArrayView`` describes a rectangular region of a numpy array as one
``[start, stop)`` index range per dimension. Splitting a view only computes
new ranges; the underlying buffer is never copied, and a numpy view of the
region is materialized only when a leaf is consumed.

Because every split replaces exactly one range with two non-overlapping
ranges, the regions reachable from the two halves of a split are disjoint and
together cover the parent. This is what makes writing through exclusive
sub-views from different workers safe without locks.

"""

import enum
import itertools

import numpy as np

from .policy import size_of

class Mode(enum.Enum):
    """ Access mode of a view. """
    SHARED = "shared"
    EXCLUSIVE = "exclusive"

class ArrayView(object):
    """ A region of a numpy array, addressed by index ranges. """

    __slots__ = [ "base", "ranges", "mode" ]

    def __init__(self, base, ranges=None, mode=Mode.SHARED):
        """ Creates a view over ``base``.

        Parameters
        ----------

        base : numpy.ndarray
            The array that owns the storage. It may itself be a strided view.
        ranges : sequence of (int, int) or None
            ``(start, stop)`` for each dimension of ``base``. Defaults to the
            whole array.
        mode : Mode
            ``Mode.SHARED`` for read-only access, ``Mode.EXCLUSIVE`` for
            write access.

        """
        if ranges is None:
            ranges = tuple((0, extent) for extent in base.shape)
        else:
            ranges = tuple((int(start), int(stop)) for (start, stop) in ranges)
            if len(ranges) != base.ndim:
                raise ValueError("expected {} ranges, got {}".format(base.ndim, len(ranges)))
            for ((start, stop), extent) in zip(ranges, base.shape):
                if not 0 <= start <= stop <= extent:
                    raise ValueError("range [{}, {}) out of bounds for extent {}".format(
                        start, stop, extent))

        if mode is Mode.EXCLUSIVE and not base.flags.writeable:
            raise ValueError("cannot take exclusive access to a read-only array")

        self.base = base
        self.ranges = ranges
        self.mode = mode

    @property
    def shape(self):
        return tuple(stop - start for (start, stop) in self.ranges)

    @property
    def ndim(self):
        return len(self.ranges)

    @property
    def size(self):
        return size_of(self.shape)

    @property
    def strides(self):
        """ Byte strides per dimension; sub-views share the strides of the base. """
        return self.base.strides

    @property
    def offset(self):
        """ Byte offset of the first element of this view within the base. """
        return sum(start * stride for ((start, _), stride) in zip(self.ranges, self.base.strides))

    @property
    def writeable(self):
        return self.mode is Mode.EXCLUSIVE

    def view(self, dim, start, stop):
        """ Returns a sub-view restricting ``dim`` to ``[start, stop)``.

        The bounds are relative to this view.

        """
        (lo, hi) = self.ranges[dim]
        if not 0 <= start <= stop <= hi - lo:
            raise ValueError("range [{}, {}) out of bounds for extent {}".format(
                start, stop, hi - lo))
        ranges = list(self.ranges)
        ranges[dim] = (lo + start, lo + stop)
        return ArrayView(self.base, ranges, self.mode)

    def split_at(self, dim, index):
        """ Splits this view into ``[0, index)`` and ``[index, extent)`` along ``dim``. """
        extent = self.shape[dim]
        return (self.view(dim, 0, index), self.view(dim, index, extent))

    def _slices(self):
        # The trailing Ellipsis keeps 0-d results as views rather than scalars.
        return tuple(slice(start, stop) for (start, stop) in self.ranges) + (Ellipsis,)

    @property
    def array(self):
        """ The region as a numpy view of the base array.

        The returned array is read-only unless the view is exclusive.

        """
        region = self.base[self._slices()]
        if not self.writeable:
            region.flags.writeable = False
        return region

    def index_axis(self, axis, i):
        """ Returns the ``i``-th slice along ``axis`` with that axis removed. """
        (start, stop) = self.ranges[axis]
        if not 0 <= i < stop - start:
            raise IndexError("index {} out of bounds for axis {} with extent {}".format(
                i, axis, stop - start))
        index = list(self._slices())
        index[axis] = start + i
        region = self.base[tuple(index)]
        if not self.writeable:
            region.flags.writeable = False
        return region

    def elements(self):
        """ Yields every element of the view in row-major order.

        Shared views yield numpy scalars. Exclusive views yield writable 0-d
        arrays, so callers can assign through them with ``x[...] = value``.

        """
        region = self.array
        if self.writeable:
            for index in np.ndindex(*region.shape):
                yield region[index + (Ellipsis,)]
        else:
            for value in region.flat:
                yield value

    def indices(self):
        """ Yields the index tuples of the base array covered by this view. """
        return itertools.product(*[range(start, stop) for (start, stop) in self.ranges])

    def __len__(self):
        return self.size

    def __repr__(self):
        return "ArrayView(shape={}, ranges={}, mode={})".format(
            self.shape, self.ranges, self.mode.value)

def as_view(obj, mode=Mode.SHARED):
    """ Converts an array-like value into an ``ArrayView`` with the given mode.

    ``ArrayView`` inputs are re-tagged with ``mode`` without changing their
    region. Exclusive access requires a writeable ``numpy.ndarray``, since
    writes to a temporary copy would be lost.

    """
    if isinstance(obj, ArrayView):
        if obj.mode is mode:
            return obj
        return ArrayView(obj.base, obj.ranges, mode)

    if mode is Mode.EXCLUSIVE and not isinstance(obj, np.ndarray):
        raise TypeError("exclusive access requires a numpy.ndarray, got {}".format(
            type(obj).__name__))
    return ArrayView(np.asarray(obj), mode=mode)
