""" Parallel iterators over arrays, array axes and zipped arrays.

These are the entry points of the package. Each entry point wraps an array in
the producer for its iteration contract and returns an iterator object whose
terminal operations (``for_each``, ``fold``, ``collect``, ...) hand the
producer to a ``Driver``.

"""

import functools
import itertools
import operator

from .producers import ElementProducer, AxisProducer, ZipProducer
from .producers.zip import check_views
from .view import Mode, as_view
from .vm import Driver

class Mut(object):
    """ Marker that marks a zipped array as written by the traversal. """

    __slots__ = [ "value" ]
    def __init__(self, value):
        self.value = value

def mut(x):
    """ Marks an array as mutable within a ``Zip``.

    Zipped arrays are read-only by default. Elements of arrays wrapped with
    this function are passed to the applied function as writable 0-d arrays.

    Parameters
    ----------
    x : numpy.ndarray or ArrayView

    Returns
    -------
    Mut

    """
    return Mut(x)

class ParallelIterator(object):
    """ A parallel iterator with no ordering guarantee between leaves.

    Iterators are lazy: ``map`` and ``with_driver`` return new iterators, and
    nothing runs until a terminal operation is called.

    """

    __slots__ = [ "producer", "stages", "driver" ]

    def __init__(self, producer, stages=(), driver=None):
        """ Creates an iterator over ``producer``.

        Parameters
        ----------

        producer : Producer
            The root unit of work.
        stages : tuple of callable
            Transformations applied to each leaf's items, in order. Each is
            called with the leaf and an iterator over its items.
        driver : Driver or None
            The driver to run on. A default driver is created for each
            terminal operation if unset.

        """
        self.producer = producer
        self.stages = stages
        self.driver = driver

    def _with(self, stages=None, driver=None):
        return type(self)(self.producer,
                self.stages if stages is None else stages,
                self.driver if driver is None else driver)

    def _driver(self):
        return self.driver if self.driver is not None else Driver()

    def _items(self, leaf):
        items = iter(leaf)
        for stage in self.stages:
            items = stage(leaf, items)
        return items

    def _run(self, consume):
        return self._driver().run(self.producer, consume)

    def __len__(self):
        return len(self.producer)

    def map(self, f):
        """ Returns an iterator over ``f(item)`` for every item. """
        return self._with(stages=self.stages + (lambda _, items: map(f, items),))

    def with_driver(self, driver):
        return self._with(driver=driver)

    def with_min_len(self, min_len):
        """ Returns an iterator whose leaves hold at least ``min_len`` items
        whenever the producer is large enough.

        """
        driver = self._driver()
        return self._with(driver=Driver(driver.workers, min_len, driver.splits, driver.mode))

    def for_each(self, f):
        """ Calls ``f`` on every item.

        Calls on different leaves may run concurrently and in any order; all
        of them have completed when this returns.

        """
        def consume(leaf):
            for item in self._items(leaf):
                f(item)
        self._run(consume)

    def for_each_block(self, f):
        """ Calls ``f`` once per leaf with the leaf's whole region.

        For a single array the region is a numpy view; for a ``Zip`` it is a
        tuple of views. This lets ``f`` use vectorized numpy operations instead
        of handling one item at a time.

        """
        if len(self.stages) != 0:
            raise ValueError("for_each_block cannot follow map or enumerate")
        self._run(lambda leaf: f(leaf.block()))

    def fold(self, identity, fold_op, combine=None):
        """ Folds the items of each leaf, then optionally combines the results.

        Parameters
        ----------

        identity : callable
            Returns the initial accumulator. Called once per leaf, so a fresh
            mutable accumulator can be used by each.
        fold_op : callable
            ``fold_op(acc, item)`` returns the next accumulator.
        combine : callable or None
            ``combine(a, b)`` merges two accumulators. It should be
            associative; for unordered iterators it should also be
            commutative.

        Returns
        -------
        any
            The per-leaf accumulators in leaf order if ``combine`` is None,
            otherwise all of them combined, starting from ``identity()``.

        """
        partials = self._run(lambda leaf: functools.reduce(fold_op, self._items(leaf), identity()))
        if combine is None:
            return partials
        return functools.reduce(combine, partials, identity())

    def reduce(self, identity, op):
        return self.fold(identity, op, op)

    def sum(self):
        return self.reduce(lambda: 0, operator.add)

    def count(self):
        return self.fold(lambda: 0, lambda n, _: n + 1, operator.add)

    def _extreme(self, pick):
        def consume(leaf):
            items = list(self._items(leaf))
            return pick(items) if len(items) != 0 else None
        partials = [p for p in self._run(consume) if p is not None]
        return pick(partials) if len(partials) != 0 else None

    def min(self):
        """ Returns the smallest item, or ``None`` if there are none. """
        return self._extreme(min)

    def max(self):
        """ Returns the largest item, or ``None`` if there are none. """
        return self._extreme(max)

    def collect(self):
        """ Returns all items as a list.

        Items of one leaf are contiguous and in storage order; the order of
        leaves follows the splits but carries no meaning for unordered
        iterators.

        """
        return list(itertools.chain.from_iterable(self._run(lambda leaf: list(self._items(leaf)))))

class IndexedParallelIterator(ParallelIterator):
    """ A parallel iterator with exact length and a total order.

    The result of ``collect`` is sized from ``len()`` before any work starts,
    and each leaf writes its results at its position, so item ``i`` of the
    output always corresponds to item ``i`` of the input.

    """

    __slots__ = []

    def enumerate(self):
        """ Returns an iterator over ``(index, item)`` pairs. """
        return self._with(stages=self.stages + (lambda leaf, items: enumerate(items, leaf.position),))

    def collect(self):
        output = [None] * len(self)
        for (position, items) in self._run(lambda leaf: (leaf.position, list(self._items(leaf)))):
            output[position:position + len(items)] = items
        return output

def par_iter(array):
    """ Returns an unordered parallel iterator over the elements of ``array``. """
    return ParallelIterator(ElementProducer(as_view(array, Mode.SHARED)))

def par_iter_mut(array):
    """ Returns an unordered parallel iterator over writable 0-d views of the
    elements of ``array``.

    """
    return ParallelIterator(ElementProducer(as_view(array, Mode.EXCLUSIVE)))

def axis_iter(array, axis):
    """ Returns an ordered parallel iterator over the slices of ``array``
    along ``axis``.

    Raises
    ------
    InvalidAxisError
        If ``axis`` is not a dimension of ``array``.

    """
    return IndexedParallelIterator(AxisProducer(as_view(array, Mode.SHARED), axis))

def axis_iter_mut(array, axis):
    """ Like ``axis_iter``, but the slices are writable. """
    return IndexedParallelIterator(AxisProducer(as_view(array, Mode.EXCLUSIVE), axis))

def par_map_inplace(array, f):
    """ Calls ``f`` on a writable 0-d view of every element of ``array``. """
    par_iter_mut(array).for_each(f)

def par_mapv_inplace(array, f):
    """ Replaces every element ``x`` of ``array`` with ``f(x)``. """
    def assign(x):
        x[...] = f(x[()])
    par_iter_mut(array).for_each(assign)

class Zip(object):
    """ Lock-step traversal of several arrays of the same shape.

    Arrays are read-only unless wrapped with ``mut``. An axis iterator (from
    ``axis_iter`` or ``axis_iter_mut``) may be used in place of an array, in
    which case all arrays are traversed slice by slice along that axis, in
    order::

        Zip(mut(c), a, b).par_apply(lambda c, a, b: c.__iadd__(a - b))

    Shapes are checked as arrays are added, so a mismatch is reported before
    any work starts.

    """

    __slots__ = [ "views", "axis", "driver" ]

    def __init__(self, *parts):
        self.views = ()
        self.axis = None
        self.driver = None
        for part in parts:
            self.and_(part)

    @classmethod
    def from_(cls, part):
        return cls(part)

    def and_(self, part):
        """ Adds an array to this zip and returns the zip.

        Raises
        ------
        ShapeMismatchError
            If the array's shape differs from the arrays already added.
        AliasingError
            If a written array may overlap another array in the zip.

        """
        axis = None
        if isinstance(part, ParallelIterator):
            if not isinstance(part.producer, AxisProducer) or len(part.stages) != 0:
                raise TypeError("only unmapped axis iterators can be zipped")
            (view, axis) = (part.producer.view, part.producer.axis)
        elif isinstance(part, Mut):
            view = as_view(part.value, Mode.EXCLUSIVE)
        else:
            view = as_view(part, Mode.SHARED)

        if axis is not None and self.axis is not None and axis != self.axis:
            raise ValueError("cannot zip axis iterators over axes {} and {}".format(self.axis, axis))

        views = self.views + (view,)
        check_views(views)
        self.views = views
        if axis is not None:
            self.axis = axis
        return self

    def with_driver(self, driver):
        self.driver = driver
        return self

    @property
    def shape(self):
        return self.views[0].shape if len(self.views) != 0 else None

    def producer(self):
        if len(self.views) == 0:
            raise ValueError("zip has no arrays")
        return ZipProducer(self.views, self.axis, validate=False)

    def __len__(self):
        return len(self.producer())

    def par_iter(self):
        """ Returns a parallel iterator over aligned tuples. """
        if self.axis is not None:
            return IndexedParallelIterator(self.producer(), driver=self.driver)
        return ParallelIterator(self.producer(), driver=self.driver)

    def par_apply(self, f):
        """ Calls ``f(*item)`` for every aligned position, in parallel. """
        self.par_iter().for_each(lambda item: f(*item))

    def par_apply_blocks(self, f):
        """ Calls ``f(*arrays)`` once per leaf with aligned sub-arrays. """
        self.par_iter().for_each_block(lambda arrays: f(*arrays))

    def apply(self, f):
        """ Calls ``f(*item)`` for every aligned position, serially. """
        self.producer().for_each(lambda item: f(*item))
