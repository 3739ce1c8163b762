"""
The ``ndsplit`` package parallelizes traversal of numpy arrays.

Arrays and array views can be iterated in parallel element by element; these
iterators give no ordering guarantee between elements handled by different
workers::

    import numpy as np
    import ndsplit

    a = np.zeros((128, 128))
    ndsplit.par_mapv_inplace(a, np.exp)
    ndsplit.par_iter_mut(a).for_each(lambda x: x.__imul__(2))

Iteration along an axis is ordered and has an exact length, so results can be
collected by position. Summing each row::

    a = np.linspace(0., 63., 64).reshape((4, 16))
    sums = ndsplit.axis_iter(a, 0).map(lambda row: row.sum()).collect()
    assert sums == [120., 376., 632., 888.]

``Zip`` applies a function to several arrays of the same shape in lock step.
Arrays wrapped with ``mut`` are written::

    n = 128
    a = np.full((n, n, n), 1.)
    b = np.full(a.shape, 2.)
    c = np.zeros(a.shape)

    ndsplit.Zip(ndsplit.mut(c), a, b).par_apply(lambda c, a, b: c.__iadd__(a - b))

Work is split recursively by halving arrays into disjoint regions, and the
regions are drained on a pool of workers by a ``Driver``. Workers are threads
by default; see ``ndsplit.config`` to change the number of workers or to use
processes, and ``ndsplit.sharedarray`` for arrays that processes can write.

"""

from .parallel import (
    IndexedParallelIterator,
    Mut,
    ParallelIterator,
    Zip,
    axis_iter,
    axis_iter_mut,
    mut,
    par_iter,
    par_iter_mut,
    par_map_inplace,
    par_mapv_inplace,
)
from .policy import SplitPoint, split_point
from .producers import (
    AliasingError,
    AxisProducer,
    ElementProducer,
    InvalidAxisError,
    LeafSplitError,
    Producer,
    ShapeMismatchError,
    ZipProducer,
)
from .view import ArrayView, Mode, as_view
from .vm import Driver
