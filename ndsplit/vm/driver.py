
import logging
import math
import multiprocessing
import multiprocessing.dummy
import threading
import time

from ..config import config
from ..sharedarray import is_shared

logger = logging.getLogger(__name__)

# Leaves and consume function of the call currently being executed by a
# process pool. Forked workers see these through copy-on-write memory.
_LEAVES = None
_CONSUME = None
# Held while _LEAVES and _CONSUME are published and the pool forks.
_PROCESS_LOCK = threading.Lock()

def _worker(index):
    """
    A multiprocessing worker.

    Parameters
    ----------

    index : position of the leaf to consume in the global leaf list.

    """
    return _consume(_CONSUME, _LEAVES[index])

def _consume(consume, leaf):
    """ Drains a single leaf and logs how long it took. """
    start = time.time()
    result = consume(leaf)
    logger.debug("leaf %r: %d items in %.3fs", leaf, len(leaf), time.time() - start)
    return result

class Driver:
    """
    Parallel driver and scheduler for producers.

    The driver splits a producer recursively, as a work-stealing scheduler
    would, and then drains the resulting leaves on a pool of workers. Any two
    leaves may run concurrently; results are returned in leaf order, left to
    right, regardless of the order in which leaves finish.

    """

    __slots__ = [ "workers", "min_len", "splits", "mode" ]

    def __init__(self, workers=None, min_len=None, splits=None, mode=None):
        """ Creates a driver.

        Parameters
        ----------

        workers : int
            Number of pool workers. With a single worker, leaves are drained
            serially on the calling thread.
        min_len : int
            Smallest number of items a split half may hold.
        splits : int or float
            Initial split budget, halved at every level of recursion.
            ``math.inf`` splits until ``min_len`` or until producers cannot be
            split further. Defaults to ``workers * splits_per_worker``.
        mode : str
            ``"threads"`` or ``"processes"``.

        Unset parameters are taken from ``ndsplit.config.config``.

        """
        self.workers = workers if workers is not None else config["workers"]
        self.min_len = min_len if min_len is not None else config["min_len"]
        if splits is None:
            splits = self.workers * config["splits_per_worker"]
        self.splits = splits
        self.mode = mode if mode is not None else config["mode"]

        if self.workers < 1:
            raise ValueError("workers must be at least 1, got {}".format(self.workers))
        if self.min_len < 1:
            raise ValueError("min_len must be at least 1, got {}".format(self.min_len))
        if self.mode not in ("threads", "processes"):
            raise ValueError("mode must be 'threads' or 'processes', got {!r}".format(self.mode))

    @classmethod
    def serial(cls, min_len=1):
        """ Returns a single-threaded driver that splits all the way down to
        ``min_len``. It is the reference against which parallel results are
        compared.

        """
        return cls(workers=1, min_len=min_len, splits=math.inf)

    def _try_split(self, producer, splits):
        """ Returns the halves of ``producer``, or ``None`` if it should stay
        a leaf. Halves of multi-dimensional producers can differ in size, so
        the smaller one is checked against ``min_len``.

        """
        if splits <= 0 or not producer.splittable():
            return None
        (left, right) = producer.split()
        if min(len(left), len(right)) < self.min_len:
            return None
        return (left, right)

    def partition(self, producer):
        """ Returns the leaves of ``producer``, ordered left to right. """
        leaves = []
        stack = [(producer, self.splits)]
        while len(stack) != 0:
            (cur, splits) = stack.pop()
            halves = self._try_split(cur, splits)
            if halves is not None:
                (left, right) = halves
                if splits != math.inf:
                    splits //= 2
                # Push right first so the left half is visited first.
                stack.append((right, splits))
                stack.append((left, splits))
            else:
                leaves.append(cur)
        return leaves

    def run(self, producer, consume):
        """ Drains ``producer`` with ``consume`` and returns the per-leaf results.

        Parameters
        ----------

        producer : Producer
            The root unit of work.
        consume : callable
            Called with each leaf; its return value is the leaf's result.

        Returns
        -------
        list
            Leaf results ordered left to right.

        """
        if self.mode == "processes":
            for view in producer.written():
                if view.size != 0 and not is_shared(view.base):
                    raise ValueError("arrays written by worker processes must be "
                            "allocated with ndsplit.sharedarray")

        start = time.time()
        leaves = self.partition(producer)
        logger.debug("partitioned %d items into %d leaves in %.3fs",
                len(producer), len(leaves), time.time() - start)

        if self.workers == 1 or len(leaves) == 1:
            results = [_consume(consume, leaf) for leaf in leaves]
        elif self.mode == "threads":
            with multiprocessing.dummy.Pool(self.workers) as pool:
                results = pool.map(lambda leaf: _consume(consume, leaf), leaves, chunksize=1)
        else:
            results = self._run_processes(leaves, consume)

        logger.debug("ran %d leaves on %d %s workers in %.3fs",
                len(leaves), self.workers, self.mode, time.time() - start)
        return results

    def _run_processes(self, leaves, consume):
        global _LEAVES
        global _CONSUME

        # This needs to happen before the pool forks so that children see the
        # values without pickling them. Only results travel back to the
        # parent; writes are visible to it only for shared-memory buffers.
        with _PROCESS_LOCK:
            _LEAVES = leaves
            _CONSUME = consume
            try:
                context = multiprocessing.get_context("fork")
                with context.Pool(min(self.workers, len(leaves))) as pool:
                    return pool.map(_worker, range(len(leaves)), chunksize=1)
            finally:
                _LEAVES = None
                _CONSUME = None
