
from abc import ABC, abstractmethod

class InvalidAxisError(ValueError, IndexError):
    """ Raised when an axis is outside the dimensionality of a view. """
    pass

class ShapeMismatchError(ValueError):
    """ Raised when arrays traversed in lock step do not share a shape. """
    pass

class AliasingError(ValueError):
    """ Raised when a value written by a traversal may also be read through
    another view in the same traversal.

    """
    pass

class LeafSplitError(RuntimeError):
    """ Raised when ``split`` is called on a producer that cannot be split.

    Drivers must check ``splittable()`` first; this indicates a bug in the
    driver, not a condition to recover from.

    """
    pass

class Producer(ABC):
    """The base producer class.

    A producer is a unit of parallel work over one or more array views. A
    driver splits producers recursively into disjoint halves until they are
    small enough, then drains each leaf serially, possibly on different
    workers.

    Producers hold nothing besides their views and, for ordered producers,
    their axis. They are never modified once created; ``split`` returns new
    producers.

    """

    # Whether items are yielded in a total order that survives splitting.
    ordered = False

    @abstractmethod
    def __len__(self):
        """ Returns the number of items this producer yields. """
        pass

    @abstractmethod
    def splittable(self):
        """ Returns whether this producer can be split. """
        pass

    @abstractmethod
    def _split(self):
        pass

    @abstractmethod
    def __iter__(self):
        """ Yields the items of this producer serially, in storage order. """
        pass

    @abstractmethod
    def all_views(self):
        """ Returns the views this producer traverses. """
        pass

    @abstractmethod
    def block(self):
        """ Returns the whole region of this producer as numpy views.

        This is used for vectorized consumption of a leaf, where a function
        receives the leaf's arrays instead of one item at a time.

        """
        pass

    def split(self):
        """Splits this producer into two disjoint producers.

        The items of the two halves are disjoint and together are exactly the
        items of this producer. For ordered producers, every item of the left
        half precedes every item of the right half.

        Returns
        -------
        (Producer, Producer)
            The left and right halves.

        Raises
        ------
        LeafSplitError
            If this producer is a leaf.

        """
        if not self.splittable():
            raise LeafSplitError("split called on a leaf {!r}".format(self))
        return self._split()

    def written(self):
        """ Returns the exclusive views this producer writes through. """
        return [view for view in self.all_views() if view.writeable]

    @property
    def position(self):
        """ Global index of the first item for ordered producers, else ``None``. """
        return None

    def fold(self, init, f):
        """ Folds the items of this producer into ``init`` with ``f(acc, item)``. """
        acc = init
        for item in self:
            acc = f(acc, item)
        return acc

    def for_each(self, f):
        """ Calls ``f`` on every item of this producer. """
        for item in self:
            f(item)
