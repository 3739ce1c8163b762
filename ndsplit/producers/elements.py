""" Unordered traversal over every element of a view. """

from ..policy import split_point
from .producer import Producer

class ElementProducer(Producer):
    """ Yields every element of one view.

    No order is guaranteed between elements of different leaves, which lets
    splitting always halve the largest dimension. Within a leaf, elements are
    yielded in row-major order.

    """

    __slots__ = [ "view" ]

    def __init__(self, view):
        self.view = view

    def __len__(self):
        return self.view.size

    def splittable(self):
        return split_point(self.view.shape) is not None

    def _split(self):
        point = split_point(self.view.shape)
        (left, right) = self.view.split_at(point.dim, point.index)
        return (ElementProducer(left), ElementProducer(right))

    def __iter__(self):
        return self.view.elements()

    def all_views(self):
        return [self.view]

    def block(self):
        return self.view.array

    def __repr__(self):
        return "ElementProducer({!r})".format(self.view)
