"""
The ``ndsplit.producers`` package defines the splittable units of work that
the driver distributes across workers, one class per iteration contract:

* ``ElementProducer`` yields every element of a view, in no particular order
  across leaves.
* ``AxisProducer`` yields the slices of a view along one axis, in index order,
  with an exact length known in advance.
* ``ZipProducer`` yields aligned tuples from several equally shaped views,
  splitting all of them identically.

All producers subclass the abstract ``Producer`` class, which defines
``__len__``, ``split`` and the serial drain operations.

"""

from .producer import *
from .elements import ElementProducer
from .axis import AxisProducer
from .zip import ZipProducer
