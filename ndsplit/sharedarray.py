"""
Allocation of arrays in anonymous shared memory.

Workers of a process-mode driver are forked from the caller, so writes they
make through exclusive views only reach the caller if the array lives in
shared memory. Arrays returned here are ordinary ``numpy.ndarray`` objects
and can be used everywhere a regular array can.

"""

import mmap

import numpy as np
import sharedmem

def empty(shape, dtype=np.float64):
    return sharedmem.empty(shape, dtype)

def full(shape, fill_value, dtype=np.float64):
    result = sharedmem.empty(shape, dtype)
    result[...] = fill_value
    return result

def zeros(shape, dtype=np.float64):
    return full(shape, 0, dtype)

def ones(shape, dtype=np.float64):
    return full(shape, 1, dtype)

def copy(array):
    """ Returns a shared-memory copy of ``array``. """
    array = np.asarray(array)
    result = sharedmem.empty(array.shape, array.dtype)
    result[...] = array
    return result

def is_shared(array):
    """ Returns whether ``array`` is backed by a memory map, such as the
    anonymous shared memory allocated by this module.

    Views of a shared array are shared as well: the chain of ``base`` arrays
    is followed down to the object that owns the buffer.

    """
    owner = array
    while isinstance(owner, np.ndarray) and owner.base is not None:
        owner = owner.base
    return isinstance(owner, mmap.mmap)
