# randfeat/_batch.py
#
# Copyright (c) 2023, Giacomo Petrillo
#
# This file is part of randfeat.
#
# randfeat is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# randfeat is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with randfeat.  If not, see <http://www.gnu.org/licenses/>.

"""

Split arrays in contiguous chunks along an axis. Used to bound the memory of
the feature matrices, which are never formed in full.

A batch size of 0 means "everything in one batch".

"""

import operator

__all__ = [
    'batch_slices',
    'batch',
]

def batch_slices(n, batch_size):
    """
    
    Split range(n) in contiguous slices.
    
    Parameters
    ----------
    n : int
        The length of the sequence to split.
    batch_size : int
        The maximum length of each slice. If 0, a single slice covering
        everything is returned.
    
    Returns
    -------
    slices : list of slice
        The slices, in order. Only the last one may be shorter than
        `batch_size`. There is always at least one slice, even if `n` is 0.
    
    """
    n = operator.index(n)
    batch_size = operator.index(batch_size)
    if n < 0:
        raise ValueError(f'negative length {n}')
    if batch_size < 0:
        raise ValueError(f'negative batch size {batch_size}')
    if batch_size == 0 or batch_size >= n:
        return [slice(0, n)]
    return [
        slice(start, min(start + batch_size, n))
        for start in range(0, n, batch_size)
    ]

def batch(container, batch_size, axis=-1):
    """
    
    Split an array in chunks along an axis.
    
    Parameters
    ----------
    container : array
        The array to split. Must have a `shape` and support basic indexing.
    batch_size : int
        The maximum size of each chunk along `axis`, 0 for a single chunk.
    axis : int
        The axis to split along, default last. Samples are stored as columns,
        so this is the sample axis of inputs and outputs.
    
    Returns
    -------
    chunks : list of arrays
        The chunks, in order.
    
    """
    ndim = len(container.shape)
    if not -ndim <= axis < ndim:
        raise ValueError(f'axis {axis} out of bounds for array with {ndim} dimensions')
    axis %= ndim
    index = (slice(None),) * axis
    return [
        container[index + (s,)]
        for s in batch_slices(container.shape[axis], batch_size)
    ]
