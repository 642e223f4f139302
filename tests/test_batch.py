# randfeat/tests/test_batch.py
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

import numpy as np
from jax import numpy as jnp
import pytest

import randfeat as rf
from . import util

def test_zero_means_one_batch():
    assert rf.batch_slices(7, 0) == [slice(0, 7)]

def test_large_batch():
    assert rf.batch_slices(7, 7) == [slice(0, 7)]
    assert rf.batch_slices(7, 100) == [slice(0, 7)]

def test_last_shorter():
    assert rf.batch_slices(7, 3) == [slice(0, 3), slice(3, 6), slice(6, 7)]

def test_divisor():
    assert rf.batch_slices(6, 2) == [slice(0, 2), slice(2, 4), slice(4, 6)]

def test_empty():
    assert rf.batch_slices(0, 3) == [slice(0, 0)]

def test_negative():
    with pytest.raises(ValueError):
        rf.batch_slices(5, -1)
    with pytest.raises(ValueError):
        rf.batch_slices(-1, 1)

def test_non_integer():
    with pytest.raises(TypeError):
        rf.batch_slices(5, 1.5)

@pytest.mark.parametrize('size', [0, 1, 2, 4, 5, 11])
def test_batch_columns(size):
    x = np.arange(30).reshape(3, 10)
    chunks = rf.batch(x, size)
    if size == 0:
        assert len(chunks) == 1
    assert all(c.shape[0] == 3 for c in chunks)
    assert all(c.shape[1] <= (size or 10) for c in chunks)
    util.assert_equal(np.concatenate(chunks, axis=1), x)

def test_batch_axis0():
    x = jnp.arange(10)
    chunks = rf.batch(x, 4, axis=0)
    assert [len(c) for c in chunks] == [4, 4, 2]
    util.assert_equal(chunks[2], [8, 9])

def test_batch_bad_axis():
    with pytest.raises(ValueError):
        rf.batch(np.zeros((2, 3)), 1, axis=2)
