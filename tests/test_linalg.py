# randfeat/tests/test_linalg.py
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

import abc

import numpy as np
from jax import numpy as jnp
from scipy import linalg, stats
import pytest

import randfeat as rf
from randfeat import _linalg
from . import util

def randortho(n, rng):
    if n > 1:
        return stats.ortho_group.rvs(n, random_state=rng)
    else:
        # stats.ortho_group does not support n < 2
        return np.atleast_2d(2 * rng.integers(2) - 1)

class DecompTestBase(abc.ABC):
    """
    Tests common to all decompositions. Subclasses set `decompclass`, the
    `method` tag and, if they can not handle indefinite matrices,
    `posdef_only`.
    """
    
    @property
    @abc.abstractmethod
    def decompclass(self):
        pass
    
    @property
    @abc.abstractmethod
    def method(self):
        pass
    
    posdef_only = False
    
    sizes = [10, 3, 2, 1]
    
    def randsymmat(self, n, rng):
        """ random nxn positive definite matrix, reasonably conditioned """
        eigvals = rng.uniform(1e-2, 1e2, size=n)
        O = randortho(n, rng)
        K = (O * eigvals) @ O.T
        return (K + K.T) / 2
    
    def test_solve_vec(self, rng):
        for n in self.sizes:
            K = self.randsymmat(n, rng)
            b = rng.standard_normal(n)
            x = self.decompclass(jnp.asarray(K)).solve(b)
            util.assert_close_matrices(x, linalg.solve(K, b), rtol=1e-10)
    
    def test_solve_matrix(self, rng):
        for n in self.sizes:
            K = self.randsymmat(n, rng)
            b = rng.standard_normal((n, 4))
            x = self.decompclass(jnp.asarray(K)).solve(b)
            util.assert_close_matrices(x, linalg.solve(K, b), rtol=1e-10)
    
    def test_matrix(self, rng):
        K = self.randsymmat(5, rng)
        decomp = rf.decompose(K, self.method)
        assert isinstance(decomp, self.decompclass)
        assert decomp.n == 5
        util.assert_equal(rf.materialize(decomp), K)
    
    def test_indefinite(self, rng):
        if self.posdef_only:
            pytest.skip()
        O = randortho(6, rng)
        w = rng.uniform(1, 10, size=6) * np.array([-1, 1, -1, 1, 1, 1])
        K = (O * w) @ O.T
        b = rng.standard_normal(6)
        x = rf.solve(rf.decompose(K, self.method), b)
        util.assert_close_matrices(K @ x, b, rtol=1e-8)
    
    def test_singular(self, rng):
        K = np.zeros((3, 3))
        with pytest.raises(rf.NumericalError):
            rf.decompose(K, self.method)

class TestSVD(DecompTestBase):
    decompclass = _linalg.SVD
    method = 'svd'

class TestQR(DecompTestBase):
    decompclass = _linalg.QR
    method = 'qr'

class TestChol(DecompTestBase):
    decompclass = _linalg.Chol
    method = 'chol'
    posdef_only = True
    
    def test_not_posdef(self):
        with pytest.raises(rf.NumericalError):
            rf.decompose(np.diag([1., -1.]), self.method)

class TestPInv(DecompTestBase):
    decompclass = _linalg.PInv
    method = 'pinv'
    
    def test_singular(self, rng):
        # the pseudoinverse gives the minimum norm least squares solution
        n, rank = 6, 3
        O = randortho(n, rng)[:, :rank]
        K = (O * rng.uniform(1, 10, rank)) @ O.T
        b = rng.standard_normal(n)
        x = rf.solve(rf.decompose(K, self.method), b)
        util.assert_close_matrices(x, linalg.pinv(K) @ b, rtol=1e-8)
    
    def test_zero(self):
        x = rf.decompose(np.zeros((2, 2)), self.method).solve(np.ones(2))
        util.assert_equal(x, np.zeros(2))
    
    def test_eps(self):
        K = np.diag([1., 1e-3])
        x = _linalg.PInv(jnp.asarray(K), eps=1e-2).solve(np.ones(2))
        util.assert_allclose(x, [1, 0], atol=1e-15)

@pytest.mark.parametrize('tag,member', [
    ('svd', rf.DecompMethod.SVD),
    ('SVD', rf.DecompMethod.SVD),
    ('qr', rf.DecompMethod.QR),
    ('chol', rf.DecompMethod.CHOL),
    ('cholesky', rf.DecompMethod.CHOL),
    ('pinv', rf.DecompMethod.PINV),
    (rf.DecompMethod.QR, rf.DecompMethod.QR),
])
def test_parse(tag, member):
    assert rf.DecompMethod.parse(tag) is member

def test_parse_unknown():
    with pytest.raises(rf.ConfigurationError, match='lu'):
        rf.DecompMethod.parse('lu')
    with pytest.raises(rf.ConfigurationError):
        rf.DecompMethod.parse(3)

def test_decompose_not_square():
    with pytest.raises(ValueError):
        rf.decompose(np.zeros((2, 3)))

def test_decompose_nonfinite():
    K = np.eye(2)
    K[0, 1] = np.nan
    with pytest.raises(rf.NumericalError):
        rf.decompose(K)

def test_numerical_error_is_linalgerror():
    with pytest.raises(np.linalg.LinAlgError):
        rf.decompose(-np.eye(2), 'chol')

def test_integer_matrix():
    decomp = rf.decompose(np.array([[2, 0], [0, 4]]), 'chol')
    util.assert_allclose(decomp.solve(np.array([1., 1.])), [0.5, 0.25], rtol=1e-15)
