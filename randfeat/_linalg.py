# randfeat/_linalg.py
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

Decompositions of the symmetric matrices appearing in the normal equations.
A decomposition object is initialized with a matrix and then can solve linear
systems for that matrix any number of times.

Classes
-------
Decomposition
    Abstract base class.
SVD
    Singular value decomposition.
QR
    QR decomposition.
Chol
    Cholesky decomposition.
PInv
    Moore-Penrose pseudoinverse through the SVD, discarding small singular
    values.
DecompMethod
    Enumeration of the decompositions, used to select one by name.

Functions
---------
decompose
    Decompose a matrix with the method specified by name.
solve
    Solve a linear system with a decomposition.
materialize
    Return the decomposed matrix.

"""

import abc
import enum

import numpy
from jax import numpy as jnp
from jax.scipy import linalg as jlinalg

from . import _errors
from . import _patch_jax

__all__ = [
    'Decomposition',
    'SVD',
    'QR',
    'Chol',
    'PInv',
    'DecompMethod',
    'decompose',
    'solve',
    'materialize',
]

def checkfinite(x, msg):
    if _patch_jax.isconcrete(x) and not numpy.all(numpy.isfinite(x)):
        raise _errors.NumericalError(msg)

class Decomposition(metaclass=abc.ABCMeta):
    """
    
    Abstract base class for decompositions of symmetric matrices.
    
    Methods
    -------
    solve
    matrix
    
    Properties
    ----------
    n
    
    """
    
    @abc.abstractmethod
    def __init__(self, K): # pragma: no cover
        """
        Decompose matrix K.
        """
        pass
    
    @abc.abstractmethod
    def solve(self, b): # pragma: no cover
        """
        Solve the linear system K @ x = b. `b` can be a vector or a matrix
        with the system along the first axis.
        """
        pass
    
    def matrix(self):
        """
        The decomposed matrix.
        """
        return self._K
    
    @property
    def n(self):
        """
        Return n where the decomposed matrix is n x n.
        """
        return len(self._K)

class SVD(Decomposition):
    """
    Singular value decomposition K = U diag(s) V^T. Fails on exactly
    singular matrices, use `PInv` for those.
    """
    
    def __init__(self, K):
        self._K = K
        self._U, self._s, Vh = jnp.linalg.svd(K)
        self._V = Vh.T
        checkfinite(self._s, 'singular value decomposition not finite')
        if _patch_jax.isconcrete(self._s) and not numpy.all(self._s > 0):
            raise _errors.NumericalError('matrix is singular, the SVD can not be inverted')
    
    def solve(self, b):
        return (self._V / self._s) @ (self._U.T @ b)

class QR(Decomposition):
    """
    QR decomposition K = Q R with Q orthogonal and R upper triangular.
    """
    
    def __init__(self, K):
        self._K = K
        self._Q, self._R = jnp.linalg.qr(K)
        d = jnp.diag(self._R)
        checkfinite(d, 'QR decomposition not finite')
        if _patch_jax.isconcrete(d) and not numpy.all(d != 0):
            raise _errors.NumericalError('matrix is singular, R factor has zeros on the diagonal')
    
    def solve(self, b):
        return jlinalg.solve_triangular(self._R, self._Q.T @ b, lower=False)

class Chol(Decomposition):
    """
    Cholesky decomposition K = L L^T. The matrix must be positive definite.
    """
    
    def __init__(self, K):
        self._K = K
        self._L = jlinalg.cholesky(K, lower=True)
        checkfinite(self._L, 'cholesky decomposition not finite, probably matrix not pos def numerically')
    
    def solve(self, b):
        invLb = jlinalg.solve_triangular(self._L, b, lower=True)
        return jlinalg.solve_triangular(self._L.T, invLb, lower=False)

class PInv(Decomposition):
    """
    Pseudoinverse. Singular values below `eps` are treated as zero, where
    `eps` is relative to the largest singular value. Default matrix size
    times floating point epsilon.
    """
    
    def __init__(self, K, eps=None):
        self._K = K
        U, s, Vh = jnp.linalg.svd(K)
        checkfinite(s, 'singular value decomposition not finite')
        if eps is None:
            eps = len(s) * jnp.finfo(_patch_jax.float_type(s)).eps
        assert 0 <= eps < 1
        cut = eps * jnp.max(s, initial=0)
        sinv = jnp.where(s > cut, 1 / jnp.where(s > cut, s, 1), 0)
        self._U = U
        self._V = Vh.T * sinv
    
    def solve(self, b):
        return self._V @ (self._U.T @ b)

class DecompMethod(enum.Enum):
    """
    The decomposition algorithms available to `decompose`. Use `parse` to
    convert a name.
    """
    
    SVD = 'svd'
    QR = 'qr'
    CHOL = 'chol'
    PINV = 'pinv'
    
    @classmethod
    def parse(cls, method):
        """
        Convert `method` to a `DecompMethod`. Accepts members of the
        enumeration or the strings 'svd', 'qr', 'chol' (or 'cholesky'),
        'pinv', case insensitive.
        """
        if isinstance(method, cls):
            return method
        if not isinstance(method, str):
            raise _errors.ConfigurationError(f'decomposition method must be a string or DecompMethod, not {type(method).__name__}')
        name = method.lower()
        name = {'cholesky': 'chol'}.get(name, name)
        try:
            return cls(name)
        except ValueError:
            choices = ', '.join(repr(m.value) for m in cls)
            raise _errors.ConfigurationError(f'unknown decomposition method {method!r}, valid choices are {choices}') from None
    
    @property
    def decompclass(self):
        return {
            DecompMethod.SVD : SVD,
            DecompMethod.QR  : QR,
            DecompMethod.CHOL: Chol,
            DecompMethod.PINV: PInv,
        }[self]

def decompose(K, method='svd', **kw):
    """
    
    Decompose a symmetric matrix.
    
    Parameters
    ----------
    K : (n, n) array
        The matrix.
    method : str or DecompMethod
        The algorithm, default 'svd'. See `DecompMethod`.
    **kw
        Additional keyword arguments are passed to the decomposition class.
    
    Returns
    -------
    decomp : Decomposition
        The decomposition of K.
    
    Raises
    ------
    ConfigurationError
        If `method` is not recognized.
    NumericalError
        If K contains infs/nans or the decomposition fails.
    
    """
    method = DecompMethod.parse(method)
    K = _patch_jax.asfloatarray(K)
    if K.ndim != 2 or K.shape[0] != K.shape[1]:
        raise ValueError(f'matrix to decompose must be square, shape is {K.shape}')
    checkfinite(K, 'matrix to decompose contains infs/nans')
    return method.decompclass(K, **kw)

def solve(decomp, b):
    """
    Solve K @ x = b where `decomp` is a decomposition of K.
    """
    return decomp.solve(jnp.asarray(b))

def materialize(decomp):
    """
    Return the matrix decomposed by `decomp`.
    """
    return decomp.matrix()
