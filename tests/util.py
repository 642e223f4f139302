# randfeat/tests/util.py
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
from scipy import linalg

import randfeat as rf

def assert_close_matrices(actual, desired, *, rtol=0, atol=0, tozero=False):
    """
    Check if two matrices are similar.

    Scalars and vectors are intepreted as 1x1 and Nx1 matrices, but the two
    arrays must have the same shape beforehand.

    The closeness condition is:

        ||actual - desired|| <= atol + rtol * ||desired||,

    where the norm is the matrix 2-norm, i.e., the maximum (in absolute value)
    singular value. The tolerances are 0 by default.

    Parameters
    ----------
    actual, desired : array_like
        The two matrices to be compared. Must be scalars, vectors, or 2d arrays.
    rtol, atol : scalar
        Relative and absolute tolerances for the comparison.
    tozero : bool
        Default False. If True, use the following codition instead:

            ||actual|| <= atol + rtol * ||desired||

    Raises
    ------
    AssertionError :
        If the condition is not satisfied.
    """

    actual = np.asarray(actual)
    desired = np.asarray(desired)
    assert actual.shape == desired.shape
    if actual.size == 0:
        return
    actual = np.atleast_1d(actual)
    desired = np.atleast_1d(desired)
    
    if tozero:
        diff = actual
        expr = 'actual'
        ref = 'zero'
    else:
        diff = actual - desired
        expr = 'actual - desired'
        ref = 'desired'

    dnorm = linalg.norm(desired, 2)
    adnorm = linalg.norm(diff, 2)
    ratio = adnorm / dnorm if dnorm else np.nan

    msg = f"""\
matrices actual and {ref} are not close in 2-norm
norm(desired) = {dnorm:.2g}
norm({expr}) = {adnorm:.2g}  (atol = {atol:.2g})
ratio = {ratio:.2g}  (rtol = {rtol:.2g})"""

    assert adnorm <= atol + rtol * dnorm, msg

def assert_allclose(actual, desired, *, rtol=0, atol=0, equal_nan=False, **kw):
    """ change the default arguments of np.testing.assert_allclose """
    np.testing.assert_allclose(np.asarray(actual), np.asarray(desired), rtol=rtol, atol=atol, equal_nan=equal_nan, **kw)

def assert_equal(actual, desired):
    """ np.testing.assert_equal converting jax arrays """
    np.testing.assert_equal(np.asarray(actual), np.asarray(desired))

def fourier_method(rng, *, input_dim=1, n_features=50, lengthscale=1., **kw):
    """ a RandomFeatureMethod with Fourier features, `kw` passed to the
    constructor of the method """
    sampler = rf.FeatureSampler(0, 1 / lengthscale * np.ones(input_dim), rng=rng)
    feature = rf.ScalarFourierFeature(n_features, sampler)
    return rf.RandomFeatureMethod(feature, **kw)

def toy_data(rng, *, input_dim=1, n_samples=30, noise=0.01):
    """ noisy samples of cos(2π|x|/3), inputs as columns """
    x = rng.uniform(-3, 3, size=(input_dim, n_samples))
    y = np.cos(2 * np.pi * np.linalg.norm(x, axis=0) / 3)
    y = y + noise * rng.standard_normal(n_samples)
    return x, y
