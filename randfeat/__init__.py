# randfeat/__init__.py
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

from . import _patch_jax # keep this first, it enables 64 bit floats
from ._errors import *
from ._batch import *
from ._linalg import *
from ._sampler import *
from ._features import *
from ._method import *
from ._gvar import *

__version__ = '0.1'

__doc__ = """

Module to do approximate kernel regression with random features.

The kernel is approximated by the average product of a finite number of
randomly sampled nonlinear features, and the ridge regression is solved in
feature space. All the large computations are done in batches to bound the
memory used, and the linear system can be solved with a choice of matrix
decompositions.

Typical usage::

    import randfeat as rf
    sampler = rf.FeatureSampler(0, 1 / lengthscale, rng=seed)
    feature = rf.ScalarFourierFeature(1000, sampler)
    method = rf.RandomFeatureMethod(feature, regularization=noise_sdev ** 2)
    fitted = rf.fit(method, x_train, y_train, decomposition='chol')
    mean, var = rf.predict(method, fitted, x_test)

Inputs are (input_dim, n_samples) arrays, one sample per column.

Classes
-------

    FeatureSampler
        Draws the random parameters of the features.
    ScalarFourierFeature, ScalarNeuronFeature
        Banks of random features, subclasses of `Feature`.
    RandomFeatureMethod
        Features, batch sizes and regularization.
    BatchSizes
        The batch sizes of the training, test and feature loops.
    Fit
        The result of `fit`.
    SVD, QR, Chol, PInv
        Matrix decompositions, subclasses of `Decomposition`.

Functions
---------

    fit
        Solve the regularized normal equations.
    predict, predictive_mean, predictive_cov
        Posterior mean and pointwise variance.
    predict_prior, predict_prior_mean, predict_prior_cov
        Prior mean and pointwise variance, without fitting.
    predict_gvar, predict_prior_gvar
        Predictions as gvars.
    batch, batch_slices
        Split arrays in chunks.
    decompose, solve, materialize
        Interface to the decompositions.

Exceptions
----------

    ConfigurationError
        Invalid configuration.
    NumericalError
        Failed decomposition, subclass of `numpy.linalg.LinAlgError`.
    RegularizationWarning
        Emitted when the regularization is zero or is replaced.

Reference: Rahimi and Recht (2007), "Random Features for Large-Scale Kernel
Machines".

"""
