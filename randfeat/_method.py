# randfeat/_method.py
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

Random feature regression. The kernel ridge regression with the kernel

    k(x, y) = 1/m sum_j phi_j(x) phi_j(y),

where phi_j are m random features, is solved in the primal form: the normal
equations are accumulated over batches of training samples and solved with a
matrix decomposition, then predictions are computed over batches of test
samples and of features, so that the full feature matrix is never formed.

"""

import collections
import operator
import warnings

import numpy
from jax import numpy as jnp

from . import _batch
from . import _errors
from . import _features
from . import _linalg
from . import _patch_jax

__all__ = [
    'DEFAULT_REGULARIZATION',
    'BatchSizes',
    'RandomFeatureMethod',
    'Fit',
    'get_random_feature',
    'get_batch_sizes',
    'get_batch_size',
    'get_regularization',
    'get_feature_factors',
    'get_coeffs',
    'fit',
    'predict',
    'predictive_mean',
    'predictive_cov',
    'predict_prior',
    'predict_prior_mean',
    'predict_prior_cov',
]

DEFAULT_REGULARIZATION = 1e12 * numpy.finfo(float).eps

class BatchSizes(collections.namedtuple('BatchSizes', ['train', 'test', 'feature'])):
    """
    
    Maximum batch sizes of the three loops of fit and prediction.
    
    Fields
    ------
    train : int
        Training samples per batch in `fit`.
    test : int
        Test samples per batch in the predictions.
    feature : int
        Features per batch in `predictive_mean`.
    
    A size of 0 means everything in a single batch, which is the default.
    
    """
    
    __slots__ = ()
    
    def __new__(cls, train=0, test=0, feature=0):
        sizes = []
        for name, size in zip(cls._fields, (train, test, feature)):
            try:
                size = operator.index(size)
            except TypeError:
                raise _errors.ConfigurationError(f'batch size {name!r} must be an integer, got {size!r}') from None
            if size < 0:
                raise _errors.ConfigurationError(f'batch size {name!r} must be non-negative, got {size}')
            sizes.append(size)
        return super().__new__(cls, *sizes)
    
    @classmethod
    def from_mapping(cls, mapping):
        """
        Build from a dictionary with exactly the keys 'train', 'test',
        'feature'.
        """
        missing = [k for k in cls._fields if k not in mapping]
        if missing:
            raise _errors.ConfigurationError(f'batch_sizes keys must contain all of "train", "test", and "feature", missing {", ".join(map(repr, missing))}')
        unknown = [k for k in mapping if k not in cls._fields]
        if unknown:
            raise _errors.ConfigurationError(f'unrecognized batch_sizes keys {", ".join(map(repr, unknown))}')
        return cls(**{k: mapping[k] for k in cls._fields})

class RandomFeatureMethod:
    """
    
    Configuration of a random feature regression: the features, how to batch
    the computations, and the ridge regularization.
    
    The object is immutable and can be shared by any number of fits and
    predictions.
    
    Parameters
    ----------
    feature : Feature
        The bank of random features.
    batch_sizes : BatchSizes or dict, optional
        The batch sizes. A dictionary must have all the keys 'train', 'test',
        'feature'. Default all 0, i.e., no batching.
    regularization : float
        The ridge parameter λ, added to the diagonal of the normalized
        feature covariance matrix. Default `DEFAULT_REGULARIZATION`. Negative
        values are replaced by the default, 0 is allowed but then `fit` can
        only use a pseudoinverse. In both cases a `RegularizationWarning` is
        emitted.
    
    Raises
    ------
    ConfigurationError
        If the batch sizes are incomplete or invalid, or `feature` is not a
        `Feature`.
    
    Methods
    -------
    batch_size
    resample
    
    Properties
    ----------
    feature
    batch_sizes
    regularization
    n_features
    
    """
    
    def __init__(self, feature, *, batch_sizes=None, regularization=DEFAULT_REGULARIZATION):
        if not isinstance(feature, _features.Feature):
            raise _errors.ConfigurationError(f'feature must be a Feature, not {type(feature).__name__}')
        
        if batch_sizes is None:
            batch_sizes = BatchSizes()
        elif not isinstance(batch_sizes, BatchSizes):
            if not hasattr(batch_sizes, 'keys'):
                raise _errors.ConfigurationError(f'batch_sizes must be BatchSizes or dict, not {type(batch_sizes).__name__}')
            batch_sizes = BatchSizes.from_mapping(batch_sizes)
        
        regularization = float(regularization)
        if numpy.isnan(regularization):
            raise _errors.ConfigurationError('regularization is nan')
        if regularization < 0:
            msg = f'input regularization < 0 is invalid, using regularization = {DEFAULT_REGULARIZATION:.3g}'
            warnings.warn(msg, _errors.RegularizationWarning, stacklevel=2)
            regularization = DEFAULT_REGULARIZATION
        elif regularization == 0:
            msg = 'input regularization set to 0, it is recommended to increase it (else only a pseudoinverse will be used for the linear solve)'
            warnings.warn(msg, _errors.RegularizationWarning, stacklevel=2)
        
        self._feature = feature
        self._batch_sizes = batch_sizes
        self._regularization = regularization
    
    @property
    def feature(self):
        return self._feature
    
    @property
    def batch_sizes(self):
        return self._batch_sizes
    
    @property
    def regularization(self):
        return self._regularization
    
    @property
    def n_features(self):
        return _features.get_feature_count(self._feature)
    
    def batch_size(self, key):
        """
        The batch size of loop `key` ('train', 'test' or 'feature').
        """
        if key not in BatchSizes._fields:
            raise KeyError(key)
        return getattr(self._batch_sizes, key)
    
    def resample(self):
        """
        Return a new method with the same configuration and features with
        fresh random parameters.
        """
        return RandomFeatureMethod(
            self._feature.resample(),
            batch_sizes=self._batch_sizes,
            regularization=self._regularization,
        )
    
    def __repr__(self):
        return f'{self.__class__.__name__}({self._feature.__class__.__name__}(n_features={self.n_features}), batch_sizes={tuple(self._batch_sizes)}, regularization={self._regularization:.3g})'
    
    # TODO implement hyperparameter learning, starting from a cross-validated
    # cost with the RKHS norm of the coefficients as penalty.
    
    def get_optimizable_hyperparameters(self): # pragma: no cover
        raise NotImplementedError
    
    def set_optimized_hyperparameters(self, optimized_hyperparameters): # pragma: no cover
        raise NotImplementedError
    
    def evaluate_hyperparameter_cost(self, input_data, output_data): # pragma: no cover
        raise NotImplementedError
    
    def posterior_cov(self, u_input, v_input): # pragma: no cover
        raise NotImplementedError

class Fit:
    """
    
    The result of `fit`.
    
    Properties
    ----------
    feature_factors : Decomposition
        Decomposition of PhiTPhi / n_features + λI, where Phi is the
        (n_samples, n_features) training feature matrix.
    coeffs : array
        The solution of the normal equations, shape (n_features,), or
        (n_features, output_dim) for multivariate outputs.
    
    """
    
    def __init__(self, feature_factors, coeffs):
        if not isinstance(feature_factors, _linalg.Decomposition):
            raise TypeError(f'feature_factors must be a Decomposition, not {type(feature_factors).__name__}')
        coeffs = jnp.asarray(coeffs)
        if coeffs.ndim not in (1, 2) or len(coeffs) != feature_factors.n:
            raise ValueError(f'coeffs shape {coeffs.shape} incompatible with {feature_factors.n} features')
        self._feature_factors = feature_factors
        self._coeffs = coeffs
    
    @property
    def feature_factors(self):
        return self._feature_factors
    
    @property
    def coeffs(self):
        return self._coeffs
    
    def __repr__(self):
        return f'{self.__class__.__name__}({self._feature_factors.__class__.__name__}, coeffs.shape={self._coeffs.shape})'

def get_random_feature(method):
    return method.feature

def get_batch_sizes(method):
    return method.batch_sizes

def get_batch_size(method, key):
    return method.batch_size(key)

def get_regularization(method):
    return method.regularization

def get_feature_factors(fitted):
    return fitted.feature_factors

def get_coeffs(fitted):
    return fitted.coeffs

def _samples(x, name):
    """ convert x to a 2d array with samples as columns """
    x = _patch_jax.asfloatarray(x)
    if x.ndim == 1:
        x = x[None, :]
    if x.ndim != 2:
        raise ValueError(f'{name} must be 1d or 2d, got shape {x.shape}')
    return x

def fit(method, inputs, outputs, *, decomposition='svd'):
    """
    
    Fit the coefficients of the random features.
    
    Solves the ridge regression normal equations
    
        (PhiTPhi / m + λI) coeffs = PhiTY,
    
    where Phi is the feature matrix of the training inputs, Y the training
    outputs, m the number of features and λ the regularization. Phi is
    computed one batch of samples at a time.
    
    Parameters
    ----------
    method : RandomFeatureMethod
        The features and configuration.
    inputs : (input_dim, n_samples) array
        The training inputs, one sample per column. A 1d array is taken as a
        row.
    outputs : (output_dim, n_samples) or (n_samples,) array
        The training outputs.
    decomposition : str or DecompMethod
        The decomposition used to solve the system, 'svd' (default), 'qr',
        'chol' or 'pinv'. If the regularization is 0, 'pinv' is always used.
    
    Returns
    -------
    fitted : Fit
        The decomposition of the regularized matrix and the coefficients. The
        coefficients are a vector if `output_dim` is 1.
    
    Raises
    ------
    NumericalError
        If the decomposition fails.
    
    """
    decomposition = _linalg.DecompMethod.parse(decomposition)
    x = _samples(inputs, 'inputs')
    y = _samples(outputs, 'outputs')
    if x.shape[1] != y.shape[1]:
        raise ValueError(f'inputs have {x.shape[1]} samples but outputs {y.shape[1]}')
    if x.shape[1] == 0:
        raise ValueError('no training samples')
    
    feature = method.feature
    n_features = _features.get_feature_count(feature)
    output_dim = len(y)
    train_batch_size = method.batch_size('train')
    
    PhiTY = jnp.zeros((n_features, output_dim))
    PhiTPhi = jnp.zeros((n_features, n_features))
    for xb, yb in zip(_batch.batch(x, train_batch_size), _batch.batch(y, train_batch_size)):
        phi = _features.build_features(feature, xb) # batch_size x n_features
        PhiTY = PhiTY + phi.T @ yb.T
        PhiTPhi = PhiTPhi + phi.T @ phi
    PhiTPhi = PhiTPhi / n_features
    
    lam = method.regularization
    if lam == 0:
        feature_factors = _linalg.decompose(PhiTPhi, _linalg.DecompMethod.PINV)
    else:
        feature_factors = _linalg.decompose(PhiTPhi + lam * jnp.eye(n_features), decomposition)
    
    coeffs = _linalg.solve(feature_factors, PhiTY)
    if output_dim == 1:
        coeffs = coeffs[:, 0]
    return Fit(feature_factors, coeffs)

def predict(method, fitted, inputs):
    """
    
    Posterior mean and pointwise variance at new inputs.
    
    Returns
    -------
    mean : (1, n_test) array
        See `predictive_mean`.
    cov : (1, n_test) array
        See `predictive_cov`.
    
    """
    mean = predictive_mean(method, fitted, inputs)
    cov, _ = predictive_cov(method, fitted, inputs)
    return mean, cov

def predictive_mean(method, coeffs, inputs):
    """
    
    Compute 1/m Phi(inputs) @ coeffs.
    
    The computation is batched over test samples and, within each batch of
    samples, over features, so the largest feature matrix evaluated has size
    test batch size x feature batch size.
    
    Parameters
    ----------
    method : RandomFeatureMethod
    coeffs : Fit or array
        A fit result, or the coefficients with shape (n_features,) or
        (n_features, output_dim).
    inputs : (input_dim, n_test) array
    
    Returns
    -------
    mean : (1, n_test) array
        The predictions, or (output_dim, n_test) with matrix coefficients.
    
    """
    if isinstance(coeffs, Fit):
        coeffs = coeffs.coeffs
    coeffs = _patch_jax.asfloatarray(coeffs)
    feature = method.feature
    n_features = _features.get_feature_count(feature)
    if coeffs.ndim not in (1, 2) or len(coeffs) != n_features:
        raise ValueError(f'coeffs shape {coeffs.shape} incompatible with {n_features} features')
    if coeffs.ndim == 1:
        coeffs = coeffs[:, None]
    x = _samples(inputs, 'inputs')
    
    test_batch_size = method.batch_size('test')
    features_batch_size = method.batch_size('feature')
    batch_coeffs = _batch.batch(coeffs, features_batch_size, axis=0)
    batch_feature_idx = _batch.batch(jnp.arange(n_features), features_batch_size, axis=0)
    
    outputs = []
    for xb in _batch.batch(x, test_batch_size):
        ob = jnp.zeros((coeffs.shape[1], xb.shape[1]))
        for cb, fb_idx in zip(batch_coeffs, batch_feature_idx):
            features = _features.build_features(feature, xb, fb_idx) # batch_size x len(fb_idx)
            ob = ob + (features @ cb / n_features).T
        outputs.append(ob)
    return jnp.concatenate(outputs, axis=1)

def predictive_cov(method, fitted, inputs):
    """
    
    Compute the posterior variance at each new input.
    
    This is the pointwise (marginal) variance of a scalar output, not the
    covariance matrix across test points. For each test point x it is
    
        1/m phi(x)^T (phi(x) - c(x)),
    
    where c(x) solves (PhiTPhi / m + λI) c(x) = PhiTPhi / m phi(x).
    
    The computation is batched only over test samples because each batch
    requires a linear solve with all the features.
    
    Parameters
    ----------
    method : RandomFeatureMethod
    fitted : Fit
    inputs : (input_dim, n_test) array
    
    Returns
    -------
    cov : (1, n_test) array
        The variances.
    coeffs : (n_features, n_test) array
        The coefficient vectors c(x), one per column.
    
    Raises
    ------
    NumericalError
        If a solve fails.
    
    """
    feature = method.feature
    n_features = _features.get_feature_count(feature)
    lam = method.regularization
    x = _samples(inputs, 'inputs')
    
    feature_factors = fitted.feature_factors
    if feature_factors.n != n_features:
        raise ValueError(f'fit has {feature_factors.n} features, method has {n_features}')
    PhiTPhi_reg = _linalg.materialize(feature_factors)
    PhiTPhi = PhiTPhi_reg - lam * jnp.eye(n_features)
    
    cov_outputs = []
    coeff_outputs = []
    for xb in _batch.batch(x, method.batch_size('test')):
        featuresT = _features.build_features(feature, xb).T # n_features x batch_size
        rhs = PhiTPhi @ featuresT
        c = _linalg.solve(feature_factors, rhs) # n_features x batch_size
        _linalg.checkfinite(c, 'linear solve for the variance coefficients not finite')
        coeff_outputs.append(c)
        cov_outputs.append(jnp.sum(featuresT * (featuresT - c), axis=0, keepdims=True) / n_features)
    return jnp.concatenate(cov_outputs, axis=1), jnp.concatenate(coeff_outputs, axis=1)

def predict_prior(method, inputs):
    """
    Prior mean and pointwise variance, see `predict_prior_mean` and
    `predict_prior_cov`.
    """
    return predict_prior_mean(method, inputs), predict_prior_cov(method, inputs)

def predict_prior_mean(method, inputs):
    """
    The prior mean, i.e., the prediction with all coefficients equal to 1.
    Returns a (1, n_test) array.
    """
    n_features = method.n_features
    return predictive_mean(method, jnp.ones(n_features), inputs)

def predict_prior_cov(method, inputs):
    """
    
    The prior pointwise variance. No fit is needed. For each test point x it
    is
    
        1/m phi(x)^T (phi(x) - 1),
    
    that is the posterior formula of `predictive_cov` with the features in
    place of the solved coefficients.
    
    Returns
    -------
    cov : (1, n_test) array
    
    """
    feature = method.feature
    n_features = _features.get_feature_count(feature)
    x = _samples(inputs, 'inputs')
    cov_outputs = []
    for xb in _batch.batch(x, method.batch_size('test')):
        featuresT = _features.build_features(feature, xb).T
        cov_outputs.append(jnp.sum(featuresT * (featuresT - jnp.ones_like(featuresT)), axis=0, keepdims=True) / n_features)
    return jnp.concatenate(cov_outputs, axis=1)
