# randfeat/_features.py
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

Banks of random scalar features. A feature object maps inputs to the matrix of
the evaluated features, with one row per sample and one column per feature.

"""

import abc
import copy
import operator

import jax
from jax import numpy as jnp

from . import _patch_jax
from . import _sampler

__all__ = [
    'Feature',
    'ScalarFourierFeature',
    'ScalarNeuronFeature',
    'build_features',
    'get_feature_count',
]

class Feature(metaclass=abc.ABCMeta):
    """
    
    Abstract base class for a bank of random scalar features
    
        phi_j(x) = sigma * f(x^T xi_j + b_j),   j = 0, ..., n_features - 1,
    
    where f is fixed by the subclass and (xi_j, b_j) are drawn once, at
    initialization, from the sampler.
    
    Parameters
    ----------
    n_features : int
        The number of features.
    sampler : FeatureSampler
        Draws the parameters of the features.
    hyper_fixed : dict, optional
        Fixed hyperparameters. The only one recognized is 'sigma', the
        amplitude of the features, default 1.
    
    Methods
    -------
    build_features
        Evaluate the features.
    resample
        Copy with new random parameters.
    
    Properties
    ----------
    n_features
    input_dim
    sampler
    hyper_fixed
    params
    
    """
    
    def __init__(self, n_features, sampler, *, hyper_fixed=None):
        n_features = operator.index(n_features)
        if n_features < 1:
            raise ValueError(f'number of features must be positive, got {n_features}')
        if not isinstance(sampler, _sampler.FeatureSampler):
            raise TypeError(f'sampler must be a FeatureSampler, not {type(sampler).__name__}')
        hyper_fixed = dict(sigma=1.0) if hyper_fixed is None else dict(hyper_fixed)
        unknown = set(hyper_fixed) - {'sigma'}
        if unknown:
            raise KeyError(f'unrecognized hyperparameters {sorted(unknown)!r}')
        hyper_fixed.setdefault('sigma', 1.0)
        self._n_features = n_features
        self._sampler = sampler
        self._hyper_fixed = hyper_fixed
        self._params = self._draw()
    
    def _draw(self):
        params = self._sampler.sample(self._n_features)
        return {k: jnp.asarray(v) for k, v in params.items()}
    
    @property
    def n_features(self):
        return self._n_features
    
    @property
    def input_dim(self):
        return self._sampler.input_dim
    
    @property
    def sampler(self):
        return self._sampler
    
    @property
    def hyper_fixed(self):
        """
        A copy of the fixed hyperparameters.
        """
        return dict(self._hyper_fixed)
    
    @property
    def params(self):
        """
        A copy of the random parameters, a dict with keys 'xi' (input_dim x
        n_features) and 'bias' (n_features).
        """
        return dict(self._params)
    
    def resample(self):
        """
        Return a copy of the feature bank with parameters drawn anew from the
        sampler. The sampler is shared, so its random state advances.
        """
        new = copy.copy(self)
        new._params = new._draw()
        return new
    
    @abc.abstractmethod
    def _activation(self, z): # pragma: no cover
        """
        The scalar nonlinearity, applied elementwise.
        """
        pass
    
    def build_features(self, inputs, feature_idx=None):
        """
        
        Evaluate the features.
        
        Parameters
        ----------
        inputs : (input_dim, n_samples) array
            The inputs, one sample per column. If the input is one-dimensional,
            a 1d array of samples is accepted.
        feature_idx : slice or 1d integer array, optional
            Compute only the features with these indices.
        
        Returns
        -------
        features : (n_samples, n_selected) array
            The feature matrix.
        
        """
        x = _patch_jax.asfloatarray(inputs)
        if x.ndim == 1 and self.input_dim == 1:
            x = x[None, :]
        if x.ndim != 2 or x.shape[0] != self.input_dim:
            raise ValueError(f'inputs must have shape ({self.input_dim}, n_samples), got {x.shape}')
        xi = self._params['xi']
        b = self._params['bias']
        if feature_idx is not None:
            if not isinstance(feature_idx, slice):
                feature_idx = jnp.asarray(feature_idx)
            xi = xi[:, feature_idx]
            b = b[feature_idx]
        z = x.T @ xi + b
        return self._hyper_fixed['sigma'] * self._activation(z)

class ScalarFourierFeature(Feature):
    """
    
    Random Fourier features, sqrt(2) sigma cos(x^T xi + b). With normal
    frequencies and phases uniform in (0, 2π) the product of two feature
    vectors averaged over the features approximates a Gaussian kernel with
    variance sigma^2.
    
    See `Feature` for the parameters.
    
    """
    
    def _activation(self, z):
        return jnp.sqrt(2) * jnp.cos(z)

class ScalarNeuronFeature(Feature):
    """
    
    Random neurons, sigma f(x^T xi + b) where f is an activation function.
    
    Parameters
    ----------
    n_features, sampler, hyper_fixed :
        See `Feature`.
    activation : str
        One of 'relu' (default), 'gelu', 'sigmoid', 'tanh', 'heaviside',
        'softplus'.
    
    """
    
    _activations = {
        'relu': jax.nn.relu,
        'gelu': jax.nn.gelu,
        'sigmoid': jax.nn.sigmoid,
        'tanh': jnp.tanh,
        'heaviside': lambda z: jnp.heaviside(z, 0.5),
        'softplus': jax.nn.softplus,
    }
    
    def __init__(self, n_features, sampler, *, activation='relu', hyper_fixed=None):
        if activation not in self._activations:
            raise KeyError(f'unknown activation {activation!r}, valid choices are {", ".join(self._activations)}')
        self._activation_name = activation
        super().__init__(n_features, sampler, hyper_fixed=hyper_fixed)
    
    @property
    def activation(self):
        return self._activation_name
    
    def _activation(self, z):
        return self._activations[self._activation_name](z)

def build_features(feature, inputs, feature_idx=None):
    """
    Shortcut for ``feature.build_features(inputs, feature_idx)``.
    """
    return feature.build_features(inputs, feature_idx)

def get_feature_count(feature):
    """
    The number of features in the bank.
    """
    return feature.n_features
