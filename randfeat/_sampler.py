# randfeat/_sampler.py
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

import numpy
from scipy import stats

__all__ = [
    'FeatureSampler',
]

class FeatureSampler:
    """
    
    Random parameters of a bank of features.
    
    The feature with index j computes a nonlinear function of x^T xi_j + b_j,
    where x is the input vector. The frequencies xi_j are independent normal
    vectors, and the phases b_j are uniform.
    
    Parameters
    ----------
    mean : scalar or 1d array
        The mean of the frequencies, per input dimension.
    std : scalar or 1d array
        The standard deviation of the frequencies, per input dimension. It
        plays the role of an inverse length scale. `mean` and `std` are
        broadcasted together; the length of the result is the input
        dimensionality, 1 if both are scalars.
    rng : numpy.random.Generator or seed, optional
        The random generator. Passed to `numpy.random.default_rng`.
    bias : pair of scalars
        The interval of the uniform distribution of the phases, default
        (0, 2π).
    
    Methods
    -------
    sample
        Draw the parameters of a given number of features.
    
    Properties
    ----------
    input_dim
    
    """
    
    def __init__(self, mean, std, *, rng=None, bias=(0, 2 * numpy.pi)):
        mean, std = numpy.broadcast_arrays(numpy.asarray(mean, float), numpy.asarray(std, float))
        if mean.ndim > 1:
            raise ValueError(f'mean and std must be scalars or 1d arrays, broadcast shape is {mean.shape}')
        if numpy.any(std <= 0):
            raise ValueError('std must be positive')
        lo, hi = bias
        if not lo <= hi:
            raise ValueError(f'invalid bias interval ({lo}, {hi})')
        self._mean = numpy.atleast_1d(mean).copy()
        self._std = numpy.atleast_1d(std).copy()
        self._bias = (float(lo), float(hi))
        self._rng = numpy.random.default_rng(rng)
    
    @property
    def input_dim(self):
        """
        The dimensionality of the inputs the features act on.
        """
        return len(self._mean)
    
    def sample(self, n_features):
        """
        
        Draw the parameters of `n_features` features.
        
        Returns
        -------
        params : dict
            'xi' : (input_dim, n_features) array
                The frequencies, one feature per column.
            'bias' : (n_features,) array
                The phases.
        
        """
        if n_features < 1:
            raise ValueError(f'number of features must be positive, got {n_features}')
        xi = stats.norm(self._mean, self._std).rvs(
            size=(n_features, self.input_dim), random_state=self._rng,
        ).T
        lo, hi = self._bias
        if hi > lo:
            bias = stats.uniform(lo, hi - lo).rvs(size=n_features, random_state=self._rng)
        else:
            bias = numpy.full(n_features, lo)
        return dict(xi=xi, bias=bias)
