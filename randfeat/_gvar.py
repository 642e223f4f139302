# randfeat/_gvar.py
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

import gvar
import numpy

from . import _method

__all__ = [
    'predict_gvar',
    'predict_prior_gvar',
]

def _togvar(mean, cov):
    mean = numpy.asarray(mean)
    var = numpy.asarray(cov)
    # roundoff can make tiny variances negative
    sdev = numpy.sqrt(numpy.maximum(var, 0))
    sdev = numpy.broadcast_to(sdev, mean.shape)
    out = gvar.gvar(mean, sdev)
    if len(out) == 1:
        out = out[0]
    return out

def predict_gvar(method, fitted, inputs):
    """
    
    Posterior prediction as an array of gvars.
    
    The gvars are independent, since only the pointwise variance is
    computed. The variance is clipped at zero before taking the square root.
    
    Parameters
    ----------
    method : RandomFeatureMethod
    fitted : Fit
    inputs : (input_dim, n_test) array
    
    Returns
    -------
    pred : (n_test,) array of gvars
        Or (output_dim, n_test) for multivariate fits.
    
    """
    return _togvar(*_method.predict(method, fitted, inputs))

def predict_prior_gvar(method, inputs):
    """
    Like `predict_gvar` but with the prior mean and variance.
    """
    return _togvar(*_method.predict_prior(method, inputs))
