# randfeat/_patch_jax.py
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

import jax
from jax import numpy as jnp

jax.config.update("jax_enable_x64", True)

def float_type(*args):
    t = jnp.result_type(*args)
    return jnp.sin(jnp.empty(0, t)).dtype
    # numpy does this with common_type, but that supports only arrays, not
    # dtypes in the input. jnp.common_type is not defined.

def asfloatarray(x):
    """
    Convert x to a jax array with an inexact dtype, float64 for integers.
    """
    x = jnp.asarray(x)
    return x.astype(float_type(x))

def isconcrete(*args):
    """
    True if all the arguments are not jax tracers.
    """
    return not any(isinstance(x, jax.core.Tracer) for x in args)
