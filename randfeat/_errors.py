# randfeat/_errors.py
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

__all__ = [
    'ConfigurationError',
    'NumericalError',
    'RegularizationWarning',
]

class ConfigurationError(ValueError):
    """
    Invalid arguments to the constructor of a random feature method or to one
    of its configuration records.
    """
    pass

class NumericalError(numpy.linalg.LinAlgError):
    """
    A matrix decomposition or a linear solve failed, typically because the
    matrix is singular or not positive definite within numerical accuracy.
    """
    pass

class RegularizationWarning(UserWarning):
    """
    Emitted when the requested regularization is replaced or is zero.
    """
    pass
