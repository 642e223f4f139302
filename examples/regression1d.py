# randfeat/examples/regression1d.py
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

import randfeat as rf
from matplotlib import pyplot as plt
import numpy as np
import gvar

"""Fit a noisy 1D function with Fourier features, compare prior and
posterior"""

rng = np.random.default_rng(2024)

noise_sd = 0.1
x = rng.uniform(-3, 3, size=(1, 100))
y = np.sin(2 * x[0]) * np.exp(-x[0] ** 2 / 8) + noise_sd * rng.standard_normal(100)

sampler = rf.FeatureSampler(0, 1 / 0.7, rng=rng)
feature = rf.ScalarFourierFeature(400, sampler)
method = rf.RandomFeatureMethod(
    feature,
    batch_sizes=dict(train=25, test=50, feature=100),
    regularization=noise_sd ** 2,
)
fitted = rf.fit(method, x, y, decomposition='chol')

xplot = np.linspace(-4, 4, 200)[None, :]
post = rf.predict_gvar(method, fitted, xplot)
prior = rf.predict_prior_gvar(method, xplot)

mean = rf.predictive_mean(method, fitted, x)
print(f'training rms residual: {np.sqrt(np.mean((mean[0] - y) ** 2)):.3f}')

fig, ax = plt.subplots(num='regression1d', clear=True)

for g, label in [(prior, 'prior'), (post, 'posterior')]:
    m = gvar.mean(g)
    s = gvar.sdev(g)
    ax.fill_between(xplot[0], m - s, m + s, alpha=0.4, label=label)
ax.plot(x[0], y, '.k', label='data')

ax.legend()

fig.show()
