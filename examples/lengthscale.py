# randfeat/examples/lengthscale.py
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

"""Choose the length scale of the features by cross validation. The cost of a
split is the test residuals sum of squares over the noise variance plus the
squared norm of the coefficients, which is the RKHS norm of the fit"""

rng = np.random.default_rng(2024)

input_dim = 3
n_data = 300
noise_sd = 0.01
x = rng.uniform(-3, 3, size=(input_dim, n_data))
y = np.cos(2 * np.pi * np.linalg.norm(x, axis=0) / 6)
y = y + noise_sd * rng.standard_normal(n_data)

n_features = 300
n_perm = 4
batch_sizes = dict(train=100, test=100, feature=100)
regularization = noise_sd ** 2

def cost(lengthscale):
    n_train = int(0.8 * n_data)
    costs = []
    for _ in range(n_perm):
        perm = rng.permutation(n_data)
        train, test = perm[:n_train], perm[n_train:]
        sampler = rf.FeatureSampler(0, np.full(input_dim, 1 / lengthscale), rng=rng)
        feature = rf.ScalarFourierFeature(n_features, sampler)
        method = rf.RandomFeatureMethod(feature, batch_sizes=batch_sizes, regularization=regularization)
        fitted = rf.fit(method, x[:, train], y[train], decomposition='qr')
        
        residual = 0
        test_batch_size = method.batch_size('test')
        for xb, yb in zip(rf.batch(x[:, test], test_batch_size), rf.batch(y[test], test_batch_size)):
            mean = rf.predictive_mean(method, fitted, xb)
            residual += np.sum((yb - mean[0]) ** 2) / noise_sd ** 2
        coeffs = np.asarray(fitted.coeffs)
        rkhs = regularization / n_features * coeffs @ coeffs
        costs.append(0.5 * residual + 0.5 * rkhs)
    return np.mean(costs)

lengthscales = np.geomspace(0.3, 30, 15)
costs = [cost(l) for l in lengthscales]
best = lengthscales[np.argmin(costs)]
print(f'best length scale: {best:.2f}')

fig, ax = plt.subplots(num='lengthscale', clear=True)

ax.plot(lengthscales, costs, '-o')
ax.axvline(best, color='gray', linestyle='--')
ax.set_xscale('log')
ax.set_yscale('log')
ax.set_xlabel('length scale')
ax.set_ylabel('cross validation cost')

fig.show()
