# Copyright 2023 Good Chemistry Company.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#   http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Pulay's Direct Inversion in the Iterative Subspace (DIIS)."""

import warnings

import numpy as np


class DIIS:
    """DIIS extrapolation of a sequence of arrays given their error vectors.

    The extrapolated array is sum_i c_i x_i, where the coefficients minimize
    |sum_i c_i r_i|^2 under the constraint sum_i c_i = 1.

    Args:
        max_vec (int): Maximum number of stored (array, error) pairs.

    Attributes:
        vectors (list of array): Stored arrays, oldest first.
        errors (list of array): Flattened error vectors.
    """

    def __init__(self, max_vec=8):
        self.max_vec = max_vec
        self.vectors = list()
        self.errors = list()

    def __len__(self):
        return len(self.vectors)

    def push(self, vector, error):
        """Store a new pair, dropping the oldest one beyond max_vec."""
        self.vectors.append(np.array(vector, copy=True))
        self.errors.append(np.ravel(error).copy())

        if len(self.vectors) > self.max_vec:
            self.vectors.pop(0)
            self.errors.pop(0)

    def extrapolate(self):
        """Returns the extrapolated array. With fewer than two stored pairs, or
        if the DIIS system is singular, the last stored array is returned.
        """
        n_vec = len(self.vectors)
        if n_vec < 2:
            return self.vectors[-1]

        b = -np.ones((n_vec+1, n_vec+1))
        b[-1, -1] = 0.
        for i in range(n_vec):
            for j in range(i+1):
                b[i, j] = b[j, i] = np.dot(self.errors[i], self.errors[j])

        rhs = np.zeros(n_vec+1)
        rhs[-1] = -1.

        try:
            coefficients = np.linalg.solve(b, rhs)[:-1]
        except np.linalg.LinAlgError:
            warnings.warn("Singular DIIS system, extrapolation skipped for this iteration.", RuntimeWarning)
            return self.vectors[-1]

        return sum(c * v for c, v in zip(coefficients, self.vectors))


def scf_error(fock, density, overlap, orthogonalizer):
    """Orbital gradient FDS - SDF expressed in the orthonormal basis."""
    fds = fock @ density @ overlap
    return orthogonalizer.T @ (fds - fds.T) @ orthogonalizer
