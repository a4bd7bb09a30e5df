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

"""Symmetric orthogonalization of the atomic-orbital basis and solution of the
Roothaan generalized eigenvalue problem F C = S C e.
"""

import numpy as np

from scfflow.helpers.errors import LinearDependencyError


def orthogonalize(overlap, threshold=0.):
    """Computes the symmetric (Lowdin) orthogonalizer X = S^(-1/2).

    The overlap matrix is diagonalized, the inverse square root of its
    eigenvalues taken, and the matrix reassembled, so that X^T S X = I.

    Args:
        overlap (array): Symmetric overlap matrix S (nbf x nbf).
        threshold (float): Eigenvalues at or below this value are considered
            a linear dependency.

    Returns:
        array: The orthogonalizer X (nbf x nbf).

    Raises:
        ValueError: S is not a symmetric square matrix.
        LinearDependencyError: S has an eigenvalue at or below threshold.
    """

    overlap = np.asarray(overlap, dtype=np.float64)
    if overlap.ndim != 2 or overlap.shape[0] != overlap.shape[1] or not np.allclose(overlap, overlap.T, atol=1e-10):
        raise ValueError(f"The overlap matrix must be square and symmetric (shape {overlap.shape}).")

    eigenvalues, eigenvectors = np.linalg.eigh(overlap)

    # Ascending order: the last offending eigenvalue is reported.
    offending = np.flatnonzero(eigenvalues <= threshold)
    if len(offending) > 0:
        index = int(offending[-1])
        raise LinearDependencyError(index, float(eigenvalues[index]), threshold)

    return eigenvectors @ np.diag(eigenvalues**-0.5) @ eigenvectors.T


def solve(fock, orthogonalizer):
    """Solves F C = S C e in the orthonormal basis defined by X.

    Args:
        fock (array): Fock matrix in the atomic-orbital basis.
        orthogonalizer (array): X such that X^T S X = I.

    Returns:
        (array, array): Orbital energies in ascending order, and orbital
            coefficients C = X C' (columns are S-orthonormal).
    """

    fock_orthogonal = orthogonalizer.T @ fock @ orthogonalizer
    orbital_energies, coefficients_orthogonal = np.linalg.eigh(fock_orthogonal)

    return orbital_energies, orthogonalizer @ coefficients_orthogonal
