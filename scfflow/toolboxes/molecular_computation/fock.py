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

"""Builders of the closed-shell Fock matrix F = H + G.D from the core
Hamiltonian and the two-electron integrals, for both representations of the
latter. The density matrix is D = C_occ C_occ^T (no factor of two).
"""

import abc

import numpy as np

from scfflow.toolboxes.molecular_computation.integrals import ERIRepresentation


class FockBuilder(abc.ABC):
    """Sets interface for objects building the Fock matrix from a density.

    Args:
        hcore (array): Core Hamiltonian T + V (nbf x nbf).
        eri (array): Two-electron integrals in the representation of the
            concrete builder.
    """

    representation = None

    def __init__(self, hcore, eri):
        self.hcore = np.asarray(hcore, dtype=np.float64)
        self.nbf = self.hcore.shape[0]

    @abc.abstractmethod
    def two_electron(self, density):
        """Returns the two-electron part G.D = 2J - K of the Fock matrix."""
        pass

    def build(self, density):
        """Returns F = H + G.D."""
        return self.hcore + self.two_electron(density)

    def energy(self, density, fock, e_nuc):
        """RHF energy E = E_nuc + sum_{mn} D_nm (2 H_mn + (G.D)_mn), written
        with the Fock matrix built from the same density.
        """
        return e_nuc + float(np.sum(density * (self.hcore + fock)))


class DenseFockBuilder(FockBuilder):
    """Precomputes G_mnrs = 2(mn|rs) - (mr|ns) once, each build is then a single
    contraction over the two trailing indices.
    """

    representation = ERIRepresentation.DENSE

    def __init__(self, hcore, eri):
        super().__init__(hcore, eri)
        eri = np.asarray(eri, dtype=np.float64)
        self.g = 2. * eri - eri.transpose(0, 2, 1, 3)

    def two_electron(self, density):
        return np.einsum("mnrs,sr->mn", self.g, density, optimize=True)


class DirectFockBuilder(FockBuilder):
    """Contracts the Coulomb and exchange matrices from the raw dense ERI at
    every build. No antisymmetrized copy of the integrals is kept.
    """

    representation = ERIRepresentation.DENSE

    def __init__(self, hcore, eri):
        super().__init__(hcore, eri)
        self.eri = np.asarray(eri, dtype=np.float64)

    def two_electron(self, density):
        coulomb = np.einsum("mnrs,rs->mn", self.eri, density, optimize=True)
        exchange = np.einsum("mrns,rs->mn", self.eri, density, optimize=True)
        return 2. * coulomb - exchange


class FactorizedFockBuilder(FockBuilder):
    """Density-fitted build from B[Q,m,n], with (mn|rs) ~ sum_Q B_Qmn B_Qrs."""

    representation = ERIRepresentation.FACTORIZED

    def __init__(self, hcore, eri):
        super().__init__(hcore, eri)
        self.b = np.asarray(eri, dtype=np.float64)

    def two_electron(self, density):
        gamma = np.einsum("Qrs,rs->Q", self.b, density, optimize=True)
        coulomb = np.einsum("Qmn,Q->mn", self.b, gamma, optimize=True)
        half = np.einsum("Qmr,rs->Qms", self.b, density, optimize=True)
        exchange = np.einsum("Qms,Qsn->mn", half, self.b, optimize=True)
        return 2. * coulomb - exchange


def get_fock_builder(hcore, eri_tensor, direct=False):
    """Returns the Fock builder matching the representation of the two-electron
    integrals.

    Args:
        hcore (array): Core Hamiltonian.
        eri_tensor (IntegralTensor): "ERI" (dense) or "B" (factorized).
        direct (bool): For dense integrals, contract J and K directly instead
            of precomputing G.

    Returns:
        FockBuilder: Self-explanatory.
    """

    if eri_tensor.representation is ERIRepresentation.FACTORIZED:
        return FactorizedFockBuilder(hcore, eri_tensor.data)
    elif direct:
        return DirectFockBuilder(hcore, eri_tensor.data)
    return DenseFockBuilder(hcore, eri_tensor.data)
