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

import abc


class IntegralSolver(abc.ABC):
    """Instantiate atomic-orbital integral solver"""
    def __init__(self):
        pass

    @abc.abstractmethod
    def set_physical_data(self, mol):
        """Set molecular data that is independant of basis set in mol

        Modify mol variable:
            mol.xyz to (list): Nested array-like structure with elements and coordinates
                                            (ex:[ ["H", (0., 0., 0.)], ...]) in angstrom
        Add to mol:
            mol.n_electrons (int): Self-explanatory.
            mol.n_atoms (int): Self-explanatory.
            mol.e_nuc (float): Nuclear repulsion energy.

        Args:
            mol (Molecule): Class to add the other variables given populated.
                mol.xyz (in appropriate format for solver): Definition of molecular geometry.
                mol.q (float): Total charge.
                mol.spin (int): Absolute difference between alpha and beta electron number.
        """
        pass

    @abc.abstractmethod
    def get_nbf(self, mol, basis):
        """Number of basis functions of mol in the given basis set.

        Args:
            mol (Molecule): Self-explanatory.
            basis (str): Basis set.

        Returns:
            int: Number of basis functions.
        """
        pass

    @abc.abstractmethod
    def compute_one_electron(self, mol, basis, name):
        """Computes a one-electron integral matrix in the atomic-orbital basis.

        Args:
            mol (Molecule): Self-explanatory.
            basis (str): Basis set.
            name (str): "S" (overlap), "T" (kinetic) or "V" (nuclear attraction).

        Returns:
            array: nbf x nbf matrix.
        """
        pass

    @abc.abstractmethod
    def compute_eri(self, mol, basis):
        """Computes the dense two-electron repulsion integrals (pq|rs) in
        chemist notation.

        Args:
            mol (Molecule): Self-explanatory.
            basis (str): Basis set.

        Returns:
            array: nbf x nbf x nbf x nbf tensor.
        """
        pass

    @abc.abstractmethod
    def compute_factorized_eri(self, mol, basis, auxbasis):
        """Computes the density-fitted factor B such that
        (pq|rs) ~ sum_Q B[Q,p,q] B[Q,r,s].

        Args:
            mol (Molecule): Self-explanatory.
            basis (str): Basis set.
            auxbasis (str): Auxiliary basis set.

        Returns:
            array: naux x nbf x nbf tensor.
        """
        pass


class IntegralSolverEmpty(IntegralSolver):
    def __init__(self):
        pass

    def set_physical_data(self, mol):
        pass

    def get_nbf(self, mol, basis):
        pass

    def compute_one_electron(self, mol, basis, name):
        pass

    def compute_eri(self, mol, basis):
        pass

    def compute_factorized_eri(self, mol, basis, auxbasis):
        pass
