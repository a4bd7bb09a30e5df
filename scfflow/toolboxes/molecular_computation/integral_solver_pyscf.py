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

from scfflow.toolboxes.molecular_computation.integral_solver import IntegralSolver


def mol_to_pyscf(mol, basis="sto-3g"):
    """Method to return a pyscf.gto.Mole object.

    Args:
        mol (Molecule): The molecule to export to a pyscf molecule.
        basis (string): Basis set.

    Returns:
        pyscf.gto.Mole: PySCF compatible object.
    """
    from pyscf import gto

    pymol = gto.Mole(atom=mol.xyz)
    pymol.basis = basis
    pymol.charge = mol.q
    pymol.spin = mol.spin
    pymol.symmetry = False
    pymol.verbose = 0
    pymol.build()

    return pymol


class IntegralSolverPySCF(IntegralSolver):
    """Atomic-orbital integrals computed with pyscf (libcint)."""

    _one_electron_keys = {"S": "int1e_ovlp", "T": "int1e_kin", "V": "int1e_nuc"}

    def __init__(self):
        from pyscf import gto, lib, df
        self.gto = gto
        self.lib = lib
        self.df = df
        self._pymols = dict()

    def _get_pymol(self, mol, basis):
        """Build (once per geometry and basis) the pyscf molecule."""
        key = (tuple((sym, tuple(xyz)) for sym, xyz in mol.xyz), mol.q, mol.spin, basis.lower())
        if key not in self._pymols:
            self._pymols[key] = mol_to_pyscf(mol, basis)
        return self._pymols[key]

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
        # The nuclear framework does not depend on the basis set, a minimal one is enough.
        pymol = mol_to_pyscf(mol, "sto-3g")
        mol.xyz = list()
        for sym, xyz in pymol._atom:
            mol.xyz += [tuple([sym, tuple([x*self.lib.parameters.BOHR for x in xyz])])]

        mol.n_atoms = pymol.natm
        mol.n_electrons = pymol.nelectron
        mol.e_nuc = float(pymol.energy_nuc())

    def get_nbf(self, mol, basis):
        return self._get_pymol(mol, basis).nao_nr()

    def compute_one_electron(self, mol, basis, name):
        try:
            intor = self._one_electron_keys[name]
        except KeyError:
            raise ValueError(f"{self.__class__.__name__}: unknown one-electron integral {name}. "
                             f"Available: {list(self._one_electron_keys.keys())}")
        return self._get_pymol(mol, basis).intor(intor)

    def compute_eri(self, mol, basis):
        return self._get_pymol(mol, basis).intor("int2e", aosym="s1")

    def compute_factorized_eri(self, mol, basis, auxbasis):
        pymol = self._get_pymol(mol, basis)

        # Cholesky-decomposed (Q|pq) in lower-triangular packed storage.
        cderi = self.df.incore.cholesky_eri(pymol, auxbasis=auxbasis)
        return self.lib.unpack_tril(cderi)
