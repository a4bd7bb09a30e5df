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

"""Module containing the datastructure describing the physical molecule handed
to the integral layer and the SCF solvers.
"""

from dataclasses import dataclass, field

from scfflow.helpers.errors import ConfigurationError
from scfflow.helpers.utils import is_package_installed
from scfflow.toolboxes.molecular_computation.integral_solver import IntegralSolver, IntegralSolverEmpty
from scfflow.toolboxes.molecular_computation.integral_solver_pyscf import IntegralSolverPySCF


def atom_string_to_list(atom_string):
    """Convert atom coordinate string (typically stored in text files) into a
    list/tuple representation.
    """

    geometry = []
    for line in atom_string.split("\n"):
        data = line.split()
        if len(data) == 4:
            atom = data[0]
            coordinates = (float(data[1]), float(data[2]), float(data[3]))
            geometry += [(atom, coordinates)]
    return geometry


@dataclass
class Molecule:
    """Custom datastructure to store information about a Molecule. This contains
    only physical information.

    Attributes:
        xyz (array-like or string): Nested array-like structure with elements
            and coordinates (ex:[ ["H", (0., 0., 0.)], ...]). Can also be a
            multi-line string.
        q (int): Total charge.
        spin (int): Absolute difference between alpha and beta electron number.
        solver (IntegralSolver): The class that performs the integral computation.
        n_atoms (int): Self-explanatory.
        n_electrons (int): Self-explanatory.
        e_nuc (float): Nuclear repulsion energy.

    Properties:
        multiplicity (int): 2S+1.
        n_alpha, n_beta (int): Number of alpha and beta electrons.
        ndocc (int): Number of doubly occupied orbitals.
    """
    xyz: list or str
    q: int = 0
    spin: int = 0
    if is_package_installed("pyscf"):
        default_solver = IntegralSolverPySCF
    else:
        default_solver = IntegralSolverEmpty

    solver: IntegralSolver = field(default_factory=default_solver)

    # Defined in __post_init__.
    n_atoms: int = field(init=False)
    n_electrons: int = field(init=False)
    e_nuc: float = field(init=False)

    def __post_init__(self):
        if isinstance(self.solver, IntegralSolverEmpty):
            raise ModuleNotFoundError("PySCF must be installed or a custom solver (IntegralSolver) instance must be provided.")
        if self.spin < 0:
            raise ConfigurationError(f"spin must be non-negative, got {self.spin}.")
        if isinstance(self.xyz, str):
            self.xyz = atom_string_to_list(self.xyz)

        try:
            self.solver.set_physical_data(self)
        except RuntimeError as err:
            raise ConfigurationError(f"Inconsistent charge ({self.q}) and spin ({self.spin}) for this geometry: {err}") from err

        if (self.n_electrons - self.spin) % 2 != 0 or self.n_electrons < self.spin:
            raise ConfigurationError(f"{self.n_electrons} electrons are incompatible with spin {self.spin}.")

    @classmethod
    def from_options(cls, xyz, options, solver=None):
        """Build a Molecule from the charge and multiplicity of an Options object.

        Args:
            xyz (array-like or string): Geometry in angstrom.
            options (Options): Resolved configuration values.
            solver (IntegralSolver): Optional custom integral solver.

        Returns:
            Molecule: Self-explanatory.
        """
        if solver is None:
            return cls(xyz, q=options.charge, spin=options.spin)
        return cls(xyz, q=options.charge, spin=options.spin, solver=solver)

    @property
    def multiplicity(self):
        """(int): Spin multiplicity 2S+1."""
        return self.spin + 1

    @property
    def n_alpha(self):
        """(int): Number of alpha electrons."""
        return (self.n_electrons + self.spin) // 2

    @property
    def n_beta(self):
        """(int): Number of beta electrons."""
        return (self.n_electrons - self.spin) // 2

    @property
    def ndocc(self):
        """(int): Number of doubly occupied orbitals."""
        return self.n_beta
