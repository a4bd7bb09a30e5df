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

"""Define the restricted Hartree-Fock (RHF) solvers, and the registry through
which they are selected with the scf_alg option.
"""

from typing import Union, Type

from scfflow.algorithms.electronic_structure_solver import ElectronicStructureSolver
from scfflow.algorithms.registry import AlgorithmRegistry
from scfflow.algorithms.classical.scf_engine import SCFEngine
from scfflow.helpers.errors import ConfigurationError, IntegralMismatchError
from scfflow.toolboxes.molecular_computation.fock import get_fock_builder
from scfflow.toolboxes.molecular_computation.integrals import OrbitalDomain, Precision


class RHFSolverA(ElectronicStructureSolver):
    """Conventional RHF. With dense integrals, the antisymmetrized combination
    G = 2(mn|rs) - (mr|ns) is computed once and each Fock build is a single
    contraction with the density. Factorized integrals are contracted through
    the density-fitting factor.

    Args:
        options (Options): Resolved configuration values.
    """

    direct = False

    def _check_integrals(self, ints):
        molecule = ints.molecule
        if molecule.spin != 0:
            raise ConfigurationError(f"{self.__class__.__name__} requires a closed-shell molecule (multiplicity "
                                     f"{molecule.multiplicity} requested).")
        if ints.domain is not OrbitalDomain.ATOMIC:
            raise IntegralMismatchError(f"{self.__class__.__name__} requires atomic-orbital integrals.")
        if ints.precision is not Precision.DOUBLE:
            raise IntegralMismatchError(f"{self.__class__.__name__} requires double precision integrals, "
                                        f"received {ints.precision.value}.")

    def run(self, ints, guess=None):
        """Perform the SCF iterations.

        Args:
            ints (IntegralHelper): Atomic-orbital integrals of the molecule.
            guess (WavefunctionResult): Optional starting orbitals.

        Returns:
            WavefunctionResult: Converged, or flagged MAX_ITERATIONS_EXCEEDED.
        """
        self._check_integrals(ints)

        fock_builder = get_fock_builder(ints.get_hcore(), ints[ints.eri_name], direct=self.direct)
        engine = SCFEngine(fock_builder, ints["S"].data, ints.molecule, self.options,
                           algorithm=self.__class__.__name__)

        return engine.kernel(guess)


class RHFSolverB(RHFSolverA):
    """RHF with Coulomb and exchange matrices contracted directly from the
    two-electron integrals at every iteration, without storing the
    antisymmetrized tensor.
    """

    direct = True


available_rhf_solvers = AlgorithmRegistry("RHF")
available_rhf_solvers.register(RHFSolverA, key=1)
available_rhf_solvers.register(RHFSolverB, key=2)


def get_rhf_solver(options=None, solver: Union[None, int, Type[ElectronicStructureSolver]] = None):
    """Return requested RHF solver object.

    Args:
        options (Options): Resolved configuration values.
        solver (int or Type[ElectronicStructureSolver] or None): Key in
            available_rhf_solvers. If None, options.scf_alg is used. Can also
            be a user-defined RHF implementation (child to
            ElectronicStructureSolver class).

    Raises:
        UnavailableAlgorithmError: The key is not registered.
        TypeError: The specified solver was not an int or sub class of ElectronicStructureSolver.
    """

    if solver is None:
        solver = options.scf_alg if options is not None else 0

    if isinstance(solver, int) and not isinstance(solver, bool):
        solver = available_rhf_solvers.resolve(solver)
    elif not (isinstance(solver, type) and issubclass(solver, ElectronicStructureSolver)):
        raise TypeError(f"Solver must be an int or a subclass of ElectronicStructureSolver but received {type(solver).__name__}")

    return solver(options)


class RHFSolver(ElectronicStructureSolver):
    """Uses the RHF implementation selected by options.scf_alg (or by the
    solver argument) to solve the mean-field problem.

    Args:
        options (Options): Resolved configuration values.
        solver (int or Type[ElectronicStructureSolver] or None): See
            get_rhf_solver.

    Attributes:
        solver (ElectronicStructureSolver): The solver that is used.
    """

    def __init__(self, options=None, solver=None):
        super().__init__(options)
        self.solver = get_rhf_solver(self.options, solver)

    def run(self, ints, guess=None):
        """Perform the SCF iterations.

        Returns:
            WavefunctionResult: Self-explanatory.
        """
        return self.solver.run(ints, guess)
