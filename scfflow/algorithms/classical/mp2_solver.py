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

"""Define electronic structure solver employing the Moller-Plesset perturbation
theory to second order (MP2) method, on top of a converged RHF reference.
"""

from typing import Union, Type

import numpy as np

from scfflow.algorithms.electronic_structure_solver import ElectronicStructureSolver
from scfflow.algorithms.registry import AlgorithmRegistry
from scfflow.toolboxes.molecular_computation.integrals import ERIRepresentation, IntegralHelper
from scfflow.toolboxes.molecular_computation.integral_transformation import mo_from_ao
from scfflow.toolboxes.molecular_computation.wavefunction import CorrelatedResult, require_converged


def correlated_integrals(reference, aoints, options):
    """Molecular-orbital helper sharing the tags of aoints, with the frozen
    orbitals requested in options.
    """
    return IntegralHelper(aoints.molecule, basis=aoints.basis, precision=aoints.precision, eri_type=aoints.eri_type,
                          auxbasis=aoints.auxbasis, orbitals=reference, drop_occ=options.drop_occ,
                          drop_vir=options.drop_vir)


class RMP2Solver(ElectronicStructureSolver):
    """Closed-shell MP2 from the (ia|jb) integrals of the active space, dense
    or rebuilt from the density-fitted factor B[Q,i,a].

    Args:
        options (Options): Resolved configuration values (drop_occ and
            drop_vir are used).

    Attributes:
        moints (IntegralHelper): Molecular-orbital blocks of the last run.
    """

    def __init__(self, options=None):
        super().__init__(options)
        self.moints = None

    def run(self, reference, ints):
        """Compute the MP2 correlation energy.

        Args:
            reference (WavefunctionResult): Converged RHF reference.
            ints (IntegralHelper): Atomic-orbital integrals used to produce
                the reference.

        Returns:
            CorrelatedResult: Energy and T2 amplitudes (ijab).

        Raises:
            ChainingPreconditionError: The reference is not converged.
        """
        require_converged(reference, self.__class__.__name__)

        self.moints = correlated_integrals(reference, ints, self.options)
        n_occ = self.moints.n_active_occupied

        if self.moints.eri_type is ERIRepresentation.DENSE:
            mo_from_ao(self.moints, ints, "Fd", "OVOV")
            ovov = self.moints["OVOV"].data
        else:
            mo_from_ao(self.moints, ints, "Fd", "BOV")
            bov = self.moints["BOV"].data
            ovov = np.einsum("Qia,Qjb->iajb", bov, bov, optimize=True)

        eps = self.moints["Fd"].data
        eps_occ, eps_vir = eps[:n_occ], eps[n_occ:]
        denominator = (eps_occ[:, None, None, None] - eps_vir[None, :, None, None]
                       + eps_occ[None, None, :, None] - eps_vir[None, None, None, :])

        t2 = ovov / denominator
        energy = np.einsum("iajb,iajb->", t2, 2*ovov - ovov.transpose(0, 3, 2, 1))

        if self.verbose:
            print(f"\t{self.__class__.__name__}: E(corr) = {energy:.10f}, E(total) = {reference.energy + energy:.10f}")

        return CorrelatedResult(method="MP2", reference=reference, correlation_energy=float(energy),
                                t2=t2.transpose(0, 2, 1, 3))


available_mp2_solvers = AlgorithmRegistry("MP2")
available_mp2_solvers.register(RMP2Solver, key=1)


def get_mp2_solver(options=None, solver: Union[None, int, Type[ElectronicStructureSolver]] = None):
    """Return requested MP2 solver object.

    Args:
        options (Options): Resolved configuration values.
        solver (int or Type[ElectronicStructureSolver] or None): Key in
            available_mp2_solvers. If None, options.mp2_alg is used. Can also
            be a user-defined MP2 implementation (child to
            ElectronicStructureSolver class).

    Raises:
        UnavailableAlgorithmError: The key is not registered.
        TypeError: The specified solver was not an int or sub class of ElectronicStructureSolver.
    """

    if solver is None:
        solver = options.mp2_alg if options is not None else 0

    if isinstance(solver, int) and not isinstance(solver, bool):
        solver = available_mp2_solvers.resolve(solver)
    elif not (isinstance(solver, type) and issubclass(solver, ElectronicStructureSolver)):
        raise TypeError(f"Solver must be an int or a subclass of ElectronicStructureSolver but received {type(solver).__name__}")

    return solver(options)


class MP2Solver(ElectronicStructureSolver):
    """Uses the MP2 implementation selected by options.mp2_alg (or by the
    solver argument).

    Attributes:
        solver (ElectronicStructureSolver): The solver that is used.
    """

    def __init__(self, options=None, solver=None):
        super().__init__(options)
        self.solver = get_mp2_solver(self.options, solver)

    def run(self, reference, ints):
        """Compute the MP2 energy.

        Returns:
            CorrelatedResult: Self-explanatory.
        """
        return self.solver.run(reference, ints)
