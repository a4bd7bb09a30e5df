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

"""Fixed-point iteration of the closed-shell Roothaan-Hall equations.

Each cycle diagonalizes the current Fock matrix (optionally DIIS-extrapolated)
in the orthonormal basis, rebuilds the density from the first ndocc orbitals,
builds the Fock matrix of that density (reused by the next cycle), evaluates
the energy and tests convergence. The run ends either converged or after
max_iter cycles; both outcomes produce a WavefunctionResult with a distinct
status.
"""

import warnings
from enum import Enum

import numpy as np

from scfflow.options import Options
from scfflow.helpers.errors import ConfigurationError
from scfflow.toolboxes.molecular_computation.diis import DIIS, scf_error
from scfflow.toolboxes.molecular_computation.orthogonalizer import orthogonalize, solve
from scfflow.toolboxes.molecular_computation.wavefunction import SCFStatus, WavefunctionResult


class SCFState(Enum):
    """States of the SCF engine."""
    INITIALIZING = "initializing"
    ITERATING = "iterating"
    CONVERGED = "converged"
    MAX_ITERATIONS_EXCEEDED = "max_iterations_exceeded"


class SCFEngine:
    """Drives the SCF iterations for one run.

    Args:
        fock_builder (FockBuilder): Builds F = H + G.D.
        overlap (array): Atomic-orbital overlap matrix.
        molecule (Molecule): Provides the nuclear repulsion and ndocc.
        options (Options): Convergence, DIIS and verbosity settings.
        algorithm (str): Name recorded in the results.

    Attributes:
        state (SCFState): Current state.
        history (list of tuple): (iteration, energy, delta_energy,
            density_rms) for each energy evaluation. The first entry is the
            energy of the initial guess, with no deltas.
    """

    def __init__(self, fock_builder, overlap, molecule, options=None, algorithm=""):
        self.options = options if options is not None else Options()
        self.fock_builder = fock_builder
        self.overlap = np.asarray(overlap, dtype=np.float64)
        self.molecule = molecule
        self.e_nuc = molecule.e_nuc
        self.ndocc = molecule.ndocc
        self.nbf = self.overlap.shape[0]
        self.algorithm = algorithm
        self.verbose = self.options.verbose

        if self.ndocc > self.nbf:
            raise ConfigurationError(f"{self.ndocc} doubly occupied orbitals do not fit in {self.nbf} basis functions.")

        self.orthogonalizer = orthogonalize(self.overlap)
        self.state = SCFState.INITIALIZING
        self.history = list()

    def _initial_density(self, guess):
        """Zero density, or the density of a previous WavefunctionResult."""
        if guess is None:
            return np.zeros((self.nbf, self.nbf))
        if guess.nbf != self.nbf or guess.ndocc != self.ndocc:
            raise ConfigurationError(f"The guess (nbf={guess.nbf}, ndocc={guess.ndocc}) does not match this run "
                                     f"(nbf={self.nbf}, ndocc={self.ndocc}).")
        return np.array(guess.density)

    def _is_converged(self, delta_energy, density_rms):
        if abs(delta_energy) >= self.options.e_conv:
            return False
        return self.options.d_conv is None or density_rms < self.options.d_conv

    def kernel(self, guess=None):
        """Run the SCF iterations.

        Args:
            guess (WavefunctionResult): Optional starting orbitals. The zero
                density is used if None.

        Returns:
            WavefunctionResult: Status CONVERGED, or MAX_ITERATIONS_EXCEEDED
                (a RuntimeWarning is also emitted in that case).
        """

        self.state = SCFState.INITIALIZING
        density = self._initial_density(guess)
        fock = self.fock_builder.build(density)
        energy = self.fock_builder.energy(density, fock, self.e_nuc)
        self.history = [(0, energy, None, None)]

        diis = DIIS(self.options.diis_max_vec) if self.options.diis else None
        delta_energy, density_rms = float("inf"), float("inf")

        if self.verbose:
            print(f"\t{self.algorithm}: nbf = {self.nbf}, ndocc = {self.ndocc}, E_nuc = {self.e_nuc:.10f}")
            print(f"\tIteration   0  E = {energy:.10f}")

        self.state = SCFState.ITERATING
        for iteration in range(1, self.options.max_iter+1):

            # A zero density carries no information for the extrapolation.
            fock_to_diagonalize = fock
            if diis is not None and iteration >= self.options.diis_start and np.any(density):
                diis.push(fock, scf_error(fock, density, self.overlap, self.orthogonalizer))
                fock_to_diagonalize = diis.extrapolate()

            _, coefficients = solve(fock_to_diagonalize, self.orthogonalizer)
            occupied = coefficients[:, :self.ndocc]
            new_density = occupied @ occupied.T

            fock = self.fock_builder.build(new_density)
            new_energy = self.fock_builder.energy(new_density, fock, self.e_nuc)

            delta_energy = new_energy - energy
            density_rms = float(np.sqrt(np.mean((new_density - density)**2)))
            density, energy = new_density, new_energy
            self.history.append((iteration, energy, delta_energy, density_rms))

            if self.verbose:
                print(f"\tIteration {iteration:3d}  E = {energy:.10f}  dE = {delta_energy:.3e}  Drms = {density_rms:.3e}")

            if self._is_converged(delta_energy, density_rms):
                self.state = SCFState.CONVERGED
                break
        else:
            self.state = SCFState.MAX_ITERATIONS_EXCEEDED
            warnings.warn(f"{self.algorithm}: SCF did not converge in {self.options.max_iter} iterations "
                          f"(last energy change {delta_energy:.3e}, threshold {self.options.e_conv:.1e}).",
                          RuntimeWarning)

        # Canonical orbitals of the Fock matrix built from the final density.
        orbital_energies, coefficients = solve(fock, self.orthogonalizer)

        status = SCFStatus.CONVERGED if self.state is SCFState.CONVERGED else SCFStatus.MAX_ITERATIONS_EXCEEDED
        if self.verbose:
            print(f"\t{self.algorithm}: {status.value} after {len(self.history)-1} iterations, E = {energy:.10f}")

        return WavefunctionResult(molecule=self.molecule,
                                  energy=energy,
                                  ndocc=self.ndocc,
                                  nvir=self.nbf - self.ndocc,
                                  orbital_energies=orbital_energies,
                                  orbital_coefficients=coefficients,
                                  iterations=len(self.history)-1,
                                  delta_energy=delta_energy,
                                  density_rms=density_rms,
                                  status=status,
                                  algorithm=self.algorithm)
