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

"""Results handed from the SCF solvers to downstream correlated methods."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import h5py
import numpy as np

from scfflow.helpers.errors import ChainingPreconditionError, ConfigurationError
from scfflow.toolboxes.molecular_computation.integrals import Precision


class SCFStatus(Enum):
    """Terminal state of an SCF run."""
    CONVERGED = "converged"
    MAX_ITERATIONS_EXCEEDED = "max_iterations_exceeded"


@dataclass(frozen=True, eq=False)
class WavefunctionResult:
    """Restricted Hartree-Fock wavefunction. Created once at the end of an SCF
    run and never modified afterwards (arrays are flagged read-only).

    Attributes:
        molecule (Molecule): Reference to the molecule.
        energy (float): Total energy, nuclear repulsion included.
        ndocc (int): Number of doubly occupied orbitals.
        nvir (int): Number of virtual orbitals (nbf - ndocc).
        orbital_energies (array): Ascending orbital energies.
        orbital_coefficients (array): nbf x nbf, columns are the orbitals.
        iterations (int): Number of SCF iterations performed.
        delta_energy (float): Energy change of the last iteration.
        density_rms (float): RMS change of the density at the last iteration.
        status (SCFStatus): Terminal state of the run.
        algorithm (str): Name of the implementation that produced it.
    """
    molecule: object
    energy: float
    ndocc: int
    nvir: int
    orbital_energies: np.ndarray
    orbital_coefficients: np.ndarray
    iterations: int = 0
    delta_energy: float = 0.
    density_rms: float = 0.
    status: SCFStatus = SCFStatus.CONVERGED
    algorithm: str = ""

    def __post_init__(self):
        nbf = self.orbital_coefficients.shape[1]
        if self.ndocc < 0 or self.nvir < 0 or self.ndocc + self.nvir != nbf:
            raise ConfigurationError(f"Inconsistent occupations: ndocc={self.ndocc}, nvir={self.nvir}, nbf={nbf}.")
        for name in ("orbital_energies", "orbital_coefficients"):
            array = np.array(getattr(self, name))
            array.flags.writeable = False
            object.__setattr__(self, name, array)

    @property
    def converged(self):
        """(bool): True if the SCF run reached its convergence criteria."""
        return self.status is SCFStatus.CONVERGED

    @property
    def nbf(self):
        """(int): Number of basis functions (and of molecular orbitals)."""
        return self.orbital_coefficients.shape[0]

    @property
    def density(self):
        """(array): D = C_occ C_occ^T."""
        occupied = self.orbital_coefficients[:, :self.ndocc]
        return occupied @ occupied.T


@dataclass(frozen=True, eq=False)
class CorrelatedResult:
    """Result of a correlated method built on top of an RHF reference.

    Attributes:
        method (str): Self-explanatory (e.g. "MP2", "CCSD").
        reference (WavefunctionResult): The RHF reference.
        correlation_energy (float): Self-explanatory.
        t1 (array or None): Single amplitudes (occupied x virtual).
        t2 (array): Double amplitudes (occ x occ x vir x vir), closed-shell
            (alpha-beta) convention.
        iterations (int): Number of iterations (0 for non-iterative methods).
        converged (bool): Self-explanatory.
    """
    method: str
    reference: WavefunctionResult
    correlation_energy: float
    t2: np.ndarray
    t1: Optional[np.ndarray] = None
    iterations: int = 0
    converged: bool = True

    @property
    def energy(self):
        """(float): Reference energy plus correlation energy."""
        return self.reference.energy + self.correlation_energy


def require_converged(result, consumer):
    """Reject a reference that is not a converged WavefunctionResult, before
    any downstream work starts.

    Args:
        result (WavefunctionResult): Reference handed to the consumer.
        consumer (str): Name of the downstream method, for the error message.

    Raises:
        ChainingPreconditionError: The reference cannot be used.
    """
    if not isinstance(result, WavefunctionResult):
        raise ChainingPreconditionError(f"{consumer} requires a WavefunctionResult, received {type(result).__name__}.")
    if not result.converged:
        raise ChainingPreconditionError(f"{consumer} cannot start from a non-converged reference "
                                        f"(status: {result.status.value}, {result.iterations} iterations, "
                                        f"last energy change {result.delta_energy:.3e}).")


def amplitude_guess(ndocc, nvir, drop_occ=0, drop_vir=0, precision=Precision.DOUBLE):
    """Zero-initialized amplitudes for a correlated method.

    Args:
        ndocc (int): Number of doubly occupied orbitals.
        nvir (int): Number of virtual orbitals.
        drop_occ (int): Number of frozen occupied orbitals.
        drop_vir (int): Number of frozen virtual orbitals.
        precision (Precision or str): Numerical precision.

    Returns:
        (array, array): T1 (o x v) and T2 (o x o x v x v) filled with zeros,
            where o = ndocc - drop_occ and v = nvir - drop_vir.

    Raises:
        ConfigurationError: A frozen count is negative, or freezes more
            orbitals than available.
    """
    if drop_occ < 0 or drop_vir < 0:
        raise ConfigurationError(f"Frozen orbital counts must be non-negative (drop_occ={drop_occ}, drop_vir={drop_vir}).")

    n_occ = ndocc - drop_occ
    n_vir = nvir - drop_vir
    if n_occ < 0 or n_vir < 0:
        raise ConfigurationError(f"drop_occ={drop_occ} and drop_vir={drop_vir} leave {n_occ} occupied and {n_vir} "
                                 f"virtual orbitals (ndocc={ndocc}, nvir={nvir}).")

    dtype = Precision(precision).dtype
    return np.zeros((n_occ, n_vir), dtype=dtype), np.zeros((n_occ, n_occ, n_vir, n_vir), dtype=dtype)


def save_wavefunction(result, filename):
    """Write a WavefunctionResult to an HDF5 file.

    Args:
        result (WavefunctionResult): Self-explanatory.
        filename (str): Path of the HDF5 file (overwritten).
    """
    with h5py.File(filename, "w") as file:
        file.attrs["energy"] = result.energy
        file.attrs["ndocc"] = result.ndocc
        file.attrs["nvir"] = result.nvir
        file.attrs["iterations"] = result.iterations
        file.attrs["delta_energy"] = result.delta_energy
        file.attrs["density_rms"] = result.density_rms
        file.attrs["status"] = result.status.value
        file.attrs["algorithm"] = result.algorithm
        file.create_dataset("orbital_energies", data=result.orbital_energies)
        file.create_dataset("orbital_coefficients", data=result.orbital_coefficients)


def load_wavefunction(filename, molecule):
    """Read a WavefunctionResult written by save_wavefunction.

    Args:
        filename (str): Path of the HDF5 file.
        molecule (Molecule): Molecule the wavefunction belongs to.

    Returns:
        WavefunctionResult: Self-explanatory.
    """
    with h5py.File(filename, "r") as file:
        return WavefunctionResult(molecule=molecule,
                                  energy=float(file.attrs["energy"]),
                                  ndocc=int(file.attrs["ndocc"]),
                                  nvir=int(file.attrs["nvir"]),
                                  orbital_energies=np.array(file["orbital_energies"]),
                                  orbital_coefficients=np.array(file["orbital_coefficients"]),
                                  iterations=int(file.attrs["iterations"]),
                                  delta_energy=float(file.attrs["delta_energy"]),
                                  density_rms=float(file.attrs["density_rms"]),
                                  status=SCFStatus(file.attrs["status"]),
                                  algorithm=str(file.attrs["algorithm"]))
