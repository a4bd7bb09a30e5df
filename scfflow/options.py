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

"""Configuration value object consumed by the SCF engine, the solvers and the
algorithm registries. Values are resolved by the caller and passed explicitly;
nothing is read from global state.
"""

from dataclasses import dataclass, fields
from typing import Optional

from scfflow.helpers.errors import ConfigurationError


@dataclass
class Options:
    """Resolved configuration values.

    Attributes:
        basis (str): Basis set name, understood by the integral solver.
        charge (int): Total molecular charge.
        multiplicity (int): Spin multiplicity (2S+1).
        scf_alg (int): Key of the RHF implementation. 0 selects the default.
        mp2_alg (int): Key of the MP2 implementation. 0 selects the default.
        cc_alg (int): Key of the CCSD implementation. 0 selects the default.
        drop_occ (int): Number of frozen (lowest) occupied orbitals.
        drop_vir (int): Number of frozen (highest) virtual orbitals.
        e_conv (float): SCF energy convergence threshold.
        d_conv (float or None): Optional threshold on the RMS change of the
            density matrix. The RMS is always reported, but only used as a
            convergence criterion if this is set.
        max_iter (int): Maximum number of SCF iterations.
        diis (bool): Use Pulay DIIS extrapolation of the Fock matrix.
        diis_start (int): First iteration where DIIS vectors are collected.
        diis_max_vec (int): Size of the DIIS subspace.
        df (bool): Use density-fitted (factorized) two-electron integrals.
        auxbasis (str): Auxiliary basis used when df is True.
        precision (str): "double" or "single".
        cc_e_conv (float): CCSD energy convergence threshold.
        cc_max_iter (int): Maximum number of CCSD iterations.
        verbose (bool): Print per-iteration diagnostics.
    """
    basis: str = "sto-3g"
    charge: int = 0
    multiplicity: int = 1
    scf_alg: int = 0
    mp2_alg: int = 0
    cc_alg: int = 0
    drop_occ: int = 0
    drop_vir: int = 0
    e_conv: float = 1e-8
    d_conv: Optional[float] = None
    max_iter: int = 100
    diis: bool = True
    diis_start: int = 1
    diis_max_vec: int = 8
    df: bool = False
    auxbasis: str = "weigend"
    precision: str = "double"
    cc_e_conv: float = 1e-10
    cc_max_iter: int = 100
    verbose: bool = False

    def __post_init__(self):
        for name in ("scf_alg", "mp2_alg", "cc_alg", "drop_occ", "drop_vir"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ConfigurationError(f"{name} must be a non-negative integer, got {value!r}.")

        if self.multiplicity < 1:
            raise ConfigurationError(f"multiplicity must be >= 1, got {self.multiplicity}.")

        for name in ("e_conv", "cc_e_conv"):
            if getattr(self, name) <= 0.:
                raise ConfigurationError(f"{name} must be strictly positive, got {getattr(self, name)}.")
        if self.d_conv is not None and self.d_conv <= 0.:
            raise ConfigurationError(f"d_conv must be strictly positive or None, got {self.d_conv}.")

        for name in ("max_iter", "cc_max_iter", "diis_start"):
            if getattr(self, name) < 1:
                raise ConfigurationError(f"{name} must be >= 1, got {getattr(self, name)}.")
        if self.diis_max_vec < 2:
            raise ConfigurationError(f"diis_max_vec must be >= 2, got {self.diis_max_vec}.")

        self.precision = self.precision.lower()
        if self.precision not in ("double", "single"):
            raise ConfigurationError(f"precision must be 'double' or 'single', got {self.precision!r}.")

    @classmethod
    def from_dict(cls, opt_dict):
        """Build Options from a dictionary, rejecting unknown keywords.

        Args:
            opt_dict (dict): Keywords matching the attributes of Options.

        Returns:
            Options: The validated configuration.

        Raises:
            KeyError: Unsupported keywords are present in opt_dict.
        """
        copt_dict = dict(opt_dict)
        kwargs = {f.name: copt_dict.pop(f.name) for f in fields(cls) if f.name in copt_dict}

        if len(copt_dict) > 0:
            raise KeyError(f"The following keywords are not supported in {cls.__name__}: \n {copt_dict.keys()}")

        return cls(**kwargs)

    @property
    def spin(self):
        """(int): Difference between alpha and beta electron numbers."""
        return self.multiplicity - 1
