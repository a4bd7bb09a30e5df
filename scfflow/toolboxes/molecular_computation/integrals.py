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

"""Tagged integral tensors and the IntegralHelper container handing them to the
SCF engine and to the correlated methods.

Every tensor carries three tags: its numerical precision, the representation of
the two-electron integrals it belongs to (dense four-index tensor or
density-fitted factor), and its orbital domain (atomic or molecular orbitals).
Tensors that are used together must agree on precision and representation;
this is checked when they are stored or chained, not left to numpy.
"""

import warnings
from dataclasses import dataclass
from enum import Enum

import numpy as np

from scfflow.helpers.errors import ConfigurationError, IntegralMismatchError


class Precision(Enum):
    """Numerical precision of an integral tensor."""
    DOUBLE = "double"
    SINGLE = "single"

    @property
    def dtype(self):
        return np.float64 if self is Precision.DOUBLE else np.float32


class ERIRepresentation(Enum):
    """Representation of the two-electron integrals."""
    DENSE = "dense"
    FACTORIZED = "factorized"


class OrbitalDomain(Enum):
    """Orbital basis in which the integrals are expressed."""
    ATOMIC = "atomic"
    MOLECULAR = "molecular"


@dataclass(frozen=True, eq=False)
class IntegralTensor:
    """Immutable integral tensor with its tags.

    Attributes:
        name (str): Symbolic name ("S", "ERI", "OVOV", "BOV", ...).
        data (array): The values. Flagged read-only.
        precision (Precision): Self-explanatory.
        representation (ERIRepresentation): Representation family of the
            two-electron integrals this tensor is used with.
        domain (OrbitalDomain): Self-explanatory.
    """
    name: str
    data: np.ndarray
    precision: Precision
    representation: ERIRepresentation
    domain: OrbitalDomain

    def __post_init__(self):
        if self.data.dtype != self.precision.dtype:
            raise IntegralMismatchError(f"Tensor {self.name} has dtype {self.data.dtype} but is tagged "
                                        f"{self.precision.value} precision.")
        data = np.array(self.data)
        data.flags.writeable = False
        object.__setattr__(self, "data", data)

    @property
    def shape(self):
        return self.data.shape

    def tags(self):
        """Returns the (precision, representation, domain) tuple."""
        return self.precision, self.representation, self.domain


class IntegralHelper:
    """Keyed access to the integrals of a molecule.

    In the atomic-orbital domain, "S", "T", "V" and the two-electron integrals
    ("ERI" when dense, "B" when factorized) are computed lazily through the
    molecule's IntegralSolver and cached. In the molecular-orbital domain
    (orbitals is a WavefunctionResult), blocks are stored by
    integral_transformation.mo_from_ao.

    Args:
        molecule (Molecule): Self-explanatory.
        basis (str): Basis set.
        precision (Precision or str): Precision of all stored tensors.
        eri_type (ERIRepresentation or str): Representation of the
            two-electron integrals.
        auxbasis (str): Auxiliary basis set for factorized integrals.
        orbitals (WavefunctionResult): Reference orbitals. None for atomic
            orbitals.
        drop_occ (int): Number of frozen occupied orbitals (MO domain only).
        drop_vir (int): Number of frozen virtual orbitals (MO domain only).
    """

    def __init__(self, molecule, basis="sto-3g", precision=Precision.DOUBLE, eri_type=ERIRepresentation.DENSE,
                 auxbasis="weigend", orbitals=None, drop_occ=0, drop_vir=0):
        self.molecule = molecule
        self.basis = basis
        self.precision = Precision(precision)
        self.eri_type = ERIRepresentation(eri_type)
        self.auxbasis = auxbasis
        self.orbitals = orbitals
        self.domain = OrbitalDomain.ATOMIC if orbitals is None else OrbitalDomain.MOLECULAR

        if drop_occ < 0 or drop_vir < 0:
            raise ConfigurationError(f"Frozen orbital counts must be non-negative (drop_occ={drop_occ}, drop_vir={drop_vir}).")
        if self.domain is OrbitalDomain.ATOMIC and (drop_occ or drop_vir):
            raise ConfigurationError("Frozen orbitals are only meaningful for molecular-orbital integrals.")
        if orbitals is not None:
            if orbitals.ndocc - drop_occ < 0 or orbitals.nvir - drop_vir < 0:
                raise ConfigurationError(f"Cannot freeze {drop_occ} occupied and {drop_vir} virtual orbitals "
                                         f"with {orbitals.ndocc} occupied and {orbitals.nvir} virtual orbitals.")
        self.drop_occ = drop_occ
        self.drop_vir = drop_vir

        self._cache = dict()
        self._released = set()

    @classmethod
    def from_options(cls, molecule, options, orbitals=None, frozen=False):
        """Build an IntegralHelper from resolved configuration values.

        Args:
            molecule (Molecule): Self-explanatory.
            options (Options): Self-explanatory.
            orbitals (WavefunctionResult): Reference orbitals for a
                molecular-orbital helper.
            frozen (bool): Apply options.drop_occ and options.drop_vir.

        Returns:
            IntegralHelper: Self-explanatory.
        """
        eri_type = ERIRepresentation.FACTORIZED if options.df else ERIRepresentation.DENSE
        drop_occ, drop_vir = (options.drop_occ, options.drop_vir) if frozen else (0, 0)
        return cls(molecule, basis=options.basis, precision=options.precision, eri_type=eri_type,
                   auxbasis=options.auxbasis, orbitals=orbitals, drop_occ=drop_occ, drop_vir=drop_vir)

    @property
    def eri_name(self):
        """(str): Name of the atomic-orbital two-electron tensor."""
        return "ERI" if self.eri_type is ERIRepresentation.DENSE else "B"

    @property
    def nbf(self):
        """(int): Number of basis functions."""
        if self.orbitals is not None:
            return self.orbitals.nbf
        return self.molecule.solver.get_nbf(self.molecule, self.basis)

    @property
    def n_active_occupied(self):
        return self.orbitals.ndocc - self.drop_occ

    @property
    def n_active_virtual(self):
        return self.orbitals.nvir - self.drop_vir

    def orbital_slice(self, letter):
        """Columns of the reference orbitals spanned by an orbital-space letter.

        Args:
            letter (str): "O" active occupied, "V" active virtual, "P" all
                active orbitals.

        Returns:
            slice: Self-explanatory.
        """
        ndocc, nbf = self.orbitals.ndocc, self.orbitals.nbf
        spaces = {"O": slice(self.drop_occ, ndocc),
                  "V": slice(ndocc, nbf - self.drop_vir),
                  "P": slice(self.drop_occ, nbf - self.drop_vir)}
        try:
            return spaces[letter]
        except KeyError:
            raise ConfigurationError(f"Unknown orbital space {letter!r}. Available: {list(spaces.keys())}")

    def check_compatible(self, other):
        """Raise IntegralMismatchError if other disagrees on precision or
        representation.
        """
        if self.precision is not other.precision:
            raise IntegralMismatchError(f"Precision mismatch: {self.precision.value} vs {other.precision.value}.")
        if self.eri_type is not other.eri_type:
            raise IntegralMismatchError(f"Two-electron representation mismatch: {self.eri_type.value} vs "
                                        f"{other.eri_type.value}.")

    def _compute(self, name):
        """Compute an atomic-orbital tensor through the integral solver."""
        solver = self.molecule.solver
        if name in ("S", "T", "V"):
            return solver.compute_one_electron(self.molecule, self.basis, name)
        elif name == "ERI":
            if self.eri_type is not ERIRepresentation.DENSE:
                raise IntegralMismatchError("Dense ERI requested from a helper holding factorized integrals.")
            return solver.compute_eri(self.molecule, self.basis)
        elif name == "B":
            if self.eri_type is not ERIRepresentation.FACTORIZED:
                raise IntegralMismatchError("Factorized integrals requested from a helper holding dense ERI.")
            return solver.compute_factorized_eri(self.molecule, self.basis, self.auxbasis)
        raise KeyError(f"Unknown atomic-orbital integral {name}. Available: ['S', 'T', 'V', '{self.eri_name}']")

    def __getitem__(self, name):
        if name in self._cache:
            return self._cache[name]

        if self.domain is OrbitalDomain.MOLECULAR:
            raise KeyError(f"Molecular-orbital block {name} has not been computed. Use mo_from_ao first.")

        if name in self._released:
            warnings.warn(f"Integral {name} was released and is being recomputed.", RuntimeWarning)
            self._released.discard(name)
        self[name] = self._compute(name)
        return self._cache[name]

    def __setitem__(self, name, value):
        if isinstance(value, IntegralTensor):
            tags = (self.precision, self.eri_type, self.domain)
            if value.tags() != tags:
                raise IntegralMismatchError(f"Tensor {name} tagged {[t.value for t in value.tags()]} cannot be stored "
                                            f"in a helper tagged {[t.value for t in tags]}.")
        else:
            value = IntegralTensor(name, np.asarray(value, dtype=self.precision.dtype), self.precision,
                                   self.eri_type, self.domain)
        self._cache[name] = value

    def __contains__(self, name):
        return name in self._cache

    def keys(self):
        return list(self._cache.keys())

    def delete(self, *names):
        """Release tensors. Names that are not stored are ignored."""
        for name in names:
            if self._cache.pop(name, None) is not None:
                self._released.add(name)

    def get_hcore(self):
        """Returns the atomic-orbital core Hamiltonian T + V as an array."""
        return self["T"].data + self["V"].data
