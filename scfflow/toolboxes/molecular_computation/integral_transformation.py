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

"""Transformation of atomic-orbital integrals into molecular-orbital blocks,
requested by symbolic name, for the correlated methods.

Block names:
    "Fd"    Orbital energies (diagonal of the canonical Fock matrix) of the
            active orbitals.
    "H"     Core Hamiltonian over the active orbitals.
    "XXXX"  Dense two-electron block (pq|rs) in chemist notation, each X being
            "O" (active occupied), "V" (active virtual) or "P" (all active
            orbitals), e.g. "OVOV".
    "BXX"   Density-fitted factor B[Q,p,q], e.g. "BOV".
"""

import numpy as np

from scfflow.helpers.errors import ConfigurationError, IntegralMismatchError
from scfflow.toolboxes.molecular_computation.integrals import ERIRepresentation, OrbitalDomain
from scfflow.toolboxes.molecular_computation.wavefunction import require_converged

orbital_spaces = frozenset("OVP")


def parse_block(name):
    """Identify the kind of a block name.

    Args:
        name (str): Block name.

    Returns:
        (str, str): Kind ("Fd", "H", "dense" or "factorized") and the orbital
            space letters of the block.

    Raises:
        ConfigurationError: The name is not a valid block name.
    """
    if name in ("Fd", "H"):
        return name, "PP"
    if len(name) == 4 and set(name) <= orbital_spaces:
        return "dense", name
    if len(name) == 3 and name[0] == "B" and set(name[1:]) <= orbital_spaces:
        return "factorized", name[1:]
    raise ConfigurationError(f"Unknown integral block {name!r}. Expected 'Fd', 'H', four letters among "
                             f"{sorted(orbital_spaces)} or 'B' followed by two of them.")


def transform_dense(eri, c1, c2, c3, c4):
    """Four quarter-transformations of a dense (pq|rs) tensor."""
    eri = np.einsum("pi,pqrs->iqrs", c1, eri, optimize=True)
    eri = np.einsum("qj,iqrs->ijrs", c2, eri, optimize=True)
    eri = np.einsum("rk,ijrs->ijks", c3, eri, optimize=True)
    return np.einsum("sl,ijks->ijkl", c4, eri, optimize=True)


def transform_factorized(b, c1, c2):
    """Transformation of the two orbital indices of B[Q,p,q]."""
    return np.einsum("pi,Qpq,qj->Qij", c1, b, c2, optimize=True)


def mo_from_ao(moints, aoints, *blocks, release=True):
    """Compute molecular-orbital blocks from atomic-orbital integrals and store
    them in moints.

    Every requested name is validated against the representation of the
    helpers before any transformation is performed.

    Args:
        moints (IntegralHelper): Molecular-orbital helper holding the
            reference orbitals and the frozen orbital counts.
        aoints (IntegralHelper): Atomic-orbital helper.
        *blocks (str): Names of the requested blocks.
        release (bool): Release the atomic-orbital two-electron tensor from
            aoints once the blocks are computed.

    Raises:
        IntegralMismatchError: The helpers disagree on precision or
            representation, have the wrong domains, or a block does not
            belong to their representation.
        ConfigurationError: Unknown block name.
        ChainingPreconditionError: The reference orbitals are not converged.
    """

    if aoints.domain is not OrbitalDomain.ATOMIC or moints.domain is not OrbitalDomain.MOLECULAR:
        raise IntegralMismatchError(f"mo_from_ao expects a molecular-orbital and an atomic-orbital helper, "
                                    f"received {moints.domain.value} and {aoints.domain.value}.")
    moints.check_compatible(aoints)
    require_converged(moints.orbitals, "Integral transformation")

    if moints.basis.lower() != aoints.basis.lower() or moints.orbitals.nbf != aoints.nbf:
        raise IntegralMismatchError(f"Reference orbitals in basis {moints.basis} (nbf={moints.orbitals.nbf}) cannot be "
                                    f"combined with atomic-orbital integrals in basis {aoints.basis} (nbf={aoints.nbf}).")

    parsed = {name: parse_block(name) for name in blocks}
    for name, (kind, _) in parsed.items():
        if kind == "dense" and moints.eri_type is not ERIRepresentation.DENSE:
            raise IntegralMismatchError(f"Block {name} requires dense integrals, the helpers hold "
                                        f"{moints.eri_type.value} integrals.")
        if kind == "factorized" and moints.eri_type is not ERIRepresentation.FACTORIZED:
            raise IntegralMismatchError(f"Block {name} requires factorized integrals, the helpers hold "
                                        f"{moints.eri_type.value} integrals.")

    dtype = moints.precision.dtype
    coefficients = np.asarray(moints.orbitals.orbital_coefficients, dtype=dtype)
    orbitals = {letter: coefficients[:, moints.orbital_slice(letter)] for letter in orbital_spaces}

    two_electron_used = False
    for name, (kind, letters) in parsed.items():
        if kind == "Fd":
            moints[name] = moints.orbitals.orbital_energies[moints.orbital_slice("P")]
        elif kind == "H":
            hcore = aoints.get_hcore()
            moints[name] = orbitals["P"].T @ hcore @ orbitals["P"]
        elif kind == "dense":
            moints[name] = transform_dense(aoints["ERI"].data, *[orbitals[x] for x in letters])
            two_electron_used = True
        else:
            moints[name] = transform_factorized(aoints["B"].data, *[orbitals[x] for x in letters])
            two_electron_used = True

    if release and two_electron_used:
        aoints.delete(aoints.eri_name)
