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

"""Second-quantized molecular Hamiltonian built from a converged RHF reference,
for workflows consuming openfermion operators.
"""

import openfermion.ops.representations as reps
from openfermion.chem.molecular_data import spinorb_from_spatial
from openfermion.ops.representations.interaction_operator import get_active_space_integrals as of_get_active_space_integrals

from scfflow.helpers.errors import ConfigurationError
from scfflow.toolboxes.molecular_computation.integrals import ERIRepresentation, IntegralHelper
from scfflow.toolboxes.molecular_computation.integral_transformation import mo_from_ao


def get_active_space_integrals(reference, aoints, drop_occ=0, drop_vir=0):
    """Computes core constant, one_body, and two-body coefficients with frozen
    occupied orbitals folded into the one-body coefficients and core constant.

    Args:
        reference (WavefunctionResult): Converged RHF reference.
        aoints (IntegralHelper): Dense atomic-orbital integrals.
        drop_occ (int): Number of frozen occupied orbitals.
        drop_vir (int): Number of frozen virtual orbitals.

    Returns:
        (float, array, array): (core_constant, one_body, two_body) where
            two_body follows the openfermion convention
            h[p,q,r,s] = (ps|qr).
    """

    if aoints.eri_type is not ERIRepresentation.DENSE:
        raise ConfigurationError("The fermionic Hamiltonian requires dense two-electron integrals.")
    if drop_occ < 0 or drop_vir < 0 or drop_occ > reference.ndocc or drop_vir > reference.nvir:
        raise ConfigurationError(f"Invalid frozen orbitals (drop_occ={drop_occ}, drop_vir={drop_vir}) for "
                                 f"ndocc={reference.ndocc}, nvir={reference.nvir}.")

    moints = IntegralHelper(aoints.molecule, basis=aoints.basis, precision=aoints.precision, eri_type=aoints.eri_type,
                            orbitals=reference)
    mo_from_ao(moints, aoints, "H", "PPPP", release=False)

    # PQRS convention in openfermion:
    # h[p,q]=\int \phi_p(x)* (T + V_{ext}) \phi_q(x) dx
    # h[p,q,r,s]=\int \phi_p(x)* \phi_q(y)* V_{elec-elec} \phi_r(y) \phi_s(x) dxdy
    one_body = moints["H"].data
    two_body = moints["PPPP"].data.transpose(0, 2, 3, 1)

    occupied_indices = list(range(drop_occ))
    active_indices = list(range(drop_occ, reference.nbf - drop_vir))
    core_offset, one_body, two_body = of_get_active_space_integrals(one_body, two_body, occupied_indices, active_indices)

    return aoints.molecule.e_nuc + core_offset, one_body, two_body


def get_fermionic_hamiltonian(reference, aoints, drop_occ=0, drop_vir=0):
    """Molecular Hamiltonian in the spin-orbital basis of the active space.

    Args:
        reference (WavefunctionResult): Converged RHF reference.
        aoints (IntegralHelper): Dense atomic-orbital integrals.
        drop_occ (int): Number of frozen occupied orbitals.
        drop_vir (int): Number of frozen virtual orbitals.

    Returns:
        openfermion.InteractionOperator: Self-explanatory.
    """

    core_constant, one_body_integrals, two_body_integrals = get_active_space_integrals(reference, aoints, drop_occ, drop_vir)

    one_body_coefficients, two_body_coefficients = spinorb_from_spatial(one_body_integrals, two_body_integrals)

    return reps.InteractionOperator(core_constant, one_body_coefficients, 1 / 2 * two_body_coefficients)
