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

"""Define electronic structure solver employing the coupled-cluster with
singles and doubles (CCSD) method, on top of a converged RHF reference.

The amplitude equations are solved in the spin-orbital basis with the
intermediates of Stanton, Gauss, Watts and Bartlett, J. Chem. Phys. 94, 4334
(1991). Spin-orbitals are interleaved: 2p is alpha and 2p+1 is beta.
"""

import warnings
from typing import Union, Type

import numpy as np

from scfflow.algorithms.electronic_structure_solver import ElectronicStructureSolver
from scfflow.algorithms.registry import AlgorithmRegistry
from scfflow.algorithms.classical.mp2_solver import correlated_integrals
from scfflow.toolboxes.molecular_computation.diis import DIIS
from scfflow.toolboxes.molecular_computation.integrals import ERIRepresentation
from scfflow.toolboxes.molecular_computation.integral_transformation import mo_from_ao
from scfflow.toolboxes.molecular_computation.wavefunction import CorrelatedResult, amplitude_guess, require_converged

dense_blocks = ("Fd", "OOOO", "OOOV", "OOVV", "OVOV", "OVVV", "VVVV")
factorized_blocks = ("Fd", "BOO", "BOV", "BVV")


def assemble_dense_eri(moints):
    """Full active-space (pq|rs) from the unique occupied/virtual blocks."""
    n_occ, n_vir = moints.n_active_occupied, moints.n_active_virtual
    n = n_occ + n_vir
    o, v = slice(0, n_occ), slice(n_occ, n)

    oooo, ooov, oovv = moints["OOOO"].data, moints["OOOV"].data, moints["OOVV"].data
    ovov, ovvv, vvvv = moints["OVOV"].data, moints["OVVV"].data, moints["VVVV"].data

    eri = np.zeros((n,)*4, dtype=oooo.dtype)
    eri[o, o, o, o] = oooo
    eri[o, o, o, v] = ooov
    eri[o, o, v, o] = ooov.transpose(0, 1, 3, 2)
    eri[o, v, o, o] = ooov.transpose(2, 3, 0, 1)
    eri[v, o, o, o] = ooov.transpose(3, 2, 0, 1)
    eri[o, o, v, v] = oovv
    eri[v, v, o, o] = oovv.transpose(2, 3, 0, 1)
    eri[o, v, o, v] = ovov
    eri[v, o, v, o] = ovov.transpose(1, 0, 3, 2)
    eri[o, v, v, o] = ovov.transpose(0, 1, 3, 2)
    eri[v, o, o, v] = ovov.transpose(1, 0, 2, 3)
    eri[o, v, v, v] = ovvv
    eri[v, o, v, v] = ovvv.transpose(1, 0, 2, 3)
    eri[v, v, o, v] = ovvv.transpose(2, 3, 0, 1)
    eri[v, v, v, o] = ovvv.transpose(2, 3, 1, 0)
    eri[v, v, v, v] = vvvv

    return eri


def assemble_factorized_eri(moints):
    """Full active-space (pq|rs) = sum_Q B[Q,p,q] B[Q,r,s]."""
    n_occ, n_vir = moints.n_active_occupied, moints.n_active_virtual
    n = n_occ + n_vir
    o, v = slice(0, n_occ), slice(n_occ, n)

    boo, bov, bvv = moints["BOO"].data, moints["BOV"].data, moints["BVV"].data

    b = np.zeros((boo.shape[0], n, n), dtype=boo.dtype)
    b[:, o, o] = boo
    b[:, o, v] = bov
    b[:, v, o] = bov.transpose(0, 2, 1)
    b[:, v, v] = bvv

    return np.einsum("Qpq,Qrs->pqrs", b, b, optimize=True)


def spinorbital_antisymmetrized(eri):
    """<pq||rs> over interleaved spin-orbitals from spatial (pq|rs)."""
    n_so = 2 * eri.shape[0]
    chemist = np.zeros((n_so,)*4, dtype=eri.dtype)
    for s1 in range(2):
        for s2 in range(2):
            chemist[s1::2, s1::2, s2::2, s2::2] = eri

    physicist = chemist.transpose(0, 2, 1, 3)
    return physicist - physicist.transpose(0, 1, 3, 2)


def spinorbital_amplitudes(t1, t2):
    """Spin-orbital T1 and T2 from closed-shell amplitudes."""
    n_occ, n_vir = t1.shape

    t1_so = np.zeros((2*n_occ, 2*n_vir), dtype=t1.dtype)
    t1_so[0::2, 0::2] = t1
    t1_so[1::2, 1::2] = t1

    t2_exchanged = t2.transpose(0, 1, 3, 2)
    t2_so = np.zeros((2*n_occ, 2*n_occ, 2*n_vir, 2*n_vir), dtype=t2.dtype)
    t2_so[0::2, 0::2, 0::2, 0::2] = t2 - t2_exchanged
    t2_so[1::2, 1::2, 1::2, 1::2] = t2 - t2_exchanged
    t2_so[0::2, 1::2, 0::2, 1::2] = t2
    t2_so[1::2, 0::2, 1::2, 0::2] = t2
    t2_so[0::2, 1::2, 1::2, 0::2] = -t2_exchanged
    t2_so[1::2, 0::2, 0::2, 1::2] = -t2_exchanged

    return t1_so, t2_so


def restricted_amplitudes(t1_so, t2_so):
    """Closed-shell T1 and T2 (alpha-beta block) from spin-orbital amplitudes."""
    return t1_so[0::2, 0::2].copy(), t2_so[0::2, 1::2, 0::2, 1::2].copy()


class SpinOrbitalCCSD:
    """Spin-orbital CCSD amplitude equations for a canonical reference.

    Args:
        orbital_energies (array): Spatial orbital energies of the active
            space, occupied first.
        eri (array): Spatial (pq|rs) over the active space.
        n_occ (int): Number of active occupied spatial orbitals.
    """

    def __init__(self, orbital_energies, eri, n_occ):
        eps = np.repeat(orbital_energies, 2)
        self.n_occ = 2 * n_occ
        o, v = slice(0, self.n_occ), slice(self.n_occ, len(eps))
        g = spinorbital_antisymmetrized(eri)

        self.f = np.diag(eps)
        self.fov = self.f[o, v]
        self.oooo, self.ooov, self.oovv = g[o, o, o, o], g[o, o, o, v], g[o, o, v, v]
        self.ovov, self.ovvo, self.ovvv = g[o, v, o, v], g[o, v, v, o], g[o, v, v, v]
        self.oovo, self.ovoo = g[o, o, v, o], g[o, v, o, o]
        self.vovv, self.vvvo, self.vvvv = g[v, o, v, v], g[v, v, v, o], g[v, v, v, v]

        self.f_oo = self.f[o, o] - np.diag(eps[o])
        self.f_vv = self.f[v, v] - np.diag(eps[v])

        eps_occ, eps_vir = eps[o], eps[v]
        self.d1 = eps_occ[:, None] - eps_vir[None, :]
        self.d2 = (eps_occ[:, None, None, None] + eps_occ[None, :, None, None]
                   - eps_vir[None, None, :, None] - eps_vir[None, None, None, :])

    @staticmethod
    def tau(t1, t2, scale=1.):
        product = scale * np.einsum("ia,jb->ijab", t1, t1)
        return t2 + product - product.swapaxes(2, 3)

    def energy(self, t1, t2):
        return (np.einsum("ia,ia->", self.fov, t1)
                + 0.25 * np.einsum("ijab,ijab->", self.oovv, t2)
                + 0.5 * np.einsum("ijab,ia,jb->", self.oovv, t1, t1))

    def update(self, t1, t2):
        """One Jacobi update of the amplitudes.

        Returns:
            (array, array): New T1 and T2.
        """
        tau = self.tau(t1, t2)
        taut = self.tau(t1, t2, 0.5)

        fae = self.f_vv.copy()
        fae -= 0.5 * np.einsum("me,ma->ae", self.fov, t1)
        fae += np.einsum("mf,mafe->ae", t1, self.ovvv)
        fae -= 0.5 * np.einsum("mnaf,mnef->ae", taut, self.oovv)

        fmi = self.f_oo.copy()
        fmi += 0.5 * np.einsum("ie,me->mi", t1, self.fov)
        fmi += np.einsum("ne,mnie->mi", t1, self.ooov)
        fmi += 0.5 * np.einsum("inef,mnef->mi", taut, self.oovv)

        fme = self.fov + np.einsum("nf,mnef->me", t1, self.oovv)

        wmnij = self.oooo.copy()
        p_ij = np.einsum("je,mnie->mnij", t1, self.ooov)
        wmnij += p_ij - p_ij.swapaxes(2, 3)
        wmnij += 0.25 * np.einsum("ijef,mnef->mnij", tau, self.oovv)

        wabef = self.vvvv.copy()
        p_ab = np.einsum("mb,amef->abef", t1, self.vovv)
        wabef -= p_ab - p_ab.swapaxes(0, 1)
        wabef += 0.25 * np.einsum("mnab,mnef->abef", tau, self.oovv)

        wmbej = self.ovvo.copy()
        wmbej += np.einsum("jf,mbef->mbej", t1, self.ovvv)
        wmbej -= np.einsum("nb,mnej->mbej", t1, self.oovo)
        wmbej -= np.einsum("jnfb,mnef->mbej", 0.5 * t2 + np.einsum("jf,nb->jnfb", t1, t1), self.oovv)

        r1 = self.fov.copy()
        r1 += np.einsum("ie,ae->ia", t1, fae)
        r1 -= np.einsum("ma,mi->ia", t1, fmi)
        r1 += np.einsum("imae,me->ia", t2, fme)
        r1 -= np.einsum("nf,naif->ia", t1, self.ovov)
        r1 -= 0.5 * np.einsum("imef,maef->ia", t2, self.ovvv)
        r1 -= 0.5 * np.einsum("mnae,nmei->ia", t2, self.oovo)

        r2 = self.oovv.copy()
        tmp = np.einsum("ijae,be->ijab", t2, fae - 0.5 * np.einsum("mb,me->be", t1, fme))
        r2 += tmp - tmp.swapaxes(2, 3)
        tmp = np.einsum("imab,mj->ijab", t2, fmi + 0.5 * np.einsum("je,me->mj", t1, fme))
        r2 -= tmp - tmp.swapaxes(0, 1)
        r2 += 0.5 * np.einsum("mnab,mnij->ijab", tau, wmnij)
        r2 += 0.5 * np.einsum("ijef,abef->ijab", tau, wabef)
        tmp = np.einsum("imae,mbej->ijab", t2, wmbej)
        tmp -= np.einsum("ie,ma,mbej->ijab", t1, t1, self.ovvo)
        r2 += tmp - tmp.swapaxes(2, 3) - tmp.swapaxes(0, 1) + tmp.swapaxes(0, 1).swapaxes(2, 3)
        tmp = np.einsum("ie,abej->ijab", t1, self.vvvo)
        r2 += tmp - tmp.swapaxes(0, 1)
        tmp = np.einsum("ma,mbij->ijab", t1, self.ovoo)
        r2 -= tmp - tmp.swapaxes(2, 3)

        return r1 / self.d1, r2 / self.d2


class RCCSDSolver(ElectronicStructureSolver):
    """Closed-shell CCSD. Amplitudes are stored in the closed-shell convention
    and iterated in the spin-orbital basis, with optional DIIS extrapolation
    (options.diis, options.diis_max_vec).

    Args:
        options (Options): Resolved configuration values (drop_occ,
            drop_vir, cc_e_conv and cc_max_iter are used).

    Attributes:
        moints (IntegralHelper): Molecular-orbital blocks of the last run.
    """

    def __init__(self, options=None):
        super().__init__(options)
        self.moints = None

    def run(self, reference, ints):
        """Solve the CCSD equations.

        Args:
            reference (WavefunctionResult): Converged RHF reference.
            ints (IntegralHelper): Atomic-orbital integrals used to produce
                the reference.

        Returns:
            CorrelatedResult: Energy, T1 and T2 amplitudes. converged is
                False if cc_max_iter is reached (a RuntimeWarning is also
                emitted).

        Raises:
            ChainingPreconditionError: The reference is not converged.
        """
        require_converged(reference, self.__class__.__name__)

        t1, t2 = amplitude_guess(reference.ndocc, reference.nvir, self.options.drop_occ, self.options.drop_vir,
                                 ints.precision)

        self.moints = correlated_integrals(reference, ints, self.options)
        if self.moints.eri_type is ERIRepresentation.DENSE:
            mo_from_ao(self.moints, ints, *dense_blocks)
            eri = assemble_dense_eri(self.moints)
        else:
            mo_from_ao(self.moints, ints, *factorized_blocks)
            eri = assemble_factorized_eri(self.moints)

        equations = SpinOrbitalCCSD(self.moints["Fd"].data, eri, self.moints.n_active_occupied)
        t1_so, t2_so = spinorbital_amplitudes(t1, t2)
        energy = equations.energy(t1_so, t2_so)

        diis = DIIS(self.options.diis_max_vec) if self.options.diis else None
        n_t1 = t1_so.size

        delta_energy = float("inf")
        for iteration in range(1, self.options.cc_max_iter+1):
            new_t1, new_t2 = equations.update(t1_so, t2_so)

            if diis is not None:
                amplitudes = np.concatenate((new_t1.ravel(), new_t2.ravel()))
                residual = amplitudes - np.concatenate((t1_so.ravel(), t2_so.ravel()))
                diis.push(amplitudes, residual)
                amplitudes = diis.extrapolate()
                new_t1 = amplitudes[:n_t1].reshape(t1_so.shape)
                new_t2 = amplitudes[n_t1:].reshape(t2_so.shape)

            t1_so, t2_so = new_t1, new_t2
            new_energy = equations.energy(t1_so, t2_so)
            delta_energy, energy = new_energy - energy, new_energy

            if self.verbose:
                print(f"\t{self.__class__.__name__}: iteration {iteration:3d}  E(corr) = {energy:.12f}  "
                      f"dE = {delta_energy:.3e}")

            if abs(delta_energy) < self.options.cc_e_conv:
                converged = True
                break
        else:
            converged = False
            warnings.warn(f"{self.__class__.__name__}: CCSD did not converge in {self.options.cc_max_iter} "
                          f"iterations (last energy change {delta_energy:.3e}, threshold "
                          f"{self.options.cc_e_conv:.1e}).", RuntimeWarning)

        t1, t2 = restricted_amplitudes(t1_so, t2_so)

        return CorrelatedResult(method="CCSD", reference=reference, correlation_energy=float(energy), t2=t2,
                                t1=t1, iterations=iteration, converged=converged)


available_ccsd_solvers = AlgorithmRegistry("CCSD")
available_ccsd_solvers.register(RCCSDSolver, key=1)


def get_ccsd_solver(options=None, solver: Union[None, int, Type[ElectronicStructureSolver]] = None):
    """Return requested CCSD solver object.

    Args:
        options (Options): Resolved configuration values.
        solver (int or Type[ElectronicStructureSolver] or None): Key in
            available_ccsd_solvers. If None, options.cc_alg is used. Can also
            be a user-defined CCSD implementation (child to
            ElectronicStructureSolver class).

    Raises:
        UnavailableAlgorithmError: The key is not registered.
        TypeError: The specified solver was not an int or sub class of ElectronicStructureSolver.
    """

    if solver is None:
        solver = options.cc_alg if options is not None else 0

    if isinstance(solver, int) and not isinstance(solver, bool):
        solver = available_ccsd_solvers.resolve(solver)
    elif not (isinstance(solver, type) and issubclass(solver, ElectronicStructureSolver)):
        raise TypeError(f"Solver must be an int or a subclass of ElectronicStructureSolver but received {type(solver).__name__}")

    return solver(options)


class CCSDSolver(ElectronicStructureSolver):
    """Uses the CCSD implementation selected by options.cc_alg (or by the
    solver argument).

    Attributes:
        solver (ElectronicStructureSolver): The solver that is used.
    """

    def __init__(self, options=None, solver=None):
        super().__init__(options)
        self.solver = get_ccsd_solver(self.options, solver)

    def run(self, reference, ints):
        return self.solver.run(reference, ints)
