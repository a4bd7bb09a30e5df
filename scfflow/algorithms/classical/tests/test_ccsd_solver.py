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

import unittest
import warnings

import numpy as np
from pyscf import scf, cc

from scfflow import Options
from scfflow.algorithms.electronic_structure_solver import ElectronicStructureSolver
from scfflow.algorithms.classical.rhf_solver import RHFSolver
from scfflow.algorithms.classical.mp2_solver import MP2Solver
from scfflow.algorithms.classical.ccsd_solver import CCSDSolver, RCCSDSolver, available_ccsd_solvers, \
    get_ccsd_solver, spinorbital_amplitudes, restricted_amplitudes
from scfflow.helpers.errors import ChainingPreconditionError, UnavailableAlgorithmError
from scfflow.helpers.utils import HiddenPrints
from scfflow.toolboxes.molecular_computation.integral_solver_pyscf import mol_to_pyscf
from scfflow.toolboxes.molecular_computation.integrals import IntegralHelper
from scfflow.molecule_library import mol_H2O, mol_H2


def pyscf_ccsd(molecule, basis, frozen=None):
    mean_field = scf.RHF(mol_to_pyscf(molecule, basis))
    mean_field.conv_tol = 1e-12
    mean_field.verbose = 0
    mean_field.kernel()

    coupled_cluster = cc.CCSD(mean_field, frozen=frozen)
    coupled_cluster.conv_tol = 1e-10
    coupled_cluster.conv_tol_normt = 1e-8
    coupled_cluster.verbose = 0
    coupled_cluster.kernel()
    return coupled_cluster


class CCSDSolverTest(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.options = Options(e_conv=1e-12, d_conv=1e-10)
        cls.aoints = IntegralHelper.from_options(mol_H2O, cls.options)
        cls.reference = RHFSolver(cls.options).run(cls.aoints)

    def test_registry(self):
        self.assertEqual(available_ccsd_solvers.keys(), [1])
        self.assertIsInstance(CCSDSolver().solver, RCCSDSolver)

    def test_water(self):
        """CCSD correlation energy against pyscf."""

        result = CCSDSolver(self.options).run(self.reference, self.aoints)
        reference = pyscf_ccsd(mol_H2O, "sto-3g")

        self.assertTrue(result.converged)
        self.assertEqual(result.method, "CCSD")
        self.assertAlmostEqual(result.correlation_energy, reference.e_corr, places=7)
        self.assertEqual(result.t1.shape, (5, 2))
        self.assertEqual(result.t2.shape, (5, 5, 2, 2))

    def test_water_frozen_core(self):
        """Frozen core CCSD against pyscf."""

        options = Options(drop_occ=1)
        result = CCSDSolver(options).run(self.reference, self.aoints)
        reference = pyscf_ccsd(mol_H2O, "sto-3g", frozen=1)

        self.assertAlmostEqual(result.correlation_energy, reference.e_corr, places=7)
        self.assertEqual(result.t2.shape, (4, 4, 2, 2))

    def test_without_diis(self):

        options = Options(diis=False)
        result = CCSDSolver(options).run(self.reference, self.aoints)
        with_diis = CCSDSolver(self.options).run(self.reference, self.aoints)

        self.assertTrue(result.converged)
        self.assertAlmostEqual(result.correlation_energy, with_diis.correlation_energy, places=8)

    def test_below_mp2(self):
        """The first iteration from zero amplitudes gives MP2."""

        options = Options(cc_max_iter=1, diis=False)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", RuntimeWarning)
            first_iteration = CCSDSolver(options).run(self.reference, self.aoints)
        mp2 = MP2Solver().run(self.reference, self.aoints)

        self.assertAlmostEqual(first_iteration.correlation_energy, mp2.correlation_energy, places=10)

    def test_h2_exact(self):
        """For two electrons CCSD is exact, and reproduces the full CI energy."""

        aoints = IntegralHelper(mol_H2, "6-31g")
        reference = RHFSolver(Options(basis="6-31g", e_conv=1e-12, d_conv=1e-10)).run(aoints)
        result = RCCSDSolver().run(reference, aoints)

        self.assertAlmostEqual(result.correlation_energy, pyscf_ccsd(mol_H2, "6-31g").e_corr, places=7)

    def test_density_fitting(self):

        options = Options(df=True, e_conv=1e-12, d_conv=1e-10)
        aoints = IntegralHelper.from_options(mol_H2O, options)
        reference = RHFSolver(options).run(aoints)
        result = CCSDSolver(options).run(reference, aoints)

        exact = CCSDSolver(self.options).run(self.reference, self.aoints)
        self.assertTrue(result.converged)
        self.assertAlmostEqual(result.correlation_energy, exact.correlation_energy, delta=1e-3)

    def test_not_converged(self):
        """Reaching cc_max_iter is flagged on the result."""

        with self.assertWarns(RuntimeWarning):
            result = CCSDSolver(Options(cc_max_iter=2)).run(self.reference, self.aoints)

        self.assertFalse(result.converged)
        self.assertEqual(result.iterations, 2)

    def test_verbose(self):
        with HiddenPrints():
            result = CCSDSolver(Options(verbose=True)).run(self.reference, self.aoints)
        self.assertTrue(result.converged)

    def test_non_converged_reference(self):

        aoints = IntegralHelper(mol_H2O)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", RuntimeWarning)
            reference = RHFSolver(Options(max_iter=1)).run(aoints)

        self.assertRaises(ChainingPreconditionError, CCSDSolver().run, reference, aoints)

    def test_spinorbital_amplitudes(self):
        """Closed-shell amplitudes survive the spin-orbital expansion."""

        rng = np.random.default_rng(3)
        t1 = rng.normal(size=(2, 3))
        t2 = rng.normal(size=(2, 2, 3, 3))
        t2 = t2 + t2.transpose(1, 0, 3, 2)

        t1_so, t2_so = spinorbital_amplitudes(t1, t2)
        np.testing.assert_allclose(t2_so, -t2_so.transpose(1, 0, 2, 3))
        np.testing.assert_allclose(t2_so, -t2_so.transpose(0, 1, 3, 2))

        t1_back, t2_back = restricted_amplitudes(t1_so, t2_so)
        np.testing.assert_allclose(t1_back, t1)
        np.testing.assert_allclose(t2_back, t2)

    def test_get_solver(self):

        class FakeCCSD(ElectronicStructureSolver):
            def run(self, reference, ints):
                return 0.

        self.assertIsInstance(get_ccsd_solver(Options(cc_alg=0), solver=FakeCCSD), FakeCCSD)
        self.assertRaises(UnavailableAlgorithmError, CCSDSolver, Options(cc_alg=4))
        self.assertRaises(TypeError, get_ccsd_solver, Options(), "ccsd")


if __name__ == "__main__":
    unittest.main()
