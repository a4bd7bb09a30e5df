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
from pyscf import scf, mp

from scfflow import Options
from scfflow.algorithms.electronic_structure_solver import ElectronicStructureSolver
from scfflow.algorithms.classical.rhf_solver import RHFSolver
from scfflow.algorithms.classical.mp2_solver import MP2Solver, RMP2Solver, available_mp2_solvers, get_mp2_solver
from scfflow.helpers.errors import ChainingPreconditionError, ConfigurationError, UnavailableAlgorithmError
from scfflow.toolboxes.molecular_computation.integral_solver_pyscf import mol_to_pyscf
from scfflow.toolboxes.molecular_computation.integrals import IntegralHelper
from scfflow.molecule_library import mol_H2O, mol_H2


class MP2SolverTest(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.options = Options(basis="6-31g", e_conv=1e-10, d_conv=1e-8)
        cls.aoints = IntegralHelper.from_options(mol_H2O, cls.options)
        cls.reference = RHFSolver(cls.options).run(cls.aoints)

        cls.mean_field = scf.RHF(mol_to_pyscf(mol_H2O, "6-31g"))
        cls.mean_field.conv_tol = 1e-12
        cls.mean_field.verbose = 0
        cls.mean_field.kernel()

    def test_registry(self):
        self.assertEqual(available_mp2_solvers.keys(), [1])
        self.assertIsInstance(MP2Solver().solver, RMP2Solver)

    def test_water(self):
        """MP2 correlation energy against pyscf."""

        result = MP2Solver(self.options).run(self.reference, self.aoints)
        e_corr, _ = mp.MP2(self.mean_field).kernel()

        self.assertEqual(result.method, "MP2")
        self.assertAlmostEqual(result.correlation_energy, e_corr, places=7)
        self.assertAlmostEqual(result.energy, self.reference.energy + e_corr, places=7)
        self.assertEqual(result.t2.shape, (5, 5, 8, 8))
        self.assertIsNone(result.t1)

    def test_water_frozen_core(self):
        """Frozen core MP2 against pyscf."""

        options = Options(basis="6-31g", drop_occ=1)
        result = MP2Solver(options).run(self.reference, self.aoints)
        e_corr, _ = mp.MP2(self.mean_field, frozen=1).kernel()

        self.assertAlmostEqual(result.correlation_energy, e_corr, places=7)
        self.assertEqual(result.t2.shape, (4, 4, 8, 8))

    def test_amplitudes_symmetry(self):
        """Closed-shell T2 amplitudes satisfy t_ijab = t_jiba."""

        result = MP2Solver(self.options).run(self.reference, self.aoints)
        np.testing.assert_allclose(result.t2, result.t2.transpose(1, 0, 3, 2), atol=1e-12)

    def test_density_fitting(self):
        """Density-fitted MP2 is close to the exact one."""

        options = Options(basis="6-31g", df=True, e_conv=1e-10, d_conv=1e-8)
        aoints = IntegralHelper.from_options(mol_H2O, options)
        reference = RHFSolver(options).run(aoints)
        result = MP2Solver(options).run(reference, aoints)

        exact = MP2Solver(self.options).run(self.reference, self.aoints)
        self.assertAlmostEqual(result.correlation_energy, exact.correlation_energy, delta=1e-3)

    def test_h2(self):

        aoints = IntegralHelper(mol_H2)
        reference = RHFSolver(Options(e_conv=1e-10)).run(aoints)
        result = RMP2Solver().run(reference, aoints)

        self.assertLess(result.correlation_energy, 0.)
        self.assertEqual(result.t2.shape, (1, 1, 1, 1))

    def test_non_converged_reference(self):
        """MP2 refuses to start from a reference that did not converge."""

        aoints = IntegralHelper(mol_H2O)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", RuntimeWarning)
            reference = RHFSolver(Options(max_iter=1)).run(aoints)

        with self.assertRaises(ChainingPreconditionError):
            MP2Solver().run(reference, aoints)

    def test_too_many_frozen(self):
        options = Options(basis="6-31g", drop_occ=6)
        self.assertRaises(ConfigurationError, MP2Solver(options).run, self.reference, self.aoints)

    def test_get_solver(self):

        class FakeMP2(ElectronicStructureSolver):
            def run(self, reference, ints):
                return 0.

        self.assertIsInstance(get_mp2_solver(Options(), solver=FakeMP2), FakeMP2)
        self.assertRaises(UnavailableAlgorithmError, MP2Solver, Options(mp2_alg=2))
        self.assertRaises(TypeError, get_mp2_solver, Options(), 1.5)


if __name__ == "__main__":
    unittest.main()
