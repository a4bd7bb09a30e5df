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
from types import SimpleNamespace

import numpy as np

from scfflow import Options
from scfflow.algorithms.classical.scf_engine import SCFEngine, SCFState
from scfflow.helpers.errors import ConfigurationError
from scfflow.toolboxes.molecular_computation.fock import get_fock_builder
from scfflow.toolboxes.molecular_computation.integrals import IntegralHelper
from scfflow.molecule_library import mol_H2O, mol_H2


def build_engine(molecule, options=None):
    ints = IntegralHelper(molecule)
    builder = get_fock_builder(ints.get_hcore(), ints["ERI"])
    return SCFEngine(builder, ints["S"].data, molecule, options, algorithm="Test")


class SCFEngineTest(unittest.TestCase):

    def test_cold_start(self):
        """The first energy of a zero-density start is the nuclear repulsion."""

        engine = build_engine(mol_H2O)
        result = engine.kernel()

        self.assertEqual(engine.history[0][0], 0)
        self.assertAlmostEqual(engine.history[0][1], mol_H2O.e_nuc, places=12)
        self.assertIs(engine.state, SCFState.CONVERGED)
        self.assertEqual(len(engine.history), result.iterations + 1)
        self.assertAlmostEqual(engine.history[-1][1], result.energy, places=12)

    def test_without_diis(self):
        """Plain Roothaan iterations reach the same energy."""

        result = build_engine(mol_H2O, Options(diis=False, e_conv=1e-10)).kernel()
        reference = build_engine(mol_H2O, Options(e_conv=1e-10)).kernel()

        self.assertTrue(result.converged)
        self.assertAlmostEqual(result.energy, reference.energy, places=7)
        self.assertGreaterEqual(result.iterations, reference.iterations)

    def test_density_criterion(self):
        """The density RMS is only a criterion when d_conv is set."""

        loose = build_engine(mol_H2O, Options(e_conv=1e-4)).kernel()
        tight = build_engine(mol_H2O, Options(e_conv=1e-4, d_conv=1e-9)).kernel()

        self.assertGreater(loose.density_rms, 0.)
        self.assertLess(tight.density_rms, 1e-9)
        self.assertGreater(tight.iterations, loose.iterations)

    def test_orbitals(self):
        """Final orbitals are canonical, orthonormal, and reproduce the density."""

        ints = IntegralHelper(mol_H2)
        result = build_engine(mol_H2, Options(e_conv=1e-12, d_conv=1e-10)).kernel()
        c, overlap = result.orbital_coefficients, ints["S"].data

        np.testing.assert_allclose(c.T @ overlap @ c, np.eye(2), atol=1e-10)
        self.assertTrue(np.all(np.diff(result.orbital_energies) >= 0.))
        self.assertEqual(result.ndocc, 1)
        self.assertEqual(result.nvir, 1)

    def test_guess(self):
        """Starting from converged orbitals converges at once."""

        reference = build_engine(mol_H2O, Options(e_conv=1e-10)).kernel()
        result = build_engine(mol_H2O, Options(e_conv=1e-10)).kernel(guess=reference)

        self.assertLessEqual(result.iterations, 3)
        self.assertAlmostEqual(result.energy, reference.energy, places=9)

    def test_invalid_guess(self):

        guess = build_engine(mol_H2).kernel()
        self.assertRaises(ConfigurationError, build_engine(mol_H2O).kernel, guess)

    def test_too_many_electrons(self):
        """More doubly occupied orbitals than basis functions."""

        molecule = SimpleNamespace(e_nuc=0., ndocc=2)
        builder = get_fock_builder(np.eye(1), IntegralHelper(mol_H2)["ERI"])
        self.assertRaises(ConfigurationError, SCFEngine, builder, np.eye(1), molecule)


if __name__ == "__main__":
    unittest.main()
