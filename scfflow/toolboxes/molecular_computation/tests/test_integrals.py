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

import numpy as np

from scfflow import Options
from scfflow.helpers.errors import ConfigurationError, IntegralMismatchError
from scfflow.toolboxes.molecular_computation.integrals import IntegralHelper, IntegralTensor, Precision, \
    ERIRepresentation, OrbitalDomain
from scfflow.molecule_library import mol_H2O, mol_H2


class IntegralHelperTest(unittest.TestCase):

    def test_atomic_integrals(self):
        """Shapes, tags and symmetry of the atomic-orbital integrals."""

        ints = IntegralHelper(mol_H2O, "sto-3g")

        self.assertEqual(ints.nbf, 7)
        self.assertEqual(ints.eri_name, "ERI")
        for name in ("S", "T", "V"):
            self.assertEqual(ints[name].shape, (7, 7))
            np.testing.assert_allclose(ints[name].data, ints[name].data.T, atol=1e-12)

        eri = ints["ERI"]
        self.assertEqual(eri.shape, (7,)*4)
        self.assertEqual(eri.tags(), (Precision.DOUBLE, ERIRepresentation.DENSE, OrbitalDomain.ATOMIC))
        np.testing.assert_allclose(eri.data, eri.data.transpose(1, 0, 2, 3), atol=1e-12)
        np.testing.assert_allclose(eri.data, eri.data.transpose(2, 3, 0, 1), atol=1e-12)

        self.assertEqual(sorted(ints.keys()), ["ERI", "S", "T", "V"])

    def test_lazy_and_cached(self):
        """Tensors are computed on first access only."""

        ints = IntegralHelper(mol_H2)

        self.assertNotIn("S", ints)
        overlap = ints["S"]
        self.assertIn("S", ints)
        self.assertIs(ints["S"], overlap)

    def test_read_only(self):
        """Stored tensors cannot be modified in place."""

        ints = IntegralHelper(mol_H2)

        with self.assertRaises(ValueError):
            ints["S"].data[0, 0] = 2.

    def test_single_precision(self):

        ints = IntegralHelper(mol_H2, precision="single")

        self.assertEqual(ints["S"].data.dtype, np.float32)
        self.assertEqual(ints["ERI"].data.dtype, np.float32)

    def test_factorized(self):
        """The factor reproduces the dense integrals to density-fitting accuracy."""

        dense = IntegralHelper(mol_H2O)["ERI"].data
        ints = IntegralHelper(mol_H2O, eri_type="factorized", auxbasis="weigend")

        self.assertEqual(ints.eri_name, "B")
        b = ints["B"].data
        self.assertEqual(b.shape[1:], (7, 7))
        np.testing.assert_allclose(np.einsum("Qpq,Qrs->pqrs", b, b), dense, atol=1e-2)

        self.assertRaises(IntegralMismatchError, ints.__getitem__, "ERI")
        self.assertRaises(IntegralMismatchError, IntegralHelper(mol_H2O).__getitem__, "B")

    def test_from_options(self):

        ints = IntegralHelper.from_options(mol_H2, Options(basis="6-31g", df=True, precision="single"))

        self.assertEqual(ints.basis, "6-31g")
        self.assertIs(ints.eri_type, ERIRepresentation.FACTORIZED)
        self.assertIs(ints.precision, Precision.SINGLE)
        self.assertEqual(ints.nbf, 4)

    def test_unknown_name(self):
        self.assertRaises(KeyError, IntegralHelper(mol_H2).__getitem__, "X")

    def test_frozen_orbitals_atomic(self):
        """Frozen orbitals only apply to molecular-orbital helpers."""

        self.assertRaises(ConfigurationError, IntegralHelper, mol_H2, drop_occ=1)
        self.assertRaises(ConfigurationError, IntegralHelper, mol_H2, drop_vir=-1)

    def test_store_mismatched_tensor(self):
        """A tensor tagged with another precision cannot be stored."""

        ints = IntegralHelper(mol_H2)
        tensor = IntegralTensor("S", np.eye(2, dtype=np.float32), Precision.SINGLE, ERIRepresentation.DENSE,
                                OrbitalDomain.ATOMIC)

        with self.assertRaises(IntegralMismatchError):
            ints["S"] = tensor

    def test_stored_array_is_copied(self):
        """Storing an array does not freeze the array of the caller."""

        ints = IntegralHelper(mol_H2)
        overlap = np.eye(2)
        ints["S"] = overlap
        tensor = IntegralTensor("T", overlap, Precision.DOUBLE, ERIRepresentation.DENSE, OrbitalDomain.ATOMIC)

        self.assertTrue(overlap.flags.writeable)
        overlap[0, 1] = 0.5
        self.assertEqual(ints["S"].data[0, 1], 0.)
        self.assertEqual(tensor.data[0, 1], 0.)

    def test_tensor_dtype_check(self):
        self.assertRaises(IntegralMismatchError, IntegralTensor, "S", np.eye(2), Precision.SINGLE,
                          ERIRepresentation.DENSE, OrbitalDomain.ATOMIC)

    def test_release_and_recompute(self):
        """A released tensor is recomputed on request, with a warning."""

        ints = IntegralHelper(mol_H2)
        eri = ints["ERI"].data.copy()
        ints.delete("ERI", "NotStored")
        self.assertNotIn("ERI", ints)

        with self.assertWarns(RuntimeWarning):
            recomputed = ints["ERI"].data
        np.testing.assert_allclose(recomputed, eri)

    def test_hcore(self):
        ints = IntegralHelper(mol_H2)
        np.testing.assert_allclose(ints.get_hcore(), ints["T"].data + ints["V"].data)

    def test_check_compatible(self):

        ints = IntegralHelper(mol_H2)

        ints.check_compatible(IntegralHelper(mol_H2))
        self.assertRaises(IntegralMismatchError, ints.check_compatible, IntegralHelper(mol_H2, precision="single"))
        self.assertRaises(IntegralMismatchError, ints.check_compatible, IntegralHelper(mol_H2, eri_type="factorized"))


if __name__ == "__main__":
    unittest.main()
