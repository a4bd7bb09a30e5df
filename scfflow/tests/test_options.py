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

from scfflow import Options
from scfflow.helpers.errors import ConfigurationError


class OptionsTest(unittest.TestCase):

    def test_defaults(self):
        """Default values of the configuration object."""

        options = Options()

        self.assertEqual(options.basis, "sto-3g")
        self.assertEqual(options.scf_alg, 0)
        self.assertEqual(options.max_iter, 100)
        self.assertIsNone(options.d_conv)
        self.assertTrue(options.diis)
        self.assertFalse(options.df)
        self.assertEqual(options.spin, 0)

    def test_from_dict(self):
        """Keywords are mapped to attributes."""

        options = Options.from_dict({"basis": "6-31g", "multiplicity": 3, "scf_alg": 2, "precision": "DOUBLE"})

        self.assertEqual(options.basis, "6-31g")
        self.assertEqual(options.spin, 2)
        self.assertEqual(options.scf_alg, 2)
        self.assertEqual(options.precision, "double")

    def test_from_dict_unknown_keyword(self):
        """Unsupported keywords raise a KeyError."""

        with self.assertRaises(KeyError):
            Options.from_dict({"basis": "sto-3g", "maxiter": 10})

    def test_negative_values(self):
        """Negative keys and frozen orbital counts are rejected."""

        for name in ("scf_alg", "mp2_alg", "cc_alg", "drop_occ", "drop_vir"):
            with self.assertRaises(ConfigurationError):
                Options(**{name: -1})

    def test_invalid_values(self):

        self.assertRaises(ConfigurationError, Options, scf_alg=True)
        self.assertRaises(ConfigurationError, Options, multiplicity=0)
        self.assertRaises(ConfigurationError, Options, e_conv=0.)
        self.assertRaises(ConfigurationError, Options, d_conv=-1.e-6)
        self.assertRaises(ConfigurationError, Options, max_iter=0)
        self.assertRaises(ConfigurationError, Options, diis_max_vec=1)
        self.assertRaises(ConfigurationError, Options, precision="half")


if __name__ == "__main__":
    unittest.main()
