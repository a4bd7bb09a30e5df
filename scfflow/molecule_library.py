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

"""Module to create some molecules used in the package unittest."""


from scfflow import Molecule


# Dihydrogen.
xyz_H2 = [
    ("H", (0., 0., 0.)),
    ("H", (0., 0., 0.7414))
]
mol_H2 = Molecule(xyz_H2, q=0, spin=0)


# Helium dimer.
xyz_He2 = [
    ("He", (0., 0., 0.)),
    ("He", (0., 0., 1.0))
]
mol_He2 = Molecule(xyz_He2, q=0, spin=0)


# Water.
xyz_H2O = """
    O    1.2091536548    1.7664118189   -0.0171613972
    H    2.1984800075    1.7977100627    0.0121161719
    H    0.9197881882    2.4580185570    0.6297938832
"""
mol_H2O = Molecule(xyz_H2O, q=0, spin=0)


# Hydroxyl radical and hydroxide anion.
xyz_OH = [
    ("O", (0., 0., 0.)),
    ("H", (0., 0., 0.9697))
]
mol_OH_radical = Molecule(xyz_OH, q=0, spin=1)
mol_OH_anion = Molecule(xyz_OH, q=-1, spin=0)
