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

"""Abstract class defining a common interface to all electronic structure
solvers, in order to have consistency and ensure that interchangeable
implementations of a method can be registered and selected at runtime.
"""

import abc

from scfflow.options import Options


class ElectronicStructureSolver(abc.ABC):
    """Sets interface for objects that compute the energy of a molecule.

    Specifics vary between concrete implementations, but common to all of them
    is that they are built from resolved configuration values, and that `run`
    returns a result object that downstream methods can consume.

    Args:
        options (Options): Resolved configuration values. Defaults are used
            if None.
    """

    def __init__(self, options=None):
        self.options = options if options is not None else Options()
        self.verbose = self.options.verbose

    @abc.abstractmethod
    def run(self, *args):
        """Performs the computation and returns its result object."""
        pass
