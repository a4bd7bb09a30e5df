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

"""Exceptions raised when a contract of the SCF pipeline is violated.

Three families are distinguished:
    - configuration errors, raised at construction or dispatch time (unknown
      algorithm key, negative frozen-orbital counts, integral tags that do not
      match);
    - numerical precondition failures, fatal to the current run (linearly
      dependent basis);
    - chaining precondition violations, raised when a downstream method is
      handed a reference that did not converge.
"""


class ConfigurationError(ValueError):
    """A resolved configuration value or a combination of inputs is invalid."""


class UnavailableAlgorithmError(ConfigurationError):
    """No implementation is registered under the requested key.

    Attributes:
        family (str): Method family of the registry (e.g. "RHF").
        key (int): Requested key.
        available (list of int): Keys registered for this family.
    """

    def __init__(self, family, key, available):
        self.family = family
        self.key = key
        self.available = list(available)
        super().__init__(f"implementation number {key} not available for {family}. "
                         f"Registered implementations: {self.available}")


class IntegralMismatchError(ConfigurationError):
    """Integral tensors chained together disagree on precision, representation
    or orbital domain.
    """


class NumericalPreconditionError(ArithmeticError):
    """The numerical input cannot be processed (e.g. singular basis)."""


class LinearDependencyError(NumericalPreconditionError):
    """The overlap matrix has a non-positive eigenvalue.

    Attributes:
        index (int): Position of the offending eigenvalue (ascending order).
        eigenvalue (float): Its value.
    """

    def __init__(self, index, eigenvalue, threshold=0.):
        self.index = index
        self.eigenvalue = eigenvalue
        self.threshold = threshold
        super().__init__(f"Overlap eigenvalue {index} is {eigenvalue:.3e} (threshold {threshold:.1e}): "
                         "the basis set is linearly dependent.")


class ChainingPreconditionError(RuntimeError):
    """A downstream method was requested on a reference that is not usable."""
