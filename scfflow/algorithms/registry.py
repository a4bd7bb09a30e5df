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

"""Registries mapping small integer keys to interchangeable implementations of
a method family. New implementations are added by registration only; the
dispatch code never changes.
"""

from scfflow.helpers.errors import ConfigurationError, UnavailableAlgorithmError


class AlgorithmRegistry:
    """Mapping from a positive integer key to a factory (typically a solver
    class) for one method family.

    Key 0 (or None) always designates the default implementation.

    Args:
        family (str): Name of the method family, used in error messages.
        default_key (int): Key resolved when 0 or None is requested.
    """

    def __init__(self, family, default_key=1):
        self.family = family
        self.default_key = default_key
        self._factories = dict()

    def __contains__(self, key):
        return key in self._factories

    def __len__(self):
        return len(self._factories)

    def keys(self):
        """Returns the registered keys, sorted."""
        return sorted(self._factories.keys())

    def register(self, factory, key=None):
        """Associate a factory with a key.

        Args:
            factory (callable): Builds an object implementing the interface
                of the family (usually a class).
            key (int): Key to register. If None, the next free key is used.

        Returns:
            int: The key under which factory is registered.

        Raises:
            ConfigurationError: Invalid or already registered key.
        """
        if not callable(factory):
            raise ConfigurationError(f"{self.family}: the registered implementation must be callable, "
                                     f"received {type(factory).__name__}.")
        if key is None:
            key = max(self._factories.keys(), default=0) + 1
        if not isinstance(key, int) or isinstance(key, bool) or key < 1:
            raise ConfigurationError(f"{self.family}: algorithm keys must be positive integers, received {key!r}.")
        if key in self._factories:
            raise ConfigurationError(f"{self.family}: key {key} is already registered to "
                                     f"{getattr(self._factories[key], '__name__', self._factories[key])}.")

        self._factories[key] = factory
        return key

    def implementation(self, key=None):
        """Decorator form of register."""
        def wrapper(factory):
            self.register(factory, key)
            return factory
        return wrapper

    def resolve(self, key=0):
        """Return the factory registered under key.

        Args:
            key (int): Requested key. 0 or None selects the default.

        Returns:
            callable: The registered factory.

        Raises:
            UnavailableAlgorithmError: No implementation under that key.
        """
        if key is None or key == 0:
            key = self.default_key
        try:
            return self._factories[key]
        except (KeyError, TypeError):
            raise UnavailableAlgorithmError(self.family, key, self.keys())

    def create(self, key=0, *args, **kwargs):
        """Resolve key and call the factory with the given arguments."""
        return self.resolve(key)(*args, **kwargs)
