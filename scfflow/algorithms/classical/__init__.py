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

from .rhf_solver import RHFSolver, RHFSolverA, RHFSolverB, available_rhf_solvers, get_rhf_solver
from .mp2_solver import MP2Solver, RMP2Solver, available_mp2_solvers, get_mp2_solver
from .ccsd_solver import CCSDSolver, RCCSDSolver, available_ccsd_solvers, get_ccsd_solver
