#!/usr/bin/env python3
# Copyright 2025 Litianyu141
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Fatal errors raised while building or applying a multigrid hierarchy.

Invalid arguments and dimension mismatches raise the built-in ValueError /
TypeError. Non-convergence is not an error: it is reported through the
convergence monitor and SolverResult.converged.
"""


class HierarchyBuildError(RuntimeError):
    """Coarsening failed to reduce the number of rows."""


class SingularMatrixError(RuntimeError):
    """The coarsest-level operator is singular or numerically singular."""
