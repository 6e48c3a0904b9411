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
Weighted Jacobi relaxation.
"""

import torch

from ..utils.matrix_utils import diagonal, spmv


class JacobiSmoother:
    """
    Weighted Jacobi smoother with weight 4 / (3 * rho(D^-1 A)).

    Args:
        A: Level operator
        rho: Spectral radius estimate of D^-1 A
        sweeps: Relaxation sweeps per presmooth/postsmooth call
    """

    def __init__(self, A: torch.Tensor, rho: float, sweeps: int = 1):
        rho = float(rho)
        if rho <= 0.0:
            raise ValueError(f"Spectral radius estimate must be positive, got {rho}")
        D = diagonal(A)
        if (D == 0).any():
            raise ValueError("Jacobi relaxation requires a nonzero diagonal")
        self.weight = 4.0 / (3.0 * rho)
        self.sweeps = sweeps
        self.Dinv = 1.0 / D

    def _relax(self, A: torch.Tensor, b: torch.Tensor, x: torch.Tensor) -> None:
        for _ in range(self.sweeps):
            x.add_(self.weight * self.Dinv * (b - spmv(A, x)))

    def presmooth(self, A: torch.Tensor, b: torch.Tensor, x: torch.Tensor) -> None:
        self._relax(A, b, x)

    def postsmooth(self, A: torch.Tensor, b: torch.Tensor, x: torch.Tensor) -> None:
        self._relax(A, b, x)

    def __repr__(self) -> str:
        return f"JacobiSmoother(weight={self.weight:.4g}, sweeps={self.sweeps})"
