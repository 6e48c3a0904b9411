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
Chebyshev polynomial relaxation.

Applies a degree-k Chebyshev polynomial in D^-1 A that is small on
[rho / 30, 1.1 * rho], i.e. on the upper part of the spectrum that the
coarse grid does not correct.
"""

import torch

from ..utils.matrix_utils import diagonal, spmv

LOWER_FRACTION = 1.0 / 30.0
UPPER_FRACTION = 1.1


class PolynomialSmoother:
    """
    Chebyshev smoother preconditioned by the diagonal.

    Args:
        A: Level operator
        rho: Spectral radius estimate of D^-1 A
        degree: Number of Chebyshev steps per presmooth/postsmooth call
    """

    def __init__(self, A: torch.Tensor, rho: float, degree: int = 3):
        rho = float(rho)
        if rho <= 0.0:
            raise ValueError(f"Spectral radius estimate must be positive, got {rho}")
        if degree < 1:
            raise ValueError(f"Polynomial degree must be positive, got {degree}")
        D = diagonal(A)
        if (D == 0).any():
            raise ValueError("Polynomial relaxation requires a nonzero diagonal")
        self.Dinv = 1.0 / D
        self.degree = degree
        self.lower = LOWER_FRACTION * rho
        self.upper = UPPER_FRACTION * rho

    def _relax(self, A: torch.Tensor, b: torch.Tensor, x: torch.Tensor) -> None:
        theta = 0.5 * (self.upper + self.lower)
        delta = 0.5 * (self.upper - self.lower)
        sigma = theta / delta
        rho_k = 1.0 / sigma

        r = b - spmv(A, x)
        d = self.Dinv * r / theta
        for i in range(self.degree):
            x.add_(d)
            if i + 1 == self.degree:
                break
            r = r - spmv(A, d)
            rho_next = 1.0 / (2.0 * sigma - rho_k)
            d = rho_next * rho_k * d + (2.0 * rho_next / delta) * (self.Dinv * r)
            rho_k = rho_next

    def presmooth(self, A: torch.Tensor, b: torch.Tensor, x: torch.Tensor) -> None:
        self._relax(A, b, x)

    def postsmooth(self, A: torch.Tensor, b: torch.Tensor, x: torch.Tensor) -> None:
        self._relax(A, b, x)

    def __repr__(self) -> str:
        return (f"PolynomialSmoother(degree={self.degree}, "
                f"interval=[{self.lower:.4g}, {self.upper:.4g}])")
