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
Dense LU solver for the coarsest multigrid level.

The coarsest operator is small (at most a few hundred rows), so it is
densified once and factored on the host with partial pivoting. Every V-cycle
then marshals its right-hand side to the host, solves with the cached factors
and copies the solution back to the caller's device.
"""

import torch
from typing import Optional

from ..exceptions import SingularMatrixError
from ..utils.matrix_utils import is_sparse_matrix


class LUSolver:
    """
    LU factorization with partial pivoting of a dense matrix.

    Args:
        A: Square matrix (dense or sparse); it is copied to a dense host tensor
        pivot_tol: Relative pivot threshold. Defaults to n * eps of the dtype.

    Raises:
        ValueError: A is not square
        SingularMatrixError: A is singular or has a pivot below the threshold

    Example:
        >>> lu = LUSolver(A_coarse)
        >>> x = lu.solve(b)
    """

    def __init__(self, A: torch.Tensor, pivot_tol: Optional[float] = None):
        if A.ndim != 2 or A.shape[0] != A.shape[1]:
            raise ValueError(f"LU solver requires a square matrix, got shape {tuple(A.shape)}")

        dense = A.to_dense() if is_sparse_matrix(A) else A
        dense = dense.detach().to('cpu').clone()

        self.n = dense.shape[0]
        self.dtype = dense.dtype

        LU, pivots, info = torch.linalg.lu_factor_ex(dense)
        if int(info.item()) > 0:
            raise SingularMatrixError(
                f"Coarse operator is singular: zero pivot at position {int(info.item())}"
            )

        pivot_magnitudes = torch.diagonal(LU).abs()
        if pivot_tol is None:
            pivot_tol = self.n * torch.finfo(self.dtype).eps
        largest = pivot_magnitudes.max().item() if self.n > 0 else 0.0
        smallest = pivot_magnitudes.min().item() if self.n > 0 else 0.0
        if self.n > 0 and smallest <= pivot_tol * largest:
            raise SingularMatrixError(
                f"Coarse operator is numerically singular: pivot ratio "
                f"{smallest / largest if largest > 0 else 0.0:.3e} <= {pivot_tol:.3e}"
            )

        self.LU = LU
        self.pivots = pivots

    def solve(self, b: torch.Tensor) -> torch.Tensor:
        """
        Solve A x = b.

        Args:
            b: Right-hand side vector on any device

        Returns:
            Solution on the device and dtype of b
        """
        if b.shape != (self.n,):
            raise ValueError(f"Right-hand side must have shape ({self.n},), got {tuple(b.shape)}")
        b_host = b.detach().to(device='cpu', dtype=self.dtype)
        x_host = torch.linalg.lu_solve(self.LU, self.pivots, b_host.unsqueeze(-1)).squeeze(-1)
        return x_host.to(device=b.device, dtype=b.dtype)

    def __call__(self, b: torch.Tensor) -> torch.Tensor:
        return self.solve(b)

    def __repr__(self) -> str:
        return f"LUSolver(n={self.n}, dtype={self.dtype})"
