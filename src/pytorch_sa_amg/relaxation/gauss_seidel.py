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
Multicolor Gauss-Seidel relaxation.

Rows are grouped by a vertex coloring of the matrix graph. Rows of one
color are mutually uncoupled, so a Gauss-Seidel sweep becomes one vectorized
Jacobi update per color.
"""

import torch
from typing import List

from ..graph.coloring import vertex_coloring
from ..utils.matrix_utils import coo_components, diagonal, spmv


class MulticolorGaussSeidel:
    """
    Symmetric multicolor Gauss-Seidel smoother.

    Pre-smoothing visits the colors in increasing order, post-smoothing in
    decreasing order. The row blocks of the operator are extracted once at
    construction; the operator passed to presmooth/postsmooth must be the
    same matrix (it is only checked for size).

    Args:
        A: Level operator
        rho: Unused, accepted for a uniform smoother constructor
        sweeps: Relaxation sweeps per presmooth/postsmooth call
    """

    def __init__(self, A: torch.Tensor, rho: float = 1.0, sweeps: int = 1):
        D = diagonal(A)
        if (D == 0).any():
            raise ValueError("Gauss-Seidel relaxation requires a nonzero diagonal")

        n = A.shape[0]
        colors, num_colors = vertex_coloring(A)
        row, col, values = coo_components(A)

        self.n = n
        self.sweeps = sweeps
        self.num_colors = num_colors
        self.rows: List[torch.Tensor] = []
        self.blocks: List[torch.Tensor] = []
        self.Dinv: List[torch.Tensor] = []

        local = torch.empty(n, dtype=torch.int64, device=values.device)
        for c in range(num_colors):
            rows_c = torch.nonzero(colors == c, as_tuple=False).view(-1)
            local[rows_c] = torch.arange(rows_c.numel(), device=values.device)
            mask = colors[row] == c
            block = torch.sparse_coo_tensor(
                torch.stack([local[row[mask]], col[mask]]),
                values[mask],
                (rows_c.numel(), n),
                device=values.device,
                dtype=values.dtype
            ).coalesce().to_sparse_csr()
            self.rows.append(rows_c)
            self.blocks.append(block)
            self.Dinv.append(1.0 / D[rows_c])

    def _sweep(self, A: torch.Tensor, b: torch.Tensor, x: torch.Tensor, order) -> None:
        if A.shape[0] != self.n:
            raise ValueError(f"Operator size {A.shape[0]} does not match smoother size {self.n}")
        order = list(order)
        for _ in range(self.sweeps):
            for c in order:
                rows_c = self.rows[c]
                r_c = b[rows_c] - spmv(self.blocks[c], x)
                x[rows_c] += self.Dinv[c] * r_c

    def presmooth(self, A: torch.Tensor, b: torch.Tensor, x: torch.Tensor) -> None:
        self._sweep(A, b, x, range(self.num_colors))

    def postsmooth(self, A: torch.Tensor, b: torch.Tensor, x: torch.Tensor) -> None:
        self._sweep(A, b, x, reversed(range(self.num_colors)))

    def __repr__(self) -> str:
        return f"MulticolorGaussSeidel(colors={self.num_colors}, sweeps={self.sweeps})"
