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
Vertex coloring of the sparsity graph of a symmetric matrix.

Used by the multicolor Gauss-Seidel smoother: rows sharing a color are not
coupled, so they can be relaxed together.
"""

import torch
from typing import Tuple

from ..utils.matrix_utils import csr_structure


def vertex_coloring(G: torch.Tensor) -> Tuple[torch.Tensor, int]:
    """
    Greedy first-fit coloring in vertex index order.

    Args:
        G: Square sparse (or dense) matrix with a symmetric sparsity pattern.
           Diagonal entries are ignored.

    Returns:
        Tuple of (colors, num_colors); adjacent vertices get different colors
    """
    if G.shape[0] != G.shape[1]:
        raise ValueError(f"Graph matrix must be square, got shape {tuple(G.shape)}")

    n = G.shape[0]
    row_ptr, cols = csr_structure(G)

    colors = [-1] * n
    num_colors = 0
    for i in range(n):
        used = set()
        for jj in range(row_ptr[i], row_ptr[i + 1]):
            j = cols[jj]
            if j != i and colors[j] >= 0:
                used.add(colors[j])
        c = 0
        while c in used:
            c += 1
        colors[i] = c
        num_colors = max(num_colors, c + 1)

    return torch.tensor(colors, dtype=torch.int64, device=G.device), num_colors
