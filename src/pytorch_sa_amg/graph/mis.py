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
Maximal independent sets on the sparsity graph of a symmetric matrix.
"""

import torch
from typing import Tuple

from ..utils.matrix_utils import csr_structure


def maximal_independent_set(G: torch.Tensor, k: int = 1) -> Tuple[torch.Tensor, int]:
    """
    Greedy distance-k maximal independent set.

    Vertices are visited in index order, so the result is deterministic.
    Every vertex ends up within distance k of a selected vertex and no two
    selected vertices are within distance k of each other.

    Args:
        G: Square sparse (or dense) matrix with a symmetric sparsity pattern
        k: Distance, 1 or 2

    Returns:
        Tuple of (stencil, num_selected); stencil[i] == 1 for selected vertices
    """
    if k not in (1, 2):
        raise ValueError(f"Only distance 1 and 2 are supported, got k={k}")
    if G.shape[0] != G.shape[1]:
        raise ValueError(f"Graph matrix must be square, got shape {tuple(G.shape)}")

    n = G.shape[0]
    row_ptr, cols = csr_structure(G)

    selected = [0] * n
    blocked = [False] * n
    count = 0

    for i in range(n):
        if blocked[i]:
            continue
        selected[i] = 1
        blocked[i] = True
        count += 1
        for jj in range(row_ptr[i], row_ptr[i + 1]):
            j = cols[jj]
            blocked[j] = True
            if k == 2:
                for ll in range(row_ptr[j], row_ptr[j + 1]):
                    blocked[cols[ll]] = True

    stencil = torch.tensor(selected, dtype=torch.int64, device=G.device)
    return stencil, count
