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
Strength of connection for smoothed aggregation.
"""

import torch

from ..utils.matrix_utils import coo_components, diagonal


def symmetric_strength_of_connection(A: torch.Tensor, theta: float = 0.0) -> torch.Tensor:
    """
    Symmetric strength-of-connection matrix.

    Entry (i, j) is kept when i == j or

        |a_ij|^2 >= theta^2 * |a_ii * a_jj|

    The test is symmetric in i and j, so C is symmetric whenever A is.
    Stored off-diagonal zeros are dropped.

    Args:
        A: Square sparse matrix
        theta: Threshold in [0, 1)

    Returns:
        Coalesced COO matrix with the sparsity of A filtered by strength
    """
    if not 0.0 <= theta < 1.0:
        raise ValueError(f"theta must satisfy 0 <= theta < 1, got {theta}")
    if A.shape[0] != A.shape[1]:
        raise ValueError(f"Matrix must be square, got shape {tuple(A.shape)}")

    row, col, values = coo_components(A)
    d = diagonal(A).abs()

    on_diag = row == col
    strong = values.abs() ** 2 >= (theta * theta) * d[row] * d[col]
    keep = on_diag | (strong & (values != 0))

    return torch.sparse_coo_tensor(
        torch.stack([row[keep], col[keep]]),
        values[keep],
        A.shape,
        device=values.device,
        dtype=values.dtype
    ).coalesce()
