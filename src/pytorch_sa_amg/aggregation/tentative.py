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
Tentative prolongator fitted to a near-null-space candidate.
"""

import torch
import warnings
from typing import Tuple


def fit_candidates(
    aggregates: torch.Tensor,
    B: torch.Tensor
) -> Tuple[torch.Tensor, torch.Tensor]:
    """
    Fit the tentative prolongator T and the coarse candidate B_coarse.

    For a single candidate vector the local QR factorization on each
    aggregate reduces to a normalization:

        T[i, agg[i]] = B[i] / ||B restricted to agg[i]||
        B_coarse[j]  = ||B restricted to aggregate j||

    so T has orthonormal columns and T @ B_coarse == B.

    Args:
        aggregates: int64 aggregate id per fine row, contiguous ids
        B: Fine-level candidate vector

    Returns:
        Tuple of (T as coalesced COO of shape (n, num_aggregates), B_coarse)
    """
    if aggregates.ndim != 1 or B.ndim != 1 or aggregates.numel() != B.numel():
        raise ValueError(
            f"aggregates and B must be vectors of equal length, got "
            f"{tuple(aggregates.shape)} and {tuple(B.shape)}"
        )

    n = B.numel()
    aggregates = aggregates.to(device=B.device, dtype=torch.int64)
    num_aggregates = int(aggregates.max().item()) + 1

    sizes = torch.bincount(aggregates, minlength=num_aggregates)
    if (sizes == 0).any():
        raise ValueError("Aggregate ids must be contiguous: found empty aggregates")

    norms_sq = torch.zeros(num_aggregates, device=B.device, dtype=B.dtype)
    norms_sq.index_add_(0, aggregates, B * B)
    B_coarse = torch.sqrt(norms_sq)

    vanishing = B_coarse == 0
    if vanishing.any():
        warnings.warn(
            f"Candidate vector vanishes on {int(vanishing.sum().item())} aggregate(s); "
            f"the corresponding prolongator columns are zero"
        )
    safe_norm = torch.where(vanishing, torch.ones_like(B_coarse), B_coarse)
    values = B / safe_norm[aggregates]

    rows = torch.arange(n, device=B.device)
    T = torch.sparse_coo_tensor(
        torch.stack([rows, aggregates]),
        values,
        (n, num_aggregates),
        device=B.device,
        dtype=B.dtype
    ).coalesce()

    return T, B_coarse
