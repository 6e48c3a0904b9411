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
Aggregation: partition the rows of a strength matrix into disjoint clusters.

Every algorithm here returns an int64 vector `aggregates` with one entry per
row; ids are contiguous in 0..num_aggregates-1 and rows without neighbours
become singleton aggregates.
"""

import torch
from enum import Enum
from typing import Union

from ..graph.mis import maximal_independent_set
from ..utils.matrix_utils import csr_structure


class AggregationMethod(Enum):
    """Available aggregation algorithms."""
    STANDARD = "standard"  # greedy three-pass aggregation
    MIS = "mis"            # roots from a distance-2 maximal independent set


def _neighbors(row_ptr, cols, i):
    return [j for j in cols[row_ptr[i]:row_ptr[i + 1]] if j != i]


def standard_aggregation(C: torch.Tensor) -> torch.Tensor:
    """
    Greedy three-pass aggregation.

    Pass 1 makes an aggregate of every row whose neighbours are all still
    free, together with those neighbours. Pass 2 attaches each remaining row
    to a neighbouring pass-1 aggregate. Pass 3 groups whatever is left
    (only reachable for nonsymmetric patterns).

    Args:
        C: Square strength matrix with a symmetric sparsity pattern

    Returns:
        int64 tensor of aggregate ids, one per row
    """
    n = C.shape[0]
    row_ptr, cols = csr_structure(C)

    agg = [-1] * n
    next_id = 0

    for i in range(n):
        if agg[i] >= 0:
            continue
        nbrs = _neighbors(row_ptr, cols, i)
        if any(agg[j] >= 0 for j in nbrs):
            continue
        agg[i] = next_id
        for j in nbrs:
            agg[j] = next_id
        next_id += 1

    first_pass = list(agg)
    for i in range(n):
        if agg[i] >= 0:
            continue
        for j in _neighbors(row_ptr, cols, i):
            if first_pass[j] >= 0:
                agg[i] = first_pass[j]
                break

    for i in range(n):
        if agg[i] >= 0:
            continue
        agg[i] = next_id
        for j in _neighbors(row_ptr, cols, i):
            if agg[j] < 0:
                agg[j] = next_id
        next_id += 1

    return torch.tensor(agg, dtype=torch.int64, device=C.device)


def mis_aggregation(C: torch.Tensor) -> torch.Tensor:
    """
    Aggregation seeded by a distance-2 maximal independent set.

    Each MIS vertex is the root of one aggregate (numbered in index order).
    Two propagation rounds then attach every other row to an aggregate of an
    already assigned neighbour; by maximality of the MIS this reaches every
    row of a symmetric pattern.

    Args:
        C: Square strength matrix with a symmetric sparsity pattern

    Returns:
        int64 tensor of aggregate ids, one per row
    """
    n = C.shape[0]
    row_ptr, cols = csr_structure(C)
    roots, _ = maximal_independent_set(C, k=2)

    agg = [-1] * n
    next_id = 0
    for i, is_root in enumerate(roots.tolist()):
        if is_root:
            agg[i] = next_id
            next_id += 1

    for _ in range(2):
        snapshot = list(agg)
        for i in range(n):
            if agg[i] >= 0:
                continue
            for j in _neighbors(row_ptr, cols, i):
                if snapshot[j] >= 0:
                    agg[i] = snapshot[j]
                    break

    # nonsymmetric patterns can leave rows unreachable
    for i in range(n):
        if agg[i] < 0:
            agg[i] = next_id
            next_id += 1

    return torch.tensor(agg, dtype=torch.int64, device=C.device)


_AGGREGATORS = {
    AggregationMethod.STANDARD: standard_aggregation,
    AggregationMethod.MIS: mis_aggregation,
}


def aggregate(
    C: torch.Tensor,
    method: Union[str, AggregationMethod] = AggregationMethod.STANDARD
) -> torch.Tensor:
    """
    Compute aggregates of a strength matrix with the requested algorithm.

    Args:
        C: Square strength matrix
        method: AggregationMethod or its string value ('standard', 'mis')

    Returns:
        int64 tensor of aggregate ids, one per row
    """
    if C.shape[0] != C.shape[1]:
        raise ValueError(f"Strength matrix must be square, got shape {tuple(C.shape)}")
    try:
        method = AggregationMethod(method)
    except ValueError:
        raise ValueError(
            f"Unknown aggregation method '{method}'. "
            f"Use one of: {[m.value for m in AggregationMethod]}"
        )
    return _AGGREGATORS[method](C)
