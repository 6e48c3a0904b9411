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
Smoothed aggregation hierarchy construction.

The hierarchy is a list of Level records indexed from the finest (0) to the
coarsest level. Each pass of `extend_hierarchy` coarsens the current last
level:

    C        = strength(A, theta)
    agg      = aggregate(C)
    rho      = rho(D^-1 A)                   (Arnoldi / Ritz estimate)
    T, Bc    = fit_candidates(agg, B)
    P        = (I - omega / rho * D^-1 A) T
    R        = P^T
    A_coarse = R (A P)

Coarsening repeats until the last level has at most `max_coarse` rows, then
the coarsest operator is factored densely. Setup arithmetic runs on coalesced
COO tensors; `finalize_levels` converts the level operators to CSR for the
solve phase in one explicit step.
"""

import torch
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from .aggregation import (
    AggregationMethod,
    DEFAULT_OMEGA,
    aggregate,
    fit_candidates,
    smooth_prolongator,
    symmetric_strength_of_connection,
)
from .direct import LUSolver
from .exceptions import HierarchyBuildError
from .krylov import DEFAULT_RITZ_VECTORS, estimate_rho_Dinv_A
from .relaxation import SmootherType, make_smoother
from .utils.matrix_utils import ensure_sparse_format, num_entries, spgemm, transpose

DEFAULT_MAX_COARSE = 100
DEFAULT_THETA = 0.01


@dataclass
class Level:
    """One level of the multigrid hierarchy."""
    A_setup: torch.Tensor                   # COO operator used for coarsening
    B: torch.Tensor                         # near-null-space candidate
    A_solve: Optional[torch.Tensor] = None  # CSR operator used by the V-cycle
    aggregates: Optional[torch.Tensor] = None
    R: Optional[torch.Tensor] = None
    P: Optional[torch.Tensor] = None
    smoother: Optional[Any] = None
    rho: Optional[float] = None
    residual: Optional[torch.Tensor] = None
    x: Optional[torch.Tensor] = None
    b: Optional[torch.Tensor] = None

    @property
    def num_rows(self) -> int:
        return self.A_setup.shape[0]

    @property
    def num_entries(self) -> int:
        A = self.A_solve if self.A_solve is not None else self.A_setup
        return num_entries(A)


@dataclass
class Hierarchy:
    """Levels from finest to coarsest plus the coarsest-level factorization."""
    levels: List[Level] = field(default_factory=list)
    coarse_solver: Optional[LUSolver] = None

    def __len__(self) -> int:
        return len(self.levels)

    def __getitem__(self, i: int) -> Level:
        return self.levels[i]


def _validate_operator(A: torch.Tensor) -> None:
    if not isinstance(A, torch.Tensor):
        raise TypeError(f"Operator must be a torch.Tensor, got {type(A).__name__}")
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f"Operator must be a square matrix, got shape {tuple(A.shape)}")
    if A.shape[0] == 0:
        raise ValueError("Operator must have at least one row")
    if not A.dtype.is_floating_point:
        raise TypeError(f"Operator must have a real floating point dtype, got {A.dtype}")


def extend_hierarchy(
    levels: List[Level],
    theta: float = DEFAULT_THETA,
    aggregation: Union[str, AggregationMethod] = AggregationMethod.STANDARD,
    smoother: Union[str, SmootherType] = SmootherType.JACOBI,
    omega: float = DEFAULT_OMEGA,
    ritz_vectors: int = DEFAULT_RITZ_VECTORS
) -> Level:
    """
    Coarsen the last level once and append the new coarse level.

    Raises:
        HierarchyBuildError: aggregation did not reduce the number of rows

    Returns:
        The appended coarse level
    """
    level = levels[-1]
    A = level.A_setup
    n = A.shape[0]

    C = symmetric_strength_of_connection(A, theta)
    aggregates = aggregate(C, aggregation)
    num_aggregates = int(aggregates.max().item()) + 1 if n > 0 else 0
    if num_aggregates >= n:
        raise HierarchyBuildError(
            f"Coarsening stalled on level {len(levels) - 1}: "
            f"{n} rows produced {num_aggregates} aggregates"
        )

    rho = estimate_rho_Dinv_A(A, ritz_vectors)

    T, B_coarse = fit_candidates(aggregates, level.B)
    P = smooth_prolongator(A, T, omega, rho)
    R = transpose(P)

    AP = spgemm(A, P)
    RAP = spgemm(R, AP)

    level.smoother = make_smoother(smoother, A, rho)
    level.aggregates = aggregates
    level.R = R
    level.P = P
    level.rho = rho
    level.residual = torch.zeros(n, dtype=A.dtype, device=A.device)

    n_coarse = RAP.shape[0]
    coarse = Level(
        A_setup=RAP,
        B=B_coarse,
        x=torch.zeros(n_coarse, dtype=A.dtype, device=A.device),
        b=torch.zeros(n_coarse, dtype=A.dtype, device=A.device),
    )
    levels.append(coarse)
    return coarse


def finalize_levels(levels: List[Level], A: torch.Tensor) -> None:
    """Set the solve-time CSR operator of every level."""
    levels[0].A_solve = ensure_sparse_format(A, 'csr')
    for level in levels[1:]:
        level.A_solve = level.A_setup.to_sparse_csr()


def build_hierarchy(
    A: torch.Tensor,
    B: Optional[torch.Tensor] = None,
    theta: float = DEFAULT_THETA,
    max_coarse: int = DEFAULT_MAX_COARSE,
    aggregation: Union[str, AggregationMethod] = AggregationMethod.STANDARD,
    smoother: Union[str, SmootherType] = SmootherType.JACOBI,
    omega: float = DEFAULT_OMEGA,
    ritz_vectors: int = DEFAULT_RITZ_VECTORS,
    verbose: bool = False
) -> Hierarchy:
    """
    Build a smoothed aggregation hierarchy.

    Args:
        A: Square operator (dense, COO or CSR tensor)
        B: Near-null-space candidate (default: constant vector of ones)
        theta: Strength-of-connection threshold in [0, 1)
        max_coarse: Coarsening stops once a level has at most this many rows
        aggregation: Aggregation algorithm
        smoother: Level smoother
        omega: Prolongator smoothing damping factor
        ritz_vectors: Arnoldi steps for the spectral radius estimate
        verbose: Print one line per level while building

    Returns:
        Hierarchy with solve-time operators and the coarse LU factorization

    Raises:
        HierarchyBuildError: coarsening stalled before reaching max_coarse
        SingularMatrixError: the coarsest operator cannot be factored
    """
    _validate_operator(A)
    if max_coarse < 1:
        raise ValueError(f"max_coarse must be positive, got {max_coarse}")
    if not 0.0 <= theta < 1.0:
        raise ValueError(f"theta must satisfy 0 <= theta < 1, got {theta}")

    A_setup = ensure_sparse_format(A, 'coo')
    n = A_setup.shape[0]

    if B is None:
        B = torch.ones(n, dtype=A.dtype, device=A.device)
    elif B.shape != (n,):
        raise ValueError(f"Candidate vector B must have shape ({n},), got {tuple(B.shape)}")
    B = B.to(dtype=A.dtype, device=A.device).clone()

    levels = [Level(A_setup=A_setup, B=B)]
    while levels[-1].num_rows > max_coarse:
        fine = levels[-1]
        extend_hierarchy(levels, theta, aggregation, smoother, omega, ritz_vectors)
        if verbose:
            print(f"  level {len(levels) - 2}: {fine.num_rows} rows, "
                  f"{num_entries(fine.A_setup)} nonzeros, rho(D^-1 A) = {fine.rho:.4f}")

    coarse_solver = LUSolver(levels[-1].A_setup)
    if verbose:
        print(f"  level {len(levels) - 1}: {levels[-1].num_rows} rows "
              f"(coarsest, dense LU)")

    finalize_levels(levels, A)
    return Hierarchy(levels=levels, coarse_solver=coarse_solver)
