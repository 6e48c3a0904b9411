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
Smoothed Aggregation AMG solver and preconditioner.

This module provides the user-facing SmoothedAggregation class. The hierarchy
is built once in the constructor and is read-only afterwards; every call only
touches the per-level work vectors.

- apply(b, x) / __call__(b): one V-cycle (preconditioner use)
- solve(b, x, monitor): stationary iteration x += V(b - A x) until the
  monitor reports that it is finished
- operator_complexity(), grid_complexity(), summary(), print(): diagnostics

Example:
    >>> from pytorch_sa_amg import SmoothedAggregation
    >>> from pytorch_sa_amg.utils import create_poisson_2d_sparse_coo
    >>>
    >>> A = create_poisson_2d_sparse_coo(64, 64)
    >>> ml = SmoothedAggregation(A)
    >>> ml.print()
    >>>
    >>> b = torch.rand(A.shape[0], dtype=torch.float64)
    >>> x, result = ml.solve(b, tol=1e-8)
    >>> print(f"Converged: {result.converged}, Iterations: {result.iterations}")
"""

import builtins
import torch
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Union

from .aggregation import AggregationMethod, DEFAULT_OMEGA
from .hierarchy import (
    DEFAULT_MAX_COARSE,
    DEFAULT_THETA,
    Level,
    build_hierarchy,
)
from .krylov import DEFAULT_RITZ_VECTORS
from .monitor import DEFAULT_MAXITER, DEFAULT_TOL, DefaultMonitor, VerboseMonitor
from .relaxation import SmootherType
from .utils.matrix_utils import spmv


@dataclass
class SolverResult:
    """Result of SmoothedAggregation.solve."""
    x: torch.Tensor                    # Solution vector (the caller's x when one was given)
    converged: Optional[bool]          # None if the monitor cannot tell
    iterations: int                    # Number of V-cycles applied
    residual: float                    # Final residual norm ||b - A x||
    relative_residual: float           # Final ||b - A x|| / ||b||


class SmoothedAggregation:
    """
    Smoothed Aggregation algebraic multigrid.

    Args:
        A: Square operator (dense, sparse COO or CSR tensor), ideally SPD
        B: Near-null-space candidate (default: constant vector of ones)
        theta: Strength-of-connection threshold in [0, 1)
        max_coarse: Coarsening stops once a level has at most this many rows
        aggregation: Aggregation algorithm ('standard' or 'mis')
        smoother: Level smoother ('jacobi', 'polynomial' or 'gauss_seidel')
        omega: Prolongator smoothing damping factor
        ritz_vectors: Arnoldi steps for the spectral radius estimates
        verbose: Print build progress and per-iteration residuals

    Attributes:
        levels: Hierarchy levels, finest first
        coarse_solver: Dense LU solver of the coarsest level

    Example:
        >>> ml = SmoothedAggregation(A)
        >>> x = ml(b)                      # one V-cycle from a zero guess
        >>> x, result = ml.solve(b)        # iterate to tol=1e-5
    """

    def __init__(
        self,
        A: torch.Tensor,
        B: Optional[torch.Tensor] = None,
        theta: float = DEFAULT_THETA,
        max_coarse: int = DEFAULT_MAX_COARSE,
        aggregation: Union[str, AggregationMethod] = AggregationMethod.STANDARD,
        smoother: Union[str, SmootherType] = SmootherType.JACOBI,
        omega: float = DEFAULT_OMEGA,
        ritz_vectors: int = DEFAULT_RITZ_VECTORS,
        verbose: bool = False
    ):
        self.verbose = verbose
        self.theta = theta
        self.max_coarse = max_coarse
        self.aggregation = AggregationMethod(aggregation)
        self.smoother = SmootherType(smoother)

        if verbose:
            print(f"Building smoothed aggregation hierarchy for {tuple(A.shape)} operator")

        hierarchy = build_hierarchy(
            A, B,
            theta=theta,
            max_coarse=max_coarse,
            aggregation=self.aggregation,
            smoother=self.smoother,
            omega=omega,
            ritz_vectors=ritz_vectors,
            verbose=verbose,
        )
        self.levels: List[Level] = hierarchy.levels
        self.coarse_solver = hierarchy.coarse_solver

        if verbose:
            self.print()

    @property
    def num_levels(self) -> int:
        return len(self.levels)

    @property
    def shape(self) -> Tuple[int, int]:
        return tuple(self.levels[0].A_solve.shape)

    @property
    def dtype(self) -> torch.dtype:
        return self.levels[0].A_solve.dtype

    @property
    def device(self) -> torch.device:
        return self.levels[0].A_solve.device

    def _check_vector(self, v: torch.Tensor, name: str) -> None:
        n = self.shape[0]
        if not isinstance(v, torch.Tensor):
            raise TypeError(f"{name} must be a torch.Tensor, got {type(v).__name__}")
        if v.shape != (n,):
            raise ValueError(f"{name} must have shape ({n},), got {tuple(v.shape)}")
        if v.device != self.device or v.dtype != self.dtype:
            raise ValueError(
                f"{name} must be a {self.dtype} tensor on {self.device}, "
                f"got {v.dtype} on {v.device}"
            )

    def _cycle(self, i: int, b: torch.Tensor, x: torch.Tensor) -> torch.Tensor:
        """V-cycle on level i, updating x in place."""
        if i + 1 == len(self.levels):
            x.copy_(self.coarse_solver(b))
            return x

        level = self.levels[i]
        coarse = self.levels[i + 1]
        A = level.A_solve

        level.smoother.presmooth(A, b, x)

        level.residual.copy_(b - spmv(A, x))
        coarse.b.copy_(spmv(level.R, level.residual))

        coarse.x.zero_()
        self._cycle(i + 1, coarse.b, coarse.x)

        # residual buffer is free again, reuse it for the correction
        level.residual.copy_(spmv(level.P, coarse.x))
        x.add_(level.residual)

        level.smoother.postsmooth(A, b, x)
        return x

    def apply(self, b: torch.Tensor, x: Optional[torch.Tensor] = None) -> torch.Tensor:
        """
        Apply one V-cycle to A x = b.

        Args:
            b: Right-hand side
            x: Initial guess, updated in place (default: zero vector)

        Returns:
            x after one V-cycle
        """
        self._check_vector(b, 'b')
        if x is None:
            x = torch.zeros_like(b)
        else:
            self._check_vector(x, 'x')
        return self._cycle(0, b, x)

    def __call__(self, b: torch.Tensor) -> torch.Tensor:
        """Preconditioner application M^-1 b (one V-cycle from zero)."""
        return self.apply(b)

    def solve(
        self,
        b: torch.Tensor,
        x: Optional[torch.Tensor] = None,
        monitor: Optional[Any] = None,
        tol: float = DEFAULT_TOL,
        maxiter: int = DEFAULT_MAXITER,
        atol: float = 0.0
    ) -> Tuple[torch.Tensor, SolverResult]:
        """
        Solve A x = b by repeated V-cycles on the residual.

        Args:
            b: Right-hand side
            x: Initial guess, updated in place (default: zero vector)
            monitor: Stopping policy exposing finished(residual) and increment().
                     Defaults to DefaultMonitor(b, tol, maxiter, atol), or a
                     VerboseMonitor when the solver is verbose.
            tol: Relative tolerance of the default monitor
            maxiter: Iteration limit of the default monitor
            atol: Absolute tolerance of the default monitor

        Returns:
            Tuple of (solution, SolverResult). Non-convergence is reported via
            SolverResult.converged, not raised.
        """
        self._check_vector(b, 'b')
        if x is None:
            x = torch.zeros_like(b)
        else:
            self._check_vector(x, 'x')

        if monitor is None:
            monitor_cls = VerboseMonitor if self.verbose else DefaultMonitor
            monitor = monitor_cls(b, tol=tol, maxiter=maxiter, atol=atol)

        A = self.levels[0].A_solve
        update = torch.zeros_like(x)
        residual = b - spmv(A, x)
        iterations = 0

        while not monitor.finished(residual):
            update.zero_()
            self._cycle(0, residual, update)
            x.add_(update)
            residual = b - spmv(A, x)
            monitor.increment()
            iterations += 1

        converged = monitor.converged() if hasattr(monitor, 'converged') else None
        r_norm = torch.norm(residual).item()
        b_norm = torch.norm(b).item()
        result = SolverResult(
            x=x,
            converged=converged,
            iterations=iterations,
            residual=r_norm,
            relative_residual=r_norm / b_norm if b_norm > 0 else r_norm,
        )
        return x, result

    def level_statistics(self) -> List[Tuple[int, int]]:
        """(rows, nonzeros) of every level, finest first."""
        return [(level.num_rows, level.num_entries) for level in self.levels]

    def operator_complexity(self) -> float:
        """Total nonzeros over all levels divided by the finest level's nonzeros."""
        stats = self.level_statistics()
        return sum(nnz for _, nnz in stats) / stats[0][1]

    def grid_complexity(self) -> float:
        """Total rows over all levels divided by the finest level's rows."""
        stats = self.level_statistics()
        return sum(rows for rows, _ in stats) / stats[0][0]

    def summary(self) -> str:
        """Human-readable description of the hierarchy."""
        stats = self.level_statistics()
        total_nnz = sum(nnz for _, nnz in stats)

        lines = [
            f"\tNumber of Levels:\t{self.num_levels}",
            f"\tOperator Complexity:\t{self.operator_complexity():.6f}",
            f"\tGrid Complexity:\t{self.grid_complexity():.6f}",
            "\tlevel\tunknowns\tnonzeros:",
        ]
        for index, (rows, nnz) in enumerate(stats):
            percent = 100.0 * nnz / total_nnz
            lines.append(f"\t{index}\t{rows}\t\t{nnz} \t[{percent:.2f}%]")
        return "\n".join(lines)

    def print(self) -> None:
        """Print the hierarchy summary."""
        builtins.print(self.summary())

    def __repr__(self) -> str:
        return (
            f"SmoothedAggregation(\n"
            f"  shape={self.shape},\n"
            f"  num_levels={self.num_levels},\n"
            f"  smoother='{self.smoother.value}',\n"
            f"  aggregation='{self.aggregation.value}',\n"
            f"  operator_complexity={self.operator_complexity():.4f},\n"
            f"  grid_complexity={self.grid_complexity():.4f}\n"
            f")"
        )


# Convenience functions for direct use without keeping the solver object


def smoothed_aggregation_solver(
    A: torch.Tensor,
    B: Optional[torch.Tensor] = None,
    **kwargs
) -> SmoothedAggregation:
    """
    Build a SmoothedAggregation solver.

    Example:
        >>> from pytorch_sa_amg import smoothed_aggregation_solver
        >>> ml = smoothed_aggregation_solver(A, theta=0.0)
    """
    return SmoothedAggregation(A, B, **kwargs)


def solve(
    A: torch.Tensor,
    b: torch.Tensor,
    x0: Optional[torch.Tensor] = None,
    tol: float = DEFAULT_TOL,
    maxiter: int = DEFAULT_MAXITER,
    atol: float = 0.0,
    **kwargs
) -> Tuple[torch.Tensor, SolverResult]:
    """
    Solve A x = b with a freshly built smoothed aggregation hierarchy.

    Args:
        A: Square operator
        b: Right-hand side vector
        x0: Initial guess (not modified)
        tol: Relative convergence tolerance
        maxiter: Maximum number of V-cycles
        atol: Absolute convergence tolerance
        **kwargs: Hierarchy options forwarded to SmoothedAggregation

    Returns:
        Tuple of (solution tensor, SolverResult)

    Example:
        >>> from pytorch_sa_amg import solve
        >>> x, result = solve(A, b, tol=1e-8)
    """
    ml = SmoothedAggregation(A, **kwargs)
    x = None if x0 is None else x0.clone()
    return ml.solve(b, x, tol=tol, maxiter=maxiter, atol=atol)
