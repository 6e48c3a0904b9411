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
Convergence monitors for the multigrid outer iteration.

A monitor owns the stopping policy. The solver only calls

    monitor.finished(residual)  -> bool
    monitor.increment()         (or ``monitor += 1``)

Tolerance handling follows the "non-legacy" scipy.sparse.linalg behaviour:
the iteration stops once ||r|| <= max(tol * ||b||, atol).
"""

import torch
from typing import List, Optional

DEFAULT_TOL = 1e-5
DEFAULT_MAXITER = 500


class DefaultMonitor:
    """
    Residual-norm stopping criterion with an iteration limit.

    Args:
        b: Right-hand side of the system being solved
        tol: Relative tolerance
        maxiter: Maximum number of iterations
        atol: Absolute tolerance

    Attributes:
        iteration_count: Completed iterations
        residual_norm: Norm of the last residual passed to finished()
        residual_history: All residual norms seen by finished()
        tolerance: Absolute threshold max(tol * ||b||, atol)
    """

    def __init__(
        self,
        b: torch.Tensor,
        tol: float = DEFAULT_TOL,
        maxiter: int = DEFAULT_MAXITER,
        atol: float = 0.0
    ):
        if tol < 0 or atol < 0:
            raise ValueError(f"Tolerances must be non-negative, got tol={tol}, atol={atol}")
        if maxiter < 0:
            raise ValueError(f"maxiter must be non-negative, got {maxiter}")
        self.b_norm = torch.norm(b).item()
        self.tol = tol
        self.atol = atol
        self.maxiter = maxiter
        self.tolerance = max(tol * self.b_norm, atol)
        self.iteration_count = 0
        self.residual_norm: Optional[float] = None
        self.residual_history: List[float] = []

    def finished(self, residual: torch.Tensor) -> bool:
        """Record the residual and decide whether to stop."""
        self.residual_norm = torch.norm(residual).item()
        self.residual_history.append(self.residual_norm)
        return self.converged() or self.iteration_count >= self.maxiter

    def converged(self) -> bool:
        """True if the last recorded residual met the tolerance."""
        return self.residual_norm is not None and self.residual_norm <= self.tolerance

    def relative_residual(self) -> Optional[float]:
        if self.residual_norm is None:
            return None
        return self.residual_norm / self.b_norm if self.b_norm > 0 else self.residual_norm

    def increment(self) -> None:
        self.iteration_count += 1

    def __iadd__(self, n: int) -> 'DefaultMonitor':
        self.iteration_count += n
        return self

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(tol={self.tol}, atol={self.atol}, "
                f"maxiter={self.maxiter}, iterations={self.iteration_count})")


class VerboseMonitor(DefaultMonitor):
    """DefaultMonitor that prints the residual of every iteration."""

    def finished(self, residual: torch.Tensor) -> bool:
        done = super().finished(residual)
        if self.iteration_count == 0:
            print("Solver will continue until residual norm "
                  f"{self.tolerance:.4e} or reaching {self.maxiter} iterations")
            print("  Iteration Number  | Residual Norm")
        print(f"  {self.iteration_count:16d}  | {self.residual_norm:.6e}")
        if done:
            self.print_summary()
        return done

    def print_summary(self) -> None:
        if self.converged():
            print(f"Successfully converged after {self.iteration_count} iterations.")
        else:
            print(f"Failed to converge after {self.iteration_count} iterations.")
