"""
PyTorch SA-AMG - Smoothed Aggregation Algebraic Multigrid on PyTorch tensors

This package builds a smoothed aggregation multigrid hierarchy for a sparse
(ideally symmetric positive definite) matrix and uses it either as a
standalone iterative solver or as a preconditioner (one V-cycle per call).

- **Setup**: strength of connection, aggregation, tentative prolongator,
  prolongator smoothing with an Arnoldi estimate of rho(D^-1 A), Galerkin
  coarse operators R A P, dense LU on the coarsest level
- **Solve**: recursive V-cycle with Jacobi, Chebyshev polynomial or multicolor
  Gauss-Seidel smoothing, driven by a convergence monitor

Quick Start:
    >>> from pytorch_sa_amg import SmoothedAggregation, solve
    >>> from pytorch_sa_amg.utils import create_poisson_2d_sparse_coo
    >>>
    >>> A = create_poisson_2d_sparse_coo(64, 64)
    >>> ml = SmoothedAggregation(A)
    >>> ml.print()
    >>> x, result = ml.solve(b, tol=1e-8)
    >>>
    >>> # Or use the convenience function
    >>> x, result = solve(A, b, tol=1e-8)

Preconditioner Usage:
    >>> M = SmoothedAggregation(A, smoother='polynomial')
    >>> z = M(r)                      # z = V-cycle(r) from a zero guess
"""

__version__ = '1.0.0'
__author__ = 'Litianyu141'
__license__ = 'Apache-2.0'

# Import main solver interface
from .solver import (
    SmoothedAggregation,
    SolverResult,
    smoothed_aggregation_solver,
    solve,
)

# Import hierarchy construction
from .hierarchy import (
    Level,
    Hierarchy,
    build_hierarchy,
    DEFAULT_MAX_COARSE,
    DEFAULT_THETA,
)
from .aggregation import AggregationMethod
from .relaxation import SmootherType

# Import convergence monitors
from .monitor import (
    DefaultMonitor,
    VerboseMonitor,
    DEFAULT_TOL,
    DEFAULT_MAXITER,
)

from .exceptions import HierarchyBuildError, SingularMatrixError

# Import matrix utilities
from .utils.matrix_utils import (
    DEFAULT_DTYPE,
    ensure_sparse_format,
    create_tridiagonal_sparse_coo,
    create_poisson_2d_sparse_coo,
    compute_residual,
    compute_relative_residual,
)

__all__ = [
    # Version info
    '__version__',
    '__author__',
    '__license__',

    # Main solver interface
    'SmoothedAggregation',
    'SolverResult',
    'smoothed_aggregation_solver',
    'solve',

    # Hierarchy
    'Level',
    'Hierarchy',
    'build_hierarchy',
    'AggregationMethod',
    'SmootherType',
    'DEFAULT_MAX_COARSE',
    'DEFAULT_THETA',

    # Monitors
    'DefaultMonitor',
    'VerboseMonitor',
    'DEFAULT_TOL',
    'DEFAULT_MAXITER',

    # Errors
    'HierarchyBuildError',
    'SingularMatrixError',

    # Matrix utilities
    'DEFAULT_DTYPE',
    'ensure_sparse_format',
    'create_tridiagonal_sparse_coo',
    'create_poisson_2d_sparse_coo',
    'compute_residual',
    'compute_relative_residual',
]
