"""
Utility functions for pytorch_sa_amg.
"""

from .matrix_utils import (
    DEFAULT_DTYPE,
    is_sparse_matrix,
    ensure_sparse_format,
    num_entries,
    coo_components,
    csr_structure,
    diagonal,
    spmv,
    spgemm,
    transpose,
    scale_rows,
    create_tridiagonal_sparse_coo,
    create_poisson_2d_sparse_coo,
    compute_residual,
    compute_relative_residual,
)

__all__ = [
    'DEFAULT_DTYPE',
    'is_sparse_matrix',
    'ensure_sparse_format',
    'num_entries',
    'coo_components',
    'csr_structure',
    'diagonal',
    'spmv',
    'spgemm',
    'transpose',
    'scale_rows',
    'create_tridiagonal_sparse_coo',
    'create_poisson_2d_sparse_coo',
    'compute_residual',
    'compute_relative_residual',
]
