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
Sparse matrix primitives for pytorch_sa_amg.

Hierarchy setup works on coalesced COO tensors (sparse-sparse products,
transposes, elementwise combinations), while the solve phase works on CSR
tensors (matrix-vector products). This module provides the conversions and
the small set of primitives both phases need.
"""

import torch
from typing import List, Optional, Tuple, Union

DEFAULT_DTYPE = torch.float64


def is_sparse_matrix(A: torch.Tensor) -> bool:
    """Return True for COO, CSR or CSC tensors."""
    return A.layout in (torch.sparse_coo, torch.sparse_csr, torch.sparse_csc)


def ensure_sparse_format(
    A: torch.Tensor,
    format: str = 'coo'
) -> torch.Tensor:
    """
    Ensure the matrix is in the specified sparse format.

    Args:
        A: Input matrix (dense, COO, CSR or CSC)
        format: Target format ('coo', 'csr', 'csc')

    Returns:
        Sparse tensor in the specified format. COO results are coalesced.
    """
    if not isinstance(A, torch.Tensor):
        raise TypeError(f"Expected a torch.Tensor, got {type(A).__name__}")
    if A.ndim != 2:
        raise ValueError(f"Expected 2D tensor, got {A.ndim}D")

    if A.layout != torch.sparse_coo:
        A = A.to_sparse_coo()
    A = A.coalesce()

    if format == 'coo':
        return A
    elif format == 'csr':
        return A.to_sparse_csr()
    elif format == 'csc':
        return A.to_sparse_csc()
    else:
        raise ValueError(f"Unknown format: {format}. Use 'coo', 'csr', or 'csc'")


def num_entries(A: torch.Tensor) -> int:
    """Number of stored entries of a sparse matrix (non-zeros of a dense one)."""
    if A.layout == torch.strided:
        return int(torch.count_nonzero(A).item())
    if A.layout == torch.sparse_coo:
        return int(A.coalesce()._nnz())
    return int(A.values().numel())


def coo_components(A: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
    """
    Extract (row, col, values) from a sparse matrix.

    Args:
        A: Sparse tensor of any layout

    Returns:
        Tuple of (row indices, column indices, values)
    """
    A = ensure_sparse_format(A, 'coo')
    indices = A.indices()
    return indices[0], indices[1], A.values()


def csr_structure(A: torch.Tensor) -> Tuple[List[int], List[int]]:
    """
    Host-side CSR sparsity pattern as Python lists.

    Graph algorithms (aggregation, MIS, coloring) walk the pattern row by row;
    plain lists keep that loop fast.

    Returns:
        Tuple of (row_ptr, col_indices)
    """
    A_csr = ensure_sparse_format(A, 'csr')
    return A_csr.crow_indices().cpu().tolist(), A_csr.col_indices().cpu().tolist()


def diagonal(A: torch.Tensor) -> torch.Tensor:
    """Main diagonal of a square matrix as a dense vector."""
    if A.layout == torch.strided:
        return torch.diagonal(A).clone()
    row, col, values = coo_components(A)
    d = torch.zeros(A.shape[0], device=values.device, dtype=values.dtype)
    mask = row == col
    return d.index_add_(0, row[mask], values[mask])


def spmv(A: torch.Tensor, x: torch.Tensor) -> torch.Tensor:
    """Matrix-vector product for dense or sparse A."""
    if A.layout == torch.strided:
        return torch.mv(A, x)
    return torch.sparse.mm(A, x.unsqueeze(-1)).squeeze(-1)


def spgemm(A: torch.Tensor, B: torch.Tensor) -> torch.Tensor:
    """Sparse-sparse product C = A @ B as a coalesced COO tensor."""
    if A.shape[1] != B.shape[0]:
        raise ValueError(f"Incompatible shapes for product: {tuple(A.shape)} @ {tuple(B.shape)}")
    A = ensure_sparse_format(A, 'coo')
    B = ensure_sparse_format(B, 'coo')
    return torch.sparse.mm(A, B).coalesce()


def transpose(A: torch.Tensor) -> torch.Tensor:
    """
    Exact transpose as a coalesced COO tensor.

    Only the index rows are swapped; values are copied unchanged, so the
    result is the transpose bit for bit.
    """
    A = ensure_sparse_format(A, 'coo')
    indices = A.indices()
    return torch.sparse_coo_tensor(
        torch.stack([indices[1], indices[0]]),
        A.values().clone(),
        (A.shape[1], A.shape[0]),
        device=A.device,
        dtype=A.dtype
    ).coalesce()


def scale_rows(A: torch.Tensor, d: torch.Tensor) -> torch.Tensor:
    """Return diag(d) @ A as a coalesced COO tensor."""
    A = ensure_sparse_format(A, 'coo')
    row = A.indices()[0]
    return torch.sparse_coo_tensor(
        A.indices(), A.values() * d[row], A.shape,
        device=A.device, dtype=A.dtype
    ).coalesce()


def create_tridiagonal_sparse_coo(
    n: int,
    diag_val: float = 2.0,
    off_diag_val: float = -1.0,
    device: str = 'cpu',
    dtype: torch.dtype = DEFAULT_DTYPE
) -> torch.Tensor:
    """
    Create a tridiagonal sparse COO tensor (1D Poisson stencil by default).

    Args:
        n: Matrix dimension
        diag_val: Main diagonal value
        off_diag_val: Off-diagonal value
        device: Target device
        dtype: Data type

    Returns:
        Coalesced sparse COO tensor
    """
    i = torch.arange(n, device=device)
    j = torch.arange(n - 1, device=device)
    rows = torch.cat([i, j, j + 1])
    cols = torch.cat([i, j + 1, j])
    values = torch.cat([
        torch.full((n,), diag_val, device=device, dtype=dtype),
        torch.full((2 * (n - 1),), off_diag_val, device=device, dtype=dtype),
    ])
    return torch.sparse_coo_tensor(
        torch.stack([rows, cols]), values, (n, n), device=device, dtype=dtype
    ).coalesce()


def create_poisson_2d_sparse_coo(
    nx: int,
    ny: int,
    device: str = 'cpu',
    dtype: torch.dtype = DEFAULT_DTYPE
) -> torch.Tensor:
    """
    Create a 2D Poisson matrix using the 5-point stencil.

    The diagonal is 4 everywhere (Dirichlet boundary), so the matrix is SPD.

    Args:
        nx: Number of grid points in x direction
        ny: Number of grid points in y direction
        device: Target device
        dtype: Data type

    Returns:
        Coalesced sparse COO tensor of size (nx*ny, nx*ny)
    """
    n = nx * ny
    k = torch.arange(n, device=device)
    i, j = k // ny, k % ny

    rows = [k]
    cols = [k]
    for di, dj in ((-1, 0), (1, 0), (0, -1), (0, 1)):
        mask = (i + di >= 0) & (i + di < nx) & (j + dj >= 0) & (j + dj < ny)
        rows.append(k[mask])
        cols.append((i[mask] + di) * ny + (j[mask] + dj))

    rows = torch.cat(rows)
    cols = torch.cat(cols)
    values = torch.full((rows.numel(),), -1.0, device=device, dtype=dtype)
    values[:n] = 4.0

    return torch.sparse_coo_tensor(
        torch.stack([rows, cols]), values, (n, n), device=device, dtype=dtype
    ).coalesce()


def compute_residual(
    A: Union[torch.Tensor, callable],
    x: torch.Tensor,
    b: torch.Tensor
) -> torch.Tensor:
    """
    Compute the residual r = b - Ax.

    Args:
        A: Matrix (dense, sparse, or callable)
        x: Solution vector
        b: Right-hand side vector

    Returns:
        Residual vector
    """
    Ax = A(x) if callable(A) else spmv(A, x)
    return b - Ax


def compute_relative_residual(
    A: Union[torch.Tensor, callable],
    x: torch.Tensor,
    b: torch.Tensor,
    b_norm: Optional[float] = None
) -> float:
    """
    Compute the relative residual ||b - Ax|| / ||b||.

    A zero right-hand side gives the absolute residual norm instead.
    """
    residual = compute_residual(A, x, b)
    if b_norm is None:
        b_norm = torch.norm(b).item()
    r_norm = torch.norm(residual).item()
    return r_norm / b_norm if b_norm > 0 else r_norm
