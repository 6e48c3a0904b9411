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
Spectral radius estimation with a short Arnoldi process.

The smoothed aggregation setup needs rho(D^-1 A) to pick a stable Jacobi
damping for the prolongator smoother and the level smoothers. A handful of
Arnoldi steps gives Ritz values whose largest magnitude is a close lower
estimate of the spectral radius.
"""

import torch
from typing import Callable, Tuple, Union

from ..utils.matrix_utils import diagonal, spmv

DEFAULT_RITZ_VECTORS = 8

# Fixed seed so that repeated builds from the same input are identical
_START_VECTOR_SEED = 0


class DinvAOperator:
    """Matrix-free operator x -> D^-1 A x."""

    def __init__(self, A: torch.Tensor):
        if A.shape[0] != A.shape[1]:
            raise ValueError(f"Matrix must be square, got shape {tuple(A.shape)}")
        D = diagonal(A)
        if (D == 0).any():
            raise ValueError("Operator has zero diagonal entries; D^-1 A is undefined")
        self.A = A
        self.Dinv = 1.0 / D
        self.shape = tuple(A.shape)
        self.dtype = A.dtype
        self.device = A.device

    def __call__(self, x: torch.Tensor) -> torch.Tensor:
        return self.Dinv * spmv(self.A, x)


def _arnoldi(
    A: Callable[[torch.Tensor], torch.Tensor],
    v0: torch.Tensor,
    k: int
) -> Tuple[torch.Tensor, int]:
    """
    Run k steps of Arnoldi.

    Returns:
        Tuple of (upper Hessenberg H of shape (k+1, k), number of completed steps)
    """
    dtype, device = v0.dtype, v0.device
    eps = torch.finfo(dtype).eps

    V = torch.zeros((v0.numel(), k + 1), dtype=dtype, device=device)
    H = torch.zeros((k + 1, k), dtype=dtype, device=device)
    V[:, 0] = v0 / torch.norm(v0)

    for j in range(k):
        w = A(V[:, j])
        w_norm_0 = torch.norm(w)

        # classical Gram-Schmidt, repeated once for orthogonality
        h = torch.zeros(j + 1, dtype=dtype, device=device)
        for _ in range(2):
            dh = V[:, :j + 1].T @ w
            w = w - V[:, :j + 1] @ dh
            h = h + dh
        H[:j + 1, j] = h

        w_norm = torch.norm(w)
        H[j + 1, j] = w_norm
        # invariant subspace found, H[:j+1, :j+1] holds exact eigenvalues
        if w_norm <= eps * w_norm_0 or w_norm == 0:
            return H, j + 1
        V[:, j + 1] = w / w_norm

    return H, k


def ritz_spectral_radius(
    A: Union[torch.Tensor, Callable[[torch.Tensor], torch.Tensor]],
    k: int = DEFAULT_RITZ_VECTORS
) -> float:
    """
    Estimate the spectral radius of A from k Ritz values.

    Args:
        A: Square matrix, or a callable with `shape`, `dtype` and `device` attributes
        k: Number of Arnoldi steps (clipped to the operator dimension)

    Returns:
        max |eig(H_k)| as a Python float
    """
    if k < 1:
        raise ValueError(f"Number of Ritz vectors must be positive, got {k}")

    if isinstance(A, torch.Tensor):
        matrix = A
        matvec = lambda x: spmv(matrix, x)
    else:
        matvec = A
    n = A.shape[0]
    dtype = A.dtype
    device = A.device

    if n == 0:
        return 0.0
    k = min(k, n)

    generator = torch.Generator(device='cpu').manual_seed(_START_VECTOR_SEED)
    v0 = torch.rand(n, generator=generator, dtype=dtype).to(device)

    H, steps = _arnoldi(matvec, v0, k)
    ritz_values = torch.linalg.eigvals(H[:steps, :steps])
    return float(ritz_values.abs().max().item())


def estimate_rho_Dinv_A(A: torch.Tensor, k: int = DEFAULT_RITZ_VECTORS) -> float:
    """Spectral radius estimate of D^-1 A."""
    return ritz_spectral_radius(DinvAOperator(A), k)
