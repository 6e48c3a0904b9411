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
Test the Arnoldi spectral radius estimate of D^-1 A.
"""

import math
import sys
import pytest
import torch

from pytorch_sa_amg.krylov import (
    DEFAULT_RITZ_VECTORS,
    DinvAOperator,
    estimate_rho_Dinv_A,
    ritz_spectral_radius,
)
from pytorch_sa_amg.utils import (
    create_poisson_2d_sparse_coo,
    create_tridiagonal_sparse_coo,
)


def exact_rho_Dinv_A(A: torch.Tensor) -> float:
    A_dense = A.to_dense()
    Dinv = torch.diag(1.0 / torch.diagonal(A_dense))
    return torch.linalg.eigvals(Dinv @ A_dense).abs().max().item()


class TestSpectralRadius:

    def test_default_ritz_vectors(self):
        assert DEFAULT_RITZ_VECTORS == 8

    def test_tridiagonal_bounds(self):
        n = 50
        A = create_tridiagonal_sparse_coo(n)
        rho = estimate_rho_Dinv_A(A)
        exact = 1.0 + math.cos(math.pi / (n + 1))
        assert rho <= exact * (1.0 + 1e-8)
        assert rho >= 0.9 * exact

    def test_poisson_2d_bounds(self):
        A = create_poisson_2d_sparse_coo(12, 12)
        rho = estimate_rho_Dinv_A(A)
        exact = exact_rho_Dinv_A(A)
        assert rho <= exact * (1.0 + 1e-8)
        assert rho >= 0.9 * exact

    def test_exact_for_small_operator(self):
        # k >= n: Arnoldi spans the whole space
        A = create_tridiagonal_sparse_coo(6)
        rho = estimate_rho_Dinv_A(A, k=8)
        assert rho == pytest.approx(exact_rho_Dinv_A(A), rel=1e-10)

    def test_variable_diagonal(self):
        generator = torch.Generator().manual_seed(1)
        d = 1.0 + torch.rand(5, generator=generator, dtype=torch.float64)
        A = torch.diag(d) - 0.2 * (torch.diag(torch.ones(4, dtype=torch.float64), 1)
                                   + torch.diag(torch.ones(4, dtype=torch.float64), -1))
        rho = estimate_rho_Dinv_A(A.to_sparse_coo())
        assert rho == pytest.approx(exact_rho_Dinv_A(A.to_sparse_coo()), rel=1e-10)

    def test_deterministic(self):
        A = create_poisson_2d_sparse_coo(10, 10)
        assert estimate_rho_Dinv_A(A) == estimate_rho_Dinv_A(A)

    def test_matrix_and_operator_inputs(self):
        A = create_tridiagonal_sparse_coo(5)
        scaled = A.to_dense() / 2.0
        op = DinvAOperator(A)
        assert ritz_spectral_radius(op) == pytest.approx(ritz_spectral_radius(scaled), rel=1e-12)

    def test_one_by_one(self):
        A = torch.tensor([[3.0]], dtype=torch.float64).to_sparse_coo()
        assert estimate_rho_Dinv_A(A) == pytest.approx(1.0)

    def test_invalid_k(self):
        with pytest.raises(ValueError):
            ritz_spectral_radius(create_tridiagonal_sparse_coo(4), k=0)

    def test_zero_diagonal(self):
        A = torch.tensor([[0.0, 1.0], [1.0, 1.0]], dtype=torch.float64).to_sparse_coo()
        with pytest.raises(ValueError):
            DinvAOperator(A)


def main():
    """Run spectral radius tests."""
    sys.exit(pytest.main([__file__, '-v']))


if __name__ == '__main__':
    main()
