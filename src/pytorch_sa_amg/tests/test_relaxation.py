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
Test the level smoothers:
- weighted Jacobi
- Chebyshev polynomial
- multicolor Gauss-Seidel
"""

import sys
import pytest
import torch

from pytorch_sa_amg.krylov import estimate_rho_Dinv_A
from pytorch_sa_amg.relaxation import (
    JacobiSmoother,
    MulticolorGaussSeidel,
    PolynomialSmoother,
    SmootherType,
    make_smoother,
)
from pytorch_sa_amg.utils import create_poisson_2d_sparse_coo, spmv


def energy_norm(A: torch.Tensor, e: torch.Tensor) -> float:
    return torch.sqrt(torch.dot(e, spmv(A, e))).item()


@pytest.fixture
def poisson():
    A = create_poisson_2d_sparse_coo(8, 8)
    rho = estimate_rho_Dinv_A(A)
    return A, A.to_sparse_csr(), rho


class TestSmoothers:

    @pytest.mark.parametrize("smoother_type", list(SmootherType))
    @pytest.mark.parametrize("phase", ["presmooth", "postsmooth"])
    def test_reduces_error(self, poisson, smoother_type, phase):
        A, A_csr, rho = poisson
        smoother = make_smoother(smoother_type, A, rho)

        generator = torch.Generator().manual_seed(0)
        x_true = torch.randn(64, generator=generator, dtype=torch.float64)
        b = spmv(A_csr, x_true)
        x = torch.zeros(64, dtype=torch.float64)

        before = energy_norm(A, x - x_true)
        getattr(smoother, phase)(A_csr, b, x)
        after = energy_norm(A, x - x_true)
        assert after < before

    @pytest.mark.parametrize("smoother_type", list(SmootherType))
    def test_zero_problem_unchanged(self, poisson, smoother_type):
        A, A_csr, rho = poisson
        smoother = make_smoother(smoother_type, A, rho)
        x = torch.zeros(64, dtype=torch.float64)
        b = torch.zeros(64, dtype=torch.float64)
        smoother.presmooth(A_csr, b, x)
        smoother.postsmooth(A_csr, b, x)
        assert torch.equal(x, torch.zeros(64, dtype=torch.float64))

    @pytest.mark.parametrize("smoother_type", list(SmootherType))
    def test_solution_is_fixed_point(self, poisson, smoother_type):
        A, A_csr, rho = poisson
        smoother = make_smoother(smoother_type, A, rho)
        x = torch.ones(64, dtype=torch.float64)
        b = spmv(A_csr, x)
        smoother.presmooth(A_csr, b, x)
        assert torch.allclose(x, torch.ones(64, dtype=torch.float64), atol=1e-13)

    def test_repeated_smoothing_converges(self, poisson):
        A, A_csr, rho = poisson
        smoother = MulticolorGaussSeidel(A, rho)
        x_true = torch.linspace(-1.0, 1.0, 64, dtype=torch.float64)
        b = spmv(A_csr, x_true)
        x = torch.zeros(64, dtype=torch.float64)
        for _ in range(300):
            smoother.presmooth(A_csr, b, x)
            smoother.postsmooth(A_csr, b, x)
        assert torch.allclose(x, x_true, atol=1e-8)


class TestSmootherConstruction:

    def test_make_smoother_by_name(self, poisson):
        A, _, rho = poisson
        assert isinstance(make_smoother('jacobi', A, rho), JacobiSmoother)
        assert isinstance(make_smoother('polynomial', A, rho), PolynomialSmoother)
        assert isinstance(make_smoother('gauss_seidel', A, rho), MulticolorGaussSeidel)

    def test_unknown_smoother(self, poisson):
        A, _, rho = poisson
        with pytest.raises(ValueError):
            make_smoother('sor', A, rho)

    def test_jacobi_weight(self, poisson):
        A, _, _ = poisson
        assert JacobiSmoother(A, 2.0).weight == pytest.approx(4.0 / 6.0)

    def test_polynomial_interval(self, poisson):
        A, _, _ = poisson
        smoother = PolynomialSmoother(A, 3.0)
        assert smoother.lower == pytest.approx(0.1)
        assert smoother.upper == pytest.approx(3.3)

    def test_gauss_seidel_colors(self, poisson):
        A, _, rho = poisson
        assert MulticolorGaussSeidel(A, rho).num_colors == 2

    def test_zero_diagonal(self):
        A = torch.tensor([[0.0, 1.0], [1.0, 2.0]], dtype=torch.float64).to_sparse_coo()
        for smoother_type in SmootherType:
            with pytest.raises(ValueError):
                make_smoother(smoother_type, A, 1.0)

    def test_invalid_rho(self, poisson):
        A, _, _ = poisson
        with pytest.raises(ValueError):
            JacobiSmoother(A, 0.0)
        with pytest.raises(ValueError):
            PolynomialSmoother(A, -1.0)

    def test_gauss_seidel_size_mismatch(self, poisson):
        A, _, rho = poisson
        smoother = MulticolorGaussSeidel(A, rho)
        small = create_poisson_2d_sparse_coo(2, 2).to_sparse_csr()
        with pytest.raises(ValueError):
            smoother.presmooth(small, torch.zeros(4, dtype=torch.float64), torch.zeros(4, dtype=torch.float64))


def main():
    """Run smoother tests."""
    sys.exit(pytest.main([__file__, '-v']))


if __name__ == '__main__':
    main()
