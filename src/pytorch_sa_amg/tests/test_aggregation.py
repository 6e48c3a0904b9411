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
Test the smoothed aggregation setup stages:
- symmetric strength of connection
- standard and MIS aggregation
- tentative prolongator fitting
- prolongator smoothing
"""

import sys
import pytest
import torch

from pytorch_sa_amg.aggregation import (
    AggregationMethod,
    DEFAULT_OMEGA,
    aggregate,
    fit_candidates,
    mis_aggregation,
    smooth_prolongator,
    standard_aggregation,
    symmetric_strength_of_connection,
)
from pytorch_sa_amg.graph import maximal_independent_set
from pytorch_sa_amg.utils import (
    create_poisson_2d_sparse_coo,
    create_tridiagonal_sparse_coo,
)


def check_aggregates(aggregates: torch.Tensor, n: int) -> int:
    """Assert the aggregation contract and return the number of aggregates."""
    assert aggregates.dtype == torch.int64
    assert aggregates.shape == (n,)
    assert int(aggregates.min().item()) == 0
    num_aggregates = int(aggregates.max().item()) + 1
    sizes = torch.bincount(aggregates, minlength=num_aggregates)
    assert (sizes > 0).all()
    return num_aggregates


class TestStrength:

    def test_weak_connection_dropped(self):
        A = torch.tensor([
            [4.0, -1.0, -0.01],
            [-1.0, 4.0, 0.0],
            [-0.01, 0.0, 4.0],
        ], dtype=torch.float64)
        C = symmetric_strength_of_connection(A, theta=0.1).to_dense()
        expected = torch.tensor([
            [4.0, -1.0, 0.0],
            [-1.0, 4.0, 0.0],
            [0.0, 0.0, 4.0],
        ], dtype=torch.float64)
        assert torch.equal(C, expected)

    def test_theta_zero_keeps_pattern(self):
        A = create_poisson_2d_sparse_coo(4, 4)
        C = symmetric_strength_of_connection(A, theta=0.0)
        assert torch.equal(C.to_dense(), A.to_dense())

    def test_symmetric(self):
        generator = torch.Generator().manual_seed(0)
        dense = torch.randn(12, 12, generator=generator, dtype=torch.float64)
        dense = dense + dense.T + 12.0 * torch.eye(12, dtype=torch.float64)
        C = symmetric_strength_of_connection(dense.to_sparse_coo(), theta=0.2).to_dense()
        assert torch.equal(C, C.T)

    def test_explicit_zeros_dropped(self):
        indices = torch.tensor([[0, 0, 1, 1], [0, 1, 0, 1]])
        values = torch.tensor([2.0, 0.0, 0.0, 2.0], dtype=torch.float64)
        A = torch.sparse_coo_tensor(indices, values, (2, 2)).coalesce()
        C = symmetric_strength_of_connection(A, theta=0.0)
        assert C._nnz() == 2

    @pytest.mark.parametrize("theta", [-0.1, 1.0, 1.5])
    def test_invalid_theta(self, theta):
        with pytest.raises(ValueError):
            symmetric_strength_of_connection(create_tridiagonal_sparse_coo(3), theta)


class TestAggregation:

    def test_standard_path(self):
        aggregates = standard_aggregation(create_tridiagonal_sparse_coo(9))
        assert aggregates.tolist() == [0, 0, 1, 1, 1, 2, 2, 2, 2]

    @pytest.mark.parametrize("method", ["standard", "mis"])
    def test_contract_poisson(self, method):
        A = create_poisson_2d_sparse_coo(10, 10)
        aggregates = aggregate(symmetric_strength_of_connection(A), method)
        num_aggregates = check_aggregates(aggregates, 100)
        assert num_aggregates < 100

    @pytest.mark.parametrize("method", list(AggregationMethod))
    def test_isolated_rows_are_singletons(self, method):
        C = torch.eye(5, dtype=torch.float64).to_sparse_coo().coalesce()
        assert aggregate(C, method).tolist() == [0, 1, 2, 3, 4]

    def test_mis_roots(self):
        C = symmetric_strength_of_connection(create_poisson_2d_sparse_coo(8, 8))
        roots, num_roots = maximal_independent_set(C, k=2)
        aggregates = mis_aggregation(C)
        assert check_aggregates(aggregates, 64) == num_roots
        # roots are numbered in index order
        root_ids = aggregates[roots.bool()]
        assert root_ids.tolist() == list(range(num_roots))

    def test_aggregates_are_connected_neighbourhoods(self):
        A = create_poisson_2d_sparse_coo(6, 6)
        C = symmetric_strength_of_connection(A)
        aggregates = standard_aggregation(C)
        dense = C.to_dense() != 0
        for j in range(int(aggregates.max().item()) + 1):
            members = torch.nonzero(aggregates == j, as_tuple=False).view(-1)
            if members.numel() == 1:
                continue
            block = dense[members][:, members]
            # every member is coupled to another member of its aggregate
            off_diagonal = block & ~torch.eye(members.numel(), dtype=torch.bool)
            assert off_diagonal.any(dim=1).all()

    def test_unknown_method(self):
        with pytest.raises(ValueError):
            aggregate(create_tridiagonal_sparse_coo(4), 'rs')


class TestTentativeProlongator:

    def test_interpolates_candidate(self):
        aggregates = torch.tensor([0, 0, 1, 1, 1, 2], dtype=torch.int64)
        B = torch.tensor([1.0, 2.0, 3.0, 0.5, 1.5, 2.0], dtype=torch.float64)
        T, B_coarse = fit_candidates(aggregates, B)

        assert T.shape == (6, 3)
        assert torch.allclose(T.to_dense() @ B_coarse, B)
        T_dense = T.to_dense()
        assert torch.allclose(T_dense.T @ T_dense, torch.eye(3, dtype=torch.float64))
        assert torch.allclose(B_coarse[0], torch.tensor(5.0, dtype=torch.float64).sqrt())

    def test_constant_candidate(self):
        aggregates = torch.tensor([0, 1, 0, 1], dtype=torch.int64)
        T, B_coarse = fit_candidates(aggregates, torch.ones(4, dtype=torch.float64))
        assert torch.allclose(B_coarse, torch.full((2,), 2.0 ** 0.5, dtype=torch.float64))
        assert torch.allclose(T.to_dense().sum(dim=0), torch.full((2,), 2.0 ** 0.5, dtype=torch.float64))

    def test_vanishing_candidate_warns(self):
        aggregates = torch.tensor([0, 0, 1, 1], dtype=torch.int64)
        B = torch.tensor([1.0, 1.0, 0.0, 0.0], dtype=torch.float64)
        with pytest.warns(UserWarning):
            T, B_coarse = fit_candidates(aggregates, B)
        assert B_coarse[1].item() == 0.0
        assert torch.all(T.to_dense()[:, 1] == 0)

    def test_non_contiguous_ids(self):
        with pytest.raises(ValueError):
            fit_candidates(torch.tensor([0, 2, 2]), torch.ones(3, dtype=torch.float64))

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            fit_candidates(torch.tensor([0, 0, 1]), torch.ones(4, dtype=torch.float64))


class TestProlongatorSmoothing:

    def test_matches_dense_formula(self):
        A = create_poisson_2d_sparse_coo(5, 5)
        aggregates = standard_aggregation(symmetric_strength_of_connection(A))
        T, _ = fit_candidates(aggregates, torch.ones(25, dtype=torch.float64))
        rho = 1.9

        P = smooth_prolongator(A, T, DEFAULT_OMEGA, rho)

        A_dense = A.to_dense()
        Dinv = torch.diag(1.0 / torch.diagonal(A_dense))
        expected = (torch.eye(25, dtype=torch.float64) - (DEFAULT_OMEGA / rho) * Dinv @ A_dense) @ T.to_dense()
        assert P.shape == T.shape
        assert P.layout == torch.sparse_coo
        assert torch.allclose(P.to_dense(), expected)

    def test_default_omega(self):
        assert DEFAULT_OMEGA == pytest.approx(4.0 / 3.0)

    def test_invalid_rho(self):
        A = create_tridiagonal_sparse_coo(4)
        T, _ = fit_candidates(torch.tensor([0, 0, 1, 1]), torch.ones(4, dtype=torch.float64))
        with pytest.raises(ValueError):
            smooth_prolongator(A, T, rho=0.0)

    def test_zero_diagonal(self):
        A = torch.tensor([[0.0, 1.0], [1.0, 2.0]], dtype=torch.float64).to_sparse_coo()
        T, _ = fit_candidates(torch.tensor([0, 0]), torch.ones(2, dtype=torch.float64))
        with pytest.raises(ValueError):
            smooth_prolongator(A, T, rho=1.0)


def main():
    """Run aggregation tests."""
    sys.exit(pytest.main([__file__, '-v']))


if __name__ == '__main__':
    main()
