#!/usr/bin/env python3
"""
Basic Usage Examples for PyTorch Smoothed Aggregation AMG

This file demonstrates building a multigrid hierarchy, using it as a
standalone solver and as a preconditioner, and switching the smoother and
aggregation options.
"""

import time
import torch

from pytorch_sa_amg import (
    DefaultMonitor,
    SmoothedAggregation,
    create_poisson_2d_sparse_coo,
    compute_relative_residual,
)


def example_standalone_solver(device):
    """Example using V-cycles as a stationary solver"""
    print("\n🔧 Standalone Solver Example")
    print("-" * 40)

    A = create_poisson_2d_sparse_coo(128, 128, device=device)
    n = A.shape[0]
    print(f"Matrix size: {n}x{n}, non-zeros: {A._nnz()}")

    start_time = time.time()
    ml = SmoothedAggregation(A)
    setup_time = time.time() - start_time
    print(f"Setup time: {setup_time:.4f}s")
    ml.print()

    torch.manual_seed(42)
    b = torch.rand(n, dtype=torch.float64, device=device)

    start_time = time.time()
    x, result = ml.solve(b, tol=1e-8)
    solve_time = time.time() - start_time
    print(f"Converged: {result.converged}, iterations: {result.iterations}, "
          f"relative residual: {result.relative_residual:.2e}, time: {solve_time:.4f}s")


def example_preconditioner(device):
    """Example using one V-cycle as a preconditioner inside a hand-written PCG"""
    print("\n🕸️  Preconditioner Example")
    print("-" * 40)

    A = create_poisson_2d_sparse_coo(128, 128, device=device)
    A_csr = A.to_sparse_csr()
    M = SmoothedAggregation(A)

    torch.manual_seed(0)
    b = torch.rand(A.shape[0], dtype=torch.float64, device=device)
    x = torch.zeros_like(b)

    r = b.clone()
    z = M(r)
    p = z.clone()
    rz = torch.dot(r, z)
    iterations = 0
    while compute_relative_residual(A_csr, x, b) > 1e-10 and iterations < 100:
        Ap = torch.sparse.mm(A_csr, p.unsqueeze(-1)).squeeze(-1)
        alpha = rz / torch.dot(p, Ap)
        x += alpha * p
        r -= alpha * Ap
        z = M(r)
        rz_new = torch.dot(r, z)
        p = z + (rz_new / rz) * p
        rz = rz_new
        iterations += 1

    print(f"PCG iterations: {iterations}, "
          f"relative residual: {compute_relative_residual(A_csr, x, b):.2e}")


def example_options(device):
    """Example comparing smoothers and aggregation algorithms"""
    print("\n🔬 Smoother / Aggregation Options Example")
    print("-" * 40)

    A = create_poisson_2d_sparse_coo(64, 64, device=device)
    torch.manual_seed(1)
    b = torch.rand(A.shape[0], dtype=torch.float64, device=device)

    for aggregation in ['standard', 'mis']:
        for smoother in ['jacobi', 'polynomial', 'gauss_seidel']:
            ml = SmoothedAggregation(A, aggregation=aggregation, smoother=smoother)
            monitor = DefaultMonitor(b, tol=1e-8, maxiter=200)
            x, result = ml.solve(b, monitor=monitor)
            print(f"  {aggregation:>8} + {smoother:<12}: levels={ml.num_levels}, "
                  f"OC={ml.operator_complexity():.3f}, iterations={result.iterations}, "
                  f"converged={result.converged}")


def main():
    """Run all examples"""
    print("🚀 PyTorch Smoothed Aggregation AMG - Examples")
    print("=" * 60)

    device = 'cuda' if torch.cuda.is_available() else 'cpu'
    print(f"📍 Using device: {device}")

    if device == 'cuda':
        print(f"📍 GPU: {torch.cuda.get_device_name(0)}")

    example_standalone_solver(device)
    example_preconditioner(device)
    example_options(device)

    print("\n✅ All examples completed!")


if __name__ == "__main__":
    main()
