"""
Test suite for pytorch_sa_amg package.

This test suite validates:
1. Sparse matrix primitives and graph algorithms
2. Each stage of the smoothed aggregation setup
3. Smoothers, coarse solver and the V-cycle solver end to end
"""

__all__ = [
    'test_matrix_utils',
    'test_graph',
    'test_aggregation',
    'test_krylov',
    'test_direct',
    'test_relaxation',
    'test_hierarchy',
    'test_monitor',
    'test_solver',
]
