"""
Graph algorithms on matrix sparsity patterns.

- maximal_independent_set: greedy distance-1 / distance-2 MIS (aggregation roots)
- vertex_coloring: greedy coloring (multicolor Gauss-Seidel)
"""

from .mis import maximal_independent_set
from .coloring import vertex_coloring

__all__ = [
    'maximal_independent_set',
    'vertex_coloring',
]
