"""
Dense direct solver used at the bottom of the V-cycle.

Example:
    >>> from pytorch_sa_amg.direct import LUSolver
    >>> lu = LUSolver(A_coarse)
    >>> x = lu(b)
"""

from .lu import LUSolver

__all__ = [
    'LUSolver',
]
