"""
Setup-phase building blocks of smoothed aggregation.

- symmetric_strength_of_connection: filter weak couplings
- aggregate / standard_aggregation / mis_aggregation: cluster rows
- fit_candidates: tentative prolongator from the near-null-space candidate
- smooth_prolongator: damped Jacobi smoothing of the tentative prolongator

Example:
    >>> from pytorch_sa_amg.aggregation import (
    ...     symmetric_strength_of_connection, aggregate, fit_candidates, smooth_prolongator)
    >>> C = symmetric_strength_of_connection(A, theta=0.0)
    >>> agg = aggregate(C, 'standard')
    >>> T, B_coarse = fit_candidates(agg, B)
    >>> P = smooth_prolongator(A, T, omega=4.0 / 3.0, rho=rho)
"""

from .strength import symmetric_strength_of_connection
from .aggregate import (
    AggregationMethod,
    aggregate,
    standard_aggregation,
    mis_aggregation,
)
from .tentative import fit_candidates
from .smooth import smooth_prolongator, DEFAULT_OMEGA

__all__ = [
    'symmetric_strength_of_connection',
    'AggregationMethod',
    'aggregate',
    'standard_aggregation',
    'mis_aggregation',
    'fit_candidates',
    'smooth_prolongator',
    'DEFAULT_OMEGA',
]
