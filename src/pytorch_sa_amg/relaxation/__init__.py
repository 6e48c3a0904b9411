"""
Per-level relaxation (smoothers) for the V-cycle.

Every smoother is constructed from the level operator and the spectral
radius estimate of D^-1 A, and relaxes in place:

    smoother.presmooth(A, b, x)
    smoother.postsmooth(A, b, x)

Available smoothers:
- JACOBI: weighted Jacobi, weight 4 / (3 rho) (default)
- POLYNOMIAL: Chebyshev polynomial in D^-1 A
- GAUSS_SEIDEL: symmetric multicolor Gauss-Seidel
"""

import torch
from enum import Enum
from typing import Union

from .jacobi import JacobiSmoother
from .polynomial import PolynomialSmoother
from .gauss_seidel import MulticolorGaussSeidel


class SmootherType(Enum):
    """Available level smoothers."""
    JACOBI = "jacobi"
    POLYNOMIAL = "polynomial"
    GAUSS_SEIDEL = "gauss_seidel"


_SMOOTHERS = {
    SmootherType.JACOBI: JacobiSmoother,
    SmootherType.POLYNOMIAL: PolynomialSmoother,
    SmootherType.GAUSS_SEIDEL: MulticolorGaussSeidel,
}


def make_smoother(
    smoother_type: Union[str, SmootherType],
    A: torch.Tensor,
    rho: float
):
    """
    Construct a level smoother.

    Args:
        smoother_type: SmootherType or its string value
        A: Level operator
        rho: Spectral radius estimate of D^-1 A

    Returns:
        Smoother exposing presmooth(A, b, x) and postsmooth(A, b, x)
    """
    try:
        smoother_type = SmootherType(smoother_type)
    except ValueError:
        raise ValueError(
            f"Unknown smoother '{smoother_type}'. "
            f"Use one of: {[s.value for s in SmootherType]}"
        )
    return _SMOOTHERS[smoother_type](A, rho)


__all__ = [
    'SmootherType',
    'make_smoother',
    'JacobiSmoother',
    'PolynomialSmoother',
    'MulticolorGaussSeidel',
]
