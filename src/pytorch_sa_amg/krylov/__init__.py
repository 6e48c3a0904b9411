"""
Krylov-subspace spectral estimates used during hierarchy setup.
"""

from .arnoldi import (
    DinvAOperator,
    ritz_spectral_radius,
    estimate_rho_Dinv_A,
    DEFAULT_RITZ_VECTORS,
)

__all__ = [
    'DinvAOperator',
    'ritz_spectral_radius',
    'estimate_rho_Dinv_A',
    'DEFAULT_RITZ_VECTORS',
]
