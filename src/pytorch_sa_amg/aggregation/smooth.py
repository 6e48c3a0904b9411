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
Jacobi smoothing of the tentative prolongator.
"""

import torch

from ..utils.matrix_utils import diagonal, ensure_sparse_format, scale_rows, spgemm

DEFAULT_OMEGA = 4.0 / 3.0


def smooth_prolongator(
    A: torch.Tensor,
    T: torch.Tensor,
    omega: float = DEFAULT_OMEGA,
    rho: float = 1.0
) -> torch.Tensor:
    """
    Damped Jacobi prolongator smoothing.

        P = (I - (omega / rho) * D^-1 A) T

    Args:
        A: Square sparse operator
        T: Tentative prolongator
        omega: Damping factor
        rho: Spectral radius estimate of D^-1 A

    Returns:
        Smoothed prolongator P as coalesced COO with the shape of T
    """
    rho = float(rho)
    if rho <= 0.0:
        raise ValueError(f"Spectral radius estimate must be positive, got {rho}")
    if A.shape[1] != T.shape[0]:
        raise ValueError(f"Incompatible shapes: A {tuple(A.shape)}, T {tuple(T.shape)}")

    D = diagonal(A)
    if (D == 0).any():
        raise ValueError("Operator has zero diagonal entries; D^-1 A is undefined")

    T = ensure_sparse_format(T, 'coo')
    AT = spgemm(A, T)
    S = scale_rows(AT, (omega / rho) / D)

    return (T - S).coalesce()
