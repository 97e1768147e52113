"""Warm-started conjugate gradient solve for multi-column right-hand sides."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict
from numpy.typing import NDArray

import numpy as np
import scipy.sparse as sp
from scipy.sparse.linalg import cg

_LOGGER = logging.getLogger(__name__)


@dataclass
class SolveResult:
    """Outcome of `solve_symmetric`.

    Attributes:
        x: (N, m) solution.
        iterations: Largest iteration count over the columns.
        error: Largest relative residual ``||b - A x|| / ||b||`` over the
            columns (absolute residual for a zero column).
        converged: False if any column stopped at the iteration cap.
    """

    x: NDArray[Any]
    iterations: int
    error: float
    converged: bool = True


def jacobi_preconditioner(A: sp.spmatrix) -> sp.csr_matrix:
    """Return the inverse diagonal of `A` (1 where the diagonal is zero)."""
    d = np.asarray(A.diagonal(), dtype=float)
    inv = np.ones_like(d)
    nz = d != 0.0
    inv[nz] = 1.0 / d[nz]
    return sp.diags(inv, format="csr")


def solve_symmetric(
    A: sp.spmatrix,
    b: NDArray[Any],
    x0: NDArray[Any],
    max_iterations: int = 0,
    tolerance: float = 0.0,
) -> SolveResult:
    """Solve ``A x = b`` for every column of `b` with preconditioned CG.

    Args:
        A: Symmetric positive (semi-)definite sparse matrix, shape (N, N).
        b: Right-hand side, shape (N,) or (N, m).
        x0: Initial guess with the same shape as `b`.
        max_iterations: Iteration cap per column; <= 0 uses the SciPy default.
        tolerance: Relative residual tolerance; <= 0 uses the SciPy default.

    Returns:
        SolveResult: Solution of shape (N, m) and convergence diagnostics.
        Non-convergence is reported, not raised.

    Raises:
        ValueError: If shapes are inconsistent.
        RuntimeError: If SciPy reports illegal input or breakdown.
    """
    B = np.asarray(b, dtype=float)
    if B.ndim == 1:
        B = B[:, None]
    X0 = np.asarray(x0, dtype=float).reshape(B.shape)
    n, m = B.shape
    if A.shape != (n, n):
        raise ValueError(f"solve_symmetric: A is {A.shape}, expected {(n, n)}")

    if n == 0:
        return SolveResult(x=np.zeros((0, m)), iterations=0, error=0.0)

    A = sp.csr_matrix(A)
    M = jacobi_preconditioner(A)

    kwargs: Dict[str, Any] = {"M": M}
    if max_iterations > 0:
        kwargs["maxiter"] = int(max_iterations)
    if tolerance > 0.0:
        kwargs["rtol"] = float(tolerance)

    X = np.empty_like(B)
    niter = 0
    error = 0.0
    converged = True
    for col in range(m):
        count = 0

        def _count(_xk: Any) -> None:
            nonlocal count
            count += 1

        x, info = cg(A, B[:, col], x0=X0[:, col], callback=_count, **kwargs)
        if info < 0:
            _LOGGER.error("solve_symmetric: CG failed on column %d (info=%d)", col, info)
            raise RuntimeError(f"Conjugate gradient failed (info={info})")
        if info > 0:
            converged = False
            _LOGGER.warning(
                "solve_symmetric: column %d not converged after %d iteration(s)",
                col,
                info,
            )

        X[:, col] = x
        res = float(np.linalg.norm(B[:, col] - A @ x))
        bnrm = float(np.linalg.norm(B[:, col]))
        col_error = res / bnrm if bnrm > 0.0 else res
        niter = max(niter, count)
        error = max(error, col_error)
        _LOGGER.debug(
            "solve_symmetric: column %d -> iterations=%d error=%.3e",
            col,
            count,
            col_error,
        )

    return SolveResult(x=X, iterations=niter, error=error, converged=converged)
