"""Matrix and vector algorithms over array values.

Validation is shared by every entry point: ``require_array`` rejects scalars
and empty arrays, ``require_matrix`` rejects vectors and ragged rows, and
``require_square`` rejects non-square shapes. Numeric work runs on float64
``jax.numpy`` arrays; results are converted back to nested ``Array`` values.
"""

from __future__ import annotations

import logging

import jax.numpy as jnp

from .config import PIVOT_EPSILON
from .errors import ErrorCode, raise_error
from .values import Array, Scalar, Value

logger = logging.getLogger(__name__)


def require_array(value: Value, func: str) -> tuple[Value, ...]:
    if not isinstance(value, Array):
        raise_error(ErrorCode.MATRIX_REQUIRED, func)
    if not value.items:
        raise_error(ErrorCode.MATRIX_EMPTY, func)
    return value.items


def require_matrix(rows: tuple[Value, ...], func: str) -> tuple[int, int]:
    """Return ``(rows, cols)`` of a rectangular two-level array."""
    if not isinstance(rows[0], Array):
        raise_error(ErrorCode.MATRIX_NOT_VECTOR, func)
    num_cols = len(rows[0].items)
    for i, row in enumerate(rows):
        if not isinstance(row, Array):
            raise_error(ErrorCode.MATRIX_ROW_NOT_ARRAY, func, i + 1)
        if len(row.items) != num_cols:
            raise_error(ErrorCode.MATRIX_INCONSISTENT_COLS, func)
    return len(rows), num_cols


def require_square(num_rows: int, num_cols: int, func: str) -> None:
    if num_rows != num_cols:
        raise_error(ErrorCode.MATRIX_SQUARE_REQUIRED, func)


def _to_jax(rows: tuple[Value, ...], func: str) -> jnp.ndarray:
    data: list[list[float]] = []
    for row in rows:
        out_row: list[float] = []
        for elem in row.items:
            if not isinstance(elem, Scalar):
                raise_error(ErrorCode.MATRIX_ELEMENT_NOT_SCALAR, func)
            out_row.append(elem.value)
        data.append(out_row)
    return jnp.asarray(data, dtype=jnp.float64)


def _from_jax(mat: jnp.ndarray) -> Array:
    return Array(items=tuple(Array(items=tuple(Scalar(float(v)) for v in row)) for row in mat.tolist()))


def _checked_matrix(value: Value, func: str, *, square: bool = False) -> jnp.ndarray:
    rows = require_array(value, func)
    num_rows, num_cols = require_matrix(rows, func)
    if square:
        require_square(num_rows, num_cols, func)
    return _to_jax(rows, func)


def _swap_rows(mat: jnp.ndarray, i: int, j: int) -> jnp.ndarray:
    if i == j:
        return mat
    return mat.at[jnp.array([i, j])].set(mat[jnp.array([j, i])])


def transpose(value: Value) -> Array:
    """Row vector -> column, column (N x 1) -> row vector, M x N -> N x M."""
    rows = require_array(value, "transpose")

    if not isinstance(rows[0], Array):
        return Array(items=tuple(Array(items=(elem,)) for elem in rows))

    num_rows, num_cols = require_matrix(rows, "transpose")
    if num_cols == 1:
        return Array(items=tuple(row.items[0] for row in rows))

    return Array(
        items=tuple(
            Array(items=tuple(rows[r].items[c] for r in range(num_rows)))
            for c in range(num_cols)
        )
    )


def matmul(left: Value, right: Value) -> Array:
    left_rows = require_array(left, "matmul")
    right_rows = require_array(right, "matmul")
    m, n = require_matrix(left_rows, "matmul")
    p, k = require_matrix(right_rows, "matmul")
    if n != p:
        raise_error(ErrorCode.MATRIX_DIMENSION_MISMATCH, n, p)

    a = _to_jax(left_rows, "matmul")
    b = _to_jax(right_rows, "matmul")
    logger.debug("matmul %dx%d @ %dx%d", m, n, p, k)
    return _from_jax(jnp.matmul(a, b))


def trace(value: Value) -> float:
    mat = _checked_matrix(value, "trace", square=True)
    return float(jnp.trace(mat))


def rank(value: Value) -> int:
    """Row-echelon rank with partial pivoting; near-zero pivot columns are skipped."""
    a = _checked_matrix(value, "rank")
    m, n = a.shape

    row = 0
    for col in range(n):
        if row >= m:
            break
        column = jnp.abs(a[row:, col])
        pivot = row + int(jnp.argmax(column))
        if float(column[pivot - row]) < PIVOT_EPSILON:
            continue
        a = _swap_rows(a, row, pivot)
        factors = a[row + 1 :, col] / a[row, col]
        a = a.at[row + 1 :, col:].set(a[row + 1 :, col:] - jnp.outer(factors, a[row, col:]))
        row += 1
    return row


def mean(value: Value, axis: int) -> Array:
    """Column means as a 1 x N row (axis 0) or row means as an M x 1 column (axis 1)."""
    mat = _checked_matrix(value, "mean")
    m, n = mat.shape

    if axis == 0:
        col_means = jnp.sum(mat, axis=0) / m
        return Array(items=(Array(items=tuple(Scalar(float(v)) for v in col_means.tolist())),))
    if axis == 1:
        row_means = jnp.sum(mat, axis=1) / n
        return Array(items=tuple(Array(items=(Scalar(float(v)),)) for v in row_means.tolist()))
    raise_error(ErrorCode.MATRIX_INVALID_AXIS)


def determinant(value: Value) -> float:
    mat = _checked_matrix(value, "det", square=True)
    logger.debug("determinant of %dx%d matrix", mat.shape[0], mat.shape[1])
    return _laplace(mat.tolist())


def _laplace(mat: list[list[float]]) -> float:
    # Cofactor expansion along the first row; exponential in the order.
    n = len(mat)
    if n == 1:
        return mat[0][0]
    if n == 2:
        return mat[0][0] * mat[1][1] - mat[0][1] * mat[1][0]
    if n == 3:
        return (
            mat[0][0] * (mat[1][1] * mat[2][2] - mat[1][2] * mat[2][1])
            - mat[0][1] * (mat[1][0] * mat[2][2] - mat[1][2] * mat[2][0])
            + mat[0][2] * (mat[1][0] * mat[2][1] - mat[1][1] * mat[2][0])
        )

    det = 0.0
    for col in range(n):
        minor = [row[:col] + row[col + 1 :] for row in mat[1:]]
        det += (-1.0) ** col * mat[0][col] * _laplace(minor)
    return det


def inverse(value: Value, func: str = "inv") -> Array:
    """Gauss-Jordan elimination on ``[A | I]`` with partial pivoting."""
    a = _checked_matrix(value, func, square=True)
    n = a.shape[0]
    logger.debug("inverse of %dx%d matrix", n, n)

    aug = jnp.concatenate([a, jnp.eye(n, dtype=jnp.float64)], axis=1)
    for i in range(n):
        max_row = i + int(jnp.argmax(jnp.abs(aug[i:, i])))
        aug = _swap_rows(aug, i, max_row)

        pivot = float(aug[i, i])
        if abs(pivot) < PIVOT_EPSILON:
            raise_error(ErrorCode.MATRIX_SINGULAR)

        aug = aug.at[i].set(aug[i] / pivot)
        factors = aug[:, i].at[i].set(0.0)
        aug = aug - jnp.outer(factors, aug[i])

    return _from_jax(aug[:, n:])


def solve(coefficients: Value, rhs: Value) -> Array:
    """Solve ``A x = b`` for a column vector ``b`` as ``inverse(A) @ b``."""
    a_rows = require_array(coefficients, "solve")
    num_rows, num_cols = require_matrix(a_rows, "solve")
    require_square(num_rows, num_cols, "solve")

    b_rows = require_array(rhs, "solve")
    if not isinstance(b_rows[0], Array):
        raise_error(ErrorCode.SOLVE_VECTOR_FORMAT)
    b_num_rows, b_num_cols = require_matrix(b_rows, "solve")
    if b_num_cols != 1:
        raise_error(ErrorCode.SOLVE_VECTOR_FORMAT)
    if b_num_rows != num_rows:
        raise_error(ErrorCode.SOLVE_DIMENSION_MISMATCH, b_num_rows, num_rows)

    return matmul(inverse(coefficients, "solve"), rhs)
