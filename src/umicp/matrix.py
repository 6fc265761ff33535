"""Numeric kernel: dimension-checked vector and matrix arithmetic.

Stateless functions over caller-owned buffers. Inputs are any float
sequences; outputs are caller-sized mutable sequences (``list`` or
``array.array("f")``). Matrices are flat row-major buffers.

Every function checks lengths against the declared dimensions before reading
or writing any element, so a ``MatrixError`` never leaves a partially written
output. Algorithms are the plain sequential ones; an accelerated backend can
replace a function as long as it keeps the same signature and results.
"""

from __future__ import annotations

import logging
import math
from array import array
from collections.abc import MutableSequence, Sequence

from umicp.errors import MatrixError, UmicpErrorCode
from umicp.types import NumericResult

_LOGGER = logging.getLogger(__name__)

type Buffer = Sequence[float]
type OutBuffer = MutableSequence[float]


def _mismatch(message: str, **data: object) -> MatrixError:
    _LOGGER.debug("Rejected kernel input: %s", message)
    return MatrixError(
        UmicpErrorCode.MATRIX_DIMENSION_MISMATCH, message, data=dict(data)
    )


def _check_dims(**dims: int) -> None:
    for name, value in dims.items():
        if value < 0:
            raise _mismatch(f"Dimension '{name}' must not be negative, got {value}")


def _check_vectors(a: Buffer, b: Buffer, out: OutBuffer | None = None) -> None:
    if out is None:
        if len(a) != len(b):
            raise _mismatch(
                f"Vector length mismatch: a({len(a)}) != b({len(b)})",
                a=len(a),
                b=len(b),
            )
        return
    if len(a) != len(b) or len(a) != len(out):
        raise _mismatch(
            f"Vector length mismatch: a({len(a)}), b({len(b)}), result({len(out)})",
            a=len(a),
            b=len(b),
            result=len(out),
        )


def _as_float32(values: Buffer) -> list[float]:
    return array("f", values).tolist()


def _data_result(values: Buffer) -> NumericResult:
    return NumericResult(data=_as_float32(values))


def _dot(a: Buffer, b: Buffer) -> float:
    total = 0.0
    for x, y in zip(a, b, strict=True):
        total += x * y
    return total


def _magnitude(v: Buffer) -> float:
    return math.sqrt(_dot(v, v))


def vector_add(a: Buffer, b: Buffer, out: OutBuffer) -> NumericResult:
    """Element-wise ``out[i] = a[i] + b[i]``."""
    _check_vectors(a, b, out)
    for i, (x, y) in enumerate(zip(a, b, strict=True)):
        out[i] = x + y
    return _data_result(out)


def vector_subtract(a: Buffer, b: Buffer, out: OutBuffer) -> NumericResult:
    """Element-wise ``out[i] = a[i] - b[i]``."""
    _check_vectors(a, b, out)
    for i, (x, y) in enumerate(zip(a, b, strict=True)):
        out[i] = x - y
    return _data_result(out)


def vector_multiply(a: Buffer, b: Buffer, out: OutBuffer) -> NumericResult:
    """Element-wise (Hadamard) product."""
    _check_vectors(a, b, out)
    for i, (x, y) in enumerate(zip(a, b, strict=True)):
        out[i] = x * y
    return _data_result(out)


def vector_scale(vector: Buffer, scalar: float, out: OutBuffer) -> NumericResult:
    """``out[i] = vector[i] * scalar``."""
    if len(vector) != len(out):
        raise _mismatch(
            f"Vector length mismatch: vector({len(vector)}), result({len(out)})",
            vector=len(vector),
            result=len(out),
        )
    for i, x in enumerate(vector):
        out[i] = x * scalar
    return _data_result(out)


def dot_product(a: Buffer, b: Buffer) -> NumericResult:
    """Sum of element-wise products, returned as ``scalar``."""
    _check_vectors(a, b)
    return NumericResult(scalar=_dot(a, b))


def cosine_similarity(a: Buffer, b: Buffer) -> NumericResult:
    """``dot(a, b) / (|a| * |b|)`` as ``similarity``.

    If either vector has zero magnitude the similarity is 0.0 rather than an
    error or NaN.
    """
    _check_vectors(a, b)
    dot = _dot(a, b)
    a_magnitude = _magnitude(a)
    b_magnitude = _magnitude(b)
    if a_magnitude == 0.0 or b_magnitude == 0.0:
        return NumericResult(similarity=0.0)
    return NumericResult(similarity=dot / (a_magnitude * b_magnitude))


def normalize(matrix: OutBuffer, rows: int, cols: int) -> NumericResult:
    """L2-normalize each row in place. Rows with zero norm are left unchanged."""
    _check_dims(rows=rows, cols=cols)
    if len(matrix) != rows * cols:
        raise _mismatch(
            f"Invalid matrix dimensions: matrix({len(matrix)}) != {rows}x{cols}",
            matrix=len(matrix),
            rows=rows,
            cols=cols,
        )
    for row in range(rows):
        start = row * cols
        norm = _magnitude(matrix[start : start + cols])
        if norm > 0.0:
            for i in range(start, start + cols):
                matrix[i] = matrix[i] / norm
    return _data_result(matrix)


def matrix_add(
    a: Buffer, b: Buffer, out: OutBuffer, rows: int, cols: int
) -> NumericResult:
    """Element-wise sum of two ``rows x cols`` matrices."""
    _check_dims(rows=rows, cols=cols)
    expected = rows * cols
    if len(a) != expected or len(b) != expected or len(out) != expected:
        raise _mismatch(
            f"Invalid matrix dimensions: expected {rows}x{cols} ({expected} elements), "
            f"got a({len(a)}), b({len(b)}), result({len(out)})",
            rows=rows,
            cols=cols,
        )
    for i in range(expected):
        out[i] = a[i] + b[i]
    return _data_result(out)


def multiply(
    a: Buffer, b: Buffer, out: OutBuffer, m: int, n: int, p: int
) -> NumericResult:
    """Matrix product of ``a`` (m x n) and ``b`` (n x p) into ``out`` (m x p).

    ``out`` is zero-filled before accumulation and must not alias an input.
    """
    _check_dims(m=m, n=n, p=p)
    if len(a) != m * n or len(b) != n * p or len(out) != m * p:
        raise _mismatch(
            f"Invalid matrix dimensions: a({len(a)}) != {m}x{n}, "
            f"b({len(b)}) != {n}x{p}, result({len(out)}) != {m}x{p}",
            m=m,
            n=n,
            p=p,
        )
    for i in range(len(out)):
        out[i] = 0.0
    for i in range(m):
        for j in range(p):
            for k in range(n):
                out[i * p + j] += a[i * n + k] * b[k * p + j]
    return _data_result(out)


def transpose(src: Buffer, out: OutBuffer, rows: int, cols: int) -> NumericResult:
    """Write the transpose of ``src`` (rows x cols) into ``out`` (cols x rows)."""
    _check_dims(rows=rows, cols=cols)
    if len(src) != rows * cols or len(out) != cols * rows:
        raise _mismatch(
            f"Invalid transpose dimensions: input({len(src)}) != {rows}x{cols}, "
            f"output({len(out)}) != {cols}x{rows}",
            rows=rows,
            cols=cols,
        )
    for i in range(rows):
        for j in range(cols):
            out[j * rows + i] = src[i * cols + j]
    return _data_result(out)


def determinant(matrix: Buffer, size: int) -> NumericResult:
    """Determinant of a 1x1 or 2x2 matrix as ``scalar``.

    Raises:
        MatrixError: ``MATRIX_DIMENSION_MISMATCH`` when the buffer is not
            size x size, ``MATRIX_UNSUPPORTED_SIZE`` for any other size.
    """
    _check_dims(size=size)
    if len(matrix) != size * size:
        raise _mismatch(
            f"Invalid matrix dimensions for determinant: matrix({len(matrix)}) "
            f"!= {size}x{size}",
            matrix=len(matrix),
            size=size,
        )
    if size == 1:
        return NumericResult(scalar=float(matrix[0]))
    if size == 2:
        return NumericResult(scalar=float(matrix[0] * matrix[3] - matrix[1] * matrix[2]))
    raise MatrixError(
        UmicpErrorCode.MATRIX_UNSUPPORTED_SIZE,
        f"Determinant calculation for {size}x{size} matrices is not implemented",
        data={"size": size},
    )


def inverse(matrix: Buffer, out: OutBuffer, size: int) -> NumericResult:
    """Inverse of a 2x2 matrix via ``adj / det``, written into ``out``.

    Raises:
        MatrixError: ``MATRIX_DIMENSION_MISMATCH`` on wrong buffer lengths,
            ``MATRIX_SINGULAR`` when det == 0, ``MATRIX_UNSUPPORTED_SIZE`` when
            size != 2.
    """
    _check_dims(size=size)
    expected = size * size
    if len(matrix) != expected or len(out) != expected:
        raise _mismatch(
            f"Invalid matrix dimensions for inverse: matrix({len(matrix)}) != "
            f"{size}x{size}, result({len(out)}) != {size}x{size}",
            matrix=len(matrix),
            result=len(out),
            size=size,
        )
    if size != 2:
        raise MatrixError(
            UmicpErrorCode.MATRIX_UNSUPPORTED_SIZE,
            f"Matrix inverse for {size}x{size} matrices is not implemented",
            data={"size": size},
        )
    a, b, c, d = matrix[0], matrix[1], matrix[2], matrix[3]
    det = a * d - b * c
    if det == 0:
        raise MatrixError(
            UmicpErrorCode.MATRIX_SINGULAR,
            "Matrix is singular, cannot compute inverse",
        )
    inverted = (d / det, -b / det, -c / det, a / det)
    for i, value in enumerate(inverted):
        out[i] = value
    return _data_result(out)
