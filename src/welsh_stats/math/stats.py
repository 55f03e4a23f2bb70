"""Mean and first-to-last change helpers backed by NumPy."""

from collections.abc import Iterable
from typing import TypeAlias, cast

import numpy as np
import numpy.typing as npt

FloatArray: TypeAlias = npt.NDArray[np.float64]


def to_numpy(values: Iterable[float]) -> FloatArray:
    """Coerce the input sequence into a 1D NumPy float array."""
    if isinstance(values, np.ndarray):
        return cast(FloatArray, values.astype(float, copy=False))
    return cast(FloatArray, np.asarray(list(values), dtype=float))


def mean(values: Iterable[float]) -> float:
    """Arithmetic mean, or ``0.0`` for an empty input."""
    arr = to_numpy(values)
    if arr.size == 0:
        return 0.0
    return float(arr.mean())


def absolute_change(first: float, last: float) -> float:
    """Magnitude of the change from ``first`` to ``last``."""
    return float(np.abs(last - first))


def percentage_change(first: float, last: float) -> float:
    """Magnitude of the change relative to ``first``, in percent.

    A zero baseline has no meaningful relative change and yields ``0.0``.
    """
    if first == 0:
        return 0.0
    return absolute_change(first, last) / first * 100


__all__ = ["FloatArray", "to_numpy", "mean", "absolute_change", "percentage_change"]
