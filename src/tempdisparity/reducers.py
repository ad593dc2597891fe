"""Reduction strategies shared by temporal and spatial aggregation.

Every reducer ignores NaN and infinite values. Mean and sum use exact
float summation so the result is independent of the order in which
values arrive.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any

import numpy as np
import numpy.typing as npt


class Reducer(str, Enum):
    """Named reduction applied to a set of values.

    Example:
        >>> Reducer.MEAN.reduce([1.0, float("nan"), 3.0])
        2.0
        >>> Reducer.parse("max") is Reducer.MAX
        True
    """

    MEAN = "mean"
    MIN = "min"
    MAX = "max"
    SUM = "sum"
    FIRST = "first"

    @classmethod
    def parse(cls, value: Reducer | str) -> Reducer:
        """Return the reducer named by *value* (case-insensitive).

        Raises:
            ValueError: If *value* names no reducer.
        """
        if isinstance(value, Reducer):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            valid = ", ".join(r.value for r in cls)
            msg = f"Unknown reducer {value!r}; expected one of: {valid}"
            raise ValueError(msg) from None

    def reduce(self, values: npt.ArrayLike) -> float | None:
        """Reduce *values* to one scalar.

        Returns:
            The reduced value, or ``None`` when no finite value exists.
        """
        arr = np.asarray(values, dtype=np.float64).ravel()
        arr = arr[np.isfinite(arr)]
        if arr.size == 0:
            return None
        if self is Reducer.MEAN:
            return math.fsum(arr) / arr.size
        if self is Reducer.SUM:
            return math.fsum(arr)
        if self is Reducer.MIN:
            return float(arr.min())
        if self is Reducer.MAX:
            return float(arr.max())
        return float(arr[0])

    def reduce_axis(
        self,
        array: npt.ArrayLike,
        axis: int = 0,
    ) -> npt.NDArray[np.float64]:
        """Reduce *array* along *axis*.

        Positions without any finite value along *axis* are NaN.
        """
        arr = np.asarray(array, dtype=np.float64)
        valid = np.isfinite(arr)
        count = valid.sum(axis=axis)
        has_data = count > 0

        result: npt.NDArray[Any]
        if self is Reducer.MEAN or self is Reducer.SUM:
            total = np.where(valid, arr, 0.0).sum(axis=axis)
            if self is Reducer.MEAN:
                with np.errstate(divide="ignore", invalid="ignore"):
                    result = total / count
            else:
                result = total
        elif self is Reducer.MIN:
            result = np.where(valid, arr, np.inf).min(axis=axis)
        elif self is Reducer.MAX:
            result = np.where(valid, arr, -np.inf).max(axis=axis)
        else:
            first = np.expand_dims(valid.argmax(axis=axis), axis)
            result = np.take_along_axis(arr, first, axis=axis).squeeze(axis)

        return np.where(has_data, result, np.nan).astype(np.float64)
