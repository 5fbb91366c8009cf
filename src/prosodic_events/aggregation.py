"""Streaming mean and standard deviation of real-valued observations."""

from __future__ import annotations

import math
from typing import Iterable


class Aggregation:
    """Running count, mean and variance of inserted values.

    Uses Welford's update so that long streams of large values do not lose
    precision. The standard deviation is only meaningful once two or more
    values have been inserted; before that it reads as zero.
    """

    def __init__(self, label: str = "") -> None:
        self.label = label
        self._n = 0
        self._mean = 0.0
        self._m2 = 0.0
        self._min = math.inf
        self._max = -math.inf

    def insert(self, value: float) -> None:
        value = float(value)
        self._n += 1
        delta = value - self._mean
        self._mean += delta / self._n
        self._m2 += delta * (value - self._mean)
        self._min = min(self._min, value)
        self._max = max(self._max, value)

    def insert_all(self, values: Iterable[float]) -> None:
        for v in values:
            self.insert(v)

    @property
    def size(self) -> int:
        return self._n

    @property
    def mean(self) -> float:
        return self._mean if self._n > 0 else 0.0

    @property
    def variance(self) -> float:
        """Sample variance; zero when fewer than two values were seen."""
        if self._n < 2:
            return 0.0
        return self._m2 / (self._n - 1)

    @property
    def stdev(self) -> float:
        return math.sqrt(self.variance) if self._n >= 2 else 0.0

    @property
    def min(self) -> float:
        return self._min

    @property
    def max(self) -> float:
        return self._max

    @property
    def rms(self) -> float:
        if self._n < 1:
            return 0.0
        return math.sqrt(self._m2 / self._n + self._mean * self._mean)

    def gaussian_pdf(self, value: float) -> float:
        """Density of *value* under a normal fit to the aggregation."""
        stdev = self.stdev
        if stdev == 0:
            raise ValueError("Gaussian density needs a non-zero standard deviation")
        coef = 1.0 / (stdev * math.sqrt(2 * math.pi))
        return coef * math.exp(-((value - self.mean) ** 2) / (2 * stdev * stdev))

    def gaussian_cdf(self, value: float) -> float:
        stdev = self.stdev
        if stdev == 0:
            raise ValueError("Gaussian CDF needs a non-zero standard deviation")
        return 0.5 * (1 + math.erf((value - self.mean) / math.sqrt(2 * stdev * stdev)))

    def __repr__(self) -> str:
        return (
            f"Aggregation(label={self.label!r}, n={self._n}, mean={self.mean:.4f}, "
            f"stdev={self.stdev:.4f})"
        )
