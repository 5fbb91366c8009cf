"""Label distributions returned by every classifier.

A :class:`Distribution` doubles as a histogram (counts accumulated with
:meth:`Distribution.add`) and, once normalized, a multinomial posterior.
"""

from __future__ import annotations

import logging

from .exceptions import DistributionError

logger = logging.getLogger(__name__)


class Distribution(dict[str, float]):
    """Mapping from label to non-negative mass.

    Absent labels have mass 0. Iteration follows insertion order.
    """

    def __missing__(self, key: str) -> float:
        return 0.0

    def get(self, key: str, default: float = 0.0) -> float:  # type: ignore[override]
        return super().get(key, default)

    def add(self, label: str, weight: float = 1.0) -> None:
        """Add *weight* to the mass of *label*."""
        self[label] = self[label] + weight

    @property
    def total(self) -> float:
        return float(sum(self.values()))

    def normalize(self) -> Distribution:
        """Scale all masses so that they sum to one.

        Raises
        ------
        DistributionError
            If the distribution holds no mass.
        """
        total = self.total
        if total == 0:
            raise DistributionError(
                f"Cannot normalize a distribution with zero total mass: {dict(self)}"
            )
        for label in self:
            self[label] = self[label] / total
        return self

    def argmax(self) -> str | None:
        """Return the label with the greatest mass.

        Ties go to the label inserted first. Returns ``None`` for an empty
        distribution.
        """
        best_label = None
        best_mass = float("-inf")
        for label, mass in self.items():
            if mass > best_mass:
                best_mass = mass
                best_label = label
        if best_label is None:
            logger.warning("No maximum label in empty distribution")
        return best_label

    def multiply(self, other: dict[str, float]) -> Distribution:
        """Fold *other* into this distribution as one product-of-experts step.

        Labels already present are multiplied by their mass in *other*;
        labels new to this distribution are inserted unmultiplied.
        """
        for label, mass in other.items():
            if label in self:
                self[label] = self[label] * mass
            else:
                self[label] = mass
        return self

    @classmethod
    def product(cls, distributions: list[dict[str, float]]) -> Distribution:
        """Combine *distributions* by product of experts and normalize."""
        combined = cls()
        for d in distributions:
            combined.multiply(d)
        return combined.normalize()
