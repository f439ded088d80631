"""
Assortment of useful classes
"""
from typing import Any, Callable, Iterable

import numpy as np  # type: ignore


class Lazy:
    """
    This class allows lazy evaluation of logging expressions. The idiom to accomplish that can be better explained in
    the example below::

        logger.info("The value of z is: %s", lazy(lambda: x + y))

    that will cause ``x + y`` to only be evaluated if the log level is info.

    :param f: A function which takes no parameters and which will only be evaluated when str is called in the returning
              object
    """
    def __init__(self, f: Callable[[], Any]):
        self.f = f

    def __str__(self):
        return str(self.f())

    def __repr__(self):
        return repr(self.f())


class Variance:
    r"""
    Mean and unbiased variance of a sample, computed with numpy. Two estimates can be merged, so that partial results
    computed separately can be reduced in any order.

    The error is the standard error of the mean, :math:`\sqrt{s^2 / n}`, where :math:`s^2` is the unbiased sample
    variance.

    >>> Variance([0.0, 1.0]).mean
    0.5
    >>> Variance([0.0, 1.0]).error
    0.5

    :param values: values of the sample
    """
    def __init__(self, values: Iterable[float] = ()):
        sample = np.fromiter(values, dtype=float)
        self.count = sample.size
        self.mean = float(sample.mean()) if sample.size else 0.0
        self.variance = float(sample.var(ddof=1)) if sample.size > 1 else 0.0

    @classmethod
    def from_moments(cls, count: int, mean: float, variance: float) -> "Variance":
        """Creates the estimate of a sample that was already summarised"""
        estimate = cls()
        estimate.count = int(count)
        estimate.mean = float(mean)
        estimate.variance = float(variance) if count > 1 else 0.0
        return estimate

    def merge(self, other: "Variance") -> "Variance":
        """
        Adds every value seen by `other` to this sample.

        :param other: estimate of another sample
        :return: this estimate, updated in place
        """
        if other.count == 0:
            return self
        total = self.count + other.count
        delta = other.mean - self.mean
        squares = (
            self.variance * max(self.count - 1, 0)
            + other.variance * (other.count - 1)
            + np.square(delta) * self.count * other.count / total
        )
        self.mean = float(self.mean + delta * other.count / total)
        self.variance = float(squares / (total - 1)) if total > 1 else 0.0
        self.count = total
        return self

    @property
    def error(self) -> float:
        """Standard error of the mean, zero for samples with less than two values"""
        if self.count < 2:
            return 0.0
        return float(np.sqrt(self.variance / self.count))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Variance):
            return NotImplemented
        return (self.count, self.mean, self.variance) == (other.count, other.mean, other.variance)

    def __repr__(self):
        return f"Variance(count={self.count}, mean={self.mean}, error={self.error})"
