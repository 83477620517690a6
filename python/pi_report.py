"""Statistics over the replicate estimates, with a 99% Student-t confidence interval."""
import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from pi_settings import TRUE_VALUE

# Student law coefficients (99% confidence), for k in [0-30] U {40, 50, 60, 80, 100, 120, inf}
STUDENT = (
    math.inf, 63.66, 9.925, 5.841, 4.604, 4.032, 3.707, 3.499, 3.355, 3.25, 3.169,
    3.106, 3.055, 3.012, 2.977, 2.947, 2.921, 2.898, 2.878, 2.861, 2.845,
    2.831, 2.819, 2.807, 2.797, 2.787, 2.779, 2.771, 2.763, 2.756, 2.75,
    2.704, 2.678, 2.66, 2.639, 2.626, 2.617, 2.576,
)


class InsufficientReplicatesError(ValueError):
    """Fewer than two estimates: the unbiased variance is undefined."""


def student_coefficient(replicates):
    if replicates < 0:
        raise ValueError(f"replicates must be non-negative, got {replicates}")
    if replicates <= 30:
        return STUDENT[replicates]  # 0 gives inf: the interval covers every real number
    if replicates <= 60:
        return STUDENT[27 + replicates // 10]  # 10-sized buckets
    if replicates < 140:
        return STUDENT[30 + replicates // 20]  # 20-sized buckets
    return STUDENT[-1]


@dataclass(frozen=True)
class AggregateStatistics:
    replicates: int
    true_value: float
    mean: float
    variance: float
    unbiased_variance: float
    standard_deviation: float
    absolute_error: float
    relative_error: float
    standard_error: float
    student_coefficient: float
    confidence_radius: float
    confidence_interval: Tuple[float, float]
    location_percent: float

    @property
    def contains_true_value(self):
        low, high = self.confidence_interval
        return low <= self.true_value <= high


def interval_location(error, radius):
    """Where the true value sits in the interval: 100 at the center, 0 on a bound, negative outside."""
    if radius == 0.0:
        # every estimate identical: the interval is a single point
        return 100.0 if error == 0.0 else -math.inf
    location = (error + radius) * 100.0 / radius
    if location > 100.0:
        location = 200.0 - location
    return location


def summarize(estimates, true_value=TRUE_VALUE):
    values = np.asarray(estimates, dtype=np.float64)
    replicates = values.size
    if replicates < 2:
        raise InsufficientReplicatesError(
            f"at least 2 replicates are needed for an unbiased variance, got {replicates}"
        )

    mean = float(np.mean(values))
    # mean of squares minus squared mean can round slightly below zero
    variance = max(float(np.mean(values * values)) - mean * mean, 0.0)
    unbiased_variance = replicates * variance / (replicates - 1)
    error = true_value - mean

    coefficient = student_coefficient(replicates)
    radius = math.sqrt(unbiased_variance / replicates) * coefficient

    return AggregateStatistics(
        replicates=replicates,
        true_value=true_value,
        mean=mean,
        variance=variance,
        unbiased_variance=unbiased_variance,
        standard_deviation=math.sqrt(variance),
        absolute_error=error,
        relative_error=100.0 * error / true_value,
        standard_error=math.sqrt(variance / replicates),
        student_coefficient=coefficient,
        confidence_radius=radius,
        confidence_interval=(mean - radius, mean + radius),
        location_percent=interval_location(error, radius),
    )


def format_report(stats):
    low, high = stats.confidence_interval
    lines = [
        f"Results for {stats.replicates} replicates:",
        f"\t- Mean :                         \t{stats.mean:.10f}",
        f"\t- Variance :                     \t{stats.variance:.10f}",
        f"\t- Unbiased variance :            \t{stats.unbiased_variance:.10f}",
        f"\t- Standard deviation :           \t{stats.standard_deviation:.10f}",
        f"\t- Absolute error : 4π/3 - mean : \t{stats.absolute_error:.10f}",
        f"\t- Relative error : Err / 4π/3 :  \t{stats.relative_error:.10f} %",
        f"\t- Standard error :               \t{stats.standard_error:.10f}",
        f"\t- Confidence interval :          \t[ {low:.10f} ; {high:.10f} ]",
        f"\t- 4π/3 location in interval :    \t{stats.location_percent:.10f} %",
        f"\t- Confidence radius :            \t{stats.confidence_radius:.10f}",
    ]
    return "\n".join(lines)
