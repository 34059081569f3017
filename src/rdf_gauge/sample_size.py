"""
Sample Size Calculation

Sizes the entity list so a success proportion is estimated within a margin
of error at a given confidence level.
"""

from math import ceil
from statistics import NormalDist


def z_value(confidence: float) -> float:
    """
    Inverse of the standard normal CDF at the confidence level

    Args:
        confidence: Confidence level (e.g., 0.95)

    Returns:
        z such that P(Z <= z) = confidence
    """
    if not 0.0 < confidence < 1.0:
        raise ValueError("confidence must be between 0 and 1 (exclusive)")
    return NormalDist().inv_cdf(confidence)


def calculate_sample_size(
    confidence_level: float,
    margin_of_error: float,
    estimated_proportion: float = 0.5,
) -> int:
    """
    Required sample size for estimating a proportion

    n = ceil((z / e)^2 * p * (1 - p))

    Args:
        confidence_level: Desired confidence level (e.g., 0.95)
        margin_of_error: Desired margin of error (e.g., 0.05)
        estimated_proportion: Estimated proportion of success (default 0.5)

    Returns:
        Required number of samples (0.95 / 0.05 / 0.5 -> 271)
    """
    if margin_of_error <= 0:
        raise ValueError("margin_of_error must be positive")
    if not 0.0 <= estimated_proportion <= 1.0:
        raise ValueError("estimated_proportion must be between 0 and 1")
    z = z_value(confidence_level)
    return int(ceil((z / margin_of_error) ** 2 * estimated_proportion * (1 - estimated_proportion)))
