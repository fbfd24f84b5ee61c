"""Fuzzy target interval for scenario difficulty.

A target success probability p maps to a scenario rating through
  beta = theta + ln((1 - p) / p)
so a higher target probability means an easier (lower rated) scenario.

The interval has four points. Two draws from Normal(mean, sd) form the
core; one lower-tail draw below the core and one upper-tail draw above it
form the support. All four probabilities stay within [0.001, 0.999].
"""
import math

from config.settings import PROBABILITY_LIMITS

P_MIN = PROBABILITY_LIMITS['lower']
P_MAX = PROBABILITY_LIMITS['upper']


def probability_to_beta(theta, p):
    """Scenario rating at which a player rated theta succeeds with probability p."""
    return theta + math.log((1.0 - p) / p)


def _clamp(p):
    return max(P_MIN, min(P_MAX, p))


def sample_core_probabilities(distribution, rng):
    """Two ascending probabilities bounding the core of the interval."""
    core = []
    while len(core) < 2:
        p = rng.normal(distribution.mean, distribution.sd)
        # Accepts every draw whenever lower_limit < upper_limit
        if p > distribution.lower_limit or p < distribution.upper_limit:
            core.append(_clamp(p))
    return sorted(core)


def sample_support_probabilities(distribution, core_lower, core_upper, rng):
    """Probabilities bounding the support, strictly outside the core draws."""
    spread = distribution.sd_multiplier * distribution.sd
    lower_mean = max(distribution.mean - spread, P_MIN)
    upper_mean = min(distribution.mean + spread, P_MAX)

    while True:
        support_lower = rng.normal(lower_mean, distribution.sd, tail='lower')
        if support_lower < core_lower:
            break
    while True:
        support_upper = rng.normal(upper_mean, distribution.sd, tail='upper')
        if support_upper > core_upper:
            break

    return max(support_lower, P_MIN), min(support_upper, P_MAX)


def sample_band_probabilities(distribution, rng):
    """[support_lower, core_lower, core_upper, support_upper] as probabilities."""
    core_lower, core_upper = sample_core_probabilities(distribution, rng)
    support_lower, support_upper = sample_support_probabilities(
        distribution, core_lower, core_upper, rng)
    return [support_lower, core_lower, core_upper, support_upper]


def target_beta_band(theta, distribution, rng):
    """Fuzzy interval of scenario ratings for a player rated theta.

    Returns [lower_support, lower_core, upper_core, upper_support], ascending.
    """
    probabilities = sample_band_probabilities(distribution, rng)
    return sorted(probability_to_beta(theta, p) for p in probabilities)
