"""Single-band matching kept for offline research comparisons only.

One target probability is drawn from the default target distribution and
turned into a single target rating. The closest scenario wins; ties go to
the less played scenario, then to the first one seen.

Two conversions exist:
  'old':  beta = theta + ln(p / (1 - p))
  'new':  beta = theta + ln((1 - p) / p)
"""
import math

from config.settings import TARGET_DISTRIBUTION_DEFAULTS

EQUATIONS = ('old', 'new')


def sample_target_probability(rng):
    mean = TARGET_DISTRIBUTION_DEFAULTS['mean']
    sd = TARGET_DISTRIBUTION_DEFAULTS['sd']
    lower = TARGET_DISTRIBUTION_DEFAULTS['lower_limit']
    upper = TARGET_DISTRIBUTION_DEFAULTS['upper_limit']
    while True:
        p = rng.normal(mean, sd)
        if not (p <= lower or p >= upper or p == 1 or p == 0):
            return p


def target_beta(theta, rng, equation='new'):
    p = sample_target_probability(rng)
    if equation == 'old':
        return theta + math.log(p / (1 - p))
    return theta + math.log((1 - p) / p)


def closest_scenario(target, scenarios):
    """Id of the scenario rated closest to target, or None if there are none."""
    best_id, best_distance, best_play_count = None, 0.0, 0
    for s in scenarios:
        distance = abs(s['rating'] - target)
        if best_id is None or distance < best_distance:
            best_id, best_distance, best_play_count = s['id'], distance, s['play_count']
        elif distance == best_distance and s['play_count'] < best_play_count:
            best_id, best_play_count = s['id'], s['play_count']
    return best_id
