"""Next-scenario selection over a fuzzy difficulty interval.

Algorithm:
1. Bucket every scenario by its rating: core band, support band, or outside.
2. Inside each band keep only the least played scenarios.
   Outside, keep the scenarios closest to the core, then the least played.
3. Pick uniformly at random from core, else support, else outside.
"""


def _keep_least_played(bucket, scenario_id, play_count):
    """Accumulate ids sharing the minimum play count seen so far."""
    if not bucket['ids'] or play_count < bucket['min_play_count']:
        bucket['ids'] = [scenario_id]
        bucket['min_play_count'] = play_count
    elif play_count == bucket['min_play_count']:
        bucket['ids'].append(scenario_id)


def partition_scenarios(band, scenarios):
    """Split scenarios into core/support/out candidate lists.

    Args:
        band: [lower_support, lower_core, upper_core, upper_support], ascending.
        scenarios: iterable of dicts with keys: id, rating, play_count.

    Returns dict with 'core', 'support' and 'out' id lists (possibly empty).
    """
    support_lower, core_lower, core_upper, support_upper = band

    core = {'ids': [], 'min_play_count': 0}
    support = {'ids': [], 'min_play_count': 0}
    out = {'ids': [], 'min_play_count': 0, 'min_distance': 0.0}

    for s in scenarios:
        rating = s['rating']
        play_count = s['play_count']

        if core_lower <= rating <= core_upper:
            _keep_least_played(core, s['id'], play_count)
        elif support_lower <= rating <= support_upper:
            _keep_least_played(support, s['id'], play_count)
        else:
            distance = min(abs(rating - core_lower), abs(rating - core_upper))
            if not out['ids'] or distance < out['min_distance']:
                out['ids'] = [s['id']]
                out['min_distance'] = distance
                out['min_play_count'] = play_count
            elif distance == out['min_distance']:
                _keep_least_played(out, s['id'], play_count)

    return {'core': core['ids'], 'support': support['ids'], 'out': out['ids']}


def select_scenario(band, scenarios, rng):
    """Recommend one scenario id, or None if there are no scenarios."""
    candidates = partition_scenarios(band, scenarios)
    for bucket in ('core', 'support', 'out'):
        if candidates[bucket]:
            return rng.pick(candidates[bucket])
    return None
