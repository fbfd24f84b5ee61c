"""ELO-like rating update with response-time scores and uncertainty-driven K.

Core formulas:
  theta' = theta + K_theta * (actual - expected)
  beta'  = beta  + K_beta  * (expected - actual)
  K      = k_const * (1 + k_up * u_self - k_down * u_other)   (new uncertainties)

Player and scenario exchange rating in opposite directions.
"""
from engine import k_factor, score, uncertainty
from engine.tuning import AdapterTuning


def new_player_rating(theta, k_theta, actual, expected):
    return theta + k_theta * (actual - expected)


def new_scenario_rating(beta, k_beta, actual, expected):
    return beta + k_beta * (expected - actual)


def compute_update(player, scenario, correct_answer, response_time, now,
                   tuning=AdapterTuning()):
    """Compute both entities' next state after one play.

    Args:
        player: dict with rating, play_count, uncertainty, last_played.
        scenario: same keys plus time_limit (ms).
        correct_answer: 0 or 1.
        response_time: milliseconds, > 0.
        now: timezone-aware datetime of the play.

    Returns dict with 'player' and 'scenario' field dicts (rating, play_count,
    uncertainty, k_factor, last_played) plus 'actual' and 'expected' scores.
    Inputs are not modified.
    """
    player_delay = uncertainty.delay_days(player['last_played'], now, tuning.max_delay)
    scenario_delay = uncertainty.delay_days(scenario['last_played'], now, tuning.max_delay)

    actual = score.actual_score(correct_answer, response_time, scenario['time_limit'])
    expected = score.expected_score(player['rating'], scenario['rating'],
                                    scenario['time_limit'])

    player_u = uncertainty.next_uncertainty(
        player['uncertainty'], player_delay, tuning.max_play, tuning.max_delay)
    scenario_u = uncertainty.next_uncertainty(
        scenario['uncertainty'], scenario_delay, tuning.max_play, tuning.max_delay)

    weights = tuning.k_weights()
    player_k = k_factor.k_factor_player(player_u, scenario_u, **weights)
    scenario_k = k_factor.k_factor_scenario(scenario_u, player_u, **weights)

    return {
        'actual': actual,
        'expected': expected,
        'player': {
            'rating': new_player_rating(player['rating'], player_k, actual, expected),
            'play_count': player['play_count'] + 1,
            'uncertainty': player_u,
            'k_factor': player_k,
            'last_played': now,
        },
        'scenario': {
            'rating': new_scenario_rating(scenario['rating'], scenario_k, actual, expected),
            'play_count': scenario['play_count'] + 1,
            'uncertainty': scenario_u,
            'k_factor': scenario_k,
            'last_played': now,
        },
    }
