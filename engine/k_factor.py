"""Adaptive K-factors from both parties' uncertainties.

  K_self = k_const * (1 + k_up * u_self - k_down * u_other)

Own uncertainty widens the rating swing, the opponent's narrows it.
"""
from config.settings import TUNING_DEFAULTS


def k_factor(u_self, u_other,
             k_const=TUNING_DEFAULTS['k_const'],
             k_up=TUNING_DEFAULTS['k_up'],
             k_down=TUNING_DEFAULTS['k_down']):
    return k_const * (1 + (k_up * u_self) - (k_down * u_other))


def k_factor_player(u_player, u_scenario, **weights):
    return k_factor(u_player, u_scenario, **weights)


def k_factor_scenario(u_scenario, u_player, **weights):
    return k_factor(u_scenario, u_player, **weights)
