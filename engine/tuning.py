"""Adapter configuration objects and their validation.

Validation is pure: each validate_* function returns the accepted value(s)
plus a list of human-readable reasons for anything it rejected. Callers
decide how to log and commit.
"""
from dataclasses import dataclass, replace

from config.settings import TARGET_DISTRIBUTION_DEFAULTS, TUNING_DEFAULTS

MATCHING_STRATEGIES = ('fuzzy', 'legacy_old', 'legacy_new')


@dataclass(frozen=True)
class TargetDistribution:
    """Target success-probability distribution used for the fuzzy interval."""
    mean: float = TARGET_DISTRIBUTION_DEFAULTS['mean']
    sd: float = TARGET_DISTRIBUTION_DEFAULTS['sd']
    lower_limit: float = TARGET_DISTRIBUTION_DEFAULTS['lower_limit']
    upper_limit: float = TARGET_DISTRIBUTION_DEFAULTS['upper_limit']
    sd_multiplier: float = TARGET_DISTRIBUTION_DEFAULTS['sd_multiplier']


@dataclass(frozen=True)
class AdapterTuning:
    max_delay: float = TUNING_DEFAULTS['max_delay']
    max_play: float = TUNING_DEFAULTS['max_play']
    k_const: float = TUNING_DEFAULTS['k_const']
    k_up: float = TUNING_DEFAULTS['k_up']
    k_down: float = TUNING_DEFAULTS['k_down']

    def k_weights(self):
        return {'k_const': self.k_const, 'k_up': self.k_up, 'k_down': self.k_down}


def validate_target_distribution(mean, sd, lower_limit, upper_limit,
                                 sd_multiplier=TARGET_DISTRIBUTION_DEFAULTS['sd_multiplier']):
    """Check the four distribution parameters as one unit.

    Returns (TargetDistribution, []) when every value is acceptable, or
    (None, reasons) when at least one is not. sd_multiplier is carried
    over unchanged; it has its own validator.
    """
    reasons = []

    if mean <= 0 or mean >= 1:
        reasons.append(
            f"The target distribution mean '{mean}' is not within the open interval (0, 1).")

    if sd <= 0 or sd >= 1:
        reasons.append(
            f"The target distribution standard deviation '{sd}' is not within the open interval (0, 1).")

    if lower_limit < 0 or lower_limit > 1:
        reasons.append(
            f"The lower limit of distribution '{lower_limit}' is not within the closed interval [0, 1].")
    elif lower_limit >= mean:
        reasons.append(
            f"The lower limit of distribution '{lower_limit}' is bigger than or equal to "
            f"the mean of the distribution '{mean}'.")

    if upper_limit < 0 or upper_limit > 1:
        reasons.append(
            f"The upper limit of distribution '{upper_limit}' is not within the closed interval [0, 1].")
    elif upper_limit <= mean:
        reasons.append(
            f"The upper limit of distribution '{upper_limit}' is less than or equal to "
            f"the mean of the distribution '{mean}'.")

    if reasons:
        return None, reasons
    return TargetDistribution(mean, sd, lower_limit, upper_limit, sd_multiplier), []


def validate_sd_multiplier(value):
    if value <= 0:
        return TARGET_DISTRIBUTION_DEFAULTS['sd_multiplier'], [
            f"The standard deviation multiplier '{value}' is less than or equal to 0."]
    return value, []


# field -> (is_valid, reason template)
_TUNING_RULES = {
    'max_delay': (lambda v: v > 0,
                  "The maximum number of delay days '{}' should be higher than 0."),
    'max_play': (lambda v: v > 0,
                 "The maximum administration parameter '{}' should be higher than 0."),
    'k_const': (lambda v: v >= 0,
                "K constant '{}' cannot be a negative number."),
    'k_up': (lambda v: v >= 0,
             "The upward uncertainty weight '{}' cannot be a negative number."),
    'k_down': (lambda v: v >= 0,
               "The downward uncertainty weight '{}' cannot be a negative number."),
}


def validate_tuning_field(name, value):
    """Returns (accepted_value, reasons). An invalid value becomes the field default."""
    if name not in _TUNING_RULES:
        raise ValueError(f"Unknown tuning parameter: {name}")
    is_valid, template = _TUNING_RULES[name]
    if is_valid(value):
        return value, []
    default = TUNING_DEFAULTS[name]
    return default, [template.format(value) + f" Setting to the default value '{default}'."]


def validate_tuning(current, **fields):
    """Apply fields onto an existing AdapterTuning, each field checked on its own.

    Returns (new AdapterTuning, reasons).
    """
    accepted = {}
    reasons = []
    for name, value in fields.items():
        accepted[name], field_reasons = validate_tuning_field(name, value)
        reasons.extend(field_reasons)
    return replace(current, **accepted), reasons


def validate_probability(value, default):
    if value < 0 or value > 1:
        return default, [f"Provisional uncertainty value '{value}' should be between 0 and 1."]
    return value, []


def validate_strategy(name, default='fuzzy'):
    if name not in MATCHING_STRATEGIES:
        return default, [f"Unknown matching strategy '{name}'. "
                         f"Expected one of {', '.join(MATCHING_STRATEGIES)}."]
    return name, []
