"""Rating uncertainty: each play lowers it, each idle day raises it.

  u' = clamp(u - 1/max_play + delay_days/max_delay, 0, 1)
"""
from datetime import datetime, timezone

from config.settings import TUNING_DEFAULTS


def next_uncertainty(current, delay_days,
                     max_play=TUNING_DEFAULTS['max_play'],
                     max_delay=TUNING_DEFAULTS['max_delay']):
    """Uncertainty after one more play following delay_days of inactivity."""
    new_u = current - (1.0 / max_play) + (delay_days / max_delay)
    return max(0.0, min(1.0, new_u))


def delay_days(last_played, now=None, max_delay=TUNING_DEFAULTS['max_delay']):
    """Whole days between last_played and now, capped at max_delay."""
    if now is None:
        now = datetime.now(timezone.utc)
    days = (now - last_played).days
    if days > max_delay:
        return float(max_delay)
    return float(max(days, 0))
