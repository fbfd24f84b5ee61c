"""skillmatch — centralized configuration."""
import os
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DB_PATH = os.environ.get('SKILLMATCH_DB_PATH', os.path.join(BASE_DIR, 'skillmatch.db'))
LOG_LEVEL = os.environ.get('SKILLMATCH_LOG_LEVEL', 'INFO')
LOG_FILE = os.path.join(BASE_DIR, 'skillmatch_debug.log')

ADAPTER_TYPE = 'Game difficulty - Player skill'

# Provisional values for newly created players/scenarios
ADAPTER_DEFAULTS = {
    'provisional_theta': 0.01,
    'provisional_uncertainty': 1.0,
    'provisional_date': '2015-01-01T01:01:01',
    'timestamp_format': '%Y-%m-%dT%H:%M:%S',
    'matching_strategy': 'fuzzy',
}

# Target success-probability distribution for scenario matching
TARGET_DISTRIBUTION_DEFAULTS = {
    'mean': 0.75,
    'sd': 0.1,
    'lower_limit': 0.5,
    'upper_limit': 1.0,
    'sd_multiplier': 1.0,
}

# Uncertainty and K-factor tuning
TUNING_DEFAULTS = {
    'max_delay': 30.0,   # days until uncertainty is back at its maximum
    'max_play': 40.0,    # administrations until uncertainty reaches its minimum
    'k_const': 0.0075,
    'k_up': 4.0,
    'k_down': 0.5,
}

# Any probability fed into the inverse-logistic transform stays within these
PROBABILITY_LIMITS = {
    'lower': 0.001,
    'upper': 0.999,
}

SCORE_ERROR_CODE = -9999.0
