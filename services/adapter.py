"""Difficulty adapter: rate plays and recommend the next scenario.

Each adapter owns its configuration, random source, ratings store and
gameplay log, so adapters for different games never share state.
Invalid input is logged and turns the call into a no-op; nothing is raised
to the caller.
"""
import logging
import sqlite3
from datetime import datetime, timezone

from config.settings import ADAPTER_DEFAULTS, ADAPTER_TYPE, TARGET_DISTRIBUTION_DEFAULTS
from db.database import execute_many_db
from engine import elo, legacy, score
from engine.next_scenario import select_scenario
from engine.rng import RandomSource
from engine.target_band import target_beta_band
from engine.tuning import (
    AdapterTuning, TargetDistribution, validate_probability, validate_sd_multiplier,
    validate_strategy, validate_target_distribution, validate_tuning,
)
from services.gameplay_log import GameplayLog
from services.ratings_store import RatingsStore, UnknownEntityError

logger = logging.getLogger(__name__)


def _utc_now():
    return datetime.now(timezone.utc)


def _tuning_property(name, doc):
    def getter(self):
        return getattr(self.tuning, name)

    def setter(self, value):
        self.set_tuning(**{name: value})

    return property(getter, setter, doc=doc)


class DifficultyAdapter:
    """ELO-based matching of scenario difficulty to player skill.

    Args:
        store: RatingsStore holding player/scenario records (new one if None).
        history: GameplayLog receiving one record per rating update.
        rng: RandomSource for band sampling and tie-breaks.
        seed: seed for a new RandomSource when rng is None.
        clock: zero-argument callable returning the current UTC datetime.
    """

    def __init__(self, store=None, history=None, rng=None, seed=None, clock=None):
        self.store = store if store is not None else RatingsStore()
        self.history = history if history is not None else GameplayLog()
        self.rng = rng if rng is not None else RandomSource(seed)
        self._clock = clock or _utc_now

        self.distribution = TargetDistribution()
        self.tuning = AdapterTuning()
        self._provisional_uncertainty = ADAPTER_DEFAULTS['provisional_uncertainty']
        self._matching_strategy = ADAPTER_DEFAULTS['matching_strategy']

    @property
    def adapter_type(self):
        return ADAPTER_TYPE

    @property
    def provisional_theta(self):
        return ADAPTER_DEFAULTS['provisional_theta']

    @property
    def score_error_code(self):
        return score.SCORE_ERROR_CODE

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_target_distribution(self, mean, sd, lower_limit, upper_limit):
        """Set all four distribution parameters, or none of them.

        Any invalid value reverts the whole distribution to its defaults.
        Returns True if the given values were accepted.
        """
        distribution, reasons = validate_target_distribution(
            mean, sd, lower_limit, upper_limit, self.distribution.sd_multiplier)
        for reason in reasons:
            logger.warning("In set_target_distribution: %s", reason)

        if distribution is None:
            logger.warning("In set_target_distribution: Invalid value combination is found. "
                           "Setting parameters to their default values.")
            self.set_default_target_distribution()
            return False

        self.distribution = distribution
        return True

    def set_default_target_distribution(self):
        self.distribution = TargetDistribution(
            TARGET_DISTRIBUTION_DEFAULTS['mean'],
            TARGET_DISTRIBUTION_DEFAULTS['sd'],
            TARGET_DISTRIBUTION_DEFAULTS['lower_limit'],
            TARGET_DISTRIBUTION_DEFAULTS['upper_limit'],
            self.distribution.sd_multiplier,
        )

    @property
    def fi_sd_multiplier(self):
        """Spread of the support band, in target-distribution SDs."""
        return self.distribution.sd_multiplier

    @fi_sd_multiplier.setter
    def fi_sd_multiplier(self, value):
        accepted, reasons = validate_sd_multiplier(value)
        for reason in reasons:
            logger.warning("In fi_sd_multiplier: %s Setting to the default value '%s'.",
                           reason, accepted)
        self.distribution = TargetDistribution(
            self.distribution.mean, self.distribution.sd,
            self.distribution.lower_limit, self.distribution.upper_limit, accepted,
        )

    def set_tuning(self, **fields):
        """Update any of max_delay, max_play, k_const, k_up, k_down.

        Each field is checked on its own; an invalid one takes its default.
        """
        self.tuning, reasons = validate_tuning(self.tuning, **fields)
        for reason in reasons:
            logger.warning("In set_tuning: %s", reason)

    max_delay = _tuning_property('max_delay', "Days of inactivity that restore full uncertainty.")
    max_play = _tuning_property('max_play', "Plays needed to go from full to zero uncertainty.")
    k_const = _tuning_property('k_const', "K-factor when neither party is uncertain.")
    k_up = _tuning_property('k_up', "Weight of own uncertainty in the K-factor.")
    k_down = _tuning_property('k_down', "Weight of the opponent's uncertainty in the K-factor.")

    @property
    def provisional_uncertainty(self):
        return self._provisional_uncertainty

    @provisional_uncertainty.setter
    def provisional_uncertainty(self, value):
        default = ADAPTER_DEFAULTS['provisional_uncertainty']
        accepted, reasons = validate_probability(value, default)
        for reason in reasons:
            logger.warning("In provisional_uncertainty: %s Setting to the default value '%s'.",
                           reason, default)
        self._provisional_uncertainty = accepted

    @property
    def matching_strategy(self):
        return self._matching_strategy

    @matching_strategy.setter
    def matching_strategy(self, name):
        accepted, reasons = validate_strategy(name, ADAPTER_DEFAULTS['matching_strategy'])
        for reason in reasons:
            logger.warning("In matching_strategy: %s Using '%s'.", reason, accepted)
        self._matching_strategy = accepted

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def add_player(self, game_id, player_id, rating=None):
        """Register a player with provisional rating and uncertainty."""
        return self.store.add_player(
            ADAPTER_TYPE, game_id, player_id,
            rating=self.provisional_theta if rating is None else rating,
            uncertainty=self._provisional_uncertainty,
        )

    def add_scenario(self, game_id, scenario_id, time_limit, rating=None):
        """Register a scenario; time_limit is the max response time in ms."""
        return self.store.add_scenario(
            ADAPTER_TYPE, game_id, scenario_id, time_limit,
            rating=self.provisional_theta if rating is None else rating,
            uncertainty=self._provisional_uncertainty,
        )

    # ------------------------------------------------------------------
    # Rating update
    # ------------------------------------------------------------------

    def update_ratings(self, game_id, player_id, scenario_id, response_time,
                       correct_answer, persist=False):
        """Update player and scenario ratings after one play.

        Args:
            response_time: milliseconds taken to answer, > 0.
            correct_answer: 1 for success, 0 for failure.
            persist: also save ratings and the gameplay record to the DB.

        Returns the new gameplay record dict, or None if the update was aborted.
        """
        if not (score.validate_correct_answer(correct_answer)
                and score.validate_response_time(response_time)):
            logger.error("In update_ratings: Unable to update ratings. "
                         "Invalid response time and/or accuracy detected.")
            return None

        try:
            player = self.store.get_player(ADAPTER_TYPE, game_id, player_id)
        except UnknownEntityError:
            logger.error("In update_ratings: Unable to update ratings. "
                         "Player data is missing for '%s' in game '%s'.", player_id, game_id)
            return None

        try:
            scenario = self.store.get_scenario(ADAPTER_TYPE, game_id, scenario_id)
        except UnknownEntityError:
            logger.error("In update_ratings: Unable to update ratings. "
                         "Scenario data is missing for '%s' in game '%s'.", scenario_id, game_id)
            return None

        now = self._clock()
        result = elo.compute_update(player, scenario, correct_answer, response_time,
                                    now, self.tuning)

        try:
            record = self.history.build_record(
                ADAPTER_TYPE, game_id, player_id, scenario_id, response_time, correct_answer,
                result['player']['rating'], result['scenario']['rating'], now, persist,
            )
            if persist:
                statements = self.store.save_statements(
                    pending_players={(ADAPTER_TYPE, game_id, player_id): result['player']},
                    pending_scenarios={(ADAPTER_TYPE, game_id, scenario_id): result['scenario']},
                )
                statements.append(self.history.insert_statement(record))
                execute_many_db(statements)
        except sqlite3.Error as e:
            logger.error("In update_ratings: Unable to update ratings. "
                         "Saving to the database failed: %s", e)
            return None

        self.store.commit_update(ADAPTER_TYPE, game_id, player_id, result['player'],
                                 scenario_id, result['scenario'])

        logger.debug("Rated play of '%s' on '%s': actual=%.4f expected=%.4f theta=%.4f beta=%.4f",
                     player_id, scenario_id, result['actual'], result['expected'],
                     result['player']['rating'], result['scenario']['rating'])

        return self.history.commit_record(record)

    # ------------------------------------------------------------------
    # Scenario recommendation
    # ------------------------------------------------------------------

    def target_beta_band(self, theta):
        """Fuzzy interval of scenario ratings for a player rated theta."""
        return target_beta_band(theta, self.distribution, self.rng)

    def target_scenario_id(self, game_id, player_id):
        """Recommend the next scenario for a player, or None if that is impossible."""
        try:
            theta = self.store.get_player(ADAPTER_TYPE, game_id, player_id)['rating']
        except UnknownEntityError:
            logger.error("In target_scenario_id: Unable to recommend a scenario. "
                         "Player data is missing for '%s' in game '%s'.", player_id, game_id)
            return None

        scenario_ids = self.store.all_scenario_ids(ADAPTER_TYPE, game_id)
        if not scenario_ids:
            logger.error("In target_scenario_id: No scenarios found for adaptation '%s' "
                         "in game '%s'.", ADAPTER_TYPE, game_id)
            return None

        scenarios = []
        for scenario_id in scenario_ids:
            if not scenario_id:
                logger.error("In target_scenario_id: Null scenario ID found for adaptation "
                             "'%s' in game '%s'.", ADAPTER_TYPE, game_id)
                return None
            record = self.store.get_scenario(ADAPTER_TYPE, game_id, scenario_id)
            scenarios.append({'id': scenario_id, 'rating': record['rating'],
                              'play_count': record['play_count']})

        if self._matching_strategy == 'fuzzy':
            band = self.target_beta_band(theta)
            return select_scenario(band, scenarios, self.rng)

        equation = 'old' if self._matching_strategy == 'legacy_old' else 'new'
        target = legacy.target_beta(theta, self.rng, equation)
        return legacy.closest_scenario(target, scenarios)
