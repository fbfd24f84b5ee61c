"""Actual and expected performance scores.

Score model with response time weighting:
  a = 1 / max_duration                              (discrimination)
  actual = (2 * correct - 1) * a * (max_duration - rt)    in [-1, 1]
  d = theta - beta                                  (0.001 when exactly 0)
  expected = w * (e^(2wd) + 1) / (e^(2wd) - 1) - 1/d,  w = a * max_duration
"""
import logging
import math

from config.settings import SCORE_ERROR_CODE

logger = logging.getLogger(__name__)

ZERO_DIFFERENCE = 0.001


def validate_correct_answer(correct_answer):
    if correct_answer != 0 and correct_answer != 1:
        logger.error("In validate_correct_answer: Accuracy should be either 0 or 1. "
                     "Current value is '%s'.", correct_answer)
        return False
    return True


def validate_response_time(response_time):
    if response_time <= 0:
        logger.error("In validate_response_time: Response time cannot be 0 or negative. "
                     "Current value is '%s'.", response_time)
        return False
    return True


def validate_max_duration(max_duration):
    if max_duration <= 0:
        logger.error("In validate_max_duration: Max playable duration cannot be 0 or negative. "
                     "Current value is '%s'.", max_duration)
        return False
    return True


def discrimination_param(max_duration):
    return 1.0 / max_duration


def actual_score(correct_answer, response_time, max_duration):
    """Score for one answer: fast correct answers approach 1, fast wrong ones -1.

    Returns SCORE_ERROR_CODE if any argument is invalid. A response time
    longer than max_duration is clamped to max_duration.
    """
    if not (validate_correct_answer(correct_answer)
            and validate_response_time(response_time)
            and validate_max_duration(max_duration)):
        logger.error("In actual_score: Cannot calculate score. Invalid parameter detected. "
                     "Returning error code '%s'.", SCORE_ERROR_CODE)
        return SCORE_ERROR_CODE

    if response_time > max_duration:
        logger.warning("In actual_score: Response time '%s' exceeds the item's max time "
                       "duration '%s'. Setting the response time to item's max duration.",
                       response_time, max_duration)
        response_time = max_duration

    a = discrimination_param(max_duration)
    return (2.0 * correct_answer - 1.0) * (a * max_duration - a * response_time)


def expected_score(theta, beta, max_duration):
    """Expected score of a player rated theta on a scenario rated beta."""
    if not validate_max_duration(max_duration):
        logger.error("In expected_score: Cannot calculate score. Invalid parameter detected. "
                     "Returning error code '%s'.", SCORE_ERROR_CODE)
        return SCORE_ERROR_CODE

    weight = discrimination_param(max_duration) * max_duration

    difference = theta - beta
    if difference == 0:
        difference = ZERO_DIFFERENCE

    # (e^(2wd) + 1) / (e^(2wd) - 1) == coth(wd); tanh keeps large gaps from overflowing exp
    return weight / math.tanh(weight * difference) - 1.0 / difference
