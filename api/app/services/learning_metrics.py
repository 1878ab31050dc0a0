"""
Learning metrics: thresholds, mastery scoring and review scheduling.

These are pure functions over plain numbers so they can be shared by the
practice flow, flashcard reviews and statistics.
"""
import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from app.models.enums import LearningStatus

logger = logging.getLogger(__name__)


# Learning thresholds
MIN_CORRECT_ATTEMPTS_TO_LEARN = 3
MIN_CONSECUTIVE_CORRECT_FOR_MASTERY = 2
MAX_WRONG_ATTEMPTS_BEFORE_DIFFICULT = 3
MIN_ACCURACY_FOR_LEARNED = 80
MIN_MASTERY_SCORE = 85

# Review intervals in days, indexed by review count
SPACED_REPETITION_INTERVALS = [1, 3, 7, 14, 30, 60]

SESSION_SUCCESS_THRESHOLD = 70
SESSION_EXCELLENT_THRESHOLD = 90

# Practice configuration
DEFAULT_WORDS_PER_SESSION = 10
MIN_WORDS_FOR_SESSION = 3
MAX_WORDS_PER_SESSION = 50
TYPING_TIME_LIMIT = 30  # seconds per word
DEFAULT_SESSION_TIME_LIMIT = 900  # seconds
POINTS_PER_CORRECT_ANSWER = 10
POINTS_PENALTY_PER_WRONG_ATTEMPT = 2
BONUS_POINTS_FOR_SPEED = 5
SPEED_BONUS_THRESHOLD = 10  # seconds
PARTIAL_CREDIT_POINTS = 5

# Status rules
MARK_AS_DIFFICULT = {
    'max_wrong_attempts': 3,
    'max_accuracy': 40,
}
MARK_AS_MASTERED = {
    'min_mastery_score': 85,
    'min_consecutive_correct': 5,
    'min_days_since_last_review': 7,
}

# Typing validation
TYPO_TOLERANCE = 10  # percent
ENABLE_PARTIAL_CREDIT = True
MIN_CHARACTERS_FOR_PARTIAL_CREDIT = 3

DIFFICULTY_LEVELS: Dict[int, Dict] = {
    1: {'words_per_session': 5, 'time_limit': 45, 'allow_partial_credit': True, 'show_hints': True},
    2: {'words_per_session': 8, 'time_limit': 35, 'allow_partial_credit': True, 'show_hints': True},
    3: {'words_per_session': 10, 'time_limit': 30, 'allow_partial_credit': True, 'show_hints': False},
    4: {'words_per_session': 15, 'time_limit': 25, 'allow_partial_credit': False, 'show_hints': False},
    5: {'words_per_session': 20, 'time_limit': 20, 'allow_partial_credit': False, 'show_hints': False},
}
DEFAULT_DIFFICULTY_LEVEL = 3


def calculate_accuracy(correct: int, total: int) -> int:
    """Percentage of correct answers, rounded; 0 when nothing was answered."""
    if total <= 0:
        return 0
    return round(correct / total * 100)


def calculate_mastery_score(
    accuracy: float,
    consecutive_correct: int,
    average_response_time: float,
    review_count: int,
) -> int:
    """
    Combine accuracy with streak, speed and review bonuses into a 0-100 score.

    Args:
        accuracy: Accuracy percentage (0-100)
        consecutive_correct: Current streak of correct answers
        average_response_time: Average response time in seconds
        review_count: Number of reviews so far

    Returns:
        Mastery score capped at 100
    """
    score = accuracy
    score += min(consecutive_correct * 2, 10)
    if average_response_time <= SPEED_BONUS_THRESHOLD:
        score += 5
    score += min(review_count * 0.5, 5)
    return min(round(score), 100)


def determine_learning_status(
    correct_attempts: int,
    total_attempts: int,
    consecutive_correct: int,
    mastery_score: float,
) -> LearningStatus:
    """
    Decide the learning status from attempt counters.

    Rules are checked in order: mastery, learned thresholds, difficulty,
    then in-progress for anything attempted at least once.
    """
    accuracy = calculate_accuracy(correct_attempts, total_attempts)
    wrong_attempts = total_attempts - correct_attempts

    if (
        mastery_score >= MARK_AS_MASTERED['min_mastery_score']
        and consecutive_correct >= MARK_AS_MASTERED['min_consecutive_correct']
    ):
        return LearningStatus.LEARNED

    if (
        correct_attempts >= MIN_CORRECT_ATTEMPTS_TO_LEARN
        and accuracy >= MIN_ACCURACY_FOR_LEARNED
        and consecutive_correct >= MIN_CONSECUTIVE_CORRECT_FOR_MASTERY
    ):
        return LearningStatus.LEARNED

    if total_attempts > 0 and (
        wrong_attempts >= MARK_AS_DIFFICULT['max_wrong_attempts']
        or accuracy <= MARK_AS_DIFFICULT['max_accuracy']
    ):
        return LearningStatus.DIFFICULT

    if total_attempts > 0:
        return LearningStatus.IN_PROGRESS

    return LearningStatus.NOT_STARTED


def calculate_next_review_date(
    review_count: int,
    accuracy: float,
    last_review: Optional[datetime] = None,
) -> datetime:
    """
    Pick the next review date from SPACED_REPETITION_INTERVALS.

    Low accuracy (< 70) steps one interval back, high accuracy (>= 90)
    one interval forward.
    """
    if last_review is None:
        last_review = datetime.utcnow()

    last_index = len(SPACED_REPETITION_INTERVALS) - 1
    index = min(review_count, last_index)
    if accuracy < SESSION_SUCCESS_THRESHOLD:
        index = max(0, index - 1)
    elif accuracy >= SESSION_EXCELLENT_THRESHOLD:
        index = min(last_index, index + 1)

    return last_review + timedelta(days=SPACED_REPETITION_INTERVALS[index])


def is_typing_approximately_correct(
    user_input: str,
    correct_word: str,
    tolerance: int = TYPO_TOLERANCE,
) -> Tuple[bool, int, bool]:
    """
    Compare a typed answer with the expected word, allowing small typos.

    Args:
        user_input: What the user typed
        correct_word: The expected word
        tolerance: Allowed percentage of mismatched characters

    Returns:
        Tuple of (is_correct, accuracy percentage, partial_credit)
    """
    typed = (user_input or "").strip().lower()
    expected = (correct_word or "").strip().lower()

    if typed == expected:
        return True, 100, False

    max_length = max(len(typed), len(expected))
    if max_length == 0:
        return False, 0, False

    matches = sum(1 for a, b in zip(typed, expected) if a == b)
    accuracy = matches / max_length * 100

    is_correct = accuracy >= 100 - tolerance
    partial_credit = (
        not is_correct
        and ENABLE_PARTIAL_CREDIT
        and accuracy >= 50
        and len(typed) >= MIN_CHARACTERS_FOR_PARTIAL_CREDIT
    )
    return is_correct, round(accuracy), partial_credit


def get_difficulty_settings(level: Optional[int]) -> Dict:
    """Settings of a difficulty level (1-5), falling back to level 3."""
    return DIFFICULTY_LEVELS.get(level, DIFFICULTY_LEVELS[DEFAULT_DIFFICULTY_LEVEL])


def clamp_words_count(count: Optional[int], difficulty_level: Optional[int] = None) -> int:
    """Words for a session: the level's default when not given, kept within MIN_WORDS_FOR_SESSION..MAX_WORDS_PER_SESSION."""
    if count is None:
        count = get_difficulty_settings(difficulty_level)['words_per_session']
    return max(MIN_WORDS_FOR_SESSION, min(count, MAX_WORDS_PER_SESSION))


def calculate_points(is_correct: bool, partial_credit: bool, response_time_ms: Optional[int]) -> int:
    """Points for one typed answer: base, speed bonus, partial credit or penalty."""
    if is_correct:
        points = POINTS_PER_CORRECT_ANSWER
        if response_time_ms is not None and response_time_ms <= SPEED_BONUS_THRESHOLD * 1000:
            points += BONUS_POINTS_FOR_SPEED
        return points
    if partial_credit:
        return PARTIAL_CREDIT_POINTS
    return -POINTS_PENALTY_PER_WRONG_ATTEMPT


def calculate_session_score(correct: int, total: int, time_spent_seconds: float) -> Tuple[int, int]:
    """Return (accuracy, score); finishing within the time limit adds 10 points."""
    accuracy = calculate_accuracy(correct, total)
    time_bonus = 10 if time_spent_seconds < DEFAULT_SESSION_TIME_LIMIT else 0
    return accuracy, min(accuracy + time_bonus, 100)


def session_achievements(accuracy: float, words_learned: int, time_spent_seconds: float) -> List[str]:
    achievements = []
    if accuracy >= 100:
        achievements.append('Perfect Score!')
    elif accuracy >= SESSION_EXCELLENT_THRESHOLD:
        achievements.append('Excellence!')
    if words_learned >= 5:
        achievements.append('Quick Learner!')
    if time_spent_seconds < 300:
        achievements.append('Speed Demon!')
    return achievements


def should_mark_as_difficult(wrong_attempts: int, accuracy: float) -> bool:
    return (
        wrong_attempts >= MARK_AS_DIFFICULT['max_wrong_attempts']
        or accuracy <= MARK_AS_DIFFICULT['max_accuracy']
    )


def should_mark_as_mastered(
    mastery_score: float,
    consecutive_correct: int,
    last_reviewed_at: Optional[datetime],
    now: Optional[datetime] = None,
) -> bool:
    """Mastered words need a high score, a long streak and a week since the last review."""
    if last_reviewed_at is None:
        return False
    now = now or datetime.utcnow()
    days_since_review = (now - last_reviewed_at).days
    return (
        mastery_score >= MARK_AS_MASTERED['min_mastery_score']
        and consecutive_correct >= MARK_AS_MASTERED['min_consecutive_correct']
        and days_since_review >= MARK_AS_MASTERED['min_days_since_last_review']
    )
