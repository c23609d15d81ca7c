import math

from bigbrain.models import Question, SubmittedAnswer
from . import clock

MIN_SPEED_FACTOR = 0.1


def is_correct(question: Question, answer: SubmittedAnswer | None) -> bool:
    """Exact set match; a missing or extra option is simply wrong."""
    if answer is None:
        return False
    return answer.selected == question.correct_indices


def speed_factor(duration: int, elapsed: float) -> float:
    return max(MIN_SPEED_FACTOR, (duration - elapsed) / duration)


def score(question: Question, answer: SubmittedAnswer | None, question_started_at: float | None) -> int:
    """Points for one submission.

    Zero when incorrect or absent. Otherwise ``points * speed_factor`` rounded
    half up, where elapsed time runs from the question start to the submission.
    """
    if not is_correct(question, answer) or question_started_at is None:
        return 0
    taken = clock.elapsed(question_started_at, question.duration, answer.submitted_at)
    return int(math.floor(question.points * speed_factor(question.duration, taken) + 0.5))
