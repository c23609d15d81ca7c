import pytest

from bigbrain.models import QuestionType, SubmittedAnswer
from bigbrain.services.quiz import scoring
from bigbrain.services.quiz.repository import build_question

START = 1000.0


def single_question(points=10, duration=30):
    return build_question(0, {
        'text': 'What is 2 + 2?',
        'type': 'single',
        'duration': duration,
        'points': points,
        'answers': [{'text': '4', 'correct': True}, {'text': '5'}],
    })


def multiple_question():
    return build_question(1, {
        'text': 'Pick the even numbers',
        'type': 'multiple',
        'duration': 20,
        'points': 20,
        'answers': [
            {'text': '2', 'correct': True},
            {'text': '3'},
            {'text': '4', 'correct': True},
            {'text': '5'},
        ],
    })


def submitted(indices, at):
    answer = SubmittedAnswer(submitted_at=at)
    answer.selected = indices
    return answer


def test_correct_answer_scores_by_speed():
    # 6s into a 30s window: factor (30 - 6) / 30 = 0.8
    assert scoring.score(single_question(), submitted([0], START + 6), START) == 8


def test_incorrect_answer_scores_zero():
    assert scoring.score(single_question(), submitted([1], START + 2), START) == 0


def test_multiple_requires_exact_set():
    question = multiple_question()
    assert question.correct_indices == frozenset({0, 2})
    assert scoring.score(question, submitted([0, 1], START + 1), START) == 0
    assert scoring.score(question, submitted([0], START + 1), START) == 0
    assert scoring.score(question, submitted([0, 2, 3], START + 1), START) == 0
    # order of selection is irrelevant
    assert scoring.score(question, submitted([2, 0], START + 10), START) == 10


def test_missing_answer_scores_zero():
    assert scoring.score(single_question(), None, START) == 0


def test_speed_factor_has_a_floor():
    # answered at the very end of the window still earns 10%
    assert scoring.score(single_question(points=100), submitted([0], START + 29.99), START) == 10
    assert scoring.speed_factor(30, 30) == pytest.approx(0.1)


def test_elapsed_is_clamped_before_start():
    assert scoring.score(single_question(), submitted([0], START - 5), START) == 10


def test_rounds_half_up():
    # 5 points * 0.5 = 2.5
    question = single_question(points=5, duration=10)
    assert scoring.score(question, submitted([0], START + 5), START) == 3


def test_score_is_deterministic():
    question = single_question()
    answer = submitted([0], START + 6)
    assert scoring.score(question, answer, START) == scoring.score(question, answer, START)
    assert answer.selected == frozenset({0})


@pytest.mark.parametrize('kind, answers', [
    ('single', [('a', True), ('b', True)]),
    ('single', [('a', True)]),
    ('multiple', [('a', True), ('b', False)]),
    ('multiple', [('a', True), ('b', True)]),
    ('judgement', [('Yes', True), ('No', False)]),
    ('judgement', [('True', True), ('False', True)]),
])
def test_question_type_rejects_bad_answer_sets(kind, answers):
    with pytest.raises(ValueError):
        QuestionType(kind).validate_answers(answers)


def test_build_question_rejects_non_positive_duration():
    with pytest.raises(ValueError):
        build_question(0, {'text': 'x', 'type': 'single', 'duration': 0, 'points': 1,
                           'answers': [{'text': 'a', 'correct': True}, {'text': 'b'}]})
