import pytest

from schoolhub.models import Answer, Question, QuestionAnswer
from schoolhub.services.quiz_grader import QuizGrader


def make_question(question_id, question_type, points, options):
    question = Question(id=question_id, quiz_id="quiz-1", title=question_id, type=question_type, points=points)
    for index, (text, is_correct) in enumerate(options, start=1):
        answer = Answer(id=index, answer=text, is_correct=is_correct)
        question.question_answers.append(QuestionAnswer(id=index, answer_id=index, answer=answer))
    return question


@pytest.fixture
def questions():
    return [
        make_question("q-id", "Identification", 5, [("Photosynthesis", True)]),
        make_question("q-tf", "True or False", 1, [("True", False), ("False", True)]),
        make_question("q-mc", "Multiple Choice", 2, [("Red", True), ("Green", False), ("Blue", True)]),
    ]


def test_all_correct(questions):
    report = QuizGrader().grade(questions, {"q-id": "  photosynthesis ", "q-tf": 2, "q-mc": [1, 3]})

    assert report.score == 8
    assert report.max_score == 8
    assert report.percentage == 100.0
    assert all(result.is_correct for result in report.results)


def test_partial_selection_scores_nothing(questions):
    report = QuizGrader().grade(questions, {"q-mc": [1]})

    mc = next(r for r in report.results if r.question_id == "q-mc")
    assert not mc.is_correct
    assert mc.correct_answers == ["Red", "Blue"]
    assert report.score == 0


def test_true_false_accepts_text_variants(questions):
    report = QuizGrader().grade(questions, {"q-tf": "no"})

    assert report.results[1].is_correct
    assert report.score == 1


def test_unanswered_questions_count_toward_max(questions):
    report = QuizGrader().grade(questions, {"q-id": "Respiration"})

    assert report.score == 0
    assert report.max_score == 8
    assert report.percentage == 0.0
    assert [r.response for r in report.results] == ["Respiration", None, None]


def test_question_without_correct_answer_is_never_right():
    question = make_question("q-none", "Multiple Choice", 3, [("A", False), ("B", False)])

    report = QuizGrader().grade([question], {"q-none": 1})

    assert not report.results[0].is_correct


def test_percentage_is_rounded(questions):
    report = QuizGrader().grade(questions, {"q-tf": "False"})

    assert report.percentage == 12.5
    assert QuizGrader().grade(questions[1:], {"q-tf": "False"}).percentage == 33.33
