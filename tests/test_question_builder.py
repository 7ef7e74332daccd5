from unittest.mock import MagicMock

import pytest

from schoolhub.core.exceptions import PartialWriteError, PersistenceError
from schoolhub.models import Answer, Question, QuestionAnswer
from schoolhub.repositories import AnswerRepository, GatewayResult, QuestionRepository, QuizRepository
from schoolhub.schemas.requests import QuestionPayload
from schoolhub.services.question_builder import QuestionBuilder
from schoolhub.services.schema_validator import validate_quiz


@pytest.fixture
def quiz(test_db, quiz_payload):
    fields = validate_quiz(quiz_payload).value.model_dump()
    return QuizRepository(test_db).create("subject-1", "teacher-1", fields).data


@pytest.fixture
def builder(test_db):
    return QuestionBuilder(QuestionRepository(test_db), AnswerRepository(test_db))


async def test_build_writes_question_answers_and_links(test_db, quiz, builder, multiple_choice_question):
    question = QuestionPayload.model_validate(multiple_choice_question)

    built = await builder.build(quiz.id, question, position=1)

    stored = test_db.query(Question).filter(Question.id == built.question_id).one()
    assert stored.position == 1
    assert stored.type == "Multiple Choice"
    assert [a.answer for a in stored.answers] == ["Red", "Green", "Blue"]
    assert [a.is_correct for a in stored.answers] == [True, False, True]
    assert len(built.answers.answer_ids) == 3
    assert test_db.query(QuestionAnswer).count() == 3


async def test_count_questions(quiz, builder, identification_question):
    assert await builder.count_questions(quiz.id) == 0

    await builder.build(quiz.id, QuestionPayload.model_validate(identification_question), position=1)

    assert await builder.count_questions(quiz.id) == 1


async def test_count_failure_raises(test_db):
    question_repo = MagicMock(spec=QuestionRepository)
    question_repo.count_for_quiz.return_value = GatewayResult(error="connection lost")
    builder = QuestionBuilder(question_repo, AnswerRepository(test_db))

    with pytest.raises(PersistenceError):
        await builder.count_questions("quiz-1")


async def test_question_failure_writes_nothing(test_db, quiz, identification_question):
    question_repo = MagicMock(spec=QuestionRepository)
    question_repo.create.return_value = GatewayResult(error="insert failed")
    answer_repo = MagicMock(spec=AnswerRepository)
    builder = QuestionBuilder(question_repo, answer_repo)

    with pytest.raises(PersistenceError) as exc_info:
        await builder.build(quiz.id, QuestionPayload.model_validate(identification_question))

    assert not isinstance(exc_info.value, PartialWriteError)
    answer_repo.create_with_links.assert_not_called()


async def test_answer_failure_reports_partial_write(test_db, quiz, identification_question):
    answer_repo = MagicMock(spec=AnswerRepository)
    answer_repo.create_with_links.return_value = GatewayResult(error="insert failed")
    builder = QuestionBuilder(QuestionRepository(test_db), answer_repo)

    with pytest.raises(PartialWriteError) as exc_info:
        await builder.build(quiz.id, QuestionPayload.model_validate(identification_question), position=1)

    orphan = test_db.query(Question).filter(Question.id == exc_info.value.question_id).one()
    assert orphan.answers == []
    assert test_db.query(Answer).count() == 0


def test_answer_links_are_all_or_nothing(test_db, quiz):
    question = QuestionRepository(test_db).create(quiz.id, "Capital of France?", "Identification", 1, 1).data
    repo = AnswerRepository(test_db)

    # NULL answer text violates the NOT NULL constraint once the batch flushes
    result = repo.create_with_links(question.id, [("Paris", True), (None, False)])

    assert not result.ok
    assert test_db.query(Answer).count() == 0
    assert test_db.query(QuestionAnswer).count() == 0
