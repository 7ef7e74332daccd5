from typing import Any, Dict, List, Optional

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException, Query

from ...dependencies import (
    get_question_builder,
    get_question_repository,
    get_quiz_repository,
    get_request_context,
    require_teacher,
)
from ..mappers.quiz_response_mapper import QuizResponseMapper
from .quizzes import open_session, outcome_response
from ....config import get_settings
from ....core.context import RequestContext
from ....core.exceptions import (
    AuthorizationError,
    OptionEditError,
    QuizNotFoundError,
    SessionBusyError,
    SessionStateError,
)
from ....models.enums import QuestionType
from ....repositories.question_repository import QuestionRepository
from ....repositories.quiz_repository import QuizRepository
from ....schemas.responses import QuestionResponse, QuestionTemplateResponse, StepOutcomeResponse
from ....services.answer_options import AnswerOptionSet
from ....services.question_builder import QuestionBuilder

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/quizzes/{quiz_id}/questions", response_model=List[QuestionResponse])
async def list_questions(
    quiz_id: str,
    context: RequestContext = Depends(get_request_context),
    quiz_repo: QuizRepository = Depends(get_quiz_repository),
    question_repo: QuestionRepository = Depends(get_question_repository),
) -> List[QuestionResponse]:
    quiz = quiz_repo.get(quiz_id)
    if not quiz.ok:
        raise HTTPException(status_code=502, detail="Could not load the quiz")
    if quiz.data is None:
        raise HTTPException(status_code=404, detail=f"Quiz {quiz_id} not found")
    if context.is_teacher and quiz.data.teacher_id != context.user_id:
        raise HTTPException(status_code=403, detail="Quiz belongs to another teacher")

    questions = question_repo.list_with_answers(quiz_id)
    if not questions.ok:
        raise HTTPException(status_code=502, detail="Could not load the questions")

    mapped = QuizResponseMapper.map_questions(questions.data or [])
    if not context.is_teacher:
        # Students see the options but not which ones are right
        for question in mapped:
            for answer in question.answers:
                answer.is_correct = False
    return mapped


@router.post("/quizzes/{quiz_id}/questions", response_model=StepOutcomeResponse, status_code=201)
async def add_question(
    quiz_id: str,
    payload: Dict[str, Any] = Body(...),
    path: Optional[str] = Query(default=None, description="Current page path, used to build the redirect route"),
    context: RequestContext = Depends(require_teacher),
    quiz_repo: QuizRepository = Depends(get_quiz_repository),
    question_repo: QuestionRepository = Depends(get_question_repository),
    builder: QuestionBuilder = Depends(get_question_builder),
):
    try:
        controller = await open_session(context, quiz_id, quiz_repo, question_repo, builder, path=path)
        outcome = await controller.add_question(payload)
        return outcome_response(outcome, controller, created=True)
    except QuizNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except AuthorizationError as e:
        raise HTTPException(status_code=403, detail=e.message)
    except (SessionStateError, SessionBusyError) as e:
        raise HTTPException(status_code=409, detail=e.message)
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Failed to add question", quiz_id=quiz_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to add question")


@router.get("/question-templates/{question_type}", response_model=QuestionTemplateResponse)
async def get_question_template(
    question_type: QuestionType,
    choices: Optional[int] = Query(default=None, description="Number of choices for Multiple Choice questions"),
    context: RequestContext = Depends(require_teacher),
) -> QuestionTemplateResponse:
    option_set = AnswerOptionSet(question_type)
    if choices is not None:
        try:
            option_set.set_choice_count(choices)
        except OptionEditError as e:
            raise HTTPException(status_code=422, detail=e.to_dict())

    return QuizResponseMapper.map_template(option_set, get_settings().default_question_points)
