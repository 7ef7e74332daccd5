from typing import Any, Dict, List, Optional

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from ...dependencies import (
    get_question_builder,
    get_question_repository,
    get_quiz_repository,
    get_request_context,
    require_teacher,
)
from ..mappers.quiz_response_mapper import QuizResponseMapper
from ....core.context import RequestContext
from ....core.exceptions import AuthorizationError, QuizNotFoundError, SessionStateError
from ....repositories.question_repository import QuestionRepository
from ....repositories.quiz_repository import QuizRepository
from ....schemas.responses import ExitResponse, QuizResponse, SessionSnapshotResponse, StepOutcomeResponse
from ....services.question_builder import QuestionBuilder
from ....services.quiz_session import QuizSessionController, StepOutcome, StepStatus

logger = structlog.get_logger(__name__)

router = APIRouter()

OUTCOME_STATUS_CODES = {
    StepStatus.SAVED: 200,
    StepStatus.INVALID: 422,
    StepStatus.FAILED: 502,
    StepStatus.PARTIALLY_SAVED: 207,
}


def outcome_response(outcome: StepOutcome, controller: QuizSessionController, created: bool = False) -> JSONResponse:
    status_code = OUTCOME_STATUS_CODES[outcome.status]
    if created and outcome.ok:
        status_code = 201
    body = QuizResponseMapper.map_outcome(outcome, controller)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


async def open_session(
    context: RequestContext,
    quiz_id: str,
    quiz_repo: QuizRepository,
    question_repo: QuestionRepository,
    builder: QuestionBuilder,
    path: Optional[str] = None,
) -> QuizSessionController:
    """Resume an edit session on an existing quiz owned by the caller."""
    found = quiz_repo.get(quiz_id)
    if not found.ok:
        raise HTTPException(status_code=502, detail="Could not load the quiz")
    if found.data is None:
        raise QuizNotFoundError(quiz_id)

    controller = QuizSessionController(
        context,
        quiz_repo,
        question_repo,
        builder,
        quiz_id=quiz_id,
        current_path=path,
    )
    return await controller.resume()


@router.post("/subjects/{subject_id}/quizzes", response_model=StepOutcomeResponse, status_code=201)
async def create_quiz(
    subject_id: str,
    payload: Dict[str, Any] = Body(...),
    path: Optional[str] = Query(default=None, description="Current page path, used to build the redirect route"),
    context: RequestContext = Depends(require_teacher),
    quiz_repo: QuizRepository = Depends(get_quiz_repository),
    question_repo: QuestionRepository = Depends(get_question_repository),
    builder: QuestionBuilder = Depends(get_question_builder),
):
    try:
        controller = QuizSessionController(
            context,
            quiz_repo,
            question_repo,
            builder,
            subject_id=subject_id,
            current_path=path,
        )
        outcome = await controller.save_quiz(payload)
        return outcome_response(outcome, controller, created=True)
    except Exception as e:
        logger.error("Failed to create quiz", subject_id=subject_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to create quiz")


@router.get("/subjects/{subject_id}/quizzes", response_model=List[QuizResponse])
async def list_subject_quizzes(
    subject_id: str,
    context: RequestContext = Depends(get_request_context),
    quiz_repo: QuizRepository = Depends(get_quiz_repository),
) -> List[QuizResponse]:
    result = quiz_repo.list_by_subject(subject_id)
    if not result.ok:
        raise HTTPException(status_code=502, detail="Could not load quizzes")

    quizzes = result.data or []
    if context.is_teacher:
        quizzes = [q for q in quizzes if q.teacher_id == context.user_id]
    elif not context.is_student:
        raise HTTPException(status_code=403, detail="Quizzes are visible to teachers and students only")
    return [QuizResponseMapper.map_quiz(q) for q in quizzes]


@router.get("/quizzes/{quiz_id}", response_model=SessionSnapshotResponse)
async def get_quiz(
    quiz_id: str,
    context: RequestContext = Depends(require_teacher),
    quiz_repo: QuizRepository = Depends(get_quiz_repository),
    question_repo: QuestionRepository = Depends(get_question_repository),
    builder: QuestionBuilder = Depends(get_question_builder),
) -> SessionSnapshotResponse:
    try:
        controller = await open_session(context, quiz_id, quiz_repo, question_repo, builder)
        return QuizResponseMapper.map_snapshot(controller)
    except QuizNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except AuthorizationError as e:
        raise HTTPException(status_code=403, detail=e.message)
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Failed to load quiz", quiz_id=quiz_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to load quiz")


@router.put("/quizzes/{quiz_id}", response_model=StepOutcomeResponse)
async def update_quiz(
    quiz_id: str,
    payload: Dict[str, Any] = Body(...),
    context: RequestContext = Depends(require_teacher),
    quiz_repo: QuizRepository = Depends(get_quiz_repository),
    question_repo: QuestionRepository = Depends(get_question_repository),
    builder: QuestionBuilder = Depends(get_question_builder),
):
    try:
        controller = await open_session(context, quiz_id, quiz_repo, question_repo, builder)
        outcome = await controller.save_quiz(payload)
        return outcome_response(outcome, controller)
    except QuizNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except AuthorizationError as e:
        raise HTTPException(status_code=403, detail=e.message)
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Failed to update quiz", quiz_id=quiz_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to update quiz")


@router.post("/quizzes/{quiz_id}/exit", response_model=ExitResponse)
async def exit_authoring(
    quiz_id: str,
    path: Optional[str] = Query(default=None, description="Current page path"),
    context: RequestContext = Depends(require_teacher),
    quiz_repo: QuizRepository = Depends(get_quiz_repository),
    question_repo: QuestionRepository = Depends(get_question_repository),
    builder: QuestionBuilder = Depends(get_question_builder),
) -> ExitResponse:
    try:
        controller = await open_session(context, quiz_id, quiz_repo, question_repo, builder, path=path)
        return ExitResponse(redirect_to=controller.exit())
    except QuizNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except AuthorizationError as e:
        raise HTTPException(status_code=403, detail=e.message)
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=e.message)
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Failed to exit quiz authoring", quiz_id=quiz_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to exit quiz authoring")
