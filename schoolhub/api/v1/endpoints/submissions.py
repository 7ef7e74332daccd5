from typing import List

import structlog
from fastapi import APIRouter, Depends, HTTPException

from ...dependencies import get_request_context, get_submission_service, require_student
from ..mappers.quiz_response_mapper import QuizResponseMapper
from ....core.context import RequestContext
from ....core.exceptions import PersistenceError, QuizClosedError, QuizNotFoundError
from ....schemas.requests import QuizSubmissionRequest
from ....schemas.responses import SubmissionResultResponse, SubmissionSummaryResponse
from ....services.submission_service import SubmissionService

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/quizzes/{quiz_id}/submissions", response_model=SubmissionResultResponse, status_code=201)
async def submit_quiz(
    quiz_id: str,
    request: QuizSubmissionRequest,
    context: RequestContext = Depends(require_student),
    service: SubmissionService = Depends(get_submission_service),
) -> SubmissionResultResponse:
    try:
        submission, report = await service.submit(context, quiz_id, request)
        return QuizResponseMapper.map_submission_result(submission, report)
    except QuizNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except QuizClosedError as e:
        raise HTTPException(status_code=409, detail=e.message)
    except PersistenceError as e:
        logger.error("Failed to submit quiz", quiz_id=quiz_id, error=e.message)
        raise HTTPException(status_code=502, detail="Could not save the submission")


@router.get("/quizzes/{quiz_id}/submissions", response_model=List[SubmissionSummaryResponse])
async def list_submissions(
    quiz_id: str,
    context: RequestContext = Depends(get_request_context),
    service: SubmissionService = Depends(get_submission_service),
) -> List[SubmissionSummaryResponse]:
    try:
        quiz = await service.get_quiz(quiz_id)
        if context.is_teacher:
            if quiz.teacher_id != context.user_id:
                raise HTTPException(status_code=403, detail="Quiz belongs to another teacher")
            submissions = await service.list_submissions(quiz_id)
        elif context.is_student:
            submissions = await service.list_submissions(quiz_id, student_id=context.user_id)
        else:
            raise HTTPException(status_code=403, detail="Submissions are visible to teachers and students only")
        return [QuizResponseMapper.map_submission_summary(s) for s in submissions]
    except QuizNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except PersistenceError as e:
        logger.error("Failed to list submissions", quiz_id=quiz_id, error=e.message)
        raise HTTPException(status_code=502, detail="Could not load submissions")
