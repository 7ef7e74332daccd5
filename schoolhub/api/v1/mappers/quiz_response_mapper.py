from typing import List, Optional, Sequence

from ....models.question import Question
from ....models.quiz import Quiz
from ....models.submission import QuizSubmission
from ....schemas.responses import (
    AnswerResponse,
    FieldErrorResponse,
    OptionSlotResponse,
    QuestionGradeResponse,
    QuestionResponse,
    QuestionTemplateResponse,
    QuizResponse,
    SessionSnapshotResponse,
    StepOutcomeResponse,
    SubmissionResultResponse,
    SubmissionSummaryResponse,
)
from ....services.answer_options import AnswerOptionSet
from ....services.quiz_grader import GradeReport
from ....services.quiz_session import QuizSessionController, StepOutcome


class QuizResponseMapper:
    """Maps stored quiz rows and session state to API responses"""

    @staticmethod
    def map_quiz(quiz: Optional[Quiz]) -> Optional[QuizResponse]:
        if quiz is None:
            return None
        return QuizResponse.model_validate(quiz)

    @staticmethod
    def map_questions(questions: Sequence[Question]) -> List[QuestionResponse]:
        """Questions in stored order; the ordinal is their position in that list."""
        return [
            QuestionResponse(
                id=q.id,
                quiz_id=q.quiz_id,
                title=q.title,
                type=q.type,
                points=q.points,
                ordinal=index,
                answers=[AnswerResponse.model_validate(a) for a in q.answers],
            )
            for index, q in enumerate(questions, start=1)
        ]

    @staticmethod
    def map_outcome(outcome: StepOutcome, controller: QuizSessionController) -> StepOutcomeResponse:
        return StepOutcomeResponse(
            status=outcome.status.value,
            message=outcome.message,
            errors=[FieldErrorResponse(field=e.field, message=e.message) for e in outcome.errors],
            quiz_id=outcome.quiz_id,
            question_id=outcome.question_id,
            ordinal=outcome.ordinal,
            next_ordinal=outcome.next_ordinal,
            redirect_to=outcome.redirect_to,
            quiz=QuizResponseMapper.map_quiz(controller.quiz),
            questions=QuizResponseMapper.map_questions(controller.questions),
        )

    @staticmethod
    def map_snapshot(controller: QuizSessionController) -> SessionSnapshotResponse:
        return SessionSnapshotResponse(
            quiz=QuizResponseMapper.map_quiz(controller.quiz),
            questions=QuizResponseMapper.map_questions(controller.questions),
            next_ordinal=controller.ordinal,
            state=controller.state.value,
        )

    @staticmethod
    def map_template(option_set: AnswerOptionSet, points: float) -> QuestionTemplateResponse:
        return QuestionTemplateResponse(
            type=option_set.question_type,
            points=points,
            options=[
                OptionSlotResponse(
                    answer=slot.answer,
                    is_correct=slot.is_correct,
                    text_editable=slot.text_editable,
                    correctness_editable=slot.correctness_editable,
                )
                for slot in option_set.slots
            ],
        )

    @staticmethod
    def map_submission_result(submission: QuizSubmission, report: GradeReport) -> SubmissionResultResponse:
        return SubmissionResultResponse(
            submission_id=submission.id,
            quiz_id=submission.quiz_id,
            student_id=submission.student_id,
            score=report.score,
            max_score=report.max_score,
            percentage=report.percentage,
            submitted_at=submission.submitted_at,
            results=[
                QuestionGradeResponse(
                    question_id=r.question_id,
                    response=r.response,
                    correct_answers=r.correct_answers,
                    is_correct=r.is_correct,
                    score=r.score,
                    max_score=r.max_score,
                )
                for r in report.results
            ],
        )

    @staticmethod
    def map_submission_summary(submission: QuizSubmission) -> SubmissionSummaryResponse:
        return SubmissionSummaryResponse(**submission.summary())
