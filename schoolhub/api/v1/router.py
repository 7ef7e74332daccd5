from fastapi import APIRouter

from .endpoints import questions, quizzes, submissions

api_router = APIRouter()

# Authoring: quiz details, then questions one at a time
api_router.include_router(quizzes.router, tags=["quizzes"])
api_router.include_router(questions.router, tags=["questions"])

api_router.include_router(submissions.router, tags=["submissions"])
