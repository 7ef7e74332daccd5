from unittest.mock import patch

import pytest

from schoolhub.repositories import GatewayResult


@pytest.fixture
async def created_quiz(async_client, quiz_payload):
    response = await async_client.post("/api/v1/subjects/subject-1/quizzes", json=quiz_payload)
    assert response.status_code == 201
    return response.json()


async def test_health(async_client):
    response = await async_client.get("/health")

    assert response.status_code == 200
    assert response.json()["database"] == "healthy"


async def test_quiz_authoring_flow(async_client, created_quiz, identification_question, multiple_choice_question):
    quiz_id = created_quiz["quiz_id"]
    assert created_quiz["status"] == "saved"
    assert created_quiz["quiz"]["duration"] == 45
    assert created_quiz["quiz"]["teacher_id"] == "teacher-1"
    assert created_quiz["redirect_to"] == f"/teacher/subjects/subject-1/quizzes/{quiz_id}/add-question"

    response = await async_client.post(f"/api/v1/quizzes/{quiz_id}/questions", json=identification_question)
    assert response.status_code == 201
    first = response.json()
    assert (first["ordinal"], first["next_ordinal"]) == (1, 2)

    response = await async_client.post(f"/api/v1/quizzes/{quiz_id}/questions", json=multiple_choice_question)
    assert response.status_code == 201
    assert response.json()["ordinal"] == 2

    response = await async_client.get(f"/api/v1/quizzes/{quiz_id}")
    assert response.status_code == 200
    snapshot = response.json()
    assert snapshot["next_ordinal"] == 3
    assert [q["ordinal"] for q in snapshot["questions"]] == [1, 2]
    assert snapshot["questions"][0]["answers"][0]["answer"] == "4"
    assert snapshot["questions"][0]["answers"][0]["is_correct"] is True

    response = await async_client.post(
        f"/api/v1/quizzes/{quiz_id}/exit",
        params={"path": f"/teacher/subjects/subject-1/quizzes/{quiz_id}/add-question"},
    )
    assert response.status_code == 200
    assert response.json()["redirect_to"] == f"/teacher/subjects/subject-1/quizzes/{quiz_id}/edit"


async def test_invalid_quiz_returns_field_errors(async_client, quiz_payload):
    quiz_payload["title"] = ""
    quiz_payload["date_open"], quiz_payload["date_close"] = quiz_payload["date_close"], quiz_payload["date_open"]

    response = await async_client.post("/api/v1/subjects/subject-1/quizzes", json=quiz_payload)

    assert response.status_code == 422
    body = response.json()
    assert body["status"] == "invalid"
    assert {e["field"] for e in body["errors"]} == {"title", "date_open"}


async def test_invalid_question_returns_field_errors(async_client, created_quiz, multiple_choice_question):
    multiple_choice_question["options"][0]["answer"] = ""

    response = await async_client.post(
        f"/api/v1/quizzes/{created_quiz['quiz_id']}/questions", json=multiple_choice_question
    )

    assert response.status_code == 422
    assert response.json()["errors"] == [
        {"field": "options.0.answer", "message": "Answer must be provided for each option"}
    ]


async def test_partial_write_returns_multi_status(async_client, created_quiz, identification_question):
    with patch(
        "schoolhub.repositories.answer_repository.AnswerRepository.create_with_links",
        return_value=GatewayResult(error="insert failed"),
    ):
        response = await async_client.post(
            f"/api/v1/quizzes/{created_quiz['quiz_id']}/questions", json=identification_question
        )

    assert response.status_code == 207
    body = response.json()
    assert body["status"] == "partially_saved"
    assert body["question_id"] is not None
    assert body["next_ordinal"] == 2


async def test_update_quiz(async_client, created_quiz, quiz_payload):
    quiz_payload["duration"] = 0

    response = await async_client.put(f"/api/v1/quizzes/{created_quiz['quiz_id']}", json=quiz_payload)

    assert response.status_code == 200
    assert response.json()["quiz"]["duration"] == 0


async def test_unknown_quiz_is_not_found(async_client):
    response = await async_client.get("/api/v1/quizzes/does-not-exist")

    assert response.status_code == 404


async def test_other_teacher_cannot_edit(async_client, created_quiz, acting_as, other_teacher_context):
    acting_as["context"] = other_teacher_context

    response = await async_client.get(f"/api/v1/quizzes/{created_quiz['quiz_id']}")

    assert response.status_code == 403


async def test_students_cannot_author(async_client, acting_as, student_context, quiz_payload):
    acting_as["context"] = student_context

    response = await async_client.post("/api/v1/subjects/subject-1/quizzes", json=quiz_payload)

    assert response.status_code == 403


async def test_question_template(async_client):
    response = await async_client.get("/api/v1/question-templates/True or False")

    assert response.status_code == 200
    assert [o["answer"] for o in response.json()["options"]] == ["True", "False"]

    response = await async_client.get("/api/v1/question-templates/Multiple Choice", params={"choices": 4})
    assert len(response.json()["options"]) == 4

    response = await async_client.get("/api/v1/question-templates/Multiple Choice", params={"choices": 7})
    assert response.status_code == 422


async def test_student_submission_flow(
    async_client, created_quiz, identification_question, acting_as, student_context, teacher_context
):
    quiz_id = created_quiz["quiz_id"]
    response = await async_client.post(f"/api/v1/quizzes/{quiz_id}/questions", json=identification_question)
    question_id = response.json()["question_id"]

    acting_as["context"] = student_context
    response = await async_client.get(f"/api/v1/quizzes/{quiz_id}/questions")
    assert response.status_code == 200
    assert response.json()[0]["answers"][0]["is_correct"] is False

    response = await async_client.post(f"/api/v1/quizzes/{quiz_id}/submissions", json={"answers": {question_id: "4"}})
    assert response.status_code == 201
    result = response.json()
    assert result["score"] == 5
    assert result["percentage"] == 100.0
    assert result["results"][0]["is_correct"] is True

    acting_as["context"] = teacher_context
    response = await async_client.get(f"/api/v1/quizzes/{quiz_id}/submissions")
    assert response.status_code == 200
    assert [s["student_id"] for s in response.json()] == ["student-1"]


async def test_subject_quiz_listing(async_client, created_quiz, acting_as, other_teacher_context, student_context):
    response = await async_client.get("/api/v1/subjects/subject-1/quizzes")
    assert [q["id"] for q in response.json()] == [created_quiz["quiz_id"]]

    acting_as["context"] = other_teacher_context
    response = await async_client.get("/api/v1/subjects/subject-1/quizzes")
    assert response.json() == []

    acting_as["context"] = student_context
    response = await async_client.get("/api/v1/subjects/subject-1/quizzes")
    assert len(response.json()) == 1


async def test_true_false_in_any_order_keeps_answer_key(async_client, created_quiz, true_false_question):
    quiz_id = created_quiz["quiz_id"]
    true_false_question["points"] = 1.5
    true_false_question["options"] = [
        {"answer": "False", "is_correct": True},
        {"answer": "True", "is_correct": False},
    ]

    response = await async_client.post(f"/api/v1/quizzes/{quiz_id}/questions", json=true_false_question)
    assert response.status_code == 201

    question = (await async_client.get(f"/api/v1/quizzes/{quiz_id}/questions")).json()[0]
    assert question["points"] == 1.5
    assert [(a["answer"], a["is_correct"]) for a in question["answers"]] == [("True", False), ("False", True)]
