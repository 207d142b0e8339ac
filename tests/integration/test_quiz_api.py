"""
Integration Tests for Quiz Authoring, Attempts and Review
"""

import pytest
from fastapi import status
from sqlalchemy.exc import OperationalError

from models import Quiz, QuizAttempt, QuizQuestion


def _payload(questions):
    return {
        "title": "Week 1",
        "description": "Basics",
        "questions": [
            {
                "question": q["question"],
                "optionA": q["option_a"],
                "optionB": q["option_b"],
                "optionC": q["option_c"],
                "optionD": q["option_d"],
                "correctAnswer": q["correct_answer"],
            }
            for q in questions
        ],
    }


@pytest.fixture
def quiz_id(client, teacher, course, sample_questions, headers_for):
    response = client.post(
        f"/api/v1/courses/{course.id}/quizzes", json=_payload(sample_questions), headers=headers_for(teacher)
    )
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["quizId"]


class TestQuizAuthoring:
    def test_create_quiz(self, test_db, quiz_id):
        assert test_db.query(QuizQuestion).filter(QuizQuestion.quiz_id == quiz_id).count() == 5

    def test_invalid_question_rejected_atomically(self, client, test_db, teacher, course, sample_questions, headers_for):
        sample_questions[2]["correct_answer"] = "Z"

        response = client.post(
            f"/api/v1/courses/{course.id}/quizzes", json=_payload(sample_questions), headers=headers_for(teacher)
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["code"] == "INVALID_QUESTION"
        assert test_db.query(Quiz).count() == 0

    def test_non_text_option_rejected(self, client, test_db, teacher, course, sample_questions, headers_for):
        payload = _payload(sample_questions)
        payload["questions"][0]["optionA"] = 5

        response = client.post(f"/api/v1/courses/{course.id}/quizzes", json=payload, headers=headers_for(teacher))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["code"] == "INVALID_QUESTION"
        assert test_db.query(Quiz).count() == 0

    def test_lowercase_answer_rejected(self, client, test_db, teacher, course, sample_questions, headers_for):
        sample_questions[0]["correct_answer"] = "a"

        response = client.post(
            f"/api/v1/courses/{course.id}/quizzes", json=_payload(sample_questions), headers=headers_for(teacher)
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert test_db.query(QuizQuestion).count() == 0

    def test_other_teacher_cannot_author(self, client, other_teacher, course, sample_questions, headers_for):
        response = client.post(
            f"/api/v1/courses/{course.id}/quizzes", json=_payload(sample_questions), headers=headers_for(other_teacher)
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_student_cannot_author(self, client, student, course, sample_questions, headers_for):
        response = client.post(
            f"/api/v1/courses/{course.id}/quizzes", json=_payload(sample_questions), headers=headers_for(student)
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestQuizAttempts:
    def _question_ids(self, client, student, quiz_id, headers_for):
        view = client.get(f"/api/v1/quizzes/{quiz_id}", headers=headers_for(student)).json()
        return [question["id"] for question in view["questions"]]

    def test_answers_hidden_until_attempt(self, client, student, quiz_id, headers_for):
        view = client.get(f"/api/v1/quizzes/{quiz_id}", headers=headers_for(student)).json()

        assert view["attempt"] is None
        assert all("correctAnswer" not in question for question in view["questions"])

    def test_submit_and_review(self, client, student, quiz_id, headers_for):
        ids = self._question_ids(client, student, quiz_id, headers_for)
        answers = {str(qid): letter for qid, letter in zip(ids, ["A", "B", "C", "A", "B"])}

        response = client.post(f"/api/v1/quizzes/{quiz_id}/submit", json={"answers": answers}, headers=headers_for(student))
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["score"] == 3
        assert response.json()["totalQuestions"] == 5

        view = client.get(f"/api/v1/quizzes/{quiz_id}", headers=headers_for(student)).json()
        assert view["attempt"]["score"] == 3
        assert view["attempt"]["answers"] == answers
        assert [question["correctAnswer"] for question in view["questions"]] == ["A", "B", "C", "D", "A"]

    def test_second_submission_conflicts(self, client, student, quiz_id, headers_for):
        client.post(f"/api/v1/quizzes/{quiz_id}/submit", json={"answers": {}}, headers=headers_for(student))

        response = client.post(f"/api/v1/quizzes/{quiz_id}/submit", json={"answers": {}}, headers=headers_for(student))

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"] == "Quiz has already been attempted"

    def test_submit_unknown_quiz(self, client, student, headers_for):
        response = client.post("/api/v1/quizzes/999/submit", json={"answers": {}}, headers=headers_for(student))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_storage_outage_returns_503(self, client, test_db, student, quiz_id, headers_for, monkeypatch):
        headers = headers_for(student)

        def fail(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        monkeypatch.setattr(test_db, "query", fail)

        response = client.post(f"/api/v1/quizzes/{quiz_id}/submit", json={"answers": {}}, headers=headers)

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["code"] == "PERSISTENCE_ERROR"
        monkeypatch.undo()
        assert test_db.query(QuizAttempt).count() == 0

    def test_course_quiz_list(self, client, student, course, quiz_id, headers_for):
        client.post(f"/api/v1/quizzes/{quiz_id}/submit", json={"answers": {}}, headers=headers_for(student))

        quizzes = client.get(f"/api/v1/courses/{course.id}/quizzes", headers=headers_for(student)).json()["quizzes"]

        assert quizzes[0]["id"] == quiz_id
        assert quizzes[0]["attempted"] is True
        assert quizzes[0]["attemptScore"] == 0


class TestQuizReview:
    def test_owner_sees_attempts_and_key(self, client, teacher, student, quiz_id, headers_for):
        client.post(f"/api/v1/quizzes/{quiz_id}/submit", json={"answers": {}}, headers=headers_for(student))

        attempts = client.get(f"/api/v1/quizzes/{quiz_id}/attempts", headers=headers_for(teacher)).json()["attempts"]
        view = client.get(f"/api/v1/quizzes/{quiz_id}/teacher", headers=headers_for(teacher)).json()

        assert [attempt["studentName"] for attempt in attempts] == ["Alice"]
        assert view["questions"][3]["correctAnswer"] == "D"

    def test_other_teacher_forbidden(self, client, other_teacher, quiz_id, headers_for):
        response = client.get(f"/api/v1/quizzes/{quiz_id}/attempts", headers=headers_for(other_teacher))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_student_cannot_list_attempts(self, client, student, quiz_id, headers_for):
        response = client.get(f"/api/v1/quizzes/{quiz_id}/attempts", headers=headers_for(student))

        assert response.status_code == status.HTTP_403_FORBIDDEN
