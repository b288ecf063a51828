import pytest
from pydantic import ValidationError

from studymate.services.schemas import (
    ChallengeEvaluation,
    ExamReadiness,
    ExamReadinessRequest,
    FlashcardSet,
    OnboardingRequest,
    Quiz,
    StudyPlan,
)
from tests.conftest import make_question


def quiz_payload(count=5, options=4):
    questions = [make_question(i) for i in range(count)]
    for q in questions:
        q["options"] = [f"Option {j}" for j in range(options)]
    return {"questions": questions}


def test_quiz_accepts_five_by_four():
    quiz = Quiz.model_validate(quiz_payload())
    assert len(quiz.questions) == 5
    assert quiz.to_wire()["questions"][0]["correctAnswerIndex"] == 1


@pytest.mark.parametrize("count", [0, 4, 6])
def test_quiz_rejects_wrong_question_count(count):
    with pytest.raises(ValidationError):
        Quiz.model_validate(quiz_payload(count=count))


@pytest.mark.parametrize("options", [3, 5])
def test_quiz_rejects_wrong_option_count(options):
    with pytest.raises(ValidationError):
        Quiz.model_validate(quiz_payload(options=options))


@pytest.mark.parametrize("index", [-1, 4])
def test_quiz_rejects_answer_index_out_of_range(index):
    payload = quiz_payload()
    payload["questions"][2]["correctAnswerIndex"] = index
    with pytest.raises(ValidationError):
        Quiz.model_validate(payload)


def test_quiz_rejects_unknown_difficulty():
    payload = quiz_payload()
    payload["questions"][0]["difficulty"] = "Impossible"
    with pytest.raises(ValidationError):
        Quiz.model_validate(payload)


def test_flashcard_type_must_be_in_enum():
    with pytest.raises(ValidationError):
        FlashcardSet.model_validate({"flashcards": [{"question": "Q", "answer": "A", "type": "Trivia"}]})


def test_study_plan_priority_enum():
    with pytest.raises(ValidationError):
        StudyPlan.model_validate({
            "dailySessions": [{"subject": "Math", "priority": "urgent", "estimatedTime": "1h"}],
            "weeklyTimetable": "Mon: Math",
        })


def test_readiness_score_range():
    with pytest.raises(ValidationError):
        ExamReadiness.model_validate({"readinessScore": 101, "coachingTip": "Keep going"})


def test_onboarding_dedupes_subjects():
    req = OnboardingRequest.model_validate({
        "displayName": "Ada",
        "gradeLevel": "College Junior",
        "subjects": ["Math", " Math ", "Physics", ""],
        "weeklyFreeHours": 12,
    })
    assert req.subjects == ["Math", "Physics"]


def test_onboarding_rejects_unknown_grade():
    with pytest.raises(ValidationError):
        OnboardingRequest.model_validate({
            "displayName": "Ada", "gradeLevel": "Kindergarten", "subjects": ["Math"], "weeklyFreeHours": 5,
        })


@pytest.mark.parametrize("index", [True, "2", 2.0])
def test_quiz_answer_index_must_be_an_int(index):
    payload = quiz_payload()
    payload["questions"][0]["correctAnswerIndex"] = index
    with pytest.raises(ValidationError):
        Quiz.model_validate(payload)


@pytest.mark.parametrize("verdict", ["yes", "true", 1])
def test_challenge_verdict_must_be_a_bool(verdict):
    with pytest.raises(ValidationError):
        ChallengeEvaluation.model_validate({"isCorrect": verdict, "feedback": "Nice."})


def test_readiness_score_must_be_a_number():
    with pytest.raises(ValidationError):
        ExamReadiness.model_validate({"readinessScore": "80", "coachingTip": "Keep going"})


def test_request_models_still_coerce():
    req = ExamReadinessRequest.model_validate({"hoursStudied": "12", "subject": "Physics", "quizzesSolved": "3"})
    assert req.hours_studied == 12
    assert req.quizzes_solved == 3
    readiness = ExamReadiness.model_validate({"readinessScore": 80, "coachingTip": "Keep going"})
    assert readiness.readiness_score == 80
