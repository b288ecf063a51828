"""
Pydantic models for the AI flows.

Request models validate the JSON body a route receives. Result models are the
last gate before a model reply reaches the caller: a normalized candidate that
does not validate is rejected as a whole, never returned partially.
Field names are snake_case in Python and camelCase on the wire.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

FLASHCARD_TYPES = ("Q/A", "Definition", "Concept", "Mnemonic")
PRIORITIES = ("high", "medium", "low")
QUIZ_DIFFICULTIES = ("Easy", "Medium", "Hard")
QUIZ_LENGTH = 5
QUIZ_OPTIONS = 4

GRADE_LEVELS = (
    "Middle School",
    "High School Freshman",
    "High School Sophomore",
    "High School Junior",
    "High School Senior",
    "College Freshman",
    "College Sophomore",
    "College Junior",
    "College Senior",
    "Graduate Student",
    "Other",
)


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self):
        return self.model_dump(by_alias=True)


# Requests

class EssayFeedbackRequest(WireModel):
    text: str = ""


class FlashcardRequest(WireModel):
    text: Optional[str] = None
    pdf_data: Optional[str] = None
    image_data: Optional[str] = None
    title: Optional[str] = None


class QuizRequest(WireModel):
    topic: str = Field(min_length=1)
    difficulty: Literal["Easy", "Medium", "Hard", "Any"] = "Any"
    question_type: Literal["Theoretical", "Numerical", "Any"] = "Any"


class StudentProfile(WireModel):
    grade_level: str = ""
    subjects: List[str] = Field(default_factory=list)
    exam_dates: Optional[List[str]] = None
    weekly_free_hours: Optional[float] = None


class StudyPlanRequest(WireModel):
    profile: StudentProfile = Field(default_factory=StudentProfile)
    tasks: List[str] = Field(default_factory=list)
    free_hours: List[str] = Field(default_factory=list)
    study_goals: str = ""


class ExamReadinessRequest(WireModel):
    hours_studied: float = Field(ge=0)
    subject: str = Field(min_length=1)
    consistency: str = ""
    quizzes_solved: int = Field(ge=0)
    deadline_proximity: str = ""


class ChallengeQuestionRequest(WireModel):
    topic: str = Field(min_length=1)
    grade_level: str = "Other"


class ChallengeAnswerRequest(WireModel):
    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)


class OnboardingRequest(WireModel):
    display_name: str = Field(min_length=1, max_length=64)
    grade_level: Literal[GRADE_LEVELS]
    subjects: List[str] = Field(min_length=1)
    weekly_free_hours: int = Field(ge=1, le=100)

    @field_validator("subjects")
    @classmethod
    def _dedupe_subjects(cls, value):
        out = []
        for s in value:
            s = str(s).strip()
            if s and s not in out:
                out.append(s)
        if not out:
            raise ValueError("at least one subject is required")
        return out


class QuizHistoryRequest(WireModel):
    topic: str = Field(min_length=1)
    score: int = Field(ge=0)
    total: int = Field(ge=1)
    questions: List[dict] = Field(default_factory=list)


# Results

class ResultModel(WireModel):
    """Model replies are checked without type coercion: `"2"` is not an index and `"yes"` is not a bool."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore", strict=True)


class EssayFeedback(ResultModel):
    grammar_score: float = Field(ge=0, le=100)
    readability_score: float = Field(ge=0, le=100)
    clarity_suggestions: str
    structural_suggestions: str
    tone_analysis: str
    corrected_rewrite: Optional[str] = None


class Flashcard(ResultModel):
    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)
    type: Literal[FLASHCARD_TYPES]


class FlashcardSet(ResultModel):
    flashcards: List[Flashcard]


class QuizQuestion(ResultModel):
    question_text: str = Field(min_length=1)
    options: List[str] = Field(min_length=QUIZ_OPTIONS, max_length=QUIZ_OPTIONS)
    correct_answer_index: int = Field(ge=0, le=QUIZ_OPTIONS - 1)
    explanation: str
    difficulty: Literal[QUIZ_DIFFICULTIES]


class Quiz(ResultModel):
    questions: List[QuizQuestion] = Field(min_length=QUIZ_LENGTH, max_length=QUIZ_LENGTH)


class StudySession(ResultModel):
    subject: str
    priority: Literal[PRIORITIES]
    estimated_time: str


class StudyPlan(ResultModel):
    daily_sessions: List[StudySession]
    weekly_timetable: str


class ExamReadiness(ResultModel):
    readiness_score: float = Field(ge=0, le=100)
    coaching_tip: str = Field(min_length=1)


class ChallengeQuestion(ResultModel):
    question: str = Field(min_length=1)


class ChallengeEvaluation(ResultModel):
    is_correct: bool
    feedback: str


class MotivationNudge(ResultModel):
    message: str = Field(min_length=1)
