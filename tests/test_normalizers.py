import pytest

from studymate.errors import InvalidModelJSONError
from studymate.services.normalizers import (
    DEFAULT_COACHING_TIP,
    DEFAULT_FLASHCARD_ANSWER,
    DEFAULT_FLASHCARD_QUESTION,
    DEFAULT_WEEKLY_TIMETABLE,
    ESSAY_DEFAULTS,
    normalize_essay_feedback,
    normalize_exam_readiness,
    normalize_flashcards,
    normalize_quiz,
    normalize_study_plan,
    parse_reply,
    sanitize_reply,
)


def test_sanitize_strips_json_fence():
    body = '{"question": "What is ATP?"}'
    assert sanitize_reply("```json\n" + body + "\n```") == body


def test_sanitize_matches_manual_strip():
    raw = "  ```JSON\n{\n  \"a\": 1\n}\n```  \n"
    assert sanitize_reply(raw) == "{\n  \"a\": 1\n}"


def test_sanitize_plain_text_is_trimmed():
    assert sanitize_reply('  {"a": 1}\n') == '{"a": 1}'


@pytest.mark.parametrize("raw", [None, "", "``````", "   "])
def test_sanitize_empty_reply_uses_default(raw):
    assert sanitize_reply(raw, empty='{"questions": []}') == '{"questions": []}'


def test_parse_reply_rejects_truncated_json():
    with pytest.raises(InvalidModelJSONError) as exc:
        parse_reply('{"questions": [{"questionText": "Wh', "quiz")
    assert "quiz" in str(exc.value)


def test_parse_reply_rejects_non_object():
    with pytest.raises(InvalidModelJSONError):
        parse_reply('["a", "b"]', "flashcards")


def test_flashcard_unknown_type_becomes_qa():
    out = normalize_flashcards({"flashcards": [
        {"question": "Q1", "answer": "A1", "type": "Trivia"},
        {"question": "Q2", "answer": "A2", "type": None},
        {"question": "Q3", "answer": "A3", "type": "Mnemonic"},
    ]})
    assert [c["type"] for c in out["flashcards"]] == ["Q/A", "Q/A", "Mnemonic"]


def test_flashcard_blank_fields_get_defaults():
    out = normalize_flashcards({"flashcards": [{"question": "   ", "answer": 42}, "junk"]})
    assert out["flashcards"] == [{
        "question": DEFAULT_FLASHCARD_QUESTION,
        "answer": DEFAULT_FLASHCARD_ANSWER,
        "type": "Q/A",
    }]


def test_flashcards_missing_list_becomes_empty():
    assert normalize_flashcards({"cards": []})["flashcards"] == []


def test_study_plan_missing_priority_is_medium():
    out = normalize_study_plan({"dailySessions": [{"subject": "Biology", "estimatedTime": "2 hours"}]})
    assert out["dailySessions"][0]["priority"] == "medium"


def test_study_plan_defaults_and_case():
    out = normalize_study_plan({"dailySessions": [{"priority": "HIGH"}, {"priority": "urgent"}]})
    first, second = out["dailySessions"]
    assert first == {"subject": "General Study", "priority": "high", "estimatedTime": "1 hour"}
    assert second["priority"] == "medium"
    assert out["weeklyTimetable"] == DEFAULT_WEEKLY_TIMETABLE


def test_study_plan_structured_timetable_becomes_text():
    out = normalize_study_plan({"dailySessions": [], "weeklyTimetable": {"Monday": "Math"}})
    assert "Monday" in out["weeklyTimetable"]


@pytest.mark.parametrize("raw, expected", [
    (150, 100),
    (-20, 0),
    ("88", 88),
    ("high", 75),
    (None, 75),
    (True, 75),
    (float("nan"), 75),
])
def test_readiness_score_is_clamped(raw, expected):
    out = normalize_exam_readiness({"readinessScore": raw})
    assert out["readinessScore"] == expected
    assert 0 <= out["readinessScore"] <= 100


def test_readiness_missing_tip_gets_default():
    assert normalize_exam_readiness({})["coachingTip"] == DEFAULT_COACHING_TIP


def test_essay_feedback_fills_missing_fields():
    out = normalize_essay_feedback({"grammarScore": "91", "toneAnalysis": "Formal."})
    assert out["grammarScore"] == 91
    assert out["readabilityScore"] == 70
    assert out["toneAnalysis"] == "Formal."
    assert out["claritySuggestions"] == ESSAY_DEFAULTS["claritySuggestions"]
    assert out["correctedRewrite"] == ESSAY_DEFAULTS["correctedRewrite"]


def test_quiz_difficulty_is_case_folded():
    out = normalize_quiz({"questions": [
        {"difficulty": "easy"},
        {"difficulty": " HARD "},
        {"difficulty": "Impossible"},
        {},
    ]})
    assert [q["difficulty"] for q in out["questions"]] == ["Easy", "Hard", "Medium", "Medium"]


def test_quiz_structure_is_not_repaired():
    out = normalize_quiz({"questions": ["not a question", {"difficulty": "Easy", "options": ["a"]}]})
    assert out["questions"][0] == "not a question"
    assert out["questions"][1]["options"] == ["a"]
    assert normalize_quiz({"questions": None}) == {"questions": None}
