"""
Output repair for model replies.

``sanitize_reply`` and ``parse_reply`` turn raw chat-completion text into a dict.
The ``normalize_*`` functions fill in scalar fields the model omitted or got
wrong with fixed defaults. Structural problems (wrong question counts, missing
options) are left alone so the schema check rejects them.
"""

import json
import logging
import math
import re

from studymate.errors import InvalidModelJSONError
from studymate.services.schemas import FLASHCARD_TYPES, PRIORITIES, QUIZ_DIFFICULTIES

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)

DEFAULT_FLASHCARD_QUESTION = "What is the key idea?"
DEFAULT_FLASHCARD_ANSWER = "The text explains the main concept."
DEFAULT_FLASHCARD_TYPE = "Q/A"

DEFAULT_SESSION_SUBJECT = "General Study"
DEFAULT_SESSION_PRIORITY = "medium"
DEFAULT_SESSION_TIME = "1 hour"
DEFAULT_WEEKLY_TIMETABLE = "No weekly timetable was generated."

DEFAULT_QUIZ_DIFFICULTY = "Medium"

DEFAULT_READINESS_SCORE = 75
DEFAULT_COACHING_TIP = "Keep up the consistent effort. You're on the right track!"

ESSAY_DEFAULTS = {
    "claritySuggestions": "Try breaking long sentences and clarifying ambiguous ideas.",
    "structuralSuggestions": "Organize paragraphs with clear topic sentences and logical flow.",
    "toneAnalysis": "The tone is mostly clear and informative, but could be more engaging.",
    "correctedRewrite": "A corrected version of the essay could not be generated.",
}
DEFAULT_GRAMMAR_SCORE = 80
DEFAULT_READABILITY_SCORE = 70


def sanitize_reply(text, empty="{}"):
    """Strip Markdown code fences and surrounding whitespace from a model reply."""
    if not text:
        return empty
    cleaned = _FENCE_RE.sub("", text).strip()
    return cleaned or empty


def parse_reply(text, feature):
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        logger.error("JSON parse error in %s: %s", feature, text)
        raise InvalidModelJSONError(feature, text)
    if not isinstance(parsed, dict):
        logger.error("Non-object JSON in %s: %s", feature, text)
        raise InvalidModelJSONError(feature, text)
    return parsed


def _text(value, default):
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _score(value, default):
    if isinstance(value, bool):
        return default
    try:
        score = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(score):
        return default
    return max(0, min(100, score))


def normalize_flashcards(parsed):
    cards = parsed.get("flashcards")
    if not isinstance(cards, list):
        cards = []
    out = []
    for fc in cards:
        if not isinstance(fc, dict):
            continue
        card_type = fc.get("type")
        out.append({
            "question": _text(fc.get("question"), DEFAULT_FLASHCARD_QUESTION),
            "answer": _text(fc.get("answer"), DEFAULT_FLASHCARD_ANSWER),
            "type": card_type if card_type in FLASHCARD_TYPES else DEFAULT_FLASHCARD_TYPE,
        })
    return {**parsed, "flashcards": out}


def normalize_study_plan(parsed):
    sessions = parsed.get("dailySessions")
    if not isinstance(sessions, list):
        sessions = []
    out = []
    for s in sessions:
        if not isinstance(s, dict):
            continue
        priority = s.get("priority")
        priority = priority.strip().lower() if isinstance(priority, str) else None
        out.append({
            "subject": _text(s.get("subject"), DEFAULT_SESSION_SUBJECT),
            "priority": priority if priority in PRIORITIES else DEFAULT_SESSION_PRIORITY,
            "estimatedTime": _text(s.get("estimatedTime"), DEFAULT_SESSION_TIME),
        })
    timetable = parsed.get("weeklyTimetable")
    if isinstance(timetable, (dict, list)):
        # some models return the week as a structure instead of prose
        timetable = json.dumps(timetable, ensure_ascii=False, indent=2)
    return {
        **parsed,
        "dailySessions": out,
        "weeklyTimetable": _text(timetable, DEFAULT_WEEKLY_TIMETABLE),
    }


def normalize_quiz(parsed):
    """Fix each question's difficulty label. Question and option counts are left for the schema."""
    questions = parsed.get("questions")
    if not isinstance(questions, list):
        return parsed
    out = []
    for q in questions:
        if isinstance(q, dict):
            label = q.get("difficulty")
            label = label.strip().capitalize() if isinstance(label, str) else None
            q = {**q, "difficulty": label if label in QUIZ_DIFFICULTIES else DEFAULT_QUIZ_DIFFICULTY}
        out.append(q)
    return {**parsed, "questions": out}


def normalize_exam_readiness(parsed):
    return {
        **parsed,
        "readinessScore": _score(parsed.get("readinessScore"), DEFAULT_READINESS_SCORE),
        "coachingTip": _text(parsed.get("coachingTip"), DEFAULT_COACHING_TIP),
    }


def normalize_essay_feedback(parsed):
    out = dict(parsed)
    out["grammarScore"] = _score(parsed.get("grammarScore"), DEFAULT_GRAMMAR_SCORE)
    out["readabilityScore"] = _score(parsed.get("readabilityScore"), DEFAULT_READABILITY_SCORE)
    for key, default in ESSAY_DEFAULTS.items():
        out[key] = _text(parsed.get(key), default)
    return out


def passthrough(parsed):
    return parsed
